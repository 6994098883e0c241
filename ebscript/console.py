"""Desktop console: a script editor plus an interactive input line.

:class:`ConsoleSession` holds the session state and has no GUI dependency. The
tkinter window is only defined when tkinter is importable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import AppSettings, ConsoleSettings
from .diagnostics import Diagnostic, Severity
from .engine import ScriptEngine, summarize_errors
from .environment import Environment
from .errors import RuntimeFault
from .tokens import KEYWORDS, Token, TokenType

# Tkinter is only required for the desktop window; servers often don't ship it.
try:
	import tkinter as tk
	from tkinter import filedialog, ttk
except Exception:  # pragma: no cover
	tk = None  # type: ignore[assignment]
	filedialog = None  # type: ignore[assignment]
	ttk = None  # type: ignore[assignment]


LITERAL_TYPES = frozenset({TokenType.NUMBER, TokenType.TEXT, TokenType.TRUE, TokenType.FALSE})

KEYWORD_TYPES = frozenset(KEYWORDS.values()) - LITERAL_TYPES


def token_category(token_type: TokenType) -> Optional[str]:
	"""Highlight tag for a token type, or None for plain text."""
	if token_type in LITERAL_TYPES:
		return "literal"
	if token_type in KEYWORD_TYPES or token_type.name.startswith("IS_"):
		return "keyword"
	if token_type == TokenType.BUILTIN_FUNCTION:
		return "builtin"
	if token_type == TokenType.IDENTIFIER:
		return "identifier"
	if token_type == TokenType.ILLEGAL:
		return "error"
	return None


@dataclass
class ConsoleResult:
	output: str
	diagnostics: List[Diagnostic] = field(default_factory=list)
	runtime_error: Optional[RuntimeFault] = None

	@property
	def success(self) -> bool:
		return self.runtime_error is None and not any(d.severity == Severity.ERROR for d in self.diagnostics)

	@property
	def summary(self) -> str:
		if self.runtime_error is not None:
			return f"Runtime error: {self.runtime_error}"
		return summarize_errors(sum(1 for d in self.diagnostics if d.severity == Severity.ERROR))


class ConsoleSession:
	"""Runs submitted chunks against one long-lived environment."""

	def __init__(self, engine: Optional[ScriptEngine] = None) -> None:
		self.engine = engine or ScriptEngine()
		self.environment = Environment()
		self.history: List[str] = []

	def submit(self, text: str) -> ConsoleResult:
		self.history.append(text)
		result = self.engine.run(text, environment=self.environment)
		return ConsoleResult(result.output, list(result.diagnostics), result.runtime_error)

	def reset(self) -> None:
		self.environment = Environment()

	def variables(self) -> Dict[str, object]:
		return self.environment.snapshot()


# ---------------------------------------------------------------------------
# GUI components


if tk is not None:
	class ScriptEditor(tk.Frame):
		def __init__(self, master: "tk.Widget", settings: ConsoleSettings) -> None:
			super().__init__(master)
			self.settings = settings
			font = (settings.font_family, settings.font_size)
			self.text = tk.Text(
				self,
				wrap="none",
				font=font,
				undo=True,
				background=settings.background,
				foreground=settings.foreground,
				insertbackground=settings.foreground,
				selectbackground="#264f78",
			)
			self.line_numbers = tk.Text(self, width=4, state="disabled", background=settings.background, foreground="#8f8f8f", font=font)
			self.v_scroll = ttk.Scrollbar(self, orient="vertical", command=self._on_scroll)
			self.text.configure(yscrollcommand=self._on_text_scroll)
			self.line_numbers.pack(side="left", fill="y")
			self.text.pack(side="left", fill="both", expand=True)
			self.v_scroll.pack(side="right", fill="y")
			self.text.bind("<KeyRelease>", self._update_line_numbers)
			self._setup_tags()

		def _setup_tags(self) -> None:
			s = self.settings
			self.text.tag_configure("keyword", foreground=s.keyword_color)
			self.text.tag_configure("literal", foreground=s.literal_color)
			self.text.tag_configure("identifier", foreground=s.identifier_color)
			self.text.tag_configure("builtin", foreground=s.identifier_color, underline=0)
			self.text.tag_configure("error", foreground=s.error_color)
			self.text.tag_configure("diag_error", underline=1, foreground=s.error_color)

		def _on_text_scroll(self, *args) -> None:
			self.v_scroll.set(*args)
			self.line_numbers.yview_moveto(args[0])

		def _on_scroll(self, *args) -> None:
			self.text.yview(*args)
			self.line_numbers.yview(*args)

		def _update_line_numbers(self, event: Optional["tk.Event"] = None) -> None:
			self.line_numbers.configure(state="normal")
			self.line_numbers.delete("1.0", tk.END)
			line_count = int(self.text.index("end-1c").split(".")[0])
			self.line_numbers.insert("1.0", "\n".join(str(i).rjust(3) for i in range(1, line_count + 1)))
			self.line_numbers.configure(state="disabled")

		def get_text(self) -> str:
			return self.text.get("1.0", "end-1c")

		def set_text(self, content: str) -> None:
			self.text.delete("1.0", tk.END)
			self.text.insert("1.0", content)
			self._update_line_numbers()

		def apply_highlights(self, tokens: List[Token]) -> None:
			for tag in ("keyword", "literal", "identifier", "builtin", "error"):
				self.text.tag_remove(tag, "1.0", tk.END)
			for token in tokens:
				tag = token_category(token.type)
				if tag is None:
					continue
				start = f"1.0+{token.start_offset}c"
				end = f"1.0+{token.end_offset}c"
				self.text.tag_add(tag, start, end)

		def mark_diagnostics(self, diagnostics: List[Diagnostic]) -> None:
			self.text.tag_remove("diag_error", "1.0", tk.END)
			for diag in diagnostics:
				if diag.line is None or diag.severity != Severity.ERROR:
					continue
				start = f"{diag.line}.{max(0, (diag.column or 1) - 1)}"
				self.text.tag_add("diag_error", start, f"{start}+{max(1, diag.length)}c")


	class ScriptConsoleApp(tk.Tk):
		def __init__(self, settings: Optional[AppSettings] = None) -> None:
			super().__init__()
			self.settings = settings or AppSettings()
			self.title("EBS2 Script Console")
			self.geometry("1100x750")
			self.session = ConsoleSession(ScriptEngine(self.settings.engine))
			self._highlight_after_id: Optional[str] = None
			self._build_ui()

		def _build_ui(self) -> None:
			toolbar = ttk.Frame(self)
			toolbar.pack(side="top", fill="x")
			ttk.Button(toolbar, text="Run (Ctrl+Enter)", command=self.run_editor).pack(side="left", padx=4, pady=4)
			ttk.Button(toolbar, text="Reset session", command=self.reset_session).pack(side="left", padx=4)
			ttk.Button(toolbar, text="Open...", command=self._open_file).pack(side="left", padx=4)
			ttk.Button(toolbar, text="Clear output", command=self._clear_output).pack(side="left", padx=4)

			panes = ttk.PanedWindow(self, orient="vertical")
			panes.pack(fill="both", expand=True)
			self.editor = ScriptEditor(panes, self.settings.console)
			panes.add(self.editor, weight=3)

			bottom = ttk.Notebook(panes)
			c = self.settings.console
			self.output = tk.Text(bottom, height=10, state="disabled", background=c.background, foreground=c.foreground, font=(c.font_family, c.font_size))
			bottom.add(self.output, text="Output")
			self.diagnostics = ttk.Treeview(bottom, columns=("severity", "origin", "location", "message"), show="headings")
			for col, width in (("severity", 80), ("origin", 80), ("location", 80), ("message", 600)):
				self.diagnostics.heading(col, text=col.title())
				self.diagnostics.column(col, width=width, anchor="w")
			bottom.add(self.diagnostics, text="Diagnostics")
			panes.add(bottom, weight=2)

			entry_row = ttk.Frame(self)
			entry_row.pack(side="bottom", fill="x")
			ttk.Label(entry_row, text=">").pack(side="left", padx=4)
			self.input_line = ttk.Entry(entry_row)
			self.input_line.pack(side="left", fill="x", expand=True, padx=4, pady=4)
			self.input_line.bind("<Return>", lambda _e: self.submit_line())

			self.status = ttk.Label(self, text="Ready", anchor="w")
			self.status.pack(side="bottom", fill="x")

			self.bind("<Control-Return>", lambda _e: (self.run_editor(), "break")[1])
			self.editor.text.bind("<KeyRelease>", self._schedule_highlight, add="+")

		def run_editor(self) -> None:
			self._show(self.session.submit(self.editor.get_text()), echo=None)
			self._highlight()

		def submit_line(self) -> None:
			line = self.input_line.get()
			if not line.strip():
				return
			self.input_line.delete(0, tk.END)
			self._show(self.session.submit(line), echo=line)

		def reset_session(self) -> None:
			self.session.reset()
			self._append_output("-- session reset --\n")
			self.status.configure(text="Session reset")

		def load_source(self, source: str) -> None:
			self.editor.set_text(source)
			self._highlight()

		def _show(self, result, echo: Optional[str]) -> None:
			if echo is not None:
				self._append_output(f"> {echo}\n")
			self._append_output(result.output)
			if result.runtime_error is not None:
				self._append_output(f"Runtime error: {result.runtime_error}\n")
			self.diagnostics.delete(*self.diagnostics.get_children())
			for diag in result.diagnostics:
				self.diagnostics.insert("", tk.END, values=(diag.severity.name, diag.origin, diag.location, diag.message))
			if echo is None:
				self.editor.mark_diagnostics(result.diagnostics)
			self.status.configure(text=result.summary)

		def _append_output(self, text: str) -> None:
			self.output.configure(state="normal")
			self.output.insert(tk.END, text)
			self.output.see(tk.END)
			self.output.configure(state="disabled")

		def _clear_output(self) -> None:
			self.output.configure(state="normal")
			self.output.delete("1.0", tk.END)
			self.output.configure(state="disabled")

		def _schedule_highlight(self, _event: "tk.Event") -> None:
			if self._highlight_after_id:
				self.after_cancel(self._highlight_after_id)
			# Debounce: re-highlight ~300ms after typing stops.
			self._highlight_after_id = self.after(300, self._highlight)

		def _highlight(self) -> None:
			self._highlight_after_id = None
			tokens, _errors = self.session.engine.tokenize(self.editor.get_text())
			self.editor.apply_highlights(tokens)

		def _open_file(self) -> None:
			path = filedialog.askopenfilename(title="Open script", filetypes=[("EBS scripts", "*.ebs *.ebs2"), ("All files", "*.*")])
			if not path:
				return
			with open(path, "r", encoding="utf-8") as f:
				self.load_source(f.read())


def launch(settings: Optional[AppSettings] = None, source: Optional[str] = None) -> None:
	if tk is None:
		raise RuntimeError("Tkinter is not available in this environment. Use 'ebs2 run' or the HTTP API.")
	app = ScriptConsoleApp(settings)  # type: ignore[call-arg]
	if source:
		app.load_source(source)
	app.mainloop()
