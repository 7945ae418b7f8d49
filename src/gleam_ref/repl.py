"""Interactive REPL for Gleam, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .interpreter import Interpreter, new_interpreter
from .lexer import Lexer
from .ports import InputPort
from .printer import write_string
from .reader import Reader
from .repl_highlight import GleamHighlighter
from .token_types import TT
from .types import VOID, Entity, GleamError, QuitSignal, ReaderError, Values
from .utils import debug_py_trace_enabled

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/trace": ("Toggle evaluation tracing", "[on|off]"),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Start a fresh session environment", ""),
    "/help": ("List commands", ""),
}

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")

_OPEN = {TT.LPAR.name, TT.VECTOR_OPEN.name}
_PREFIX = {TT.QUOTE.name, TT.QUASIQUOTE.name, TT.UNQUOTE.name, TT.UNQUOTE_SPLICING.name, TT.DATUM_COMMENT.name}

def is_complete(text: str) -> bool:
    """True when text holds only whole data: brackets balance and no string or comment is open."""
    depth = 0
    pending_prefix = False
    lexer = Lexer(InputPort.from_string(text))

    try:
        for tok in lexer:
            if tok.type == TT.EOF.name:
                break
            if tok.type in _OPEN:
                depth += 1
            elif tok.type == TT.RPAR.name:
                depth -= 1
            pending_prefix = tok.type in _PREFIX
    except ReaderError as exc:
        # Unterminated strings, |symbols| and block comments wait for more lines.
        return "unterminated" not in exc.message and "end of input" not in exc.message

    return depth <= 0 and not pending_prefix

class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )

def _toggle(arg: str, current: bool) -> Optional[bool]:
    lowered = arg.lower()
    if lowered in _ON:
        return True
    if lowered in _OFF:
        return False
    if lowered == "":
        return not current
    return None

def _handle_slash(line: str, interp_box: List[Interpreter]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/trace":
        interp = interp_box[0]
        state = _toggle(arg, interp.ctx.trace_enabled)
        if state is None:
            print("Usage: /trace [on|off]", file=sys.stderr)
            return True
        if state:
            interp.trace_on()
        else:
            interp.trace_off()
        print(f"Trace: {'on' if state else 'off'}")
        return True

    if cmd == "/py-traceback":
        state = _toggle(arg, debug_py_trace_enabled())
        if state is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True
        if state:
            os.environ["GLEAM_DEBUG_PY_TRACE"] = "1"
        else:
            os.environ.pop("GLEAM_DEBUG_PY_TRACE", None)
        print(f"Python traceback: {'on' if state else 'off'}")
        return True

    if cmd == "/reset":
        old = interp_box[0]
        interp_box[0] = new_interpreter()
        interp_box[0].ctx.trace_enabled = old.ctx.trace_enabled
        print("Environment reset.")
        return True

    if cmd == "/help":
        for name, (desc, hint) in _SLASH_CMDS.items():
            print(f"  {name} {hint}".ljust(26) + desc)
        print("  (help) lists documented procedures, (help name) describes one.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True

def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)

def _print_result(interp: Interpreter, value: Entity) -> None:
    if value is VOID:
        return
    out = interp.ctx.output_port
    out.fresh_line()
    if isinstance(value, Values):
        for item in value.items:
            out.write(write_string(item) + "\n")
    else:
        out.write(write_string(value) + "\n")
    out.flush()

def _report_error(interp: Interpreter, exc: GleamError) -> None:
    interp.ctx.output_port.fresh_line()
    interp.ctx.output_port.flush()
    print(f"Error: {exc}", file=sys.stderr)
    if debug_py_trace_enabled() and exc.__traceback__ is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def eval_input(interp: Interpreter, text: str) -> None:
    """Evaluate every datum of one REPL entry, printing each result."""
    for form in Reader(text, name="<repl>"):
        _print_result(interp, interp.execute(form))

def repl(interpreter: Optional[Interpreter]=None) -> int:
    """Interactive read-eval-print loop; returns the exit status."""
    interp_box: List[Interpreter] = [interpreter or new_interpreter()]

    history = InMemoryHistory()
    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if text.lstrip().startswith("/") or is_complete(text):
            buf.validate_and_handle()
            return

        buf.insert_text("\n  ")

    session: PromptSession[str] = PromptSession(
        history=history,
        lexer=GleamHighlighter(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("gleam repl: Ctrl-D or (exit) to leave, / for commands")

    while True:
        try:
            text = session.prompt("gleam> ")
        except EOFError:
            print()
            return 0
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if _handle_slash(text, interp_box):
            continue

        interp = interp_box[0]
        try:
            eval_input(interp, text)
        except QuitSignal as exc:
            interp.ctx.output_port.flush()
            return exc.code
        except GleamError as exc:
            interp.clear_pending_continuation()
            _report_error(interp, exc)
        except KeyboardInterrupt:
            interp.clear_pending_continuation()
            print(";Quit!", file=sys.stderr)
