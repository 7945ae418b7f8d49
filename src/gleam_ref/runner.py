from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

from .interpreter import Interpreter, new_interpreter
from .ports import InputPort
from .printer import write_string
from .types import VOID, GleamError, QuitSignal

USAGE = """usage: gleam [-v] [FILE | - | -e EXPR]

  FILE      load and evaluate every form of FILE
  -         load forms from standard input
  -e EXPR   evaluate EXPR and print the value of the last form
  -v        debug logging on stderr

With no arguments on a terminal, start the interactive REPL."""

def run(src: str, interpreter: Optional[Interpreter]=None) -> str:
    """Evaluate every form of src; the written form of the last value ('' when it has none)."""
    interp = interpreter or new_interpreter()
    value = interp.eval_string(src)
    return "" if value is VOID else write_string(value)

def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

def _load(interp: Interpreter, arg: str) -> None:
    if arg == "-":
        interp.load(InputPort.stdin())
        return

    path = Path(arg)
    if not path.exists():
        raise SystemExit(f"gleam: no such file: {arg}")
    interp.load_file(path)

def main(argv: Optional[List[str]]=None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)
    verbose = False
    expr: Optional[str] = None
    arg: Optional[str] = None
    it = iter(args)

    for token in it:
        if token in ("-v", "--verbose"):
            verbose = True
            continue

        if token in ("-h", "--help"):
            print(USAGE)
            return

        if token == "-e":
            try:
                expr = next(it)
            except StopIteration:
                raise SystemExit("-e flag requires an expression") from None
            continue

        if arg is None and expr is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    _configure_logging(verbose)

    if expr is None and arg is None and sys.stdin.isatty():
        from .repl import repl
        raise SystemExit(repl())

    interp = new_interpreter()
    try:
        if expr is not None:
            text = run(expr, interp)
            interp.ctx.output_port.fresh_line()
            if text:
                print(text)
        else:
            _load(interp, arg or "-")
        interp.ctx.output_port.flush()
    except QuitSignal as exc:
        interp.ctx.output_port.flush()
        raise SystemExit(exc.code) from None
    except GleamError as exc:
        interp.ctx.output_port.fresh_line()
        interp.ctx.output_port.flush()
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from None

if __name__ == "__main__":
    main()
