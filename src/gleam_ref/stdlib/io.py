"""Ports, reading, writing and load."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..control import load_next
from ..ports import InputPort, OutputPort, StringOutputPort
from ..printer import display_string, write_string
from ..reader import Reader
from ..runtime import Environment, expect, register_primitive
from ..types import (
    EOF, FALSE, TRUE, VOID,
    Char, Entity, FileError, MString, make_boolean,
)
from .environments import session_environment

if TYPE_CHECKING:
    from ..evaluator import Machine

def _output(m: Machine, who: str, port: Entity) -> OutputPort:
    if port is None:
        return m.ctx.output_port
    expect(who, port, OutputPort, "an output port")
    return port  # type: ignore[return-value]

def _input(m: Machine, who: str, port: Entity) -> InputPort:
    if port is None:
        return m.ctx.input_port
    expect(who, port, InputPort, "an input port")
    return port  # type: ignore[return-value]

def _filename(who: str, name: Entity) -> str:
    expect(who, name, MString, "a string")
    return name.value  # type: ignore[union-attr]

# ---------- Output ----------

@register_primitive("display", min_args=1, max_args=2, control=True, doc="(display obj [port]): human-readable output.")
def std_display(m: Machine, obj: Entity, port: Entity=None) -> None:  # type: ignore[assignment]
    _output(m, "display", port).write(display_string(obj))
    m.ret(VOID)

@register_primitive("write", min_args=1, max_args=2, control=True, aliases=("write-shared", "write-simple"), doc="(write obj [port]): re-readable output.")
def std_write(m: Machine, obj: Entity, port: Entity=None) -> None:  # type: ignore[assignment]
    _output(m, "write", port).write(write_string(obj))
    m.ret(VOID)

@register_primitive("write-line", min_args=1, max_args=2, control=True)
def std_write_line(m: Machine, obj: Entity, port: Entity=None) -> None:  # type: ignore[assignment]
    out = _output(m, "write-line", port)
    out.write(write_string(obj))
    out.newline()
    m.ret(VOID)

@register_primitive("newline", max_args=1, control=True)
def std_newline(m: Machine, port: Entity=None) -> None:  # type: ignore[assignment]
    _output(m, "newline", port).newline()
    m.ret(VOID)

@register_primitive("fresh-line", max_args=1, control=True)
def std_fresh_line(m: Machine, port: Entity=None) -> None:  # type: ignore[assignment]
    _output(m, "fresh-line", port).fresh_line()
    m.ret(VOID)

@register_primitive("write-string", min_args=1, max_args=2, control=True)
def std_write_string(m: Machine, s: Entity, port: Entity=None) -> None:  # type: ignore[assignment]
    expect("write-string", s, MString, "a string")
    _output(m, "write-string", port).write(s.value)  # type: ignore[union-attr]
    m.ret(VOID)

@register_primitive("write-char", min_args=1, max_args=2, control=True)
def std_write_char(m: Machine, ch: Entity, port: Entity=None) -> None:  # type: ignore[assignment]
    expect("write-char", ch, Char, "a character")
    _output(m, "write-char", port).write(ch.value)  # type: ignore[union-attr]
    m.ret(VOID)

@register_primitive("flush-output", max_args=1, control=True, aliases=("flush",))
def std_flush_output(m: Machine, port: Entity=None) -> None:  # type: ignore[assignment]
    _output(m, "flush-output", port).flush()
    m.ret(VOID)

# ---------- Input ----------

@register_primitive("read", max_args=1, control=True, doc="(read [port]): next datum from the port, or the eof object.")
def std_read(m: Machine, port: Entity=None) -> None:  # type: ignore[assignment]
    m.ret(Reader(_input(m, "read", port)).read())

@register_primitive("read-char", max_args=1, control=True)
def std_read_char(m: Machine, port: Entity=None) -> None:  # type: ignore[assignment]
    ch = _input(m, "read-char", port).read_char()
    m.ret(Char(ch) if ch else EOF)

@register_primitive("peek-char", max_args=1, control=True)
def std_peek_char(m: Machine, port: Entity=None) -> None:  # type: ignore[assignment]
    ch = _input(m, "peek-char", port).peek_char()
    m.ret(Char(ch) if ch else EOF)

@register_primitive("read-line", max_args=1, control=True)
def std_read_line(m: Machine, port: Entity=None) -> None:  # type: ignore[assignment]
    line = _input(m, "read-line", port).read_line()
    m.ret(EOF if line is None else MString(line))

@register_primitive("char-ready?", max_args=1, control=True)
def std_char_ready(m: Machine, port: Entity=None) -> None:  # type: ignore[assignment]
    m.ret(make_boolean(_input(m, "char-ready?", port).char_ready()))

# ---------- Ports ----------

@register_primitive("current-input-port", arity=0, control=True)
def std_current_input_port(m: Machine) -> None:
    m.ret(m.ctx.input_port)

@register_primitive("current-output-port", arity=0, control=True)
def std_current_output_port(m: Machine) -> None:
    m.ret(m.ctx.output_port)

@register_primitive("current-error-port", arity=0, control=True, aliases=("notification-output-port",))
def std_current_error_port(m: Machine) -> None:
    m.ret(m.ctx.error_port)

@register_primitive("open-input-string", arity=1)
def std_open_input_string(s: Entity) -> InputPort:
    expect("open-input-string", s, MString, "a string")
    return InputPort.from_string(s.value)  # type: ignore[union-attr]

@register_primitive("open-output-string", arity=0)
def std_open_output_string() -> StringOutputPort:
    return StringOutputPort()

@register_primitive("get-output-string", arity=1)
def std_get_output_string(port: Entity) -> MString:
    expect("get-output-string", port, StringOutputPort, "a string output port")
    return MString(port.getvalue())  # type: ignore[union-attr]

@register_primitive("open-input-file", arity=1)
def std_open_input_file(name: Entity) -> InputPort:
    path = _filename("open-input-file", name)
    try:
        return InputPort(open(path, encoding="utf-8"), name=path)
    except OSError as exc:
        raise FileError(f"unable to open file {path!r}: {exc.strerror}", name) from exc

@register_primitive("open-output-file", min_args=1, max_args=2)
def std_open_output_file(name: Entity, append: Entity=FALSE) -> OutputPort:
    path = _filename("open-output-file", name)
    try:
        return OutputPort(open(path, "a" if append is TRUE else "w", encoding="utf-8"), name=path)
    except OSError as exc:
        raise FileError(f"unable to open file {path!r}: {exc.strerror}", name) from exc

@register_primitive("close-port", arity=1, aliases=("close-input-port", "close-output-port"))
def std_close_port(port: Entity) -> None:
    expect("close-port", port, (InputPort, OutputPort), "a port")
    port.close()  # type: ignore[union-attr]

# ---------- Loading ----------

@register_primitive("load", min_args=1, max_args=2, control=True, doc="(load filename [env]): evaluate every form of the file.")
def std_load(m: Machine, name: Entity, env: Entity=None) -> None:  # type: ignore[assignment]
    path = _filename("load", name)
    target = session_environment(m) if env is None else env
    expect("load", target, Environment, "an environment")
    try:
        port = InputPort(open(path, encoding="utf-8"), name=path)
    except OSError as exc:
        raise FileError(f"unable to open file {path!r}: {exc.strerror}", name) from exc

    load_next(m, Reader(port), target, path)  # type: ignore[arg-type]
