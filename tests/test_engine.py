from __future__ import annotations

import io

import pytest

from gleam_ref.engine import ScriptEngine, ScriptError
from tests.support.harness import UnboundVariableError, WrongTypeError


@pytest.fixture
def engine(session) -> ScriptEngine:
    return ScriptEngine(session.interp)


def test_eval_returns_python_values(engine: ScriptEngine) -> None:
    assert engine.eval("(+ 1 2)") == 3
    assert engine.eval('"text"') == "text"
    assert engine.eval("'(1 \"a\" b #t)") == [1, "a", "b", True]
    assert engine.eval("(if #f #f)") is None
    assert engine.eval("") is None


def test_eval_runs_every_form(engine: ScriptEngine) -> None:
    assert engine.eval("(define x 5) (define y 6) (* x y)") == 30
    assert engine.bindings["x"] == 5


def test_eval_reads_streams(engine: ScriptEngine) -> None:
    assert engine.eval(io.StringIO("(define (sq n) (* n n))\n(sq 9)\n")) == 81


def test_put_and_get(engine: ScriptEngine) -> None:
    engine.put("n", 41)
    engine.put("items", [1, 2, 3])
    assert engine.eval("(+ n 1)") == 42
    assert engine.eval("(length items)") == 3
    assert engine.get("n") == 41
    assert engine.get("missing") is None
    assert engine.get("missing", "dflt") == "dflt"


def test_invoke_function(engine: ScriptEngine) -> None:
    engine.eval("(define (add a b) (+ a b))")
    assert engine.invoke_function("add", 2, 3) == 5
    assert engine.invoke_function("list", "a", 1) == ["a", 1]


def test_invoke_unknown_function(engine: ScriptEngine) -> None:
    with pytest.raises(ScriptError) as exc_info:
        engine.invoke_function("no-such-procedure")
    assert exc_info.value.kind == "unbound-variable"
    assert isinstance(exc_info.value.condition, UnboundVariableError)


def test_script_error_wraps_condition(engine: ScriptEngine) -> None:
    with pytest.raises(ScriptError) as exc_info:
        engine.eval("(car 1)")
    assert exc_info.value.kind == "wrong-type"
    assert isinstance(exc_info.value.condition, WrongTypeError)
    assert "car" in str(exc_info.value)


def test_separate_bindings(engine: ScriptEngine) -> None:
    scope = engine.create_bindings()
    scope["y"] = 1
    assert engine.eval("(define z (+ y 1)) z", scope) == 2
    assert scope["z"] == 2
    assert "z" not in engine.bindings
    with pytest.raises(ScriptError):
        engine.eval("y")


def test_attributes(engine: ScriptEngine) -> None:
    engine.set_attribute(":noisy", True)
    assert engine.get_attribute(":noisy") is True
    assert engine.context.noisy is True
    with pytest.raises(KeyError):
        engine.get_attribute("unknown")
    with pytest.raises(KeyError):
        engine.set_attribute("unknown", 1)


def test_set_ports(engine: ScriptEngine) -> None:
    writer = io.StringIO()
    engine.set_ports(reader=io.StringIO("(1 2)"), writer=writer)
    engine.eval('(display "hi")')
    assert writer.getvalue() == "hi"
    assert engine.eval("(read)") == [1, 2]


def test_host_callback_reenters_interpreter(engine: ScriptEngine) -> None:
    class Callback:
        def run(self):
            return engine.eval("(* 2 (+ 1 1))")

    engine.put("cb", Callback())
    assert engine.eval("(+ 1 (call 'run cb))") == 5


def test_python_callable_through_call(engine: ScriptEngine) -> None:
    engine.put("double", lambda a: a * 2)
    assert engine.eval("(call '__call__ double 21)") == 42
