from __future__ import annotations

from fractions import Fraction

import pytest

from tests.support.harness import HostError, HostValue, WrongTypeError, run_runtime_case

SCENARIOS = [
    pytest.param("(call 'upper (new \"str\" \"abc\"))", ("string", "ABC"), None, id="call-method"),
    pytest.param("(call 'upper \"abc\")", ("string", "ABC"), None, id="call-on-scheme-string"),
    pytest.param("(host-object? (new \"fractions.Fraction\" 1 3))", ("bool", True), None, id="new-dotted-class"),
    pytest.param("(host-object? 5)", ("bool", False), None, id="host-object-predicate"),
    pytest.param(
        "(let ((l (new \"list\"))) (call 'append l 1) (call 'append l 2) (call '__len__ l))",
        ("number", 2),
        None,
        id="mutable-host-object",
    ),
    pytest.param("(call 'append (new \"list\") 1)", ("void", None), None, id="none-is-no-value"),
    pytest.param("(call \"split\" \"a b c\")", ("write", '("a" "b" "c")'), None, id="list-result-wrapped"),
    pytest.param("(call 'startswith \"gleam\" \"gl\")", ("bool", True), None, id="bool-result-wrapped"),
    pytest.param("(let ((x (new \"object\"))) (eqv? x x))", ("bool", True), None, id="host-eqv"),
    pytest.param("(new \"no.such.module.Thing\")", None, HostError, id="new-missing-module"),
    pytest.param("(new \"NoSuchBuiltin\")", None, HostError, id="new-missing-builtin"),
    pytest.param("(new \"int\" \"not a number\")", None, HostError, id="constructor-raises"),
    pytest.param("(call 'nope (new \"str\" \"x\"))", None, HostError, id="missing-method"),
    pytest.param("(call 'upper null)", None, HostError, id="null-target"),
    pytest.param("(new 5)", None, WrongTypeError, id="class-name-wrong-type"),
    pytest.param(
        "(guard (e (#t (condition-kind e))) (call 'nope 1))",
        ("symbol", "host-error"),
        None,
        id="host-error-kind",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_host(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_new_returns_host_value(session) -> None:
    value = session.run('(new "fractions.Fraction" 1 3)')
    assert isinstance(value, HostValue)
    assert value.value == Fraction(1, 3)


def test_class_of(session) -> None:
    value = session.run("(class-of 1)")
    assert isinstance(value, HostValue)
    assert value.value is int


def test_bound_python_object_is_callable_through_call(session) -> None:
    session.interp.bind("numbers", [3, 1, 2])
    assert session.run("(length numbers)") == 3
    session.interp.bind("counter", {"hits": 0})
    assert session.run("(call 'get counter \"hits\")") == 0
