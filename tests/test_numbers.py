from __future__ import annotations

import pytest

from tests.support.harness import DivideByZeroError, WrongTypeError, run_runtime_case

SCENARIOS = [
    # arithmetic
    pytest.param("(+)", ("number", 0), None, id="add-identity"),
    pytest.param("(+ 1 2 3)", ("number", 6), None, id="add"),
    pytest.param("(*)", ("number", 1), None, id="mul-identity"),
    pytest.param("(- 5)", ("number", -5), None, id="negate"),
    pytest.param("(- 10 1 2)", ("number", 7), None, id="sub-left-assoc"),
    pytest.param("(/ 6 3)", ("write", "2"), None, id="div-exact-when-divisible"),
    pytest.param("(/ 1 2)", ("write", "0.5"), None, id="div-inexact"),
    pytest.param("(/ 2)", ("write", "0.5"), None, id="reciprocal"),
    pytest.param("(+ 1 2.5)", ("write", "3.5"), None, id="mixed-contagion"),
    pytest.param("(* 99999999999 99999999999)", ("write", "9999999999800000000001"), None, id="bignum"),
    pytest.param("(expt 2 100)", ("write", "1267650600228229401496703205376"), None, id="expt-bignum"),
    pytest.param("(expt 2.0 3)", ("write", "8.0"), None, id="expt-inexact"),
    pytest.param("(expt 2 -1)", ("write", "0.5"), None, id="expt-negative"),
    pytest.param("(quotient -7 2)", ("number", -3), None, id="quotient-truncates"),
    pytest.param("(remainder -7 2)", ("number", -1), None, id="remainder-sign-of-dividend"),
    pytest.param("(modulo -7 2)", ("number", 1), None, id="modulo-sign-of-divisor"),
    pytest.param("(modulo 7 -2)", ("number", -1), None, id="modulo-negative-divisor"),
    pytest.param("(floor-quotient -7 2)", ("number", -4), None, id="floor-quotient"),
    pytest.param("(quotient 7.0 2)", ("write", "3.0"), None, id="quotient-inexact"),
    pytest.param("(abs -5)", ("number", 5), None, id="abs"),
    pytest.param("(max 1 2.0)", ("write", "2.0"), None, id="max-inexact-contagion"),
    pytest.param("(min 3 1 2)", ("number", 1), None, id="min"),
    pytest.param("(list (gcd 12 18) (lcm 4 6) (gcd) (lcm))", ("write", "(6 12 0 1)"), None, id="gcd-lcm"),
    pytest.param("(list (1+ 5) (-1+ 5) (1- 5) (square 5))", ("write", "(6 4 4 25)"), None, id="increments"),
    # comparison
    pytest.param("(= 1 1.0)", ("bool", True), None, id="num-eq-mixed"),
    pytest.param("(< 1 2 3)", ("bool", True), None, id="lt-chain"),
    pytest.param("(< 1 3 2)", ("bool", False), None, id="lt-chain-false"),
    pytest.param("(>= 3 3 1)", ("bool", True), None, id="ge-chain"),
    pytest.param("(< 1 'a)", None, WrongTypeError, id="compare-wrong-type"),
    # predicates
    pytest.param(
        "(list (integer? 2.0) (integer? 2.5) (exact? 1) (exact? 1.0) (inexact? 1.0) (exact-integer? 5) (number? 'x))",
        ("write", "(#t #f #t #f #t #t #f)"),
        None,
        id="numeric-predicates",
    ),
    pytest.param(
        "(list (zero? 0.0) (positive? -1) (negative? -1) (odd? 7) (even? 0))",
        ("write", "(#t #f #t #t #t)"),
        None,
        id="sign-and-parity",
    ),
    pytest.param("(odd? 1.5)", None, WrongTypeError, id="odd-needs-integer"),
    # rounding and conversion
    pytest.param(
        "(list (round 2.5) (round 3.5) (round 7) (floor -3.5) (ceiling 3.2) (truncate -3.7))",
        ("write", "(2.0 4.0 7 -4.0 4.0 -3.0)"),
        None,
        id="rounding",
    ),
    pytest.param("(list (exact->inexact 1) (exact 3.0) (inexact 2))", ("write", "(1.0 3 2.0)"), None, id="exactness"),
    pytest.param("(exact 3.5)", None, WrongTypeError, id="exact-of-fraction"),
    pytest.param(
        "(list (exact->inexact (expt 10 400)) (exact->inexact (- (expt 10 400))) (max 1.0 (expt 10 400)))",
        ("write", "(+inf.0 -inf.0 +inf.0)"),
        None,
        id="inexact-of-huge-integer-saturates",
    ),
    pytest.param("(+ 0.5 (expt 10 400))", None, WrongTypeError, id="inexact-sum-out-of-range"),
    pytest.param("(/ (expt 10 400) 3)", None, WrongTypeError, id="inexact-quotient-out-of-range"),
    pytest.param(
        "(guard (e ((error-object? e) (condition-kind e))) (* 1.5 (expt 10 400)))",
        ("symbol", "wrong-type"),
        None,
        id="float-overflow-is-a-condition",
    ),
    pytest.param(
        "(list (number->string 255 16) (number->string -10 2) (number->string 3.5) (number->string 42))",
        ("write", '("ff" "-1010" "3.5" "42")'),
        None,
        id="number-to-string",
    ),
    pytest.param(
        "(list (string->number \"42\") (string->number \"ff\" 16) (string->number \"#xff\") (string->number \"1e3\") (string->number \"abc\"))",
        ("write", "(42 255 255 1000.0 #f)"),
        None,
        id="string-to-number",
    ),
    # roots and transcendental
    pytest.param("(sqrt 16)", ("write", "4"), None, id="sqrt-exact"),
    pytest.param("(sqrt 2)", ("number", 1.4142135623730951), None, id="sqrt-inexact"),
    pytest.param("(sqrt -4)", None, WrongTypeError, id="sqrt-negative"),
    pytest.param("(call-with-values (lambda () (exact-integer-sqrt 17)) list)", ("write", "(4 1)"), None, id="exact-integer-sqrt"),
    pytest.param("(exact-nonnegative-integer-sqrt 17)", ("number", 4), None, id="isqrt"),
    pytest.param("(exp 0)", ("number", 1.0), None, id="exp"),
    pytest.param("(log 8 2)", ("number", 3.0), None, id="log-base"),
    pytest.param("(atan 1 1)", ("number", 0.7853981633974483), None, id="atan2"),
    pytest.param("(sin 0)", ("number", 0.0), None, id="sin"),
    # errors
    pytest.param("(+ 1 \"a\")", None, WrongTypeError, id="add-wrong-type"),
    pytest.param("(/ 1 0)", None, DivideByZeroError, id="divide-by-zero"),
    pytest.param("(modulo 1 0)", None, DivideByZeroError, id="modulo-by-zero"),
    pytest.param("(expt 0 -1)", None, DivideByZeroError, id="expt-zero-negative"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_numbers(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
