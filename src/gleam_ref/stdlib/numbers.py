"""Arithmetic over Python ints and floats (no rationals or complex numbers)."""

from __future__ import annotations

import math
from contextlib import contextmanager
from functools import reduce
from typing import Union

from ..lexer import parse_number
from ..printer import format_number
from ..runtime import expect_integer, expect_number, register_primitive
from ..types import FALSE, DivideByZeroError, Entity, MString, Values, WrongTypeError, is_number, make_boolean

Number = Union[int, float]

def _numbers(who: str, args) -> None:
    for arg in args:
        expect_number(who, arg)

def _inexact(x: Number) -> float:
    """float(x), saturating to a signed infinity for exact integers beyond float range."""
    try:
        return float(x)
    except OverflowError:
        return math.inf if x > 0 else -math.inf

@contextmanager
def _float_range(who: str, *args: Entity):
    try:
        yield
    except OverflowError:
        raise WrongTypeError(f"{who}: integer too large for an inexact result", *args) from None

# ---------- Arithmetic ----------

@register_primitive("+", doc="(+ z...): sum of the arguments.")
def std_add(*args: Entity) -> Number:
    _numbers("integer-add", args)
    with _float_range("integer-add", *args):
        return sum(args, 0)  # type: ignore[arg-type]

@register_primitive("*", doc="(* z...): product of the arguments.")
def std_mul(*args: Entity) -> Number:
    _numbers("integer-multiply", args)
    with _float_range("integer-multiply", *args):
        return reduce(lambda a, b: a * b, args, 1)  # type: ignore[operator]

@register_primitive("-", min_args=1, doc="(- z) negates; (- z1 z2...) subtracts from z1.")
def std_sub(first: Entity, *rest: Entity) -> Number:
    _numbers("integer-subtract", (first,) + rest)
    if not rest:
        return -first  # type: ignore[operator]
    with _float_range("integer-subtract", first, *rest):
        return reduce(lambda a, b: a - b, rest, first)  # type: ignore[operator]

def _divide(a: Number, b: Number) -> Number:
    if b == 0:
        raise DivideByZeroError("division by zero signalled by /.", a)
    if isinstance(a, int) and isinstance(b, int) and a % b == 0:
        return a // b
    with _float_range("/", a, b):
        return a / b

@register_primitive("/", min_args=1, doc="(/ z) reciprocal; (/ z1 z2...) divides z1. Exact when the result is an integer.")
def std_div(first: Entity, *rest: Entity) -> Number:
    _numbers("/", (first,) + rest)
    if not rest:
        return _divide(1, first)  # type: ignore[arg-type]
    return reduce(_divide, rest, first)  # type: ignore[arg-type]

def _integer_division(who: str, a: Entity, b: Entity) -> tuple[int, int, bool]:
    inexact = isinstance(a, float) or isinstance(b, float)
    x = expect_integer(who, a)
    y = expect_integer(who, b)
    if y == 0:
        raise DivideByZeroError(f"division by zero signalled by {who}.", a)
    return x, y, inexact

def _result(value: int, inexact: bool) -> Number:
    return _inexact(value) if inexact else value

@register_primitive("quotient", arity=2, aliases=("truncate-quotient",))
def std_quotient(a: Entity, b: Entity) -> Number:
    x, y, inexact = _integer_division("integer-quotient", a, b)
    q = abs(x) // abs(y)
    return _result(q if (x >= 0) == (y >= 0) else -q, inexact)

@register_primitive("remainder", arity=2, aliases=("truncate-remainder",))
def std_remainder(a: Entity, b: Entity) -> Number:
    x, y, inexact = _integer_division("integer-remainder", a, b)
    r = abs(x) % abs(y)
    return _result(r if x >= 0 else -r, inexact)

@register_primitive("modulo", arity=2, aliases=("floor-remainder",))
def std_modulo(a: Entity, b: Entity) -> Number:
    x, y, inexact = _integer_division("integer-modulo", a, b)
    return _result(x % y, inexact)

@register_primitive("floor-quotient", arity=2)
def std_floor_quotient(a: Entity, b: Entity) -> Number:
    x, y, inexact = _integer_division("floor-quotient", a, b)
    return _result(x // y, inexact)

@register_primitive("abs", arity=1, aliases=("magnitude",))
def std_abs(x: Entity) -> Number:
    expect_number("integer-abs", x)
    return abs(x)  # type: ignore[arg-type]

def _extremum(who: str, pick, first: Entity, rest) -> Number:
    args = (first,) + tuple(rest)
    _numbers(who, args)
    result = pick(args)
    if any(isinstance(a, float) for a in args):
        return _inexact(result)
    return result

@register_primitive("max", min_args=1)
def std_max(first: Entity, *rest: Entity) -> Number:
    return _extremum("max", max, first, rest)

@register_primitive("min", min_args=1)
def std_min(first: Entity, *rest: Entity) -> Number:
    return _extremum("min", min, first, rest)

@register_primitive("gcd")
def std_gcd(*args: Entity) -> int:
    return reduce(math.gcd, (expect_integer("gcd", a) for a in args), 0)

@register_primitive("lcm")
def std_lcm(*args: Entity) -> int:
    result = 1
    for a in args:
        n = abs(expect_integer("lcm", a))
        if n == 0:
            return 0
        result = result * n // math.gcd(result, n)
    return result

@register_primitive("1+", arity=1)
def std_increment(x: Entity) -> Number:
    expect_number("integer-add", x)
    return x + 1  # type: ignore[operator]

@register_primitive("-1+", arity=1, aliases=("1-",))
def std_decrement(x: Entity) -> Number:
    expect_number("integer-subtract", x)
    return x - 1  # type: ignore[operator]

@register_primitive("square", arity=1)
def std_square(x: Entity) -> Number:
    expect_number("square", x)
    return x * x  # type: ignore[operator]

@register_primitive("expt", arity=2)
def std_expt(base: Entity, power: Entity) -> Number:
    _numbers("expt", (base, power))
    if base == 0 and isinstance(power, (int, float)) and power < 0:
        raise DivideByZeroError("division by zero signalled by expt.", base)
    try:
        result = base ** power  # type: ignore[operator]
    except OverflowError:
        return math.inf
    if isinstance(result, complex):
        raise WrongTypeError("expt: result is not a real number", base, power)
    return result

# ---------- Comparison ----------

def _compare(who: str, op, args) -> Entity:
    _numbers(who, args)
    return make_boolean(all(op(a, b) for a, b in zip(args, args[1:])))

@register_primitive("=", min_args=1)
def std_num_eq(*args: Entity) -> Entity:
    return _compare("integer-equal?", lambda a, b: a == b, args)

@register_primitive("<", min_args=1)
def std_num_lt(*args: Entity) -> Entity:
    return _compare("integer-less?", lambda a, b: a < b, args)

@register_primitive(">", min_args=1)
def std_num_gt(*args: Entity) -> Entity:
    return _compare("integer-greater?", lambda a, b: a > b, args)

@register_primitive("<=", min_args=1)
def std_num_le(*args: Entity) -> Entity:
    return _compare("integer-less-or-equal?", lambda a, b: a <= b, args)

@register_primitive(">=", min_args=1)
def std_num_ge(*args: Entity) -> Entity:
    return _compare("integer-greater-or-equal?", lambda a, b: a >= b, args)

# ---------- Predicates ----------

@register_primitive("number?", arity=1, aliases=("complex?", "real?"))
def std_is_number(x: Entity) -> Entity:
    return make_boolean(is_number(x))

@register_primitive("integer?", arity=1)
def std_is_integer(x: Entity) -> Entity:
    if isinstance(x, float):
        return make_boolean(x.is_integer())
    return make_boolean(is_number(x))

@register_primitive("rational?", arity=1)
def std_is_rational(x: Entity) -> Entity:
    if isinstance(x, float):
        return make_boolean(math.isfinite(x))
    return make_boolean(is_number(x))

@register_primitive("exact?", arity=1)
def std_is_exact(x: Entity) -> Entity:
    expect_number("exact?", x)
    return make_boolean(isinstance(x, int))

@register_primitive("inexact?", arity=1)
def std_is_inexact(x: Entity) -> Entity:
    expect_number("inexact?", x)
    return make_boolean(isinstance(x, float))

@register_primitive("exact-integer?", arity=1)
def std_is_exact_integer(x: Entity) -> Entity:
    return make_boolean(isinstance(x, int) and is_number(x))

@register_primitive("exact-nonnegative-integer?", arity=1)
def std_is_exact_nonnegative(x: Entity) -> Entity:
    return make_boolean(isinstance(x, int) and is_number(x) and x >= 0)

@register_primitive("nan?", arity=1)
def std_is_nan(x: Entity) -> Entity:
    expect_number("nan?", x)
    return make_boolean(isinstance(x, float) and math.isnan(x))

@register_primitive("zero?", arity=1)
def std_is_zero(x: Entity) -> Entity:
    expect_number("zero?", x)
    return make_boolean(x == 0)

@register_primitive("positive?", arity=1)
def std_is_positive(x: Entity) -> Entity:
    expect_number("positive?", x)
    return make_boolean(x > 0)  # type: ignore[operator]

@register_primitive("negative?", arity=1)
def std_is_negative(x: Entity) -> Entity:
    expect_number("negative?", x)
    return make_boolean(x < 0)  # type: ignore[operator]

@register_primitive("odd?", arity=1)
def std_is_odd(x: Entity) -> Entity:
    return make_boolean(expect_integer("integer-remainder", x) % 2 == 1)

@register_primitive("even?", arity=1)
def std_is_even(x: Entity) -> Entity:
    return make_boolean(expect_integer("integer-remainder", x) % 2 == 0)

# ---------- Rounding and conversion ----------

def _round_to(who: str, fn, x: Entity) -> Number:
    expect_number(who, x)
    if isinstance(x, int):
        return x
    if not math.isfinite(x):  # type: ignore[arg-type]
        return x  # type: ignore[return-value]
    return float(fn(x))

@register_primitive("floor", arity=1)
def std_floor(x: Entity) -> Number:
    return _round_to("floor", math.floor, x)

@register_primitive("ceiling", arity=1)
def std_ceiling(x: Entity) -> Number:
    return _round_to("ceiling", math.ceil, x)

@register_primitive("truncate", arity=1)
def std_truncate(x: Entity) -> Number:
    return _round_to("truncate", math.trunc, x)

@register_primitive("round", arity=1, doc="(round x): nearest integer, ties to even.")
def std_round(x: Entity) -> Number:
    return _round_to("round", round, x)

@register_primitive("exact->inexact", arity=1, aliases=("inexact",))
def std_inexact(x: Entity) -> float:
    expect_number("exact->inexact", x)
    return _inexact(x)  # type: ignore[arg-type]

@register_primitive("inexact->exact", arity=1, aliases=("exact",), doc="(inexact->exact x): integral floats become integers.")
def std_exact(x: Entity) -> Number:
    expect_number("inexact->exact", x)
    if isinstance(x, float):
        if not x.is_integer():
            raise WrongTypeError("inexact->exact: no exact integer for", x)
        return int(x)
    return x  # type: ignore[return-value]

@register_primitive("exact-rational?", arity=1)
def std_is_exact_rational(x: Entity) -> Entity:
    return make_boolean(isinstance(x, int) and is_number(x))

@register_primitive("number->string", min_args=1, max_args=2)
def std_number_to_string(x: Entity, radix: Entity=10) -> MString:
    expect_number("number->string", x)
    base = expect_integer("number->string", radix)
    if base == 10 or isinstance(x, float):
        return MString(format_number(x))  # type: ignore[arg-type]
    if base not in (2, 8, 16):
        raise WrongTypeError("number->string: unsupported radix", radix)
    digits = {2: "b", 8: "o", 16: "x"}[base]
    text = format(abs(x), digits)  # type: ignore[arg-type]
    return MString(("-" if x < 0 else "") + text)  # type: ignore[operator]

@register_primitive("string->number", min_args=1, max_args=2)
def std_string_to_number(s: Entity, radix: Entity=10) -> Entity:
    if not isinstance(s, MString):
        raise WrongTypeError("string->number: wrong argument type, should be a string", s)
    value = parse_number(s.value, expect_integer("string->number", radix))
    return FALSE if value is None else value

# ---------- Transcendental ----------

def _real(who: str, fn, *args: Entity) -> float:
    _numbers(who, args)
    try:
        return fn(*args)
    except ValueError:
        raise WrongTypeError(f"{who}: argument out of domain", *args) from None
    except OverflowError:
        return math.inf

@register_primitive("sqrt", arity=1, doc="(sqrt x): exact for perfect squares.")
def std_sqrt(x: Entity) -> Number:
    expect_number("sqrt", x)
    if isinstance(x, int) and x >= 0:
        root = math.isqrt(x)
        if root * root == x:
            return root
    return _real("sqrt", math.sqrt, x)

@register_primitive("exact-nonnegative-integer-sqrt", arity=1)
def std_isqrt(x: Entity) -> int:
    n = expect_integer("exact-nonnegative-integer-sqrt", x)
    if n < 0:
        raise WrongTypeError("exact-nonnegative-integer-sqrt: argument out of domain", x)
    return math.isqrt(n)

@register_primitive("exact-integer-sqrt", arity=1, doc="(exact-integer-sqrt k): two values, s and k - s*s.")
def std_exact_integer_sqrt(x: Entity) -> Values:
    root = std_isqrt(x)
    return Values((root, x - root * root))  # type: ignore[operator]

@register_primitive("exp", arity=1)
def std_exp(x: Entity) -> float:
    return _real("exp", math.exp, x)

@register_primitive("log", min_args=1, max_args=2)
def std_log(x: Entity, base: Entity=None) -> float:  # type: ignore[assignment]
    if base is None:
        return _real("log", math.log, x)
    return _real("log", math.log, x, base)

@register_primitive("sin", arity=1)
def std_sin(x: Entity) -> float:
    return _real("sin", math.sin, x)

@register_primitive("cos", arity=1)
def std_cos(x: Entity) -> float:
    return _real("cos", math.cos, x)

@register_primitive("tan", arity=1)
def std_tan(x: Entity) -> float:
    return _real("tan", math.tan, x)

@register_primitive("asin", arity=1)
def std_asin(x: Entity) -> float:
    return _real("asin", math.asin, x)

@register_primitive("acos", arity=1)
def std_acos(x: Entity) -> float:
    return _real("acos", math.acos, x)

@register_primitive("atan", min_args=1, max_args=2)
def std_atan(y: Entity, x: Entity=None) -> float:  # type: ignore[assignment]
    if x is None:
        return _real("atan", math.atan, y)
    return _real("atan", math.atan2, y, x)
