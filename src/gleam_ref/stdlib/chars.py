"""Characters."""

from __future__ import annotations

from ..runtime import expect, expect_integer, register_primitive
from ..types import FALSE, Boolean, Char, Entity, WrongTypeError, make_boolean

def _char(who: str, x: Entity) -> str:
    expect(who, x, Char, "a character")
    return x.value  # type: ignore[union-attr]

@register_primitive("char?", arity=1)
def std_is_char(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Char))

@register_primitive("char->integer", arity=1)
def std_char_to_integer(x: Entity) -> int:
    return ord(_char("char->integer", x))

@register_primitive("integer->char", arity=1)
def std_integer_to_char(n: Entity) -> Char:
    code = expect_integer("integer->char", n)
    try:
        return Char(chr(code))
    except (ValueError, OverflowError):
        raise WrongTypeError("integer->char: not a valid code point", n) from None

@register_primitive("char-upcase", arity=1)
def std_char_upcase(x: Entity) -> Char:
    return Char(_char("char-upcase", x).upper())

@register_primitive("char-downcase", arity=1)
def std_char_downcase(x: Entity) -> Char:
    return Char(_char("char-downcase", x).lower())

@register_primitive("char-alphabetic?", arity=1)
def std_is_char_alphabetic(x: Entity) -> Boolean:
    return make_boolean(_char("char-alphabetic?", x).isalpha())

@register_primitive("char-numeric?", arity=1)
def std_is_char_numeric(x: Entity) -> Boolean:
    return make_boolean(_char("char-numeric?", x).isdigit())

@register_primitive("char-whitespace?", arity=1)
def std_is_char_whitespace(x: Entity) -> Boolean:
    return make_boolean(_char("char-whitespace?", x).isspace())

@register_primitive("char-upper-case?", arity=1)
def std_is_char_upper(x: Entity) -> Boolean:
    return make_boolean(_char("char-upper-case?", x).isupper())

@register_primitive("char-lower-case?", arity=1)
def std_is_char_lower(x: Entity) -> Boolean:
    return make_boolean(_char("char-lower-case?", x).islower())

@register_primitive("digit-value", arity=1)
def std_digit_value(x: Entity) -> Entity:
    ch = _char("digit-value", x)
    return int(ch) if ch.isdigit() else FALSE

@register_primitive("char->digit", min_args=1, max_args=2)
def std_char_to_digit(x: Entity, radix: Entity=10) -> Entity:
    ch = _char("char->digit", x)
    try:
        return int(ch, expect_integer("char->digit", radix))
    except ValueError:
        return FALSE

def _char_compare(who: str, op, args, fold: bool=False) -> Boolean:
    chars = [_char(who, a) for a in args]
    if fold:
        chars = [c.casefold() for c in chars]
    return make_boolean(all(op(a, b) for a, b in zip(chars, chars[1:])))

@register_primitive("char=?", min_args=1)
def std_char_eq(*args: Entity) -> Boolean:
    return _char_compare("char=?", lambda a, b: a == b, args)

@register_primitive("char<?", min_args=1)
def std_char_lt(*args: Entity) -> Boolean:
    return _char_compare("char<?", lambda a, b: a < b, args)

@register_primitive("char>?", min_args=1)
def std_char_gt(*args: Entity) -> Boolean:
    return _char_compare("char>?", lambda a, b: a > b, args)

@register_primitive("char<=?", min_args=1)
def std_char_le(*args: Entity) -> Boolean:
    return _char_compare("char<=?", lambda a, b: a <= b, args)

@register_primitive("char>=?", min_args=1)
def std_char_ge(*args: Entity) -> Boolean:
    return _char_compare("char>=?", lambda a, b: a >= b, args)

@register_primitive("char-ci=?", min_args=1)
def std_char_ci_eq(*args: Entity) -> Boolean:
    return _char_compare("char-ci=?", lambda a, b: a == b, args, fold=True)
