"""Strings and symbols."""

from __future__ import annotations

from typing import List

from ..runtime import expect, expect_index, expect_integer, register_primitive
from ..types import (
    FALSE,
    Boolean, Char, Entity, MString, Symbol, WrongTypeError,
    iter_list, list_from_iterable, make_boolean,
)

def _string(who: str, x: Entity) -> str:
    expect(who, x, MString, "a string")
    return x.value  # type: ignore[union-attr]

def _symbol(who: str, x: Entity) -> Symbol:
    expect(who, x, Symbol, "a symbol")
    return x  # type: ignore[return-value]

# ---------- Symbols ----------

@register_primitive("symbol?", arity=1)
def std_is_symbol(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Symbol))

@register_primitive("symbol->string", arity=1)
def std_symbol_to_string(x: Entity) -> MString:
    return MString(_symbol("symbol->string", x).name)

@register_primitive("string->symbol", arity=1, aliases=("intern",))
def std_string_to_symbol(s: Entity) -> Symbol:
    return Symbol.intern(_string("string->symbol", s))

@register_primitive("string->uninterned-symbol", arity=1)
def std_string_to_uninterned_symbol(s: Entity) -> Symbol:
    return Symbol(_string("string->uninterned-symbol", s), interned=False)

@register_primitive("generate-symbol", max_args=1, aliases=("gensym", "generate-uninterned-symbol"),
                    doc="(generate-symbol [prefix]): a fresh uninterned symbol.")
def std_generate_symbol(prefix: Entity=None) -> Symbol:  # type: ignore[assignment]
    if prefix is None:
        return Symbol.generate()
    if isinstance(prefix, Symbol):
        return Symbol.generate(prefix.name)
    return Symbol.generate(_string("generate-symbol", prefix))

@register_primitive("symbol-append")
def std_symbol_append(*syms: Entity) -> Symbol:
    return Symbol.intern("".join(_symbol("symbol-append", s).name for s in syms))

@register_primitive("symbol<?", min_args=1)
def std_symbol_lt(*syms: Entity) -> Boolean:
    names = [_symbol("symbol<?", s).name for s in syms]
    return make_boolean(all(a < b for a, b in zip(names, names[1:])))

# ---------- Strings ----------

@register_primitive("string?", arity=1)
def std_is_string(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, MString))

@register_primitive("make-string", min_args=1, max_args=2)
def std_make_string(k: Entity, fill: Entity=Char(" ")) -> MString:
    expect("make-string", fill, Char, "a character")
    return MString(fill.value * expect_integer("make-string", k))  # type: ignore[union-attr]

@register_primitive("string")
def std_string(*chars: Entity) -> MString:
    parts: List[str] = []
    for ch in chars:
        if isinstance(ch, Char):
            parts.append(ch.value)
        elif isinstance(ch, MString):
            parts.append(ch.value)
        else:
            raise WrongTypeError("string: wrong argument type, should be a character", ch)
    return MString("".join(parts))

@register_primitive("string-length", arity=1)
def std_string_length(s: Entity) -> int:
    return len(_string("string-length", s))

@register_primitive("string-ref", arity=2)
def std_string_ref(s: Entity, k: Entity) -> Char:
    text = _string("string-ref", s)
    return Char(text[expect_index("string-ref", k, len(text))])

@register_primitive("string-set!", arity=3, doc="(string-set! s k char): strings are mutable.")
def std_string_set(s: Entity, k: Entity, ch: Entity) -> None:
    text = _string("string-set!", s)
    index = expect_index("string-set!", k, len(text))
    expect("string-set!", ch, Char, "a character")
    s.value = text[:index] + ch.value + text[index + 1:]  # type: ignore[union-attr]

@register_primitive("string-fill!", arity=2)
def std_string_fill(s: Entity, ch: Entity) -> None:
    text = _string("string-fill!", s)
    expect("string-fill!", ch, Char, "a character")
    s.value = ch.value * len(text)  # type: ignore[union-attr]

def _bounds(who: str, text: str, start: Entity, end: Entity) -> tuple[int, int]:
    lo = expect_integer(who, start)
    hi = len(text) if end is None else expect_integer(who, end)
    if not 0 <= lo <= hi <= len(text):
        raise WrongTypeError(f"{who}: index out of range", start, end)
    return lo, hi

@register_primitive("substring", min_args=2, max_args=3)
def std_substring(s: Entity, start: Entity, end: Entity=None) -> MString:  # type: ignore[assignment]
    text = _string("substring", s)
    lo, hi = _bounds("substring", text, start, end)
    return MString(text[lo:hi])

@register_primitive("string-head", arity=2)
def std_string_head(s: Entity, end: Entity) -> MString:
    return std_substring(s, 0, end)

@register_primitive("string-tail", arity=2)
def std_string_tail(s: Entity, start: Entity) -> MString:
    return std_substring(s, start)

@register_primitive("string-append")
def std_string_append(*parts: Entity) -> MString:
    return MString("".join(_string("string-append", p) for p in parts))

@register_primitive("string-copy", min_args=1, max_args=3)
def std_string_copy(s: Entity, start: Entity=0, end: Entity=None) -> MString:  # type: ignore[assignment]
    return std_substring(s, start, end)

@register_primitive("string->list", min_args=1, max_args=3)
def std_string_to_list(s: Entity, start: Entity=0, end: Entity=None) -> Entity:  # type: ignore[assignment]
    text = _string("string->list", s)
    lo, hi = _bounds("string->list", text, start, end)
    return list_from_iterable([Char(ch) for ch in text[lo:hi]])

@register_primitive("list->string", arity=1)
def std_list_to_string(lst: Entity) -> MString:
    chars: List[str] = []
    for item in iter_list(lst, "list->string"):
        expect("list->string", item, Char, "a list of characters")
        chars.append(item.value)  # type: ignore[union-attr]
    return MString("".join(chars))

@register_primitive("string-null?", arity=1)
def std_string_null(s: Entity) -> Boolean:
    return make_boolean(_string("string-null?", s) == "")

@register_primitive("string-upcase", arity=1)
def std_string_upcase(s: Entity) -> MString:
    return MString(_string("string-upcase", s).upper())

@register_primitive("string-downcase", arity=1)
def std_string_downcase(s: Entity) -> MString:
    return MString(_string("string-downcase", s).lower())

@register_primitive("string-index", arity=2)
def std_string_index(s: Entity, ch: Entity) -> Entity:
    text = _string("string-index", s)
    expect("string-index", ch, Char, "a character")
    index = text.find(ch.value)  # type: ignore[union-attr]
    return FALSE if index < 0 else index

@register_primitive("string-search-forward", arity=3)
def std_string_search_forward(pattern: Entity, s: Entity, start: Entity) -> Entity:
    index = _string("string-search-forward", s).find(
        _string("string-search-forward", pattern), expect_integer("string-search-forward", start)
    )
    return FALSE if index < 0 else index

@register_primitive("string-search-all", arity=2)
def std_string_search_all(pattern: Entity, s: Entity) -> Entity:
    needle = _string("string-search-all", pattern)
    text = _string("string-search-all", s)
    found = [i for i in range(len(text) - len(needle) + 1) if text.startswith(needle, i)]
    return list_from_iterable(found)

@register_primitive("string-join", min_args=1, max_args=2)
def std_string_join(lst: Entity, sep: Entity=MString(" ")) -> MString:
    parts = [_string("string-join", item) for item in iter_list(lst, "string-join")]
    return MString(_string("string-join", sep).join(parts))

def _string_compare(who: str, op, args, fold: bool=False) -> Boolean:
    texts = [_string(who, a) for a in args]
    if fold:
        texts = [t.casefold() for t in texts]
    return make_boolean(all(op(a, b) for a, b in zip(texts, texts[1:])))

@register_primitive("string=?", min_args=1)
def std_string_eq(*args: Entity) -> Boolean:
    return _string_compare("string=?", lambda a, b: a == b, args)

@register_primitive("string<?", min_args=1)
def std_string_lt(*args: Entity) -> Boolean:
    return _string_compare("string<?", lambda a, b: a < b, args)

@register_primitive("string>?", min_args=1)
def std_string_gt(*args: Entity) -> Boolean:
    return _string_compare("string>?", lambda a, b: a > b, args)

@register_primitive("string<=?", min_args=1)
def std_string_le(*args: Entity) -> Boolean:
    return _string_compare("string<=?", lambda a, b: a <= b, args)

@register_primitive("string>=?", min_args=1)
def std_string_ge(*args: Entity) -> Boolean:
    return _string_compare("string>=?", lambda a, b: a >= b, args)

@register_primitive("string-ci=?", min_args=1)
def std_string_ci_eq(*args: Entity) -> Boolean:
    return _string_compare("string-ci=?", lambda a, b: a == b, args, fold=True)
