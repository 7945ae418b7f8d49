"""Pairs and lists."""

from __future__ import annotations

from typing import List

from ..runtime import expect, expect_integer, expect_number, register_primitive
from ..types import (
    FALSE, NIL,
    Boolean, Entity, Pair, WrongTypeError,
    is_list, iter_list, make_boolean, make_list,
)
from ..utils import is_eq, is_equal, is_eqv

def _pair(who: str, x: Entity) -> Pair:
    if not isinstance(x, Pair):
        raise WrongTypeError(f"{who}: wrong argument type, should be a pair", x)
    return x

@register_primitive("cons", arity=2)
def std_cons(a: Entity, b: Entity) -> Pair:
    return Pair(a, b)

@register_primitive("car", arity=1)
def std_car(x: Entity) -> Entity:
    return _pair("car", x).car

@register_primitive("cdr", arity=1)
def std_cdr(x: Entity) -> Entity:
    return _pair("cdr", x).cdr

@register_primitive("set-car!", arity=2)
def std_set_car(x: Entity, value: Entity) -> None:
    _pair("set-car!", x).car = value

@register_primitive("set-cdr!", arity=2)
def std_set_cdr(x: Entity, value: Entity) -> None:
    _pair("set-cdr!", x).cdr = value

def _register_cxr(path: str) -> None:
    name = f"c{path}r"

    def cxr(x: Entity) -> Entity:
        cur = x
        for step in reversed(path):
            cur = _pair(name, cur)
            cur = cur.car if step == "a" else cur.cdr
        return cur

    register_primitive(name, arity=1)(cxr)

for _path in ("aa", "ad", "da", "dd", "aaa", "aad", "ada", "add", "daa", "dad", "dda", "ddd", "addd", "dddd"):
    _register_cxr(_path)

@register_primitive("pair?", arity=1)
def std_is_pair(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Pair))

@register_primitive("null?", arity=1)
def std_is_null(x: Entity) -> Boolean:
    return make_boolean(x is NIL)

@register_primitive("list?", arity=1, doc="(list? x): true for proper (finite, nil-terminated) lists.")
def std_is_list(x: Entity) -> Boolean:
    return make_boolean(is_list(x))

@register_primitive("list")
def std_list(*items: Entity) -> Entity:
    return make_list(*items)

@register_primitive("cons*", min_args=1, aliases=("list*",))
def std_cons_star(*items: Entity) -> Entity:
    return make_list(*items[:-1], tail=items[-1])

@register_primitive("make-list", min_args=1, max_args=2)
def std_make_list(k: Entity, fill: Entity=NIL) -> Entity:
    count = expect_integer("make-list", k)
    return make_list(*([fill] * count))

@register_primitive("length", arity=1)
def std_length(x: Entity) -> int:
    if not is_list(x):
        raise WrongTypeError("length: wrong argument type, should be a list", x)
    return sum(1 for _ in iter_list(x))

@register_primitive("append", doc="(append list... obj): the lists concatenated; the last argument is shared.")
def std_append(*args: Entity) -> Entity:
    if not args:
        return NIL

    result = args[-1]
    for lst in reversed(args[:-1]):
        result = make_list(*iter_list(lst, "append"), tail=result)
    return result

@register_primitive("append!")
def std_append_bang(*args: Entity) -> Entity:
    result: Entity = NIL
    last: Entity = NIL
    for lst in args:
        if lst is NIL:
            continue
        if last is NIL:
            result = lst
        else:
            last.cdr = lst  # type: ignore[union-attr]
        cur = lst
        while isinstance(cur, Pair) and isinstance(cur.cdr, Pair):
            cur = cur.cdr
        last = cur
    return result

@register_primitive("reverse", arity=1)
def std_reverse(lst: Entity) -> Entity:
    result: Entity = NIL
    for item in iter_list(lst, "reverse"):
        result = Pair(item, result)
    return result

@register_primitive("list-tail", arity=2)
def std_list_tail(lst: Entity, k: Entity) -> Entity:
    cur = lst
    for _ in range(expect_integer("list-tail", k)):
        cur = _pair("list-tail", cur).cdr
    return cur

@register_primitive("list-head", arity=2)
def std_list_head(lst: Entity, k: Entity) -> Entity:
    items: List[Entity] = []
    cur = lst
    for _ in range(expect_integer("list-head", k)):
        pair = _pair("list-head", cur)
        items.append(pair.car)
        cur = pair.cdr
    return make_list(*items)

@register_primitive("list-ref", arity=2)
def std_list_ref(lst: Entity, k: Entity) -> Entity:
    return _pair("list-ref", std_list_tail(lst, k)).car

@register_primitive("list-copy", arity=1)
def std_list_copy(lst: Entity) -> Entity:
    items: List[Entity] = []
    cur = lst
    while isinstance(cur, Pair):
        items.append(cur.car)
        cur = cur.cdr
    return make_list(*items, tail=cur)

@register_primitive("last-pair", arity=1)
def std_last_pair(lst: Entity) -> Entity:
    cur = _pair("last-pair", lst)
    while isinstance(cur.cdr, Pair):
        cur = cur.cdr
    return cur

@register_primitive("first", arity=1)
def std_first(lst: Entity) -> Entity:
    return _pair("first", lst).car

@register_primitive("last", arity=1)
def std_last(lst: Entity) -> Entity:
    return std_last_pair(lst).car  # type: ignore[union-attr]

def _member(who: str, same, x: Entity, lst: Entity) -> Entity:
    cur = lst
    while isinstance(cur, Pair):
        if same(x, cur.car):
            return cur
        cur = cur.cdr
    if cur is not NIL:
        raise WrongTypeError(f"{who}: improper list", lst)
    return FALSE

@register_primitive("memq", arity=2)
def std_memq(x: Entity, lst: Entity) -> Entity:
    return _member("memq", is_eq, x, lst)

@register_primitive("memv", arity=2)
def std_memv(x: Entity, lst: Entity) -> Entity:
    return _member("memv", is_eqv, x, lst)

@register_primitive("%member", arity=2)
def std_member(x: Entity, lst: Entity) -> Entity:
    return _member("member", is_equal, x, lst)

def _assoc(who: str, same, key: Entity, alist: Entity) -> Entity:
    for entry in iter_list(alist, who):
        expect(who, entry, Pair, "an association list")
        if same(key, entry.car):  # type: ignore[union-attr]
            return entry
    return FALSE

@register_primitive("assq", arity=2)
def std_assq(key: Entity, alist: Entity) -> Entity:
    return _assoc("assq", is_eq, key, alist)

@register_primitive("assv", arity=2)
def std_assv(key: Entity, alist: Entity) -> Entity:
    return _assoc("assv", is_eqv, key, alist)

@register_primitive("%assoc", arity=2)
def std_assoc(key: Entity, alist: Entity) -> Entity:
    return _assoc("assoc", is_equal, key, alist)

@register_primitive("iota", min_args=1, max_args=3)
def std_iota(count: Entity, start: Entity=0, step: Entity=1) -> Entity:
    n = expect_integer("iota", count)
    expect_number("iota", start)
    expect_number("iota", step)
    return make_list(*(start + i * step for i in range(n)))  # type: ignore[operator]
