"""Vectors."""

from __future__ import annotations

from ..runtime import expect, expect_index, expect_integer, register_primitive
from ..types import FALSE, Boolean, Entity, Vector, WrongTypeError, iter_list, list_from_iterable, make_boolean

def _vector(who: str, x: Entity) -> Vector:
    expect(who, x, Vector, "a vector")
    return x  # type: ignore[return-value]

@register_primitive("vector?", arity=1)
def std_is_vector(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Vector))

@register_primitive("make-vector", min_args=1, max_args=2)
def std_make_vector(k: Entity, fill: Entity=FALSE) -> Vector:
    size = expect_integer("make-vector", k)
    if size < 0:
        raise WrongTypeError("make-vector: wrong argument type, should be a non-negative integer", k)
    return Vector([fill] * size)

@register_primitive("vector")
def std_vector(*items: Entity) -> Vector:
    return Vector(list(items))

@register_primitive("vector-length", arity=1)
def std_vector_length(v: Entity) -> int:
    return len(_vector("vector-length", v).items)

@register_primitive("vector-ref", arity=2)
def std_vector_ref(v: Entity, k: Entity) -> Entity:
    items = _vector("vector-ref", v).items
    return items[expect_index("vector-ref", k, len(items))]

@register_primitive("vector-set!", arity=3)
def std_vector_set(v: Entity, k: Entity, value: Entity) -> None:
    items = _vector("vector-set!", v).items
    items[expect_index("vector-set!", k, len(items))] = value

@register_primitive("vector->list", min_args=1, max_args=3)
def std_vector_to_list(v: Entity, start: Entity=0, end: Entity=None) -> Entity:  # type: ignore[assignment]
    items = _vector("vector->list", v).items
    lo = expect_integer("vector->list", start)
    hi = len(items) if end is None else expect_integer("vector->list", end)
    if not 0 <= lo <= hi <= len(items):
        raise WrongTypeError("vector->list: index out of range", start, end)
    return list_from_iterable(items[lo:hi])

@register_primitive("list->vector", arity=1)
def std_list_to_vector(lst: Entity) -> Vector:
    return Vector(list(iter_list(lst, "list->vector")))

@register_primitive("vector-fill!", arity=2)
def std_vector_fill(v: Entity, value: Entity) -> None:
    items = _vector("vector-fill!", v).items
    items[:] = [value] * len(items)

@register_primitive("vector-grow", arity=2)
def std_vector_grow(v: Entity, k: Entity) -> Vector:
    items = _vector("vector-grow", v).items
    size = expect_integer("vector-grow", k)
    if size < len(items):
        raise WrongTypeError("vector-grow: new size is smaller than the vector", k)
    return Vector(items + [FALSE] * (size - len(items)))

@register_primitive("subvector", arity=3, aliases=("vector-copy-range",))
def std_subvector(v: Entity, start: Entity, end: Entity) -> Vector:
    items = _vector("subvector", v).items
    lo = expect_integer("subvector", start)
    hi = expect_integer("subvector", end)
    if not 0 <= lo <= hi <= len(items):
        raise WrongTypeError("subvector: index out of range", start, end)
    return Vector(items[lo:hi])

@register_primitive("vector-copy", arity=1)
def std_vector_copy(v: Entity) -> Vector:
    return Vector(list(_vector("vector-copy", v).items))
