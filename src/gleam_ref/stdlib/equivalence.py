"""Booleans, equivalence predicates and type predicates."""

from __future__ import annotations

from ..ports import InputPort, OutputPort
from ..runtime import expect, register_primitive
from ..types import (
    DEFAULT_OBJECT, EOF, FALSE, TRUE,
    Boolean, Entity, Procedure, Promise,
    make_boolean,
)
from ..utils import is_eq, is_equal, is_eqv

@register_primitive("not", arity=1)
def std_not(x: Entity) -> Boolean:
    return TRUE if x is FALSE else FALSE

@register_primitive("boolean?", arity=1)
def std_is_boolean(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Boolean))

@register_primitive("boolean=?", min_args=2)
def std_boolean_eq(*args: Entity) -> Boolean:
    for arg in args:
        expect("boolean=?", arg, Boolean, "a boolean")
    return make_boolean(all(a is args[0] for a in args))

@register_primitive("eq?", arity=2, doc="(eq? a b): same object (numbers and characters by value).")
def std_eq(a: Entity, b: Entity) -> Boolean:
    return make_boolean(is_eq(a, b))

@register_primitive("eqv?", arity=2)
def std_eqv(a: Entity, b: Entity) -> Boolean:
    return make_boolean(is_eqv(a, b))

@register_primitive("equal?", arity=2, doc="(equal? a b): structural equality of pairs, strings and vectors.")
def std_equal(a: Entity, b: Entity) -> Boolean:
    return make_boolean(is_equal(a, b))

@register_primitive("procedure?", arity=1)
def std_is_procedure(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Procedure))

@register_primitive("promise?", arity=1)
def std_is_promise(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Promise))

@register_primitive("default-object?", arity=1, doc="(default-object? x): true for an #!optional parameter that was not supplied.")
def std_is_default_object(x: Entity) -> Boolean:
    return make_boolean(x is DEFAULT_OBJECT)

@register_primitive("eof-object", arity=0)
def std_eof_object() -> Entity:
    return EOF

@register_primitive("eof-object?", arity=1)
def std_is_eof_object(x: Entity) -> Boolean:
    return make_boolean(x is EOF)

@register_primitive("port?", arity=1)
def std_is_port(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, (InputPort, OutputPort)))

@register_primitive("input-port?", arity=1)
def std_is_input_port(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, InputPort))

@register_primitive("output-port?", arity=1)
def std_is_output_port(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, OutputPort))
