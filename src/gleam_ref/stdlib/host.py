"""Python object interop: construct host objects and call their methods."""

from __future__ import annotations

import builtins
import importlib
from typing import Any

from ..bridge import unwrap, wrap
from ..runtime import register_primitive
from ..types import (
    Entity, HostError, HostValue, MString, Symbol, WrongTypeError, make_boolean,
)

def _name(who: str, value: Entity) -> str:
    if isinstance(value, MString):
        return value.value
    if isinstance(value, Symbol):
        return value.name
    raise WrongTypeError(f"{who}: wrong argument type, should be a string or symbol", value)

def resolve_class(dotted: str) -> Any:
    """'package.module.Class' -> the class; bare names resolve against builtins."""
    module_name, _, attr = dotted.rpartition(".")
    try:
        if not module_name:
            return getattr(builtins, attr)
        return getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as exc:
        raise HostError(f"new: no such class: {dotted}", MString(dotted)) from exc

@register_primitive("new", min_args=1, doc="(new \"module.Class\" args...): instantiate a Python class, e.g. (new \"fractions.Fraction\" 1 3)")
def std_new(class_name: Entity, *args: Entity) -> Entity:
    dotted = _name("new", class_name)
    cls = resolve_class(dotted)
    try:
        obj = cls(*[unwrap(arg) for arg in args])
    except Exception as exc:
        raise HostError(f"new: {type(exc).__name__}: {exc}", MString(dotted)) from exc
    return HostValue(obj)

@register_primitive("call", min_args=2, doc="(call 'method obj args...): invoke a method, e.g. (call 'upper (new \"str\" \"abc\"))")
def std_call(method: Entity, obj: Entity, *args: Entity) -> Entity:
    name = _name("call", method)
    target = unwrap(obj)
    if target is None:
        raise HostError("call: null target", Symbol.intern(name))

    bound = getattr(target, name, None)
    if bound is None or not callable(bound):
        raise HostError(f"call: {type(target).__name__} has no method {name}", Symbol.intern(name))

    try:
        result = bound(*[unwrap(arg) for arg in args])
    except Exception as exc:
        raise HostError(f"call: {type(exc).__name__}: {exc}", Symbol.intern(name)) from exc
    return wrap(result)

@register_primitive("class-of", arity=1)
def std_class_of(obj: Entity) -> HostValue:
    return HostValue(type(unwrap(obj)))

@register_primitive("host-object?", arity=1)
def std_host_object_p(obj: Entity) -> Entity:
    return make_boolean(isinstance(obj, HostValue))
