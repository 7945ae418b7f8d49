from __future__ import annotations

import os as _os
from typing import Optional, Set, Tuple

from .types import (
    FALSE,
    Char,
    Entity,
    HostValue,
    MString,
    Pair,
    Vector,
    is_number,
)

def _flag_enabled(name: str) -> bool:
    return _os.environ.get(name, "").strip().lower() not in ("", "0", "false", "no", "off")

def debug_py_trace_enabled() -> bool:
    """GLEAM_DEBUG_PY_TRACE: show Python tracebacks alongside Scheme errors."""
    return _flag_enabled("GLEAM_DEBUG_PY_TRACE")

def trace_enabled_by_default() -> bool:
    return _flag_enabled("GLEAM_TRACE")

def slow_tests_enabled() -> bool:
    return _flag_enabled("GLEAM_SLOW_TESTS")

def is_true(value: Entity) -> bool:
    """Everything except #f counts as true."""
    return value is not FALSE and value is not False

def is_eq(lhs: Entity, rhs: Entity) -> bool:
    if lhs is rhs:
        return True
    match (lhs, rhs):
        case (Char(value=a), Char(value=b)):
            return a == b
        case _ if is_number(lhs) and is_number(rhs):
            return type(lhs) is type(rhs) and lhs == rhs
        case _:
            return False

def is_eqv(lhs: Entity, rhs: Entity) -> bool:
    if is_eq(lhs, rhs):
        return True
    match (lhs, rhs):
        case (MString(value=""), MString(value="")):
            return True
        case (HostValue(value=a), HostValue(value=b)):
            return a is b
        case _:
            return False

def is_equal(lhs: Entity, rhs: Entity, seen: Optional[Set[Tuple[int, int]]]=None) -> bool:
    """Structural equality; the cdr spine is walked iteratively.

    A pair of containers met again while still being compared counts as equal,
    so circular structures terminate.
    """
    if seen is None:
        seen = set()
    while True:
        if is_eqv(lhs, rhs):
            return True
        match (lhs, rhs):
            case (Pair(), Pair()):
                key = (id(lhs), id(rhs))
                if key in seen:
                    return True
                seen.add(key)
                if not is_equal(lhs.car, rhs.car, seen):
                    return False
                lhs, rhs = lhs.cdr, rhs.cdr
            case (MString(value=a), MString(value=b)):
                return a == b
            case (Vector(items=items_a), Vector(items=items_b)):
                key = (id(lhs), id(rhs))
                if key in seen:
                    return True
                seen.add(key)
                return len(items_a) == len(items_b) and all(
                    is_equal(a, b, seen) for a, b in zip(items_a, items_b)
                )
            case (HostValue(value=a), HostValue(value=b)):
                return a == b
            case _:
                return False
