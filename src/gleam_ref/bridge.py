"""Conversions between Python values and Entities, and the Bindings mapping."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Iterator, Optional

from .runtime import Environment
from .types import (
    DEFAULT_OBJECT, EOF, FALSE, NIL, TRUE, UNASSIGNED, VOID,
    Boolean, Entity, HostValue, MString, Pair, Symbol,
    is_entity, list_from_iterable,
)

if TYPE_CHECKING:
    from .context import ExecutionContext

TRACE_ENABLED_KEY = ":trace-enabled"
NOISY_KEY = ":noisy"

def wrap(value: Any) -> Entity:
    """Python value -> Entity. Values with no Scheme counterpart become HostValue."""
    if value is None:
        return VOID
    if isinstance(value, bool):
        return TRUE if value else FALSE
    if isinstance(value, str):
        return MString(value)
    if isinstance(value, (list, tuple)):
        return list_from_iterable([wrap(item) for item in value])
    if is_entity(value):
        return value
    return HostValue(value)

def unwrap(entity: Entity) -> Any:
    """Entity -> Python value; the inverse of wrap where one exists."""
    match entity:
        case Boolean(value=flag):
            return flag
        case MString(value=text):
            return text
        case Symbol(name=name):
            return name
        case HostValue(value=value):
            return value
        case Pair():
            items = []
            node: Entity = entity
            while isinstance(node, Pair):
                items.append(unwrap(node.car))
                node = node.cdr
            return items if node is NIL else entity
        case _ if entity is NIL:
            return []
        case _ if entity is VOID or entity is EOF or entity is DEFAULT_OBJECT or entity is UNASSIGNED:
            return None
        case _:
            return entity

class Bindings(MutableMapping):
    """A str-keyed view of one Environment frame.

    Keys map one-to-one onto the frame's symbols; values are unwrapped on the
    way out and wrapped on the way in. The keys `:trace-enabled` and
    `:noisy` read and write the execution context instead of the frame.
    """

    def __init__(self, env: Environment, ctx: Optional[ExecutionContext]=None):
        self.env = env
        self.ctx = ctx

    def _context_key(self, key: str) -> Optional[str]:
        if self.ctx is None:
            return None
        if key == TRACE_ENABLED_KEY:
            return "trace_enabled"
        if key == NOISY_KEY:
            return "noisy"
        return None

    def __getitem__(self, key: str) -> Any:
        attr = self._context_key(key)
        if attr is not None:
            return getattr(self.ctx, attr)

        loc = self.env.vars.get(Symbol.intern(key))
        if loc is None:
            raise KeyError(key)
        return unwrap(loc.value)

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str) or not key:
            raise TypeError("binding names must be non-empty strings")

        attr = self._context_key(key)
        if attr is not None:
            setattr(self.ctx, attr, bool(value))
            return

        self.env.define(Symbol.intern(key), wrap(value))

    def __delitem__(self, key: str) -> None:
        if not self.env.remove(Symbol.intern(key)):
            raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter([sym.name for sym in self.env.symbols()])

    def __len__(self) -> int:
        return len(self.env.symbols())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        if self._context_key(key) is not None:
            return True
        return Symbol.intern(key) in self.env.vars

    def __repr__(self) -> str:
        return f"Bindings({dict(self.items())!r})"
