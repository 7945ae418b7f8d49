from __future__ import annotations

import importlib
import threading
from contextlib import nullcontext
from typing import Callable, Dict, Iterator, List, Optional

from .types import (
    VOID, UNASSIGNED,
    Builtins, Entity, GleamError, HostValue, Primitive, PrimitiveFn, SpecialForm, Symbol,
    WrongTypeError, UnboundVariableError, is_number,
)

_STDLIB_INITIALIZED = False
_STDLIB_LOCK = threading.Lock()

def init_stdlib() -> None:
    """Import the special forms and primitive modules (idempotent) so their register hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    with _STDLIB_LOCK:
        if _STDLIB_INITIALIZED:
            return
        for module_name in ("gleam_ref.syntax", "gleam_ref.stdlib"):
            importlib.import_module(module_name)
        _STDLIB_INITIALIZED = True

def register_primitive(
    name: str,
    *,
    arity: Optional[int]=None,
    min_args: int=0,
    max_args: Optional[int]=None,
    control: bool=False,
    aliases: tuple[str, ...]=(),
    doc: Optional[str]=None,
):
    if arity is not None:
        min_args = max_args = arity

    def dec(fn: PrimitiveFn):
        prim = Primitive(name=name, fn=fn, min_args=min_args, max_args=max_args, control=control, doc=doc)
        Builtins.primitives[name] = prim
        for alias in aliases:
            Builtins.aliases[alias] = name
        return fn

    return dec

def register_syntax(name: str, *, doc: Optional[str]=None):
    def dec(fn: Callable[..., None]):
        Builtins.special_forms[name] = SpecialForm(name=name, handler=fn, doc=doc)
        return fn

    return dec

# ---------- Environments ----------

class Location:
    """A mutable cell shared by every frame and closure that binds it."""
    __slots__ = ("value",)

    def __init__(self, value: Entity):
        self.value = value

    def __repr__(self) -> str:
        return f"#<location of {self.value!r}>"

class Environment:
    """One lexical frame: symbol -> Location, plus a parent link."""
    __slots__ = ("parent", "vars", "_lock", "name")

    def __init__(self, parent: Optional[Environment]=None, shared: bool=False, name: Optional[str]=None):
        self.parent = parent
        self.vars: Dict[Symbol, Location] = {}
        self._lock = threading.RLock() if shared else None
        self.name = name

    @property
    def shared(self) -> bool:
        return self._lock is not None

    def _guard(self):
        return self._lock if self._lock is not None else nullcontext()

    def define(self, sym: Symbol, val: Entity) -> None:
        with self._guard():
            loc = self.vars.get(sym)
            if loc is None:
                self.vars[sym] = Location(val)
            else:
                loc.value = val

    def remove(self, sym: Symbol) -> bool:
        with self._guard():
            return self.vars.pop(sym, None) is not None

    def get_location_or_none(self, sym: Symbol) -> Optional[Location]:
        env: Optional[Environment] = self
        while env is not None:
            loc = env.vars.get(sym)
            if loc is not None:
                return loc
            env = env.parent
        return None

    def get_location(self, sym: Symbol) -> Location:
        loc = self.get_location_or_none(sym)
        if loc is None:
            raise UnboundVariableError(sym)
        return loc

    def lookup(self, sym: Symbol) -> Entity:
        env: Optional[Environment] = self
        while env is not None:
            loc = env.vars.get(sym)
            if loc is not None:
                value = loc.value
                if value is UNASSIGNED:
                    raise GleamError(f"unassigned variable: {sym.name}", sym)
                return value
            env = env.parent
        raise UnboundVariableError(sym)

    def is_bound(self, sym: Symbol) -> bool:
        return self.get_location_or_none(sym) is not None

    def new_child_frame(self, shared: bool=False) -> Environment:
        return Environment(self, shared=shared)

    def symbols(self) -> List[Symbol]:
        with self._guard():
            return list(self.vars)

    def depth(self) -> int:
        count = 0
        env: Optional[Environment] = self.parent
        while env is not None:
            count += 1
            env = env.parent
        return count

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.symbols())

    def __repr__(self) -> str:
        label = f" {self.name}" if self.name else ""
        return f"#<environment{label}>"

class SystemEnvironment:
    """Process-wide null / report / interaction frames, created once."""
    _lock = threading.Lock()
    null: Optional[Environment] = None
    report: Optional[Environment] = None
    interaction: Optional[Environment] = None

    @classmethod
    def create(cls) -> bool:
        """Build the frames if needed; return True when this call built them."""
        if cls.interaction is not None:
            return False

        with cls._lock:
            if cls.interaction is not None:
                return False
            init_stdlib()
            null = Environment(shared=True, name="null")
            for name, form in Builtins.special_forms.items():
                null.define(Symbol.intern(name), form)

            report = Environment(null, shared=True, name="report")
            for name, prim in Builtins.primitives.items():
                report.define(Symbol.intern(name), prim)
            for alias, target in Builtins.aliases.items():
                report.define(Symbol.intern(alias), Builtins.primitives[target])

            interaction = Environment(report, shared=True, name="interaction")
            interaction.define(ERROBJ, VOID)
            interaction.define(Symbol.intern("null"), HostValue(None))

            cls.null, cls.report, cls.interaction = null, report, interaction
            return True

    @classmethod
    def get_null_env(cls) -> Environment:
        cls.create()
        assert cls.null is not None
        return cls.null

    @classmethod
    def get_report_env(cls) -> Environment:
        cls.create()
        assert cls.report is not None
        return cls.report

    @classmethod
    def get_interaction_env(cls) -> Environment:
        cls.create()
        assert cls.interaction is not None
        return cls.interaction

ERROBJ = Symbol.intern("__errobj")

# ---------- Argument helpers ----------

def expect(who: str, value: Entity, kind: type | tuple[type, ...], label: str) -> None:
    if not isinstance(value, kind) or isinstance(value, bool):
        raise WrongTypeError(f"{who}: wrong argument type, should be {label}", value)

def expect_number(who: str, value: Entity) -> None:
    if not is_number(value):
        raise WrongTypeError(f"{who}: wrong argument type, should be a number", value)

def expect_integer(who: str, value: Entity) -> int:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise WrongTypeError(f"{who}: wrong argument type, should be an integer", value)
    return value

def expect_index(who: str, value: Entity, size: int) -> int:
    index = expect_integer(who, value)
    if index < 0 or index >= size:
        raise WrongTypeError(f"{who}: index out of range", value)
    return index
