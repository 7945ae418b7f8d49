from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union
from typing_extensions import TypeAlias, TypeGuard

# ---------- Constants ----------

class Constant:
    """Distinguished singleton values (empty list, eof, no-value, ...)."""
    __slots__ = ("label",)

    def __init__(self, label: str):
        self.label = label

    def __repr__(self) -> str:
        return self.label

NIL = Constant("()")
EOF = Constant("#<eof>")
VOID = Constant("#!unspecific")
UNASSIGNED = Constant("#!unassigned")
DEFAULT_OBJECT = Constant("#!default")

class Boolean:
    __slots__ = ("value",)

    def __init__(self, value: bool):
        self.value = value

    def __repr__(self) -> str:
        return "#t" if self.value else "#f"

TRUE = Boolean(True)
FALSE = Boolean(False)

def make_boolean(value: object) -> Boolean:
    return TRUE if value else FALSE

# ---------- Value Model ----------

class Symbol:
    """Symbols are interned process-wide and compared by identity."""
    __slots__ = ("name", "interned")

    _table: Dict[str, Symbol] = {}
    _lock = threading.Lock()
    _counter = itertools.count(1)

    def __init__(self, name: str, interned: bool=True):
        self.name = name
        self.interned = interned

    @classmethod
    def intern(cls, name: str) -> Symbol:
        sym = cls._table.get(name)
        if sym is not None:
            return sym

        with cls._lock:
            sym = cls._table.get(name)
            if sym is None:
                sym = cls(name)
                cls._table[name] = sym

        return sym

    @classmethod
    def generate(cls, prefix: str="g") -> Symbol:
        return cls(f"{prefix}{next(cls._counter)}", interned=False)

    def __repr__(self) -> str:
        return self.name

@dataclass(eq=False)
class Pair:
    car: 'Entity'
    cdr: 'Entity'
    __slots__ = ("car", "cdr")

    def __repr__(self) -> str:
        from .printer import write_string
        return write_string(self)

@dataclass(frozen=True)
class Char:
    value: str

@dataclass(eq=False)
class MString:
    value: str

    def __repr__(self) -> str:
        from .printer import write_string
        return write_string(self)

@dataclass(eq=False)
class Vector:
    items: List['Entity']

    def __repr__(self) -> str:
        from .printer import write_string
        return write_string(self)

@dataclass(eq=False)
class Values:
    """Multiple values travelling to a call-with-values consumer."""
    items: Tuple['Entity', ...]

@dataclass(eq=False)
class HostValue:
    """Opaque handle on a value owned by the embedding host."""
    value: Any

    def __repr__(self) -> str:
        return f"#<host-value {self.value!r}>"

@dataclass(eq=False)
class ErrorObject:
    """Guest-visible view of a condition."""
    kind: Symbol
    message: str
    irritants: 'Entity'
    condition: Optional['GleamError'] = None

@dataclass(eq=False)
class Promise:
    expr: 'Entity'
    env: Optional['Environment']
    done: bool = False
    value: 'Entity' = VOID

# ---------- Procedures ----------

@dataclass(frozen=True)
class Params:
    required: Tuple[Symbol, ...]
    optional: Tuple[Symbol, ...] = ()
    rest: Optional[Symbol] = None

    def describe(self) -> str:
        if self.rest is not None:
            return f"at least {len(self.required)}"
        if self.optional:
            return f"between {len(self.required)} and {len(self.required) + len(self.optional)}"
        return f"exactly {len(self.required)}"

class Procedure:
    name: Optional[str]

@dataclass(eq=False)
class Closure(Procedure):
    params: Params
    body: Tuple['Entity', ...]
    env: 'Environment'
    name: Optional[str] = None

    def __repr__(self) -> str:
        return f"#<procedure {self.name or 'anonymous'}>"

PrimitiveFn = Callable[..., Any]

@dataclass(eq=False)
class Primitive(Procedure):
    name: str
    fn: PrimitiveFn
    min_args: int = 0
    max_args: Optional[int] = None
    control: bool = False
    doc: Optional[str] = None

    def check_arity(self, count: int) -> None:
        if count < self.min_args or (self.max_args is not None and count > self.max_args):
            if self.max_args == self.min_args:
                expected = f"exactly {self.min_args}"
            elif self.max_args is None:
                expected = f"at least {self.min_args}"
            else:
                expected = f"between {self.min_args} and {self.max_args}"
            raise ArityError(f"{self.name}: expects {expected} argument(s); got {count}", self)

    def __repr__(self) -> str:
        return f"#<primitive {self.name}>"

@dataclass(eq=False)
class Continuation(Procedure):
    kont: Optional['Frame']
    wind: Optional['WindRecord']
    name: Optional[str] = None

    def __repr__(self) -> str:
        return "#<continuation>"

@dataclass(eq=False)
class SpecialForm:
    name: str
    handler: Callable[..., None]
    doc: Optional[str] = None

    def __repr__(self) -> str:
        return f"#<syntax {self.name}>"

@dataclass(eq=False)
class WindRecord:
    """One entered dynamic-wind extent; records form a persistent stack."""
    before: 'Entity'
    after: 'Entity'
    parent: Optional['WindRecord']
    depth: int = field(init=False)

    def __post_init__(self) -> None:
        self.depth = 1 if self.parent is None else self.parent.depth + 1

# ---------- List helpers ----------

def make_list(*items: 'Entity', tail: 'Entity'=NIL) -> 'Entity':
    result = tail
    for item in reversed(items):
        result = Pair(item, result)
    return result

def list_from_iterable(items: 'Iterator[Entity] | List[Entity] | Tuple[Entity, ...]') -> 'Entity':
    return make_list(*items)

def iter_list(lst: 'Entity', who: str="list") -> Iterator['Entity']:
    """Yield the elements of a proper list; raise on an improper tail."""
    cur = lst
    while isinstance(cur, Pair):
        yield cur.car
        cur = cur.cdr

    if cur is not NIL:
        raise WrongTypeError(f"{who}: improper list", lst)

def is_list(obj: 'Entity') -> bool:
    """Proper, finite list check (tortoise and hare)."""
    slow = fast = obj
    while True:
        if fast is NIL:
            return True
        if not isinstance(fast, Pair):
            return False
        fast = fast.cdr
        if fast is NIL:
            return True
        if not isinstance(fast, Pair):
            return False
        fast = fast.cdr
        slow = slow.cdr  # type: ignore[union-attr]
        if fast is slow:
            return False

Entity: TypeAlias = Union[
    Constant,
    Boolean,
    Symbol,
    Pair,
    Char,
    MString,
    Vector,
    Values,
    int,
    float,
    Closure,
    Primitive,
    Continuation,
    SpecialForm,
    Promise,
    HostValue,
    ErrorObject,
    'Environment',
    'InputPort',
    'OutputPort',
]

_ATOMIC_TYPES: Tuple[type, ...] = (
    Constant,
    Boolean,
    Symbol,
    Pair,
    Char,
    MString,
    Vector,
    Values,
    Closure,
    Primitive,
    Continuation,
    SpecialForm,
    Promise,
    HostValue,
    ErrorObject,
)

def is_entity(value: object) -> TypeGuard[Entity]:
    from .ports import InputPort, OutputPort
    from .runtime import Environment

    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, _ATOMIC_TYPES + (Environment, InputPort, OutputPort))

def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

# ---------- Exceptions (keep Gleam* canonical) ----------

class GleamError(Exception):
    """A condition: human-readable message plus a guest-visible payload."""
    kind = "error"

    def __init__(self, message: str, *irritants: Entity):
        super().__init__(message)
        self.message = message
        self.irritants = irritants
        self._payload: Optional[Entity] = None

    @property
    def payload(self) -> Entity:
        if self._payload is None:
            self._payload = ErrorObject(
                kind=Symbol.intern(self.kind),
                message=self.message,
                irritants=make_list(*self.irritants),
                condition=self,
            )
        return self._payload

    @property
    def continuable(self) -> bool:
        return False

    def __str__(self) -> str:
        if not self.irritants:
            return self.message

        from .printer import write_string
        rendered = " ".join(write_string(obj) for obj in self.irritants)
        return f"{self.message} {rendered}"

class UnboundVariableError(GleamError):
    kind = "unbound-variable"

    def __init__(self, symbol: Symbol):
        super().__init__("unbound variable:", symbol)
        self.symbol = symbol

class WrongTypeError(GleamError):
    kind = "wrong-type"

class ArityError(GleamError):
    kind = "wrong-arity"

class NotAProcedureError(GleamError):
    kind = "not-a-procedure"

    def __init__(self, value: Entity):
        super().__init__("procedure call: operator is not a procedure", value)
        self.value = value

class UserRaisedError(GleamError):
    """Raised by guest code through raise, raise-continuable or error."""
    kind = "user-raised"

    def __init__(self, payload: Entity, continuable: bool=False, message: Optional[str]=None):
        if message is None:
            from .printer import write_string
            message = f"non-condition object signalled: {write_string(payload)}"
        super().__init__(message)
        self._payload = payload
        self._continuable = continuable

    @property
    def continuable(self) -> bool:
        return self._continuable

    def __str__(self) -> str:
        payload = self.payload
        if isinstance(payload, ErrorObject):
            from .printer import write_string
            parts = [payload.message]
            parts.extend(write_string(obj) for obj in iter_list(payload.irritants))
            return " ".join(parts)
        return self.message

class UserError(UserRaisedError):
    """Raised by the `error` procedure; the payload is an error object of kind user-error."""
    kind = "user-error"

    def __init__(self, message: str, *irritants: Entity):
        GleamError.__init__(self, message, *irritants)
        self._continuable = False

class ReaderError(GleamError):
    """Syntax error with position info."""
    kind = "syntax-error"

    def __init__(self, message: str, line: Optional[int]=None, column: Optional[int]=None):
        full = f"{message} at line {line}, col {column}" if line is not None else message
        super().__init__(full)
        self.line = line
        self.column = column

class QuitSignal(GleamError):
    """Explicit session termination; guest handlers never see it."""
    kind = "quit"

    def __init__(self, code: int=0):
        super().__init__(f"exit {code}")
        self.code = code

class DivideByZeroError(GleamError):
    kind = "divide-by-zero"

class FileError(GleamError):
    kind = "file-error"

class HostError(GleamError):
    """A Python exception raised by host interop, wrapped as a condition."""
    kind = "host-error"

class SyntaxFormError(GleamError):
    """Malformed special form, or a syntactic keyword used as a value."""
    kind = "ill-formed-special-form"

def ill_formed(form: Entity) -> SyntaxFormError:
    return SyntaxFormError("ill-formed special form:", form)

class InternalError(GleamError):
    kind = "internal-error"

# ---------- Registries ----------

class Builtins:
    primitives: Dict[str, Primitive] = {}
    special_forms: Dict[str, SpecialForm] = {}
    aliases: Dict[str, str] = {}
