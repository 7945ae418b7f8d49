"""
Pending-work frames and the continuation engine.

The machine's continuation is a linked list of frames. Frames are never
mutated after construction, so capturing a continuation is a reference copy
and a captured chain can be resumed any number of times.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from .runtime import Environment, Location
from .types import (
    EOF, FALSE, NIL, TRUE, VOID,
    Closure, Continuation, Entity, GleamError, Pair, Promise, QuitSignal, Symbol,
    Values, WindRecord, WrongTypeError, ill_formed, iter_list,
)
from .utils import is_eqv, is_true

if TYPE_CHECKING:
    from .evaluator import Machine
    from .reader import Reader

logger = logging.getLogger(__name__)

ELSE = Symbol.intern("else")
ARROW = Symbol.intern("=>")

class Frame:
    __slots__ = ("next",)

    def __init__(self, next: Optional[Frame]):
        self.next = next

    def resume(self, m: Machine, value: Entity) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"#<{type(self).__name__}>"

# ---------- Application ----------

class OperatorFrame(Frame):
    """Waiting for a compound operator; operands are evaluated afterwards."""
    __slots__ = ("operands", "env")

    def __init__(self, operands: Entity, env: Environment, next: Optional[Frame]):
        super().__init__(next)
        self.operands = operands
        self.env = env

    def resume(self, m: Machine, value: Entity) -> None:
        m.apply_operands(value, [], self.operands, self.env)

class ArgFrame(Frame):
    __slots__ = ("op", "args", "rest", "env")

    def __init__(self, op: Entity, args: Tuple[Entity, ...], rest: Entity, env: Environment, next: Optional[Frame]):
        super().__init__(next)
        self.op = op
        self.args = args
        self.rest = rest
        self.env = env

    def resume(self, m: Machine, value: Entity) -> None:
        args = list(self.args)
        args.append(value)
        m.apply_operands(self.op, args, self.rest, self.env)

class ApplyToValueFrame(Frame):
    """Receives a procedure and applies it to a value computed earlier (cond/case `=>`)."""
    __slots__ = ("arg",)

    def __init__(self, arg: Entity, next: Optional[Frame]):
        super().__init__(next)
        self.arg = arg

    def resume(self, m: Machine, value: Entity) -> None:
        m.apply(value, [self.arg])

class CallWithValuesFrame(Frame):
    __slots__ = ("consumer",)

    def __init__(self, consumer: Entity, next: Optional[Frame]):
        super().__init__(next)
        self.consumer = consumer

    def resume(self, m: Machine, value: Entity) -> None:
        if isinstance(value, Values):
            m.apply(self.consumer, list(value.items))
        else:
            m.apply(self.consumer, [value])

# ---------- Sequencing and binding ----------

class SeqFrame(Frame):
    __slots__ = ("body", "index", "env")

    def __init__(self, body: Tuple[Entity, ...], index: int, env: Environment, next: Optional[Frame]):
        super().__init__(next)
        self.body = body
        self.index = index
        self.env = env

    def resume(self, m: Machine, value: Entity) -> None:
        m.eval_sequence(self.body, self.index, self.env)

class IfFrame(Frame):
    __slots__ = ("consequent", "alternative", "env")

    def __init__(self, consequent: Entity, alternative: Optional[Entity], env: Environment, next: Optional[Frame]):
        super().__init__(next)
        self.consequent = consequent
        self.alternative = alternative
        self.env = env

    def resume(self, m: Machine, value: Entity) -> None:
        if is_true(value):
            m.eval(self.consequent, self.env)
        elif self.alternative is not None:
            m.eval(self.alternative, self.env)
        else:
            m.ret(VOID)

class DefineFrame(Frame):
    __slots__ = ("symbol", "env")

    def __init__(self, symbol: Symbol, env: Environment, next: Optional[Frame]):
        super().__init__(next)
        self.symbol = symbol
        self.env = env

    def resume(self, m: Machine, value: Entity) -> None:
        if isinstance(value, Closure) and value.name is None:
            value.name = self.symbol.name
        self.env.define(self.symbol, value)
        m.ret(VOID)

class AssignFrame(Frame):
    __slots__ = ("location",)

    def __init__(self, location: Location, next: Optional[Frame]):
        super().__init__(next)
        self.location = location

    def resume(self, m: Machine, value: Entity) -> None:
        self.location.value = value
        m.ret(VOID)

class SequentialBindFrame(Frame):
    """let* (a fresh frame per binding) and letrec/letrec* (one shared frame)."""
    __slots__ = ("names", "inits", "index", "env", "body", "nest")

    def __init__(
        self,
        names: Tuple[Symbol, ...],
        inits: Tuple[Entity, ...],
        index: int,
        env: Environment,
        body: Tuple[Entity, ...],
        nest: bool,
        next: Optional[Frame],
    ):
        super().__init__(next)
        self.names = names
        self.inits = inits
        self.index = index
        self.env = env
        self.body = body
        self.nest = nest

    def resume(self, m: Machine, value: Entity) -> None:
        name = self.names[self.index]
        if isinstance(value, Closure) and value.name is None:
            value.name = name.name

        env = Environment(self.env) if self.nest else self.env
        env.define(name, value)
        bind_sequentially(m, self.names, self.inits, self.index + 1, env, self.body, self.nest)

def bind_sequentially(
    m: Machine,
    names: Tuple[Symbol, ...],
    inits: Tuple[Entity, ...],
    index: int,
    env: Environment,
    body: Tuple[Entity, ...],
    nest: bool,
) -> None:
    if index >= len(names):
        m.eval_body(body, env)
        return

    m.kont = SequentialBindFrame(names, inits, index, env, body, nest, m.kont)
    m.eval(inits[index], env)

# ---------- Conditionals ----------

class CondFrame(Frame):
    """Waiting for a clause test; `unmatched` is re-raised when no clause fires (guard)."""
    __slots__ = ("clause", "rest", "env", "unmatched")

    def __init__(self, clause: Pair, rest: Entity, env: Environment, unmatched: Optional[GleamError], next: Optional[Frame]):
        super().__init__(next)
        self.clause = clause
        self.rest = rest
        self.env = env
        self.unmatched = unmatched

    def resume(self, m: Machine, value: Entity) -> None:
        if not is_true(value):
            start_cond(m, self.rest, self.env, self.unmatched)
            return

        body = self.clause.cdr
        if body is NIL:
            m.ret(value)
        elif isinstance(body, Pair) and body.car is ARROW:
            m.kont = ApplyToValueFrame(value, m.kont)
            m.eval(clause_receiver(body), self.env)
        else:
            m.eval_body(tuple(iter_list(body, "cond")), self.env)

def clause_receiver(body: Pair) -> Entity:
    if not isinstance(body.cdr, Pair) or body.cdr.cdr is not NIL:
        raise ill_formed(body)
    return body.cdr.car

def start_cond(m: Machine, clauses: Entity, env: Environment, unmatched: Optional[GleamError]=None) -> None:
    if not isinstance(clauses, Pair):
        if unmatched is not None:
            raise unmatched
        m.ret(VOID)
        return

    clause = clauses.car
    if not isinstance(clause, Pair):
        raise ill_formed(clause)

    if clause.car is ELSE:
        m.eval_body(tuple(iter_list(clause.cdr, "cond")), env)
        return

    m.kont = CondFrame(clause, clauses.cdr, env, unmatched, m.kont)
    m.eval(clause.car, env)

class CaseFrame(Frame):
    __slots__ = ("clauses", "env")

    def __init__(self, clauses: Entity, env: Environment, next: Optional[Frame]):
        super().__init__(next)
        self.clauses = clauses
        self.env = env

    def resume(self, m: Machine, value: Entity) -> None:
        for clause in iter_list(self.clauses, "case"):
            if not isinstance(clause, Pair):
                raise ill_formed(clause)

            data = clause.car
            if data is ELSE or any(is_eqv(value, datum) for datum in iter_list(data, "case")):
                body = clause.cdr
                if isinstance(body, Pair) and body.car is ARROW:
                    m.kont = ApplyToValueFrame(value, m.kont)
                    m.eval(clause_receiver(body), self.env)
                else:
                    m.eval_body(tuple(iter_list(body, "case")), self.env)
                return

        m.ret(VOID)

class AndFrame(Frame):
    __slots__ = ("rest", "env")

    def __init__(self, rest: Entity, env: Environment, next: Optional[Frame]):
        super().__init__(next)
        self.rest = rest
        self.env = env

    def resume(self, m: Machine, value: Entity) -> None:
        if not is_true(value):
            m.ret(value)
        else:
            eval_and(m, self.rest, self.env)

def eval_and(m: Machine, rest: Entity, env: Environment) -> None:
    if not isinstance(rest, Pair):
        m.ret(TRUE)
        return
    if rest.cdr is not NIL:
        m.kont = AndFrame(rest.cdr, env, m.kont)
    m.eval(rest.car, env)

class OrFrame(Frame):
    __slots__ = ("rest", "env")

    def __init__(self, rest: Entity, env: Environment, next: Optional[Frame]):
        super().__init__(next)
        self.rest = rest
        self.env = env

    def resume(self, m: Machine, value: Entity) -> None:
        if is_true(value):
            m.ret(value)
        else:
            eval_or(m, self.rest, self.env)

def eval_or(m: Machine, rest: Entity, env: Environment) -> None:
    if not isinstance(rest, Pair):
        m.ret(FALSE)
        return
    if rest.cdr is not NIL:
        m.kont = OrFrame(rest.cdr, env, m.kont)
    m.eval(rest.car, env)

class WhenFrame(Frame):
    """when / unless: `negate` selects unless."""
    __slots__ = ("body", "env", "negate")

    def __init__(self, body: Tuple[Entity, ...], env: Environment, negate: bool, next: Optional[Frame]):
        super().__init__(next)
        self.body = body
        self.env = env
        self.negate = negate

    def resume(self, m: Machine, value: Entity) -> None:
        if is_true(value) != self.negate:
            m.eval_body(self.body, self.env)
        else:
            m.ret(VOID)

# ---------- Environments, promises, loading ----------

class InEnvironmentFrame(Frame):
    __slots__ = ("body",)

    def __init__(self, body: Tuple[Entity, ...], next: Optional[Frame]):
        super().__init__(next)
        self.body = body

    def resume(self, m: Machine, value: Entity) -> None:
        if not isinstance(value, Environment):
            raise WrongTypeError("in-environment: wrong argument type, should be an environment", value)
        m.eval_body(self.body, value)

class PromiseFrame(Frame):
    __slots__ = ("promise",)

    def __init__(self, promise: Promise, next: Optional[Frame]):
        super().__init__(next)
        self.promise = promise

    def resume(self, m: Machine, value: Entity) -> None:
        promise = self.promise
        # a promise forced again while being forced keeps its first value
        if not promise.done:
            promise.done = True
            promise.value = value
            promise.expr = VOID
            promise.env = None
        m.ret(promise.value)

class LoadFrame(Frame):
    """Evaluates the forms of a reader one after the other, inside the trampoline."""
    __slots__ = ("reader", "env", "name")

    def __init__(self, reader: Reader, env: Environment, name: str, next: Optional[Frame]):
        super().__init__(next)
        self.reader = reader
        self.env = env
        self.name = name

    def resume(self, m: Machine, value: Entity) -> None:
        load_next(m, self.reader, self.env, self.name)

def load_next(m: Machine, reader: Reader, env: Environment, name: str) -> None:
    datum = reader.read()
    if datum is EOF:
        logger.debug("finished loading %s", name)
        reader.port.close()
        m.ret(VOID)
        return

    logger.debug("load %s: %r", name, datum)
    m.kont = LoadFrame(reader, env, name, m.kont)
    m.eval(datum, env)

# ---------- Dynamic wind and continuation jumps ----------

class DeliverFrame(Frame):
    """Last step of a jump: install the target wind chain and hand over the value."""
    __slots__ = ("value", "wind")

    def __init__(self, value: Entity, wind: Optional[WindRecord], next: Optional[Frame]):
        super().__init__(next)
        self.value = value
        self.wind = wind

    def resume(self, m: Machine, value: Entity) -> None:
        m.wind = self.wind
        m.ret(self.value)

class ThunkFrame(Frame):
    """Runs one before/after thunk of a wind transition with the extent outside it installed."""
    __slots__ = ("thunk", "wind")

    def __init__(self, thunk: Entity, wind: Optional[WindRecord], next: Optional[Frame]):
        super().__init__(next)
        self.thunk = thunk
        self.wind = wind

    def resume(self, m: Machine, value: Entity) -> None:
        m.wind = self.wind
        m.apply(self.thunk, [])

class WindEnterFrame(Frame):
    __slots__ = ("before", "thunk", "after")

    def __init__(self, before: Entity, thunk: Entity, after: Entity, next: Optional[Frame]):
        super().__init__(next)
        self.before = before
        self.thunk = thunk
        self.after = after

    def resume(self, m: Machine, value: Entity) -> None:
        record = WindRecord(self.before, self.after, m.wind)
        m.wind = record
        m.kont = WindExitFrame(record, m.kont)
        m.apply(self.thunk, [])

class WindExitFrame(Frame):
    __slots__ = ("record",)

    def __init__(self, record: WindRecord, next: Optional[Frame]):
        super().__init__(next)
        self.record = record

    def resume(self, m: Machine, value: Entity) -> None:
        m.wind = self.record.parent
        m.kont = DeliverFrame(value, self.record.parent, m.kont)
        m.apply(self.record.after, [])

def _wind_depth(rec: Optional[WindRecord]) -> int:
    return 0 if rec is None else rec.depth

def common_ancestor(a: Optional[WindRecord], b: Optional[WindRecord]) -> Optional[WindRecord]:
    # Outside every extent counts as depth 0.
    while a is not None and a.depth > _wind_depth(b):
        a = a.parent
    while b is not None and b.depth > _wind_depth(a):
        b = b.parent
    # Equal depths from here, so both sides reach None together.
    while a is not None and b is not None and a is not b:
        a, b = a.parent, b.parent
    return a

def wind_path(source: Optional[WindRecord], target: Optional[WindRecord], final: Frame) -> Frame:
    """Frames that run the after thunks of exited extents (innermost first), then
    the before thunks of entered extents (outermost first), then `final`."""
    common = common_ancestor(source, target)

    steps: List[Tuple[Entity, Optional[WindRecord]]] = []
    rec = source
    while rec is not common:
        assert rec is not None
        steps.append((rec.after, rec.parent))
        rec = rec.parent

    entered: List[WindRecord] = []
    rec = target
    while rec is not common:
        assert rec is not None
        entered.append(rec)
        rec = rec.parent
    for rec in reversed(entered):
        steps.append((rec.before, rec.parent))

    frame = final
    for thunk, wind in reversed(steps):
        frame = ThunkFrame(thunk, wind, frame)
    return frame

def throw_to(m: Machine, k: Continuation, args: List[Entity]) -> None:
    """Abandon the current frames and continue with k's, running wind transitions on the way."""
    value: Entity = args[0] if len(args) == 1 else Values(tuple(args))
    m.kont = wind_path(m.wind, k.wind, DeliverFrame(value, k.wind, k.kont))
    m.ret(VOID)

# ---------- Condition handlers ----------

class GuardFrame(Frame):
    """Boundary installed by `guard`; normal returns pass straight through."""
    __slots__ = ("var", "clauses", "env", "wind")

    def __init__(self, var: Symbol, clauses: Entity, env: Environment, wind: Optional[WindRecord], next: Optional[Frame]):
        super().__init__(next)
        self.var = var
        self.clauses = clauses
        self.env = env
        self.wind = wind

    def resume(self, m: Machine, value: Entity) -> None:
        m.ret(value)

class GuardDispatchFrame(Frame):
    __slots__ = ("guard", "payload", "condition")

    def __init__(self, guard: GuardFrame, payload: Entity, condition: GleamError, next: Optional[Frame]):
        super().__init__(next)
        self.guard = guard
        self.payload = payload
        self.condition = condition

    def resume(self, m: Machine, value: Entity) -> None:
        guard = self.guard
        m.wind = guard.wind
        env = Environment(guard.env)
        env.define(guard.var, self.payload)
        start_cond(m, guard.clauses, env, unmatched=self.condition)

class HandlerFrame(Frame):
    """Boundary installed by with-exception-handler."""
    __slots__ = ("handler",)

    def __init__(self, handler: Entity, next: Optional[Frame]):
        super().__init__(next)
        self.handler = handler

    def resume(self, m: Machine, value: Entity) -> None:
        m.ret(value)

class HandlerActiveFrame(Frame):
    """Sits above a running handler: conditions it raises skip to `outer`."""
    __slots__ = ("outer", "condition")

    def __init__(self, outer: Optional[Frame], condition: GleamError, next: Optional[Frame]):
        super().__init__(next)
        self.outer = outer
        self.condition = condition

    def resume(self, m: Machine, value: Entity) -> None:
        if self.condition.continuable:
            m.ret(value)
            return

        m.kont = self
        raise GleamError("exception handler returned from non-continuable raise", self.condition.payload)

def deliver_condition(m: Machine, exc: GleamError) -> bool:
    """Resume in the nearest guard or exception handler; False when there is none."""
    if isinstance(exc, QuitSignal):
        return False

    frame = m.kont
    while frame is not None:
        if isinstance(frame, HandlerActiveFrame):
            frame = frame.outer
            continue

        if isinstance(frame, GuardFrame):
            logger.debug("condition %s caught by guard", exc.kind)
            dispatch = GuardDispatchFrame(frame, exc.payload, exc, frame.next)
            m.kont = wind_path(m.wind, frame.wind, dispatch)
            m.ret(VOID)
            return True

        if isinstance(frame, HandlerFrame):
            logger.debug("condition %s delivered to handler", exc.kind)
            active = HandlerActiveFrame(frame.next, exc, m.kont)
            m.kont = ApplyToValueFrame(exc.payload, active)
            m.ret(frame.handler)
            return True

        frame = frame.next

    return False
