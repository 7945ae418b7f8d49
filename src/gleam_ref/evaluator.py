"""
The evaluation machine.

A Machine runs a trampoline over explicit registers instead of recursing on
the Python stack: `expr`/`env` while evaluating, `value` while returning,
`kont` (the pending frames) and `wind` (the dynamic-wind chain). Tail calls
replace registers and push nothing, so iteration depth is bounded only by
memory for non-tail recursion.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .context import ExecutionContext
from .control import (
    ArgFrame, Frame, OperatorFrame, SeqFrame, deliver_condition, throw_to,
)
from .runtime import Environment
from .types import (
    DEFAULT_OBJECT, NIL, VOID,
    Closure, Continuation, Entity, GleamError, InternalError, NotAProcedureError,
    ArityError, Pair, Primitive, SpecialForm, Symbol, SyntaxFormError, WindRecord,
    make_list,
)

logger = logging.getLogger(__name__)

class Machine:
    __slots__ = ("ctx", "expr", "env", "value", "kont", "wind", "evaluating", "active")

    def __init__(self, ctx: ExecutionContext):
        self.ctx = ctx
        self.expr: Entity = VOID
        self.env: Optional[Environment] = None
        self.value: Entity = VOID
        self.kont: Optional[Frame] = None
        self.wind: Optional[WindRecord] = None
        self.evaluating = False
        self.active = False

    # ---------- Entry points ----------

    def run(self, expr: Entity, env: Environment) -> Entity:
        """Evaluate expr to completion from an empty continuation."""
        self.reset()
        self.eval(expr, env)
        return self.loop()

    def run_apply(self, proc: Entity, args: List[Entity]) -> Entity:
        self.reset()
        self.apply(proc, args)
        return self.loop()

    def reset(self) -> None:
        self.kont = None
        self.wind = None
        self.value = VOID

    # ---------- Registers ----------

    def eval(self, expr: Entity, env: Environment) -> None:
        self.expr = expr
        self.env = env
        self.evaluating = True

    def ret(self, value: Entity) -> None:
        self.value = value
        self.evaluating = False

    # ---------- Trampoline ----------

    def loop(self) -> Entity:
        self.active = True
        try:
            while True:
                try:
                    while True:
                        if self.evaluating:
                            self.step()
                            continue

                        frame = self.kont
                        if frame is None:
                            return self.value
                        self.kont = frame.next
                        frame.resume(self, self.value)
                except GleamError as exc:
                    if not deliver_condition(self, exc):
                        raise
                except RecursionError as exc:
                    err = InternalError("maximum recursion depth exceeded")
                    if not deliver_condition(self, err):
                        raise err from exc
        finally:
            self.active = False

    def step(self) -> None:
        expr = self.expr
        env = self.env
        assert env is not None

        if self.ctx.trace_enabled:
            self.ctx.emit_trace(expr, env.depth())

        if isinstance(expr, Symbol):
            self.ret(self.lookup(expr, env))
            return

        if not isinstance(expr, Pair):
            self.ret(expr)
            return

        head = expr.car
        if isinstance(head, Symbol):
            op = env.lookup(head)
            if isinstance(op, SpecialForm):
                op.handler(self, expr.cdr, env)
                return
            self.apply_operands(op, [], expr.cdr, env)
        elif isinstance(head, SpecialForm):
            head.handler(self, expr.cdr, env)
        elif isinstance(head, Pair):
            self.kont = OperatorFrame(expr.cdr, env, self.kont)
            self.eval(head, env)
        else:
            self.apply_operands(head, [], expr.cdr, env)

    def lookup(self, sym: Symbol, env: Environment) -> Entity:
        value = env.lookup(sym)
        if isinstance(value, SpecialForm):
            raise SyntaxFormError("syntactic keyword may not be used as an expression:", sym)
        return value

    # ---------- Application ----------

    def apply_operands(self, op: Entity, args: List[Entity], rest: Entity, env: Environment) -> None:
        """Evaluate the remaining operands left to right, then apply op.

        Symbols and literals are evaluated in place; a compound operand
        suspends the application in an ArgFrame.
        """
        while isinstance(rest, Pair):
            operand = rest.car
            if isinstance(operand, Symbol):
                args.append(self.lookup(operand, env))
            elif isinstance(operand, Pair):
                self.kont = ArgFrame(op, tuple(args), rest.cdr, env, self.kont)
                self.eval(operand, env)
                return
            else:
                args.append(operand)
            rest = rest.cdr

        if rest is not NIL:
            raise SyntaxFormError("combination must be a proper list")

        self.apply(op, args)

    def apply(self, proc: Entity, args: List[Entity]) -> None:
        if isinstance(proc, Closure):
            self.eval_body(proc.body, bind_arguments(proc, args))
        elif isinstance(proc, Primitive):
            proc.check_arity(len(args))
            if proc.control:
                proc.fn(self, *args)
            else:
                result = proc.fn(*args)
                self.ret(VOID if result is None else result)
        elif isinstance(proc, Continuation):
            throw_to(self, proc, args)
        else:
            raise NotAProcedureError(proc)

    # ---------- Sequences ----------

    def eval_body(self, body: tuple, env: Environment) -> None:
        if not body:
            self.ret(VOID)
            return
        self.eval_sequence(body, 0, env)

    def eval_sequence(self, body: tuple, index: int, env: Environment) -> None:
        if index < len(body) - 1:
            self.kont = SeqFrame(body, index + 1, env, self.kont)
        self.eval(body[index], env)

def bind_arguments(proc: Closure, args: List[Entity]) -> Environment:
    params = proc.params
    count = len(args)
    n_required = len(params.required)
    n_optional = len(params.optional)

    if count < n_required or (params.rest is None and count > n_required + n_optional):
        raise ArityError(
            f"{proc.name or 'anonymous procedure'}: expects {params.describe()} argument(s); got {count}",
            proc,
        )

    env = Environment(proc.env)
    for sym, value in zip(params.required, args):
        env.define(sym, value)

    for offset, sym in enumerate(params.optional):
        index = n_required + offset
        env.define(sym, args[index] if index < count else DEFAULT_OBJECT)

    if params.rest is not None:
        env.define(params.rest, make_list(*args[n_required + n_optional:]))

    return env
