"""Control features: continuations, dynamic-wind, multiple values, promises, conditions."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from ..control import (
    CallWithValuesFrame, HandlerFrame, PromiseFrame, ThunkFrame, WindEnterFrame, wind_path,
)
from ..printer import display_string, report_string
from ..runtime import expect, expect_integer, register_primitive
from ..types import (
    FALSE, NIL, TRUE, VOID,
    Boolean, Continuation, Entity, ErrorObject, MString, Procedure, Promise, QuitSignal,
    Symbol, UserError, UserRaisedError, Values, WrongTypeError, iter_list, make_boolean,
)

if TYPE_CHECKING:
    from ..evaluator import Machine

# ---------- Application and continuations ----------

@register_primitive("apply", min_args=1, control=True, doc="(apply proc arg... list): call proc with the args followed by the list's elements.")
def std_apply(m: Machine, proc: Entity, *args: Entity) -> None:
    if not args:
        m.apply(proc, [])
        return
    spread = list(args[:-1])
    spread.extend(iter_list(args[-1], "apply"))
    m.apply(proc, spread)

@register_primitive(
    "call-with-current-continuation",
    arity=1,
    control=True,
    aliases=("call/cc",),
    doc="(call/cc proc): call proc with the current continuation, which can be invoked any number of times.",
)
def std_call_cc(m: Machine, proc: Entity) -> None:
    m.apply(proc, [Continuation(m.kont, m.wind)])

@register_primitive("within-continuation", arity=2, control=True, doc="(within-continuation k thunk): call thunk with k as its continuation.")
def std_within_continuation(m: Machine, k: Entity, thunk: Entity) -> None:
    expect("within-continuation", k, Continuation, "a continuation")
    m.kont = wind_path(m.wind, k.wind, ThunkFrame(thunk, k.wind, k.kont))  # type: ignore[union-attr]
    m.ret(VOID)

@register_primitive("continuation?", arity=1)
def std_is_continuation(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Continuation))

@register_primitive(
    "dynamic-wind",
    arity=3,
    control=True,
    doc="(dynamic-wind before thunk after): before runs on every entry into thunk's extent, after on every exit.",
)
def std_dynamic_wind(m: Machine, before: Entity, thunk: Entity, after: Entity) -> None:
    m.kont = WindEnterFrame(before, thunk, after, m.kont)
    m.apply(before, [])

# ---------- Multiple values ----------

@register_primitive("values", doc="(values obj...): deliver any number of values to the continuation.")
def std_values(*args: Entity) -> Entity:
    if len(args) == 1:
        return args[0]
    return Values(tuple(args))

@register_primitive("call-with-values", arity=2, control=True)
def std_call_with_values(m: Machine, producer: Entity, consumer: Entity) -> None:
    m.kont = CallWithValuesFrame(consumer, m.kont)
    m.apply(producer, [])

# ---------- Promises ----------

@register_primitive("force", arity=1, control=True, doc="(force promise): value of the promise, computed at most once.")
def std_force(m: Machine, obj: Entity) -> None:
    if not isinstance(obj, Promise):
        m.ret(obj)
        return
    if obj.done:
        m.ret(obj.value)
        return

    assert obj.env is not None
    m.kont = PromiseFrame(obj, m.kont)
    m.eval(obj.expr, obj.env)

@register_primitive("make-promise", arity=1)
def std_make_promise(value: Entity) -> Promise:
    if isinstance(value, Promise):
        return value
    return Promise(expr=value, env=None, done=True, value=value)

# ---------- Conditions ----------

def _raise(obj: Entity, continuable: bool) -> None:
    # re-raising a caught condition keeps its original kind
    if isinstance(obj, ErrorObject) and obj.condition is not None and not continuable:
        raise obj.condition
    raise UserRaisedError(obj, continuable=continuable)

@register_primitive("raise", arity=1, doc="(raise obj): signal obj to the nearest handler; handlers may not return.")
def std_raise(obj: Entity) -> None:
    _raise(obj, continuable=False)

@register_primitive("raise-continuable", arity=1, doc="(raise-continuable obj): signal obj; the handler's value is returned.")
def std_raise_continuable(obj: Entity) -> None:
    _raise(obj, continuable=True)

@register_primitive("error", min_args=1, doc="(error message irritant...): signal a user error.")
def std_error(message: Entity, *irritants: Entity) -> None:
    text = message.value if isinstance(message, MString) else display_string(message)
    raise UserError(text, *irritants)

@register_primitive(
    "with-exception-handler",
    arity=2,
    control=True,
    doc="(with-exception-handler handler thunk): call thunk with handler installed for conditions it raises.",
)
def std_with_exception_handler(m: Machine, handler: Entity, thunk: Entity) -> None:
    if not isinstance(handler, Procedure):
        raise WrongTypeError("with-exception-handler: wrong argument type, should be a procedure", handler)
    m.kont = HandlerFrame(handler, m.kont)
    m.apply(thunk, [])

def _error_object(who: str, obj: Entity) -> ErrorObject:
    expect(who, obj, ErrorObject, "a condition object")
    return obj  # type: ignore[return-value]

@register_primitive("error-object?", arity=1, aliases=("condition?", "error?"))
def std_is_error_object(obj: Entity) -> Boolean:
    return make_boolean(isinstance(obj, ErrorObject))

@register_primitive("error-object-message", arity=1, aliases=("error-message",))
def std_error_object_message(obj: Entity) -> MString:
    return MString(_error_object("error-object-message", obj).message)

@register_primitive("error-object-irritants", arity=1, aliases=("error-irritants",))
def std_error_object_irritants(obj: Entity) -> Entity:
    return _error_object("error-object-irritants", obj).irritants

@register_primitive("condition/report-string", arity=1, doc="(condition/report-string c): message and irritants as one string.")
def std_condition_report_string(obj: Entity) -> MString:
    return MString(report_string(_error_object("condition/report-string", obj)))

@register_primitive("condition-kind", arity=1, doc="(condition-kind c): symbol naming the kind of condition, e.g. unbound-variable.")
def std_condition_kind(obj: Entity) -> Symbol:
    return _error_object("condition-kind", obj).kind

@register_primitive("read-error?", arity=1)
def std_is_read_error(obj: Entity) -> Boolean:
    return make_boolean(isinstance(obj, ErrorObject) and obj.kind.name == "syntax-error")

@register_primitive("file-error?", arity=1)
def std_is_file_error(obj: Entity) -> Boolean:
    return make_boolean(isinstance(obj, ErrorObject) and obj.kind.name == "file-error")

# ---------- System ----------

@register_primitive("exit", max_args=1, aliases=("%exit", "emergency-exit"), doc="(exit [code]): end the session.")
def std_exit(code: Entity=NIL) -> None:
    if code is NIL or code is TRUE:
        raise QuitSignal(0)
    if code is FALSE:
        raise QuitSignal(1)
    raise QuitSignal(expect_integer("exit", code))

@register_primitive("runtime", arity=0)
def std_runtime() -> float:
    return time.process_time()

@register_primitive("real-time", arity=0)
def std_real_time() -> float:
    return time.time() * 1000.0

@register_primitive("void", doc="(void arg...): ignore the arguments, return no value.")
def std_void(*args: Entity) -> None:
    return None
