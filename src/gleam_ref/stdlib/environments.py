"""First-class environments and eval."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..runtime import Environment, SystemEnvironment, expect, register_primitive
from ..types import (
    FALSE, Boolean, Entity, Symbol, UnboundVariableError, list_from_iterable, make_boolean,
)

if TYPE_CHECKING:
    from ..evaluator import Machine

def session_environment(m: Machine) -> Environment:
    interp = m.ctx.interpreter
    if interp is not None:
        return interp.session_env
    return SystemEnvironment.get_interaction_env()

def _environment(who: str, env: Entity) -> Environment:
    expect(who, env, Environment, "an environment")
    return env  # type: ignore[return-value]

def _symbol(who: str, sym: Entity) -> Symbol:
    expect(who, sym, Symbol, "a symbol")
    return sym  # type: ignore[return-value]

@register_primitive("eval", min_args=1, max_args=2, control=True, doc="(eval expr [env]): evaluate expr in env (default: the session environment).")
def std_eval(m: Machine, expr: Entity, env: Entity=None) -> None:  # type: ignore[assignment]
    target = session_environment(m) if env is None else _environment("eval", env)
    m.eval(expr, target)

@register_primitive("null-environment", max_args=1, doc="(null-environment [version]): special forms only.")
def std_null_environment(version: Entity=5) -> Environment:
    return SystemEnvironment.get_null_env()

@register_primitive("scheme-report-environment", max_args=1, doc="(scheme-report-environment [version]): special forms and standard procedures.")
def std_scheme_report_environment(version: Entity=5) -> Environment:
    return SystemEnvironment.get_report_env()

@register_primitive("interaction-environment", arity=0, control=True, doc="(interaction-environment): the session's top-level environment.")
def std_interaction_environment(m: Machine) -> None:
    m.ret(session_environment(m))

@register_primitive("system-global-environment", arity=0)
def std_system_global_environment() -> Environment:
    return SystemEnvironment.get_interaction_env()

@register_primitive("make-environment", max_args=1, control=True, doc="(make-environment [parent]): a new empty frame whose parent defaults to the session environment.")
def std_make_environment(m: Machine, parent: Entity=None) -> None:  # type: ignore[assignment]
    base = session_environment(m) if parent is None else _environment("make-environment", parent)
    m.ret(Environment(base))

@register_primitive("environment?", arity=1)
def std_is_environment(x: Entity) -> Boolean:
    return make_boolean(isinstance(x, Environment))

@register_primitive("environment-bound?", arity=2)
def std_environment_bound(env: Entity, sym: Entity) -> Boolean:
    return make_boolean(_environment("environment-bound?", env).is_bound(_symbol("environment-bound?", sym)))

@register_primitive("environment-lookup", arity=2)
def std_environment_lookup(env: Entity, sym: Entity) -> Entity:
    return _environment("environment-lookup", env).lookup(_symbol("environment-lookup", sym))

@register_primitive("environment-assign!", arity=3)
def std_environment_assign(env: Entity, sym: Entity, value: Entity) -> None:
    loc = _environment("environment-assign!", env).get_location_or_none(_symbol("environment-assign!", sym))
    if loc is None:
        raise UnboundVariableError(sym)  # type: ignore[arg-type]
    loc.value = value

@register_primitive("environment-define", arity=3)
def std_environment_define(env: Entity, sym: Entity, value: Entity) -> None:
    _environment("environment-define", env).define(_symbol("environment-define", sym), value)

@register_primitive("environment-bound-names", arity=1)
def std_environment_bound_names(env: Entity) -> Entity:
    return list_from_iterable(_environment("environment-bound-names", env).symbols())

@register_primitive("environment-parent", arity=1)
def std_environment_parent(env: Entity) -> Entity:
    parent = _environment("environment-parent", env).parent
    return FALSE if parent is None else parent
