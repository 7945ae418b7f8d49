"""Session knobs reachable from guest code: logging verbosity and tracing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..runtime import expect_integer, register_primitive
from ..types import VOID, Entity, WrongTypeError

if TYPE_CHECKING:
    from ..evaluator import Machine

PACKAGE_LOGGER = "gleam_ref"

VERBOSITY_LEVELS = (
    logging.CRITICAL,
    logging.ERROR,
    logging.WARNING,
    logging.INFO,
    logging.DEBUG,
)

def set_verbosity(level: int) -> None:
    if not 0 <= level < len(VERBOSITY_LEVELS):
        raise WrongTypeError(f"set-verbosity!: level must be between 0 and {len(VERBOSITY_LEVELS) - 1}", level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(VERBOSITY_LEVELS[level])

def current_verbosity() -> int:
    effective = logging.getLogger(PACKAGE_LOGGER).getEffectiveLevel()
    for index in range(len(VERBOSITY_LEVELS) - 1, -1, -1):
        if effective <= VERBOSITY_LEVELS[index]:
            return index
    return 0

@register_primitive("set-verbosity!", arity=1, doc="(set-verbosity! n): 0 is quiet, 4 logs every loaded form.")
def std_set_verbosity(level: Entity) -> None:
    set_verbosity(expect_integer("set-verbosity!", level))

@register_primitive("verbosity", arity=0)
def std_verbosity() -> int:
    return current_verbosity()

@register_primitive("trace-on!", arity=0, control=True, doc="(trace-on!): report every evaluation step.")
def std_trace_on(m: Machine) -> None:
    m.ctx.trace_enabled = True
    m.ret(VOID)

@register_primitive("trace-off!", arity=0, control=True)
def std_trace_off(m: Machine) -> None:
    m.ctx.trace_enabled = False
    m.ret(VOID)
