"""
Sessions.

An Interpreter owns a private session environment (a child of the shared
interaction environment), an ExecutionContext and a Machine. One
interpreter is kept per thread; `new_interpreter()` creates an independent
one. The Scheme prelude is loaded into the report environment the first
time any session is created.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, List, Optional, TextIO, Union

from .bridge import wrap
from .context import ExecutionContext
from .evaluator import Machine
from .ports import InputPort
from .reader import Reader
from .runtime import ERROBJ, Environment, SystemEnvironment
from .types import EOF, VOID, Entity, GleamError, QuitSignal, Symbol
from .utils import trace_enabled_by_default

logger = logging.getLogger(__name__)

BOOTSTRAP_PATH = Path(__file__).with_name("bootstrap.scm")

Source = Union[str, InputPort, TextIO]

_bootstrap_lock = threading.Lock()
_bootstrapped = False
_local = threading.local()

def _as_port(source: Source, name: str="<string>") -> InputPort:
    if isinstance(source, InputPort):
        return source
    if isinstance(source, str):
        return InputPort.from_string(source, name=name)
    return InputPort(source, name=getattr(source, "name", "<stream>"))

def bootstrap() -> None:
    """Load the prelude into the report environment, once per process."""
    global _bootstrapped

    if _bootstrapped:
        return

    with _bootstrap_lock:
        if _bootstrapped:
            return

        report = SystemEnvironment.get_report_env()
        machine = Machine(ExecutionContext())
        text = BOOTSTRAP_PATH.read_text(encoding="utf-8")
        count = 0
        for form in Reader(text, name=BOOTSTRAP_PATH.name):
            machine.run(form, report)
            count += 1

        _bootstrapped = True
        logger.debug("bootstrap: loaded %d forms from %s", count, BOOTSTRAP_PATH.name)

class Interpreter:
    def __init__(self, ctx: Optional[ExecutionContext]=None):
        SystemEnvironment.create()
        bootstrap()

        if ctx is None:
            ctx = ExecutionContext(trace_enabled=trace_enabled_by_default())
        ctx.interpreter = self
        self.ctx = ctx
        self.session_env = Environment(SystemEnvironment.get_interaction_env(), name="session")
        self.machine = Machine(ctx)
        logger.debug("session created (trace=%s)", ctx.trace_enabled)

    # ---------- Evaluation ----------

    def _runner(self) -> Machine:
        # A host callback re-entering the interpreter mid-evaluation gets its own machine.
        if self.machine.active:
            return Machine(self.ctx)
        return self.machine

    def execute(self, expr: Entity, env: Optional[Environment]=None) -> Entity:
        """Evaluate an already-read datum."""
        try:
            return self._runner().run(expr, env or self.session_env)
        except QuitSignal:
            raise
        except GleamError as exc:
            self.record_error(exc)
            raise

    def eval(self, expression: Union[Entity, Source], env: Optional[Environment]=None) -> Entity:
        """Evaluate a datum, or read exactly one datum from text/a stream and evaluate it.

        Returns EOF when the source holds no datum.
        """
        if isinstance(expression, (str, InputPort)) or hasattr(expression, "read"):
            expression = Reader(_as_port(expression)).read()  # type: ignore[arg-type]
            if expression is EOF:
                return EOF
        return self.execute(expression, env)  # type: ignore[arg-type]

    def eval_string(self, text: str, env: Optional[Environment]=None) -> Entity:
        """Evaluate every datum in text; the value of the last one."""
        result: Entity = VOID
        for form in Reader(text):
            result = self.execute(form, env)
        return result

    def load(self, source: Source, env: Optional[Environment]=None) -> None:
        port = _as_port(source)
        target = env or self.session_env
        logger.debug("load: %s", port.name)
        try:
            for form in Reader(port, name=port.name):
                logger.debug("load: %r", form)
                self.execute(form, target)
        finally:
            port.close()

    def load_file(self, path: Union[str, Path], env: Optional[Environment]=None) -> None:
        with open(path, encoding="utf-8") as stream:
            self.load(InputPort(stream, name=str(path)), env)

    def apply_procedure(self, proc: Entity, args: List[Entity]) -> Entity:
        try:
            return self._runner().run_apply(proc, list(args))
        except QuitSignal:
            raise
        except GleamError as exc:
            self.record_error(exc)
            raise

    # ---------- Session control ----------

    def get_session_environment(self) -> Environment:
        return self.session_env

    def bind(self, name: str, value: Any) -> None:
        self.session_env.define(Symbol.intern(name), wrap(value))

    def trace_on(self) -> None:
        self.ctx.trace_enabled = True

    def trace_off(self) -> None:
        self.ctx.trace_enabled = False

    def clear_pending_continuation(self) -> None:
        """Drop whatever an aborted evaluation left in the machine registers."""
        self.machine = Machine(self.ctx)

    def record_error(self, exc: GleamError) -> None:
        logger.debug("uncaught condition: %s", exc)
        SystemEnvironment.get_interaction_env().define(ERROBJ, exc.payload)

def get_interpreter() -> Interpreter:
    """The calling thread's interpreter, created on first use."""
    interp = getattr(_local, "interpreter", None)
    if interp is None:
        interp = Interpreter()
        _local.interpreter = interp
    return interp

def new_interpreter(ctx: Optional[ExecutionContext]=None) -> Interpreter:
    return Interpreter(ctx)
