"""Embedding adapter: evaluate scripts from Python with str-keyed bindings."""

from __future__ import annotations

import logging
from typing import Any, Optional, TextIO, Union

from .bridge import NOISY_KEY, TRACE_ENABLED_KEY, Bindings, unwrap, wrap
from .context import ExecutionContext
from .interpreter import Interpreter, new_interpreter
from .ports import InputPort, OutputPort
from .reader import Reader
from .runtime import Environment, SystemEnvironment
from .types import VOID, Entity, GleamError, Symbol

logger = logging.getLogger(__name__)

class ScriptError(Exception):
    """A condition that escaped a script, carrying the original GleamError."""

    def __init__(self, condition: GleamError):
        super().__init__(str(condition))
        self.condition = condition

    @property
    def kind(self) -> str:
        return self.condition.kind

class ScriptEngine:
    CONTEXT_ATTRIBUTES = (TRACE_ENABLED_KEY, NOISY_KEY)

    def __init__(self, interpreter: Optional[Interpreter]=None):
        self.interpreter = interpreter or new_interpreter()
        self.bindings = Bindings(self.interpreter.session_env, self.interpreter.ctx)

    @property
    def context(self) -> ExecutionContext:
        return self.interpreter.ctx

    # ---------- Evaluation ----------

    def eval(self, script: Union[str, TextIO], bindings: Optional[Bindings]=None) -> Any:
        """Evaluate every form of script; the unwrapped value of the last one.

        With bindings, forms are evaluated in the bindings' environment.
        """
        env = bindings.env if bindings is not None else self.interpreter.session_env
        port = InputPort.from_string(script, name="<script>") if isinstance(script, str) else InputPort(script, name="<script>")

        result: Entity = VOID
        try:
            for form in Reader(port, name=port.name):
                result = self.interpreter.execute(form, env)
        except GleamError as exc:
            logger.debug("script failed: %s", exc)
            raise ScriptError(exc) from exc
        return unwrap(result)

    def invoke_function(self, name: str, *args: Any) -> Any:
        """Call the procedure bound to name in the session environment."""
        try:
            proc = self.interpreter.session_env.lookup(Symbol.intern(name))
            result = self.interpreter.apply_procedure(proc, [wrap(arg) for arg in args])
        except GleamError as exc:
            raise ScriptError(exc) from exc
        return unwrap(result)

    # ---------- Bindings ----------

    def put(self, key: str, value: Any) -> None:
        self.bindings[key] = value

    def get(self, key: str, default: Any=None) -> Any:
        return self.bindings.get(key, default)

    def create_bindings(self) -> Bindings:
        """A fresh top-level frame over the interaction environment."""
        env = Environment(SystemEnvironment.get_interaction_env(), name="bindings")
        return Bindings(env, self.interpreter.ctx)

    # ---------- Context ----------

    def get_attribute(self, name: str) -> Any:
        if name not in self.CONTEXT_ATTRIBUTES:
            raise KeyError(name)
        return self.bindings[name]

    def set_attribute(self, name: str, value: Any) -> None:
        if name not in self.CONTEXT_ATTRIBUTES:
            raise KeyError(name)
        self.bindings[name] = value

    def set_ports(self, reader: Optional[TextIO]=None, writer: Optional[TextIO]=None, error_writer: Optional[TextIO]=None) -> None:
        ctx = self.interpreter.ctx
        if reader is not None:
            ctx.input_port = InputPort(reader, name="<reader>")
        if writer is not None:
            ctx.output_port = OutputPort(writer, name="<writer>")
        if error_writer is not None:
            ctx.error_port = OutputPort(error_writer, name="<error-writer>")
