from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

from .ports import InputPort, OutputPort
from .types import Entity

if TYPE_CHECKING:
    from .interpreter import Interpreter

@dataclass
class TraceRecord:
    """One evaluation step: the form about to be evaluated and the depth of its environment."""
    form: Entity
    depth: int

TraceHook = Callable[[TraceRecord], None]

@dataclass
class ExecutionContext:
    """Per-session ports and flags; the session that owns it is the evaluation boundary."""
    input_port: InputPort = field(default_factory=InputPort.stdin)
    output_port: OutputPort = field(default_factory=OutputPort.stdout)
    error_port: OutputPort = field(default_factory=OutputPort.stderr)
    trace_enabled: bool = False
    trace_hook: Optional[TraceHook] = None
    noisy: bool = False
    interpreter: Optional['Interpreter'] = None

    def emit_trace(self, form: Entity, depth: int) -> None:
        record = TraceRecord(form=form, depth=depth)
        if self.trace_hook is not None:
            self.trace_hook(record)
            return

        from .printer import write_string
        self.error_port.write(f"[{depth}] {write_string(form)}\n")
