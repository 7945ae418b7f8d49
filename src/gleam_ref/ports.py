"""Character ports wrapping Python text streams."""

from __future__ import annotations

import io
import sys
from typing import Optional, TextIO

class InputPort:
    """Character input with one character of lookahead and position tracking."""

    def __init__(self, stream: TextIO, name: str="<input>"):
        self.stream = stream
        self.name = name
        self.line = 1
        self.column = 1
        self._peeked: Optional[str] = None
        self.closed = False

    @classmethod
    def from_string(cls, text: str, name: str="<string>") -> InputPort:
        return cls(io.StringIO(text), name=name)

    @classmethod
    def stdin(cls) -> InputPort:
        return cls(sys.stdin, name="<stdin>")

    def peek_char(self) -> str:
        """Next character without consuming it; '' at end of stream."""
        if self._peeked is None:
            self._peeked = "" if self.closed else self.stream.read(1)
        return self._peeked

    def read_char(self) -> str:
        ch = self.peek_char()
        self._peeked = None

        if ch == "\n":
            self.line += 1
            self.column = 1
        elif ch:
            self.column += 1

        return ch

    def read_line(self) -> Optional[str]:
        chars = []
        while True:
            ch = self.read_char()
            if ch == "":
                return "".join(chars) if chars else None
            if ch == "\n":
                return "".join(chars)
            chars.append(ch)

    def char_ready(self) -> bool:
        return self._peeked is not None or not self.closed

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._peeked = ""
        if self.stream is not sys.stdin:
            self.stream.close()

    def __repr__(self) -> str:
        return f"#<input-port {self.name}>"

class OutputPort:
    def __init__(self, stream: TextIO, name: str="<output>", console: bool=False):
        self.stream = stream
        self.name = name
        self.console = console
        self.at_line_start = True
        self.closed = False

    @classmethod
    def stdout(cls) -> OutputPort:
        return cls(sys.stdout, name="<stdout>", console=sys.stdout.isatty())

    @classmethod
    def stderr(cls) -> OutputPort:
        return cls(sys.stderr, name="<stderr>", console=sys.stderr.isatty())

    def write(self, text: str) -> None:
        if not text:
            return
        self.stream.write(text)
        self.at_line_start = text.endswith("\n")
        if self.console:
            self.stream.flush()

    def newline(self) -> None:
        self.write("\n")

    def fresh_line(self) -> None:
        if not self.at_line_start:
            self.newline()

    def flush(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.stream not in (sys.stdout, sys.stderr):
            self.stream.close()

    def __repr__(self) -> str:
        return f"#<output-port {self.name}>"

class StringOutputPort(OutputPort):
    def __init__(self, name: str="<string>"):
        super().__init__(io.StringIO(), name=name)

    def getvalue(self) -> str:
        assert isinstance(self.stream, io.StringIO)
        return self.stream.getvalue()

    def close(self) -> None:
        self.closed = True
