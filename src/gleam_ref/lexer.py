"""
Lexer for Gleam - on-demand tokenizer

Pulls characters lazily from an InputPort so the reader never consumes more
input than the datum it is building. Tokens are lark Tokens carrying type
name, value, line, column and the start/end offsets of the raw text.

Features:
- Nested block comments (#| ... |#), line comments and datum comments (#;)
- Strings with escapes and line continuations
- Characters (#\\a, #\\space, #\\x41)
- Numbers with radix prefixes, infinities and NaN
- |quoted symbols| and #! directives
"""

from typing import Iterator, List, Optional, Union

from lark import Token

from .ports import InputPort
from .token_types import TT
from .types import ReaderError

DELIMITERS = frozenset(' \t\n\r\f()[]";\'`,')

CHAR_NAMES = {
    "space": " ",
    "newline": "\n",
    "linefeed": "\n",
    "nl": "\n",
    "tab": "\t",
    "return": "\r",
    "null": "\0",
    "nul": "\0",
    "altmode": "\x1b",
    "escape": "\x1b",
    "backspace": "\b",
    "delete": "\x7f",
    "rubout": "\x7f",
    "alarm": "\a",
}

STRING_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "b": "\b",
    "0": "\0",
    "\\": "\\",
    '"': '"',
}

RADIX_PREFIXES = {"x": 16, "b": 2, "o": 8, "d": 10}

SPECIAL_FLOATS = {
    "+inf.0": float("inf"),
    "-inf.0": float("-inf"),
    "+nan.0": float("nan"),
    "-nan.0": float("nan"),
}

def parse_number(text: str, radix: int=10) -> Optional[Union[int, float]]:
    """Parse a numeric literal; None when the text is not a number."""
    exactness = None

    while len(text) >= 2 and text[0] == "#":
        flag = text[1].lower()
        if flag in RADIX_PREFIXES:
            radix = RADIX_PREFIXES[flag]
        elif flag in ("e", "i"):
            exactness = flag
        else:
            return None
        text = text[2:]

    if not text or "_" in text:
        return None

    lowered = text.lower()
    if lowered in SPECIAL_FLOATS:
        value: Union[int, float] = SPECIAL_FLOATS[lowered]
    else:
        try:
            value = int(text, radix)
        except ValueError:
            if radix != 10 or not any(ch.isdigit() for ch in text):
                return None
            try:
                value = float(text)
            except ValueError:
                return None
            # float() accepts words like "infinity"; only digits, sign, point and exponent are numbers here
            if any(ch.isalpha() and ch not in "eE" for ch in text):
                return None

    if exactness == "i":
        try:
            return float(value)
        except OverflowError:
            return float("inf") if value > 0 else float("-inf")
    if exactness == "e" and isinstance(value, float) and value.is_integer():
        return int(value)
    return value

class Lexer:
    """Scheme lexer over an InputPort, one token per next_token() call."""

    def __init__(self, port: InputPort, emit_comments: bool=False):
        self.port = port
        self.emit_comments = emit_comments
        self.pos = 0
        self._start_pos = 0
        self._start_line = 1
        self._start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def next_token(self) -> Token:
        while True:
            self.skip_whitespace()
            self.mark()
            ch = self.peek()

            if ch == "":
                return self.emit(TT.EOF, "")

            if ch == ";":
                text = self.skip_line_comment()
                if self.emit_comments:
                    return self.emit(TT.COMMENT, text)
                continue

            if ch == "#":
                self.advance()
                if self.peek() != "|":
                    return self.scan_hash()
                text = self.skip_block_comment()
                if self.emit_comments:
                    return self.emit(TT.COMMENT, text)
                continue

            return self.scan_token()

    def tokenize(self) -> List[Token]:
        tokens = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == TT.EOF.name:
                return tokens

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == TT.EOF.name:
                return

    def scan_token(self) -> Token:
        ch = self.advance()

        match ch:
            case "(" | "[":
                return self.emit(TT.LPAR, ch)
            case ")" | "]":
                return self.emit(TT.RPAR, ch)
            case "'":
                return self.emit(TT.QUOTE, ch)
            case "`":
                return self.emit(TT.QUASIQUOTE, ch)
            case ",":
                if self.peek() == "@":
                    self.advance()
                    return self.emit(TT.UNQUOTE_SPLICING, ",@")
                return self.emit(TT.UNQUOTE, ch)
            case '"':
                return self.scan_string()
            case "|":
                return self.emit(TT.SYMBOL, self.scan_pipe_symbol())

        return self.scan_atom(ch)

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self) -> Token:
        chars: List[str] = []

        while True:
            ch = self.advance()
            if ch == "":
                raise self.error("unterminated string")
            if ch == '"':
                break
            if ch != "\\":
                chars.append(ch)
                continue

            esc = self.advance()
            if esc == "":
                raise self.error("unterminated string")
            if esc in STRING_ESCAPES:
                chars.append(STRING_ESCAPES[esc])
            elif esc == "x":
                chars.append(self.scan_hex_escape())
            elif esc in " \t\n\r":
                # line continuation: drop the newline and the next line's indentation
                while esc in " \t":
                    esc = self.advance()
                while self.peek() in (" ", "\t"):
                    self.advance()
            else:
                raise self.error(f"unknown string escape \\{esc}")

        return self.emit(TT.STRING, "".join(chars))

    def scan_hex_escape(self) -> str:
        digits = ""
        while self.peek() not in (";", "") and self.peek() not in DELIMITERS:
            digits += self.advance()
        if self.peek() == ";":
            self.advance()
        try:
            return chr(int(digits, 16))
        except ValueError:
            raise self.error(f"bad hex escape \\x{digits}") from None

    def scan_hash(self) -> Token:
        ch = self.peek()

        if ch == "(":
            self.advance()
            return self.emit(TT.VECTOR_OPEN, "#(")
        if ch == ";":
            self.advance()
            return self.emit(TT.DATUM_COMMENT, "#;")
        if ch == "\\":
            self.advance()
            return self.scan_char()
        if ch == "!":
            self.advance()
            if self.peek() == "/":
                # script header line (#!/usr/bin/env gleam)
                self.skip_line_comment()
                return self.next_token()
            name = self.read_until_delimiter()
            if name not in ("optional", "rest", "default", "eof", "unspecific"):
                raise self.error(f"unknown directive #!{name}")
            return self.emit(TT.DIRECTIVE, name)

        word = self.read_until_delimiter()
        lowered = word.lower()
        if lowered in ("t", "true"):
            return self.emit(TT.BOOLEAN, "#t")
        if lowered in ("f", "false"):
            return self.emit(TT.BOOLEAN, "#f")
        if lowered[:1] in ("x", "b", "o", "d", "e", "i"):
            text = "#" + word
            if parse_number(text) is None:
                raise self.error(f"bad number {text}")
            return self.emit(TT.NUMBER, text)

        raise self.error(f"bad syntax #{word}")

    def scan_char(self) -> Token:
        first = self.advance()
        if first == "":
            raise self.error("end of input in character")

        rest = self.read_until_delimiter()
        if not rest:
            return self.emit(TT.CHAR, first)

        name = first + rest
        if name.lower() in CHAR_NAMES:
            return self.emit(TT.CHAR, CHAR_NAMES[name.lower()])
        if first in ("x", "U", "u") and len(rest) >= 1:
            try:
                return self.emit(TT.CHAR, chr(int(rest, 16)))
            except ValueError:
                pass
        raise self.error(f"unknown character name #\\{name}")

    def scan_pipe_symbol(self) -> str:
        chars: List[str] = []
        while True:
            ch = self.advance()
            if ch == "":
                raise self.error("unterminated |symbol|")
            if ch == "|":
                return "".join(chars)
            if ch == "\\":
                ch = self.advance()
            chars.append(ch)

    def scan_atom(self, first: str) -> Token:
        text = first + self.read_until_delimiter()

        if text == ".":
            return self.emit(TT.DOT, text)
        if parse_number(text) is not None:
            return self.emit(TT.NUMBER, text)
        return self.emit(TT.SYMBOL, text)

    # ========================================================================
    # Comments and whitespace
    # ========================================================================

    def skip_whitespace(self) -> None:
        while self.peek() != "" and self.peek().isspace():
            self.advance()

    def skip_line_comment(self) -> str:
        text = ""
        while self.peek() not in ("\n", ""):
            text += self.advance()
        return text

    def skip_block_comment(self) -> str:
        text = "#" + self.advance()
        depth = 1

        while depth:
            ch = self.advance()
            if ch == "":
                raise self.error("unterminated block comment")
            text += ch
            if ch == "|" and self.peek() == "#":
                text += self.advance()
                depth -= 1
            elif ch == "#" and self.peek() == "|":
                text += self.advance()
                depth += 1

        return text

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self) -> str:
        return self.port.peek_char()

    def advance(self) -> str:
        ch = self.port.read_char()
        if ch:
            self.pos += 1
        return ch

    def read_until_delimiter(self) -> str:
        chars = ""
        while self.peek() != "" and self.peek() not in DELIMITERS:
            chars += self.advance()
        return chars

    def mark(self) -> None:
        self._start_pos = self.pos
        self._start_line = self.port.line
        self._start_column = self.port.column

    def emit(self, token_type: TT, value: str) -> Token:
        return Token(
            token_type.name,
            value,
            start_pos=self._start_pos,
            line=self._start_line,
            column=self._start_column,
            end_pos=self.pos,
        )

    def error(self, message: str) -> ReaderError:
        return ReaderError(message, self.port.line, self.port.column)
