"""
Datum reader for Gleam

Recursive descent over the lexer's token stream. Each read() consumes exactly
one datum from the port, so a port can be shared by several readers and by
the `read` primitive.
"""

from typing import Iterator, List, Optional, Union

from lark import Token

from .lexer import Lexer, parse_number
from .ports import InputPort
from .token_types import ABBREVIATIONS, TT
from .types import (
    DEFAULT_OBJECT, EOF, FALSE, NIL, TRUE, VOID,
    Char, Entity, MString, ReaderError, Symbol, Vector, make_list,
)

OPTIONAL_MARKER = Symbol.intern("#!optional")
REST_MARKER = Symbol.intern("#!rest")

DIRECTIVES = {
    "optional": OPTIONAL_MARKER,
    "rest": REST_MARKER,
    "default": DEFAULT_OBJECT,
    "eof": EOF,
    "unspecific": VOID,
}

_ABBREVIATION_NAMES = {tt.name: name for tt, name in ABBREVIATIONS.items()}

class Reader:
    """Reads data from an InputPort (or a string) one at a time."""

    def __init__(self, source: Union[InputPort, str], name: str="<string>"):
        if isinstance(source, str):
            source = InputPort.from_string(source, name=name)
        self.port = source
        self.lexer = Lexer(source)

    def read(self) -> Entity:
        """Return the next datum, or EOF when the input is exhausted."""
        tok = self.next_significant()
        if tok.type == TT.EOF.name:
            return EOF
        return self.parse_datum(tok)

    def __iter__(self) -> Iterator[Entity]:
        while True:
            datum = self.read()
            if datum is EOF:
                return
            yield datum

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def next_significant(self) -> Token:
        """Next token with datum comments (and the datum they cover) skipped."""
        tok = self.lexer.next_token()
        while tok.type == TT.DATUM_COMMENT.name:
            self.parse_datum(self.next_required(tok))
            tok = self.lexer.next_token()
        return tok

    def next_required(self, after: Token) -> Token:
        tok = self.next_significant()
        if tok.type == TT.EOF.name:
            raise ReaderError(f"unexpected end of input after '{after}'", after.line, after.column)
        return tok

    # ========================================================================
    # Datum Parsing
    # ========================================================================

    def parse_datum(self, tok: Token) -> Entity:
        match tok.type:
            case "LPAR":
                return self.parse_list(tok)
            case "VECTOR_OPEN":
                return self.parse_vector(tok)
            case "RPAR":
                raise ReaderError("unexpected ')'", tok.line, tok.column)
            case "DOT":
                raise ReaderError("unexpected '.'", tok.line, tok.column)
            case "QUOTE" | "QUASIQUOTE" | "UNQUOTE" | "UNQUOTE_SPLICING":
                inner = self.parse_datum(self.next_required(tok))
                return make_list(Symbol.intern(_ABBREVIATION_NAMES[tok.type]), inner)
            case "STRING":
                return MString(str(tok))
            case "CHAR":
                return Char(str(tok))
            case "BOOLEAN":
                return TRUE if tok == "#t" else FALSE
            case "NUMBER":
                value = parse_number(str(tok))
                if value is None:
                    raise ReaderError(f"bad number {tok}", tok.line, tok.column)
                return value
            case "SYMBOL":
                return Symbol.intern(str(tok))
            case "DIRECTIVE":
                return DIRECTIVES[str(tok)]

        raise ReaderError(f"unexpected token {tok.type}", tok.line, tok.column)

    def parse_list(self, open_tok: Token) -> Entity:
        items: List[Entity] = []
        tail: Entity = NIL

        while True:
            tok = self.next_significant()
            if tok.type == TT.EOF.name:
                raise ReaderError("unterminated list", open_tok.line, open_tok.column)
            if tok.type == TT.RPAR.name:
                break
            if tok.type == TT.DOT.name:
                if not items:
                    raise ReaderError("unexpected '.'", tok.line, tok.column)
                tail = self.parse_datum(self.next_required(tok))
                close = self.next_significant()
                if close.type != TT.RPAR.name:
                    raise ReaderError("expected ')' after dotted tail", close.line, close.column)
                break
            items.append(self.parse_datum(tok))

        return make_list(*items, tail=tail)

    def parse_vector(self, open_tok: Token) -> Vector:
        items: List[Entity] = []

        while True:
            tok = self.next_significant()
            if tok.type == TT.EOF.name:
                raise ReaderError("unterminated vector", open_tok.line, open_tok.column)
            if tok.type == TT.RPAR.name:
                return Vector(items)
            items.append(self.parse_datum(tok))

def read_all(text: str, name: str="<string>") -> List[Entity]:
    return list(Reader(text, name=name))

def read_one(text: str) -> Optional[Entity]:
    """First datum of text, or None for empty input. A literal #!eof reads as EOF."""
    reader = Reader(text)
    tok = reader.next_significant()
    if tok.type == TT.EOF.name:
        return None
    return reader.parse_datum(tok)
