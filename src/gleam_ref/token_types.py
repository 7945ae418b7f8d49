"""
Token Types for the Gleam reader

Shared between the lexer, the reader and the REPL highlighter.
"""

from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Brackets
    LPAR = auto()
    RPAR = auto()
    VECTOR_OPEN = auto()  # #(

    # Abbreviations
    QUOTE = auto()  # '
    QUASIQUOTE = auto()  # `
    UNQUOTE = auto()  # ,
    UNQUOTE_SPLICING = auto()  # ,@
    DATUM_COMMENT = auto()  # #;

    DOT = auto()

    # Atoms
    STRING = auto()
    CHAR = auto()
    BOOLEAN = auto()
    NUMBER = auto()
    SYMBOL = auto()
    DIRECTIVE = auto()  # #!optional, #!eof, ...

    # Special
    COMMENT = auto()
    EOF = auto()


ABBREVIATIONS = {
    TT.QUOTE: "quote",
    TT.QUASIQUOTE: "quasiquote",
    TT.UNQUOTE: "unquote",
    TT.UNQUOTE_SPLICING: "unquote-splicing",
}
