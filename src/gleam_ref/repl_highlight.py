"""prompt_toolkit lexer for live Scheme highlighting in the REPL."""

from __future__ import annotations

from typing import Callable, Optional

from lark import Token
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer import Lexer as GleamLexer
from .ports import InputPort
from .token_types import TT
from .types import Builtins, ReaderError

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "char": "ansiyellow",
    "identifier": "",
    "function": "bold ansiyellow",
    "quote": "ansiblue",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.LPAR.name: "punctuation",
    TT.RPAR.name: "punctuation",
    TT.VECTOR_OPEN.name: "punctuation",
    TT.DOT.name: "punctuation",
    TT.QUOTE.name: "quote",
    TT.QUASIQUOTE.name: "quote",
    TT.UNQUOTE.name: "quote",
    TT.UNQUOTE_SPLICING.name: "quote",
    TT.DATUM_COMMENT.name: "comment",
    TT.STRING.name: "string",
    TT.CHAR.name: "char",
    TT.BOOLEAN.name: "boolean",
    TT.NUMBER.name: "number",
    TT.DIRECTIVE.name: "constant",
    TT.COMMENT.name: "comment",
}

def _symbol_group(name: str) -> str:
    if name in Builtins.special_forms:
        return "keyword"
    if name in Builtins.primitives or name in Builtins.aliases:
        return "function"
    return "identifier"

def _token_style(tok: Token, text: str) -> str:
    if tok.type == TT.SYMBOL.name:
        group = _symbol_group(text)
    else:
        group = _TT_GROUP.get(tok.type, "")
    return GROUP_STYLE.get(group, "")

def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    result: StyleAndTextTuples = []
    pos = 0
    lexer = GleamLexer(InputPort.from_string(text), emit_comments=True)
    error_at: Optional[int] = None

    while True:
        try:
            tok = lexer.next_token()
        except ReaderError:
            error_at = pos
            break
        if tok.type == TT.EOF.name:
            break

        start, end = tok.start_pos, tok.end_pos
        if start is None or end is None or end <= start:
            continue

        # Unstyled gap before token.
        if start > pos:
            result.append(("", text[pos:start]))
        result.append((_token_style(tok, text[start:end]), text[start:end]))
        pos = end

    if error_at is not None and pos < len(text):
        # An unterminated string or bad # syntax runs to the end of the line.
        stripped = text[pos:].lstrip()
        gap = len(text) - pos - len(stripped)
        if gap:
            result.append(("", text[pos:pos + gap]))
        style = GROUP_STYLE["string"] if stripped.startswith('"') else GROUP_STYLE["error"]
        result.append((style, stripped))
        pos = len(text)

    # Trailing unstyled text.
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]

class GleamHighlighter(Lexer):
    """prompt_toolkit Lexer that highlights Scheme source using the reader's lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
