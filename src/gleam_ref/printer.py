"""External representations: `write` (re-readable) and `display` (human)."""

from __future__ import annotations

import math
from typing import Dict, List, Set

from .lexer import parse_number
from .types import (
    NIL, Boolean, Char, Constant, Entity, ErrorObject, MString, Pair, Promise, Symbol,
    Values, Vector, iter_list,
)

CHAR_WRITE_NAMES = {
    " ": "space",
    "\n": "newline",
    "\t": "tab",
    "\r": "return",
    "\0": "null",
    "\x1b": "altmode",
    "\b": "backspace",
    "\x7f": "delete",
    "\a": "alarm",
}

STRING_WRITE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}

QUOTE_ABBREVIATIONS = {
    "quote": "'",
    "quasiquote": "`",
    "unquote": ",",
    "unquote-splicing": ",@",
}

SYMBOL_BREAKERS = frozenset(' \t\n\r\f()[]";\'`,|')

def write_string(obj: Entity) -> str:
    return Printer(write=True).render(obj)

def display_string(obj: Entity) -> str:
    return Printer(write=False).render(obj)

def format_number(num: int | float) -> str:
    if isinstance(num, float):
        if math.isnan(num):
            return "+nan.0"
        if math.isinf(num):
            return "+inf.0" if num > 0 else "-inf.0"
    return repr(num)

def _children(obj: Entity) -> List[Entity]:
    if isinstance(obj, Pair):
        return [obj.car, obj.cdr]
    if isinstance(obj, Vector):
        return obj.items
    return []

def find_cycles(root: Entity) -> Set[int]:
    """ids of pairs/vectors reachable from themselves (targets of back edges)."""
    if not isinstance(root, (Pair, Vector)):
        return set()

    cyclic: Set[int] = set()
    on_path: Set[int] = {id(root)}
    done: Set[int] = set()
    stack = [(root, iter(_children(root)))]

    while stack:
        node, children = stack[-1]
        for child in children:
            if not isinstance(child, (Pair, Vector)):
                continue
            key = id(child)
            if key in on_path:
                cyclic.add(key)
            elif key not in done:
                on_path.add(key)
                stack.append((child, iter(_children(child))))
                break
        else:
            stack.pop()
            on_path.discard(id(node))
            done.add(id(node))

    return cyclic

class Printer:
    def __init__(self, write: bool=True):
        self.write = write
        self.cyclic: Set[int] = set()
        self.labels: Dict[int, int] = {}

    def render(self, obj: Entity) -> str:
        self.cyclic = find_cycles(obj)
        self.labels = {}
        out: List[str] = []
        self.emit(obj, out)
        return "".join(out)

    def emit(self, obj: Entity, out: List[str]) -> None:
        if isinstance(obj, (Pair, Vector)) and id(obj) in self.cyclic:
            label = self.labels.get(id(obj))
            if label is not None:
                out.append(f"#{label}#")
                return
            label = len(self.labels)
            self.labels[id(obj)] = label
            out.append(f"#{label}=")

        match obj:
            case bool():
                out.append("#t" if obj else "#f")
            case int() | float():
                out.append(format_number(obj))
            case Boolean():
                out.append("#t" if obj.value else "#f")
            case Symbol():
                out.append(self.symbol_text(obj))
            case MString():
                out.append(self.string_text(obj.value))
            case Char():
                out.append(self.char_text(obj.value))
            case Pair():
                self.emit_pair(obj, out)
            case Vector():
                out.append("#(")
                for i, item in enumerate(obj.items):
                    if i:
                        out.append(" ")
                    self.emit(item, out)
                out.append(")")
            case Values():
                for i, item in enumerate(obj.items):
                    if i:
                        out.append(" ")
                    self.emit(item, out)
            case ErrorObject():
                out.append(f"#<condition {obj.kind.name}: {report_string(obj)}>")
            case Promise():
                out.append("#<promise>")
            case Constant():
                out.append(obj.label)
            case _:
                out.append(repr(obj))

    def emit_pair(self, obj: Pair, out: List[str]) -> None:
        head = obj.car
        if (
            isinstance(head, Symbol)
            and head.name in QUOTE_ABBREVIATIONS
            and isinstance(obj.cdr, Pair)
            and obj.cdr.cdr is NIL
            and id(obj.cdr) not in self.cyclic
        ):
            out.append(QUOTE_ABBREVIATIONS[head.name])
            self.emit(obj.cdr.car, out)
            return

        out.append("(")
        self.emit(obj.car, out)
        cur = obj.cdr

        while isinstance(cur, Pair):
            if id(cur) in self.cyclic:
                break
            out.append(" ")
            self.emit(cur.car, out)
            cur = cur.cdr

        if cur is not NIL:
            out.append(" . ")
            self.emit(cur, out)
        out.append(")")

    def symbol_text(self, sym: Symbol) -> str:
        name = sym.name
        if not self.write:
            return name
        if not name or any(ch in SYMBOL_BREAKERS for ch in name) or name == "." or parse_number(name) is not None:
            escaped = name.replace("\\", "\\\\").replace("|", "\\|")
            return f"|{escaped}|"
        return name

    def string_text(self, text: str) -> str:
        if not self.write:
            return text
        return '"' + "".join(STRING_WRITE_ESCAPES.get(ch, ch) for ch in text) + '"'

    def char_text(self, ch: str) -> str:
        if not self.write:
            return ch
        if ch in CHAR_WRITE_NAMES:
            return "#\\" + CHAR_WRITE_NAMES[ch]
        if not ch.isprintable():
            return f"#\\x{ord(ch):x}"
        return "#\\" + ch

def report_string(err: ErrorObject) -> str:
    """Message followed by the written irritants, as condition/report-string shows it."""
    parts = [err.message]
    parts.extend(write_string(obj) for obj in iter_list(err.irritants))
    return " ".join(parts)
