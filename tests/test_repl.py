from __future__ import annotations

import pytest
from prompt_toolkit.document import Document

from gleam_ref.repl import _handle_slash, _normalize, _toggle, eval_input, is_complete
from gleam_ref.repl_highlight import GROUP_STYLE, GleamHighlighter, _highlight_line
from tests.support.harness import GleamError


@pytest.mark.parametrize(
    "text, complete",
    [
        pytest.param("(+ 1 2)", True, id="balanced"),
        pytest.param("(+ 1", False, id="open-paren"),
        pytest.param("(a (b)\n c)", True, id="multiline-balanced"),
        pytest.param("#(1 2", False, id="open-vector"),
        pytest.param("'", False, id="dangling-quote"),
        pytest.param("`(a ,", False, id="dangling-unquote"),
        pytest.param('"abc', False, id="open-string"),
        pytest.param("#| block", False, id="open-block-comment"),
        pytest.param("|sym", False, id="open-pipe-symbol"),
        pytest.param(")", True, id="extra-close-left-to-reader"),
        pytest.param("", True, id="empty"),
        pytest.param("; just a comment", True, id="comment"),
        pytest.param("#q", True, id="bad-syntax-left-to-reader"),
    ],
)
def test_is_complete(text: str, complete: bool) -> None:
    assert is_complete(text) is complete


def test_toggle() -> None:
    assert _toggle("on", False) is True
    assert _toggle("OFF", True) is False
    assert _toggle("", True) is False
    assert _toggle("maybe", True) is None


def test_normalize_strips_invisible_characters() -> None:
    assert _normalize("(+\u200b 1 2)\ufeff\r") == "(+ 1 2)"


def test_non_slash_lines_are_not_commands(session) -> None:
    assert _handle_slash("(+ 1 2)", [session.interp]) is False


def test_trace_command(session, capsys) -> None:
    box = [session.interp]
    assert _handle_slash("/trace on", box) is True
    assert session.interp.ctx.trace_enabled is True
    assert _handle_slash("/trace", box) is True
    assert session.interp.ctx.trace_enabled is False
    assert _handle_slash("/trace maybe", box) is True
    captured = capsys.readouterr()
    assert "Trace: on" in captured.out
    assert "Usage: /trace" in captured.err


def test_py_traceback_command(monkeypatch, capsys) -> None:
    monkeypatch.delenv("GLEAM_DEBUG_PY_TRACE", raising=False)
    assert _handle_slash("/py-traceback on", [None]) is True
    assert capsys.readouterr().out.strip() == "Python traceback: on"
    assert _handle_slash("/py-traceback off", [None]) is True
    assert capsys.readouterr().out.strip() == "Python traceback: off"


def test_reset_command_starts_fresh_session(session, capsys) -> None:
    session.run("(define before-reset 1)")
    box = [session.interp]
    assert _handle_slash("/reset", box) is True
    assert box[0] is not session.interp
    with pytest.raises(GleamError):
        box[0].eval_string("before-reset")
    assert "Environment reset." in capsys.readouterr().out


def test_help_and_unknown_commands(session, capsys) -> None:
    box = [session.interp]
    assert _handle_slash("/help", box) is True
    assert _handle_slash("/bogus", box) is True
    captured = capsys.readouterr()
    assert "/trace" in captured.out
    assert "Unknown command: /bogus" in captured.err


def test_eval_input_prints_each_result(session) -> None:
    eval_input(session.interp, '(+ 1 2) (values 1 2) (define x 1) (display "x")')
    assert session.output() == "3\n1\n2\nx"


def test_eval_input_stops_at_first_error(session) -> None:
    with pytest.raises(GleamError):
        eval_input(session.interp, "(define y 1) (car 1) (define y 2)")
    assert session.run("y") == 1


def test_highlight_styles_tokens() -> None:
    text = '(define x "s") ; note'
    fragments = _highlight_line(text)
    assert "".join(chunk for _, chunk in fragments) == text
    assert (GROUP_STYLE["keyword"], "define") in fragments
    assert (GROUP_STYLE["string"], '"s"') in fragments
    assert (GROUP_STYLE["comment"], "; note") in fragments


def test_highlight_primitives_and_literals() -> None:
    fragments = _highlight_line("(car '(1 #t #\\a))")
    assert (GROUP_STYLE["function"], "car") in fragments
    assert (GROUP_STYLE["quote"], "'") in fragments
    assert (GROUP_STYLE["number"], "1") in fragments
    assert (GROUP_STYLE["boolean"], "#t") in fragments
    assert (GROUP_STYLE["char"], "#\\a") in fragments


def test_highlight_unterminated_string_runs_to_end() -> None:
    fragments = _highlight_line('(display "abc')
    assert fragments[-1] == (GROUP_STYLE["string"], '"abc')
    assert "".join(chunk for _, chunk in fragments) == '(display "abc'


def test_highlighter_lexes_each_line() -> None:
    get_line = GleamHighlighter().lex_document(Document("(if #t\n  1)"))
    assert "".join(chunk for _, chunk in get_line(0)) == "(if #t"
    assert "".join(chunk for _, chunk in get_line(1)) == "  1)"
    assert get_line(5) == [("", "")]
