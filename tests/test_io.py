from __future__ import annotations

from pathlib import Path

import pytest

from tests.support.harness import (
    EOF,
    VOID,
    FileError,
    WrongTypeError,
    make_session,
    run_runtime_case,
    written,
)

SCENARIOS = [
    pytest.param('(display "hi")', ("output", "hi"), None, id="display-string"),
    pytest.param('(write "hi")', ("output", '"hi"'), None, id="write-string-quoted"),
    pytest.param("(display '(\"a\" #\\b 1))", ("output", "(a b 1)"), None, id="display-list"),
    pytest.param("(write '(\"a\" #\\b 1))", ("output", '("a" #\\b 1)'), None, id="write-list"),
    pytest.param("(begin (display 1) (newline) (write 'a))", ("output", "1\na"), None, id="newline"),
    pytest.param('(begin (write-string "abc") (write-char #\\x))', ("output", "abcx"), None, id="write-string-char"),
    pytest.param("(write-line '(1 2))", ("output", "(1 2)\n"), None, id="write-line"),
    pytest.param('(begin (display "a") (fresh-line) (fresh-line) (display "b"))', ("output", "a\nb"), None, id="fresh-line"),
    pytest.param('(display "x")', ("void", None), None, id="output-has-no-value"),
    pytest.param(
        "(let ((p (open-output-string))) (write 'abc p) (display \" \" p) (write \"x\" p) (get-output-string p))",
        ("string", 'abc "x"'),
        None,
        id="string-output-port",
    ),
    pytest.param(
        '(call-with-output-string (lambda (port) (display "x" port) (write 1 port)))',
        ("string", "x1"),
        None,
        id="call-with-output-string",
    ),
    pytest.param('(read (open-input-string "(1 2 . 3)"))', ("write", "(1 2 . 3)"), None, id="read-datum"),
    pytest.param(
        '(let ((p (open-input-string "a (b) \\"c\\""))) (list (read p) (read p) (read p) (eof-object? (read p))))',
        ("write", '(a (b) "c" #t)'),
        None,
        id="read-successive",
    ),
    pytest.param(
        '(let ((p (open-input-string "ab"))) (list (read-char p) (peek-char p) (read-char p) (eof-object? (read-char p))))',
        ("write", "(#\\a #\\b #\\b #t)"),
        None,
        id="read-peek-char",
    ),
    pytest.param(
        '(let ((p (open-input-string "one\\ntwo"))) (list (read-line p) (read-line p) (eof-object? (read-line p))))',
        ("write", '("one" "two" #t)'),
        None,
        id="read-line",
    ),
    pytest.param("(eof-object? (eof-object))", ("bool", True), None, id="eof-object"),
    pytest.param(
        '(list (input-port? (open-input-string "")) (output-port? (current-output-port)) (port? (current-error-port)) (input-port? 1))',
        ("write", "(#t #t #t #f)"),
        None,
        id="port-predicates",
    ),
    pytest.param("(display 1 'not-a-port)", None, WrongTypeError, id="display-bad-port"),
    pytest.param('(open-input-file "/no/such/dir/file.scm")', None, FileError, id="open-missing-file"),
    pytest.param('(load "/no/such/dir/file.scm")', None, FileError, id="load-missing-file"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_io(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_read_from_current_input() -> None:
    session = make_session(stdin="42 (a b)\nrest of line\n")
    assert written(session.run("(read)")) == "42"
    assert written(session.run("(read)")) == "(a b)"
    assert written(session.run("(read-line)")) == '""'
    assert written(session.run("(read-line)")) == '"rest of line"'
    assert session.run("(read)") is EOF


def test_file_round_trip(session, tmp_path: Path) -> None:
    path = tmp_path / "data.scm"
    session.run(
        f"""
        (define out (open-output-file "{path}"))
        (write '(1 "two" #\\3) out)
        (newline out)
        (close-port out)
        """
    )
    assert path.read_text(encoding="utf-8") == '(1 "two" #\\3)\n'
    assert written(session.run(f'(let ((in (open-input-file "{path}"))) (read in))')) == '(1 "two" #\\3)'


def test_open_output_file_append(session, tmp_path: Path) -> None:
    path = tmp_path / "log.txt"
    path.write_text("a", encoding="utf-8")
    session.run(f'(let ((p (open-output-file "{path}" #t))) (display "b" p) (close-port p))')
    assert path.read_text(encoding="utf-8") == "ab"


def test_load_defines_into_session(session, tmp_path: Path) -> None:
    path = tmp_path / "lib.scm"
    path.write_text("(define (double x) (* 2 x))\n(define answer (double 21))\n", encoding="utf-8")
    assert session.run(f'(load "{path}")') is VOID
    assert written(session.run("answer")) == "42"
    assert written(session.run("(double 5)")) == "10"


def test_load_into_environment(session, tmp_path: Path) -> None:
    path = tmp_path / "env.scm"
    path.write_text("(define hidden 7)\n", encoding="utf-8")
    session.run(f'(define e (make-environment)) (load "{path}" e)')
    assert written(session.run("(environment-lookup e 'hidden)")) == "7"
    assert written(session.run("(environment-bound? (the-environment) 'hidden)")) == "#f"


def test_load_then_continue_top_level(session, tmp_path: Path) -> None:
    path = tmp_path / "out.scm"
    path.write_text('(display "loaded")\n', encoding="utf-8")
    session.run(f'(load "{path}") (display " after")')
    assert session.output() == "loaded after"
