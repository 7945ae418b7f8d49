from __future__ import annotations

import pytest

from tests.support.harness import WrongTypeError, run_runtime_case

STRING_SCENARIOS = [
    pytest.param('(string-length "hello")', ("number", 5), None, id="length"),
    pytest.param('(string-ref "abc" 1)', ("write", "#\\b"), None, id="ref"),
    pytest.param('(substring "hello" 1 3)', ("string", "el"), None, id="substring"),
    pytest.param('(substring "hello" 2)', ("string", "llo"), None, id="substring-to-end"),
    pytest.param('(list (string-head "hello" 2) (string-tail "hello" 3))', ("write", '("he" "lo")'), None, id="head-tail"),
    pytest.param('(string-append "a" "b" "c")', ("string", "abc"), None, id="append"),
    pytest.param("(string-append)", ("string", ""), None, id="append-empty"),
    pytest.param("(string #\\a #\\b)", ("string", "ab"), None, id="string-from-chars"),
    pytest.param("(make-string 3 #\\x)", ("string", "xxx"), None, id="make-string"),
    pytest.param('(string->list "ab")', ("write", "(#\\a #\\b)"), None, id="to-list"),
    pytest.param("(list->string (list #\\a #\\b))", ("string", "ab"), None, id="from-list"),
    pytest.param('(list (string-upcase "abc") (string-downcase "ABC"))', ("write", '("ABC" "abc")'), None, id="case"),
    pytest.param(
        "(let ((s (make-string 3 #\\a))) (string-set! s 1 #\\b) s)",
        ("string", "aba"),
        None,
        id="string-set",
    ),
    pytest.param(
        '(let ((s (string-copy "abc"))) (string-fill! s #\\z) s)',
        ("string", "zzz"),
        None,
        id="string-fill",
    ),
    pytest.param(
        '(let* ((a (make-string 2 #\\a)) (b (string-copy a))) (string-set! b 0 #\\b) (list a b))',
        ("write", '("aa" "ba")'),
        None,
        id="copy-is-independent",
    ),
    pytest.param('(string-index "hello" #\\l)', ("number", 2), None, id="index"),
    pytest.param('(string-index "hello" #\\z)', ("bool", False), None, id="index-missing"),
    pytest.param('(string-search-forward "lo" "hello" 0)', ("number", 3), None, id="search-forward"),
    pytest.param('(string-search-all "a" "banana")', ("write", "(1 3 5)"), None, id="search-all"),
    pytest.param('(string-join (list "a" "b" "c") ", ")', ("string", "a, b, c"), None, id="join"),
    pytest.param('(list (string-null? "") (string-null? "a"))', ("write", "(#t #f)"), None, id="null"),
    pytest.param(
        '(list (string=? "a" "a" "a") (string<? "apple" "banana") (string>? "b" "a") (string<=? "a" "a") (string-ci=? "AbC" "abc"))',
        ("write", "(#t #t #t #t #t)"),
        None,
        id="comparisons",
    ),
    pytest.param(
        '(let ((n 0)) (string-for-each (lambda (c) (set! n (+ n 1))) "abc") n)',
        ("number", 3),
        None,
        id="string-for-each",
    ),
    pytest.param('(string-ref "abc" 5)', None, WrongTypeError, id="ref-out-of-range"),
    pytest.param("(string-length 'abc)", None, WrongTypeError, id="length-wrong-type"),
    pytest.param('(substring "abc" 2 1)', None, WrongTypeError, id="substring-bad-range"),
]

SYMBOL_SCENARIOS = [
    pytest.param("(symbol->string 'abc)", ("string", "abc"), None, id="symbol-to-string"),
    pytest.param('(eq? (string->symbol "abc") \'abc)', ("bool", True), None, id="interned"),
    pytest.param('(eq? (intern "abc") \'abc)', ("bool", True), None, id="intern-alias"),
    pytest.param('(eq? (string->uninterned-symbol "abc") \'abc)', ("bool", False), None, id="uninterned"),
    pytest.param("(symbol-append 'foo 'bar)", ("symbol", "foobar"), None, id="symbol-append"),
    pytest.param("(symbol<? 'a 'b 'c)", ("bool", True), None, id="symbol-less"),
    pytest.param("(symbol? (generate-symbol))", ("bool", True), None, id="gensym-is-symbol"),
    pytest.param("(eq? (gensym) (gensym))", ("bool", False), None, id="gensym-fresh"),
    pytest.param("(list (symbol? 'a) (symbol? \"a\"))", ("write", "(#t #f)"), None, id="symbol-predicate"),
]

CHAR_SCENARIOS = [
    pytest.param("(char->integer #\\A)", ("number", 65), None, id="char-to-integer"),
    pytest.param("(integer->char 97)", ("write", "#\\a"), None, id="integer-to-char"),
    pytest.param("(list (char-upcase #\\a) (char-downcase #\\B))", ("write", "(#\\A #\\b)"), None, id="char-case"),
    pytest.param(
        "(list (char-alphabetic? #\\a) (char-numeric? #\\5) (char-whitespace? #\\space) (char-upper-case? #\\a) (char-lower-case? #\\a))",
        ("write", "(#t #t #t #f #t)"),
        None,
        id="char-classes",
    ),
    pytest.param("(list (digit-value #\\7) (digit-value #\\a))", ("write", "(7 #f)"), None, id="digit-value"),
    pytest.param("(char->digit #\\f 16)", ("number", 15), None, id="char-to-digit"),
    pytest.param("(list (char<? #\\a #\\b #\\c) (char=? #\\a #\\b) (char-ci=? #\\a #\\A))", ("write", "(#t #f #t)"), None, id="char-compare"),
    pytest.param("(char->integer \"a\")", None, WrongTypeError, id="char-wrong-type"),
    pytest.param("(integer->char -1)", None, WrongTypeError, id="integer-to-char-invalid"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", STRING_SCENARIOS)
def test_strings(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize("source, expectation, expected_exc", SYMBOL_SCENARIOS)
def test_symbols(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize("source, expectation, expected_exc", CHAR_SCENARIOS)
def test_chars(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
