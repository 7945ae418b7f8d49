from __future__ import annotations

import pytest

from tests.support.harness import UserError, WrongTypeError, run_runtime_case

LIST_SCENARIOS = [
    pytest.param("(cons 1 2)", ("write", "(1 . 2)"), None, id="cons"),
    pytest.param("(list 1 2 3)", ("write", "(1 2 3)"), None, id="list"),
    pytest.param("(list (car '(1 2)) (cdr '(1 2)))", ("write", "(1 (2))"), None, id="car-cdr"),
    pytest.param("(list (cadr '(1 2 3)) (cddr '(1 2 3)) (caddr '(1 2 3)) (caar '((a) b)))", ("write", "(2 (3) 3 a)"), None, id="cxr"),
    pytest.param("(car '())", None, WrongTypeError, id="car-of-nil"),
    pytest.param("(length '(1 2 3))", ("number", 3), None, id="length"),
    pytest.param("(length '(1 . 2))", None, WrongTypeError, id="length-improper"),
    pytest.param(
        "(list (list? '(1 2)) (list? '()) (list? '(1 . 2)) (pair? '()) (null? '()) (pair? '(1)))",
        ("write", "(#t #t #f #f #t #t)"),
        None,
        id="list-predicates",
    ),
    pytest.param("(let ((x (list 1 2))) (set-cdr! (cdr x) x) (list? x))", ("bool", False), None, id="circular-not-list"),
    pytest.param("(append '(1) '(2 3) '(4))", ("write", "(1 2 3 4)"), None, id="append"),
    pytest.param("(append '(1) 2)", ("write", "(1 . 2)"), None, id="append-improper-tail"),
    pytest.param("(append)", ("write", "()"), None, id="append-empty"),
    pytest.param("(let ((a (list 1 2)) (b (list 3))) (append! a b) a)", ("write", "(1 2 3)"), None, id="append-bang"),
    pytest.param("(reverse '(1 2 3))", ("write", "(3 2 1)"), None, id="reverse"),
    pytest.param("(list (list-tail '(1 2 3 4) 2) (list-head '(1 2 3 4) 2))", ("write", "((3 4) (1 2))"), None, id="tail-head"),
    pytest.param("(list-ref '(a b c) 1)", ("symbol", "b"), None, id="list-ref"),
    pytest.param("(list (last-pair '(1 2 3)) (first '(1 2)) (last '(1 2 3)))", ("write", "((3) 1 3)"), None, id="first-last"),
    pytest.param("(let ((p (list 1 2))) (set-car! p 'a) p)", ("write", "(a 2)"), None, id="set-car"),
    pytest.param(
        "(let* ((a (list 1 2)) (b (list-copy a))) (set-car! b 9) (list a b))",
        ("write", "((1 2) (9 2))"),
        None,
        id="list-copy",
    ),
    pytest.param("(list (iota 5) (iota 3 1) (iota 3 0 2))", ("write", "((0 1 2 3 4) (1 2 3) (0 2 4))"), None, id="iota"),
    pytest.param("(list (make-list 2 'x) (cons* 1 2 '(3)) (cons* 1))", ("write", "((x x) (1 2 3) 1)"), None, id="constructors"),
    pytest.param("(memq 'c '(a b c d))", ("write", "(c d)"), None, id="memq"),
    pytest.param("(memv 2 '(1 2 3))", ("write", "(2 3)"), None, id="memv"),
    pytest.param("(member \"b\" '(\"a\" \"b\"))", ("write", "(\"b\")"), None, id="member"),
    pytest.param("(member 2.0 '(1 2 3) =)", ("write", "(2 3)"), None, id="member-compare"),
    pytest.param("(memq 'z '(a b))", ("bool", False), None, id="memq-missing"),
    pytest.param("(assq 'b '((a 1) (b 2)))", ("write", "(b 2)"), None, id="assq"),
    pytest.param("(assv 5 '((1 . a)))", ("bool", False), None, id="assv-missing"),
    pytest.param("(assoc \"b\" '((\"a\" . 1) (\"b\" . 2)))", ("write", "(\"b\" . 2)"), None, id="assoc"),
    pytest.param("(assoc 2.0 '((1 . a) (2 . b)) =)", ("write", "(2 . b)"), None, id="assoc-compare"),
    pytest.param("(del-assq 'a '((a . 1) (b . 2)))", ("write", "((b . 2))"), None, id="del-assq"),
]

HIGHER_ORDER_SCENARIOS = [
    pytest.param("(map (lambda (x) (* x x)) '(1 2 3))", ("write", "(1 4 9)"), None, id="map"),
    pytest.param("(map + '(1 2) '(10 20))", ("write", "(11 22)"), None, id="map-two-lists"),
    pytest.param("(map + '(1 2 3) '(1 2))", ("write", "(2 4)"), None, id="map-shortest"),
    pytest.param(
        "(let ((acc '())) (for-each (lambda (a b) (set! acc (cons (+ a b) acc))) '(1 2) '(10 20)) acc)",
        ("write", "(22 11)"),
        None,
        id="for-each-two-lists",
    ),
    pytest.param("(append-map (lambda (x) (list x x)) '(1 2))", ("write", "(1 1 2 2)"), None, id="append-map"),
    pytest.param("(filter odd? '(1 2 3 4 5))", ("write", "(1 3 5)"), None, id="filter"),
    pytest.param("(remove odd? '(1 2 3 4 5))", ("write", "(2 4)"), None, id="remove"),
    pytest.param("(call-with-values (lambda () (partition odd? '(1 2 3 4))) list)", ("write", "((1 3) (2 4))"), None, id="partition"),
    pytest.param("(delete 2 '(1 2 3 2))", ("write", "(1 3)"), None, id="delete"),
    pytest.param("(fold-left - 0 '(1 2 3))", ("number", -6), None, id="fold-left"),
    pytest.param("(fold-right cons '() '(1 2 3))", ("write", "(1 2 3)"), None, id="fold-right"),
    pytest.param("(fold cons '() '(1 2 3))", ("write", "(3 2 1)"), None, id="fold"),
    pytest.param("(list (reduce + 0 '(1 2 3 4)) (reduce + 0 '()))", ("write", "(10 0)"), None, id="reduce"),
    pytest.param("(find even? '(1 3 4 5))", ("number", 4), None, id="find"),
    pytest.param("(find-tail even? '(1 4 5))", ("write", "(4 5)"), None, id="find-tail"),
    pytest.param("(list-index even? '(1 3 4))", ("number", 2), None, id="list-index"),
    pytest.param("(list (any even? '(1 3 4)) (any even? '()) (every odd? '(1 3)) (every odd? '()))", ("write", "(#t #f #t #t)"), None, id="any-every"),
    pytest.param("(every (lambda (x) (and (odd? x) x)) '(1 3 5))", ("number", 5), None, id="every-last-value"),
    pytest.param("(count odd? '(1 2 3))", ("number", 2), None, id="count"),
    pytest.param("(sort '(3 1 2) <)", ("write", "(1 2 3)"), None, id="sort-list"),
    pytest.param("(sort (vector 3 1 2) <)", ("write", "#(1 2 3)"), None, id="sort-vector"),
    pytest.param("(list-sort < '(5 4 3 2 1 0))", ("write", "(0 1 2 3 4 5)"), None, id="list-sort"),
    pytest.param(
        "(sort '((b . 1) (a . 1) (c . 0)) (lambda (x y) (< (cdr x) (cdr y))))",
        ("write", "((c . 0) (b . 1) (a . 1))"),
        None,
        id="sort-stable",
    ),
    pytest.param("(apply + 1 2 '(3 4))", ("number", 10), None, id="apply-spread"),
    pytest.param("(apply list '())", ("write", "()"), None, id="apply-empty"),
]

VECTOR_SCENARIOS = [
    pytest.param("(vector 1 2 3)", ("write", "#(1 2 3)"), None, id="vector"),
    pytest.param("(vector-ref #(1 2 3) 0)", ("number", 1), None, id="literal-self-evaluates"),
    pytest.param("(make-vector 2 'a)", ("write", "#(a a)"), None, id="make-vector"),
    pytest.param("(vector-length (vector 1 2))", ("number", 2), None, id="vector-length"),
    pytest.param("(let ((v (make-vector 3 0))) (vector-set! v 0 'x) v)", ("write", "#(x 0 0)"), None, id="vector-set"),
    pytest.param("(vector->list #(1 2 3) 1)", ("write", "(2 3)"), None, id="vector-to-list"),
    pytest.param("(list->vector '(1 2))", ("write", "#(1 2)"), None, id="list-to-vector"),
    pytest.param("(let ((v (vector 1 2))) (vector-fill! v 0) v)", ("write", "#(0 0)"), None, id="vector-fill"),
    pytest.param("(vector-grow #(1) 3)", ("write", "#(1 #f #f)"), None, id="vector-grow"),
    pytest.param("(subvector #(1 2 3 4) 1 3)", ("write", "#(2 3)"), None, id="subvector"),
    pytest.param(
        "(let* ((a (vector 1 2)) (b (vector-copy a))) (vector-set! b 0 9) (list a b))",
        ("write", "(#(1 2) #(9 2))"),
        None,
        id="vector-copy",
    ),
    pytest.param("(vector-map (lambda (x) (* 2 x)) #(1 2))", ("write", "#(2 4)"), None, id="vector-map"),
    pytest.param(
        "(let ((sum 0)) (vector-for-each (lambda (x) (set! sum (+ sum x))) #(1 2 3)) sum)",
        ("number", 6),
        None,
        id="vector-for-each",
    ),
    pytest.param("(vector-ref (vector 1) 1)", None, WrongTypeError, id="vector-ref-range"),
    pytest.param("(make-vector -1)", None, WrongTypeError, id="make-vector-negative"),
    pytest.param("(vector-ref '(1) 0)", None, WrongTypeError, id="vector-ref-wrong-type"),
]

EQUIVALENCE_SCENARIOS = [
    pytest.param("(list (eq? 'a 'a) (eq? '() '()) (eq? 2 2) (eq? (list 1) (list 1)))", ("write", "(#t #t #t #f)"), None, id="eq"),
    pytest.param("(list (eqv? 2 2) (eqv? 2 2.0) (eqv? #\\a #\\a) (eqv? \"\" \"\"))", ("write", "(#t #f #t #t)"), None, id="eqv"),
    pytest.param("(equal? '(1 (2 #(3 \"x\"))) (list 1 (list 2 (vector 3 \"x\"))))", ("bool", True), None, id="equal-structural"),
    pytest.param("(equal? \"ab\" \"ac\")", ("bool", False), None, id="equal-strings"),
    pytest.param(
        "(define a (list 1 2)) (set-cdr! (cdr a) a) (define b (list 1 2)) (set-cdr! (cdr b) b) (equal? a b)",
        ("bool", True),
        None,
        id="equal-circular-lists",
    ),
    pytest.param(
        "(define a (list 1 2)) (set-cdr! (cdr a) a) (define b (list 1 3)) (set-cdr! (cdr b) b) (equal? a b)",
        ("bool", False),
        None,
        id="equal-circular-lists-differ",
    ),
    pytest.param(
        "(define a (vector 1 #f)) (vector-set! a 1 a) (define b (vector 1 #f)) (vector-set! b 1 b) (if (member b (list a)) #t #f)",
        ("bool", True),
        None,
        id="member-self-referencing-vectors",
    ),
    pytest.param("(list (not #f) (not 0) (not '()))", ("write", "(#t #f #f)"), None, id="not"),
    pytest.param("(list (boolean? #f) (boolean? '()) (boolean=? #t #t))", ("write", "(#t #f #t)"), None, id="booleans"),
    pytest.param("(list (procedure? car) (procedure? (lambda () 1)) (procedure? 'car))", ("write", "(#t #t #f)"), None, id="procedure-predicate"),
]

STREAM_SCENARIOS = [
    pytest.param(
        "(define (ints n) (cons-stream n (ints (+ n 1)))) (stream-head (ints 0) 5)",
        ("write", "(0 1 2 3 4)"),
        None,
        id="infinite-stream",
    ),
    pytest.param(
        "(define (ints n) (cons-stream n (ints (+ n 1)))) (stream-car (stream-tail (ints 0) 10))",
        ("number", 10),
        None,
        id="stream-tail",
    ),
    pytest.param("(stream-pair? (cons-stream 1 2))", ("bool", True), None, id="stream-pair"),
    pytest.param("(list (stream-null? the-empty-stream) (empty-stream? stream-nil))", ("write", "(#t #t)"), None, id="empty-stream"),
    pytest.param("(stream-car '(1 2))", None, UserError, id="stream-car-of-list"),
    pytest.param(
        "(define n 0) (define s (cons-stream 1 (begin (set! n (+ n 1)) '()))) (stream-cdr s) (stream-cdr s) n",
        ("number", 1),
        None,
        id="stream-tail-memoized",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", LIST_SCENARIOS)
def test_lists(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize("source, expectation, expected_exc", HIGHER_ORDER_SCENARIOS)
def test_higher_order(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize("source, expectation, expected_exc", VECTOR_SCENARIOS)
def test_vectors(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize("source, expectation, expected_exc", EQUIVALENCE_SCENARIOS)
def test_equivalence(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize("source, expectation, expected_exc", STREAM_SCENARIOS)
def test_streams(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
