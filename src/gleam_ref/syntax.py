"""Special forms. Each handler receives the machine, the unevaluated operands and the environment."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from .control import (
    CallWithValuesFrame, CaseFrame, DefineFrame, AssignFrame, GuardFrame, IfFrame,
    InEnvironmentFrame, WhenFrame, bind_sequentially, eval_and, eval_or, start_cond,
)
from .reader import OPTIONAL_MARKER, REST_MARKER
from .runtime import Environment, register_syntax
from .types import (
    NIL, UNASSIGNED, VOID,
    Builtins, Closure, Entity, Pair, Params, Primitive, Promise, SpecialForm, Symbol,
    Vector, ill_formed, iter_list, make_list,
)

if TYPE_CHECKING:
    from .evaluator import Machine

QUOTE = Symbol.intern("quote")
QUASIQUOTE = Symbol.intern("quasiquote")
UNQUOTE = Symbol.intern("unquote")
UNQUOTE_SPLICING = Symbol.intern("unquote-splicing")

# ---------- Helpers ----------

def operand_list(name: str, operands: Entity, min_n: int, max_n: Optional[int]=None) -> List[Entity]:
    items: List[Entity] = []
    cur = operands
    while isinstance(cur, Pair):
        items.append(cur.car)
        cur = cur.cdr

    if cur is not NIL or len(items) < min_n or (max_n is not None and len(items) > max_n):
        raise ill_formed(Pair(Symbol.intern(name), operands))
    return items

def special_form(name: str) -> SpecialForm:
    return Builtins.special_forms[name]

def primitive(name: str) -> Primitive:
    return Builtins.primitives[name]

def parse_params(formals: Entity, form: Entity) -> Params:
    required: List[Symbol] = []
    optional: List[Symbol] = []
    rest: Optional[Symbol] = None
    mode = "required"

    cur = formals
    while isinstance(cur, Pair):
        item = cur.car
        cur = cur.cdr
        if item is OPTIONAL_MARKER:
            if mode != "required":
                raise ill_formed(form)
            mode = "optional"
            continue
        if item is REST_MARKER:
            if mode == "rest" or not isinstance(cur, Pair) or cur.cdr is not NIL:
                raise ill_formed(form)
            mode = "rest"
            continue
        if not isinstance(item, Symbol):
            raise ill_formed(form)

        if mode == "required":
            required.append(item)
        elif mode == "optional":
            optional.append(item)
        else:
            rest = item

    if cur is not NIL:
        if not isinstance(cur, Symbol) or mode == "rest":
            raise ill_formed(form)
        rest = cur

    names = required + optional + ([rest] if rest is not None else [])
    if len(set(names)) != len(names):
        raise ill_formed(form)

    return Params(tuple(required), tuple(optional), rest)

def make_lambda(formals: Entity, body: Entity, env: Environment, name: Optional[str], form: Entity) -> Closure:
    params = parse_params(formals, form)
    forms = tuple(iter_list(body, "lambda"))
    if not forms:
        raise ill_formed(form)
    return Closure(params=params, body=forms, env=env, name=name)

def body_tuple(name: str, body: Entity, form: Entity) -> Tuple[Entity, ...]:
    forms = tuple(iter_list(body, name))
    if not forms:
        raise ill_formed(form)
    return forms

def parse_bindings(name: str, bindings: Entity, form: Entity) -> Tuple[Tuple[Symbol, ...], Tuple[Entity, ...]]:
    names: List[Symbol] = []
    inits: List[Entity] = []

    for binding in iter_list(bindings, name):
        if isinstance(binding, Symbol):
            names.append(binding)
            inits.append(UNASSIGNED)
            continue

        parts = operand_list(name, binding, 1, 2) if isinstance(binding, Pair) else None
        if not parts or not isinstance(parts[0], Symbol):
            raise ill_formed(form)
        names.append(parts[0])
        inits.append(parts[1] if len(parts) == 2 else UNASSIGNED)

    return tuple(names), tuple(inits)

# ---------- Quoting ----------

@register_syntax("quote", doc="(quote datum): datum, unevaluated.")
def sf_quote(m: Machine, operands: Entity, env: Environment) -> None:
    (datum,) = operand_list("quote", operands, 1, 1)
    m.ret(datum)

def contains_unquote(template: Entity) -> bool:
    stack = [template]
    while stack:
        item = stack.pop()
        if isinstance(item, Pair):
            if item.car is UNQUOTE or item.car is UNQUOTE_SPLICING:
                return True
            stack.append(item.car)
            stack.append(item.cdr)
        elif isinstance(item, Vector):
            stack.extend(item.items)
    return False

def quasi(template: Entity, depth: int) -> Entity:
    """Rewrite a quasiquote template into constructor calls."""
    quote_form = special_form("quote")

    if not contains_unquote(template):
        return make_list(quote_form, template)

    if isinstance(template, Vector):
        return make_list(primitive("list->vector"), quasi(make_list(*template.items), depth))

    assert isinstance(template, Pair)
    head = template.car

    if head is UNQUOTE:
        (inner,) = operand_list("unquote", template.cdr, 1, 1)
        if depth == 1:
            return inner
        return make_list(primitive("list"), make_list(quote_form, UNQUOTE), quasi(inner, depth - 1))

    if head is QUASIQUOTE:
        (inner,) = operand_list("quasiquote", template.cdr, 1, 1)
        return make_list(primitive("list"), make_list(quote_form, QUASIQUOTE), quasi(inner, depth + 1))

    if isinstance(head, Pair) and head.car is UNQUOTE_SPLICING:
        (inner,) = operand_list("unquote-splicing", head.cdr, 1, 1)
        if depth == 1:
            return make_list(primitive("append"), inner, quasi(template.cdr, depth))
        spliced = make_list(primitive("list"), make_list(quote_form, UNQUOTE_SPLICING), quasi(inner, depth - 1))
        return make_list(primitive("cons"), spliced, quasi(template.cdr, depth))

    return make_list(primitive("cons"), quasi(head, depth), quasi(template.cdr, depth))

@register_syntax("quasiquote", doc="(quasiquote template): template with unquote/unquote-splicing filled in.")
def sf_quasiquote(m: Machine, operands: Entity, env: Environment) -> None:
    (template,) = operand_list("quasiquote", operands, 1, 1)
    m.eval(quasi(template, 1), env)

# ---------- Definitions and assignment ----------

@register_syntax("define", doc="(define name expr) or (define (name . formals) body...)")
def sf_define(m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern("define"), operands)
    items = operand_list("define", operands, 1)
    target = items[0]

    if isinstance(target, Symbol):
        if len(items) > 2:
            raise ill_formed(form)
        if len(items) == 1:
            env.define(target, UNASSIGNED)
            m.ret(VOID)
            return
        m.kont = DefineFrame(target, env, m.kont)
        m.eval(items[1], env)
        return

    body = operands.cdr  # type: ignore[union-attr]
    while isinstance(target, Pair):
        head, formals = target.car, target.cdr
        if isinstance(head, Symbol):
            env.define(head, make_lambda(formals, body, env, head.name, form))
            m.ret(VOID)
            return
        # curried define: ((f a) b) -> (f a) returning (lambda (b) ...)
        body = make_list(Pair(special_form("lambda"), Pair(formals, body)))
        target = head

    raise ill_formed(form)

@register_syntax("set!", doc="(set! name expr): assign an existing binding.")
def sf_set(m: Machine, operands: Entity, env: Environment) -> None:
    target, expr = operand_list("set!", operands, 2, 2)
    if not isinstance(target, Symbol):
        raise ill_formed(Pair(Symbol.intern("set!"), operands))

    m.kont = AssignFrame(env.get_location(target), m.kont)
    m.eval(expr, env)

# ---------- Procedures ----------

@register_syntax("lambda", doc="(lambda formals body...): a procedure closing over the current environment.")
def sf_lambda(m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern("lambda"), operands)
    if not isinstance(operands, Pair):
        raise ill_formed(form)
    m.ret(make_lambda(operands.car, operands.cdr, env, None, form))

@register_syntax("named-lambda", doc="(named-lambda (name . formals) body...)")
def sf_named_lambda(m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern("named-lambda"), operands)
    if not isinstance(operands, Pair) or not isinstance(operands.car, Pair) or not isinstance(operands.car.car, Symbol):
        raise ill_formed(form)
    header = operands.car
    m.ret(make_lambda(header.cdr, operands.cdr, env, header.car.name, form))

# ---------- Sequencing and binding ----------

@register_syntax("begin", doc="(begin expr...): evaluate in order, value of the last.")
def sf_begin(m: Machine, operands: Entity, env: Environment) -> None:
    m.eval_body(tuple(operand_list("begin", operands, 0)), env)

@register_syntax("let", doc="(let ((name init)...) body...) or named let (let loop ((name init)...) body...)")
def sf_let(m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern("let"), operands)
    items = operand_list("let", operands, 2)

    if isinstance(items[0], Symbol):
        loop_name = items[0]
        if len(items) < 3:
            raise ill_formed(form)
        names, inits = parse_bindings("let", items[1], form)
        body = body_tuple("let", operands.cdr.cdr, form)  # type: ignore[union-attr]
        loop_env = Environment(env)
        proc = Closure(params=Params(names), body=body, env=loop_env, name=loop_name.name)
        loop_env.define(loop_name, proc)
    else:
        names, inits = parse_bindings("let", items[0], form)
        body = body_tuple("let", operands.cdr, form)  # type: ignore[union-attr]
        proc = Closure(params=Params(names), body=body, env=env, name=None)

    if len(set(names)) != len(names):
        raise ill_formed(form)
    m.apply_operands(proc, [], make_list(*inits), env)

@register_syntax("let*", doc="(let* ((name init)...) body...): bindings see the earlier ones.")
def sf_let_star(m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern("let*"), operands)
    items = operand_list("let*", operands, 2)
    names, inits = parse_bindings("let*", items[0], form)
    body = body_tuple("let*", operands.cdr, form)  # type: ignore[union-attr]

    if not names:
        m.eval_body(body, Environment(env))
        return
    bind_sequentially(m, names, inits, 0, env, body, nest=True)

def _letrec(name: str, m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern(name), operands)
    items = operand_list(name, operands, 2)
    names, inits = parse_bindings(name, items[0], form)
    body = body_tuple(name, operands.cdr, form)  # type: ignore[union-attr]

    inner = Environment(env)
    for sym in names:
        inner.define(sym, UNASSIGNED)
    bind_sequentially(m, names, inits, 0, inner, body, nest=False)

@register_syntax("letrec", doc="(letrec ((name init)...) body...): mutually recursive bindings.")
def sf_letrec(m: Machine, operands: Entity, env: Environment) -> None:
    _letrec("letrec", m, operands, env)

@register_syntax("letrec*", doc="(letrec* ((name init)...) body...): recursive bindings, initialised in order.")
def sf_letrec_star(m: Machine, operands: Entity, env: Environment) -> None:
    _letrec("letrec*", m, operands, env)

@register_syntax("receive", doc="(receive formals expr body...): bind the values of expr.")
def sf_receive(m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern("receive"), operands)
    items = operand_list("receive", operands, 3)
    consumer = make_lambda(items[0], operands.cdr.cdr, env, None, form)  # type: ignore[union-attr]
    m.kont = CallWithValuesFrame(consumer, m.kont)
    m.eval(items[1], env)

# ---------- Conditionals ----------

@register_syntax("if", doc="(if test consequent [alternative])")
def sf_if(m: Machine, operands: Entity, env: Environment) -> None:
    items = operand_list("if", operands, 2, 3)
    alternative = items[2] if len(items) == 3 else None
    m.kont = IfFrame(items[1], alternative, env, m.kont)
    m.eval(items[0], env)

@register_syntax("cond", doc="(cond (test expr...) ... [(else expr...)]); (test => receiver) passes the test value.")
def sf_cond(m: Machine, operands: Entity, env: Environment) -> None:
    start_cond(m, operands, env)

@register_syntax("case", doc="(case key ((datum...) expr...) ... [(else expr...)])")
def sf_case(m: Machine, operands: Entity, env: Environment) -> None:
    items = operand_list("case", operands, 1)
    m.kont = CaseFrame(operands.cdr, env, m.kont)  # type: ignore[union-attr]
    m.eval(items[0], env)

@register_syntax("and", doc="(and expr...): first false value, or the last value.")
def sf_and(m: Machine, operands: Entity, env: Environment) -> None:
    eval_and(m, operands, env)

@register_syntax("or", doc="(or expr...): first true value, or #f.")
def sf_or(m: Machine, operands: Entity, env: Environment) -> None:
    eval_or(m, operands, env)

@register_syntax("when", doc="(when test body...)")
def sf_when(m: Machine, operands: Entity, env: Environment) -> None:
    items = operand_list("when", operands, 1)
    m.kont = WhenFrame(tuple(items[1:]), env, False, m.kont)
    m.eval(items[0], env)

@register_syntax("unless", doc="(unless test body...)")
def sf_unless(m: Machine, operands: Entity, env: Environment) -> None:
    items = operand_list("unless", operands, 1)
    m.kont = WhenFrame(tuple(items[1:]), env, True, m.kont)
    m.eval(items[0], env)

@register_syntax("do", doc="(do ((var init step)...) (test result...) body...)")
def sf_do(m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern("do"), operands)
    items = operand_list("do", operands, 2)

    specs = []
    for spec in iter_list(items[0], "do"):
        parts = operand_list("do", spec, 2, 3) if isinstance(spec, Pair) else None
        if not parts or not isinstance(parts[0], Symbol):
            raise ill_formed(form)
        specs.append((parts[0], parts[1], parts[2] if len(parts) == 3 else parts[0]))

    exit_clause = operand_list("do", items[1], 1)
    loop = Symbol.generate("do-loop")
    begin = special_form("begin")

    recur = make_list(loop, *(step for _, _, step in specs))
    iteration = make_list(
        special_form("if"),
        exit_clause[0],
        make_list(begin, *exit_clause[1:]),
        make_list(begin, *items[2:], recur),
    )
    bindings = make_list(*(make_list(var, init) for var, init, _ in specs))
    m.eval(make_list(special_form("let"), loop, bindings, iteration), env)

# ---------- Promises ----------

@register_syntax("delay", doc="(delay expr): a promise that evaluates expr once, when forced.")
def sf_delay(m: Machine, operands: Entity, env: Environment) -> None:
    (expr,) = operand_list("delay", operands, 1, 1)
    m.ret(Promise(expr, env))

@register_syntax("delay-force", doc="(delay-force expr): like delay, for expressions that yield promises.")
def sf_delay_force(m: Machine, operands: Entity, env: Environment) -> None:
    (expr,) = operand_list("delay-force", operands, 1, 1)
    m.ret(Promise(make_list(primitive("force"), expr), env))

@register_syntax("cons-stream", doc="(cons-stream a b): (cons a (delay b)).")
def sf_cons_stream(m: Machine, operands: Entity, env: Environment) -> None:
    head, tail = operand_list("cons-stream", operands, 2, 2)
    m.eval(make_list(primitive("cons"), head, make_list(special_form("delay"), tail)), env)

# ---------- Conditions ----------

@register_syntax("guard", doc="(guard (var clause...) body...): evaluate body; on a raised condition bind var and try the cond clauses.")
def sf_guard(m: Machine, operands: Entity, env: Environment) -> None:
    form = Pair(Symbol.intern("guard"), operands)
    items = operand_list("guard", operands, 1)
    spec = items[0]
    if not isinstance(spec, Pair) or not isinstance(spec.car, Symbol):
        raise ill_formed(form)

    m.kont = GuardFrame(spec.car, spec.cdr, env, m.wind, m.kont)
    m.eval_body(tuple(items[1:]), env)

# ---------- Environments ----------

@register_syntax("the-environment", doc="(the-environment): the environment this form is evaluated in.")
def sf_the_environment(m: Machine, operands: Entity, env: Environment) -> None:
    operand_list("the-environment", operands, 0, 0)
    m.ret(env)

@register_syntax("current-environment", doc="(current-environment): same as the-environment.")
def sf_current_environment(m: Machine, operands: Entity, env: Environment) -> None:
    operand_list("current-environment", operands, 0, 0)
    m.ret(env)

@register_syntax("in-environment", doc="(in-environment env body...): evaluate body in env.")
def sf_in_environment(m: Machine, operands: Entity, env: Environment) -> None:
    items = operand_list("in-environment", operands, 1)
    m.kont = InEnvironmentFrame(tuple(items[1:]), m.kont)
    m.eval(items[0], env)

# ---------- Interaction ----------

@register_syntax("help", doc="(help) lists documented names; (help name) shows one.")
def sf_help(m: Machine, operands: Entity, env: Environment) -> None:
    items = operand_list("help", operands, 0, 1)
    port = m.ctx.output_port

    if not items:
        names = sorted(
            [name for name, prim in Builtins.primitives.items() if prim.doc]
            + [name for name, form in Builtins.special_forms.items() if form.doc]
        )
        port.write("Documented names:\n")
        for name in names:
            port.write(f"  {name}\n")
        m.ret(VOID)
        return

    target = items[0]
    if not isinstance(target, Symbol):
        raise ill_formed(Pair(Symbol.intern("help"), operands))

    loc = env.get_location_or_none(target)
    value = loc.value if loc is not None else None
    doc = value.doc if isinstance(value, (Primitive, SpecialForm)) else None
    port.write(f"{target.name}: {doc}\n" if doc else f"{target.name}: no documentation available\n")
    m.ret(VOID)
