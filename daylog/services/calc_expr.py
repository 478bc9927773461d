"""
Calculated-metric expression evaluator.

Supports numeric literals, identifiers (other metric ids), + - * / and
parentheses. Pipeline: tokenize -> postfix (shunting-yard) -> evaluate.

Failure policy: every syntax or evaluation problem yields None, never an
exception, so a broken expression only blanks its own cell.

Public API
----------
eval_calc_expr(expr, ctx)                   -> float | None
build_numeric_context(metrics, values)      -> dict[str, float | None]
compute_calculated_values(metrics, values)  -> dict[str, float | None]
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from daylog.services.rows import MetricRow

logger = logging.getLogger(__name__)

NumericContext = Mapping[str, Optional[float]]

_OPERATORS = frozenset("+-*/")
_PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2}


@dataclass(frozen=True)
class Token:
    kind: str  # "number" | "ident" | "op" | "paren"
    value: Union[float, str]


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

def _is_ident_start(c: str) -> bool:
    return c == "_" or ("a" <= c <= "z") or ("A" <= c <= "Z")


def _is_ident_char(c: str) -> bool:
    return _is_ident_start(c) or c.isdigit()


def _is_number_char(c: str) -> bool:
    return c == "." or "0" <= c <= "9"


def tokenize(expr: str) -> Optional[list[Token]]:
    s = (expr or "").strip()
    if not s:
        return None

    tokens: list[Token] = []
    i = 0
    while i < len(s):
        c = s[i]

        if c.isspace():
            i += 1
            continue

        if c in "()":
            tokens.append(Token("paren", c))
            i += 1
            continue

        if c in _OPERATORS:
            tokens.append(Token("op", c))
            i += 1
            continue

        if _is_number_char(c):
            j = i
            while j < len(s) and _is_number_char(s[j]):
                j += 1
            try:
                num = float(s[i:j])
            except ValueError:
                return None
            if not math.isfinite(num):
                return None
            tokens.append(Token("number", num))
            i = j
            continue

        if _is_ident_start(c):
            j = i + 1
            while j < len(s) and _is_ident_char(s[j]):
                j += 1
            tokens.append(Token("ident", s[i:j]))
            i = j
            continue

        return None

    return tokens


# ---------------------------------------------------------------------------
# Shunting-yard
# ---------------------------------------------------------------------------

def to_postfix(tokens: list[Token]) -> Optional[list[Token]]:
    output: list[Token] = []
    stack: list[str] = []  # operators and "("

    for tok in tokens:
        if tok.kind in ("number", "ident"):
            output.append(tok)
        elif tok.kind == "op":
            # left-associative: pop while top binds at least as tightly
            while stack and stack[-1] != "(" and _PRECEDENCE[stack[-1]] >= _PRECEDENCE[tok.value]:
                output.append(Token("op", stack.pop()))
            stack.append(tok.value)
        elif tok.value == "(":
            stack.append("(")
        else:
            while stack and stack[-1] != "(":
                output.append(Token("op", stack.pop()))
            if not stack:
                return None
            stack.pop()

    while stack:
        top = stack.pop()
        if top == "(":
            return None
        output.append(Token("op", top))

    return output


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def _apply(op: str, a: float, b: float) -> Optional[float]:
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if b == 0:
        return None
    return a / b


def eval_postfix(postfix: list[Token], ctx: NumericContext) -> Optional[float]:
    stack: list[float] = []

    for tok in postfix:
        if tok.kind == "number":
            stack.append(tok.value)
            continue
        if tok.kind == "ident":
            value = ctx.get(tok.value)
            if value is None or not math.isfinite(value):
                return None
            stack.append(float(value))
            continue

        if len(stack) < 2:
            return None
        b = stack.pop()
        a = stack.pop()
        result = _apply(tok.value, a, b)
        if result is None or not math.isfinite(result):
            return None
        stack.append(result)

    if len(stack) != 1 or not math.isfinite(stack[0]):
        return None
    return stack[0]


def eval_calc_expr(expr: str, ctx: NumericContext) -> Optional[float]:
    """Evaluate `expr` against metric values in `ctx`. None on any failure."""
    tokens = tokenize(expr)
    if tokens is None:
        logger.debug("calc_expr: cannot tokenize %r", expr)
        return None
    postfix = to_postfix(tokens)
    if postfix is None:
        logger.debug("calc_expr: unbalanced parentheses in %r", expr)
        return None
    return eval_postfix(postfix, ctx)


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------

def build_numeric_context(
    metrics: list[MetricRow],
    values: Mapping[str, Optional[float]],
) -> dict[str, Optional[float]]:
    """
    Checkbox metrics always resolve (1.0 when truthy, else 0.0, absent
    included); every other type resolves to its value or None.
    """
    ctx: dict[str, Optional[float]] = {}
    for m in metrics:
        raw = values.get(m.metric_id)
        if m.is_checkbox:
            ctx[m.metric_id] = 1.0 if raw else 0.0
        else:
            ctx[m.metric_id] = None if raw is None else float(raw)
    return ctx


def compute_calculated_values(
    metrics: list[MetricRow],
    values: Mapping[str, Optional[float]],
) -> dict[str, Optional[float]]:
    ctx = build_numeric_context(metrics, values)
    result: dict[str, Optional[float]] = {}
    for m in metrics:
        if not m.is_calculated or not (m.calc_expr or "").strip():
            result[m.metric_id] = None
            continue
        result[m.metric_id] = eval_calc_expr(m.calc_expr, ctx)
    return result
