"""
Tests for the calculated-metric expression evaluator.
"""
import pytest

from daylog.services.calc_expr import (
    Token,
    build_numeric_context,
    compute_calculated_values,
    eval_calc_expr,
    to_postfix,
    tokenize,
)
from daylog.services.rows import MetricRow


class TestTokenize:
    def test_numbers_identifiers_operators(self):
        tokens = tokenize("sleep_h * 60 + 2.5")
        assert tokens == [
            Token("ident", "sleep_h"),
            Token("op", "*"),
            Token("number", 60.0),
            Token("op", "+"),
            Token("number", 2.5),
        ]

    def test_whitespace_is_skipped(self):
        assert tokenize("  1+2 ") == tokenize("1 + 2")

    def test_unsupported_character_fails(self):
        assert tokenize("a % b") is None
        assert tokenize("a ^ 2") is None

    def test_blank_expression_fails(self):
        assert tokenize("") is None
        assert tokenize("   ") is None

    def test_malformed_number_fails(self):
        assert tokenize("1.2.3") is None


class TestPostfix:
    def test_precedence(self):
        postfix = to_postfix(tokenize("2 + 3 * 4"))
        assert [t.value for t in postfix] == [2.0, 3.0, 4.0, "*", "+"]

    def test_left_associative(self):
        postfix = to_postfix(tokenize("8 - 4 - 2"))
        assert [t.value for t in postfix] == [8.0, 4.0, "-", 2.0, "-"]

    def test_unmatched_parens(self):
        assert to_postfix(tokenize("(1 + 2")) is None
        assert to_postfix(tokenize("1 + 2)")) is None


class TestEvalCalcExpr:
    @pytest.mark.parametrize("expr, expected", [
        ("2 + 3 * 4", 14.0),
        ("(2 + 3) * 4", 20.0),
        ("10 / 4", 2.5),
        ("8 - 4 - 2", 2.0),
        ("16 / 4 / 2", 2.0),
        ("((1))", 1.0),
        ("10 / 4 - 1", 1.5),
    ])
    def test_arithmetic(self, expr, expected):
        assert eval_calc_expr(expr, {}) == pytest.approx(expected)

    def test_identifiers(self):
        ctx = {"deep": 90.0, "light": 210.0}
        assert eval_calc_expr("(deep + light) / 60", ctx) == pytest.approx(5.0)

    def test_unknown_identifier_is_null(self):
        assert eval_calc_expr("a + missing", {"a": 1.0}) is None

    def test_null_identifier_is_null(self):
        assert eval_calc_expr("a + b", {"a": 1.0, "b": None}) is None

    def test_division_by_zero_is_null(self):
        assert eval_calc_expr("a / b", {"a": 1.0, "b": 0.0}) is None

    def test_unmatched_parens_is_null(self):
        assert eval_calc_expr("(a + 1", {"a": 1.0}) is None

    def test_unsupported_character_is_null(self):
        assert eval_calc_expr("a & 1", {"a": 1.0}) is None

    def test_dangling_operator_is_null(self):
        assert eval_calc_expr("1 +", {}) is None
        assert eval_calc_expr("* 2", {}) is None
        assert eval_calc_expr("2 -", {}) is None

    def test_non_finite_intermediate_is_null(self):
        assert eval_calc_expr("a * a", {"a": 1e200}) is None

    def test_overflowing_literal_is_null(self):
        assert tokenize("1" * 400) is None
        assert eval_calc_expr("1" * 400, {}) is None
        assert eval_calc_expr("a + " + "9" * 400, {"a": 1.0}) is None

    @pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_identifier_is_null(self, bad):
        assert eval_calc_expr("x", {"x": bad}) is None
        assert eval_calc_expr("x * 0 + 1", {"x": bad}) is None

    def test_never_raises(self):
        for expr in ["", "(((", ")", "1 2", "a b", "+", None]:
            assert eval_calc_expr(expr, {"a": 1.0, "b": 2.0}) is None

    def test_idempotent(self):
        ctx = {"a": 3.0, "b": 7.0}
        assert eval_calc_expr("a * b - 1", ctx) == eval_calc_expr("a * b - 1", ctx)


class TestContext:
    def _metrics(self):
        return [
            MetricRow(metric_id="gym", type="checkbox"),
            MetricRow(metric_id="weight", type="number"),
            MetricRow(metric_id="bed", type="hhmm"),
            MetricRow(metric_id="bmi", type="number", is_calculated=True,
                      calc_expr="weight / (1.8 * 1.8)"),
            MetricRow(metric_id="score", type="number", is_calculated=True,
                      calc_expr="gym * 10 + bed / 60"),
        ]

    def test_checkbox_always_resolves(self):
        ctx = build_numeric_context(self._metrics(), {"gym": 1.0})
        assert ctx["gym"] == 1.0
        ctx = build_numeric_context(self._metrics(), {"gym": 0.0})
        assert ctx["gym"] == 0.0
        ctx = build_numeric_context(self._metrics(), {})
        assert ctx["gym"] == 0.0

    def test_numeric_absent_is_null(self):
        ctx = build_numeric_context(self._metrics(), {})
        assert ctx["weight"] is None

    def test_compute_calculated_values(self):
        values = {"gym": 1.0, "weight": 81.0, "bed": 1380.0}
        result = compute_calculated_values(self._metrics(), values)
        assert result["bmi"] == pytest.approx(25.0)
        assert result["score"] == pytest.approx(33.0)
        assert result["weight"] is None  # not calculated

    def test_missing_input_blanks_only_its_metric(self):
        values = {"gym": 0.0, "bed": 1320.0}
        result = compute_calculated_values(self._metrics(), values)
        assert result["bmi"] is None
        assert result["score"] == pytest.approx(22.0)

    def test_blank_expression_is_null(self):
        metrics = [MetricRow(metric_id="c", is_calculated=True, calc_expr="  ")]
        assert compute_calculated_values(metrics, {}) == {"c": None}
