"""Тесты для стилей ячеек матрицы и описаний силы корреляции."""

import pytest

from src.engine.styling import (
    MISSING_CELL_COLOR,
    CorrelationStrength,
    cell_color,
    classify_correlation,
    describe_correlation,
    format_cell,
)


class TestCellColor:
    """Тесты тепловой карты."""

    def test_perfect_positive(self):
        assert cell_color(1.0) == "rgb(0, 255, 0)"

    def test_perfect_negative(self):
        assert cell_color(-1.0) == "rgb(255, 0, 0)"

    def test_zero_is_white(self):
        assert cell_color(0.0) == "rgb(255, 255, 255)"

    def test_half_rounds_up(self):
        """0.5 * 255 = 127.5 → интенсивность 128."""
        assert cell_color(0.5) == "rgb(127, 255, 127)"
        assert cell_color(-0.5) == "rgb(255, 127, 127)"

    def test_missing(self):
        assert cell_color(None) == MISSING_CELL_COLOR

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            cell_color(1.2)


class TestFormatCell:
    """Тесты текста ячейки."""

    def test_value(self):
        assert format_cell(0.8) == "0.80"
        assert format_cell(-0.256, digits=1) == "-0.3"

    def test_missing_is_not_zero(self):
        """Отсутствующая пара → 'N/A', не '0.00'."""
        assert format_cell(None) == "N/A"


class TestClassifyCorrelation:
    """Тесты классификации силы связи."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.9, CorrelationStrength.STRONG_POSITIVE),
            (0.7, CorrelationStrength.MODERATE_POSITIVE),
            (0.5, CorrelationStrength.MODERATE_POSITIVE),
            (0.3, CorrelationStrength.WEAK),
            (0.0, CorrelationStrength.WEAK),
            (-0.3, CorrelationStrength.WEAK),
            (-0.5, CorrelationStrength.MODERATE_NEGATIVE),
            (-0.71, CorrelationStrength.STRONG_NEGATIVE),
        ],
    )
    def test_thresholds(self, value, expected):
        """Пороги 0.7 / 0.3 — строгие неравенства."""
        assert classify_correlation(value) == expected

    def test_description(self):
        assert "move together" in describe_correlation(0.95)
        assert "opposite directions" in describe_correlation(-0.95)
        assert "little to no" in describe_correlation(0.1)
