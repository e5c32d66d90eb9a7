"""
Тесты для модуля Numerical Safeguards

Проверяет:
1. NaN/Inf проверки
2. Epsilon-сравнения float
3. Ограничение значений и округление цветовых каналов
4. Валидацию параметров и коэффициентов корреляции
"""


import pytest

from src.core.math.numerical_safeguards import (
    CORRELATION_MAX,
    CORRELATION_MIN,
    EPS_FLOAT_COMPARE_ABS,
    clamp,
    is_close,
    is_valid_float,
    round_half_away_from_zero,
    validate_correlation,
    validate_in_range,
)


class TestIsValidFloat:
    """Тесты is_valid_float."""

    def test_finite(self):
        assert is_valid_float(0.0)
        assert is_valid_float(-1.0)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_not_finite(self, value):
        assert not is_valid_float(value)


class TestIsClose:
    """Тесты epsilon-сравнения."""

    def test_equal_within_tolerance(self):
        """Разница ниже абсолютной толерантности."""
        assert is_close(0.8, 0.8 + EPS_FLOAT_COMPARE_ABS / 2)

    def test_different(self):
        assert not is_close(0.8, 0.81)

    def test_zero(self):
        assert is_close(0.0, -0.0)


class TestClamp:
    """Тесты clamp."""

    def test_bounds(self):
        assert clamp(1.2, 0.0, 1.0) == 1.0
        assert clamp(-0.3, 0.0, 1.0) == 0.0
        assert clamp(0.4, 0.0, 1.0) == 0.4

    def test_open_bounds(self):
        """Границы опциональны."""
        assert clamp(5.0) == 5.0
        assert clamp(5.0, min_value=6.0) == 6.0
        assert clamp(5.0, max_value=4.0) == 4.0


class TestRoundHalfAwayFromZero:
    """Тесты округления "от нуля"."""

    @pytest.mark.parametrize(
        "value,expected",
        [(127.5, 128), (126.5, 127), (0.4, 0), (-0.5, -1), (-2.4, -2), (255.0, 255)],
    )
    def test_rounding(self, value, expected):
        assert round_half_away_from_zero(value) == expected

    def test_differs_from_bankers_rounding(self):
        """round(126.5) == 126, а канал должен быть 127."""
        assert round(126.5) == 126
        assert round_half_away_from_zero(126.5) == 127


class TestValidateInRange:
    """Тесты validate_in_range."""

    def test_inclusive_bounds(self):
        validate_in_range(0.0, "x", 0.0, 1.0)
        validate_in_range(1.0, "x", 0.0, 1.0)
        validate_in_range(1, "x", 0.0, 1.0)

    @pytest.mark.parametrize("value", [-0.01, 1.01])
    def test_out_of_range(self, value):
        with pytest.raises(ValueError, match="x must be"):
            validate_in_range(value, "x", 0.0, 1.0)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_not_finite(self, value):
        with pytest.raises(ValueError, match="NaN/Inf"):
            validate_in_range(value, "x", 0.0, 1.0)

    @pytest.mark.parametrize("value", [True, "0.5", None])
    def test_not_a_number(self, value):
        """bool и строки не считаются числами."""
        with pytest.raises(ValueError, match="real number"):
            validate_in_range(value, "x", 0.0, 1.0)


class TestValidateCorrelation:
    """Тесты validate_correlation."""

    def test_bounds(self):
        validate_correlation(CORRELATION_MIN)
        validate_correlation(CORRELATION_MAX)
        validate_correlation(0.0)

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="correlation must be <= 1.0"):
            validate_correlation(1.5)
