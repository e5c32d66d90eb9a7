"""Matrix cell styling and correlation descriptions

Производные атрибуты для отображения матрицы:
- cell_color: тепловая карта (белый → зелёный для положительных,
  белый → красный для отрицательных, светло-серый для N/A)
- format_cell: "0.80" или "N/A" (отсутствующая пара никогда не рендерится как 0)
- classify_correlation / describe_correlation: текст для панели деталей ячейки
"""

from enum import Enum
from typing import Final

from src.core.math.numerical_safeguards import (
    clamp,
    round_half_away_from_zero,
    validate_correlation,
)


# =============================================================================
# CONSTANTS
# =============================================================================

MISSING_CELL_COLOR: Final[str] = "#f8f9fa"
MISSING_CELL_TEXT: Final[str] = "N/A"

# Пороги силы связи (по модулю)
STRONG_CORRELATION_THRESHOLD: Final[float] = 0.7
MODERATE_CORRELATION_THRESHOLD: Final[float] = 0.3


# =============================================================================
# ENUMS
# =============================================================================


class CorrelationStrength(str, Enum):
    """Качественная оценка коэффициента корреляции"""

    STRONG_POSITIVE = "STRONG_POSITIVE"
    MODERATE_POSITIVE = "MODERATE_POSITIVE"
    WEAK = "WEAK"
    MODERATE_NEGATIVE = "MODERATE_NEGATIVE"
    STRONG_NEGATIVE = "STRONG_NEGATIVE"


_DESCRIPTIONS: Final[dict[CorrelationStrength, str]] = {
    CorrelationStrength.STRONG_POSITIVE: (
        "These stocks are highly positively correlated and tend to move together."
    ),
    CorrelationStrength.STRONG_NEGATIVE: (
        "These stocks are highly negatively correlated and tend to move in opposite directions."
    ),
    CorrelationStrength.MODERATE_POSITIVE: "These stocks have a moderate positive correlation.",
    CorrelationStrength.MODERATE_NEGATIVE: "These stocks have a moderate negative correlation.",
    CorrelationStrength.WEAK: "These stocks have little to no correlation.",
}


# =============================================================================
# CELL ATTRIBUTES
# =============================================================================


def cell_color(value: float | None) -> str:
    """
    Цвет ячейки матрицы.

    Интенсивность = round(abs(value) * 255):
    - value > 0 → rgb(255 - i, 255, 255 - i)
    - value <= 0 → rgb(255, 255 - i, 255 - i)
    - None → MISSING_CELL_COLOR

    Examples:
        >>> cell_color(1.0)
        'rgb(0, 255, 0)'
        >>> cell_color(None)
        '#f8f9fa'
    """
    if value is None:
        return MISSING_CELL_COLOR

    validate_correlation(value)
    intensity = int(clamp(round_half_away_from_zero(abs(value) * 255), 0, 255))
    channel = 255 - intensity

    if value > 0:
        return f"rgb({channel}, 255, {channel})"
    return f"rgb(255, {channel}, {channel})"


def format_cell(value: float | None, digits: int = 2) -> str:
    """Текст ячейки: значение с digits знаками или 'N/A'."""
    if value is None:
        return MISSING_CELL_TEXT
    return f"{value:.{digits}f}"


def classify_correlation(value: float) -> CorrelationStrength:
    """
    Классификация по порогам 0.7 / 0.3 (строгие неравенства).

    Raises:
        ValueError: value вне [-1, 1]
    """
    validate_correlation(value)

    if value > STRONG_CORRELATION_THRESHOLD:
        return CorrelationStrength.STRONG_POSITIVE
    if value < -STRONG_CORRELATION_THRESHOLD:
        return CorrelationStrength.STRONG_NEGATIVE
    if value > MODERATE_CORRELATION_THRESHOLD:
        return CorrelationStrength.MODERATE_POSITIVE
    if value < -MODERATE_CORRELATION_THRESHOLD:
        return CorrelationStrength.MODERATE_NEGATIVE
    return CorrelationStrength.WEAK


def describe_correlation(value: float) -> str:
    """Человекочитаемое описание связи для панели деталей."""
    return _DESCRIPTIONS[classify_correlation(value)]
