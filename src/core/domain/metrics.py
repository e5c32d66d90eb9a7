"""
External service response models: stock metrics and ticker validation

Контракты: contracts/schema/stock_metrics.json, contracts/schema/ticker_validation.json

Метрики — чисто отображаемые данные: их отсутствие не блокирует расчёт
матрицы и графа.
"""

from pydantic import BaseModel, Field


class StockMetrics(BaseModel):
    """
    Метрики тикера из GET /stockinfo.

    beta — волатильность относительно S&P 500, returns — доходность за
    отчётный период (проценты). Для движка непрозрачны.
    """

    beta: float = Field(..., allow_inf_nan=False, description="Beta относительно S&P 500")
    returns: float = Field(..., allow_inf_nan=False, description="Доходность за период (%)")

    model_config = {"frozen": True}


class TickerValidation(BaseModel):
    """Ответ GET /validate."""

    exists: bool = Field(..., description="Тикер известен сервису")

    model_config = {"frozen": True}
