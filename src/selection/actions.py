"""
Actions — входные события редьюсера выбора тикеров

Пользовательские действия (добавление, удаление, переключение чекбоксов,
порог графа) и события сервиса (ответ/ошибка fetch, метрики).
Все действия — immutable pydantic модели; тикеры нормализуются при создании.
"""

from typing import Union

from pydantic import BaseModel, Field, field_validator

from src.core.domain.correlation import CorrelationRecord
from src.core.domain.metrics import StockMetrics
from src.core.domain.ticker import normalize_ticker


class _TickerAction(BaseModel):
    ticker: str = Field(..., description="Тикер (нормализуется в верхний регистр)")

    model_config = {"frozen": True}

    @field_validator("ticker", mode="before")
    @classmethod
    def validate_ticker(cls, v: object) -> str:
        return normalize_ticker(v)  # type: ignore[arg-type]


# =============================================================================
# USER ACTIONS
# =============================================================================


class LoadTickers(BaseModel):
    """Загрузка набора тикеров (стартовый выбор сессии)."""

    tickers: tuple[str, ...] = Field(..., description="Тикеры в порядке осей")

    model_config = {"frozen": True}

    @field_validator("tickers", mode="before")
    @classmethod
    def validate_tickers(cls, v: object) -> tuple[str, ...]:
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"tickers must be a list of strings, got {type(v).__name__}")
        return tuple(normalize_ticker(t) for t in v)


class AddTicker(_TickerAction):
    """Добавление нового тикера (требует fetch)."""


class RemoveTicker(_TickerAction):
    """Удаление тикера из списка (локальная проекция, без fetch)."""


class SelectTicker(_TickerAction):
    """Включение отображения ранее добавленного тикера."""


class DeselectTicker(_TickerAction):
    """Выключение отображения тикера; тикер остаётся в списке."""


class SelectAll(BaseModel):
    """Отображение всех добавленных тикеров."""

    model_config = {"frozen": True}


class DeselectAll(BaseModel):
    """Скрытие всех тикеров."""

    model_config = {"frozen": True}


class ChangeCutoff(BaseModel):
    """Новый порог графа; матрица не меняется, fetch не выполняется."""

    cutoff: float = Field(..., ge=0.0, le=1.0, allow_inf_nan=False, description="Порог abs(value)")

    model_config = {"frozen": True}


class Refresh(BaseModel):
    """Повторный запрос корреляций для текущего выбора (ручной retry)."""

    model_config = {"frozen": True}


class DismissError(BaseModel):
    """Закрытие сообщения об ошибке fetch."""

    model_config = {"frozen": True}


class TickerRejected(BaseModel):
    """Отказ в добавлении тикера (валидация); выбор не меняется."""

    raw: str = Field(default="", description="Ввод пользователя как есть")
    message: str = Field(..., min_length=1, description="Сообщение для поля ввода")

    model_config = {"frozen": True}


# =============================================================================
# SERVICE EVENTS
# =============================================================================


class FetchSucceeded(BaseModel):
    """Ответ сервиса корреляций на запрос с номером sequence."""

    sequence: int = Field(..., ge=1, description="Номер запроса")
    records: tuple[CorrelationRecord, ...] = Field(default=(), description="Записи ответа")

    model_config = {"frozen": True}


class FetchFailed(BaseModel):
    """Ошибка запроса с номером sequence."""

    sequence: int = Field(..., ge=1, description="Номер запроса")
    message: str = Field(..., min_length=1, description="Сообщение для пользователя")

    model_config = {"frozen": True}


class MetricsLoaded(_TickerAction):
    """Метрики тикера получены."""

    metrics: StockMetrics


SelectionAction = Union[
    LoadTickers,
    AddTicker,
    RemoveTicker,
    SelectTicker,
    DeselectTicker,
    SelectAll,
    DeselectAll,
    ChangeCutoff,
    Refresh,
    DismissError,
    TickerRejected,
    FetchSucceeded,
    FetchFailed,
    MetricsLoaded,
]
