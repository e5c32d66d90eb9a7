"""
Ticker — идентификатор инструмента и каноническая пара тикеров

Тикер — непрозрачная строка в верхнем регистре. Пара тикеров неориентирована:
(A, B) и (B, A) — одна и та же пара, хранится в канонической (отсортированной) форме.
"""

from typing import Final

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# CONSTANTS
# =============================================================================

# Разделитель списков тикеров в запросах к сервису корреляций
TICKER_LIST_SEPARATOR: Final[str] = ","


# =============================================================================
# TICKER NORMALIZATION
# =============================================================================


def normalize_ticker(raw: str) -> str:
    """
    Нормализация тикера: strip + upper.

    Args:
        raw: Ввод пользователя или значение из ответа сервиса

    Returns:
        Тикер в верхнем регистре

    Raises:
        ValueError: Пустой тикер, пробелы внутри или разделитель списка

    Examples:
        >>> normalize_ticker(" nflx ")
        'NFLX'
    """
    if not isinstance(raw, str):
        raise ValueError(f"ticker must be a string, got {type(raw).__name__}")

    ticker = raw.strip().upper()
    if not ticker:
        raise ValueError("ticker must be non-empty")
    if any(ch.isspace() for ch in ticker):
        raise ValueError(f"ticker must not contain whitespace, got {raw!r}")
    if TICKER_LIST_SEPARATOR in ticker:
        raise ValueError(f"ticker must not contain {TICKER_LIST_SEPARATOR!r}, got {raw!r}")
    return ticker


def join_tickers(tickers: list[str] | tuple[str, ...]) -> str:
    """Список тикеров в формате параметров запроса: 'AAPL,MSFT,GOOGL'."""
    return TICKER_LIST_SEPARATOR.join(tickers)


# =============================================================================
# TICKER PAIR
# =============================================================================


class TickerPair(BaseModel):
    """
    Неориентированная пара различных тикеров.

    Инвариант: first < second (каноническая форма), first != second.
    Используйте TickerPair.of(a, b) — порядок аргументов не важен.
    """

    first: str = Field(..., min_length=1, description="Меньший тикер пары")
    second: str = Field(..., min_length=1, description="Больший тикер пары")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_canonical(self) -> "TickerPair":
        """Проверка канонической формы пары"""
        if self.first == self.second:
            raise ValueError(f"self-pair is not allowed: {self.first}")
        if self.first > self.second:
            raise ValueError(
                f"pair must be canonical (first < second), got ({self.first}, {self.second})"
            )
        return self

    @classmethod
    def of(cls, a: str, b: str) -> "TickerPair":
        """Каноническая пара для (a, b) в любом порядке."""
        if a <= b:
            return cls(first=a, second=b)
        return cls(first=b, second=a)

    def contains(self, ticker: str) -> bool:
        """True если тикер — один из концов пары."""
        return ticker == self.first or ticker == self.second

    def other(self, ticker: str) -> str:
        """Второй конец пары относительно ticker."""
        if ticker == self.first:
            return self.second
        if ticker == self.second:
            return self.first
        raise ValueError(f"{ticker} is not part of pair ({self.first}, {self.second})")
