"""
Correlation — парные записи корреляций

Контракт ответа сервиса: contracts/schema/correlation_record.json

- CorrelationRecord: сырая запись ответа {ticker, compared_ticker, data}
- PairwiseCorrelation: значение для неориентированной пары
- CorrelationPairs: неизменяемый кэш нормализованных пар одного поколения fetch
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from pydantic import BaseModel, Field, field_validator

from src.core.domain.ticker import TickerPair, normalize_ticker


# =============================================================================
# RAW RECORD
# =============================================================================


class CorrelationRecord(BaseModel):
    """
    Сырая запись ответа GET /correlation.

    Тикеры нормализуются в верхний регистр. Значение — конечное число в [-1, 1].
    Самопары (ticker == compared_ticker) допустимы на уровне записи и
    отбрасываются нормализатором.
    """

    ticker: str = Field(..., min_length=1, description="Основной тикер")
    compared_ticker: str = Field(..., min_length=1, description="Сравниваемый тикер")
    data: float = Field(
        ..., ge=-1.0, le=1.0, allow_inf_nan=False, description="Коэффициент корреляции"
    )

    model_config = {"frozen": True}

    @field_validator("ticker", "compared_ticker")
    @classmethod
    def validate_ticker(cls, v: str) -> str:
        """Нормализация тикера (strip + upper)"""
        return normalize_ticker(v)

    def is_self_pair(self) -> bool:
        """True если запись описывает тикер сам с собой."""
        return self.ticker == self.compared_ticker

    def pair(self) -> TickerPair:
        """
        Каноническая пара записи.

        Raises:
            ValueError: Для самопары
        """
        return TickerPair.of(self.ticker, self.compared_ticker)


# =============================================================================
# PAIRWISE CORRELATION
# =============================================================================


class PairwiseCorrelation(BaseModel):
    """Корреляция неориентированной пары тикеров (хранится один раз на пару)."""

    pair: TickerPair = Field(..., description="Каноническая пара")
    value: float = Field(
        ..., ge=-1.0, le=1.0, allow_inf_nan=False, description="Коэффициент корреляции"
    )

    model_config = {"frozen": True}


# =============================================================================
# NORMALIZED PAIRS CACHE
# =============================================================================


@dataclass(frozen=True)
class CorrelationPairs:
    """
    Неизменяемое отображение TickerPair → value одного поколения fetch.

    universe — тикеры, для которых сервис опрашивался. Отсутствие пары внутри
    universe означает "данных нет" (ячейка N/A), а не "неизвестно".

    Кэш никогда не мутируется по ячейкам: каждый fetch или удаление тикера
    создаёт новый экземпляр (copy-on-write).
    """

    entries: tuple[PairwiseCorrelation, ...] = ()
    universe: frozenset[str] = frozenset()

    _index: Mapping[TickerPair, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[TickerPair, float] = {}
        for entry in self.entries:
            if entry.pair in index:
                raise ValueError(
                    f"duplicate pair ({entry.pair.first}, {entry.pair.second}) in CorrelationPairs"
                )
            index[entry.pair] = entry.value
        object.__setattr__(self, "_index", MappingProxyType(index))

    @classmethod
    def from_mapping(
        cls,
        values: Mapping[TickerPair, float],
        universe: Iterable[str] | None = None,
    ) -> "CorrelationPairs":
        """Построение из словаря пар (порядок вставки сохраняется)."""
        entries = tuple(PairwiseCorrelation(pair=p, value=v) for p, v in values.items())
        if universe is None:
            tickers: set[str] = set()
            for p in values:
                tickers.add(p.first)
                tickers.add(p.second)
            universe = tickers
        return cls(entries=entries, universe=frozenset(universe))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PairwiseCorrelation]:
        return iter(self.entries)

    def __contains__(self, pair: object) -> bool:
        return pair in self._index

    def get(self, a: str, b: str) -> float | None:
        """Значение для пары (a, b) в любом порядке; None если записи нет."""
        if a == b:
            return None
        return self._index.get(TickerPair.of(a, b))

    def as_mapping(self) -> Mapping[TickerPair, float]:
        """Read-only view на индекс пар."""
        return self._index

    def covers(self, ticker: str) -> bool:
        """True если ticker входил в запрос, из которого получен кэш."""
        return ticker in self.universe

    def restrict(self, tickers: Iterable[str]) -> "CorrelationPairs":
        """
        Новый кэш, ограниченный парами, оба конца которых в tickers.

        universe также сужается до tickers.
        """
        keep = frozenset(tickers)
        entries = tuple(
            e for e in self.entries if e.pair.first in keep and e.pair.second in keep
        )
        return CorrelationPairs(entries=entries, universe=self.universe & keep)
