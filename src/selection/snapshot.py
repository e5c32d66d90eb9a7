"""
DatasetSnapshot — неизменяемое состояние датасета сессии

Снимок объединяет выбор тикеров, кэш пар одного поколения fetch и
производные представления (матрица, граф). Каждый переход редьюсера создаёт
новый снимок; существующие снимки не изменяются.

ИНВАРИАНТЫ:
1. matrix.tickers == selection.selected_tickers
2. graph.node_ids() == selection.selected_tickers, graph.cutoff == cutoff
3. pending_selection is None ⇔ phase != FETCHING
4. applied_sequence <= latest_sequence
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from src.core.domain.correlation import CorrelationPairs
from src.core.domain.graph import CorrelationGraph
from src.core.domain.matrix import CorrelationMatrix
from src.core.domain.metrics import StockMetrics
from src.core.domain.selection import SelectionState
from src.core.domain.ticker import join_tickers
from src.engine.graph_builder import validate_cutoff
from src.engine.styling import describe_correlation


class DatasetPhase(str, Enum):
    """
    Фаза свежести датасета.

    - IDLE: нечего отображать (пустой выбор) и запросов нет
    - FETCHING: ожидается ответ на последний запрос
    - READY: датасет соответствует выбору
    """

    IDLE = "IDLE"
    FETCHING = "FETCHING"
    READY = "READY"


@dataclass(frozen=True)
class FetchRequest:
    """Запрос корреляций, который должна выполнить сессия."""

    sequence: int
    tickers: tuple[str, ...]

    @property
    def main(self) -> str:
        return join_tickers(self.tickers)

    @property
    def comparisons(self) -> str:
        # Сервис сравнивает весь список сам с собой
        return join_tickers(self.tickers)


@dataclass(frozen=True)
class DatasetSnapshot:
    """Снимок датасета сессии."""

    phase: DatasetPhase
    selection: SelectionState  # Зафиксированный (отображаемый) выбор
    pairs: CorrelationPairs
    matrix: CorrelationMatrix
    graph: CorrelationGraph
    cutoff: float

    pending_selection: SelectionState | None = None  # Выбор, ожидающий ответа
    latest_sequence: int = 0  # Номер последнего выданного запроса
    applied_sequence: int = 0  # Номер последнего применённого ответа

    error: str | None = None  # Ошибка fetch (закрываемая)
    field_error: str | None = None  # Отказ в добавлении тикера

    metrics: Mapping[str, StockMetrics] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.metrics, MappingProxyType):
            object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    @property
    def target_selection(self) -> SelectionState:
        """Выбор, который увидит пользователь после завершения fetch."""
        return self.pending_selection if self.pending_selection is not None else self.selection

    def metrics_for(self, ticker: str) -> StockMetrics | None:
        return self.metrics.get(ticker)


def initial_snapshot(cutoff: float) -> DatasetSnapshot:
    """
    Пустой IDLE снимок начала сессии.

    Raises:
        ValueError: cutoff вне [0, 1]
    """
    cutoff = validate_cutoff(cutoff)
    return DatasetSnapshot(
        phase=DatasetPhase.IDLE,
        selection=SelectionState(),
        pairs=CorrelationPairs(),
        matrix=CorrelationMatrix.empty(),
        graph=CorrelationGraph.empty(cutoff),
        cutoff=cutoff,
    )


# =============================================================================
# CELL DETAILS
# =============================================================================


@dataclass(frozen=True)
class CellDetails:
    """Данные панели деталей для ячейки матрицы."""

    ticker: str
    compared_ticker: str
    value: float | None
    description: str | None  # None для диагонали и пар без данных
    ticker_metrics: StockMetrics | None
    compared_metrics: StockMetrics | None


def cell_details(snapshot: DatasetSnapshot, ticker: str, compared_ticker: str) -> CellDetails:
    """
    Детали ячейки (ticker, compared_ticker) текущей матрицы.

    Диагональная ячейка (тикер сам с собой) не описывается: description None.

    Raises:
        KeyError: Тикер не отображается в матрице
    """
    value = snapshot.matrix.value(ticker, compared_ticker)
    described = value is not None and ticker != compared_ticker
    return CellDetails(
        ticker=ticker,
        compared_ticker=compared_ticker,
        value=value,
        description=describe_correlation(value) if described else None,
        ticker_metrics=snapshot.metrics_for(ticker),
        compared_metrics=snapshot.metrics_for(compared_ticker),
    )
