"""Selection State Machine — политика изменения датасета при смене выбора.

Фазы IDLE → FETCHING → READY, петля READY → READY для локальных изменений:
- Добавление тикера: полный fetch (корреляции нового тикера неизвестны)
- Удаление / скрытие тикера: локальная проекция матрицы и графа, без fetch
- Изменение cutoff: только Graph Builder, матрица не меняется
- Ответы fetch применяются только для последнего выданного номера запроса;
  устаревшие ответы и ошибки отбрасываются
- Ошибка последнего fetch возвращает последний зафиксированный датасет
"""

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Optional

from src.core.domain.correlation import CorrelationPairs
from src.core.domain.graph import CorrelationGraph
from src.core.domain.matrix import CorrelationMatrix
from src.core.domain.selection import SelectionState
from src.core.util.jsonlog import log_json
from src.engine.graph_builder import GraphStyle, build_graph, project_graph
from src.engine.matrix_builder import build_matrix, project_matrix
from src.engine.normalizer import normalize_records
from src.selection.actions import (
    AddTicker,
    ChangeCutoff,
    DeselectAll,
    DeselectTicker,
    DismissError,
    FetchFailed,
    FetchSucceeded,
    LoadTickers,
    MetricsLoaded,
    Refresh,
    RemoveTicker,
    SelectAll,
    SelectionAction,
    SelectTicker,
    TickerRejected,
)
from src.selection.snapshot import DatasetPhase, DatasetSnapshot, FetchRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """Результат применения действия к снимку."""

    snapshot: DatasetSnapshot
    previous_phase: DatasetPhase

    # Диагностика
    transition_occurred: bool
    transition_reason: str

    # Запрос для сессии; None если сеть не нужна
    fetch_request: Optional[FetchRequest]

    # Для отладки
    details: str


class SelectionStateMachine:
    """Редьюсер снимков датасета.

    apply() — чистая функция (snapshot, action) → TransitionResult; сеть не
    используется, запрос возвращается в fetch_request и выполняется сессией.

    Состояния:
    - IDLE: пустой выбор, запросов нет
    - FETCHING: выдан запрос latest_sequence, ожидается ответ
    - READY: матрица и граф построены для selection
    """

    def __init__(self, graph_style: Optional[GraphStyle] = None):
        """
        Args:
            graph_style: цвета и масштаб толщины рёбер (default GraphStyle())
        """
        self.graph_style = graph_style

    def apply(self, snapshot: DatasetSnapshot, action: SelectionAction) -> TransitionResult:
        """Применение действия.

        Args:
            snapshot: текущий снимок
            action: действие пользователя или событие сервиса

        Returns:
            TransitionResult с новым снимком и, при необходимости, запросом

        Raises:
            TypeError: неизвестный тип действия
        """
        if isinstance(action, LoadTickers):
            result = self._load(snapshot, action)
        elif isinstance(action, AddTicker):
            result = self._add(snapshot, action)
        elif isinstance(action, RemoveTicker):
            result = self._remove(snapshot, action)
        elif isinstance(action, SelectTicker):
            result = self._select(snapshot, action)
        elif isinstance(action, DeselectTicker):
            result = self._deselect(snapshot, action)
        elif isinstance(action, SelectAll):
            result = self._select_all(snapshot)
        elif isinstance(action, DeselectAll):
            result = self._deselect_all(snapshot)
        elif isinstance(action, ChangeCutoff):
            result = self._change_cutoff(snapshot, action)
        elif isinstance(action, Refresh):
            result = self._refresh(snapshot)
        elif isinstance(action, DismissError):
            result = self._dismiss_error(snapshot)
        elif isinstance(action, TickerRejected):
            result = self._create_result(
                snapshot,
                replace(snapshot, field_error=action.message),
                transition_reason="ticker_rejected",
                details=f"{action.raw!r}: {action.message}",
            )
        elif isinstance(action, FetchSucceeded):
            result = self._fetch_succeeded(snapshot, action)
        elif isinstance(action, FetchFailed):
            result = self._fetch_failed(snapshot, action)
        elif isinstance(action, MetricsLoaded):
            result = self._metrics_loaded(snapshot, action)
        else:
            raise TypeError(f"unsupported action: {type(action).__name__}")

        log_json(
            logger,
            {
                "module": "SelectionStateMachine",
                "event": "TRANSITION",
                "action": type(action).__name__,
                "reason": result.transition_reason,
                "from": result.previous_phase.value,
                "to": result.snapshot.phase.value,
                "sequence": result.snapshot.latest_sequence,
            },
            level=logging.DEBUG,
        )
        return result

    # -------------------------------------------------------------------------
    # Fetch-triggering actions
    # -------------------------------------------------------------------------

    def _load(self, snapshot: DatasetSnapshot, action: LoadTickers) -> TransitionResult:
        target = snapshot.target_selection.with_loaded(action.tickers)
        if target.is_empty():
            return self._commit_local(snapshot, target, "load_empty")
        return self._request_fetch(snapshot, target, "load_tickers")

    def _add(self, snapshot: DatasetSnapshot, action: AddTicker) -> TransitionResult:
        target = snapshot.target_selection
        if target.knows(action.ticker):
            message = f"{action.ticker} is already in your list"
            return self._create_result(
                snapshot,
                replace(snapshot, field_error=message),
                transition_reason="duplicate_ticker",
                details=message,
            )
        return self._request_fetch(
            replace(snapshot, field_error=None), target.with_added(action.ticker), "add_ticker"
        )

    def _select(self, snapshot: DatasetSnapshot, action: SelectTicker) -> TransitionResult:
        target = snapshot.target_selection
        if not target.knows(action.ticker):
            return self._no_change(snapshot, "unknown_ticker", f"{action.ticker} is not in your list")
        if target.is_selected(action.ticker):
            return self._no_change(snapshot, "already_selected", action.ticker)

        target = target.with_selected(action.ticker)
        if self._can_rebuild_locally(snapshot, target):
            return self._commit_local(snapshot, target, "select_cached")
        return self._request_fetch(snapshot, target, "select_fetch")

    def _select_all(self, snapshot: DatasetSnapshot) -> TransitionResult:
        current = snapshot.target_selection
        target = current.with_all_selected()
        if target == current:
            return self._no_change(snapshot, "already_selected", "all tickers selected")
        if self._can_rebuild_locally(snapshot, target):
            return self._commit_local(snapshot, target, "select_all_cached")
        return self._request_fetch(snapshot, target, "select_all_fetch")

    def _refresh(self, snapshot: DatasetSnapshot) -> TransitionResult:
        target = snapshot.target_selection
        if target.is_empty():
            return self._no_change(snapshot, "nothing_to_refresh", "selection is empty")
        return self._request_fetch(snapshot, target, "refresh")

    # -------------------------------------------------------------------------
    # Local projections
    # -------------------------------------------------------------------------

    def _remove(self, snapshot: DatasetSnapshot, action: RemoveTicker) -> TransitionResult:
        ticker = action.ticker
        if not snapshot.selection.knows(ticker) and not snapshot.target_selection.knows(ticker):
            return self._no_change(snapshot, "unknown_ticker", f"{ticker} is not in your list")

        selection = snapshot.selection.without(ticker)
        pending = (
            snapshot.pending_selection.without(ticker)
            if snapshot.pending_selection is not None
            else None
        )
        pairs = snapshot.pairs.restrict(selection.all_tickers)
        settled, pending = self._settle_pending(selection, pending, pairs)

        new_snapshot = replace(
            snapshot,
            phase=self._phase_for(settled, pending),
            selection=settled,
            pending_selection=pending,
            pairs=pairs,
            matrix=self._project_or_rebuild(snapshot, selection, settled, pairs),
            graph=build_graph(settled.selected_tickers, pairs, snapshot.cutoff, self.graph_style),
            metrics=MappingProxyType({t: m for t, m in snapshot.metrics.items() if t != ticker}),
        )
        return self._create_result(
            snapshot,
            new_snapshot,
            transition_reason="remove_ticker",
            details=f"removed {ticker}, remaining={list(selection.selected_tickers)}",
        )

    def _deselect(self, snapshot: DatasetSnapshot, action: DeselectTicker) -> TransitionResult:
        ticker = action.ticker
        if not snapshot.target_selection.is_selected(ticker) and not snapshot.selection.is_selected(
            ticker
        ):
            return self._no_change(snapshot, "not_selected", ticker)

        selection = snapshot.selection.with_deselected(ticker)
        pending = (
            snapshot.pending_selection.with_deselected(ticker)
            if snapshot.pending_selection is not None
            else None
        )
        settled, pending = self._settle_pending(selection, pending, snapshot.pairs)
        if settled is selection:
            graph = project_graph(snapshot.graph, selection.selected_tickers)
        else:
            graph = build_graph(
                settled.selected_tickers, snapshot.pairs, snapshot.cutoff, self.graph_style
            )
        new_snapshot = replace(
            snapshot,
            phase=self._phase_for(settled, pending),
            selection=settled,
            pending_selection=pending,
            matrix=self._project_or_rebuild(snapshot, selection, settled, snapshot.pairs),
            graph=graph,
        )
        return self._create_result(
            snapshot,
            new_snapshot,
            transition_reason="deselect_ticker",
            details=f"deselected {ticker}",
        )

    def _deselect_all(self, snapshot: DatasetSnapshot) -> TransitionResult:
        if snapshot.target_selection.is_empty() and snapshot.selection.is_empty():
            return self._no_change(snapshot, "not_selected", "nothing selected")

        selection = snapshot.selection.with_none_selected()
        pending = (
            snapshot.pending_selection.with_none_selected()
            if snapshot.pending_selection is not None
            else None
        )
        # Пустой ожидающий выбор всегда покрыт кэшем и фиксируется сразу
        selection, pending = self._settle_pending(selection, pending, snapshot.pairs)
        new_snapshot = replace(
            snapshot,
            phase=self._phase_for(selection, pending),
            selection=selection,
            pending_selection=pending,
            matrix=CorrelationMatrix.empty(),
            graph=CorrelationGraph.empty(snapshot.cutoff),
        )
        return self._create_result(
            snapshot, new_snapshot, transition_reason="deselect_all", details="all tickers hidden"
        )

    def _change_cutoff(self, snapshot: DatasetSnapshot, action: ChangeCutoff) -> TransitionResult:
        graph = build_graph(
            snapshot.selection.selected_tickers, snapshot.pairs, action.cutoff, self.graph_style
        )
        return self._create_result(
            snapshot,
            replace(snapshot, cutoff=graph.cutoff, graph=graph),
            transition_reason="cutoff_changed",
            details=f"cutoff {snapshot.cutoff} → {graph.cutoff}, edges={len(graph.edges)}",
        )

    # -------------------------------------------------------------------------
    # Service events
    # -------------------------------------------------------------------------

    def _fetch_succeeded(self, snapshot: DatasetSnapshot, action: FetchSucceeded) -> TransitionResult:
        if action.sequence != snapshot.latest_sequence or snapshot.pending_selection is None:
            return self._stale(snapshot, action.sequence)

        selection = snapshot.pending_selection
        normalized = normalize_records(action.records, universe=selection.selected_tickers)

        new_snapshot = replace(
            snapshot,
            phase=self._phase_for(selection, None),
            selection=selection,
            pending_selection=None,
            pairs=normalized.pairs,
            matrix=build_matrix(selection.selected_tickers, normalized.pairs),
            graph=build_graph(
                selection.selected_tickers, normalized.pairs, snapshot.cutoff, self.graph_style
            ),
            applied_sequence=action.sequence,
            error=None,
            metrics=MappingProxyType(
                {t: m for t, m in snapshot.metrics.items() if selection.knows(t)}
            ),
        )
        return self._create_result(
            snapshot,
            new_snapshot,
            transition_reason="fetch_applied",
            details=f"sequence={action.sequence}, {normalized.details}",
        )

    def _fetch_failed(self, snapshot: DatasetSnapshot, action: FetchFailed) -> TransitionResult:
        if action.sequence != snapshot.latest_sequence or snapshot.pending_selection is None:
            return self._stale(snapshot, action.sequence)

        # Зафиксированный датасет остаётся, ожидающий выбор отбрасывается
        new_snapshot = replace(
            snapshot,
            phase=self._phase_for(snapshot.selection, None),
            pending_selection=None,
            error=action.message,
        )
        return self._create_result(
            snapshot,
            new_snapshot,
            transition_reason="fetch_failed",
            details=f"sequence={action.sequence}: {action.message}",
        )

    def _metrics_loaded(self, snapshot: DatasetSnapshot, action: MetricsLoaded) -> TransitionResult:
        if not snapshot.target_selection.knows(action.ticker):
            return self._no_change(snapshot, "metrics_for_unknown_ticker", action.ticker)

        metrics = dict(snapshot.metrics)
        metrics[action.ticker] = action.metrics
        return self._create_result(
            snapshot,
            replace(snapshot, metrics=MappingProxyType(metrics)),
            transition_reason="metrics_loaded",
            details=action.ticker,
        )

    def _dismiss_error(self, snapshot: DatasetSnapshot) -> TransitionResult:
        if snapshot.error is None:
            return self._no_change(snapshot, "no_error", "")
        return self._create_result(
            snapshot,
            replace(snapshot, error=None),
            transition_reason="error_dismissed",
            details=snapshot.error,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _phase_for(selection: SelectionState, pending: Optional[SelectionState]) -> DatasetPhase:
        if pending is not None:
            return DatasetPhase.FETCHING
        if selection.is_empty():
            return DatasetPhase.IDLE
        return DatasetPhase.READY

    @staticmethod
    def _can_rebuild_locally(snapshot: DatasetSnapshot, target: SelectionState) -> bool:
        """Локальная пересборка возможна, если нет ожидающего запроса и кэш
        пар покрывает все тикеры target."""
        if snapshot.pending_selection is not None:
            return False
        return all(snapshot.pairs.covers(t) for t in target.selected_tickers)

    @staticmethod
    def _settle_pending(
        selection: SelectionState,
        pending: Optional[SelectionState],
        pairs: CorrelationPairs,
    ) -> tuple[SelectionState, Optional[SelectionState]]:
        """
        Фиксация ожидающего выбора, если сеть для него больше не нужна.

        После удаления / скрытия ожидающий выбор может совпасть с
        зафиксированным или целиком покрываться кэшем пар. Тогда он
        становится зафиксированным, а ответ на выданный запрос затем
        отбрасывается как устаревший.

        Returns:
            (selection, pending); pending None если выбор зафиксирован
        """
        if pending is None:
            return selection, None
        if pending == selection or all(pairs.covers(t) for t in pending.selected_tickers):
            return pending, None
        return selection, pending

    @staticmethod
    def _project_or_rebuild(
        snapshot: DatasetSnapshot,
        projected: SelectionState,
        settled: SelectionState,
        pairs: CorrelationPairs,
    ) -> CorrelationMatrix:
        if settled is projected:
            return project_matrix(snapshot.matrix, projected.selected_tickers)
        return build_matrix(settled.selected_tickers, pairs)

    def _commit_local(
        self, snapshot: DatasetSnapshot, selection: SelectionState, reason: str
    ) -> TransitionResult:
        pairs = snapshot.pairs
        new_snapshot = replace(
            snapshot,
            phase=self._phase_for(selection, None),
            selection=selection,
            pending_selection=None,
            matrix=build_matrix(selection.selected_tickers, pairs),
            graph=build_graph(selection.selected_tickers, pairs, snapshot.cutoff, self.graph_style),
        )
        return self._create_result(
            snapshot,
            new_snapshot,
            transition_reason=reason,
            details=f"selected={list(selection.selected_tickers)}",
        )

    def _request_fetch(
        self, snapshot: DatasetSnapshot, target: SelectionState, reason: str
    ) -> TransitionResult:
        sequence = snapshot.latest_sequence + 1
        request = FetchRequest(sequence=sequence, tickers=target.selected_tickers)
        new_snapshot = replace(
            snapshot,
            phase=DatasetPhase.FETCHING,
            pending_selection=target,
            latest_sequence=sequence,
        )
        return self._create_result(
            snapshot,
            new_snapshot,
            transition_reason=reason,
            details=f"sequence={sequence}, tickers={request.main}",
            fetch_request=request,
        )

    def _stale(self, snapshot: DatasetSnapshot, sequence: int) -> TransitionResult:
        return self._no_change(
            snapshot,
            "stale_response_discarded",
            f"sequence={sequence}, latest={snapshot.latest_sequence}",
        )

    @staticmethod
    def _no_change(snapshot: DatasetSnapshot, reason: str, details: str) -> TransitionResult:
        return TransitionResult(
            snapshot=snapshot,
            previous_phase=snapshot.phase,
            transition_occurred=False,
            transition_reason=reason,
            fetch_request=None,
            details=details,
        )

    @staticmethod
    def _create_result(
        previous: DatasetSnapshot,
        snapshot: DatasetSnapshot,
        transition_reason: str,
        details: str,
        fetch_request: Optional[FetchRequest] = None,
    ) -> TransitionResult:
        return TransitionResult(
            snapshot=snapshot,
            previous_phase=previous.phase,
            transition_occurred=snapshot is not previous,
            transition_reason=transition_reason,
            fetch_request=fetch_request,
            details=details,
        )
