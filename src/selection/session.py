"""Correlation Session — асинхронный координатор датасета.

Сессия хранит текущий DatasetSnapshot, прогоняет действия через
SelectionStateMachine и выполняет запросы, которые возвращает редьюсер:
- ответ запроса возвращается в редьюсер как FetchSucceeded / FetchFailed
  с номером запроса; устаревшие ответы отбрасываются редьюсером
- несколько dispatch() могут выполняться одновременно (asyncio.gather),
  отмена и повторы не выполняются
- ошибки метрик не влияют на матрицу и граф
"""

import asyncio
import logging
from typing import Optional

from src.clients.correlation_api import CorrelationService
from src.clients.errors import CorrelationServiceError
from src.config import SessionConfig
from src.core.domain.ticker import normalize_ticker
from src.core.util.jsonlog import log_json, utc_iso
from src.selection.actions import (
    AddTicker,
    FetchFailed,
    FetchSucceeded,
    LoadTickers,
    MetricsLoaded,
    SelectionAction,
    TickerRejected,
)
from src.selection.snapshot import (
    CellDetails,
    DatasetSnapshot,
    FetchRequest,
    cell_details,
    initial_snapshot,
)
from src.selection.state_machine import SelectionStateMachine, TransitionResult

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch correlation data. Please try again."
VALIDATION_FAILED_MESSAGE = "Error validating stock ticker. Please try again."
EMPTY_TICKER_MESSAGE = "Please enter a stock ticker"
INVALID_TICKER_MESSAGE = "{ticker} is not a valid stock ticker"


class CorrelationSession:
    """Сессия просмотра корреляций одного пользователя."""

    def __init__(
        self,
        service: CorrelationService,
        config: Optional[SessionConfig] = None,
        state_machine: Optional[SelectionStateMachine] = None,
    ):
        """
        Args:
            service: клиент сервиса корреляций (CorrelationApiClient или fake)
            config: стартовые тикеры, cutoff и загрузка метрик
            state_machine: редьюсер (default SelectionStateMachine())
        """
        self.service = service
        self.config = config or SessionConfig()
        self.state_machine = state_machine or SelectionStateMachine()
        self._snapshot = initial_snapshot(self.config.default_cutoff)

    @property
    def snapshot(self) -> DatasetSnapshot:
        return self._snapshot

    async def start(self) -> DatasetSnapshot:
        """Загрузка стартового выбора (config.default_tickers)."""
        return await self.dispatch(LoadTickers(tickers=self.config.default_tickers))

    async def dispatch(self, action: SelectionAction) -> DatasetSnapshot:
        """
        Применение действия и выполнение запроса, если он нужен.

        Returns:
            Снимок после обработки действия и (если был) ответа на запрос
        """
        result = self._apply(action)
        if result.fetch_request is not None:
            await self._run_fetch(result.fetch_request)
        return self._snapshot

    async def add_ticker(self, raw: str) -> DatasetSnapshot:
        """
        Добавление тикера с проверкой через сервис.

        Пустой ввод, дубликат, несуществующий тикер и ошибка проверки
        приводят к TickerRejected (field_error); выбор не меняется.
        """
        try:
            ticker = normalize_ticker(raw)
        except ValueError:
            text = str(raw).strip()
            message = (
                INVALID_TICKER_MESSAGE.format(ticker=text.upper()) if text else EMPTY_TICKER_MESSAGE
            )
            return await self.dispatch(TickerRejected(raw=str(raw), message=message))

        if self._snapshot.target_selection.knows(ticker):
            return await self.dispatch(AddTicker(ticker=ticker))

        try:
            exists = await self.service.validate_ticker(ticker)
        except CorrelationServiceError as e:
            log_json(
                logger,
                {
                    "ts": utc_iso(),
                    "module": "CorrelationSession",
                    "event": "VALIDATION_FAILED",
                    "ticker": ticker,
                    "error": str(e),
                },
                level=logging.WARNING,
            )
            return await self.dispatch(TickerRejected(raw=raw, message=VALIDATION_FAILED_MESSAGE))

        if not exists:
            return await self.dispatch(
                TickerRejected(raw=raw, message=INVALID_TICKER_MESSAGE.format(ticker=ticker))
            )

        # Проверка шла асинхронно: тикер мог быть добавлен параллельно,
        # повторная проверка дубликата выполняется редьюсером
        return await self.dispatch(AddTicker(ticker=ticker))

    async def refresh_metrics(self) -> DatasetSnapshot:
        """
        Загрузка метрик для выбранных тикеров без метрик.

        Любая ошибка загрузки (сервис, таймаут, сеть) логируется и
        пропускается; матрица и граф уже зафиксированы. Отмена задачи
        пробрасывается.
        """
        missing = [
            t for t in self._snapshot.selection.selected_tickers if self._snapshot.metrics_for(t) is None
        ]
        if not missing:
            return self._snapshot

        results = await asyncio.gather(
            *(self.service.get_stock_metrics(t) for t in missing), return_exceptions=True
        )
        for ticker, outcome in zip(missing, results):
            if isinstance(outcome, Exception):
                log_json(
                    logger,
                    {
                        "ts": utc_iso(),
                        "module": "CorrelationSession",
                        "event": "METRICS_SKIPPED",
                        "ticker": ticker,
                        "error_type": type(outcome).__name__,
                        "error": str(outcome),
                    },
                    level=logging.WARNING,
                )
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            self._apply(MetricsLoaded(ticker=ticker, metrics=outcome))

        return self._snapshot

    def cell_details(self, ticker: str, compared_ticker: str) -> CellDetails:
        """Детали ячейки текущей матрицы (значение, описание, метрики)."""
        return cell_details(
            self._snapshot, normalize_ticker(ticker), normalize_ticker(compared_ticker)
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply(self, action: SelectionAction) -> TransitionResult:
        result = self.state_machine.apply(self._snapshot, action)
        self._snapshot = result.snapshot
        return result

    async def _run_fetch(self, request: FetchRequest) -> None:
        log_json(
            logger,
            {
                "ts": utc_iso(),
                "module": "CorrelationSession",
                "event": "FETCH_STARTED",
                "sequence": request.sequence,
                "tickers": list(request.tickers),
            },
        )

        try:
            records = await self.service.get_correlations(request.main, request.comparisons)
        except CorrelationServiceError as e:
            result = self._apply(FetchFailed(sequence=request.sequence, message=FETCH_FAILED_MESSAGE))
            log_json(
                logger,
                {
                    "ts": utc_iso(),
                    "module": "CorrelationSession",
                    "event": "FETCH_FAILED",
                    "sequence": request.sequence,
                    "reason": result.transition_reason,
                    "error": str(e),
                },
                level=logging.ERROR,
            )
            return

        result = self._apply(FetchSucceeded(sequence=request.sequence, records=tuple(records)))
        log_json(
            logger,
            {
                "ts": utc_iso(),
                "module": "CorrelationSession",
                "event": "FETCH_COMPLETED",
                "sequence": request.sequence,
                "reason": result.transition_reason,
                "details": result.details,
            },
        )

        if result.transition_occurred and self.config.fetch_metrics:
            await self.refresh_metrics()
