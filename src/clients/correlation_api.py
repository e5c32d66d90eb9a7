"""Correlation service client

Асинхронный HTTP клиент внешнего сервиса (httpx.AsyncClient):
- GET /correlation?main=&comparisons= → список записей корреляций
- GET /validate?ticker= → флаг существования тикера
- GET /stockinfo?ticker= → beta / returns

Ответы проверяются на границе: конверт — JSON Schema контрактом, каждая запись
корреляции — отдельно. Некорректные записи отбрасываются (с логированием) и
никогда не попадают в нормализатор.
"""

import logging
from typing import Any, Protocol

import httpx
from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError

from src.clients.errors import ServiceResponseError, ServiceUnavailableError
from src.config import ClientConfig
from src.core.contracts.validators import (
    CorrelationRecordValidator,
    CorrelationResponseValidator,
    StockMetricsValidator,
    TickerValidationValidator,
)
from src.core.domain.correlation import CorrelationRecord
from src.core.domain.metrics import StockMetrics, TickerValidation
from src.core.util.jsonlog import log_json

logger = logging.getLogger(__name__)


# =============================================================================
# PORT
# =============================================================================


class CorrelationService(Protocol):
    """Интерфейс внешнего сервиса, который потребляет сессия."""

    async def get_correlations(self, main: str, comparisons: str) -> list[CorrelationRecord]:
        """
        Парные корреляции.

        Args:
            main: Тикеры через запятую ('AAPL,MSFT')
            comparisons: Тикеры через запятую

        Raises:
            CorrelationServiceError: Сбой сервиса или нарушение контракта
        """
        ...

    async def validate_ticker(self, ticker: str) -> bool:
        """Существует ли тикер."""
        ...

    async def get_stock_metrics(self, ticker: str) -> StockMetrics:
        """Beta и доходность тикера."""
        ...


# =============================================================================
# HTTP CLIENT
# =============================================================================


class CorrelationApiClient:
    """
    HTTP клиент сервиса корреляций.

    Может использоваться как async context manager; переданный извне
    http_client не закрывается клиентом.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            config: Адрес и таймаут сервиса (default: ClientConfig())
            http_client: Готовый httpx.AsyncClient (тесты, общий пул соединений)
        """
        self.config = config or ClientConfig()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

        self._response_validator = CorrelationResponseValidator()
        self._record_validator = CorrelationRecordValidator()
        self._ticker_validator = TickerValidationValidator()
        self._metrics_validator = StockMetricsValidator()

    async def __aenter__(self) -> "CorrelationApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Закрытие собственного http клиента."""
        if self._owns_http:
            await self._http.aclose()

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        try:
            response = await self._http.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log_json(
                logger,
                {
                    "module": "CorrelationApiClient",
                    "event": "HTTP_STATUS_ERROR",
                    "path": path,
                    "status": e.response.status_code,
                },
                level=logging.ERROR,
            )
            raise ServiceUnavailableError(
                f"GET {path} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            log_json(
                logger,
                {
                    "module": "CorrelationApiClient",
                    "event": "HTTP_ERROR",
                    "path": path,
                    "error": str(e) or type(e).__name__,
                },
                level=logging.ERROR,
            )
            raise ServiceUnavailableError(f"GET {path} failed: {type(e).__name__}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ServiceResponseError(f"GET {path} returned non-JSON body") from e

    async def get_correlations(self, main: str, comparisons: str) -> list[CorrelationRecord]:
        """
        GET /correlation.

        Returns:
            Корректные записи в порядке ответа; некорректные отброшены

        Raises:
            ServiceUnavailableError: Сетевой сбой или HTTP статус ошибки
            ServiceResponseError: Ответ не является массивом объектов
        """
        data = await self._get_json("/correlation", {"main": main, "comparisons": comparisons})

        try:
            self._response_validator.validate(data)
        except SchemaValidationError as e:
            raise ServiceResponseError(f"malformed correlation response: {e.message}") from e

        records: list[CorrelationRecord] = []
        dropped = 0
        for item in data:
            if not self._record_validator.is_valid(item):
                dropped += 1
                continue
            try:
                records.append(CorrelationRecord.model_validate(item))
            except ValidationError:
                dropped += 1

        if dropped:
            log_json(
                logger,
                {
                    "module": "CorrelationApiClient",
                    "event": "MALFORMED_RECORDS_DROPPED",
                    "main": main,
                    "dropped": dropped,
                    "kept": len(records),
                },
                level=logging.WARNING,
            )

        return records

    async def validate_ticker(self, ticker: str) -> bool:
        """
        GET /validate.

        Raises:
            ServiceUnavailableError: Сетевой сбой или HTTP статус ошибки
            ServiceResponseError: Нет булева поля exists
        """
        data = await self._get_json("/validate", {"ticker": ticker})

        try:
            self._ticker_validator.validate(data)
        except SchemaValidationError as e:
            raise ServiceResponseError(f"malformed validation response: {e.message}") from e

        return TickerValidation.model_validate(data).exists

    async def get_stock_metrics(self, ticker: str) -> StockMetrics:
        """
        GET /stockinfo.

        Raises:
            ServiceUnavailableError: Сетевой сбой или HTTP статус ошибки
            ServiceResponseError: Нет числовых beta/returns
        """
        data = await self._get_json("/stockinfo", {"ticker": ticker})

        try:
            self._metrics_validator.validate(data)
            return StockMetrics.model_validate(data)
        except SchemaValidationError as e:
            raise ServiceResponseError(f"malformed stockinfo response: {e.message}") from e
        except ValidationError as e:
            raise ServiceResponseError(f"malformed stockinfo response: {e}") from e
