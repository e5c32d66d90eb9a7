"""Тесты для CorrelationApiClient (httpx.MockTransport).

Coverage:
- Параметры запросов /correlation, /validate, /stockinfo
- Фильтрация некорректных записей на границе
- HTTP и сетевые ошибки → ServiceUnavailableError
- Нарушения контракта → ServiceResponseError
"""

import asyncio
import json
import logging

import httpx
import pytest

from src.clients import (
    CorrelationApiClient,
    CorrelationServiceError,
    ServiceResponseError,
    ServiceUnavailableError,
)
from src.config import ClientConfig


def make_client(handler) -> CorrelationApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://corrnet.test")
    return CorrelationApiClient(ClientConfig(base_url="http://corrnet.test"), http_client=http)


def run(coro):
    return asyncio.run(coro)


class TestGetCorrelations:
    """GET /correlation."""

    def test_request_parameters(self):
        """main и comparisons передаются как query параметры."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        client = make_client(handler)
        assert run(client.get_correlations("AAPL,MSFT", "AAPL,MSFT")) == []
        assert seen[0].url.path == "/correlation"
        assert seen[0].url.params["main"] == "AAPL,MSFT"
        assert seen[0].url.params["comparisons"] == "AAPL,MSFT"

    def test_records_parsed(self):
        def handler(request):
            return httpx.Response(
                200,
                json=[
                    {"ticker": "AAPL", "compared_ticker": "MSFT", "data": 0.8},
                    {"ticker": "msft", "compared_ticker": "aapl", "data": 0.8},
                ],
            )

        records = run(make_client(handler).get_correlations("AAPL,MSFT", "AAPL,MSFT"))
        assert [(r.ticker, r.compared_ticker, r.data) for r in records] == [
            ("AAPL", "MSFT", 0.8),
            ("MSFT", "AAPL", 0.8),
        ]

    def test_malformed_records_dropped(self, caplog):
        """Записи вне контракта отбрасываются и логируются, остальные проходят."""

        def handler(request):
            return httpx.Response(
                200,
                json=[
                    {"ticker": "AAPL", "compared_ticker": "MSFT", "data": 0.8},
                    {"ticker": "AAPL", "compared_ticker": "GOOGL", "data": 1.7},
                    {"ticker": "AAPL", "data": 0.1},
                    {"ticker": "AAPL", "compared_ticker": "NF LX", "data": 0.1},
                ],
            )

        with caplog.at_level(logging.WARNING, logger="src.clients.correlation_api"):
            records = run(make_client(handler).get_correlations("AAPL", "AAPL"))

        assert len(records) == 1
        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "MALFORMED_RECORDS_DROPPED"
        assert payload["dropped"] == 3

    @pytest.mark.parametrize("body", [{"error": "oops"}, "AAPL", [1, 2]])
    def test_malformed_envelope(self, body):
        def handler(request):
            return httpx.Response(200, json=body)

        with pytest.raises(ServiceResponseError):
            run(make_client(handler).get_correlations("AAPL", "AAPL"))

    def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(ServiceResponseError, match="non-JSON"):
            run(make_client(handler).get_correlations("AAPL", "AAPL"))

    def test_http_error_status(self):
        def handler(request):
            return httpx.Response(502, json={"message": "Bad Gateway"})

        with pytest.raises(ServiceUnavailableError, match="HTTP 502"):
            run(make_client(handler).get_correlations("AAPL", "AAPL"))

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ServiceUnavailableError, match="ConnectError"):
            run(make_client(handler).get_correlations("AAPL", "AAPL"))

    def test_errors_share_base_class(self):
        assert issubclass(ServiceUnavailableError, CorrelationServiceError)
        assert issubclass(ServiceResponseError, CorrelationServiceError)


class TestValidateTicker:
    """GET /validate."""

    @pytest.mark.parametrize("exists", [True, False])
    def test_exists_flag(self, exists):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"exists": exists})

        assert run(make_client(handler).validate_ticker("NFLX")) is exists
        assert seen[0].url.path == "/validate"
        assert seen[0].url.params["ticker"] == "NFLX"

    def test_missing_flag(self):
        def handler(request):
            return httpx.Response(200, json={"valid": True})

        with pytest.raises(ServiceResponseError):
            run(make_client(handler).validate_ticker("NFLX"))


class TestGetStockMetrics:
    """GET /stockinfo."""

    def test_metrics(self):
        def handler(request):
            assert request.url.path == "/stockinfo"
            return httpx.Response(200, json={"beta": 1.25, "returns": -4.5})

        metrics = run(make_client(handler).get_stock_metrics("AAPL"))
        assert metrics.beta == 1.25
        assert metrics.returns == -4.5

    def test_malformed_metrics(self):
        def handler(request):
            return httpx.Response(200, json={"beta": "n/a", "returns": 1.0})

        with pytest.raises(ServiceResponseError):
            run(make_client(handler).get_stock_metrics("AAPL"))


class TestLifecycle:
    """Владение http клиентом."""

    def test_external_client_not_closed(self):
        http = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[]))
        )

        async def scenario():
            async with CorrelationApiClient(http_client=http):
                pass

        run(scenario())
        assert not http.is_closed

    def test_own_client_closed(self):
        client = CorrelationApiClient(ClientConfig(base_url="http://corrnet.test", timeout_seconds=2.0))

        async def scenario():
            async with client:
                pass

        run(scenario())
        assert client._http.is_closed
