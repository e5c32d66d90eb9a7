"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов ответов сервиса:
- Валидность самих схем
- Валидация правильных данных
- Детекция нарушений required полей
- Детекция нарушений типов и диапазонов
- Интеграция с Pydantic моделями
"""

import json
from importlib.resources import files
from pathlib import Path

import pytest
from jsonschema import ValidationError

from src.core.contracts import (
    CorrelationRecordValidator,
    CorrelationResponseValidator,
    SchemaLoader,
    StockMetricsValidator,
    TickerValidationValidator,
    validate_correlation_record,
    validate_correlation_response,
    validate_stock_metrics,
    validate_ticker_validation,
)
from src.core.domain import CorrelationRecord, StockMetrics


# =============================================================================
# FIXTURES - VALID DATA SAMPLES
# =============================================================================


@pytest.fixture
def valid_record():
    """Валидная запись корреляции."""
    return {"ticker": "AAPL", "compared_ticker": "MSFT", "data": 0.8}


@pytest.fixture
def valid_response(valid_record):
    """Валидный ответ GET /correlation."""
    return [
        valid_record,
        {"ticker": "MSFT", "compared_ticker": "AAPL", "data": 0.8},
        {"ticker": "AAPL", "compared_ticker": "GOOGL", "data": -0.35},
    ]


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class TestSchemaLoader:
    """Тесты загрузчика схем."""

    @pytest.mark.parametrize(
        "schema_name",
        ["correlation_record", "correlation_response", "ticker_validation", "stock_metrics"],
    )
    def test_schemas_are_valid(self, schema_name):
        """Все схемы проходят meta-validation Draft 2020-12."""
        schema = SchemaLoader().load_schema(schema_name)
        assert schema["title"] == schema_name

    def test_schemas_ship_with_package(self):
        """Схемы лежат в пакете src.core.contracts (package data)."""
        schema_dir = files("src.core.contracts").joinpath("schema")
        for name in ("correlation_record", "correlation_response", "ticker_validation", "stock_metrics"):
            assert schema_dir.joinpath(f"{name}.json").is_file()
        assert SchemaLoader(schema_dir).load_schema("ticker_validation")["title"] == "ticker_validation"

    def test_schema_is_cached(self):
        """Повторная загрузка возвращает тот же объект."""
        loader = SchemaLoader()
        assert loader.load_schema("stock_metrics") is loader.load_schema("stock_metrics")

    def test_missing_schema(self):
        """Неизвестная схема → FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("does_not_exist")

    def test_missing_directory(self, tmp_path):
        """Нет каталога схем → RuntimeError."""
        with pytest.raises(RuntimeError, match="Schema directory not found"):
            SchemaLoader(tmp_path / "nowhere")

    def test_invalid_schema_rejected(self, tmp_path):
        """Файл, не являющийся JSON Schema → ValueError."""
        (tmp_path / "broken.json").write_text(json.dumps({"type": 42}), encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON Schema"):
            SchemaLoader(Path(tmp_path)).load_schema("broken")


# =============================================================================
# CORRELATION RESPONSE / RECORD
# =============================================================================


class TestCorrelationContracts:
    """Тесты контрактов GET /correlation."""

    def test_valid_response(self, valid_response):
        """Массив записей проходит проверку конверта и каждой записи."""
        validate_correlation_response(valid_response)
        validator = CorrelationRecordValidator()
        assert all(validator.is_valid(r) for r in valid_response)

    def test_empty_response_is_valid(self):
        """Пустой ответ допустим."""
        validate_correlation_response([])

    @pytest.mark.parametrize("payload", [{"data": []}, "AAPL", None, [1, 2]])
    def test_malformed_envelope(self, payload):
        """Не массив объектов → ValidationError."""
        with pytest.raises(ValidationError):
            validate_correlation_response(payload)

    @pytest.mark.parametrize("field", ["ticker", "compared_ticker", "data"])
    def test_record_missing_required(self, valid_record, field):
        """Отсутствие обязательного поля."""
        del valid_record[field]
        with pytest.raises(ValidationError):
            validate_correlation_record(valid_record)

    @pytest.mark.parametrize("data", [1.2, -1.01, "0.8", None])
    def test_record_bad_value(self, valid_record, data):
        """data — число в [-1, 1]."""
        valid_record["data"] = data
        assert not CorrelationRecordValidator().is_valid(valid_record)

    def test_record_empty_ticker(self, valid_record):
        """Тикер — непустая строка."""
        valid_record["ticker"] = ""
        errors = list(CorrelationRecordValidator().iter_errors(valid_record))
        assert len(errors) == 1

    def test_extra_fields_allowed(self, valid_record):
        """Дополнительные поля не нарушают контракт."""
        valid_record["window"] = "1y"
        validate_correlation_record(valid_record)

    def test_schema_and_model_agree(self, valid_record):
        """Запись, прошедшая схему, строится как CorrelationRecord."""
        CorrelationResponseValidator().validate([valid_record])
        record = CorrelationRecord.model_validate(valid_record)
        assert record.pair().first == "AAPL"


# =============================================================================
# VALIDATE / STOCKINFO
# =============================================================================


class TestTickerValidationContract:
    """Тесты контракта GET /validate."""

    @pytest.mark.parametrize("exists", [True, False])
    def test_valid(self, exists):
        validate_ticker_validation({"exists": exists})

    @pytest.mark.parametrize("payload", [{}, {"exists": "yes"}, {"exists": 1}, []])
    def test_invalid(self, payload):
        """exists — обязательный boolean."""
        assert not TickerValidationValidator().is_valid(payload)


class TestStockMetricsContract:
    """Тесты контракта GET /stockinfo."""

    def test_valid(self):
        payload = {"beta": 1.1, "returns": 12.5, "name": "Apple"}
        validate_stock_metrics(payload)
        assert StockMetrics.model_validate(payload).returns == 12.5

    @pytest.mark.parametrize(
        "payload", [{"beta": 1.1}, {"returns": 2.0}, {"beta": "high", "returns": 2.0}]
    )
    def test_invalid(self, payload):
        with pytest.raises(ValidationError):
            StockMetricsValidator().validate(payload)
