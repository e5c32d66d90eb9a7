"""
JSON Schema Contract Validators

Модуль для валидации ответов внешнего сервиса согласно формальным JSON Schema
контрактам. Использует библиотеку jsonschema для проверки соответствия данных
схемам до того, как данные попадут в нормализатор.

Схемы:
- correlation_response.json (конверт GET /correlation)
- correlation_record.json (одна запись GET /correlation)
- ticker_validation.json (GET /validate)
- stock_metrics.json (GET /stockinfo)
"""

import json
from importlib.resources import files
from importlib.resources.abc import Traversable
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    По умолчанию читает схемы из каталога schema/ этого пакета (package data,
    устанавливается вместе с wheel).
    """

    def __init__(self, schema_dir: Traversable | None = None):
        self._schema_dir = schema_dir or files(__package__).joinpath("schema")
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'correlation_record')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            json.JSONDecodeError: Если файл не является валидным JSON
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir.joinpath(f"{schema_name}.json")
        if not schema_path.is_file():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        schema = json.loads(schema_path.read_text(encoding="utf-8"))

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        """
        Args:
            schema_name: Имя схемы для валидации
        """
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Any) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Any):
        """Итератор по всем ошибкам валидации (ValidationError объекты)."""
        return self.validator.iter_errors(data)


class CorrelationResponseValidator(ContractValidator):
    """Валидатор конверта ответа GET /correlation (массив объектов)."""

    def __init__(self):
        super().__init__("correlation_response")


class CorrelationRecordValidator(ContractValidator):
    """Валидатор одной записи {ticker, compared_ticker, data}."""

    def __init__(self):
        super().__init__("correlation_record")


class TickerValidationValidator(ContractValidator):
    """Валидатор ответа GET /validate."""

    def __init__(self):
        super().__init__("ticker_validation")


class StockMetricsValidator(ContractValidator):
    """Валидатор ответа GET /stockinfo."""

    def __init__(self):
        super().__init__("stock_metrics")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_correlation_response(data: Any) -> None:
    """
    Валидация конверта ответа GET /correlation.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    CorrelationResponseValidator().validate(data)


def validate_correlation_record(data: Any) -> None:
    """
    Валидация одной записи корреляции.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    CorrelationRecordValidator().validate(data)


def validate_ticker_validation(data: Any) -> None:
    """
    Валидация ответа GET /validate.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    TickerValidationValidator().validate(data)


def validate_stock_metrics(data: Any) -> None:
    """
    Валидация ответа GET /stockinfo.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    StockMetricsValidator().validate(data)
