"""
Contract Validation Module

Модуль для валидации JSON контрактов внешнего сервиса корреляций.
"""

from .validators import (
    ContractValidator,
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

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "CorrelationResponseValidator",
    "CorrelationRecordValidator",
    "TickerValidationValidator",
    "StockMetricsValidator",
    # Functions
    "validate_correlation_response",
    "validate_correlation_record",
    "validate_ticker_validation",
    "validate_stock_metrics",
]
