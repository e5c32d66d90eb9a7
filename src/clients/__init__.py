"""Клиенты внешнего сервиса корреляций."""

from .correlation_api import CorrelationApiClient, CorrelationService
from .errors import CorrelationServiceError, ServiceResponseError, ServiceUnavailableError

__all__ = [
    "CorrelationApiClient",
    "CorrelationService",
    "CorrelationServiceError",
    "ServiceResponseError",
    "ServiceUnavailableError",
]
