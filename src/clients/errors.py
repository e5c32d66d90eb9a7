"""Ошибки взаимодействия с внешним сервисом корреляций.

Иерархия:
- CorrelationServiceError — базовая, ловится только сессией
  - ServiceUnavailableError — транспорт/HTTP статус (сервис не ответил корректно)
  - ServiceResponseError — ответ не соответствует контракту
"""


class CorrelationServiceError(Exception):
    """Базовая ошибка сервиса корреляций."""


class ServiceUnavailableError(CorrelationServiceError):
    """Сетевой сбой, таймаут или HTTP статус ошибки."""


class ServiceResponseError(CorrelationServiceError):
    """Ответ сервиса нарушает JSON Schema контракт."""
