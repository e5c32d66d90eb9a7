"""Конфигурация клиента сервиса и сессии.

Значения по умолчанию заданы в dataclass'ах; ClientConfig.from_env() позволяет
переопределить адрес и таймаут сервиса через окружение (или файл .env):

- CORRNET_API_BASE_URL
- CORRNET_API_TIMEOUT_SECONDS
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

from src.core.domain.ticker import normalize_ticker
from src.core.math.numerical_safeguards import validate_in_range


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_API_BASE_URL: Final[str] = "http://localhost:8000/"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 15.0

DEFAULT_TICKERS: Final[tuple[str, ...]] = ("AAPL", "MSFT", "GOOGL")
DEFAULT_CUTOFF: Final[float] = 0.5

ENV_API_BASE_URL: Final[str] = "CORRNET_API_BASE_URL"
ENV_API_TIMEOUT_SECONDS: Final[str] = "CORRNET_API_TIMEOUT_SECONDS"


# =============================================================================
# CLIENT CONFIG
# =============================================================================


@dataclass(frozen=True)
class ClientConfig:
    """Параметры HTTP клиента сервиса корреляций."""

    base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.base_url or not self.base_url.strip():
            raise ValueError("base_url must be non-empty")
        validate_in_range(self.timeout_seconds, "timeout_seconds", min_value=0.0)
        if self.timeout_seconds == 0:
            raise ValueError("timeout_seconds must be positive")

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> "ClientConfig":
        """
        Конфигурация из окружения (после загрузки .env, если он есть).

        Переменные окружения процесса имеют приоритет над .env.

        Raises:
            ValueError: CORRNET_API_TIMEOUT_SECONDS не число или <= 0
        """
        load_dotenv(dotenv_path=dotenv_path)

        base_url = os.getenv(ENV_API_BASE_URL) or DEFAULT_API_BASE_URL
        raw_timeout = os.getenv(ENV_API_TIMEOUT_SECONDS)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"{ENV_API_TIMEOUT_SECONDS} must be a number, got {raw_timeout!r}"
                ) from None
        else:
            timeout = DEFAULT_TIMEOUT_SECONDS

        return cls(base_url=base_url, timeout_seconds=timeout)


# =============================================================================
# SESSION CONFIG
# =============================================================================


@dataclass(frozen=True)
class SessionConfig:
    """
    Параметры сессии.

    default_tickers — выбор при старте сессии, default_cutoff — начальный порог
    графа, fetch_metrics — догружать beta/returns после каждого обновления.
    """

    default_tickers: tuple[str, ...] = DEFAULT_TICKERS
    default_cutoff: float = DEFAULT_CUTOFF
    fetch_metrics: bool = True

    def __post_init__(self) -> None:
        tickers = tuple(normalize_ticker(t) for t in self.default_tickers)
        if len(set(tickers)) != len(tickers):
            raise ValueError(f"default_tickers must be unique, got {list(tickers)}")
        object.__setattr__(self, "default_tickers", tickers)
        validate_in_range(self.default_cutoff, "default_cutoff", 0.0, 1.0)
