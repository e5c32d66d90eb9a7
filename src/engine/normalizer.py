"""Pairwise Record Normalizer

Превращает сырые записи сервиса {ticker, compared_ticker, data} в
неориентированное дедуплицированное отображение TickerPair → value.

Правила:
1. Самопары (ticker == compared_ticker) отбрасываются: диагональ задаётся
   структурно, а не данными
2. Одна неориентированная пара встречается дважды ((A,B) и (B,A)) →
   побеждает первое значение, последующие дубликаты отбрасываются
3. Дубликаты с ДРУГИМ значением считаются конфликтами и логируются (WARNING);
   политика first-seen-wins сохраняется
4. Если задан universe, записи с тикером вне его игнорируются (несогласованный
   ответ — не ошибка)

Чистая функция: кроме логирования, побочных эффектов нет.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from src.core.domain.correlation import CorrelationPairs, CorrelationRecord
from src.core.domain.ticker import TickerPair
from src.core.math.numerical_safeguards import is_close
from src.core.util.jsonlog import log_json

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class NormalizationResult:
    """Результат нормализации."""

    pairs: CorrelationPairs

    # Диагностика
    n_input: int  # Всего записей на входе
    n_accepted: int  # Уникальных пар в результате
    n_self_pairs: int  # Отброшенные самопары
    n_duplicates: int  # Отброшенные дубликаты (включая конфликтные)
    n_conflicts: int  # Дубликаты с отличающимся значением
    n_foreign: int  # Записи с тикером вне universe

    conflicting_pairs: tuple[TickerPair, ...]

    details: str


# =============================================================================
# NORMALIZER
# =============================================================================


def _coerce_record(record: CorrelationRecord | Mapping[str, Any]) -> CorrelationRecord:
    if isinstance(record, CorrelationRecord):
        return record
    return CorrelationRecord.model_validate(record)


def normalize_records(
    records: Iterable[CorrelationRecord | Mapping[str, Any]],
    universe: Iterable[str] | None = None,
) -> NormalizationResult:
    """
    Нормализация сырых записей в кэш неориентированных пар.

    Args:
        records: Записи ответа (модели или dict той же формы)
        universe: Тикеры запроса; записи вне него игнорируются.
            None — universe выводится из принятых записей.

    Returns:
        NormalizationResult с CorrelationPairs и счётчиками

    Raises:
        pydantic.ValidationError: dict-запись не соответствует CorrelationRecord
    """
    allowed = frozenset(universe) if universe is not None else None

    values: dict[TickerPair, float] = {}
    conflicts: list[TickerPair] = []
    n_input = 0
    n_self_pairs = 0
    n_duplicates = 0
    n_foreign = 0

    for raw in records:
        n_input += 1
        record = _coerce_record(raw)

        if record.is_self_pair():
            n_self_pairs += 1
            continue

        if allowed is not None and (
            record.ticker not in allowed or record.compared_ticker not in allowed
        ):
            n_foreign += 1
            continue

        pair = record.pair()
        if pair in values:
            n_duplicates += 1
            if not is_close(values[pair], record.data):
                conflicts.append(pair)
                log_json(
                    logger,
                    {
                        "module": "Normalizer",
                        "event": "DUPLICATE_CONFLICT",
                        "pair": [pair.first, pair.second],
                        "kept": values[pair],
                        "discarded": record.data,
                    },
                    level=logging.WARNING,
                )
            continue

        values[pair] = record.data

    pairs = CorrelationPairs.from_mapping(values, universe=allowed)

    return NormalizationResult(
        pairs=pairs,
        n_input=n_input,
        n_accepted=len(values),
        n_self_pairs=n_self_pairs,
        n_duplicates=n_duplicates,
        n_conflicts=len(conflicts),
        n_foreign=n_foreign,
        conflicting_pairs=tuple(conflicts),
        details=(
            f"input={n_input}, accepted={len(values)}, self_pairs={n_self_pairs}, "
            f"duplicates={n_duplicates}, conflicts={len(conflicts)}, foreign={n_foreign}"
        ),
    )
