"""Matrix Builder

Строит плотную симметричную матрицу N×N из упорядоченного списка тикеров и
нормализованных пар.

Алгоритм:
- N = 0 → пустая матрица
- N = 1 → [[1.0]] (обязательный частный случай: внедиагональных ячеек нет)
- N ≥ 2 → все ячейки None, диагональ 1.0, для каждой пары с обоими тикерами
  в выборке заполняются [i][j] и [j][i]

Builder никогда не запрашивает данные: fetch — ответственность вызывающего.
"""

from typing import Sequence

from src.core.domain.correlation import CorrelationPairs
from src.core.domain.matrix import DIAGONAL_VALUE, CorrelationMatrix


def _ensure_unique(tickers: Sequence[str]) -> None:
    if len(set(tickers)) != len(tickers):
        raise ValueError(f"tickers must be unique, got {list(tickers)}")


def build_matrix(tickers: Sequence[str], pairs: CorrelationPairs) -> CorrelationMatrix:
    """
    Построение матрицы корреляций.

    Args:
        tickers: Выбранные тикеры (порядок осей)
        pairs: Нормализованные пары; пары вне выборки игнорируются

    Returns:
        CorrelationMatrix (ячейки без записи — None)

    Raises:
        ValueError: Дубликаты в tickers
    """
    _ensure_unique(tickers)
    n = len(tickers)

    if n == 0:
        return CorrelationMatrix.empty()

    if n == 1:
        return CorrelationMatrix(tickers=(tickers[0],), grid=((DIAGONAL_VALUE,),))

    index = {ticker: i for i, ticker in enumerate(tickers)}
    grid: list[list[float | None]] = [[None] * n for _ in range(n)]

    for i in range(n):
        grid[i][i] = DIAGONAL_VALUE

    for entry in pairs:
        i = index.get(entry.pair.first)
        j = index.get(entry.pair.second)
        if i is None or j is None:
            continue
        grid[i][j] = entry.value
        grid[j][i] = entry.value

    return CorrelationMatrix(tickers=tuple(tickers), grid=tuple(tuple(row) for row in grid))


def project_matrix(matrix: CorrelationMatrix, tickers: Sequence[str]) -> CorrelationMatrix:
    """
    Локальная проекция: подматрица для tickers в заданном порядке.

    Используется при удалении тикера — строки/столбцы удалённого тикера
    отбрасываются, значения остальных пар сохраняются без повторного fetch.

    Raises:
        ValueError: Дубликаты в tickers или тикер отсутствует в матрице
    """
    _ensure_unique(tickers)

    missing = [t for t in tickers if t not in matrix.tickers]
    if missing:
        raise ValueError(f"cannot project matrix onto unknown tickers: {missing}")

    idx = [matrix.index_of(t) for t in tickers]
    grid = tuple(tuple(matrix.grid[i][j] for j in idx) for i in idx)
    return CorrelationMatrix(tickers=tuple(tickers), grid=grid)
