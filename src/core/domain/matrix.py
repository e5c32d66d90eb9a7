"""
CorrelationMatrix — плотная симметричная матрица корреляций

Immutable Pydantic модель: упорядоченные тикеры (порядок осей) + N×N сетка
значений `float | None`.

ИНВАРИАНТЫ:
1. grid[i][i] == 1.0 для всех i
2. grid[i][j] == grid[j][i] (с учётом машинной точности)
3. grid[i][j] is None ⇔ для пары нет записи (рендерится как "N/A", не как 0)
4. Тикеры уникальны, N == len(tickers)
"""

from pydantic import BaseModel, Field, model_validator

from src.core.math.numerical_safeguards import is_close, is_valid_float


# =============================================================================
# CONSTANTS
# =============================================================================

DIAGONAL_VALUE: float = 1.0


# =============================================================================
# MATRIX MODEL
# =============================================================================


class CorrelationMatrix(BaseModel):
    """
    Снапшот матрицы корреляций для выбранных тикеров.

    Immutable модель (frozen=True). Строится только через MatrixBuilder
    (src.engine.matrix_builder) или проекцией существующей матрицы.
    """

    tickers: tuple[str, ...] = Field(default=(), description="Порядок осей матрицы")
    grid: tuple[tuple[float | None, ...], ...] = Field(
        default=(), description="N×N значения корреляций, None = нет данных"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_structure(self) -> "CorrelationMatrix":
        """Проверка размера, диагонали, симметрии и диапазона значений"""
        n = len(self.tickers)

        if len(set(self.tickers)) != n:
            raise ValueError(f"matrix tickers must be unique, got {list(self.tickers)}")

        if len(self.grid) != n:
            raise ValueError(f"grid must have {n} rows, got {len(self.grid)}")

        for i, row in enumerate(self.grid):
            if len(row) != n:
                raise ValueError(f"grid row {i} must have {n} cells, got {len(row)}")

        for i in range(n):
            if self.grid[i][i] != DIAGONAL_VALUE:
                raise ValueError(
                    f"diagonal cell [{i}][{i}] must be {DIAGONAL_VALUE}, got {self.grid[i][i]}"
                )
            for j in range(i + 1, n):
                a = self.grid[i][j]
                b = self.grid[j][i]
                if a is None or b is None:
                    if a is not b:
                        raise ValueError(f"grid must be symmetric at [{i}][{j}]: {a} vs {b}")
                    continue
                if not is_valid_float(a) or not -1.0 <= a <= 1.0:
                    raise ValueError(f"cell [{i}][{j}] must be in [-1, 1], got {a}")
                if not is_close(a, b):
                    raise ValueError(f"grid must be symmetric at [{i}][{j}]: {a} vs {b}")

        return self

    @classmethod
    def empty(cls) -> "CorrelationMatrix":
        """Пустая матрица (нет выбранных тикеров)."""
        return cls(tickers=(), grid=())

    @property
    def size(self) -> int:
        """N — число тикеров."""
        return len(self.tickers)

    def is_empty(self) -> bool:
        """True если матрица 0×0."""
        return not self.tickers

    def index_of(self, ticker: str) -> int:
        """
        Индекс тикера на осях.

        Raises:
            KeyError: Тикер не входит в матрицу
        """
        try:
            return self.tickers.index(ticker)
        except ValueError:
            raise KeyError(ticker) from None

    def value(self, a: str, b: str) -> float | None:
        """Значение ячейки для пары тикеров (1.0 для a == b)."""
        return self.grid[self.index_of(a)][self.index_of(b)]

    def rows(self) -> list[list[float | None]]:
        """Сетка в виде списка списков: [], [[1.0]], [[1.0, 0.8], [0.8, 1.0]]."""
        return [list(row) for row in self.grid]
