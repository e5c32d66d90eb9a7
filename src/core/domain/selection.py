"""
SelectionState — множество тикеров сессии

all_tickers — все когда-либо добавленные тикеры (список чекбоксов),
selected_tickers — подмножество, отображаемое в матрице и графе.

ИНВАРИАНТЫ:
1. selected_tickers ⊆ all_tickers
2. В обеих коллекциях нет дубликатов
3. Порядок selected_tickers — порядок осей матрицы
"""

from pydantic import BaseModel, Field, model_validator


class SelectionState(BaseModel):
    """
    Immutable модель выбора тикеров.

    Все мутации возвращают новый экземпляр; исходный не изменяется.
    """

    all_tickers: tuple[str, ...] = Field(default=(), description="Все добавленные тикеры")
    selected_tickers: tuple[str, ...] = Field(
        default=(), description="Отображаемые тикеры (порядок осей)"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_subset(self) -> "SelectionState":
        """Проверка уникальности и вложенности"""
        if len(set(self.all_tickers)) != len(self.all_tickers):
            raise ValueError(f"all_tickers must be unique, got {list(self.all_tickers)}")
        if len(set(self.selected_tickers)) != len(self.selected_tickers):
            raise ValueError(
                f"selected_tickers must be unique, got {list(self.selected_tickers)}"
            )
        extra = [t for t in self.selected_tickers if t not in self.all_tickers]
        if extra:
            raise ValueError(f"selected_tickers must be a subset of all_tickers, extra: {extra}")
        return self

    @classmethod
    def of(cls, tickers: list[str] | tuple[str, ...]) -> "SelectionState":
        """Выбор, в котором все тикеры добавлены и отображаются."""
        return cls(all_tickers=tuple(tickers), selected_tickers=tuple(tickers))

    def is_empty(self) -> bool:
        """True если нечего отображать."""
        return not self.selected_tickers

    def knows(self, ticker: str) -> bool:
        """True если тикер есть в all_tickers."""
        return ticker in self.all_tickers

    def is_selected(self, ticker: str) -> bool:
        """True если тикер отображается."""
        return ticker in self.selected_tickers

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def with_added(self, ticker: str) -> "SelectionState":
        """
        Добавление нового тикера в обе коллекции (в конец).

        Raises:
            ValueError: Тикер уже есть в all_tickers
        """
        if ticker in self.all_tickers:
            raise ValueError(f"{ticker} is already in your list")
        return SelectionState(
            all_tickers=self.all_tickers + (ticker,),
            selected_tickers=self.selected_tickers + (ticker,),
        )

    def without(self, ticker: str) -> "SelectionState":
        """Удаление тикера из обеих коллекций (no-op для неизвестного)."""
        return SelectionState(
            all_tickers=tuple(t for t in self.all_tickers if t != ticker),
            selected_tickers=tuple(t for t in self.selected_tickers if t != ticker),
        )

    def with_selected(self, ticker: str) -> "SelectionState":
        """
        Включение отображения известного тикера (в конец порядка осей).

        Raises:
            ValueError: Тикер не добавлен в all_tickers
        """
        if ticker not in self.all_tickers:
            raise ValueError(f"{ticker} is not in your list")
        if ticker in self.selected_tickers:
            return self
        return SelectionState(
            all_tickers=self.all_tickers,
            selected_tickers=self.selected_tickers + (ticker,),
        )

    def with_deselected(self, ticker: str) -> "SelectionState":
        """Выключение отображения тикера; тикер остаётся в all_tickers."""
        return SelectionState(
            all_tickers=self.all_tickers,
            selected_tickers=tuple(t for t in self.selected_tickers if t != ticker),
        )

    def with_all_selected(self) -> "SelectionState":
        """Отображение всех тикеров в порядке all_tickers."""
        return SelectionState(all_tickers=self.all_tickers, selected_tickers=self.all_tickers)

    def with_none_selected(self) -> "SelectionState":
        """Скрытие всех тикеров."""
        return SelectionState(all_tickers=self.all_tickers, selected_tickers=())

    def with_loaded(self, tickers: list[str] | tuple[str, ...]) -> "SelectionState":
        """
        Отображение заданного набора: новые тикеры добавляются в all_tickers,
        selected_tickers заменяется на tickers (дубликаты во входе схлопываются).
        """
        ordered = tuple(dict.fromkeys(tickers))
        all_tickers = self.all_tickers + tuple(t for t in ordered if t not in self.all_tickers)
        return SelectionState(all_tickers=all_tickers, selected_tickers=ordered)
