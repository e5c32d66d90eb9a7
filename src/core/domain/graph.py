"""
CorrelationGraph — граф корреляций: узлы-тикеры и рёбра выше cutoff

Immutable Pydantic модели.

ИНВАРИАНТЫ:
1. Один узел на каждый выбранный тикер (изолированные узлы допустимы)
2. Ребро существует только если abs(value) >= cutoff
3. Не более одного ребра на неориентированную пару, без петель
4. Оба конца ребра — узлы графа
"""

from pydantic import BaseModel, Field, model_validator

from src.core.domain.ticker import TickerPair


# =============================================================================
# NODES & EDGES
# =============================================================================


class GraphNode(BaseModel):
    """Узел графа (один тикер)."""

    id: str = Field(..., min_length=1, description="Тикер")
    name: str = Field(..., min_length=1, description="Подпись узла")
    val: int = Field(default=1, ge=1, description="Относительный размер узла")

    model_config = {"frozen": True}

    @classmethod
    def for_ticker(cls, ticker: str) -> "GraphNode":
        """Узел для тикера с подписью по умолчанию."""
        return cls(id=ticker, name=ticker)


class GraphEdge(BaseModel):
    """
    Ребро графа между двумя различными тикерами.

    color и width — производные атрибуты, чистые функции value
    (src.engine.graph_builder.edge_color / edge_width).
    """

    source: str = Field(..., min_length=1, description="Тикер-источник (раньше в выборке)")
    target: str = Field(..., min_length=1, description="Тикер-цель")
    value: float = Field(
        ..., ge=-1.0, le=1.0, allow_inf_nan=False, description="Коэффициент корреляции"
    )
    color: str = Field(..., min_length=1, description="Цвет ребра (семейство по знаку)")
    width: float = Field(..., ge=0.0, description="Толщина ребра (по модулю)")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_no_self_edge(self) -> "GraphEdge":
        """Петли запрещены"""
        if self.source == self.target:
            raise ValueError(f"self-edge is not allowed: {self.source}")
        return self

    @property
    def pair(self) -> TickerPair:
        """Каноническая пара ребра."""
        return TickerPair.of(self.source, self.target)


# =============================================================================
# GRAPH MODEL
# =============================================================================


class CorrelationGraph(BaseModel):
    """
    Снапшот графа корреляций.

    Immutable модель (frozen=True). Строится GraphBuilder'ом
    (src.engine.graph_builder) из нормализованных пар и cutoff.
    """

    nodes: tuple[GraphNode, ...] = Field(default=(), description="Узлы (порядок выборки)")
    edges: tuple[GraphEdge, ...] = Field(default=(), description="Рёбра (детерминированный порядок)")
    cutoff: float = Field(
        default=0.0, ge=0.0, le=1.0, allow_inf_nan=False, description="Порог abs(value)"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_topology(self) -> "CorrelationGraph":
        """Проверка уникальности узлов/рёбер и порога"""
        node_ids = [n.id for n in self.nodes]
        if len(set(node_ids)) != len(node_ids):
            raise ValueError(f"graph node ids must be unique, got {node_ids}")

        known = set(node_ids)
        seen: set[TickerPair] = set()
        for edge in self.edges:
            if edge.source not in known or edge.target not in known:
                raise ValueError(
                    f"edge ({edge.source}, {edge.target}) references a ticker outside the node set"
                )
            if edge.pair in seen:
                raise ValueError(f"duplicate edge for pair ({edge.source}, {edge.target})")
            if abs(edge.value) < self.cutoff:
                raise ValueError(
                    f"edge ({edge.source}, {edge.target}) value {edge.value} is below cutoff {self.cutoff}"
                )
            seen.add(edge.pair)

        return self

    @classmethod
    def empty(cls, cutoff: float = 0.0) -> "CorrelationGraph":
        """Пустой граф (нет выбранных тикеров)."""
        return cls(nodes=(), edges=(), cutoff=cutoff)

    def node_ids(self) -> tuple[str, ...]:
        """Тикеры узлов в порядке выборки."""
        return tuple(n.id for n in self.nodes)

    def edge_pairs(self) -> set[TickerPair]:
        """Множество неориентированных пар рёбер."""
        return {e.pair for e in self.edges}

    def edge_between(self, a: str, b: str) -> GraphEdge | None:
        """Ребро между a и b (в любом порядке) или None."""
        if a == b:
            return None
        wanted = TickerPair.of(a, b)
        for edge in self.edges:
            if edge.pair == wanted:
                return edge
        return None

    def degree(self, ticker: str) -> int:
        """Число рёбер, инцидентных тикеру."""
        return sum(1 for e in self.edges if e.source == ticker or e.target == ticker)
