"""Graph Builder

Строит граф корреляций: узел на каждый выбранный тикер, ребро на каждую пару
с abs(value) >= cutoff.

Контракт визуальных атрибутов (детерминированные чистые функции value):
- Знак → семейство цвета: value >= 0 → зелёное, value < 0 → красное
- Модуль → толщина: width = abs(value) * width_scale (монотонно по модулю)

Монотонность: для c1 <= c2 рёбра при c2 ⊆ рёбра при c1, порядок выживших
рёбер сохраняется. Порядок рёбер — по порядку выборки (i < j), источник —
тикер, выбранный раньше; от порядка записей в ответе не зависит.

Вызывается: (a) при каждом полном обновлении данных, (b) при изменении только
cutoff — на кэшированных парах, без сетевого доступа.
"""

from dataclasses import dataclass
from typing import Final, Sequence

from src.core.domain.correlation import CorrelationPairs
from src.core.domain.graph import CorrelationGraph, GraphEdge, GraphNode
from src.core.domain.ticker import TickerPair
from src.core.math.numerical_safeguards import validate_correlation, validate_in_range


# =============================================================================
# CONSTANTS
# =============================================================================

POSITIVE_EDGE_COLOR: Final[str] = "rgba(0,128,0,0.6)"
NEGATIVE_EDGE_COLOR: Final[str] = "rgba(255,0,0,0.6)"

# Рёбра не слишком толстые: максимум 1.5 при |value| = 1
DEFAULT_WIDTH_SCALE: Final[float] = 1.5

CUTOFF_MIN: Final[float] = 0.0
CUTOFF_MAX: Final[float] = 1.0


# =============================================================================
# STYLE
# =============================================================================


@dataclass(frozen=True)
class GraphStyle:
    """Параметры визуальных атрибутов рёбер."""

    positive_color: str = POSITIVE_EDGE_COLOR
    negative_color: str = NEGATIVE_EDGE_COLOR
    width_scale: float = DEFAULT_WIDTH_SCALE

    def __post_init__(self) -> None:
        validate_in_range(self.width_scale, "width_scale", min_value=0.0)


DEFAULT_GRAPH_STYLE: Final[GraphStyle] = GraphStyle()


# =============================================================================
# EDGE ATTRIBUTES
# =============================================================================


def validate_cutoff(cutoff: float) -> float:
    """
    Проверка cutoff: любое конечное число в [0, 1].

    Шаг 0.05 — свойство слайдера UI, движок принимает любое значение диапазона.

    Raises:
        ValueError: cutoff вне [0, 1], NaN/Inf или не число
    """
    validate_in_range(cutoff, "cutoff", CUTOFF_MIN, CUTOFF_MAX)
    return float(cutoff)


def edge_color(value: float, style: GraphStyle = DEFAULT_GRAPH_STYLE) -> str:
    """Цвет ребра по знаку: неотрицательные — positive_color, отрицательные — negative_color."""
    validate_correlation(value)
    return style.negative_color if value < 0 else style.positive_color


def edge_width(value: float, style: GraphStyle = DEFAULT_GRAPH_STYLE) -> float:
    """Толщина ребра: abs(value) * width_scale."""
    validate_correlation(value)
    return abs(value) * style.width_scale


def make_edge(
    source: str, target: str, value: float, style: GraphStyle = DEFAULT_GRAPH_STYLE
) -> GraphEdge:
    """Ребро с производными атрибутами."""
    return GraphEdge(
        source=source,
        target=target,
        value=value,
        color=edge_color(value, style),
        width=edge_width(value, style),
    )


# =============================================================================
# BUILDERS
# =============================================================================


def build_graph(
    tickers: Sequence[str],
    pairs: CorrelationPairs,
    cutoff: float,
    style: GraphStyle | None = None,
) -> CorrelationGraph:
    """
    Построение графа корреляций.

    Args:
        tickers: Выбранные тикеры (порядок узлов)
        pairs: Нормализованные пары; пары вне выборки игнорируются
        cutoff: Минимальный abs(value) для ребра, [0, 1]
        style: Параметры цвета/толщины (default: GraphStyle())

    Returns:
        CorrelationGraph

    Raises:
        ValueError: Дубликаты в tickers или cutoff вне [0, 1]
    """
    cutoff = validate_cutoff(cutoff)
    style = style or DEFAULT_GRAPH_STYLE

    if len(set(tickers)) != len(tickers):
        raise ValueError(f"tickers must be unique, got {list(tickers)}")

    nodes = tuple(GraphNode.for_ticker(t) for t in tickers)

    edges: list[GraphEdge] = []
    for i, source in enumerate(tickers):
        for target in tickers[i + 1:]:
            value = pairs.get(source, target)
            if value is None:
                continue
            if abs(value) >= cutoff:
                edges.append(make_edge(source, target, value, style))

    return CorrelationGraph(nodes=nodes, edges=tuple(edges), cutoff=cutoff)


def filter_graph(graph: CorrelationGraph, cutoff: float) -> CorrelationGraph:
    """
    Повторная фильтрация готового графа по новому cutoff.

    Только для cutoff >= graph.cutoff: рёбра ниже исходного порога уже
    отброшены, поэтому понижение порога требует build_graph на парах.

    Raises:
        ValueError: cutoff вне [0, 1] или ниже graph.cutoff
    """
    cutoff = validate_cutoff(cutoff)
    if cutoff < graph.cutoff:
        raise ValueError(
            f"cannot lower cutoff from {graph.cutoff} to {cutoff} without the pair cache"
        )
    edges = tuple(e for e in graph.edges if abs(e.value) >= cutoff)
    return CorrelationGraph(nodes=graph.nodes, edges=edges, cutoff=cutoff)


def project_graph(graph: CorrelationGraph, tickers: Sequence[str]) -> CorrelationGraph:
    """
    Локальная проекция: узлы только для tickers (в заданном порядке), рёбра,
    инцидентные отброшенным тикерам, удаляются.

    Raises:
        ValueError: Тикер отсутствует среди узлов графа
    """
    known = set(graph.node_ids())
    missing = [t for t in tickers if t not in known]
    if missing:
        raise ValueError(f"cannot project graph onto unknown tickers: {missing}")

    by_pair = {e.pair: e for e in graph.edges}
    nodes = tuple(GraphNode.for_ticker(t) for t in tickers)

    # Порядок и ориентация рёбер по порядку выборки, как в build_graph
    edges: list[GraphEdge] = []
    for i, source in enumerate(tickers):
        for target in tickers[i + 1:]:
            edge = by_pair.get(TickerPair.of(source, target))
            if edge is None:
                continue
            if edge.source != source:
                edge = edge.model_copy(update={"source": source, "target": target})
            edges.append(edge)

    return CorrelationGraph(nodes=nodes, edges=tuple(edges), cutoff=graph.cutoff)
