"""Correlation dataset engine — чистые функции построения производных представлений.

- Normalizer: сырые записи → неориентированные дедуплицированные пары
- Matrix Builder: пары + тикеры → симметричная матрица
- Graph Builder: пары + тикеры + cutoff → узлы/рёбра
- Styling: цвета ячеек и описания силы связи
"""

from .graph_builder import (
    DEFAULT_GRAPH_STYLE,
    NEGATIVE_EDGE_COLOR,
    POSITIVE_EDGE_COLOR,
    GraphStyle,
    build_graph,
    edge_color,
    edge_width,
    filter_graph,
    make_edge,
    project_graph,
    validate_cutoff,
)
from .matrix_builder import build_matrix, project_matrix
from .normalizer import NormalizationResult, normalize_records
from .styling import (
    CorrelationStrength,
    cell_color,
    classify_correlation,
    describe_correlation,
    format_cell,
)

__all__ = [
    # Normalizer
    "NormalizationResult",
    "normalize_records",
    # Matrix Builder
    "build_matrix",
    "project_matrix",
    # Graph Builder
    "DEFAULT_GRAPH_STYLE",
    "NEGATIVE_EDGE_COLOR",
    "POSITIVE_EDGE_COLOR",
    "GraphStyle",
    "build_graph",
    "edge_color",
    "edge_width",
    "filter_graph",
    "make_edge",
    "project_graph",
    "validate_cutoff",
    # Styling
    "CorrelationStrength",
    "cell_color",
    "classify_correlation",
    "describe_correlation",
    "format_cell",
]
