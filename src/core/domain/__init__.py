"""
Domain models and value objects.

Contains fundamental domain entities: Ticker, CorrelationRecord, CorrelationMatrix,
CorrelationGraph, SelectionState, StockMetrics.
"""

from src.core.domain.correlation import (
    CorrelationPairs,
    CorrelationRecord,
    PairwiseCorrelation,
)
from src.core.domain.graph import CorrelationGraph, GraphEdge, GraphNode
from src.core.domain.matrix import DIAGONAL_VALUE, CorrelationMatrix
from src.core.domain.metrics import StockMetrics, TickerValidation
from src.core.domain.selection import SelectionState
from src.core.domain.ticker import (
    TICKER_LIST_SEPARATOR,
    TickerPair,
    join_tickers,
    normalize_ticker,
)

__all__ = [
    # Ticker module
    "TICKER_LIST_SEPARATOR",
    "TickerPair",
    "join_tickers",
    "normalize_ticker",
    # Correlation records
    "CorrelationRecord",
    "PairwiseCorrelation",
    "CorrelationPairs",
    # Matrix model
    "DIAGONAL_VALUE",
    "CorrelationMatrix",
    # Graph model
    "CorrelationGraph",
    "GraphEdge",
    "GraphNode",
    # Selection model
    "SelectionState",
    # External response models
    "StockMetrics",
    "TickerValidation",
]
