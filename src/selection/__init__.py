"""Selection — политика изменения датасета и асинхронная сессия."""

from .actions import (
    AddTicker,
    ChangeCutoff,
    DeselectAll,
    DeselectTicker,
    DismissError,
    FetchFailed,
    FetchSucceeded,
    LoadTickers,
    MetricsLoaded,
    Refresh,
    RemoveTicker,
    SelectAll,
    SelectionAction,
    SelectTicker,
    TickerRejected,
)
from .session import CorrelationSession
from .snapshot import (
    CellDetails,
    DatasetPhase,
    DatasetSnapshot,
    FetchRequest,
    cell_details,
    initial_snapshot,
)
from .state_machine import SelectionStateMachine, TransitionResult

__all__ = [
    # Actions
    "AddTicker",
    "ChangeCutoff",
    "DeselectAll",
    "DeselectTicker",
    "DismissError",
    "FetchFailed",
    "FetchSucceeded",
    "LoadTickers",
    "MetricsLoaded",
    "Refresh",
    "RemoveTicker",
    "SelectAll",
    "SelectionAction",
    "SelectTicker",
    "TickerRejected",
    # Snapshot
    "CellDetails",
    "DatasetPhase",
    "DatasetSnapshot",
    "FetchRequest",
    "cell_details",
    "initial_snapshot",
    # State machine / session
    "SelectionStateMachine",
    "TransitionResult",
    "CorrelationSession",
]
