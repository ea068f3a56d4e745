"""Pipeline modules.

- windows: canonical day/month/year time windows
- aggregator: windowed max composites per orbit geometry
- signal: point time series for the interference chart
- dispatcher: asynchronous query workers with sequence-numbered tickets
- session: lifecycle of a tracker session
"""

from rfi_tracker.pipeline.windows import Granularity, TimeWindow, canonical_window
from rfi_tracker.pipeline.aggregator import Aggregator, Composite, LayerSet, VisParams
from rfi_tracker.pipeline.signal import (
    ClickedPoint,
    PointSignalExtractor,
    SeriesPoint,
    TimeSeries,
    extract_series,
)
from rfi_tracker.pipeline.dispatcher import (
    Completion,
    InlineDispatcher,
    QueryDispatcher,
    QueryTicket,
    create_dispatcher,
)

__all__ = [
    "Granularity",
    "TimeWindow",
    "canonical_window",
    "Aggregator",
    "Composite",
    "LayerSet",
    "VisParams",
    "ClickedPoint",
    "PointSignalExtractor",
    "SeriesPoint",
    "TimeSeries",
    "extract_series",
    "Completion",
    "InlineDispatcher",
    "QueryDispatcher",
    "QueryTicket",
    "create_dispatcher",
]
