"""Immutable view state snapshots.

The controller is the only writer. Each transition builds a new ViewState
and publishes it whole, so readers never observe a half-applied change.
Labels are derived from the state rather than stored beside it, which keeps
the date label and the visible layer from drifting apart.
"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from rfi_tracker.pipeline.signal import ClickedPoint, TimeSeries
from rfi_tracker.pipeline.windows import Granularity, TimeWindow, canonical_window
from rfi_tracker.sites.registry import Annotation, NarrativeLabel

__all__ = ['Viewport', 'ClickedPoint', 'LayerStatus', 'SeriesStatus', 'ViewState']

LayerStatus = Literal["ready", "no_data"]
SeriesStatus = Literal["idle", "loading", "ready", "no_data", "error"]


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True)

    lon: float = Field(ge=-180, le=180)
    lat: float = Field(ge=-90, le=90)
    zoom: int = Field(ge=0, le=24)


class ViewState(BaseModel):
    """Everything the presentation layer needs to draw the tracker.

    Attributes
    ----------
    anchor_date : date
        Last anchor whose layers were computed successfully.
    pending_anchor : date or None
        Anchor of the in-flight layer request, if any.
    layer_anchor : date or None
        Anchor the displayed layers belong to (None before the first load).
    opacity : float
        Slider value.
    layer_opacity : float
        Opacity applied to the shown layers.
    layer_status : dict
        "ready" or "no_data" per layer id.
    """

    model_config = ConfigDict(frozen=True)

    viewport: Viewport
    granularity: Granularity = Granularity.MONTH
    opacity: float = Field(1.0, ge=0, le=1)
    layer_opacity: float = Field(0.8, ge=0, le=1)
    anchor_date: date
    pending_anchor: Optional[date] = None
    layer_anchor: Optional[date] = None
    layer_status: dict[str, LayerStatus] = Field(default_factory=dict)
    clicked_point: Optional[ClickedPoint] = None
    series: Optional[TimeSeries] = None
    series_status: SeriesStatus = "idle"
    active_site: Optional[str] = None
    narrative: tuple[NarrativeLabel, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    notice: Optional[str] = None

    @property
    def window(self) -> TimeWindow:
        return canonical_window(self.anchor_date, self.granularity)

    @property
    def visible_layer(self) -> str:
        return Granularity(self.granularity).value

    @property
    def loading(self) -> bool:
        return self.pending_anchor is not None or self.series_status == "loading"

    @property
    def no_data(self) -> bool:
        """True when the visible layer has no coverage in its window."""
        return self.layer_status.get(self.visible_layer) == "no_data"

    @property
    def date_label(self) -> str:
        return self.anchor_date.strftime("%B %d, %Y")

    @property
    def info_label(self) -> str:
        adjective = Granularity(self.granularity).adjective
        return f"You are currently viewing {adjective} Sentinel-1 imagery from {self.date_label}"

    @property
    def lon_label(self) -> str:
        return "" if self.clicked_point is None else f"lon: {self.clicked_point.lon:.2f}"

    @property
    def lat_label(self) -> str:
        return "" if self.clicked_point is None else f"lat: {self.clicked_point.lat:.2f}"

    @property
    def chart_title(self) -> str:
        if self.clicked_point is None:
            return ""
        return (f"Radio Frequency Interference at "
                f"(lon:{self.clicked_point.lon:.2f}, lat:{self.clicked_point.lat:.2f})")
