"""View state controller.

Single writer of ViewState. User interactions arrive as commands; each
handler replaces the state snapshot, pushes the display changes to the
renderer, and notifies subscribers once. Archive work goes through the
dispatcher and comes back as completions, which are applied only if they
answer the latest request on their channel (last request wins).

Channels
--------
layers
    Day/Month/Year layers for an anchor date. The anchor is committed only
    when its layers arrive, so a failed date change leaves the previous
    anchor, layers and date label in place.
series
    Interference time series for the clicked point.

An example site is applied as one step: its viewport, narrative, annotations
and clicked point are held back until the layers for its anchor date (or for
a date picked while it waits) arrive, then committed together with them. If
those layers fail, nothing of the site is shown.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
import itertools
import logging
import threading
import time
from typing import Callable, Optional

from rfi_tracker.archive.model import load
from rfi_tracker.contracts import assert_view_state
from rfi_tracker.controller.commands import (
    ChartPointActivated,
    DateChange,
    ExampleSiteSelected,
    GranularityChange,
    MapClick,
    OpacityChange,
)
from rfi_tracker.controller.rendering import LayerRenderer, MapCanvas
from rfi_tracker.controller.state import ViewState, Viewport
from rfi_tracker.errors import (
    EmptyCollectionError,
    StaleResponseDiscarded,
    TrackerError,
)
from rfi_tracker.pipeline.aggregator import Aggregator, LayerSet
from rfi_tracker.pipeline.dispatcher import Completion, InlineDispatcher, QueryTicket
from rfi_tracker.pipeline.signal import ClickedPoint, PointSignalExtractor
from rfi_tracker.pipeline.windows import Granularity
from rfi_tracker.sites.registry import ExampleSite, get_site

__all__ = ['ViewStateController']

logger = logging.getLogger(__name__)

LAYERS = "layers"
SERIES = "series"


@dataclass
class _PendingSite:
    """Site selection waiting on its layers ticket."""
    site: ExampleSite
    layers_seq: int
    series_seq: Optional[int]
    series: Optional[Completion] = None


class ViewStateController:
    """State machine over ViewState.

    Parameters
    ----------
    archive : ArchiveBackend
        Observation source; the fixed dual-pol IW filter is applied here.
    config : InternalConfig
        Resolved runtime configuration.
    dispatcher : QueryDispatcher or InlineDispatcher, optional
        Runs archive work. Defaults to an InlineDispatcher.
    renderer : LayerRenderer, optional
        Display surface. Defaults to an in-memory MapCanvas.
    clock : callable, optional
        Returns the current UTC datetime (injectable for tests).

    Examples
    --------
    >>> controller = ViewStateController(archive, config)
    >>> controller.start()
    >>> controller.on_map_click(49.949916, 26.606379)
    >>> controller.state.series_status
    'ready'
    """

    def __init__(self, archive, config, dispatcher=None,
                 renderer: Optional[LayerRenderer] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.config = config
        self.collection = load(archive)
        self.vh_collection = self.collection.select(config.extraction.band)
        self.aggregator = Aggregator(config)
        self.extractor = PointSignalExtractor.from_config(config)
        self.dispatcher = dispatcher if dispatcher is not None else InlineDispatcher()
        self.renderer = renderer if renderer is not None else MapCanvas()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        vis = config.visualization
        self.marker_style = {
            "color": vis.marker_color,
            "fillColor": vis.marker_fill,
            "pointSize": vis.marker_size,
        }

        self.layers: Optional[LayerSet] = None
        self._staged_layers: Optional[LayerSet] = None
        self._pending_site: Optional[_PendingSite] = None
        self._lock = threading.RLock()
        self._listeners: list[Callable[[ViewState], None]] = []
        self._seq = itertools.count(1)
        self._latest: dict[str, int] = {}
        self._batch_depth = 0
        self._handlers = {
            MapClick: self._handle_map_click,
            GranularityChange: self._handle_granularity_change,
            DateChange: self._handle_date_change,
            OpacityChange: self._handle_opacity_change,
            ChartPointActivated: self._handle_chart_point,
            ExampleSiteSelected: self._handle_site_selected,
        }

        ctl = config.controller
        self._state = ViewState(
            viewport=Viewport(lon=ctl.default_lon, lat=ctl.default_lat, zoom=ctl.default_zoom),
            granularity=Granularity.parse(ctl.default_granularity),
            opacity=ctl.default_opacity,
            layer_opacity=vis.layer_opacity,
            anchor_date=self.default_anchor(),
        )
        self._published = self._state

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def state(self) -> ViewState:
        return self._published

    def default_anchor(self) -> date:
        """Today minus the ingest lag, so the archive has imagery."""
        return (self.clock() - timedelta(days=self.config.controller.anchor_lag_days)).date()

    def subscribe(self, listener: Callable[[ViewState], None]) -> Callable[[], None]:
        """Register a snapshot reader. Returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def start(self):
        """Load the initial layers and series at the default point."""
        ctl = self.config.controller
        logger.info("Starting controller at (%.6f, %.6f), anchor %s",
                    ctl.default_lon, ctl.default_lat, self._state.anchor_date)
        self.dispatcher.start()
        with self._transition():
            self.renderer.set_viewport(self._state.viewport)
            self._handle_date_change(DateChange(anchor=self._state.anchor_date))
            self._handle_map_click(MapClick(lon=ctl.default_lon, lat=ctl.default_lat))
            self.process_completions()

    def dispatch(self, command) -> ViewState:
        """Apply one command and return the resulting snapshot.

        Completions that are already available (always the case with the
        inline dispatcher) are applied in the same transition, so readers
        get a single snapshot for the whole interaction.
        """
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown command type: {type(command).__name__}")
        logger.debug("Dispatching %s", command)
        with self._transition():
            handler(command)
            self.process_completions()
        return self.state

    def on_map_click(self, lon: float, lat: float) -> ViewState:
        return self.dispatch(MapClick(lon=lon, lat=lat))

    def on_granularity_change(self, granularity) -> ViewState:
        return self.dispatch(GranularityChange(granularity=granularity))

    def on_date_change(self, anchor) -> ViewState:
        return self.dispatch(DateChange(anchor=anchor))

    def on_opacity_change(self, value: float) -> ViewState:
        return self.dispatch(OpacityChange(value=value))

    def on_chart_point_activated(self, index: Optional[int] = None, timestamp=None) -> ViewState:
        return self.dispatch(ChartPointActivated(index=index, timestamp=timestamp))

    def on_example_site_selected(self, name: str) -> ViewState:
        return self.dispatch(ExampleSiteSelected(name=name))

    def process_completions(self, timeout: float = 0.0) -> int:
        """Apply every completion that has arrived. Returns how many were applied.

        ``timeout`` bounds the wait for the first completion only. Everything
        that has arrived is applied in one transition.
        """
        applied = 0
        completion = self.dispatcher.poll(timeout)
        if completion is None:
            return applied
        with self._transition():
            while completion is not None:
                try:
                    self._apply(completion)
                    applied += 1
                except StaleResponseDiscarded as e:
                    logger.debug("%s", e)
                completion = self.dispatcher.poll()
        return applied

    def wait_until_idle(self, timeout: float = 30.0) -> bool:
        """Block until every submitted query has been applied or dropped."""
        deadline = time.monotonic() + timeout
        while self.dispatcher.pending > 0:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning("Controller still has %d queries in flight", self.dispatcher.pending)
                return False
            self.process_completions(timeout=min(remaining, 0.1))
        return True

    # ------------------------------------------------------------------
    # Transition plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _transition(self):
        """Group state changes so readers see one snapshot at the end."""
        with self._lock:
            self._batch_depth += 1
            try:
                yield
                if self._batch_depth == 1:
                    self._publish()
            except BaseException:
                if self._batch_depth == 1:
                    self._state = self._published
                    self._staged_layers = None
                raise
            finally:
                self._batch_depth -= 1

    def _update(self, **changes):
        self._state = self._state.model_copy(update=changes)

    def _issue(self, channel: str) -> QueryTicket:
        ticket = QueryTicket(channel=channel, seq=next(self._seq))
        self._latest[channel] = ticket.seq
        return ticket

    def _publish(self):
        old, new = self._published, self._state
        if new == old:
            self._staged_layers = None
            return
        assert_view_state(new)
        self._render(old, new)
        self._published = new
        for listener in list(self._listeners):
            listener(new)

    def _render(self, old: ViewState, new: ViewState):
        """Push the differences between two snapshots to the renderer."""
        if new.viewport != old.viewport:
            self.renderer.set_viewport(new.viewport)
        if new.clicked_point != old.clicked_point:
            self.renderer.set_marker(new.clicked_point, self.marker_style)
        if new.series != old.series or new.clicked_point != old.clicked_point:
            self.renderer.set_chart(new.series, new.chart_title)
        if new.annotations != old.annotations:
            self.renderer.set_annotations(new.annotations)

        staged, self._staged_layers = self._staged_layers, None
        if staged is not None:
            self.layers = staged
            for composite in staged:
                self.renderer.add_layer(
                    composite.layer_id,
                    composite,
                    shown=composite.layer_id == new.visible_layer,
                    opacity=new.layer_opacity,
                )
        elif self.layers is not None:
            if new.granularity != old.granularity:
                for layer_id in self.layers.layers:
                    self.renderer.set_shown(layer_id, layer_id == new.visible_layer)
            if new.layer_opacity != old.layer_opacity or new.granularity != old.granularity:
                self.renderer.set_opacity(new.visible_layer, new.layer_opacity)
        if new.notice != old.notice:
            self.renderer.set_notice(new.notice)

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def _handle_map_click(self, cmd: MapClick):
        point = ClickedPoint(lon=cmd.lon, lat=cmd.lat)
        ticket = self._issue(SERIES)
        if self._pending_site is not None:
            # the newer click replaces the site's marker
            self._pending_site.series_seq = None
            self._pending_site.series = None
        self._update(clicked_point=point, series=None, series_status="loading")
        self.dispatcher.submit(ticket, self.extractor.extract_series, self.vh_collection, point)

    def _handle_granularity_change(self, cmd: GranularityChange):
        self._update(granularity=cmd.granularity)

    def _handle_date_change(self, cmd: DateChange):
        ticket = self._issue(LAYERS)
        if self._pending_site is not None:
            # the site now commits with the newer date's layers
            self._pending_site.layers_seq = ticket.seq
        self._update(pending_anchor=cmd.anchor)
        self.dispatcher.submit(ticket, self.aggregator.aggregate_all, self.collection, cmd.anchor)

    def _handle_opacity_change(self, cmd: OpacityChange):
        self._update(opacity=cmd.value, layer_opacity=cmd.value)

    def _handle_chart_point(self, cmd: ChartPointActivated):
        series = self._state.series
        if series is None or len(series) == 0:
            raise ValueError("No interference series to pick a point from")

        if cmd.index is not None:
            timestamp = series.timestamp_at(cmd.index)
        else:
            entry = series.find(cmd.timestamp)
            if entry is None:
                raise ValueError(f"{cmd.timestamp} is not a point of the current series")
            timestamp = entry.timestamp

        logger.info("Chart point %s selected", timestamp.isoformat())
        self._handle_date_change(DateChange(anchor=timestamp))

    def _handle_site_selected(self, cmd: ExampleSiteSelected):
        site = get_site(cmd.name)
        logger.info("Example site selected: %s", site.name)
        point = ClickedPoint(lon=site.lon, lat=site.lat)
        layers = self._issue(LAYERS)
        series = self._issue(SERIES)
        self._pending_site = _PendingSite(site=site, layers_seq=layers.seq, series_seq=series.seq)
        self._update(pending_anchor=site.anchor_date)
        self.dispatcher.submit(layers, self.aggregator.aggregate_all, self.collection, site.anchor_date)
        self.dispatcher.submit(series, self.extractor.extract_series, self.vh_collection, point)

    def _abandon_site(self, reason: str):
        pending, self._pending_site = self._pending_site, None
        logger.info("Example site %s not applied: %s", pending.site.name, reason)
        if pending.series_seq is not None and self._latest.get(SERIES) == pending.series_seq:
            # nothing outstanding for the point currently shown
            del self._latest[SERIES]

    def _commit_site(self, pending: _PendingSite):
        site = pending.site
        self._update(
            viewport=Viewport(lon=site.lon, lat=site.lat, zoom=site.zoom),
            granularity=Granularity.MONTH,
            opacity=site.opacity,
            layer_opacity=site.opacity,
            active_site=site.name,
            narrative=site.narrative,
            annotations=site.annotations,
        )
        if pending.series_seq is not None:
            self._update(clicked_point=ClickedPoint(lon=site.lon, lat=site.lat),
                         series=None, series_status="loading")

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------

    def _apply(self, completion: Completion):
        ticket = completion.ticket
        latest = self._latest.get(ticket.channel)
        if ticket.seq != latest:
            raise StaleResponseDiscarded(ticket.channel, ticket.seq, latest)

        if ticket.channel == LAYERS:
            self._apply_layers(completion)
        elif ticket.channel == SERIES:
            pending = self._pending_site
            if pending is not None and pending.series_seq == ticket.seq:
                pending.series = completion
                return
            self._apply_series(completion)
        else:
            raise ValueError(f"Unknown completion channel: {ticket.channel}")

    def _apply_layers(self, completion: Completion):
        pending = self._pending_site
        if pending is not None and pending.layers_seq != completion.ticket.seq:
            pending = None
        error = completion.error
        if error is not None:
            if isinstance(error, TrackerError):
                logger.warning("Date change to %s failed, keeping %s: %s",
                               self._state.pending_anchor, self._state.anchor_date, error)
            else:
                logger.error("Layer computation for %s failed, keeping %s",
                             self._state.pending_anchor, self._state.anchor_date,
                             exc_info=error)
            if pending is not None:
                self._abandon_site("its layers failed")
            self._update(pending_anchor=None, notice=str(error))
            return

        layer_set: LayerSet = completion.result
        if pending is not None:
            self._pending_site = None
            self._commit_site(pending)
        self._staged_layers = layer_set
        self._update(
            anchor_date=layer_set.anchor,
            layer_anchor=layer_set.anchor,
            pending_anchor=None,
            layer_status={c.layer_id: "no_data" if c.empty else "ready" for c in layer_set},
            notice=None,
        )
        if pending is not None and pending.series is not None:
            self._apply_series(pending.series)

    def _apply_series(self, completion: Completion):
        error = completion.error
        if error is None:
            self._update(series=completion.result, series_status="ready")
        elif isinstance(error, EmptyCollectionError):
            logger.info("No coverage at %s: %s", self._state.clicked_point, error)
            self._update(series=None, series_status="no_data")
        elif isinstance(error, TrackerError):
            logger.warning("Series request failed: %s", error)
            self._update(series=None, series_status="error", notice=str(error))
        else:
            logger.error("Series computation at %s failed", self._state.clicked_point,
                         exc_info=error)
            self._update(series=None, series_status="error", notice=str(error))
