"""Temporal aggregation of the observation collection into display layers.

For Month and Year windows each channel is a per-pixel maximum over the
window: interference shows up as abnormally *high* backscatter, so the
maximum keeps transient spikes that a mean would wash out. Day windows hold
only a handful of passes and are displayed directly without reduction.

Channel order is fixed: VH ascending, VV (ascending + descending merged),
VH descending.
"""

from dataclasses import dataclass
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from rfi_tracker.archive.model import ObservationCollection, OrbitDirection
from rfi_tracker.contracts import assert_composite, COMPOSITE_CHANNELS
from rfi_tracker.errors import EmptyCollectionError
from rfi_tracker.pipeline.windows import Granularity, TimeWindow, canonical_window, coerce_anchor

__all__ = ['VisParams', 'Composite', 'LayerSet', 'Aggregator']

logger = logging.getLogger(__name__)


class VisParams(BaseModel):
    """Per-channel display stretch handed to the renderer."""

    model_config = ConfigDict(frozen=True)

    bands: tuple[str, str, str]
    min: tuple[float, float, float]
    max: tuple[float, float, float]


@dataclass(frozen=True)
class Composite:
    """One display layer for one window.

    Attributes
    ----------
    window : TimeWindow
        Window the layer covers.
    granularity : Granularity
        Also the stable layer id ("Day", "Month", "Year").
    channels : tuple of str
        Channel names in display order.
    vis : VisParams
        Display stretch for the channels.
    image : raster or None
        Composed 3-channel raster (reduced layers only).
    collection : ObservationCollection or None
        Windowed collection (passthrough Day layer only).
    reduced : bool
        False for the Day passthrough.
    empty : bool
        True when nothing in the window covers any channel. The layer is a
        placeholder and must be shown as "no data", not as blank imagery.
    missing_channels : tuple of str
        Channels whose reduction had no observations.
    """
    window: TimeWindow
    granularity: Granularity
    channels: tuple
    vis: VisParams
    image: Any = None
    collection: Optional[ObservationCollection] = None
    reduced: bool = True
    empty: bool = False
    missing_channels: tuple = ()

    @property
    def layer_id(self) -> str:
        return self.granularity.value

    @property
    def payload(self):
        """What the renderer draws: the raster, or the raw collection."""
        return self.image if self.reduced else self.collection


@dataclass(frozen=True)
class LayerSet:
    """The three layers computed for one anchor date, keyed by layer id."""
    anchor: Any
    layers: dict

    def __getitem__(self, granularity) -> Composite:
        return self.layers[Granularity.parse(granularity).value]

    def __iter__(self):
        return iter(self.layers.values())

    def empty_layers(self) -> list:
        return [layer_id for layer_id, composite in self.layers.items() if composite.empty]


class Aggregator:
    """Turn a collection + anchor date + granularity into a Composite.

    Parameters
    ----------
    config : InternalConfig
        Supplies the display stretches and daily display bands.

    Examples
    --------
    >>> aggregator = Aggregator(config)
    >>> composite = aggregator.aggregate(load(archive), "2018-06-10", "Year")
    >>> str(composite.window)
    '[2018-01-01, 2019-01-01)'
    """

    def __init__(self, config):
        vis = config.visualization
        self.daily_vis = VisParams(bands=vis.daily_bands, min=vis.daily_min, max=vis.daily_max)
        self.composite_vis = VisParams(
            bands=COMPOSITE_CHANNELS, min=vis.composite_min, max=vis.composite_max
        )

    def aggregate(self, collection: ObservationCollection, anchor, granularity) -> Composite:
        """Compute the layer for the window containing ``anchor``.

        Never raises EmptyCollectionError: an uncovered window yields a
        placeholder Composite with ``empty=True``.
        """
        granularity = Granularity.parse(granularity)
        window = canonical_window(anchor, granularity)

        if granularity is Granularity.DAY:
            composite = self._passthrough(collection, window)
        else:
            composite = self._reduce(collection, window)

        assert_composite(composite)
        logger.debug(
            "Aggregated %s layer %s (empty=%s, missing=%s)",
            composite.layer_id, window, composite.empty, list(composite.missing_channels),
        )
        return composite

    def aggregate_all(self, collection: ObservationCollection, anchor) -> LayerSet:
        """Compute Day, Month and Year layers for one anchor date.

        All three are always computed so that switching granularity never
        waits on the archive.
        """
        anchor = coerce_anchor(anchor)
        layers = {g.value: self.aggregate(collection, anchor, g) for g in Granularity}
        layer_set = LayerSet(anchor=anchor, layers=layers)
        logger.info("Computed layers for %s (empty: %s)", anchor.isoformat(),
                    layer_set.empty_layers() or "none")
        return layer_set

    def _passthrough(self, collection, window: TimeWindow) -> Composite:
        windowed = collection.filter_window(window)
        n_members = windowed.size()
        return Composite(
            window=window,
            granularity=Granularity.DAY,
            channels=tuple(self.daily_vis.bands),
            vis=self.daily_vis,
            collection=windowed,
            reduced=False,
            empty=n_members == 0,
            missing_channels=tuple(self.daily_vis.bands) if n_members == 0 else (),
        )

    def _reduce(self, collection, window: TimeWindow) -> Composite:
        ascending = collection.by_orbit(OrbitDirection.ASCENDING).filter_window(window)
        descending = collection.by_orbit(OrbitDirection.DESCENDING).filter_window(window)
        sources = (
            ("VH_ascending", ascending.select("VH")),
            ("VV_merged", ascending.select("VV").merge(descending.select("VV"))),
            ("VH_descending", descending.select("VH")),
        )

        rasters = []
        missing = []
        for channel, band_collection in sources:
            try:
                rasters.append((channel, band_collection.reduce_max()))
            except EmptyCollectionError:
                missing.append(channel)
                rasters.append((channel, None))

        image = collection.archive.compose(rasters)
        return Composite(
            window=window,
            granularity=window.granularity,
            channels=COMPOSITE_CHANNELS,
            vis=self.composite_vis,
            image=image,
            reduced=True,
            empty=len(missing) == len(COMPOSITE_CHANNELS),
            missing_channels=tuple(missing),
        )
