"""Archive backend interface.

The tracker never touches pixels directly. Every query, count and reduction
is delegated to an ArchiveBackend, which may evaluate locally (in-memory
xarray rasters) or remotely (Earth Engine). Rasters returned by a backend are
opaque to the pipeline: they are passed through to the renderer unchanged.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence

from rfi_tracker.archive.model import CollectionFilter, Observation

__all__ = ['ArchiveBackend', 'collapse_by_time']


class ArchiveBackend(ABC):
    """Queryable, reducible store of Sentinel-1 observations.

    Implementations must be safe to call from dispatcher worker threads.
    Every method may raise ``ExternalServiceError`` when the underlying
    service is unavailable; reductions over nothing raise
    ``EmptyCollectionError``.
    """

    name = "abstract"

    @abstractmethod
    def query_observations(self, flt: CollectionFilter) -> list[Observation]:
        """Members matching ``flt``, ordered by acquisition time."""

    def count(self, flt: CollectionFilter) -> int:
        """Number of members matching ``flt``."""
        return len(self.query_observations(flt))

    @abstractmethod
    def reduce_composite(self, filters: Sequence[CollectionFilter], band: str,
                         statistic: str = "max") -> Any:
        """Per-pixel reduction of ``band`` across the union of ``filters``."""

    @abstractmethod
    def compose(self, channels: Sequence[tuple[str, Optional[Any]]]) -> Any:
        """Stack named single-band rasters into one multi-band raster.

        A ``None`` raster is a missing channel and becomes a fully masked
        placeholder. Returns ``None`` when every channel is missing.
        """

    @abstractmethod
    def mosaic(self, flt: CollectionFilter, bands: Sequence[str]) -> Any:
        """Latest-on-top mosaic of ``bands`` for direct display."""

    @abstractmethod
    def reduce_point_series(self, filters: Sequence[CollectionFilter], band: str,
                            lon: float, lat: float, radius: float,
                            statistic: str = "max") -> list[tuple[datetime, float]]:
        """Per-observation reduction of ``band`` over a disc around a point.

        Observations that do not cover the disc are omitted, never returned
        as NaN or zero. Observations sharing an acquisition instant yield a
        single entry holding their max.
        """


def collapse_by_time(rows) -> list[tuple[datetime, float]]:
    """Collapse (timestamp, value) rows to one entry per instant, keeping the max.

    Reprocessed products of the same pass share a timestamp.
    """
    collapsed: dict[datetime, float] = {}
    for timestamp, value in rows:
        if timestamp not in collapsed or value > collapsed[timestamp]:
            collapsed[timestamp] = value
    return sorted(collapsed.items())
