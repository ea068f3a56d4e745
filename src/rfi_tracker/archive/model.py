"""Observation collection model.

Observations are owned by the archive; the tracker only ever holds lazy,
immutable *views* over them. A view is an archive handle plus a
CollectionFilter, so deriving a sub-collection (one orbit direction, one
window) never copies or mutates anything. Work happens only when a view is
evaluated by the archive backend (query, count, reduce).
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Sequence, TYPE_CHECKING

from rfi_tracker.contracts import assert_dual_pol_iw

if TYPE_CHECKING:
    from rfi_tracker.archive.backend import ArchiveBackend
    from rfi_tracker.pipeline.windows import TimeWindow

__all__ = [
    'OrbitDirection',
    'InstrumentMode',
    'Observation',
    'CollectionFilter',
    'ObservationCollection',
    'BandCollection',
    'load',
    'by_orbit',
    'select_band',
    'merge',
    'filter_window',
]

logger = logging.getLogger(__name__)

DUAL_POLARIZATION = frozenset({"VH", "VV"})


class OrbitDirection(str, Enum):
    """Pass direction; changes the viewing geometry of a scene."""
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"


class InstrumentMode(str, Enum):
    """Sentinel-1 acquisition mode. Only IW scenes are admitted."""
    IW = "IW"
    EW = "EW"
    SM = "SM"
    WV = "WV"


@dataclass(frozen=True)
class Observation:
    """One satellite pass.

    ``payload`` holds the rasters keyed by band name (data variables of an
    xarray.Dataset with ``x``/``y`` coordinates in the archive CRS). Remote
    archives leave it empty; their pixels never leave the compute service.
    """
    scene_id: str
    timestamp: datetime
    orbit_direction: OrbitDirection
    instrument_mode: InstrumentMode
    polarizations: frozenset
    payload: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        ts = self.timestamp
        if ts.tzinfo is None:
            object.__setattr__(self, "timestamp", ts.replace(tzinfo=timezone.utc))
        else:
            object.__setattr__(self, "timestamp", ts.astimezone(timezone.utc))
        object.__setattr__(self, "orbit_direction", OrbitDirection(self.orbit_direction))
        object.__setattr__(self, "instrument_mode", InstrumentMode(self.instrument_mode))
        object.__setattr__(
            self, "polarizations", frozenset(p.upper() for p in self.polarizations)
        )


@dataclass(frozen=True)
class CollectionFilter:
    """Archive-side predicate describing one view."""
    polarizations: frozenset = DUAL_POLARIZATION
    instrument_mode: InstrumentMode = InstrumentMode.IW
    orbit_direction: Optional[OrbitDirection] = None
    window: Optional["TimeWindow"] = None

    def matches(self, obs: Observation) -> bool:
        """Evaluate the predicate locally (used by in-memory archives)."""
        if not self.polarizations <= obs.polarizations:
            return False
        if obs.instrument_mode != self.instrument_mode:
            return False
        if self.orbit_direction is not None and obs.orbit_direction != self.orbit_direction:
            return False
        if self.window is not None and not self.window.contains(obs.timestamp):
            return False
        return True

    def describe(self) -> str:
        parts = ["+".join(sorted(self.polarizations)), self.instrument_mode.value]
        if self.orbit_direction is not None:
            parts.append(self.orbit_direction.value)
        if self.window is not None:
            parts.append(str(self.window))
        return " ".join(parts)


@dataclass(frozen=True)
class ObservationCollection:
    """Time-ordered view over the archive."""
    archive: "ArchiveBackend" = field(compare=False)
    filter: CollectionFilter = field(default_factory=CollectionFilter)

    def by_orbit(self, direction) -> "ObservationCollection":
        return replace(self, filter=replace(self.filter, orbit_direction=OrbitDirection(direction)))

    def filter_window(self, window: "TimeWindow") -> "ObservationCollection":
        return replace(self, filter=replace(self.filter, window=window))

    def select(self, band: str) -> "BandCollection":
        band = band.upper()
        if band not in self.filter.polarizations:
            raise ValueError(f"Band {band} is not guaranteed by filter {self.filter.describe()}")
        return BandCollection(band=band, parts=(self,))

    def observations(self) -> list:
        """Query the members (metadata round trip to the archive)."""
        members = self.archive.query_observations(self.filter)
        if DUAL_POLARIZATION <= self.filter.polarizations:
            assert_dual_pol_iw(members)
        return members

    def size(self) -> int:
        return self.archive.count(self.filter)

    def mosaic(self, bands: Sequence[str]):
        """Latest-on-top mosaic of the members, for direct display."""
        return self.archive.mosaic(self.filter, tuple(bands))


@dataclass(frozen=True)
class BandCollection:
    """A single band drawn from one or more collections."""
    band: str
    parts: tuple

    @property
    def archive(self) -> "ArchiveBackend":
        return self.parts[0].archive

    @property
    def filters(self) -> list:
        return [part.filter for part in self.parts]

    def merge(self, other: "BandCollection") -> "BandCollection":
        if other.band != self.band:
            raise ValueError(f"Cannot merge band {other.band} into {self.band}")
        if other.archive is not self.archive:
            raise ValueError("Cannot merge collections from different archives")
        return BandCollection(band=self.band, parts=self.parts + other.parts)

    def filter_window(self, window: "TimeWindow") -> "BandCollection":
        return BandCollection(
            band=self.band, parts=tuple(part.filter_window(window) for part in self.parts)
        )

    def reduce_max(self):
        """Per-pixel maximum across time.

        Raises
        ------
        EmptyCollectionError
            If no observation matches any part.
        """
        return self.archive.reduce_composite(self.filters, self.band, "max")

    def point_series(self, lon: float, lat: float, radius: float) -> list:
        """(timestamp, max within radius) for every covering observation."""
        return self.archive.reduce_point_series(self.filters, self.band, lon, lat, radius, "max")


# =============================================================================
# Functional interface
# =============================================================================

def load(archive: "ArchiveBackend") -> ObservationCollection:
    """Apply the fixed tracker filter: VH + VV dual polarisation, IW mode."""
    logger.debug("Loading collection from %s", type(archive).__name__)
    return ObservationCollection(archive=archive, filter=CollectionFilter())


def by_orbit(collection: ObservationCollection, direction) -> ObservationCollection:
    return collection.by_orbit(direction)


def select_band(collection: ObservationCollection, band: str) -> BandCollection:
    return collection.select(band)


def merge(a: BandCollection, b: BandCollection) -> BandCollection:
    return a.merge(b)


def filter_window(collection, window: "TimeWindow"):
    return collection.filter_window(window)
