"""Point signal extraction: the interference time series at a clicked point.

Every observation in the full VH collection (not limited to the displayed
window) is reduced with a maximum over a disc around the point. Observations
that do not cover the point are left out, so a gap means "no data" and never
"zero signal". Each value keeps its timestamp so that a point picked on the
chart can navigate the map back to its date.
"""

from datetime import date, datetime, timezone
import logging
from typing import Optional, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

from rfi_tracker.archive.model import BandCollection
from rfi_tracker.contracts import assert_time_series, require
from rfi_tracker.errors import EmptyCollectionError

__all__ = ['ClickedPoint', 'SeriesPoint', 'TimeSeries', 'PointSignalExtractor', 'extract_series']

logger = logging.getLogger(__name__)


class ClickedPoint(BaseModel):
    """A (longitude, latitude) pair in degrees."""

    model_config = ConfigDict(frozen=True)

    lon: float = Field(ge=-180, le=180)
    lat: float = Field(ge=-90, le=90)

    def __str__(self) -> str:
        return f"({self.lon:.6f}, {self.lat:.6f})"


class SeriesPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    value: float

    @field_validator("timestamp")
    @classmethod
    def require_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class TimeSeries(BaseModel):
    """Ordered (timestamp, value) pairs for one clicked point."""

    model_config = ConfigDict(frozen=True)

    point: ClickedPoint
    band: str = "VH"
    sample_radius: float = 500.0
    points: tuple[SeriesPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    @property
    def timestamps(self) -> list[datetime]:
        return [p.timestamp for p in self.points]

    @property
    def values(self) -> list[float]:
        return [p.value for p in self.points]

    def timestamp_at(self, index: int) -> datetime:
        """Timestamp of the index-th rendered point (negative indices allowed)."""
        return self.points[index].timestamp

    def find(self, timestamp: Union[datetime, date, str]) -> Optional[SeriesPoint]:
        """Entry for an exact timestamp, or the first entry on a calendar date.

        Chart libraries often report the picked x value as a date only, so a
        bare date matches the first observation acquired that UTC day.
        """
        if isinstance(timestamp, str):
            timestamp = pd.Timestamp(timestamp).to_pydatetime()
            if timestamp.time() == datetime.min.time() and timestamp.tzinfo is None:
                timestamp = timestamp.date()
        if isinstance(timestamp, datetime):
            if timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=timezone.utc)
            for entry in self.points:
                if entry.timestamp == timestamp:
                    return entry
            return None
        for entry in self.points:
            if entry.timestamp.date() == timestamp:
                return entry
        return None

    def peak(self) -> Optional[SeriesPoint]:
        """Strongest return in the series (first one on ties)."""
        if not self.points:
            return None
        return max(self.points, key=lambda p: p.value)

    def to_frame(self) -> pd.DataFrame:
        """DataFrame indexed by timestamp with a single ``band`` column."""
        frame = pd.DataFrame(
            {self.band: self.values},
            index=pd.DatetimeIndex(self.timestamps, name="timestamp"),
        )
        frame.attrs = {"lon": self.point.lon, "lat": self.point.lat,
                       "sample_radius": self.sample_radius}
        return frame


class PointSignalExtractor:
    """Reduce a VH collection to one value per observation at a point.

    Parameters
    ----------
    band : str
        Band the collection must carry (VH).
    sample_radius : float
        Default disc radius in archive CRS units.
    """

    def __init__(self, band: str = "VH", sample_radius: float = 500.0):
        self.band = band
        self.sample_radius = float(sample_radius)

    @classmethod
    def from_config(cls, config) -> "PointSignalExtractor":
        return cls(band=config.extraction.band, sample_radius=config.extraction.sample_radius)

    def extract_series(self, vh_collection: BandCollection, point: ClickedPoint,
                       sample_radius: float | None = None) -> TimeSeries:
        """Build the series at ``point``.

        Raises
        ------
        EmptyCollectionError
            If no observation covers the point at all.
        """
        radius = self.sample_radius if sample_radius is None else float(sample_radius)
        require(vh_collection.band == self.band,
                f"Series contract violated: expected {self.band} collection, got {vh_collection.band}")
        require(all(f.window is None for f in vh_collection.filters),
                "Series contract violated: series collection must not be window-bounded")

        rows = vh_collection.point_series(point.lon, point.lat, radius)
        if not rows:
            raise EmptyCollectionError(
                f"No {self.band} coverage within {radius:g} of {point}"
            )

        entries = tuple(SeriesPoint(timestamp=ts, value=value) for ts, value in rows)
        assert_time_series(entries)
        logger.info("Extracted %d-point %s series at %s", len(entries), self.band, point)
        return TimeSeries(point=point, band=self.band, sample_radius=radius, points=entries)


def extract_series(vh_collection: BandCollection, point: ClickedPoint,
                   sample_radius: float = 500.0) -> TimeSeries:
    """Functional form of ``PointSignalExtractor.extract_series``."""
    return PointSignalExtractor(vh_collection.band, sample_radius).extract_series(vh_collection, point)
