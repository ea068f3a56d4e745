"""In-memory archive backed by xarray rasters.

Scenes are held as xarray.Dataset payloads (one data variable per band,
``y``/``x`` coordinates in a projected CRS). All reductions run locally with
xarray, which makes this backend the default for headless runs and tests.
"""

import logging
import threading
from datetime import datetime
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd
import xarray as xr
from pyproj import Transformer

from rfi_tracker.archive.backend import ArchiveBackend, collapse_by_time
from rfi_tracker.archive.model import CollectionFilter, Observation
from rfi_tracker.errors import EmptyCollectionError, ExternalServiceError

__all__ = ['InMemoryArchive']

logger = logging.getLogger(__name__)


class InMemoryArchive(ArchiveBackend):
    """Thread-safe list of observations with xarray reductions.

    Parameters
    ----------
    observations : iterable of Observation
        Initial members. Each needs a payload with the bands it advertises.
    crs : str
        Projected CRS of the payload coordinates (default Web Mercator).

    Examples
    --------
    >>> archive = InMemoryArchive(make_scenes(), crs="EPSG:3857")
    >>> collection = load(archive)
    >>> collection.size()
    12
    """

    name = "memory"

    def __init__(self, observations: Iterable[Observation] = (), crs: str = "EPSG:3857"):
        self.crs = crs
        self._lock = threading.Lock()
        self._observations: list[Observation] = []
        self._to_crs = Transformer.from_crs("EPSG:4326", crs, always_xy=True)
        for obs in observations:
            self.add(obs)

    def add(self, obs: Observation) -> None:
        """Insert a scene, keeping acquisition order."""
        if obs.payload is None:
            raise ValueError(f"Scene {obs.scene_id} has no raster payload")
        with self._lock:
            self._observations.append(obs)
            self._observations.sort(key=lambda o: o.timestamp)
        logger.debug("Added scene %s (%s)", obs.scene_id, obs.timestamp.isoformat())

    def __len__(self) -> int:
        with self._lock:
            return len(self._observations)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query_observations(self, flt: CollectionFilter) -> list[Observation]:
        with self._lock:
            return [obs for obs in self._observations if flt.matches(obs)]

    def _gather(self, filters: Sequence[CollectionFilter]) -> list[Observation]:
        """Union of several filters, each scene once, in time order."""
        seen = {}
        for flt in filters:
            for obs in self.query_observations(flt):
                seen.setdefault(obs.scene_id, obs)
        return sorted(seen.values(), key=lambda o: o.timestamp)

    @staticmethod
    def _band(obs: Observation, band: str) -> xr.DataArray:
        if band not in obs.payload.data_vars:
            raise ExternalServiceError(f"Scene {obs.scene_id} has no {band} raster")
        return obs.payload[band]

    # ------------------------------------------------------------------
    # Reductions
    # ------------------------------------------------------------------

    def reduce_composite(self, filters, band, statistic="max"):
        if statistic != "max":
            raise ValueError(f"Unsupported statistic: {statistic}")

        members = self._gather(filters)
        if not members:
            described = "; ".join(f.describe() for f in filters)
            raise EmptyCollectionError(f"No {band} observations for {described}")

        times = pd.Index([obs.timestamp.replace(tzinfo=None) for obs in members], name="time")
        stack = xr.concat([self._band(obs, band) for obs in members], dim=times, join="outer")
        reduced = stack.max(dim="time", skipna=True)
        reduced.name = band
        reduced.attrs = {"statistic": statistic, "n_observations": len(members), "crs": self.crs}
        logger.debug("Reduced %d scenes to %s %s", len(members), statistic, band)
        return reduced

    def compose(self, channels):
        present = [raster for _, raster in channels if raster is not None]
        if not present:
            return None

        aligned = iter(xr.align(*present, join="outer"))
        template = None
        layers = []
        for name, raster in channels:
            layer = next(aligned) if raster is not None else None
            if layer is not None and template is None:
                template = layer
            layers.append((name, layer))

        stacked = [
            (layer if layer is not None else xr.full_like(template, np.nan)).rename(name)
            for name, layer in layers
        ]
        image = xr.concat(stacked, dim=pd.Index([name for name, _ in layers], name="band"))
        image.attrs = {"crs": self.crs}
        return image

    def mosaic(self, flt, bands):
        members = self.query_observations(flt)
        if not members:
            raise EmptyCollectionError(f"No observations for {flt.describe()}")

        result: Optional[xr.DataArray] = None
        for obs in reversed(members):
            layer = self._band_stack(obs, bands)
            result = layer if result is None else result.combine_first(layer)
        result.attrs = {"crs": self.crs, "n_observations": len(members)}
        return result

    def _band_stack(self, obs: Observation, bands: Sequence[str]) -> xr.DataArray:
        available = [b for b in bands if b in obs.payload.data_vars]
        if not available:
            raise ExternalServiceError(f"Scene {obs.scene_id} has none of bands {list(bands)}")
        template = obs.payload[available[0]]
        layers = [
            obs.payload[b] if b in obs.payload.data_vars else xr.full_like(template, np.nan)
            for b in bands
        ]
        return xr.concat(layers, dim=pd.Index(list(bands), name="band"))

    def reduce_point_series(self, filters, band, lon, lat, radius, statistic="max"):
        if statistic != "max":
            raise ValueError(f"Unsupported statistic: {statistic}")

        x, y = self._to_crs.transform(lon, lat)
        series: list[tuple[datetime, float]] = []
        for obs in self._gather(filters):
            raster = self._band(obs, band)
            box = raster.where(
                (abs(raster.x - x) <= radius) & (abs(raster.y - y) <= radius), drop=True
            )
            if box.size == 0:
                continue
            disc = box.where((box.x - x) ** 2 + (box.y - y) ** 2 <= radius ** 2)
            if not bool(disc.notnull().any()):
                continue
            series.append((obs.timestamp, float(disc.max(skipna=True))))

        logger.debug("Point (%.5f, %.5f) covered by %d scenes", lon, lat, len(series))
        return collapse_by_time(series)
