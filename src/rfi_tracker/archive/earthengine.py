"""Google Earth Engine archive backend.

Evaluates every view server-side against ``COPERNICUS/S1_GRD``. Rasters are
returned as ``ee.Image`` objects and never downloaded; only metadata,
counts and point series cross the wire (``getInfo``).

Requires the optional ``earthengine`` extra and authenticated credentials
(``earthengine authenticate``).
"""

from datetime import datetime, timezone
import logging

import ee

from rfi_tracker.archive.backend import ArchiveBackend, collapse_by_time
from rfi_tracker.archive.model import CollectionFilter, Observation
from rfi_tracker.errors import EmptyCollectionError, ExternalServiceError

__all__ = ['EarthEngineArchive']

logger = logging.getLogger(__name__)


def _get_info(computed, what: str):
    """Evaluate a server-side object, mapping service errors."""
    try:
        return computed.getInfo()
    except ee.EEException as e:
        raise ExternalServiceError(f"Earth Engine failed to compute {what}: {e}") from e


class EarthEngineArchive(ArchiveBackend):
    """Sentinel-1 GRD collection hosted by Earth Engine.

    Parameters
    ----------
    collection_id : str
        Earth Engine asset id (default ``COPERNICUS/S1_GRD``).
    project : str, optional
        Cloud project used for ``ee.Initialize``.
    scale : float
        Nominal pixel size in metres used for region reductions.
    initialize : bool
        Call ``ee.Initialize`` on construction.
    """

    name = "earthengine"

    def __init__(self, collection_id: str = "COPERNICUS/S1_GRD", project: str | None = None,
                 scale: float = 10.0, initialize: bool = True):
        self.collection_id = collection_id
        self.scale = scale
        if initialize:
            try:
                ee.Initialize(project=project)
            except ee.EEException as e:
                raise ExternalServiceError(f"Earth Engine initialization failed: {e}") from e
            logger.info("Earth Engine initialized (project=%s)", project)

    def _collection(self, flt: CollectionFilter) -> "ee.ImageCollection":
        col = ee.ImageCollection(self.collection_id)
        for band in sorted(flt.polarizations):
            col = col.filter(ee.Filter.listContains('transmitterReceiverPolarisation', band))
        col = col.filter(ee.Filter.eq('instrumentMode', flt.instrument_mode.value))
        if flt.orbit_direction is not None:
            col = col.filter(ee.Filter.eq('orbitProperties_pass', flt.orbit_direction.value))
        if flt.window is not None:
            start, end = flt.window.iso_range()
            col = col.filterDate(start, end)
        return col.sort('system:time_start')

    def _union(self, filters, band: str) -> "ee.ImageCollection":
        merged = None
        for flt in filters:
            part = self._collection(flt).select(band)
            merged = part if merged is None else merged.merge(part)
        return merged

    def query_observations(self, flt):
        rows = _get_info(
            self._collection(flt)
            .reduceColumns(ee.Reducer.toList(3),
                           ['system:index', 'system:time_start', 'orbitProperties_pass'])
            .get('list'),
            f"members of {flt.describe()}",
        )
        return [
            Observation(
                scene_id=scene_id,
                timestamp=datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc),
                orbit_direction=orbit,
                instrument_mode=flt.instrument_mode,
                polarizations=flt.polarizations,
            )
            for scene_id, millis, orbit in rows
        ]

    def count(self, flt):
        return int(_get_info(self._collection(flt).size(), f"size of {flt.describe()}"))

    def reduce_composite(self, filters, band, statistic="max"):
        if statistic != "max":
            raise ValueError(f"Unsupported statistic: {statistic}")
        col = self._union(filters, band)
        if int(_get_info(col.size(), f"{band} composite size")) == 0:
            described = "; ".join(f.describe() for f in filters)
            raise EmptyCollectionError(f"No {band} observations for {described}")
        return col.max()

    def compose(self, channels):
        if all(raster is None for _, raster in channels):
            return None
        bands = [
            (raster if raster is not None else ee.Image.constant(0).updateMask(0)).rename(name)
            for name, raster in channels
        ]
        return ee.Image.cat(bands)

    def mosaic(self, flt, bands):
        col = self._collection(flt)
        if int(_get_info(col.size(), f"size of {flt.describe()}")) == 0:
            raise EmptyCollectionError(f"No observations for {flt.describe()}")
        return col.select(list(bands)).mosaic()

    def reduce_point_series(self, filters, band, lon, lat, radius, statistic="max"):
        if statistic != "max":
            raise ValueError(f"Unsupported statistic: {statistic}")
        region = ee.Geometry.Point([lon, lat]).buffer(radius)

        def sample(image):
            value = image.reduceRegion(
                reducer=ee.Reducer.max(), geometry=region, scale=self.scale
            ).get(band)
            return ee.Feature(None, {'t': image.get('system:time_start'), 'v': value})

        samples = (
            ee.FeatureCollection(self._union(filters, band).map(sample))
            .filter(ee.Filter.notNull(['v']))
            .sort('t')
        )
        rows = _get_info(
            samples.reduceColumns(ee.Reducer.toList(2), ['t', 'v']).get('list'),
            f"point series at ({lon:.5f}, {lat:.5f})",
        )
        return collapse_by_time(
            (datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc), float(value))
            for millis, value in rows
        )
