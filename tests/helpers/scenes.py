"""Synthetic Sentinel-1 scenes on a small Web Mercator grid.

Grids are n x n pixels with ``spacing`` metre pixels centred on a lon/lat
point; y decreases down the rows like a north-up image.
"""

from datetime import datetime, timezone

import numpy as np
import xarray as xr
from pyproj import Transformer

from rfi_tracker.archive import InMemoryArchive, Observation

CRS = "EPSG:3857"
DAMMAM = (49.949916, 26.606379)
FAR_AWAY = (50.949916, 26.606379)

_to_crs = Transformer.from_crs("EPSG:4326", CRS, always_xy=True)


def project(lon, lat):
    return _to_crs.transform(lon, lat)


def _timestamp(value):
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def make_scene(scene_id, timestamp, orbit="ASCENDING", vh=-22.0, vv=-12.0, angle=38.0,
               center=DAMMAM, spikes=(), polarizations=("VH", "VV"), instrument_mode="IW",
               n=21, spacing=100.0):
    """Build one Observation.

    ``spikes`` is a sequence of (col_offset, row_offset, value) applied to the
    VH band relative to the centre pixel.
    """
    cx, cy = project(*center)
    offsets = (np.arange(n) - n // 2) * spacing
    x = cx + offsets
    y = cy - offsets

    vh_band = np.full((n, n), vh, dtype="float64")
    for dx, dy, value in spikes:
        vh_band[n // 2 + dy, n // 2 + dx] = value

    bands = {
        "VH": vh_band,
        "VV": np.full((n, n), vv, dtype="float64"),
    }
    data_vars = {band: (("y", "x"), bands[band]) for band in polarizations}
    data_vars["angle"] = (("y", "x"), np.full((n, n), angle, dtype="float64"))

    payload = xr.Dataset(data_vars, coords={"y": y, "x": x})
    return Observation(
        scene_id=scene_id,
        timestamp=_timestamp(timestamp),
        orbit_direction=orbit,
        instrument_mode=instrument_mode,
        polarizations=frozenset(polarizations),
        payload=payload,
    )


def standard_scenes():
    """A small archive around Dammam spanning 2017-2022.

    Includes scenes that the tracker filter must reject (single polarisation,
    EW mode) and one scene that does not cover Dammam.
    """
    return [
        make_scene("S1_20171231_A", "2017-12-31T23:59:00Z", vh=-1.0),
        make_scene("S1_20180305_A", "2018-03-05T02:45:00Z", vh=-20.0, vv=-11.0),
        make_scene("S1_20180610_D", "2018-06-10T14:50:00Z", orbit="DESCENDING", vh=-18.0, vv=-9.0),
        make_scene("S1_20180622_A", "2018-06-22T02:45:00Z", vh=-15.0, vv=-10.0,
                   spikes=[(3, 0, -5.0), (8, 0, -0.5)]),
        make_scene("S1_20180701_VV", "2018-07-01T02:45:00Z", vh=-2.0, polarizations=("VV",)),
        make_scene("S1_20180801_EW", "2018-08-01T02:45:00Z", vh=-2.0, instrument_mode="EW"),
        make_scene("S1_20180901_FAR", "2018-09-01T02:45:00Z", vh=-3.0, center=FAR_AWAY),
        make_scene("S1_20181130_D", "2018-11-30T14:50:00Z", orbit="DESCENDING", vh=-17.0, vv=-8.0),
        make_scene("S1_20190101_A", "2019-01-01T00:00:00Z", vh=-2.0),
        make_scene("S1_20210420_D", "2021-04-20T14:50:00Z", orbit="DESCENDING", vh=-21.0),
        make_scene("S1_20210426_A", "2021-04-26T02:46:00Z", vh=-19.0, spikes=[(0, 1, -3.0)]),
        make_scene("S1_20220101_A", "2022-01-01T02:46:00Z", vh=-16.0),
    ]


def make_archive(scenes=None):
    return InMemoryArchive(standard_scenes() if scenes is None else scenes, crs=CRS)
