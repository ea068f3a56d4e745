"""Read Sentinel-1 GRD scenes from NetCDF into Observations.

Each file holds one pass: one data variable per band (``VH``, ``VV`` and
optionally ``angle``) on ``y``/``x`` coordinates in a projected CRS, with
scene metadata in the global attributes:

- ``scene_id`` (optional, defaults to the file stem)
- ``acquisition_time`` : ISO 8601 UTC timestamp
- ``orbit_pass`` : "ASCENDING" or "DESCENDING"
- ``instrument_mode`` : "IW"
- ``polarisations`` : comma separated, e.g. "VH,VV"
- ``crs`` : e.g. "EPSG:3857"

Handles errors gracefully: unreadable files are logged and skipped.
"""

from pathlib import Path
from typing import Optional
import logging

import pandas as pd
import xarray as xr

from rfi_tracker.archive.memory import InMemoryArchive
from rfi_tracker.archive.model import Observation

__all__ = ['SceneLoader']

logger = logging.getLogger(__name__)

REQUIRED_ATTRS = ("acquisition_time", "orbit_pass", "instrument_mode", "polarisations")


class SceneLoader:
    """Load a directory of NetCDF scenes into an InMemoryArchive.

    Parameters
    ----------
    crs : str
        CRS every scene must be in. Scenes declaring another CRS are skipped.

    Notes
    -----
    - All read methods return None on failure (logged, not raised)
    - Payloads are loaded eagerly so the file handle is closed on return

    Examples
    --------
    >>> loader = SceneLoader(crs="EPSG:3857")
    >>> archive = loader.build_archive("./scenes")
    >>> len(archive)
    42
    """

    def __init__(self, crs: str = "EPSG:3857"):
        self.crs = crs

    def read(self, filepath: Path | str) -> Optional[Observation]:
        """Read one scene file.

        Returns
        -------
        Observation or None
            None if the file is missing, unreadable, lacks metadata, or is in
            a different CRS.
        """
        filepath = Path(filepath)
        if not filepath.exists():
            logger.error("Scene file not found: %s", filepath)
            return None

        try:
            with xr.open_dataset(filepath) as ds:
                ds = ds.load()
        except Exception:
            logger.exception("Failed to read scene file %s", filepath)
            return None

        missing = [key for key in REQUIRED_ATTRS if key not in ds.attrs]
        if missing:
            logger.warning("Skipping %s: missing attributes %s", filepath.name, missing)
            return None

        crs = ds.attrs.get("crs", self.crs)
        if crs != self.crs:
            logger.warning("Skipping %s: CRS %s, archive uses %s", filepath.name, crs, self.crs)
            return None

        try:
            obs = Observation(
                scene_id=str(ds.attrs.get("scene_id", filepath.stem)),
                timestamp=pd.Timestamp(ds.attrs["acquisition_time"]).to_pydatetime(),
                orbit_direction=str(ds.attrs["orbit_pass"]).upper(),
                instrument_mode=str(ds.attrs["instrument_mode"]).upper(),
                polarizations=frozenset(
                    p.strip() for p in str(ds.attrs["polarisations"]).split(",") if p.strip()
                ),
                payload=ds,
            )
        except ValueError as e:
            logger.warning("Skipping %s: bad metadata (%s)", filepath.name, e)
            return None

        absent = [band for band in obs.polarizations if band not in ds.data_vars]
        if absent:
            logger.warning("Skipping %s: advertised bands %s not present", filepath.name, absent)
            return None

        logger.debug("Read scene %s (%s)", obs.scene_id, obs.timestamp.isoformat())
        return obs

    def build_archive(self, data_dir: Path | str, pattern: str = "*.nc") -> InMemoryArchive:
        """Read every matching file under ``data_dir`` into a new archive."""
        data_dir = Path(data_dir)
        archive = InMemoryArchive(crs=self.crs)
        if not data_dir.is_dir():
            logger.warning("Scene directory does not exist: %s", data_dir)
            return archive

        skipped = 0
        for path in sorted(data_dir.glob(pattern)):
            obs = self.read(path)
            if obs is None:
                skipped += 1
                continue
            archive.add(obs)

        logger.info("Loaded %d scenes from %s (%d skipped)", len(archive), data_dir, skipped)
        return archive

    @staticmethod
    def write(obs: Observation, output_dir: Path | str, crs: str = "EPSG:3857") -> Optional[Path]:
        """Save an observation as a scene file readable by ``read()``."""
        try:
            output_dir = Path(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            nc_path = output_dir / f"{obs.scene_id}.nc"

            ds = obs.payload.copy()
            ds.attrs = {
                "scene_id": obs.scene_id,
                "acquisition_time": obs.timestamp.isoformat(),
                "orbit_pass": obs.orbit_direction.value,
                "instrument_mode": obs.instrument_mode.value,
                "polarisations": ",".join(sorted(obs.polarizations)),
                "crs": crs,
            }
            encoding = {var: {"zlib": True, "complevel": 4} for var in ds.data_vars}
            ds.to_netcdf(nc_path, encoding=encoding)
            logger.info("Saved scene NetCDF: %s", nc_path)
            return nc_path

        except (OSError, ValueError) as e:
            logger.warning("Failed to save scene %s: %s", obs.scene_id, e)
            return None
