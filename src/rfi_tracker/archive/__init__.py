"""Observation archive: collection model and backends.

The Earth Engine backend is imported only when selected, so the optional
``earthengine-api`` dependency is not needed for in-memory runs.
"""

import logging

from rfi_tracker.archive.model import (
    OrbitDirection,
    InstrumentMode,
    Observation,
    CollectionFilter,
    ObservationCollection,
    BandCollection,
    load,
    by_orbit,
    select_band,
    merge,
    filter_window,
)
from rfi_tracker.archive.backend import ArchiveBackend
from rfi_tracker.archive.memory import InMemoryArchive
from rfi_tracker.archive.loader import SceneLoader

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
    'ArchiveBackend',
    'InMemoryArchive',
    'SceneLoader',
    'create_archive',
]

logger = logging.getLogger(__name__)


def create_archive(config) -> ArchiveBackend:
    """Build the archive backend named by ``config.archive.backend``.

    Parameters
    ----------
    config : InternalConfig
        Resolved runtime configuration.
    """
    archive_cfg = config.archive
    if archive_cfg.backend == "earthengine":
        from rfi_tracker.archive.earthengine import EarthEngineArchive

        return EarthEngineArchive(
            collection_id=archive_cfg.collection_id,
            project=archive_cfg.ee_project,
            scale=archive_cfg.native_scale,
        )

    loader = SceneLoader(crs=archive_cfg.crs)
    if archive_cfg.data_dir is None:
        logger.warning("No data_dir configured; starting with an empty in-memory archive")
        return InMemoryArchive(crs=archive_cfg.crs)
    return loader.build_archive(archive_cfg.data_dir)
