"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import ConfigDict
from rfi_tracker.schemas.base import TrackerBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalArchiveConfig(TrackerBaseModel):
    """Runtime archive configuration."""
    backend: Literal["memory", "earthengine"]
    data_dir: Optional[str]
    collection_id: str
    polarizations: tuple[str, ...]
    instrument_mode: Literal["IW"]
    crs: str
    native_scale: float
    ee_project: Optional[str]


class InternalExtractionConfig(TrackerBaseModel):
    """Runtime extraction configuration."""
    band: Literal["VH", "VV"]
    statistic: Literal["max"]
    sample_radius: float


class InternalVisualizationConfig(TrackerBaseModel):
    """Runtime visualization settings."""
    daily_min: tuple[float, float, float]
    daily_max: tuple[float, float, float]
    composite_min: tuple[float, float, float]
    composite_max: tuple[float, float, float]
    layer_opacity: float
    daily_bands: tuple[str, str, str]
    marker_color: str
    marker_fill: str
    marker_size: int
    annotation_width: int
    dpi: int
    figsize: tuple[float, float]
    output_format: Literal["png", "pdf", "jpeg"]


class InternalControllerConfig(TrackerBaseModel):
    """Runtime controller configuration."""
    default_lon: float
    default_lat: float
    default_zoom: int
    default_granularity: Literal["Day", "Month", "Year"]
    default_opacity: float
    anchor_lag_days: int


class InternalDispatcherConfig(TrackerBaseModel):
    """Runtime dispatcher configuration."""
    mode: Literal["threaded", "inline"]
    workers: int
    max_queue_size: int
    poll_timeout_sec: float


class InternalLoggingConfig(TrackerBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(TrackerBaseModel):
    """Authoritative runtime configuration.

    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.radius = config.extraction.sample_radius  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    base_dir: Optional[str]
    archive: InternalArchiveConfig
    extraction: InternalExtractionConfig
    visualization: InternalVisualizationConfig
    controller: InternalControllerConfig
    dispatcher: InternalDispatcherConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
