"""ParamConfig: Expert defaults for the tracker.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

The visualization stretches and the sampling radius are a fixed contract
shared with the hosted tracker; change them only together.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from rfi_tracker.schemas.base import TrackerBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class ArchiveConfig(TrackerBaseModel):
    """Observation archive configuration."""
    backend: Literal["memory", "earthengine"] = "memory"
    data_dir: Optional[str] = Field(None, description="Directory of NetCDF scenes (memory backend)")
    collection_id: str = "COPERNICUS/S1_GRD"
    polarizations: tuple[str, ...] = ("VH", "VV")
    instrument_mode: Literal["IW"] = "IW"
    crs: str = Field("EPSG:3857", description="Projected CRS of in-memory rasters")
    native_scale: float = Field(10.0, gt=0, description="Pixel size in CRS units")
    ee_project: Optional[str] = None

    @field_validator("polarizations", mode="before")
    @classmethod
    def normalize_polarizations(cls, v):
        """Accept lists and lowercase band names."""
        if isinstance(v, str):
            v = [p for p in v.split(",") if p.strip()]
        return tuple(str(p).strip().upper() for p in v)

    @field_validator("backend", mode="before")
    @classmethod
    def normalize_backend(cls, v):
        """Normalize backend names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class ExtractionConfig(TrackerBaseModel):
    """Point signal extraction configuration."""
    band: Literal["VH", "VV"] = "VH"
    statistic: Literal["max"] = "max"
    sample_radius: float = Field(500.0, gt=0, description="Sampling disc radius in archive CRS units")

    @field_validator("sample_radius", mode="before")
    @classmethod
    def coerce_radius_to_float(cls, v):
        """Allow int or float for sample_radius."""
        return float(v)


class VisualizationConfig(TrackerBaseModel):
    """Layer stretch and plotting settings."""
    daily_min: tuple[float, float, float] = (-25.0, -20.0, -25.0)
    daily_max: tuple[float, float, float] = (0.0, 10.0, 0.0)
    composite_min: tuple[float, float, float] = (-25.0, -20.0, -25.0)
    composite_max: tuple[float, float, float] = (-10.0, 0.0, -10.0)
    layer_opacity: float = Field(0.8, ge=0, le=1.0)
    daily_bands: tuple[str, str, str] = ("VV", "VH", "angle")
    marker_color: str = "black"
    marker_fill: str = "#00FFFF"
    marker_size: int = Field(7, ge=1)
    annotation_width: int = Field(5, ge=1)
    dpi: int = Field(150, ge=50)
    figsize: tuple[float, float] = (10.0, 8.0)
    output_format: Literal["png", "pdf", "jpeg"] = "png"

    @model_validator(mode="after")
    def check_stretch_order(self):
        """Every channel's min must be below its max."""
        for low, high in (
            (self.daily_min, self.daily_max),
            (self.composite_min, self.composite_max),
        ):
            if any(lo >= hi for lo, hi in zip(low, high)):
                raise ValueError("stretch min must be below max for every channel")
        return self


class ControllerConfig(TrackerBaseModel):
    """Initial view state configuration."""
    default_lon: float = Field(49.950656, ge=-180, le=180)
    default_lat: float = Field(26.605644, ge=-90, le=90)
    default_zoom: int = Field(11, ge=0, le=24)
    default_granularity: Literal["Day", "Month", "Year"] = "Month"
    default_opacity: float = Field(1.0, ge=0, le=1.0)
    anchor_lag_days: int = Field(7, ge=0, description="Back-date today's anchor so imagery is ingested")

    @field_validator("default_granularity", mode="before")
    @classmethod
    def normalize_granularity(cls, v):
        """Accept 'month', 'MONTH', etc."""
        if isinstance(v, str):
            return v.strip().capitalize()
        return v


class DispatcherConfig(TrackerBaseModel):
    """Asynchronous query dispatch configuration."""
    mode: Literal["threaded", "inline"] = "threaded"
    workers: int = Field(2, ge=1, le=16)
    max_queue_size: int = Field(100, ge=1)
    poll_timeout_sec: float = Field(0.5, gt=0)


class LoggingConfig(TrackerBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(TrackerBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all tracker parameters.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    base_dir: Optional[str] = None
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)
    controller: ControllerConfig = Field(default_factory=ControllerConfig)
    dispatcher: DispatcherConfig = Field(default_factory=DispatcherConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
