"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., DATA_DIR → data_dir, BACKEND → backend).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Literal, Optional, Any
from pydantic import Field, field_validator
from rfi_tracker.schemas.base import TrackerBaseModel


class UserArchiveConfig(TrackerBaseModel):
    """User-facing archive config."""
    backend: Optional[str] = None
    data_dir: Optional[str] = None
    collection_id: Optional[str] = None
    crs: Optional[str] = None
    native_scale: Optional[float] = None
    ee_project: Optional[str] = None

    @field_validator("backend", mode="before")
    @classmethod
    def normalize_backend(cls, v):
        """Normalize backend names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserVisualizationConfig(TrackerBaseModel):
    """User-facing visualization config."""
    layer_opacity: Optional[float] = None
    dpi: Optional[int] = None
    figsize: Optional[tuple[float, float]] = None
    output_format: Optional[str] = None


class UserControllerConfig(TrackerBaseModel):
    """User-facing controller config."""
    default_lon: Optional[float] = None
    default_lat: Optional[float] = None
    default_zoom: Optional[int] = None
    default_granularity: Optional[str] = None
    default_opacity: Optional[float] = None
    anchor_lag_days: Optional[int] = None


class UserConfig(TrackerBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            backend="memory",
            data_dir="/data/s1_scenes",
            base_dir="/data/rfi_out",
            sample_radius=250,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    backend: Optional[str] = Field(None, alias="BACKEND")
    data_dir: Optional[str] = Field(None, alias="DATA_DIR")
    ee_project: Optional[str] = Field(None, alias="EE_PROJECT")

    # Extraction settings (flat aliases)
    sample_radius: Optional[float] = Field(None, alias="SAMPLE_RADIUS")

    # Initial view (flat aliases)
    default_granularity: Optional[str] = Field(None, alias="DEFAULT_GRANULARITY")
    default_opacity: Optional[float] = Field(None, alias="DEFAULT_OPACITY")
    anchor_lag_days: Optional[int] = Field(None, alias="ANCHOR_LAG_DAYS")

    # Dispatch settings (flat aliases)
    dispatch_mode: Optional[Literal["threaded", "inline"]] = Field(None, alias="DISPATCH_MODE")
    workers: Optional[int] = Field(None, alias="WORKERS")

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    archive: Optional[UserArchiveConfig] = None
    visualization: Optional[UserVisualizationConfig] = None
    controller: Optional[UserControllerConfig] = None
    dispatcher: Optional[dict[str, Any]] = None

    model_config = TrackerBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("sample_radius", "default_opacity", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("backend", mode="before")
    @classmethod
    def normalize_backend(cls, v):
        """Normalize backend names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        # Archive section
        archive = {}
        if self.backend is not None:
            archive["backend"] = self.backend
        if self.data_dir is not None:
            archive["data_dir"] = str(self.data_dir)
        if self.ee_project is not None:
            archive["ee_project"] = self.ee_project
        if self.archive is not None:
            archive.update(self.archive.model_dump(exclude_none=True))
        if archive:
            overrides["archive"] = archive

        if self.sample_radius is not None:
            overrides["extraction"] = {"sample_radius": self.sample_radius}

        # Controller section
        controller = {}
        if self.default_granularity is not None:
            controller["default_granularity"] = self.default_granularity
        if self.default_opacity is not None:
            controller["default_opacity"] = self.default_opacity
        if self.anchor_lag_days is not None:
            controller["anchor_lag_days"] = self.anchor_lag_days
        if self.controller is not None:
            controller.update(self.controller.model_dump(exclude_none=True))
        if controller:
            overrides["controller"] = controller

        # Dispatcher section
        dispatcher = {}
        if self.dispatch_mode is not None:
            dispatcher["mode"] = self.dispatch_mode
        if self.workers is not None:
            dispatcher["workers"] = self.workers
        if self.dispatcher is not None:
            dispatcher.update({k: v for k, v in self.dispatcher.items() if v is not None})
        if dispatcher:
            overrides["dispatcher"] = dispatcher

        if self.visualization is not None:
            visualization = self.visualization.model_dump(exclude_none=True)
            if visualization:
                overrides["visualization"] = visualization

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
