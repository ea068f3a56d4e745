"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: backend, scene directory, output paths, verbosity.
"""

from typing import Literal, Optional
from rfi_tracker.schemas.base import TrackerBaseModel


class CLIConfig(TrackerBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(backend="memory", data_dir="/data/s1_scenes")
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    backend: Optional[Literal["memory", "earthengine"]] = None
    data_dir: Optional[str] = None
    base_dir: Optional[str] = None
    ee_project: Optional[str] = None
    dispatch_mode: Optional[Literal["threaded", "inline"]] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        archive_overrides = {}
        if self.backend is not None:
            archive_overrides["backend"] = self.backend
        if self.data_dir is not None:
            archive_overrides["data_dir"] = str(self.data_dir)
        if self.ee_project is not None:
            archive_overrides["ee_project"] = self.ee_project
        if archive_overrides:
            overrides["archive"] = archive_overrides

        if self.dispatch_mode is not None:
            overrides["dispatcher"] = {"mode": self.dispatch_mode}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
