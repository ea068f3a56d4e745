"""Pydantic configuration schemas for the tracker.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from rfi_tracker.schemas.resolve import resolve_config
from rfi_tracker.schemas.internal import InternalConfig
from rfi_tracker.schemas.param import ParamConfig
from rfi_tracker.schemas.user import UserConfig
from rfi_tracker.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
