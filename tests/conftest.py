"""Root-level pytest fixtures for the RFI Tracker test suite.

Provides shared configuration fixtures following Pydantic-based architecture.
All tests must use these fixtures instead of creating raw dict configs.
"""

import pytest
from pathlib import Path
from datetime import datetime, timezone
import tempfile
import shutil

from rfi_tracker.schemas import ParamConfig, UserConfig, resolve_config
from tests.helpers.scenes import make_archive


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Use this as the base for all test configs. Override specific values
    using user_config or by creating custom UserConfig instances.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_extractor_init(internal_config):
    ...     extractor = PointSignalExtractor.from_config(internal_config)
    ...     assert extractor.sample_radius == 500.0
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_radius(make_config):
    ...     config = make_config(sample_radius=250)
    ...     assert config.extraction.sample_radius == 250.0
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Archive Fixtures
# =============================================================================

@pytest.fixture
def archive():
    """In-memory archive with the standard synthetic Dammam scenes."""
    return make_archive()


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2022-01-08 12:00 UTC (default anchor 2022-01-01)."""
    return lambda: datetime(2022, 1, 8, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def output_dirs(temp_dir):
    """Standard output directory structure (base, plots, logs)."""
    dirs = {
        "base": temp_dir,
        "plots": temp_dir / "plots",
        "logs": temp_dir / "logs",
    }

    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)

    return dirs
