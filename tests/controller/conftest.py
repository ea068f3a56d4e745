"""Controller fixtures: a started controller over the synthetic archive."""

import pytest

from rfi_tracker.archive import InMemoryArchive
from rfi_tracker.controller import MapCanvas, ViewStateController
from rfi_tracker.errors import ExternalServiceError
from tests.helpers.fake_dispatcher import ManualDispatcher
from tests.helpers.scenes import CRS, standard_scenes


class FlakyArchive(InMemoryArchive):
    """Archive whose reductions raise ``error`` while ``down`` is set."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.down = False
        self.error = ExternalServiceError("compute service unavailable")

    def reduce_composite(self, filters, band, statistic="max"):
        if self.down:
            raise self.error
        return super().reduce_composite(filters, band, statistic)

    def reduce_point_series(self, filters, band, lon, lat, radius, statistic="max"):
        if self.down:
            raise self.error
        return super().reduce_point_series(filters, band, lon, lat, radius, statistic)


@pytest.fixture
def canvas():
    return MapCanvas()


@pytest.fixture
def flaky_archive():
    return FlakyArchive(standard_scenes(), crs=CRS)


@pytest.fixture
def controller(archive, internal_config, canvas, fixed_clock):
    """Inline controller, started (default view loaded)."""
    ctl = ViewStateController(archive, internal_config, renderer=canvas, clock=fixed_clock)
    ctl.start()
    return ctl


@pytest.fixture
def manual():
    return ManualDispatcher()


@pytest.fixture
def manual_controller(archive, internal_config, canvas, fixed_clock, manual):
    """Controller whose queries resolve only when the test resolves them."""
    ctl = ViewStateController(archive, internal_config, dispatcher=manual,
                              renderer=canvas, clock=fixed_clock)
    ctl.start()
    manual.resolve_all()
    ctl.process_completions()
    return ctl


@pytest.fixture
def manual_flaky(flaky_archive, internal_config, canvas, fixed_clock, manual):
    """Started controller over the flaky archive with manually resolved queries."""
    ctl = ViewStateController(flaky_archive, internal_config, dispatcher=manual,
                              renderer=canvas, clock=fixed_clock)
    ctl.start()
    manual.resolve_all()
    ctl.process_completions()
    return ctl
