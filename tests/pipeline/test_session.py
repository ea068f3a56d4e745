import logging

import pytest

from rfi_tracker.controller import MapCanvas
from rfi_tracker.pipeline.session import TrackerSession

pytestmark = [pytest.mark.pipeline]


@pytest.fixture
def session(make_config, output_dirs, archive, fixed_clock):
    config = make_config(dispatch_mode="inline", LOG_LEVEL="DEBUG")
    s = TrackerSession(config, output_dirs, archive=archive, clock=fixed_clock)
    yield s
    s.stop()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


def test_start_loads_default_view(session):
    controller = session.start()

    state = controller.state
    assert state.anchor_date.isoformat() == "2022-01-01"
    assert state.layer_anchor == state.anchor_date
    assert state.series_status == "ready"
    assert isinstance(session.renderer, MapCanvas)
    assert set(session.renderer.layers) == {"Day", "Month", "Year"}


def test_start_is_idempotent(session):
    first = session.start()
    assert session.start() is first


def test_log_file_written(session, output_dirs):
    session.start()
    assert (output_dirs["logs"] / "rfi_tracker.log").exists()


def test_save_view_default_path(session, output_dirs):
    session.start()
    session.controller.on_example_site_selected("Dammam, Saudi Arabia")
    assert session.wait_until_idle(timeout=5)

    path = session.save_view()
    assert path is not None
    assert path.endswith(".png")
    assert str(output_dirs["plots"]) in path


def test_save_view_requires_start(session):
    with pytest.raises(RuntimeError, match="not started"):
        session.save_view()


def test_save_view_without_output_dirs(make_config, archive, fixed_clock):
    s = TrackerSession(make_config(dispatch_mode="inline"), None, archive=archive, clock=fixed_clock)
    s.start()
    try:
        assert s.save_view() is None
    finally:
        s.stop()


def test_threaded_session(make_config, archive, fixed_clock):
    config = make_config(dispatch_mode="threaded", workers=2)
    s = TrackerSession(config, None, archive=archive, clock=fixed_clock)
    controller = s.start()
    try:
        assert s.wait_until_idle(timeout=30)
        assert controller.state.series_status == "ready"
        assert controller.state.layer_anchor is not None
    finally:
        s.stop()
    assert not s.dispatcher.is_running()


def test_stop_is_idempotent(session):
    session.start()
    session.stop()
    session.stop()
