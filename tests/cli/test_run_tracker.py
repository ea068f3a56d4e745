import logging
import textwrap

import pandas as pd
import pytest

from rfi_tracker.archive import SceneLoader
from rfi_tracker.cli import build_config, load_user_config_dict, run_tracker
from tests.helpers.scenes import CRS, standard_scenes

pytestmark = pytest.mark.integration


@pytest.fixture
def scene_dir(tmp_path):
    scenes = tmp_path / "scenes"
    for obs in standard_scenes():
        SceneLoader.write(obs, scenes, crs=CRS)
    return scenes


@pytest.fixture(autouse=True)
def close_log_files():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


def test_load_user_config_dict(tmp_path):
    path = tmp_path / "user_config.py"
    path.write_text(textwrap.dedent("""
        CONFIG = {
            "BACKEND": "memory",
            "SAMPLE_RADIUS": 250,
        }
    """))
    assert load_user_config_dict(str(path)) == {"BACKEND": "memory", "SAMPLE_RADIUS": 250}


def test_load_user_config_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_user_config_dict(str(tmp_path / "nope.py"))


def test_load_user_config_without_dict(tmp_path):
    path = tmp_path / "empty.py"
    path.write_text("X = 1\n")
    with pytest.raises(ValueError, match="No CONFIG dict"):
        load_user_config_dict(str(path))


def test_build_config_precedence(tmp_path):
    path = tmp_path / "user_config.py"
    path.write_text('CONFIG = {"DATA_DIR": "/data/user", "LOG_LEVEL": "WARNING"}\n')

    config = build_config(str(path), {"data_dir": "/data/cli", "backend": None}, verbose=True)

    assert config.archive.data_dir == "/data/cli"
    assert config.logging.level == "WARNING"


def test_build_config_verbose_without_level():
    assert build_config(None, None, verbose=True).logging.level == "DEBUG"


def test_run_tracker_site(scene_dir, tmp_path):
    outputs = run_tracker(
        cli_args={"data_dir": str(scene_dir), "base_dir": str(tmp_path / "out"),
                  "dispatch_mode": "inline"},
        site="Dammam, Saudi Arabia",
        export_series=True,
        timeout=30,
    )

    assert outputs["plot"].endswith("dammam_saudi_arabia_month_20220101.png")
    frame = pd.read_csv(outputs["series"], index_col=0)
    assert list(frame.columns) == ["VH"]
    assert len(frame) == 9


def test_run_tracker_date_and_point(scene_dir, tmp_path):
    outputs = run_tracker(
        cli_args={"data_dir": str(scene_dir), "base_dir": str(tmp_path / "out"),
                  "dispatch_mode": "threaded"},
        anchor="2018-06-10",
        point=(49.949916, 26.606379),
        granularity="Year",
        timeout=60,
    )

    assert outputs["plot"].endswith("year_20180610.png")
    assert outputs["series"] is None
