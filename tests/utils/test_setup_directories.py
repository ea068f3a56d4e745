from datetime import date, datetime, timezone
from pathlib import Path

from rfi_tracker.setup_directories import (
    get_log_path,
    get_plot_path,
    get_series_path,
    setup_output_directories,
)


def test_setup_output_directories_creates_all(tmp_path):
    dirs = setup_output_directories(tmp_path)

    assert set(dirs.keys()) == {"base", "plots", "logs"}

    for path in dirs.values():
        assert isinstance(path, Path)
        assert path.exists()
        assert path.is_dir()


def test_setup_output_directories_is_idempotent(tmp_path):
    dirs1 = setup_output_directories(tmp_path)
    dirs2 = setup_output_directories(tmp_path)

    assert dirs1 == dirs2


def test_prompt_default_option(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("builtins.input", lambda prompt: "")

    dirs = setup_output_directories()
    assert dirs["base"] == (tmp_path / "output").resolve()


def test_prompt_custom_path(tmp_path, monkeypatch):
    answers = iter(["3", str(tmp_path / "custom")])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))

    dirs = setup_output_directories()
    assert dirs["base"] == (tmp_path / "custom").resolve()


def test_plot_path_layout(output_dirs):
    path = get_plot_path(output_dirs, "Month", date(2022, 1, 1), site="Dammam, Saudi Arabia")

    assert path == output_dirs["plots"] / "20220101" / "dammam_saudi_arabia_month_20220101.png"
    assert path.parent.is_dir()


def test_plot_path_without_site(output_dirs):
    path = get_plot_path(output_dirs, "Year", "2018-06-10", output_format="pdf")
    assert path.name == "year_20180610.pdf"


def test_log_path(output_dirs):
    assert get_log_path(output_dirs) == output_dirs["logs"] / "rfi_tracker.log"


def test_series_path(output_dirs):
    ts = datetime(2022, 1, 8, 12, 0, 5, tzinfo=timezone.utc)
    path = get_series_path(output_dirs, 49.949916, 26.606379, ts)
    assert path == output_dirs["plots"] / "series" / "rfi_49.94992_26.60638_20220108_120005.csv"
