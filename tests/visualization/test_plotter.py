import pytest
import numpy as np
import xarray as xr
import matplotlib.pyplot as plt

from rfi_tracker.controller import ViewStateController
from rfi_tracker.visualization import TrackerPlotter, stretch_rgb

pytestmark = pytest.mark.unit


@pytest.fixture
def plotter(internal_config):
    return TrackerPlotter(internal_config)


@pytest.fixture
def controller(archive, internal_config, fixed_clock):
    ctl = ViewStateController(archive, internal_config, clock=fixed_clock)
    ctl.start()
    return ctl


def test_stretch_rgb_clips_and_masks():
    data = np.array([
        [[-25.0, -10.0], [np.nan, -40.0]],
        [[-20.0, 0.0], [np.nan, 5.0]],
        [[-25.0, np.nan], [np.nan, -17.5]],
    ])
    image = xr.DataArray(data, dims=("band", "y", "x"),
                         coords={"band": ["a", "b", "c"], "y": [1, 0], "x": [0, 1]})

    rgba = stretch_rgb(image, (-25, -20, -25), (-10, 0, -10))

    assert rgba.shape == (2, 2, 4)
    np.testing.assert_allclose(rgba[0, 0], [0.0, 0.0, 0.0, 1.0])
    np.testing.assert_allclose(rgba[0, 1], [1.0, 1.0, 0.0, 1.0])
    assert rgba[1, 0, 3] == 0.0
    np.testing.assert_allclose(rgba[1, 1], [0.0, 1.0, 0.5, 1.0])


def test_plot_view_writes_file(plotter, controller, tmp_path):
    path = plotter.plot_view(controller.state, controller.layers, tmp_path / "view")
    assert path.endswith("view.png")
    assert (tmp_path / "view.png").stat().st_size > 0


def test_plot_day_layer(plotter, controller, tmp_path):
    controller.on_granularity_change("Day")
    path = plotter.plot_view(controller.state, controller.layers, tmp_path / "day.png")
    assert (tmp_path / "day.png").exists()
    assert path.endswith("day.png")


def test_plot_empty_layer_and_site(plotter, controller, tmp_path):
    controller.on_example_site_selected("White Sands Missile Range, USA")
    assert controller.state.no_data
    plotter.plot_view(controller.state, controller.layers, tmp_path / "empty.png")
    assert (tmp_path / "empty.png").exists()


def test_plot_without_layers(plotter, archive, internal_config, fixed_clock, tmp_path):
    state = ViewStateController(archive, internal_config, clock=fixed_clock).state
    plotter.plot_view(state, None, tmp_path / "blank.png")
    assert (tmp_path / "blank.png").exists()


def test_layer_raster_skips_remote_images(plotter, controller):
    composite = controller.layers["Month"]

    class Remote:
        empty = False
        reduced = True
        image = "ee.Image"
        layer_id = "Month"

    assert plotter._layer_raster(Remote()) is None
    assert isinstance(plotter._layer_raster(composite), xr.DataArray)


def test_configured_format(make_config, controller, tmp_path):
    plotter = TrackerPlotter(make_config(visualization={"output_format": "pdf"}))
    path = plotter.plot_view(controller.state, controller.layers, tmp_path / "view.png")
    assert path.endswith("view.pdf")


def _panel_texts(plotter, controller):
    fig, ax_map, _ = plotter._setup_figure()
    state = controller.state
    layers = controller.layers
    plotter.plot_layer(ax_map, layers[state.visible_layer] if layers is not None else None, state)
    texts = [t.get_text() for t in ax_map.texts]
    plt.close(fig)
    return texts


def test_layer_panel_shows_point_coordinates(plotter, controller):
    texts = _panel_texts(plotter, controller)
    assert "lon: 49.95\nlat: 26.61" in texts


def test_layer_panel_no_data_message(plotter, controller):
    controller.on_date_change("2018-02-14")
    assert "No data for this window" in _panel_texts(plotter, controller)


def test_layer_panel_before_first_load(plotter, archive, internal_config, fixed_clock):
    ctl = ViewStateController(archive, internal_config, clock=fixed_clock)
    assert _panel_texts(plotter, ctl) == ["No layer loaded"]
