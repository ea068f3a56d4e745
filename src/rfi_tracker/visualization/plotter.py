"""Static rendering of a tracker view.

Draws what the map client would show, to PNG/PDF:

- **Left panel**: visible layer as an RGB stretch (VH asc / VV / VH desc for
  composites, VV / VH / angle for the daily mosaic), site annotation
  outlines and the clicked-point marker
- **Right panel**: the interference chart for the clicked point
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import xarray as xr
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from pyproj import Transformer

from rfi_tracker.errors import EmptyCollectionError

__all__ = ['TrackerPlotter', 'stretch_rgb']

logger = logging.getLogger(__name__)


def stretch_rgb(image: xr.DataArray, vmin, vmax) -> np.ndarray:
    """Linear per-channel stretch of a (band, y, x) raster to RGBA in [0, 1].

    Pixels with no data in every channel are fully transparent; a single
    missing channel renders as zero in that channel.
    """
    data = np.asarray(image.transpose("band", "y", "x").values, dtype=float)
    lo = np.asarray(vmin, dtype=float)[:, None, None]
    hi = np.asarray(vmax, dtype=float)[:, None, None]
    scaled = np.clip((data - lo) / (hi - lo), 0.0, 1.0)
    alpha = (~np.all(np.isnan(data), axis=0)).astype(float)
    rgb = np.nan_to_num(scaled, nan=0.0)
    return np.dstack([rgb[0], rgb[1], rgb[2], alpha])


class TrackerPlotter:
    """Render view snapshots with matplotlib.

    Parameters
    ----------
    config : InternalConfig
        Uses ``visualization`` (dpi, figsize, format, marker style,
        annotation width) and ``archive.crs``.

    Example usage::

        plotter = TrackerPlotter(config)
        path = plotter.plot_view(controller.state, controller.layers,
                                 output_path=Path("plots/view.png"))
    """

    def __init__(self, config):
        vis = config.visualization
        self.dpi = vis.dpi
        self.figsize = tuple(vis.figsize)
        self.output_format = vis.output_format
        self.marker_color = vis.marker_color
        self.marker_fill = vis.marker_fill
        self.marker_size = vis.marker_size
        self.annotation_width = vis.annotation_width
        self.crs = config.archive.crs
        self._to_crs = Transformer.from_crs("EPSG:4326", self.crs, always_xy=True)
        logger.info("TrackerPlotter initialized (format=%s, dpi=%d)", self.output_format, self.dpi)

    # ------------------------------------------------------------------
    # Panels
    # ------------------------------------------------------------------

    def _layer_raster(self, composite) -> Optional[xr.DataArray]:
        if composite.empty:
            return None
        if composite.reduced:
            raster = composite.image
        else:
            try:
                raster = composite.collection.mosaic(composite.vis.bands)
            except EmptyCollectionError:
                return None
        if not isinstance(raster, xr.DataArray):
            logger.warning("Layer %s is not a local raster; skipping imagery", composite.layer_id)
            return None
        return raster

    def plot_layer(self, ax: plt.Axes, composite, state) -> None:
        """Draw the visible layer, annotations and marker on ``ax``."""
        raster = self._layer_raster(composite) if composite is not None else None
        if raster is None:
            message = "No data for this window" if state.no_data else "No layer loaded"
            ax.text(0.5, 0.5, message, ha="center", va="center",
                    transform=ax.transAxes, fontsize=12)
        else:
            rgba = stretch_rgb(raster, composite.vis.min, composite.vis.max)
            rgba[..., 3] *= state.layer_opacity
            x = raster["x"].values
            y = raster["y"].values
            ax.imshow(
                rgba,
                extent=(x.min(), x.max(), y.min(), y.max()),
                origin="upper" if y[0] > y[-1] else "lower",
                interpolation="nearest",
            )

        for annotation in state.annotations:
            for ring in annotation.polygons:
                xs, ys = self._to_crs.transform(*zip(*(ring + ring[:1])))
                ax.plot(xs, ys, color=annotation.color,
                        linewidth=annotation.width * 0.4)

        if state.clicked_point is not None:
            px, py = self._to_crs.transform(state.clicked_point.lon, state.clicked_point.lat)
            ax.plot(px, py, marker="o", markersize=self.marker_size,
                    markerfacecolor=self.marker_fill, markeredgecolor=self.marker_color,
                    linestyle="none")
            ax.text(0.01, 0.01, f"{state.lon_label}\n{state.lat_label}", ha="left", va="bottom",
                    transform=ax.transAxes, fontsize=8,
                    bbox=dict(facecolor="white", alpha=0.7, edgecolor="none"))

        ax.set_title(state.info_label, fontsize=10)
        ax.set_xlabel(f"x ({self.crs})")
        ax.set_ylabel(f"y ({self.crs})")
        ax.set_aspect("equal", adjustable="datalim")

    def plot_series(self, ax: plt.Axes, state) -> None:
        """Draw the interference chart, marking the current anchor date."""
        series = state.series
        if series is None or len(series) == 0:
            message = {"loading": "Loading...", "no_data": "No coverage at this point"}.get(
                state.series_status, "Click the map to chart interference")
            ax.text(0.5, 0.5, message, ha="center", va="center", transform=ax.transAxes)
            ax.set_title(state.chart_title, fontsize=10)
            return

        frame = series.to_frame()
        ax.plot(frame.index, frame[series.band], color="tab:blue", marker=".", linewidth=1)
        ax.axvline(np.datetime64(state.anchor_date), color="tab:red", linestyle="--",
                   linewidth=0.8, label=state.date_label)
        ax.set_title(state.chart_title, fontsize=10)
        ax.set_ylabel(f"{series.band} max")
        ax.legend(loc="upper left", fontsize=8)
        ax.figure.autofmt_xdate()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _setup_figure(self) -> Tuple[plt.Figure, plt.Axes, plt.Axes]:
        fig, (ax_map, ax_chart) = plt.subplots(1, 2, figsize=self.figsize)
        return fig, ax_map, ax_chart

    def _save_figure(self, fig: plt.Figure, output_path: Path) -> str:
        """Save figure in configured format."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_file = output_path.with_suffix(f'.{self.output_format}')
        fig.savefig(output_file, dpi=self.dpi, bbox_inches='tight', format=self.output_format)
        plt.close(fig)
        logger.info("Plot saved: %s", output_file)
        return str(output_file)

    def plot_view(self, state, layers, output_path: Path) -> str:
        """Render the full view (layer + chart) for a snapshot.

        Parameters
        ----------
        state : ViewState
            Snapshot to draw.
        layers : LayerSet or None
            Layers for ``state.anchor_date``.
        output_path : Path
            Target file; the extension follows the configured format.

        Returns
        -------
        str
            Path of the written file.
        """
        composite = layers[state.visible_layer] if layers is not None else None
        fig, ax_map, ax_chart = self._setup_figure()
        self.plot_layer(ax_map, composite, state)
        self.plot_series(ax_chart, state)
        if state.notice:
            fig.suptitle(state.notice, color="tab:red", fontsize=9)
        return self._save_figure(fig, Path(output_path))
