"""Static rendering of tracker views."""

from rfi_tracker.visualization.plotter import TrackerPlotter, stretch_rgb

__all__ = ['TrackerPlotter', 'stretch_rgb']
