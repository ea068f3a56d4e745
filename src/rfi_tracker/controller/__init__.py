"""Interaction layer: commands, view state snapshots and rendering boundary."""

from rfi_tracker.controller.commands import (
    MapClick,
    GranularityChange,
    DateChange,
    OpacityChange,
    ChartPointActivated,
    ExampleSiteSelected,
    Command,
)
from rfi_tracker.controller.state import ClickedPoint, Viewport, ViewState
from rfi_tracker.controller.rendering import LayerRenderer, MapCanvas, MapLayer
from rfi_tracker.controller.controller import ViewStateController

__all__ = [
    'MapClick',
    'GranularityChange',
    'DateChange',
    'OpacityChange',
    'ChartPointActivated',
    'ExampleSiteSelected',
    'Command',
    'ClickedPoint',
    'Viewport',
    'ViewState',
    'LayerRenderer',
    'MapCanvas',
    'MapLayer',
    'ViewStateController',
]
