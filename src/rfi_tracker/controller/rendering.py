"""Rendering boundary.

The controller pushes display changes through a LayerRenderer. A real map
client would turn these calls into tile layers and widgets; MapCanvas keeps
them in memory so headless runs, the plotter, and tests can inspect exactly
what would be on screen.
"""

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
import logging
import threading
from typing import Any, Optional, Sequence

__all__ = ['LayerRenderer', 'MapLayer', 'MapCanvas']

logger = logging.getLogger(__name__)


class LayerRenderer(ABC):
    """Display surface for layers, marker, annotations, chart and notices.

    Show/hide and opacity changes must not re-render layer content.
    """

    @abstractmethod
    def add_layer(self, layer_id: str, composite, shown: bool, opacity: float) -> None:
        """Add or replace the layer with this id."""

    @abstractmethod
    def set_shown(self, layer_id: str, shown: bool) -> None:
        ...

    @abstractmethod
    def set_opacity(self, layer_id: str, opacity: float) -> None:
        ...

    @abstractmethod
    def set_marker(self, point, style: dict) -> None:
        """Replace the clicked-point marker (None removes it)."""

    @abstractmethod
    def set_annotations(self, annotations: Sequence) -> None:
        ...

    @abstractmethod
    def set_viewport(self, viewport) -> None:
        ...

    @abstractmethod
    def set_chart(self, series, title: str) -> None:
        """Replace the chart's backing series (None clears it)."""

    @abstractmethod
    def set_notice(self, text: Optional[str]) -> None:
        ...


@dataclass
class MapLayer:
    layer_id: str
    composite: Any
    shown: bool
    opacity: float


class MapCanvas(LayerRenderer):
    """In-memory renderer.

    ``calls`` counts every renderer call by method name; ``renders`` counts
    only the calls that put new layer content on the canvas.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.layers: dict[str, MapLayer] = {}
        self.marker = None
        self.marker_style: dict = {}
        self.annotations: tuple = ()
        self.viewport = None
        self.chart_series = None
        self.chart_title = ""
        self.notice: Optional[str] = None
        self.calls: Counter = Counter()
        self.renders = 0

    def add_layer(self, layer_id, composite, shown, opacity):
        with self._lock:
            self.layers[layer_id] = MapLayer(layer_id, composite, shown, opacity)
            self.calls["add_layer"] += 1
            self.renders += 1
        logger.debug("Layer %s rendered (shown=%s, opacity=%.2f)", layer_id, shown, opacity)

    def set_shown(self, layer_id, shown):
        with self._lock:
            self.calls["set_shown"] += 1
            if layer_id in self.layers:
                self.layers[layer_id].shown = shown

    def set_opacity(self, layer_id, opacity):
        with self._lock:
            self.calls["set_opacity"] += 1
            if layer_id in self.layers:
                self.layers[layer_id].opacity = opacity

    def set_marker(self, point, style):
        with self._lock:
            self.calls["set_marker"] += 1
            self.marker = point
            self.marker_style = dict(style)

    def set_annotations(self, annotations):
        with self._lock:
            self.calls["set_annotations"] += 1
            self.annotations = tuple(annotations)

    def set_viewport(self, viewport):
        with self._lock:
            self.calls["set_viewport"] += 1
            self.viewport = viewport

    def set_chart(self, series, title):
        with self._lock:
            self.calls["set_chart"] += 1
            self.chart_series = series
            self.chart_title = title

    def set_notice(self, text):
        with self._lock:
            self.calls["set_notice"] += 1
            self.notice = text
        if text:
            logger.warning("Notice: %s", text)

    def visible_layers(self) -> list[str]:
        with self._lock:
            return [layer.layer_id for layer in self.layers.values() if layer.shown]

    def visible_layer(self) -> Optional[MapLayer]:
        """The single shown layer, or None."""
        with self._lock:
            shown = [layer for layer in self.layers.values() if layer.shown]
        return shown[0] if len(shown) == 1 else None
