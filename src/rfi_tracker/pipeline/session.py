"""Tracker session orchestration.

Wires archive, dispatcher, renderer and controller together from one
InternalConfig, and owns their lifecycle (logging setup, worker start,
graceful shutdown).
"""

import logging
import time
from pathlib import Path
from typing import Optional

from rfi_tracker.archive import create_archive
from rfi_tracker.controller.controller import ViewStateController
from rfi_tracker.controller.rendering import MapCanvas
from rfi_tracker.pipeline.dispatcher import create_dispatcher
from rfi_tracker.setup_directories import get_log_path, get_plot_path
from rfi_tracker.visualization.plotter import TrackerPlotter

__all__ = ['TrackerSession']

logger = logging.getLogger(__name__)


class TrackerSession:
    """Runs one interactive (or headless) tracker session.

    **Components:**

    1. **Archive**: in-memory scenes from ``archive.data_dir`` or Earth
       Engine, selected by ``archive.backend``.
    2. **Dispatcher**: worker threads (``dispatcher.mode="threaded"``) or
       synchronous resolution (``"inline"``).
    3. **Controller**: the single writer of the view state.
    4. **Renderer**: MapCanvas unless one is supplied.

    **Logging:**

    All output goes to both console and ``logs/rfi_tracker.log`` when output
    directories are given. Level from ``config.logging.level``.

    Example usage::

        session = TrackerSession(config, output_dirs)
        session.start()
        session.controller.on_example_site_selected("Dammam, Saudi Arabia")
        session.wait_until_idle()
        session.save_view()
        session.stop()
    """

    def __init__(self, config, output_dirs: Optional[dict] = None, archive=None,
                 renderer=None, dispatcher=None, clock=None):
        """Initialize session; nothing runs until ``start()``.

        Parameters
        ----------
        config : InternalConfig
            Resolved runtime configuration.
        output_dirs : dict, optional
            From ``setup_output_directories()``. Without it nothing is written.
        archive, renderer, dispatcher : optional
            Pre-built components (tests, notebooks). Built from config otherwise.
        clock : callable, optional
            Current UTC time for the default anchor.
        """
        self.config = config
        self.output_dirs = output_dirs
        self.archive = archive
        self.renderer = renderer
        self.dispatcher = dispatcher
        self.clock = clock
        self.controller: Optional[ViewStateController] = None
        self.plotter: Optional[TrackerPlotter] = None

        self._running = False
        self._start_time = None

    def _setup_logging(self):
        """Configure root logger with file and console handlers."""
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        log_path = None
        if self.output_dirs:
            log_path = get_log_path(self.output_dirs)
            fh = logging.FileHandler(log_path)
            fh.setLevel(log_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)

    def start(self) -> ViewStateController:
        """Build components and load the initial view. Returns the controller."""
        if self._running:
            return self.controller

        self._setup_logging()
        logger.info("=" * 60)
        logger.info("Starting RFI Tracker session")
        logger.info("=" * 60)
        self._start_time = time.time()

        if self.archive is None:
            self.archive = create_archive(self.config)
        if self.dispatcher is None:
            self.dispatcher = create_dispatcher(self.config)
        if self.renderer is None:
            self.renderer = MapCanvas()

        self.controller = ViewStateController(
            self.archive,
            self.config,
            dispatcher=self.dispatcher,
            renderer=self.renderer,
            clock=self.clock,
        )
        self.plotter = TrackerPlotter(self.config)
        self._running = True

        self.controller.start()
        logger.info("Session running (backend=%s, dispatcher=%s)",
                    self.config.archive.backend, self.config.dispatcher.mode)
        return self.controller

    def wait_until_idle(self, timeout: float = 60.0) -> bool:
        if self.controller is None:
            return True
        idle = self.controller.wait_until_idle(timeout=timeout)
        self._log_status()
        return idle

    def save_view(self, output_path: Optional[Path] = None) -> Optional[str]:
        """Render the current snapshot; defaults to a path under ``plots/``."""
        if self.controller is None:
            raise RuntimeError("Session not started")

        state = self.controller.state
        if output_path is None:
            if not self.output_dirs:
                logger.warning("No output directories configured; view not saved")
                return None
            output_path = get_plot_path(
                self.output_dirs, state.visible_layer, state.anchor_date,
                site=state.active_site, output_format=self.config.visualization.output_format,
            )
        return self.plotter.plot_view(state, self.controller.layers, Path(output_path))

    def stop(self):
        """Stop workers and log a summary. Safe to call multiple times."""
        if not self._running:
            return
        self._running = False
        logger.info("Stopping session...")

        if self.dispatcher is not None:
            self.dispatcher.stop()

        elapsed = time.time() - self._start_time if self._start_time else 0
        logger.info("=" * 60)
        logger.info("Session stopped. Runtime: %.1f seconds", elapsed)
        logger.info("=" * 60)

    def _log_status(self):
        state = self.controller.state
        logger.info(
            "Status: anchor=%s layer=%s layers=%s series=%s pending=%d",
            state.anchor_date,
            state.visible_layer,
            state.layer_status or "-",
            state.series_status,
            self.dispatcher.pending,
        )
