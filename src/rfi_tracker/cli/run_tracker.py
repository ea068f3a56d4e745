"""Core headless tracker execution logic.

This module contains the actual session runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import json
import logging
import importlib.util
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from rfi_tracker.setup_directories import setup_output_directories, get_series_path
from rfi_tracker.pipeline.session import TrackerSession
from rfi_tracker.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def build_config(user_config_path: Optional[str] = None,
                 cli_args: Optional[Dict[str, Any]] = None,
                 verbose: bool = False):
    """Resolve Param < User < CLI into an InternalConfig."""
    param_cfg = ParamConfig()

    if user_config_path is not None:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))
    else:
        user_cfg = UserConfig()

    cli_args = dict(cli_args or {})
    if verbose and cli_args.get("log_level") is None:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    return resolve_config(param_cfg, user_cfg, cli_cfg)


def run_tracker(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    site: Optional[str] = None,
    anchor: Optional[str] = None,
    point: Optional[Tuple[float, float]] = None,
    granularity: Optional[str] = None,
    export_series: bool = False,
    timeout: float = 300.0,
    verbose: bool = False,
) -> Dict[str, Optional[str]]:
    """Run a headless tracker session and render the resulting view.

    Steps:
    1. Resolve configuration (Param < User < CLI)
    2. Set up output directories
    3. Start a session (initial date and default point)
    4. Apply the requested site, date, point and granularity, in that order
    5. Wait for all queries, save the view, optionally export the series

    Parameters
    ----------
    user_config_path : str, optional
        Python file with a CONFIG dict.
    cli_args : dict, optional
        CLI overrides. Keys: backend, data_dir, base_dir, ee_project,
        dispatch_mode, log_level. All optional.
    site : str, optional
        Example site name; applied before the other view arguments.
    anchor : str, optional
        ISO date to show.
    point : (lon, lat), optional
        Point to chart.
    granularity : str, optional
        "Day", "Month" or "Year".
    export_series : bool
        Also write the interference series to CSV.
    timeout : float
        Seconds to wait for archive queries.
    verbose : bool
        DEBUG logging and print the resolved configuration.

    Returns
    -------
    dict
        ``{"plot": path or None, "series": path or None}``

    Examples
    --------
    Render the Dammam example from a scene directory::

        run_tracker(cli_args={"data_dir": "scenes"}, site="Dammam, Saudi Arabia")
    """
    config = build_config(user_config_path, cli_args, verbose)
    output_dirs = setup_output_directories(config.base_dir)

    print(f"\n{'='*60}")
    print("RFI Tracker")
    print('='*60)
    print(f"Config:  {user_config_path or '(defaults)'}")
    print(f"Backend: {config.archive.backend}")
    print(f"Output:  {output_dirs['base']}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    session = TrackerSession(config, output_dirs)
    outputs: Dict[str, Optional[str]] = {"plot": None, "series": None}
    try:
        controller = session.start()
        if site is not None:
            controller.on_example_site_selected(site)
        if anchor is not None:
            controller.on_date_change(anchor)
        if point is not None:
            controller.on_map_click(*point)
        if granularity is not None:
            controller.on_granularity_change(granularity)

        if not session.wait_until_idle(timeout=timeout):
            logger.warning("Rendering before all queries finished")

        outputs["plot"] = session.save_view()

        state = controller.state
        if export_series and state.series is not None:
            path = get_series_path(output_dirs, state.clicked_point.lon, state.clicked_point.lat)
            state.series.to_frame().to_csv(path)
            outputs["series"] = str(path)
            logger.info("Series exported: %s", path)
    finally:
        session.stop()

    return outputs
