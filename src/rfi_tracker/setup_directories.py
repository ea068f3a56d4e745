"""
Directory setup for tracker output.

Flat layout under one base directory:
- plots/YYYYMMDD/  rendered views, named by layer and anchor date
- logs/            session logs
"""

from pathlib import Path
from datetime import date, datetime, timezone


def setup_output_directories(base_output_dir=None):
    """
    Set up organized output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, prompts user for input.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'plots', 'logs'
    """

    if base_output_dir is None:
        print("\n" + "=" * 70)
        print("RFI TRACKER - OUTPUT DIRECTORY SETUP")
        print("=" * 70)
        print("\nCurrent location: ", Path.cwd())
        print("\nDefault options:")
        print("  1. Current directory: ./output")
        print("  2. Home directory: ~/rfi_tracker_output")
        print("  3. Custom path")

        choice = input("\nSelect option (1/2/3) [default=1]: ").strip() or "1"

        if choice == "2":
            base_output_dir = Path.home() / "rfi_tracker_output"
        elif choice == "3":
            path_input = input("Enter custom path (use ~ for home): ").strip()
            base_output_dir = Path(path_input).expanduser()
        else:
            base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "plots": base_output_dir / "plots",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    print("\nOutput directories created:")
    for key, path in directories.items():
        print(f"  {key:12s}: {path}")
    print("=" * 70 + "\n")

    return directories


def _slug(text):
    """'Dammam, Saudi Arabia' -> 'dammam_saudi_arabia'"""
    cleaned = "".join(ch.lower() if ch.isalnum() else "_" for ch in text)
    return "_".join(part for part in cleaned.split("_") if part)


def get_plot_path(output_dirs, layer_id, anchor, site=None, output_format="png"):
    """
    Get organized plot file path.

    Parameters
    ----------
    output_dirs : dict
        Output directories from setup_output_directories()
    layer_id : str
        Visible layer ('Day', 'Month', 'Year')
    anchor : date or str
        Anchor date of the view
    site : str, optional
        Example site name, used as a filename prefix
    output_format : str
        File extension

    Returns
    -------
    Path
        Full path: plots/YYYYMMDD/[site_]layer_YYYYMMDD.png

    Example
    -------
    >>> get_plot_path(dirs, 'Month', '2022-01-01', site='Dammam, Saudi Arabia')
    Path('output/plots/20220101/dammam_saudi_arabia_month_20220101.png')
    """
    if isinstance(anchor, str):
        anchor = date.fromisoformat(anchor)

    date_str = anchor.strftime("%Y%m%d")
    date_dir = Path(output_dirs["plots"]) / date_str
    date_dir.mkdir(parents=True, exist_ok=True)

    prefix = f"{_slug(site)}_" if site else ""
    return date_dir / f"{prefix}{layer_id.lower()}_{date_str}.{output_format}"


def get_log_path(output_dirs, name="rfi_tracker"):
    """
    Get organized log file path.

    Parameters
    ----------
    output_dirs : dict
        Output directories from setup_output_directories()
    name : str
        Log file stem

    Returns
    -------
    Path
        Full path to log file
    """
    log_dir = Path(output_dirs["logs"])
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"{name}.log"


def get_series_path(output_dirs, lon, lat, timestamp=None):
    """
    Get CSV path for an exported interference series.

    Returns
    -------
    Path
        Full path: plots/series/rfi_<lon>_<lat>_YYYYMMDD_HHMMSS.csv
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    series_dir = Path(output_dirs["plots"]) / "series"
    series_dir.mkdir(parents=True, exist_ok=True)
    return series_dir / f"rfi_{lon:.5f}_{lat:.5f}_{timestamp.strftime('%Y%m%d_%H%M%S')}.csv"
