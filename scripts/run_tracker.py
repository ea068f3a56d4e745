#!/usr/bin/env python3
"""RFI Tracker headless runner.

Usage:
    python scripts/run_tracker.py --config scripts/user_config.py
    python scripts/run_tracker.py --data-dir scenes --site "Dammam, Saudi Arabia"
    python scripts/run_tracker.py --date 2021-04-26 --point 49.949916 26.606379 --granularity Day
    python scripts/run_tracker.py --backend earthengine --ee-project my-project --list-sites

Note: User config in scripts/user_config.py, expert defaults in rfi_tracker.schemas.param
"""

import sys
import argparse
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from rfi_tracker.cli import run_tracker
from rfi_tracker.sites import site_names


def main():
    parser = argparse.ArgumentParser(description="Render a Sentinel-1 radio interference view")
    parser.add_argument("--config", help="Path to user config file")
    parser.add_argument("--backend", choices=["memory", "earthengine"], help="Archive backend")
    parser.add_argument("--data-dir", help="Directory of NetCDF scenes (memory backend)")
    parser.add_argument("--ee-project", help="Earth Engine cloud project")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--inline", action="store_true", help="Run queries on the calling thread")
    parser.add_argument("--site", help="Example site name")
    parser.add_argument("--date", help="Anchor date (YYYY-MM-DD)")
    parser.add_argument("--point", nargs=2, type=float, metavar=("LON", "LAT"), help="Point to chart")
    parser.add_argument("--granularity", choices=["Day", "Month", "Year"], help="Visible layer")
    parser.add_argument("--export-series", action="store_true", help="Write the series to CSV")
    parser.add_argument("--list-sites", action="store_true", help="Print example sites and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.list_sites:
        for name in site_names():
            print(name)
        return

    outputs = run_tracker(
        user_config_path=args.config,
        cli_args={
            "backend": args.backend,
            "data_dir": args.data_dir,
            "ee_project": args.ee_project,
            "base_dir": args.base_dir,
            "dispatch_mode": "inline" if args.inline else None,
        },
        site=args.site,
        anchor=args.date,
        point=tuple(args.point) if args.point else None,
        granularity=args.granularity,
        export_series=args.export_series,
        verbose=args.verbose,
    )

    for kind, path in outputs.items():
        if path:
            print(f"{kind:8s}: {path}")


if __name__ == "__main__":
    main()
