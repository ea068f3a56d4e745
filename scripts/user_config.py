"""RFI Tracker User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the tracker. Advanced settings are the defaults in rfi_tracker/schemas/param.py

Usage:
    python scripts/run_tracker.py --config scripts/user_config.py
    python scripts/run_tracker.py --config scripts/user_config.py --site "Rostov-on-Don, Russia"
"""

CONFIG = {
    # ========================================================================
    # ARCHIVE
    # ========================================================================
    "BACKEND": "memory",      # "memory" (NetCDF scenes) or "earthengine"
    "DATA_DIR": "./scenes",   # One NetCDF file per Sentinel-1 pass
    "EE_PROJECT": None,       # Cloud project for Earth Engine
    "BASE_DIR": "./output",   # All outputs go here

    # ========================================================================
    # SIGNAL EXTRACTION
    # ========================================================================
    "SAMPLE_RADIUS": 500,     # Disc radius around the clicked point (CRS units)

    # ========================================================================
    # INITIAL VIEW
    # ========================================================================
    "DEFAULT_GRANULARITY": "Month",  # "Day", "Month" or "Year"
    "DEFAULT_OPACITY": 1.0,
    "ANCHOR_LAG_DAYS": 7,     # Start one week back so imagery is ingested

    # ========================================================================
    # QUERY DISPATCH
    # ========================================================================
    "DISPATCH_MODE": "threaded",  # "threaded" or "inline"
    "WORKERS": 2,
    "LOG_LEVEL": "INFO",
}
