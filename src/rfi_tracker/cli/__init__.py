"""Command-line interface modules for headless tracker runs.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from rfi_tracker.cli.run_tracker import run_tracker, build_config, load_user_config_dict

__all__ = ['run_tracker', 'build_config', 'load_user_config_dict']
