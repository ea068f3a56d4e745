"""`rfi_tracker` - Radar interference tracking from Sentinel-1 backscatter.

Subpackages:
- archive: Observation collection model and archive backends
- pipeline: Time windows, aggregation, point signal extraction, query dispatch
- controller: View state, commands, and rendering interface
- sites: Example site registry
- visualization: Plotting
"""

__version__ = "0.1.0"
