"""Named example locations of known ground-based radars."""

from rfi_tracker.sites.registry import (
    NarrativeLabel,
    Annotation,
    ExampleSite,
    SITE_REGISTRY,
    get_site,
    site_names,
)

__all__ = ['NarrativeLabel', 'Annotation', 'ExampleSite', 'SITE_REGISTRY', 'get_site', 'site_names']
