"""Formal pipeline invariants.

This file documents what each stage MUST produce. Use it as a reviewer
anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "collection": [
        "Every member carries both VH and VV bands",
        "Every member was acquired in IW (interferometric wide swath) mode",
        "Members are ordered by acquisition time",
        "Orbit sub-collections are views over the same archive, never copies",
    ],

    "window": [
        "Window is half-open [start, end) in UTC",
        "start is aligned to the granularity (midnight, 1st of month, 1st of January)",
        "end is the canonical successor of start",
        "The anchor date lies inside the window",
    ],

    "aggregation": [
        "Channel order is (VH_ascending, VV_merged, VH_descending)",
        "Month and Year layers are per-pixel maxima over the window",
        "Day layer is the windowed collection passed through unreduced",
        "empty is True exactly when every channel had no observations",
    ],

    "series": [
        "Timestamps strictly increase",
        "Values are finite maxima over the sampling disc",
        "Observations without coverage are absent, not zero",
    ],

    "view_state": [
        "Opacity is within [0, 1]",
        "Displayed layers belong to the committed anchor date",
        "Window always derives from the anchor date and granularity",
        "Series, when present, belongs to the current clicked point",
        "Narrative is shown only while an example site is active",
    ],
}

# Which stages are optional vs required
STAGE_REQUIREMENTS = {
    "collection": "REQUIRED",
    "window": "REQUIRED",
    "aggregation": "REQUIRED",
    "series": "OPTIONAL",  # Only once a point has been clicked
    "view_state": "REQUIRED",
}
