"""View state contract.

Enforces the internal consistency every published ViewState must have.
"""

from rfi_tracker.contracts.base import require


def assert_view_state(state) -> None:
    """Enforce view state contract.

    Called by the controller before a snapshot is published to readers.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        0.0 <= state.opacity <= 1.0,
        f"View state contract violated: opacity {state.opacity} outside [0, 1]"
    )
    require(
        0.0 <= state.layer_opacity <= 1.0,
        f"View state contract violated: layer opacity {state.layer_opacity} outside [0, 1]"
    )
    if state.layer_anchor is not None:
        require(
            state.layer_anchor == state.anchor_date,
            f"View state contract violated: layers are for {state.layer_anchor}, "
            f"date label shows {state.anchor_date}"
        )
    require(
        state.window.contains_date(state.anchor_date),
        "View state contract violated: window does not contain the anchor date"
    )
    if state.series is not None:
        require(
            state.clicked_point is not None,
            "View state contract violated: series without a clicked point"
        )
        require(
            state.series.point == state.clicked_point,
            "View state contract violated: series belongs to a different point"
        )
    if state.active_site is None:
        require(
            not state.narrative,
            "View state contract violated: narrative shown without an active site"
        )
