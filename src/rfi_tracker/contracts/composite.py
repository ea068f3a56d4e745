"""Aggregation stage contract.

Enforces the guarantee that a Composite has its channels in the fixed order,
that the empty flag agrees with the channel availability, and that the
window matches the granularity it was tagged with.
"""

from rfi_tracker.contracts.base import require

COMPOSITE_CHANNELS = ("VH_ascending", "VV_merged", "VH_descending")


def assert_composite(composite) -> None:
    """Enforce aggregation contract.

    Called by the aggregator before a Composite leaves the pipeline.

    Parameters
    ----------
    composite : Composite
        Output of ``Aggregator.aggregate()``.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        composite.window.granularity == composite.granularity,
        f"Aggregation contract violated: window is {composite.window.granularity}, "
        f"layer is {composite.granularity}"
    )

    if not composite.reduced:
        require(
            composite.image is None,
            "Aggregation contract violated: passthrough layer must not carry a reduced image"
        )
        return

    require(
        tuple(composite.channels) == COMPOSITE_CHANNELS,
        f"Aggregation contract violated: channels {tuple(composite.channels)}, "
        f"expected {COMPOSITE_CHANNELS}"
    )
    require(
        set(composite.missing_channels) <= set(COMPOSITE_CHANNELS),
        f"Aggregation contract violated: unknown missing channels {composite.missing_channels}"
    )

    all_missing = len(composite.missing_channels) == len(COMPOSITE_CHANNELS)
    require(
        composite.empty == all_missing,
        f"Aggregation contract violated: empty={composite.empty} but "
        f"{len(composite.missing_channels)}/3 channels missing"
    )
    require(
        composite.empty or composite.image is not None,
        "Aggregation contract violated: non-empty composite without image"
    )
