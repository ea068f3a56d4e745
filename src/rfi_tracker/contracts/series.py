"""Signal extraction contract.

Enforces the guarantee that a time series is strictly increasing in time
and contains only finite values. Missing coverage is expressed by absent
entries, never by NaN or zero placeholders.
"""

import math
from typing import Sequence

from rfi_tracker.contracts.base import require


def assert_time_series(points: Sequence) -> None:
    """Enforce signal extraction contract.

    Parameters
    ----------
    points : sequence of SeriesPoint
        Entries produced by the point signal extractor.

    Raises
    ------
    ContractViolation
        If timestamps repeat or go backwards, or a value is not finite.
    """
    previous = None
    for point in points:
        require(
            math.isfinite(point.value),
            f"Series contract violated: non-finite value at {point.timestamp.isoformat()}"
        )
        if previous is not None:
            require(
                point.timestamp > previous.timestamp,
                f"Series contract violated: {point.timestamp.isoformat()} does not follow "
                f"{previous.timestamp.isoformat()}"
            )
        previous = point
