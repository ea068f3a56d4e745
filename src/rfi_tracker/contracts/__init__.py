"""Pipeline contracts - fail-fast enforcement of stage invariants.

Contracts fail immediately and loudly when pipeline stages don't produce
their promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- TrackerError subclasses describe recoverable data/service conditions
"""

from rfi_tracker.contracts.failure import ContractViolation, FailurePolicy
from rfi_tracker.contracts.base import require
from rfi_tracker.contracts.collection import assert_dual_pol_iw
from rfi_tracker.contracts.composite import assert_composite, COMPOSITE_CHANNELS
from rfi_tracker.contracts.series import assert_time_series
from rfi_tracker.contracts.state import assert_view_state

__all__ = [
    "ContractViolation",
    "FailurePolicy",
    "require",
    "assert_dual_pol_iw",
    "assert_composite",
    "assert_time_series",
    "assert_view_state",
    "COMPOSITE_CHANNELS",
]
