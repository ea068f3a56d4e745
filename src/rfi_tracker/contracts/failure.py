"""Centralized failure policy for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing callers to handle pipeline bugs uniformly.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """Failure policy for contract violations.

    FAIL_FAST (default): Raise immediately on contract violation
    """
    FAIL_FAST = "fail_fast"


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input or a
    recoverable data condition. A stage did not produce the invariants
    it promised.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - ContractViolation: Pipeline bug (programmer error)
    - TrackerError: Recoverable runtime condition (no data, backend down)
    """
    pass
