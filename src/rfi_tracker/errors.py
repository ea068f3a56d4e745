"""Recoverable error taxonomy for the tracker.

These are runtime conditions the interaction layer expects and handles.
Programmer errors (broken stage invariants) are ContractViolation instead,
see rfi_tracker.contracts.

Key distinction:
- ValueError: bad user input (handled by Pydantic or the controller)
- TrackerError subclasses: expected runtime conditions, surfaced in the view
- ContractViolation: pipeline bug
"""


class TrackerError(Exception):
    """Base class for recoverable tracker errors."""


class EmptyCollectionError(TrackerError):
    """No observation matches the filter, window or point.

    Surfaced as an explicit "no data" state. Never defaulted to zeros, since
    zero backscatter and missing coverage mean different things.
    """


class ExternalServiceError(TrackerError):
    """The archive or compute backend is unreachable or returned an error.

    Surfaced as a persistent non-blocking notice. The failed transition can
    be retried by dispatching it again.
    """


class StaleResponseDiscarded(TrackerError):
    """A completion arrived after a newer request on the same channel.

    Not user visible. The controller drops the response (last request wins).
    """

    def __init__(self, channel: str, seq: int, latest: int):
        super().__init__(
            f"Discarded stale '{channel}' response seq={seq} (latest={latest})"
        )
        self.channel = channel
        self.seq = seq
        self.latest = latest
