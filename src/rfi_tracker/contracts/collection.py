"""Collection stage contract.

Enforces the guarantee that every observation admitted to the tracker is a
dual-polarisation (VH + VV) interferometric-wide-swath pass, and that the
archive returned them in time order.
"""

from typing import Sequence

from rfi_tracker.contracts.base import require

REQUIRED_POLARIZATIONS = frozenset({"VH", "VV"})
REQUIRED_INSTRUMENT_MODE = "IW"


def assert_dual_pol_iw(observations: Sequence) -> None:
    """Enforce collection contract on a queried observation list.

    Parameters
    ----------
    observations : sequence of Observation
        Output of ``ArchiveBackend.query_observations`` for a collection
        created with ``load()``.

    Raises
    ------
    ContractViolation
        If a member lacks a band, has the wrong mode, or the list is not
        ordered by acquisition time.
    """
    previous = None
    for obs in observations:
        missing = REQUIRED_POLARIZATIONS - set(obs.polarizations)
        require(
            not missing,
            f"Collection contract violated: {obs.scene_id} missing bands {sorted(missing)}"
        )
        require(
            obs.instrument_mode == REQUIRED_INSTRUMENT_MODE,
            f"Collection contract violated: {obs.scene_id} mode is {obs.instrument_mode}, expected IW"
        )
        if previous is not None:
            require(
                obs.timestamp >= previous.timestamp,
                f"Collection contract violated: {obs.scene_id} is out of time order"
            )
        previous = obs
