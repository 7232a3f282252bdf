"""Optional submission status transition table.

States: Active → Failed Screening / Failed Review / Completed Without Win → Deleted.
Deleted is terminal. The table is only consulted when
``UploadSettings.enforce_status_transitions`` is set; otherwise any status may
move to any other.
"""

from review_platform.uploads.config import VALID_STATUS_TRANSITIONS
from review_platform.uploads.exceptions import IllegalStatusTransitionError


def can_transition(current: str | None, target: str) -> bool:
    """Check if a submission status move is in the table.

    A submission with no status yet may take any status, and re-applying the
    current status is always allowed.
    """
    if current is None or current == target:
        return True
    return target in VALID_STATUS_TRANSITIONS.get(current, [])


def validate_transition(current: str | None, target: str) -> None:
    """Raise IllegalStatusTransitionError if the move is not in the table."""
    if not can_transition(current, target):
        raise IllegalStatusTransitionError(
            current,
            target,
            VALID_STATUS_TRANSITIONS.get(current, []) if current else [],
        )
