"""Phase gate: is an upload's gating phase open for a project?"""

from collections.abc import Sequence

from review_platform.shared.utils.logging import get_logger
from review_platform.uploads.base import Phase
from review_platform.uploads.exceptions import (
    NoMatchingPhaseError,
    PhaseNotOpenError,
    guard_external_call,
)
from review_platform.uploads.providers import PhaseTracker

logger = get_logger(__name__)


class PhaseGate:
    """Checks the first phase of the requested types is open."""

    def __init__(self, phase_tracker: PhaseTracker):
        self._phase_tracker = phase_tracker

    async def phase_open(self, project_id: int, phase_names: Sequence[str]) -> Phase:
        """
        Return the gating phase of a project if it is open.

        The first phase in tracker order whose type is one of
        ``phase_names`` decides; later phases of a matching type are not
        consulted even if they are open.

        Args:
            project_id: Project to inspect
            phase_names: Accepted phase types, matched by exact name

        Returns:
            The open gating phase

        Raises:
            NoMatchingPhaseError: No phase of any accepted type exists
            PhaseNotOpenError: The first matching phase is not open
        """
        with guard_external_call("get phases", project_id=project_id):
            phases = await self._phase_tracker.get_phases(project_id)

        for phase in phases:
            if phase.phase_type is None or phase.phase_type not in phase_names:
                continue
            if not phase.is_open:
                logger.error(
                    "phase_not_open",
                    project_id=project_id,
                    phase_id=phase.phase_id,
                    phase_type=phase.phase_type,
                    status=phase.status.value,
                )
                raise PhaseNotOpenError(phase.phase_id, phase.phase_type)
            return phase

        logger.error(
            "no_matching_phase",
            project_id=project_id,
            phase_names=list(phase_names),
        )
        raise NoMatchingPhaseError(project_id, list(phase_names))
