"""Direct submission status changes by id."""

from review_platform.shared.utils.logging import get_logger
from review_platform.uploads.base import Submission
from review_platform.uploads.catalog import find_by_id
from review_platform.uploads.config import UploadSettings, get_settings
from review_platform.uploads.exceptions import (
    StatusNotFoundError,
    SubmissionNotFoundError,
    guard_external_call,
)
from review_platform.uploads.providers import UploadCatalog
from review_platform.uploads.schemas import StatusChangeRequest, parse_request
from review_platform.uploads.state_machine import validate_transition

logger = get_logger(__name__)


class StatusTransitionService:
    """
    Sets a submission's status.

    By default this is an unguarded set: any catalog status may replace any
    other. Callers such as the retirement policy uphold the Active → Deleted
    convention themselves. With ``enforce_status_transitions`` the move is
    checked against the transition table first.
    """

    def __init__(
        self,
        catalog: UploadCatalog,
        settings: UploadSettings | None = None,
    ):
        self._catalog = catalog
        self._settings = settings or get_settings()

    async def transition(
        self,
        submission_id: int,
        new_status_id: int,
        operator: str,
    ) -> Submission:
        """
        Move a submission to the status with ``new_status_id``.

        Args:
            submission_id: Submission to update
            new_status_id: Id of the target status in the status catalog
            operator: Audit actor credited with the update

        Returns:
            The updated submission; only its status and modification stamp
            differ from what the catalog held

        Raises:
            InvalidArgumentError: Negative ids or blank operator
            SubmissionNotFoundError: Unknown submission id
            StatusNotFoundError: Unknown status id
            IllegalStatusTransitionError: Guarded move not in the table
        """
        request = parse_request(
            StatusChangeRequest,
            submission_id=submission_id,
            status_id=new_status_id,
            operator=operator,
        )

        with guard_external_call("get submission", submission_id=submission_id):
            submission = await self._catalog.get_submission(request.submission_id)
        if submission is None:
            logger.error("submission_not_found", submission_id=submission_id)
            raise SubmissionNotFoundError(submission_id)

        with guard_external_call("get submission statuses", submission_id=submission_id):
            statuses = await self._catalog.get_all_submission_statuses()
        status = find_by_id(statuses, request.status_id)
        if status is None:
            logger.error(
                "submission_status_not_found",
                submission_id=submission_id,
                status_id=new_status_id,
            )
            raise StatusNotFoundError(new_status_id)

        if self._settings.enforce_status_transitions:
            current = submission.status.name if submission.status else None
            validate_transition(current, status.name)

        submission.status = status
        with guard_external_call("update submission", submission_id=submission_id):
            await self._catalog.update_submission(submission, request.operator)

        logger.info(
            "submission_status_updated",
            submission_id=submission_id,
            status=status.name,
            operator=request.operator,
        )
        return submission
