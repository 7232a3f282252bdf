"""Upload services: the public entry points for participant uploads."""

from review_platform.shared.utils.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from review_platform.uploads.base import Submission, SubmissionCategory
from review_platform.uploads.config import UploadSettings, get_settings
from review_platform.uploads.intake import SubmissionIntake
from review_platform.uploads.providers import UploadManagers
from review_platform.uploads.status import StatusTransitionService

logger = get_logger(__name__)

_CONTEXT_KEYS = ("operation", "operator", "project_id", "user_id", "submission_id")


class UploadService:
    """
    Upload services facade.

    Wraps submission intake and status changes with per-call log context.
    Every method either completes its whole sequence or raises an
    ``UploadServicesError``; there is no partial-success result.
    """

    def __init__(
        self,
        managers: UploadManagers,
        settings: UploadSettings | None = None,
        intake: SubmissionIntake | None = None,
        transitions: StatusTransitionService | None = None,
    ):
        self._settings = settings or get_settings()
        self._intake = intake or SubmissionIntake(managers, self._settings)
        self._transitions = transitions or StatusTransitionService(
            managers.catalog, self._settings
        )

    async def upload_submission(self, project_id: int, user_id: int, filename: str) -> int:
        """Upload a submission; returns the submission id."""
        return await self.upload(SubmissionCategory.SUBMISSION, project_id, user_id, filename)

    async def upload_final_fix(self, project_id: int, user_id: int, filename: str) -> int:
        """Upload a final fix; returns the upload id."""
        return await self.upload(SubmissionCategory.FINAL_FIX, project_id, user_id, filename)

    async def upload_test_cases(self, project_id: int, user_id: int, filename: str) -> int:
        """Upload test cases; returns the upload id."""
        return await self.upload(SubmissionCategory.TEST_CASES, project_id, user_id, filename)

    async def upload(
        self,
        category: SubmissionCategory,
        project_id: int,
        user_id: int,
        filename: str,
    ) -> int:
        operation = f"upload_{getattr(category, 'value', category)}"
        bind_request_context(
            operation,
            operator=str(user_id),
            project_id=project_id,
            user_id=user_id,
        )
        logger.debug("operation_entered", filename=filename)
        try:
            return await self._intake.create(category, project_id, user_id, filename)
        finally:
            logger.debug("operation_exited")
            clear_request_context(*_CONTEXT_KEYS)

    async def set_submission_status(
        self,
        submission_id: int,
        status_id: int,
        operator: str,
    ) -> Submission:
        """Move a submission to another status; returns the updated submission."""
        bind_request_context(
            "set_submission_status",
            operator=operator,
            submission_id=submission_id,
        )
        logger.debug("operation_entered", status_id=status_id)
        try:
            return await self._transitions.transition(submission_id, status_id, operator)
        finally:
            logger.debug("operation_exited")
            clear_request_context(*_CONTEXT_KEYS)


# Process-wide instance
_upload_service: UploadService | None = None


def init_upload_service(
    managers: UploadManagers,
    settings: UploadSettings | None = None,
) -> UploadService:
    """Configure logging and create the process-wide upload service."""
    global _upload_service
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.json_logs)
    _upload_service = UploadService(managers, settings)
    logger.info("upload_service_initialized")
    return _upload_service


def get_upload_service() -> UploadService:
    """Get the process-wide upload service. Must be initialized first."""
    if _upload_service is None:
        raise RuntimeError("Upload service not initialized; call init_upload_service()")
    return _upload_service


def reset_upload_service() -> None:
    """Drop the process-wide upload service."""
    global _upload_service
    _upload_service = None
