"""Custom exceptions for upload services.

Two families live here. ``UploadServicesError`` and its subclasses are what
callers of the upload services see. ``StoreError`` and its subclasses are
raised by collaborator implementations (project store, phase tracker,
resource directory, upload catalog, screening trigger) and never escape the
services unwrapped: ``guard_external_call`` turns them into
``PersistenceFailure`` or ``OrchestrationFailure``.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from review_platform.shared.utils.logging import get_logger

logger = get_logger(__name__)


class UploadServicesError(Exception):
    """Base exception for upload services errors."""

    def __init__(self, message: str, error_type: str = "upload_services_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


class InvalidArgumentError(UploadServicesError):
    """Raised when a request argument is malformed."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "invalid_argument")
        self.field = field


class ProjectNotFoundError(UploadServicesError):
    """Raised when the project store has no such project."""

    def __init__(self, project_id: int):
        super().__init__(
            f"Project {project_id} does not exist",
            "project_not_found",
        )
        self.project_id = project_id


class NoMatchingPhaseError(UploadServicesError):
    """Raised when a project has no phase of any of the requested types."""

    def __init__(self, project_id: int, phase_names: list[str]):
        super().__init__(
            f"Project {project_id} has no phase of type {' or '.join(phase_names)}",
            "no_matching_phase",
        )
        self.project_id = project_id
        self.phase_names = phase_names


class ProjectNotEligibleError(UploadServicesError):
    """Raised when a project has no gating phase for the requested upload."""

    def __init__(self, project_id: int, phase_names: list[str]):
        super().__init__(
            f"Project {project_id} does not accept this upload: "
            f"no {' or '.join(phase_names)} phase",
            "project_not_eligible",
        )
        self.project_id = project_id
        self.phase_names = phase_names


class PhaseNotOpenError(UploadServicesError):
    """Raised when the gating phase exists but is not open."""

    def __init__(self, phase_id: int, phase_name: str | None = None):
        super().__init__(
            f"The '{phase_name}' phase {phase_id} is not open",
            "phase_not_open",
        )
        self.phase_id = phase_id
        self.phase_name = phase_name


class NoSuchRoleError(UploadServicesError):
    """Raised when none of the allowed role names exist in the directory."""

    def __init__(self, role_names: list[str], user_id: int):
        super().__init__(
            f"No resource role named {', '.join(role_names)} exists for user {user_id}",
            "no_such_role",
        )
        self.role_names = role_names
        self.user_id = user_id


class AmbiguousOrMissingUserError(UploadServicesError):
    """Raised unless exactly one resource matches (project, user, roles)."""

    def __init__(self, user_id: int, project_id: int, match_count: int):
        super().__init__(
            f"Expected exactly one resource for user {user_id} on project "
            f"{project_id}, found {match_count}",
            "ambiguous_or_missing_user",
        )
        self.user_id = user_id
        self.project_id = project_id
        self.match_count = match_count


class NotWinnerError(UploadServicesError):
    """Raised when a final fix comes from a user other than the winner."""

    def __init__(self, user_id: int, project_id: int):
        super().__init__(
            f"User {user_id} is not the winner of project {project_id}",
            "not_winner",
        )
        self.user_id = user_id
        self.project_id = project_id


class SubmissionNotFoundError(UploadServicesError):
    """Raised when a submission id is unknown to the catalog."""

    def __init__(self, submission_id: int):
        super().__init__(
            f"Submission {submission_id} not found",
            "submission_not_found",
        )
        self.submission_id = submission_id


class StatusNotFoundError(UploadServicesError):
    """Raised when a submission status id is not in the status catalog."""

    def __init__(self, status_id: int):
        super().__init__(
            f"Submission status {status_id} not found",
            "status_not_found",
        )
        self.status_id = status_id


class NoSuchStatusError(UploadServicesError):
    """Raised when a named lookup value (status or upload type) is missing."""

    def __init__(self, name: str, catalog: str):
        super().__init__(
            f"No {catalog} named '{name}' in the catalog",
            "no_such_status",
        )
        self.name = name
        self.catalog = catalog


class IllegalStatusTransitionError(UploadServicesError):
    """Raised when a guarded status change is not in the transition table."""

    def __init__(self, current: str | None, target: str, allowed: list[str]):
        super().__init__(
            f"Cannot move submission from '{current}' to '{target}'. "
            f"Allowed from '{current}': {allowed}",
            "illegal_status_transition",
        )
        self.current = current
        self.target = target
        self.allowed = allowed


class PersistenceFailure(UploadServicesError):
    """Raised when an external store fails; wraps the store error."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, "persistence_failure")
        self.cause = cause


class OrchestrationFailure(UploadServicesError):
    """Raised for non-persistence collaborator failures; wraps the cause."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, "orchestration_failure")
        self.cause = cause


# ===========================================
# COLLABORATOR-SIDE ERRORS
# ===========================================


class StoreError(Exception):
    """Base exception raised by collaborator implementations."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class StorePersistenceError(StoreError):
    """Raised when a store cannot read or write its records."""


class SearchQueryError(StoreError):
    """Raised when a search filter is malformed or cannot be executed."""


class ScreeningTaskExistsError(StoreError):
    """Raised when screening was already initiated for a submission."""

    def __init__(self, submission_id: int) -> None:
        super().__init__(
            f"Screening already initiated for submission {submission_id}",
            {"submission_id": submission_id},
        )
        self.submission_id = submission_id


@contextmanager
def guard_external_call(action: str, **context: Any) -> Iterator[None]:
    """Wrap collaborator errors raised inside the block.

    Malformed searches and screening conflicts become
    ``OrchestrationFailure``; any other store error becomes
    ``PersistenceFailure``. Errors already in the ``UploadServicesError``
    family pass through untouched. Anything else a collaborator raises
    (driver errors, dropped connections) is also wrapped as
    ``PersistenceFailure``.
    """
    try:
        yield
    except UploadServicesError:
        raise
    except (SearchQueryError, ScreeningTaskExistsError) as e:
        logger.error("collaborator_call_failed", action=action, error=str(e), **context)
        raise OrchestrationFailure(f"Failed to {action}", cause=e) from e
    except StoreError as e:
        logger.error("store_call_failed", action=action, error=str(e), **context)
        raise PersistenceFailure(f"Failed to {action}", cause=e) from e
    except Exception as e:
        logger.error(
            "collaborator_call_failed",
            action=action,
            error=str(e),
            error_type=type(e).__name__,
            **context,
        )
        raise PersistenceFailure(f"Failed to {action}", cause=e) from e
