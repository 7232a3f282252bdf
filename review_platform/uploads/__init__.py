"""Submission upload services.

This module turns "user U uploads file F for project P" into a consistent
series of writes across the platform's stores:
- Phase gating: the upload's phase must exist and be open
- Role authorisation: exactly one resource with an allowed role
- Upload and submission records in the upload catalog
- Screening of new submissions
- Retirement of superseded submissions
- Direct submission status changes

Collaborators are injected as an ``UploadManagers`` bundle; in-memory and
SQL-backed implementations are provided.
"""

from review_platform.uploads.authorization import RoleAuthorizer
from review_platform.uploads.base import (
    CategoryRule,
    LookupValue,
    Phase,
    PhaseStatus,
    Project,
    Resource,
    Submission,
    SubmissionCategory,
    Upload,
)
from review_platform.uploads.config import CATEGORY_RULES, UploadSettings, get_settings
from review_platform.uploads.exceptions import (
    AmbiguousOrMissingUserError,
    IllegalStatusTransitionError,
    InvalidArgumentError,
    NoMatchingPhaseError,
    NoSuchRoleError,
    NoSuchStatusError,
    NotWinnerError,
    OrchestrationFailure,
    PersistenceFailure,
    PhaseNotOpenError,
    ProjectNotEligibleError,
    ProjectNotFoundError,
    ScreeningTaskExistsError,
    SearchQueryError,
    StatusNotFoundError,
    StoreError,
    StorePersistenceError,
    SubmissionNotFoundError,
    UploadServicesError,
)
from review_platform.uploads.intake import SubmissionIntake
from review_platform.uploads.phase_gate import PhaseGate
from review_platform.uploads.providers import (
    PhaseTracker,
    ProjectStore,
    ResourceDirectory,
    ScreeningTrigger,
    UploadCatalog,
    UploadManagers,
)
from review_platform.uploads.retirement import RetirementPolicy
from review_platform.uploads.service import (
    UploadService,
    get_upload_service,
    init_upload_service,
)
from review_platform.uploads.status import StatusTransitionService

__all__ = [
    # Config
    "get_settings",
    "UploadSettings",
    "CATEGORY_RULES",
    # Data classes
    "CategoryRule",
    "LookupValue",
    "Phase",
    "PhaseStatus",
    "Project",
    "Resource",
    "Submission",
    "SubmissionCategory",
    "Upload",
    # Collaborators
    "PhaseTracker",
    "ProjectStore",
    "ResourceDirectory",
    "ScreeningTrigger",
    "UploadCatalog",
    "UploadManagers",
    # Components
    "PhaseGate",
    "RoleAuthorizer",
    "RetirementPolicy",
    "StatusTransitionService",
    "SubmissionIntake",
    # Services
    "UploadService",
    "get_upload_service",
    "init_upload_service",
    # Errors
    "UploadServicesError",
    "InvalidArgumentError",
    "ProjectNotFoundError",
    "ProjectNotEligibleError",
    "NoMatchingPhaseError",
    "PhaseNotOpenError",
    "NoSuchRoleError",
    "AmbiguousOrMissingUserError",
    "NotWinnerError",
    "SubmissionNotFoundError",
    "StatusNotFoundError",
    "NoSuchStatusError",
    "IllegalStatusTransitionError",
    "PersistenceFailure",
    "OrchestrationFailure",
    "StoreError",
    "StorePersistenceError",
    "SearchQueryError",
    "ScreeningTaskExistsError",
]
