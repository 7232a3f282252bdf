"""Configuration for upload services."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from review_platform.uploads.base import CategoryRule, SubmissionCategory


class UploadSettings(BaseSettings):
    """Settings for submission intake and status management."""

    model_config = {"env_prefix": "UPLOADS_", "case_sensitive": False}

    # Catalog names
    active_status_name: str = Field(
        default="Active",
        description="Name of the active upload and submission status",
    )
    deleted_status_name: str = Field(
        default="Deleted",
        description="Name of the submission status used for retired submissions",
    )

    # Resource and project property names
    external_reference_property: str = Field(
        default="External Reference ID",
        description="Resource extension property holding the platform user id",
    )
    allow_multiple_submissions_property: str = Field(
        default="Allow multiple submissions",
        description="Project property that keeps prior submissions active",
    )
    winner_property: str = Field(
        default="Winner External Reference ID",
        description="Project property holding the winner's user id",
    )

    # Status transitions
    enforce_status_transitions: bool = Field(
        default=False,
        description="Check status changes against VALID_STATUS_TRANSITIONS",
    )

    # Database Settings
    database_url: str = Field(
        default="sqlite+aiosqlite:///./uploads.db",
        description="SQLAlchemy async URL for the upload catalog",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=True, description="Render logs as JSON")


@lru_cache
def get_settings() -> UploadSettings:
    """Get cached upload settings."""
    return UploadSettings()


# Per-category gating, authorisation and exclusivity rules
CATEGORY_RULES: dict[SubmissionCategory, CategoryRule] = {
    SubmissionCategory.SUBMISSION: CategoryRule(
        phase_names=("Submission", "Screening"),
        role_names=("Submitter",),
        upload_type_name="Submission",
        creates_submission=True,
        requires_winner=False,
        always_retire=False,
    ),
    SubmissionCategory.FINAL_FIX: CategoryRule(
        phase_names=("Final Fix",),
        role_names=("Submitter",),
        upload_type_name="Final Fix",
        requires_winner=True,
    ),
    SubmissionCategory.TEST_CASES: CategoryRule(
        phase_names=("Review",),
        role_names=("Accuracy Reviewer", "Failure Reviewer", "Stress Reviewer"),
        upload_type_name="Review",
    ),
}

# Default lookup catalogs, used to seed the in-memory and SQL catalogs
DEFAULT_SUBMISSION_STATUSES = [
    "Active",
    "Failed Screening",
    "Failed Review",
    "Completed Without Win",
    "Deleted",
]

DEFAULT_UPLOAD_STATUSES = [
    "Active",
    "Deleted",
]

DEFAULT_UPLOAD_TYPES = [
    "Submission",
    "Test Case",
    "Final Fix",
    "Review",
]

DEFAULT_RESOURCE_ROLES = [
    "Submitter",
    "Primary Screener",
    "Screener",
    "Reviewer",
    "Accuracy Reviewer",
    "Failure Reviewer",
    "Stress Reviewer",
    "Aggregator",
    "Final Reviewer",
    "Approver",
    "Designer",
    "Observer",
    "Manager",
]

# Name-based submission status moves, checked only when
# UploadSettings.enforce_status_transitions is set
VALID_STATUS_TRANSITIONS: dict[str, list[str]] = {
    "Active": ["Failed Screening", "Failed Review", "Completed Without Win", "Deleted"],
    "Failed Screening": ["Active", "Deleted"],
    "Failed Review": ["Active", "Deleted"],
    "Completed Without Win": ["Deleted"],
    "Deleted": [],  # terminal
}
