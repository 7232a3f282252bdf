"""Base classes and data structures for submission uploads."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class PhaseStatus(Enum):
    """Status of a project phase."""

    SCHEDULED = "scheduled"
    OPEN = "open"
    CLOSED = "closed"


class SubmissionCategory(str, Enum):
    """Kinds of artifact a participant can upload."""

    SUBMISSION = "submission"
    FINAL_FIX = "final_fix"
    TEST_CASES = "test_cases"


# ===========================================
# LOOKUP VALUES
# ===========================================


@dataclass(frozen=True)
class LookupValue:
    """A named, id-bearing catalog entry.

    Submission statuses, upload statuses, upload types and resource roles are
    all small closed catalogs of these values owned by an external store.
    """

    id: int
    name: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description}


# ===========================================
# PROJECT DATA CLASSES
# ===========================================


@dataclass
class Project:
    """A competition project and its named properties."""

    project_id: int
    properties: dict[str, Any] = field(default_factory=dict)

    def get_property(self, name: str) -> Any:
        return self.properties.get(name)

    def flag(self, name: str) -> bool:
        """Read a boolean-like property.

        Only a real ``bool`` or the string ``"true"`` (any case) counts as
        set; a missing property reads as false.
        """
        value = self.properties.get(name)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return False


@dataclass
class Phase:
    """A stage of a project's workflow."""

    phase_id: int
    project_id: int
    phase_type: str | None = None
    status: PhaseStatus = PhaseStatus.SCHEDULED

    @property
    def is_open(self) -> bool:
        return self.status == PhaseStatus.OPEN


@dataclass
class Resource:
    """A user's role assignment within a project.

    The platform user id is not a field of its own; it lives in the
    ``External Reference ID`` extension property as a string.
    """

    resource_id: int
    project_id: int
    role_id: int
    extension_properties: dict[str, str] = field(default_factory=dict)
    submissions: list[int] = field(default_factory=list)
    modified_by: str | None = None
    modified_at: datetime | None = None

    def add_submission(self, submission_id: int) -> None:
        if submission_id not in self.submissions:
            self.submissions.append(submission_id)

    def get_extension_property(self, name: str) -> str | None:
        return self.extension_properties.get(name)


# ===========================================
# UPLOAD / SUBMISSION DATA CLASSES
# ===========================================


@dataclass
class Upload:
    """A persisted record of one file-bearing artifact."""

    upload_id: int | None = None
    project_id: int = 0
    owner: int = 0
    upload_type: LookupValue | None = None
    status: LookupValue | None = None
    parameter: str = ""
    created_by: str | None = None
    created_at: datetime | None = None
    modified_by: str | None = None
    modified_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "upload_id": self.upload_id,
            "project_id": self.project_id,
            "owner": self.owner,
            "upload_type": self.upload_type.name if self.upload_type else None,
            "status": self.status.name if self.status else None,
            "parameter": self.parameter,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "modified_by": self.modified_by,
            "modified_at": self.modified_at.isoformat() if self.modified_at else None,
        }


@dataclass
class Submission:
    """A competition entry, paired with the upload created alongside it."""

    submission_id: int | None = None
    status: LookupValue | None = None
    upload_id: int | None = None
    resource_id: int | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    modified_by: str | None = None
    modified_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "submission_id": self.submission_id,
            "status": self.status.name if self.status else None,
            "upload_id": self.upload_id,
            "resource_id": self.resource_id,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "modified_by": self.modified_by,
            "modified_at": self.modified_at.isoformat() if self.modified_at else None,
        }


# ===========================================
# CATEGORY RULES
# ===========================================


@dataclass(frozen=True)
class CategoryRule:
    """How one submission category is gated, authorised and retired.

    Attributes:
        phase_names: Phase types that gate the upload; the first matching
            phase in tracker order decides
        role_names: Resource roles allowed to upload
        upload_type_name: Upload type recorded on the new upload
        creates_submission: Whether a Submission record is created, linked to
            the resource and sent to screening
        requires_winner: Whether only the project's winner may upload
        always_retire: Retire prior submissions unconditionally; when False
            they are retired only if the project disallows multiple submissions
    """

    phase_names: tuple[str, ...]
    role_names: tuple[str, ...]
    upload_type_name: str
    creates_submission: bool = False
    requires_winner: bool = False
    always_retire: bool = True
