"""Pydantic schemas validating upload service requests."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from review_platform.uploads.base import SubmissionCategory
from review_platform.uploads.exceptions import InvalidArgumentError


class UploadRequest(BaseModel):
    """Request to upload a submission, final fix or test cases."""

    model_config = ConfigDict(strict=True, frozen=True)

    category: SubmissionCategory
    project_id: int = Field(..., ge=0)
    user_id: int = Field(..., ge=0)
    filename: str = Field(..., min_length=1)

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("filename must not be blank")
        return v

    @property
    def operator(self) -> str:
        return str(self.user_id)


class StatusChangeRequest(BaseModel):
    """Request to move a submission to another status."""

    model_config = ConfigDict(strict=True, frozen=True)

    submission_id: int = Field(..., ge=0)
    status_id: int = Field(..., ge=0)
    operator: str = Field(..., min_length=1)

    @field_validator("operator")
    @classmethod
    def validate_operator(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("operator must not be blank")
        return v


def parse_request(model: type[BaseModel], **values: Any) -> Any:
    """Build a request model, reporting the first bad field as InvalidArgumentError."""
    try:
        return model(**values)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise InvalidArgumentError(
            f"Invalid {field or 'request'}: {first.get('msg', 'invalid value')}",
            field=field,
        ) from e
