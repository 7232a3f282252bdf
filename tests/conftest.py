"""Global pytest fixtures for the upload services.

This module provides shared fixtures for testing including:
- Settings instances isolated from the environment
- Seeded in-memory collaborators
- Mock collaborators for failure injection
"""

from unittest.mock import AsyncMock

import pytest

from review_platform.uploads.config import (
    DEFAULT_RESOURCE_ROLES,
    DEFAULT_SUBMISSION_STATUSES,
    DEFAULT_UPLOAD_STATUSES,
    DEFAULT_UPLOAD_TYPES,
    UploadSettings,
)
from review_platform.uploads.memory import lookup_values
from review_platform.uploads.providers import UploadManagers
from tests.factories import UploadWorld, build_world


# ===========================================
# SETTINGS FIXTURES
# ===========================================


@pytest.fixture
def settings() -> UploadSettings:
    """Default settings, ignoring any UPLOADS_* environment variables."""
    return UploadSettings(_env_file=None, enforce_status_transitions=False)


@pytest.fixture
def guarded_settings() -> UploadSettings:
    """Settings with the status transition table enforced."""
    return UploadSettings(_env_file=None, enforce_status_transitions=True)


# ===========================================
# IN-MEMORY COLLABORATOR FIXTURES
# ===========================================


@pytest.fixture
def world() -> UploadWorld:
    """Project with an open Submission phase, two submitters and a reviewer."""
    return build_world()


# ===========================================
# MOCK COLLABORATOR FIXTURES
# ===========================================


@pytest.fixture
def mock_managers() -> UploadManagers:
    """Collaborators as AsyncMocks returning the default catalogs."""
    catalog = AsyncMock()
    catalog.get_all_upload_statuses.return_value = lookup_values(DEFAULT_UPLOAD_STATUSES)
    catalog.get_all_upload_types.return_value = lookup_values(DEFAULT_UPLOAD_TYPES)
    catalog.get_all_submission_statuses.return_value = lookup_values(DEFAULT_SUBMISSION_STATUSES)
    catalog.search_submissions.return_value = []

    resources = AsyncMock()
    resources.get_all_resource_roles.return_value = lookup_values(DEFAULT_RESOURCE_ROLES)

    return UploadManagers(
        projects=AsyncMock(),
        phases=AsyncMock(),
        resources=resources,
        catalog=catalog,
        screening=AsyncMock(),
    )
