"""Test data factories for the upload services."""

from tests.factories.upload_factory import (
    OTHER_SUBMITTER_ID,
    OTHER_SUBMITTER_RESOURCE_ID,
    PROJECT_ID,
    REVIEWER_ID,
    REVIEWER_RESOURCE_ID,
    SUBMITTER_ID,
    SUBMITTER_RESOURCE_ID,
    UploadWorld,
    build_world,
    make_phase,
    make_project,
    make_resource,
)

__all__ = [
    "OTHER_SUBMITTER_ID",
    "OTHER_SUBMITTER_RESOURCE_ID",
    "PROJECT_ID",
    "REVIEWER_ID",
    "REVIEWER_RESOURCE_ID",
    "SUBMITTER_ID",
    "SUBMITTER_RESOURCE_ID",
    "UploadWorld",
    "build_world",
    "make_phase",
    "make_project",
    "make_resource",
]
