"""Contracts for the external collaborators the upload services depend on.

Each collaborator owns its own data and durability. The services only call
the methods below, one at a time, and never assume a transaction spans more
than one call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from review_platform.uploads.base import LookupValue, Phase, Project, Resource, Submission, Upload
from review_platform.uploads.filters import Filter


class ProjectStore(ABC):
    """Read access to projects and their properties."""

    @abstractmethod
    async def get_project(self, project_id: int) -> Project | None:
        """Return the project, or None if it does not exist."""


class PhaseTracker(ABC):
    """Read access to project phases."""

    @abstractmethod
    async def get_phases(self, project_id: int) -> list[Phase]:
        """Return every phase of the project, in tracker order."""


class ResourceDirectory(ABC):
    """Role definitions and per-project role assignments."""

    @abstractmethod
    async def get_all_resource_roles(self) -> list[LookupValue]:
        """Return every resource role."""

    @abstractmethod
    async def search_resources(self, search_filter: Filter) -> list[Resource]:
        """Return resources matching the filter."""

    @abstractmethod
    async def update_resource(self, resource: Resource, operator: str) -> None:
        """Persist changes to a resource, crediting ``operator``."""


class UploadCatalog(ABC):
    """Durable store of uploads, submissions and their lookup catalogs."""

    @abstractmethod
    async def get_all_upload_statuses(self) -> list[LookupValue]:
        """Return the upload status catalog."""

    @abstractmethod
    async def get_all_upload_types(self) -> list[LookupValue]:
        """Return the upload type catalog."""

    @abstractmethod
    async def get_all_submission_statuses(self) -> list[LookupValue]:
        """Return the submission status catalog."""

    @abstractmethod
    async def create_upload(self, upload: Upload, operator: str) -> Upload:
        """Persist a new upload and assign its id."""

    @abstractmethod
    async def create_submission(self, submission: Submission, operator: str) -> Submission:
        """Persist a new submission and assign its id."""

    @abstractmethod
    async def update_submission(self, submission: Submission, operator: str) -> None:
        """Persist changes to an existing submission."""

    @abstractmethod
    async def get_submission(self, submission_id: int) -> Submission | None:
        """Return the submission, or None if it does not exist."""

    @abstractmethod
    async def search_submissions(self, search_filter: Filter) -> list[Submission]:
        """Return submissions matching the filter."""


class ScreeningTrigger(ABC):
    """Starts automated screening of a new submission."""

    @abstractmethod
    async def initiate_screening(self, submission_id: int, operator: str) -> None:
        """Queue screening for the submission."""


@dataclass(frozen=True)
class UploadManagers:
    """Bundle of collaborators handed to the upload services."""

    projects: ProjectStore
    phases: PhaseTracker
    resources: ResourceDirectory
    catalog: UploadCatalog
    screening: ScreeningTrigger
