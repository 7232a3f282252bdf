"""In-memory collaborators for the upload services.

Each store keeps its records in dicts, hands out deep copies so callers
cannot change stored state without going through an update call, and
appends ``(action, entity_id, operator)`` to ``audit_log`` for every write.
Used by the test-suite and for running the services without a database.
"""

from copy import deepcopy
from itertools import count

from review_platform.shared.utils.datetime_utils import utcnow
from review_platform.shared.utils.logging import get_logger
from review_platform.uploads.base import LookupValue, Phase, Project, Resource, Submission, Upload
from review_platform.uploads.config import (
    DEFAULT_RESOURCE_ROLES,
    DEFAULT_SUBMISSION_STATUSES,
    DEFAULT_UPLOAD_STATUSES,
    DEFAULT_UPLOAD_TYPES,
)
from review_platform.uploads.exceptions import ScreeningTaskExistsError, StorePersistenceError
from review_platform.uploads.filters import Filter
from review_platform.uploads.providers import (
    PhaseTracker,
    ProjectStore,
    ResourceDirectory,
    ScreeningTrigger,
    UploadCatalog,
    UploadManagers,
)

logger = get_logger(__name__)


def lookup_values(names: list[str], start: int = 1) -> list[LookupValue]:
    """Number ``names`` into a lookup catalog."""
    return [LookupValue(id=i, name=name) for i, name in enumerate(names, start=start)]


class InMemoryProjectStore(ProjectStore):
    """Projects keyed by id."""

    def __init__(self, projects: list[Project] | None = None):
        self._projects: dict[int, Project] = {}
        for project in projects or []:
            self.add_project(project)

    def add_project(self, project: Project) -> None:
        self._projects[project.project_id] = deepcopy(project)

    async def get_project(self, project_id: int) -> Project | None:
        project = self._projects.get(project_id)
        return deepcopy(project) if project else None


class InMemoryPhaseTracker(PhaseTracker):
    """Phases per project, kept in insertion order."""

    def __init__(self, phases: list[Phase] | None = None):
        self._phases: dict[int, list[Phase]] = {}
        for phase in phases or []:
            self.add_phase(phase)

    def add_phase(self, phase: Phase) -> None:
        self._phases.setdefault(phase.project_id, []).append(deepcopy(phase))

    async def get_phases(self, project_id: int) -> list[Phase]:
        return deepcopy(self._phases.get(project_id, []))


class InMemoryResourceDirectory(ResourceDirectory):
    """Resource roles and resources."""

    def __init__(
        self,
        roles: list[LookupValue] | None = None,
        resources: list[Resource] | None = None,
    ):
        self._roles = list(roles) if roles is not None else lookup_values(DEFAULT_RESOURCE_ROLES)
        self._resources: dict[int, Resource] = {}
        self.audit_log: list[tuple[str, int, str]] = []
        for resource in resources or []:
            self.add_resource(resource)

    def add_resource(self, resource: Resource) -> None:
        self._resources[resource.resource_id] = deepcopy(resource)

    def role_id(self, name: str) -> int:
        return next(role.id for role in self._roles if role.name == name)

    def get_resource(self, resource_id: int) -> Resource | None:
        resource = self._resources.get(resource_id)
        return deepcopy(resource) if resource else None

    async def get_all_resource_roles(self) -> list[LookupValue]:
        return list(self._roles)

    async def search_resources(self, search_filter: Filter) -> list[Resource]:
        return [
            deepcopy(resource)
            for resource in self._resources.values()
            if search_filter.matches(resource)
        ]

    async def update_resource(self, resource: Resource, operator: str) -> None:
        if resource.resource_id not in self._resources:
            raise StorePersistenceError(
                f"Resource {resource.resource_id} does not exist",
                {"resource_id": resource.resource_id},
            )
        stored = deepcopy(resource)
        stored.modified_by = operator
        stored.modified_at = utcnow()
        self._resources[resource.resource_id] = stored
        self.audit_log.append(("update_resource", resource.resource_id, operator))


class InMemoryUploadCatalog(UploadCatalog):
    """Uploads, submissions and their lookup catalogs."""

    def __init__(
        self,
        upload_statuses: list[LookupValue] | None = None,
        upload_types: list[LookupValue] | None = None,
        submission_statuses: list[LookupValue] | None = None,
    ):
        self._upload_statuses = (
            list(upload_statuses)
            if upload_statuses is not None
            else lookup_values(DEFAULT_UPLOAD_STATUSES)
        )
        self._upload_types = (
            list(upload_types) if upload_types is not None else lookup_values(DEFAULT_UPLOAD_TYPES)
        )
        self._submission_statuses = (
            list(submission_statuses)
            if submission_statuses is not None
            else lookup_values(DEFAULT_SUBMISSION_STATUSES)
        )
        self.uploads: dict[int, Upload] = {}
        self.submissions: dict[int, Submission] = {}
        self.audit_log: list[tuple[str, int, str]] = []
        self._upload_ids = count(1)
        self._submission_ids = count(1)

    def status(self, name: str) -> LookupValue:
        return next(s for s in self._submission_statuses if s.name == name)

    def add_submission(self, submission: Submission) -> Submission:
        """Seed an existing submission without recording an audit entry."""
        stored = deepcopy(submission)
        if stored.submission_id is None:
            stored.submission_id = next(self._submission_ids)
        self.submissions[stored.submission_id] = stored
        return deepcopy(stored)

    async def get_all_upload_statuses(self) -> list[LookupValue]:
        return list(self._upload_statuses)

    async def get_all_upload_types(self) -> list[LookupValue]:
        return list(self._upload_types)

    async def get_all_submission_statuses(self) -> list[LookupValue]:
        return list(self._submission_statuses)

    async def create_upload(self, upload: Upload, operator: str) -> Upload:
        upload.upload_id = next(self._upload_ids)
        upload.created_by = upload.modified_by = operator
        upload.created_at = upload.modified_at = utcnow()
        self.uploads[upload.upload_id] = deepcopy(upload)
        self.audit_log.append(("create_upload", upload.upload_id, operator))
        return upload

    async def create_submission(self, submission: Submission, operator: str) -> Submission:
        submission.submission_id = next(self._submission_ids)
        while submission.submission_id in self.submissions:
            submission.submission_id = next(self._submission_ids)
        submission.created_by = submission.modified_by = operator
        submission.created_at = submission.modified_at = utcnow()
        self.submissions[submission.submission_id] = deepcopy(submission)
        self.audit_log.append(("create_submission", submission.submission_id, operator))
        return submission

    async def update_submission(self, submission: Submission, operator: str) -> None:
        if submission.submission_id not in self.submissions:
            raise StorePersistenceError(
                f"Submission {submission.submission_id} does not exist",
                {"submission_id": submission.submission_id},
            )
        submission.modified_by = operator
        submission.modified_at = utcnow()
        self.submissions[submission.submission_id] = deepcopy(submission)
        self.audit_log.append(("update_submission", submission.submission_id, operator))

    async def get_submission(self, submission_id: int) -> Submission | None:
        submission = self.submissions.get(submission_id)
        return deepcopy(submission) if submission else None

    async def search_submissions(self, search_filter: Filter) -> list[Submission]:
        return [
            deepcopy(submission)
            for submission in self.submissions.values()
            if search_filter.matches(submission)
        ]


class InMemoryScreeningTrigger(ScreeningTrigger):
    """Records screening requests; refuses a second one per submission."""

    def __init__(self):
        self.requests: list[tuple[int, str]] = []

    async def initiate_screening(self, submission_id: int, operator: str) -> None:
        if any(existing == submission_id for existing, _ in self.requests):
            raise ScreeningTaskExistsError(submission_id)
        self.requests.append((submission_id, operator))
        logger.debug("screening_task_queued", submission_id=submission_id, operator=operator)


def in_memory_managers(
    projects: list[Project] | None = None,
    phases: list[Phase] | None = None,
    resources: list[Resource] | None = None,
) -> UploadManagers:
    """Build a collaborator bundle backed entirely by in-memory stores."""
    return UploadManagers(
        projects=InMemoryProjectStore(projects),
        phases=InMemoryPhaseTracker(phases),
        resources=InMemoryResourceDirectory(resources=resources),
        catalog=InMemoryUploadCatalog(),
        screening=InMemoryScreeningTrigger(),
    )
