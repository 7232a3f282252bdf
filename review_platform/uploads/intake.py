"""Submission intake: turns an upload request into catalog writes.

Every call runs the same sequence against the collaborators, one awaited
call at a time:

    validate → load project → authorise resource → (winner check) →
    phase gate → create upload → (create submission, link resource,
    start screening) → (retire prior submissions)

Nothing is written before the phase gate passes. After that the writes are
not transactional: if a later step fails, earlier writes stay in place and a
retry creates a fresh upload.
"""

from review_platform.shared.utils.logging import get_logger
from review_platform.uploads.authorization import RoleAuthorizer
from review_platform.uploads.base import (
    CategoryRule,
    LookupValue,
    Phase,
    Project,
    Resource,
    Submission,
    SubmissionCategory,
    Upload,
)
from review_platform.uploads.catalog import require_by_name
from review_platform.uploads.config import CATEGORY_RULES, UploadSettings, get_settings
from review_platform.uploads.exceptions import (
    NoMatchingPhaseError,
    NotWinnerError,
    ProjectNotEligibleError,
    ProjectNotFoundError,
    guard_external_call,
)
from review_platform.uploads.phase_gate import PhaseGate
from review_platform.uploads.providers import UploadManagers
from review_platform.uploads.retirement import RetirementPolicy
from review_platform.uploads.schemas import UploadRequest, parse_request
from review_platform.uploads.status import StatusTransitionService

logger = get_logger(__name__)


class SubmissionIntake:
    """
    Creates submissions, final fixes and test case uploads.

    Coordinates:
    - Phase gating per category
    - Role authorisation of the acting user
    - Upload and submission records in the catalog
    - Resource association and screening for general submissions
    - Retirement of superseded submissions
    """

    def __init__(
        self,
        managers: UploadManagers,
        settings: UploadSettings | None = None,
        phase_gate: PhaseGate | None = None,
        authorizer: RoleAuthorizer | None = None,
        retirement: RetirementPolicy | None = None,
    ):
        """
        Initialize submission intake.

        Args:
            managers: Collaborator bundle
            settings: Upload settings (cached settings when omitted)
            phase_gate: Phase gate instance
            authorizer: Role authorizer instance
            retirement: Retirement policy instance
        """
        self._managers = managers
        self._settings = settings or get_settings()
        self._phase_gate = phase_gate or PhaseGate(managers.phases)
        self._authorizer = authorizer or RoleAuthorizer(managers.resources, self._settings)
        self._retirement = retirement or RetirementPolicy(
            managers.catalog,
            StatusTransitionService(managers.catalog, self._settings),
            self._settings,
        )

    async def create_submission(self, project_id: int, user_id: int, filename: str) -> int:
        """Upload a general submission; returns the new submission id."""
        return await self.create(SubmissionCategory.SUBMISSION, project_id, user_id, filename)

    async def create_final_fix(self, project_id: int, user_id: int, filename: str) -> int:
        """Upload the winner's final fix; returns the new upload id."""
        return await self.create(SubmissionCategory.FINAL_FIX, project_id, user_id, filename)

    async def create_test_cases(self, project_id: int, user_id: int, filename: str) -> int:
        """Upload a reviewer's test cases; returns the new upload id."""
        return await self.create(SubmissionCategory.TEST_CASES, project_id, user_id, filename)

    async def create(
        self,
        category: SubmissionCategory,
        project_id: int,
        user_id: int,
        filename: str,
    ) -> int:
        """
        Run the intake sequence for one upload.

        Args:
            category: Kind of upload
            project_id: Target project
            user_id: Acting platform user
            filename: Name of the uploaded file, stored as the upload parameter

        Returns:
            The new submission id for general submissions, otherwise the new
            upload id

        Raises:
            InvalidArgumentError: Malformed arguments
            ProjectNotFoundError: Unknown project
            NoSuchRoleError, AmbiguousOrMissingUserError: Authorisation failed
            NotWinnerError: Final fix from someone other than the winner
            ProjectNotEligibleError: The project has no gating phase
            PhaseNotOpenError: The gating phase is not open
            NoSuchStatusError: A required status or upload type is missing
            PersistenceFailure, OrchestrationFailure: A collaborator failed
        """
        request = parse_request(
            UploadRequest,
            category=category,
            project_id=project_id,
            user_id=user_id,
            filename=filename,
        )
        rule = CATEGORY_RULES[request.category]

        project = await self._load_project(request.project_id)
        resource = await self._authorizer.authorize(
            request.project_id,
            request.user_id,
            rule.role_names,
        )
        if rule.requires_winner:
            self._check_winner(project, request.user_id)

        phase = await self._open_phase(request.project_id, rule)

        upload = await self._create_upload(request, rule)
        logger.info(
            "upload_created",
            category=request.category.value,
            project_id=request.project_id,
            user_id=request.user_id,
            upload_id=upload.upload_id,
            phase_id=phase.phase_id,
            filename=request.filename,
        )

        statuses: list[LookupValue] | None = None
        submission: Submission | None = None
        if rule.creates_submission:
            statuses = await self._submission_statuses()
            submission = await self._create_submission(request, upload, resource, statuses)

        if self._should_retire(project, rule):
            if statuses is None:
                statuses = await self._submission_statuses()
            exclude = (submission.submission_id,) if submission is not None else ()
            await self._retirement.retire(request.user_id, resource, statuses, exclude)

        if submission is not None:
            return submission.submission_id
        return upload.upload_id

    # ===========================================
    # STEPS
    # ===========================================

    async def _load_project(self, project_id: int) -> Project:
        with guard_external_call("get project", project_id=project_id):
            project = await self._managers.projects.get_project(project_id)
        if project is None:
            logger.error("project_not_found", project_id=project_id)
            raise ProjectNotFoundError(project_id)
        return project

    def _check_winner(self, project: Project, user_id: int) -> None:
        """Raise unless the project's winner property names ``user_id``.

        Numbers compare by value, so 1001.0 names user 1001. Strings are
        trimmed and parsed as ints. Booleans and anything unparseable never
        match.
        """
        winner = project.get_property(self._settings.winner_property)
        if isinstance(winner, bool):
            is_winner = False
        elif isinstance(winner, (int, float)):
            is_winner = winner == user_id
        else:
            try:
                is_winner = winner is not None and int(str(winner).strip()) == user_id
            except ValueError:
                is_winner = False
        if not is_winner:
            logger.error(
                "user_not_winner",
                project_id=project.project_id,
                user_id=user_id,
            )
            raise NotWinnerError(user_id, project.project_id)

    async def _open_phase(self, project_id: int, rule: CategoryRule) -> Phase:
        try:
            return await self._phase_gate.phase_open(project_id, rule.phase_names)
        except NoMatchingPhaseError as e:
            raise ProjectNotEligibleError(project_id, e.phase_names) from e

    async def _create_upload(self, request: UploadRequest, rule: CategoryRule) -> Upload:
        with guard_external_call("get upload statuses", project_id=request.project_id):
            upload_statuses = await self._managers.catalog.get_all_upload_statuses()
        with guard_external_call("get upload types", project_id=request.project_id):
            upload_types = await self._managers.catalog.get_all_upload_types()

        upload = Upload(
            project_id=request.project_id,
            owner=request.user_id,
            upload_type=require_by_name(upload_types, rule.upload_type_name, "upload type"),
            status=require_by_name(
                upload_statuses, self._settings.active_status_name, "upload status"
            ),
            parameter=request.filename,
        )
        with guard_external_call(
            "create upload", project_id=request.project_id, user_id=request.user_id
        ):
            return await self._managers.catalog.create_upload(upload, request.operator)

    async def _submission_statuses(self) -> list[LookupValue]:
        with guard_external_call("get submission statuses"):
            return await self._managers.catalog.get_all_submission_statuses()

    async def _create_submission(
        self,
        request: UploadRequest,
        upload: Upload,
        resource: Resource,
        statuses: list[LookupValue],
    ) -> Submission:
        operator = request.operator
        submission = Submission(
            status=require_by_name(statuses, self._settings.active_status_name),
            upload_id=upload.upload_id,
            resource_id=resource.resource_id,
        )
        with guard_external_call(
            "create submission", project_id=request.project_id, user_id=request.user_id
        ):
            submission = await self._managers.catalog.create_submission(submission, operator)
        logger.info(
            "submission_created",
            project_id=request.project_id,
            user_id=request.user_id,
            submission_id=submission.submission_id,
        )

        resource.add_submission(submission.submission_id)
        with guard_external_call(
            "update resource", project_id=request.project_id, user_id=request.user_id
        ):
            await self._managers.resources.update_resource(resource, operator)
        logger.info(
            "resource_updated",
            resource_id=resource.resource_id,
            submission_id=submission.submission_id,
            operator=operator,
        )

        with guard_external_call(
            "initiate screening", submission_id=submission.submission_id
        ):
            await self._managers.screening.initiate_screening(
                submission.submission_id, operator
            )
        logger.info(
            "screening_initiated",
            submission_id=submission.submission_id,
            operator=operator,
        )
        return submission

    def _should_retire(self, project: Project, rule: CategoryRule) -> bool:
        if rule.always_retire:
            return True
        return not project.flag(self._settings.allow_multiple_submissions_property)
