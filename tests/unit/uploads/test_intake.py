"""Unit tests for SubmissionIntake."""

import pytest

from review_platform.uploads.base import PhaseStatus, Submission, SubmissionCategory, Upload
from review_platform.uploads.exceptions import (
    AmbiguousOrMissingUserError,
    InvalidArgumentError,
    NoSuchStatusError,
    NotWinnerError,
    OrchestrationFailure,
    PersistenceFailure,
    PhaseNotOpenError,
    ProjectNotEligibleError,
    ProjectNotFoundError,
    ScreeningTaskExistsError,
    StorePersistenceError,
)
from review_platform.uploads.intake import SubmissionIntake
from review_platform.uploads.memory import lookup_values
from tests.factories import (
    OTHER_SUBMITTER_RESOURCE_ID,
    PROJECT_ID,
    REVIEWER_ID,
    REVIEWER_RESOURCE_ID,
    SUBMITTER_ID,
    SUBMITTER_RESOURCE_ID,
    build_world,
    make_phase,
    make_project,
    make_resource,
)

FINAL_FIX_OPEN = [
    make_phase(1, "Submission", PhaseStatus.CLOSED),
    make_phase(2, "Review", PhaseStatus.CLOSED),
    make_phase(3, "Final Fix", PhaseStatus.OPEN),
]

REVIEW_OPEN = [
    make_phase(1, "Submission", PhaseStatus.CLOSED),
    make_phase(2, "Review", PhaseStatus.OPEN),
]


def wire_happy_path(managers) -> None:
    """Point AsyncMock collaborators at a project with an open Submission phase."""
    managers.projects.get_project.return_value = make_project()
    managers.phases.get_phases.return_value = [make_phase(2, "Submission")]
    managers.resources.search_resources.return_value = [
        make_resource(SUBMITTER_RESOURCE_ID, 1, SUBMITTER_ID)
    ]
    managers.catalog.create_upload.return_value = Upload(upload_id=500)
    managers.catalog.create_submission.return_value = Submission(submission_id=700)


class TestCreateSubmission:
    """Tests for general submissions."""

    @pytest.fixture
    def intake(self, world, settings) -> SubmissionIntake:
        return SubmissionIntake(world.managers, settings)

    @pytest.mark.asyncio
    async def test_creates_active_submission(self, world, intake):
        submission_id = await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "solution.zip")

        submission = world.catalog.submissions[submission_id]
        assert submission.status.name == "Active"
        assert submission.resource_id == SUBMITTER_RESOURCE_ID
        assert submission.created_by == str(SUBMITTER_ID)

    @pytest.mark.asyncio
    async def test_creates_upload(self, world, intake):
        submission_id = await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "solution.zip")

        upload = world.catalog.uploads[world.catalog.submissions[submission_id].upload_id]
        assert upload.project_id == PROJECT_ID
        assert upload.owner == SUBMITTER_ID
        assert upload.parameter == "solution.zip"
        assert upload.upload_type.name == "Submission"
        assert upload.status.name == "Active"
        assert upload.created_by == str(SUBMITTER_ID)

    @pytest.mark.asyncio
    async def test_links_submission_to_resource(self, world, intake):
        submission_id = await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "solution.zip")

        resource = world.resources.get_resource(SUBMITTER_RESOURCE_ID)
        assert submission_id in resource.submissions
        assert resource.modified_by == str(SUBMITTER_ID)

    @pytest.mark.asyncio
    async def test_starts_screening(self, world, intake):
        submission_id = await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "solution.zip")

        assert world.screening.requests == [(submission_id, str(SUBMITTER_ID))]

    @pytest.mark.asyncio
    async def test_write_order(self, world, intake):
        submission_id = await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "solution.zip")

        operator = str(SUBMITTER_ID)
        assert world.writes == [
            ("create_upload", 1, operator),
            ("create_submission", submission_id, operator),
            ("update_resource", SUBMITTER_RESOURCE_ID, operator),
        ]

    @pytest.mark.asyncio
    async def test_screening_phase_also_accepts(self, settings):
        world = build_world(
            phases=[
                make_phase(1, "Registration", PhaseStatus.CLOSED),
                make_phase(2, "Screening", PhaseStatus.OPEN),
            ]
        )
        intake = SubmissionIntake(world.managers, settings)

        submission_id = await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "late.zip")

        assert submission_id in world.catalog.submissions

    @pytest.mark.asyncio
    async def test_closed_phase_writes_nothing(self, settings):
        world = build_world(phases=[make_phase(2, "Submission", PhaseStatus.CLOSED)])
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(PhaseNotOpenError):
            await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "solution.zip")

        assert world.writes == []
        assert world.catalog.uploads == {}
        assert world.screening.requests == []

    @pytest.mark.asyncio
    async def test_no_submission_phase(self, settings):
        world = build_world(phases=[make_phase(1, "Registration", PhaseStatus.OPEN)])
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(ProjectNotEligibleError) as exc_info:
            await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "solution.zip")

        assert exc_info.value.phase_names == ["Submission", "Screening"]
        assert world.writes == []

    @pytest.mark.asyncio
    async def test_unknown_project(self, world, intake):
        with pytest.raises(ProjectNotFoundError) as exc_info:
            await intake.create_submission(404, SUBMITTER_ID, "solution.zip")

        assert exc_info.value.project_id == 404
        assert world.writes == []

    @pytest.mark.asyncio
    async def test_reviewer_cannot_submit(self, world, intake):
        with pytest.raises(AmbiguousOrMissingUserError):
            await intake.create_submission(PROJECT_ID, REVIEWER_ID, "solution.zip")

        assert world.writes == []


class TestExclusivity:
    """Tests for retirement of prior submissions."""

    @pytest.mark.asyncio
    async def test_prior_retired_when_multiple_disallowed(self, settings):
        world = build_world(project=make_project(allow_multiple="false"))
        prior = world.add_prior_submission()
        intake = SubmissionIntake(world.managers, settings)

        new_id = await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "v2.zip")

        assert world.submission_status(prior.submission_id) == "Deleted"
        assert world.submission_status(new_id) == "Active"

    @pytest.mark.asyncio
    async def test_missing_flag_means_disallowed(self, settings):
        world = build_world(project=make_project(allow_multiple=None))
        prior = world.add_prior_submission()
        intake = SubmissionIntake(world.managers, settings)

        await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "v2.zip")

        assert world.submission_status(prior.submission_id) == "Deleted"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("flag", ["true", "TRUE", " True ", True])
    async def test_prior_kept_when_multiple_allowed(self, settings, flag):
        world = build_world(project=make_project(allow_multiple=flag))
        prior = world.add_prior_submission()
        intake = SubmissionIntake(world.managers, settings)

        new_id = await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "v2.zip")

        assert world.submission_status(prior.submission_id) == "Active"
        assert world.submission_status(new_id) == "Active"
        assert ("update_submission", prior.submission_id, str(SUBMITTER_ID)) not in world.writes

    @pytest.mark.asyncio
    async def test_non_boolean_flag_means_disallowed(self, settings):
        world = build_world(project=make_project(allow_multiple="yes"))
        prior = world.add_prior_submission()
        intake = SubmissionIntake(world.managers, settings)

        await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "v2.zip")

        assert world.submission_status(prior.submission_id) == "Deleted"

    @pytest.mark.asyncio
    async def test_other_users_submissions_untouched(self, settings):
        world = build_world()
        theirs = world.add_prior_submission(resource_id=OTHER_SUBMITTER_RESOURCE_ID)
        intake = SubmissionIntake(world.managers, settings)

        await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "v2.zip")

        assert world.submission_status(theirs.submission_id) == "Active"

    @pytest.mark.asyncio
    async def test_status_catalog_fetched_once(self, mock_managers, settings):
        wire_happy_path(mock_managers)
        intake = SubmissionIntake(mock_managers, settings)

        await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "v2.zip")

        assert mock_managers.catalog.get_all_submission_statuses.await_count == 1


class TestCreateFinalFix:
    """Tests for final fix uploads."""

    @pytest.mark.asyncio
    async def test_winner_uploads(self, settings):
        world = build_world(project=make_project(winner=SUBMITTER_ID), phases=FINAL_FIX_OPEN)
        intake = SubmissionIntake(world.managers, settings)

        upload_id = await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

        upload = world.catalog.uploads[upload_id]
        assert upload.upload_type.name == "Final Fix"
        assert upload.parameter == "fix.zip"
        assert world.catalog.audit_log[0] == ("create_upload", upload_id, str(SUBMITTER_ID))

    @pytest.mark.asyncio
    async def test_returns_upload_id_not_submission_id(self, settings):
        world = build_world(project=make_project(winner=SUBMITTER_ID), phases=FINAL_FIX_OPEN)
        intake = SubmissionIntake(world.managers, settings)

        upload_id = await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

        assert upload_id in world.catalog.uploads
        assert world.catalog.submissions == {}
        assert world.screening.requests == []

    @pytest.mark.asyncio
    async def test_winner_as_padded_string(self, settings):
        world = build_world(
            project=make_project(winner=f" {SUBMITTER_ID} "), phases=FINAL_FIX_OPEN
        )
        intake = SubmissionIntake(world.managers, settings)

        upload_id = await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

        assert upload_id in world.catalog.uploads

    @pytest.mark.asyncio
    async def test_winner_as_integral_float(self, settings):
        world = build_world(
            project=make_project(winner=float(SUBMITTER_ID)), phases=FINAL_FIX_OPEN
        )
        intake = SubmissionIntake(world.managers, settings)

        upload_id = await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

        assert upload_id in world.catalog.uploads

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "winner",
        [REVIEWER_ID, str(REVIEWER_ID), "not-a-number", None, SUBMITTER_ID + 0.5, True],
    )
    async def test_non_winner_rejected(self, settings, winner):
        world = build_world(project=make_project(winner=winner), phases=FINAL_FIX_OPEN)
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(NotWinnerError) as exc_info:
            await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

        assert exc_info.value.user_id == SUBMITTER_ID
        assert world.writes == []

    @pytest.mark.asyncio
    async def test_winner_checked_before_phase(self, settings):
        world = build_world(project=make_project(winner=REVIEWER_ID))
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(NotWinnerError):
            await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

    @pytest.mark.asyncio
    async def test_scheduled_final_fix_phase(self, settings):
        world = build_world(project=make_project(winner=SUBMITTER_ID))
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(PhaseNotOpenError):
            await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

        assert world.writes == []

    @pytest.mark.asyncio
    async def test_no_final_fix_phase(self, settings):
        world = build_world(
            project=make_project(winner=SUBMITTER_ID),
            phases=[make_phase(1, "Submission", PhaseStatus.OPEN)],
        )
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(ProjectNotEligibleError):
            await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

    @pytest.mark.asyncio
    async def test_always_retires(self, settings):
        """Final fixes retire prior submissions even when multiples are allowed."""
        world = build_world(
            project=make_project(allow_multiple="true", winner=SUBMITTER_ID),
            phases=FINAL_FIX_OPEN,
        )
        prior = world.add_prior_submission()
        intake = SubmissionIntake(world.managers, settings)

        await intake.create_final_fix(PROJECT_ID, SUBMITTER_ID, "fix.zip")

        assert world.submission_status(prior.submission_id) == "Deleted"


class TestCreateTestCases:
    """Tests for reviewer test case uploads."""

    @pytest.mark.asyncio
    async def test_reviewer_uploads(self, settings):
        world = build_world(phases=REVIEW_OPEN)
        intake = SubmissionIntake(world.managers, settings)

        upload_id = await intake.create_test_cases(PROJECT_ID, REVIEWER_ID, "tests.zip")

        upload = world.catalog.uploads[upload_id]
        assert upload.upload_type.name == "Review"
        assert upload.owner == REVIEWER_ID
        assert world.catalog.submissions == {}

    @pytest.mark.asyncio
    async def test_submitter_cannot_upload_test_cases(self, settings):
        world = build_world(phases=REVIEW_OPEN)
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(AmbiguousOrMissingUserError):
            await intake.create_test_cases(PROJECT_ID, SUBMITTER_ID, "tests.zip")

    @pytest.mark.asyncio
    async def test_review_phase_closed(self, world, settings):
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(PhaseNotOpenError):
            await intake.create_test_cases(PROJECT_ID, REVIEWER_ID, "tests.zip")

        assert world.writes == []

    @pytest.mark.asyncio
    async def test_retires_reviewer_resource_submissions(self, settings):
        world = build_world(phases=REVIEW_OPEN)
        mine = world.add_prior_submission(resource_id=REVIEWER_RESOURCE_ID)
        submitters = world.add_prior_submission()
        intake = SubmissionIntake(world.managers, settings)

        await intake.create_test_cases(PROJECT_ID, REVIEWER_ID, "tests.zip")

        assert world.submission_status(mine.submission_id) == "Deleted"
        assert world.submission_status(submitters.submission_id) == "Active"

    @pytest.mark.asyncio
    async def test_generic_create(self, settings):
        world = build_world(phases=REVIEW_OPEN)
        intake = SubmissionIntake(world.managers, settings)

        upload_id = await intake.create(
            SubmissionCategory.TEST_CASES, PROJECT_ID, REVIEWER_ID, "tests.zip"
        )

        assert upload_id in world.catalog.uploads


class TestValidation:
    """Tests for argument validation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("project_id", "user_id", "filename", "field"),
        [
            (-1, SUBMITTER_ID, "a.zip", "project_id"),
            (PROJECT_ID, -5, "a.zip", "user_id"),
            (PROJECT_ID, SUBMITTER_ID, "", "filename"),
            (PROJECT_ID, SUBMITTER_ID, "   ", "filename"),
            (PROJECT_ID, SUBMITTER_ID, None, "filename"),
        ],
    )
    async def test_invalid_arguments(
        self, mock_managers, settings, project_id, user_id, filename, field
    ):
        intake = SubmissionIntake(mock_managers, settings)

        with pytest.raises(InvalidArgumentError) as exc_info:
            await intake.create_submission(project_id, user_id, filename)

        assert exc_info.value.field == field
        mock_managers.projects.get_project.assert_not_awaited()


class TestCollaboratorFailures:
    """Tests for store and collaborator errors."""

    @pytest.mark.asyncio
    async def test_project_store_failure(self, mock_managers, settings):
        mock_managers.projects.get_project.side_effect = StorePersistenceError("down")
        intake = SubmissionIntake(mock_managers, settings)

        with pytest.raises(PersistenceFailure) as exc_info:
            await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "a.zip")

        assert isinstance(exc_info.value.cause, StorePersistenceError)

    @pytest.mark.asyncio
    async def test_screening_conflict(self, mock_managers, settings):
        wire_happy_path(mock_managers)
        mock_managers.screening.initiate_screening.side_effect = ScreeningTaskExistsError(700)
        intake = SubmissionIntake(mock_managers, settings)

        with pytest.raises(OrchestrationFailure) as exc_info:
            await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "a.zip")

        assert exc_info.value.error_type == "orchestration_failure"
        mock_managers.resources.update_resource.assert_awaited_once()
        mock_managers.catalog.search_submissions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_upload_type(self, mock_managers, settings):
        wire_happy_path(mock_managers)
        mock_managers.catalog.get_all_upload_types.return_value = lookup_values(["Review"])
        intake = SubmissionIntake(mock_managers, settings)

        with pytest.raises(NoSuchStatusError) as exc_info:
            await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "a.zip")

        assert exc_info.value.catalog == "upload type"
        mock_managers.catalog.create_upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_submission_leaves_orphan_upload(self, world, settings, monkeypatch):
        async def failing_create(submission, operator):
            raise StorePersistenceError("insert failed")

        monkeypatch.setattr(world.catalog, "create_submission", failing_create)
        intake = SubmissionIntake(world.managers, settings)

        with pytest.raises(PersistenceFailure):
            await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "a.zip")

        assert len(world.catalog.uploads) == 1
        assert world.catalog.submissions == {}
        assert world.resources.audit_log == []

    @pytest.mark.asyncio
    async def test_retry_creates_second_upload(self, world, settings):
        intake = SubmissionIntake(world.managers, settings)

        await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "a.zip")
        await intake.create_submission(PROJECT_ID, SUBMITTER_ID, "a.zip")

        assert len(world.catalog.uploads) == 2
