"""Retire a user's superseded submissions."""

from collections.abc import Collection, Sequence

from review_platform.shared.utils.logging import get_logger
from review_platform.uploads.base import LookupValue, Resource
from review_platform.uploads.catalog import require_by_name
from review_platform.uploads.config import UploadSettings, get_settings
from review_platform.uploads.exceptions import guard_external_call
from review_platform.uploads.filters import submission_resource_filter
from review_platform.uploads.providers import UploadCatalog
from review_platform.uploads.status import StatusTransitionService

logger = get_logger(__name__)


class RetirementPolicy:
    """Marks every prior submission of a resource as Deleted."""

    def __init__(
        self,
        catalog: UploadCatalog,
        transitions: StatusTransitionService,
        settings: UploadSettings | None = None,
    ):
        self._catalog = catalog
        self._transitions = transitions
        self._settings = settings or get_settings()

    async def retire(
        self,
        user_id: int,
        resource: Resource,
        status_catalog: Sequence[LookupValue],
        exclude_ids: Collection[int] = (),
    ) -> list[int]:
        """
        Move the resource's submissions to the Deleted status.

        Each submission is transitioned and persisted on its own; a failure
        part way through leaves earlier ones retired and later ones as they
        were.

        Args:
            user_id: Acting user, credited as operator
            resource: Resource whose submissions are retired
            status_catalog: Submission statuses already fetched by the caller
            exclude_ids: Submissions to leave alone, e.g. the one just created

        Returns:
            Ids of the retired submissions, in processing order

        Raises:
            NoSuchStatusError: The catalog has no Deleted status
        """
        deleted = require_by_name(status_catalog, self._settings.deleted_status_name)
        operator = str(user_id)

        with guard_external_call("search submissions", resource_id=resource.resource_id):
            search_filter = submission_resource_filter(resource.resource_id)
            previous = await self._catalog.search_submissions(search_filter)

        retired: list[int] = []
        for submission in previous:
            if submission.submission_id in exclude_ids:
                continue
            updated = await self._transitions.transition(
                submission.submission_id,
                deleted.id,
                operator,
            )
            with guard_external_call("update submission", submission_id=submission.submission_id):
                await self._catalog.update_submission(updated, operator)
            retired.append(submission.submission_id)

        logger.info(
            "previous_submissions_retired",
            user_id=user_id,
            resource_id=resource.resource_id,
            retired=retired,
        )
        return retired
