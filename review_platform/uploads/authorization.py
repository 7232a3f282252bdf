"""Resolve the resource a user acts through on a project."""

from collections.abc import Sequence

from review_platform.shared.utils.logging import get_logger
from review_platform.uploads.base import Resource
from review_platform.uploads.catalog import ids_for_names
from review_platform.uploads.config import UploadSettings, get_settings
from review_platform.uploads.exceptions import (
    AmbiguousOrMissingUserError,
    NoSuchRoleError,
    guard_external_call,
)
from review_platform.uploads.filters import acting_resource_filter
from review_platform.uploads.providers import ResourceDirectory

logger = get_logger(__name__)


class RoleAuthorizer:
    """Finds the single resource holding an allowed role for a user."""

    def __init__(
        self,
        directory: ResourceDirectory,
        settings: UploadSettings | None = None,
    ):
        self._directory = directory
        self._settings = settings or get_settings()

    async def resolve_role_ids(self, role_names: Sequence[str]) -> list[int]:
        """Ids of the directory roles named in ``role_names``."""
        with guard_external_call("get resource roles"):
            roles = await self._directory.get_all_resource_roles()
        return ids_for_names(roles, role_names)

    async def authorize(
        self,
        project_id: int,
        user_id: int,
        role_names: Sequence[str],
    ) -> Resource:
        """
        Return the user's resource on the project.

        Args:
            project_id: Project the user acts on
            user_id: Platform user id
            role_names: Roles that may perform the action

        Returns:
            The only resource matching (roles, project, user)

        Raises:
            NoSuchRoleError: None of ``role_names`` exists in the directory
            AmbiguousOrMissingUserError: Zero or several resources match
        """
        role_ids = await self.resolve_role_ids(role_names)
        if not role_ids:
            logger.error(
                "no_resource_role",
                user_id=user_id,
                role_names=list(role_names),
            )
            raise NoSuchRoleError(list(role_names), user_id)

        with guard_external_call("search resources", project_id=project_id, user_id=user_id):
            search_filter = acting_resource_filter(
                role_ids,
                project_id,
                self._settings.external_reference_property,
                user_id,
            )
            resources = await self._directory.search_resources(search_filter)

        if len(resources) != 1:
            logger.error(
                "resource_not_resolved",
                project_id=project_id,
                user_id=user_id,
                match_count=len(resources),
            )
            raise AmbiguousOrMissingUserError(user_id, project_id, len(resources))

        resource = resources[0]
        logger.debug(
            "resource_authorized",
            project_id=project_id,
            user_id=user_id,
            resource_id=resource.resource_id,
            role_id=resource.role_id,
        )
        return resource
