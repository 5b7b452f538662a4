"""
Purge a sandbox space.
"""

import logging

from ..cf.client import CloudFoundryClient
from ..cf.models import Space
from ..errors import DeleteError

logger = logging.getLogger(__name__)


def purge_space(client: CloudFoundryClient, space: Space) -> None:
    """
    Delete a space; if that fails, delete every application inside it.

    When the fallback clears all applications the original space deletion
    error is still raised, since the space object itself is left behind.

    Args:
        client: Platform client
        space: Space to purge

    Raises:
        DeleteError: The first failing app deletion, or the original space
            deletion error once all apps were removed
        UpstreamListError: If listing the space's apps for the fallback fails
    """
    try:
        client.delete_space(space.guid, recursive=True)
    except DeleteError as space_error:
        logger.warning(f"Failed to delete space {space.name} ({space.guid}): {space_error}; deleting its apps")

        apps = client.list_apps_by_space(space.guid)
        for app in apps:
            client.delete_app(app.guid)
            logger.info(f"Deleted app {app.name} ({app.guid}) from space {space.name}")

        raise

    logger.info(f"Deleted space {space.name} ({space.guid})")
