"""
Organization discovery helpers.
"""

import logging
from typing import List, Tuple

from .client import CloudFoundryClient
from .models import App, Org, ServiceInstance, Space

logger = logging.getLogger(__name__)


def list_sandbox_orgs(client: CloudFoundryClient, prefix: str) -> List[Org]:
    """
    List organizations whose name starts with the sandbox prefix.

    Args:
        client: Platform client
        prefix: Organization name prefix

    Returns:
        Matching organizations in API order
    """
    sandboxes = [org for org in client.list_orgs() if org.name.startswith(prefix)]
    logger.info(f"Found {len(sandboxes)} sandbox organizations with prefix '{prefix}'")
    return sandboxes


def list_org_resources(
    client: CloudFoundryClient,
    org: Org,
) -> Tuple[List[Space], List[App], List[ServiceInstance]]:
    """
    Fetch the spaces, applications and service instances of an organization.

    Returns:
        Tuple of (spaces, apps, instances)
    """
    query = f"organization_guid:{org.guid}"

    apps = client.list_apps_by_query(query)
    instances = client.list_service_instances_by_query(query)
    spaces = client.list_org_spaces(org.guid)

    return spaces, apps, instances
