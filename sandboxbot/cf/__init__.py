"""
Platform API client and resource models.
"""

from .client import CloudFoundryClient
from .models import App, Org, ServiceInstance, Space, SpaceRole
from .orgs import list_org_resources, list_sandbox_orgs

__all__ = [
    "CloudFoundryClient",
    "App",
    "Org",
    "ServiceInstance",
    "Space",
    "SpaceRole",
    "list_org_resources",
    "list_sandbox_orgs",
]
