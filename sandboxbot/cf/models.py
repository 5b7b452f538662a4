"""
Data models for platform resources.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Org:
    """An organization on the platform."""
    guid: str
    name: str


@dataclass(frozen=True)
class Space:
    """A tenant workspace inside an organization."""
    guid: str
    name: str
    org_guid: str


@dataclass(frozen=True)
class App:
    """An application deployed to a space."""
    guid: str
    name: str
    space_guid: str
    created_at: str  # raw RFC 3339 string as returned by the API


@dataclass(frozen=True)
class ServiceInstance:
    """A service instance provisioned in a space."""
    guid: str
    name: str
    space_guid: str
    created_at: str


@dataclass
class SpaceRole:
    """A user together with the roles they hold in one space."""
    guid: str
    username: str
    space_roles: List[str] = field(default_factory=list)
