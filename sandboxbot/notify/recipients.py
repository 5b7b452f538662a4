"""
Work out who to notify about a space from its role assignments.
"""

import re
from email.utils import parseaddr
from typing import Iterable, List, Set, Tuple

from ..cf.models import SpaceRole

SPACE_DEVELOPER = "space_developer"
SPACE_MANAGER = "space_manager"

_ADDRESS = re.compile(r"^[^@\s<>]+@[^@\s<>]+$")


def is_email_address(value: str) -> bool:
    """Check whether a username is usable as a mail recipient."""
    _, address = parseaddr(value or "")
    return bool(address) and bool(_ADDRESS.match(address))


def list_recipients(
    user_guids: Set[str],
    roles: Iterable[SpaceRole],
) -> Tuple[List[str], List[str], List[str]]:
    """
    Get recipient addresses and role holders from space roles.

    Roles of users outside ``user_guids`` (the organization's members) are
    ignored.

    Args:
        user_guids: Ids of the organization's users
        roles: Role assignments of one space

    Returns:
        Tuple of (addresses, developer_guids, manager_guids)
    """
    addresses: List[str] = []
    developers: List[str] = []
    managers: List[str] = []

    for role in roles:
        if role.guid not in user_guids:
            continue
        if is_email_address(role.username):
            addresses.append(role.username)
        for role_type in role.space_roles:
            if role_type == SPACE_DEVELOPER:
                developers.append(role.guid)
            elif role_type == SPACE_MANAGER:
                managers.append(role.guid)

    return addresses, developers, managers
