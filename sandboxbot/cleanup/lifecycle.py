"""
Classify sandbox spaces into notify and purge buckets.

A space's age is counted from its anchor: the creation time of its oldest
app or service instance, raised to the epoch floor when older than it, and
truncated to a 24 hour boundary. Spaces at least ``purge_threshold`` days old
are purged; spaces at least ``notify_threshold`` days old are warned.
Empty spaces have no anchor and are left alone.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Sequence, Tuple

from ..cf.models import App, ServiceInstance, Space
from .age import get_first_resource
from .grouping import group_by_space
from .models import SpaceDetails

logger = logging.getLogger(__name__)

DAY = timedelta(hours=24)
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def truncate_to_day(value: datetime) -> datetime:
    """Floor an instant to a whole multiple of 24 hours since the Unix epoch."""
    days = (value - UNIX_EPOCH) // DAY
    return (UNIX_EPOCH + days * DAY).astimezone(value.tzinfo)


def age_in_days(now: datetime, anchor: datetime) -> int:
    """Whole days elapsed between anchor and now, truncated toward zero."""
    return int((now - anchor) / DAY)


def list_purge_spaces(
    spaces: Sequence[Space],
    apps: Sequence[App],
    instances: Sequence[ServiceInstance],
    now: datetime,
    notify_threshold: int,
    purge_threshold: int,
    time_starts_at: datetime,
) -> Tuple[List[SpaceDetails], List[SpaceDetails]]:
    """
    Identify spaces that should be notified or purged.

    Args:
        spaces: All spaces of an organization, in the order results should keep
        apps: All applications of the organization
        instances: All service instances of the organization
        now: Current time (timezone-aware)
        notify_threshold: Age in days from which a space is warned
        purge_threshold: Age in days from which a space is purged
        time_starts_at: Epoch floor; anchors earlier than this are raised to it

    Returns:
        Tuple of (to_notify, to_purge)

    Raises:
        MalformedTimestamp: If any resource has an unparsable creation time.
            Nothing is returned for the run in that case.
        ValueError: On invalid thresholds or naive datetimes
    """
    if notify_threshold < 0 or purge_threshold < 0:
        raise ValueError("Thresholds must not be negative")
    if notify_threshold > purge_threshold:
        raise ValueError(
            f"Notify threshold ({notify_threshold}) exceeds purge threshold ({purge_threshold})"
        )
    if now.tzinfo is None or time_starts_at.tzinfo is None:
        raise ValueError("now and time_starts_at must be timezone-aware")

    apps_by_space = group_by_space(apps)
    instances_by_space = group_by_space(instances)

    to_notify: List[SpaceDetails] = []
    to_purge: List[SpaceDetails] = []

    for space in spaces:
        first_resource = get_first_resource(space, apps_by_space, instances_by_space)
        if first_resource is None:
            continue

        if time_starts_at > first_resource:
            first_resource = time_starts_at
        anchor = truncate_to_day(first_resource)

        delta = age_in_days(now, anchor)
        if delta >= purge_threshold:
            to_purge.append(SpaceDetails(anchor, space))
        elif delta >= notify_threshold:
            to_notify.append(SpaceDetails(anchor, space))
        else:
            logger.debug(f"Space {space.name} ({space.guid}) is {delta} days old, leaving it")

    return to_notify, to_purge
