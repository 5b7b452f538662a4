"""
Resolve the creation time of the oldest resource in a space.
"""

import re
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from ..cf.models import App, ServiceInstance, Space
from ..errors import MalformedTimestamp

# RFC 3339 with up to nanosecond precision, as emitted by the platform
_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})"
)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware datetime.

    Fractional seconds beyond microseconds are dropped.

    Raises:
        ValueError: If the value is not a timezone-aware RFC 3339 instant
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected timestamp string, got {type(value).__name__}")

    match = _RFC3339.fullmatch(value)
    if not match:
        raise ValueError(f"Not an RFC 3339 timestamp: {value!r}")

    date_part, time_part, fraction, offset = match.groups()
    fraction = (fraction or "")[:6].ljust(6, "0")
    if offset == "Z":
        offset = "+00:00"

    return datetime.fromisoformat(f"{date_part}T{time_part}.{fraction}{offset}")


def get_first_resource(
    space: Space,
    apps_by_space: Dict[str, List[App]],
    instances_by_space: Dict[str, List[ServiceInstance]],
) -> Optional[datetime]:
    """
    Get the creation time of the earliest-created resource in a space.

    Args:
        space: Space to inspect
        apps_by_space: Applications grouped by space guid
        instances_by_space: Service instances grouped by space guid

    Returns:
        Earliest creation instant, or None when the space holds nothing

    Raises:
        MalformedTimestamp: If any resource has an unparsable creation time
    """
    candidates: Sequence[Tuple[str, Sequence]] = (
        ("app", apps_by_space.get(space.guid, [])),
        ("service_instance", instances_by_space.get(space.guid, [])),
    )

    first_resource: Optional[datetime] = None
    for kind, resources in candidates:
        for resource in resources:
            try:
                created_at = parse_timestamp(resource.created_at)
            except ValueError as e:
                raise MalformedTimestamp(kind, resource.guid, resource.created_at) from e
            if first_resource is None or created_at < first_resource:
                first_resource = created_at

    return first_resource
