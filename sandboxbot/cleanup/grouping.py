"""
Group resources by the space that owns them.
"""

from typing import Dict, Iterable, List, TypeVar

R = TypeVar("R")


def group_by_space(resources: Iterable[R]) -> Dict[str, List[R]]:
    """
    Bucket resources under their ``space_guid``.

    Order inside each bucket follows the input order. A space without
    resources gets no key at all, so look buckets up with ``.get(guid, [])``.

    Args:
        resources: Apps, service instances, or anything with ``space_guid``

    Returns:
        Mapping of space guid to its resources
    """
    grouped: Dict[str, List[R]] = {}

    for resource in resources:
        grouped.setdefault(resource.space_guid, []).append(resource)

    return grouped
