"""
Space lifecycle classification and purging.
"""

from .age import get_first_resource, parse_timestamp
from .grouping import group_by_space
from .lifecycle import list_purge_spaces, truncate_to_day
from .models import SpaceDetails
from .purge import purge_space

__all__ = [
    "get_first_resource",
    "parse_timestamp",
    "group_by_space",
    "list_purge_spaces",
    "truncate_to_day",
    "SpaceDetails",
    "purge_space",
]
