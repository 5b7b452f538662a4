"""
Data models for space lifecycle classification.
"""

from dataclasses import dataclass
from datetime import datetime

from ..cf.models import Space


@dataclass(frozen=True)
class SpaceDetails:
    """A space paired with the anchor instant its age is counted from."""
    timestamp: datetime  # clamped to the epoch floor and truncated to a day
    space: Space
