"""
Task Result Schema.

Output of the racing and assigned area task solvers. Absent values (no
start yet, task not finished) are `None` rather than zero so that callers
can render partial standings.

Reference: SC3a §6.3.1 (Racing Task), §6.3.2 (Assigned Area Task)
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .fix import Fix


@dataclass
class RacingTaskResult:
    """
    Racing task result.

    Attributes:
        completed: Valid start, all turnpoints in sequence and valid finish
        time: Flown time in seconds (None unless completed)
        scoring_time: Marking time in seconds used for speed points (None
            unless completed)
        distance: Marking distance in meters
        speed: Marking speed in km/h (None unless completed)
        path: Start fix, credited turnpoint fixes and finish/last credited fix
    """

    completed: bool
    time: Optional[float] = None
    distance: float = 0.0
    speed: Optional[float] = None
    path: List[Fix] = field(default_factory=list)
    scoring_time: Optional[float] = None

    @property
    def start_time(self) -> Optional[int]:
        """Time of the credited start (epoch ms), if any."""
        return self.path[0].time if self.path else None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'completed': self.completed,
            'time': self.time,
            'distance': self.distance,
            'speed': self.speed,
            'scoring_time': self.scoring_time,
            'path': [fix.to_dict() for fix in self.path],
        }


@dataclass
class AreaTaskResult(RacingTaskResult):
    """
    Assigned area task result.

    For unfinished flights `time` and `speed` are informational only and
    must not be used for scoring. For finished flights `scoring_time` is the
    flown time, but never less than the minimum task time.

    Attributes:
        aat_min_time_exceeded: Flown time was longer than the minimum task time
    """

    aat_min_time_exceeded: bool = False

    def to_dict(self) -> dict:
        d = super().to_dict()
        d['aat_min_time_exceeded'] = self.aat_min_time_exceeded
        return d


def calculate_speed(distance: float, time: Optional[float]) -> Optional[float]:
    """
    Speed in km/h for a distance in meters and a time in seconds.

    Returns None for missing or non-positive times.
    """
    if time is None or time <= 0:
        return None
    return (distance / 1000) / (time / 3600)
