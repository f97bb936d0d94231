"""
Task Event Schema.

Transitions observed by the turnpoint tracker. Every `update()` call returns
the events it produced (at most one per fix).
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from .fix import Fix


class TaskEventType(IntEnum):
    """Type of task transition."""
    START = 0    # Valid start (re-starts produce further START events)
    TURN = 1     # Turnpoint zone reached
    FINISH = 2   # Valid finish, terminal


@dataclass(frozen=True)
class TaskEvent:
    """
    Task transition event.

    Attributes:
        type: Transition type
        time: Time of the fix that triggered it (epoch ms)
        point: Coordinate of that fix (lon, lat)
        num: Index of the turnpoint that was started/reached/finished
    """

    type: TaskEventType
    time: int
    point: Tuple[float, float]
    num: int

    @classmethod
    def from_fix(cls, type: TaskEventType, fix: Fix, num: int) -> 'TaskEvent':
        return cls(type=type, time=fix.time, point=fix.coordinate, num=num)

    def to_dict(self) -> dict:
        return {
            'type': self.type.name,
            'time': self.time,
            'point': list(self.point),
            'num': self.num,
        }
