"""
Task Model.

Ordered turnpoints with their observation zones, the legs between them and
the task distance. A Task is built once and read-only afterwards.

Reference: SC3a §6.3.1c (Task Distance)
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from soar_core.errors import TaskConfigurationError
from soar_core.geo import CheapRuler, Point, bbox_center_latitude
from soar_core.metrics import get_metrics
from .shapes import Shape, ZoneType

logger = logging.getLogger(__name__)


class TurnpointRole(IntEnum):
    """Positional role of a turnpoint inside the task."""
    START = 0
    TURN = 1
    FINISH = 2


@dataclass(frozen=True)
class Turnpoint:
    """Observation zone at a given task position."""

    shape: Shape
    role: TurnpointRole
    index: int

    @property
    def center(self) -> Point:
        return self.shape.center


@dataclass(frozen=True)
class Leg:
    """Pair of adjacent turnpoints and the distance between their centers (m)."""

    start: Turnpoint
    end: Turnpoint
    distance: float


@dataclass(frozen=True)
class TaskOptions:
    """
    Task options.

    Attributes:
        is_aat: Assigned area task (otherwise racing task)
        min_time: Minimum task time for AAT in seconds
    """

    is_aat: bool = False
    min_time: float = 0.0


class Task:
    """
    Competition task.

    Usage:
        task = Task([start_zone, tp1_zone, finish_zone], TaskOptions())
        task.distance          # meters
        task.legs[0].distance  # meters

    All distances and bearings measured by the task use a single ruler at
    the latitude of the bounding-box center of the turnpoints.
    """

    def __init__(self, shapes: Sequence[Shape], options: TaskOptions = TaskOptions(),
                 ruler: Optional[CheapRuler] = None):
        if len(shapes) < 2:
            raise TaskConfigurationError(f"Task needs at least a start and a finish, got {len(shapes)} points")

        self.options = options
        self.points: List[Turnpoint] = [
            Turnpoint(shape=shape, role=_role_for_index(i, len(shapes)), index=i)
            for i, shape in enumerate(shapes)
        ]

        self._ruler = ruler or self.ruler_for([shape.center for shape in shapes])

        self.legs: List[Leg] = [
            Leg(
                start=self.points[i],
                end=self.points[i + 1],
                distance=self.measure_distance(self.points[i].center, self.points[i + 1].center),
            )
            for i in range(len(self.points) - 1)
        ]

        self.distance = self._calc_distance()

        get_metrics().increment('tasks_created')
        logger.info(f"Task created: {len(self.points)} points, "
                    f"{'AAT' if options.is_aat else 'Racing'}, distance={self.distance / 1000:.2f} km")

    @staticmethod
    def ruler_for(centers: Sequence[Point]) -> CheapRuler:
        """Ruler shared by all measurements of a task with these centers."""
        return CheapRuler(bbox_center_latitude(centers))

    @property
    def ruler(self) -> CheapRuler:
        return self._ruler

    @property
    def start(self) -> Turnpoint:
        return self.points[0]

    @property
    def finish(self) -> Turnpoint:
        return self.points[-1]

    @property
    def bbox(self) -> Tuple[float, float, float, float]:
        """(min lon, min lat, max lon, max lat) of the turnpoint centers."""
        lons = [tp.center[0] for tp in self.points]
        lats = [tp.center[1] for tp in self.points]
        return (min(lons), min(lats), max(lons), max(lats))

    def measure_distance(self, a: Point, b: Point) -> float:
        """Distance between two points in meters."""
        return self._ruler.distance(a, b)

    def measure_bearing(self, a: Point, b: Point) -> float:
        return self._ruler.bearing(a, b)

    def _calc_distance(self) -> float:
        # SC3a §6.3.1c
        #
        # The Task Distance is the distance from the Start Point to the Finish
        # Point via all assigned Turn Points, less the radius of the Start Ring
        # (if used) and less the radius of the Finish Ring (if used).
        distance = sum(leg.distance for leg in self.legs)

        if self.start.shape.zone_type == ZoneType.CYLINDER:
            distance -= self.start.shape.radius

        if self.finish.shape.zone_type == ZoneType.CYLINDER:
            distance -= self.finish.shape.radius

        if distance < 0:
            raise TaskConfigurationError(
                f"Start/finish ring radii exceed the task legs (distance={distance:.1f} m)")

        return distance

    def __repr__(self) -> str:
        return f"Task(points={len(self.points)}, distance={self.distance:.1f}, options={self.options})"


def _role_for_index(index: int, count: int) -> TurnpointRole:
    if index == 0:
        return TurnpointRole.START
    if index == count - 1:
        return TurnpointRole.FINISH
    return TurnpointRole.TURN
