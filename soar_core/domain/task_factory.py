"""
Task construction from a plain task description.

Turns the dictionaries produced by the task-file readers into a `Task`,
computing the trigger direction of line and keyhole zones from the
neighbouring turnpoints.

Description format:
    {
        "type": "Racing" | "AAT",
        "min_time": 10800,                # AAT only, seconds
        "points": [
            {"type": "Line", "lonlat": [7.0, 51.0], "length": 1000},
            {"type": "Cylinder", "lonlat": [7.5, 51.2], "radius": 500},
            {"type": "Keyhole", "lonlat": [7.9, 51.0]},
            ...
        ],
    }
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from soar_core.errors import TaskConfigurationError
from soar_core.geo import CheapRuler, Point, bisector, angle_diff, to360
from .shapes import Cylinder, Keyhole, Line, Shape
from .task import Task, TaskOptions

logger = logging.getLogger(__name__)

ZONE_TYPES = ('Cylinder', 'Line', 'Keyhole')


def zone_directions(ruler: CheapRuler, locations: Sequence[Point], index: int) -> Tuple[float, float]:
    """
    Line trigger direction and keyhole sector direction of a turnpoint.

    - First point: the line faces the next point
    - Last point: the line faces away from the previous point
    - Interior points: the line is perpendicular to the internal bisector of
      the bearings to the previous and next points. Of the two
      perpendiculars the one facing the outgoing leg is used.

    The keyhole sector is the line direction rotated 90 degrees
    counter-clockwise at the first and last point, and the external
    bisector (internal bisector + 180) at interior points.

    Returns:
        (line_direction, sector_direction) in degrees [0, 360)
    """
    location = locations[index]

    if index == 0:
        direction = to360(ruler.bearing(location, locations[index + 1]))
        return direction, to360(direction - 90)

    if index == len(locations) - 1:
        direction = to360(ruler.bearing(locations[index - 1], location))
        return direction, to360(direction - 90)

    bearing_to_prev = ruler.bearing(location, locations[index - 1])
    bearing_to_next = ruler.bearing(location, locations[index + 1])

    internal = bisector(bearing_to_prev, bearing_to_next)

    # of the two perpendiculars pick the one facing the outgoing leg
    line_direction = to360(internal + 90)
    if angle_diff(line_direction, bearing_to_next) > angle_diff(internal - 90, bearing_to_next):
        line_direction = to360(internal - 90)

    return line_direction, to360(internal + 180)


def create_shape(point: Dict, ruler: CheapRuler, locations: Sequence[Point], index: int) -> Shape:
    """
    Create the observation zone for one turnpoint description.

    Raises:
        TaskConfigurationError: Unknown zone type or missing parameters
    """
    zone_type = point.get('type')
    location = locations[index]

    if zone_type == 'Cylinder':
        radius = _require(point, 'radius', index)
        if radius <= 0:
            raise TaskConfigurationError(f"Point {index}: cylinder radius must be positive ({radius})")
        return Cylinder(location, radius, ruler)

    if zone_type == 'Line':
        length = _require(point, 'length', index)
        if length <= 0:
            raise TaskConfigurationError(f"Point {index}: line length must be positive ({length})")
        line_direction, _ = zone_directions(ruler, locations, index)
        return Line(location, length, line_direction, ruler)

    if zone_type == 'Keyhole':
        _, sector_direction = zone_directions(ruler, locations, index)
        return Keyhole(location, sector_direction, ruler)

    raise TaskConfigurationError(f"Unknown zone type: {zone_type} (expected one of {ZONE_TYPES})")


def task_from_dict(description: Dict) -> Task:
    """
    Build a Task from a plain description.

    Args:
        description: Task description (see module docstring)

    Returns:
        Task with zone directions resolved

    Raises:
        TaskConfigurationError: Invalid description
    """
    task_type = description.get('type', 'Racing')
    if task_type not in ('Racing', 'AAT'):
        raise TaskConfigurationError(f"Unknown task type: {task_type}")

    points: List[Dict] = description.get('points') or []
    if len(points) < 2:
        raise TaskConfigurationError(f"Task needs at least a start and a finish, got {len(points)} points")

    locations = [_location(point, i) for i, point in enumerate(points)]
    ruler = Task.ruler_for(locations)

    shapes = [create_shape(point, ruler, locations, i) for i, point in enumerate(points)]

    is_aat = task_type == 'AAT'
    min_time: Optional[float] = description.get('min_time') if is_aat else 0.0
    options = TaskOptions(is_aat=is_aat, min_time=float(min_time or 0.0))

    logger.debug(f"Zones: {shapes}")
    return Task(shapes, options, ruler)


def _location(point: Dict, index: int) -> Point:
    lonlat = point.get('lonlat')
    if lonlat is None or len(lonlat) != 2:
        raise TaskConfigurationError(f"Point {index}: missing 'lonlat'")
    return (float(lonlat[0]), float(lonlat[1]))


def _require(point: Dict, key: str, index: int) -> float:
    if point.get(key) is None:
        raise TaskConfigurationError(f"Point {index}: {point.get('type')} zone needs '{key}'")
    return float(point[key])
