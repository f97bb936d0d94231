"""
Observation Zone Shapes.

Closed set of turnpoint zone variants:
- Cylinder: circle of a given radius around the turnpoint
- Line: start/finish/turn line, triggered only when crossed in its direction
- Keyhole: 500m cylinder united with a half-plane sector pointing away from
  the course

Each shape carries a `ZoneType` tag. Area shapes (Cylinder, Keyhole) are
reached by entering them, lines by crossing them in the trigger direction.

Reference: SC3a §6.3 (Observation zones), FAI Sporting Code Annex A
"""

from enum import IntEnum
from typing import Optional, Tuple
import numpy as np

from soar_core.config import ZONE_CONFIG
from soar_core.geo import (
    CheapRuler,
    Point,
    angle_diff,
    find_intersection,
    project_on_circle,
    project_on_segment,
    to360,
)


class ZoneType(IntEnum):
    """Type of observation zone."""
    CYLINDER = 0
    LINE = 1
    KEYHOLE = 2


class Shape:
    """
    Base class of all observation zones.

    Subclasses implement containment (`is_inside`) and/or directional
    crossing tests, plus `nearest_point()` used for outlanding distances.
    """

    zone_type: ZoneType
    has_area = True

    def __init__(self, center: Point, ruler: Optional[CheapRuler] = None):
        self.center = (float(center[0]), float(center[1]))
        self._ruler = ruler or CheapRuler(self.center[1])

    def is_inside(self, point: Point) -> bool:
        raise NotImplementedError

    def nearest_point(self, point: Point) -> Point:
        """Point of the zone closest to `point`."""
        raise NotImplementedError

    def check_start(self, p1: Point, p2: Point) -> bool:
        """Did the segment p1->p2 leave the zone (area shapes)?"""
        return self.is_inside(p1) and not self.is_inside(p2)

    def check_entry(self, p1: Point, p2: Point) -> bool:
        """Did the segment p1->p2 enter the zone (area shapes)?"""
        return not self.is_inside(p1) and self.is_inside(p2)

    def _local(self, point: Point) -> Tuple[float, float]:
        return self._ruler.to_local(point, self.center)

    def _global(self, xy: Tuple[float, float]) -> Point:
        return self._ruler.from_local(xy, self.center)


class Cylinder(Shape):
    """Circular observation zone."""

    zone_type = ZoneType.CYLINDER

    def __init__(self, center: Point, radius: float, ruler: Optional[CheapRuler] = None):
        super().__init__(center, ruler)
        if radius <= 0:
            raise ValueError(f"Cylinder radius must be positive: {radius}")
        self.radius = float(radius)

    def is_inside(self, point: Point) -> bool:
        return self._ruler.distance(point, self.center) <= self.radius

    def nearest_point(self, point: Point) -> Point:
        """Projection of `point` onto the cylinder boundary."""
        return self._global(project_on_circle(self._local(point), self.radius))

    def __repr__(self) -> str:
        return f"Cylinder(center={self.center}, radius={self.radius})"


class Line(Shape):
    """
    Line observation zone.

    The line is `length` meters long, centered on the turnpoint and
    perpendicular to `direction`. Only crossings whose bearing is within 90
    degrees of `direction` count.
    """

    zone_type = ZoneType.LINE
    has_area = False

    def __init__(self, center: Point, length: float, direction: float,
                 ruler: Optional[CheapRuler] = None):
        super().__init__(center, ruler)
        if length <= 0:
            raise ValueError(f"Line length must be positive: {length}")
        self.length = float(length)
        self.direction = to360(direction)

        p1 = self._ruler.destination(self.center, self.length / 2, self.direction + 90)
        p2 = self._ruler.destination(self.center, self.length / 2, self.direction - 90)
        self.coordinates = (p1, p2)

    def is_inside(self, point: Point) -> bool:
        # a line has no area
        return False

    def check_crossing(self, p1: Point, p2: Point) -> Optional[float]:
        """
        Checks if the line was crossed between `p1` and `p2`.

        Returns:
            Fraction of the way from `p1` to `p2` where the line was crossed,
            or None if it wasn't crossed in the trigger direction.
        """
        segment = (self._local(p1), self._local(p2))
        line = (self._local(self.coordinates[0]), self._local(self.coordinates[1]))

        fraction = find_intersection(segment, line)
        if fraction is None:
            return None

        bearing = self._ruler.bearing(p1, p2)
        bearing_diff = to360(self.direction - bearing)
        if 90 < bearing_diff < 270:
            return None

        return fraction

    def check_start(self, p1: Point, p2: Point) -> bool:
        return self.check_crossing(p1, p2) is not None

    def check_entry(self, p1: Point, p2: Point) -> bool:
        return self.check_crossing(p1, p2) is not None

    def nearest_point(self, point: Point) -> Point:
        line = (self._local(self.coordinates[0]), self._local(self.coordinates[1]))
        return self._global(project_on_segment(self._local(point), *line))

    def __repr__(self) -> str:
        return f"Line(center={self.center}, length={self.length}, direction={self.direction:.1f})"


class Keyhole(Shape):
    """
    Keyhole observation zone.

    Union of a cylinder (500m by default) and the half-plane whose bearings
    from the center lie within +-90 degrees of the sector direction.
    """

    zone_type = ZoneType.KEYHOLE

    def __init__(self, center: Point, direction: float, ruler: Optional[CheapRuler] = None,
                 radius: Optional[float] = None):
        super().__init__(center, ruler)
        self.direction = to360(direction)
        self.radius = float(radius if radius is not None else ZONE_CONFIG["keyhole_radius_m"])
        self.half_angle = ZONE_CONFIG["keyhole_sector_half_angle"]

    def is_inside(self, point: Point) -> bool:
        if self._ruler.distance(point, self.center) <= self.radius:
            return True

        bearing = self._ruler.bearing(self.center, point)
        return angle_diff(bearing, self.direction) <= self.half_angle

    def nearest_point(self, point: Point) -> Point:
        """Closest point of the cylinder or of the sector boundary."""
        if self.is_inside(point):
            return point

        xy = np.array(self._local(point))

        on_circle = np.array(project_on_circle(tuple(xy), self.radius))

        # sector boundary: line through the center, perpendicular to direction
        a = np.radians(self.direction)
        unit = np.array([np.sin(a), np.cos(a)])
        on_boundary = xy - np.dot(xy, unit) * unit

        if np.linalg.norm(xy - on_circle) <= np.linalg.norm(xy - on_boundary):
            closest = on_circle
        else:
            closest = on_boundary

        return self._global((float(closest[0]), float(closest[1])))

    def __repr__(self) -> str:
        return f"Keyhole(center={self.center}, direction={self.direction:.1f})"
