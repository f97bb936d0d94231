"""
Locally flat earth model.

Distances and bearings on task scale (tens to hundreds of km) are computed on
a plane tangent to the WGS84 ellipsoid at a reference latitude. Longitude and
latitude differences are scaled by the prime vertical and meridian radii of
curvature at that latitude, which keeps errors well below a meter per km for
typical gliding tasks.

Coordinates are (lon, lat) tuples in degrees. Distances are in meters and
bearings in degrees clockwise from north, in (-180, 180].
"""

import math
from typing import Sequence, Tuple

Point = Tuple[float, float]


def wrap_longitude(deg: float) -> float:
    """Wrap a longitude difference into [-180, 180)."""
    while deg < -180:
        deg += 360
    while deg >= 180:
        deg -= 360
    return deg


class CheapRuler:
    """
    Flat-earth ruler for a fixed reference latitude.

    Usage:
        ruler = CheapRuler(50.1)
        d = ruler.distance((8.0, 50.0), (8.1, 50.2))   # meters
        b = ruler.bearing((8.0, 50.0), (8.1, 50.2))    # degrees
    """

    # WGS84 ellipsoid
    WGS84_A = 6378137.0
    WGS84_F = 1.0 / 298.257223563
    WGS84_E2 = WGS84_F * (2 - WGS84_F)

    def __init__(self, latitude: float):
        self.latitude = latitude

        coslat = math.cos(math.radians(latitude))
        w2 = 1 / (1 - self.WGS84_E2 * (1 - coslat * coslat))
        w = math.sqrt(w2)

        # meters per degree of longitude/latitude
        m = math.radians(1) * self.WGS84_A
        self.kx = m * w * coslat
        self.ky = m * w * w2 * (1 - self.WGS84_E2)

    def distance(self, a: Point, b: Point) -> float:
        dx = wrap_longitude(a[0] - b[0]) * self.kx
        dy = (a[1] - b[1]) * self.ky
        return math.sqrt(dx * dx + dy * dy)

    def bearing(self, a: Point, b: Point) -> float:
        dx = wrap_longitude(b[0] - a[0]) * self.kx
        dy = (b[1] - a[1]) * self.ky
        return math.degrees(math.atan2(dx, dy))

    def destination(self, p: Point, distance: float, bearing: float) -> Point:
        a = math.radians(bearing)
        return self.offset(p, math.sin(a) * distance, math.cos(a) * distance)

    def offset(self, p: Point, dx: float, dy: float) -> Point:
        """Move `p` by `dx` meters east and `dy` meters north."""
        return (p[0] + dx / self.kx, p[1] + dy / self.ky)

    def line_distance(self, points: Sequence[Point]) -> float:
        """Total length of a polyline."""
        total = 0.0
        for i in range(len(points) - 1):
            total += self.distance(points[i], points[i + 1])
        return total

    def to_local(self, p: Point, origin: Point) -> Tuple[float, float]:
        """
        Convert `p` to planar (east, north) meters relative to `origin`.

        Args:
            p: Point to convert
            origin: Origin of the local plane

        Returns:
            (x, y) in meters
        """
        return (
            wrap_longitude(p[0] - origin[0]) * self.kx,
            (p[1] - origin[1]) * self.ky,
        )

    def from_local(self, xy: Tuple[float, float], origin: Point) -> Point:
        """Inverse of `to_local()`."""
        return self.offset(origin, xy[0], xy[1])


def bbox_center_latitude(points: Sequence[Point]) -> float:
    """Latitude at the center of the bounding box of `points`."""
    lats = [p[1] for p in points]
    return (min(lats) + max(lats)) / 2
