"""
Planar segment intersection and boundary projection.

The inputs are planar coordinates in meters, as produced by
`CheapRuler.to_local()`.
"""

from typing import Optional, Tuple
import numpy as np

XY = Tuple[float, float]


def find_intersection(segment_a: Tuple[XY, XY], segment_b: Tuple[XY, XY]) -> Optional[float]:
    """
    Intersect two segments.

    Args:
        segment_a: (p1, p2) segment that is travelled
        segment_b: (q1, q2) segment that is tested against

    Returns:
        Fraction t in [0, 1] along segment_a where it meets segment_b, or None
        if the segments don't touch or are parallel.

    Algorithm:
        With r = p2 - p1 and s = q2 - q1, solve p1 + t*r = q1 + u*s using
        2D cross products; both t and u must lie in [0, 1].
    """
    p1 = np.asarray(segment_a[0], dtype=float)
    p2 = np.asarray(segment_a[1], dtype=float)
    q1 = np.asarray(segment_b[0], dtype=float)
    q2 = np.asarray(segment_b[1], dtype=float)

    r = p2 - p1
    s = q2 - q1

    denom = _cross(r, s)
    if denom == 0:
        # parallel or collinear
        return None

    qp = q1 - p1
    t = _cross(qp, s) / denom
    u = _cross(qp, r) / denom

    if t < 0 or t > 1 or u < 0 or u > 1:
        return None

    return float(t)


def project_on_segment(point: XY, a: XY, b: XY) -> XY:
    """Closest point to `point` on segment a-b."""
    p = np.asarray(point, dtype=float)
    a_ = np.asarray(a, dtype=float)
    b_ = np.asarray(b, dtype=float)

    ab = b_ - a_
    length2 = float(np.dot(ab, ab))
    if length2 == 0:
        return (float(a_[0]), float(a_[1]))

    t = float(np.clip(np.dot(p - a_, ab) / length2, 0.0, 1.0))
    closest = a_ + t * ab
    return (float(closest[0]), float(closest[1]))


def project_on_circle(point: XY, radius: float) -> XY:
    """Closest point to `point` on a circle of `radius` around the origin."""
    p = np.asarray(point, dtype=float)
    norm = float(np.linalg.norm(p))
    if norm == 0:
        # every boundary point is equally close, pick north
        return (0.0, radius)

    closest = p / norm * radius
    return (float(closest[0]), float(closest[1]))


def _cross(a: np.ndarray, b: np.ndarray) -> float:
    return float(a[0] * b[1] - a[1] * b[0])
