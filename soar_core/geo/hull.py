"""
Convex hull reduction for turnpoint area candidates.

The point of an area that is farthest from any point outside of it lies on
the convex hull of the recorded fixes, so only hull vertices need to be kept
as candidate turnpoints. The hull is computed on raw (lon, lat) values: the
flat-earth projection is a linear scaling, which preserves hull vertices.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np
from scipy.spatial import ConvexHull, QhullError

logger = logging.getLogger(__name__)


def convex_hull_indices(points: Sequence[Tuple[float, float]]) -> List[int]:
    """
    Indices of the hull vertices of `points`, in ascending order.

    Fewer than three points, or degenerate input (all points collinear or
    coincident), keeps every index since each of them may still be a
    farthest point.
    """
    if len(points) < 3:
        return list(range(len(points)))

    array = np.array(points, dtype=float)
    try:
        hull = ConvexHull(array)
    except QhullError:
        logger.debug(f"Degenerate hull input ({len(points)} points), keeping all")
        return list(range(len(points)))

    return sorted(int(i) for i in hull.vertices)
