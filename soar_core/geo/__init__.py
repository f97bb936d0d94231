"""
Geo Module: flat-earth geometry kernel.

Key pieces:
- CheapRuler: distance/bearing/destination on a locally flat WGS84 model
- angles: bearing normalization and bisectors
- find_intersection: planar segment intersection
- convex_hull_indices: hull reduction of area candidates
"""

from .ruler import CheapRuler, Point, bbox_center_latitude, wrap_longitude
from .angles import to360, to180, angle_diff, bisector
from .intersection import find_intersection, project_on_segment, project_on_circle
from .hull import convex_hull_indices

__all__ = [
    'CheapRuler',
    'Point',
    'bbox_center_latitude',
    'wrap_longitude',
    'to360',
    'to180',
    'angle_diff',
    'bisector',
    'find_intersection',
    'project_on_segment',
    'project_on_circle',
    'convex_hull_indices',
]
