"""Angle helpers. All angles in degrees."""


def to360(angle: float) -> float:
    """Normalize an angle into [0, 360)."""
    angle = angle % 360
    # tiny negative inputs round up to exactly 360
    return 0.0 if angle == 360 else angle


def to180(angle: float) -> float:
    """Normalize an angle into (-180, 180]."""
    angle = to360(angle)
    return angle - 360 if angle > 180 else angle


def angle_diff(a: float, b: float) -> float:
    """Absolute difference between two bearings, in [0, 180]."""
    return abs(to180(a - b))


def bisector(a: float, b: float) -> float:
    """
    Bearing halfway between `a` and `b` along the shorter arc.

    For exactly opposite bearings the result is rotated 90 degrees clockwise
    from `a`.
    """
    diff = to180(b - a)
    if diff == -180:
        diff = 180
    return to360(a + diff / 2)
