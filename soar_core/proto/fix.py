"""
Fix Schema.

One timestamped GPS position sample of a competitor, as produced by the
flight-log readers or live tracking clients.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Fix:
    """
    GPS fix.

    Attributes:
        time: Timestamp (epoch milliseconds)
        coordinate: Position as (lon, lat) in degrees
        valid: Receiver validity flag (not filtered by the solvers)
        altitude: GPS altitude in meters, if recorded
    """

    time: int
    coordinate: Tuple[float, float]
    valid: bool = True
    altitude: Optional[float] = None

    @property
    def lon(self) -> float:
        return self.coordinate[0]

    @property
    def lat(self) -> float:
        return self.coordinate[1]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'time': self.time,
            'coordinate': list(self.coordinate),
            'valid': self.valid,
            'altitude': self.altitude,
        }
