"""
Default configuration for the task scoring core.
"""

import logging
from typing import Optional

# Observation zone conventions
ZONE_CONFIG = {
    "keyhole_radius_m": 500.0,        # inner cylinder of a keyhole (FAI)
    "keyhole_sector_half_angle": 90.0,  # sector extends +-90 deg from its direction
}

# Day scoring (SC3a §8)
SCORING_CONFIG = {
    "max_points": 1000,               # upper bound of Pm
    "min_distance_km": 100.0,         # Dm, minimum handicapped distance to validate the day
    "default_handicap": 1.0,          # H for unhandicapped competitors
}

# Logging
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def setup_logging(level: Optional[str] = None):
    """
    Configure root logging from LOGGING_CONFIG.

    Args:
        level: Overrides LOGGING_CONFIG["level"] (e.g. "DEBUG")
    """
    logging.basicConfig(
        level=getattr(logging, level or LOGGING_CONFIG["level"]),
        format=LOGGING_CONFIG["format"],
    )
