"""
Pytest configuration and shared fixtures for the task scoring tests.

Tasks and flights are laid out in local meters (x east, y north) around a
fixed origin and converted to (lon, lat) with a single flat-earth ruler,
which is also handed to every shape and task. Distances measured by the
task are therefore exact in the local frame.
"""

import sys
from pathlib import Path
from typing import Callable, List, Sequence, Tuple

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from soar_core.domain import Cylinder, Line, Task, TaskOptions
from soar_core.geo import CheapRuler
from soar_core.metrics import reset_metrics
from soar_core.proto import Fix

ORIGIN = (8.0, 50.0)
START_TIME = 1_500_000_000_000  # epoch ms
FIX_INTERVAL_S = 60


# =============================================================================
# Metrics
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Every test starts with an empty global metrics collector."""
    reset_metrics()
    yield


# =============================================================================
# Geometry Fixtures
# =============================================================================


@pytest.fixture
def ruler() -> CheapRuler:
    """Ruler at the latitude of the test origin."""
    return CheapRuler(ORIGIN[1])


@pytest.fixture
def xy(ruler: CheapRuler) -> Callable[[float, float], Tuple[float, float]]:
    """
    Convert local meters to (lon, lat).

    Returns:
        Function (x, y) -> (lon, lat)
    """
    def convert(x: float, y: float) -> Tuple[float, float]:
        return ruler.offset(ORIGIN, x, y)

    return convert


@pytest.fixture
def make_flight(xy) -> Callable[..., List[Fix]]:
    """
    Build a flight from local waypoints, one fix per FIX_INTERVAL_S.

    Returns:
        Function (points, interval_s=FIX_INTERVAL_S) -> List[Fix]
    """
    def build(points: Sequence[Tuple[float, float]], interval_s: int = FIX_INTERVAL_S) -> List[Fix]:
        return [
            Fix(time=START_TIME + i * interval_s * 1000, coordinate=xy(x, y))
            for i, (x, y) in enumerate(points)
        ]

    return build


# =============================================================================
# Racing Task
# =============================================================================


RACING_PATH = [
    (0, 0),
    (0, 300),
    (0, 800),         # start (leaves the start cylinder)
    (0, 5000),
    (0, 10000),
    (0, 15000),
    (0, 19000),
    (0, 19800),       # turnpoint 1 reached
    (1000, 20000),
    (10000, 20000),
    (19500, 20000),
    (20500, 20000),   # finish line crossed
]


@pytest.fixture
def racing_task(xy, ruler) -> Task:
    """
    Cylinder start (500m) -> cylinder TP (500m, 20km north) -> finish line
    (1km, 20km east of the TP).
    """
    shapes = [
        Cylinder(xy(0, 0), 500, ruler),
        Cylinder(xy(0, 20000), 500, ruler),
        Line(xy(20000, 20000), 1000, 90, ruler),
    ]
    return Task(shapes, TaskOptions(), ruler)


@pytest.fixture
def racing_flight(make_flight) -> List[Fix]:
    """Flight completing `racing_task`."""
    return make_flight(RACING_PATH)


@pytest.fixture
def outlanding_flight(make_flight) -> List[Fix]:
    """Flight landing 15km into the first leg of `racing_task`."""
    return make_flight(RACING_PATH[:6])


# =============================================================================
# Assigned Area Task
# =============================================================================


AAT_PATH = [
    (0, 0),
    (0, 500),
    (0, 1500),          # 2: start
    (0, 20000),
    (0, 30000),
    (0, 36000),         # 5: area 1 entered
    (0, 42000),         # 6
    (5000, 42000),      # 7: area 1 left
    (20000, 40000),
    (36000, 40000),     # 9: area 2 entered
    (40000, 44000),     # 10
    (43000, 43000),     # 11
    (40000, 38000),     # 12
    (40000, 30000),     # 13: area 2 left
    (40000, 4000),      # 14: area 3 entered
    (42000, -3000),     # 15
    (30000, 0),         # 16: area 3 left
    (1500, 0),
    (500, 0),           # 18: finish
]

AAT_MIN_TIME = 3 * 3600


@pytest.fixture
def aat_task(xy, ruler) -> Task:
    """
    Cylinder start (1km) -> three 5km areas on a 40km square -> cylinder
    finish (1km) back at the start, 3h minimum time.
    """
    shapes = [
        Cylinder(xy(0, 0), 1000, ruler),
        Cylinder(xy(0, 40000), 5000, ruler),
        Cylinder(xy(40000, 40000), 5000, ruler),
        Cylinder(xy(40000, 0), 5000, ruler),
        Cylinder(xy(0, 0), 1000, ruler),
    ]
    return Task(shapes, TaskOptions(is_aat=True, min_time=AAT_MIN_TIME), ruler)


@pytest.fixture
def aat_flight(make_flight) -> List[Fix]:
    """Flight completing `aat_task` with a loop inside area 2."""
    return make_flight(AAT_PATH)


@pytest.fixture
def slow_aat_flight(make_flight) -> List[Fix]:
    """Same track as `aat_flight`, but slower than the minimum time."""
    return make_flight(AAT_PATH, interval_s=1200)
