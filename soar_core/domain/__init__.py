"""
Domain Module: Task geometry and scoring solvers.

Implements:
- Observation zones (cylinder, line, keyhole)
- Task model and construction from a plain description
- Turnpoint visit tracking
- Racing and assigned area task solvers
"""

from typing import Optional

from soar_core.metrics import MetricsCollector
from .shapes import (
    ZoneType,
    Shape,
    Cylinder,
    Line,
    Keyhole,
)
from .task import (
    Task,
    TaskOptions,
    Turnpoint,
    TurnpointRole,
    Leg,
)
from .task_factory import (
    create_shape,
    task_from_dict,
    zone_directions,
)
from .tracker import (
    TaskPointTracker,
    TrackerConfig,
    AreaVisit,
    ZoneVisit,
)
from .racing_solver import RacingTaskSolver
from .area_solver import AreaTaskSolver, Edge



def create_solver(task: Task, metrics: Optional[MetricsCollector] = None):
    """Create the solver matching the task type."""
    if task.options.is_aat:
        return AreaTaskSolver(task, metrics)
    return RacingTaskSolver(task, metrics)


__all__ = [
    # Zones
    'ZoneType',
    'Shape',
    'Cylinder',
    'Line',
    'Keyhole',
    # Task
    'Task',
    'TaskOptions',
    'Turnpoint',
    'TurnpointRole',
    'Leg',
    'create_shape',
    'task_from_dict',
    'zone_directions',
    # Tracking
    'TaskPointTracker',
    'TrackerConfig',
    'AreaVisit',
    'ZoneVisit',
    # Solvers
    'RacingTaskSolver',
    'AreaTaskSolver',
    'Edge',
    'create_solver',
]
