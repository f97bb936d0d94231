"""
Protocol Module: plain records exchanged with the outside world.

- Fix: position sample fed into the solvers
- TaskEvent: start/turn/finish transitions returned from update()
- RacingTaskResult / AreaTaskResult: solver output
"""

from .fix import Fix
from .task_event import TaskEvent, TaskEventType
from .task_result import (
    RacingTaskResult,
    AreaTaskResult,
    calculate_speed,
)

__all__ = [
    'Fix',
    'TaskEvent',
    'TaskEventType',
    'RacingTaskResult',
    'AreaTaskResult',
    'calculate_speed',
]
