"""
Racing Task Solver.

Scores a fixed-turnpoint (racing) task incrementally. The tracker detects
start, turnpoints and finish; the solver keeps the best marking distance
achieved so far for outlandings and builds the result on demand.

Reference: SC3a §6.3.1 (Racing Task)
"""

import logging
from typing import Iterable, List, Optional, Tuple

from soar_core.errors import SolverConsistencyError
from soar_core.metrics import MetricsCollector
from soar_core.proto import Fix, RacingTaskResult, TaskEvent, TaskEventType, calculate_speed
from .task import Task
from .tracker import TaskPointTracker, TrackerConfig

logger = logging.getLogger(__name__)


class RacingTaskSolver:
    """
    Incremental racing task solver.

    Usage:
        solver = RacingTaskSolver(task)
        solver.consume(fixes)        # or solver.update(fix) per fix
        result = solver.result

    Feeding the same fixes in one call or in many smaller calls produces
    identical results.
    """

    def __init__(self, task: Task, metrics: Optional[MetricsCollector] = None):
        self.task = task
        self._tracker = TaskPointTracker(task, TrackerConfig(track_convex_hull=False), metrics)

        # distance of all legs before leg i
        self._leg_offsets: List[float] = [0.0]
        for leg in task.legs:
            self._leg_offsets.append(self._leg_offsets[-1] + leg.distance)

        self._best_distance = 0.0
        self._best_index: Optional[int] = None
        self._best_leg: Optional[int] = None

    @property
    def tracker(self) -> TaskPointTracker:
        return self._tracker

    @property
    def best_distance(self) -> float:
        """Running maximum of the marking distance (m), never decreasing."""
        return self._best_distance

    def consume(self, fixes: Iterable[Fix]) -> List[TaskEvent]:
        """Call `update()` for every fix and collect the events."""
        events = []
        for fix in fixes:
            events.extend(self.update(fix))
        return events

    def update(self, fix: Fix) -> List[TaskEvent]:
        """
        Process the next fix.

        Returns:
            Events triggered by this fix
        """
        events = self._tracker.update(fix)

        for event in events:
            if event.type == TaskEventType.FINISH:
                logger.info(f"Task finished at {event.time}, distance={self.task.distance / 1000:.2f} km")

        leg_index = self._tracker.current_leg_index
        if leg_index is None:
            return events

        # SC3a §6.3.1d
        #
        # Outlanding: distance of the completed legs plus the distance
        # achieved on the uncompleted leg towards the next turnpoint. If the
        # achieved distance of the uncompleted leg is less than zero, it shall
        # be taken as zero.
        leg = self.task.legs[leg_index]
        remaining = self.task.measure_distance(fix.coordinate, leg.end.center)
        distance = self._leg_offsets[leg_index] + max(0.0, leg.distance - remaining)

        if distance > self._best_distance:
            self._best_distance = distance
            self._best_index = len(self._tracker.fixes) - 1
            self._best_leg = leg_index

        return events

    @property
    def result(self) -> RacingTaskResult:
        """Current best-known result. Reading it does not change any state."""
        tracker = self._tracker

        # SC3a §6.3.1b
        #
        # The task is completed when the competitor makes a valid Start,
        # achieves each Turn Point in the designated sequence, and makes a
        # valid Finish.
        if tracker.has_finish:
            indices = self._trace_path(tracker.finish, len(tracker.area_visits))
            path = [tracker.fixes[i] for i in indices]

            time = (tracker.fixes[tracker.finish].time - path[0].time) / 1000
            distance = self.task.distance

            return RacingTaskResult(
                completed=True,
                time=time,
                distance=distance,
                speed=calculate_speed(distance, time),
                path=path,
                scoring_time=time,
            )

        if self._best_index is None:
            return RacingTaskResult(completed=False)

        indices = self._trace_path(self._best_index, self._best_leg)
        return RacingTaskResult(
            completed=False,
            distance=self._best_distance,
            path=[tracker.fixes[i] for i in indices],
        )

    def _trace_path(self, last_index: int, reached: int) -> List[int]:
        """
        Walk backwards from `last_index` through the visits of the `reached`
        turnpoints to a valid start.

        Per area the entry fixes not later than the successor are tried,
        earliest first, backtracking if no start can be reached from them.
        The credited start is the latest one strictly before the first
        turnpoint fix.

        Returns:
            Arena indices: start, turnpoint entries, `last_index`
        """
        fixes = self._tracker.fixes

        # (area index, successor index, path in reverse order)
        stack: List[Tuple[int, int, List[int]]] = [(reached - 1, last_index, [last_index])]

        while stack:
            area, successor, partial = stack.pop()
            successor_time = fixes[successor].time

            if area < 0:
                # the last fix itself may be the start when no turnpoint was reached
                start = self._tracker.latest_start_before(successor, inclusive=successor == last_index)
                if start is not None:
                    path = partial[::-1]
                    return path if start == successor else [start] + path
                continue

            candidates = [
                i for i in self._tracker.area_visits[area].entries
                if i <= successor and fixes[i].time <= successor_time
            ]
            candidates.sort(key=lambda i: (fixes[i].time, i))

            # pushed in reverse so that the earliest candidate is tried first
            for i in reversed(candidates):
                next_partial = partial if i == successor else partial + [i]
                stack.append((area - 1, i, next_partial))

        raise SolverConsistencyError(f"No valid start found before fix #{last_index}")
