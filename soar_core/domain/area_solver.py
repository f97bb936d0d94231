"""
Assigned Area Task Solver.

Finds the credited fixes inside the assigned areas that give the largest
marking distance.

The tracker records every fix inside the areas and reduces them to their
convex hull. The candidates form a layered directed acyclic graph: the start
point connects to every candidate of the first area, every candidate of
area k connects to every candidate of area k + 1, and the candidates of the
last area connect to the finish point. For each candidate the best edge
ending there (total distance from the start and the predecessor candidate)
is memoized by its arena index.

While flying, the best intermediate solution is updated on every fix using
the outlanding rules; once finished the final path is traced back from the
finish point through the memoized edges.

Reference: SC3a §6.3.2 (Assigned Area Task)
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from soar_core.errors import SolverConsistencyError
from soar_core.geo import Point
from soar_core.metrics import MetricsCollector, get_metrics
from soar_core.proto import AreaTaskResult, Fix, TaskEvent, TaskEventType, calculate_speed
from .shapes import ZoneType
from .task import Task
from .tracker import TaskPointTracker, TrackerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edge:
    """
    Best path ending at a graph node.

    Attributes:
        distance: Total distance from the start point (m)
        prev_index: Arena index of the predecessor candidate (None for
            the first area)
    """

    distance: float
    prev_index: Optional[int] = None


@dataclass(frozen=True)
class Solution:
    """Best path ending at the fix with arena index `last_index`."""

    last_index: int
    edge: Edge


class AreaTaskSolver:
    """
    Incremental assigned area task solver.

    Usage:
        solver = AreaTaskSolver(task)
        solver.consume(fixes)        # or solver.update(fix) per fix
        result = solver.result

    The `completed` flag of the result tells whether the finish was reached.
    If not, `time` and `speed` are informational only.
    """

    def __init__(self, task: Task, metrics: Optional[MetricsCollector] = None):
        self.task = task
        self.metrics = metrics if metrics is not None else get_metrics()
        self._tracker = TaskPointTracker(task, TrackerConfig(track_convex_hull=True), self.metrics)

        # arena index -> best edge ending at that fix
        self._edges: Dict[int, Edge] = {}

        self._best_solution: Optional[Solution] = None
        self._finish_edge: Optional[Edge] = None

    @property
    def tracker(self) -> TaskPointTracker:
        return self._tracker

    @property
    def best_distance(self) -> float:
        """Distance of the best intermediate solution (m), never decreasing."""
        return self._best_solution.edge.distance if self._best_solution else 0.0

    def consume(self, fixes: Iterable[Fix]) -> List[TaskEvent]:
        """Call `update()` for every fix and collect the events."""
        events = []
        for fix in fixes:
            events.extend(self.update(fix))
        return events

    def update(self, fix: Fix) -> List[TaskEvent]:
        """
        Process the next fix and update the best known solution.

        Returns:
            Events triggered by this fix
        """
        events = self._tracker.update(fix)

        if any(event.type == TaskEventType.FINISH for event in events):
            self._finish_edge = self._edge_to(self.task.finish.center, len(self.task.legs) - 1)
            logger.info(f"Task finished at {fix.time}, "
                        f"best path {self._finish_edge.distance / 1000:.2f} km")

        leg_index = self._tracker.current_leg_index
        if leg_index is None:
            return events

        # SC3a §6.3.2d (ii)
        #
        # If the competitor has outlanded on the last leg, the Marking Distance
        # is the distance from the Start Point through each Credited Fix to the
        # Finish Point, less the distance from the Outlanding Position to the
        # Finish Point.

        # SC3a §6.3.2d (iii)
        #
        # If the competitor has outlanded on any other leg, the Marking
        # Distance is the distance from the Start Point through each Credited
        # Fix to the point of the next Assigned Area which is nearest to the
        # Outlanding Position, less the distance from the Outlanding Position
        # to this nearest point. If the achieved distance of the uncompleted
        # leg is less than zero, it shall be taken as zero.
        if leg_index == len(self.task.legs) - 1:
            nearest = self.task.finish.center
        else:
            nearest = self.task.points[leg_index + 1].shape.nearest_point(fix.coordinate)

        next_area_distance = self.task.measure_distance(fix.coordinate, nearest)

        if leg_index == 0:
            distance = self.task.measure_distance(self.task.start.center, nearest) - next_area_distance
            edge = Edge(distance)
        else:
            self._fill_edges(leg_index - 1)
            edge = self._best_predecessor(
                leg_index - 1,
                lambda point: max(0.0, self.task.measure_distance(point, nearest) - next_area_distance),
            )

        if edge.distance > 0 and (self._best_solution is None or
                                  edge.distance > self._best_solution.edge.distance):
            self._best_solution = Solution(len(self._tracker.fixes) - 1, edge)

        return events

    @property
    def result(self) -> AreaTaskResult:
        """Current final or intermediate result."""
        tracker = self._tracker
        min_time = self.task.options.min_time

        # SC3a §6.3.2b
        #
        # The task is completed when the Competitor makes a valid Start, passes
        # through each Assigned Area, in the sequence designated by the
        # Organisers, and makes a valid Finish.
        if tracker.has_finish:
            # SC3a §6.3.2d (i)
            #
            # For a completed task, the Marking Distance is the distance from
            # the Start Point to the Finish Point via all Credited Fixes, less
            # the radius of the Finish Ring (if used).
            distance = self._finish_edge.distance
            finish_shape = self.task.finish.shape
            if finish_shape.zone_type == ZoneType.CYLINDER:
                distance -= finish_shape.radius

            path = self._path_for(Solution(tracker.finish, self._finish_edge))

            time = (tracker.fixes[tracker.finish].time - path[0].time) / 1000

            # the marking time is never shorter than the minimum task time
            scoring_time = min_time if time < min_time else time

            return AreaTaskResult(
                completed=True,
                time=time,
                distance=distance,
                speed=calculate_speed(distance, scoring_time),
                path=path,
                scoring_time=scoring_time,
                aat_min_time_exceeded=time > min_time,
            )

        if self._best_solution is None:
            return AreaTaskResult(completed=False)

        distance = self._best_solution.edge.distance
        path = self._path_for(self._best_solution)
        time = (tracker.last_fix.time - path[0].time) / 1000

        return AreaTaskResult(
            completed=False,
            time=time,
            distance=distance,
            speed=calculate_speed(distance, time),
            path=path,
            aat_min_time_exceeded=time > min_time,
        )

    def _path_for(self, solution: Solution) -> List[Fix]:
        """Follow the memoized edges back to the first area and add the start."""
        indices = [solution.last_index]

        edge = solution.edge
        while edge.prev_index is not None:
            indices.append(edge.prev_index)
            edge = self._edges[edge.prev_index]

        first = indices[-1]
        start = self._tracker.latest_start_before(first, inclusive=first == solution.last_index)
        if start is None:
            raise SolverConsistencyError(f"No valid start found before fix #{first}")

        if start != first:
            indices.append(start)

        return [self._tracker.fixes[i] for i in reversed(indices)]

    def _edge_to(self, point: Point, leg_index: int) -> Edge:
        """Best edge ending at `point` at the end of leg `leg_index`."""
        self._fill_edges(leg_index - 1)
        return self._compute_edge(point, leg_index)

    def _fill_edges(self, area_index: int):
        """Memoize the edges of all candidates of areas 0..area_index, lowest area first."""
        for level in range(area_index + 1):
            for i in self._tracker.area_visits[level].candidates:
                if i not in self._edges:
                    self._edges[i] = self._compute_edge(self._tracker.fixes[i].coordinate, level)

    def _compute_edge(self, point: Point, leg_index: int) -> Edge:
        if leg_index == 0:
            return Edge(self.task.measure_distance(self.task.start.center, point))

        return self._best_predecessor(
            leg_index - 1,
            lambda prev: self.task.measure_distance(prev, point),
        )

    def _best_predecessor(self, area_index: int, leg_distance: Callable[[Point], float]) -> Edge:
        """
        Pick the candidate of area `area_index` that maximizes its memoized
        distance plus `leg_distance` from it.
        """
        candidates = self._tracker.area_visits[area_index].candidates
        if not candidates:
            raise SolverConsistencyError(f"Area {area_index + 1} queried without recorded fixes")

        self.metrics.increment('edges_evaluated', len(candidates))
        self.metrics.record_histogram('area_candidates', len(candidates))

        best: Optional[Edge] = None
        for prev in candidates:
            prev_edge = self._edges.get(prev)
            if prev_edge is None:
                raise SolverConsistencyError(f"No edge memoized for fix #{prev}")

            distance = prev_edge.distance + leg_distance(self._tracker.fixes[prev].coordinate)
            if best is None or distance > best.distance:
                best = Edge(distance, prev)

        return best
