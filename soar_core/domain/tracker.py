"""
Turnpoint Visit Tracker.

Incremental state machine that consumes one fix at a time and tracks:
- all valid starts (re-starts before reaching the first turnpoint included)
- the current leg
- every fix recorded inside each turnpoint zone, grouped into visits
- the finish

Transitions are detected between the previous and the current fix, so a
single fix alone never triggers anything. At most one transition (start,
turn or finish) happens per fix.

Fixes are stored in an append-only arena and referenced everywhere by their
arena index, which is also the memoization key used by the solvers.

Reference: SC3a §6.3.1b (Racing Task completion), §6.3.2b (AAT completion)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from soar_core.geo import convex_hull_indices
from soar_core.metrics import MetricsCollector, get_metrics
from soar_core.proto import Fix, TaskEvent, TaskEventType
from .task import Task

logger = logging.getLogger(__name__)


@dataclass
class TrackerConfig:
    """
    Configuration for the turnpoint tracker.

    Attributes:
        track_convex_hull: Reduce the fixes of each area to their convex
            hull (needed by the AAT solver only)
    """

    track_convex_hull: bool = False


@dataclass
class ZoneVisit:
    """
    One stay inside a turnpoint zone.

    Attributes:
        enter: Arena index of the fix that entered the zone
        fixes: Arena indices of all fixes recorded inside (enter included)
        exit: Arena index of the first fix outside again (None while inside)
    """

    enter: int
    fixes: List[int] = field(default_factory=list)
    exit: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.exit is None


class AreaVisit:
    """
    All visits of the turnpoint zone at the end of one leg.

    With hull tracking enabled the running convex hull of all recorded
    coordinates is kept, and only its vertices are reported as candidates.
    """

    def __init__(self, leg_index: int, track_convex_hull: bool = False,
                 metrics: Optional[MetricsCollector] = None):
        self.leg_index = leg_index
        self.visits: List[ZoneVisit] = []
        self.track_convex_hull = track_convex_hull

        self._hull: List[int] = []
        self._hull_points: List[Tuple[float, float]] = []
        self.metrics = metrics if metrics is not None else get_metrics()

    @property
    def is_open(self) -> bool:
        return bool(self.visits) and self.visits[-1].is_open

    @property
    def fixes(self) -> List[int]:
        """Arena indices of every recorded fix, in time order."""
        return [index for visit in self.visits for index in visit.fixes]

    @property
    def entries(self) -> List[int]:
        """Arena indices of the fixes that entered the zone."""
        return [visit.enter for visit in self.visits]

    @property
    def hull(self) -> List[int]:
        return list(self._hull)

    @property
    def candidates(self) -> List[int]:
        """Fixes that may be credited as turnpoint (hull vertices if tracked)."""
        return self.hull if self.track_convex_hull else self.fixes

    def __len__(self) -> int:
        return sum(len(visit.fixes) for visit in self.visits)

    def enter(self, index: int, coordinate: Tuple[float, float]):
        """Open a new visit with the entering fix."""
        self.visits.append(ZoneVisit(enter=index))
        self._record(index, coordinate)

    def add(self, index: int, coordinate: Tuple[float, float]):
        """Record a fix inside the currently open visit."""
        self._record(index, coordinate)

    def leave(self, index: int):
        """Close the currently open visit."""
        if self.visits:
            self.visits[-1].exit = index

    def _record(self, index: int, coordinate: Tuple[float, float]):
        self.visits[-1].fixes.append(index)

        if not self.track_convex_hull:
            return

        indices = self._hull + [index]
        points = self._hull_points + [coordinate]
        keep = convex_hull_indices(points)

        self._hull = [indices[i] for i in keep]
        self._hull_points = [points[i] for i in keep]
        self.metrics.record_histogram('hull_size', len(self._hull))


class TaskPointTracker:
    """
    Track task progress fix by fix.

    Usage:
        tracker = TaskPointTracker(task, TrackerConfig(track_convex_hull=True))
        for fix in fixes:
            events = tracker.update(fix)

        tracker.starts           # arena indices of all valid starts
        tracker.area_visits[0]   # visits of the first turnpoint
        tracker.finish           # arena index of the finish fix

    Diagnostics go to `metrics`, the global collector unless one is given
    (one collector per competitor keeps their counts apart).

    Leg cursor:
        None         -> no valid start yet
        0..legs-1    -> on that leg (heading to turnpoint cursor + 1)
        len(points)  -> finished (terminal)
    """

    def __init__(self, task: Task, config: Optional[TrackerConfig] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.task = task
        self.config = config or TrackerConfig()
        self.metrics = metrics if metrics is not None else get_metrics()

        self.fixes: List[Fix] = []
        self.starts: List[int] = []
        self.finish: Optional[int] = None

        # area_visits[k] belongs to turnpoint k + 1
        self.area_visits: List[AreaVisit] = [
            AreaVisit(k, self.config.track_convex_hull, self.metrics)
            for k in range(len(task.points) - 2)
        ]

        self._cursor: Optional[int] = None

    @property
    def current_leg_index(self) -> Optional[int]:
        """Index of the current leg, None before the start and after the finish."""
        if self._cursor is None or self._cursor >= len(self.task.legs):
            return None
        return self._cursor

    @property
    def has_start(self) -> bool:
        return bool(self.starts)

    @property
    def has_finish(self) -> bool:
        return self.finish is not None

    @property
    def reached_first_turnpoint(self) -> bool:
        return self._cursor is not None and self._cursor >= 1

    @property
    def on_final_leg(self) -> bool:
        return self._cursor == len(self.task.legs) - 1

    @property
    def last_fix(self) -> Optional[Fix]:
        return self.fixes[-1] if self.fixes else None

    @property
    def finish_fix(self) -> Optional[Fix]:
        return self.fixes[self.finish] if self.finish is not None else None

    def latest_start_before(self, index: int, inclusive: bool = False) -> Optional[int]:
        """
        Latest recorded start strictly before the fix at `index`.

        With `inclusive` the fix at `index` itself is accepted if it is a
        start.
        """
        time = self.fixes[index].time
        for start in reversed(self.starts):
            if inclusive and start == index:
                return start
            if start < index and self.fixes[start].time < time:
                return start
        return None

    def update(self, fix: Fix) -> List[TaskEvent]:
        """
        Process the next fix.

        Args:
            fix: Next fix, not older than the previous one

        Returns:
            Events triggered by this fix (empty or exactly one)
        """
        self.metrics.increment('fixes_in')

        if self.has_finish:
            self.metrics.increment_skip('after_finish')
            return []

        index = len(self.fixes)
        self.fixes.append(fix)

        if index == 0:
            self.metrics.increment_skip('first_fix')
            return []

        last_fix = self.fixes[index - 1]
        if fix.time < last_fix.time:
            logger.warning(f"Out-of-order fix: {fix.time} < {last_fix.time}")
            self.metrics.increment('out_of_order_fixes')

        return self._update(index, fix, last_fix)

    def _update(self, index: int, fix: Fix, last_fix: Fix) -> List[TaskEvent]:
        p1, p2 = last_fix.coordinate, fix.coordinate
        cursor = self._cursor

        # starts are accepted until the first turnpoint is reached
        if cursor is None or cursor == 0:
            if self.task.start.shape.check_start(p1, p2):
                self.starts.append(index)
                self._cursor = 0
                self.metrics.increment('starts_detected')
                logger.debug(f"Start #{len(self.starts)} at {fix.time}")
                return [TaskEvent.from_fix(TaskEventType.START, fix, 0)]

            if cursor is None:
                self.metrics.increment_skip('not_started')
                return []

        if cursor >= 1:
            self._record_inside(cursor - 1, index, p2)

        if self.on_final_leg:
            if self.task.finish.shape.check_entry(p1, p2):
                self.finish = index
                self._cursor = len(self.task.points)
                self.metrics.increment('finishes_detected')
                logger.debug(f"Finish at {fix.time}")
                return [TaskEvent.from_fix(TaskEventType.FINISH, fix, len(self.task.points) - 1)]
            return []

        turnpoint = self.task.points[cursor + 1]
        if turnpoint.shape.check_entry(p1, p2):
            area = self.area_visits[cursor]
            area.enter(index, p2)
            if not turnpoint.shape.has_area:
                area.leave(index)

            self._cursor = cursor + 1
            self.metrics.increment('turns_detected')
            logger.debug(f"Turnpoint {cursor + 1} reached at {fix.time}")
            return [TaskEvent.from_fix(TaskEventType.TURN, fix, cursor + 1)]

        return []

    def _record_inside(self, area_index: int, index: int, point: Tuple[float, float]):
        """Keep recording fixes inside the last reached turnpoint zone."""
        shape = self.task.points[area_index + 1].shape
        if not shape.has_area:
            return

        area = self.area_visits[area_index]
        if shape.is_inside(point):
            if area.is_open:
                area.add(index, point)
            else:
                area.enter(index, point)
        elif area.is_open:
            area.leave(index)
