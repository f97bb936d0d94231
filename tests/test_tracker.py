"""
Unit tests for the turnpoint visit tracker.

Tests cover:
- Start, turn and finish events in sequence
- Re-starts before the first turnpoint
- Area visits (re-entries, hull candidates)
- Skipped fixes (first fix, not started, after finish) and out-of-order fixes
"""

from soar_core.domain import Cylinder, Line, Task, TaskPointTracker, TrackerConfig
from soar_core.metrics import get_metrics
from soar_core.proto import Fix, TaskEventType


def feed(tracker, fixes):
    events = []
    for fix in fixes:
        events.extend(tracker.update(fix))
    return events


class TestEvents:
    """Tests for start/turn/finish detection."""

    def test_racing_sequence(self, racing_task, racing_flight):
        tracker = TaskPointTracker(racing_task)
        events = feed(tracker, racing_flight)

        assert [e.type for e in events] == [
            TaskEventType.START, TaskEventType.TURN, TaskEventType.FINISH,
        ]
        assert [e.num for e in events] == [0, 1, 2]
        assert [e.time for e in events] == [
            racing_flight[2].time, racing_flight[7].time, racing_flight[11].time,
        ]
        assert events[0].point == racing_flight[2].coordinate

    def test_state_after_finish(self, racing_task, racing_flight):
        tracker = TaskPointTracker(racing_task)
        feed(tracker, racing_flight)

        assert tracker.has_start
        assert tracker.has_finish
        assert tracker.starts == [2]
        assert tracker.finish == 11
        assert tracker.finish_fix == racing_flight[11]
        assert tracker.current_leg_index is None

    def test_cursor_progress(self, racing_task, racing_flight):
        tracker = TaskPointTracker(racing_task)

        feed(tracker, racing_flight[:2])
        assert tracker.current_leg_index is None
        assert not tracker.has_start

        feed(tracker, racing_flight[2:3])
        assert tracker.current_leg_index == 0
        assert not tracker.reached_first_turnpoint

        feed(tracker, racing_flight[3:8])
        assert tracker.current_leg_index == 1
        assert tracker.reached_first_turnpoint
        assert tracker.on_final_leg

    def test_single_fix_never_triggers(self, racing_task, xy):
        tracker = TaskPointTracker(racing_task)
        assert tracker.update(Fix(time=0, coordinate=xy(0, 800))) == []

    def test_restart_before_first_turnpoint(self, racing_task, make_flight):
        """Every start before the first turnpoint is recorded."""
        flight = make_flight([
            (0, 0), (0, 800),        # start #1
            (0, 3000), (0, 200),     # back into the start cylinder
            (0, 800),                # start #2
            (0, 10000), (0, 19800),  # turnpoint 1
            (0, 0), (0, 800),        # leaving the start again doesn't count
        ])
        tracker = TaskPointTracker(racing_task)
        events = feed(tracker, flight)

        assert [e.type for e in events] == [
            TaskEventType.START, TaskEventType.START, TaskEventType.TURN,
        ]
        assert tracker.starts == [1, 4]
        assert tracker.latest_start_before(6) == 4
        assert tracker.latest_start_before(3) == 1
        assert tracker.latest_start_before(1) is None
        assert tracker.latest_start_before(1, inclusive=True) == 1

    def test_no_start_no_turn(self, racing_task, make_flight):
        """Entering the turnpoint without a start does nothing."""
        flight = make_flight([(5000, 0), (0, 10000), (0, 19800), (0, 20000)])
        tracker = TaskPointTracker(racing_task)

        assert feed(tracker, flight) == []
        assert tracker.area_visits[0].visits == []


class TestAreaVisits:
    """Tests for fixes recorded inside turnpoint zones."""

    def test_fixes_recorded_inside(self, aat_task, aat_flight):
        tracker = TaskPointTracker(aat_task)
        feed(tracker, aat_flight)

        assert len(tracker.area_visits) == 3
        assert tracker.area_visits[0].fixes == [5, 6]
        assert tracker.area_visits[1].fixes == [9, 10, 11, 12]
        assert tracker.area_visits[2].fixes == [14, 15]

    def test_visit_exit(self, aat_task, aat_flight):
        tracker = TaskPointTracker(aat_task)
        feed(tracker, aat_flight)

        visit = tracker.area_visits[1].visits[0]
        assert visit.enter == 9
        assert visit.exit == 13
        assert not visit.is_open

    def test_reentry_opens_new_visit(self, aat_task, make_flight):
        flight = make_flight([
            (0, 0), (0, 500), (0, 1500),
            (0, 36000), (0, 42000),    # area 1 entered
            (6000, 42000),             # left
            (0, 42000), (0, 43000),    # re-entered
        ])
        tracker = TaskPointTracker(aat_task)
        feed(tracker, flight)

        area = tracker.area_visits[0]
        assert len(area.visits) == 2
        assert area.entries == [3, 6]
        assert area.visits[0].fixes == [3, 4]
        assert area.visits[1].fixes == [6, 7]
        assert area.is_open
        assert len(area) == 4

    def test_candidates_without_hull(self, aat_task, aat_flight):
        tracker = TaskPointTracker(aat_task, TrackerConfig(track_convex_hull=False))
        feed(tracker, aat_flight)

        assert tracker.area_visits[1].candidates == [9, 10, 11, 12]
        assert tracker.area_visits[1].hull == []

    def test_hull_drops_interior_fixes(self, aat_task, make_flight):
        flight = make_flight([
            (0, 0), (0, 500), (0, 1500),
            (0, 36000),                 # area 1 entered
            (-3000, 40000),
            (0, 44000),
            (3000, 40000),
            (0, 40000),                 # center, inside the hull
        ])
        tracker = TaskPointTracker(aat_task, TrackerConfig(track_convex_hull=True))
        feed(tracker, flight)

        area = tracker.area_visits[0]
        assert area.fixes == [3, 4, 5, 6, 7]
        assert area.candidates == [3, 4, 5, 6]

        assert max(get_metrics().snapshot().histograms['hull_size']) == 4

    def test_line_turnpoint_records_entry_only(self, xy, ruler, make_flight):
        task = Task([
            Cylinder(xy(0, 0), 500, ruler),
            Line(xy(0, 10000), 1000, 0, ruler),
            Cylinder(xy(0, 20000), 500, ruler),
        ], ruler=ruler)
        flight = make_flight([(0, 0), (0, 600), (0, 9900), (0, 10100), (0, 10200)])

        tracker = TaskPointTracker(task)
        events = feed(tracker, flight)

        assert [e.type for e in events] == [TaskEventType.START, TaskEventType.TURN]
        area = tracker.area_visits[0]
        assert area.fixes == [3]
        assert not area.is_open


class TestSkippedFixes:
    """Tests for skip reasons and out-of-order handling."""

    def test_skip_reasons(self, racing_task, racing_flight, xy):
        tracker = TaskPointTracker(racing_task)
        feed(tracker, racing_flight)
        tracker.update(Fix(time=racing_flight[-1].time + 1000, coordinate=xy(21000, 20000)))

        snapshot = get_metrics().snapshot()
        assert snapshot.skip_reasons['first_fix'] == 1
        assert snapshot.skip_reasons['not_started'] == 1
        assert snapshot.skip_reasons['after_finish'] == 1
        assert snapshot.counters['fixes_in'] == len(racing_flight) + 1

    def test_fixes_after_finish_not_stored(self, racing_task, racing_flight, xy):
        tracker = TaskPointTracker(racing_task)
        feed(tracker, racing_flight)

        assert tracker.update(Fix(time=racing_flight[-1].time + 1000, coordinate=xy(0, 0))) == []
        assert len(tracker.fixes) == len(racing_flight)

    def test_transition_counters(self, racing_task, racing_flight):
        feed(TaskPointTracker(racing_task), racing_flight)

        metrics = get_metrics()
        assert metrics.get_counter('starts_detected') == 1
        assert metrics.get_counter('turns_detected') == 1
        assert metrics.get_counter('finishes_detected') == 1

    def test_out_of_order_fix(self, racing_task, xy, caplog):
        """Out-of-order fixes are logged and counted, then processed."""
        tracker = TaskPointTracker(racing_task)
        tracker.update(Fix(time=10_000, coordinate=xy(0, 0)))
        events = tracker.update(Fix(time=5_000, coordinate=xy(0, 800)))

        assert [e.type for e in events] == [TaskEventType.START]
        assert get_metrics().get_counter('out_of_order_fixes') == 1
        assert 'out-of-order' in caplog.text.lower()
