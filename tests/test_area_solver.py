"""
Unit tests for the assigned area task solver.

Tests cover:
- Optimal credited fixes for a completed flight (checked against brute force)
- Minimum task time handling
- Intermediate solutions while still flying
- Identical results for bulk and chunked feeding
- Consistency errors for empty areas
"""

import itertools

import pytest

from soar_core.domain import AreaTaskSolver
from soar_core.errors import SolverConsistencyError
from soar_core.metrics import get_metrics
from soar_core.proto import AreaTaskResult, calculate_speed


def brute_force_distance(task, tracker):
    """Best distance over every combination of recorded area fixes."""
    fixes = tracker.fixes
    best = 0.0
    for combination in itertools.product(*[area.fixes for area in tracker.area_visits]):
        points = [task.start.center] + [fixes[i].coordinate for i in combination] + [task.finish.center]
        distance = sum(task.measure_distance(a, b) for a, b in zip(points, points[1:]))
        best = max(best, distance)
    return best


class TestCompletedTask:
    """Tests for a flight that completes the task."""

    def test_completed(self, aat_task, aat_flight):
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight)
        result = solver.result

        assert isinstance(result, AreaTaskResult)
        assert result.completed

    def test_optimal_path(self, aat_task, aat_flight):
        """The loop in area 2 is credited at its farthest fix."""
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight)

        assert solver.result.path == [
            aat_flight[2], aat_flight[6], aat_flight[11], aat_flight[15], aat_flight[18],
        ]

    def test_distance_matches_brute_force(self, aat_task, aat_flight):
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight)

        expected = brute_force_distance(aat_task, solver.tracker) - aat_task.finish.shape.radius
        assert solver.result.distance == pytest.approx(expected)
        assert solver.result.distance == pytest.approx(172_129.5, abs=1)

    def test_min_time_not_reached(self, aat_task, aat_flight):
        """Speed uses the minimum time if the flight was faster."""
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight)
        result = solver.result

        assert result.time == pytest.approx((aat_flight[18].time - aat_flight[2].time) / 1000)
        assert result.time < aat_task.options.min_time
        assert not result.aat_min_time_exceeded
        assert result.scoring_time == aat_task.options.min_time
        assert result.speed == pytest.approx(calculate_speed(result.distance, aat_task.options.min_time))

    def test_min_time_exceeded(self, aat_task, slow_aat_flight):
        solver = AreaTaskSolver(aat_task)
        solver.consume(slow_aat_flight)
        result = solver.result

        assert result.time == pytest.approx(16 * 1200)
        assert result.aat_min_time_exceeded
        assert result.scoring_time == result.time
        assert result.speed == pytest.approx(calculate_speed(result.distance, result.time))

    def test_to_dict(self, aat_task, aat_flight):
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight)
        d = solver.result.to_dict()

        assert d['completed'] is True
        assert d['aat_min_time_exceeded'] is False
        assert len(d['path']) == 5


class TestIntermediateSolutions:
    """Tests for flights still in progress."""

    def test_no_solution_yet(self, aat_task, aat_flight):
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight[:2])
        result = solver.result

        assert not result.completed
        assert result.distance == 0.0
        assert result.time is None
        assert result.speed is None
        assert result.scoring_time is None
        assert result.path == []

    def test_first_leg(self, aat_task, aat_flight):
        """On the first leg the distance is measured towards the first area."""
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight[:5])
        result = solver.result

        assert not result.completed
        assert result.distance == pytest.approx(30000, abs=1e-3)
        assert result.path == [aat_flight[2], aat_flight[4]]

    def test_inside_second_area(self, aat_task, aat_flight):
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight[:13])
        result = solver.result
        task = aat_task

        nearest = task.points[3].shape.nearest_point(aat_flight[12].coordinate)
        expected = (
            task.measure_distance(task.start.center, aat_flight[6].coordinate)
            + task.measure_distance(aat_flight[6].coordinate, aat_flight[11].coordinate)
            + task.measure_distance(aat_flight[11].coordinate, nearest)
            - task.measure_distance(aat_flight[12].coordinate, nearest)
        )

        assert not result.completed
        assert result.path == [aat_flight[2], aat_flight[6], aat_flight[11], aat_flight[12]]
        assert result.distance == pytest.approx(expected)

    def test_informational_time(self, aat_task, aat_flight):
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight[:13])
        result = solver.result

        assert result.time == pytest.approx((aat_flight[12].time - aat_flight[2].time) / 1000)
        assert result.speed == pytest.approx(calculate_speed(result.distance, result.time))

    def test_best_distance_monotonic(self, aat_task, aat_flight):
        solver = AreaTaskSolver(aat_task)

        previous = 0.0
        for fix in aat_flight:
            solver.update(fix)
            assert solver.best_distance >= previous
            previous = solver.best_distance


class TestBatchInvariance:
    """Tests for bulk versus incremental feeding."""

    @pytest.mark.parametrize("chunk_size", [1, 3, 7])
    def test_completed(self, aat_task, aat_flight, chunk_size):
        bulk = AreaTaskSolver(aat_task)
        bulk.consume(aat_flight)

        chunked = AreaTaskSolver(aat_task)
        for i in range(0, len(aat_flight), chunk_size):
            chunked.consume(aat_flight[i:i + chunk_size])

        assert chunked.result == bulk.result

    def test_intermediate(self, aat_task, aat_flight):
        bulk = AreaTaskSolver(aat_task)
        bulk.consume(aat_flight[:15])

        live = AreaTaskSolver(aat_task)
        for fix in aat_flight[:15]:
            live.update(fix)

        assert live.result.to_dict() == bulk.result.to_dict()


class TestConsistency:
    """Tests for internal consistency checks and diagnostics."""

    def test_empty_area_raises(self, aat_task):
        solver = AreaTaskSolver(aat_task)

        with pytest.raises(SolverConsistencyError):
            solver._best_predecessor(0, lambda point: 0.0)

    def test_metrics(self, aat_task, aat_flight):
        solver = AreaTaskSolver(aat_task)
        solver.consume(aat_flight)

        snapshot = get_metrics().snapshot()
        assert snapshot.counters['edges_evaluated'] > 0
        assert max(snapshot.histograms['area_candidates']) == 4
        assert snapshot.histograms['hull_size']
