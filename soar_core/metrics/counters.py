"""
Solver diagnostics.

Counts what the tracker and solvers do with each fix:
- fixes in, fixes skipped (by reason), out-of-order fixes
- task transitions (starts, turns, finishes) and tasks created
- AAT work: edges evaluated, hull size, candidates per area

Every fix that the tracker ignores is counted with a skip reason.
"""

import logging
import threading
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List

logger = logging.getLogger(__name__)

STANDARD_COUNTERS = (
    'fixes_in',
    'fixes_skipped',
    'out_of_order_fixes',
    'starts_detected',
    'turns_detected',
    'finishes_detected',
    'edges_evaluated',
    'tasks_created',
)


@dataclass
class CounterSnapshot:
    """Copy of the collector state at `timestamp`."""

    timestamp: float
    counters: Dict[str, int]
    skip_reasons: Dict[str, int]
    histograms: Dict[str, List[float]]


class MetricsCollector:
    """
    Thread-safe counters and sample histograms.

    Usage:
        metrics = MetricsCollector()
        tracker = TaskPointTracker(task, metrics=metrics)
        ...
        metrics.snapshot().skip_reasons['not_started']
    """

    SKIP_REASONS = {
        'first_fix': 'No previous fix to test transitions against',
        'after_finish': 'Task already finished',
        'not_started': 'No valid start yet',
    }

    def __init__(self, max_samples: int = 10000):
        self.max_samples = max_samples
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = defaultdict(int)
        self._skip_reasons: Dict[str, int] = defaultdict(int)
        self._histograms: Dict[str, List[float]] = defaultdict(list)
        self._init_keys()

    def _init_keys(self):
        # standard keys show up in snapshots even when zero
        for name in STANDARD_COUNTERS:
            self._counters[name] += 0
        for reason in self.SKIP_REASONS:
            self._skip_reasons[reason] += 0

    def increment(self, counter_name: str, value: int = 1):
        with self._lock:
            self._counters[counter_name] += value

    def increment_skip(self, reason: str, value: int = 1):
        """Count `value` skipped fixes under `reason` (one of SKIP_REASONS)."""
        if reason not in self.SKIP_REASONS:
            logger.warning(f"Unknown skip reason '{reason}'")

        with self._lock:
            self._skip_reasons[reason] += value
            self._counters['fixes_skipped'] += value

    def get_counter(self, counter_name: str) -> int:
        with self._lock:
            return self._counters.get(counter_name, 0)

    def record_histogram(self, histogram_name: str, value: float):
        """Record a sample; only the latest `max_samples` are kept."""
        with self._lock:
            samples = self._histograms[histogram_name]
            samples.append(value)
            if len(samples) > self.max_samples:
                del samples[:len(samples) - self.max_samples]

    def snapshot(self) -> CounterSnapshot:
        with self._lock:
            return CounterSnapshot(
                timestamp=time.time(),
                counters=dict(self._counters),
                skip_reasons=dict(self._skip_reasons),
                histograms={k: list(v) for k, v in self._histograms.items()},
            )

    def reset(self):
        with self._lock:
            self._counters.clear()
            self._skip_reasons.clear()
            self._histograms.clear()
            self._init_keys()
