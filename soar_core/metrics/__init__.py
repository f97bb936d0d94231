"""
Metrics Module: Diagnostics, counters, histograms.

- Counters: fixes_in, starts/turns/finishes detected, edges_evaluated
- Histograms: hull_size, area_candidates
- Skip reason codes for every fix the tracker ignores

Usage:
    from soar_core.metrics import get_metrics

    metrics = get_metrics()
    metrics.increment('fixes_in')
    metrics.increment_skip('after_finish')
    metrics.record_histogram('hull_size', 8)
"""

from .counters import MetricsCollector

# Global singleton for easy access
_global_metrics = None


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector singleton.

    Returns:
        MetricsCollector instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _global_metrics
    _global_metrics = MetricsCollector()


__all__ = ['MetricsCollector', 'get_metrics', 'reset_metrics']
