"""Error types raised by the task scoring core."""


class TaskConfigurationError(ValueError):
    """Task description can't be turned into a valid task (unknown zone type,
    missing zone parameters, too few turnpoints, negative distance)."""


class SolverConsistencyError(RuntimeError):
    """Internal tracker/solver state is inconsistent. Indicates a bug, not
    bad input."""
