"""
Soaring Task Scoring Core Package.

Scores glider and paraglider competition flights against a task: start,
turnpoint and finish detection, credited distance, time and speed for
racing and assigned area tasks, and handicapped day scores.

Package structure:
- geo: Flat-earth ruler, angles, segment intersection, convex hull
- proto: Fixes, task events, solver results
- domain: Zones, task model, tracker, racing and AAT solvers
- scoring: Day factors, day results, ranking
- metrics: Diagnostics, counters, histograms

Reference: FAI Sporting Code Section 3 Annex A (SC3a)
"""

__version__ = "0.1.0"
__author__ = "Soaring Scoring Team"

from .errors import TaskConfigurationError, SolverConsistencyError
