"""
Day Scoring.

Turns the solver results of all competitors of one day into handicapped,
ranked day scores.

All functions are pure: they work on immutable snapshots and can be run at
any time during the day (intermediate results for competitors still in
the air) or after everybody has landed.

Degenerate fields are guarded explicitly:
- empty field (N = 0) -> F = 0, Pvm = 0
- nobody above the minimum distance (n1 = 0) -> FCR = 0
- no distance flown at all (Do = 0) -> Pd = 0 for non-finishers
- no finisher speed (Vo = 0) -> Pv = 0

Reference: SC3a §8.2 (Scoring formulas)
"""

import logging
import math
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Sequence

from soar_core.config import SCORING_CONFIG
from soar_core.proto import RacingTaskResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitialDayFactors:
    """
    Day factors known before any result.

    Attributes:
        Ho: Lowest handicap (H) of all competitors
        Dm: Minimum handicapped distance to validate the day (km)
    """

    Ho: float
    Dm: float


@dataclass(frozen=True)
class DayFactors(InitialDayFactors):
    """
    Field-wide scoring constants of one day.

    Attributes:
        Do: Highest handicapped distance (Dh) of the day (km)
        Vo: Highest finisher's handicapped speed (Vh) of the day (km/h)
        n1: Competitors with a handicapped distance of at least Dm
        n2: Finishers exceeding 2/3 of the best handicapped speed
        n3: Finishers, regardless of speed
        n4: Competitors with a handicapped distance above Dm/2
        N: Competitors having had a competition launch
        To: Marking time of the finisher whose Vh = Vo, lowest on ties (s)
        Pm: Maximum available score before F and FCR
        F: Day factor
        FCR: Completion ratio factor
        Pvm: Maximum available speed points before F and FCR
        Pdm: Maximum available distance points before F and FCR
    """

    Do: float = 0.0
    Vo: float = 0.0
    n1: int = 0
    n2: int = 0
    n3: int = 0
    n4: int = 0
    N: int = 0
    To: float = 0.0
    Pm: float = 0.0
    F: float = 0.0
    FCR: float = 0.0
    Pvm: float = 0.0
    Pdm: float = 0.0


@dataclass(frozen=True)
class InitialDayResult:
    """
    Handicapped performance of one competitor.

    Attributes:
        completed: Task completed
        D: Marking distance (km)
        H: Handicap (1.0 if handicapping is not used)
        Dh: Handicapped distance, D x Ho / H (km)
        T: Marking time (s), None if unknown
        V: Marking speed, D / T (km/h), 0 if not completed
        Vh: Handicapped speed, V x Ho / H (km/h)
        landed: False for competitors still flying
        extra: Caller data carried through scoring and ranking (callsign, ...)
    """

    completed: bool
    D: float
    H: float
    Dh: float
    T: Optional[float]
    V: float
    Vh: float
    landed: bool = True
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class DayResult(InitialDayResult):
    """
    Scored day result of one competitor.

    Attributes:
        Pv: Speed points
        Pd: Distance points
        S: Score for the day (points, rounded)
    """

    Pv: float = 0.0
    Pd: float = 0.0
    S: int = 0


def create_initial_day_factors(handicaps: Sequence[float],
                               min_distance: Optional[float] = None) -> InitialDayFactors:
    """
    Create the day factors known before the first result.

    Args:
        handicaps: Handicap fractions of all competitors
        min_distance: Minimum handicapped distance Dm (km), defaults to
            SCORING_CONFIG['min_distance_km']

    Returns:
        InitialDayFactors with Ho = lowest handicap
    """
    if min_distance is None:
        min_distance = SCORING_CONFIG['min_distance_km']

    if handicaps:
        Ho = min(handicaps)
    else:
        Ho = SCORING_CONFIG['default_handicap']

    return InitialDayFactors(Ho=Ho, Dm=min_distance)


def create_initial_day_result(completed: bool, D: float, T: Optional[float], H: float,
                              initial: InitialDayFactors, landed: bool = True,
                              **extra) -> InitialDayResult:
    """
    Create the handicapped result of one competitor.

    Args:
        completed: Task completed
        D: Marking distance (km)
        T: Marking time (s)
        H: Competitor's handicap
        initial: Day factors
        landed: False if the competitor is still flying
        **extra: Caller data kept on the result

    Returns:
        InitialDayResult
    """
    # Finisher's marking speed (V = D / T)
    if completed and T:
        V = D / (T / 3600)
    else:
        V = 0.0

    # Handicapped distance (Dh = D x Ho / H) and speed (Vh = V x Ho / H)
    factor = initial.Ho / H
    Dh = D * factor
    Vh = V * factor

    return InitialDayResult(
        completed=completed, D=D, H=H, Dh=Dh, T=T, V=V, Vh=Vh, landed=landed, extra=extra)


def create_intermediate_day_result(result: RacingTaskResult, H: float,
                                   initial: InitialDayFactors, **extra) -> InitialDayResult:
    """
    Create the result of a competitor that is still flying.

    The best known solver distance and marking time take the place of the
    final values. Works for racing and area task results alike; for area
    tasks the marking time is never below the minimum task time.
    """
    return create_initial_day_result(
        result.completed,
        (result.distance or 0.0) / 1000,
        result.scoring_time,
        H,
        initial,
        landed=False,
        **extra,
    )


def calculate_day_factors(results: Sequence[InitialDayResult],
                          initial: InitialDayFactors) -> DayFactors:
    """
    Calculate the field-wide factors of the day.

    Args:
        results: Handicapped results of all competitors
        initial: Day factors known before any result

    Returns:
        DayFactors
    """
    max_points = SCORING_CONFIG['max_points']

    N = len(results)
    finishers = [r for r in results if r.completed]

    Do = max((r.Dh for r in results), default=0.0)
    Vo = max((r.Vh for r in results), default=0.0)

    n1 = sum(1 for r in results if r.Dh >= initial.Dm)
    n2 = sum(1 for r in results if r.Vh > Vo * (2 / 3))
    n3 = len(finishers)
    n4 = sum(1 for r in results if r.Dh > initial.Dm / 2)

    # lowest time of the fastest finishers
    To = min((r.T for r in finishers if r.Vh == Vo and r.T is not None), default=0.0)

    if finishers:
        Pm = max(0.0, min(max_points, 5 * Do - 250, 400 * (To / 3600) - 200))
    else:
        Pm = max(0.0, min(max_points, 5 * Do - 250))

    F = min(1.0, 1.25 * n1 / N) if N > 0 else 0.0
    FCR = min(1.0, 1.2 * (n2 / n1) + 0.6) if n1 > 0 else 0.0

    Pvm = (2 / 3) * (n2 / N) * Pm if N > 0 else 0.0
    Pdm = Pm - Pvm

    if n1 == 0:
        logger.debug(f"No competitor reached Dm={initial.Dm} km, day not valid")

    return DayFactors(
        Ho=initial.Ho, Dm=initial.Dm,
        Do=Do, Vo=Vo, n1=n1, n2=n2, n3=n3, n4=n4, N=N, To=To,
        Pm=Pm, F=F, FCR=FCR, Pvm=Pvm, Pdm=Pdm,
    )


def calculate_day_result(result: InitialDayResult, factors: DayFactors) -> DayResult:
    """Score one competitor against the day factors."""
    Vo = factors.Vo

    # Finisher's speed points
    if result.completed and Vo > 0 and result.Vh >= (2 / 3) * Vo:
        Pv = factors.Pvm * (result.Vh - (2 / 3) * Vo) / ((1 / 3) * Vo)
    else:
        Pv = 0.0

    # Competitor's distance points
    if result.completed:
        Pd = factors.Pdm
    elif factors.Do > 0:
        Pd = factors.Pdm * (result.Dh / factors.Do)
    else:
        Pd = 0.0

    S = _round_half_up(factors.F * factors.FCR * (Pv + Pd))

    return DayResult(
        completed=result.completed, D=result.D, H=result.H, Dh=result.Dh, T=result.T,
        V=result.V, Vh=result.Vh, landed=result.landed, extra=result.extra,
        Pv=Pv, Pd=Pd, S=S,
    )


def compare_day_results(a: DayResult, b: DayResult) -> int:
    """
    Ordering of two scored results: score, then handicapped speed, then
    handicapped distance, all descending.
    """
    for key in ('S', 'Vh', 'Dh'):
        diff = getattr(b, key) - getattr(a, key)
        if diff != 0:
            return 1 if diff > 0 else -1
    return 0


def rank_day_results(results: Sequence[InitialDayResult],
                     factors: Optional[DayFactors] = None,
                     initial: Optional[InitialDayFactors] = None) -> List[DayResult]:
    """
    Score and rank the whole field.

    Args:
        results: Handicapped results of all competitors
        factors: Day factors (calculated from `results` and `initial` if None)
        initial: Day factors known before any result (needed if `factors`
            is None)

    Returns:
        Scored results, best first
    """
    if factors is None:
        if initial is None:
            raise ValueError("Either factors or initial day factors are required")
        factors = calculate_day_factors(results, initial)

    scored = [calculate_day_result(result, factors) for result in results]
    return sorted(scored, key=cmp_to_key(compare_day_results))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
