"""
Scoring Module: day scores of a whole competition field.

- create_initial_day_factors: lowest handicap and minimum distance
- create_initial_day_result / create_intermediate_day_result: per competitor
- calculate_day_factors: field-wide constants (Do, Vo, n1..n4, Pm, F, FCR)
- calculate_day_result / rank_day_results: points and ranking
"""

from .day_scoring import (
    InitialDayFactors,
    DayFactors,
    InitialDayResult,
    DayResult,
    create_initial_day_factors,
    create_initial_day_result,
    create_intermediate_day_result,
    calculate_day_factors,
    calculate_day_result,
    compare_day_results,
    rank_day_results,
)

__all__ = [
    'InitialDayFactors',
    'DayFactors',
    'InitialDayResult',
    'DayResult',
    'create_initial_day_factors',
    'create_initial_day_result',
    'create_intermediate_day_result',
    'calculate_day_factors',
    'calculate_day_result',
    'compare_day_results',
    'rank_day_results',
]
