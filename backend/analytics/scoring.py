"""Scoring helpers.

The main scoring logic lives in analytics.level_points (pure + deterministic).
This module is the import surface for the API and keeps refactors easy.
"""

from .level_points import (
    BASE_POINTS,
    MINIMUM_PBS,
    CompetitivenessResult,
    ScoreContributions,
    ScoreInput,
    ScoreResult,
    average,
    calculate_level_points,
    clamp,
    competitiveness_multiplier,
    length_multiplier,
    popularity_modifier,
    rating_modifier,
    score_level,
)

__all__ = [
    "BASE_POINTS",
    "MINIMUM_PBS",
    "CompetitivenessResult",
    "ScoreContributions",
    "ScoreInput",
    "ScoreResult",
    "average",
    "calculate_level_points",
    "clamp",
    "competitiveness_multiplier",
    "length_multiplier",
    "popularity_modifier",
    "rating_modifier",
    "score_level",
]
