from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Level points are computed from aggregate stats about recorded times:
# - world record (index 0 of the ranked top times)
# - ranked top times (up to 50)
# - personal best count + total record count
# - community rating
# Every multiplier is independent; the orchestrator multiplies them
# together with BASE_POINTS. Invalid math (0/0, log(0), inf) never
# raises: it becomes NaN and is then treated as a zero contribution.
# ---------------------------------------------------------------------

BASE_POINTS = 2500
MINIMUM_PBS = 5


@dataclass(frozen=True)
class ScoreInput:
    top_times: Tuple[float, ...] = ()
    personal_bests: int = 0
    total_records: int = 0
    level_rating: float = 100.0

    def __post_init__(self):
        # accept any sequence from callers, store an immutable copy
        object.__setattr__(self, "top_times", tuple(float(t) for t in self.top_times))

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["top_times"] = list(self.top_times)
        return d


@dataclass(frozen=True)
class CompetitivenessResult:
    modifier: float
    spread_score: float = 0.0
    pb_ratio: float = 0.0
    grindiness_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreContributions:
    """Per-factor breakdown shown next to the points.

    ``rating`` is reported as 1 while the rating modifier is kept out of the
    product, so multiplying the four fields does not always give the score.
    """

    length: float = 0.0
    competitiveness: float = 0.0
    rating: float = 0.0
    popularity: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreResult:
    points: int
    contributions: ScoreContributions

    def to_dict(self) -> Dict[str, Any]:
        return {"points": self.points, "contributions": self.contributions.to_dict()}


def clamp(value: float, lo: float, hi: float) -> float:
    """Bound ``value`` into [lo, hi]; NaN if any argument is not finite."""
    if not (math.isfinite(value) and math.isfinite(lo) and math.isfinite(hi)):
        return math.nan
    return float(max(lo, min(hi, value)))


def average(values: Sequence[float]) -> float:
    if len(values) == 0:
        return math.nan
    return float(np.mean(np.asarray(values, dtype=float)))


def _normalise(value: float) -> float:
    return 0.0 if math.isnan(value) else float(value)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# --------------------------
# 1) LENGTH
# --------------------------
def length_multiplier(wr_time: float) -> float:
    """Duration multiplier from the WR time.

    Grows from 0.1 (WR at or below 5s) to 1.0 (WR at 20s) along an
    ease-out curve (sqrt), so the first few seconds past 5s count the most.
    From 20s on the multiplier is always 1.
    """
    MIN = 0.1
    MAX = 0.9
    START = 5.0
    END = 20.0

    if wr_time < END:
        t = clamp(wr_time - START, 0.0, END - START) / (END - START)
        eased = math.sqrt(t)
        return MIN + eased * MAX

    return 1.0


# --------------------------
# 2) COMPETITIVENESS
# --------------------------
def competitiveness_multiplier(
    wr_time: float,
    top_times: Sequence[float],
    personal_bests: int,
    total_records: int,
) -> CompetitivenessResult:
    """Competitiveness from the spread of the top times and PB grindiness.

    - spread: how far the top 50 average sits from the top 10 average
      (larger = wider field of skill, rewarded)
    - grindiness: PB-to-record ratio on a log curve (more submissions per
      PB = grindier level = lower score)

    Too few times is statistically meaningless and returns a flat 0.25.
    """
    if len(top_times) <= MINIMUM_PBS:
        return CompetitivenessResult(modifier=0.25)

    top10 = list(top_times[:10])
    top50 = list(top_times[:50])

    avg_top10 = np.float64(average(top10))
    avg_top50 = np.float64(average(top50))

    with np.errstate(divide="ignore", invalid="ignore"):
        spread_score = float((avg_top50 - avg_top10) / avg_top50)

        pb_ratio = (
            float(np.float64(personal_bests) / np.float64(total_records))
            if personal_bests > 0
            else 0.0
        )
        grindiness_score = float(1.0 + np.log(np.float64(2.0 * pb_ratio)))

    # weights intentionally sum to 0.85
    weighted_score = 0.65 * spread_score + 0.20 * grindiness_score

    return CompetitivenessResult(
        modifier=_normalise(clamp(1.0 + weighted_score, -3.0, 3.0)),
        spread_score=spread_score,
        pb_ratio=pb_ratio,
        grindiness_score=grindiness_score,
    )


# --------------------------
# 3) RATING
# --------------------------
def rating_modifier(level_rating: float) -> float:
    """Linear 0.5 (rating 0) to 1.3 (rating 100); rating clamped to [0, 100]."""
    MIN = 0.5
    MAX = 0.8
    normalised = clamp(level_rating / 100.0, 0.0, 1.0)

    return MIN + normalised * MAX


# --------------------------
# 4) POPULARITY
# --------------------------
def popularity_modifier(personal_bests: int) -> float:
    """Popularity from the number of personal bests.

    Flat 0.8 below MINIMUM_PBS, then sqrt easing from 0.75 up to 1.3 at
    PB_CAP personal bests.
    """
    MIN = 0.75
    MAX = 0.55
    PB_CAP = 250

    if personal_bests < MINIMUM_PBS:
        return MIN + 0.05

    if personal_bests < PB_CAP:
        normalised = (personal_bests - 1) / (PB_CAP - 1)
        eased = math.sqrt(normalised)
        return MIN + eased * MAX

    return MIN + MAX


# --------------------------
# Aggregate
# --------------------------
def score_level(score_input: ScoreInput) -> Tuple[ScoreResult, CompetitivenessResult]:
    """Points plus the competitiveness diagnostics they were computed from."""
    if score_input.total_records == 0:
        return ScoreResult(points=0, contributions=ScoreContributions()), CompetitivenessResult(modifier=0.0)

    top_times = score_input.top_times
    # no times at all falls back to a WR of 0 (length floor of 0.1)
    wr_time = top_times[0] if top_times else 0.0

    diagnostics = competitiveness_multiplier(
        wr_time,
        top_times,
        score_input.personal_bests,
        score_input.total_records,
    )

    length = _normalise(length_multiplier(wr_time))
    competitiveness = _normalise(diagnostics.modifier)
    rating = _normalise(rating_modifier(score_input.level_rating))
    popularity = _normalise(popularity_modifier(score_input.personal_bests))

    # the 1 is the rating slot; rating is computed but not applied yet
    points = _round_half_up(BASE_POINTS * length * competitiveness * 1 * popularity)

    logger.debug(
        "level points=%s length=%.4f competitiveness=%.4f rating=%.4f (not applied) popularity=%.4f",
        points,
        length,
        competitiveness,
        rating,
        popularity,
    )

    result = ScoreResult(
        points=points,
        contributions=ScoreContributions(
            length=length,
            competitiveness=competitiveness,
            rating=1.0,
            popularity=popularity,
        ),
    )
    return result, diagnostics


def calculate_level_points(score_input: ScoreInput) -> ScoreResult:
    """Combine the four multipliers into the level's points."""
    result, _ = score_level(score_input)
    return result
