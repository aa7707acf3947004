"""Turn a player/time collection into scoring input.

The collection is owned by the caller (API payload, uploaded file, simulator)
and passed in explicitly; the scoring functions never read it themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Union

import pandas as pd

from .level_points import ScoreInput

DEFAULT_LEVEL_RATING = 100.0
TOP_TIMES_LIMIT = 50


@dataclass(frozen=True)
class PlayerTimes:
    name: str
    times: tuple = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "times", tuple(float(t) for t in self.times))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "times": list(self.times)}


PlayersLike = Union[pd.DataFrame, Iterable[Union[PlayerTimes, Mapping[str, Any]]]]


def players_frame(players: Iterable[Union[PlayerTimes, Mapping[str, Any]]]) -> pd.DataFrame:
    """Long-form frame with one row per recorded time: ``player_id, player, time``.

    ``player_id`` is the entry's position in ``players``, so two entries that
    share a name still count as two players.
    """
    rows: List[Dict[str, Any]] = []
    for player_id, p in enumerate(players):
        name = p.name if isinstance(p, PlayerTimes) else str(p.get("name", ""))
        times = p.times if isinstance(p, PlayerTimes) else (p.get("times") or [])
        for t in times:
            rows.append({"player_id": player_id, "player": name, "time": float(t)})
    return pd.DataFrame(rows, columns=["player_id", "player", "time"])


def best_times(frame: pd.DataFrame) -> pd.Series:
    """Each player's personal best, fastest first.

    Grouped by ``player_id`` when present; uploaded frames only have a name.
    """
    if frame.empty:
        return pd.Series(dtype=float, name="time")
    key = "player_id" if "player_id" in frame.columns else "player"
    return frame.groupby(key)["time"].min().sort_values(ascending=True, kind="mergesort")


def derive_score_input(
    players: PlayersLike,
    level_rating: float = DEFAULT_LEVEL_RATING,
) -> ScoreInput:
    """Derive the aggregate stats the scoring engine expects.

    - top_times: every player's best time, ascending, first 50
    - personal_bests: players with at least one time
    - total_records: every recorded time, best or not
    """
    frame = players if isinstance(players, pd.DataFrame) else players_frame(players)
    frame = frame.dropna(subset=["time"])

    pbs = best_times(frame)
    return ScoreInput(
        top_times=tuple(float(t) for t in pbs.head(TOP_TIMES_LIMIT).tolist()),
        personal_bests=int(len(pbs)),
        total_records=int(len(frame)),
        level_rating=float(level_rating),
    )
