"""Random players/times for poking at the points formula.

Seeded numpy generators keep a run reproducible (same seed -> same players).
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from .features import PlayerTimes

DEFAULT_MIN_TIME = 30.0
DEFAULT_MAX_TIME = 90.0
DEFAULT_TIMES_PER_PLAYER = 10


def generate_random_times(
    count: int,
    min_time: float = DEFAULT_MIN_TIME,
    max_time: float = DEFAULT_MAX_TIME,
    rng: Optional[np.random.Generator] = None,
) -> List[float]:
    """``count`` uniform times in [min_time, max_time)."""
    if count < 0:
        raise ValueError("count must be >= 0")
    if not min_time < max_time:
        raise ValueError(f"min_time ({min_time}) must be lower than max_time ({max_time})")

    rng = rng if rng is not None else np.random.default_rng()
    return [float(t) for t in rng.uniform(min_time, max_time, size=count)]


def generate_players(
    n_players: int = 10,
    times_per_player: int = DEFAULT_TIMES_PER_PLAYER,
    min_time: float = DEFAULT_MIN_TIME,
    max_time: float = DEFAULT_MAX_TIME,
    start_index: int = 1,
    seed: Optional[int] = None,
) -> List[PlayerTimes]:
    """Players named ``Player N`` (N from start_index), each with random times."""
    if n_players < 0:
        raise ValueError("n_players must be >= 0")

    rng = np.random.default_rng(seed)
    return [
        PlayerTimes(
            name=f"Player {start_index + i}",
            times=tuple(generate_random_times(times_per_player, min_time, max_time, rng=rng)),
        )
        for i in range(n_players)
    ]
