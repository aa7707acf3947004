"""Lightweight schema helpers (kept simple).

If you want nicer docs fast, plug in drf-spectacular later.
"""

POINTS_RESPONSE_EXAMPLE = {
    "points": 310,
    "contributions": {
        "length": 0.6196,
        "competitiveness": 0.25,
        "rating": 1.0,
        "popularity": 0.8,
    },
    "competitiveness": {
        "modifier": 0.25,
        "spread_score": 0.0,
        "pb_ratio": 0.0,
        "grindiness_score": 0.0,
    },
    "rating_modifier": 1.3,
    "input": {
        "top_times": [10.0],
        "personal_bests": 1,
        "total_records": 1,
        "level_rating": 100.0,
    },
    "wr_display": "00:10:000",
}

POINTS_RESPONSE_KEYS = list(POINTS_RESPONSE_EXAMPLE.keys())
