"""Time display helpers (mm:ss:mmm)."""

from __future__ import annotations

import math
import re

_TIME_RE = re.compile(r"^\s*(?:(\d+):)?(\d+)(?:[:.](\d{1,3}))?\s*$")


def format_time(seconds: float) -> str:
    """Format seconds as ``mm:ss:mmm`` (milliseconds are floored, not rounded)."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "-"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    millis = int(math.floor((seconds % 1) * 1000))
    return f"{minutes:02d}:{secs:02d}:{millis:03d}"


def _checked(seconds: float, value) -> float:
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Invalid time: {value!r}. Must be a finite, non-negative number of seconds.")
    return float(seconds)


def parse_time(value) -> float:
    """Parse a time cell into seconds.

    Accepts plain numbers (seconds) or ``mm:ss:mmm`` / ``mm:ss.mmm`` / ``ss.mmm``.
    Negative, non-finite and out-of-range (``1:75``) values raise ``ValueError``.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid time: {value!r}")
    if isinstance(value, (int, float)):
        return _checked(float(value), value)

    text = str(value).strip()
    try:
        seconds = float(text)
    except ValueError:
        seconds = None
    if seconds is not None:
        return _checked(seconds, value)

    m = _TIME_RE.match(text)
    if not m:
        raise ValueError(f"Invalid time: {value!r}. Expected seconds or mm:ss:mmm.")

    minutes = int(m.group(1) or 0)
    secs = int(m.group(2))
    if m.group(1) is not None and secs >= 60:
        raise ValueError(f"Invalid time: {value!r}. Seconds must be below 60 when minutes are given.")
    # "1:05:5" means 500ms, same as a decimal fraction
    frac = m.group(3) or ""
    millis = int(frac.ljust(3, "0")) if frac else 0
    return minutes * 60 + secs + millis / 1000.0
