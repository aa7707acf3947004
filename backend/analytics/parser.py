import io

import pandas as pd

from .formatting import parse_time

REQUIRED_COLUMNS = [
    "player",
    "time",
]

def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize common column name variants to our required schema."""
    colmap = {c: str(c).strip().lower() for c in df.columns}
    df = df.rename(columns=colmap)

    # common synonyms
    synonyms = {
        "name": "player",
        "player_name": "player",
        "runner": "player",
        "username": "player",
        "user": "player",
        "seconds": "time",
        "time_s": "time",
        "time_seconds": "time",
        "duration": "time",
        "record": "time",
        "completion_time": "time",
    }
    # first matching synonym wins; the rest keep their own name
    renames = {}
    for k, v in synonyms.items():
        if k in df.columns and v not in df.columns and v not in renames.values():
            renames[k] = v
    df = df.rename(columns=renames)

    dupes = sorted({c for c in df.columns if list(df.columns).count(c) > 1})
    if dupes:
        raise ValueError(f"Duplicate columns after normalization: {dupes}")

    return df

def _coerce_time(value) -> float:
    try:
        return parse_time(value)
    except ValueError:
        return float("nan")

def clean_times(df: pd.DataFrame) -> pd.DataFrame:
    """Validate columns and coerce times to positive float seconds."""
    df = normalize_columns(df)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}. Expected: {REQUIRED_COLUMNS}")

    df = df[REQUIRED_COLUMNS].dropna(subset=["player"]).copy()
    df["player"] = df["player"].astype(str).str.strip()
    df["time"] = df["time"].map(_coerce_time).astype(float)

    # unparseable / non-positive / inf times are dropped, not fatal
    df = df[df["time"].gt(0) & df["time"].lt(float("inf"))]
    df = df[df["player"] != ""]

    return df.sort_values(["player", "time"], kind="mergesort").reset_index(drop=True)

def parse_times_file(uploaded_file) -> pd.DataFrame:
    """Parse an uploaded CSV/Excel file into a normalized player/time DataFrame.

    Supported:
    - .csv
    - .xlsx, .xls
    """
    name = getattr(uploaded_file, "name", "").lower()
    content = uploaded_file.read()

    if name.endswith(".csv"):
        df = pd.read_csv(io.BytesIO(content), dtype=str)
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        df = pd.read_excel(io.BytesIO(content))
    else:
        raise ValueError("Unsupported file type. Please upload CSV or Excel.")

    return clean_times(df)
