# abnovobench_ingest/core/normalize.py
from __future__ import annotations
import numpy as np
import pandas as pd

from .errors import MalformedRowError

# fields reported in percent by the benchmark tables
PERCENT_FIELDS: tuple[str, ...] = ("aa_recall", "peptide_recall", "aa_precision")


def clean_cell(value) -> str:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return ""
    return str(value).replace('"', "").strip()


def split_csv_line(line: str) -> list[str]:
    """Plain comma split with trimmed cells; the benchmark tables never quote commas."""
    return [clean_cell(c) for c in line.split(",")]


def parse_float_cell(value: str, column: str = "") -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise MalformedRowError(f"column {column or '?'}: not a number: {value!r}") from None
    if not np.isfinite(out):
        raise MalformedRowError(f"column {column or '?'}: not a finite number: {value!r}")
    return out


def parse_int_cell(value: str, column: str = "") -> int:
    # "3.0" shows up in exported tables; accept integral floats only
    out = parse_float_cell(value, column)
    if not out.is_integer():
        raise MalformedRowError(f"column {column or '?'}: not an integer: {value!r}")
    return int(out)


def to_float(s) -> pd.Series:
    if pd.api.types.is_numeric_dtype(s):
        return s.astype(float)
    return pd.to_numeric(s.astype(str).str.strip(), errors="coerce")


def to_depth(s) -> pd.Series:
    """Depth cells: anything non-numeric (blank, 'NA', '-') counts as 0 coverage."""
    vals = to_float(s).fillna(0.0)
    return np.trunc(vals).astype(int)


def percent_to_fraction(value: float) -> float:
    return value * 0.01
