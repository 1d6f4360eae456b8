# danio_spectra/core/smoothing.py
from __future__ import annotations
import numpy as np
import pandas as pd

from .model import SignalTable


def smooth_series(values, window: int) -> pd.Series:
    """
    Centered rolling mean of fixed width with edge extension.

    For an even ``window`` the window at position i covers
    ``[i - window/2 + 1, i + window/2]``. Positions without a full window
    take the first (head) or last (tail) computed value, so the result
    always has the input's length. A missing value inside a window makes
    that position missing. If the series is shorter than the window there
    is nothing to extend from and the result is all missing.
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    s = pd.Series(values, dtype=float).reset_index(drop=True)
    n = len(s)
    if window == 1 or n == 0:
        return s.copy()
    if n < window:
        return pd.Series(np.full(n, np.nan), index=s.index)

    lead = (window - 1) // 2
    trail = window // 2
    out = s.rolling(window, min_periods=window).mean().shift(-trail)
    arr = out.to_numpy(copy=True)
    arr[:lead] = arr[lead]
    if trail:
        arr[n - trail:] = arr[n - trail - 1]
    return pd.Series(arr, index=s.index)


def smooth_table(table: SignalTable, window: int) -> SignalTable:
    """Replace every column of ``table`` with its smoothed values (in place)."""
    smoothed = {c: smooth_series(table.data[c].to_numpy(dtype=float), window).to_numpy()
                for c in table.data.columns}
    table.data = pd.DataFrame(smoothed, columns=list(table.data.columns), index=table.data.index)
    return table
