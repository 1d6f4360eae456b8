# danio_spectra/core/aggregate.py
from __future__ import annotations
import logging
from typing import Callable, Iterable
import numpy as np
import pandas as pd

from .errors import AlignmentError
from .model import SUMMARY_COLUMNS, SignalTable, WavelengthAxis

_LOG = logging.getLogger(__name__)

KEYS = ["ID", "Body", "NM_rounded"]


def round_wavelength(values) -> np.ndarray:
    """Nearest integer nm, ties to even (400.5 -> 400, 401.5 -> 402)."""
    return np.round(np.asarray(values, dtype=float)).astype(np.int64)


def check_alignment(tables: Iterable[SignalTable], axis: WavelengthAxis) -> None:
    n_axis = len(axis)
    mismatches = {t.id: t.row_count for t in tables if t.row_count != n_axis}
    if mismatches:
        raise AlignmentError(mismatches, n_axis)


def to_long(tables: Iterable[SignalTable], axis: WavelengthAxis,
            group_label: Callable[[str], str]) -> pd.DataFrame:
    """
    Wide -> long. Row i of every table is paired with axis value i.
    Columns: ID, NM, Channel, Reflectance, Body, NM_rounded.
    """
    tables = list(tables)
    check_alignment(tables, axis)

    frames = []
    for t in tables:
        # column-major, same row order as DataFrame.melt
        values = t.data.to_numpy(dtype=float)
        n_rows, n_cols = values.shape
        frames.append(pd.DataFrame({
            "ID": t.id,
            "NM": np.tile(axis.values, n_cols),
            "Channel": np.repeat(np.asarray(t.columns, dtype=object), n_rows),
            "Reflectance": values.T.ravel(),
        }))

    if not frames:
        return pd.DataFrame(columns=["ID", "NM", "Channel", "Reflectance", "Body", "NM_rounded"])

    long_df = pd.concat(frames, ignore_index=True)
    long_df["Channel"] = long_df["Channel"].astype(str)
    labels = {ch: group_label(ch) for ch in long_df["Channel"].unique()}
    long_df["Body"] = long_df["Channel"].map(labels)
    long_df["NM_rounded"] = round_wavelength(long_df["NM"])
    return long_df


def calculate_averages(tables: Iterable[SignalTable], axis: WavelengthAxis,
                       group_label: Callable[[str], str]) -> pd.DataFrame:
    """
    Mean value per (ID, Body, NM_rounded), missing values skipped.
    A group with nothing but missing values stays missing.
    Sorted by ID, Body, NM_rounded.
    """
    long_df = to_long(tables, axis, group_label)
    if long_df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    averages = (
        long_df.groupby(KEYS, sort=True)["Reflectance"]
        .mean()
        .reset_index()
    )
    _LOG.info("[aggregate] %d summary rows from %d long records", len(averages), len(long_df))
    return averages[SUMMARY_COLUMNS]


def filter_wavelength_range(summary: pd.DataFrame, min_nm: float, max_nm: float) -> pd.DataFrame:
    """Inclusive on both ends, applied to the already rounded wavelength."""
    mask = (summary["NM_rounded"] >= min_nm) & (summary["NM_rounded"] <= max_nm)
    return summary.loc[mask].reset_index(drop=True)


def bin_wavelengths(summary: pd.DataFrame, step: int) -> pd.DataFrame:
    """Re-average onto a ``step`` nm grid (ties to even). ``step == 1`` returns a copy."""
    step = int(step)
    if step < 1:
        raise ValueError(f"step must be >= 1, got {step}")
    if step == 1 or summary.empty:
        return summary.copy()
    binned = summary.copy()
    binned["NM_rounded"] = (np.round(binned["NM_rounded"].to_numpy(dtype=float) / step) * step).astype(np.int64)
    out = binned.groupby(KEYS, sort=True)["Reflectance"].mean().reset_index()
    return out[SUMMARY_COLUMNS]


def summarize_by_body(summary: pd.DataFrame) -> pd.DataFrame:
    cols = ["Body", "Mean Reflectance", "Min Reflectance", "Max Reflectance", "Count"]
    if summary.empty:
        return pd.DataFrame(columns=cols)
    g = summary.groupby("Body", sort=True)["Reflectance"]
    out = pd.DataFrame({
        "Mean Reflectance": g.mean().round(2),
        "Min Reflectance": g.min().round(2),
        "Max Reflectance": g.max().round(2),
        "Count": g.size(),
    }).reset_index()
    return out[cols]
