# danio_spectra/core/reports.py
from __future__ import annotations
from pathlib import Path
from typing import Literal
import logging
import numpy as np
import pandas as pd
from scipy.io import savemat

from .model import SUMMARY_COLUMNS

ReportFormat = Literal["csv", "mat", "both"]

_LOG = logging.getLogger(__name__)


def _write_csv(df_out: pd.DataFrame, out_csv: Path, title: str) -> Path:
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_csv, index=False, encoding="utf-8")
    _LOG.info("[OK] wrote %s → %s", title, out_csv)
    return out_csv


def _to_mat_cellstr(seq: list[str]) -> np.ndarray:
    """Make a MATLAB column cell array from a list of strings."""
    seq2 = [("" if s is None else str(s)) for s in seq]
    arr = np.empty((len(seq2), 1), dtype=object)
    arr[:, 0] = seq2
    return arr


def _write_mat(df_out: pd.DataFrame, out_mat: Path, varname: str, title: str) -> Path:
    """
    Save a MATLAB struct with one field per column.
    Text columns become Nx1 cell arrays, numeric ones Nx1 doubles (NaN kept).
    """
    out_mat.parent.mkdir(parents=True, exist_ok=True)
    mat_struct = {}
    for col in df_out.columns:
        if pd.api.types.is_numeric_dtype(df_out[col]):
            mat_struct[col] = df_out[col].to_numpy(dtype=float).reshape(-1, 1)
        else:
            mat_struct[col] = _to_mat_cellstr(df_out[col].astype(str).tolist())
    savemat(out_mat, {varname: mat_struct})
    _LOG.info("[OK] wrote %s → %s", title, out_mat)
    return out_mat


def write_summary(summary: pd.DataFrame, out_path: Path, fmt: ReportFormat = "csv",
                  mat_variable: str = "spectra", title: str = "processed spectra") -> list[Path]:
    """
    Write the tidy table (ID, Body, NM_rounded, Reflectance) with a header row.
    ``out_path`` keeps its name; the extension is set per format.
    """
    out_path = Path(out_path)
    df_out = summary[SUMMARY_COLUMNS]
    written: list[Path] = []
    if fmt in ("csv", "both"):
        written.append(_write_csv(df_out, out_path.with_suffix(".csv"), title))
    if fmt in ("mat", "both"):
        written.append(_write_mat(df_out, out_path.with_suffix(".mat"), mat_variable, title))
    return written


def read_summary(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, dtype={"ID": str, "Body": str})
