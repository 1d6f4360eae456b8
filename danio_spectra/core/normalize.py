# danio_spectra/core/normalize.py
from __future__ import annotations
import pandas as pd


def to_float(s) -> pd.Series:
    if pd.api.types.is_numeric_dtype(s):
        return s.astype(float)
    return pd.to_numeric(s.astype(str).str.strip().str.replace(",", ".", regex=False), errors="coerce")


def make_unique(labels) -> list[str]:
    """``["A", "B", "A"]`` -> ``["A", "B", "A.1"]``"""
    seen: dict[str, int] = {}
    out: list[str] = []
    for lab in labels:
        lab = str(lab)
        if lab in seen:
            seen[lab] += 1
            cand = f"{lab}.{seen[lab]}"
            while cand in seen:
                seen[lab] += 1
                cand = f"{lab}.{seen[lab]}"
            seen[cand] = 0
            out.append(cand)
        else:
            seen[lab] = 0
            out.append(lab)
    return out
