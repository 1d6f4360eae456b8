# danio_spectra/core/plotting.py
from __future__ import annotations
from pathlib import Path
import logging
import re
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

_LOG = logging.getLogger(__name__)


def _sanitize(name: str) -> str:
    s = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("_")
    return s[:120] if len(s) > 120 else s


def save_spectra_plot(file_id: str, rows: pd.DataFrame, out_dir: Path,
                      legend_ncol: int = 4) -> Path | None:
    """Reflectance vs wavelength for one specimen, one line per body region."""
    rows = rows.dropna(subset=["Reflectance"])
    if rows.empty:
        _LOG.info("[SKIP] %s: no reflectance values to plot.", file_id)
        return None
    out_dir.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(11, 6))
    for body, grp in rows.groupby("Body", sort=True):
        grp = grp.sort_values("NM_rounded")
        plt.plot(grp["NM_rounded"].values, grp["Reflectance"].values, label=str(body), alpha=0.8)
    plt.xlabel("Wavelength (nm)")
    plt.ylabel("Reflectance (%)")
    plt.title(f"Specimen: {file_id} — Spectral reflectance by body part")
    plt.grid(True, alpha=0.3)
    plt.legend(
        fontsize=8,
        ncol=legend_ncol,
        loc="upper center",
        bbox_to_anchor=(0.5, -0.12),
        frameon=False,
    )
    plt.tight_layout(rect=[0, 0.08, 1, 1])
    out_path = out_dir / f"{_sanitize(file_id) or 'specimen'}_spectra.png"
    plt.savefig(out_path, dpi=160)
    plt.close()
    _LOG.info("[OK] %s: %d body part(s) → %s", file_id, rows["Body"].nunique(), out_path)
    return out_path


def save_all_plots(summary: pd.DataFrame, out_dir: Path) -> list[Path]:
    written = []
    for file_id, rows in summary.groupby("ID", sort=True):
        p = save_spectra_plot(str(file_id), rows, Path(out_dir))
        if p is not None:
            written.append(p)
    return written
