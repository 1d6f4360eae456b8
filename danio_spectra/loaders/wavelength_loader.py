# danio_spectra/loaders/wavelength_loader.py
from __future__ import annotations
from pathlib import Path
import logging
import numpy as np
import pandas as pd

from ..core.errors import ConfigurationError
from ..core.model import WavelengthAxis

_LOG = logging.getLogger(__name__)


def load(path: Path) -> WavelengthAxis:
    """Whitespace-delimited reference file: one header row, one numeric column (nm)."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Wavelength file not found: {path}")
    try:
        df = pd.read_csv(path, sep=r"\s+", header=0)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Wavelength file unreadable: {path}: {e}") from e
    if df.shape[1] < 1 or df.empty:
        raise ConfigurationError(f"Wavelength file has no values: {path}")

    values = pd.to_numeric(df.iloc[:, 0], errors="coerce").to_numpy(dtype=float)
    if np.isnan(values).any():
        bad = int(np.isnan(values).sum())
        raise ConfigurationError(f"Wavelength file has {bad} non-numeric value(s): {path}")
    _LOG.info("[axis] %s: %d wavelengths", path.name, values.size)
    return WavelengthAxis(values=values, source_path=path)
