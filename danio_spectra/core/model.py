# danio_spectra/core/model.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import numpy as np
import pandas as pd

SUMMARY_COLUMNS = ["ID", "Body", "NM_rounded", "Reflectance"]
EXPORT_COLUMNS = ["Wavelength", "Type", "X", "Y", "ID"]


@dataclass(frozen=True)
class RawFile:
    id: str                   # filename stem, e.g. F1
    header: tuple[str, ...]   # labels from the first record
    body: pd.DataFrame        # positional integer columns, rows after skip_rows
    source_path: Path

    @property
    def row_count(self) -> int:
        return int(self.body.shape[0])


@dataclass
class SignalTable:
    id: str
    data: pd.DataFrame        # signal columns only, unique names
    source_path: Path | None = None

    @property
    def row_count(self) -> int:
        return int(self.data.shape[0])

    @property
    def columns(self) -> list[str]:
        return [str(c) for c in self.data.columns]


@dataclass
class WavelengthAxis:
    values: np.ndarray        # nm, float
    source_path: Path | None = None

    def __len__(self) -> int:
        return int(self.values.size)


@dataclass
class PipelineResult:
    summary: pd.DataFrame                      # SUMMARY_COLUMNS
    tables: dict[str, SignalTable]
    axis: WavelengthAxis
    measurements: pd.DataFrame                 # ID, Counts
    warnings: list = field(default_factory=list)


@dataclass
class ExportResult:
    written: list[Path] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)   # composite-id -> error text
    warnings: list = field(default_factory=list)
