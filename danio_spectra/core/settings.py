# danio_spectra/core/settings.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .errors import ConfigurationError

ColumnPolicy = Callable[[str], bool]
LabelPolicy = Callable[[str], str]


def marker_policy(marker: str) -> ColumnPolicy:
    """Signal columns are the ones whose label contains ``marker``."""
    def _is_signal(label: str) -> bool:
        return marker in str(label)
    return _is_signal


def strip_suffix_policy(n_chars: int = 1) -> LabelPolicy:
    """Group label = channel name minus its trailing replicate index (``LD2`` -> ``LD``)."""
    n = int(n_chars)

    def _label(channel: str) -> str:
        s = str(channel)
        return s[:-n] if n > 0 else s
    return _label


@dataclass(frozen=True)
class PipelineSettings:
    data_dir: Path = Path("data/Experimental")
    pattern: str = "*.tsv"
    wavelength_file: Path = Path("data/Experimental/Wavelength.txt")
    skip_rows: int = 9

    required_min_rows: int = 1458
    filter_start: int = 278
    filter_end: int = 1458
    wavelength_filter_start: int = 278
    wavelength_filter_end: int = 2056

    smoothing_window: int = 50

    min_wavelength: float = 280
    max_wavelength: float = 700
    signal_marker: str = "Transmission"
    label_strip: int = 1
    workers: int = 1

    processed_file: Path = Path("processed_spectral_data.csv")
    report_format: str = "csv"          # csv | mat | both
    mat_variable: str = "spectra"
    plots_dir: Path | None = None

    export_dir: Path = Path("data/color_worker_output")
    export_min_wavelength: float = 400
    export_max_wavelength: float = 700
    export_extension: str = "csv"
    export_step: int = 1
    export_workers: int = 1

    signal_column_policy: ColumnPolicy | None = field(default=None, compare=False)
    group_label_policy: LabelPolicy | None = field(default=None, compare=False)

    def __post_init__(self):
        self.validate()

    # --- policies ---
    def is_signal_column(self, label: str) -> bool:
        policy = self.signal_column_policy or marker_policy(self.signal_marker)
        return policy(label)

    def group_label(self, channel: str) -> str:
        policy = self.group_label_policy or strip_suffix_policy(self.label_strip)
        return policy(channel)

    # --- checks ---
    def validate(self) -> None:
        if self.skip_rows < 1:
            raise ConfigurationError(f"skip_rows must be >= 1 (header row), got {self.skip_rows}")
        _check_band("filter", self.filter_start, self.filter_end)
        _check_band("wavelength filter", self.wavelength_filter_start, self.wavelength_filter_end)
        if self.filter_end > self.required_min_rows:
            raise ConfigurationError(
                f"filter end {self.filter_end} exceeds required_min_rows {self.required_min_rows}"
            )
        if self.smoothing_window < 1:
            raise ConfigurationError(f"smoothing window must be >= 1, got {self.smoothing_window}")
        if self.min_wavelength > self.max_wavelength:
            raise ConfigurationError(
                f"min_wavelength {self.min_wavelength} > max_wavelength {self.max_wavelength}"
            )
        if self.export_min_wavelength > self.export_max_wavelength:
            raise ConfigurationError(
                f"export min_wavelength {self.export_min_wavelength} > "
                f"max_wavelength {self.export_max_wavelength}"
            )
        if self.export_step < 1:
            raise ConfigurationError(f"export step must be >= 1, got {self.export_step}")
        if self.report_format not in ("csv", "mat", "both"):
            raise ConfigurationError(f"unknown report format: {self.report_format!r}")

    @classmethod
    def from_config(cls, cfg: dict | None, base_dir: Path | None = None) -> "PipelineSettings":
        """
        Build settings from the parsed config.yaml dict.
        Relative paths are resolved against ``base_dir`` when given.
        Missing keys keep their defaults.
        """
        cfg = cfg or {}
        inp = cfg.get("input", {}) or {}
        flt = cfg.get("filter", {}) or {}
        smo = cfg.get("smoothing", {}) or {}
        ana = cfg.get("analysis", {}) or {}
        out = cfg.get("output", {}) or {}
        exp = cfg.get("export", {}) or {}
        d = cls()

        def _path(val, default):
            if val is None:
                return default
            p = Path(val)
            if base_dir is not None and not p.is_absolute():
                p = base_dir / p
            return p

        plots = out.get("plots")
        if plots is True:
            plots_dir = _path("plots", None)
        elif plots:
            plots_dir = _path(plots, None)
        else:
            plots_dir = None

        try:
            return cls(
                data_dir=_path(inp.get("path"), d.data_dir),
                pattern=str(inp.get("pattern", d.pattern)),
                wavelength_file=_path(inp.get("wavelength_file"), d.wavelength_file),
                skip_rows=int(inp.get("skip_rows", d.skip_rows)),
                required_min_rows=int(flt.get("required_min_rows", d.required_min_rows)),
                filter_start=int(flt.get("start", d.filter_start)),
                filter_end=int(flt.get("end", d.filter_end)),
                wavelength_filter_start=int(flt.get("wavelength_start", d.wavelength_filter_start)),
                wavelength_filter_end=int(flt.get("wavelength_end", d.wavelength_filter_end)),
                smoothing_window=int(smo.get("window", d.smoothing_window)),
                min_wavelength=float(ana.get("min_wavelength", d.min_wavelength)),
                max_wavelength=float(ana.get("max_wavelength", d.max_wavelength)),
                signal_marker=str(ana.get("signal_marker", d.signal_marker)),
                label_strip=int(ana.get("label_strip", d.label_strip)),
                workers=max(1, int(ana.get("workers", d.workers))),
                processed_file=_path(out.get("processed_file"), d.processed_file),
                report_format=str(out.get("format", d.report_format)).lower(),
                mat_variable=str(out.get("mat_variable", d.mat_variable)),
                plots_dir=plots_dir,
                export_dir=_path(exp.get("output_dir"), d.export_dir),
                export_min_wavelength=float(exp.get("min_wavelength", d.export_min_wavelength)),
                export_max_wavelength=float(exp.get("max_wavelength", d.export_max_wavelength)),
                export_extension=str(exp.get("extension", d.export_extension)).lstrip("."),
                export_step=int(exp.get("step", d.export_step)),
                export_workers=max(1, int(exp.get("workers", d.export_workers))),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid configuration value: {e}") from e


def _check_band(name: str, start: int, end: int) -> None:
    if start < 0 or end <= start:
        raise ConfigurationError(f"{name} band must satisfy 0 <= start < end, got ({start}, {end}]")
