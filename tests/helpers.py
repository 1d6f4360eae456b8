from pathlib import Path

import numpy as np


def write_tsv(path: Path, header, rows, skip_rows: int = 3):
    """Ocean Optics style export: header line, free-text metadata, body; every line ends with a tab."""
    lines = ["\t".join(header) + "\t"]
    for i in range(skip_rows - 1):
        lines.append(f"Metadata line {i + 1}")
    for row in rows:
        lines.append("\t".join(str(v) for v in row) + "\t")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_wavelengths(path: Path, values):
    lines = ["Wavelength"] + [f"{v:.3f}" for v in values]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def channel_rows(n_rows: int, channels: dict):
    """Rows of [time, ch1, ch2, ...]; ``channels`` maps name -> callable(i) or constant."""
    rows = []
    for i in range(n_rows):
        row = [float(i)]
        for value in channels.values():
            row.append(value(i) if callable(value) else value)
        rows.append(row)
    return rows


def linear_axis(n: int, start: float = 300.0, step: float = 0.5):
    return list(np.arange(n) * step + start)
