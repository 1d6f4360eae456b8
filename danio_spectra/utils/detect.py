# danio_spectra/utils/detect.py
from __future__ import annotations
from collections import Counter
from pathlib import Path
from dataclasses import dataclass

from ..core.errors import ConfigurationError


@dataclass(frozen=True)
class DetectedItem:
    path: Path        # actual path on disk
    file_id: str      # filename stem, used as the specimen id


def file_id_from_path(p: Path) -> str:
    """``data/F1.tsv`` -> ``F1``"""
    return p.stem


def discover_inputs(root: Path, pattern: str = "*.tsv") -> list[DetectedItem]:
    """
    Collect the files in ``root`` matching ``pattern`` (non-recursive).
    Raises ConfigurationError for a missing directory, for zero matches and
    for two files that would produce the same id.
    """
    root = Path(root)
    if not root.is_dir():
        raise ConfigurationError(f"Directory does not exist: {root}")

    items = [
        DetectedItem(p.resolve(), file_id_from_path(p))
        for p in root.glob(pattern)
        if p.is_file()
    ]
    if not items:
        raise ConfigurationError(f"No files matching {pattern!r} found in directory: {root}")

    dupes = sorted(fid for fid, n in Counter(i.file_id for i in items).items() if n > 1)
    if dupes:
        raise ConfigurationError(f"Duplicate file ids in {root}: {', '.join(dupes)}")

    # deterministic ordering
    items.sort(key=lambda x: (x.file_id, str(x.path)))
    return items
