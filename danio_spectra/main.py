# danio_spectra/main.py
from __future__ import annotations
from pathlib import Path
import argparse
import logging
import sys
import yaml

from .core.errors import AlignmentError, ConfigurationError
from .core.export import export_color_worker
from .core.pipeline import run_pipeline, write_outputs
from .core.settings import PipelineSettings

DEFAULT_CONFIG = Path(__file__).resolve().parent / "config.yaml"

_LOG = logging.getLogger("danio_spectra")


def load_config(cfg_path: Path) -> dict:
    if not cfg_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _setup_logging(cfg: dict) -> None:
    log_cfg = cfg.get("logging", {}) or {}
    verbose = bool(log_cfg.get("verbose", True))
    level = str(log_cfg.get("level", "INFO")).upper() if verbose else "WARNING"
    logging.basicConfig(level=getattr(logging, level, logging.INFO),
                        format="[%(levelname)s] %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="danio-spectra",
        description="Smooth and average spectrometer .tsv exports; optionally write Color Worker files.",
    )
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="YAML configuration file")
    parser.add_argument("--export", action="store_true", help="also write Color Worker files")
    args = parser.parse_args(argv)

    try:
        # ---------- config ----------
        cfg = load_config(args.config)
        _setup_logging(cfg)
        settings = PipelineSettings.from_config(cfg, base_dir=Path.cwd())
        _LOG.info("[cfg] input=%s pattern=%s", settings.data_dir, settings.pattern)
        _LOG.info("[cfg] wavelength=%s window=%d", settings.wavelength_file, settings.smoothing_window)

        # ---------- analysis ----------
        result = run_pipeline(settings)
        for path in write_outputs(result, settings):
            _LOG.info("[out] %s", path)

        # ---------- export ----------
        if args.export:
            exported = export_color_worker(result.summary, settings)
            if exported.failed:
                _LOG.warning("[export] %d file(s) failed: %s",
                             len(exported.failed), ", ".join(sorted(exported.failed)))
    except (ConfigurationError, AlignmentError) as e:
        _LOG.error("%s", e)
        return 1
    except OSError as e:
        _LOG.error("output error: %s", e)
        return 1

    if result.warnings:
        _LOG.info("[summary] finished with %d warning(s)", len(result.warnings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
