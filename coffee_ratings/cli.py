"""
Coffee Ratings Pipeline - CLI Entry Point.

Usage
-----
    python run_pipeline.py all                       # Run full pipeline
    python run_pipeline.py load --force-download     # Refresh the raw CSV
    python run_pipeline.py clean --input ratings.csv # Clean a local copy
    python run_pipeline.py aggregate
    python run_pipeline.py model
    python run_pipeline.py report --boundaries world.geojson
    python run_pipeline.py qa                        # QA report only

``--config`` points at a JSON file of PipelineConfig fields; command-line
options override it.
"""

from __future__ import annotations

import argparse
import json
import logging
import platform
import sys
from typing import List, Optional

import numpy as np
import pandas as pd

from .config import PipelineConfig, load_config
from .exceptions import CoffeeRatingsError

logger = logging.getLogger(__name__)

COMMANDS = ["load", "clean", "aggregate", "model", "report", "qa", "all"]


def _log_env():
    """Log library versions for reproducibility."""
    import matplotlib
    import scipy

    info = {
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "numpy": np.__version__,
        "pandas": pd.__version__,
        "scipy": scipy.__version__,
        "matplotlib": matplotlib.__version__,
    }
    logger.debug("Environment: %s", json.dumps(info, indent=2))
    return info


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Merge the JSON config file with command-line overrides."""
    cfg = load_config(args.config) if args.config else PipelineConfig()
    if args.input:
        cfg.input_path = args.input
    if args.output_dir:
        cfg.output_dir = args.output_dir
    if args.boundaries:
        cfg.boundaries_path = args.boundaries
    if args.force_download:
        cfg.force_download = True
    if args.no_figures:
        cfg.make_figures = False
    return cfg


def stage_qa(cfg: PipelineConfig) -> str:
    """Validate the staged cleaned table and write qa_report.md."""
    from .pipeline import load_cleaned
    from .qa import generate_qa_report

    logger.info("=== QA Report ===")
    cleaned = load_cleaned(cfg)
    path = cfg.output_path / "qa_report.md"
    return generate_qa_report(cleaned, output_path=path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coffee-ratings",
        description="Coffee Quality Ratings - exploratory analysis pipeline",
    )
    parser.add_argument("command", choices=COMMANDS, help="Pipeline stage to run")
    parser.add_argument("--input", help="Local raw ratings file (CSV or parquet)")
    parser.add_argument("--config", help="JSON file of pipeline settings")
    parser.add_argument("--output-dir", help="Directory for tables, figures and reports")
    parser.add_argument("--boundaries", help="GeoJSON country boundaries for the map")
    parser.add_argument(
        "--force-download",
        action="store_true",
        help="Re-download the raw CSV even if a verified copy exists",
    )
    parser.add_argument("--no-figures", action="store_true", help="Skip figure rendering")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    _log_env()

    cfg = build_config(args)

    from .pipeline import run_full_pipeline, run_single_stage

    try:
        if args.command == "all":
            run_full_pipeline(cfg)
        elif args.command == "qa":
            stage_qa(cfg)
        else:
            run_single_stage(args.command, cfg)
    except CoffeeRatingsError as e:
        logger.error(f"Pipeline failed: {e}")
        return 1
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
