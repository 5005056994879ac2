"""
Pipeline Runner

Orchestrates the complete 5-stage coffee ratings pipeline.

Stages:
    1. LOAD      - Read (or download) the raw ratings table
    2. CLEAN     - Project, filter and normalize the table
    3. AGGREGATE - Country, species and correlation summaries
    4. MODEL     - OLS regressions with VIF diagnostics
    5. REPORT    - Tables, figures and Markdown reports

Each stage consumes the previous stage's in-memory result. Stages are run
strictly in order; a SchemaError in stage 2 stops the run.
"""

import logging
import time
from typing import Optional

from ..config import PipelineConfig

logger = logging.getLogger(__name__)

STAGES = ("load", "clean", "aggregate", "model", "report")


def run_full_pipeline(cfg: Optional[PipelineConfig] = None) -> dict:
    """
    Run the complete 5-stage pipeline.

    Returns:
        dict: Results from all stages
    """
    from .stage1_load import run_load
    from .stage2_clean import run_clean
    from .stage3_aggregate import run_aggregate
    from .stage4_model import run_models
    from .stage5_report import run_report

    cfg = cfg or PipelineConfig()
    start_time = time.time()

    logger.info("=" * 60)
    logger.info("COFFEE RATINGS PIPELINE")
    logger.info("=" * 60)

    results = {
        'stage1_load': None,
        'stage2_clean': None,
        'stage3_aggregate': None,
        'stage4_model': None,
        'stage5_report': None,
    }

    raw = run_load(cfg)
    results['stage1_load'] = raw

    cleaned = run_clean(raw, cfg)
    results['stage2_clean'] = cleaned

    aggregates = run_aggregate(cleaned, cfg)
    results['stage3_aggregate'] = aggregates

    model_results = run_models(cleaned, cfg)
    results['stage4_model'] = model_results

    results['stage5_report'] = run_report(
        cleaned, aggregates, model_results, cfg, raw_rows=len(raw)
    )

    elapsed = time.time() - start_time

    logger.info("=" * 60)
    logger.info("PIPELINE COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Total time: {elapsed:.1f} seconds")
    logger.info(f"Models fitted: {len(model_results['models'])}/"
                f"{len(model_results['models']) + len(model_results['errors'])}")

    return results


def run_single_stage(stage: str, cfg: Optional[PipelineConfig] = None):
    """
    Run only a single stage.

    Stages after ``clean`` read the staged cleaned table, running the load
    and clean stages first when it does not exist yet.

    Args:
        stage: One of STAGES
        cfg: Pipeline configuration

    Returns:
        The stage's result
    """
    cfg = cfg or PipelineConfig()
    logger.info(f"Running single stage: {stage}")

    if stage == "load":
        from .stage1_load import run_load
        return run_load(cfg)
    elif stage == "clean":
        from .stage2_clean import run_clean
        return run_clean(cfg=cfg)
    elif stage == "aggregate":
        from .stage3_aggregate import run_aggregate
        return run_aggregate(cfg=cfg)
    elif stage == "model":
        from .stage4_model import run_models
        return run_models(cfg=cfg)
    elif stage == "report":
        from .stage2_clean import load_cleaned
        from .stage3_aggregate import run_aggregate
        from .stage4_model import run_models
        from .stage5_report import run_report
        cleaned = load_cleaned(cfg)
        return run_report(cleaned, run_aggregate(cleaned, cfg), run_models(cleaned, cfg), cfg)
    else:
        raise ValueError(f"Invalid stage: {stage}. Must be one of {', '.join(STAGES)}.")
