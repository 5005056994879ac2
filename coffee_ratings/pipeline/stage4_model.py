"""
Stage 4: Regression Models

Fits every specification in the model registry:
    - M1: flavor ~ altitude_mean_meters * species
    - M2: flavor ~ altitude + species + region + processing method
          + acidity + balance + body

Each fit is isolated: a rank-deficient or under-determined model is logged
and reported, and the remaining models still run.
"""

import logging
from typing import List, Optional

import pandas as pd

from ..config import PipelineConfig
from ..exceptions import ModelFitError, ModelSpecError

logger = logging.getLogger(__name__)


def run_models(
    cleaned: Optional[pd.DataFrame] = None,
    cfg: Optional[PipelineConfig] = None,
    spec_ids: Optional[List[str]] = None,
) -> dict:
    """
    Run the modeling stage.

    Returns:
        dict: ``{"models": {id: ModelResult}, "errors": {id: message}}``
    """
    from ..analyses import fit_formula, format_results, flag_high_vif
    from ..analyses.config import get_specs

    if cleaned is None:
        from .stage2_clean import load_cleaned
        cleaned = load_cleaned(cfg)

    logger.info("=" * 60)
    logger.info("STAGE 4: REGRESSION MODELS")
    logger.info("=" * 60)

    results = {"models": {}, "errors": {}}

    for spec in get_specs(spec_ids):
        logger.info(f"{spec.id}: {spec.name}")
        try:
            result = fit_formula(
                cleaned,
                spec.formula,
                reference_levels=spec.reference_levels,
                label=spec.id,
            )
        except (ModelFitError, ModelSpecError) as e:
            logger.error(f"{spec.id} failed: {e}")
            results["errors"][spec.id] = str(e)
            continue

        results["models"][spec.id] = result
        logger.info(format_results(result))

        high = flag_high_vif(result.vif)
        if len(high) > 0:
            logger.info(f"  High VIF: {', '.join(high.index)}")

    logger.info(f"Models fitted: {len(results['models'])}, failed: {len(results['errors'])}")
    return results
