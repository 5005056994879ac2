"""
Coffee Ratings Pipeline - 5-Stage Architecture

The pipeline is organized into 5 sequential stages:
    1. LOAD      - Read or download the raw ratings table
    2. CLEAN     - Project, filter and normalize
    3. AGGREGATE - Group summaries and correlations
    4. MODEL     - OLS regressions and VIF
    5. REPORT    - Tables, figures and Markdown

Usage:
    from coffee_ratings.pipeline import run_full_pipeline
    run_full_pipeline()
"""

from .stage1_load import run_load
from .stage2_clean import run_clean, load_cleaned
from .stage3_aggregate import run_aggregate
from .stage4_model import run_models
from .stage5_report import run_report
from .runner import STAGES, run_full_pipeline, run_single_stage

__all__ = [
    'run_load',
    'run_clean',
    'load_cleaned',
    'run_aggregate',
    'run_models',
    'run_report',
    'STAGES',
    'run_full_pipeline',
    'run_single_stage',
]
