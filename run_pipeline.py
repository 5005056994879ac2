#!/usr/bin/env python3
"""
Coffee Ratings Pipeline - Main Runner

Usage:
    python run_pipeline.py --help
    python run_pipeline.py load        # Read or download raw ratings
    python run_pipeline.py clean       # Clean and stage the table
    python run_pipeline.py aggregate   # Group summaries and correlations
    python run_pipeline.py model       # OLS regressions
    python run_pipeline.py report      # Tables, figures, Markdown
    python run_pipeline.py qa          # QA report
    python run_pipeline.py all         # Run full pipeline
"""

import sys

from coffee_ratings.cli import main

if __name__ == "__main__":
    sys.exit(main())
