"""Quality assurance utilities."""

from .validators import ValidationResult, validate_cleaned_ratings
from .reporters import generate_qa_report, render_validation_table, compute_missingness

__all__ = [
    "ValidationResult",
    "validate_cleaned_ratings",
    "generate_qa_report",
    "render_validation_table",
    "compute_missingness",
]
