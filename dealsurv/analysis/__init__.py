"""Validation of Kaplan-Meier estimates against known ground truth."""

from .ground_truth import (
    CurveComparison,
    theoretical_survival,
    compare_to_theoretical,
    compare_with_lifelines,
    convergence_study,
    summarize_convergence,
)

__all__ = [
    "CurveComparison",
    "theoretical_survival",
    "compare_to_theoretical",
    "compare_with_lifelines",
    "convergence_study",
    "summarize_convergence",
]
