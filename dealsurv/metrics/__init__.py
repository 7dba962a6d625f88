"""Nonparametric survival estimation."""

from .kaplan_meier import (
    CurveRecord,
    SurvivalCurve,
    KaplanMeierEstimator,
    estimate,
    z_value,
)

__all__ = [
    "CurveRecord",
    "SurvivalCurve",
    "KaplanMeierEstimator",
    "estimate",
    "z_value",
]
