"""Simulation of censored deal cohorts and Kaplan-Meier survival estimation."""

from .errors import (
    DealSurvError,
    InvalidParameter,
    EmptySample,
    DegenerateHazard,
    HorizonAdjustedWarning,
)
from .data import (
    HazardModel,
    WeibullHazard,
    CohortSimulator,
    CohortScenario,
    DealCohort,
    Sample,
    simulate,
    simulate_cohort,
)
from .metrics import KaplanMeierEstimator, SurvivalCurve, estimate

__version__ = "0.1.0"

__all__ = [
    "DealSurvError",
    "InvalidParameter",
    "EmptySample",
    "DegenerateHazard",
    "HorizonAdjustedWarning",
    "HazardModel",
    "WeibullHazard",
    "CohortSimulator",
    "CohortScenario",
    "DealCohort",
    "Sample",
    "simulate",
    "simulate_cohort",
    "KaplanMeierEstimator",
    "SurvivalCurve",
    "estimate",
]
