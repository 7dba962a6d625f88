"""Hazard models and cohort simulation."""

from .types import HazardFamily, DealState, ConfidenceType
from .hazards import (
    HazardModel,
    WeibullHazard,
    ExponentialHazard,
    ConstantPeriodHazard,
    PiecewiseConstantHazard,
    CDFHazard,
)
from .cohort import Deal, DealCohort, Sample
from .scenarios import CohortScenario, get_scenario, PREDEFINED_SCENARIOS
from .simulator import CohortSimulator, simulate, simulate_cohort

__all__ = [
    # Types
    "HazardFamily",
    "DealState",
    "ConfidenceType",
    # Hazards
    "HazardModel",
    "WeibullHazard",
    "ExponentialHazard",
    "ConstantPeriodHazard",
    "PiecewiseConstantHazard",
    "CDFHazard",
    # Cohort
    "Deal",
    "DealCohort",
    "Sample",
    # Scenarios
    "CohortScenario",
    "get_scenario",
    "PREDEFINED_SCENARIOS",
    # Simulator
    "CohortSimulator",
    "simulate",
    "simulate_cohort",
]
