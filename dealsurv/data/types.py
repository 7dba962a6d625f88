"""Core enumerations for cohort simulation and estimation."""

from enum import Enum, auto


class HazardFamily(Enum):
    """Distribution family of the period hazard."""

    WEIBULL = auto()
    EXPONENTIAL = auto()
    CONSTANT = auto()  # Same conditional event probability every period


class DealState(Enum):
    """Lifecycle state of a simulated deal."""

    AT_RISK = auto()
    EVENT = auto()  # Event observed before maturity and horizon
    CENSORED = auto()  # Matured or reached the horizon without an event


class ConfidenceType(Enum):
    """Transform used for pointwise Kaplan-Meier confidence bounds."""

    PLAIN = auto()
    LOG = auto()
    LOG_LOG = auto()
