"""Cohort scenario configuration for deal simulation."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..errors import InvalidParameter, check_int
from .hazards import ConstantPeriodHazard, ExponentialHazard, HazardModel, WeibullHazard
from .types import HazardFamily


@dataclass
class CohortScenario:
    """Configuration for a simulated deal cohort.

    Attributes:
        name: Unique identifier (e.g., "reference", "large_cohort")
        description: Human-readable description
        n_deals: Number of deals to simulate (default: 25)
        end_period: Latest period at which a deal can start
        horizon_period: Observation cutoff (reporting date)
        minimum_duration: Minimum original maturity of a deal, in periods
        hazard_family: Distribution family of the period hazard
        shape: Weibull shape parameter k
        scale: Weibull scale parameter lambda
        rate: Exponential rate, or per-period probability for CONSTANT
        confidence_level: Level of the pointwise Kaplan-Meier bounds
    """

    # Identity
    name: str
    description: str = ""

    # Cohort
    n_deals: int = 25
    end_period: int = 200
    horizon_period: int = 200
    minimum_duration: int = 30

    # Hazard
    hazard_family: HazardFamily = HazardFamily.WEIBULL
    shape: float = 1.05
    scale: float = 250.0
    rate: float = 0.004

    # Estimation
    confidence_level: float = 0.95

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate the scenario configuration.

        A horizon below the end period is not an error here; the simulator
        corrects it with a warning.

        Raises:
            InvalidParameter: If configuration is invalid.
        """
        check_int("n_deals", self.n_deals, 0)
        check_int("end_period", self.end_period, 1)
        check_int("horizon_period", self.horizon_period, 1)
        check_int("minimum_duration", self.minimum_duration, 0)

        if not 0.0 < self.confidence_level < 1.0:
            raise InvalidParameter(
                "confidence_level", self.confidence_level, "must be in (0, 1)"
            )

        if self.hazard_family == HazardFamily.WEIBULL:
            if self.shape <= 0:
                raise InvalidParameter("shape", self.shape, "must be > 0")
            if self.scale <= 0:
                raise InvalidParameter("scale", self.scale, "must be > 0")
        elif self.hazard_family == HazardFamily.EXPONENTIAL:
            if self.rate <= 0:
                raise InvalidParameter("rate", self.rate, "must be > 0")
        elif self.hazard_family == HazardFamily.CONSTANT:
            if not 0.0 <= self.rate <= 1.0:
                raise InvalidParameter("rate", self.rate, "must be in [0, 1]")

    def build_hazard(self) -> HazardModel:
        """Instantiate the configured hazard model."""
        if self.hazard_family == HazardFamily.WEIBULL:
            return WeibullHazard(shape=self.shape, scale=self.scale)
        elif self.hazard_family == HazardFamily.EXPONENTIAL:
            return ExponentialHazard(rate=self.rate)
        elif self.hazard_family == HazardFamily.CONSTANT:
            return ConstantPeriodHazard(probability=self.rate)
        else:
            raise InvalidParameter(
                "hazard_family", self.hazard_family, "is not a known family"
            )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "n_deals": self.n_deals,
            "end_period": self.end_period,
            "horizon_period": self.horizon_period,
            "minimum_duration": self.minimum_duration,
            "hazard_family": self.hazard_family.name.lower(),
            "shape": self.shape,
            "scale": self.scale,
            "rate": self.rate,
            "confidence_level": self.confidence_level,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CohortScenario":
        """Create from dictionary.

        Args:
            data: Dictionary with scenario configuration.

        Returns:
            CohortScenario instance.
        """
        family_str = data.get("hazard_family", "weibull")
        try:
            hazard_family = HazardFamily[family_str.upper()]
        except KeyError:
            raise InvalidParameter(
                "hazard_family",
                family_str,
                f"must be one of {[f.name.lower() for f in HazardFamily]}",
            ) from None

        return cls(
            name=data["name"],
            description=data.get("description", ""),
            n_deals=data.get("n_deals", 25),
            end_period=data.get("end_period", 200),
            horizon_period=data.get("horizon_period", 200),
            minimum_duration=data.get("minimum_duration", 30),
            hazard_family=hazard_family,
            shape=data.get("shape", 1.05),
            scale=data.get("scale", 250.0),
            rate=data.get("rate", 0.004),
            confidence_level=data.get("confidence_level", 0.95),
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "CohortScenario":
        """Load scenario from JSON file.

        Args:
            path: Path to JSON file.

        Returns:
            CohortScenario instance.
        """
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, path: Union[str, Path]) -> None:
        """Save scenario to JSON file.

        Args:
            path: Path to save JSON file.
        """
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def banner(self, horizon_period: Optional[int] = None) -> str:
        """Multi-line summary of the scenario parameters.

        Args:
            horizon_period: Horizon actually used by the simulator, when it
                differs from the configured one.
        """
        hazard = self.build_hazard()
        if horizon_period is None:
            horizon_period = self.horizon_period
        return "\n".join(
            [
                f"Scenario: {self.name}",
                f"  Deals: {self.n_deals}",
                f"  Latest start period: {self.end_period}",
                f"  Observation horizon: {horizon_period}",
                f"  Minimum duration: {self.minimum_duration}",
                f"  Hazard: {hazard.name} ({hazard.describe()})",
                f"  Confidence level: {self.confidence_level:.0%}",
            ]
        )


# Predefined scenarios
PREDEFINED_SCENARIOS = {
    "reference": CohortScenario(
        name="reference",
        description="25 deals under a Weibull(k=1.05, lambda=250) hazard",
    ),
    "large_cohort": CohortScenario(
        name="large_cohort",
        description="10000 deals under the reference Weibull hazard",
        n_deals=10000,
    ),
    "long_horizon": CohortScenario(
        name="long_horizon",
        description="1000 deals observed until period 400",
        n_deals=1000,
        horizon_period=400,
    ),
    "constant_hazard": CohortScenario(
        name="constant_hazard",
        description="1000 deals with a constant 0.4% period default probability",
        n_deals=1000,
        hazard_family=HazardFamily.CONSTANT,
        rate=0.004,
    ),
}


def get_scenario(name: str) -> CohortScenario:
    """Get a predefined scenario by name.

    Args:
        name: Scenario name.

    Returns:
        CohortScenario instance.

    Raises:
        InvalidParameter: If scenario name is not found.
    """
    if name not in PREDEFINED_SCENARIOS:
        raise InvalidParameter(
            "scenario", name, f"is unknown; available: {list(PREDEFINED_SCENARIOS.keys())}"
        )
    return PREDEFINED_SCENARIOS[name]
