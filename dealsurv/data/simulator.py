"""Hazard-driven cohort simulator.

Each deal starts at a random period, is given a nominal maturity, and is
then exposed to a period hazard one period at a time until it experiences
the event, matures, or reaches the observation horizon.
"""

import sys
import warnings
from typing import Union

import numpy as np

from ..errors import DegenerateHazard, HorizonAdjustedWarning, InvalidParameter, check_int
from .cohort import NO_EVENT, DealCohort, Sample
from .hazards import HazardModel
from .scenarios import CohortScenario
from .types import DealState

RandomSource = Union[None, int, np.random.Generator]

DEFAULT_SEED = 42

# Integer codes of the per-deal state array
_AT_RISK = DealState.AT_RISK.value
_EVENT = DealState.EVENT.value
_CENSORED = DealState.CENSORED.value


class CohortSimulator:
    """Simulates censored deal cohorts under a period hazard.

    Args:
        hazard: Object exposing period_event_rate(t), usually a HazardModel.
        end_period: Latest period at which a deal can start (>= 1).
        horizon_period: Observation cutoff. Values below end_period are
            raised to end_period with a HorizonAdjustedWarning.
        minimum_duration: Minimum number of periods between start and
            nominal maturity (>= 0).
        rng: Random generator or seed (default: 42). Pass None to draw
            fresh OS entropy.
        verbose: Whether to print progress to stderr.

    Raises:
        InvalidParameter: If a period or duration is out of range.
    """

    def __init__(
        self,
        hazard: HazardModel,
        end_period: int,
        horizon_period: int,
        minimum_duration: int = 0,
        rng: RandomSource = DEFAULT_SEED,
        verbose: bool = False,
    ):
        if not callable(getattr(hazard, "period_event_rate", None)):
            raise InvalidParameter("hazard", hazard, "must provide period_event_rate(t)")

        self.hazard = hazard
        self.end_period = check_int("end_period", end_period, 1)
        horizon_period = check_int("horizon_period", horizon_period, 1)
        self.minimum_duration = check_int("minimum_duration", minimum_duration, 0)
        self.verbose = verbose

        if horizon_period < self.end_period:
            warnings.warn(
                f"horizon_period ({horizon_period}) can not be smaller than "
                f"end_period ({self.end_period}); using {self.end_period}",
                HorizonAdjustedWarning,
                stacklevel=2,
            )
            horizon_period = self.end_period
        self.horizon_period = horizon_period

        self.rng = np.random.default_rng(rng)

    @classmethod
    def from_scenario(
        cls,
        scenario: CohortScenario,
        rng: RandomSource = DEFAULT_SEED,
        verbose: bool = False,
    ) -> "CohortSimulator":
        """Create a simulator for a scenario configuration."""
        return cls(
            hazard=scenario.build_hazard(),
            end_period=scenario.end_period,
            horizon_period=scenario.horizon_period,
            minimum_duration=scenario.minimum_duration,
            rng=rng,
            verbose=verbose,
        )

    def simulate(self, n: int) -> DealCohort:
        """Simulate a cohort of n deals.

        Args:
            n: Number of deals (>= 0).

        Returns:
            DealCohort in deal id order.
        """
        n = check_int("n", n, 0)
        end_period = self.end_period

        # Start period and raw maturity offset, both uniform on [1, end_period]
        start = self.rng.integers(1, end_period, size=n, endpoint=True)
        offset = self.rng.integers(1, end_period, size=n, endpoint=True)
        maturity = start + offset + self.minimum_duration

        # Without an event every deal is censored at maturity or horizon
        duration = np.minimum(maturity, self.horizon_period) - start
        event_period = np.full(n, NO_EVENT, dtype=np.int64)
        state = np.full(n, _AT_RISK, dtype=np.int8)

        self._log(
            f"Simulating {n} deals over {end_period} periods "
            f"(horizon {self.horizon_period}, minimum duration {self.minimum_duration})"
        )

        for t in range(1, end_period + 1):
            # Deals whose observation window ends by period t leave the risk set
            state[(state == _AT_RISK) & (duration <= t)] = _CENSORED

            at_risk = np.flatnonzero(state == _AT_RISK)
            if len(at_risk) == 0:
                break

            rate = self._period_rate(t)
            draws = self.rng.random(len(at_risk))
            hit = at_risk[draws < rate]

            event_period[hit] = start[hit] + t
            duration[hit] = t
            state[hit] = _EVENT

        state[state == _AT_RISK] = _CENSORED
        censored = state == _CENSORED

        cohort = DealCohort(
            start_period=start,
            maturity_period=maturity,
            event_period=event_period,
            duration=duration,
            censored=censored,
            end_period=end_period,
            horizon_period=self.horizon_period,
            minimum_duration=self.minimum_duration,
        )
        self._log(f"  Events: {cohort.n_events} / {n}")
        return cohort

    def _period_rate(self, t: int) -> float:
        """Conditional event probability for period t, checked to lie in [0, 1]."""
        rate = float(self.hazard.period_event_rate(t))
        if not 0.0 <= rate <= 1.0:
            raise DegenerateHazard("period_event_rate", t, rate)
        return rate

    def _log(self, message: str) -> None:
        """Log a message if verbose mode is enabled."""
        if self.verbose:
            print(message, file=sys.stderr)


def simulate_cohort(
    n: int,
    end_period: int,
    horizon_period: int,
    minimum_duration: int,
    hazard: HazardModel,
    rng: RandomSource = DEFAULT_SEED,
) -> DealCohort:
    """Simulate a deal cohort. See CohortSimulator for the arguments."""
    simulator = CohortSimulator(
        hazard=hazard,
        end_period=end_period,
        horizon_period=horizon_period,
        minimum_duration=minimum_duration,
        rng=rng,
    )
    return simulator.simulate(n)


def simulate(
    n: int,
    end_period: int,
    horizon_period: int,
    minimum_duration: int,
    hazard: HazardModel,
    rng: RandomSource = DEFAULT_SEED,
) -> Sample:
    """Simulate n deals and return their (duration, censored) sample."""
    return simulate_cohort(
        n, end_period, horizon_period, minimum_duration, hazard, rng=rng
    ).sample()
