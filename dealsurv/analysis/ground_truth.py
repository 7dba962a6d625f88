"""Ground truth verification utilities.

Compares Kaplan-Meier estimates against the analytic survival curve of
the hazard that generated the data, and against lifelines as an
independent implementation.
"""

import sys
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence

import numpy as np
import pandas as pd
from lifelines import KaplanMeierFitter

from ..data.cohort import Sample
from ..data.hazards import HazardModel
from ..data.scenarios import CohortScenario
from ..data.simulator import CohortSimulator
from ..errors import InvalidParameter
from ..metrics.kaplan_meier import KaplanMeierEstimator, SurvivalCurve


def theoretical_survival(hazard: HazardModel, times: Iterable[float]) -> np.ndarray:
    """Analytic survival 1 - F(t) of a hazard on a grid of times."""
    times = np.asarray(list(times) if not isinstance(times, np.ndarray) else times, dtype=float)
    return 1.0 - np.asarray(hazard.cumulative_event_rate(times), dtype=float)


@dataclass
class CurveComparison:
    """Kaplan-Meier estimate next to the analytic survival curve.

    Attributes:
        table: One row per grid time with km_survival, theoretical_survival,
            ci_lower, ci_upper, deviation and covered columns.
        max_abs_deviation: Largest |km - theoretical| over the grid.
        coverage: Fraction of grid times whose theoretical value lies
            inside the confidence bounds.
        n: Number of entities behind the estimate.
    """

    table: pd.DataFrame
    max_abs_deviation: float
    coverage: float
    n: int

    def to_dict(self) -> Dict[str, float]:
        return {
            "n": self.n,
            "max_abs_deviation": self.max_abs_deviation,
            "coverage": self.coverage,
        }


def compare_to_theoretical(
    curve: SurvivalCurve,
    hazard: HazardModel,
    horizon: Optional[float] = None,
    times: Optional[Iterable[float]] = None,
) -> CurveComparison:
    """Compare a Kaplan-Meier curve with the hazard's analytic survival.

    Args:
        curve: Estimated survival curve.
        hazard: Hazard model that generated the data.
        horizon: Last period of the default integer grid 0..horizon.
            Defaults to the last time on the curve.
        times: Explicit grid; overrides horizon.

    Returns:
        CurveComparison over the grid.
    """
    if times is None:
        if horizon is None:
            horizon = curve.times[-1]
        if horizon < 0:
            raise InvalidParameter("horizon", horizon, "must be >= 0")
        times = np.arange(0, int(np.floor(horizon)) + 1, dtype=float)

    table = curve.evaluate(times)
    table = table.rename(columns={"survival": "km_survival"})
    table["theoretical_survival"] = theoretical_survival(hazard, table["time"].to_numpy())
    table["deviation"] = table["km_survival"] - table["theoretical_survival"]
    table["covered"] = (table["ci_lower"] <= table["theoretical_survival"]) & (
        table["theoretical_survival"] <= table["ci_upper"]
    )
    table = table[
        ["time", "km_survival", "theoretical_survival", "ci_lower", "ci_upper", "deviation", "covered"]
    ]

    return CurveComparison(
        table=table,
        max_abs_deviation=float(table["deviation"].abs().max()),
        coverage=float(table["covered"].mean()),
        n=curve.n,
    )


def compare_with_lifelines(sample: Sample, curve: SurvivalCurve) -> float:
    """Maximum difference between a curve and lifelines' Kaplan-Meier fit.

    Args:
        sample: Sample the curve was estimated from.
        curve: Curve under test.

    Returns:
        Largest absolute survival difference at the sample's durations.
    """
    kmf = KaplanMeierFitter()
    kmf.fit(
        sample.durations,
        event_observed=sample.events,
        alpha=1.0 - curve.confidence_level,
    )
    times = np.unique(np.concatenate([[0.0], sample.durations]))
    reference = kmf.survival_function_at_times(times).to_numpy()
    return float(np.max(np.abs(curve.survival_at(times) - reference)))


def convergence_study(
    scenario: CohortScenario,
    cohort_sizes: Sequence[int],
    seeds: Sequence[int] = (42,),
    max_time: Optional[float] = None,
    verbose: bool = False,
) -> pd.DataFrame:
    """Simulate, estimate and compare for each cohort size and seed.

    Args:
        scenario: Cohort configuration; its n_deals is ignored.
        cohort_sizes: Numbers of deals to simulate.
        seeds: Random seeds, one simulation per seed and size.
        max_time: Last period compared against the analytic curve.
            Defaults to the scenario's horizon.
        verbose: Whether to print progress to stderr.

    Returns:
        DataFrame with one row per (n_deals, seed).
    """
    hazard = scenario.build_hazard()
    estimator = KaplanMeierEstimator(confidence_level=scenario.confidence_level)
    if max_time is None:
        max_time = scenario.horizon_period

    rows = []
    for n_deals in cohort_sizes:
        for seed in seeds:
            simulator = CohortSimulator.from_scenario(scenario, rng=seed)
            cohort = simulator.simulate(n_deals)
            if len(cohort) == 0:
                raise InvalidParameter("cohort_sizes", n_deals, "must be >= 1")

            curve = estimator.estimate(cohort.sample())
            comparison = compare_to_theoretical(curve, hazard, horizon=max_time)
            rows.append(
                {
                    "n_deals": n_deals,
                    "seed": seed,
                    "n_events": cohort.n_events,
                    "max_abs_deviation": comparison.max_abs_deviation,
                    "coverage": comparison.coverage,
                }
            )
            if verbose:
                print(
                    f"n={n_deals} seed={seed}: "
                    f"max deviation {comparison.max_abs_deviation:.4f}, "
                    f"coverage {comparison.coverage:.1%}",
                    file=sys.stderr,
                )

    return pd.DataFrame(rows)


def summarize_convergence(results: pd.DataFrame) -> pd.DataFrame:
    """Mean and standard deviation of the study metrics per cohort size."""
    return (
        results.groupby("n_deals")[["max_abs_deviation", "coverage"]]
        .agg(["mean", "std"])
        .sort_index()
    )
