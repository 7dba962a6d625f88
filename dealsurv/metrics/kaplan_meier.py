"""Kaplan-Meier product-limit estimator with Greenwood confidence bounds."""

from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats

from ..data.cohort import Sample
from ..data.types import ConfidenceType
from ..errors import EmptySample, InvalidParameter


class CurveRecord(NamedTuple):
    """One step of a Kaplan-Meier curve."""

    time: float
    n_at_risk: int
    n_events: int
    survival: float
    std_error: float
    ci_lower: float
    ci_upper: float


@dataclass(frozen=True)
class SurvivalCurve:
    """Step-function survival estimate.

    The first record is the origin (0, N, 0, 1, 0, 1, 1); every following
    record sits at a distinct event time of the sample. Between records the
    curve is constant (right-continuous steps).

    Attributes:
        records: Curve records in increasing time order.
        n_censored: Number of censored observations in the sample.
        confidence_level: Level of the pointwise bounds.
        conf_type: Transform used for the bounds.
    """

    records: Tuple[CurveRecord, ...]
    n_censored: int
    confidence_level: float
    conf_type: ConfidenceType

    @property
    def n(self) -> int:
        """Number of entities in the sample."""
        return self.records[0].n_at_risk

    @property
    def steps(self) -> Tuple[CurveRecord, ...]:
        """Records at event times, without the origin."""
        return self.records[1:]

    @property
    def times(self) -> np.ndarray:
        return np.array([r.time for r in self.records], dtype=float)

    @property
    def survival(self) -> np.ndarray:
        return np.array([r.survival for r in self.records], dtype=float)

    @property
    def ci_lower(self) -> np.ndarray:
        return np.array([r.ci_lower for r in self.records], dtype=float)

    @property
    def ci_upper(self) -> np.ndarray:
        return np.array([r.ci_upper for r in self.records], dtype=float)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def _index_at(self, times: np.ndarray) -> np.ndarray:
        idx = np.searchsorted(self.times, times, side="right") - 1
        # Before the origin the curve is 1
        return np.maximum(idx, 0)

    def survival_at(self, times: Union[float, Iterable[float]]) -> Union[float, np.ndarray]:
        """Evaluate the step function at arbitrary times.

        Args:
            times: Scalar or array of times.

        Returns:
            Survival estimate(s) at the given time(s).
        """
        scalar = np.ndim(times) == 0
        values = self.survival[self._index_at(np.asarray(times, dtype=float))]
        return float(values) if scalar else values

    def evaluate(self, times: Iterable[float]) -> pd.DataFrame:
        """Survival estimate and bounds on a grid of times."""
        if not isinstance(times, np.ndarray):
            times = list(times)
        times = np.atleast_1d(np.asarray(times, dtype=float))
        idx = self._index_at(times)
        return pd.DataFrame(
            {
                "time": times,
                "survival": self.survival[idx],
                "ci_lower": self.ci_lower[idx],
                "ci_upper": self.ci_upper[idx],
            }
        )

    def median_survival_time(self) -> Optional[float]:
        """Smallest time at which the estimate drops to 0.5 or below, if any."""
        for record in self.records:
            if record.survival <= 0.5:
                return record.time
        return None

    def as_tuples(self) -> List[Tuple[float, float, float, float]]:
        """(time, survival, ci_lower, ci_upper) for every record."""
        return [(r.time, r.survival, r.ci_lower, r.ci_upper) for r in self.records]

    def to_frame(self) -> pd.DataFrame:
        """Curve records as a DataFrame."""
        return pd.DataFrame(list(self.records), columns=CurveRecord._fields)


def z_value(confidence_level: float) -> float:
    """Two-sided standard normal quantile for a confidence level."""
    if not 0.0 < confidence_level < 1.0:
        raise InvalidParameter("confidence_level", confidence_level, "must be in (0, 1)")
    return float(stats.norm.ppf(1.0 - (1.0 - confidence_level) / 2.0))


def _bounds(
    survival: float,
    greenwood_sum: float,
    z: float,
    conf_type: ConfidenceType,
) -> Tuple[float, float]:
    """Pointwise confidence bounds clamped to [0, 1]."""
    if survival <= 0.0:
        return 0.0, 0.0

    if conf_type == ConfidenceType.PLAIN:
        half_width = z * survival * np.sqrt(greenwood_sum)
        lower, upper = survival - half_width, survival + half_width
    elif conf_type == ConfidenceType.LOG:
        factor = np.exp(z * np.sqrt(greenwood_sum))
        lower, upper = survival / factor, survival * factor
    elif conf_type == ConfidenceType.LOG_LOG:
        if survival >= 1.0:
            return 1.0, 1.0
        w = z * np.sqrt(greenwood_sum) / abs(np.log(survival))
        lower, upper = survival ** np.exp(w), survival ** np.exp(-w)
    else:
        raise InvalidParameter("conf_type", conf_type, "is not a known transform")

    return float(np.clip(lower, 0.0, 1.0)), float(np.clip(upper, 0.0, 1.0))


class KaplanMeierEstimator:
    """Product-limit survival estimator.

    S(t_j) = S(t_{j-1}) * (1 - d_j / n_j) over distinct event times t_j,
    where n_j counts entities with duration >= t_j and d_j the events at
    t_j. Variance follows Greenwood's formula.

    Args:
        confidence_level: Level of the pointwise bounds (default 0.95).
        conf_type: Transform used for the bounds (default PLAIN).
    """

    def __init__(
        self,
        confidence_level: float = 0.95,
        conf_type: ConfidenceType = ConfidenceType.PLAIN,
    ):
        self.z = z_value(confidence_level)
        if not isinstance(conf_type, ConfidenceType):
            raise InvalidParameter("conf_type", conf_type, "must be a ConfidenceType")
        self.confidence_level = confidence_level
        self.conf_type = conf_type

    def estimate(self, sample: Union[Sample, Iterable[Tuple[float, bool]]]) -> SurvivalCurve:
        """Estimate the survival curve of a censored sample.

        Args:
            sample: Sample or iterable of (duration, censored) pairs.

        Returns:
            SurvivalCurve starting at the origin.

        Raises:
            EmptySample: If the sample has no entities.
        """
        if not isinstance(sample, Sample):
            sample = Sample.from_pairs(sample)

        n = len(sample)
        if n == 0:
            raise EmptySample()

        times, inverse, exits = np.unique(
            sample.durations, return_inverse=True, return_counts=True
        )
        events = np.bincount(
            inverse, weights=(~sample.censored).astype(float), minlength=len(times)
        ).astype(int)
        # Entities with duration >= t leave the risk set only after t
        at_risk = n - np.concatenate([[0], np.cumsum(exits)[:-1]])

        records = [CurveRecord(0.0, n, 0, 1.0, 0.0, 1.0, 1.0)]
        survival = 1.0
        greenwood_sum = 0.0

        for t, n_j, d_j in zip(times, at_risk, events):
            if d_j == 0 or n_j == 0:
                continue

            if d_j == n_j:
                survival = 0.0
                std_error = 0.0
            else:
                survival *= 1.0 - d_j / n_j
                greenwood_sum += d_j / (n_j * (n_j - d_j))
                std_error = survival * np.sqrt(greenwood_sum)

            lower, upper = _bounds(survival, greenwood_sum, self.z, self.conf_type)
            records.append(
                CurveRecord(
                    time=float(t),
                    n_at_risk=int(n_j),
                    n_events=int(d_j),
                    survival=float(survival),
                    std_error=float(std_error),
                    ci_lower=lower,
                    ci_upper=upper,
                )
            )

        return SurvivalCurve(
            records=tuple(records),
            n_censored=int(np.sum(sample.censored)),
            confidence_level=self.confidence_level,
            conf_type=self.conf_type,
        )


def estimate(
    sample: Union[Sample, Iterable[Tuple[float, bool]]],
    confidence_level: float = 0.95,
    conf_type: ConfidenceType = ConfidenceType.PLAIN,
) -> SurvivalCurve:
    """Kaplan-Meier estimate of a censored sample. See KaplanMeierEstimator."""
    return KaplanMeierEstimator(confidence_level, conf_type).estimate(sample)
