"""Period hazard models.

Each model is defined by a cumulative distribution function F and exposes:
- cumulative_event_rate(t) -> F(t), probability the event occurred by period t
- period_event_rate(t) -> (F(t) - F(t-1)) / (1 - F(t-1)), the conditional
  probability of the event in period t given survival to period t
- survival(t) -> 1 - F(t)

Models hold only their constructor parameters and never change after
construction.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence, Union

import numpy as np
from scipy import stats

from ..errors import DegenerateHazard, InvalidParameter

ArrayLike = Union[float, Sequence[float], np.ndarray]


def _as_output(values: np.ndarray, scalar: bool) -> Union[float, np.ndarray]:
    return float(values) if scalar else values


def _check_probability(function: str, t: np.ndarray, values: np.ndarray) -> None:
    """Raise DegenerateHazard if any value falls outside [0, 1]."""
    bad = ~((values >= 0.0) & (values <= 1.0))
    if np.any(bad):
        idx = int(np.argmax(bad))
        raise DegenerateHazard(function, float(t.ravel()[idx]), float(values.ravel()[idx]))


class HazardModel(ABC):
    """Base class for period hazard models."""

    name: str = "hazard"

    @abstractmethod
    def _cdf(self, t: np.ndarray) -> np.ndarray:
        """Cumulative distribution function evaluated elementwise."""
        pass

    def cumulative_event_rate(self, t: ArrayLike) -> Union[float, np.ndarray]:
        """Probability that the event has occurred by period t.

        Raises:
            DegenerateHazard: If the CDF leaves [0, 1].
        """
        scalar = np.ndim(t) == 0
        t = np.asarray(t, dtype=float)
        values = np.asarray(self._cdf(t), dtype=float)
        _check_probability("cumulative_event_rate", t, values)
        return _as_output(values, scalar)

    def period_event_rate(self, t: ArrayLike) -> Union[float, np.ndarray]:
        """Conditional probability of the event in period t.

        Once the event is certain by t - 1 (F(t - 1) = 1) the conditional
        probability is taken to be 1.

        Raises:
            DegenerateHazard: If the result leaves [0, 1], e.g. because the
                CDF is decreasing somewhere.
        """
        scalar = np.ndim(t) == 0
        t = np.asarray(t, dtype=float)
        p = np.asarray(self.cumulative_event_rate(t), dtype=float)
        p_prev = np.asarray(self.cumulative_event_rate(t - 1.0), dtype=float)

        exhausted = p_prev >= 1.0
        denom = np.where(exhausted, 1.0, 1.0 - p_prev)
        rate = np.where(exhausted, 1.0, (p - p_prev) / denom)

        _check_probability("period_event_rate", t, rate)
        return _as_output(rate, scalar)

    def survival(self, t: ArrayLike) -> Union[float, np.ndarray]:
        """Analytic survival function S(t) = 1 - F(t)."""
        scalar = np.ndim(t) == 0
        values = 1.0 - np.asarray(self.cumulative_event_rate(t), dtype=float)
        return _as_output(values, scalar)

    def describe(self) -> str:
        """One-line parameter banner."""
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()})"


class WeibullHazard(HazardModel):
    """Two-parameter Weibull hazard.

    F(t) = 1 - exp(-(t / scale) ** shape) for t > 0, else 0.

    shape (k): < 1 decreasing hazard, = 1 constant (exponential), > 1 increasing
    scale (λ): characteristic time, in periods

    Args:
        shape: Weibull shape parameter k.
        scale: Weibull scale parameter lambda.
    """

    name = "weibull"

    def __init__(self, shape: float, scale: float):
        if not shape > 0:
            raise InvalidParameter("shape", shape, "must be > 0")
        if not scale > 0:
            raise InvalidParameter("scale", scale, "must be > 0")
        self.shape = float(shape)
        self.scale = float(scale)
        self._dist = stats.weibull_min(c=self.shape, scale=self.scale)

    def _cdf(self, t: np.ndarray) -> np.ndarray:
        return self._dist.cdf(t)

    def describe(self) -> str:
        return f"k = {self.shape:g} ; lambda = {self.scale:g}"


class ExponentialHazard(HazardModel):
    """Exponential hazard with a constant instantaneous rate.

    Args:
        rate: Instantaneous event rate per period.
    """

    name = "exponential"

    def __init__(self, rate: float):
        if not rate > 0:
            raise InvalidParameter("rate", rate, "must be > 0")
        self.rate = float(rate)
        self._dist = stats.expon(scale=1.0 / self.rate)

    def _cdf(self, t: np.ndarray) -> np.ndarray:
        return self._dist.cdf(t)

    def describe(self) -> str:
        return f"rate = {self.rate:g}"


class ConstantPeriodHazard(HazardModel):
    """Same conditional event probability in every period (geometric law).

    F(t) = 1 - (1 - p) ** floor(t) for t >= 0.

    Args:
        probability: Per-period conditional event probability in [0, 1].
    """

    name = "constant"

    def __init__(self, probability: float):
        if not 0.0 <= probability <= 1.0:
            raise InvalidParameter("probability", probability, "must be in [0, 1]")
        self.probability = float(probability)

    def _cdf(self, t: np.ndarray) -> np.ndarray:
        periods = np.floor(np.maximum(t, 0.0))
        return 1.0 - (1.0 - self.probability) ** periods

    def describe(self) -> str:
        return f"p = {self.probability:g}"


class PiecewiseConstantHazard(HazardModel):
    """Period-specific conditional event probabilities.

    rates[i] applies to period i + 1. Periods beyond the last entry reuse
    the final rate.

    Args:
        rates: Conditional event probabilities, one per period.
    """

    name = "piecewise"

    def __init__(self, rates: Sequence[float]):
        rates = np.asarray(rates, dtype=float)
        if rates.ndim != 1 or len(rates) == 0:
            raise InvalidParameter("rates", rates, "must be a non-empty sequence")
        if np.any((rates < 0.0) | (rates > 1.0)):
            raise InvalidParameter("rates", rates.tolist(), "must all be in [0, 1]")
        self.rates = rates
        # log survival after each whole period; -inf once a rate of 1 is hit
        with np.errstate(divide="ignore"):
            self._log_survival = np.concatenate([[0.0], np.cumsum(np.log1p(-rates))])

    def _cdf(self, t: np.ndarray) -> np.ndarray:
        periods = np.floor(np.maximum(t, 0.0)).astype(int)
        n_rates = len(self.rates)
        within = np.minimum(periods, n_rates)
        extra = periods - within
        log_s = self._log_survival[within]
        with np.errstate(divide="ignore", invalid="ignore"):
            tail = np.where(extra > 0, extra * np.log1p(-self.rates[-1]), 0.0)
        return 1.0 - np.exp(log_s + tail)

    def describe(self) -> str:
        return f"{len(self.rates)} period rates"


class CDFHazard(HazardModel):
    """Hazard defined by an arbitrary monotone CDF callable.

    Args:
        cdf: Function mapping periods (array) to cumulative probabilities.
        name: Label used in banners.
    """

    def __init__(self, cdf: Callable[[np.ndarray], np.ndarray], name: Optional[str] = None):
        if not callable(cdf):
            raise InvalidParameter("cdf", cdf, "must be callable")
        self.cdf = cdf
        self.name = name or getattr(cdf, "__name__", "cdf")

    def _cdf(self, t: np.ndarray) -> np.ndarray:
        return np.asarray(self.cdf(t), dtype=float)
