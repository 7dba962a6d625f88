"""Exception types raised by the simulator and the estimator."""

import numbers
from typing import Any, Optional


class DealSurvError(ValueError):
    """Base class for all dealsurv errors."""


class InvalidParameter(DealSurvError):
    """A count, period or probability parameter is out of range.

    Args:
        parameter: Name of the offending parameter.
        value: The rejected value.
        reason: Short description of the constraint that failed.
    """

    def __init__(self, parameter: str, value: Any, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"{parameter} {reason}, got {value!r}")


class EmptySample(DealSurvError):
    """The estimator was invoked on a sample with zero entities."""

    def __init__(self, message: str = "Cannot estimate a survival curve from an empty sample"):
        super().__init__(message)


class DegenerateHazard(DealSurvError):
    """A hazard function produced a probability outside [0, 1].

    Args:
        function: Name of the hazard function that misbehaved.
        period: Period at which it was evaluated.
        value: The out-of-range value.
    """

    def __init__(self, function: str, period: Optional[float], value: float):
        self.function = function
        self.period = period
        self.value = value
        super().__init__(
            f"{function}({period}) must be in [0, 1], got {value!r}"
        )


class HorizonAdjustedWarning(UserWarning):
    """The horizon period was smaller than the end period and was raised to it."""


def check_int(name: str, value: Any, minimum: int) -> int:
    """Return value as an int, or raise InvalidParameter if it is not an integer >= minimum."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameter(name, value, "must be an integer")
    if value < minimum:
        raise InvalidParameter(name, value, f"must be >= {minimum}")
    return int(value)
