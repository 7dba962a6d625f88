"""Containers for simulated deals and the censored sample they produce."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import InvalidParameter
from .types import DealState

NO_EVENT = -1


@dataclass(frozen=True)
class Deal:
    """One simulated deal.

    Attributes:
        id: 1-based position in the cohort.
        start_period: Period the deal starts.
        nominal_maturity_period: Period the deal matures absent an event.
        horizon_period: Observation cutoff shared by the cohort.
        event_period: Absolute period of the event, or None.
        duration: Observed time from start to event, maturity or horizon.
        censored: False only if the event was observed.
    """

    id: int
    start_period: int
    nominal_maturity_period: int
    horizon_period: int
    event_period: Optional[int]
    duration: int
    censored: bool

    @property
    def state(self) -> DealState:
        return DealState.CENSORED if self.censored else DealState.EVENT


@dataclass
class Sample:
    """Ordered (duration, censored) pairs, the only input of the estimator.

    Attributes:
        durations: Observed times of shape (n,).
        censored: Censoring flags of shape (n,); True means no event observed.
    """

    durations: np.ndarray
    censored: np.ndarray

    def __post_init__(self) -> None:
        self.durations = np.asarray(self.durations, dtype=float).ravel()
        self.censored = np.asarray(self.censored, dtype=bool).ravel()

        if len(self.durations) != len(self.censored):
            raise InvalidParameter(
                "censored",
                len(self.censored),
                f"must have the same length as durations ({len(self.durations)})",
            )
        finite = np.isfinite(self.durations)
        if not np.all(finite):
            bad = float(self.durations[~finite][0])
            raise InvalidParameter("durations", bad, "must be finite")
        if np.any(self.durations < 0):
            raise InvalidParameter(
                "durations", float(self.durations.min()), "must be >= 0"
            )

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[float, bool]]) -> "Sample":
        """Build a sample from (duration, censored) pairs."""
        pairs = list(pairs)
        if not pairs:
            return cls(durations=np.zeros(0), censored=np.zeros(0, dtype=bool))
        durations, censored = zip(*pairs)
        return cls(durations=np.array(durations), censored=np.array(censored))

    @property
    def events(self) -> np.ndarray:
        """Event indicators (1 = event observed, 0 = censored)."""
        return (~self.censored).astype(int)

    def __len__(self) -> int:
        return len(self.durations)

    def __iter__(self) -> Iterator[Tuple[float, bool]]:
        for duration, censored in zip(self.durations, self.censored):
            yield float(duration), bool(censored)


@dataclass
class DealCohort:
    """Full state of a simulated cohort.

    Columns follow the deal table of the simulation: one entry per deal in
    id order. event_period uses -1 for deals without an event.

    Attributes:
        start_period: Start periods of shape (n,).
        maturity_period: Nominal maturity periods of shape (n,).
        event_period: Event periods of shape (n,), -1 if no event.
        duration: Observed durations of shape (n,).
        censored: Censoring flags of shape (n,).
        end_period: Latest period at which a deal can start.
        horizon_period: Observation cutoff (after any adjustment).
        minimum_duration: Minimum contractual duration of a deal.
    """

    start_period: np.ndarray
    maturity_period: np.ndarray
    event_period: np.ndarray
    duration: np.ndarray
    censored: np.ndarray
    end_period: int
    horizon_period: int
    minimum_duration: int

    def __len__(self) -> int:
        return len(self.duration)

    @property
    def n_events(self) -> int:
        return int(np.sum(~self.censored))

    @property
    def event_rate(self) -> float:
        """Fraction of deals with an observed event."""
        if len(self) == 0:
            return float("nan")
        return self.n_events / len(self)

    def sample(self) -> Sample:
        """The (duration, censored) sample consumed by the estimator."""
        return Sample(durations=self.duration.copy(), censored=self.censored.copy())

    def deals(self) -> List[Deal]:
        """Per-deal records in id order."""
        return [
            Deal(
                id=i + 1,
                start_period=int(self.start_period[i]),
                nominal_maturity_period=int(self.maturity_period[i]),
                horizon_period=self.horizon_period,
                event_period=(
                    None if self.event_period[i] == NO_EVENT else int(self.event_period[i])
                ),
                duration=int(self.duration[i]),
                censored=bool(self.censored[i]),
            )
            for i in range(len(self))
        ]

    def to_frame(self) -> pd.DataFrame:
        """Deal table as a DataFrame indexed by deal id."""
        frame = pd.DataFrame(
            {
                "end_period": np.full(len(self), self.end_period, dtype=int),
                "start_period": self.start_period,
                "maturity_period": self.maturity_period,
                "horizon_period": np.full(len(self), self.horizon_period, dtype=int),
                "duration": self.duration,
                "censored": self.censored,
                "event": (~self.censored).astype(int),
                "event_period": self.event_period,
            },
            index=pd.RangeIndex(1, len(self) + 1, name="id"),
        )
        return frame

    def save(self, path: Union[str, Path]) -> None:
        """Save cohort to npz file.

        Args:
            path: Path to save file.
        """
        np.savez(
            path,
            start_period=self.start_period,
            maturity_period=self.maturity_period,
            event_period=self.event_period,
            duration=self.duration,
            censored=self.censored,
            settings=np.array(
                [self.end_period, self.horizon_period, self.minimum_duration]
            ),
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> "DealCohort":
        """Load cohort from npz file.

        Args:
            path: Path to npz file.

        Returns:
            DealCohort instance.
        """
        data = np.load(path)
        end_period, horizon_period, minimum_duration = (int(v) for v in data["settings"])
        return cls(
            start_period=data["start_period"],
            maturity_period=data["maturity_period"],
            event_period=data["event_period"],
            duration=data["duration"],
            censored=data["censored"],
            end_period=end_period,
            horizon_period=horizon_period,
            minimum_duration=minimum_duration,
        )
