"""Subject records and the cohort container shared by every simulation stage."""

from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

import numpy as np
import pandas as pd

from ..errors import InvalidParameterError


@dataclass(frozen=True)
class Subject:
    """One simulated individual.

    Attributes:
        time: Observed duration (event or censoring time).
        status: 1 if the event was observed at ``time``, 0 if censored.
        group: Subpopulation label used for stratified estimation.
    """

    time: float
    status: int
    group: str


@dataclass(frozen=True, eq=False)
class Cohort:
    """Immutable collection of subjects stored as parallel arrays.

    The arrays are made read-only on construction. Censoring policies
    derive new cohorts through :meth:`replace` instead of editing one in
    place, so the cohort of every stage stays available for comparison.

    Attributes:
        time: Observed times of shape (n_subjects,).
        status: Event indicators of shape (n_subjects,).
        group: Group labels of shape (n_subjects,).
    """

    time: np.ndarray
    status: np.ndarray
    group: np.ndarray

    def __post_init__(self) -> None:
        time = np.array(self.time, dtype=np.float64).ravel()
        raw_status = np.asarray(self.status).ravel()
        group = np.array(self.group, dtype=str).ravel()

        if not np.all(np.isin(raw_status, (0, 1))):
            raise InvalidParameterError("status must be 0 or 1")
        status = raw_status.astype(np.int8)

        if not (len(time) == len(status) == len(group)):
            raise InvalidParameterError(
                "time, status and group must have the same length",
                {"time": len(time), "status": len(status), "group": len(group)},
            )
        if np.any(np.isnan(time)) or np.any(time < 0):
            raise InvalidParameterError("time must be non-negative")

        for name, values in (("time", time), ("status", status), ("group", group)):
            values.setflags(write=False)
            object.__setattr__(self, name, values)

    def __len__(self) -> int:
        return len(self.time)

    def __iter__(self) -> Iterator[Subject]:
        for t, s, g in zip(self.time, self.status, self.group):
            yield Subject(time=float(t), status=int(s), group=str(g))

    def __getitem__(self, index: int) -> Subject:
        return Subject(
            time=float(self.time[index]),
            status=int(self.status[index]),
            group=str(self.group[index]),
        )

    @classmethod
    def from_subjects(cls, subjects: Iterable[Subject]) -> "Cohort":
        """Build a cohort from subject records, keeping their order."""
        subjects = list(subjects)
        return cls(
            time=[s.time for s in subjects],
            status=[s.status for s in subjects],
            group=[s.group for s in subjects],
        )

    @classmethod
    def empty(cls) -> "Cohort":
        """Cohort with no subjects."""
        return cls(time=[], status=[], group=[])

    def subjects(self) -> List[Subject]:
        """Return the subjects as a list of records."""
        return list(self)

    @property
    def groups(self) -> List[str]:
        """Sorted distinct group labels."""
        return sorted(str(g) for g in np.unique(self.group))

    @property
    def event_rate(self) -> float:
        """Fraction of subjects with an observed event."""
        if len(self) == 0:
            return float("nan")
        return float(np.mean(self.status))

    def replace(
        self,
        time: Optional[np.ndarray] = None,
        status: Optional[np.ndarray] = None,
    ) -> "Cohort":
        """Return a derived cohort with new times and/or statuses.

        Group labels and subject order are carried over unchanged.
        """
        return Cohort(
            time=self.time.copy() if time is None else time,
            status=self.status.copy() if status is None else status,
            group=self.group.copy(),
        )

    def select(self, mask: np.ndarray) -> "Cohort":
        """Return the subjects where ``mask`` is true."""
        mask = np.asarray(mask, dtype=bool)
        return Cohort(time=self.time[mask], status=self.status[mask], group=self.group[mask])

    def partition(self) -> "OrderedDict[str, Cohort]":
        """Split the cohort by group label.

        Returns:
            Mapping of label to sub-cohort, ordered by label.
        """
        return OrderedDict(
            (label, self.select(self.group == label)) for label in self.groups
        )

    def summary(self) -> Dict[str, Dict[str, int]]:
        """Per-group counts of subjects, events and censorings."""
        result = {}
        for label, part in self.partition().items():
            n_events = int(np.sum(part.status))
            result[label] = {
                "n_subjects": len(part),
                "n_events": n_events,
                "n_censored": len(part) - n_events,
            }
        return result

    def equals(self, other: "Cohort") -> bool:
        """Exact, element-wise equality with another cohort."""
        return (
            np.array_equal(self.time, other.time)
            and np.array_equal(self.status, other.status)
            and np.array_equal(self.group, other.group)
        )

    def to_frame(self) -> pd.DataFrame:
        """Convert to a DataFrame with columns time, status, group."""
        return pd.DataFrame(
            {"time": self.time, "status": self.status.astype(int), "group": self.group}
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Cohort":
        """Create from a DataFrame with columns time, status, group."""
        missing = {"time", "status", "group"} - set(df.columns)
        if missing:
            raise InvalidParameterError(f"Missing columns: {sorted(missing)}")
        return cls(
            time=df["time"].to_numpy(),
            status=df["status"].to_numpy(),
            group=df["group"].astype(str).to_numpy(),
        )

    def save(self, path: Union[str, Path]) -> None:
        """Save cohort to npz file.

        Args:
            path: Path to save file.
        """
        np.savez(path, time=self.time, status=self.status, group=self.group)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Cohort":
        """Load cohort from npz file.

        Args:
            path: Path to npz file.

        Returns:
            Cohort instance.
        """
        data = np.load(path)
        return cls(time=data["time"], status=data["status"], group=data["group"])

    def to_csv(self, path: Union[str, Path]) -> None:
        """Save cohort to CSV file."""
        self.to_frame().to_csv(path, index=False)
