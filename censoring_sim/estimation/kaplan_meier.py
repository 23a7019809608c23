"""Kaplan-Meier (product-limit) survival estimation."""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..data.cohort import Cohort
from ..errors import EmptyCohortError, InvalidParameterError

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]


@dataclass
class SurvivalCurve:
    """Kaplan-Meier step function for one group.

    Attributes:
        times: Distinct event times, ascending.
        survival: Survival probability just after each event time.
        n_at_risk: Subjects at risk just before each event time.
        n_events: Events observed at each event time.
        n_subjects: Number of subjects the curve was estimated from.
        last_observed_time: Largest observed (event or censoring) time.
        censored_tail: True if a subject was censored at the largest
            observed time, in which case the curve carries no information
            beyond it.
        group: Group label, if the curve belongs to a stratum.
    """

    times: np.ndarray
    survival: np.ndarray
    n_at_risk: np.ndarray
    n_events: np.ndarray
    n_subjects: int
    last_observed_time: float
    censored_tail: bool
    group: Optional[str] = None

    def survival_at(self, t: ArrayLike) -> ArrayLike:
        """Evaluate the right-continuous step function.

        Returns 1 before the first event. Beyond ``last_observed_time``
        the value is NaN when the tail is censored, otherwise the last
        value of the curve.

        Args:
            t: Time point or array of time points.

        Returns:
            Survival probability with the same shape as ``t``.
        """
        t_arr = np.asarray(t, dtype=float)
        idx = np.searchsorted(self.times, t_arr, side="right") - 1

        values = np.ones(t_arr.shape, dtype=float)
        has_step = idx >= 0
        values[has_step] = self.survival[idx[has_step]]

        if self.censored_tail:
            values[t_arr > self.last_observed_time] = np.nan

        if np.ndim(t) == 0:
            return float(values)
        return values

    def median_survival(self) -> float:
        """First time at which survival drops to 0.5 or below (inf if never)."""
        below = np.flatnonzero(self.survival <= 0.5)
        if len(below) == 0:
            return float("inf")
        return float(self.times[below[0]])

    def step_points(self) -> Tuple[np.ndarray, np.ndarray]:
        """Corner points of the step function for plotting.

        Returns:
            Tuple of (times, survival) starting at (0, 1) and ending at the
            largest observed time. Use with ``where="post"`` steps.
        """
        final = self.survival[-1] if len(self.survival) else 1.0
        t = np.concatenate([[0.0], self.times, [self.last_observed_time]])
        s = np.concatenate([[1.0], self.survival, [final]])
        return t, s

    def is_monotone(self) -> bool:
        """Check the curve is non-increasing and within [0, 1]."""
        s = np.concatenate([[1.0], self.survival])
        return bool(np.all(np.diff(s) <= 0) and np.all((s >= 0) & (s <= 1)))

    def to_frame(self) -> pd.DataFrame:
        """Event table with one row per event time."""
        df = pd.DataFrame(
            {
                "time": self.times,
                "n_at_risk": self.n_at_risk,
                "n_events": self.n_events,
                "survival": self.survival,
            }
        )
        if self.group is not None:
            df.insert(0, "group", self.group)
        return df


def kaplan_meier(
    times: np.ndarray,
    events: np.ndarray,
    group: Optional[str] = None,
) -> SurvivalCurve:
    """Estimate the survival function with the product-limit estimator.

    At each distinct event time ``t`` with ``d`` events among ``n``
    subjects still at risk (``time >= t``), survival is multiplied by
    ``1 - d / n``. Subjects censored at ``t`` remain in the risk set at
    ``t`` and leave it afterwards. Censoring-only times add no step.

    Args:
        times: Observed times of shape (n_subjects,).
        events: Event indicators (1 = event, 0 = censored).
        group: Optional group label attached to the curve.

    Returns:
        SurvivalCurve.

    Raises:
        EmptyCohortError: If there are no subjects.
        InvalidParameterError: If the inputs have different lengths.
    """
    times = np.asarray(times, dtype=float).ravel()
    events = np.asarray(events).ravel()

    if len(times) != len(events):
        raise InvalidParameterError(
            f"times ({len(times)}) and events ({len(events)}) must have the same length"
        )
    if len(times) == 0:
        raise EmptyCohortError("Cannot estimate survival for zero subjects", group)

    n = len(times)
    unique_times, inverse, counts = np.unique(
        times, return_inverse=True, return_counts=True
    )
    # Events and censorings per distinct time
    deaths = np.bincount(
        inverse.ravel(), weights=(events == 1).astype(float), minlength=len(unique_times)
    )
    censored = counts - deaths

    # Subjects with time >= t: everyone minus those who left at earlier times
    at_risk = n - np.concatenate([[0], np.cumsum(counts)[:-1]])

    factors = 1.0 - deaths / at_risk
    survival = np.cumprod(factors)

    has_event = deaths > 0
    return SurvivalCurve(
        times=unique_times[has_event],
        survival=survival[has_event],
        n_at_risk=at_risk[has_event].astype(int),
        n_events=deaths[has_event].astype(int),
        n_subjects=n,
        last_observed_time=float(unique_times[-1]),
        censored_tail=bool(censored[-1] > 0),
        group=group,
    )


@dataclass
class StratifiedSurvival:
    """Kaplan-Meier curves estimated independently per group.

    Attributes:
        curves: Mapping of group label to its curve.
        errors: Mapping of group label to the reason its curve is missing.
    """

    curves: Dict[str, SurvivalCurve] = field(default_factory=OrderedDict)
    errors: Dict[str, str] = field(default_factory=dict)

    def __getitem__(self, group: str) -> SurvivalCurve:
        return self.curves[group]

    def __contains__(self, group: str) -> bool:
        return group in self.curves

    def __iter__(self):
        return iter(self.curves.items())

    @property
    def groups(self) -> list:
        """Labels of the groups with a curve."""
        return list(self.curves.keys())

    def survival_at(self, t: float) -> Dict[str, float]:
        """Survival probability of every group at time ``t``."""
        return {label: curve.survival_at(t) for label, curve in self.curves.items()}

    def to_frame(self) -> pd.DataFrame:
        """Concatenated event tables of all groups."""
        frames = [curve.to_frame() for curve in self.curves.values()]
        if not frames:
            return pd.DataFrame(columns=["group", "time", "n_at_risk", "n_events", "survival"])
        return pd.concat(frames, ignore_index=True)


def fit_by_group(
    cohort: Cohort,
    groups: Optional[Iterable[str]] = None,
) -> StratifiedSurvival:
    """Estimate one Kaplan-Meier curve per group.

    A group with no subjects is recorded in ``errors`` and logged; the
    remaining groups are still estimated.

    Args:
        cohort: Cohort to summarize (read only).
        groups: Groups to estimate. Defaults to every group in the cohort.

    Returns:
        StratifiedSurvival with one curve per non-empty group.

    Raises:
        EmptyCohortError: If the cohort is empty and no groups were requested.
    """
    if groups is None:
        if len(cohort) == 0:
            raise EmptyCohortError("Cannot estimate survival for an empty cohort")
        parts = cohort.partition()
    else:
        parts = OrderedDict(
            (label, cohort.select(cohort.group == label)) for label in groups
        )

    result = StratifiedSurvival()
    for label, part in parts.items():
        try:
            result.curves[label] = kaplan_meier(part.time, part.status, group=label)
        except EmptyCohortError as exc:
            logger.error("Skipping group %s: %s", label, exc)
            result.errors[label] = str(exc)
    return result


def fit_pooled(cohort: Cohort) -> SurvivalCurve:
    """Estimate a single Kaplan-Meier curve over all subjects."""
    return kaplan_meier(cohort.time, cohort.status)
