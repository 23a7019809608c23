"""Synthetic cohort generator."""

import logging
from typing import Sequence, Tuple

import numpy as np
from scipy import stats

from ..errors import InvalidParameterError
from .cohort import Cohort
from .scenarios import SimulationScenario

logger = logging.getLogger(__name__)


def generate_cohort(
    n_samples: int,
    weibull_shape: float,
    weibull_scale: float,
    horizon: float,
    rng: np.random.Generator,
    group_labels: Sequence[str] = ("B", "A"),
) -> Cohort:
    """Generate a cohort of Weibull lifetimes with administrative censoring.

    Lifetimes follow ``S(t) = exp(-(t / scale) ** shape)`` and are rounded
    to whole time units. Subjects still alive at ``horizon`` are censored
    there. Group labels alternate across subjects, so both groups share
    the same lifetime distribution.

    Args:
        n_samples: Number of subjects.
        weibull_shape: Weibull shape parameter.
        weibull_scale: Weibull scale parameter.
        horizon: Administrative end of follow-up.
        rng: Random number generator; the only source of randomness.
        group_labels: Labels for even- and odd-indexed subjects.

    Returns:
        Generated cohort.

    Raises:
        InvalidParameterError: If any parameter is outside its domain.
    """
    if n_samples <= 0:
        raise InvalidParameterError(f"n_samples must be > 0, got {n_samples}")
    if weibull_shape <= 0:
        raise InvalidParameterError(f"weibull_shape must be > 0, got {weibull_shape}")
    if weibull_scale <= 0:
        raise InvalidParameterError(f"weibull_scale must be > 0, got {weibull_scale}")
    if horizon < 0:
        raise InvalidParameterError(f"horizon must be >= 0, got {horizon}")
    if len(group_labels) != 2:
        raise InvalidParameterError(
            f"group_labels must contain two labels, got {list(group_labels)}"
        )

    lifetimes = stats.weibull_min.rvs(
        weibull_shape, scale=weibull_scale, size=n_samples, random_state=rng
    )
    lifetimes = np.round(lifetimes)

    status = (lifetimes <= horizon).astype(np.int8)
    time = np.where(status == 1, lifetimes, horizon)

    group = np.where(np.arange(n_samples) % 2 == 0, group_labels[0], group_labels[1])

    logger.debug(
        "Generated %d subjects, %d events before horizon %s",
        n_samples,
        int(status.sum()),
        horizon,
    )
    return Cohort(time=time, status=status, group=group)


class CohortGenerator:
    """Generator for the simulated cohort of a scenario.

    Args:
        scenario: Simulation scenario.
        rng: Random number generator shared with the later censoring stages.
    """

    def __init__(self, scenario: SimulationScenario, rng: np.random.Generator):
        self.scenario = scenario
        self.rng = rng

    def generate(self) -> Cohort:
        """Generate the baseline cohort.

        Returns:
            Cohort with administrative censoring at the scenario horizon.
        """
        return generate_cohort(
            n_samples=self.scenario.n_samples,
            weibull_shape=self.scenario.weibull_shape,
            weibull_scale=self.scenario.weibull_scale,
            horizon=self.scenario.horizon,
            rng=self.rng,
            group_labels=self.scenario.group_labels,
        )

    def true_survival(self, t: np.ndarray) -> np.ndarray:
        """Survival function of the lifetime distribution (before rounding)."""
        return weibull_survival(t, self.scenario.weibull_shape, self.scenario.weibull_scale)


def weibull_survival(t, shape: float, scale: float):
    """Weibull survival function ``exp(-(t / scale) ** shape)``.

    Args:
        t: Time point or array of time points.
        shape: Weibull shape parameter.
        scale: Weibull scale parameter.

    Returns:
        ``S(t)`` with the same shape as ``t``.
    """
    return stats.weibull_min.sf(np.asarray(t, dtype=float), shape, scale=scale)


def expected_event_fraction(scenario: SimulationScenario) -> Tuple[float, float]:
    """Expected fraction of events before the horizon and survival at it.

    Args:
        scenario: Simulation scenario.

    Returns:
        Tuple of (event fraction, survival probability) at the horizon.
    """
    surv = float(
        weibull_survival(scenario.horizon, scenario.weibull_shape, scenario.weibull_scale)
    )
    return 1.0 - surv, surv
