"""Censoring policies applied to an existing cohort.

Each policy is a pure function: it reads a cohort and returns a new one,
leaving the input untouched so that every stage can be compared.
"""

import logging
import warnings
from typing import Dict

import numpy as np

from ..errors import EmptySelectionWarning, InvalidParameterError
from .cohort import Cohort

logger = logging.getLogger(__name__)


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise InvalidParameterError(f"{name} must be in [0.0, 1.0], got {value}")


def apply_random_censoring(
    cohort: Cohort,
    censor_prob: float,
    rng: np.random.Generator,
) -> Cohort:
    """Censor subjects uniformly at random (non-informative censoring).

    One uniform value is drawn per subject; subjects whose value falls
    below ``censor_prob`` are censored, the others keep their status.
    Times are never changed, and the draw ignores time and group.

    Args:
        cohort: Input cohort.
        censor_prob: Probability that a subject is censored.
        rng: Random number generator.

    Returns:
        New cohort with updated statuses.

    Raises:
        InvalidParameterError: If ``censor_prob`` is outside [0, 1].
    """
    _check_probability("censor_prob", censor_prob)

    draws = rng.uniform(0, 1, size=len(cohort))
    status = np.where(draws < censor_prob, 0, cohort.status)

    logger.debug(
        "Random censoring p=%.3f censored %d of %d event subjects",
        censor_prob,
        int(np.sum(cohort.status) - np.sum(status)),
        int(np.sum(cohort.status)),
    )
    return cohort.replace(status=status)


def informative_censoring_candidates(
    cohort: Cohort, target_group: str, horizon: float
) -> np.ndarray:
    """Mask of subjects eligible for informative censoring.

    Eligible subjects belong to ``target_group`` and reached the horizon
    without an observed event.
    """
    return (
        (cohort.group == target_group)
        & (cohort.status == 0)
        & (cohort.time == horizon)
    )


def apply_informative_censoring(
    cohort: Cohort,
    target_group: str,
    horizon: float,
    window_start: float,
    window_width: float,
    censor_prob: float,
    rng: np.random.Generator,
) -> Cohort:
    """Censor horizon survivors of one group early (informative censoring).

    Each eligible subject (see :func:`informative_censoring_candidates`) is
    selected when its uniform draw is below ``censor_prob``. Selected
    subjects stay censored and get a new last-known-alive time drawn
    uniformly from ``[window_start, window_start + window_width]``.

    Args:
        cohort: Input cohort.
        target_group: Group label to censor.
        horizon: Administrative end of follow-up of ``cohort``.
        window_start: Start of the censoring window.
        window_width: Width of the censoring window.
        censor_prob: Probability that an eligible subject is censored.
        rng: Random number generator.

    Returns:
        New cohort. Identical to the input if nobody is eligible.

    Raises:
        InvalidParameterError: If a parameter is outside its domain, the
            window ends after ``horizon``, or ``target_group`` is not
            present in the cohort.
    """
    _check_probability("censor_prob", censor_prob)
    if window_width <= 0:
        raise InvalidParameterError(f"window_width must be > 0, got {window_width}")
    if window_start < 0:
        raise InvalidParameterError(f"window_start must be >= 0, got {window_start}")
    if window_start + window_width > horizon:
        raise InvalidParameterError(
            "window_start + window_width must not exceed the horizon",
            {"window_end": window_start + window_width, "horizon": horizon},
        )
    if target_group not in cohort.groups:
        raise InvalidParameterError(
            f"target_group {target_group!r} not present in cohort",
            {"groups": cohort.groups},
        )

    eligible = np.flatnonzero(informative_censoring_candidates(cohort, target_group, horizon))
    if len(eligible) == 0:
        message = (
            f"No subjects in group {target_group!r} reached horizon {horizon} "
            "without an event; cohort returned unchanged"
        )
        logger.warning(message)
        warnings.warn(message, EmptySelectionWarning, stacklevel=2)
        return cohort

    draws = rng.uniform(0, 1, size=len(eligible))
    selected = eligible[draws < censor_prob]
    new_times = rng.uniform(window_start, window_start + window_width, size=len(selected))

    time = cohort.time.copy()
    status = cohort.status.copy()
    time[selected] = new_times
    status[selected] = 0

    logger.info(
        "Informative censoring moved %d of %d eligible subjects in group %s into [%s, %s]",
        len(selected),
        len(eligible),
        target_group,
        window_start,
        window_start + window_width,
    )
    return cohort.replace(time=time, status=status)


def censoring_summary(cohort: Cohort) -> Dict[str, float]:
    """Censoring proportion per group, plus the pooled proportion.

    Args:
        cohort: Cohort to summarize.

    Returns:
        Dictionary of {group: censoring rate}, with key "all" for the pool.
    """
    rates = {
        label: 1.0 - part.event_rate for label, part in cohort.partition().items()
    }
    rates["all"] = 1.0 - cohort.event_rate
    return rates


def validate_censoring_rate(
    event_indicators: np.ndarray,
    target_rate: float,
    tolerance: float = 0.02,
) -> bool:
    """Validate that achieved censoring rate is within tolerance.

    Args:
        event_indicators: Event indicators (1 = event, 0 = censored).
        target_rate: Target censoring rate.
        tolerance: Acceptable deviation.

    Returns:
        True if achieved rate is within tolerance of target.
    """
    actual_rate = 1 - np.mean(event_indicators)
    return abs(actual_rate - target_rate) <= tolerance
