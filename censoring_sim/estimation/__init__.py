"""Survival curve estimation."""

from .kaplan_meier import (
    SurvivalCurve,
    StratifiedSurvival,
    kaplan_meier,
    fit_by_group,
    fit_pooled,
)

__all__ = [
    "SurvivalCurve",
    "StratifiedSurvival",
    "kaplan_meier",
    "fit_by_group",
    "fit_pooled",
]
