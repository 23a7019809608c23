"""Cohort generation and censoring modules for the simulation."""

from .types import CensoringPolicy, SimulationStage
from .cohort import Subject, Cohort
from .scenarios import SimulationScenario, get_scenario, PREDEFINED_SCENARIOS
from .generator import (
    CohortGenerator,
    generate_cohort,
    weibull_survival,
    expected_event_fraction,
)
from .censoring import (
    apply_random_censoring,
    apply_informative_censoring,
    informative_censoring_candidates,
    censoring_summary,
    validate_censoring_rate,
)

__all__ = [
    # Types
    "CensoringPolicy",
    "SimulationStage",
    # Cohort
    "Subject",
    "Cohort",
    # Scenarios
    "SimulationScenario",
    "get_scenario",
    "PREDEFINED_SCENARIOS",
    # Generator
    "CohortGenerator",
    "generate_cohort",
    "weibull_survival",
    "expected_event_fraction",
    # Censoring
    "apply_random_censoring",
    "apply_informative_censoring",
    "informative_censoring_candidates",
    "censoring_summary",
    "validate_censoring_rate",
]
