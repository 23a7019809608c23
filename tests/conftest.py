"""Shared pytest fixtures for censoring simulation tests."""

import numpy as np
import pytest

from censoring_sim.data.cohort import Cohort
from censoring_sim.data.scenarios import SimulationScenario


@pytest.fixture
def random_seed():
    """Fixed random seed for reproducibility."""
    return 42


@pytest.fixture
def rng(random_seed):
    """Random number generator seeded for the test."""
    return np.random.default_rng(random_seed)


@pytest.fixture
def horizon():
    """Administrative end of follow-up used by the hand-built cohorts."""
    return 161.0


@pytest.fixture
def small_cohort(horizon):
    """Hand-built cohort with events, random censorings and horizon survivors."""
    return Cohort(
        time=[5, 12, horizon, horizon, 40, horizon, 80, horizon, 3, horizon],
        status=[1, 1, 0, 0, 0, 0, 1, 0, 1, 0],
        group=["B", "A", "B", "A", "B", "A", "B", "A", "B", "A"],
    )


@pytest.fixture
def demonstration_scenario():
    """Scenario with the demonstration's settings."""
    return SimulationScenario(name="test_demonstration")


@pytest.fixture
def tmp_output_dir(tmp_path):
    """Create a temporary output directory."""
    out_dir = tmp_path / "simulation_test"
    out_dir.mkdir()
    return out_dir
