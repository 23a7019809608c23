"""Unit tests for scenario configuration and cohort generation."""

import dataclasses

import numpy as np
import pytest

from censoring_sim.data.generator import (
    CohortGenerator,
    expected_event_fraction,
    generate_cohort,
)
from censoring_sim.data.scenarios import (
    PREDEFINED_SCENARIOS,
    SimulationScenario,
    get_scenario,
)
from censoring_sim.errors import InvalidParameterError


class TestSimulationScenario:
    """Tests for SimulationScenario configuration."""

    def test_default_scenario_creation(self):
        """Defaults reproduce the demonstration settings."""
        scenario = SimulationScenario(name="test")
        assert scenario.n_samples == 2000
        assert scenario.weibull_shape == 0.5
        assert scenario.weibull_scale == 20000.0
        assert scenario.horizon == 161.0
        assert scenario.random_censor_prob == 0.25
        assert scenario.informative_group == "A"
        assert scenario.informative_window == (30.0, 60.0)
        assert scenario.informative_prob == 0.8

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"n_samples": 0}, "n_samples"),
            ({"weibull_shape": 0.0}, "weibull_shape"),
            ({"weibull_scale": -1.0}, "weibull_scale"),
            ({"random_censor_prob": 1.5}, "random_censor_prob"),
            ({"informative_prob": -0.1}, "informative_prob"),
            ({"informative_width": 0.0}, "informative_width"),
            ({"informative_group": "C"}, "informative_group"),
            ({"group_labels": ("A", "A")}, "group_labels"),
            ({"informative_start": 150.0}, "window"),
        ],
    )
    def test_validation(self, overrides, message):
        with pytest.raises(InvalidParameterError, match=message):
            SimulationScenario(name="test", **overrides)

    def test_replace_revalidates(self):
        scenario = SimulationScenario(name="test")
        with pytest.raises(InvalidParameterError, match="n_samples"):
            dataclasses.replace(scenario, n_samples=-5)

    def test_predefined_scenarios_exist(self):
        for name in ["demonstration", "heavy_informative", "small"]:
            scenario = get_scenario(name)
            assert scenario.name == name
        assert set(PREDEFINED_SCENARIOS) == {"demonstration", "heavy_informative", "small"}

    def test_unknown_scenario(self):
        with pytest.raises(InvalidParameterError, match="Unknown scenario"):
            get_scenario("does_not_exist")

    def test_scenario_serialization(self, tmp_path):
        scenario = SimulationScenario(
            name="test_scenario",
            n_samples=500,
            informative_start=20.0,
            group_labels=("control", "treated"),
            informative_group="treated",
        )
        path = tmp_path / "scenario.json"
        scenario.to_json(path)

        loaded = SimulationScenario.from_json(path)
        assert loaded == scenario
        assert loaded.group_labels == ("control", "treated")


class TestGenerateCohort:
    """Tests for Weibull cohort generation."""

    @pytest.fixture
    def cohort(self, rng):
        return generate_cohort(
            n_samples=2000,
            weibull_shape=0.5,
            weibull_scale=20000.0,
            horizon=161.0,
            rng=rng,
        )

    def test_size(self, cohort):
        assert len(cohort) == 2000

    def test_times_within_horizon(self, cohort):
        assert np.all(cohort.time >= 0)
        assert np.all(cohort.time <= 161.0)

    def test_times_are_whole_units(self, cohort):
        np.testing.assert_array_equal(cohort.time, np.round(cohort.time))

    def test_censored_subjects_at_horizon(self, cohort):
        """Administrative censoring: every censored subject sits at the horizon."""
        assert np.all(cohort.time[cohort.status == 0] == 161.0)

    def test_binary_status(self, cohort):
        assert set(np.unique(cohort.status)).issubset({0, 1})

    def test_alternating_groups(self, cohort):
        assert cohort.group[0] == "B"
        assert cohort.group[1] == "A"
        assert np.all(cohort.group[::2] == "B")
        assert np.all(cohort.group[1::2] == "A")
        assert cohort.summary()["A"]["n_subjects"] == 1000

    def test_event_fraction_approximate(self, cohort):
        expected, _ = expected_event_fraction(SimulationScenario(name="test"))
        assert abs(cohort.event_rate - expected) < 0.03

    def test_custom_group_labels(self, rng):
        cohort = generate_cohort(10, 1.0, 50.0, 100.0, rng, group_labels=("x", "y"))
        assert cohort.groups == ["x", "y"]

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"n_samples": 0}, "n_samples"),
            ({"weibull_shape": 0.0}, "weibull_shape"),
            ({"weibull_scale": 0.0}, "weibull_scale"),
            ({"horizon": -1.0}, "horizon"),
        ],
    )
    def test_invalid_parameters(self, rng, kwargs, message):
        params = {
            "n_samples": 10,
            "weibull_shape": 0.5,
            "weibull_scale": 100.0,
            "horizon": 50.0,
        }
        params.update(kwargs)
        with pytest.raises(InvalidParameterError, match=message):
            generate_cohort(rng=rng, **params)


class TestCohortGenerator:
    """Tests for the scenario-driven generator."""

    def test_reproducibility_with_seed(self, demonstration_scenario):
        gen1 = CohortGenerator(demonstration_scenario, np.random.default_rng(7))
        gen2 = CohortGenerator(demonstration_scenario, np.random.default_rng(7))

        assert gen1.generate().equals(gen2.generate())

    def test_different_seeds_produce_different_data(self, demonstration_scenario):
        cohort1 = CohortGenerator(demonstration_scenario, np.random.default_rng(7)).generate()
        cohort2 = CohortGenerator(demonstration_scenario, np.random.default_rng(8)).generate()

        assert not np.array_equal(cohort1.time, cohort2.time)

    def test_true_survival(self, demonstration_scenario, rng):
        generator = CohortGenerator(demonstration_scenario, rng)
        expected = np.exp(-np.sqrt(160.0 / 20000.0))
        assert generator.true_survival(160.0) == pytest.approx(expected)
        assert generator.true_survival(0.0) == pytest.approx(1.0)
