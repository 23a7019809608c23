"""Integration tests for the three-stage censoring simulation."""

import json
import logging

import numpy as np
import pandas as pd
import pytest

from censoring_sim.cli import generate_data, run_simulation
from censoring_sim.data.cohort import Cohort
from censoring_sim.data.scenarios import SimulationScenario, get_scenario
from censoring_sim.data.types import CensoringPolicy, SimulationStage
from censoring_sim.estimation.kaplan_meier import fit_pooled
from censoring_sim.experiments.logging import CSVCurveWriter
from censoring_sim.experiments import pipeline as pipeline_module
from censoring_sim.experiments.pipeline import SimulationPipeline, run_simulation as run

SEED = 2024
TRUE_SURVIVAL_160 = np.exp(-np.sqrt(160.5 / 20000.0))


@pytest.fixture(scope="module")
def result():
    """Demonstration run shared by the scenario tests."""
    return run(SimulationScenario(name="demonstration"), seed=SEED)


class TestPipelineStructure:
    """Tests for stage ordering and derivation."""

    def test_three_stages_in_order(self, result):
        assert [r.stage for r in result.stages] == [
            SimulationStage.BASELINE,
            SimulationStage.RANDOM_CENSORING,
            SimulationStage.INFORMATIVE_CENSORING,
        ]
        assert result[SimulationStage.RANDOM_CENSORING].stage.policy == CensoringPolicy.RANDOM

    def test_stages_share_subjects(self, result):
        """Later stages derive from earlier ones without reordering subjects."""
        baseline = result[SimulationStage.BASELINE].cohort
        for stage_result in result.stages:
            np.testing.assert_array_equal(stage_result.cohort.group, baseline.group)
            assert np.all(stage_result.cohort.time <= baseline.time)

    def test_baseline_within_horizon(self, result):
        baseline = result[SimulationStage.BASELINE].cohort
        assert len(baseline) == 2000
        assert np.all(baseline.time <= 161.0)

    def test_idempotence(self, result):
        """The same seed reproduces bit-identical cohorts and curves."""
        again = run(SimulationScenario(name="demonstration"), seed=SEED)

        for first, second in zip(result.stages, again.stages):
            assert first.cohort.equals(second.cohort)
            for label, curve in first.curves:
                np.testing.assert_array_equal(curve.times, second.curves[label].times)
                np.testing.assert_array_equal(curve.survival, second.curves[label].survival)

    def test_different_seed_differs(self, result):
        other = run(SimulationScenario(name="demonstration"), seed=SEED + 1)
        assert not other.stages[0].cohort.equals(result.stages[0].cohort)


class TestScenarios:
    """End-to-end checks of the three censoring regimes."""

    def test_baseline_survival_near_truth(self, result):
        baseline = result[SimulationStage.BASELINE].cohort
        pooled = fit_pooled(baseline).survival_at(160.0)

        assert 0.87 <= pooled <= 0.95
        assert abs(pooled - TRUE_SURVIVAL_160) < 0.03

    def test_random_censoring_is_unbiased(self, result):
        before = result[SimulationStage.BASELINE].curves.survival_at(160.0)
        after = result[SimulationStage.RANDOM_CENSORING].curves.survival_at(160.0)

        for label in ("A", "B"):
            assert abs(after[label] - before[label]) < 0.03
            assert abs(after[label] - TRUE_SURVIVAL_160) < 0.045

    def test_random_censoring_rate(self, result):
        baseline = result[SimulationStage.BASELINE].cohort
        censored = result[SimulationStage.RANDOM_CENSORING].cohort
        flipped = np.sum(baseline.status) - np.sum(censored.status)

        assert abs(flipped / np.sum(baseline.status) - 0.25) < 0.1

    def test_informative_censoring_biases_target_group(self, result):
        values = result[SimulationStage.INFORMATIVE_CENSORING].curves.survival_at(160.0)
        assert values["B"] - values["A"] > 0.03

    def test_informative_censoring_leaves_other_group(self, result):
        before = result[SimulationStage.RANDOM_CENSORING].curves["B"]
        after = result[SimulationStage.INFORMATIVE_CENSORING].curves["B"]

        np.testing.assert_array_equal(before.times, after.times)
        np.testing.assert_array_equal(before.survival, after.survival)

    def test_heavy_informative_scenario(self):
        heavy = run(get_scenario("heavy_informative"), seed=SEED)
        values = heavy[SimulationStage.INFORMATIVE_CENSORING].curves.survival_at(160.0)
        assert values["B"] - values["A"] > 0.05

    def test_curves_monotone(self, result):
        for stage_result in result.stages:
            for _, curve in stage_result.curves:
                assert curve.is_monotone()


class TestResultExport:
    """Tests for JSON and CSV outputs."""

    def test_survival_table(self, result):
        table = result.survival_table()
        assert list(table.keys()) == ["baseline", "random_censoring", "informative_censoring"]
        assert set(table["baseline"].keys()) == {"A", "B", "all"}

    def test_save_summary(self, result, tmp_output_dir):
        path = tmp_output_dir / "summary.json"
        result.save(path)

        with open(path) as f:
            summary = json.load(f)

        assert summary["seed"] == SEED
        assert summary["scenario"]["name"] == "demonstration"
        assert len(summary["stages"]) == 3
        assert summary["stages"][2]["stage"] == "informative_censoring"
        assert summary["stages"][0]["counts"]["A"]["n_subjects"] == 1000

    def test_csv_writer(self, result, tmp_output_dir):
        path = tmp_output_dir / "curves.csv"
        with CSVCurveWriter(path) as writer:
            for stage_result in result.stages:
                writer.write(stage_result.stage, stage_result.curves)

        df = pd.read_csv(path)
        assert list(df.columns) == CSVCurveWriter.FIELDNAMES
        assert set(df["stage"]) == {"baseline", "random_censoring", "informative_censoring"}
        assert df["survival"].between(0, 1).all()

    def test_verbose_progress(self, capsys):
        SimulationPipeline(get_scenario("small"), seed=1, verbose=True).run()
        out = capsys.readouterr().out
        assert "[baseline]" in out
        assert "[informative_censoring]" in out

    def test_progress_reported_once(self, capsys, caplog):
        caplog.set_level(logging.INFO, logger="censoring_sim")

        SimulationPipeline(get_scenario("small"), seed=1, verbose=True).run()

        assert capsys.readouterr().out.count("[baseline]") == 1
        assert not any("[baseline]" in r.getMessage() for r in caplog.records)

    def test_quiet_progress_goes_to_log(self, capsys, caplog):
        caplog.set_level(logging.INFO, logger="censoring_sim")

        SimulationPipeline(get_scenario("small"), seed=1).run()

        assert capsys.readouterr().out == ""
        assert sum("[baseline]" in r.getMessage() for r in caplog.records) == 1


class TestRandomCensoringCheck:
    """Tests for the pipeline's random censoring rate check."""

    def test_off_target_rate_is_logged(self, monkeypatch, caplog):
        # Injector that censors nobody while the scenario asks for 25%
        monkeypatch.setattr(
            pipeline_module, "apply_random_censoring", lambda cohort, p, rng: cohort
        )

        with caplog.at_level(logging.WARNING, logger="censoring_sim"):
            run(SimulationScenario(name="demonstration"), seed=SEED)

        assert any("Random censoring removed" in r.getMessage() for r in caplog.records)

    def test_zero_probability_passes(self, caplog):
        scenario = SimulationScenario(name="no_random", n_samples=500, random_censor_prob=0.0)

        with caplog.at_level(logging.WARNING, logger="censoring_sim"):
            run(scenario, seed=SEED)

        assert not any("Random censoring removed" in r.getMessage() for r in caplog.records)


class TestCommandLine:
    """Tests for the command-line entry points."""

    def test_run_simulation_without_plots(self, tmp_output_dir):
        code = run_simulation.main(
            [
                "--scenario", "small",
                "--seed", "3",
                "--output-dir", str(tmp_output_dir),
                "--no-plots",
                "--quiet",
            ]
        )

        assert code == 0
        assert (tmp_output_dir / "summary.json").exists()
        assert (tmp_output_dir / "curves.csv").exists()
        assert not (tmp_output_dir / "figures").exists()

    def test_run_simulation_with_plots(self, tmp_output_dir):
        code = run_simulation.main(
            [
                "--scenario", "small",
                "--seed", "3",
                "--output-dir", str(tmp_output_dir),
                "--dpi", "40",
                "--quiet",
            ]
        )

        assert code == 0
        figures = tmp_output_dir / "figures"
        for name in ("baseline", "random_censoring", "informative_censoring", "comparison"):
            assert (figures / f"{name}.png").exists()

    def test_run_simulation_custom_config(self, tmp_output_dir, capsys):
        config = tmp_output_dir / "scenario.json"
        SimulationScenario(name="custom", n_samples=300).to_json(config)

        code = run_simulation.main(
            ["--config", str(config), "--seed", "5", "--output-dir", str(tmp_output_dir), "--no-plots"]
        )

        assert code == 0
        assert "Survival at t=160" in capsys.readouterr().out

    def test_run_simulation_missing_config(self, tmp_output_dir):
        code = run_simulation.main(
            ["--config", str(tmp_output_dir / "missing.json"), "--seed", "5"]
        )
        assert code == 1

    def test_run_simulation_invalid_override(self, tmp_output_dir):
        code = run_simulation.main(
            ["--seed", "5", "--n-samples", "0", "--output-dir", str(tmp_output_dir)]
        )
        assert code == 1

    @pytest.mark.parametrize("cli", [run_simulation, generate_data])
    def test_invalid_config_file(self, cli, tmp_output_dir, capsys):
        config = tmp_output_dir / "bad.json"
        with open(config, "w") as f:
            json.dump({"name": "bad", "n_samples": 0}, f)
        output_flag = "--output-dir" if cli is run_simulation else "--output"

        code = cli.main(
            ["--config", str(config), "--seed", "5", output_flag, str(tmp_output_dir)]
        )

        assert code == 1
        assert "n_samples" in capsys.readouterr().err

    def test_generate_data_npz(self, tmp_output_dir):
        code = generate_data.main(
            ["--scenario", "small", "--seed", "11", "--output", str(tmp_output_dir)]
        )

        assert code == 0
        cohort = Cohort.load(tmp_output_dir / "small.npz")
        assert len(cohort) == 200

    def test_generate_data_csv(self, tmp_output_dir):
        path = tmp_output_dir / "cohort.csv"
        code = generate_data.main(
            [
                "--scenario", "demonstration",
                "--seed", "11",
                "--n-samples", "50",
                "--format", "csv",
                "--output", str(path),
            ]
        )

        assert code == 0
        df = pd.read_csv(path)
        assert len(df) == 50
        assert set(df["group"]) == {"A", "B"}
