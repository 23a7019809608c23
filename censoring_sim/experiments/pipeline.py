"""Three-stage censoring simulation pipeline."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from ..data.censoring import (
    apply_informative_censoring,
    apply_random_censoring,
    censoring_summary,
    validate_censoring_rate,
)
from ..data.cohort import Cohort
from ..data.generator import CohortGenerator
from ..data.scenarios import SimulationScenario
from ..data.types import SimulationStage
from ..estimation.kaplan_meier import StratifiedSurvival, fit_by_group, fit_pooled

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    """Cohort and curves produced by one stage.

    Attributes:
        stage: Which stage produced the result.
        cohort: Cohort after the stage's censoring policy.
        curves: Kaplan-Meier curves per group.
    """

    stage: SimulationStage
    cohort: Cohort
    curves: StratifiedSurvival

    def survival_at(self, t: float) -> Dict[str, float]:
        """Per-group survival plus the pooled estimate (key "all")."""
        values = self.curves.survival_at(t)
        values["all"] = fit_pooled(self.cohort).survival_at(t)
        return values

    def to_dict(self, evaluation_time: float) -> dict:
        """Convert to dictionary for JSON serialization."""
        medians = {}
        for label, curve in self.curves:
            median = curve.median_survival()
            medians[label] = None if np.isinf(median) else median

        return {
            "stage": self.stage.name.lower(),
            "title": self.stage.title,
            "censoring_rate": censoring_summary(self.cohort),
            "counts": self.cohort.summary(),
            "survival_at": {
                "time": evaluation_time,
                "values": _nan_to_none(self.survival_at(evaluation_time)),
            },
            "median_survival": medians,
            "errors": self.curves.errors,
        }


def _nan_to_none(values: Dict[str, float]) -> Dict[str, Optional[float]]:
    return {k: (None if np.isnan(v) else v) for k, v in values.items()}


@dataclass
class SimulationResult:
    """Results of a full simulation run.

    Attributes:
        scenario: Scenario that was simulated.
        seed: Seed of the run's random number generator.
        stages: Stage results in execution order.
    """

    scenario: SimulationScenario
    seed: int
    stages: List[StageResult] = field(default_factory=list)

    def __getitem__(self, stage: SimulationStage) -> StageResult:
        for result in self.stages:
            if result.stage == stage:
                return result
        raise KeyError(stage)

    def survival_table(self, t: Optional[float] = None) -> Dict[str, Dict[str, float]]:
        """Survival at ``t`` for every stage and group.

        Args:
            t: Time point. Defaults to the scenario's evaluation time.

        Returns:
            Nested dictionary {stage name: {group: survival}}.
        """
        if t is None:
            t = self.scenario.evaluation_time
        return {result.stage.name.lower(): result.survival_at(t) for result in self.stages}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "scenario": self.scenario.to_dict(),
            "seed": self.seed,
            "stages": [
                result.to_dict(self.scenario.evaluation_time) for result in self.stages
            ],
        }

    def save(self, path: Union[str, Path]) -> None:
        """Save a JSON summary of the run.

        Args:
            path: Path to JSON file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)


class SimulationPipeline:
    """Runs the baseline, random and informative censoring stages.

    A single random number generator is created from ``seed`` for each
    call to :meth:`run` and threaded through generation and both
    censoring steps, so equal seeds give identical results.

    Args:
        scenario: Simulation scenario.
        seed: Random seed for the run.
        verbose: Whether to print progress.
    """

    def __init__(self, scenario: SimulationScenario, seed: int, verbose: bool = False):
        self.scenario = scenario
        self.seed = seed
        self.verbose = verbose

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message)
        else:
            logger.info(message)

    def run(self) -> SimulationResult:
        """Execute all three stages.

        Returns:
            SimulationResult with one StageResult per stage.
        """
        scenario = self.scenario
        rng = np.random.default_rng(self.seed)
        result = SimulationResult(scenario=scenario, seed=self.seed)

        # Stage 1: administrative censoring only
        baseline = CohortGenerator(scenario, rng).generate()
        result.stages.append(self._estimate(SimulationStage.BASELINE, baseline))

        # Stage 2: non-informative random censoring
        randomly_censored = apply_random_censoring(
            baseline, scenario.random_censor_prob, rng
        )
        self._check_random_rate(baseline, randomly_censored)
        result.stages.append(
            self._estimate(SimulationStage.RANDOM_CENSORING, randomly_censored)
        )

        # Stage 3: informative censoring of one group's horizon survivors
        informatively_censored = apply_informative_censoring(
            randomly_censored,
            target_group=scenario.informative_group,
            horizon=scenario.horizon,
            window_start=scenario.informative_start,
            window_width=scenario.informative_width,
            censor_prob=scenario.informative_prob,
            rng=rng,
        )
        result.stages.append(
            self._estimate(SimulationStage.INFORMATIVE_CENSORING, informatively_censored)
        )

        return result

    def _check_random_rate(self, baseline: Cohort, censored: Cohort) -> None:
        """Warn when the share of censored events strays from the target."""
        events = baseline.status == 1
        n_events = int(np.sum(events))
        if n_events == 0:
            return

        p = self.scenario.random_censor_prob
        # 3 binomial standard errors
        tolerance = 3 * np.sqrt(p * (1 - p) / n_events)
        if not validate_censoring_rate(censored.status[events], p, tolerance=tolerance):
            logger.warning(
                "Random censoring removed %.1f%% of %d events, target %.1f%%",
                100 * (1 - np.mean(censored.status[events])),
                n_events,
                100 * p,
            )

    def _estimate(self, stage: SimulationStage, cohort: Cohort) -> StageResult:
        curves = fit_by_group(cohort)
        t = self.scenario.evaluation_time
        survival = ", ".join(
            f"{label}={value:.3f}" for label, value in curves.survival_at(t).items()
        )
        self._log(
            f"[{stage.name.lower()}] censored {1 - cohort.event_rate:.1%}; "
            f"S({t:g}): {survival}"
        )
        return StageResult(stage=stage, cohort=cohort, curves=curves)


def run_simulation(
    scenario: SimulationScenario, seed: int, verbose: bool = False
) -> SimulationResult:
    """Convenience function to run the full simulation.

    Args:
        scenario: Simulation scenario.
        seed: Random seed.
        verbose: Whether to print progress.

    Returns:
        SimulationResult.
    """
    return SimulationPipeline(scenario, seed, verbose=verbose).run()
