"""Simulation orchestration and output."""

from .pipeline import SimulationPipeline, SimulationResult, StageResult, run_simulation
from .logging import CSVCurveWriter, configure_logging
from .aggregation import collect_survival_across_seeds, summarize_across_seeds

__all__ = [
    "SimulationPipeline",
    "SimulationResult",
    "StageResult",
    "run_simulation",
    "CSVCurveWriter",
    "configure_logging",
    "collect_survival_across_seeds",
    "summarize_across_seeds",
]
