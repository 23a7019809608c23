"""Visualization modules for simulation results."""

from .curves import plot_survival_curves, plot_stage_comparison

__all__ = [
    "plot_survival_curves",
    "plot_stage_comparison",
]
