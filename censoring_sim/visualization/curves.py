"""Kaplan-Meier curve visualization."""

from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend
import matplotlib.pyplot as plt

from ..estimation.kaplan_meier import StratifiedSurvival

GROUP_COLORS = ["tab:blue", "tab:orange", "tab:green", "tab:red"]


def _draw_curves(
    ax: plt.Axes,
    curves: StratifiedSurvival,
    xlim: Optional[Tuple[float, float]],
    ylim: Tuple[float, float],
) -> None:
    for i, (label, curve) in enumerate(curves):
        t, s = curve.step_points()
        ax.step(
            t,
            s,
            where="post",
            linewidth=2,
            color=GROUP_COLORS[i % len(GROUP_COLORS)],
            label=f"Group {label} (n={curve.n_subjects})",
        )

    if xlim is not None:
        ax.set_xlim(*xlim)
    ax.set_ylim(*ylim)
    ax.set_xlabel("Time", fontsize=12)
    ax.set_ylabel("Survival probability", fontsize=12)
    ax.legend(loc="lower left")
    ax.grid(True, alpha=0.3)


def _save_or_return(
    fig: plt.Figure, output_path: Optional[Union[str, Path]], dpi: int
) -> Optional[plt.Figure]:
    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(f"{output_path}.png", dpi=dpi, bbox_inches="tight")
        fig.savefig(f"{output_path}.pdf", bbox_inches="tight")
        plt.close(fig)
        return None
    return fig


def plot_survival_curves(
    curves: StratifiedSurvival,
    output_path: Optional[Union[str, Path]] = None,
    title: Optional[str] = None,
    xlim: Optional[Tuple[float, float]] = None,
    ylim: Tuple[float, float] = (0.5, 1.0),
    figsize: Tuple[float, float] = (8, 6),
    dpi: int = 300,
) -> Optional[plt.Figure]:
    """Plot one Kaplan-Meier step function per group.

    Args:
        curves: Stratified curves to plot.
        output_path: Path to save figure (without extension).
            If None, returns figure without saving.
        title: Plot title.
        xlim: Horizontal axis bounds. Defaults to matplotlib's choice.
        ylim: Vertical axis bounds.
        figsize: Figure size in inches.
        dpi: Resolution for saved figures.

    Returns:
        Matplotlib figure if output_path is None.
    """
    fig, ax = plt.subplots(figsize=figsize)
    _draw_curves(ax, curves, xlim, ylim)
    if title:
        ax.set_title(title, fontsize=14)
    plt.tight_layout()
    return _save_or_return(fig, output_path, dpi)


def plot_stage_comparison(
    stages: Sequence[Tuple[str, StratifiedSurvival]],
    output_path: Optional[Union[str, Path]] = None,
    title: Optional[str] = None,
    xlim: Optional[Tuple[float, float]] = None,
    ylim: Tuple[float, float] = (0.5, 1.0),
    figsize: Tuple[float, float] = (15, 5),
    dpi: int = 300,
) -> Optional[plt.Figure]:
    """Plot the curves of several stages side by side with shared axes.

    Args:
        stages: Sequence of (subplot title, curves) pairs.
        output_path: Path to save figure.
        title: Overall title.
        xlim: Horizontal axis bounds.
        ylim: Vertical axis bounds.
        figsize: Figure size.
        dpi: Resolution.

    Returns:
        Matplotlib figure if output_path is None.
    """
    n_stages = len(stages)
    fig, axes = plt.subplots(1, n_stages, figsize=figsize, sharey=True)

    if n_stages == 1:
        axes = [axes]

    for ax, (stage_title, curves) in zip(axes, stages):
        _draw_curves(ax, curves, xlim, ylim)
        ax.set_title(stage_title, fontsize=12)

    if title:
        fig.suptitle(title, fontsize=14, y=1.02)

    plt.tight_layout()
    return _save_or_return(fig, output_path, dpi)
