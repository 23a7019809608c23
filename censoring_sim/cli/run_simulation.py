"""CLI for running the three-stage censoring simulation."""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

from ..data.scenarios import SimulationScenario, get_scenario, PREDEFINED_SCENARIOS
from ..errors import InvalidParameterError
from ..experiments.logging import CSVCurveWriter, configure_logging
from ..experiments.pipeline import SimulationPipeline
from ..visualization.curves import plot_stage_comparison, plot_survival_curves


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for run_simulation CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="python -m censoring_sim.cli.run_simulation",
        description=(
            "Generate a cohort, apply random then informative censoring, and "
            "plot the Kaplan-Meier curves after each stage."
        ),
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--scenario",
        type=str,
        choices=list(PREDEFINED_SCENARIOS.keys()),
        default="demonstration",
        help="Predefined scenario name (default: demonstration)",
    )
    group.add_argument(
        "--config",
        type=Path,
        help="Path to custom scenario config file",
    )

    parser.add_argument(
        "--seed",
        type=int,
        required=True,
        help="Random seed",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("outputs/simulation"),
        help="Output directory (default: outputs/simulation/)",
    )

    parser.add_argument(
        "--n-samples",
        type=int,
        help="Override sample count",
    )

    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip figure generation",
    )

    parser.add_argument(
        "--dpi",
        type=int,
        default=300,
        help="Resolution for raster formats (default: 300)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress non-error output",
    )

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.config and not args.config.exists():
        print(f"ERROR: Config file not found: {args.config}", file=sys.stderr)
        return 1

    try:
        if args.config:
            scenario = SimulationScenario.from_json(args.config)
        else:
            scenario = get_scenario(args.scenario)
        if args.n_samples is not None:
            scenario = dataclasses.replace(scenario, n_samples=args.n_samples)
        result = SimulationPipeline(scenario, args.seed, verbose=not args.quiet).run()
    except InvalidParameterError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    output_dir = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    result.save(output_dir / "summary.json")
    with CSVCurveWriter(output_dir / "curves.csv") as writer:
        for stage_result in result.stages:
            writer.write(stage_result.stage, stage_result.curves)

    if not args.no_plots:
        xlim = (0, scenario.horizon)
        for stage_result in result.stages:
            plot_survival_curves(
                stage_result.curves,
                output_path=output_dir / "figures" / stage_result.stage.name.lower(),
                title=stage_result.stage.title,
                xlim=xlim,
                dpi=args.dpi,
            )
        plot_stage_comparison(
            [(r.stage.title, r.curves) for r in result.stages],
            output_path=output_dir / "figures" / "comparison",
            xlim=xlim,
            dpi=args.dpi,
        )

    if not args.quiet:
        t = scenario.evaluation_time
        print(f"\nSurvival at t={t:g}:")
        for stage_name, values in result.survival_table(t).items():
            row = "  ".join(f"{label}={value:.3f}" for label, value in values.items())
            print(f"  {stage_name:<22} {row}")
        print(f"\nResults saved to: {output_dir}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
