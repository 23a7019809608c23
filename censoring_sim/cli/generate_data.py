"""CLI for generating a synthetic cohort without running the censoring stages."""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from ..data.generator import CohortGenerator
from ..data.scenarios import SimulationScenario, get_scenario, PREDEFINED_SCENARIOS
from ..errors import InvalidParameterError


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for generate_data CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="python -m censoring_sim.cli.generate_data",
        description="Generate a synthetic cohort with administrative censoring.",
    )

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--scenario",
        type=str,
        choices=list(PREDEFINED_SCENARIOS.keys()),
        help="Predefined scenario name",
    )
    group.add_argument(
        "--config",
        type=Path,
        help="Path to custom scenario config file",
    )

    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Output directory or file path",
    )

    parser.add_argument(
        "--n-samples",
        type=int,
        help="Override sample count",
    )

    parser.add_argument(
        "--seed",
        type=int,
        required=True,
        help="Random seed",
    )

    parser.add_argument(
        "--format",
        type=str,
        choices=["npz", "csv"],
        default="npz",
        help="Output format: npz, csv (default: npz)",
    )

    args = parser.parse_args(argv)

    if args.config and not args.config.exists():
        print(f"ERROR: Config file not found: {args.config}", file=sys.stderr)
        return 1

    try:
        if args.scenario:
            scenario = get_scenario(args.scenario)
        else:
            scenario = SimulationScenario.from_json(args.config)
        if args.n_samples is not None:
            scenario = dataclasses.replace(scenario, n_samples=args.n_samples)
    except InvalidParameterError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    # Generate data
    print(f"Generating {scenario.name} cohort with {scenario.n_samples} subjects...")
    generator = CohortGenerator(scenario, rng=np.random.default_rng(args.seed))
    cohort = generator.generate()

    # Determine output path
    output_path = args.output
    if output_path.is_dir() or not output_path.suffix:
        output_path.mkdir(parents=True, exist_ok=True)
        output_path = output_path / f"{scenario.name}.{args.format}"
    else:
        output_path.parent.mkdir(parents=True, exist_ok=True)

    # Save data
    if args.format == "npz":
        cohort.save(output_path)
    elif args.format == "csv":
        cohort.to_csv(output_path)

    print(f"Data saved to: {output_path}")
    print(f"  Subjects: {len(cohort)}")
    print(f"  Groups: {', '.join(cohort.groups)}")
    print(f"  Event rate: {cohort.event_rate:.1%}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
