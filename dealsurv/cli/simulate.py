"""CLI for simulating a deal cohort."""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

from ..data.scenarios import CohortScenario, get_scenario, PREDEFINED_SCENARIOS
from ..data.simulator import CohortSimulator
from ..errors import DealSurvError


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for simulate CLI.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="python -m dealsurv.cli.simulate",
        description="Simulate a censored deal cohort without estimation.",
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
        "--n-deals",
        type=int,
        help="Override deal count",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed (default: 42)",
    )

    parser.add_argument(
        "--format",
        type=str,
        choices=["npz", "csv"],
        default="npz",
        help="Output format: npz, csv (default: npz)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print simulation progress to stderr",
    )

    args = parser.parse_args(argv)

    # Load scenario
    try:
        if args.scenario:
            scenario = get_scenario(args.scenario)
        else:
            if not args.config.exists():
                print(f"ERROR: Config file not found: {args.config}", file=sys.stderr)
                return 1
            scenario = CohortScenario.from_json(args.config)

        if args.n_deals is not None:
            scenario = dataclasses.replace(scenario, n_deals=args.n_deals)
    except DealSurvError as e:
        print(f"ERROR: Invalid scenario: {e}", file=sys.stderr)
        return 1

    print(f"Simulating {scenario.name} cohort with {scenario.n_deals} deals...")
    try:
        simulator = CohortSimulator.from_scenario(
            scenario, rng=args.seed, verbose=args.verbose
        )
        cohort = simulator.simulate(scenario.n_deals)
    except DealSurvError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    # Determine output path
    output_path = args.output
    if output_path.is_dir() or not output_path.suffix:
        output_path.mkdir(parents=True, exist_ok=True)
        output_path = output_path / f"{scenario.name}.{args.format}"
    else:
        output_path.parent.mkdir(parents=True, exist_ok=True)

    if args.format == "npz":
        cohort.save(output_path)
    elif args.format == "csv":
        cohort.to_frame().to_csv(output_path)

    print(f"Cohort saved to: {output_path}")
    print(f"  Deals: {len(cohort)}")
    print(f"  Horizon period: {cohort.horizon_period}")
    print(f"  Event rate: {cohort.event_rate:.1%}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
