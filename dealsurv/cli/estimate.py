"""CLI for simulating a cohort and validating its Kaplan-Meier estimate."""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

from ..analysis.ground_truth import compare_to_theoretical, compare_with_lifelines
from ..data.scenarios import CohortScenario, get_scenario, PREDEFINED_SCENARIOS
from ..data.simulator import CohortSimulator
from ..data.types import ConfidenceType
from ..errors import DealSurvError
from ..experiments.logging import CurveCSVWriter, write_run_info
from ..metrics.kaplan_meier import KaplanMeierEstimator


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for estimate CLI.

    Returns:
        Exit code (0=success, 1=configuration error).
    """
    parser = argparse.ArgumentParser(
        prog="python -m dealsurv.cli.estimate",
        description=(
            "Simulate a deal cohort, estimate its survival curve with "
            "Kaplan-Meier and compare it with the analytic curve."
        ),
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

    parser.add_argument("--n-deals", type=int, help="Override deal count")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--conf-type",
        type=str,
        choices=[c.name.lower() for c in ConfidenceType],
        default="plain",
        help="Confidence bound transform (default: plain)",
    )
    parser.add_argument(
        "--curve-csv",
        type=Path,
        help="Write the estimated curve to this CSV file",
    )
    parser.add_argument(
        "--show-table",
        action="store_true",
        help="Print the comparison table",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print simulation progress to stderr",
    )

    args = parser.parse_args(argv)

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

        estimator = KaplanMeierEstimator(
            confidence_level=scenario.confidence_level,
            conf_type=ConfidenceType[args.conf_type.upper()],
        )
        simulator = CohortSimulator.from_scenario(
            scenario, rng=args.seed, verbose=args.verbose
        )
        cohort = simulator.simulate(scenario.n_deals)
        sample = cohort.sample()
        curve = estimator.estimate(sample)
    except DealSurvError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    hazard = simulator.hazard
    comparison = compare_to_theoretical(curve, hazard, horizon=cohort.horizon_period)
    lifelines_gap = compare_with_lifelines(sample, curve)

    print(scenario.banner(horizon_period=simulator.horizon_period))
    print()
    print(f"Kaplan-Meier estimate (number of deals {curve.n})")
    print(f"  Events: {cohort.n_events}  Censored: {curve.n_censored}")
    print(f"  Event times: {len(curve.steps)}")
    print(f"  Survival at horizon: {curve.survival_at(cohort.horizon_period):.4f}")
    median = curve.median_survival_time()
    print(f"  Median survival time: {median if median is not None else 'not reached'}")
    print()
    print("Comparison with theoretical survival")
    print(f"  Max abs deviation: {comparison.max_abs_deviation:.4f}")
    print(f"  CI coverage: {comparison.coverage:.1%}")
    print(f"  Max difference vs lifelines: {lifelines_gap:.2e}")

    if args.show_table:
        print()
        print(comparison.table.to_string(index=False))

    if args.curve_csv:
        writer = CurveCSVWriter(args.curve_csv)
        try:
            writer.write(curve, label=f"{scenario.name}-seed{args.seed}")
        finally:
            writer.close()
        write_run_info(
            args.curve_csv.with_suffix(".json"),
            {
                "scenario": scenario.to_dict(),
                "seed": args.seed,
                "conf_type": args.conf_type,
                **comparison.to_dict(),
                "lifelines_max_difference": lifelines_gap,
            },
        )
        print(f"Curve saved to: {args.curve_csv}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
