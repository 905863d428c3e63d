#!/usr/bin/env python3
"""Balance simulation for the CMO Simulator.

Plays many automated simulations per tactic policy and reports score, grade
and ROI distributions. Use it after changing anything in
cmosim/parameters.py or the content catalogs.

Policies:
1. efficient - highest revenue per dollar first
2. awareness - highest brand awareness gain first
3. random - shuffled catalog
"""

import argparse
import json
import logging
import statistics
import sys
import time
from collections import Counter
from pathlib import Path

from cmosim.testing import POLICIES, AutoPlayer, SimulationResult

GRADE_ORDER = ("A+", "A", "B", "C", "D")


def run_policy(
    policy: str,
    games: int,
    seed: int | None,
    total_budget: float | None,
    wildcard_chance: float,
) -> list[SimulationResult]:
    """Play `games` simulations with one policy."""
    results = []
    for i in range(games):
        game_seed = None if seed is None else seed + i
        player = AutoPlayer(
            policy=policy,
            random_seed=game_seed,
            total_budget=total_budget,
            wildcard_chance=wildcard_chance,
        )
        results.append(player.run(user_id=f"{policy}-{i}"))
    return results


def summarize(results: list[SimulationResult]) -> dict:
    scores = [r.overall_score for r in results]
    rois = [r.roi for r in results]
    grades = Counter(r.grade for r in results)
    bets = [r for r in results if r.big_bet_made]
    return {
        "games": len(results),
        "score_mean": statistics.mean(scores),
        "score_stdev": statistics.stdev(scores) if len(scores) > 1 else 0.0,
        "score_min": min(scores),
        "score_max": max(scores),
        "roi_mean": statistics.mean(rois),
        "grades": {grade: grades.get(grade, 0) for grade in GRADE_ORDER},
        "big_bets": len(bets),
        "big_bet_successes": sum(1 for r in bets if r.big_bet_success),
    }


def print_summary(policy: str, summary: dict) -> None:
    print(f"\n{policy.upper()}")
    print("-" * 80)
    print(
        f"Score: mean {summary['score_mean']:.1f} (sd {summary['score_stdev']:.1f}), "
        f"range {summary['score_min']}-{summary['score_max']}"
    )
    print(f"ROI:   mean {summary['roi_mean']:.1f}%")
    grade_line = "  ".join(f"{g}: {n:>4}" for g, n in summary["grades"].items())
    print(f"Grades: {grade_line}")
    if summary["big_bets"]:
        print(f"Big bets: {summary['big_bet_successes']}/{summary['big_bets']} succeeded")


def main() -> None:
    """Run balance simulation."""
    parser = argparse.ArgumentParser(
        description="Balance simulation across tactic policies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Plays automated simulations for each policy and prints the score and grade
distribution. A healthy balance has every policy able to reach B or better
and no single policy dominating the A grades.

Examples:
    python scripts/balance_simulation.py
    python scripts/balance_simulation.py --games 500 --seed 42
    python scripts/balance_simulation.py --policies efficient,random --budget 8000000
        """,
    )

    parser.add_argument(
        "--policies",
        type=str,
        default=None,
        help=f"Comma-separated policies (default: {','.join(POLICIES)})",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=100,
        help="Games per policy (default: 100)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--budget",
        type=float,
        default=None,
        help="Total budget per simulation (default: simulation default)",
    )
    parser.add_argument(
        "--wildcard-chance",
        type=float,
        default=0.5,
        help="Probability of a wildcard in each quarter (default: 0.5)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write per-game results and summaries to this JSON file",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress engine logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.ERROR if args.quiet else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    policies = list(POLICIES)
    if args.policies:
        policies = [p.strip() for p in args.policies.split(",")]
        unknown = [p for p in policies if p not in POLICIES]
        if unknown:
            print(f"Unknown policies: {', '.join(unknown)}", file=sys.stderr)
            sys.exit(2)

    print("=" * 80)
    print("CMO SIMULATOR BALANCE SIMULATION")
    print("=" * 80)
    print(f"Games per policy: {args.games}")
    if args.seed is not None:
        print(f"Seed: {args.seed}")
    if args.budget is not None:
        print(f"Budget: {args.budget:,.0f}")
    print(f"Policies: {', '.join(policies)}")

    start_time = time.time()
    report: dict = {}
    for policy in policies:
        results = run_policy(policy, args.games, args.seed, args.budget, args.wildcard_chance)
        summary = summarize(results)
        print_summary(policy, summary)
        report[policy] = {
            "summary": summary,
            "results": [r.to_dict() for r in results],
        }

    elapsed = time.time() - start_time
    print("\n" + "=" * 80)
    print(f"Completed {args.games * len(policies)} simulations in {elapsed:.1f}s")
    print("=" * 80)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(report, indent=2))
        print(f"Results written to {output_path}")


if __name__ == "__main__":
    main()
