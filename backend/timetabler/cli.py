"""Command-line driver.

Run:
  timetabler datasets/hec-s-92 --timeslots 18
  timetabler datasets/hec-s-92 --minimize-timeslots --generations 200 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from timetabler.core.config import Settings, load_settings
from timetabler.core.exceptions import AppError
from timetabler.schemas.search import BestSolution, SearchConfig
from timetabler.services.datasets import load_carter_instance, write_solution
from timetabler.services.evolution_engine import run

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="timetabler",
        description="Evolutionary exam timetabling for Carter-format datasets",
    )
    parser.add_argument("dataset", help="Dataset path without extension (reads NAME.crs and NAME.stu)")
    objective = parser.add_mutually_exclusive_group(required=True)
    objective.add_argument("--timeslots", type=int, help="Minimise proximity cost over this many timeslots")
    objective.add_argument(
        "--minimize-timeslots",
        action="store_true",
        help="Minimise the number of timeslots of a conflict-free timetable",
    )
    parser.add_argument("--population-size", type=int, default=None)
    parser.add_argument("--generations", type=int, default=None, dest="generation_count")
    parser.add_argument("--mutation-probability", type=float, default=None)
    parser.add_argument("--climb-probability", type=float, default=None, dest="hill_climb_probability")
    parser.add_argument("--climb-iterations", type=int, default=None, dest="hill_climb_iterations")
    parser.add_argument(
        "--first-improvement",
        action="store_true",
        default=None,
        dest="hill_climb_first_improvement",
        help="Stop each hill climb at its first accepted move",
    )
    parser.add_argument("--tournament-size", type=int, default=None)
    parser.add_argument("--elite-count", type=int, default=None)
    parser.add_argument("--selection", choices=["tournament", "truncation"], default=None, dest="selection_strategy")
    parser.add_argument("--truncation-size", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None, dest="random_seed", help="Random seed (default: OS entropy)")
    parser.add_argument("--output", default=None, help="Write the best assignment to this file")
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    return parser.parse_args(argv)


def configure_logging(settings: Settings, level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.log_level).upper(), format=settings.log_format)


def build_config(args: argparse.Namespace, settings: Settings) -> SearchConfig:
    if args.minimize_timeslots:
        objective = {"kind": "timeslot_count"}
    else:
        objective = {"kind": "proximity", "timeslot_count": args.timeslots}
    return SearchConfig.from_settings(
        settings,
        objective=objective,
        population_size=args.population_size,
        generation_count=args.generation_count,
        mutation_probability=args.mutation_probability,
        hill_climb_probability=args.hill_climb_probability,
        hill_climb_iterations=args.hill_climb_iterations,
        hill_climb_first_improvement=args.hill_climb_first_improvement,
        tournament_size=args.tournament_size,
        elite_count=args.elite_count,
        selection_strategy=args.selection_strategy,
        truncation_size=args.truncation_size,
        random_seed=args.random_seed,
    )


def print_solution(solution: BestSolution) -> None:
    print("Best solution:")
    for exam, timeslot in enumerate(solution.assignment):
        print(f"{exam} {timeslot}")
    print(f" | {solution.aptitude}")
    print(
        f"objective={solution.objective} timeslots={solution.timeslots_used} "
        f"feasible={solution.feasible} generations={solution.generations} "
        f"seed={solution.seed} runtime={solution.runtime_ms}ms"
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings()
        configure_logging(settings, args.log_level)
        config = build_config(args, settings)
        problem = load_carter_instance(args.dataset)
        solution = run(config, problem, progress_interval=settings.progress_interval)
        print_solution(solution)
        if args.output:
            write_solution(args.output, solution)
    except AppError as exc:
        logger.error("%s", exc.message)
        print(f"error: {exc.message}", file=sys.stderr)
        return exc.exit_code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
