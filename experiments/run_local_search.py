"""
Benchmark runner for the local search strategies.

Runs first improving, best improving and simulated annealing local search
on synthetic or file-based instances and reports the final costs.

Usage:
    python experiments/run_local_search.py --problem tsp --size 60
    python experiments/run_local_search.py --problem ufl --instance data/orlib/cap71.txt
"""

import argparse
import json
import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

# Add project to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from local_search import (
    ExponentialCoolingSchema,
    RecordSolutionCommitAdapter,
    SimulatedAnnealingGainAdaptor,
    StopConditionCountLimit,
    make_strategy,
)
from problems import BaseProblem, KMedianProblem, NQueensProblem, TSPProblem
from problems.facility_location import FacilityLocationProblem
from utils.functors import NotFunctor
from utils.log import configure_logging, get_logger
from utils.orlib_loader import load_orlib_facility_location, load_orlib_k_median
from utils.tsplib_loader import load_tsplib

logger = get_logger(__name__)

STRATEGIES = ['first_improving', 'best_improving', 'annealing']


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Compare local search strategies on combinatorial problems',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument('--problem', type=str, default='tsp',
                        choices=['tsp', 'nqueens', 'ufl', 'kmedian'],
                        help='Problem type')
    parser.add_argument('--instance', type=str, default=None,
                        help='Instance file (TSPLIB for tsp, OR-Library for ufl/kmedian)')
    parser.add_argument('--num-instances', type=int, default=3,
                        help='Number of synthetic instances')
    parser.add_argument('--size', type=int, default=30,
                        help='Synthetic instance size (cities, board size, facilities)')
    parser.add_argument('--num-clients', type=int, default=60,
                        help='Clients of synthetic facility location / k-median instances')
    parser.add_argument('--k', type=int, default=5,
                        help='Medians of synthetic k-median instances')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for instances and search')

    parser.add_argument('--strategies', type=str, nargs='+', default=STRATEGIES,
                        choices=STRATEGIES, help='Strategies to run')
    parser.add_argument('--max-rounds', type=int, default=100000,
                        help='Maximum committed rounds per run')
    parser.add_argument('--start-temperature', type=float, default=10.0,
                        help='Initial annealing temperature')
    parser.add_argument('--alpha', type=float, default=0.999,
                        help='Annealing decay per gain evaluation')

    parser.add_argument('--results-dir', type=str, default='results',
                        help='Directory to save results')
    parser.add_argument('--run-name', type=str, default=None,
                        help='Name for this run')
    parser.add_argument('--verbose', action='store_true',
                        help='Log search progress')

    return parser.parse_args(argv)


def create_instances(args) -> List[BaseProblem]:
    """Load the instance file or generate synthetic instances."""
    if args.instance:
        if args.problem == 'tsp':
            return [load_tsplib(args.instance)]
        if args.problem == 'ufl':
            return [load_orlib_facility_location(args.instance)]
        if args.problem == 'kmedian':
            return [load_orlib_k_median(args.instance)]
        raise ValueError(f"Problem '{args.problem}' has no instance file format")

    rng = np.random.default_rng(args.seed)
    instances: List[BaseProblem] = []
    for i in range(args.num_instances):
        seed = args.seed + i
        if args.problem == 'tsp':
            instances.append(TSPProblem(num_cities=args.size, seed=seed))
        elif args.problem == 'nqueens':
            instances.append(NQueensProblem(n=args.size, seed=seed))
        else:
            facilities = rng.random((args.size, 2))
            clients = rng.random((args.num_clients, 2))
            distances = np.linalg.norm(clients[:, None, :] - facilities[None, :, :], axis=2)
            if args.problem == 'ufl':
                opening = rng.uniform(0.5, 2.0, args.size)
                instances.append(FacilityLocationProblem(opening, distances, seed=seed))
            else:
                instances.append(KMedianProblem(distances, min(args.k, args.size), seed=seed))
    return instances


def run_strategy(problem: BaseProblem, strategy_name: str, args, instance_id: int) -> Dict:
    """Run one strategy from a seeded random solution."""
    rng = np.random.default_rng(args.seed + instance_id)
    solution = problem.generate_random_solution(rng)
    initial_cost = problem.evaluate(solution)
    round_limit = NotFunctor(StopConditionCountLimit(args.max_rounds))

    start_time = time.perf_counter()

    if strategy_name == 'annealing':
        is_better = problem.comparator()
        cooling = ExponentialCoolingSchema(args.start_temperature, args.alpha)
        recorders = []
        components = []
        for bundle in problem.search_components():
            recorder = RecordSolutionCommitAdapter(
                solution, bundle.commit, is_better, problem.copy_solution
            )
            gain = SimulatedAnnealingGainAdaptor(bundle.gain, cooling, rng)
            recorders.append(recorder)
            components.append(bundle.replace(gain=gain, commit=recorder))
        problem.improve(solution, components=components, on_success=round_limit)
        # each bundle records the best among its own commits
        best = recorders[0].best
        for recorder in recorders[1:]:
            if is_better(recorder.best, best):
                best = recorder.best
    else:
        problem.improve(solution, strategy=make_strategy(strategy_name), on_success=round_limit)
        best = solution

    elapsed = time.perf_counter() - start_time
    final_cost = problem.evaluate(best)

    return {
        'instance_id': instance_id,
        'problem_name': getattr(problem, 'name', f"Instance_{instance_id}"),
        'strategy': strategy_name,
        'initial_cost': float(initial_cost),
        'final_cost': float(final_cost),
        'rounds': round_limit.functor.count,
        'evaluations': problem.get_evaluation_count(),
        'time': elapsed
    }


def format_summary(results: List[Dict]) -> str:
    """Format a per-strategy summary table."""
    lines = []
    lines.append("=" * 80)
    lines.append("LOCAL SEARCH COMPARISON")
    lines.append("=" * 80)
    lines.append(f"{'Strategy':<18} {'Mean Cost':<15} {'Std':<12} {'Best':<12} {'Worst':<12} {'Time (s)':<10}")
    lines.append("-" * 80)

    for strategy in STRATEGIES:
        costs = [r['final_cost'] for r in results if r['strategy'] == strategy]
        if not costs:
            continue
        times = [r['time'] for r in results if r['strategy'] == strategy]
        lines.append(
            f"{strategy:<18} {np.mean(costs):<15.6f} {np.std(costs):<12.6f} "
            f"{np.min(costs):<12.6f} {np.max(costs):<12.6f} {np.sum(times):<10.2f}"
        )

    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> str:
    """Run the comparison and return the path of the JSON results file."""
    args = parse_args(argv)
    if args.verbose:
        configure_logging('INFO')

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    instances = create_instances(args)
    logger.info("Running %s on %d instances", ", ".join(args.strategies), len(instances))

    results = []
    for i, problem in enumerate(instances):
        for strategy_name in args.strategies:
            problem.reset_evaluation_count()
            result = run_strategy(problem, strategy_name, args, i)
            results.append(result)
            logger.info(
                "%s %s: %.4f -> %.4f",
                result['problem_name'], strategy_name,
                result['initial_cost'], result['final_cost']
            )

    print(format_summary(results))

    os.makedirs(args.results_dir, exist_ok=True)
    run_name = args.run_name or f"{args.problem}_{timestamp}"
    out_path = os.path.join(args.results_dir, f"{run_name}.json")
    with open(out_path, 'w') as f:
        json.dump({'args': vars(args), 'results': results}, f, indent=2)

    print(f"\nResults saved to: {out_path}")
    return out_path


if __name__ == '__main__':
    main()
