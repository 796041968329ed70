#!/usr/bin/env python3
"""Entry point for evolving XOR network weights with a genetic algorithm."""
from __future__ import annotations

import os
import argparse
import logging

from xorevo import config
from xorevo.config import GAConfig
from xorevo.exceptions import ConfigurationError
from xorevo.genetic_algorithm import GeneticAlgorithm
from xorevo.report import classification_accuracy, format_genome, format_truth_table
from xorevo.visualizations import (
    plot_fitness_history,
    plot_weight_heatmap,
    plot_best_mds,
    plot_population_weight_stats,
    plot_fitness_interactive,
)

logger = logging.getLogger("xorevo")


def build_config(args: argparse.Namespace) -> GAConfig:
    return GAConfig(
        population_size=args.population_size,
        genome_size=args.genome_size,
        weight_range=(args.range_min, args.range_max),
        mutation_rate=args.mutation_rate,
        gene_mutation_rate=args.gene_mutation_rate,
        perturbation_scale=args.perturbation,
        crossover_rate=args.crossover_rate,
        split_point=args.split_point,
        tolerance=args.tolerance,
        max_same_count=args.max_same_count,
        elite_rate=args.elite_rate,
        tournament_rounds=args.tournament_rounds,
        legacy_fitness=args.legacy_fitness,
        max_generations=args.max_generations,
    )


def run_experiment(args: argparse.Namespace) -> int:
    try:
        ga = GeneticAlgorithm(build_config(args), random_seed=args.seed)
        print(f"Population: {ga.config.population_size} | Genome size: {ga.config.genome_size}")
        print(f"Fitness: {'legacy last-pair' if ga.config.legacy_fitness else 'RMSE over all pairs'}")
        result = ga.run(time_limit=args.time_limit, verbose=not args.quiet)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    print()
    print(format_truth_table(result.best_genome))
    print(f"best = {format_genome(result.best_genome)}")
    print(f"fitness = {result.best_fitness}")
    print(f"accuracy = {classification_accuracy(result.best_genome):.2f}")
    if result.converged:
        print(f"Converged after {result.generations} generations")
    else:
        print(f"Best effort: stopped after {result.generations} generations without converging")

    if args.plots:
        os.makedirs(args.results_dir, exist_ok=True)
        print("\nGenerating visualizations...")
        history = result.history
        plot_fitness_history(history, os.path.join(args.results_dir, "fitness.png"))
        plot_weight_heatmap(history.best_individual_history,
                            os.path.join(args.results_dir, "weights_heatmap.png"))
        if not plot_best_mds(history.best_individual_history,
                             os.path.join(args.results_dir, "weights_mds.png")):
            print("Best genome never changed; skipping MDS trajectory")
        plot_population_weight_stats(history,
                                     os.path.join(args.results_dir, "population_weight_stats.png"))
        plot_fitness_interactive(history).write_html(os.path.join(args.results_dir, "fitness.html"))
        print(f"Artifacts saved to {args.results_dir}")
    return 0


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evolve XOR network weights with a genetic algorithm")
    parser.add_argument("--population-size", type=int, default=config.POPULATION_SIZE)
    parser.add_argument("--genome-size", type=int, default=config.GENOME_SIZE)
    parser.add_argument("--range-min", type=float, default=config.RANGE_MIN)
    parser.add_argument("--range-max", type=float, default=config.RANGE_MAX)
    parser.add_argument("--mutation-rate", type=float, default=config.MUTATION_RATE)
    parser.add_argument("--gene-mutation-rate", type=float, default=config.GENE_MUTATION_RATE)
    parser.add_argument("--perturbation", type=float, default=config.PERTURBATION_SCALE)
    parser.add_argument("--crossover-rate", type=float, default=config.CROSSOVER_RATE)
    parser.add_argument("--split-point", type=int, default=None)
    parser.add_argument("--tolerance", type=float, default=config.TOLERANCE)
    parser.add_argument("--max-same-count", type=int, default=config.MAX_SAME_COUNT)
    parser.add_argument("--max-generations", type=int, default=None)
    parser.add_argument("--time-limit", type=float, default=None, help="Seconds")
    parser.add_argument("--elite-rate", type=float, default=config.ELITE_RATE)
    parser.add_argument("--tournament-rounds", type=int, default=config.TOURNAMENT_ROUNDS)
    parser.add_argument("--legacy-fitness", action="store_true",
                        help="Score only the last XOR pair, as the historical objective did")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--quiet", action="store_true")
    parser.add_argument("--plots", action="store_true")
    parser.add_argument("--results-dir", default=config.RESULTS_DIR)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


if __name__ == "__main__":
    arguments = parse_args()
    logging.basicConfig(level=arguments.log_level.upper(),
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    raise SystemExit(run_experiment(arguments))
