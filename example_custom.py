#!/usr/bin/env python3
"""
Example: legacy versus corrected fitness.

Runs the same seeded search twice, once scoring every XOR pair and once
scoring only the last pair as the historical objective did, then compares
how well each best genome reproduces the truth table.
"""
from xorevo.config import GAConfig
from xorevo.fitness import XorObjective
from xorevo.genetic_algorithm import GeneticAlgorithm
from xorevo.report import classification_accuracy, format_truth_table


def main():
    """Run a small GA under both objectives."""
    print("=" * 80)
    print("Custom Example: legacy vs. corrected fitness")
    print("=" * 80)

    rmse = XorObjective()
    for legacy in (False, True):
        config = GAConfig(
            population_size=500,    # Smaller population
            max_same_count=50,      # Declare convergence sooner
            max_generations=1000,
            legacy_fitness=legacy,
        )
        ga = GeneticAlgorithm(config, random_seed=42)
        result = ga.run(verbose=False)

        label = "legacy last-pair" if legacy else "RMSE over all pairs"
        print(f"\nObjective: {label}")
        print(f"  Status: {result.status.value} after {result.generations} generations")
        print(f"  Objective value: {result.best_fitness:.4f}")
        print(f"  True RMSE:       {rmse.evaluate(result.best_genome):.4f}")
        print(f"  Accuracy:        {classification_accuracy(result.best_genome):.2f}")
        print(format_truth_table(result.best_genome))

    print("=" * 80)


if __name__ == "__main__":
    main()
