"""Unit tests for the xorevo package."""
from __future__ import annotations

import contextlib
import io
import os
import tempfile
import unittest
import warnings
import numpy as np

from xorevo.config import GAConfig
from xorevo.exceptions import ConfigurationError, EvaluationError
from xorevo.fitness import XorObjective
from xorevo.genetic_algorithm import (
    ConvergenceMonitor,
    GeneticAlgorithm,
    MonitorState,
    RunStatus,
    Trainer,
)
from xorevo.genome import create_random_genome, initialize_population, make_rng
from xorevo.network import (
    XOR_INPUTS,
    XorNetwork,
    feedforward,
    feedforward_population,
    sigmoid,
)
from xorevo.operators import crossover, mutate, operator_probabilities, tournament_select
from xorevo.report import (
    classification_accuracy,
    format_progress,
    format_truth_table,
    truth_table,
)

# h1 fires on (1, 0), h2 on (0, 1); the output is their OR.
XOR_SOLUTION = np.array([10.0, -10.0, -10.0, 10.0, 10.0, 10.0, -5.0, -5.0])


class TestGenome(unittest.TestCase):
    def test_random_genome_bounds(self):
        genome = create_random_genome(8, make_rng(1))
        self.assertEqual(genome.shape, (8,))
        self.assertTrue(np.all(genome >= -10.0))
        self.assertTrue(np.all(genome <= 10.0))

    def test_seed_is_deterministic(self):
        a = initialize_population(20, 8, make_rng(5))
        b = initialize_population(20, 8, make_rng(5))
        np.testing.assert_array_equal(a, b)

    def test_population_matches_genome_draws(self):
        pop = initialize_population(3, 8, make_rng(9))
        rng = make_rng(9)
        rows = [create_random_genome(8, rng) for _ in range(3)]
        np.testing.assert_allclose(pop, np.vstack(rows))

    def test_custom_range(self):
        pop = initialize_population(100, 8, make_rng(0), range_min=-1.0, range_max=1.0)
        self.assertEqual(pop.shape, (100, 8))
        self.assertLessEqual(np.abs(pop).max(), 1.0)

    def test_invalid_sizes(self):
        with self.assertRaises(ConfigurationError):
            create_random_genome(0, make_rng(0))
        with self.assertRaises(ConfigurationError):
            initialize_population(0, 8, make_rng(0))
        with self.assertRaises(ConfigurationError):
            initialize_population(10, -1, make_rng(0))


class TestNetwork(unittest.TestCase):
    def test_sigmoid_shape(self):
        self.assertEqual(sigmoid(0.0), 0.5)
        xs = np.linspace(-30, 30, 201)
        ys = sigmoid(xs)
        self.assertTrue(np.all(np.diff(ys) > 0))
        self.assertTrue(np.all((ys > 0) & (ys < 1)))

    def test_population_forward_matches_single(self):
        pop = initialize_population(6, 8, make_rng(2))
        out = feedforward_population(pop)
        self.assertEqual(out.shape, (6, 4))
        for i, genome in enumerate(pop):
            for j, (x1, x2) in enumerate(XOR_INPUTS):
                self.assertAlmostEqual(out[i, j], feedforward(x1, x2, genome))

    def test_shared_hidden_bias(self):
        genome = np.zeros(8)
        genome[6] = 3.0
        # both hidden units see only b1 at (0, 0); output uses w5 = w6 = 0
        self.assertAlmostEqual(feedforward(0.0, 0.0, genome), 0.5)
        genome[4] = 1.0
        genome[5] = -1.0
        self.assertAlmostEqual(feedforward(0.0, 0.0, genome), 0.5)

    def test_set_get_weights_roundtrip(self):
        net = XorNetwork()
        net.set_weights(XOR_SOLUTION)
        np.testing.assert_allclose(net.get_weights(), XOR_SOLUTION)
        np.testing.assert_array_equal(net.predict(XOR_INPUTS), [0, 1, 1, 0])
        self.assertIsInstance(net.forward([1.0, 0.0]), float)

    def test_wrong_length_rejected(self):
        with self.assertRaises(EvaluationError):
            XorNetwork().set_weights(np.zeros(7))
        with self.assertRaises(EvaluationError):
            feedforward(0.0, 1.0, np.zeros(9))


class TestFitness(unittest.TestCase):
    def test_fitness_non_negative(self):
        objective = XorObjective()
        scores = objective.evaluate_population(initialize_population(200, 8, make_rng(3)))
        self.assertTrue(np.all(scores >= 0.0))

    def test_known_solution(self):
        self.assertLess(XorObjective().evaluate(XOR_SOLUTION), 0.05)

    def test_single_matches_population(self):
        objective = XorObjective()
        pop = initialize_population(5, 8, make_rng(4))
        scores = objective.evaluate_population(pop)
        for genome, score in zip(pop, scores):
            self.assertAlmostEqual(objective.evaluate(genome), score)

    def test_rmse_definition(self):
        genome = create_random_genome(8, make_rng(8))
        outputs = np.array([feedforward(x1, x2, genome) for x1, x2 in XOR_INPUTS])
        expected = np.sqrt(np.sum((outputs - np.array([0, 1, 1, 0])) ** 2) / 4)
        self.assertAlmostEqual(XorObjective().evaluate(genome), expected)

    def test_legacy_scores_last_pair_only(self):
        genome = create_random_genome(8, make_rng(6))
        y_last = feedforward(1.0, 1.0, genome)
        legacy = XorObjective(legacy_last_pair=True)
        self.assertAlmostEqual(legacy.evaluate(genome), abs(y_last) / 2.0)
        self.assertTrue(legacy.should_minimize)

    def test_bad_genome(self):
        objective = XorObjective()
        with self.assertRaises(EvaluationError):
            objective.evaluate(np.zeros(5))
        with self.assertRaises(EvaluationError):
            objective.evaluate(np.zeros((2, 8)))
        with self.assertRaises(EvaluationError):
            objective.evaluate(np.full(8, np.nan))


class TestOperators(unittest.TestCase):
    def setUp(self):
        self.a = np.arange(8, dtype=float)
        self.b = -np.arange(8, dtype=float) - 1.0

    def test_crossover_partition(self):
        for s in range(9):
            child_a, child_b = crossover(self.a, self.b, s)
            np.testing.assert_array_equal(child_a[:s], self.a[:s])
            np.testing.assert_array_equal(child_a[s:], self.b[s:])
            np.testing.assert_array_equal(child_b[:s], self.b[:s])
            np.testing.assert_array_equal(child_b[s:], self.a[s:])

    def test_crossover_boundaries(self):
        child_a, _ = crossover(self.a, self.b, 0)
        np.testing.assert_array_equal(child_a, self.b)
        child_a, _ = crossover(self.a, self.b, 8)
        np.testing.assert_array_equal(child_a, self.a)

    def test_crossover_does_not_alias(self):
        child_a, _ = crossover(self.a, self.b, 8)
        child_a[0] = 100.0
        self.assertEqual(self.a[0], 0.0)

    def test_crossover_rejects_bad_input(self):
        with self.assertRaises(ConfigurationError):
            crossover(self.a, self.b, 9)
        with self.assertRaises(ConfigurationError):
            crossover(self.a, self.b[:6], 3)

    def test_mutation_rate_zero_is_noop(self):
        out = mutate(self.a, 0.0, 0.5, make_rng(0))
        np.testing.assert_array_equal(out, self.a)
        self.assertIsNot(out, self.a)

    def test_mutation_rate_one_changes_genes(self):
        rng = make_rng(1)
        for _ in range(20):
            out = mutate(self.a, 1.0, 0.001, rng)
            self.assertFalse(np.array_equal(out, self.a))
            self.assertLessEqual(np.abs(out - self.a).max(), 0.001)
        np.testing.assert_array_equal(self.a, np.arange(8, dtype=float))

    def test_mutation_respects_bounds(self):
        edge = np.full(8, 10.0)
        out = mutate(edge, 1.0, 0.5, make_rng(2), bounds=(-10.0, 10.0))
        self.assertLessEqual(out.max(), 10.0)

    def test_tournament_prefers_lowest(self):
        fitness = np.array([0.9, 0.1, 0.5, 0.7, 0.3])
        self.assertEqual(tournament_select(fitness, 200, make_rng(3)), 1)

    def test_operator_probabilities(self):
        names, probs = operator_probabilities(0.01, 0.9)
        self.assertEqual(names, ("mutation", "crossover"))
        self.assertAlmostEqual(probs.sum(), 1.0)
        self.assertAlmostEqual(probs[0], 0.01 / 0.91)
        with self.assertRaises(ConfigurationError):
            operator_probabilities(0.0, 0.0)


class TestConvergenceMonitor(unittest.TestCase):
    def test_converges_after_stable_streak(self):
        monitor = ConvergenceMonitor(tolerance=0.01, max_same_count=5)
        for _ in range(5):
            self.assertFalse(monitor.update(0.3))
        self.assertEqual(monitor.stable_count, 4)
        self.assertTrue(monitor.update(0.3))
        self.assertIs(monitor.state, MonitorState.CONVERGED)

    def test_large_change_resets(self):
        monitor = ConvergenceMonitor(tolerance=0.01, max_same_count=100)
        for value in (0.3, 0.3, 0.305):
            monitor.update(value)
        self.assertEqual(monitor.stable_count, 2)
        monitor.update(0.5)
        self.assertEqual(monitor.stable_count, 0)
        self.assertIs(monitor.state, MonitorState.RUNNING)

    def test_reset(self):
        monitor = ConvergenceMonitor(max_same_count=1)
        monitor.update(1.0)
        monitor.update(1.0)
        self.assertTrue(monitor.converged)
        monitor.reset()
        self.assertFalse(monitor.converged)
        self.assertEqual(monitor.stable_count, 0)

    def test_non_positive_tolerance_rejected(self):
        for tolerance in (0.0, -0.01):
            with self.assertRaises(ConfigurationError):
                ConvergenceMonitor(tolerance=tolerance, max_same_count=3)
        with self.assertRaises(ConfigurationError):
            ConvergenceMonitor(tolerance=0.01, max_same_count=0)

    def test_smallest_tolerance_still_counts_repeats(self):
        monitor = ConvergenceMonitor(tolerance=1e-12, max_same_count=3)
        results = [monitor.update(0.25) for _ in range(4)]
        self.assertEqual(results, [False, False, False, True])


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        config = GAConfig().validate()
        self.assertEqual(config.population_size, 10000)
        self.assertEqual(config.genome_size, 8)
        self.assertEqual(config.split_point, 4)
        self.assertEqual(config.weight_range, (-10.0, 10.0))

    def test_invalid(self):
        for kwargs in ({"genome_size": 0}, {"population_size": 0}, {"split_point": 0},
                       {"split_point": 8}, {"weight_range": (1.0, -1.0)},
                       {"crossover_rate": 1.5}, {"mutation_rate": 0.0, "crossover_rate": 0.0},
                       {"elite_rate": 1.0}, {"max_same_count": 0}, {"max_generations": 0},
                       {"tolerance": 0.0}, {"tolerance": -0.5}):
            with self.assertRaises(ConfigurationError, msg=str(kwargs)):
                GAConfig(**kwargs).validate()


class TestGA(unittest.TestCase):
    def small_config(self, **kwargs):
        params = dict(population_size=50, genome_size=8)
        params.update(kwargs)
        return GAConfig(**params)

    def test_seeded_run_terminates(self):
        ga = GeneticAlgorithm(self.small_config(), random_seed=11)
        result = ga.run(max_generations=500, verbose=False)
        self.assertIn(result.status, (RunStatus.CONVERGED, RunStatus.EXHAUSTED))
        self.assertLessEqual(result.generations, 500)
        self.assertEqual(result.best_genome.shape, (8,))
        self.assertTrue(np.all(np.abs(result.best_genome) <= 10.0))
        self.assertEqual(len(result.history.generations), result.generations + 1)
        self.assertAlmostEqual(result.best_fitness, XorObjective().evaluate(result.best_genome))

    def test_best_fitness_never_worsens(self):
        ga = GeneticAlgorithm(self.small_config(), random_seed=3)
        history = ga.run(max_generations=40, verbose=False).history
        self.assertTrue(np.all(np.diff(history.best_fitness) <= 1e-12))

    def test_cap_reported_as_exhausted(self):
        ga = GeneticAlgorithm(self.small_config(max_same_count=1000), random_seed=4)
        result = ga.run(max_generations=5, verbose=False)
        self.assertIs(result.status, RunStatus.EXHAUSTED)
        self.assertFalse(result.converged)
        self.assertEqual(result.generations, 5)

    def test_converges_without_cap(self):
        ga = GeneticAlgorithm(self.small_config(max_same_count=3, tolerance=1.0), random_seed=5)
        result = ga.run(verbose=False)
        self.assertIs(result.status, RunStatus.CONVERGED)
        self.assertEqual(result.generations, 4)

    def test_time_limit_checked_between_generations(self):
        ga = GeneticAlgorithm(self.small_config(max_same_count=1000), random_seed=9)
        result = ga.run(time_limit=0.0, verbose=False)
        self.assertIs(result.status, RunStatus.EXHAUSTED)
        self.assertEqual(result.generations, 1)
        self.assertEqual(len(result.history.generations), 2)

    def test_generous_time_limit_leaves_cap_in_charge(self):
        ga = GeneticAlgorithm(self.small_config(max_same_count=1000), random_seed=9)
        result = ga.run(max_generations=3, time_limit=3600.0, verbose=False)
        self.assertIs(result.status, RunStatus.EXHAUSTED)
        self.assertEqual(result.generations, 3)

    def test_same_seed_same_result(self):
        first = GeneticAlgorithm(self.small_config(), random_seed=21).run(max_generations=10, verbose=False)
        second = GeneticAlgorithm(self.small_config(), random_seed=21).run(max_generations=10, verbose=False)
        np.testing.assert_array_equal(first.best_genome, second.best_genome)

    def test_progress_callback(self):
        lines = []
        ga = GeneticAlgorithm(self.small_config(), random_seed=6)
        ga.run(max_generations=3, verbose=False, callback=lambda *row: lines.append(row))
        self.assertEqual([row[0] for row in lines], [1, 2, 3])
        generation, best, stable, serialized = lines[-1]
        self.assertEqual(len(serialized.split()), 8)
        self.assertGreaterEqual(best, 0.0)

    def test_wrong_genome_size_aborts(self):
        ga = GeneticAlgorithm(self.small_config(genome_size=6), random_seed=0)
        with self.assertRaises(ConfigurationError) as ctx:
            ga.run(max_generations=2, verbose=False)
        self.assertIsInstance(ctx.exception.__cause__, EvaluationError)

    def test_trainer_keeps_size_and_elite(self):
        config = self.small_config().validate()
        rng = make_rng(7)
        trainer = Trainer(XorObjective(), config, rng)
        pop = initialize_population(50, 8, rng)
        pop[0] = XOR_SOLUTION
        nxt = trainer.next_generation(pop)
        self.assertEqual(nxt.shape, pop.shape)
        self.assertTrue(np.any(np.all(nxt == XOR_SOLUTION, axis=1)))
        _, fitness = trainer.best_of(nxt)
        self.assertLessEqual(fitness, XorObjective().evaluate(XOR_SOLUTION))


class TestReport(unittest.TestCase):
    def test_truth_table(self):
        rows = truth_table(XOR_SOLUTION)
        self.assertEqual(len(rows), 4)
        for x1, x2, ideal, predicted in rows:
            self.assertAlmostEqual(predicted, ideal, delta=0.05)
        self.assertEqual(len(format_truth_table(XOR_SOLUTION).splitlines()), 5)
        self.assertEqual(classification_accuracy(XOR_SOLUTION), 1.0)

    def test_progress_line(self):
        line = format_progress(7, 0.25, 3, XOR_SOLUTION)
        self.assertTrue(line.startswith("  7  0.25     3"))


class TestVisualizations(unittest.TestCase):
    def setUp(self):
        ga = GeneticAlgorithm(GAConfig(population_size=30), random_seed=8)
        self.history = ga.run(max_generations=6, verbose=False).history
        rng = np.random.default_rng(3)
        distinct = [rng.normal(size=8) for _ in range(4)]
        # repeats, as elitism leaves them, including a return to an earlier genome
        self.trajectory = [distinct[0], distinct[0], distinct[1], distinct[2],
                           distinct[2], distinct[0], distinct[3]]

    def test_visualization_writes_files(self):
        from xorevo.visualizations import (
            plot_fitness_history,
            plot_population_weight_stats,
            plot_weight_heatmap,
        )
        with tempfile.TemporaryDirectory() as tmp:
            paths = [os.path.join(tmp, name) for name in ("fit.png", "heat.png", "stats.png")]
            plot_fitness_history(self.history, paths[0])
            plot_weight_heatmap(self.history.best_individual_history, paths[1])
            plot_population_weight_stats(self.history, paths[2], top_variables=2)

            for path in paths:
                self.assertTrue(os.path.exists(path))

    def test_distinct_trajectory(self):
        from xorevo.visualizations import distinct_trajectory
        points, generations = distinct_trajectory(self.trajectory)
        self.assertEqual(points.shape, (4, 8))
        np.testing.assert_array_equal(generations, [0, 2, 3, 6])
        np.testing.assert_array_equal(points[1], self.trajectory[2])

    def test_mds_skips_repeated_genomes(self):
        from xorevo.visualizations import plot_best_mds
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "mds.png")
            with warnings.catch_warnings():
                warnings.simplefilter("error", RuntimeWarning)
                self.assertTrue(plot_best_mds(self.trajectory, path))
            self.assertTrue(os.path.exists(path))

    def test_mds_two_points_and_constant_history(self):
        from xorevo.visualizations import plot_best_mds
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "pair.png")
            self.assertTrue(plot_best_mds(self.trajectory[:3], path))
            self.assertTrue(os.path.exists(path))

            path = os.path.join(tmp, "flat.png")
            self.assertFalse(plot_best_mds([self.trajectory[0]] * 5, path))
            self.assertFalse(os.path.exists(path))

    def test_interactive_figure(self):
        from xorevo.visualizations import plot_fitness_interactive
        fig = plot_fitness_interactive(self.history)
        self.assertEqual(len(fig.data), 2)


class TestCli(unittest.TestCase):
    def test_plots_include_interactive_html(self):
        import main
        with tempfile.TemporaryDirectory() as tmp:
            args = main.parse_args([
                "--population-size", "30", "--max-generations", "5", "--seed", "1",
                "--quiet", "--plots", "--results-dir", tmp,
            ])
            with contextlib.redirect_stdout(io.StringIO()):
                self.assertEqual(main.run_experiment(args), 0)
            for name in ("fitness.png", "weights_heatmap.png",
                         "population_weight_stats.png", "fitness.html"):
                self.assertTrue(os.path.exists(os.path.join(tmp, name)), name)

    def test_zero_tolerance_rejected(self):
        import main
        args = main.parse_args(["--population-size", "10", "--tolerance", "0"])
        with self.assertLogs("xorevo", level="ERROR"):
            self.assertEqual(main.run_experiment(args), 2)


if __name__ == "__main__":
    unittest.main()
