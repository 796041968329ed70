"""Plots of fitness progress and weight dynamics over an XOR evolution run."""
from __future__ import annotations

from typing import Sequence
import os
import numpy as np
import matplotlib.pyplot as plt
import plotly.graph_objects as go
from sklearn.manifold import MDS

from .genetic_algorithm import GAHistory

GENE_LABELS = ("w1", "w2", "w3", "w4", "w5", "w6", "b1", "b2")


def _ensure_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def _as_matrix(history: Sequence[np.ndarray]) -> np.ndarray:
    if history is None or len(history) == 0:
        raise ValueError("history is empty.")
    return np.vstack(history)


def _gene_label(idx: int) -> str:
    return GENE_LABELS[idx] if idx < len(GENE_LABELS) else f"g[{idx}]"


def plot_fitness_history(history: GAHistory, save_path: str) -> None:
    """Best and mean RMSE per generation, with the stable streak on a twin axis."""
    if not history.generations:
        raise ValueError("history is empty.")

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(history.generations, history.best_fitness, color="#d62728", linewidth=2.0, label="Best")
    ax.plot(history.generations, history.mean_fitness, color="#1f77b4", alpha=0.7, label="Mean")
    ax.set_xlabel("Generation")
    ax.set_ylabel("RMSE")
    ax.set_yscale("log")
    ax.grid(alpha=0.3)

    ax2 = ax.twinx()
    ax2.step(history.generations, history.stable_count, color="#7f7f7f", alpha=0.5,
             where="post", label="Stable count")
    ax2.set_ylabel("Stable generations")

    lines = ax.get_legend_handles_labels()
    lines2 = ax2.get_legend_handles_labels()
    ax.legend(lines[0] + lines2[0], lines[1] + lines2[1], loc="upper right")
    ax.set_title("Fitness over generations")
    plt.tight_layout()
    _ensure_dir(save_path)
    plt.savefig(save_path, dpi=300, bbox_inches="tight")
    plt.close(fig)


def plot_weight_heatmap(best_history: Sequence[np.ndarray], save_path: str) -> None:
    """2-D heatmap with generations on X and gene on Y."""
    data = _as_matrix(best_history).T  # rows: genes, cols: generations
    fig, ax = plt.subplots(figsize=(10, 4))
    im = ax.imshow(data, aspect="auto", cmap="coolwarm", interpolation="nearest",
                   origin="lower", extent=[0, max(data.shape[1] - 1, 1), -0.5, data.shape[0] - 0.5])
    ax.set_yticks(range(data.shape[0]))
    ax.set_yticklabels([_gene_label(i) for i in range(data.shape[0])])
    ax.set_xlabel("Generation")
    ax.set_title("Best-genome weights over generations")
    cbar = fig.colorbar(im, ax=ax)
    cbar.set_label("Weight value")
    plt.tight_layout()
    _ensure_dir(save_path)
    plt.savefig(save_path, dpi=300, bbox_inches="tight")
    plt.close(fig)


def distinct_trajectory(best_history: Sequence[np.ndarray]):
    """Distinct best genomes in order of first appearance.

    Returns the genomes and the generation at which each first appeared.
    Elitism often keeps the same best genome for many generations, and
    repeated points give MDS zero distances it cannot scale.
    """
    matrix = _as_matrix(best_history)
    _, first_seen = np.unique(matrix, axis=0, return_index=True)
    first_seen = np.sort(first_seen)
    return matrix[first_seen], first_seen


def plot_best_mds(best_history: Sequence[np.ndarray],
                  save_path: str,
                  random_state: int = 0) -> bool:
    """Map the distinct best genomes into 2-D via MDS.

    Returns False without writing anything when the best genome never
    changed, since a single point has no trajectory.
    """
    points, generations = distinct_trajectory(best_history)
    if points.shape[0] < 2:
        return False

    if points.shape[0] == 2:
        # Two points embed exactly on a line.
        distance = float(np.linalg.norm(points[1] - points[0]))
        coords = np.array([[0.0, 0.0], [distance, 0.0]])
    else:
        coords = MDS(n_components=2, n_init=4, random_state=random_state).fit_transform(points)

    fig, ax = plt.subplots(figsize=(7, 6))
    ax.plot(coords[:, 0], coords[:, 1], color="#bbbbbb", linewidth=1.2, alpha=0.6)
    scatter = ax.scatter(coords[:, 0], coords[:, 1], c=generations, cmap="viridis",
                         s=60, edgecolor="black", linewidth=0.4)
    ax.scatter(coords[0, 0], coords[0, 1], marker="^", s=140, color="#1b9e77", label="Start")
    ax.scatter(coords[-1, 0], coords[-1, 1], marker="*", s=160, color="#d95f02", label="End")
    ax.set_xlabel("MDS dim 1")
    ax.set_ylabel("MDS dim 2")
    ax.set_title(f"Best-genome trajectory ({len(points)} distinct genomes)")
    ax.legend()
    cbar = fig.colorbar(scatter, ax=ax)
    cbar.set_label("Generation first seen")
    ax.grid(alpha=0.3)
    plt.tight_layout()
    _ensure_dir(save_path)
    plt.savefig(save_path, dpi=300, bbox_inches="tight")
    plt.close(fig)
    return True


def plot_population_weight_stats(history: GAHistory,
                                 save_path: str,
                                 top_variables: int = 4) -> None:
    """Population mean +-1 std per gene against the best genome's value.

    Only the ``top_variables`` genes whose best value varied most are drawn.
    """
    best_matrix = _as_matrix(history.best_individual_history)
    pop_mean = _as_matrix(history.gene_mean)
    pop_std = _as_matrix(history.gene_std)
    if not len(pop_mean) == len(pop_std) == len(best_matrix):
        raise ValueError("Population statistics length must match best history.")

    variances = best_matrix.var(axis=0)
    idx = np.argsort(variances)[-min(top_variables, best_matrix.shape[1]):]
    idx.sort()

    generations = np.arange(best_matrix.shape[0])
    n_vars = len(idx)
    fig, axes = plt.subplots(n_vars, 1, figsize=(10, 3 * n_vars), sharex=True)
    if n_vars == 1:
        axes = [axes]

    for ax, var_idx in zip(axes, idx):
        ax.plot(generations, pop_mean[:, var_idx], color="#1f77b4", label="Population mean")
        ax.fill_between(generations,
                        pop_mean[:, var_idx] - pop_std[:, var_idx],
                        pop_mean[:, var_idx] + pop_std[:, var_idx],
                        alpha=0.2, color="#1f77b4", label="Population ±1 std")
        ax.plot(generations, best_matrix[:, var_idx], color="#d62728",
                linewidth=2.0, label="Best genome")
        ax.set_ylabel(_gene_label(int(var_idx)))
        ax.grid(alpha=0.2)
        ax.legend(loc="upper right")

    axes[-1].set_xlabel("Generation")
    fig.suptitle("Population statistics per gene", fontsize=14)
    plt.tight_layout()
    _ensure_dir(save_path)
    plt.savefig(save_path, dpi=300, bbox_inches="tight")
    plt.close(fig)


def plot_fitness_interactive(history: GAHistory) -> go.Figure:
    """Interactive Plotly version of the fitness curve."""
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=history.generations,
        y=history.best_fitness,
        mode="lines",
        name="Best",
        line=dict(color="#d62728", width=2),
        customdata=np.asarray(history.stable_count),
        hovertemplate="Gen %{x}<br>RMSE %{y:.4f}<br>Stable %{customdata}<extra></extra>",
    ))
    fig.add_trace(go.Scatter(
        x=history.generations,
        y=history.mean_fitness,
        mode="lines",
        name="Mean",
        line=dict(color="#1f77b4"),
        hovertemplate="Gen %{x}<br>RMSE %{y:.4f}<extra></extra>",
    ))
    fig.update_layout(
        title="Fitness over generations",
        xaxis_title="Generation",
        yaxis_title="RMSE",
        yaxis_type="log",
        template="plotly_white",
    )
    return fig
