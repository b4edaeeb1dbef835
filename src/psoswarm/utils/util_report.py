import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

COORDINATE_LABELS = ['x1 (browsing)', 'x2 (purchases)', 'x3 (popularity)']


class ArtifactWriteFailure(OSError):
    pass


def _save_figure(fig, filename):
    try:
        fig.savefig(filename, dpi=400, format='png')
    except OSError as e:
        raise ArtifactWriteFailure(f"Could not write {filename}: {e}") from e
    finally:
        plt.close(fig)
    return filename


def print_results(g_best_val, g_best_pos):
    print("--- Optimization finished ---")
    print(f"Best value of the function (f) found: {g_best_val:.6f}")
    print("Optimized weights (x1, x2, x3):")
    width = max(len(label) for label in COORDINATE_LABELS) + 1
    for label, value in zip(COORDINATE_LABELS, g_best_pos):
        print(f"  {label + ':':<{width}} {value:.6f}")


def plot_pso_convergence(plot_training_dir, global_best_val, filename="convergence_curve.png"):
    iterations = np.arange(1, len(global_best_val) + 1)
    fig = plt.figure()
    plt.plot(iterations, global_best_val, label='f(x)')
    plt.title('PSO convergence curve')
    plt.xlabel('Iteration')
    plt.ylabel('Best value of f(x)')
    plt.legend()
    plt.grid(True)
    file_path = _save_figure(fig, os.path.join(plot_training_dir, filename))
    print(f"Convergence plot saved as '{file_path}'")
    return file_path


def plot_training(history, plot_training_dir):
    """One plot per diagnostic recorded by the optimizer besides the convergence curve."""
    if not isinstance(history, pd.DataFrame):
        history = pd.DataFrame.from_dict(history, orient='index').transpose()
    saved = []
    for c, ylabel in [('mean_distance', 'Mean euclidean distance'), ('w_inertia', 'Inertia weight')]:
        if c not in history.columns:
            continue
        fig = plt.figure(figsize=(8, 6))
        plt.plot(np.arange(1, len(history) + 1), history[c], color='b')
        plt.xlabel('Iteration')
        plt.ylabel(ylabel)
        saved.append(_save_figure(fig, os.path.join(plot_training_dir, f"{c}.png")))
    return saved


def plot_features_last_iteration(plot_training_dir, history_particles, dim_space):
    fig = plt.figure(figsize=(8, 6))
    cmap = plt.get_cmap('hsv', dim_space + 1)
    for dim in np.arange(dim_space):
        final_pos_dim = [history_particles[p_key].iloc[-1, dim] for p_key in history_particles.keys()]
        plt.scatter(final_pos_dim, np.repeat(dim, len(final_pos_dim)), s=10.0, marker="o", edgecolors="None", c=[cmap(dim)])
    plt.gca().xaxis.grid(True)
    plt.yticks(np.arange(dim_space), COORDINATE_LABELS[:dim_space] if dim_space <= len(COORDINATE_LABELS) else None)
    plt.xlabel("Particles Position")
    plt.ylabel("Dimension")
    return _save_figure(fig, os.path.join(plot_training_dir, "features_last_iteration.png"))
