import numpy as np

from psoswarm.pso import util_vector

DIM_SPACE = 3


def objective(pos):
    """Fitness to maximize: sin(x1) + cos(x2) + sin(x3) * x3 / 5 - 0.1 * |x|^2.

    The last term penalizes weights far from the origin.
    """
    if np.shape(pos) != (DIM_SPACE,):
        raise util_vector.InvalidArgument(f"Objective expects a {DIM_SPACE}-d position, got shape {np.shape(pos)}")
    x1, x2, x3 = pos
    positive_part = np.sin(x1) + np.cos(x2) + (np.sin(x3) * x3) / 5.0
    penalty = 0.1 * util_vector.dot(pos, pos)
    return float(positive_part - penalty)
