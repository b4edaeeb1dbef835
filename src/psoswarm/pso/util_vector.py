import numpy as np

# vectors are read-only float arrays: every operation returns a new one, so a particle's best position snapshot
# can never be changed through another reference


class InvalidArgument(ValueError):
    pass


def as_vector(values):
    vec = np.array(values, dtype=np.float64)
    if vec.ndim != 1:
        raise InvalidArgument(f"Expected a 1-d vector, got shape {vec.shape}")
    vec.setflags(write=False)
    return vec


def zeros(dim):
    return as_vector(np.zeros(dim))


def _check_same_dim(a, b):
    if np.shape(a) != np.shape(b):
        raise InvalidArgument(f"Vector dimensions do not match: {np.shape(a)} vs {np.shape(b)}")


def add(a, b):
    _check_same_dim(a, b)
    return as_vector(np.add(a, b))


def subtract(a, b):
    _check_same_dim(a, b)
    return as_vector(np.subtract(a, b))


def scale(v, k):
    return as_vector(np.multiply(v, k))


def dot(a, b):
    _check_same_dim(a, b)
    return float(np.dot(a, b))


def clamp(v, lower, upper):
    """Clip every component into [lower, upper] (the same scalar bounds for each dimension)."""
    if lower > upper:
        raise InvalidArgument(f"Lower bound {lower} is greater than upper bound {upper}")
    return as_vector(np.clip(v, lower, upper))
