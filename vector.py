import numpy as np

from errors import DegenerateGeometryError


def vec2(x: float = 0.0, y: float = 0.0) -> np.ndarray:
    """Create a 2D vector."""
    return np.array([x, y], dtype=np.float64)


def as_vec2(v) -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (2,):
        raise ValueError(f"expected a 2D vector, got shape {arr.shape}")
    return arr.copy()


def difference(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Vector pointing from b to a."""
    return a - b


def length(v: np.ndarray) -> float:
    return float(np.hypot(v[0], v[1]))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return length(difference(a, b))


def scaled(v: np.ndarray, factor: float) -> np.ndarray:
    return v * factor


def unit(v: np.ndarray) -> np.ndarray:
    """Return v scaled to length 1. The zero vector has no direction."""
    ln = length(v)
    if ln == 0.0:
        raise DegenerateGeometryError("cannot take the unit vector of a zero-length vector")
    return v / ln
