"""Distance metrics for nearest neighbor search.

Every metric takes two coordinates of equal length and returns a non-negative
Python float. The per-pair metrics below run on every node a tree query visits,
so they work directly on the float tuples the tree stores, in double precision.
Batched distance matrices go through ``jax.numpy`` instead.

Any callable with the signature ``(Coordinate, Coordinate) -> float`` can be
passed to the tree in place of these.
"""

import math
from collections.abc import Callable, Sequence

import jax.numpy as jnp
from jaxtyping import Array, Float

Coordinate = tuple[float, ...]
DistanceFn = Callable[[Sequence[float], Sequence[float]], float]


def euclidean(x: Sequence[float], y: Sequence[float]) -> float:
    """The Euclidean distance between two coordinates.

    The Euclidean distance is defined as:

            d(x, y) = sqrt(sum_i (x_i - y_i)^2)

    Args:
        x: The first coordinate.
        y: The second coordinate.

    Returns:
        The distance as a float.
    """
    return math.dist(x, y)


def manhattan(x: Sequence[float], y: Sequence[float]) -> float:
    """The Manhattan (taxicab) distance between two coordinates.

    The Manhattan distance is defined as:

            d(x, y) = sum_i |x_i - y_i|

    Args:
        x: The first coordinate.
        y: The second coordinate.

    Returns:
        The distance as a float.
    """
    return math.fsum(abs(a - b) for a, b in zip(x, y))


def chebyshev(x: Sequence[float], y: Sequence[float]) -> float:
    """The Chebyshev (maximum) distance between two coordinates.

    The Chebyshev distance is defined as:

            d(x, y) = max_i |x_i - y_i|

    Args:
        x: The first coordinate.
        y: The second coordinate.

    Returns:
        The distance as a float.
    """
    return float(max(abs(a - b) for a, b in zip(x, y)))


def minkowski(p: float) -> DistanceFn:
    """Build a Minkowski distance of order ``p``.

    Args:
        p: The order of the norm, at least 1.

    Returns:
        A distance function computing (sum_i |x_i - y_i|^p)^(1/p).
    """
    if p < 1:
        raise ValueError(f"Minkowski order must be >= 1, got {p}")

    def distance(x: Sequence[float], y: Sequence[float]) -> float:
        return math.fsum(abs(a - b) ** p for a, b in zip(x, y)) ** (1.0 / p)

    distance.__name__ = f"minkowski_{p:g}"
    return distance


METRICS: dict[str, DistanceFn] = {
    "euclidean": euclidean,
    "manhattan": manhattan,
    "chebyshev": chebyshev,
}


def get_metric(name: str) -> DistanceFn:
    """Look up a distance metric by name."""
    if name not in METRICS:
        raise ValueError(f"Unknown metric: {name}")
    return METRICS[name]


def pairwise_distances(
    X: Float[Array, "n d"], Y: Float[Array, "m d"]
) -> Float[Array, "n m"]:
    """Euclidean distances between every row of ``X`` and every row of ``Y``.

    Args:
        X: An array of shape (n, d).
        Y: An array of shape (m, d).

    Returns:
        An array of shape (n, m) where entry (i, j) is the distance from X[i] to Y[j].
    """
    return jnp.linalg.norm(X[:, None] - Y[None, :], axis=2)
