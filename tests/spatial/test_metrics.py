"""Tests for distance metrics."""

import jax.numpy as jnp
import pytest
from kdindex.spatial.metrics import (
    chebyshev,
    euclidean,
    get_metric,
    manhattan,
    minkowski,
    pairwise_distances,
)


def test_euclidean():
    """The Euclidean distance uses component differences."""
    assert euclidean((0.0, 0.0), (3.0, 4.0)) == pytest.approx(5.0)
    assert euclidean((1.0, 2.0, 3.0), (1.0, 2.0, 3.0)) == 0.0
    # A sum-based formula would give sqrt(4^2 + 6^2) here instead of 0
    assert euclidean((2.0, 3.0), (2.0, 3.0)) == 0.0


def test_euclidean_is_symmetric():
    """Swapping the arguments gives the same distance."""
    x, y = (1.5, -2.0, 7.0), (-3.0, 4.0, 0.5)
    assert euclidean(x, y) == pytest.approx(euclidean(y, x))


def test_manhattan():
    """The Manhattan distance sums absolute differences."""
    assert manhattan((0.0, 0.0), (3.0, -4.0)) == pytest.approx(7.0)


def test_chebyshev():
    """The Chebyshev distance takes the largest absolute difference."""
    assert chebyshev((0.0, 0.0), (3.0, -4.0)) == pytest.approx(4.0)


@pytest.mark.parametrize(
    "p, expected",
    [(1, 7.0), (2, 5.0), (3, (27.0 + 64.0) ** (1 / 3))],
)
def test_minkowski(p, expected):
    """Minkowski distances of order 1 and 2 match Manhattan and Euclidean."""
    distance = minkowski(p)
    assert distance((0.0, 0.0), (3.0, 4.0)) == pytest.approx(expected, rel=1e-5)


def test_minkowski_rejects_small_order():
    """Orders below 1 do not define a metric."""
    with pytest.raises(ValueError):
        minkowski(0.5)


def test_metrics_return_floats():
    """Metrics return plain Python floats."""
    for metric in (euclidean, manhattan, chebyshev, minkowski(3)):
        assert isinstance(metric((0.0, 1.0), (1.0, 0.0)), float)


def test_get_metric():
    """Metrics are looked up by name."""
    assert get_metric("euclidean") is euclidean
    assert get_metric("manhattan") is manhattan
    with pytest.raises(ValueError, match="Unknown metric"):
        get_metric("cosine")


def test_pairwise_distances():
    """The distance matrix has one row per X point and one column per Y point."""
    X = jnp.array([[0.0, 0.0], [1.0, 1.0], [3.0, 4.0]])
    Y = jnp.array([[0.0, 0.0], [3.0, 4.0]])
    distances = pairwise_distances(X, Y)
    assert distances.shape == (3, 2)
    assert distances[2, 0] == pytest.approx(5.0)
    assert distances[0, 1] == pytest.approx(5.0)
    assert distances[1, 0] == pytest.approx(2**0.5)
