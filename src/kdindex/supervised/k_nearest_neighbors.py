"""K-Nearest Neighbors (KNN) predictors backed by a k-d tree.

KNN is a simple, supervised machine learning algorithm that can be used for both
classification and regression tasks. The fundamental concept behind KNN is that
similar data points are close to each other. For classification, KNN assigns the
class of a data point based on the majority class of its k nearest neighbors. For
regression, it predicts the value of a data point based on the average of the values
of its k nearest neighbors.

The KNN algorithm is non-parametric and lazy: fitting only indexes the training
points, and the work happens at prediction time. Indexing them in a k-d tree lets
each prediction visit a fraction of the training set instead of all of it.

References:
- Cover, T., & Hart, P. (1967). Nearest neighbor pattern classification. IEEE
  Transactions on Information Theory, 13(1), 21-27.
  Available at: https://ieeexplore.ieee.org/document/1053964

"""

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Any

import jax.numpy as jnp
from jaxtyping import Array, Float, Int
from rich.progress import Progress

from kdindex.spatial.kd_tree import Neighbor, PruningStrategy, SpatialTree
from kdindex.spatial.metrics import get_metric, pairwise_distances
from kdindex.utils.logging import BaseLogger, get_progress_widgets, no_op_logger
from kdindex.utils.timer import capture_time


def knn(X_train: jnp.ndarray, y_train: jnp.ndarray, X_test: jnp.ndarray, k: int = 3):
    """Brute-force K-Nearest Neighbors classification.

    Computes every train/test distance at once, which is a useful baseline for the
    tree-backed classifier below.

    Args:
        X_train: An array representing the features of the training data.
        y_train: An array of non-negative integer labels for the training data.
        X_test: An array representing the features of the test data.
        k: An integer representing the number of neighbors to consider.

    Returns:
        An array of predicted labels for the test data.
    """
    X_test = jnp.asarray(X_test)
    distances = pairwise_distances(jnp.asarray(X_train), X_test)

    # Indices of the k nearest training points, one column per test point
    nearest_indices = jnp.argsort(distances, axis=0)[:k]
    nearest_labels = jnp.asarray(y_train)[nearest_indices]

    return jnp.array(
        [jnp.bincount(nearest_labels[:, i]).argmax() for i in range(X_test.shape[0])]
    )


@dataclass
class KNNConfig:
    """Configuration for the k-d tree predictors.

    Attributes:
        k: the number of neighbors consulted per prediction
        metric: the name of the distance metric, see ``kdindex.spatial.metrics``
        pruning: the rule deciding whether the far side of a split is searched
        show_progress: whether to display a progress bar while predicting
    """

    k: int = 3
    metric: str = "euclidean"
    pruning: PruningStrategy = PruningStrategy.hyperplane
    show_progress: bool = False

    def __post_init__(self):
        """Validate the neighbor count and resolve the metric eagerly."""
        if self.k < 1:
            raise ValueError(f"k must be at least 1, got {self.k}")
        get_metric(self.metric)
        self.pruning = PruningStrategy(self.pruning)


class _KDTreePredictor(ABC):
    """Shared fitting and querying for the tree-backed predictors."""

    def __init__(
        self, config: KNNConfig | None = None, logger: BaseLogger | None = None
    ):
        """Initializes the predictor.

        Args:
            config: The predictor configuration.
            logger: The logger to use.
        """
        self.config = config if config else KNNConfig()
        self.logger = logger if logger else no_op_logger
        self.distance = get_metric(self.config.metric)
        self.tree: SpatialTree | None = None

    def fit(self, X: Float[Array, "n d"], y: Any):
        """Index the training data.

        Args:
            X: The training features, one row per point.
            y: The training targets, one per row.

        Returns:
            The fitted predictor.
        """
        rows = jnp.asarray(X).tolist()
        targets = jnp.asarray(y).tolist()
        if len(rows) != len(targets):
            raise ValueError(
                f"Got {len(rows)} feature rows but {len(targets)} targets"
            )
        if not rows:
            raise ValueError("Cannot fit on an empty training set")

        with capture_time() as elapsed:
            self.tree = SpatialTree.build(list(zip(rows, targets)))
        self.logger.log(
            f"Indexed {len(rows)} points in {elapsed():.3f}s "
            f"(height {self.tree.height()})"  # type: ignore
        )
        return self

    def kneighbors(self, x: Float[Array, " d"]) -> list[Neighbor]:
        """The configured number of nearest training points to ``x``."""
        if self.tree is None:
            raise ValueError("The predictor must be fit before querying")
        return self.tree.query_k_nearest(
            x, self.config.k, self.distance, self.config.pruning
        )

    @abstractmethod
    def _reduce(self, neighbors: list[Neighbor]):
        """Combine the neighbor values into one prediction."""
        pass

    def predict(self, X: Float[Array, "m d"]) -> jnp.ndarray:
        """Predict a target for every row of ``X``.

        Args:
            X: The query features.

        Returns:
            An array with one prediction per row.
        """
        if self.tree is None:
            raise ValueError("The predictor must be fit before predicting")

        rows = jnp.asarray(X).tolist()
        predictions = []
        with capture_time() as elapsed, Progress(
            *get_progress_widgets(),
            console=self.logger.console,
            transient=True,
            disable=not self.config.show_progress,
        ) as progress:
            task = progress.add_task("Predicting", total=len(rows))
            for row in rows:
                predictions.append(self._reduce(self.kneighbors(row)))
                progress.advance(task)

        self.logger.log(f"Predicted {len(rows)} rows in {elapsed():.3f}s")
        return jnp.array(predictions)


class KDTreeClassifier(_KDTreePredictor):
    """Majority-vote classifier over the nearest training points."""

    def _reduce(self, neighbors: list[Neighbor]):
        votes = Counter(neighbor.value for neighbor in neighbors)
        top = max(votes.values())
        # Neighbors are sorted by distance, so ties go to the nearest label
        for neighbor in neighbors:
            if votes[neighbor.value] == top:
                return neighbor.value


class KDTreeRegressor(_KDTreePredictor):
    """Predicts the mean target of the nearest training points."""

    def _reduce(self, neighbors: list[Neighbor]):
        return sum(neighbor.value for neighbor in neighbors) / len(neighbors)


def accuracy(y_true: Int[Array, " n"], y_pred: Int[Array, " n"]) -> float:
    """The fraction of predictions matching the labels."""
    return float(jnp.mean(jnp.asarray(y_true) == jnp.asarray(y_pred)))
