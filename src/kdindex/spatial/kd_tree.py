"""K-d tree spatial index.

A k-d tree is a binary space partitioning tree over points in D dimensions. Each
node splits its subtree along one coordinate axis, and the axis cycles with depth:
the root splits on axis 0, its children on axis 1, and so on, wrapping around
after D levels. Splitting every slice at its median keeps the tree balanced, so
its height grows with log2 of the number of points.

The tree here is static. It is built once from a complete point collection and
is read-only afterwards, which makes it safe to query from several threads at
once without locking.

Nearest neighbor search descends first into the child on the same side of the
splitting plane as the target, then backtracks into the other child only when it
could still hold a closer point than the current k-th best. Two tests for that
decision are available, see ``PruningStrategy``.

References:
- Bentley, J. L. (1975). Multidimensional binary search trees used for
  associative searching. Communications of the ACM, 18(9), 509-517.
- Friedman, J. H., Bentley, J. L., & Finkel, R. A. (1977). An algorithm for
  finding best matches in logarithmic expected time. ACM Transactions on
  Mathematical Software, 3(3), 209-226.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from operator import itemgetter
from typing import Any, NamedTuple

from kdindex.spatial.metrics import Coordinate, DistanceFn, euclidean
from kdindex.utils.logging import setup_logger

logger = setup_logger(__name__)

Point = tuple[Sequence[float], Any]


class PruningStrategy(str, Enum):
    """Rules deciding whether the further subtree is searched.

    The strategies available are:
        - hyperplane: search the further child when the distance from the target
          to the splitting plane is within the current worst distance. Exact for
          metrics that never undercut the per-axis difference (Euclidean,
          Manhattan, Chebyshev, Minkowski with p >= 1).
        - representative: search the further child when its own stored point is
          closer than the current worst distance. Cheaper, but it may skip a
          subtree that holds a closer point.
    """

    hyperplane = "hyperplane"
    representative = "representative"


class Neighbor(NamedTuple):
    """A single query result."""

    distance: float
    coordinate: Coordinate
    value: Any


@dataclass(frozen=True)
class Node:
    """A vertex of the tree, owning its point and its children."""

    coordinate: Coordinate
    value: Any
    left: Node | None = None
    right: Node | None = None

    @property
    def is_leaf(self) -> bool:
        """Whether the node has no children."""
        return self.left is None and self.right is None


def _as_coordinate(coordinate: Sequence[float], dimension: int) -> Coordinate:
    """Normalise a coordinate to a tuple of floats and check it."""
    if hasattr(coordinate, "tolist"):
        coordinate = coordinate.tolist()  # type: ignore
    result = tuple(float(c) for c in coordinate)
    if len(result) != dimension:
        raise ValueError(
            f"Expected a coordinate of dimension {dimension}, got {len(result)}"
        )
    if not all(math.isfinite(c) for c in result):
        raise ValueError(f"Coordinates must be finite, got {result}")
    return result


def _build_range(
    points: list[Point], lo: int, hi: int, depth: int, dim: int
) -> Node | None:
    if lo >= hi:
        return None

    axis = depth % dim
    points[lo:hi] = sorted(points[lo:hi], key=lambda point: point[0][axis])
    median = lo + (hi - lo) // 2

    coordinate, value = points[median]
    return Node(
        coordinate=coordinate,
        value=value,
        left=_build_range(points, lo, median, depth + 1, dim),
        right=_build_range(points, median + 1, hi, depth + 1, dim),
    )


@dataclass(frozen=True)
class SpatialTree:
    """A static k-d tree over labeled points.

    Attributes:
        root: The root node. A tree always holds at least one point; an empty
          input builds no tree at all.
        dimension: The number of components in every coordinate.
        size: The number of points stored.
    """

    root: Node
    dimension: int
    size: int

    @classmethod
    def build(
        cls, points: Iterable[Point], dimension: int | None = None
    ) -> SpatialTree | None:
        """Build a tree from ``(coordinate, value)`` pairs.

        Each slice of the input is sorted along the axis for its depth and the
        element at index ``lo + (hi - lo) // 2`` becomes the node, the lower half
        its left subtree and the upper half its right subtree.

        Args:
            points: The points to index. A list is reordered in place.
            dimension: The coordinate dimension. Inferred from the first point
              when omitted.

        Returns:
            The tree, or None when there are no points.
        """
        if not isinstance(points, list):
            points = list(points)
        if not points:
            return None

        if dimension is None:
            dimension = len(points[0][0])
        if dimension < 1:
            raise ValueError(f"Dimension must be at least 1, got {dimension}")

        points[:] = [
            (_as_coordinate(coordinate, dimension), value)
            for coordinate, value in points
        ]
        root = _build_range(points, 0, len(points), 0, dimension)
        logger.debug(
            "Built k-d tree with %d points in %d dimensions", len(points), dimension
        )
        return cls(root=root, dimension=dimension, size=len(points))

    def __len__(self) -> int:
        """The number of points in the tree."""
        return self.size

    def __iter__(self) -> Iterator[Node]:
        """Walk the nodes in pre-order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def points(self) -> list[tuple[Coordinate, Any]]:
        """All stored ``(coordinate, value)`` pairs in pre-order."""
        return [(node.coordinate, node.value) for node in self]

    def height(self) -> int:
        """The number of nodes on the longest root-to-leaf path."""

        def _height(node: Node | None) -> int:
            if node is None:
                return 0
            return 1 + max(_height(node.left), _height(node.right))

        return _height(self.root)

    def query_k_nearest(
        self,
        target: Sequence[float],
        k: int,
        distance_fn: DistanceFn | None = None,
        pruning: PruningStrategy = PruningStrategy.hyperplane,
    ) -> list[Neighbor]:
        """Find the ``k`` points closest to ``target``.

        Args:
            target: The query coordinate, of the tree's dimension.
            k: The number of neighbors to return. Zero gives an empty result.
            distance_fn: The metric, Euclidean distance by default.
            pruning: The rule for searching the further subtree.

        Returns:
            Up to ``k`` neighbors sorted by ascending distance. Fewer are returned
            only when the tree holds fewer than ``k`` points.
        """
        if k < 0:
            raise ValueError(f"k must be non-negative, got {k}")
        target = _as_coordinate(target, self.dimension)
        if k == 0:
            return []

        distance = distance_fn or euclidean
        pruning = PruningStrategy(pruning)
        candidates = self._search(self.root, target, k, 0, distance, pruning)
        return [
            Neighbor(d, node.coordinate, node.value) for d, node in candidates
        ]

    def _search(
        self,
        node: Node,
        target: Coordinate,
        k: int,
        depth: int,
        distance: DistanceFn,
        pruning: PruningStrategy,
    ) -> list[tuple[float, Node]]:
        if node.is_leaf:
            return [(distance(node.coordinate, target), node)]

        axis = depth % self.dimension
        if node.right is None or (
            node.left is not None and target[axis] <= node.coordinate[axis]
        ):
            nearer, further = node.left, node.right
        else:
            nearer, further = node.right, node.left

        result = self._search(
            nearer,  # type: ignore
            target,
            k,
            depth + 1,
            distance,
            pruning,
        )

        if further is not None:
            if len(result) < k:
                visit = True
            elif pruning == PruningStrategy.hyperplane:
                visit = abs(target[axis] - node.coordinate[axis]) <= result[-1][0]
            else:
                visit = distance(further.coordinate, target) < result[-1][0]
            if visit:
                result.extend(
                    self._search(further, target, k, depth + 1, distance, pruning)
                )

        result.append((distance(node.coordinate, target), node))
        result.sort(key=itemgetter(0))
        del result[k:]
        return result


def build(
    points: Iterable[Point], dimension: int | None = None
) -> SpatialTree | None:
    """Build a k-d tree, returning None for an empty point collection."""
    return SpatialTree.build(points, dimension)


def query_k_nearest(
    tree: SpatialTree | None,
    target: Sequence[float],
    k: int,
    distance_fn: DistanceFn | None = None,
    pruning: PruningStrategy = PruningStrategy.hyperplane,
) -> list[Neighbor]:
    """Query a tree built by ``build``.

    Raises:
        ValueError: If there is no tree, which is what an empty input builds.
    """
    if tree is None:
        raise ValueError("Cannot query an absent tree, it was built from no points")
    return tree.query_k_nearest(target, k, distance_fn, pruning)


def linear_scan_k_nearest(
    points: Iterable[Point],
    target: Sequence[float],
    k: int,
    distance_fn: DistanceFn | None = None,
) -> list[Neighbor]:
    """Exhaustive k-nearest search over a flat point collection.

    Gives the exact answer for any metric and serves as the reference the tree
    is checked against.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    distance = distance_fn or euclidean
    target = _as_coordinate(target, len(target))
    scored = []
    for coordinate, value in points:
        coordinate = _as_coordinate(coordinate, len(target))
        scored.append(Neighbor(distance(coordinate, target), coordinate, value))
    scored.sort(key=itemgetter(0))
    return scored[:k]
