"""
Exact k-nearest-neighbor search by brute-force scan.
"""

import heapq
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, Optional

from .errors import InvalidArgumentError
from .logging import get_logger
from .metrics import DistanceMetric
from .model import EmbeddingGroup, T
from .representation import Representation, RepresentationLike, as_representation
from .vector import Vector

logger = get_logger(__name__)


@dataclass(frozen=True)
class Neighbor(Generic[T]):
    """An id with its distance to the query. Smaller is closer."""
    id: T
    distance: float


class NearestNeighbors(Generic[T]):
    """
    Top-K search over every id of an EmbeddingGroup.

    Keeps the K closest candidates in a bounded max-heap while scanning,
    so a query costs O(N log K) time and O(K) space.

    Ties on distance are resolved by scan order: the id that comes first
    in ``group.ids()`` ranks first, and a later candidate only displaces
    the current worst when it is strictly closer.
    """

    def __init__(self, group: EmbeddingGroup[T], representation: RepresentationLike, metric: DistanceMetric):
        if group is None:
            raise InvalidArgumentError("group must not be None")
        if representation is None:
            raise InvalidArgumentError("representation must not be None")
        if metric is None:
            raise InvalidArgumentError("metric must not be None")
        self._group = group
        self._representation = as_representation(representation)
        self._metric = metric

    @property
    def group(self) -> EmbeddingGroup[T]:
        return self._group

    @property
    def representation(self) -> Representation:
        return self._representation

    @property
    def metric(self) -> DistanceMetric:
        return self._metric

    def top_k(self, query_id: T, k: int) -> list[Neighbor[T]]:
        """
        The k nearest neighbors of a stored id, excluding the id itself.

        Args:
            query_id: Id present in the group
            k: Number of neighbors (>= 1)

        Returns:
            Neighbors sorted by ascending distance

        Raises:
            InvalidArgumentError: If query_id is None or k < 1
            NotFoundError: If query_id is unknown
        """
        if query_id is None:
            raise InvalidArgumentError("query_id must not be None")
        _check_k(k)
        query = self._group.require(query_id, self._representation)
        return self._scan(query, k, exclude=(query_id,))

    def top_k_vector(
        self,
        query: Vector,
        k: int,
        exclude: Optional[Iterable[T]] = None,
    ) -> list[Neighbor[T]]:
        """
        The k nearest neighbors of an arbitrary vector.

        Args:
            query: Vector in this search's representation
            k: Number of neighbors (>= 1)
            exclude: Ids to skip

        Returns:
            Neighbors sorted by ascending distance
        """
        if query is None:
            raise InvalidArgumentError("query must not be None")
        _check_k(k)
        return self._scan(query, k, exclude=exclude)

    def _scan(self, query: Vector, k: int, exclude: Optional[Iterable[T]]) -> list[Neighbor[T]]:
        skip = frozenset(exclude) if exclude is not None else frozenset()

        # Max-heap through negated keys: heap[0] is the current worst,
        # i.e. the largest distance, and among equal distances the latest scanned.
        heap: list[tuple[float, int, T]] = []

        for seq, id in enumerate(self._group.ids()):
            if id in skip:
                continue
            d = self._metric.distance(query, self._group.require(id, self._representation))
            entry = (-d, -seq, id)
            if len(heap) < k:
                heapq.heappush(heap, entry)
            elif d < -heap[0][0]:
                heapq.heapreplace(heap, entry)

        ranked = sorted(heap, key=lambda e: (-e[0], -e[1]))
        logger.debug(
            "knn_scan",
            representation=self._representation.name,
            metric=self._metric.name,
            k=k,
            returned=len(ranked),
        )
        return [Neighbor(id=id, distance=-neg_d) for neg_d, _, id in ranked]


def _check_k(k: int) -> None:
    if k is None or k < 1:
        raise InvalidArgumentError(f"k must be >= 1, got {k}")
