"""
Semantic axes: project the vocabulary onto the line between two anchors.

An axis A -> B has an origin and a unit direction. For any vector V:

    coordinate t        = (V - origin) . direction
    orthogonal distance = |(V - origin) - direction * t|
    purity              = |t| / (orthogonal distance + eps)

Results are sorted by coordinate, from "more A-like" to "more B-like".
All sorts are stable, so ties keep the group's scan order.
"""

from dataclasses import dataclass
from typing import Generic, Optional

from .errors import InvalidArgumentError
from .logging import get_logger
from .model import EmbeddingGroup, T
from .representation import Representation, RepresentationLike, as_representation
from .vector import Vector

logger = get_logger(__name__)

PURITY_EPSILON = 1e-9


def purity(coordinate: float, orthogonal_distance: float) -> float:
    """How far along the axis a point is relative to its sideways deviation."""
    return abs(coordinate) / (orthogonal_distance + PURITY_EPSILON)


@dataclass(frozen=True)
class ProjectionScore(Generic[T]):
    """Projection of one id onto an axis."""
    id: T
    coordinate: float
    orthogonal_distance: float
    purity: float


class ProjectionAxis:
    """A 1-D line through vector space with a unit-length direction."""

    __slots__ = ("_origin", "_direction")

    def __init__(self, origin: Vector, direction: Vector):
        if origin is None:
            raise InvalidArgumentError("origin must not be None")
        if direction is None:
            raise InvalidArgumentError("direction must not be None")
        if origin.dim != direction.dim:
            raise InvalidArgumentError(
                f"Dimension mismatch: origin {origin.dim} vs direction {direction.dim}"
            )
        self._origin = origin
        self._direction = direction

    @staticmethod
    def _delta(a: Vector, b: Vector) -> Vector:
        if a is None:
            raise InvalidArgumentError("a must not be None")
        if b is None:
            raise InvalidArgumentError("b must not be None")
        if a.dim != b.dim:
            raise InvalidArgumentError(f"Dimension mismatch: {a.dim} vs {b.dim}")
        delta = b.subtract(a)
        if delta.norm() == 0.0:
            raise InvalidArgumentError("Cannot build axis: anchors are identical (B - A is zero)")
        return delta

    @classmethod
    def between(cls, a: Vector, b: Vector) -> "ProjectionAxis":
        """Axis with origin A and direction normalize(B - A)."""
        return cls(a, cls._delta(a, b).normalized())

    @classmethod
    def centered_between(cls, a: Vector, b: Vector) -> "ProjectionAxis":
        """
        Axis with origin at the midpoint (A + B) / 2.

        Coordinates become symmetric: A projects to -|B - A| / 2 and B to
        +|B - A| / 2.
        """
        direction = cls._delta(a, b).normalized()
        return cls(a.add(b).scale(0.5), direction)

    @property
    def origin(self) -> Vector:
        return self._origin

    @property
    def direction(self) -> Vector:
        return self._direction

    def coordinate_of(self, v: Vector) -> float:
        if v is None:
            raise InvalidArgumentError("v must not be None")
        if v.dim != self._origin.dim:
            raise InvalidArgumentError(f"Dimension mismatch: {v.dim} vs {self._origin.dim}")
        return v.subtract(self._origin).dot(self._direction)

    def orthogonal_distance_of(self, v: Vector) -> float:
        """Distance from ``v`` to the axis line (the residual after removing the axial part)."""
        t = self.coordinate_of(v)
        residual = v.subtract(self._origin).subtract(self._direction.scale(t))
        return residual.norm()

    def score(self, id: T, v: Vector) -> ProjectionScore[T]:
        t = self.coordinate_of(v)
        orth = self.orthogonal_distance_of(v)
        return ProjectionScore(id=id, coordinate=t, orthogonal_distance=orth, purity=purity(t, orth))

    def __repr__(self) -> str:
        return f"ProjectionAxis(dim={self._origin.dim})"


class CustomProjectionService(Generic[T]):
    """
    Builds semantic axes from two anchor ids and projects every id onto them.

    Every operation is one O(N) pass over the group plus a sort.
    """

    def __init__(self, group: EmbeddingGroup[T], representation: RepresentationLike):
        if group is None:
            raise InvalidArgumentError("group must not be None")
        if representation is None:
            raise InvalidArgumentError("representation must not be None")
        self._group = group
        self._representation = as_representation(representation)

    @property
    def representation(self) -> Representation:
        return self._representation

    def _anchors(self, a_id: T, b_id: T) -> tuple[Vector, Vector]:
        _require_id(a_id, "a_id")
        _require_id(b_id, "b_id")
        return (
            self._group.require(a_id, self._representation),
            self._group.require(b_id, self._representation),
        )

    def axis_between(self, a_id: T, b_id: T) -> ProjectionAxis:
        """Axis from A to B with origin A."""
        return ProjectionAxis.between(*self._anchors(a_id, b_id))

    def centered_axis_between(self, a_id: T, b_id: T) -> ProjectionAxis:
        """Axis from A to B with origin at their midpoint."""
        return ProjectionAxis.centered_between(*self._anchors(a_id, b_id))

    def _scores(
        self,
        axis: ProjectionAxis,
        include_anchors: bool,
        a_id: Optional[T],
        b_id: Optional[T],
    ) -> list[ProjectionScore[T]]:
        anchors = () if include_anchors else (a_id, b_id)
        return [
            axis.score(id, self._group.require(id, self._representation))
            for id in self._group.ids()
            if id not in anchors
        ]

    def project_all(
        self,
        axis: ProjectionAxis,
        include_anchors: bool = True,
        a_id: Optional[T] = None,
        b_id: Optional[T] = None,
    ) -> list[ProjectionScore[T]]:
        """
        Project every id onto ``axis``.

        Args:
            axis: The axis
            include_anchors: Keep the anchors in the result
            a_id: Anchor A, required when include_anchors is False
            b_id: Anchor B, required when include_anchors is False

        Returns:
            Scores sorted by ascending coordinate
        """
        if axis is None:
            raise InvalidArgumentError("axis must not be None")
        if not include_anchors:
            _require_id(a_id, "a_id")
            _require_id(b_id, "b_id")

        scores = self._scores(axis, include_anchors, a_id, b_id)
        scores.sort(key=lambda s: s.coordinate)
        return scores

    def semantic_scale(self, a_id: T, b_id: T, include_anchors: bool = True) -> list[ProjectionScore[T]]:
        """Axis between A and B (origin A) followed by project_all."""
        axis = self.axis_between(a_id, b_id)
        return self.project_all(axis, include_anchors, a_id, b_id)

    def clean_semantic_scale(
        self,
        a_id: T,
        b_id: T,
        keep_closest: int,
        include_anchors: bool = True,
    ) -> list[ProjectionScore[T]]:
        """
        Semantic scale restricted to the ids nearest the axis line.

        Projects everything (anchors included while filtering), keeps the
        ``keep_closest`` smallest orthogonal distances, optionally drops the
        anchors, then orders the kept ids by coordinate.
        """
        _require_id(a_id, "a_id")
        _require_id(b_id, "b_id")
        _check_keep(keep_closest, "keep_closest")

        axis = self.axis_between(a_id, b_id)
        scores = self._scores(axis, True, a_id, b_id)

        scores.sort(key=lambda s: s.orthogonal_distance)
        closest = scores[:keep_closest]
        if not include_anchors:
            closest = [s for s in closest if s.id != a_id and s.id != b_id]

        closest.sort(key=lambda s: s.coordinate)
        logger.debug("clean_semantic_scale", a=str(a_id), b=str(b_id), kept=len(closest))
        return closest

    def clean_scale_by_purity(
        self,
        a_id: T,
        b_id: T,
        top_n: int,
        include_anchors: bool = True,
    ) -> list[ProjectionScore[T]]:
        """
        Semantic scale restricted to the most axis-aligned ids.

        Uses the centered axis, keeps the ``top_n`` highest purity scores
        (anchors excluded up front unless ``include_anchors``), then orders
        the kept ids by coordinate.
        """
        _require_id(a_id, "a_id")
        _require_id(b_id, "b_id")
        _check_keep(top_n, "top_n")

        axis = self.centered_axis_between(a_id, b_id)
        scores = self._scores(axis, include_anchors, a_id, b_id)

        scores.sort(key=lambda s: s.purity, reverse=True)
        best = scores[:top_n]
        best.sort(key=lambda s: s.coordinate)
        logger.debug("clean_scale_by_purity", a=str(a_id), b=str(b_id), kept=len(best))
        return best


def _require_id(id: object, name: str) -> None:
    if id is None:
        raise InvalidArgumentError(f"{name} must not be None")


def _check_keep(n: int, name: str) -> None:
    if n is None or n <= 0:
        raise InvalidArgumentError(f"{name} must be >= 1, got {n}")
