"""
Vector arithmetic: analogies and centroid grouping.

An expression is a signed list of ids, e.g. king - man + woman. It is
evaluated left to right in one representation, and the result is matched
against the vocabulary with nearest-neighbor search.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Generic

from .errors import InvalidArgumentError
from .logging import get_logger
from .metrics import DistanceMetric
from .model import EmbeddingGroup, T
from .neighbors import NearestNeighbors, Neighbor
from .representation import Representation, RepresentationLike, as_representation
from .vector import Vector

logger = get_logger(__name__)

_OPERATOR = re.compile(r"([+-])")


@dataclass(frozen=True)
class Term(Generic[T]):
    """One signed term of an expression: +id or -id."""
    id: T
    sign: int = 1

    def __post_init__(self) -> None:
        if self.id is None:
            raise InvalidArgumentError("id must not be None")
        if self.sign not in (1, -1) or isinstance(self.sign, bool):
            raise InvalidArgumentError(f"sign must be +1 or -1, got {self.sign!r}")

    @classmethod
    def plus(cls, id: T) -> "Term[T]":
        return cls(id, 1)

    @classmethod
    def minus(cls, id: T) -> "Term[T]":
        return cls(id, -1)

    def __str__(self) -> str:
        return f"{'+' if self.sign == 1 else '-'} {self.id}"


@dataclass(frozen=True)
class VectorExpression(Generic[T]):
    """A non-empty ordered sequence of terms."""
    terms: tuple[Term[T], ...]

    def __init__(self, terms: Iterable[Term[T]]):
        if terms is None:
            raise InvalidArgumentError("terms must not be None")
        terms = tuple(terms)
        if not terms:
            raise InvalidArgumentError("terms must not be empty")
        for term in terms:
            if not isinstance(term, Term):
                raise InvalidArgumentError(f"terms must be Term instances, got {type(term).__name__}")
        object.__setattr__(self, "terms", terms)

    def ids(self) -> tuple[T, ...]:
        """Distinct ids in order of first appearance."""
        return tuple(dict.fromkeys(t.id for t in self.terms))

    @staticmethod
    def builder() -> "ExpressionBuilder":
        return ExpressionBuilder()

    @classmethod
    def parse(cls, text: str) -> "VectorExpression[str]":
        """
        Parse ``"king - man + woman"`` into an expression of string ids.

        A leading term without a sign is positive. Ids may contain inner
        spaces but not ``+`` or ``-``.

        Raises:
            InvalidArgumentError: On empty or malformed input
        """
        if text is None or not text.strip():
            raise InvalidArgumentError("expression must not be empty")

        parts = _OPERATOR.split(text)
        terms: list[Term[str]] = []

        head = parts[0].strip()
        if head:
            terms.append(Term(head, 1))

        for op, chunk in zip(parts[1::2], parts[2::2]):
            id = chunk.strip()
            if not id:
                raise InvalidArgumentError(f"Missing id after {op!r} in {text!r}")
            terms.append(Term(id, -1 if op == "-" else 1))

        return cls(terms)

    def __str__(self) -> str:
        text = " ".join(str(t) for t in self.terms)
        return text[2:] if text.startswith("+ ") else text


class ExpressionBuilder(Generic[T]):
    """Fluent builder: ``VectorExpression.builder().plus(a).minus(b).build()``."""

    def __init__(self):
        self._terms: list[Term[T]] = []

    def plus(self, id: T) -> "ExpressionBuilder[T]":
        self._terms.append(Term.plus(id))
        return self

    def minus(self, id: T) -> "ExpressionBuilder[T]":
        self._terms.append(Term.minus(id))
        return self

    def build(self) -> VectorExpression[T]:
        return VectorExpression(self._terms)


@dataclass(frozen=True)
class LabResult(Generic[T]):
    """Computed vector plus its nearest neighbors."""
    vector: Vector
    neighbors: tuple[Neighbor[T], ...] = field(default=())

    def __post_init__(self) -> None:
        if self.vector is None:
            raise InvalidArgumentError("vector must not be None")
        if self.neighbors is None:
            raise InvalidArgumentError("neighbors must not be None")
        object.__setattr__(self, "neighbors", tuple(self.neighbors))


class VectorExpressionEvaluator(Generic[T]):
    """Evaluates an expression into one vector of a fixed representation."""

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

    def evaluate(self, expr: VectorExpression[T]) -> Vector:
        return self.path(expr)[-1]

    def path(self, expr: VectorExpression[T]) -> list[Vector]:
        """
        Accumulated vector after each term, in order.

        The last element is the expression's value. Order is fixed (left to
        right) so floating point results are reproducible.
        """
        if expr is None:
            raise InvalidArgumentError("expr must not be None")

        first, *rest = expr.terms
        acc = self._group.require(first.id, self._representation)
        if first.sign == -1:
            acc = acc.scale(-1.0)
        steps = [acc]

        for term in rest:
            v = self._group.require(term.id, self._representation)
            acc = acc.add(v) if term.sign == 1 else acc.subtract(v)
            steps.append(acc)

        return steps


class VectorArithmeticLab(Generic[T]):
    """Solves analogies: evaluate an expression, then search its neighbors."""

    def __init__(self, group: EmbeddingGroup[T], representation: RepresentationLike, metric: DistanceMetric):
        if group is None:
            raise InvalidArgumentError("group must not be None")
        if representation is None:
            raise InvalidArgumentError("representation must not be None")
        if metric is None:
            raise InvalidArgumentError("metric must not be None")
        self._evaluator = VectorExpressionEvaluator(group, representation)
        self._neighbors = NearestNeighbors(group, representation, metric)

    def solve(self, expr: VectorExpression[T], k: int) -> LabResult[T]:
        """
        Evaluate ``expr`` and return its k nearest neighbors.

        Every id appearing in the expression is excluded, so an input term
        is never returned as its own answer.

        Raises:
            InvalidArgumentError: If expr is None or k < 1
        """
        if expr is None:
            raise InvalidArgumentError("expr must not be None")
        if k is None or k < 1:
            raise InvalidArgumentError(f"k must be >= 1, got {k}")

        result = self._evaluator.evaluate(expr)
        top = self._neighbors.top_k_vector(result, k, exclude=expr.ids())
        logger.debug("analogy_solved", expression=str(expr), returned=len(top))
        return LabResult(vector=result, neighbors=tuple(top))


class SubspaceGrouping(Generic[T]):
    """Finds the ids closest to the centroid of a selection."""

    def __init__(self, group: EmbeddingGroup[T], representation: RepresentationLike, metric: DistanceMetric):
        if group is None:
            raise InvalidArgumentError("group must not be None")
        self._group = group
        self._neighbors = NearestNeighbors(group, representation, metric)

    def centroid(self, selected: Sequence[T]) -> Vector:
        """
        Average vector of the selected ids.

        Raises:
            InvalidArgumentError: If the selection is empty
            NotFoundError: If an id is unknown
        """
        if not selected:
            raise InvalidArgumentError("selected ids must not be empty")
        rep = self._neighbors.representation
        return Vector.average(self._group.require(id, rep) for id in selected)

    def group(self, selected: Iterable[T], k: int, exclude_selected: bool = True) -> LabResult[T]:
        """
        Centroid of ``selected`` and its k nearest neighbors.

        Args:
            selected: Ids to average; duplicates count once
            k: Number of neighbors (>= 1)
            exclude_selected: Skip the selected ids in the search
        """
        if selected is None:
            raise InvalidArgumentError("selected ids must not be None")
        ids = tuple(dict.fromkeys(selected))
        if k is None or k < 1:
            raise InvalidArgumentError(f"k must be >= 1, got {k}")

        center = self.centroid(ids)
        exclude = ids if exclude_selected else ()
        top = self._neighbors.top_k_vector(center, k, exclude=exclude)
        return LabResult(vector=center, neighbors=tuple(top))
