"""
Distance metrics.

Every metric defines a distance where smaller means closer. New metrics
subclass DistanceMetric and are made selectable with register_metric.
"""

from abc import ABC, abstractmethod

import numpy as np

from .errors import InvalidArgumentError
from .vector import Vector


class DistanceMetric(ABC):
    """Strategy for measuring the distance between two vectors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier, used for display and for selection by name."""
        pass

    @abstractmethod
    def distance(self, a: Vector, b: Vector) -> float:
        """
        Distance between ``a`` and ``b``.

        Raises:
            InvalidArgumentError: If a vector is None or dimensions differ
        """
        pass

    @staticmethod
    def _check(a: Vector, b: Vector) -> None:
        if a is None:
            raise InvalidArgumentError("a must not be None")
        if b is None:
            raise InvalidArgumentError("b must not be None")
        if a.dim != b.dim:
            raise InvalidArgumentError(f"Dimension mismatch: {a.dim} vs {b.dim}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __str__(self) -> str:
        return self.name


class EuclideanDistance(DistanceMetric):
    """L2 distance, sqrt(sum (a_i - b_i)^2)."""

    @property
    def name(self) -> str:
        return "euclidean"

    def distance(self, a: Vector, b: Vector) -> float:
        self._check(a, b)
        return a.subtract(b).norm()


class CosineDistance(DistanceMetric):
    """
    Cosine distance, 1 - (a . b) / (|a| |b|).

    Range is [0, 2]; rounding can push results slightly outside it.
    """

    @property
    def name(self) -> str:
        return "cosine"

    def distance(self, a: Vector, b: Vector) -> float:
        self._check(a, b)

        ua = _unit_scaled(a)
        ub = _unit_scaled(b)

        # Largest component is 1 after scaling, so both squared norms are >= 1.
        # sqrt of the product keeps distance(a, a) at exactly 0.0
        sq_a = float(np.dot(ua, ua))
        sq_b = float(np.dot(ub, ub))
        return 1.0 - float(np.dot(ua, ub)) / float(np.sqrt(sq_a * sq_b))


def _unit_scaled(v: Vector) -> np.ndarray:
    """Components divided by the largest magnitude, so tiny vectors don't underflow."""
    data = v.to_numpy()
    peak = float(np.max(np.abs(data)))
    if peak == 0.0:
        raise InvalidArgumentError("Cosine distance is undefined for zero vectors")
    return data / peak


_REGISTRY: dict[str, type[DistanceMetric]] = {
    "cosine": CosineDistance,
    "euclidean": EuclideanDistance,
}


def register_metric(metric_cls: type[DistanceMetric]) -> type[DistanceMetric]:
    """Make a metric selectable by its name. Usable as a class decorator."""
    name = metric_cls().name.strip().lower()
    if not name:
        raise InvalidArgumentError("metric name must be non-empty")
    _REGISTRY[name] = metric_cls
    return metric_cls


def available_metrics() -> tuple[str, ...]:
    """Registered metric names, in registration order."""
    return tuple(_REGISTRY)


def get_metric(name: str) -> DistanceMetric:
    """
    Instantiate a metric by name (case-insensitive).

    Raises:
        InvalidArgumentError: If the name is unknown
    """
    if name is None:
        raise InvalidArgumentError("metric name must not be None")
    metric_cls = _REGISTRY.get(name.strip().lower())
    if metric_cls is None:
        raise InvalidArgumentError(f"Unknown metric: {name}")
    return metric_cls()
