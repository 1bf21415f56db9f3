"""
Immutable fixed-dimension vectors.
"""

from collections.abc import Iterable, Iterator
from typing import Union

import numpy as np

from .errors import IndexOutOfRangeError, InvalidArgumentError, InvalidStateError


class Vector:
    """
    An immutable vector of float64 components.

    The input is copied into a read-only numpy array, so mutating the
    caller's buffer afterwards never changes the vector. Every operation
    returns a new Vector. Equality and hashing are component-wise.
    """

    __slots__ = ("_data",)

    def __init__(self, values: Union["Vector", Iterable[float], np.ndarray]):
        if values is None:
            raise InvalidArgumentError("values must not be None")
        if isinstance(values, Vector):
            data = values._data.copy()
        else:
            try:
                data = np.array(values, dtype=np.float64)
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(f"values must be real numbers: {e}") from e

        if data.ndim != 1:
            raise InvalidArgumentError(f"values must be one-dimensional, got shape {data.shape}")
        if data.size == 0:
            raise InvalidArgumentError("values must not be empty")
        if not np.all(np.isfinite(data)):
            raise InvalidArgumentError("values must be finite")

        data.setflags(write=False)
        self._data = data

    @classmethod
    def _wrap(cls, data: np.ndarray) -> "Vector":
        # Skips validation for arrays produced by our own arithmetic.
        vec = cls.__new__(cls)
        data.setflags(write=False)
        vec._data = data
        return vec

    @property
    def dim(self) -> int:
        """Number of components."""
        return int(self._data.shape[0])

    def to_list(self) -> list[float]:
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        """Return a writable copy of the components."""
        return self._data.copy()

    def get(self, index: int) -> float:
        """
        Return the component at ``index``.

        Raises:
            IndexOutOfRangeError: If index is outside [0, dim)
        """
        if index < 0 or index >= self.dim:
            raise IndexOutOfRangeError(f"index={index}, dim={self.dim}")
        return float(self._data[index])

    def _require_same_dim(self, other: "Vector") -> None:
        if other is None:
            raise InvalidArgumentError("other must not be None")
        if not isinstance(other, Vector):
            raise InvalidArgumentError(f"other must be a Vector, got {type(other).__name__}")
        if self.dim != other.dim:
            raise InvalidArgumentError(f"Dimension mismatch: {self.dim} vs {other.dim}")

    def add(self, other: "Vector") -> "Vector":
        self._require_same_dim(other)
        return Vector._wrap(self._data + other._data)

    def subtract(self, other: "Vector") -> "Vector":
        self._require_same_dim(other)
        return Vector._wrap(self._data - other._data)

    def scale(self, alpha: float) -> "Vector":
        return Vector._wrap(self._data * float(alpha))

    def dot(self, other: "Vector") -> float:
        """
        Dot product with another vector.

        Raises:
            InvalidArgumentError: If dimensions do not match
        """
        self._require_same_dim(other)
        return float(np.dot(self._data, other._data))

    def norm(self) -> float:
        """L2 norm, sqrt(sum x_i^2)."""
        return float(np.sqrt(self.norm_squared()))

    def norm_squared(self) -> float:
        return float(np.dot(self._data, self._data))

    def normalized(self) -> "Vector":
        """
        Return the unit-length vector with the same direction.

        Raises:
            InvalidStateError: If the norm is exactly zero
        """
        n = self.norm()
        if n == 0.0:
            raise InvalidStateError("Cannot normalize a zero vector")
        return Vector._wrap(self._data / n)

    @staticmethod
    def average(vectors: Iterable["Vector"]) -> "Vector":
        """
        Component-wise mean of a collection of vectors.

        Args:
            vectors: Non-empty collection of vectors sharing one dimension

        Returns:
            The centroid vector

        Raises:
            InvalidArgumentError: On empty input or mixed dimensions
        """
        if vectors is None:
            raise InvalidArgumentError("Cannot average empty vectors")
        items = list(vectors)
        if not items:
            raise InvalidArgumentError("Cannot average empty vectors")

        dim = items[0].dim
        total = np.zeros(dim, dtype=np.float64)
        for v in items:
            if v.dim != dim:
                raise InvalidArgumentError(
                    f"Cannot average vectors with different dimensions. Expected {dim} but got {v.dim}"
                )
            total += v._data

        return Vector._wrap(total / len(items))

    def __add__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> "Vector":
        return self.scale(-1.0)

    def __mul__(self, alpha: float) -> "Vector":
        if not isinstance(alpha, (int, float, np.floating, np.integer)):
            return NotImplemented
        return self.scale(alpha)

    __rmul__ = __mul__

    def __len__(self) -> int:
        return self.dim

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def __getitem__(self, index: int) -> float:
        return self.get(index)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Vector):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        return hash(tuple(self._data.tolist()))

    def __repr__(self) -> str:
        # Embeddings can have thousands of components
        return f"Vector(dim={self.dim})"
