"""
Entities and the immutable store that holds them.

An entity (word, image, document id, ...) carries one vector per
representation. A store guarantees that every entity exposes the same
representation set.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType
from typing import Generic, Hashable, Optional, TypeVar

from .errors import InvalidArgumentError, NotFoundError
from .representation import Representation, RepresentationLike, as_representation
from .vector import Vector

T = TypeVar("T", bound=Hashable)


class EmbeddingSingle(ABC, Generic[T]):
    """One entity with its vectors across representations."""

    @property
    @abstractmethod
    def id(self) -> T:
        pass

    @abstractmethod
    def representations(self) -> frozenset[Representation]:
        """All representations available for this entity."""
        pass

    @abstractmethod
    def get(self, rep: RepresentationLike) -> Optional[Vector]:
        """Vector for ``rep``, or None if absent."""
        pass

    def has(self, rep: RepresentationLike) -> bool:
        return as_representation(rep) in self.representations()

    def require(self, rep: RepresentationLike) -> Vector:
        """
        Vector for ``rep``.

        Raises:
            NotFoundError: If the entity has no vector in that representation
        """
        rep = as_representation(rep)
        vector = self.get(rep)
        if vector is None:
            raise NotFoundError(
                f"Missing representation: {rep} for id: {self.id}",
                id=self.id,
                representation=rep,
            )
        return vector


class EmbeddingItem(EmbeddingSingle[T]):
    """Immutable EmbeddingSingle backed by a read-only mapping."""

    __slots__ = ("_id", "_vectors")

    def __init__(self, id: T, vectors: Mapping[RepresentationLike, Vector]):
        if id is None:
            raise InvalidArgumentError("id must not be None")
        if vectors is None:
            raise InvalidArgumentError("vectors must not be None")
        if not vectors:
            raise InvalidArgumentError("vectors must not be empty")

        copied: dict[Representation, Vector] = {}
        for rep, vector in vectors.items():
            rep = as_representation(rep)
            if not isinstance(vector, Vector):
                raise InvalidArgumentError(f"vector for {rep} must be a Vector, got {type(vector).__name__}")
            if rep in copied:
                raise InvalidArgumentError(f"Duplicate representation {rep} for id: {id}")
            copied[rep] = vector

        self._id = id
        self._vectors = MappingProxyType(copied)

    @property
    def id(self) -> T:
        return self._id

    @property
    def vectors(self) -> Mapping[Representation, Vector]:
        """Read-only view of the representation map."""
        return self._vectors

    def representations(self) -> frozenset[Representation]:
        return frozenset(self._vectors)

    def get(self, rep: RepresentationLike) -> Optional[Vector]:
        return self._vectors.get(as_representation(rep))

    def __repr__(self) -> str:
        reps = ", ".join(sorted(r.name for r in self._vectors))
        return f"EmbeddingItem(id={self._id!r}, representations=[{reps}])"


class EmbeddingGroup(ABC, Generic[T]):
    """
    Read-only facade over a group of embedding entities.

    Use ``find`` where a missing id is a normal outcome (interactive input),
    and ``require_single`` / ``require`` where it is a bug.
    """

    @abstractmethod
    def find(self, id: T) -> Optional[EmbeddingSingle[T]]:
        pass

    @abstractmethod
    def ids(self) -> tuple[T, ...]:
        """All ids, in the store's stable scan order."""
        pass

    @abstractmethod
    def available_representations(self) -> frozenset[Representation]:
        pass

    def contains(self, id: T) -> bool:
        return self.find(id) is not None

    def require_single(self, id: T) -> EmbeddingSingle[T]:
        """
        Raises:
            NotFoundError: If the id is unknown
        """
        item = self.find(id)
        if item is None:
            raise NotFoundError(f"Unknown id: {id}", id=id)
        return item

    def require(self, id: T, rep: RepresentationLike) -> Vector:
        return self.require_single(id).require(rep)

    def dimension(self, rep: RepresentationLike) -> int:
        """Dimension of ``rep`` vectors, read from the first entity."""
        ids = self.ids()
        if not ids:
            raise NotFoundError("Group is empty", representation=rep)
        return self.require(ids[0], rep).dim

    def __contains__(self, id: object) -> bool:
        return self.contains(id)

    def __len__(self) -> int:
        return len(self.ids())


class EmbeddingStorage(EmbeddingGroup[T]):
    """
    Immutable in-memory EmbeddingGroup.

    Every entity must expose exactly the same representation set; one
    inconsistent entity rejects the whole store. The insertion order of
    the input mapping is kept and used as scan order.
    """

    def __init__(self, by_id: Mapping[T, EmbeddingSingle[T]]):
        if by_id is None:
            raise InvalidArgumentError("by_id must not be None")
        if not by_id:
            raise InvalidArgumentError("EmbeddingStorage cannot be empty")

        entries = dict(by_id)
        first = next(iter(entries.values()))
        reps = frozenset(first.representations())

        for key, item in entries.items():
            if item is None:
                raise InvalidArgumentError(f"Entry for id={key} must not be None")
            if item.id != key:
                raise InvalidArgumentError(f"Entry key {key!r} does not match item id {item.id!r}")
            if item.representations() != reps:
                raise InvalidArgumentError(
                    f"Inconsistent representation set for id={item.id}. "
                    f"Expected={_names(reps)}, but got={_names(item.representations())}"
                )

        self._by_id = MappingProxyType(entries)
        self._ids = tuple(entries)
        self._available = reps

    def find(self, id: T) -> Optional[EmbeddingSingle[T]]:
        return self._by_id.get(id)

    def contains(self, id: T) -> bool:
        return id in self._by_id

    def ids(self) -> tuple[T, ...]:
        return self._ids

    def available_representations(self) -> frozenset[Representation]:
        return self._available

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"EmbeddingStorage(size={len(self._ids)}, representations={_names(self._available)})"


def _names(reps: frozenset[Representation]) -> list[str]:
    return sorted(r.name for r in reps)
