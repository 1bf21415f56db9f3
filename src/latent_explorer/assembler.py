"""
Merge per-representation sources into one EmbeddingStorage.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Generic, Optional

from .errors import InvalidArgumentError, InvalidStateError
from .logging import get_logger
from .model import EmbeddingItem, EmbeddingStorage, T
from .representation import Representation, RepresentationLike, as_representation
from .vector import Vector

logger = get_logger(__name__)


class RepresentationSource(ABC, Generic[T]):
    """
    Supplies every entity's vector for a single representation.

    Implementations load once, validate their data, and return a read-only
    mapping that is stable across repeated ``load`` calls.
    """

    @property
    @abstractmethod
    def representation(self) -> Representation:
        pass

    @abstractmethod
    def load(self) -> Mapping[T, Vector]:
        pass

    @abstractmethod
    def dimension(self) -> Optional[int]:
        """Vector dimension, known only after ``load``."""
        pass


class InMemorySource(RepresentationSource[T]):
    """A source over vectors already held in memory."""

    def __init__(self, representation: RepresentationLike, vectors: Mapping[T, object]):
        if vectors is None:
            raise InvalidArgumentError("vectors must not be None")
        self._representation = as_representation(representation)
        self._vectors = MappingProxyType(
            {id: v if isinstance(v, Vector) else Vector(v) for id, v in vectors.items()}
        )
        self._loaded = False

    @property
    def representation(self) -> Representation:
        return self._representation

    def load(self) -> Mapping[T, Vector]:
        self._loaded = True
        return self._vectors

    def dimension(self) -> Optional[int]:
        if not self._loaded or not self._vectors:
            return None
        return next(iter(self._vectors.values())).dim

    def __repr__(self) -> str:
        return f"InMemorySource(representation={self._representation}, size={len(self._vectors)})"


class EmbeddingsAssembler(Generic[T]):
    """
    Builds an EmbeddingStorage from several representation sources.

    Sources must cover exactly the same ids (strict equality), so every
    entity ends up with a vector in every representation.
    """

    def assemble(self, sources: Iterable[RepresentationSource[T]]) -> EmbeddingStorage[T]:
        """
        Merge sources into one store.

        Args:
            sources: One source per representation

        Returns:
            EmbeddingStorage whose ids are the common id set, in the first
            source's order

        Raises:
            InvalidArgumentError: On no sources, a duplicate representation,
                an empty source, or mismatched id sets
            InvalidStateError: If a vector is missing after validation
        """
        if sources is None:
            raise InvalidArgumentError("sources must not be None")
        sources = list(sources)
        if not sources:
            raise InvalidArgumentError("At least one RepresentationSource is required")

        loaded: dict[Representation, Mapping[T, Vector]] = {}
        for src in sources:
            if src is None:
                raise InvalidArgumentError("sources must not contain None")
            rep = src.representation
            if rep in loaded:
                raise InvalidArgumentError(f"Duplicate representation source: {rep}")
            vectors = src.load()
            if not vectors:
                raise InvalidArgumentError(f"Empty source for representation: {rep}")
            loaded[rep] = vectors

        reps = list(loaded)
        base_ids = list(loaded[reps[0]])
        base_set = set(base_ids)
        for rep in reps[1:]:
            ids = set(loaded[rep])
            if ids != base_set:
                missing = len(base_set - ids)
                extra = len(ids - base_set)
                raise InvalidArgumentError(
                    f"All representations must contain the same ID set: "
                    f"{rep} is missing {missing} and adds {extra} ids relative to {reps[0]}"
                )

        by_id: dict[T, EmbeddingItem[T]] = {}
        for id in base_ids:
            vectors: dict[Representation, Vector] = {}
            for rep, source_vectors in loaded.items():
                vector = source_vectors.get(id)
                if vector is None:
                    raise InvalidStateError(f"Missing vector for id={id} in representation={rep}")
                vectors[rep] = vector
            by_id[id] = EmbeddingItem(id, vectors)

        storage = EmbeddingStorage(by_id)
        logger.info(
            "embeddings_assembled",
            size=len(storage),
            representations=sorted(r.name for r in reps),
        )
        return storage
