"""Unit tests for EmbeddingsAssembler and in-memory sources."""

import pytest

from latent_explorer import (
    EmbeddingsAssembler,
    InMemorySource,
    InvalidArgumentError,
    Representation,
    Vector,
)

FULL = Representation.of("full")
PCA = Representation.of("pca")


@pytest.fixture
def assembler() -> EmbeddingsAssembler:
    return EmbeddingsAssembler()


class TestInMemorySource:
    def test_dimension_known_after_load(self) -> None:
        src = InMemorySource("FULL", {"a": [1.0, 2.0]})
        assert src.representation == FULL
        assert src.dimension() is None
        src.load()
        assert src.dimension() == 2

    def test_load_is_stable_and_read_only(self) -> None:
        src = InMemorySource(FULL, {"a": [1.0]})
        first = src.load()
        assert src.load() == first
        with pytest.raises(TypeError):
            first["b"] = Vector([2.0])  # type: ignore[index]
        assert "b" not in src.load()


class TestAssemble:
    def test_consistent_sources(self, assembler: EmbeddingsAssembler) -> None:
        storage = assembler.assemble([
            InMemorySource(FULL, {"cat": [1.0, 2.0, 3.0], "dog": [1.0, 2.5, 3.0]}),
            InMemorySource(PCA, {"dog": [0.5], "cat": [0.1]}),
        ])

        assert set(storage.ids()) == {"cat", "dog"}
        assert storage.ids() == ("cat", "dog")
        assert storage.available_representations() == frozenset({FULL, PCA})
        assert storage.require("dog", PCA) == Vector([0.5])
        assert storage.require("cat", FULL) == Vector([1.0, 2.0, 3.0])

    def test_single_source(self, assembler: EmbeddingsAssembler) -> None:
        storage = assembler.assemble({InMemorySource(FULL, {"a": [1.0]})})
        assert storage.available_representations() == frozenset({FULL})

    def test_mismatched_id_sets(self, assembler: EmbeddingsAssembler) -> None:
        with pytest.raises(InvalidArgumentError, match="same ID set"):
            assembler.assemble([
                InMemorySource(FULL, {"a": [1.0], "b": [2.0]}),
                InMemorySource(PCA, {"a": [1.0]}),
            ])

    def test_superset_is_also_rejected(self, assembler: EmbeddingsAssembler) -> None:
        with pytest.raises(InvalidArgumentError):
            assembler.assemble([
                InMemorySource(FULL, {"a": [1.0]}),
                InMemorySource(PCA, {"a": [1.0], "b": [2.0]}),
            ])

    def test_duplicate_representation(self, assembler: EmbeddingsAssembler) -> None:
        with pytest.raises(InvalidArgumentError, match="Duplicate representation"):
            assembler.assemble([
                InMemorySource("full", {"a": [1.0]}),
                InMemorySource(" FULL ", {"a": [2.0]}),
            ])

    def test_empty_source(self, assembler: EmbeddingsAssembler) -> None:
        with pytest.raises(InvalidArgumentError, match="Empty source"):
            assembler.assemble([InMemorySource(FULL, {})])

    def test_no_sources(self, assembler: EmbeddingsAssembler) -> None:
        with pytest.raises(InvalidArgumentError):
            assembler.assemble([])
        with pytest.raises(InvalidArgumentError):
            assembler.assemble(None)

    def test_entities_share_vectors_across_representations(self, assembler: EmbeddingsAssembler) -> None:
        storage = assembler.assemble([
            InMemorySource(FULL, {"a": [1.0, 1.0], "b": [2.0, 2.0]}),
            InMemorySource(PCA, {"a": [1.0], "b": [2.0]}),
        ])
        for id in storage.ids():
            assert storage.require_single(id).representations() == storage.available_representations()
