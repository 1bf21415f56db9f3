"""Unit tests for NearestNeighbors."""

import pytest

from latent_explorer import (
    CosineDistance,
    EuclideanDistance,
    InvalidArgumentError,
    NearestNeighbors,
    Neighbor,
    NotFoundError,
    Vector,
)


@pytest.fixture
def knn(line_storage) -> NearestNeighbors:
    return NearestNeighbors(line_storage, "full", EuclideanDistance())


class TestTopK:
    def test_closest_first(self, knn: NearestNeighbors) -> None:
        result = knn.top_k("q", 2)
        assert result == [Neighbor("a", 1.0), Neighbor("b", 2.0)]

    def test_excludes_query(self, knn: NearestNeighbors) -> None:
        ids = [n.id for n in knn.top_k("a", 3)]
        assert "a" not in ids
        assert ids == ["q", "b", "c"]

    def test_k_larger_than_group(self, knn: NearestNeighbors) -> None:
        result = knn.top_k("q", 50)
        assert [n.id for n in result] == ["a", "b", "c"]

    def test_sorted_ascending(self, knn: NearestNeighbors) -> None:
        distances = [n.distance for n in knn.top_k("c", 3)]
        assert distances == sorted(distances)

    @pytest.mark.parametrize("k", [0, -1])
    def test_rejects_non_positive_k(self, knn: NearestNeighbors, k: int) -> None:
        with pytest.raises(InvalidArgumentError):
            knn.top_k("q", k)

    def test_unknown_id(self, knn: NearestNeighbors) -> None:
        with pytest.raises(NotFoundError):
            knn.top_k("nope", 2)

    def test_none_id(self, knn: NearestNeighbors) -> None:
        with pytest.raises(InvalidArgumentError):
            knn.top_k(None, 2)

    def test_deterministic(self, knn: NearestNeighbors) -> None:
        assert knn.top_k("b", 3) == knn.top_k("b", 3)


class TestTies:
    def test_equal_distances_keep_scan_order(self, make_storage) -> None:
        storage = make_storage({
            "q": [0.0, 0.0],
            "east": [1.0, 0.0],
            "west": [-1.0, 0.0],
            "north": [0.0, 1.0],
            "far": [5.0, 5.0],
        })
        knn = NearestNeighbors(storage, "full", EuclideanDistance())

        assert [n.id for n in knn.top_k("q", 2)] == ["east", "west"]
        assert [n.id for n in knn.top_k("q", 3)] == ["east", "west", "north"]

    def test_later_candidate_must_be_strictly_closer(self, make_storage) -> None:
        storage = make_storage({
            "q": [0.0, 0.0],
            "first": [2.0, 0.0],
            "second": [0.0, 2.0],
        })
        knn = NearestNeighbors(storage, "full", EuclideanDistance())
        assert knn.top_k("q", 1) == [Neighbor("first", 2.0)]


class TestTopKVector:
    def test_arbitrary_query(self, knn: NearestNeighbors) -> None:
        result = knn.top_k_vector(Vector([9.0, 0.0]), 2)
        assert [n.id for n in result] == ["c", "b"]

    def test_exclude(self, knn: NearestNeighbors) -> None:
        result = knn.top_k_vector(Vector([0.0, 0.0]), 2, exclude=["q", "a"])
        assert [n.id for n in result] == ["b", "c"]

    def test_exclude_everything(self, knn: NearestNeighbors) -> None:
        assert knn.top_k_vector(Vector([0.0, 0.0]), 2, exclude={"q", "a", "b", "c"}) == []

    def test_dimension_mismatch(self, knn: NearestNeighbors) -> None:
        with pytest.raises(InvalidArgumentError):
            knn.top_k_vector(Vector([0.0, 0.0, 0.0]), 2)

    def test_rejects_none_query(self, knn: NearestNeighbors) -> None:
        with pytest.raises(InvalidArgumentError):
            knn.top_k_vector(None, 2)


class TestRepresentationsAndMetrics:
    def test_search_in_other_representation(self, make_storage) -> None:
        storage = make_storage(
            {"a": [0.0, 0.0], "b": [1.0, 0.0], "c": [5.0, 0.0]},
            pca={"a": [0.0], "b": [9.0], "c": [1.0]},
        )
        assert [n.id for n in NearestNeighbors(storage, "full", EuclideanDistance()).top_k("a", 1)] == ["b"]
        assert [n.id for n in NearestNeighbors(storage, "pca", EuclideanDistance()).top_k("a", 1)] == ["c"]

    def test_cosine_ignores_magnitude(self, analogy_storage) -> None:
        storage = analogy_storage
        knn = NearestNeighbors(storage, "full", CosineDistance())
        # man lies on the x axis; king (10, 1) is the most x-aligned of the rest
        assert knn.top_k("man", 1)[0].id == "king"

    def test_constructor_rejects_none(self, line_storage) -> None:
        with pytest.raises(InvalidArgumentError):
            NearestNeighbors(None, "full", EuclideanDistance())
        with pytest.raises(InvalidArgumentError):
            NearestNeighbors(line_storage, None, EuclideanDistance())
        with pytest.raises(InvalidArgumentError):
            NearestNeighbors(line_storage, "full", None)
