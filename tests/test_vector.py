"""Unit tests for Vector."""

import math

import numpy as np
import pytest

from latent_explorer import IndexOutOfRangeError, InvalidArgumentError, InvalidStateError, Vector


class TestConstruction:
    def test_copies_input_list(self) -> None:
        values = [1.0, 2.0, 3.0]
        v = Vector(values)
        values[0] = 99.0
        assert v.get(0) == 1.0

    def test_copies_numpy_buffer(self) -> None:
        arr = np.array([1.0, 2.0])
        v = Vector(arr)
        arr[1] = -7.0
        assert v.to_list() == [1.0, 2.0]

    def test_to_numpy_returns_copy(self) -> None:
        v = Vector([1.0, 2.0])
        out = v.to_numpy()
        out[0] = 42.0
        assert v.get(0) == 1.0

    @pytest.mark.parametrize("values", [None, [], np.array([])])
    def test_rejects_none_or_empty(self, values) -> None:
        with pytest.raises(InvalidArgumentError):
            Vector(values)

    def test_rejects_non_numeric(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Vector(["a", "b"])

    def test_rejects_matrix(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Vector([[1.0, 2.0], [3.0, 4.0]])

    def test_rejects_nan(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Vector([1.0, float("nan")])

    def test_dim_and_len(self) -> None:
        v = Vector([1, 2, 3])
        assert v.dim == 3
        assert len(v) == 3
        assert list(v) == [1.0, 2.0, 3.0]


class TestAlgebra:
    def test_add_and_subtract(self) -> None:
        a = Vector([1.0, 2.0])
        b = Vector([3.0, 5.0])
        assert a.add(b) == Vector([4.0, 7.0])
        assert b.subtract(a) == Vector([2.0, 3.0])
        assert a + b == a.add(b)
        assert b - a == b.subtract(a)

    def test_operations_do_not_mutate_operands(self) -> None:
        a = Vector([1.0, 2.0])
        b = Vector([3.0, 5.0])
        a.add(b)
        a.scale(10.0)
        b.normalized()
        assert a == Vector([1.0, 2.0])
        assert b == Vector([3.0, 5.0])

    def test_dimension_mismatch(self) -> None:
        a = Vector([1.0, 2.0])
        b = Vector([1.0, 2.0, 3.0])
        with pytest.raises(InvalidArgumentError, match="Dimension mismatch"):
            a.add(b)
        with pytest.raises(InvalidArgumentError):
            a.subtract(b)
        with pytest.raises(InvalidArgumentError):
            a.dot(b)

    def test_scale_and_negate(self) -> None:
        v = Vector([1.0, -2.0])
        assert v.scale(3.0) == Vector([3.0, -6.0])
        assert 2 * v == Vector([2.0, -4.0])
        assert -v == Vector([-1.0, 2.0])

    def test_dot_and_norms(self) -> None:
        v = Vector([3.0, 4.0])
        assert v.dot(Vector([1.0, 1.0])) == 7.0
        assert v.norm() == 5.0
        assert v.norm_squared() == 25.0

    def test_normalized(self) -> None:
        n = Vector([3.0, 4.0]).normalized()
        assert n.get(0) == pytest.approx(0.6)
        assert n.get(1) == pytest.approx(0.8)
        assert n.norm() == pytest.approx(1.0)

    def test_normalize_zero_vector(self) -> None:
        with pytest.raises(InvalidStateError):
            Vector([0.0, 0.0]).normalized()

    @pytest.mark.parametrize("index", [-1, 2, 100])
    def test_get_out_of_range(self, index: int) -> None:
        with pytest.raises(IndexOutOfRangeError):
            Vector([1.0, 2.0]).get(index)

    def test_get_out_of_range_is_an_index_error(self) -> None:
        with pytest.raises(IndexError):
            Vector([1.0])[3]


class TestAverage:
    def test_centroid(self) -> None:
        c = Vector.average([Vector([0.0, 0.0]), Vector([2.0, 0.0]), Vector([0.0, 2.0])])
        assert c == Vector([2.0 / 3.0, 2.0 / 3.0])

    def test_single_vector(self) -> None:
        assert Vector.average([Vector([1.5, -1.0])]) == Vector([1.5, -1.0])

    def test_empty(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Vector.average([])

    def test_mixed_dimensions(self) -> None:
        with pytest.raises(InvalidArgumentError, match="different dimensions"):
            Vector.average([Vector([1.0]), Vector([1.0, 2.0])])


class TestEquality:
    def test_structural_equality_and_hash(self) -> None:
        a = Vector([1.0, 2.0])
        b = Vector((1.0, 2.0))
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_vectors(self) -> None:
        assert Vector([1.0, 2.0]) != Vector([2.0, 1.0])
        assert Vector([1.0]) != Vector([1.0, 0.0])

    def test_not_equal_to_list(self) -> None:
        assert Vector([1.0]) != [1.0]

    def test_determinism(self) -> None:
        a = Vector([0.1, 0.7, math.pi])
        b = Vector([2.3, -0.4, 1e-3])
        assert a.add(b).subtract(a) == a.add(b).subtract(a)
        assert a.dot(b) == a.dot(b)

    def test_repr_is_short(self) -> None:
        assert repr(Vector(list(range(1000)))) == "Vector(dim=1000)"
