"""Unit tests for the numeric vector capability used by the stop criteria."""

from __future__ import annotations

import math

import numpy as np
import pytest

from convergence_app.core.vectors import DenseVector, NumericVector, infinity_norm, vector_length


class ScaledVector:
    """Custom vector: satisfies NumericVector without numpy."""

    def __init__(self, size: int, value: float) -> None:
        self._size = size
        self._value = value

    def __len__(self) -> int:
        return self._size

    def infinity_norm(self) -> float:
        return abs(self._value)


class TestDenseVector:
    def test_length_and_norm(self) -> None:
        v = DenseVector([3.0, -4.0, 1.0])
        assert len(v) == 3
        assert v.infinity_norm() == 4.0

    def test_complex_norm_uses_modulus(self) -> None:
        v = DenseVector([3 + 4j, 1 - 1j])
        assert v.infinity_norm() == pytest.approx(5.0)

    def test_nan_element_gives_nan_norm(self) -> None:
        v = DenseVector([1.0, float("nan"), 2.0])
        assert math.isnan(v.infinity_norm())

    def test_data_is_read_only_copy(self) -> None:
        source = np.array([1.0, 2.0])
        v = DenseVector(source)
        source[0] = 100.0
        assert v[0] == 1.0
        with pytest.raises(ValueError):
            v.data[0] = 5.0

    def test_rejects_matrix(self) -> None:
        with pytest.raises(ValueError):
            DenseVector([[1.0, 2.0], [3.0, 4.0]])

    def test_factories_and_equality(self) -> None:
        assert DenseVector.zeros(3) == DenseVector([0.0, 0.0, 0.0])
        assert DenseVector.full(2, -7.0).infinity_norm() == 7.0
        assert DenseVector([1.0]) != DenseVector([1.0, 1.0])

    def test_satisfies_protocol(self) -> None:
        assert isinstance(DenseVector([1.0]), NumericVector)
        assert isinstance(ScaledVector(2, 1.0), NumericVector)


class TestInfinityNorm:
    @pytest.mark.parametrize(
        "vector, expected",
        [
            (np.array([1.0, -2.5, 2.0]), 2.5),
            ([0.5, -0.25], 0.5),
            (DenseVector([-9.0, 1.0]), 9.0),
            (ScaledVector(4, -3.0), 3.0),
            (np.array([]), 0.0),
        ],
    )
    def test_supported_inputs(self, vector, expected: float) -> None:
        assert infinity_norm(vector) == expected

    def test_none_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            infinity_norm(None)
        with pytest.raises(TypeError):
            vector_length(None)

    def test_vector_length(self) -> None:
        assert vector_length(np.zeros(5)) == 5
        assert vector_length([1, 2]) == 2
        assert vector_length(ScaledVector(7, 0.0)) == 7
