"""
vectors.py

Мінімальна "векторна" можливість, якою користуються критерії зупинки.

Контролеру від вектора потрібні лише дві речі:
    - кількість елементів (len);
    - нескінченна норма ||v||∞ = max |v_i|.

Тут є:
    - NumericVector  – протокол (структурна типізація);
    - DenseVector    – обгортка над numpy.ndarray (дійсні та комплексні типи);
    - infinity_norm  – норма для NumericVector, numpy-масивів та послідовностей.

NaN у будь-якому елементі дає NaN-норму: критерії покладаються саме на це.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, Union, runtime_checkable

import numpy as np


@runtime_checkable
class NumericVector(Protocol):
    """Read-only вектор фіксованої довжини з нескінченною нормою."""

    def __len__(self) -> int:
        ...

    def infinity_norm(self) -> float:
        ...


VectorLike = Union[NumericVector, np.ndarray, Iterable[Any]]


class DenseVector:
    """
    Щільний вектор поверх numpy.ndarray.

    Дані копіюються при створенні та зберігаються як read-only масив,
    тож контролер не може випадково змінити вектори розв'язувача.

    Приклад:
        v = DenseVector([3.0, -4.0, 1.0])
        len(v)              # 3
        v.infinity_norm()   # 4.0
    """

    __slots__ = ("_data",)

    def __init__(self, values: Iterable[Any], dtype: Any = None) -> None:
        data = np.array(values, dtype=dtype, copy=True)
        if data.ndim != 1:
            raise ValueError(
                f"DenseVector очікує одновимірні дані, отримано форму {data.shape}"
            )
        if dtype is None and not np.issubdtype(data.dtype, np.number):
            data = data.astype(float)
        data.setflags(write=False)
        self._data = data

    # ------------------------------------------------------------------
    # Фабрики
    # ------------------------------------------------------------------

    @classmethod
    def zeros(cls, size: int, dtype: Any = float) -> "DenseVector":
        return cls(np.zeros(int(size), dtype=dtype))

    @classmethod
    def full(cls, size: int, value: Any) -> "DenseVector":
        return cls(np.full(int(size), value))

    # ------------------------------------------------------------------
    # Можливість NumericVector
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return int(self._data.shape[0])

    def infinity_norm(self) -> float:
        return _array_infinity_norm(self._data)

    # ------------------------------------------------------------------
    # Сервіс
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        """Read-only numpy-представлення."""
        return self._data

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def __array__(self, dtype: Any = None, copy: Any = None) -> np.ndarray:
        if dtype is None:
            return self._data.copy() if copy else self._data
        return self._data.astype(dtype)

    def __getitem__(self, index):
        return self._data[index]

    def __iter__(self):
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DenseVector):
            return NotImplemented
        return self._data.shape == other._data.shape and bool(
            np.array_equal(self._data, other._data)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DenseVector({self._data.tolist()!r})"

    def __str__(self) -> str:
        return "[" + ", ".join(str(v) for v in self._data) + "]"


# ---------------------------------------------------------------------------
# Функції-хелпери
# ---------------------------------------------------------------------------

def _array_infinity_norm(data: np.ndarray) -> float:
    if data.size == 0:
        return 0.0
    # np.max пропускає NaN далі, тож NaN-елемент дає NaN-норму
    return float(np.max(np.abs(data)))


def infinity_norm(vector: VectorLike) -> float:
    """
    Нескінченна норма ||v||∞.

    Parameters
    ----------
    vector : NumericVector | np.ndarray | послідовність чисел
        Для NumericVector викликається його власний infinity_norm().

    Returns
    -------
    float
        max |v_i| (0.0 для порожнього вектора, NaN якщо є NaN-елемент).
    """
    if vector is None:
        raise TypeError("Очікувався вектор, отримано None")
    if isinstance(vector, np.ndarray):
        return _array_infinity_norm(vector.ravel())
    if isinstance(vector, NumericVector):
        return float(vector.infinity_norm())
    return _array_infinity_norm(np.asarray(list(vector)).ravel())


def vector_length(vector: VectorLike) -> int:
    """Кількість елементів вектора (TypeError для None)."""
    if vector is None:
        raise TypeError("Очікувався вектор, отримано None")
    if isinstance(vector, np.ndarray):
        return int(vector.size)
    return len(vector)  # type: ignore[arg-type]


__all__ = [
    "NumericVector",
    "VectorLike",
    "DenseVector",
    "infinity_norm",
    "vector_length",
]
