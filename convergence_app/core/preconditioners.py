"""
preconditioners.py

Прості передобумовлювачі для ітераційних розв'язувачів:
    - UnitPreconditioner     : M = I (z = r);
    - DiagonalPreconditioner : M = diag(A) (передобумовлювач Якобі).
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .solver_base import Preconditioner, SolverBreakdownError


class UnitPreconditioner(Preconditioner):
    """Одиничний передобумовлювач: approximate(r) повертає копію r."""

    def __init__(self) -> None:
        self._size: Optional[int] = None

    def initialize(self, matrix: np.ndarray) -> None:
        matrix = np.asarray(matrix)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"Матриця повинна бути квадратною, отримано форму {matrix.shape}")
        self._size = matrix.shape[0]

    def approximate(self, rhs: np.ndarray) -> np.ndarray:
        if self._size is None:
            raise RuntimeError("Передобумовлювач не ініціалізований: викличте initialize()")
        rhs = np.asarray(rhs)
        if rhs.shape != (self._size,):
            raise ValueError(f"Очікувався вектор довжини {self._size}, отримано {rhs.shape}")
        return rhs.copy()


class DiagonalPreconditioner(Preconditioner):
    """
    Передобумовлювач Якобі: z_i = r_i / a_ii.

    Нульовий елемент на діагоналі: SolverBreakdownError під час initialize().
    """

    def __init__(self) -> None:
        self._inverse_diagonal: Optional[np.ndarray] = None

    @property
    def inverse_diagonal(self) -> Optional[np.ndarray]:
        return self._inverse_diagonal

    def initialize(self, matrix: np.ndarray) -> None:
        matrix = np.asarray(matrix)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"Матриця повинна бути квадратною, отримано форму {matrix.shape}")

        diagonal = np.diag(matrix)
        zero = np.flatnonzero(diagonal == 0)
        if zero.size:
            raise SolverBreakdownError(
                f"Нульовий діагональний елемент у рядку {int(zero[0])}: "
                "передобумовлювач Якобі неможливий"
            )
        self._inverse_diagonal = 1.0 / diagonal

    def approximate(self, rhs: np.ndarray) -> np.ndarray:
        if self._inverse_diagonal is None:
            raise RuntimeError("Передобумовлювач не ініціалізований: викличте initialize()")
        rhs = np.asarray(rhs)
        if rhs.shape != self._inverse_diagonal.shape:
            raise ValueError(
                f"Очікувався вектор довжини {self._inverse_diagonal.shape[0]}, "
                f"отримано {rhs.shape}"
            )
        return self._inverse_diagonal * rhs


__all__ = [
    "UnitPreconditioner",
    "DiagonalPreconditioner",
]
