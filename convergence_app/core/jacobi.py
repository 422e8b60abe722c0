"""
jacobi.py

Метод Якобі як передобумовлена ітерація Річардсона:
    x_{k+1} = x_k + D^{-1} (b - A x_k),   D = diag(A)

Збігається для матриць з діагональною перевагою; для інших матриць
нев'язка може зростати: це ловить DivergenceStopCriterion.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .controller import IterationController
from .preconditioners import DiagonalPreconditioner
from .solver_base import IterationCallback, IterativeSolver, Preconditioner
from .status import IterationStatus


class JacobiSolver(IterativeSolver):
    """
    Метод Якобі. За замовчуванням використовує DiagonalPreconditioner;
    з UnitPreconditioner стає звичайною ітерацією Річардсона.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        super().__init__(name=name or "Якобі")

    def create_default_preconditioner(self) -> Preconditioner:
        return DiagonalPreconditioner()

    def _solve_impl(
        self,
        matrix: np.ndarray,
        rhs: np.ndarray,
        x: np.ndarray,
        controller: IterationController,
        preconditioner: Preconditioner,
        callback: Optional[IterationCallback],
    ) -> IterationStatus:
        residual = self.calculate_true_residual(matrix, x, rhs)

        k = 0
        status = self._check(controller, k, x, rhs, residual, callback)
        while not status.terminates_calculation:
            with np.errstate(over="ignore", invalid="ignore"):
                x += preconditioner.approximate(residual)
            residual = self.calculate_true_residual(matrix, x, rhs)

            k += 1
            status = self._check(controller, k, x, rhs, residual, callback)

        return status


__all__ = ["JacobiSolver"]
