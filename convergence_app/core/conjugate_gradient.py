"""
conjugate_gradient.py

Передобумовлений метод спряжених градієнтів (PCG) як стратегія
IterativeSolver. Призначений для симетричних додатно визначених матриць.

Ідея:
    r_0 = b - A x_0,  z_0 = M^{-1} r_0,  p_0 = z_0
    α_k = (r_k, z_k) / (p_k, A p_k)
    x_{k+1} = x_k + α_k p_k
    r_{k+1} = b - A x_{k+1}
    β_k = (r_{k+1}, z_{k+1}) / (r_k, z_k)
    p_{k+1} = z_{k+1} + β_k p_k

(p_k, A p_k) <= 0 означає, що матриця не є додатно визначеною -
SolverBreakdownError.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .controller import IterationController
from .solver_base import (
    IterationCallback,
    IterativeSolver,
    Preconditioner,
    SolverBreakdownError,
    is_numerically_zero,
)
from .status import IterationStatus


class ConjugateGradientSolver(IterativeSolver):
    """
    Метод спряжених градієнтів.

    Особливості:
        - контролер отримує справжню нев'язку b - A x_k на кожній ітерації;
        - при невизначеній кривизні або нульовому (r, z): SolverBreakdownError.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        super().__init__(name=name or "Спряжені градієнти (CG)")

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
        if status.terminates_calculation:
            return status

        z = preconditioner.approximate(residual)
        direction = z.copy()
        rz = np.vdot(residual, z)

        while True:
            with np.errstate(over="ignore", invalid="ignore"):
                a_direction = matrix @ direction
                curvature = np.vdot(direction, a_direction).real

            if not curvature > 0.0:
                raise SolverBreakdownError(
                    f"Невизначена кривизна (p, Ap) = {curvature:.3e} на ітерації {k}: "
                    "матриця не є симетричною додатно визначеною"
                )

            alpha = rz / curvature
            with np.errstate(over="ignore", invalid="ignore"):
                x += alpha * direction
            residual = self.calculate_true_residual(matrix, x, rhs)

            k += 1
            status = self._check(controller, k, x, rhs, residual, callback)
            if status.terminates_calculation:
                return status

            if is_numerically_zero(rz):
                raise SolverBreakdownError(f"(r, z) = 0 на ітерації {k}")

            z = preconditioner.approximate(residual)
            rz_new = np.vdot(residual, z)
            beta = rz_new / rz
            with np.errstate(over="ignore", invalid="ignore"):
                direction = z + beta * direction
            rz = rz_new


__all__ = ["ConjugateGradientSolver"]
