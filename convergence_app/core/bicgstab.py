"""
bicgstab.py

Стабілізований метод бі-спряжених градієнтів (BiCGStab) з правим
передобумовленням. Працює і для несиметричних матриць.

Ідея (r~ = r_0):
    ρ_k   = (r~, r_k)
    β     = (ρ_k / ρ_{k-1}) (α / ω)
    p     = r_k + β (p - ω ν)
    p^    = M^{-1} p,     ν = A p^
    α     = ρ_k / (r~, ν)
    s     = r_k - α ν
    s^    = M^{-1} s,     t = A s^
    ω     = (t, s) / (t, t)
    x    += α p^ + ω s^

Зупинки за збоєм методу (SolverBreakdownError):
    ρ_k = 0, (r~, ν) = 0, ω = 0 для нетермінальної ітерації.
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


class BiCgStabSolver(IterativeSolver):
    """BiCGStab: основний розв'язувач для несиметричних систем."""

    def __init__(self, name: Optional[str] = None) -> None:
        super().__init__(name=name or "BiCGStab")

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
        shadow = residual.copy()

        k = 0
        status = self._check(controller, k, x, rhs, residual, callback)

        direction = np.zeros_like(residual)
        nu = np.zeros_like(residual)
        rho_old = alpha = omega = 1.0

        while not status.terminates_calculation:
            rho = np.vdot(shadow, residual)
            if is_numerically_zero(rho):
                raise SolverBreakdownError(f"ρ = 0 на ітерації {k} (rho-breakdown)")

            with np.errstate(over="ignore", invalid="ignore"):
                if k == 0:
                    direction = residual.copy()
                else:
                    beta = (rho / rho_old) * (alpha / omega)
                    direction = residual + beta * (direction - omega * nu)

                direction_hat = preconditioner.approximate(direction)
                nu = matrix @ direction_hat

                denominator = np.vdot(shadow, nu)
                if is_numerically_zero(denominator):
                    raise SolverBreakdownError(f"(r~, ν) = 0 на ітерації {k}")
                alpha = rho / denominator

                s = residual - alpha * nu
                s_hat = preconditioner.approximate(s)
                t = matrix @ s_hat

                tt = np.vdot(t, t).real
                omega = np.vdot(t, s) / tt if not is_numerically_zero(tt) else 0.0

                x += alpha * direction_hat + omega * s_hat

            residual = self.calculate_true_residual(matrix, x, rhs)
            k += 1
            status = self._check(controller, k, x, rhs, residual, callback)
            if status.terminates_calculation:
                break

            # Для продовження потрібно ω != 0
            if is_numerically_zero(omega):
                raise SolverBreakdownError(f"ω = 0 на ітерації {k} (omega-breakdown)")
            rho_old = rho

        return status


__all__ = ["BiCgStabSolver"]
