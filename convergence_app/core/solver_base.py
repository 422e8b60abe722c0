"""
solver_base.py

Базові класи та типи для ітераційних розв'язувачів лінійних систем A x = b
(Strategy).

Ідея:
    - Є абстрактний клас IterativeSolver, від якого наслідуються всі методи:
        * ConjugateGradientSolver
        * BiCgStabSolver
        * JacobiSolver
        * CompositeSolver
    - Кожен метод реалізує _solve_impl(), а користувач/движок викликає solve().
    - Після кожної ітерації розв'язувач питає контролер, чи продовжувати
      (IterationController.determine_status), і зупиняється на першому
      термінальному статусі.

Формат:
    solve(matrix, rhs, result, controller, preconditioner=None, callback=None)
        -> IterationStatus
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from .controller import IterationController
from .iteration_result import IterationResult
from .status import IterationStatus
from .vectors import infinity_norm

# Тип callback'а для GUI/логів
IterationCallback = Callable[[IterationResult], None]


class SolverBreakdownError(RuntimeError):
    """Чисельний збій методу (ділення на ~0, невизначена кривизна, ...)."""


def is_numerically_zero(value: complex) -> bool:
    """True, якщо |value| не перевищує найменшого нормалізованого числа."""
    return abs(value) <= np.finfo(float).tiny


# ---------------------------------------------------------------------------
# Передобумовлювач (інтерфейс)
# ---------------------------------------------------------------------------

class Preconditioner(ABC):
    """
    Наближення M ≈ A, для якого легко розв'язати M z = r.

    Використання:
        pre.initialize(A)
        z = pre.approximate(r)
    """

    @abstractmethod
    def initialize(self, matrix: np.ndarray) -> None:
        raise NotImplementedError

    @abstractmethod
    def approximate(self, rhs: np.ndarray) -> np.ndarray:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Базовий клас IterativeSolver (Strategy)
# ---------------------------------------------------------------------------

class IterativeSolver(ABC):
    """
    Абстрактний базовий клас для всіх ітераційних розв'язувачів.

    Кожен конкретний метод:
        - наслідується від IterativeSolver;
        - реалізує _solve_impl();
        - за потреби переозначає create_default_preconditioner().

    Використання:
        solver = ConjugateGradientSolver()
        x = np.zeros(n)
        status = solver.solve(A, b, x, IterationController.create_default())
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name: str = name or self.__class__.__name__

    # ------------------------------------------------------------------
    # Сервісні методи
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_true_residual(matrix: np.ndarray, x: np.ndarray, rhs: np.ndarray) -> np.ndarray:
        """r = b - A x."""
        with np.errstate(over="ignore", invalid="ignore"):
            return rhs - matrix @ x

    def create_default_preconditioner(self) -> Preconditioner:
        """Передобумовлювач, якщо користувач не передав свого (одиничний)."""
        from .preconditioners import UnitPreconditioner

        return UnitPreconditioner()

    def _check(
        self,
        controller: IterationController,
        iteration_number: int,
        x: np.ndarray,
        rhs: np.ndarray,
        residual: np.ndarray,
        callback: Optional[IterationCallback],
    ) -> IterationStatus:
        """Запитати контролер про стан ітерації та повідомити callback."""
        status = controller.determine_status(iteration_number, x, rhs, residual)

        if callback is not None:
            callback(
                IterationResult(
                    index=iteration_number,
                    x=x.copy(),
                    residual_norm=infinity_norm(residual),
                    solution_norm=infinity_norm(x),
                    status=status,
                    solver_name=self.name,
                )
            )
        return status

    # ------------------------------------------------------------------
    # Головний публічний метод solve()
    # ------------------------------------------------------------------

    def solve(
        self,
        matrix,
        rhs,
        result: np.ndarray,
        controller: IterationController,
        preconditioner: Optional[Preconditioner] = None,
        callback: Optional[IterationCallback] = None,
    ) -> IterationStatus:
        """
        Розв'язати A x = b, починаючи з наближення result.

        Parameters
        ----------
        matrix : array-like (n, n)
            Квадратна матриця A.
        rhs : array-like (n,)
            Права частина b.
        result : np.ndarray (n,)
            Початкове наближення; останнє наближення записується сюди ж.
        controller : IterationController
            Вирішує, коли зупинитися.
        preconditioner : Optional[Preconditioner]
            Якщо None: create_default_preconditioner().
        callback : Optional[IterationCallback]
            Викликається після кожної перевірки контролером.

        Returns
        -------
        IterationStatus
            Фінальний статус контролера.
        """
        if controller is None:
            raise TypeError("Потрібен IterationController, отримано None")
        if rhs is None or result is None:
            raise TypeError("rhs та result не можуть бути None")

        A = np.asarray(matrix)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise ValueError(f"Матриця повинна бути квадратною, отримано форму {A.shape}")

        b = np.asarray(rhs)
        if b.ndim != 1 or b.shape[0] != A.shape[0]:
            raise ValueError(
                f"Довжина правої частини ({b.shape}) не відповідає матриці {A.shape}"
            )
        if not isinstance(result, np.ndarray) or result.shape != b.shape:
            raise ValueError("result має бути numpy-вектором тієї ж довжини, що й rhs")

        dtype = np.result_type(A, b, result, np.float64)
        A = A.astype(dtype, copy=False)
        b = b.astype(dtype, copy=False)
        x = result.astype(dtype, copy=True)

        if preconditioner is None:
            preconditioner = self.create_default_preconditioner()
        preconditioner.initialize(A)

        status = self._solve_impl(A, b, x, controller, preconditioner, callback)

        if not isinstance(status, IterationStatus):
            raise TypeError(
                f"{self.__class__.__name__}._solve_impl() "
                f"повинен повертати IterationStatus, отримано: {type(status)}"
            )

        result[...] = x
        return status

    # ------------------------------------------------------------------
    # Абстрактний метод, який реалізують конкретні стратегії
    # ------------------------------------------------------------------

    @abstractmethod
    def _solve_impl(
        self,
        matrix: np.ndarray,
        rhs: np.ndarray,
        x: np.ndarray,
        controller: IterationController,
        preconditioner: Preconditioner,
        callback: Optional[IterationCallback],
    ) -> IterationStatus:
        """
        Ітераційний цикл методу. x змінюється на місці.

        Returns
        -------
        IterationStatus
            Статус, на якому цикл зупинився.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


__all__ = [
    "IterationCallback",
    "SolverBreakdownError",
    "Preconditioner",
    "IterativeSolver",
    "is_numerically_zero",
]
