"""
engine.py

Движок запуску ітераційних розв'язувачів (IterativeSolver).

Функціонал:
    - будує IterationController з налаштувань (ліміт ітерацій, поріг
      нев'язки, параметри розбіжності);
    - запускає solve() і формує трасу ітерацій (для таблиць і графіків);
    - фіксує фінальний статус, справжню нев'язку та час роботи;
    - підтримує callback для оновлення GUI / логів на кожній ітерації.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .controller import IterationController
from .divergence import DivergenceStopCriterion
from .failure import FailureStopCriterion
from .iteration_count import IterationCountStopCriterion
from .iteration_result import IterationResult
from .residual import ResidualStopCriterion
from .solver_base import IterationCallback, IterativeSolver, Preconditioner, SolverBreakdownError
from .status import IterationStatus
from .vectors import infinity_norm

logger = logging.getLogger(__name__)


@dataclass
class SolveRunResult:
    """
    Підсумок одного запуску розв'язувача.

    Атрибути:
        solver_name   - назва розв'язувача (IterativeSolver.name).
        status        - фінальний статус контролера.
        iterations    - список IterationResult (траса процесу).
        x_star        - останнє наближення.
        residual_norm - ||b - A x_star||∞.
        n_iter        - кількість виконаних ітерацій (без урахування k=0).
        elapsed       - час роботи, с.
        error         - текст збою методу (SolverBreakdownError), якщо був.
    """
    solver_name: str
    status: IterationStatus
    iterations: List[IterationResult]
    x_star: np.ndarray
    residual_norm: float
    n_iter: int
    elapsed: float
    error: Optional[str] = None
    meta: dict = field(default_factory=dict)

    @property
    def converged(self) -> bool:
        return self.status is IterationStatus.CONVERGED


class SolveEngine:
    """
    Движок, який керує запуском розв'язувача з контролером зупинки.

    Налаштування за замовчуванням (можуть бути переозначені у run()):
        max_iter            : ліміт ітерацій (default: 1000)
        tolerance           : відносний поріг нев'язки (default: 1e-10)
        min_iter_below      : скільки ітерацій нев'язка має бути під порогом (default: 0)
        divergence_increase : допустимий відносний приріст нев'язки (default: 0.08)
        divergence_window   : вікно спостереження розбіжності (default: 10)
    """

    def __init__(
        self,
        max_iter: int = 1000,
        tolerance: float = 1e-10,
        min_iter_below: int = 0,
        divergence_increase: float = DivergenceStopCriterion.DEFAULT_MAXIMUM_RELATIVE_INCREASE,
        divergence_window: int = DivergenceStopCriterion.DEFAULT_MINIMUM_NUMBER_OF_ITERATIONS,
    ) -> None:
        self.max_iter_default = max_iter
        self.tolerance_default = tolerance
        self.min_iter_below_default = min_iter_below
        self.divergence_increase_default = divergence_increase
        self.divergence_window_default = divergence_window

    def build_controller(
        self,
        max_iter: Optional[int] = None,
        tolerance: Optional[float] = None,
        min_iter_below: Optional[int] = None,
        divergence_increase: Optional[float] = None,
        divergence_window: Optional[int] = None,
    ) -> IterationController:
        """
        Контролер у типовому порядку: Failure -> Divergence -> IterationCount -> Residual.
        Некоректні параметри дають ValueError від відповідного критерію.
        """
        max_iter = max_iter if max_iter is not None else self.max_iter_default
        tolerance = tolerance if tolerance is not None else self.tolerance_default
        min_iter_below = min_iter_below if min_iter_below is not None else self.min_iter_below_default
        divergence_increase = (
            divergence_increase if divergence_increase is not None else self.divergence_increase_default
        )
        divergence_window = divergence_window if divergence_window is not None else self.divergence_window_default

        return IterationController([
            FailureStopCriterion(),
            DivergenceStopCriterion(divergence_increase, divergence_window),
            IterationCountStopCriterion(max_iter),
            ResidualStopCriterion(tolerance, min_iter_below),
        ])

    def run(
        self,
        solver: IterativeSolver,
        matrix,
        rhs,
        x0=None,
        controller: Optional[IterationController] = None,
        preconditioner: Optional[Preconditioner] = None,
        callback: Optional[IterationCallback] = None,
        **controller_options,
    ) -> SolveRunResult:
        """
        Запустити розв'язувач.

        Якщо controller не передано, він будується через build_controller(**controller_options).
        Переданий контролер використовується як є (його можна скасувати з іншого потоку).
        """
        A = np.asarray(matrix)
        b = np.asarray(rhs)
        dtype = np.result_type(A, b, np.float64)
        if x0 is None:
            x = np.zeros(b.shape, dtype=dtype)
        else:
            x = np.array(x0, dtype=np.result_type(dtype, np.asarray(x0)), copy=True)

        if controller is None:
            controller = self.build_controller(**controller_options)
        elif controller_options:
            raise ValueError("Параметри контролера не можна передавати разом з готовим контролером")

        iterations: List[IterationResult] = []

        def collect(record: IterationResult) -> None:
            iterations.append(record)
            if callback is not None:
                callback(record)

        logger.info("Старт розв'язувача %s, n = %d", solver.name, b.shape[0] if b.ndim else 0)
        error: Optional[str] = None
        started = time.perf_counter()
        try:
            status = solver.solve(A, b, x, controller, preconditioner=preconditioner, callback=collect)
        except SolverBreakdownError as exc:
            logger.warning("%s: збій методу: %s", solver.name, exc)
            status = IterationStatus.FAILURE
            error = str(exc)
        elapsed = time.perf_counter() - started

        with np.errstate(over="ignore", invalid="ignore"):
            residual_norm = infinity_norm(b - A @ x)

        result = SolveRunResult(
            solver_name=solver.name,
            status=status,
            iterations=iterations,
            x_star=x,
            residual_norm=residual_norm,
            n_iter=sum(1 for record in iterations if record.index > 0),
            elapsed=elapsed,
            error=error,
        )
        logger.info(
            "%s: %s після %d ітерацій, ||r||∞ = %.3e",
            solver.name,
            status.name,
            result.n_iter,
            residual_norm,
        )
        return result


__all__ = [
    "IterationResult",
    "SolveRunResult",
    "SolveEngine",
]
