"""
composite.py

Композитний розв'язувач: перебирає налаштування з реєстру в порядку
рангу, поки одне з них не зійдеться.

Правила переходу між спробами:
    - кожна спроба отримує controller.clone() (свіжий стан критеріїв);
    - CONVERGED                   -> результат копіюється, перебір завершено;
    - CANCELLED                   -> перебір завершено;
    - STOPPED_WITHOUT_CONVERGENCE -> наближення зберігається і стає
                                     стартовим для наступної спроби;
    - DIVERGED / FAILURE / збій   -> наступна спроба стартує з попереднього
                                     стартового наближення.

Скасування зовнішнього контролера (cancel() з GUI або скасований
CancellationStopCriterion у його складі) передається в
контролер поточної спроби на найближчій ітерації.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .controller import IterationController
from .iteration_result import IterationResult
from .registry import SolverFactory, SolverSetup, available_setups
from .solver_base import IterationCallback, IterativeSolver, Preconditioner, SolverBreakdownError
from .status import IterationStatus

logger = logging.getLogger(__name__)


class CompositeSolver(IterativeSolver):
    """
    Parameters
    ----------
    setups : Optional[Sequence[SolverSetup]]
        Явний порядок спроб. Якщо None: available_setups(exclude).
    exclude : Iterable[str | клас розв'язувача]
        Що не брати з реєстру (лише коли setups не задано).
    """

    def __init__(
        self,
        setups: Optional[Sequence[SolverSetup]] = None,
        exclude: Iterable[Union[str, SolverFactory]] = (),
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name=name or "Композитний")
        if setups is None:
            setups = available_setups(exclude)
        self._setups: Tuple[SolverSetup, ...] = tuple(setups)
        if not self._setups:
            raise ValueError("CompositeSolver потребує хоча б одного налаштування розв'язувача")

        self.attempts: List[Tuple[str, IterationStatus]] = []

    @property
    def setups(self) -> Tuple[SolverSetup, ...]:
        return self._setups

    def _solve_impl(
        self,
        matrix: np.ndarray,
        rhs: np.ndarray,
        x: np.ndarray,
        controller: IterationController,
        preconditioner: Preconditioner,
        callback: Optional[IterationCallback],
    ) -> IterationStatus:
        # Передобумовлювач кожна спроба бере зі свого налаштування
        self.attempts = []
        start = x.copy()
        status = IterationStatus.INDETERMINATE

        for attempt, setup in enumerate(self._setups):
            if _cancel_requested(controller):
                status = IterationStatus.CANCELLED
                break

            attempt_controller = controller.clone()
            relay = self._make_relay(controller, attempt_controller, callback, attempt)
            attempt_x = start.copy()
            solver = setup.create_solver()

            logger.info("Спроба %d: %s", attempt + 1, setup.name)
            try:
                status = solver.solve(
                    matrix,
                    rhs,
                    attempt_x,
                    attempt_controller,
                    preconditioner=setup.create_preconditioner(),
                    callback=relay,
                )
            except SolverBreakdownError as exc:
                logger.warning("%s: збій методу (%s), переходимо до наступного", setup.name, exc)
                status = IterationStatus.FAILURE
                self.attempts.append((setup.key, status))
                continue

            self.attempts.append((setup.key, status))
            logger.info("Спроба %d (%s) завершилась зі статусом %s", attempt + 1, setup.name, status.name)

            if status is IterationStatus.CONVERGED:
                x[...] = attempt_x
                break
            if status is IterationStatus.CANCELLED:
                break
            if status is IterationStatus.STOPPED_WITHOUT_CONVERGENCE:
                x[...] = attempt_x
                start = attempt_x

        return status

    @staticmethod
    def _make_relay(
        outer: IterationController,
        inner: IterationController,
        callback: Optional[IterationCallback],
        attempt: int,
    ) -> IterationCallback:
        def relay(record: IterationResult) -> None:
            if _cancel_requested(outer):
                inner.cancel()
            record.meta["attempt"] = attempt + 1
            if callback is not None:
                callback(record)

        return relay


def _cancel_requested(controller: IterationController) -> bool:
    """Липкий прапорець контролера або скасований критерій у його складі."""
    if controller.is_cancelled:
        return True
    return any(c.status is IterationStatus.CANCELLED for c in controller.criteria)


__all__ = ["CompositeSolver"]
