"""
controller.py

Контролер ітераційного процесу: композиція кількох критеріїв зупинки
в одне рішення на кожній ітерації.

Алгоритм determine_status(k, x_k, b, r_k):
    1) ValueError, якщо критеріїв немає, k < 0 або довжини x_k, b, r_k
       різні; у цих випадках жоден критерій не змінює свого стану;
    2) якщо піднятий "липкий" прапорець скасування: одразу CANCELLED,
       критерії не опитуються;
    3) критерії опитуються в порядку реєстрації; перший термінальний
       вердикт стає статусом контролера, решта критеріїв для цього
       виклику не опитуються;
    4) якщо всі вердикти нетермінальні: RUNNING.

cancel() можна викликати з іншого потоку; прапорець тримається до reset().
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional, Tuple

from .criterion_base import StopCriterion, check_iteration_number, check_same_length
from .divergence import DivergenceStopCriterion
from .failure import FailureStopCriterion
from .iteration_count import IterationCountStopCriterion
from .residual import ResidualStopCriterion
from .status import IterationStatus
from .vectors import VectorLike

logger = logging.getLogger(__name__)


class IterationController:
    """
    Впорядкований набір критеріїв зупинки + липке скасування.

    Використання:
        controller = IterationController([
            FailureStopCriterion(),
            IterationCountStopCriterion(500),
            ResidualStopCriterion(1e-10),
        ])
        k = 0
        while True:
            ...  # крок розв'язувача: x_k, r_k
            status = controller.determine_status(k, x_k, b, r_k)
            if status.terminates_calculation:
                break
            k += 1
    """

    def __init__(self, criteria: Optional[Iterable[Optional[StopCriterion]]] = None) -> None:
        owned = []
        for criterion in criteria or ():
            if criterion is None:
                continue
            if not isinstance(criterion, StopCriterion):
                raise TypeError(
                    f"Очікувався StopCriterion, отримано: {type(criterion)}"
                )
            owned.append(criterion)

        self._criteria: Tuple[StopCriterion, ...] = tuple(owned)
        self._status: IterationStatus = IterationStatus.INDETERMINATE
        self._cancelled = threading.Event()

    @classmethod
    def create_default(cls) -> "IterationController":
        """
        Типовий ланцюжок критеріїв із налаштуваннями за замовчуванням:
            Failure -> Divergence -> IterationCount -> Residual
        """
        return cls([
            FailureStopCriterion(),
            DivergenceStopCriterion(),
            IterationCountStopCriterion(),
            ResidualStopCriterion(),
        ])

    # ------------------------------------------------------------------
    # Склад
    # ------------------------------------------------------------------

    @property
    def criteria(self) -> Tuple[StopCriterion, ...]:
        return self._criteria

    def __len__(self) -> int:
        return len(self._criteria)

    def __contains__(self, criterion: object) -> bool:
        return any(c is criterion for c in self._criteria)

    def __iter__(self):
        return iter(self._criteria)

    # ------------------------------------------------------------------
    # Статус
    # ------------------------------------------------------------------

    @property
    def status(self) -> IterationStatus:
        if self._cancelled.is_set():
            return IterationStatus.CANCELLED
        return self._status

    @property
    def has_converged(self) -> bool:
        return self.status is IterationStatus.CONVERGED

    @property
    def has_stopped_without_convergence(self) -> bool:
        return self.status is IterationStatus.STOPPED_WITHOUT_CONVERGENCE

    @property
    def has_diverged(self) -> bool:
        return self.status is IterationStatus.DIVERGED

    @property
    def has_failed(self) -> bool:
        return self.status is IterationStatus.FAILURE

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    # ------------------------------------------------------------------
    # Головний метод
    # ------------------------------------------------------------------

    def determine_status(
        self,
        iteration_number: int,
        solution: VectorLike,
        source: VectorLike,
        residual: VectorLike,
    ) -> IterationStatus:
        """
        Оцінити ітерацію iteration_number усіма критеріями по черзі.

        Returns
        -------
        IterationStatus
            Перший термінальний вердикт або RUNNING.
        """
        if not self._criteria:
            raise ValueError("Контролер не містить жодного критерію зупинки")
        check_iteration_number(iteration_number)
        # Довжини перевіряються до опитування: некоректний виклик не змінює стан критеріїв
        check_same_length(solution, source, "source")
        check_same_length(solution, residual, "residual")

        if self._cancelled.is_set():
            self._set_status(IterationStatus.CANCELLED, iteration_number)
            return IterationStatus.CANCELLED

        for criterion in self._criteria:
            verdict = criterion.determine_status(iteration_number, solution, source, residual)
            if not verdict.terminates_calculation:
                continue

            if verdict is IterationStatus.CANCELLED:
                # Скасування від критерію теж "липке"
                self._cancelled.set()

            logger.debug(
                "Ітерація %d: %s зупиняє обчислення зі статусом %s",
                iteration_number,
                criterion.__class__.__name__,
                verdict.name,
            )
            self._set_status(verdict, iteration_number)
            return verdict

        self._set_status(IterationStatus.RUNNING, iteration_number)
        return IterationStatus.RUNNING

    def _set_status(self, status: IterationStatus, iteration_number: int) -> None:
        if status is not self._status:
            logger.debug(
                "Статус контролера: %s -> %s (ітерація %d)",
                self._status.name,
                status.name,
                iteration_number,
            )
        self._status = status

    # ------------------------------------------------------------------
    # Життєвий цикл
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """
        Скасувати обчислення. Безпечно з іншого потоку; стан критеріїв
        не змінюється. Діє до наступного reset().
        """
        if not self._cancelled.is_set():
            logger.info("Запит на скасування ітераційного процесу")
        self._cancelled.set()

    def reset(self) -> None:
        """Зняти скасування і скинути всі критерії до стану перед обчисленням."""
        self._cancelled.clear()
        self._status = IterationStatus.INDETERMINATE
        for criterion in self._criteria:
            criterion.reset()

    def clone(self) -> "IterationController":
        """Новий контролер над глибокими копіями критеріїв (без скасування)."""
        return IterationController([criterion.clone() for criterion in self._criteria])

    def __repr__(self) -> str:
        names = ", ".join(c.__class__.__name__ for c in self._criteria)
        return f"IterationController([{names}], status={self.status.name})"


__all__ = ["IterationController"]
