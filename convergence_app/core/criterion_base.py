"""
criterion_base.py

Базовий клас критеріїв зупинки ітераційного процесу (Strategy).

Ідея:
    - Є абстрактний клас StopCriterion, від якого наслідуються всі критерії:
        * IterationCountStopCriterion  – ліміт ітерацій
        * ResidualStopCriterion        – поріг нев'язки
        * DivergenceStopCriterion      – тренд розбіжності
        * FailureStopCriterion         – NaN у розв'язку / нев'язці
        * CancellationStopCriterion    – зовнішнє скасування
        * DelegateStopCriterion        – довільна функція користувача
    - Кожен критерій реалізує _determine_status_impl(), а контролер
      викликає determine_status().

Формат:
    determine_status(iteration_number, solution, source, residual) -> IterationStatus

Конфігурація (пороги, вікна) відокремлена від стану прогресу (лічильники,
історія, останній статус): reset() чистить лише стан прогресу, clone()
копіює лише конфігурацію.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .status import IterationStatus, StopLevel
from .vectors import VectorLike, vector_length


# ---------------------------------------------------------------------------
# Спільні перевірки аргументів
# ---------------------------------------------------------------------------

def check_iteration_number(iteration_number: int) -> None:
    """ValueError, якщо номер ітерації від'ємний."""
    if iteration_number < 0:
        raise ValueError(
            f"iteration_number має бути невід'ємним, отримано: {iteration_number}"
        )


def check_same_length(first: VectorLike, second: VectorLike, name: str) -> None:
    """ValueError, якщо вектори мають різну довжину (TypeError для None)."""
    if vector_length(first) != vector_length(second):
        raise ValueError(
            f"Вектори повинні мати однакову довжину: '{name}' має "
            f"{vector_length(second)} елементів замість {vector_length(first)}"
        )


# ---------------------------------------------------------------------------
# Базовий клас StopCriterion (Strategy)
# ---------------------------------------------------------------------------

class StopCriterion(ABC):
    """
    Абстрактний базовий клас для всіх критеріїв зупинки.

    Кожен конкретний критерій:
        - наслідується від StopCriterion;
        - реалізує _determine_status_impl(), _reset_progress() та clone();
        - задає stop_level.

    Використання:
        crit = ResidualStopCriterion(maximum=1e-8)
        crit.reset()
        status = crit.determine_status(k, x_k, b, r_k)  # IterationStatus
    """

    # Стан "до першого виклику" (може бути переозначений у дочірніх класах)
    initial_status: IterationStatus = IterationStatus.INDETERMINATE

    stop_level: StopLevel = StopLevel.CUSTOM

    def __init__(self) -> None:
        self._status: IterationStatus = self.initial_status

    # ------------------------------------------------------------------
    # Публічний інтерфейс
    # ------------------------------------------------------------------

    @property
    def status(self) -> IterationStatus:
        """Останній обчислений стан критерію."""
        return self._status

    def determine_status(
        self,
        iteration_number: int,
        solution: VectorLike,
        source: VectorLike,
        residual: VectorLike,
    ) -> IterationStatus:
        """
        Оцінити стан ітерації iteration_number.

        Parameters
        ----------
        iteration_number : int
            Номер поточної ітерації (>= 0).
        solution : VectorLike
            Поточне наближення x_k.
        source : VectorLike
            Права частина b.
        residual : VectorLike
            Нев'язка r_k = b - A x_k.

        Returns
        -------
        IterationStatus
            Новий стан критерію (він же доступний через status).
        """
        result = self._determine_status_impl(iteration_number, solution, source, residual)

        if not isinstance(result, IterationStatus):
            raise TypeError(
                f"{self.__class__.__name__}._determine_status_impl() "
                f"повинен повертати IterationStatus, отримано: {type(result)}"
            )

        self._status = result
        return result

    def reset(self) -> None:
        """
        Скинути стан прогресу (лічильники, історію, статус) перед новим
        запуском. Конфігурація не змінюється.
        """
        self._status = self.initial_status
        self._reset_progress()

    # ------------------------------------------------------------------
    # Абстрактні методи, які реалізують конкретні критерії
    # ------------------------------------------------------------------

    @abstractmethod
    def _determine_status_impl(
        self,
        iteration_number: int,
        solution: VectorLike,
        source: VectorLike,
        residual: VectorLike,
    ) -> IterationStatus:
        raise NotImplementedError

    def _reset_progress(self) -> None:
        """Очистити внутрішні лічильники (за замовчуванням нічого)."""

    @abstractmethod
    def clone(self) -> "StopCriterion":
        """Нова копія з тією ж конфігурацією та "свіжим" станом прогресу."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status={self._status.name})"


class TrackedStopCriterion(StopCriterion):
    """
    Критерій, що пам'ятає номер останньої обробленої ітерації.

    Виклик з номером ітерації, не більшим за останній оброблений,
    вважається вже врахованим: повертається попередній статус,
    внутрішні лічильники не змінюються.
    """

    def __init__(self) -> None:
        super().__init__()
        self._last_iteration: Optional[int] = None

    @property
    def last_iteration(self) -> Optional[int]:
        return self._last_iteration

    def _already_processed(self, iteration_number: int) -> bool:
        return self._last_iteration is not None and iteration_number <= self._last_iteration

    def reset(self) -> None:
        self._last_iteration = None
        super().reset()


__all__ = [
    "StopCriterion",
    "TrackedStopCriterion",
    "check_iteration_number",
    "check_same_length",
]
