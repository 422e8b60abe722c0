"""
residual.py

Критерій збіжності за нев'язкою.

Ідея:
    stop_bound = maximum * ||b||∞

    - якщо stop_bound або ||r_k||∞ дорівнює NaN: DIVERGED (лічильник скидається);
    - якщо ||r_k||∞ <= stop_bound: запам'ятовуємо ітерацію, на якій нев'язка
      вперше опустилася нижче порогу; коли з того моменту минуло не менше
      minimum_iterations_below_maximum ітерацій: CONVERGED, інакше CONTINUE;
    - якщо нев'язка знову піднялася вище порогу: лічильник скидається, CONTINUE.

Повторний виклик з номером ітерації, не більшим за останній оброблений,
повертає попередній статус і не просуває лічильник.
"""

from __future__ import annotations

import math
from typing import Optional

from .criterion_base import TrackedStopCriterion, check_iteration_number, check_same_length
from .status import IterationStatus, StopLevel
from .vectors import VectorLike, infinity_norm


class ResidualStopCriterion(TrackedStopCriterion):
    """
    Зупинка, коли нев'язка стабільно менша за відносний поріг.

    Налаштування:
        maximum                          : float >= 0, відносний поріг
                                           нев'язки (default: 1e-12)
        minimum_iterations_below_maximum : int >= 0, скільки ітерацій
                                           нев'язка має залишатися нижче
                                           порогу (default: 0)
    """

    DEFAULT_MAXIMUM_RESIDUAL: float = 1e-12
    DEFAULT_MINIMUM_ITERATIONS_BELOW_MAXIMUM: int = 0

    stop_level = StopLevel.CONVERGENCE

    def __init__(
        self,
        maximum: float = DEFAULT_MAXIMUM_RESIDUAL,
        minimum_iterations_below_maximum: int = DEFAULT_MINIMUM_ITERATIONS_BELOW_MAXIMUM,
    ) -> None:
        self._maximum = self._validate_maximum(maximum)
        self._minimum_below = self._validate_minimum_below(minimum_iterations_below_maximum)

        # Ітерація, на якій нев'язка вперше опустилася нижче порогу
        self._first_below: Optional[int] = None
        self._iteration_count: int = 0
        super().__init__()

    # ------------------------------------------------------------------
    # Конфігурація
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_maximum(value: float) -> float:
        value = float(value)
        if math.isnan(value) or value < 0.0:
            raise ValueError(f"maximum має бути невід'ємним, отримано: {value}")
        return value

    @staticmethod
    def _validate_minimum_below(value: int) -> int:
        if int(value) != value or value < 0:
            raise ValueError(
                f"minimum_iterations_below_maximum має бути цілим >= 0, отримано: {value}"
            )
        return int(value)

    @property
    def maximum(self) -> float:
        return self._maximum

    @maximum.setter
    def maximum(self, value: float) -> None:
        self._maximum = self._validate_maximum(value)

    @property
    def minimum_iterations_below_maximum(self) -> int:
        return self._minimum_below

    @minimum_iterations_below_maximum.setter
    def minimum_iterations_below_maximum(self, value: int) -> None:
        self._minimum_below = self._validate_minimum_below(value)

    def reset_maximum_to_default(self) -> None:
        self._maximum = self.DEFAULT_MAXIMUM_RESIDUAL

    def reset_minimum_iterations_below_maximum_to_default(self) -> None:
        self._minimum_below = self.DEFAULT_MINIMUM_ITERATIONS_BELOW_MAXIMUM

    # ------------------------------------------------------------------
    # Стан прогресу
    # ------------------------------------------------------------------

    @property
    def iterations_below_maximum(self) -> int:
        """Скільки ітерацій минуло з моменту, коли нев'язка опустилася нижче порогу."""
        return self._iteration_count

    def _reset_progress(self) -> None:
        self._first_below = None
        self._iteration_count = 0

    # ------------------------------------------------------------------
    # Оцінка
    # ------------------------------------------------------------------

    def _determine_status_impl(
        self,
        iteration_number: int,
        solution: VectorLike,
        source: VectorLike,
        residual: VectorLike,
    ) -> IterationStatus:
        check_iteration_number(iteration_number)
        check_same_length(solution, source, "source")
        check_same_length(solution, residual, "residual")

        if self._already_processed(iteration_number):
            return self._status

        residual_norm = infinity_norm(residual)
        stop_bound = self._maximum * infinity_norm(source)

        self._last_iteration = iteration_number

        if math.isnan(stop_bound) or math.isnan(residual_norm):
            self._reset_progress()
            return IterationStatus.DIVERGED

        if residual_norm <= stop_bound:
            if self._first_below is None:
                self._first_below = iteration_number
            self._iteration_count = iteration_number - self._first_below

            if self._iteration_count >= self._minimum_below:
                return IterationStatus.CONVERGED
            return IterationStatus.CONTINUE

        # Нев'язка знову вище порогу: починаємо відлік заново
        self._reset_progress()
        return IterationStatus.CONTINUE

    def clone(self) -> "ResidualStopCriterion":
        return ResidualStopCriterion(self._maximum, self._minimum_below)

    def __repr__(self) -> str:
        return (
            f"ResidualStopCriterion(maximum={self._maximum!r}, "
            f"minimum_iterations_below_maximum={self._minimum_below}, "
            f"status={self._status.name})"
        )


__all__ = ["ResidualStopCriterion"]
