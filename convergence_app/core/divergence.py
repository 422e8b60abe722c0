"""
divergence.py

Критерій розбіжності за трендом нев'язки.

Ідея:
    - зберігаємо буфер фіксованої довжини window + 1 з ||r_k||∞ останніх
      прийнятих ітерацій (найстаріше значення витісняється, нове дописується
      в кінець);
    - NaN у новій нормі: одразу DIVERGED;
    - розбіжність фіксується лише тоді, коли буфер повністю заповнений і
      для КОЖНОЇ сусідньої пари (prev, cur):
            cur >= prev   та   cur > prev * (1 + maximum_relative_increase);
    - одна "погана" пара (спадання або приріст у межах допуску): CONTINUE.

Виклик з номером ітерації, не більшим за останній оброблений, ігнорується.
"""

from __future__ import annotations

import math

import numpy as np

from .criterion_base import TrackedStopCriterion, check_iteration_number
from .status import IterationStatus, StopLevel
from .vectors import VectorLike, infinity_norm


class DivergenceStopCriterion(TrackedStopCriterion):
    """
    Зупинка, коли нев'язка монотонно і відчутно зростає протягом
    minimum_number_of_iterations ітерацій поспіль.

    Налаштування:
        maximum_relative_increase   : float > 0, допустимий відносний приріст
                                      нев'язки за одну ітерацію (default: 0.08)
        minimum_number_of_iterations: int >= 3, ширина вікна спостереження
                                      (default: 10)
    """

    DEFAULT_MAXIMUM_RELATIVE_INCREASE: float = 0.08
    DEFAULT_MINIMUM_NUMBER_OF_ITERATIONS: int = 10
    MINIMUM_WINDOW: int = 3

    stop_level = StopLevel.DIVERGENCE

    def __init__(
        self,
        maximum_relative_increase: float = DEFAULT_MAXIMUM_RELATIVE_INCREASE,
        minimum_number_of_iterations: int = DEFAULT_MINIMUM_NUMBER_OF_ITERATIONS,
    ) -> None:
        self._maximum_increase = self._validate_increase(maximum_relative_increase)
        self._window = self._validate_window(minimum_number_of_iterations)

        self._history: np.ndarray = np.zeros(self._window + 1, dtype=float)
        self._accepted: int = 0
        super().__init__()

    # ------------------------------------------------------------------
    # Конфігурація
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_increase(value: float) -> float:
        value = float(value)
        if math.isnan(value) or value <= 0.0:
            raise ValueError(
                f"maximum_relative_increase має бути додатним, отримано: {value}"
            )
        return value

    @classmethod
    def _validate_window(cls, value: int) -> int:
        if int(value) != value or value < cls.MINIMUM_WINDOW:
            raise ValueError(
                f"minimum_number_of_iterations має бути цілим >= {cls.MINIMUM_WINDOW}, "
                f"отримано: {value}"
            )
        return int(value)

    @property
    def maximum_relative_increase(self) -> float:
        return self._maximum_increase

    @maximum_relative_increase.setter
    def maximum_relative_increase(self, value: float) -> None:
        self._maximum_increase = self._validate_increase(value)

    @property
    def minimum_number_of_iterations(self) -> int:
        return self._window

    @minimum_number_of_iterations.setter
    def minimum_number_of_iterations(self, value: int) -> None:
        window = self._validate_window(value)
        if window != self._window:
            # Стара історія має іншу довжину: відкидаємо її
            self._window = window
            self._history = np.zeros(self._window + 1, dtype=float)
            self._accepted = 0

    def reset_maximum_relative_increase_to_default(self) -> None:
        self._maximum_increase = self.DEFAULT_MAXIMUM_RELATIVE_INCREASE

    def reset_number_of_iterations_to_default(self) -> None:
        self.minimum_number_of_iterations = self.DEFAULT_MINIMUM_NUMBER_OF_ITERATIONS

    # ------------------------------------------------------------------
    # Стан прогресу
    # ------------------------------------------------------------------

    @property
    def history_length(self) -> int:
        """Довжина буфера історії (window + 1)."""
        return self._window + 1

    @property
    def residual_history(self) -> np.ndarray:
        """Копія заповненої частини буфера історії (від найстарішого значення)."""
        filled = min(self._accepted, self.history_length)
        if filled == 0:
            return np.empty(0, dtype=float)
        return self._history[-filled:].copy()

    def _reset_progress(self) -> None:
        self._history = np.zeros(self._window + 1, dtype=float)
        self._accepted = 0

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

        if self._already_processed(iteration_number):
            return self._status

        residual_norm = infinity_norm(residual)
        # Зсув буфера: найстаріше значення випадає, нове: в кінець
        self._history[:-1] = self._history[1:]
        self._history[-1] = residual_norm
        self._accepted += 1
        self._last_iteration = iteration_number

        if math.isnan(residual_norm):
            return IterationStatus.DIVERGED

        if self._accepted >= self.history_length and self._is_diverging():
            return IterationStatus.DIVERGED
        return IterationStatus.CONTINUE

    def _is_diverging(self) -> bool:
        previous = self._history[:-1]
        current = self._history[1:]
        limit = previous * (1.0 + self._maximum_increase)

        # Порівняння з NaN дають False, тож пара з NaN розбіжність не підтверджує
        with np.errstate(invalid="ignore"):
            growing = (current >= previous) & (current > limit)
        return bool(np.all(growing))

    def clone(self) -> "DivergenceStopCriterion":
        return DivergenceStopCriterion(self._maximum_increase, self._window)

    def __repr__(self) -> str:
        return (
            f"DivergenceStopCriterion(maximum_relative_increase={self._maximum_increase!r}, "
            f"minimum_number_of_iterations={self._window}, status={self._status.name})"
        )


__all__ = ["DivergenceStopCriterion"]
