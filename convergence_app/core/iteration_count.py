"""
iteration_count.py

Критерій зупинки за кількістю ітерацій.

Ідея:
    k >= max_iter  ->  STOPPED_WITHOUT_CONVERGENCE,
    інакше         ->  CONTINUE.

Критерій суто порівняльний, тому повторна оцінка тієї ж ітерації безпечна.
"""

from __future__ import annotations

from .criterion_base import StopCriterion, check_iteration_number
from .status import IterationStatus, StopLevel
from .vectors import VectorLike


class IterationCountStopCriterion(StopCriterion):
    """
    Зупинка після досягнення граничної кількості ітерацій.

    Налаштування:
        maximum_number_of_iterations : int >= 1 (default: 1000)
    """

    DEFAULT_MAXIMUM_NUMBER_OF_ITERATIONS: int = 1000

    stop_level = StopLevel.STOPPED_WITHOUT_CONVERGENCE

    def __init__(self, maximum_number_of_iterations: int = DEFAULT_MAXIMUM_NUMBER_OF_ITERATIONS) -> None:
        self._maximum = self._validate_maximum(maximum_number_of_iterations)
        super().__init__()

    @staticmethod
    def _validate_maximum(value: int) -> int:
        if int(value) != value or value < 1:
            raise ValueError(
                f"maximum_number_of_iterations має бути цілим >= 1, отримано: {value}"
            )
        return int(value)

    @property
    def maximum_number_of_iterations(self) -> int:
        return self._maximum

    @maximum_number_of_iterations.setter
    def maximum_number_of_iterations(self, value: int) -> None:
        self._maximum = self._validate_maximum(value)

    def reset_maximum_to_default(self) -> None:
        self._maximum = self.DEFAULT_MAXIMUM_NUMBER_OF_ITERATIONS

    def _determine_status_impl(
        self,
        iteration_number: int,
        solution: VectorLike,
        source: VectorLike,
        residual: VectorLike,
    ) -> IterationStatus:
        check_iteration_number(iteration_number)

        if iteration_number >= self._maximum:
            return IterationStatus.STOPPED_WITHOUT_CONVERGENCE
        return IterationStatus.CONTINUE

    def clone(self) -> "IterationCountStopCriterion":
        return IterationCountStopCriterion(self._maximum)

    def __repr__(self) -> str:
        return (
            f"IterationCountStopCriterion(maximum_number_of_iterations={self._maximum}, "
            f"status={self._status.name})"
        )


__all__ = ["IterationCountStopCriterion"]
