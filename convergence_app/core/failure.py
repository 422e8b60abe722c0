"""
failure.py

Критерій "аварійної" зупинки: NaN у розв'язку або нев'язці.
"""

from __future__ import annotations

import math

from .criterion_base import TrackedStopCriterion, check_iteration_number, check_same_length
from .status import IterationStatus, StopLevel
from .vectors import VectorLike, infinity_norm


class FailureStopCriterion(TrackedStopCriterion):
    """
    FAILURE, якщо ||x_k||∞ або ||r_k||∞ дорівнює NaN, інакше CONTINUE.

    Конфігурації немає. Повторний виклик для вже обробленої ітерації
    повертає попередній статус.
    """

    stop_level = StopLevel.FAILURE

    def _determine_status_impl(
        self,
        iteration_number: int,
        solution: VectorLike,
        source: VectorLike,
        residual: VectorLike,
    ) -> IterationStatus:
        check_iteration_number(iteration_number)
        check_same_length(solution, residual, "residual")

        if self._already_processed(iteration_number):
            return self._status

        self._last_iteration = iteration_number

        solution_norm = infinity_norm(solution)
        residual_norm = infinity_norm(residual)

        if math.isnan(solution_norm) or math.isnan(residual_norm):
            return IterationStatus.FAILURE
        return IterationStatus.CONTINUE

    def clone(self) -> "FailureStopCriterion":
        return FailureStopCriterion()


__all__ = ["FailureStopCriterion"]
