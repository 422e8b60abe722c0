"""
delegate.py

Критерій зупинки на основі довільної функції користувача.

Функція має ту саму сигнатуру, що й determine_status:
    callback(iteration_number, solution, source, residual) -> IterationStatus
"""

from __future__ import annotations

from typing import Callable

from .criterion_base import StopCriterion
from .status import IterationStatus
from .vectors import VectorLike

StatusCallback = Callable[[int, VectorLike, VectorLike, VectorLike], IterationStatus]


class DelegateStopCriterion(StopCriterion):
    """
    Делегує кожен виклик функції callback і пам'ятає останній результат.

    Після створення та після reset() статус: CONTINUE.
    clone() використовує ту саму функцію, але зі "свіжим" статусом.
    """

    initial_status = IterationStatus.CONTINUE

    def __init__(self, callback: StatusCallback) -> None:
        if not callable(callback):
            raise TypeError(f"callback має бути викликним об'єктом, отримано: {type(callback)}")
        self._callback = callback
        super().__init__()

    @property
    def callback(self) -> StatusCallback:
        return self._callback

    def _determine_status_impl(
        self,
        iteration_number: int,
        solution: VectorLike,
        source: VectorLike,
        residual: VectorLike,
    ) -> IterationStatus:
        return self._callback(iteration_number, solution, source, residual)

    def clone(self) -> "DelegateStopCriterion":
        return DelegateStopCriterion(self._callback)

    def __repr__(self) -> str:
        name = getattr(self._callback, "__name__", repr(self._callback))
        return f"DelegateStopCriterion(callback={name}, status={self._status.name})"


__all__ = [
    "StatusCallback",
    "DelegateStopCriterion",
]
