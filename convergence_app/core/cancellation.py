"""
cancellation.py

Зовнішнє скасування ітераційного процесу.

CancellationToken:
    - обгортка над threading.Event;
    - може бути пов'язаний з батьківським токеном: скасування батька
      скасовує і всіх нащадків (але не навпаки);
    - cancel() безпечно викликати з іншого потоку (наприклад, з GUI,
      поки розв'язувач працює у фоновому потоці).

CancellationStopCriterion:
    - CANCELLED, якщо токен скасовано, інакше CONTINUE;
    - reset() створює новий токен, пов'язаний з тим самим батьком.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .criterion_base import StopCriterion, check_iteration_number
from .status import IterationStatus, StopLevel
from .vectors import VectorLike

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Сигнал скасування, який можна "підняти" з будь-якого потоку.

    Приклад:
        parent = CancellationToken()
        child = CancellationToken(parent)
        parent.cancel()
        child.is_cancelled   # True
    """

    __slots__ = ("_event", "_parent")

    def __init__(self, parent: Optional["CancellationToken"] = None) -> None:
        self._event = threading.Event()
        self._parent = parent

    @property
    def parent(self) -> Optional["CancellationToken"]:
        return self._parent

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.is_cancelled

    def cancel(self) -> None:
        self._event.set()

    def linked(self) -> "CancellationToken":
        """Новий токен-нащадок цього токена."""
        return CancellationToken(self)

    def __repr__(self) -> str:
        return f"CancellationToken(is_cancelled={self.is_cancelled})"


class CancellationStopCriterion(StopCriterion):
    """
    Критерій, що спрацьовує після зовнішнього запиту на скасування.

    Parameters
    ----------
    parent : Optional[CancellationToken]
        Батьківський токен. Якщо задано, внутрішній токен критерію
        пов'язується з ним.
    """

    stop_level = StopLevel.CANCELLED

    def __init__(self, parent: Optional[CancellationToken] = None) -> None:
        self._parent = parent
        self._token = CancellationToken(parent)
        super().__init__()

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def parent(self) -> Optional[CancellationToken]:
        return self._parent

    @property
    def status(self) -> IterationStatus:
        # Читаємо токен "наживо": скасування з іншого потоку видно одразу
        if self._token.is_cancelled:
            return IterationStatus.CANCELLED
        return self._status

    def cancel(self) -> None:
        """Підняти сигнал скасування (можна викликати з іншого потоку)."""
        logger.info("Запит на скасування через CancellationStopCriterion")
        self._token.cancel()

    def _determine_status_impl(
        self,
        iteration_number: int,
        solution: VectorLike,
        source: VectorLike,
        residual: VectorLike,
    ) -> IterationStatus:
        check_iteration_number(iteration_number)

        if self._token.is_cancelled:
            return IterationStatus.CANCELLED
        return IterationStatus.CONTINUE

    def _reset_progress(self) -> None:
        self._token = CancellationToken(self._parent)

    def clone(self) -> "CancellationStopCriterion":
        return CancellationStopCriterion(self._parent)


__all__ = [
    "CancellationToken",
    "CancellationStopCriterion",
]
