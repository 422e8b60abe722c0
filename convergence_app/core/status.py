"""
status.py

Закритий словник станів ітераційного процесу.

Ідея:
    - кожен критерій зупинки та контролер у кожен момент часу мають рівно
      один стан з IterationStatus;
    - CONTINUE (він же RUNNING) та INDETERMINATE не завершують обчислення,
      усі інші стани: термінальні;
    - StopLevel описує "рівень" критерію (для логів / GUI), на композицію
      не впливає.
"""

from __future__ import annotations

from enum import Enum


class IterationStatus(Enum):
    """
    Стан ітераційного обчислення.

    Члени:
        INDETERMINATE               - рішення ще не прийняте
        CONTINUE / RUNNING          - продовжувати ітерації (RUNNING: аліас)
        CONVERGED                   - збіжність досягнута
        DIVERGED                    - нев'язка зростає або стала NaN
        FAILURE                     - зустрілися некоректні значення (NaN)
        STOPPED_WITHOUT_CONVERGENCE - вичерпано ліміт ітерацій
        CANCELLED                   - зупинено ззовні
    """

    INDETERMINATE = "indeterminate"
    CONTINUE = "continue"
    RUNNING = "continue"
    CONVERGED = "converged"
    DIVERGED = "diverged"
    FAILURE = "failure"
    STOPPED_WITHOUT_CONVERGENCE = "stopped_without_convergence"
    CANCELLED = "cancelled"

    @property
    def terminates_calculation(self) -> bool:
        """True для всіх станів, крім CONTINUE/RUNNING та INDETERMINATE."""
        return self not in (IterationStatus.CONTINUE, IterationStatus.INDETERMINATE)

    @property
    def label(self) -> str:
        """Людино-зрозуміла назва стану (для таблиць і статус-бару)."""
        return _LABELS[self]

    def __str__(self) -> str:
        return self.value


_LABELS = {
    IterationStatus.INDETERMINATE: "Рішення не прийняте",
    IterationStatus.CONTINUE: "Триває",
    IterationStatus.CONVERGED: "Збіжність досягнута",
    IterationStatus.DIVERGED: "Розбіжність (нев'язка зростає)",
    IterationStatus.FAILURE: "Некоректні значення (NaN)",
    IterationStatus.STOPPED_WITHOUT_CONVERGENCE: "Досягнуто граничної кількості ітерацій",
    IterationStatus.CANCELLED: "Зупинено користувачем",
}


class StopLevel(Enum):
    """Рівень, на якому працює критерій зупинки."""

    CONVERGENCE = "convergence"
    DIVERGENCE = "divergence"
    STOPPED_WITHOUT_CONVERGENCE = "stopped_without_convergence"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    CUSTOM = "custom"


__all__ = [
    "IterationStatus",
    "StopLevel",
]
