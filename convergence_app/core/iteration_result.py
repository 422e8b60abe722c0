"""
iteration_result.py

Структура даних для представлення окремих ітерацій розв'язувача
лінійної системи. Використовується як у розв'язувачах/движку, так і в GUI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np

from .status import IterationStatus


@dataclass
class IterationResult:
    """
    Опис однієї ітерації ітераційного процесу.

    Атрибути:
        index         - номер ітерації (0, 1, 2, ...) в межах одного розв'язувача
        x             - наближення x_k
        residual_norm - ||b - A x_k||∞
        solution_norm - ||x_k||∞
        status        - вердикт контролера для цієї ітерації
        solver_name   - назва розв'язувача, що виконав ітерацію
        meta          - довільна додаткова інформація (спроба, передобумовлювач, ...)
    """
    index: int
    x: np.ndarray
    residual_norm: float
    solution_norm: float
    status: IterationStatus
    solver_name: str = ""
    meta: Dict[str, Any] = field(default_factory=dict)


__all__ = ["IterationResult"]
