"""
results_summary.py

Зведена таблиця результатів роботи різних розв'язувачів
для однієї обраної лінійної системи.

Працює поверх об'єктів, які мають інтерфейс як SolveRunResult:
    - solver_name
    - status
    - n_iter
    - residual_norm
    - x_star
    - elapsed
    - error
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .status import IterationStatus


@dataclass
class ResultsSummary:
    """
    Зведення результатів кількох розв'язувачів для однієї системи.

    Приклад використання:
        summary = ResultsSummary()
        summary.add_run(run_cg)
        summary.add_run(run_bicgstab)
        rows = summary.as_rows()  # для GUI / pandas / CSV
    """
    runs: List[Any] = field(default_factory=list)

    def add_run(self, run: Any) -> None:
        """Додати результат одного розв'язувача до зведення."""
        self.runs.append(run)

    def clear(self) -> None:
        self.runs.clear()

    def __len__(self) -> int:
        return len(self.runs)

    # ------------------------------------------------------------------
    # Перетворення в "табличний" вигляд
    # ------------------------------------------------------------------

    def as_rows(self) -> List[Dict[str, Any]]:
        """
        Список dict-рядків з полями:
            solver, status, status_label, n_iter, residual_norm,
            solution_norm, elapsed, error
        """
        rows: List[Dict[str, Any]] = []

        for run in self.runs:
            status = getattr(run, "status", None)
            x_star = getattr(run, "x_star", None)
            residual_norm = getattr(run, "residual_norm", None)
            elapsed = getattr(run, "elapsed", None)
            n_iter = getattr(run, "n_iter", None)

            solution_norm = None
            if isinstance(x_star, np.ndarray) and x_star.size:
                solution_norm = float(np.max(np.abs(x_star)))

            rows.append(
                {
                    "solver": getattr(run, "solver_name", "<unknown>"),
                    "status": status.name if isinstance(status, IterationStatus) else status,
                    "status_label": status.label if isinstance(status, IterationStatus) else None,
                    "n_iter": int(n_iter) if n_iter is not None else None,
                    "residual_norm": float(residual_norm) if residual_norm is not None else None,
                    "solution_norm": solution_norm,
                    "elapsed": float(elapsed) if elapsed is not None else None,
                    "error": getattr(run, "error", None),
                }
            )

        return rows

    # ------------------------------------------------------------------
    # Вибір "найкращого" розв'язувача
    # ------------------------------------------------------------------

    def best_run(self) -> Optional[Any]:
        """
        Серед збіжних запусків: той, що зробив найменше ітерацій
        (за рівності: з меншою нев'язкою). Якщо збіжних немає: None.
        """
        best = None
        best_key = None

        for run in self.runs:
            if getattr(run, "status", None) is not IterationStatus.CONVERGED:
                continue
            key = (int(run.n_iter), float(run.residual_norm))
            if best_key is None or key < best_key:
                best_key = key
                best = run

        return best

    # ------------------------------------------------------------------
    # Опційно: повернути pandas.DataFrame
    # ------------------------------------------------------------------

    def to_dataframe(self):
        """
        Повернути pandas.DataFrame зі зведеною таблицею.

        Вимога: встановлений пакет pandas (extra "report").
        """
        try:
            import pandas as pd  # type: ignore
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "Для використання ResultsSummary.to_dataframe() "
                "потрібно встановити пакет 'pandas'."
            ) from exc

        return pd.DataFrame(self.as_rows())


__all__ = ["ResultsSummary"]
