"""
solve_worker.py

Фоновий потік для запуску розв'язувачів, щоб GUI не "зависав".

Сигнали:
    iterationReady(IterationResult)  – кожна перевірка контролером
    runFinished(SolveRunResult)      – один розв'язувач завершив роботу
    runFailed(str)                   – розв'язувач упав з винятком
    finished()                       – (QThread) всі задачі виконано

cancel() викликається з GUI-потоку: піднімає прапорець скасування
поточного контролера, і розв'язувач зупиняється на наступній ітерації
зі статусом CANCELLED. Решта черги не запускається.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, Sequence

import numpy as np
from PyQt6.QtCore import QObject, QThread, pyqtSignal

from convergence_app.core.controller import IterationController
from convergence_app.core.engine import SolveEngine
from convergence_app.core.iteration_result import IterationResult
from convergence_app.core.solver_base import IterativeSolver

logger = logging.getLogger(__name__)


class SolveWorker(QThread):
    iterationReady = pyqtSignal(object)
    runFinished = pyqtSignal(object)
    runFailed = pyqtSignal(str)

    def __init__(
        self,
        engine: SolveEngine,
        solvers: Sequence[IterativeSolver],
        matrix: np.ndarray,
        rhs: np.ndarray,
        controller_options: Optional[Dict[str, Any]] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._solvers = list(solvers)
        self._matrix = matrix
        self._rhs = rhs
        self._options = dict(controller_options or {})

        self._lock = threading.Lock()
        self._controller: Optional[IterationController] = None
        self._cancel_requested = False

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def cancel(self) -> None:
        with self._lock:
            self._cancel_requested = True
            if self._controller is not None:
                self._controller.cancel()

    def _on_iteration(self, record: IterationResult) -> None:
        self.iterationReady.emit(record)

    def run(self) -> None:
        for solver in self._solvers:
            try:
                with self._lock:
                    if self._cancel_requested:
                        break
                    controller = self._engine.build_controller(**self._options)
                    self._controller = controller

                result = self._engine.run(
                    solver,
                    self._matrix,
                    self._rhs,
                    controller=controller,
                    callback=self._on_iteration,
                )
            except Exception as exc:  # noqa: BLE001: помилку показує GUI
                logger.exception("Розв'язувач %s завершився помилкою", solver.name)
                self.runFailed.emit(f"{solver.name}: {exc}")
                continue
            finally:
                with self._lock:
                    self._controller = None

            self.runFinished.emit(result)
