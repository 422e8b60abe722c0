"""
app.py

Контролер GUI-застосунку для порівняння ітераційних розв'язувачів.

Зв'язує:
    - ui.MainWindow (PyQt6)
    - core.SolveEngine + IterationController
    - реєстр розв'язувачів core.registry та CompositeSolver
    - core.problems.PROBLEMS

Функціонал:
    - реагує на сигнал MainWindow.solveRequested(SolveConfig);
    - створює розв'язувач(і) та запускає їх у фоновому SolveWorker;
    - на кожній ітерації додає рядок у таблицю;
    - кнопка "Скасувати" викликає IterationController.cancel() з GUI-потоку;
    - після завершення: графік нев'язки, профіль розв'язку, статистика;
    - у режимі "Запустити всі розв'язувачі" показує зведену таблицю.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from convergence_app.core.composite import CompositeSolver
from convergence_app.core.engine import SolveEngine, SolveRunResult
from convergence_app.core.problems import get_problem
from convergence_app.core.registry import available_setups
from convergence_app.core.registry import create_solver as create_registered_solver
from convergence_app.core.results_summary import ResultsSummary
from convergence_app.core.solver_base import IterativeSolver
from convergence_app.core.status import IterationStatus
from convergence_app.logging_config import setup_logging
from convergence_app.ui.control_panel import COMPOSITE_KEY, SolveConfig
from convergence_app.ui.dialogs import show_error, show_info, show_summary
from convergence_app.ui.main_window import MainWindow
from convergence_app.ui.solve_worker import SolveWorker
from convergence_app.ui.styles import apply_app_style

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Допоміжна фабрика розв'язувачів
# ---------------------------------------------------------------------------

def create_solver(solver_key: str) -> IterativeSolver:
    """
    Створити розв'язувач за ключем:
        ключ реєстру ("cg", "cg_diag", "bicgstab", "bicgstab_diag", "jacobi")
        або "composite".
    """
    if solver_key == COMPOSITE_KEY:
        return CompositeSolver()
    return create_registered_solver(solver_key)


def create_all_solvers() -> List[IterativeSolver]:
    """Усі розв'язувачі з реєстру в порядку рангу + композитний."""
    solvers = [setup.create_solver() for setup in available_setups()]
    solvers.append(CompositeSolver())
    return solvers


# ---------------------------------------------------------------------------
# Контролер
# ---------------------------------------------------------------------------

class SolveController:
    """
    Зв'язує MainWindow та SolveEngine.

    Схема:
        GUI (MainWindow) --[SolveConfig]--> SolveController
        SolveController -- створює розв'язувачі, запускає SolveWorker
        SolveWorker -- сигнали -> SolveController -> MainWindow
        "Скасувати" -> SolveWorker.cancel() -> IterationController.cancel()
    """

    def __init__(self, window: MainWindow, engine: SolveEngine) -> None:
        self.window = window
        self.engine = engine

        self._worker: Optional[SolveWorker] = None
        self._config: Optional[SolveConfig] = None
        self._summary = ResultsSummary()

        self.window.solveRequested.connect(self.on_solve_requested)
        self.window.cancelRequested.connect(self.on_cancel_requested)

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.isRunning()

    # ------------------------------------------------------------------
    # Обробники сигналів від GUI
    # ------------------------------------------------------------------

    def on_solve_requested(self, cfg: SolveConfig) -> None:
        if self.is_running:
            return

        options = {
            "max_iter": cfg.max_iter,
            "tolerance": cfg.tolerance,
            "min_iter_below": cfg.min_iter_below,
            "divergence_increase": cfg.divergence_increase,
            "divergence_window": cfg.divergence_window,
        }

        try:
            problem = get_problem(cfg.problem_key)
            matrix, rhs = problem.build(cfg.size)
            # Перевірка параметрів критеріїв до старту потоку
            self.engine.build_controller(**options)
            solvers = create_all_solvers() if cfg.run_all_solvers else [create_solver(cfg.solver_key)]
        except ValueError as exc:
            show_error(self.window, str(exc), title="Помилка конфігурації")
            self.window.statusBar().showMessage(str(exc))
            return

        self._config = cfg
        self._summary = ResultsSummary()

        worker = SolveWorker(self.engine, solvers, matrix, rhs, options, parent=self.window)
        worker.iterationReady.connect(self.window.add_iteration)
        worker.runFinished.connect(self._on_run_finished)
        worker.runFailed.connect(self._on_run_failed)
        worker.finished.connect(self._on_worker_finished)

        self._worker = worker
        self.window.set_running(True)
        logger.info("Запуск: задача %s, n = %d, розв'язувачів: %d", problem.key, cfg.size, len(solvers))
        worker.start()

    def on_cancel_requested(self) -> None:
        if self._worker is not None:
            self._worker.cancel()

    def shutdown(self) -> None:
        """Скасувати і дочекатися фонового потоку (при закритті застосунку)."""
        if self._worker is not None and self._worker.isRunning():
            self._worker.cancel()
            self._worker.wait()

    # ------------------------------------------------------------------
    # Обробники сигналів від SolveWorker
    # ------------------------------------------------------------------

    def _on_run_finished(self, result: SolveRunResult) -> None:
        self._summary.add_run(result)

        self.window.update_residual_plot(result.iterations)
        self.window.update_solution_plot(result.x_star)
        self.window.update_run_stats(result.status, result.n_iter, result.residual_norm, result.elapsed)

        msg = (
            f"{result.solver_name}: {result.status.label}, ітерацій: {result.n_iter}, "
            f"||r||∞ = {result.residual_norm:.3e}"
        )
        if result.error:
            msg += f" (збій: {result.error})"
        self.window.statusBar().showMessage(msg)

    def _on_run_failed(self, message: str) -> None:
        show_error(self.window, f"Під час розв'язування виникла помилка:\n\n{message}",
                   title="Помилка розв'язувача")
        self.window.statusBar().showMessage(f"Помилка: {message}")

    def _on_worker_finished(self) -> None:
        worker = self._worker
        self._worker = None
        self.window.set_running(False)

        cancelled = worker is not None and worker.cancel_requested
        if worker is not None:
            worker.deleteLater()

        if cancelled:
            self.window.statusBar().showMessage(IterationStatus.CANCELLED.label)
            show_info(self.window, "Скасовано", "Обчислення зупинено на вимогу користувача.")

        if self._config is None or not self._config.run_all_solvers or not self._summary.runs:
            return

        self.window.update_comparison_plot(self._summary.runs)
        show_summary(self.window, self._summary)

        best = self._summary.best_run()
        if best is not None:
            msg = (
                f"Найкращий розв'язувач: {best.solver_name}, ітерацій: {best.n_iter}, "
                f"||r||∞ = {best.residual_norm:.3e}"
            )
        else:
            msg = "Жоден розв'язувач не досяг збіжності."
        self.window.statusBar().showMessage(msg)


# ---------------------------------------------------------------------------
# Точка входу
# ---------------------------------------------------------------------------

def main() -> None:
    setup_logging()

    app = QApplication(sys.argv)
    apply_app_style(app)

    window = MainWindow()
    engine = SolveEngine()

    controller = SolveController(window, engine)
    app.aboutToQuit.connect(controller.shutdown)

    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
