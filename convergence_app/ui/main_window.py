"""
Головне вікно:
    - зліва: панель керування (система, розв'язувач, критерії зупинки);
    - справа: карусель графіків над таблицею ітерацій.
"""

from __future__ import annotations
from typing import Optional

import numpy as np

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QStatusBar,
    QLabel,
    QSplitter,
)

from convergence_app.core.iteration_result import IterationResult
from convergence_app.core.status import IterationStatus

from .control_panel import ControlPanelWidget, SolveConfig
from .table_view import IterationsTableWidget
from .plot_view import PlotView
from .dialogs import show_about
from .styles import apply_label_muted, MARGIN, SPACING


class MainWindow(QMainWindow):
    """
    Головне вікно GUI.

    Сигнали:
        solveRequested(SolveConfig) – користувач запустив обчислення
        cancelRequested()           – користувач натиснув "Скасувати"
    """

    solveRequested = pyqtSignal(SolveConfig)
    cancelRequested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Контроль збіжності ітераційних розв'язувачів")
        self.resize(1400, 880)

        self._build_menu()
        self.setStatusBar(QStatusBar(self))
        self.statusBar().showMessage("Готово")

        self.control_panel = ControlPanelWidget(self)
        self.control_panel.setMinimumWidth(380)
        self.plot_view = PlotView(self)
        self.iterations_table = IterationsTableWidget(self)

        central = QWidget(self)
        body = QHBoxLayout(central)
        body.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        body.setSpacing(SPACING)
        body.addWidget(self.control_panel, stretch=2, alignment=Qt.AlignmentFlag.AlignTop)
        body.addWidget(self._build_results_area(), stretch=5)
        self.setCentralWidget(central)

        self._connect_signals()
        self.update_run_stats(None)

    # ----------------------------------------------------------------------
    # Побудова
    # ----------------------------------------------------------------------
    def _build_menu(self) -> None:
        self.action_exit = QAction("Вихід", self)
        self.action_exit.setShortcut("Ctrl+Q")
        self.action_about = QAction("Про програму", self)

        self.menuBar().addMenu("Файл").addAction(self.action_exit)
        self.menuBar().addMenu("Довідка").addAction(self.action_about)

    def _build_results_area(self) -> QSplitter:
        """Графіки зверху, таблиця ітерацій і підсумок запуску знизу."""
        lower = QWidget(self)
        lower_layout = QVBoxLayout(lower)
        lower_layout.setContentsMargins(0, 0, 0, 0)
        lower_layout.setSpacing(SPACING)
        lower_layout.addWidget(self.iterations_table)
        lower_layout.addLayout(self._build_stats_row())

        splitter = QSplitter(Qt.Orientation.Vertical, self)
        splitter.setMinimumWidth(760)
        splitter.addWidget(self.plot_view)
        splitter.addWidget(lower)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        return splitter

    def _build_stats_row(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setContentsMargins(0, 0, 0, 0)
        row.setSpacing(SPACING)

        self.label_status = QLabel("статус: –")
        self.label_iters = QLabel("ітерацій: –")
        self.label_residual = QLabel("||r||∞: –")
        self.label_elapsed = QLabel("час: –")

        for lbl in (self.label_status, self.label_iters, self.label_residual, self.label_elapsed):
            apply_label_muted(lbl)
            row.addWidget(lbl)

        row.addStretch()
        return row

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------
    def _connect_signals(self) -> None:
        self.action_exit.triggered.connect(self.close)
        self.action_about.triggered.connect(lambda: show_about(self))

        self.control_panel.exitRequested.connect(self.close)
        self.control_panel.clearRequested.connect(self._on_clear_requested)
        self.control_panel.runRequested.connect(self._on_run_requested)
        self.control_panel.cancelRequested.connect(self._on_cancel_requested)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    def _on_run_requested(self, cfg: SolveConfig) -> None:
        self.clear_results()
        self.statusBar().showMessage(
            f"Запуск: {cfg.problem_key}, n = {cfg.size}, "
            f"{'всі розв’язувачі' if cfg.run_all_solvers else cfg.solver_key}"
        )
        self.solveRequested.emit(cfg)

    def _on_cancel_requested(self) -> None:
        self.statusBar().showMessage("Скасування...")
        self.cancelRequested.emit()

    def _on_clear_requested(self) -> None:
        self.clear_results()
        self.statusBar().showMessage("Очищено")

    # ------------------------------------------------------------------
    # PUBLIC API (для app.py)
    # ------------------------------------------------------------------
    def set_running(self, running: bool) -> None:
        self.control_panel.set_running(running)

    def clear_results(self) -> None:
        """Очистити таблицю, скинути графіки у плейсхолдер і статистику."""
        self.iterations_table.clear_table()
        self.plot_view.show_placeholder()
        self.update_run_stats(None)

    def add_iteration(self, iteration: IterationResult) -> None:
        self.iterations_table.add_iteration(iteration)

    def update_residual_plot(self, iterations) -> None:
        self.plot_view.plot_residual_history(iterations)

    def update_solution_plot(self, x: np.ndarray) -> None:
        self.plot_view.plot_solution(x)

    def update_comparison_plot(self, runs) -> None:
        self.plot_view.plot_comparison(runs)

    def update_run_stats(
        self,
        status: Optional[IterationStatus],
        n_iter: Optional[int] = None,
        residual_norm: Optional[float] = None,
        elapsed: Optional[float] = None,
    ) -> None:
        """Оновити підписи під таблицею."""
        self.label_status.setText(f"статус: {status.label if status is not None else '–'}")
        self.label_iters.setText(f"ітерацій: {n_iter if n_iter is not None else '–'}")
        self.label_residual.setText(
            "||r||∞: –" if residual_norm is None else f"||r||∞: {residual_norm:.3e}"
        )
        self.label_elapsed.setText("час: –" if elapsed is None else f"час: {elapsed * 1e3:.1f} мс")
