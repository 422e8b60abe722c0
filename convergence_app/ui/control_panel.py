"""
control_panel.py

Панель керування для GUI:
    - вибір лінійної системи та її розміру;
    - вибір розв'язувача (або композитного);
    - параметри контролера: max_iter, поріг нев'язки, кількість ітерацій
      під порогом, параметри розбіжності;
    - опція "Запустити всі розв'язувачі";
    - кнопки: Запустити, Скасувати, Очистити, Вихід.

Видає назовні:
    - сигнал runRequested(SolveConfig)
    - сигнал cancelRequested()
    - сигнал clearRequested()
    - сигнал exitRequested()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QGridLayout,
    QGroupBox,
    QComboBox,
    QLabel,
    QPushButton,
    QSpinBox,
    QDoubleSpinBox,
    QCheckBox,
)

from convergence_app.core.divergence import DivergenceStopCriterion
from convergence_app.core.problems import MIN_SIZE, PROBLEMS
from convergence_app.core.registry import available_setups

from .styles import (
    MARGIN,
    SPACING,
    apply_groupbox_flat_style,
    apply_button_secondary,
    apply_button_danger,
)

COMPOSITE_KEY = "composite"


# ---------------------------------------------------------------------------
# Конфігурація запуску
# ---------------------------------------------------------------------------

@dataclass
class SolveConfig:
    problem_key: str
    size: int
    solver_key: str
    max_iter: int
    tolerance: float
    min_iter_below: int = 0
    divergence_increase: float = DivergenceStopCriterion.DEFAULT_MAXIMUM_RELATIVE_INCREASE
    divergence_window: int = DivergenceStopCriterion.DEFAULT_MINIMUM_NUMBER_OF_ITERATIONS
    run_all_solvers: bool = False


# ---------------------------------------------------------------------------
# Віджет панелі керування
# ---------------------------------------------------------------------------

class ControlPanelWidget(QWidget):
    """
    Ліва панель керування розв'язуванням.

    Сигнали:
        runRequested(SolveConfig)  – натиснуто "Запустити"
        cancelRequested()          – натиснуто "Скасувати"
        clearRequested()           – натиснуто "Очистити"
        exitRequested()            – натиснуто "Вихід"
    """

    runRequested = pyqtSignal(SolveConfig)
    cancelRequested = pyqtSignal()
    clearRequested = pyqtSignal()
    exitRequested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._build_ui()
        self._connect_signals()
        self.set_running(False)

    # ------------------------------------------------------------------
    # Побудова UI
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self.setObjectName("controlPanel")

        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        main_layout.setSpacing(SPACING)

        # ------------------------------------------------------------------
        # Блок 1. Лінійна система
        # ------------------------------------------------------------------
        self.problem_group = QGroupBox("Лінійна система A x = b", self)
        apply_groupbox_flat_style(self.problem_group)

        problem_layout = QVBoxLayout(self.problem_group)
        problem_layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        problem_layout.setSpacing(SPACING)

        lbl_problem = QLabel("Система:", self.problem_group)
        lbl_problem.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)
        self.combo_problem = QComboBox(self.problem_group)
        for problem in PROBLEMS.values():
            self.combo_problem.addItem(problem.name, problem.key)

        size_row = QHBoxLayout()
        size_row.setSpacing(SPACING)
        self.input_size = QSpinBox(self.problem_group)
        self.input_size.setRange(MIN_SIZE, 2000)
        self.input_size.setValue(50)
        size_row.addWidget(QLabel("Розмір n:", self.problem_group))
        size_row.addWidget(self.input_size)
        size_row.addStretch(1)

        problem_layout.addWidget(lbl_problem)
        problem_layout.addWidget(self.combo_problem)
        problem_layout.addLayout(size_row)

        main_layout.addWidget(self.problem_group)

        # ------------------------------------------------------------------
        # Блок 2. Розв'язувач
        # ------------------------------------------------------------------
        self.solver_group = QGroupBox("Розв'язувач", self)
        apply_groupbox_flat_style(self.solver_group)

        solver_layout = QVBoxLayout(self.solver_group)
        solver_layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        solver_layout.setSpacing(SPACING)

        self.combo_solver = QComboBox(self.solver_group)
        for setup in available_setups():
            self.combo_solver.addItem(setup.name, setup.key)
        self.combo_solver.addItem("Композитний (перебір за рангом)", COMPOSITE_KEY)

        self.check_run_all = QCheckBox(
            "Запустити всі розв'язувачі для обраної системи",
            self.solver_group,
        )

        solver_layout.addWidget(self.combo_solver)
        solver_layout.addWidget(self.check_run_all)

        main_layout.addWidget(self.solver_group)

        # ------------------------------------------------------------------
        # Блок 3. Критерії зупинки
        # ------------------------------------------------------------------
        self.params_group = QGroupBox("Критерії зупинки", self)
        apply_groupbox_flat_style(self.params_group)

        grid = QGridLayout(self.params_group)
        grid.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        grid.setHorizontalSpacing(SPACING)
        grid.setVerticalSpacing(SPACING)

        self.input_max_iter = QSpinBox(self.params_group)
        self.input_max_iter.setRange(1, 100000)
        self.input_max_iter.setValue(1000)

        self.input_tolerance = QDoubleSpinBox(self.params_group)
        self.input_tolerance.setRange(0.0, 1.0)
        self.input_tolerance.setDecimals(15)
        self.input_tolerance.setValue(1e-10)

        self.input_min_below = QSpinBox(self.params_group)
        self.input_min_below.setRange(0, 1000)
        self.input_min_below.setValue(0)

        self.input_div_increase = QDoubleSpinBox(self.params_group)
        self.input_div_increase.setRange(1e-4, 10.0)
        self.input_div_increase.setDecimals(4)
        self.input_div_increase.setValue(DivergenceStopCriterion.DEFAULT_MAXIMUM_RELATIVE_INCREASE)

        self.input_div_window = QSpinBox(self.params_group)
        self.input_div_window.setRange(DivergenceStopCriterion.MINIMUM_WINDOW, 1000)
        self.input_div_window.setValue(DivergenceStopCriterion.DEFAULT_MINIMUM_NUMBER_OF_ITERATIONS)

        rows = [
            ("max_iter:", self.input_max_iter),
            ("Поріг ||r||∞ / ||b||∞:", self.input_tolerance),
            ("Ітерацій під порогом:", self.input_min_below),
            ("Допустимий приріст:", self.input_div_increase),
            ("Вікно розбіжності:", self.input_div_window),
        ]
        for row, (label, widget) in enumerate(rows):
            grid.addWidget(QLabel(label, self.params_group), row, 0)
            grid.addWidget(widget, row, 1)

        main_layout.addWidget(self.params_group)

        # ------------------------------------------------------------------
        # Нижній ряд кнопок
        # ------------------------------------------------------------------
        buttons_row = QHBoxLayout()
        buttons_row.setContentsMargins(0, SPACING, 0, 0)
        buttons_row.setSpacing(SPACING)

        self.button_run = QPushButton("Запустити", self)
        self.button_cancel = QPushButton("Скасувати", self)
        self.button_clear = QPushButton("Очистити", self)
        self.button_exit = QPushButton("Вихід", self)

        apply_button_danger(self.button_cancel)
        apply_button_secondary(self.button_clear)
        apply_button_secondary(self.button_exit)

        buttons_row.addWidget(self.button_run)
        buttons_row.addWidget(self.button_cancel)
        buttons_row.addWidget(self.button_clear)
        buttons_row.addStretch(1)
        buttons_row.addWidget(self.button_exit)

        main_layout.addLayout(buttons_row)
        main_layout.addStretch(1)

    # ------------------------------------------------------------------
    # Сигнали
    # ------------------------------------------------------------------

    def _connect_signals(self) -> None:
        self.button_run.clicked.connect(self._on_run_clicked)
        self.button_cancel.clicked.connect(self.cancelRequested.emit)
        self.button_clear.clicked.connect(self.clearRequested.emit)
        self.button_exit.clicked.connect(self.exitRequested.emit)

    # ------------------------------------------------------------------
    # Стан
    # ------------------------------------------------------------------

    def set_running(self, running: bool) -> None:
        """Під час обчислення доступна лише кнопка "Скасувати"."""
        self.button_run.setEnabled(not running)
        self.button_clear.setEnabled(not running)
        self.button_cancel.setEnabled(running)
        for group in (self.problem_group, self.solver_group, self.params_group):
            group.setEnabled(not running)

    def build_config(self) -> SolveConfig:
        """
        Зібрати SolveConfig з поточного стану контролів.
        """
        return SolveConfig(
            problem_key=str(self.combo_problem.currentData()),
            size=int(self.input_size.value()),
            solver_key=str(self.combo_solver.currentData()),
            max_iter=int(self.input_max_iter.value()),
            tolerance=float(self.input_tolerance.value()),
            min_iter_below=int(self.input_min_below.value()),
            divergence_increase=float(self.input_div_increase.value()),
            divergence_window=int(self.input_div_window.value()),
            run_all_solvers=self.check_run_all.isChecked(),
        )

    def _on_run_clicked(self) -> None:
        self.runRequested.emit(self.build_config())
