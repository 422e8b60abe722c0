"""
table_view.py

Таблиця ітерацій розв'язувача.

Функціонал:
    - відображає послідовність IterationResult;
    - колонки:
        розв'язувач, k, ||r||∞, ||x||∞, статус;
    - хелпери:
        clear_table()
        add_iteration(iteration)
"""

from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
    QAbstractItemView,
)

from convergence_app.core.iteration_result import IterationResult

from .styles import MARGIN, SPACING, PALETTE, apply_table_style, status_color


class IterationsTableWidget(QWidget):
    """
    Колонки:
        0: розв'язувач
        1: k          – номер ітерації
        2: ||r||∞     – норма нев'язки
        3: ||x||∞     – норма наближення
        4: статус     – вердикт контролера
    """

    MAX_ROWS = 5000
    SUBTITLE = "k, ||r_k||∞, ||x_k||∞ та вердикт контролера"

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._skipped = 0
        self._build_ui()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        root.setSpacing(SPACING)

        header_row = QHBoxLayout()
        header_row.setContentsMargins(0, 0, 0, 0)
        header_row.setSpacing(SPACING)

        title = QLabel("Ітерації", self)
        self.subtitle = QLabel(self.SUBTITLE, self)
        self.subtitle.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self.subtitle.setStyleSheet(f"color: {PALETTE.text_muted}; font-size: 9pt;")

        header_row.addWidget(title)
        header_row.addStretch(1)
        header_row.addWidget(self.subtitle)
        root.addLayout(header_row)

        self.table = QTableWidget(self)
        self.table.setColumnCount(5)
        self.table.setHorizontalHeaderLabels(["Розв'язувач", "k", "||r||∞", "||x||∞", "Статус"])
        apply_table_style(self.table)

        h_header = self.table.horizontalHeader()
        h_header.setSectionResizeMode(0, QHeaderView.ResizeMode.ResizeToContents)
        h_header.setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)

        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.verticalHeader().setDefaultSectionSize(22)

        root.addWidget(self.table)

    # ------------------------------------------------------------------
    # Публічне API
    # ------------------------------------------------------------------

    def clear_table(self) -> None:
        self.table.setRowCount(0)
        self._skipped = 0
        self.subtitle.setText(self.SUBTITLE)

    def add_iteration(self, iteration: IterationResult) -> None:
        """
        Додати рядок за IterationResult. Після MAX_ROWS рядків додаються
        лише термінальні ітерації.
        """
        if self.table.rowCount() >= self.MAX_ROWS and not iteration.status.terminates_calculation:
            self._skipped += 1
            self.subtitle.setText(f"{self.SUBTITLE} (пропущено рядків: {self._skipped})")
            return

        row = self.table.rowCount()
        self.table.insertRow(row)

        def _item(text: Any, align: Qt.AlignmentFlag) -> QTableWidgetItem:
            it = QTableWidgetItem(str(text))
            it.setFlags(it.flags() & ~Qt.ItemFlag.ItemIsEditable)
            it.setTextAlignment(align | Qt.AlignmentFlag.AlignVCenter)
            return it

        self.table.setItem(row, 0, _item(iteration.solver_name, Qt.AlignmentFlag.AlignLeft))
        self.table.setItem(row, 1, _item(iteration.index, Qt.AlignmentFlag.AlignHCenter))
        self.table.setItem(row, 2, _item(f"{iteration.residual_norm:.6e}", Qt.AlignmentFlag.AlignRight))
        self.table.setItem(row, 3, _item(f"{iteration.solution_norm:.6e}", Qt.AlignmentFlag.AlignRight))

        status_item = _item(iteration.status.label, Qt.AlignmentFlag.AlignLeft)
        status_item.setForeground(QColor(status_color(iteration.status)))
        self.table.setItem(row, 4, status_item)

        if iteration.status.terminates_calculation:
            self.table.scrollToItem(status_item)

