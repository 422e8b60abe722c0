"""
ui/dialogs.py

Стандартні діалоги для GUI-застосунку:

    - show_error     – повідомлення про помилку
    - show_info      – інформаційне повідомлення
    - show_about     – вікно "Про програму"
    - show_summary   – діалог зі зведеною таблицею ResultsSummary
"""

from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QWidget,
    QMessageBox,
    QDialog,
    QVBoxLayout,
    QLabel,
    QTableWidget,
    QTableWidgetItem,
    QDialogButtonBox,
    QHeaderView,
    QFrame,
)

from convergence_app import __version__
from convergence_app.core.results_summary import ResultsSummary
from convergence_app.core.status import IterationStatus
from .styles import MARGIN, SPACING, apply_card_style, apply_table_style, status_color


# ---------------------------------------------------------------------------
# Прості діалоги: помилка / інформація / about
# ---------------------------------------------------------------------------


def _message(parent: Optional[QWidget], icon: QMessageBox.Icon, title: str, text: str) -> None:
    box = QMessageBox(icon, title, text, QMessageBox.StandardButton.Ok, parent)
    box.exec()


def show_error(parent: Optional[QWidget], message: str, title: str = "Помилка") -> None:
    _message(parent, QMessageBox.Icon.Critical, title, message)


def show_info(parent: Optional[QWidget], title: str, message: str) -> None:
    _message(parent, QMessageBox.Icon.Information, title, message)


def show_about(parent: Optional[QWidget]) -> None:
    AboutDialog(parent).exec()


def humanize_status(status: Any) -> str:
    """
    Людське пояснення статусу. Приймає IterationStatus або його ім'я
    (як у ResultsSummary.as_rows()).
    """
    if isinstance(status, IterationStatus):
        return status.label
    if not status:
        return "Невідомо"
    try:
        return IterationStatus[str(status)].label
    except KeyError:
        return f"Інша причина ({status})"


# ---------------------------------------------------------------------------
# Діалог зі зведеною таблицею ResultsSummary
# ---------------------------------------------------------------------------


def _sci(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.3e}"


def _millis(value: Optional[float]) -> str:
    return "" if value is None else f"{value * 1e3:.1f}"


class SummaryDialog(QDialog):
    """
    Зведена таблиця результатів усіх розв'язувачів для однієї системи.
    Рядок найкращого збіжного запуску виділено жирним.
    """

    # (заголовок, ключ рядка ResultsSummary.as_rows(), форматер)
    COLUMNS = [
        ("Розв'язувач", "solver", str),
        ("Статус", "status", humanize_status),
        ("Ітерацій", "n_iter", str),
        ("||r||∞", "residual_norm", _sci),
        ("||x||∞", "solution_norm", _sci),
        ("Час, мс", "elapsed", _millis),
        ("Збій", "error", str),
    ]

    def __init__(self, parent: Optional[QWidget], summary: ResultsSummary) -> None:
        super().__init__(parent)
        self.setWindowTitle("Зведена таблиця результатів")
        self.setModal(True)
        self.resize(880, 400)

        caption = QLabel(
            "Усі розв'язувачі на обраній системі з однаковими критеріями зупинки, x₀ = 0.",
            self,
        )
        caption.setWordWrap(True)

        self.table = QTableWidget(len(summary), len(self.COLUMNS), self)
        self.table.setHorizontalHeaderLabels([title for title, _, _ in self.COLUMNS])
        apply_table_style(self.table)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        self.table.horizontalHeader().setStretchLastSection(True)
        self._fill(summary)

        close = QDialogButtonBox(QDialogButtonBox.StandardButton.Close, parent=self)
        close.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        layout.setSpacing(SPACING)
        layout.addWidget(caption)
        layout.addWidget(self.table)
        layout.addWidget(close)

    def _fill(self, summary: ResultsSummary) -> None:
        best = summary.best_run()

        for row_idx, (run, row) in enumerate(zip(summary.runs, summary.as_rows())):
            for col, (_, key, fmt) in enumerate(self.COLUMNS):
                value = row.get(key)
                item = QTableWidgetItem("" if value is None else fmt(value))
                item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsEditable)

                if key == "status" and value in IterationStatus.__members__:
                    item.setForeground(QColor(status_color(IterationStatus[value])))
                if run is best:
                    font = item.font()
                    font.setBold(True)
                    item.setFont(font)

                self.table.setItem(row_idx, col, item)


def show_summary(parent: Optional[QWidget], summary: ResultsSummary) -> None:
    SummaryDialog(parent, summary).exec()


class AboutDialog(QDialog):
    """Вікно "Про програму": що робить застосунок і в якому порядку перевіряються критерії."""

    TEXT = f"""
        <h3>Контроль збіжності ітераційних розв'язувачів</h3>
        <p>Порівняння методів розв'язування лінійних систем A x = b
        з єдиним контролером критеріїв зупинки.</p>
        <p><b>Критерії зупинки (у порядку перевірки):</b></p>
        <ol>
            <li>Некоректні значення (NaN): FAILURE</li>
            <li>Монотонне зростання нев'язки: DIVERGED</li>
            <li>Ліміт ітерацій: STOPPED_WITHOUT_CONVERGENCE</li>
            <li>Нев'язка нижче порогу: CONVERGED</li>
        </ol>
        <p>Кнопка "Скасувати" зупиняє обчислення на найближчій ітерації (CANCELLED).</p>
        <p style="color: gray;">Версія {__version__}</p>
    """

    def __init__(self, parent: Optional[QWidget]) -> None:
        super().__init__(parent)
        self.setWindowTitle("Про програму")
        self.setModal(True)
        self.setMinimumWidth(520)

        card = QFrame(self)
        card.setObjectName("aboutCard")
        apply_card_style(card)

        text = QLabel(self.TEXT, card)
        text.setWordWrap(True)
        text.setTextFormat(Qt.TextFormat.RichText)

        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        card_layout.addWidget(text)

        close = QDialogButtonBox(QDialogButtonBox.StandardButton.Close, parent=self)
        close.rejected.connect(self.reject)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        outer.setSpacing(SPACING)
        outer.addWidget(card)
        outer.addWidget(close)
