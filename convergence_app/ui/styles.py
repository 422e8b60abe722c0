"""
Темна тема для застосунку порівняння ітераційних розв'язувачів.

Основні принципи:
    - темні фони, мінімум рамок;
    - зелений акцент для дій, червоний: для скасування;
    - кожен IterationStatus має свій колір (таблиця, графіки, зведення).
"""

from __future__ import annotations
from dataclasses import dataclass

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QFont, QPalette
from PyQt6.QtWidgets import (
    QApplication,
    QWidget,
    QTableWidget,
    QHeaderView,
    QGroupBox,
    QPushButton,
    QLabel,
)

from convergence_app.core.status import IterationStatus

MARGIN = 12
SPACING = 10
RADIUS = 6

FONT_FAMILY = "Inter"
FONT_SIZE = 10


@dataclass(frozen=True)
class SolverPalette:
    background: str = "#101413"
    surface: str = "#171d1c"
    surface_alt: str = "#1f2725"

    text_main: str = "#e4ece9"
    text_muted: str = "#93a39e"
    text_inverse: str = "#101413"

    accent: str = "#4fc08d"
    accent_alt: str = "#73d9a9"
    danger: str = "#e5645b"
    danger_alt: str = "#f08a82"

    border: str = "#28312f"
    border_soft: str = "#1b2220"


PALETTE = SolverPalette()

STATUS_COLORS = {
    IterationStatus.INDETERMINATE: PALETTE.text_muted,
    IterationStatus.CONTINUE: PALETTE.text_main,
    IterationStatus.CONVERGED: PALETTE.accent,
    IterationStatus.DIVERGED: PALETTE.danger,
    IterationStatus.FAILURE: "#d9a03f",
    IterationStatus.STOPPED_WITHOUT_CONVERGENCE: "#c9b458",
    IterationStatus.CANCELLED: "#8aa2d6",
}


def status_color(status: IterationStatus) -> str:
    return STATUS_COLORS.get(status, PALETTE.text_main)


# ---------------------------------------------------------------------------
# GLOBAL APP STYLESHEET
# ---------------------------------------------------------------------------

def build_app_stylesheet() -> str:
    p = PALETTE

    return f"""
    QWidget {{
        background-color: {p.background};
        color: {p.text_main};
        font-family: "{FONT_FAMILY}";
        font-size: {FONT_SIZE}pt;
    }}

    QGroupBox {{
        background-color: {p.surface};
        border: 1px solid {p.border_soft};
        border-radius: {RADIUS}px;
        margin-top: 14px;
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 10px;
        padding: 0 4px;
        color: {p.accent};
        font-weight: 600;
    }}
    QGroupBox:disabled {{
        color: {p.text_muted};
    }}

    QMenuBar {{
        background-color: {p.surface};
        border-bottom: 1px solid {p.border};
    }}
    QMenuBar::item:selected, QMenu::item:selected {{
        background-color: {p.accent};
        color: {p.text_inverse};
    }}
    QMenu {{
        background-color: {p.surface_alt};
        border: 1px solid {p.border};
    }}

    QStatusBar {{
        background-color: {p.surface};
        color: {p.text_muted};
        border-top: 1px solid {p.border};
    }}

    QPushButton {{
        background-color: {p.accent};
        color: {p.text_inverse};
        border-radius: {RADIUS}px;
        padding: 7px 14px;
        border: 1px solid {p.accent};
        font-weight: 600;
    }}
    QPushButton:hover {{
        background-color: {p.accent_alt};
        border-color: {p.accent_alt};
    }}
    QPushButton:disabled {{
        background-color: {p.surface_alt};
        color: {p.text_muted};
        border-color: {p.border};
    }}

    QSpinBox, QDoubleSpinBox, QComboBox {{
        background-color: {p.surface};
        border: 1px solid {p.border};
        border-radius: {RADIUS}px;
        padding: 6px 8px;
        color: {p.text_main};
    }}
    QSpinBox:focus, QDoubleSpinBox:focus, QComboBox:focus {{
        border: 1px solid {p.accent};
    }}

    QCheckBox::indicator {{
        width: 16px;
        height: 16px;
        border-radius: 3px;
        border: 1px solid {p.border};
        background: {p.surface_alt};
    }}
    QCheckBox::indicator:checked {{
        background: {p.accent};
        border: 1px solid {p.accent};
    }}

    QTableWidget {{
        background-color: {p.surface};
        border: 1px solid {p.border};
        border-radius: {RADIUS}px;
        gridline-color: {p.border};
        alternate-background-color: {p.surface_alt};
        selection-background-color: {p.accent};
        selection-color: {p.text_inverse};
    }}
    QHeaderView::section {{
        background-color: {p.surface_alt};
        color: {p.text_main};
        padding: 6px;
        border: none;
        border-right: 1px solid {p.border};
        font-weight: 600;
    }}

    QToolTip {{
        background-color: {p.surface_alt};
        color: {p.text_main};
        border: 1px solid {p.border};
        padding: 6px;
    }}
    """


# ---------------------------------------------------------------------------
# APPLY STYLE
# ---------------------------------------------------------------------------

def apply_app_style(app: QApplication) -> None:
    p = app.palette()

    p.setColor(QPalette.ColorRole.Window, QColor(PALETTE.background))
    p.setColor(QPalette.ColorRole.Base, QColor(PALETTE.surface))
    p.setColor(QPalette.ColorRole.Text, QColor(PALETTE.text_main))
    p.setColor(QPalette.ColorRole.Button, QColor(PALETTE.accent))

    app.setPalette(p)
    app.setFont(QFont(FONT_FAMILY, FONT_SIZE))
    app.setStyleSheet(build_app_stylesheet())


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------

def apply_groupbox_flat_style(group: QGroupBox):
    group.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)


def apply_table_style(table: QTableWidget):
    table.verticalHeader().setVisible(False)
    table.setAlternatingRowColors(True)
    table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
    table.horizontalHeader().setHighlightSections(False)
    table.horizontalHeader().setDefaultAlignment(
        Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
    )


def _button_sheet(background: str, color: str, border: str, hover: str) -> str:
    return f"""
        QPushButton {{
            background-color: {background};
            color: {color};
            border-radius: {RADIUS}px;
            padding: 7px 14px;
            border: 1px solid {border};
        }}
        QPushButton:hover {{
            border-color: {hover};
        }}
        QPushButton:disabled {{
            background-color: {PALETTE.surface_alt};
            color: {PALETTE.text_muted};
            border-color: {PALETTE.border};
        }}
    """


def apply_button_secondary(btn: QPushButton):
    p = PALETTE
    btn.setStyleSheet(_button_sheet(p.surface_alt, p.text_main, p.border, p.accent))


def apply_button_danger(btn: QPushButton):
    p = PALETTE
    btn.setStyleSheet(_button_sheet(p.danger, p.text_inverse, p.danger, p.danger_alt))


def apply_label_muted(lbl: QLabel):
    lbl.setStyleSheet(f"color: {PALETTE.text_muted};")


def apply_card_style(widget: QWidget):
    widget.setStyleSheet(f"""
        QWidget#{widget.objectName()} {{
            background-color: {PALETTE.surface};
            border-radius: {RADIUS}px;
            border: 1px solid {PALETTE.border};
        }}
    """)
