"""
Віджет для відображення графіків процесу розв'язування в темному стилі.

Показує один графік за раз у вигляді каруселі:
    - історія нев'язки ||r_k||∞ (логарифмічна шкала);
    - профіль розв'язку x_i;
    - порівняння історій нев'язки кількох розв'язувачів.
"""

from __future__ import annotations

from itertools import groupby
from typing import List, Optional, Sequence

import numpy as np
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QLabel,
    QStackedWidget,
    QComboBox,
)

from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from convergence_app.core.iteration_result import IterationResult
from .styles import MARGIN, SPACING, PALETTE, apply_card_style, status_color

_CANVAS_BG = PALETTE.surface_alt
_ACCENT = PALETTE.accent
_TEXT = PALETTE.text_main
_MUTED = PALETTE.text_muted

# Кольори ліній для кількох розв'язувачів / спроб
_SERIES_COLORS = ["#4fc08d", "#5fb3f7", "#e5a25b", "#c678dd", "#e5645b", "#56b6c2"]


class PlotPage:
    def __init__(self, figure: Figure, canvas: FigureCanvas, axes):
        self.figure = figure
        self.canvas = canvas
        self.axes = axes


def _positive(values: Sequence[float]) -> np.ndarray:
    """Нулі та нескінченності не малюються на лог-шкалі: замінюємо на NaN."""
    arr = np.asarray(values, dtype=float)
    return np.where(np.isfinite(arr) & (arr > 0.0), arr, np.nan)


class PlotView(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("plotView")
        self.pages_order = ["residual", "solution", "comparison"]
        self.pages: dict[str, PlotPage] = {}
        self._build_ui()

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(MARGIN, MARGIN, MARGIN, MARGIN)
        layout.setSpacing(SPACING)

        apply_card_style(self)

        nav = QHBoxLayout()
        nav.setSpacing(SPACING)
        nav.setContentsMargins(0, 0, 0, 0)

        nav.addWidget(QLabel("Графік:", self))

        self.combo_mode = QComboBox(self)
        self.combo_mode.addItems([
            "Нев'язка ||r_k||∞",
            "Профіль розв'язку x",
            "Порівняння розв'язувачів",
        ])
        self.combo_mode.currentIndexChanged.connect(self._on_combo_changed)
        nav.addWidget(self.combo_mode, stretch=1)

        self.btn_prev = QPushButton("◀")
        self.btn_next = QPushButton("▶")
        for btn in (self.btn_prev, self.btn_next):
            btn.setFixedWidth(34)
        self.btn_prev.clicked.connect(lambda: self._step_page(-1))
        self.btn_next.clicked.connect(lambda: self._step_page(1))

        nav.addWidget(self.btn_prev)
        nav.addWidget(self.btn_next)
        layout.addLayout(nav)

        self.stacked = QStackedWidget(self)
        layout.addWidget(self.stacked, stretch=1)

        for key in self.pages_order:
            self.pages[key] = self._create_page()
            self.stacked.addWidget(self.pages[key].canvas)

        self.show_placeholder()

    def _create_page(self) -> PlotPage:
        figure = Figure(facecolor=_CANVAS_BG)
        ax = figure.add_subplot(111)
        canvas = FigureCanvas(figure)
        canvas.setStyleSheet("background-color: transparent;")
        return PlotPage(figure, canvas, ax)

    # ------------------------------------------------------------------
    # Навігація
    # ------------------------------------------------------------------
    def _on_combo_changed(self, index: int) -> None:
        self.stacked.setCurrentIndex(index)

    def _step_page(self, delta: int) -> None:
        idx = (self.stacked.currentIndex() + delta) % len(self.pages_order)
        self.stacked.setCurrentIndex(idx)
        self.combo_mode.setCurrentIndex(idx)

    def _set_page(self, key: str) -> None:
        idx = self.pages_order.index(key)
        self.stacked.setCurrentIndex(idx)
        self.combo_mode.setCurrentIndex(idx)

    # ------------------------------------------------------------------
    # Стилізація
    # ------------------------------------------------------------------
    def _style_axes(self, ax) -> None:
        ax.set_facecolor(_CANVAS_BG)
        ax.tick_params(colors=_MUTED, labelsize=9)
        for spine in ax.spines.values():
            spine.set_color(PALETTE.border)
            spine.set_linewidth(0.8)
        ax.grid(True, color=PALETTE.border, linestyle="--", linewidth=0.5, alpha=0.6)
        ax.title.set_color(_TEXT)
        ax.xaxis.label.set_color(_TEXT)
        ax.yaxis.label.set_color(_TEXT)

    def _style_legend(self, ax) -> None:
        legend = ax.legend(facecolor=_CANVAS_BG, edgecolor=PALETTE.border, fontsize=8)
        for text in legend.get_texts():
            text.set_color(_TEXT)

    def _redraw(self, key: str) -> None:
        page = self.pages[key]
        page.figure.tight_layout()
        page.canvas.draw_idle()

    # ------------------------------------------------------------------
    # Публічні методи
    # ------------------------------------------------------------------
    def show_placeholder(self) -> None:
        messages = {
            "residual": "Історія нев'язки з'явиться після запуску",
            "solution": "Профіль розв'язку з'явиться після запуску",
            "comparison": "Порівняння доступне в режимі \"всі розв'язувачі\"",
        }
        for key, msg in messages.items():
            page = self.pages[key]
            ax = page.axes
            ax.clear()
            ax.set_yscale("linear")
            self._style_axes(ax)
            ax.text(0.5, 0.5, msg, ha="center", va="center", transform=ax.transAxes, color=_MUTED)
            page.canvas.draw_idle()

    def plot_residual_history(self, iterations: List[IterationResult]) -> None:
        """
        ||r_k||∞ від k на лог-шкалі. Кожна спроба композитного розв'язувача
        малюється окремою лінією; фінальна точка: кольором статусу.
        """
        if not iterations:
            self.show_placeholder()
            return

        ax = self.pages["residual"].axes
        ax.clear()
        self._style_axes(ax)

        series = groupby(iterations, key=lambda it: (it.meta.get("attempt", 1), it.solver_name))
        for n, ((attempt, name), group) in enumerate(series):
            items = list(group)
            ks = [it.index for it in items]
            rs = _positive([it.residual_norm for it in items])
            color = _SERIES_COLORS[n % len(_SERIES_COLORS)]
            ax.plot(ks, rs, linestyle="-", linewidth=1.5, color=color, label=name or f"спроба {attempt}")

            last = items[-1]
            ax.scatter(
                [last.index],
                _positive([last.residual_norm]),
                color=status_color(last.status),
                marker="o",
                s=45,
                zorder=5,
            )

        ax.set_yscale("log")
        ax.set_xlabel("k (номер ітерації)")
        ax.set_ylabel("||r_k||∞")
        ax.set_title("Історія нев'язки")
        self._style_legend(ax)

        self._redraw("residual")
        self._set_page("residual")

    def plot_solution(self, x: np.ndarray) -> None:
        ax = self.pages["solution"].axes
        ax.clear()
        self._style_axes(ax)

        values = np.real(np.asarray(x))
        ax.plot(np.arange(values.size), values, marker="o", markersize=3, linewidth=1.2, color=_ACCENT)
        ax.set_xlabel("i")
        ax.set_ylabel("x_i")
        ax.set_title("Профіль розв'язку")

        self._redraw("solution")

    def plot_comparison(self, runs: Sequence) -> None:
        """Накласти історії нев'язки кількох SolveRunResult."""
        ax = self.pages["comparison"].axes
        ax.clear()
        self._style_axes(ax)

        for n, run in enumerate(runs):
            if not run.iterations:
                continue
            rs = _positive([it.residual_norm for it in run.iterations])
            color = _SERIES_COLORS[n % len(_SERIES_COLORS)]
            ax.plot(np.arange(rs.size), rs, linewidth=1.4, color=color, label=f"{run.solver_name}: {run.status.label}")

        ax.set_yscale("log")
        ax.set_xlabel("запис траси")
        ax.set_ylabel("||r||∞")
        ax.set_title("Порівняння розв'язувачів")
        self._style_legend(ax)

        self._redraw("comparison")
        self._set_page("comparison")
