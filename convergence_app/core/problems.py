"""
problems.py

Модуль з тестовими лінійними системами A x = b.
Формат:
    - кожна задача будується функцією build(n) -> (A, b) для розміру n >= 2;
    - реалізовані:
        poisson_1d           – симетрична додатно визначена тридіагональна
        convection_diffusion – несиметрична тридіагональна
        coupled_spd          – SPD без діагональної переваги (Якобі розбігається)
        random_dominant      – випадкова з діагональною перевагою (фіксований seed)
    - є реєстр PROBLEMS для зручного вибору задачі в GUI/движку.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np

SystemBuilder = Callable[[int], Tuple[np.ndarray, np.ndarray]]

MIN_SIZE = 2


def _check_size(n: int) -> int:
    if int(n) != n or n < MIN_SIZE:
        raise ValueError(f"Розмір системи має бути цілим >= {MIN_SIZE}, отримано: {n}")
    return int(n)


def _tridiagonal(n: int, lower: float, main: float, upper: float) -> np.ndarray:
    A = np.diag(np.full(n, main))
    A += np.diag(np.full(n - 1, lower), k=-1)
    A += np.diag(np.full(n - 1, upper), k=1)
    return A


# ---------------------------------------------------------------------------
# Системи
# ---------------------------------------------------------------------------

def poisson_1d(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    -u'' = 1 на рівномірній сітці: A = tridiag(-1, 2, -1), b = h^2 * 1.
    """
    n = _check_size(n)
    h = 1.0 / (n + 1)
    return _tridiagonal(n, -1.0, 2.0, -1.0), np.full(n, h * h)


def convection_diffusion(n: int, peclet: float = 0.6) -> Tuple[np.ndarray, np.ndarray]:
    """
    -u'' + c u' = 1, центральні різниці: A = tridiag(-1 - c/2, 2, -1 + c/2).
    """
    n = _check_size(n)
    h = 1.0 / (n + 1)
    half = peclet / 2.0
    return _tridiagonal(n, -1.0 - half, 2.0, -1.0 + half), np.full(n, h * h)


def coupled_spd(n: int, coupling: float = 0.9) -> Tuple[np.ndarray, np.ndarray]:
    """
    A = (1 - a) I + a * 1 1^T, b = 1.

    SPD для 0 <= a < 1, але при a (n - 1) > 1 метод Якобі розбігається:
    вектор 1: власний для I - A з власним числом -a (n - 1).
    """
    n = _check_size(n)
    A = (1.0 - coupling) * np.eye(n) + coupling * np.ones((n, n))
    return A, np.ones(n)


def random_dominant(n: int, seed: int = 7) -> Tuple[np.ndarray, np.ndarray]:
    """Випадкова несиметрична матриця зі строгою діагональною перевагою."""
    n = _check_size(n)
    rng = np.random.default_rng(seed)
    A = rng.uniform(-1.0, 1.0, size=(n, n))
    np.fill_diagonal(A, 0.0)
    np.fill_diagonal(A, np.abs(A).sum(axis=1) + 1.0)
    b = rng.uniform(-1.0, 1.0, size=n)
    return A, b


# ---------------------------------------------------------------------------
# Реєстр
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LinearSystem:
    key: str
    name: str
    builder: SystemBuilder
    symmetric: bool

    def build(self, n: int) -> Tuple[np.ndarray, np.ndarray]:
        return self.builder(n)


PROBLEMS: Dict[str, LinearSystem] = {
    "poisson_1d": LinearSystem(
        key="poisson_1d",
        name="Пуассон 1D: tridiag(-1, 2, -1)",
        builder=poisson_1d,
        symmetric=True,
    ),
    "convection_diffusion": LinearSystem(
        key="convection_diffusion",
        name="Конвекція-дифузія: tridiag(-1.3, 2, -0.7)",
        builder=convection_diffusion,
        symmetric=False,
    ),
    "coupled_spd": LinearSystem(
        key="coupled_spd",
        name="Сильно зв'язана SPD: 0.1 I + 0.9 J",
        builder=coupled_spd,
        symmetric=True,
    ),
    "random_dominant": LinearSystem(
        key="random_dominant",
        name="Випадкова з діагональною перевагою",
        builder=random_dominant,
        symmetric=False,
    ),
}


def get_problem(key: str) -> LinearSystem:
    try:
        return PROBLEMS[key]
    except KeyError:
        raise ValueError(f"Невідома задача: {key}") from None


__all__ = [
    "SystemBuilder",
    "MIN_SIZE",
    "poisson_1d",
    "convection_diffusion",
    "coupled_spd",
    "random_dominant",
    "LinearSystem",
    "PROBLEMS",
    "get_problem",
]
