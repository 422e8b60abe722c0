"""
registry.py

Статичний реєстр налаштувань розв'язувачів ("solver setups").

Кожен запис описує, як створити розв'язувач і його передобумовлювач,
а також відносні оцінки швидкості (solution_speed) і надійності
(reliability). CompositeSolver перебирає налаштування в порядку
зростання відношення solution_speed / reliability.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Union

from .bicgstab import BiCgStabSolver
from .conjugate_gradient import ConjugateGradientSolver
from .jacobi import JacobiSolver
from .preconditioners import DiagonalPreconditioner, UnitPreconditioner
from .solver_base import IterativeSolver, Preconditioner

SolverFactory = Callable[[], IterativeSolver]
PreconditionerFactory = Callable[[], Preconditioner]


@dataclass(frozen=True)
class SolverSetup:
    key: str
    name: str
    factory: SolverFactory
    preconditioner_factory: PreconditionerFactory
    solution_speed: float
    reliability: float

    @property
    def ratio(self) -> float:
        return self.solution_speed / self.reliability

    def create_solver(self) -> IterativeSolver:
        solver = self.factory()
        solver.name = self.name
        return solver

    def create_preconditioner(self) -> Preconditioner:
        return self.preconditioner_factory()


SOLVER_SETUPS: Dict[str, SolverSetup] = {
    "cg": SolverSetup(
        key="cg",
        name="CG",
        factory=ConjugateGradientSolver,
        preconditioner_factory=UnitPreconditioner,
        solution_speed=1.0,
        reliability=2.0,
    ),
    "cg_diag": SolverSetup(
        key="cg_diag",
        name="CG + Якобі-передобумовлювач",
        factory=ConjugateGradientSolver,
        preconditioner_factory=DiagonalPreconditioner,
        solution_speed=1.2,
        reliability=2.0,
    ),
    "bicgstab": SolverSetup(
        key="bicgstab",
        name="BiCGStab",
        factory=BiCgStabSolver,
        preconditioner_factory=UnitPreconditioner,
        solution_speed=2.0,
        reliability=2.5,
    ),
    "bicgstab_diag": SolverSetup(
        key="bicgstab_diag",
        name="BiCGStab + Якобі-передобумовлювач",
        factory=BiCgStabSolver,
        preconditioner_factory=DiagonalPreconditioner,
        solution_speed=2.2,
        reliability=2.5,
    ),
    "jacobi": SolverSetup(
        key="jacobi",
        name="Якобі",
        factory=JacobiSolver,
        preconditioner_factory=DiagonalPreconditioner,
        solution_speed=3.0,
        reliability=1.0,
    ),
}


def available_setups(
    exclude: Iterable[Union[str, SolverFactory]] = (),
) -> List[SolverSetup]:
    """
    Налаштування, відсортовані за solution_speed / reliability
    (за рівності: за ключем).

    exclude може містити ключі реєстру або класи розв'язувачів.
    """
    excluded = set(exclude)
    setups = [
        setup
        for setup in SOLVER_SETUPS.values()
        if setup.key not in excluded and setup.factory not in excluded
    ]
    return sorted(setups, key=lambda setup: (setup.ratio, setup.key))


def get_setup(key: str) -> SolverSetup:
    try:
        return SOLVER_SETUPS[key]
    except KeyError:
        raise ValueError(f"Невідомий розв'язувач: {key}") from None


def create_solver(key: str) -> IterativeSolver:
    """Створити розв'язувач за ключем реєстру (назва береться з налаштування)."""
    return get_setup(key).create_solver()


__all__ = [
    "SolverSetup",
    "SOLVER_SETUPS",
    "available_setups",
    "get_setup",
    "create_solver",
]
