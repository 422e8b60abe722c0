"""Unit tests for the composite solver fallback chain."""

from __future__ import annotations

from typing import List, Optional

import numpy as np
import pytest

from convergence_app.core.cancellation import CancellationStopCriterion
from convergence_app.core.composite import CompositeSolver
from convergence_app.core.controller import IterationController
from convergence_app.core.iteration_count import IterationCountStopCriterion
from convergence_app.core.iteration_result import IterationResult
from convergence_app.core.jacobi import JacobiSolver
from convergence_app.core.preconditioners import UnitPreconditioner
from convergence_app.core.problems import coupled_spd, random_dominant
from convergence_app.core.registry import SolverSetup, available_setups, get_setup
from convergence_app.core.residual import ResidualStopCriterion
from convergence_app.core.solver_base import IterativeSolver, SolverBreakdownError
from convergence_app.core.status import IterationStatus


class ScriptedSolver(IterativeSolver):
    """Не ітерує: запам'ятовує старт, зсуває x на shift і повертає заданий статус."""

    def __init__(self, status: IterationStatus, starts: List[np.ndarray], shift: float = 1.0) -> None:
        super().__init__(name="scripted")
        self._status = status
        self._starts = starts
        self._shift = shift

    def _solve_impl(self, matrix, rhs, x, controller, preconditioner, callback) -> IterationStatus:
        self._starts.append(x.copy())
        x += self._shift
        return self._status


class BrokenSolver(IterativeSolver):
    def _solve_impl(self, matrix, rhs, x, controller, preconditioner, callback) -> IterationStatus:
        raise SolverBreakdownError("штучний збій")


def scripted_setup(key: str, status: IterationStatus, starts: List[np.ndarray],
                   shift: float = 1.0) -> SolverSetup:
    return SolverSetup(
        key=key,
        name=key,
        factory=lambda: ScriptedSolver(status, starts, shift),
        preconditioner_factory=UnitPreconditioner,
        solution_speed=1.0,
        reliability=1.0,
    )


def run(solver: CompositeSolver, A, b, controller: Optional[IterationController] = None, callback=None):
    x = np.zeros(b.shape[0])
    controller = controller or IterationController.create_default()
    status = solver.solve(A, b, x, controller, callback=callback)
    return status, x


def test_falls_back_after_divergence() -> None:
    A, b = coupled_spd(3)
    composite = CompositeSolver([get_setup("jacobi"), get_setup("cg")])

    status, x = run(composite, A, b)

    assert status is IterationStatus.CONVERGED
    assert composite.attempts == [("jacobi", IterationStatus.DIVERGED), ("cg", IterationStatus.CONVERGED)]
    np.testing.assert_allclose(x, b / 2.8, rtol=1e-8)


def test_first_converging_setup_stops_the_chain() -> None:
    A, b = coupled_spd(4)
    starts: List[np.ndarray] = []
    composite = CompositeSolver([get_setup("cg"), scripted_setup("never", IterationStatus.CONVERGED, starts)])

    status, _ = run(composite, A, b)

    assert status is IterationStatus.CONVERGED
    assert [key for key, _ in composite.attempts] == ["cg"]
    assert starts == []


def test_breakdown_moves_to_next_setup() -> None:
    A, b = coupled_spd(3)
    broken = SolverSetup(
        key="broken",
        name="broken",
        factory=BrokenSolver,
        preconditioner_factory=UnitPreconditioner,
        solution_speed=0.1,
        reliability=1.0,
    )
    composite = CompositeSolver([broken, get_setup("cg")])

    status, x = run(composite, A, b)

    assert status is IterationStatus.CONVERGED
    assert composite.attempts == [("broken", IterationStatus.FAILURE), ("cg", IterationStatus.CONVERGED)]
    np.testing.assert_allclose(A @ x, b, atol=1e-9)


def test_all_setups_breaking_down_reports_failure() -> None:
    A = np.array([[0.0, 1.0], [1.0, 0.0]])
    b = np.array([1.0, 0.0])
    composite = CompositeSolver([get_setup("cg")])

    status, x = run(composite, A, b)

    assert status is IterationStatus.FAILURE
    assert composite.attempts == [("cg", IterationStatus.FAILURE)]
    np.testing.assert_array_equal(x, np.zeros(2))


def test_stopped_iterate_becomes_next_start() -> None:
    A, b = coupled_spd(3)
    starts: List[np.ndarray] = []
    composite = CompositeSolver([
        scripted_setup("first", IterationStatus.STOPPED_WITHOUT_CONVERGENCE, starts, shift=2.0),
        scripted_setup("second", IterationStatus.STOPPED_WITHOUT_CONVERGENCE, starts, shift=3.0),
    ])

    status, x = run(composite, A, b)

    assert status is IterationStatus.STOPPED_WITHOUT_CONVERGENCE
    np.testing.assert_array_equal(starts[0], np.zeros(3))
    np.testing.assert_array_equal(starts[1], np.full(3, 2.0))
    np.testing.assert_array_equal(x, np.full(3, 5.0))


@pytest.mark.parametrize("failed", [IterationStatus.DIVERGED, IterationStatus.FAILURE])
def test_failed_attempt_restarts_from_previous_start(failed: IterationStatus) -> None:
    A, b = coupled_spd(3)
    starts: List[np.ndarray] = []
    composite = CompositeSolver([
        scripted_setup("bad", failed, starts, shift=100.0),
        scripted_setup("good", IterationStatus.CONVERGED, starts, shift=1.0),
    ])

    status, x = run(composite, A, b)

    assert status is IterationStatus.CONVERGED
    np.testing.assert_array_equal(starts[1], np.zeros(3))
    np.testing.assert_array_equal(x, np.ones(3))


def test_attempts_get_fresh_controllers() -> None:
    A, b = coupled_spd(3)
    outer = IterationController.create_default()
    composite = CompositeSolver([get_setup("jacobi"), get_setup("cg")])

    status, _ = run(composite, A, b, controller=outer)

    assert status is IterationStatus.CONVERGED
    assert outer.status is IterationStatus.INDETERMINATE
    assert all(c.status is c.initial_status for c in outer)


def test_outer_cancel_before_start() -> None:
    A, b = coupled_spd(3)
    outer = IterationController.create_default()
    outer.cancel()
    composite = CompositeSolver([get_setup("cg")])

    status, x = run(composite, A, b, controller=outer)

    assert status is IterationStatus.CANCELLED
    assert composite.attempts == []
    np.testing.assert_array_equal(x, np.zeros(3))


def test_outer_cancel_reaches_running_attempt() -> None:
    A, b = random_dominant(10)
    outer = IterationController.create_default()
    records: List[IterationResult] = []

    def on_iteration(record: IterationResult) -> None:
        records.append(record)
        outer.cancel()

    composite = CompositeSolver([get_setup("jacobi"), get_setup("cg")])
    status, _ = run(composite, A, b, controller=outer, callback=on_iteration)

    assert status is IterationStatus.CANCELLED
    assert composite.attempts == [("jacobi", IterationStatus.CANCELLED)]
    assert records[-1].status is IterationStatus.CANCELLED
    assert all(r.meta["attempt"] == 1 for r in records)


def test_cancelled_criterion_reaches_running_attempt() -> None:
    A, b = random_dominant(10)
    cancellation = CancellationStopCriterion()
    outer = IterationController([
        cancellation,
        IterationCountStopCriterion(5000),
        ResidualStopCriterion(1e-14),
    ])
    records: List[IterationResult] = []

    def on_iteration(record: IterationResult) -> None:
        records.append(record)
        if len(records) == 2:
            cancellation.cancel()

    composite = CompositeSolver([get_setup("jacobi"), get_setup("cg")])
    status, _ = run(composite, A, b, controller=outer, callback=on_iteration)

    assert status is IterationStatus.CANCELLED
    assert composite.attempts == [("jacobi", IterationStatus.CANCELLED)]
    assert [r.index for r in records] == [0, 1, 2]
    assert records[-1].status is IterationStatus.CANCELLED


def test_cancelled_criterion_before_start() -> None:
    A, b = coupled_spd(3)
    cancellation = CancellationStopCriterion()
    cancellation.cancel()
    outer = IterationController([cancellation, IterationCountStopCriterion(100)])
    composite = CompositeSolver([get_setup("cg")])

    status, x = run(composite, A, b, controller=outer)

    assert status is IterationStatus.CANCELLED
    assert composite.attempts == []
    np.testing.assert_array_equal(x, np.zeros(3))


def test_default_setups_follow_registry_rank() -> None:
    composite = CompositeSolver(exclude=[JacobiSolver])
    assert [s.key for s in composite.setups] == [s.key for s in available_setups([JacobiSolver])]
    assert "jacobi" not in [s.key for s in composite.setups]


def test_requires_at_least_one_setup() -> None:
    with pytest.raises(ValueError):
        CompositeSolver([])
