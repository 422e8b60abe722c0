"""Unit tests for CG, BiCGStab, Jacobi and the preconditioners."""

from __future__ import annotations

from typing import List

import numpy as np
import pytest

from convergence_app.core.bicgstab import BiCgStabSolver
from convergence_app.core.conjugate_gradient import ConjugateGradientSolver
from convergence_app.core.controller import IterationController
from convergence_app.core.failure import FailureStopCriterion
from convergence_app.core.iteration_count import IterationCountStopCriterion
from convergence_app.core.iteration_result import IterationResult
from convergence_app.core.jacobi import JacobiSolver
from convergence_app.core.preconditioners import DiagonalPreconditioner, UnitPreconditioner
from convergence_app.core.problems import convection_diffusion, coupled_spd, poisson_1d, random_dominant
from convergence_app.core.residual import ResidualStopCriterion
from convergence_app.core.solver_base import SolverBreakdownError
from convergence_app.core.status import IterationStatus

INDEFINITE = np.array([[0.0, 1.0], [1.0, 0.0]])


def make_controller(max_iter: int = 500, tolerance: float = 1e-10) -> IterationController:
    return IterationController([
        FailureStopCriterion(),
        IterationCountStopCriterion(max_iter),
        ResidualStopCriterion(tolerance),
    ])


def relative_residual(A: np.ndarray, x: np.ndarray, b: np.ndarray) -> float:
    return float(np.max(np.abs(b - A @ x)) / np.max(np.abs(b)))


class TestConjugateGradient:
    def test_converges_on_poisson(self) -> None:
        A, b = poisson_1d(20)
        x = np.zeros(20)
        status = ConjugateGradientSolver().solve(A, b, x, make_controller())

        assert status is IterationStatus.CONVERGED
        assert relative_residual(A, x, b) <= 1e-10
        np.testing.assert_allclose(x, np.linalg.solve(A, b), rtol=1e-6)

    def test_diagonal_preconditioner(self) -> None:
        A, b = coupled_spd(6)
        x = np.zeros(6)
        status = ConjugateGradientSolver().solve(
            A, b, x, make_controller(), preconditioner=DiagonalPreconditioner()
        )
        assert status is IterationStatus.CONVERGED
        np.testing.assert_allclose(x, np.linalg.solve(A, b), rtol=1e-6)

    def test_integer_input_is_promoted(self) -> None:
        A = np.array([[4, 1], [1, 3]])
        b = np.array([1, 2])
        x = np.zeros(2)
        status = ConjugateGradientSolver().solve(A, b, x, make_controller())
        assert status is IterationStatus.CONVERGED
        np.testing.assert_allclose(x, [1.0 / 11.0, 7.0 / 11.0], rtol=1e-8)

    def test_callback_sees_every_check(self) -> None:
        A, b = poisson_1d(8)
        records: List[IterationResult] = []
        solver = ConjugateGradientSolver(name="cg-test")
        status = solver.solve(A, b, np.zeros(8), make_controller(), callback=records.append)

        assert [r.index for r in records] == list(range(len(records)))
        assert records[-1].status is status
        assert all(r.status is IterationStatus.RUNNING for r in records[:-1])
        assert all(r.solver_name == "cg-test" for r in records)
        assert records[0].residual_norm == pytest.approx(np.max(np.abs(b)))

    def test_indefinite_matrix_breaks_down(self) -> None:
        with pytest.raises(SolverBreakdownError):
            ConjugateGradientSolver().solve(INDEFINITE, np.array([1.0, 0.0]), np.zeros(2), make_controller())

    def test_exact_start_converges_at_zero(self) -> None:
        A, b = poisson_1d(5)
        x = np.linalg.solve(A, b)
        records: List[IterationResult] = []
        status = ConjugateGradientSolver().solve(A, b, x, make_controller(tolerance=1e-8), callback=records.append)
        assert status is IterationStatus.CONVERGED
        assert [r.index for r in records] == [0]


class TestBiCgStab:
    def test_converges_on_convection_diffusion(self) -> None:
        A, b = convection_diffusion(30)
        x = np.zeros(30)
        status = BiCgStabSolver().solve(A, b, x, make_controller())
        assert status is IterationStatus.CONVERGED
        assert relative_residual(A, x, b) <= 1e-10

    def test_converges_with_diagonal_preconditioner(self) -> None:
        A, b = random_dominant(25)
        x = np.zeros(25)
        status = BiCgStabSolver().solve(A, b, x, make_controller(), preconditioner=DiagonalPreconditioner())
        assert status is IterationStatus.CONVERGED
        np.testing.assert_allclose(x, np.linalg.solve(A, b), rtol=1e-6, atol=1e-9)


class TestJacobi:
    def test_converges_on_dominant_matrix(self) -> None:
        A, b = random_dominant(10)
        x = np.zeros(10)
        status = JacobiSolver().solve(A, b, x, make_controller(max_iter=2000))
        assert status is IterationStatus.CONVERGED
        assert relative_residual(A, x, b) <= 1e-10

    def test_divergence_is_detected(self) -> None:
        A, b = coupled_spd(3)
        records: List[IterationResult] = []
        status = JacobiSolver().solve(
            A, b, np.zeros(3), IterationController.create_default(), callback=records.append
        )
        assert status is IterationStatus.DIVERGED
        # вікно розбіжності за замовчуванням: 10 ітерацій
        assert records[-1].index == 10

    def test_iteration_limit(self) -> None:
        A, b = random_dominant(10)
        status = JacobiSolver().solve(A, b, np.zeros(10), make_controller(max_iter=3))
        assert status is IterationStatus.STOPPED_WITHOUT_CONVERGENCE

    def test_zero_diagonal_breaks_down(self) -> None:
        with pytest.raises(SolverBreakdownError):
            JacobiSolver().solve(INDEFINITE, np.ones(2), np.zeros(2), make_controller())


class TestCancellation:
    def test_cancelled_before_start(self) -> None:
        A, b = poisson_1d(5)
        x = np.full(5, 3.0)
        controller = make_controller()
        controller.cancel()
        status = ConjugateGradientSolver().solve(A, b, x, controller)
        assert status is IterationStatus.CANCELLED
        np.testing.assert_array_equal(x, np.full(5, 3.0))

    def test_cancel_during_run_stops_at_next_check(self) -> None:
        A, b = random_dominant(10)
        controller = make_controller(max_iter=2000)
        records: List[IterationResult] = []

        def on_iteration(record: IterationResult) -> None:
            records.append(record)
            if record.index == 3:
                controller.cancel()

        status = JacobiSolver().solve(A, b, np.zeros(10), controller, callback=on_iteration)
        assert status is IterationStatus.CANCELLED
        assert records[-1].index == 4
        assert records[-1].status is IterationStatus.CANCELLED


class TestValidation:
    def test_non_square_matrix(self) -> None:
        with pytest.raises(ValueError):
            JacobiSolver().solve(np.ones((2, 3)), np.ones(2), np.zeros(2), make_controller())

    def test_rhs_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            JacobiSolver().solve(np.eye(3), np.ones(2), np.zeros(2), make_controller())

    def test_result_must_be_array(self) -> None:
        with pytest.raises(ValueError):
            JacobiSolver().solve(np.eye(2), np.ones(2), [0.0, 0.0], make_controller())

    def test_controller_required(self) -> None:
        with pytest.raises(TypeError):
            JacobiSolver().solve(np.eye(2), np.ones(2), np.zeros(2), None)

    def test_rhs_required(self) -> None:
        with pytest.raises(TypeError):
            JacobiSolver().solve(np.eye(2), None, np.zeros(2), make_controller())


class TestPreconditioners:
    def test_unit_returns_copy(self) -> None:
        pre = UnitPreconditioner()
        pre.initialize(np.eye(2))
        r = np.array([1.0, 2.0])
        z = pre.approximate(r)
        np.testing.assert_array_equal(z, r)
        assert z is not r

    def test_diagonal_scales_by_inverse_diagonal(self) -> None:
        pre = DiagonalPreconditioner()
        pre.initialize(np.array([[2.0, 1.0], [0.0, 4.0]]))
        np.testing.assert_allclose(pre.inverse_diagonal, [0.5, 0.25])
        np.testing.assert_allclose(pre.approximate(np.array([1.0, 1.0])), [0.5, 0.25])

    @pytest.mark.parametrize("pre", [UnitPreconditioner(), DiagonalPreconditioner()])
    def test_requires_initialize(self, pre) -> None:
        with pytest.raises(RuntimeError):
            pre.approximate(np.ones(2))

    @pytest.mark.parametrize("factory", [UnitPreconditioner, DiagonalPreconditioner])
    def test_shape_checks(self, factory) -> None:
        pre = factory()
        with pytest.raises(ValueError):
            pre.initialize(np.ones((2, 3)))
        pre.initialize(np.eye(2))
        with pytest.raises(ValueError):
            pre.approximate(np.ones(3))
