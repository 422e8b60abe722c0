"""Unit tests for the individual stop criteria."""

from __future__ import annotations

import math

import numpy as np
import pytest

from convergence_app.core.cancellation import CancellationStopCriterion, CancellationToken
from convergence_app.core.delegate import DelegateStopCriterion
from convergence_app.core.divergence import DivergenceStopCriterion
from convergence_app.core.failure import FailureStopCriterion
from convergence_app.core.iteration_count import IterationCountStopCriterion
from convergence_app.core.residual import ResidualStopCriterion
from convergence_app.core.status import IterationStatus

C = IterationStatus.CONTINUE

SOURCE = np.ones(2)
SOLUTION = np.zeros(2)


def residual_of(norm: float) -> np.ndarray:
    return np.array([norm, 0.0])


def feed(criterion, norms, start: int = 0):
    """Прогнати критерій по послідовності норм нев'язки."""
    return [
        criterion.determine_status(start + k, SOLUTION, SOURCE, residual_of(norm))
        for k, norm in enumerate(norms)
    ]


class TestIterationCount:
    def test_boundary(self) -> None:
        crit = IterationCountStopCriterion(5)
        assert crit.determine_status(4, SOLUTION, SOURCE, SOURCE) is C
        assert crit.determine_status(5, SOLUTION, SOURCE, SOURCE) is IterationStatus.STOPPED_WITHOUT_CONVERGENCE
        assert crit.determine_status(6, SOLUTION, SOURCE, SOURCE) is IterationStatus.STOPPED_WITHOUT_CONVERGENCE

    def test_repeated_evaluation_is_stable(self) -> None:
        crit = IterationCountStopCriterion(3)
        first = crit.determine_status(3, SOLUTION, SOURCE, SOURCE)
        assert crit.determine_status(3, SOLUTION, SOURCE, SOURCE) is first

    @pytest.mark.parametrize("maximum", [0, -1, 2.5])
    def test_invalid_maximum(self, maximum) -> None:
        with pytest.raises(ValueError):
            IterationCountStopCriterion(maximum)

    def test_negative_iteration(self) -> None:
        with pytest.raises(ValueError):
            IterationCountStopCriterion().determine_status(-1, SOLUTION, SOURCE, SOURCE)

    def test_default_and_setter(self) -> None:
        crit = IterationCountStopCriterion()
        assert crit.maximum_number_of_iterations == IterationCountStopCriterion.DEFAULT_MAXIMUM_NUMBER_OF_ITERATIONS
        crit.maximum_number_of_iterations = 7
        assert crit.maximum_number_of_iterations == 7
        with pytest.raises(ValueError):
            crit.maximum_number_of_iterations = 0
        crit.reset_maximum_to_default()
        assert crit.maximum_number_of_iterations == 1000


class TestResidual:
    def test_converges_after_staying_below(self) -> None:
        crit = ResidualStopCriterion(maximum=1e-3, minimum_iterations_below_maximum=3)
        statuses = feed(crit, [1e-5] * 4, start=10)
        assert statuses == [C, C, C, IterationStatus.CONVERGED]
        assert crit.iterations_below_maximum == 3

    def test_zero_latency_converges_immediately(self) -> None:
        crit = ResidualStopCriterion(maximum=1e-3)
        assert feed(crit, [1.0, 1e-4]) == [C, IterationStatus.CONVERGED]

    def test_bound_is_relative_to_source(self) -> None:
        crit = ResidualStopCriterion(maximum=1e-3)
        source = np.array([100.0, 0.0])
        status = crit.determine_status(0, SOLUTION, source, residual_of(0.05))
        assert status is IterationStatus.CONVERGED

    def test_rising_above_threshold_restarts_count(self) -> None:
        crit = ResidualStopCriterion(maximum=1e-3, minimum_iterations_below_maximum=2)
        assert feed(crit, [1e-4, 1e-4, 1.0, 1e-4, 1e-4]) == [C, C, C, C, C]
        assert crit.iterations_below_maximum == 1
        assert crit.determine_status(5, SOLUTION, SOURCE, residual_of(1e-4)) is IterationStatus.CONVERGED

    def test_same_iteration_does_not_advance(self) -> None:
        crit = ResidualStopCriterion(maximum=1e-3, minimum_iterations_below_maximum=2)
        for _ in range(3):
            assert crit.determine_status(5, SOLUTION, SOURCE, residual_of(1e-6)) is C
        assert crit.iterations_below_maximum == 0
        assert crit.last_iteration == 5

    def test_nan_residual_diverges(self) -> None:
        crit = ResidualStopCriterion(maximum=1e-3)
        status = crit.determine_status(0, SOLUTION, SOURCE, residual_of(float("nan")))
        assert status is IterationStatus.DIVERGED

    def test_nan_source_diverges(self) -> None:
        crit = ResidualStopCriterion(maximum=1e-3)
        source = np.array([float("nan"), 1.0])
        assert crit.determine_status(0, SOLUTION, source, residual_of(0.0)) is IterationStatus.DIVERGED

    def test_length_mismatch(self) -> None:
        crit = ResidualStopCriterion()
        with pytest.raises(ValueError):
            crit.determine_status(0, SOLUTION, np.ones(3), residual_of(0.0))
        with pytest.raises(ValueError):
            crit.determine_status(0, SOLUTION, SOURCE, np.zeros(5))

    @pytest.mark.parametrize("kwargs", [{"maximum": -1.0}, {"maximum": float("nan")},
                                        {"minimum_iterations_below_maximum": -1}])
    def test_invalid_configuration(self, kwargs) -> None:
        with pytest.raises(ValueError):
            ResidualStopCriterion(**kwargs)

    def test_defaults(self) -> None:
        crit = ResidualStopCriterion(maximum=0.5, minimum_iterations_below_maximum=4)
        crit.reset_maximum_to_default()
        crit.reset_minimum_iterations_below_maximum_to_default()
        assert crit.maximum == ResidualStopCriterion.DEFAULT_MAXIMUM_RESIDUAL
        assert crit.minimum_iterations_below_maximum == 0


class TestDivergence:
    def test_monotone_run_diverges_only_when_window_is_full(self) -> None:
        crit = DivergenceStopCriterion(maximum_relative_increase=0.08, minimum_number_of_iterations=3)
        assert feed(crit, [1.0, 2.0, 4.0, 8.0]) == [C, C, C, IterationStatus.DIVERGED]

    @pytest.mark.parametrize("window", [3, 5, 10])
    def test_no_verdict_before_window(self, window: int) -> None:
        crit = DivergenceStopCriterion(minimum_number_of_iterations=window)
        statuses = feed(crit, [2.0 ** k for k in range(window + 1)])
        assert statuses[:-1] == [C] * window
        assert statuses[-1] is IterationStatus.DIVERGED

    def test_increase_within_tolerance_breaks_run(self) -> None:
        crit = DivergenceStopCriterion(maximum_relative_increase=0.08, minimum_number_of_iterations=3)
        # 2.0 -> 2.1 лише +5%
        assert feed(crit, [1.0, 2.0, 2.1, 4.0, 8.0]) == [C] * 5
        assert crit.determine_status(5, SOLUTION, SOURCE, residual_of(16.0)) is IterationStatus.DIVERGED

    @pytest.mark.parametrize(
        "norms, last",
        [
            ([1.0, 1.1, 1.2, 1.3], IterationStatus.DIVERGED),
            ([1.0, 1.1, 1.05, 1.3], C),
            ([1.0, 1.1, 1.2, 1.15, 1.3, 1.45], C),
            ([1.0, 1.1, 1.2, 1.15, 1.3, 1.45, 1.6], IterationStatus.DIVERGED),
        ],
        ids=["steady-growth", "single-dip", "dip-inside-window", "dip-left-window"],
    )
    def test_growth_sequences(self, norms, last) -> None:
        crit = DivergenceStopCriterion(maximum_relative_increase=0.08, minimum_number_of_iterations=3)
        assert feed(crit, norms) == [C] * (len(norms) - 1) + [last]

    def test_repeated_iteration_skips_norm(self) -> None:
        class CountingVector:
            calls = 0

            def __len__(self) -> int:
                return 2

            def infinity_norm(self) -> float:
                CountingVector.calls += 1
                return 100.0

        crit = DivergenceStopCriterion(minimum_number_of_iterations=3)
        feed(crit, [1.0, 2.0])
        assert crit.determine_status(1, SOLUTION, SOURCE, CountingVector()) is C
        assert CountingVector.calls == 0

    def test_decreasing_residual_continues(self) -> None:
        crit = DivergenceStopCriterion(minimum_number_of_iterations=3)
        assert feed(crit, [8.0, 4.0, 2.0, 1.0, 0.5]) == [C] * 5

    def test_nan_diverges_immediately(self) -> None:
        crit = DivergenceStopCriterion()
        status = crit.determine_status(0, SOLUTION, SOURCE, residual_of(float("nan")))
        assert status is IterationStatus.DIVERGED

    def test_repeated_iteration_is_ignored(self) -> None:
        crit = DivergenceStopCriterion(minimum_number_of_iterations=3)
        feed(crit, [1.0, 2.0])
        crit.determine_status(1, SOLUTION, SOURCE, residual_of(100.0))
        np.testing.assert_array_equal(crit.residual_history, [1.0, 2.0])

    def test_history_keeps_last_window(self) -> None:
        crit = DivergenceStopCriterion(minimum_number_of_iterations=3)
        feed(crit, [5.0, 4.0, 3.0, 2.0, 1.0])
        assert crit.history_length == 4
        np.testing.assert_array_equal(crit.residual_history, [4.0, 3.0, 2.0, 1.0])

    @pytest.mark.parametrize("kwargs", [{"minimum_number_of_iterations": 2},
                                        {"maximum_relative_increase": 0.0},
                                        {"maximum_relative_increase": -0.5}])
    def test_invalid_configuration(self, kwargs) -> None:
        with pytest.raises(ValueError):
            DivergenceStopCriterion(**kwargs)

    def test_changing_window_drops_history(self) -> None:
        crit = DivergenceStopCriterion(minimum_number_of_iterations=3)
        feed(crit, [1.0, 2.0])
        crit.minimum_number_of_iterations = 4
        assert crit.residual_history.size == 0
        assert crit.history_length == 5


class TestFailure:
    def test_finite_values_continue(self) -> None:
        assert FailureStopCriterion().determine_status(0, SOLUTION, SOURCE, SOURCE) is C

    def test_nan_in_solution(self) -> None:
        x = np.array([1.0, float("nan")])
        assert FailureStopCriterion().determine_status(0, x, SOURCE, SOURCE) is IterationStatus.FAILURE

    def test_nan_in_residual(self) -> None:
        crit = FailureStopCriterion()
        assert crit.determine_status(0, SOLUTION, SOURCE, residual_of(float("nan"))) is IterationStatus.FAILURE

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            FailureStopCriterion().determine_status(0, SOLUTION, SOURCE, np.zeros(3))


class TestCancellation:
    def test_token_parent_propagates_down_only(self) -> None:
        parent = CancellationToken()
        child = parent.linked()
        child.cancel()
        assert child.is_cancelled and not parent.is_cancelled

        other = CancellationToken(parent)
        parent.cancel()
        assert other.is_cancelled

    def test_cancel_is_visible_without_evaluation(self) -> None:
        crit = CancellationStopCriterion()
        assert crit.determine_status(0, SOLUTION, SOURCE, SOURCE) is C
        crit.cancel()
        assert crit.status is IterationStatus.CANCELLED
        assert crit.determine_status(1, SOLUTION, SOURCE, SOURCE) is IterationStatus.CANCELLED

    def test_reset_creates_fresh_token(self) -> None:
        crit = CancellationStopCriterion()
        crit.cancel()
        old_token = crit.token
        crit.reset()
        assert crit.token is not old_token
        assert crit.determine_status(0, SOLUTION, SOURCE, SOURCE) is C

    def test_cancelled_parent_survives_reset(self) -> None:
        parent = CancellationToken()
        crit = CancellationStopCriterion(parent)
        parent.cancel()
        crit.reset()
        assert crit.determine_status(0, SOLUTION, SOURCE, SOURCE) is IterationStatus.CANCELLED

    def test_clone_shares_parent(self) -> None:
        parent = CancellationToken()
        clone = CancellationStopCriterion(parent).clone()
        assert clone.parent is parent
        parent.cancel()
        assert clone.status is IterationStatus.CANCELLED


class TestDelegate:
    def test_returns_callback_verdict(self) -> None:
        verdicts = iter([C, IterationStatus.CONVERGED])
        crit = DelegateStopCriterion(lambda k, x, b, r: next(verdicts))
        assert crit.status is C
        assert crit.determine_status(0, SOLUTION, SOURCE, SOURCE) is C
        assert crit.determine_status(1, SOLUTION, SOURCE, SOURCE) is IterationStatus.CONVERGED
        assert crit.status is IterationStatus.CONVERGED

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(TypeError):
            DelegateStopCriterion("not a function")

    def test_non_status_result_is_type_error(self) -> None:
        crit = DelegateStopCriterion(lambda k, x, b, r: "converged")
        with pytest.raises(TypeError):
            crit.determine_status(0, SOLUTION, SOURCE, SOURCE)

    def test_clone_shares_callback(self) -> None:
        def verdict(k, x, b, r):
            return IterationStatus.DIVERGED

        crit = DelegateStopCriterion(verdict)
        crit.determine_status(0, SOLUTION, SOURCE, SOURCE)
        clone = crit.clone()
        assert clone.callback is verdict
        assert clone.status is C


CRITERION_FACTORIES = [
    lambda: IterationCountStopCriterion(1),
    lambda: ResidualStopCriterion(maximum=1e-3),
    lambda: DivergenceStopCriterion(minimum_number_of_iterations=3),
    FailureStopCriterion,
    CancellationStopCriterion,
    lambda: DelegateStopCriterion(lambda k, x, b, r: IterationStatus.CONVERGED),
]


@pytest.mark.parametrize("factory", CRITERION_FACTORIES)
def test_clone_status_matches_reset_status(factory) -> None:
    crit = factory()
    for k, norm in enumerate([1.0, 1e-6, float("nan")]):
        crit.determine_status(k + 1, SOLUTION, SOURCE, residual_of(norm))

    clone = crit.clone()
    crit.reset()
    assert type(clone) is type(crit)
    assert clone.status is crit.status


@pytest.mark.parametrize("factory", CRITERION_FACTORIES)
def test_clone_does_not_share_progress(factory) -> None:
    crit = factory()
    clone = crit.clone()
    clone.determine_status(3, SOLUTION, SOURCE, residual_of(float("nan")))
    fresh = factory()
    assert crit.status is fresh.status


def test_residual_run_length_after_reset() -> None:
    crit = ResidualStopCriterion(maximum=1e-3, minimum_iterations_below_maximum=1)
    feed(crit, [1e-4, 1e-4])
    assert crit.status is IterationStatus.CONVERGED
    crit.reset()
    assert crit.iterations_below_maximum == 0
    assert crit.last_iteration is None
    assert math.isclose(crit.maximum, 1e-3)
