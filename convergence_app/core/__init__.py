"""
Ядро: стани ітерацій, критерії зупинки, контролер, розв'язувачі.
"""

from .cancellation import CancellationStopCriterion, CancellationToken
from .controller import IterationController
from .criterion_base import StopCriterion
from .delegate import DelegateStopCriterion
from .divergence import DivergenceStopCriterion
from .failure import FailureStopCriterion
from .iteration_count import IterationCountStopCriterion
from .residual import ResidualStopCriterion
from .status import IterationStatus, StopLevel
from .vectors import DenseVector, NumericVector, infinity_norm

__all__ = [
    "IterationStatus",
    "StopLevel",
    "NumericVector",
    "DenseVector",
    "infinity_norm",
    "StopCriterion",
    "IterationCountStopCriterion",
    "ResidualStopCriterion",
    "DivergenceStopCriterion",
    "FailureStopCriterion",
    "CancellationToken",
    "CancellationStopCriterion",
    "DelegateStopCriterion",
    "IterationController",
]
