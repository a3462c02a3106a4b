"""
uncertain.core.errors
=====================

Failure values produced by the query engines.

`ConvergenceFailure` is an ordinary value: `expect()` returns it instead of a
number when its step budget runs out. Callers may inspect the estimate, relax
the precision and retry, or turn it into a `ConvergenceError`.

Examples
--------
>>> from uncertain.core.errors import ConvergenceFailure
>>> failure = ConvergenceFailure(mean=2.0, diff_sum=400.0, steps=100, precision=0.1)
>>> failure.standard_error
0.2
>>> failure.half_width
0.4
>>> print(failure)
Expected value 2.0 +/- 0.4 did not converge to desired precision 0.1 after 100 samples
"""

from __future__ import annotations
import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ConvergenceFailure:
    """
    Snapshot of a Welford estimator that exhausted its step budget.

    Attributes
    ----------
    mean : float
        Running mean after the last sample
    diff_sum : float
        Accumulated sum of squared deviations from the running mean
    steps : int
        Number of samples drawn
    precision : float
        Precision that was requested
    """

    mean: float
    diff_sum: float
    steps: int
    precision: float

    @property
    def variance(self) -> float:
        """Sample variance of the observed values (population form)."""
        return self.diff_sum / self.steps if self.steps else math.inf

    @property
    def standard_error(self) -> float:
        """Standard error of the mean, ``sqrt(diff_sum) / steps``."""
        return math.sqrt(self.diff_sum) / self.steps if self.steps else math.inf

    @property
    def half_width(self) -> float:
        """Two standard errors: the precision actually achieved."""
        return 2 * self.standard_error

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return (
            f"Expected value {self.mean} +/- {self.half_width} did not converge "
            f"to desired precision {self.precision} after {self.steps} samples"
        )

    def raise_for_status(self) -> None:
        """Raise `ConvergenceError` carrying this record."""
        raise ConvergenceError(self)


class ConvergenceError(ArithmeticError):
    """Raised on request when an expectation did not reach its precision."""

    def __init__(self, failure: ConvergenceFailure) -> None:
        super().__init__(str(failure))
        self.failure = failure
