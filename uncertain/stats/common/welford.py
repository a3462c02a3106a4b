"""
uncertain.stats.common.welford
==============================

Online expectation estimator with a convergence certificate.

Welford's algorithm keeps the running mean and the sum of squared deviations
(``diff_sum``) without storing the samples:

    n      <- n + 1
    mean'  <- mean + (x - mean) / n
    M2     <- M2 + (x - mean) * (x - mean')

The standard error of the mean is ``sqrt(M2 / n) / sqrt(n) = sqrt(M2) / n``.
An estimate is accepted once twice the standard error (roughly a 95% band)
is within the requested precision.

Examples
--------
>>> from uncertain.stats.common.welford import WelfordAccumulator
>>> acc = WelfordAccumulator()
>>> for x in [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]:
...     acc.push(x)
>>> round(acc.mean, 9), round(acc.diff_sum, 9), acc.steps
(5.0, 32.0, 8)
>>> round(acc.standard_error, 6)
0.707107
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Union

from uncertain.core.errors import ConvergenceFailure
from uncertain.core.names import Epoch

logger = logging.getLogger(__name__)


def mean_standard_error(diff_sum: float, steps: int) -> float:
    """Standard error of the running mean, ``sqrt(diff_sum) / steps``."""
    if steps <= 0:
        return math.inf
    return math.sqrt(diff_sum) / steps


@dataclass
class WelfordAccumulator:
    """Running mean and sum of squared deviations."""

    mean: float = 0.0
    diff_sum: float = 0.0
    steps: int = 0

    def push(self, value: float) -> None:
        x = float(value)
        previous = self.mean
        self.steps += 1
        self.mean = previous + (x - previous) / self.steps
        self.diff_sum += (x - previous) * (x - self.mean)

    @property
    def standard_error(self) -> float:
        return mean_standard_error(self.diff_sum, self.steps)

    @property
    def half_width(self) -> float:
        return 2 * self.standard_error

    def converged(self, precision: float) -> bool:
        return self.half_width <= precision

    def failure(self, precision: float) -> ConvergenceFailure:
        """Freeze the current state into a `ConvergenceFailure` record."""
        return ConvergenceFailure(
            mean=self.mean,
            diff_sum=self.diff_sum,
            steps=self.steps,
            precision=precision,
        )


def compute_expectation(
    draw: Callable[[Epoch], float],
    precision: float,
    *,
    batch_size: int,
    max_batches: int,
    on_batch: Optional[Callable[[int, int, float, float, bool], None]] = None,
) -> Union[float, ConvergenceFailure]:
    """
    Estimate an expectation by sampling epoch by epoch until it converges.

    Args:
        draw: Returns the sampled value for a given epoch
        precision: Required half-width of the two-sigma band (> 0)
        batch_size: Samples drawn between two convergence checks
        max_batches: Maximum number of batches before giving up
        on_batch: Optional callback ``(batch, epoch, mean, half_width, converged)``

    Returns:
        The running mean once converged, else a `ConvergenceFailure`
    """
    if not precision > 0:
        raise ValueError(f"Precision {precision} must be positive")

    acc = WelfordAccumulator()
    epoch = 0
    for batch in range(max_batches):
        for _ in range(batch_size):
            acc.push(draw(Epoch(epoch)))
            epoch += 1
        converged = acc.converged(precision)
        if on_batch is not None:
            on_batch(batch, epoch, acc.mean, acc.half_width, converged)
        if converged:
            logger.debug(
                "Expectation %.6g +/- %.3g converged after %d samples",
                acc.mean,
                acc.half_width,
                acc.steps,
            )
            return acc.mean

    failure = acc.failure(precision)
    logger.warning("%s", failure)
    return failure
