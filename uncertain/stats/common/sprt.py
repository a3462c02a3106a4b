"""
uncertain.stats.common.sprt
===========================

Wald's sequential probability ratio test for Bernoulli outcomes.

The test decides whether the success rate `q` of a boolean-valued source is at
least a threshold `p`:

    H0: q >= p        vs.        H1: q < p

Both composite hypotheses are reduced to simple ones through an indifference
band around `p`:

    p0 = min(p + delta, (1 + p) / 2)     (representative of H0)
    p1 = max(p - delta, p / 2)           (representative of H1)

so the band never leaves (0, 1), even for thresholds close to 0 or 1. The
running statistic is the cumulative log-likelihood ratio
``sum(log f1(x) / f0(x))`` compared against Wald's boundaries

    upper = log((1 - beta) / alpha)      reject H0
    lower = log(beta / (1 - alpha))      accept H0

with `alpha` the probability of rejecting a true H0 and `beta` the probability
of accepting a false one. Rates inside the band are undecided and usually run
out the sample budget; exhausting the budget counts as "not at least p".

Examples
--------
>>> from uncertain.stats.common.sprt import decision_boundaries, indifference_band
>>> lower, upper = decision_boundaries(1e-8, 1e-8)
>>> round(upper, 4), round(lower, 4)
(18.4207, -18.4207)
>>> indifference_band(0.5, 0.05)
(0.55, 0.45)
>>> p0, p1 = indifference_band(0.01, 0.05)
>>> round(p0, 6), p1
(0.06, 0.005)
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from uncertain.core.names import Epoch

logger = logging.getLogger(__name__)


def indifference_band(probability: float, delta: float) -> Tuple[float, float]:
    """
    Return ``(p0, p1)``, the simple hypotheses standing in for H0 and H1.

    Args:
        probability: Threshold p in (0, 1)
        delta: Half-width of the indifference band

    Returns:
        Tuple of (p0, p1) with 0 < p1 < p < p0 < 1
    """
    p0 = min(probability + delta, 0.5 * (1.0 + probability))
    p1 = max(probability - delta, 0.5 * probability)
    return p0, p1


def decision_boundaries(alpha: float, beta: float) -> Tuple[float, float]:
    """
    Compute Wald's decision boundaries on the log-likelihood ratio.

    Args:
        alpha: Probability of rejecting H0 when it holds
        beta: Probability of accepting H0 when H1 holds

    Returns:
        Tuple of (lower, upper); accept H0 at or below `lower`,
        reject it at or above `upper`
    """
    if not (0 < alpha < 1) or not (0 < beta < 1):
        raise ValueError(f"alpha and beta must be in (0, 1), got {alpha}, {beta}")

    upper = math.log((1.0 - beta) / alpha)
    lower = math.log(beta / (1.0 - alpha))
    return lower, upper


def log_likelihood_ratio(p0: float, p1: float, outcome: bool) -> float:
    """
    Contribution of one Bernoulli outcome to ``log f1 / f0``.

    Examples:
        >>> log_likelihood_ratio(0.5, 0.25, True) == math.log(0.5)
        True
    """
    if outcome:
        return math.log(p1) - math.log(p0)
    return math.log1p(-p1) - math.log1p(-p0)


@dataclass
class SPRTOutcome:
    """Result of one sequential probability ratio test run."""

    accepted: bool
    log_ratio: float
    samples: int
    decided: bool


def sequential_probability_ratio_test(
    draw: Callable[[Epoch], bool],
    probability: float,
    *,
    alpha: float,
    beta: float,
    indifference: float,
    batch_size: int,
    max_batches: int,
    on_batch: Optional[Callable[[int, int, float, float, float, bool], None]] = None,
) -> SPRTOutcome:
    """
    Run the test by drawing outcomes epoch by epoch.

    Args:
        draw: Returns the boolean outcome for a given epoch
        probability: Threshold p in (0, 1)
        alpha, beta: Error rates defining the decision boundaries
        indifference: Half-width of the indifference band around p
        batch_size: Samples drawn between two boundary checks
        max_batches: Maximum number of batches before giving up
        on_batch: Optional callback ``(batch, epoch, log_ratio, lower, upper, decided)``
            invoked after every boundary check

    Returns:
        SPRTOutcome; `accepted` is True iff H0 (rate >= p) was accepted
    """
    if not (0 < probability < 1):
        raise ValueError(f"Probability {probability} must be in (0, 1)")

    lower, upper = decision_boundaries(alpha, beta)
    p0, p1 = indifference_band(probability, indifference)
    on_true = log_likelihood_ratio(p0, p1, True)
    on_false = log_likelihood_ratio(p0, p1, False)

    log_ratio = 0.0
    epoch = 0
    for batch in range(max_batches):
        for _ in range(batch_size):
            log_ratio += on_true if draw(Epoch(epoch)) else on_false
            epoch += 1
        decided = log_ratio <= lower or log_ratio >= upper
        if on_batch is not None:
            on_batch(batch, epoch, log_ratio, lower, upper, decided)
        if decided:
            accepted = log_ratio <= lower
            logger.debug(
                "SPRT p=%s %s H0 after %d samples (log ratio %.4f)",
                probability,
                "accepted" if accepted else "rejected",
                epoch,
                log_ratio,
            )
            return SPRTOutcome(
                accepted=accepted, log_ratio=log_ratio, samples=epoch, decided=True
            )

    logger.warning(
        "SPRT p=%s undecided after %d samples (log ratio %.4f); answering False",
        probability,
        epoch,
        log_ratio,
    )
    return SPRTOutcome(accepted=False, log_ratio=log_ratio, samples=epoch, decided=False)
