"""
uncertain.runtime.queries
=========================

Terminal queries over uncertain values.

Each query owns its random source and its epoch sequence for the duration of
one call: epochs start at 0 and advance by one per sample, and every sharing
wrapper reachable from the queried node is reset first, so cached values never
leak from one query into the next. Sampling runs inside `query_scope`, which
also keeps stale values in wrappers only reachable through `flat_map` from
being reused.

- `pr` / `pr_with`: sequential probability ratio test, "is P(True) >= p?"
- `expect` / `expect_with`: Welford estimate of the expected value

When no random source is given, a `numpy.random.Generator` seeded with
`DEFAULT_SEED` (or the seed of the supplied config) is used: queries are
deterministic by default; pass a random source explicitly to vary them.

Examples
--------
>>> from scipy import stats
>>> from uncertain.core.leaves import Distribution
>>> from uncertain.runtime.queries import pr, expect
>>> coin = Distribution(stats.bernoulli(0.8))
>>> pr(coin, 0.5)
True
>>> pr(coin, 0.95)
False
>>> expect(coin, 0.0)
Traceback (most recent call last):
...
ValueError: Precision 0.0 must be positive
"""

from __future__ import annotations
import logging
from typing import Optional, Union

import numpy as np

from uncertain.core.cache import query_scope, reset_caches
from uncertain.core.errors import ConvergenceFailure
from uncertain.core.node import Uncertain
from uncertain.runtime.config import SequentialConfig, SPRTConfig
from uncertain.runtime.trace import QueryTrace
from uncertain.stats.common.sprt import sequential_probability_ratio_test
from uncertain.stats.common.welford import compute_expectation

logger = logging.getLogger(__name__)

RandomSource = Union[np.random.Generator, int]


def make_rng(source: Optional[RandomSource], seed: int) -> np.random.Generator:
    """Turn a generator, an integer seed or None into a `numpy.random.Generator`."""
    if source is None:
        return np.random.default_rng(seed)
    if isinstance(source, np.random.Generator):
        return source
    if isinstance(source, (int, np.integer)) and not isinstance(source, bool):
        return np.random.default_rng(int(source))
    raise TypeError(
        f"random source must be a numpy Generator or an int seed, got {type(source).__name__}"
    )


def pr(
    node: Uncertain,
    probability: float,
    *,
    config: Optional[SPRTConfig] = None,
    trace: Optional[QueryTrace] = None,
) -> bool:
    """
    Decide whether `node` samples a true value with probability at least `probability`.

    Args:
        node: Boolean-valued uncertain value
        probability: Threshold in the open interval (0, 1)
        config: Test parameters (defaults to `SPRTConfig()`)
        trace: Optional trace receiving one row per batch

    Returns:
        True if H0 (rate >= probability) is accepted. False if it is rejected
        or the sample budget runs out first.

    Raises:
        ValueError: if `probability` is not in (0, 1)
    """
    return pr_with(node, None, probability, config=config, trace=trace)


def pr_with(
    node: Uncertain,
    rng: Optional[RandomSource],
    probability: float,
    *,
    config: Optional[SPRTConfig] = None,
    trace: Optional[QueryTrace] = None,
) -> bool:
    """Same as `pr`, with a caller-supplied random source or seed."""
    if not (0 < probability < 1):
        raise ValueError(f"Probability {probability} must be in (0, 1)")
    if config is None:
        config = SPRTConfig()
    elif not isinstance(config, SPRTConfig):
        config = SPRTConfig(
            batch_size=config.batch_size,
            max_batches=config.max_batches,
            seed=config.seed,
        )
    config.validate()
    generator = make_rng(rng, config.seed)
    reset_caches(node)
    logger.debug("pr(%s) on %r", probability, node)

    on_batch = None
    if trace is not None:
        run = trace.start_run()

        def on_batch(batch, samples, log_ratio, lower, upper, decided):
            trace.append(
                query="pr",
                run=run,
                batch=batch,
                samples=samples,
                threshold=probability,
                statistic=log_ratio,
                lower=lower,
                upper=upper,
                decided=decided,
            )

    with query_scope():
        outcome = sequential_probability_ratio_test(
            lambda epoch: bool(node.sample(generator, epoch)),
            probability,
            alpha=config.alpha,
            beta=config.beta,
            indifference=config.indifference,
            batch_size=config.batch_size,
            max_batches=config.max_batches,
            on_batch=on_batch,
        )
    return outcome.accepted


def expect(
    node: Uncertain,
    precision: float,
    *,
    strict: bool = False,
    config: Optional[SequentialConfig] = None,
    trace: Optional[QueryTrace] = None,
) -> Union[float, ConvergenceFailure]:
    """
    Estimate the expected value of `node` to within `precision`.

    Args:
        node: Uncertain value with float-convertible samples
        precision: Required half-width of the two-sigma band, > 0
        strict: Raise `ConvergenceError` instead of returning the failure record
        config: Sampling shape (defaults to `SequentialConfig()`)
        trace: Optional trace receiving one row per batch

    Returns:
        The estimated mean, or a `ConvergenceFailure` when the budget runs out

    Raises:
        ValueError: if `precision` is not positive
    """
    return expect_with(
        node, None, precision, strict=strict, config=config, trace=trace
    )


def expect_with(
    node: Uncertain,
    rng: Optional[RandomSource],
    precision: float,
    *,
    strict: bool = False,
    config: Optional[SequentialConfig] = None,
    trace: Optional[QueryTrace] = None,
) -> Union[float, ConvergenceFailure]:
    """Same as `expect`, with a caller-supplied random source or seed."""
    if not precision > 0:
        raise ValueError(f"Precision {precision} must be positive")
    config = config or SequentialConfig()
    config.validate()
    generator = make_rng(rng, config.seed)
    reset_caches(node)
    logger.debug("expect(%s) on %r", precision, node)

    on_batch = None
    if trace is not None:
        run = trace.start_run()

        def on_batch(batch, samples, mean, half_width, converged):
            trace.append(
                query="expect",
                run=run,
                batch=batch,
                samples=samples,
                threshold=precision,
                statistic=mean,
                lower=mean - half_width,
                upper=mean + half_width,
                decided=converged,
            )

    with query_scope():
        result = compute_expectation(
            lambda epoch: node.sample(generator, epoch),
            precision,
            batch_size=config.batch_size,
            max_batches=config.max_batches,
            on_batch=on_batch,
        )
    if strict and isinstance(result, ConvergenceFailure):
        result.raise_for_status()
    return result
