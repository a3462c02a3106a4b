"""
uncertain.runtime.config
========================

Tuning parameters of the sequential queries.

The batch size and batch cap are empirical defaults, not invariants; the
SPRT error rates and indifference band define the contract of `pr`.

Examples
--------
>>> from uncertain.runtime.config import SequentialConfig, SPRTConfig
>>> SequentialConfig().max_samples
10000
>>> SPRTConfig(alpha=1e-4, beta=1e-4).validate()
>>> SPRTConfig(indifference=0.0).validate()
Traceback (most recent call last):
...
ValueError: indifference must be in (0, 0.5), got 0.0
"""

from __future__ import annotations
from dataclasses import dataclass

from uncertain.core.names import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_BATCHES,
    DEFAULT_SEED,
    DEFAULT_SPRT_ALPHA,
    DEFAULT_SPRT_BETA,
    DEFAULT_SPRT_INDIFFERENCE,
)


@dataclass(frozen=True, kw_only=True)
class SequentialConfig:
    """
    Shape of a sequential sampling run.

    Parameters
    ----------
    batch_size : int, default=10
        Samples drawn between two stopping-rule checks
    max_batches : int, default=1000
        Maximum number of batches before the query gives up
    seed : int
        Seed of the random source created when the caller supplies none
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    max_batches: int = DEFAULT_MAX_BATCHES
    seed: int = DEFAULT_SEED

    @property
    def max_samples(self) -> int:
        return self.batch_size * self.max_batches

    def validate(self) -> None:
        """Validate configuration."""
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_batches < 1:
            raise ValueError(f"max_batches must be positive, got {self.max_batches}")


@dataclass(frozen=True, kw_only=True)
class SPRTConfig(SequentialConfig):
    """
    Sequential probability ratio test parameters.

    Parameters
    ----------
    alpha : float, default=1e-8
        Probability of answering False when the rate is at least the threshold
        (outside the indifference band)
    beta : float, default=1e-8
        Probability of answering True when the rate is below the threshold
        (outside the indifference band)
    indifference : float, default=0.05
        Half-width of the band around the threshold in which no error rate
        is guaranteed
    """

    alpha: float = DEFAULT_SPRT_ALPHA
    beta: float = DEFAULT_SPRT_BETA
    indifference: float = DEFAULT_SPRT_INDIFFERENCE

    def validate(self) -> None:
        super().validate()
        if not 0 < self.alpha < 1:
            raise ValueError(f"alpha must be in (0, 1), got {self.alpha}")
        if not 0 < self.beta < 1:
            raise ValueError(f"beta must be in (0, 1), got {self.beta}")
        if not 0 < self.indifference < 0.5:
            raise ValueError(
                f"indifference must be in (0, 0.5), got {self.indifference}"
            )
