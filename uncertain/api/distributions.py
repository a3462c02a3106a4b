"""
uncertain.api.distributions
===========================

Shorthand constructors for common leaf nodes backed by `scipy.stats`.

Each function validates its parameters the way scipy would silently not
(scipy returns NaN samples for invalid shapes), then wraps the frozen
distribution in a `Distribution` node.

Examples
--------
>>> from uncertain.api.distributions import bernoulli, normal, point
>>> reading = normal(20.0, 0.5)
>>> reading.gt(19.0).pr(0.9)
True
>>> abs((reading - point(20.0)).expect(0.1)) < 0.2
True
>>> bernoulli(1.5)
Traceback (most recent call last):
...
ValueError: p must be in [0, 1], got 1.5
"""

from __future__ import annotations
from typing import Any

from scipy import stats

from uncertain.core.leaves import Distribution, PointMass


def normal(mean: float, std: float) -> Distribution:
    """Gaussian with the given mean and standard deviation (> 0)."""
    if not std > 0:
        raise ValueError(f"std must be positive, got {std}")
    return Distribution(stats.norm(loc=mean, scale=std))


def bernoulli(p: float) -> Distribution:
    """Boolean-convertible 0/1 outcome with success probability `p`."""
    if not 0 <= p <= 1:
        raise ValueError(f"p must be in [0, 1], got {p}")
    return Distribution(stats.bernoulli(p))


def binomial(n: int, p: float) -> Distribution:
    """Number of successes among `n` Bernoulli(`p`) trials."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if not 0 <= p <= 1:
        raise ValueError(f"p must be in [0, 1], got {p}")
    return Distribution(stats.binom(n, p))


def poisson(lam: float) -> Distribution:
    """Poisson counts with rate `lam` (> 0)."""
    if not lam > 0:
        raise ValueError(f"lam must be positive, got {lam}")
    return Distribution(stats.poisson(lam))


def uniform(low: float, high: float) -> Distribution:
    """Continuous uniform on [low, high)."""
    if not high > low:
        raise ValueError(f"high must exceed low, got [{low}, {high})")
    return Distribution(stats.uniform(loc=low, scale=high - low))


def point(value: Any) -> PointMass:
    """A certain value."""
    return PointMass(value)
