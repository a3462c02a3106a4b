"""
uncertain — computation with uncertain values.

Sensor readings, estimates and measurements are rarely exact; they are known
up to a probability distribution. uncertain lets you write ordinary arithmetic
and logic over such values and ask statistically sound questions about the
result, without ever computing the resulting distribution in closed form.

Every uncertain value is a lazy node of a *sampling graph*. Composing values
(``a + b``, ``x.map(f)``, ``p & q``) only builds the graph; nothing is sampled
until one of two terminal queries runs:

- ``pr(p)``: is the probability that this boolean value is true at least p?
  Answered with Wald's sequential probability ratio test, which usually needs
  only a few dozen to a few hundred samples.
- ``expect(precision)``: the expected value, estimated online with Welford's
  algorithm until twice the standard error is within ``precision``.

Queries draw the whole graph once per *epoch*. Values wrapped with
``into_cached()`` or ``into_shared()`` produce exactly one draw per epoch no
matter how often they appear in an expression, so ``x - x`` is exactly zero
while ``x - x_independent`` is not.

Example
-------
>>> import uncertain
>>> from uncertain.api.distributions import normal
>>> speed = normal(5.0, 1.0).into_shared()
>>> (speed - speed).expect(0.01)
0.0
>>> speed.gt(3.0).pr(0.9)
True
>>> assert hasattr(uncertain, "core")
>>> assert hasattr(uncertain, "stats")
"""

from uncertain import core, stats
from uncertain.__version__ import __version__
from uncertain.core.adapters import (
    And,
    Difference,
    FlatMap,
    Join,
    Map,
    Not,
    Or,
    Product,
    Ratio,
    Sum,
)
from uncertain.core.cache import Cached, Shared
from uncertain.core.errors import ConvergenceError, ConvergenceFailure
from uncertain.core.leaves import Distribution, PointMass
from uncertain.core.names import DEFAULT_SEED
from uncertain.core.node import Uncertain
from uncertain.runtime.config import SequentialConfig, SPRTConfig
from uncertain.runtime.queries import expect, expect_with, pr, pr_with
from uncertain.runtime.trace import QueryTrace

__all__ = [
    "And",
    "Cached",
    "ConvergenceError",
    "ConvergenceFailure",
    "DEFAULT_SEED",
    "Difference",
    "Distribution",
    "FlatMap",
    "Join",
    "Map",
    "Not",
    "Or",
    "PointMass",
    "Product",
    "QueryTrace",
    "Ratio",
    "SPRTConfig",
    "SequentialConfig",
    "Shared",
    "Sum",
    "Uncertain",
    "__version__",
    "expect",
    "expect_with",
    "pr",
    "pr_with",
]
