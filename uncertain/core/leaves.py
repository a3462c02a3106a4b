"""
uncertain.core.leaves
=====================

Leaf nodes: values that do not depend on other uncertain values.

- `Distribution`: adapts an external variate generator. Either a `scipy.stats`
  frozen distribution (anything with ``rvs(random_state=...)``) or a callable
  taking the random source.
- `PointMass`: a constant; consumes no randomness.

Examples
--------
>>> import numpy as np
>>> from scipy import stats
>>> from uncertain.core.leaves import Distribution, PointMass
>>> rng = np.random.default_rng(7)
>>> x = Distribution(stats.norm(loc=10.0, scale=1.0))
>>> isinstance(x.sample(rng, 0), float)
True
>>> coin = Distribution(lambda rng: rng.random() < 0.5)
>>> coin.sample(rng, 0) in (True, False)
True
>>> PointMass(42).sample(rng, 0)
42
"""

from __future__ import annotations
from typing import Any, Callable

import numpy as np

from uncertain.core.names import Epoch
from uncertain.core.node import Uncertain


class Distribution(Uncertain):
    """
    Leaf node drawing from an external variate generator.

    The epoch is ignored: every call is a fresh draw. Wrap the node with
    `into_cached()` or `into_shared()` to reuse it within one epoch.
    """

    def __init__(self, generator: Any) -> None:
        if hasattr(generator, "rvs"):
            self._draw: Callable[[np.random.Generator], Any] = (
                lambda rng: generator.rvs(random_state=rng)
            )
        elif callable(generator):
            self._draw = generator
        else:
            raise TypeError(
                "generator must provide rvs(random_state=...) or be callable, "
                f"got {type(generator).__name__}"
            )
        self.generator = generator

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        value = self._draw(rng)
        # scipy returns 0-d numpy values; hand out plain Python scalars
        if isinstance(value, (np.generic, np.ndarray)) and np.ndim(value) == 0:
            return value.item()
        return value

    def __repr__(self) -> str:
        return f"Distribution({self.generator!r})"


class PointMass(Uncertain):
    """An uncertain value which always yields the same value."""

    def __init__(self, value: Any) -> None:
        self.value = value

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"PointMass({self.value!r})"
