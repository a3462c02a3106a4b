"""
uncertain.core.node
===================

The sampling capability every uncertain value exposes, and the small DSL used
to compose uncertain values into expression graphs.

An `Uncertain` is a lazy node: it does nothing until a query (`pr` or
`expect`) samples it. Sampling takes a random source and an *epoch*. Ordinary
nodes draw fresh randomness on every call; nodes wrapped by
`uncertain.core.cache` return one value per epoch, so a value referenced twice
in the same expression is drawn only once per epoch.

Composition is available both as methods and as Python operators:

- `map`, `flat_map`, `join`
- `not_` / `~`, `and_` / `&`, `or_` / `|` (short-circuiting)
- `add` / `+`, `sub` / `-`, `mul` / `*`, `div` / `/`
- comparisons against constants or nodes: `lt`, `le`, `gt`, `ge`, `eq`, `ne`

Plain constants used with an operator are lifted into `PointMass`.

Examples
--------
>>> from uncertain.core.leaves import PointMass
>>> x = PointMass(2.0) + 3.0
>>> x.expect(0.1)
5.0
>>> (PointMass(2.0) * PointMass(4.0)).gt(7.5).pr(0.99)
True
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Tuple, Union

import numpy as np

from uncertain.core.names import Epoch

if TYPE_CHECKING:
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
    from uncertain.core.errors import ConvergenceFailure
    from uncertain.runtime.config import SequentialConfig, SPRTConfig
    from uncertain.runtime.trace import QueryTrace


class Uncertain(ABC):
    """
    Base class for all uncertain values (nodes of a sampling graph).

    Subclasses implement `sample()`. Nodes that hold sub-nodes also override
    `children()` so queries can walk the graph.
    """

    @abstractmethod
    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        """
        Draw one value of this node for the given epoch.

        Parameters
        ----------
        rng : numpy.random.Generator
            Random source owned by the running query
        epoch : Epoch
            Identifier of the current synchronized draw of the whole graph
        """

    def children(self) -> Tuple["Uncertain", ...]:
        """Direct sub-nodes of this node (empty for leaves)."""
        return ()

    def walk(self) -> Iterable["Uncertain"]:
        """Yield every node reachable from this one, each once, parents first."""
        seen = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            stack.extend(reversed(node.children()))

    def __bool__(self) -> bool:
        raise TypeError(
            "The truth value of an uncertain value is ambiguous; "
            "ask for a probability with .pr(p) instead"
        )

    # ---- composition ----

    def map(self, func: Callable[[Any], Any]) -> "Map":
        """Apply `func` to every sampled value."""
        from uncertain.core.adapters import Map

        return Map(self, func)

    def flat_map(self, func: Callable[[Any], "Uncertain"]) -> "FlatMap":
        """Sample self, build a node from the value with `func`, and sample that."""
        from uncertain.core.adapters import FlatMap

        return FlatMap(self, func)

    def join(self, other: Any, func: Callable[[Any, Any], Any]) -> "Join":
        """Combine with `other` using `func(self_value, other_value)`."""
        from uncertain.core.adapters import Join

        return Join(self, lift(other), func)

    def not_(self) -> "Not":
        """Logical negation of a boolean-valued node."""
        from uncertain.core.adapters import Not

        return Not(self)

    def and_(self, other: Any) -> "And":
        """Logical conjunction; `other` is not sampled when self is false."""
        from uncertain.core.adapters import And

        return And(self, lift(other))

    def or_(self, other: Any) -> "Or":
        """Logical disjunction; `other` is not sampled when self is true."""
        from uncertain.core.adapters import Or

        return Or(self, lift(other))

    def add(self, other: Any) -> "Sum":
        from uncertain.core.adapters import Sum

        return Sum(self, lift(other))

    def sub(self, other: Any) -> "Difference":
        from uncertain.core.adapters import Difference

        return Difference(self, lift(other))

    def mul(self, other: Any) -> "Product":
        from uncertain.core.adapters import Product

        return Product(self, lift(other))

    def div(self, other: Any) -> "Ratio":
        from uncertain.core.adapters import Ratio

        return Ratio(self, lift(other))

    # ---- comparisons (boolean-valued nodes) ----

    def lt(self, other: Any) -> "Uncertain":
        return self._compare(other, lambda a, b: a < b)

    def le(self, other: Any) -> "Uncertain":
        return self._compare(other, lambda a, b: a <= b)

    def gt(self, other: Any) -> "Uncertain":
        return self._compare(other, lambda a, b: a > b)

    def ge(self, other: Any) -> "Uncertain":
        return self._compare(other, lambda a, b: a >= b)

    def eq(self, other: Any) -> "Uncertain":
        return self._compare(other, lambda a, b: a == b)

    def ne(self, other: Any) -> "Uncertain":
        return self._compare(other, lambda a, b: a != b)

    def _compare(self, other: Any, op: Callable[[Any, Any], Any]) -> "Uncertain":
        if isinstance(other, Uncertain):
            return self.join(other, lambda a, b: bool(op(a, b)))
        return self.map(lambda a: bool(op(a, other)))

    # ---- operators ----

    def __add__(self, other: Any) -> "Sum":
        return self.add(other)

    def __radd__(self, other: Any) -> "Sum":
        return lift(other).add(self)

    def __sub__(self, other: Any) -> "Difference":
        return self.sub(other)

    def __rsub__(self, other: Any) -> "Difference":
        return lift(other).sub(self)

    def __mul__(self, other: Any) -> "Product":
        return self.mul(other)

    def __rmul__(self, other: Any) -> "Product":
        return lift(other).mul(self)

    def __truediv__(self, other: Any) -> "Ratio":
        return self.div(other)

    def __rtruediv__(self, other: Any) -> "Ratio":
        return lift(other).div(self)

    def __invert__(self) -> "Not":
        return self.not_()

    def __and__(self, other: Any) -> "And":
        return self.and_(other)

    def __rand__(self, other: Any) -> "And":
        return lift(other).and_(self)

    def __or__(self, other: Any) -> "Or":
        return self.or_(other)

    def __ror__(self, other: Any) -> "Or":
        return lift(other).or_(self)

    # ---- sharing ----

    def into_cached(self, *, thread_safe: bool = False) -> "Cached":
        """Wrap in a single-owner cache so the node can be referenced repeatedly."""
        from uncertain.core.cache import Cached

        return Cached(self, thread_safe=thread_safe)

    def into_shared(self, *, thread_safe: bool = False) -> "Shared":
        """Wrap in a shared, cloneable handle whose clones observe one cache."""
        from uncertain.core.cache import Shared

        return Shared(self, thread_safe=thread_safe)

    # ---- terminal queries ----

    def pr(
        self,
        probability: float,
        *,
        config: Optional["SPRTConfig"] = None,
        trace: Optional["QueryTrace"] = None,
    ) -> bool:
        """
        Decide whether the probability of sampling `True` is at least `probability`.

        Runs a sequential probability ratio test with a deterministically
        seeded random source. See `uncertain.runtime.queries.pr`.
        """
        from uncertain.runtime.queries import pr

        return pr(self, probability, config=config, trace=trace)

    def pr_with(
        self,
        rng: Union[np.random.Generator, int],
        probability: float,
        *,
        config: Optional["SPRTConfig"] = None,
        trace: Optional["QueryTrace"] = None,
    ) -> bool:
        """Same as `pr`, but with a caller-supplied random source."""
        from uncertain.runtime.queries import pr_with

        return pr_with(self, rng, probability, config=config, trace=trace)

    def expect(
        self,
        precision: float,
        *,
        strict: bool = False,
        config: Optional["SequentialConfig"] = None,
        trace: Optional["QueryTrace"] = None,
    ) -> Union[float, "ConvergenceFailure"]:
        """
        Estimate the expected value to within `precision`.

        Returns the estimate, or a `ConvergenceFailure` when the sample budget
        runs out (raised as `ConvergenceError` when `strict` is set).
        """
        from uncertain.runtime.queries import expect

        return expect(self, precision, strict=strict, config=config, trace=trace)

    def expect_with(
        self,
        rng: Union[np.random.Generator, int],
        precision: float,
        *,
        strict: bool = False,
        config: Optional["SequentialConfig"] = None,
        trace: Optional["QueryTrace"] = None,
    ) -> Union[float, "ConvergenceFailure"]:
        """Same as `expect`, but with a caller-supplied random source."""
        from uncertain.runtime.queries import expect_with

        return expect_with(
            self, rng, precision, strict=strict, config=config, trace=trace
        )


def lift(value: Any) -> Uncertain:
    """Return `value` unchanged if it is a node, else a `PointMass` holding it."""
    if isinstance(value, Uncertain):
        return value
    from uncertain.core.leaves import PointMass

    return PointMass(value)
