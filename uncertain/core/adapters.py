"""
uncertain.core.adapters
=======================

Combinator nodes deriving their value from one or more sub-nodes.

Every binary combinator samples its left operand before its right operand, so
randomness is consumed in a fixed order for every epoch. `And` and `Or` skip
the right operand when the left one already decides the result.

Examples
--------
>>> import numpy as np
>>> from uncertain.core.leaves import PointMass
>>> from uncertain.core.adapters import Join, Map, Ratio
>>> rng = np.random.default_rng(0)
>>> Map(PointMass(3), lambda v: v * v).sample(rng, 0)
9
>>> Join(PointMass("a"), PointMass("b"), lambda a, b: a + b).sample(rng, 0)
'ab'
>>> Ratio(PointMass(1.0), PointMass(4.0)).sample(rng, 0)
0.25
"""

from __future__ import annotations
import operator
from typing import Any, Callable, Tuple

import numpy as np

from uncertain.core.names import Epoch
from uncertain.core.node import Uncertain


class Map(Uncertain):
    """Applies a function to every sampled value."""

    def __init__(self, uncertain: Uncertain, func: Callable[[Any], Any]) -> None:
        self.uncertain = uncertain
        self.func = func

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        return self.func(self.uncertain.sample(rng, epoch))

    def children(self) -> Tuple[Uncertain, ...]:
        return (self.uncertain,)


class FlatMap(Uncertain):
    """
    Dependent (conditional) sampling.

    The sampled value of `uncertain` selects a fresh sub-node through `func`;
    the sub-node is then sampled once at the same epoch.
    """

    def __init__(
        self, uncertain: Uncertain, func: Callable[[Any], Uncertain]
    ) -> None:
        self.uncertain = uncertain
        self.func = func

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        value = self.uncertain.sample(rng, epoch)
        node = self.func(value)
        if not isinstance(node, Uncertain):
            raise TypeError(
                f"flat_map function must return an Uncertain, got {type(node).__name__}"
            )
        return node.sample(rng, epoch)

    def children(self) -> Tuple[Uncertain, ...]:
        return (self.uncertain,)


class Join(Uncertain):
    """Combines two nodes with a binary function, sampling `a` before `b`."""

    def __init__(
        self, a: Uncertain, b: Uncertain, func: Callable[[Any, Any], Any]
    ) -> None:
        self.a = a
        self.b = b
        self.func = func

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        a = self.a.sample(rng, epoch)
        b = self.b.sample(rng, epoch)
        return self.func(a, b)

    def children(self) -> Tuple[Uncertain, ...]:
        return (self.a, self.b)


class Not(Uncertain):
    def __init__(self, uncertain: Uncertain) -> None:
        self.uncertain = uncertain

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> bool:
        return not bool(self.uncertain.sample(rng, epoch))

    def children(self) -> Tuple[Uncertain, ...]:
        return (self.uncertain,)


class And(Uncertain):
    """Short-circuiting conjunction: `b` is not sampled when `a` is false."""

    def __init__(self, a: Uncertain, b: Uncertain) -> None:
        self.a = a
        self.b = b

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> bool:
        if not bool(self.a.sample(rng, epoch)):
            return False
        return bool(self.b.sample(rng, epoch))

    def children(self) -> Tuple[Uncertain, ...]:
        return (self.a, self.b)


class Or(Uncertain):
    """Short-circuiting disjunction: `b` is not sampled when `a` is true."""

    def __init__(self, a: Uncertain, b: Uncertain) -> None:
        self.a = a
        self.b = b

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> bool:
        if bool(self.a.sample(rng, epoch)):
            return True
        return bool(self.b.sample(rng, epoch))

    def children(self) -> Tuple[Uncertain, ...]:
        return (self.a, self.b)


class _Arithmetic(Uncertain):
    # Binary operator applied to both operands, left sampled first.
    op: Callable[[Any, Any], Any]

    def __init__(self, a: Uncertain, b: Uncertain) -> None:
        self.a = a
        self.b = b

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        a = self.a.sample(rng, epoch)
        b = self.b.sample(rng, epoch)
        return type(self).op(a, b)

    def children(self) -> Tuple[Uncertain, ...]:
        return (self.a, self.b)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.a!r}, {self.b!r})"


class Sum(_Arithmetic):
    op = operator.add


class Difference(_Arithmetic):
    op = operator.sub


class Product(_Arithmetic):
    op = operator.mul


class Ratio(_Arithmetic):
    op = operator.truediv
