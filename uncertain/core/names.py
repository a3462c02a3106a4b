"""
uncertain.core.names
====================

Typed names and default constants shared across the package.

- `Epoch`: a NewType wrapper over `int` identifying one synchronized draw
  of an expression graph.
- `DEFAULT_SEED`: seed of the random source a query creates when none is
  supplied. Queries are deterministic by default; pass a random source
  explicitly to vary them.
- `DEFAULT_BATCH_SIZE`, `DEFAULT_MAX_BATCHES`: sequential sampling shape.

Examples
--------
>>> from uncertain.core.names import Epoch, DEFAULT_BATCH_SIZE, DEFAULT_MAX_BATCHES
>>> Epoch(3) + 1
4
>>> DEFAULT_BATCH_SIZE * DEFAULT_MAX_BATCHES
10000
"""

from __future__ import annotations
from typing import NewType

Epoch = NewType("Epoch", int)

DEFAULT_SEED = 0xCAFEF00DD15EA5E5

# Sequential sampling shape: samples are drawn in batches and the stopping
# rule is evaluated after each batch.
DEFAULT_BATCH_SIZE = 10
DEFAULT_MAX_BATCHES = 1000

# SPRT error rates and half-width of the indifference band around the threshold.
DEFAULT_SPRT_ALPHA = 1e-8
DEFAULT_SPRT_BETA = 1e-8
DEFAULT_SPRT_INDIFFERENCE = 0.05
