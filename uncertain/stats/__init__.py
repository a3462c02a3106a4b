"""
Statistical procedures used by the terminal queries.

These are plain functions over a ``draw(epoch)`` callable and know nothing
about sampling graphs, so they can be exercised with any outcome source.

1. **Common** (uncertain.stats.common):
   - `sprt`: Wald's sequential probability ratio test for Bernoulli outcomes
   - `welford`: online expectation estimate with a convergence certificate

Example:
--------
>>> from uncertain.stats.common.sprt import decision_boundaries
>>> lower, upper = decision_boundaries(0.05, 0.05)
>>> lower < 0 < upper
True
"""
