"""
uncertain.api - User-Friendly Facade
====================================

Shorthand constructors for the probability laws most callers need, so that
building a leaf does not require touching `scipy.stats` directly.

Examples
--------
>>> from uncertain.api.distributions import normal, bernoulli
>>> temperature = normal(21.5, 0.3)
>>> door_open = bernoulli(0.1)
>>> (~door_open).pr(0.8)
True
"""
