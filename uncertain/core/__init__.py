"""
uncertain.core
==============

Sampling-graph building blocks.

- `node`: the `Uncertain` base class and its composition DSL
- `leaves`: `Distribution` and `PointMass`
- `adapters`: combinators (map, flat-map, join, boolean and arithmetic)
- `cache`: epoch-caching wrappers `Cached` and `Shared`
- `errors`: `ConvergenceFailure` and `ConvergenceError`
- `names`: typed names and default constants
"""
