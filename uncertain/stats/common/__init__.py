"""
uncertain.stats.common
======================

Generic sequential estimation methods, independent of the sampling graph.
"""
