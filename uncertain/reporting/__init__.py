"""
uncertain.reporting
===================

Tabular views over recorded query traces.
"""
