"""
uncertain.runtime
=================

Execution of terminal queries over uncertain values.

Key Components
--------------
- `pr`, `pr_with`: probability-threshold queries
- `expect`, `expect_with`: expectation queries
- `SequentialConfig`, `SPRTConfig`: tuning parameters
- `QueryTrace`: per-batch record of query runs
"""
