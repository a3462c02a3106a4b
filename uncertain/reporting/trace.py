"""
uncertain.reporting.trace
=========================

Summaries of recorded query runs, computed with Polars.

Examples
--------
>>> from uncertain.core.leaves import PointMass
>>> from uncertain.runtime.trace import QueryTrace
>>> from uncertain.reporting.trace import TraceReporter
>>> trace = QueryTrace()
>>> PointMass(True).pr(0.5, trace=trace)
True
>>> rep = TraceReporter.from_trace(trace)
>>> rep.summary().select("query", "decided", "outcome").rows()
[('pr', True, 'accept')]
"""

from __future__ import annotations
from dataclasses import dataclass

import polars as pl

from uncertain.runtime.trace import QueryTrace


@dataclass
class TraceReporter:
    """Progress and outcome views over a `QueryTrace` frame."""

    df: pl.DataFrame

    @classmethod
    def from_trace(cls, trace: QueryTrace) -> "TraceReporter":
        return cls(trace.frame())

    def progress_table(self, run: int = 0) -> pl.DataFrame:
        """
        One row per batch of the given run:
        batch, samples, statistic, lower, upper, decided.
        """
        return (
            self.df.filter(pl.col("run") == run)
            .sort("batch")
            .select("batch", "samples", "statistic", "lower", "upper", "decided")
        )

    def summary(self) -> pl.DataFrame:
        """
        One row per run with the final statistic and outcome.

        `outcome` is "accept"/"reject" for decided `pr` runs, "converged" for
        decided `expect` runs and "exhausted" for runs that hit the budget.
        """
        last = self.df.sort("run", "batch").group_by("run", maintain_order=True).last()
        return last.with_columns(
            pl.when(~pl.col("decided"))
            .then(pl.lit("exhausted"))
            .when(pl.col("query") == "expect")
            .then(pl.lit("converged"))
            .when(pl.col("statistic") <= pl.col("lower"))
            .then(pl.lit("accept"))
            .otherwise(pl.lit("reject"))
            .alias("outcome")
        ).select(
            "run",
            "query",
            "threshold",
            "samples",
            "statistic",
            "decided",
            "outcome",
        )
