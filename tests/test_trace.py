"""Tests for query traces and trace reporting."""

import polars as pl
import pytest

from uncertain import PointMass, QueryTrace, SequentialConfig, Uncertain
from uncertain.reporting.trace import TraceReporter


class EpochCounter(Uncertain):
    def sample(self, rng, epoch):
        return float(epoch)


@pytest.fixture
def trace():
    return QueryTrace()


class TestQueryTrace:
    """Tests for the per-batch query record."""

    def test_empty_trace_has_schema(self, trace):
        df = trace.frame()
        assert df.height == 0
        assert df.schema["decided"] == pl.Boolean
        assert df.columns == [
            "query",
            "run",
            "batch",
            "samples",
            "threshold",
            "statistic",
            "lower",
            "upper",
            "decided",
        ]

    def test_pr_rows(self, trace):
        assert PointMass(True).pr(0.5, trace=trace)
        df = trace.frame()
        assert df.height == 10
        assert df["samples"].to_list() == [10 * (b + 1) for b in range(10)]
        assert df["decided"].to_list() == [False] * 9 + [True]
        assert df["statistic"][-1] <= df["lower"][-1]
        assert set(df["threshold"].to_list()) == {0.5}

    def test_expect_rows(self, trace):
        assert PointMass(2.0).expect(0.1, trace=trace) == 2.0
        row = trace.frame().row(0, named=True)
        assert row["query"] == "expect"
        assert row["statistic"] == 2.0
        assert row["lower"] == row["upper"] == 2.0
        assert row["decided"] is True

    def test_runs_are_numbered(self, trace):
        PointMass(True).pr(0.5, trace=trace)
        PointMass(1.0).expect(0.1, trace=trace)
        assert trace.runs == 2
        assert trace.frame(run=1)["query"].to_list() == ["expect"]
        assert len(trace) == 11

    def test_clear(self, trace):
        PointMass(1.0).expect(0.1, trace=trace)
        trace.clear()
        assert len(trace) == 0
        assert trace.runs == 0


class TestTraceReporter:
    """Tests for summaries over traces."""

    def test_summary_outcomes(self, trace):
        PointMass(True).pr(0.5, trace=trace)
        PointMass(False).pr(0.5, trace=trace)
        PointMass(1.0).expect(0.1, trace=trace)
        EpochCounter().expect(0.1, config=SequentialConfig(max_batches=3), trace=trace)
        summary = TraceReporter.from_trace(trace).summary()
        assert summary["outcome"].to_list() == [
            "accept",
            "reject",
            "converged",
            "exhausted",
        ]
        assert summary["samples"].to_list() == [100, 100, 10, 30]

    def test_progress_table(self, trace):
        EpochCounter().expect(0.1, config=SequentialConfig(max_batches=4), trace=trace)
        table = TraceReporter.from_trace(trace).progress_table(run=0)
        assert table["batch"].to_list() == [0, 1, 2, 3]
        assert table.columns == [
            "batch",
            "samples",
            "statistic",
            "lower",
            "upper",
            "decided",
        ]
