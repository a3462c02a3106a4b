"""
uncertain.runtime.trace
=======================

An append-only, **Polars-backed** record of sequential query runs.

Pass a `QueryTrace` to `pr` or `expect` to record one row per batch:

- `query`     : "pr" or "expect"
- `run`       : index of the query run within this trace
- `batch`     : batch index within the run
- `samples`   : samples drawn so far (= next epoch)
- `threshold` : probability threshold (pr) or requested precision (expect)
- `statistic` : cumulative log-likelihood ratio (pr) or running mean (expect)
- `lower`, `upper` : decision boundaries (pr) or mean -/+ half-width (expect)
- `decided`   : whether the stopping rule fired at this batch

Examples
--------
>>> from uncertain.core.leaves import PointMass
>>> from uncertain.runtime.trace import QueryTrace
>>> trace = QueryTrace()
>>> PointMass(3.0).expect(0.5, trace=trace)
3.0
>>> trace.frame().select("query", "run", "samples", "decided").rows()
[('expect', 0, 10, True)]
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, cast

import polars as pl


class QueryTrace:
    """Append-only per-batch record of query runs."""

    _SCHEMA = {
        "query": pl.Utf8,
        "run": pl.Int64,
        "batch": pl.Int64,
        "samples": pl.Int64,
        "threshold": pl.Float64,
        "statistic": pl.Float64,
        "lower": pl.Float64,
        "upper": pl.Float64,
        "decided": pl.Boolean,
    }

    def __init__(self) -> None:
        self._rows: List[Dict[str, Any]] = []
        self._runs = 0

    def start_run(self) -> int:
        """Open a new run and return its index."""
        run = self._runs
        self._runs += 1
        return run

    @property
    def runs(self) -> int:
        return self._runs

    def append(
        self,
        *,
        query: str,
        run: int,
        batch: int,
        samples: int,
        threshold: float,
        statistic: float,
        lower: float,
        upper: float,
        decided: bool,
    ) -> "QueryTrace":
        self._rows.append(
            {
                "query": query,
                "run": run,
                "batch": batch,
                "samples": samples,
                "threshold": float(threshold),
                "statistic": float(statistic),
                "lower": float(lower),
                "upper": float(upper),
                "decided": bool(decided),
            }
        )
        return self

    def __len__(self) -> int:
        return len(self._rows)

    def frame(self, run: Optional[int] = None) -> pl.DataFrame:
        """Return the recorded rows as a Polars DataFrame (optionally one run)."""
        df = pl.DataFrame(self._rows, schema=cast(Any, self._SCHEMA))
        if run is not None:
            df = df.filter(pl.col("run") == run)
        return df

    def clear(self) -> None:
        self._rows.clear()
        self._runs = 0
