"""SQL execution state.

Keeps a per-query summary of SQL executions and their plan metrics. Both
update paths return the existing state object when nothing changed, so the
reducer can short-circuit on identity.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from sparkpulse.core.memo import memoize


@dataclass(frozen=True)
class SqlMetric:
    name: str
    value: str


@dataclass(frozen=True)
class SqlQuery:
    """
    Summary of one SQL execution.

    Attributes:
        id: SQL execution id.
        status: Execution status (RUNNING, COMPLETED, FAILED).
        description: Query description as shown by Spark.
        submission_time: Submission timestamp as reported.
        duration_ms: Execution duration in ms.
        metrics: Plan metrics as (name, value) records.
    """

    id: int
    status: str
    description: str = ""
    submission_time: str = ""
    duration_ms: int = 0
    metrics: tuple[SqlMetric, ...] = ()


@dataclass(frozen=True)
class SqlState:
    queries: tuple[SqlQuery, ...] = ()

    def find(self, sql_id: int) -> SqlQuery | None:
        """Return the query with ``sql_id`` if present."""
        for query in self.queries:
            if query.id == sql_id:
                return query
        return None


def calculate_sql_state(existing: SqlState | None, queries: Iterable[SqlQuery]) -> SqlState:
    """
    Build the SQL state from the latest execution list.

    Queries are ordered by id. A query reported without metrics keeps the
    metrics already known for it. Unchanged queries keep their identity.
    """
    previous = {q.id: q for q in existing.queries} if existing else {}
    merged: list[SqlQuery] = []
    for query in sorted(queries, key=lambda q: q.id):
        known = previous.get(query.id)
        if known is not None and not query.metrics:
            query = replace(query, metrics=known.metrics)
        merged.append(memoize(known, query))
    return memoize(existing, SqlState(queries=tuple(merged)))


def update_sql_metrics(existing: SqlState, sql_id: int, metrics: Iterable[SqlMetric]) -> SqlState:
    """
    Replace the metrics of one query.

    Returns ``existing`` unchanged when the id is unknown or the metrics
    are the same as before.
    """
    current = existing.find(sql_id)
    if current is None:
        return existing

    updated = memoize(current, replace(current, metrics=tuple(metrics)))
    if updated is current:
        return existing
    return SqlState(
        queries=tuple(updated if q.id == sql_id else q for q in existing.queries)
    )
