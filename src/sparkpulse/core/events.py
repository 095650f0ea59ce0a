"""Events accepted by the state reducer.

Each event is one typed snapshot (or clock tick) delivered by the poller.
"""

from __future__ import annotations

from dataclasses import dataclass

from sparkpulse.core.models import Attempt, SparkConfiguration, SparkExecutor, SparkStage
from sparkpulse.core.sql import SqlMetric, SqlQuery


@dataclass(frozen=True)
class Init:
    """First event of a session; builds the initial state."""

    config: SparkConfiguration
    app_id: str
    attempt: Attempt
    current_time: int


@dataclass(frozen=True)
class SetStages:
    stages: tuple[SparkStage, ...]


@dataclass(frozen=True)
class SetExecutors:
    executors: tuple[SparkExecutor, ...]


@dataclass(frozen=True)
class SetSql:
    queries: tuple[SqlQuery, ...]


@dataclass(frozen=True)
class SetSqlMetrics:
    sql_id: int
    metrics: tuple[SqlMetric, ...]


@dataclass(frozen=True)
class TickDuration:
    """Clock tick carrying the current time in epoch ms."""

    current_time: int


Event = Init | SetStages | SetExecutors | SetSql | SetSqlMetrics | TickDuration
