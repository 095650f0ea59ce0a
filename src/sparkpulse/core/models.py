"""Core data models for the application health view.

This module defines the snapshot records consumed from a Spark monitoring
endpoint (stages, executors, attempt and configuration data) and the derived
records that make up the application state (run metadata, stage summary,
executor status, alerts).

All records are frozen dataclasses. Equality is structural (field by field),
which is what the memoization gate relies on to keep object identity stable
when a recomputed aggregate did not change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from sparkpulse.core.sql import SqlState

DRIVER_ID = "driver"


class StageActivity(str, Enum):
    """
    Whether any stage currently has running tasks.

    Values:
        IDLE: No active tasks across non-skipped stages.
        WORKING: At least one task is running.
    """

    IDLE = "idle"
    WORKING = "working"


class AlertSeverity(str, Enum):
    """Severity of an alert."""

    ERROR = "error"
    WARNING = "warning"


class ResourceRole(str, Enum):
    """Process role an alert rule is evaluated for."""

    EXECUTOR = "executor"
    DRIVER = "driver"


@dataclass(frozen=True)
class SparkStage:
    """
    One stage record of a stage list snapshot.

    Attributes:
        status: Stage status as reported by Spark (ACTIVE, COMPLETE, SKIPPED, ...).
        num_active_tasks: Tasks currently running.
        num_tasks: Total tasks of the stage.
        num_failed_tasks: Tasks that failed.
        num_complete_tasks: Tasks that completed.
        input_bytes: Bytes read by the stage.
        output_bytes: Bytes written by the stage.
        disk_bytes_spilled: Bytes spilled to disk.
        executor_run_time: Cumulative task run time in ms.
    """

    status: str
    num_active_tasks: int
    num_tasks: int
    num_failed_tasks: int
    num_complete_tasks: int
    input_bytes: int
    output_bytes: int
    disk_bytes_spilled: int
    executor_run_time: int


@dataclass(frozen=True)
class SparkExecutor:
    """
    One executor record of an executor list snapshot.

    Exactly one record of a snapshot carries id ``"driver"``.
    """

    id: str
    is_active: bool
    total_duration: int
    max_tasks: int
    total_cores: int
    heap_memory_usage_bytes: int = 0

    @property
    def is_driver(self) -> bool:
        return self.id == DRIVER_ID


@dataclass(frozen=True)
class Attempt:
    """Attempt metadata; ``end_time_epoch == -1`` means the run is still going."""

    app_spark_version: str
    start_time_epoch: int
    end_time_epoch: int


@dataclass(frozen=True)
class SparkConfiguration:
    """
    Configuration snapshot.

    Attributes:
        spark_properties: Application-level (key, value) pairs.
        system_properties: JVM system (key, value) pairs.
        runtime: Runtime facts such as ``javaVersion`` and ``scalaVersion``.
    """

    spark_properties: tuple[tuple[str, str], ...] = ()
    system_properties: tuple[tuple[str, str], ...] = ()
    runtime: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "runtime", MappingProxyType(dict(self.runtime)))


@dataclass(frozen=True)
class EnvironmentInfo:
    """Environment facts; the driver heap maximum is optional."""

    driver_xmx_bytes: int | None = None


@dataclass(frozen=True)
class RunMetadata:
    """
    Immutable facts about the monitored run.

    Attributes:
        app_id: Spark application id.
        app_name: Spark application name.
        spark_version: Framework version of the application.
        start_time: Start time in epoch ms.
        end_time: End time in epoch ms, or None while the run is still going.
    """

    app_id: str
    app_name: str | None
    spark_version: str
    start_time: int
    end_time: int | None = None

    @property
    def is_running(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class StageSummary:
    """Aggregate over all non-skipped stages."""

    total_active_tasks: int
    total_pending_tasks: int
    total_input_bytes: int
    total_output_bytes: int
    total_disk_spill_bytes: int
    total_input: str
    total_output: str
    total_disk_spill: str
    total_task_time_ms: int
    status: StageActivity


@dataclass(frozen=True)
class ExecutorStatus:
    """
    Aggregate over executor records.

    Attributes:
        num_of_executors: Active non-driver executors (0 means local mode).
        total_core_hour: Sum of cores x wall duration in hours over all records.
        activity_rate: Spent task time as a percentage of potential task time, in [0, 100].
        max_executor_memory_bytes: Largest observed heap usage of a non-driver executor.
        max_executor_memory_percentage: That maximum relative to the configured executor memory.
    """

    num_of_executors: int
    total_core_hour: float
    activity_rate: float
    max_executor_memory_bytes: int = 0
    max_executor_memory_percentage: float = 0.0


@dataclass(frozen=True)
class StatusState:
    duration: int
    stage_summary: StageSummary | None = None
    executor_status: ExecutorStatus | None = None


@dataclass(frozen=True)
class ApplicationState:
    """
    Root of the state tree.

    ``status``, ``config`` and ``run_metadata`` are set if and only if
    ``initialized`` is True. ``config`` is stored as a read-only mapping.
    """

    initialized: bool = False
    run_metadata: RunMetadata | None = None
    config: Mapping[str, str] | None = None
    status: StatusState | None = None
    sql_state: SqlState | None = None

    def __post_init__(self):
        if self.config is not None and not isinstance(self.config, MappingProxyType):
            object.__setattr__(self, "config", MappingProxyType(dict(self.config)))

    @classmethod
    def uninitialized(cls) -> ApplicationState:
        return cls()


@dataclass(frozen=True)
class AlertSource:
    """Metric an alert was raised for."""

    kind: str
    metric: str


@dataclass(frozen=True)
class Alert:
    """
    One actionable warning produced by an evaluation pass.

    Attributes:
        id: Occurrence id; embeds the rounded triggering percentage.
        name: Rule name, stable across occurrences of the same incident.
        title: Short human-readable title.
        location: UI anchor the alert refers to (informational only).
        message: What was observed.
        suggestion: Remediation including the recommended configuration value.
        severity: AlertSeverity of the alert.
        source: Metric that triggered the alert.
    """

    id: str
    name: str
    title: str
    location: str
    message: str
    suggestion: str
    severity: AlertSeverity
    source: AlertSource
