"""Parsing of raw monitoring payloads into typed snapshot records.

Payloads follow the camelCase JSON served by the Spark monitoring REST API.
This is the only place raw data enters the core: anything malformed is
rejected here with a SnapshotError instead of flowing into the aggregates.
"""

from __future__ import annotations

from typing import Any, Mapping

from sparkpulse.core.models import (
    DRIVER_ID,
    Attempt,
    EnvironmentInfo,
    SparkConfiguration,
    SparkExecutor,
    SparkStage,
)
from sparkpulse.core.sql import SqlMetric, SqlQuery


class SnapshotError(ValueError):
    """Raised when a snapshot payload is missing a field or has a bad value."""


def _record(item: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(item, Mapping):
        raise SnapshotError(f"{kind}: expected an object, got {type(item).__name__}")
    return item


def _records(payload: Any, kind: str) -> list[Mapping[str, Any]]:
    if not isinstance(payload, list):
        raise SnapshotError(f"{kind}: expected a list, got {type(payload).__name__}")
    return [_record(item, kind) for item in payload]


def _int(item: Mapping[str, Any], key: str, kind: str) -> int:
    if key not in item:
        raise SnapshotError(f"{kind}: missing field '{key}'")
    value = item[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotError(f"{kind}: field '{key}' must be a number, got {value!r}")
    return int(value)


def _str(item: Mapping[str, Any], key: str, kind: str) -> str:
    if key not in item:
        raise SnapshotError(f"{kind}: missing field '{key}'")
    value = item[key]
    if not isinstance(value, str):
        raise SnapshotError(f"{kind}: field '{key}' must be a string, got {value!r}")
    return value


def _bool(item: Mapping[str, Any], key: str, kind: str) -> bool:
    if key not in item:
        raise SnapshotError(f"{kind}: missing field '{key}'")
    value = item[key]
    if not isinstance(value, bool):
        raise SnapshotError(f"{kind}: field '{key}' must be a boolean, got {value!r}")
    return value


def _pairs(payload: Mapping[str, Any], key: str, kind: str) -> tuple[tuple[str, str], ...]:
    raw = payload.get(key, [])
    if not isinstance(raw, list):
        raise SnapshotError(f"{kind}: field '{key}' must be a list of pairs")
    pairs: list[tuple[str, str]] = []
    for entry in raw:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise SnapshotError(f"{kind}: '{key}' entry {entry!r} is not a (key, value) pair")
        pairs.append((str(entry[0]), str(entry[1])))
    return tuple(pairs)


def parse_stages(payload: Any) -> tuple[SparkStage, ...]:
    """Parse a stage list snapshot."""
    kind = "stage"
    return tuple(
        SparkStage(
            status=_str(item, "status", kind),
            num_active_tasks=_int(item, "numActiveTasks", kind),
            num_tasks=_int(item, "numTasks", kind),
            num_failed_tasks=_int(item, "numFailedTasks", kind),
            num_complete_tasks=_int(item, "numCompleteTasks", kind),
            input_bytes=_int(item, "inputBytes", kind),
            output_bytes=_int(item, "outputBytes", kind),
            disk_bytes_spilled=_int(item, "diskBytesSpilled", kind),
            executor_run_time=_int(item, "executorRunTime", kind),
        )
        for item in _records(payload, kind)
    )


def _heap_usage(item: Mapping[str, Any], kind: str) -> int:
    """
    Return observed heap usage in bytes.

    Prefers an explicit ``heapMemoryUsageBytes`` and falls back to the
    ``peakMemoryMetrics.JVMHeapMemory`` reported by Spark; 0 when neither exists.
    """
    if "heapMemoryUsageBytes" in item:
        return _int(item, "heapMemoryUsageBytes", kind)
    peak = item.get("peakMemoryMetrics")
    if isinstance(peak, Mapping) and "JVMHeapMemory" in peak:
        return _int(peak, "JVMHeapMemory", kind)
    return 0


def parse_executors(payload: Any) -> tuple[SparkExecutor, ...]:
    """
    Parse an executor list snapshot.

    Raises:
        SnapshotError: If a record is malformed or the list does not contain
            exactly one driver record.
    """
    kind = "executor"
    executors = tuple(
        SparkExecutor(
            id=_str(item, "id", kind),
            is_active=_bool(item, "isActive", kind),
            total_duration=_int(item, "totalDuration", kind),
            max_tasks=_int(item, "maxTasks", kind),
            total_cores=_int(item, "totalCores", kind),
            heap_memory_usage_bytes=_heap_usage(item, kind),
        )
        for item in _records(payload, kind)
    )
    drivers = sum(1 for executor in executors if executor.id == DRIVER_ID)
    if drivers != 1:
        raise SnapshotError(f"{kind}: expected exactly one '{DRIVER_ID}' record, got {drivers}")
    return executors


def parse_attempt(payload: Any) -> Attempt:
    """Parse attempt metadata (``endTimeEpoch == -1`` while running)."""
    kind = "attempt"
    item = _record(payload, kind)
    return Attempt(
        app_spark_version=_str(item, "appSparkVersion", kind),
        start_time_epoch=_int(item, "startTimeEpoch", kind),
        end_time_epoch=_int(item, "endTimeEpoch", kind),
    )


def parse_configuration(payload: Any) -> SparkConfiguration:
    """Parse the environment endpoint into a SparkConfiguration."""
    kind = "configuration"
    item = _record(payload, kind)
    runtime = item.get("runtime", {})
    if not isinstance(runtime, Mapping):
        raise SnapshotError(f"{kind}: field 'runtime' must be an object")
    return SparkConfiguration(
        spark_properties=_pairs(item, "sparkProperties", kind),
        system_properties=_pairs(item, "systemProperties", kind),
        runtime={str(k): str(v) for k, v in runtime.items() if v is not None},
    )


def parse_environment(payload: Any) -> EnvironmentInfo:
    """Parse environment facts; ``driverXmxBytes`` may be absent or null."""
    kind = "environment"
    item = _record(payload, kind)
    if item.get("driverXmxBytes") is None:
        return EnvironmentInfo()
    return EnvironmentInfo(driver_xmx_bytes=_int(item, "driverXmxBytes", kind))


def parse_sql_metrics(payload: Any) -> tuple[SqlMetric, ...]:
    """Parse a list of ``{"name": ..., "value": ...}`` SQL metrics."""
    kind = "sql metric"
    return tuple(
        SqlMetric(name=_str(item, "name", kind), value=str(item.get("value", "")))
        for item in _records(payload, kind)
    )


def parse_sql(payload: Any) -> tuple[SqlQuery, ...]:
    """Parse the SQL execution list, including metrics of plan nodes when present."""
    kind = "sql"
    queries: list[SqlQuery] = []
    for item in _records(payload, kind):
        metrics: list[SqlMetric] = []
        for node in item.get("nodes", []) or []:
            metrics.extend(parse_sql_metrics(_record(node, kind).get("metrics", []) or []))
        queries.append(
            SqlQuery(
                id=_int(item, "id", kind),
                status=_str(item, "status", kind),
                description=str(item.get("description") or ""),
                submission_time=str(item.get("submissionTime") or ""),
                duration_ms=_int(item, "duration", kind) if "duration" in item else 0,
                metrics=tuple(metrics),
            )
        )
    return tuple(queries)
