"""Aggregation of snapshot records into derived summaries.

All functions here are pure and total over their inputs. Sums start from
zero, so empty snapshots aggregate to zeros rather than failing. None of
them look at previously derived values; identity preservation is applied
afterwards by the reducer through ``memoize``.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from sparkpulse.core.formatting import calculate_percentage, human_file_size, parse_spark_memory
from sparkpulse.core.models import (
    Attempt,
    ExecutorStatus,
    RunMetadata,
    SparkConfiguration,
    SparkExecutor,
    SparkStage,
    StageActivity,
    StageSummary,
)
from sparkpulse.core.snapshots import SnapshotError

SKIPPED_STAGE_STATUS = "SKIPPED"
RUNNING_END_TIME = -1
DEFAULT_EXECUTOR_MEMORY = "1g"
EXECUTOR_MEMORY_KEY = "spark.executor.memory"

_SPARK_PROPERTY_KEYS = ("spark.app.name", "spark.app.id", "spark.master", EXECUTOR_MEMORY_KEY)
_SYSTEM_PROPERTY_KEYS = ("sun.java.command",)
_RUNTIME_KEYS = ("javaVersion", "scalaVersion")


def extract_run_metadata(app_name: str | None, app_id: str, attempt: Attempt) -> RunMetadata:
    """
    Build run metadata from attempt data.

    An end time of -1 means the application is still running and is stored
    as None.
    """
    end_time = None if attempt.end_time_epoch == RUNNING_END_TIME else attempt.end_time_epoch
    return RunMetadata(
        app_id=app_id,
        app_name=app_name,
        spark_version=attempt.app_spark_version,
        start_time=attempt.start_time_epoch,
        end_time=end_time,
    )


def extract_config(configuration: SparkConfiguration) -> tuple[str | None, dict[str, str]]:
    """
    Flatten the configuration snapshot into the keys the health view uses.

    Application properties supply the name, id, master and executor memory;
    system properties and runtime facts supply the launch command and
    versions. Keys without a source value are left out.

    Returns:
        A tuple of (application name, flattened configuration).

    Raises:
        SnapshotError: If ``spark.executor.memory`` is set to an unparsable value.
    """
    spark_properties = dict(configuration.spark_properties)
    system_properties = dict(configuration.system_properties)

    config: dict[str, str] = {}
    for key in _SPARK_PROPERTY_KEYS:
        if key in spark_properties:
            config[key] = spark_properties[key]
    for key in _SYSTEM_PROPERTY_KEYS:
        if key in system_properties:
            config[key] = system_properties[key]
    for key in _RUNTIME_KEYS:
        if key in configuration.runtime:
            config[key] = configuration.runtime[key]

    if EXECUTOR_MEMORY_KEY in config:
        try:
            parse_spark_memory(config[EXECUTOR_MEMORY_KEY])
        except ValueError as exc:
            raise SnapshotError(f"configuration: {exc}") from exc

    return spark_properties.get("spark.app.name"), config


def executor_memory_bytes(config: Mapping[str, str]) -> int:
    """Return configured executor memory in bytes (Spark's 1g default when unset)."""
    return parse_spark_memory(config.get(EXECUTOR_MEMORY_KEY, DEFAULT_EXECUTOR_MEMORY))


def calculate_duration(run_metadata: RunMetadata, current_time: int) -> int:
    """Return run duration in ms, up to ``current_time`` while the run is going."""
    if run_metadata.end_time is None:
        return current_time - run_metadata.start_time
    return run_metadata.end_time - run_metadata.start_time


def calculate_stage_summary(stages: Iterable[SparkStage]) -> StageSummary:
    """
    Aggregate all non-skipped stages.

    Pending tasks of a stage are the tasks that are neither active, failed
    nor complete.
    """
    counted = [stage for stage in stages if stage.status != SKIPPED_STAGE_STATUS]

    total_active_tasks = sum((s.num_active_tasks for s in counted), 0)
    total_pending_tasks = sum(
        (
            s.num_tasks - s.num_active_tasks - s.num_failed_tasks - s.num_complete_tasks
            for s in counted
        ),
        0,
    )
    total_input = sum((s.input_bytes for s in counted), 0)
    total_output = sum((s.output_bytes for s in counted), 0)
    total_disk_spill = sum((s.disk_bytes_spilled for s in counted), 0)
    total_task_time_ms = sum((s.executor_run_time for s in counted), 0)

    return StageSummary(
        total_active_tasks=total_active_tasks,
        total_pending_tasks=total_pending_tasks,
        total_input_bytes=total_input,
        total_output_bytes=total_output,
        total_disk_spill_bytes=total_disk_spill,
        total_input=human_file_size(total_input),
        total_output=human_file_size(total_output),
        total_disk_spill=human_file_size(total_disk_spill),
        total_task_time_ms=total_task_time_ms,
        status=StageActivity.IDLE if total_active_tasks == 0 else StageActivity.WORKING,
    )


def _ms_to_hours(ms: float) -> float:
    return ms / 1000 / 60 / 60


def calculate_executor_status(
    current_stage_summary: StageSummary | None,
    executors: Iterable[SparkExecutor],
    executor_memory: int = 0,
) -> ExecutorStatus:
    """
    Aggregate executor records into utilization figures.

    In local mode (no active non-driver executor) the driver runs the tasks,
    so potential task time comes from the driver alone. Otherwise only
    non-driver executors count.

    Args:
        current_stage_summary: Stage summary currently in the state; its
            cumulative task time is the numerator of the activity rate.
        executors: Executor records of the latest snapshot.
        executor_memory: Configured executor memory in bytes, used for the
            memory usage percentage. 0 when unknown.

    Raises:
        SnapshotError: In local mode when the snapshot has no driver record.
    """
    records = list(executors)
    driver = next((e for e in records if e.is_driver), None)
    workers = [e for e in records if not e.is_driver]
    num_of_executors = sum(1 for e in workers if e.is_active)

    if num_of_executors == 0:
        if driver is None:
            raise SnapshotError("executor: local mode snapshot without a driver record")
        total_potential_task_time_ms = driver.total_duration * driver.max_tasks
    else:
        total_potential_task_time_ms = sum((e.total_duration * e.max_tasks for e in workers), 0)

    total_core_hour = sum((e.total_cores * _ms_to_hours(e.total_duration) for e in records), 0.0)

    total_task_time_ms = (
        current_stage_summary.total_task_time_ms if current_stage_summary is not None else None
    )
    if total_potential_task_time_ms != 0 and total_task_time_ms is not None:
        activity_rate = min(100.0, total_task_time_ms / total_potential_task_time_ms * 100)
    else:
        activity_rate = 0.0

    max_memory = max((e.heap_memory_usage_bytes for e in workers), default=0)

    return ExecutorStatus(
        num_of_executors=num_of_executors,
        total_core_hour=total_core_hour,
        activity_rate=activity_rate,
        max_executor_memory_bytes=max_memory,
        max_executor_memory_percentage=calculate_percentage(max_memory, executor_memory),
    )
