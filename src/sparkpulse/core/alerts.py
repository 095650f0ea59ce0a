"""Memory provisioning alerts.

Evaluates the derived status against fixed thresholds and produces alert
records. One evaluation pass returns a fresh list; it does not remember
earlier passes. Consumers that want to report each occurrence once can
diff alert ids with ``diff_alerts``. Alert ids embed the rounded usage
percentage, so consumers that want one alert per incident should group by
``name`` instead.

The executor role has both a "too high" and a "too low" rule. The driver
only has "too high".
"""

from __future__ import annotations

from typing import Iterable, Mapping

from sparkpulse.core.aggregation import executor_memory_bytes
from sparkpulse.core.formatting import calculate_percentage, human_file_size_spark_config_format
from sparkpulse.core.models import (
    Alert,
    AlertSeverity,
    AlertSource,
    EnvironmentInfo,
    ResourceRole,
    SparkExecutor,
    StatusState,
)

MEMORY_TOO_HIGH_PERCENTAGE = 95
MEMORY_TOO_LOW_PERCENTAGE = 70
MEMORY_INCREASE_RATIO = 0.2
MEMORY_DECREASE_SAFETY_BUFFER = 0.2

_ALERT_LOCATION = "In: Summary Page -> Memory Usage"
_SOURCE_METRIC = {ResourceRole.EXECUTOR: "memory", ResourceRole.DRIVER: "driverMemory"}


def _memory_alert(
    role: ResourceRole,
    too_high: bool,
    percentage: float,
    max_memory_bytes: int,
    max_memory_string: str,
) -> Alert:
    level = "High" if too_high else "Low"
    buffer = MEMORY_INCREASE_RATIO if too_high else MEMORY_DECREASE_SAFETY_BUFFER
    ratio = 1 + buffer if too_high else 1 - buffer
    suggested = human_file_size_spark_config_format(max_memory_bytes * ratio)
    name = f"{role.value}MemoryToo{level}"
    shown = f"{percentage:.2f}"

    if too_high:
        title = f"{role.value.capitalize()} Memory Under-Provisioned"
        message = (
            f"Max {role.value} Memory usage is {shown}% which is too high, "
            "and can cause spills and OOMs"
        )
        action = "Increase"
    else:
        title = f"{role.value.capitalize()} Memory Over-Provisioned"
        message = (
            f"Max {role.value} Memory usage is {shown}% which is too low, "
            "which means you can provision less memory and save costs"
        )
        action = "Decrease"

    suggestion = (
        f'1. {action} {role.value} memory provisioning by changing "spark.{role.value}.memory" '
        f'to {suggested} (the current usage is {shown}%, the new value keeps a '
        f'{int(buffer * 100)}% buffer) from current value "{max_memory_string}"'
    )

    return Alert(
        id=f"{name}_{shown}",
        name=name,
        title=title,
        location=_ALERT_LOCATION,
        message=message,
        suggestion=suggestion,
        severity=AlertSeverity.ERROR if too_high else AlertSeverity.WARNING,
        source=AlertSource(kind="status", metric=_SOURCE_METRIC[role]),
    )


def check_memory_usage(
    percentage: float,
    max_memory_bytes: int,
    max_memory_string: str,
    role: ResourceRole,
) -> Alert | None:
    """
    Apply the memory thresholds for one role.

    Returns:
        An error alert above 95%, a warning below 70% for executors, and
        None otherwise.
    """
    if percentage > MEMORY_TOO_HIGH_PERCENTAGE:
        return _memory_alert(role, True, percentage, max_memory_bytes, max_memory_string)
    if role is ResourceRole.EXECUTOR and percentage < MEMORY_TOO_LOW_PERCENTAGE:
        return _memory_alert(role, False, percentage, max_memory_bytes, max_memory_string)
    return None


def evaluate_memory_alerts(
    status: StatusState,
    config: Mapping[str, str],
    environment: EnvironmentInfo | None,
    executors: Iterable[SparkExecutor],
) -> list[Alert]:
    """
    Evaluate executor and driver memory provisioning.

    The executor rule runs once some executor memory usage has been observed.
    The driver rule needs both a known driver heap maximum and a non-zero
    observed driver usage.

    Args:
        status: Status slice of the application state.
        config: Flattened configuration of the application.
        environment: Environment facts, may be None when not fetched yet.
        executors: Executor records of the latest snapshot.

    Returns:
        Alerts raised by this pass, executor first.
    """
    alerts: list[Alert] = []

    executor_status = status.executor_status
    if executor_status is not None and executor_status.max_executor_memory_bytes:
        capacity = executor_memory_bytes(config)
        alert = check_memory_usage(
            executor_status.max_executor_memory_percentage,
            capacity,
            human_file_size_spark_config_format(capacity),
            ResourceRole.EXECUTOR,
        )
        if alert is not None:
            alerts.append(alert)

    if environment is not None and environment.driver_xmx_bytes:
        driver = next((e for e in executors if e.is_driver), None)
        driver_usage = driver.heap_memory_usage_bytes if driver is not None else 0
        if driver_usage:
            capacity = environment.driver_xmx_bytes
            alert = check_memory_usage(
                calculate_percentage(driver_usage, capacity),
                capacity,
                human_file_size_spark_config_format(capacity),
                ResourceRole.DRIVER,
            )
            if alert is not None:
                alerts.append(alert)

    return alerts


def diff_alerts(previous: Iterable[Alert], current: Iterable[Alert]) -> list[Alert]:
    """Return the alerts of ``current`` whose id was not in ``previous``."""
    seen = {alert.id for alert in previous}
    return [alert for alert in current if alert.id not in seen]
