import pytest

from sparkpulse.core.alerts import check_memory_usage, diff_alerts, evaluate_memory_alerts
from sparkpulse.core.formatting import human_file_size_spark_config_format
from sparkpulse.core.models import (
    AlertSeverity,
    EnvironmentInfo,
    ExecutorStatus,
    ResourceRole,
    SparkExecutor,
    StatusState,
)

GIB = 1024**3
CONFIG = {"spark.executor.memory": "4g"}


def _status(percentage: float, observed: int = GIB) -> StatusState:
    return StatusState(
        duration=1000,
        executor_status=ExecutorStatus(
            num_of_executors=2,
            total_core_hour=1.0,
            activity_rate=50.0,
            max_executor_memory_bytes=observed,
            max_executor_memory_percentage=percentage,
        ),
    )


def _driver(heap: int) -> SparkExecutor:
    return SparkExecutor("driver", True, 1000, 1, 1, heap_memory_usage_bytes=heap)


def test_executor_memory_too_high_raises_one_error():
    alerts = evaluate_memory_alerts(_status(96), CONFIG, None, [])

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.name == "executorMemoryTooHigh"
    assert alert.id == "executorMemoryTooHigh_96.00"
    assert alert.severity == AlertSeverity.ERROR
    assert alert.source.kind == "status"
    assert alert.source.metric == "memory"
    assert alert.title == "Executor Memory Under-Provisioned"
    assert "96.00%" in alert.message


def test_too_high_suggestion_is_twenty_percent_more_capacity():
    alert = evaluate_memory_alerts(_status(99.5), CONFIG, None, [])[0]

    expected = human_file_size_spark_config_format(4 * GIB * 1.2)
    assert expected == "4916m"
    assert expected in alert.suggestion
    assert '"spark.executor.memory"' in alert.suggestion
    assert 'from current value "4g"' in alert.suggestion


def test_executor_memory_too_low_raises_one_warning():
    alerts = evaluate_memory_alerts(_status(65), CONFIG, None, [])

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.name == "executorMemoryTooLow"
    assert alert.severity == AlertSeverity.WARNING
    assert alert.title == "Executor Memory Over-Provisioned"
    assert human_file_size_spark_config_format(4 * GIB * 0.8) in alert.suggestion
    assert alert.suggestion.startswith("1. Decrease")


@pytest.mark.parametrize("percentage", [70, 80, 95])
def test_executor_memory_within_band_raises_nothing(percentage: float):
    assert evaluate_memory_alerts(_status(percentage), CONFIG, None, []) == []


def test_executor_rule_needs_observed_usage():
    assert evaluate_memory_alerts(_status(10, observed=0), CONFIG, None, []) == []


def test_no_executor_status_raises_nothing():
    assert evaluate_memory_alerts(StatusState(duration=0), CONFIG, None, []) == []


def test_driver_with_zero_observed_usage_is_not_evaluated():
    environment = EnvironmentInfo(driver_xmx_bytes=4 * GIB)

    alerts = evaluate_memory_alerts(StatusState(duration=0), CONFIG, environment, [_driver(0)])

    assert alerts == []


def test_driver_memory_too_high():
    environment = EnvironmentInfo(driver_xmx_bytes=4 * GIB)
    driver = _driver(int(4 * GIB * 0.96))

    alerts = evaluate_memory_alerts(StatusState(duration=0), CONFIG, environment, [driver])

    assert [a.name for a in alerts] == ["driverMemoryTooHigh"]
    assert alerts[0].severity == AlertSeverity.ERROR
    assert alerts[0].source.metric == "driverMemory"
    assert '"spark.driver.memory"' in alerts[0].suggestion


def test_driver_has_no_low_memory_rule():
    environment = EnvironmentInfo(driver_xmx_bytes=4 * GIB)

    alerts = evaluate_memory_alerts(StatusState(duration=0), CONFIG, environment, [_driver(GIB)])

    assert alerts == []


def test_driver_rule_needs_known_capacity():
    alerts = evaluate_memory_alerts(StatusState(duration=0), CONFIG, EnvironmentInfo(), [_driver(GIB)])

    assert alerts == []


def test_executor_and_driver_alerts_in_one_pass():
    environment = EnvironmentInfo(driver_xmx_bytes=GIB)

    alerts = evaluate_memory_alerts(_status(97), CONFIG, environment, [_driver(GIB)])

    assert [a.name for a in alerts] == ["executorMemoryTooHigh", "driverMemoryTooHigh"]


def test_check_memory_usage_thresholds_are_exclusive():
    assert check_memory_usage(95.01, GIB, "1g", ResourceRole.EXECUTOR).name == "executorMemoryTooHigh"
    assert check_memory_usage(69.99, GIB, "1g", ResourceRole.EXECUTOR).name == "executorMemoryTooLow"
    assert check_memory_usage(69.99, GIB, "1g", ResourceRole.DRIVER) is None


def test_drifting_percentage_yields_new_id_with_same_name():
    first = evaluate_memory_alerts(_status(96), CONFIG, None, [])
    second = evaluate_memory_alerts(_status(97.25), CONFIG, None, [])

    assert first[0].name == second[0].name
    assert first[0].id != second[0].id
    assert diff_alerts(first, second) == second
    assert diff_alerts(second, second) == []
