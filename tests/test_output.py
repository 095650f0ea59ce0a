from rich.console import Console

from sparkpulse.cli.common.output import build_alerts_table, build_dashboard, build_status_table, format_duration
from sparkpulse.core.alerts import evaluate_memory_alerts
from sparkpulse.core.events import Init, SetExecutors, SetStages
from sparkpulse.core.models import (
    ApplicationState,
    Attempt,
    ExecutorStatus,
    SparkConfiguration,
    SparkExecutor,
    SparkStage,
    StatusState,
)
from sparkpulse.core.reducer import reduce


def _render(renderable) -> str:
    console = Console(width=200, record=True)
    console.print(renderable)
    return console.export_text()


def _state() -> ApplicationState:
    state = reduce(
        ApplicationState.uninitialized(),
        Init(SparkConfiguration(spark_properties=(("spark.app.name", "etl"),)), "app-9", Attempt("3.5.0", 0, -1), 65_000),
    )
    state = reduce(state, SetStages((SparkStage("ACTIVE", 3, 10, 0, 2, 2048, 0, 0, 100),)))
    return reduce(state, SetExecutors((SparkExecutor("driver", True, 1000, 4, 4),)))


def test_format_duration():
    assert format_duration(0) == "0m 00s"
    assert format_duration(65_000) == "1m 05s"
    assert format_duration(3_723_000) == "1h 02m 03s"


def test_status_table_before_init():
    assert "waiting for application data" in _render(build_status_table(ApplicationState.uninitialized()))


def test_status_table_shows_aggregates():
    text = _render(build_status_table(_state()))

    assert "etl (app-9)" in text
    assert "1m 05s" in text
    assert "working" in text
    assert "2.00 KB" in text
    assert "local" in text


def test_alerts_table_lists_each_alert():
    status = StatusState(duration=0, executor_status=ExecutorStatus(1, 1.0, 1.0, 1, 99.0))
    alerts = evaluate_memory_alerts(status, {}, None, [])

    text = _render(build_alerts_table(alerts))

    assert "error" in text
    assert "Executor Memory Under-Provisioned" in text


def test_dashboard_omits_alerts_table_without_alerts():
    text = _render(build_dashboard(_state(), []))

    assert "Active alerts" not in text
