"""Commands for monitoring Spark applications."""

import time
from pathlib import Path

import typer
from databricks.sdk.errors import NotFound, PermissionDenied
from rich.live import Live

from sparkpulse.cli.common.context import build_cluster_context
from sparkpulse.cli.common.exits import EXIT_ALERTS, die, exit_from_exc, warn_exit
from sparkpulse.cli.common.logs import configure_logging
from sparkpulse.cli.common.options import (
    AppIdOpt,
    ClusterIdOpt,
    FailOnErrorOpt,
    IntervalOpt,
    ProfileOpt,
    VerboseOpt,
    resolve_interval,
)
from sparkpulse.cli.common.output import build_dashboard, console, out
from sparkpulse.cli.tui import select_application
from sparkpulse.core.adapters.recording import RecordingSource
from sparkpulse.core.models import Alert, AlertSeverity
from sparkpulse.core.monitor import AppMonitor
from sparkpulse.core.polling import poll_once, refresh_attempt, start_session
from sparkpulse.core.snapshots import SnapshotError

app = typer.Typer(
    help="Monitor Spark application health",
    no_args_is_help=True,
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _finish(monitor: AppMonitor, fail_on_error: bool) -> None:
    """Print the final alert list and exit with the alert status when asked to."""
    if monitor.alerts:
        out.alerts_table(monitor.alerts, title="Active alerts")
    else:
        out.success("No alerts")

    errors = [a for a in monitor.alerts if a.severity == AlertSeverity.ERROR]
    if fail_on_error and errors:
        raise typer.Exit(EXIT_ALERTS)


def _report_new(alerts: list[Alert]) -> None:
    for alert in alerts:
        out.alert(alert)


@app.command("list")
def list_apps(
    cluster_id: str = ClusterIdOpt,
    profile: str | None = ProfileOpt,
):
    """
    List the Spark applications of a cluster.
    """
    appctx = build_cluster_context(profile, cluster_id)

    try:
        with out.status("Loading applications..."):
            apps = appctx.adapter.list_applications()
    except NotFound as exc:
        exit_from_exc(exc, message=f"Spark UI of cluster '{cluster_id}' not found.", code=1)
    except PermissionDenied as exc:
        exit_from_exc(exc, message=f"No permission to access cluster '{cluster_id}'.", code=1)

    if not apps:
        warn_exit("No Spark applications found", code=0)

    out.applications_table(apps, title=f"Applications on {cluster_id}")


@app.command()
def watch(
    cluster_id: str = ClusterIdOpt,
    app_id: str | None = AppIdOpt,
    profile: str | None = ProfileOpt,
    interval: int | None = IntervalOpt,
    fail_on_error: bool = FailOnErrorOpt,
    verbose: bool = VerboseOpt,
):
    """
    Poll a running application and show its health until it ends.
    """
    configure_logging(verbose)
    appctx = build_cluster_context(profile, cluster_id)
    poll_seconds = resolve_interval(interval)

    if app_id is None:
        try:
            with out.status("Loading applications..."):
                apps = appctx.adapter.list_applications()
        except NotFound as exc:
            exit_from_exc(exc, message=f"Spark UI of cluster '{cluster_id}' not found.", code=1)
        except PermissionDenied as exc:
            exit_from_exc(exc, message=f"No permission to access cluster '{cluster_id}'.", code=1)
        app_id = select_application(apps)
        if app_id is None:
            warn_exit("No Spark application selected", code=0)

    try:
        with out.status("Reading application configuration..."):
            monitor = start_session(appctx.adapter, app_id, _now_ms())
    except SnapshotError as exc:
        exit_from_exc(exc, message=f"Unexpected Spark UI response: {exc}")
    except NotFound as exc:
        exit_from_exc(
            exc, message=f"Application '{app_id}' not found on cluster '{cluster_id}'.", code=1
        )
    except PermissionDenied as exc:
        exit_from_exc(exc, message=f"No permission to access cluster '{cluster_id}'.", code=1)

    try:
        dashboard = build_dashboard(monitor.state, monitor.alerts)
        with Live(dashboard, console=console, refresh_per_second=4) as live:
            while True:
                now = _now_ms()
                finished = refresh_attempt(monitor, appctx.adapter, app_id, now)
                _report_new(poll_once(monitor, appctx.adapter, app_id, now))
                live.update(build_dashboard(monitor.state, monitor.alerts))
                if finished:
                    break
                time.sleep(poll_seconds)
    except SnapshotError as exc:
        exit_from_exc(exc, message=f"Unexpected Spark UI response: {exc}")
    except NotFound as exc:
        exit_from_exc(exc, message=f"Application '{app_id}' is no longer available.", code=1)
    except PermissionDenied as exc:
        exit_from_exc(exc, message=f"No permission to access cluster '{cluster_id}'.", code=1)
    except KeyboardInterrupt:
        out.warn("Stopped watching")

    _finish(monitor, fail_on_error)


@app.command()
def replay(
    path: Path = typer.Argument(..., help="Recorded snapshot JSON file"),
    fail_on_error: bool = FailOnErrorOpt,
    verbose: bool = VerboseOpt,
):
    """
    Replay a recorded snapshot sequence and report status and alerts.
    """
    configure_logging(verbose)

    try:
        source = RecordingSource.from_path(path)
    except OSError as exc:
        exit_from_exc(exc, message=f"Cannot read {path}: {exc.strerror or exc}")
    except SnapshotError as exc:
        exit_from_exc(exc, message=str(exc))

    if not source.frames:
        warn_exit("Recording has no frames", code=0)

    try:
        monitor = start_session(source, source.app_id, source.start_time())
        for frame_time in source.iter_frames():
            _report_new(poll_once(monitor, source, source.app_id, frame_time))
    except SnapshotError as exc:
        die(f"Invalid recording: {exc}", code=1)

    out.status_table(monitor.state)
    _finish(monitor, fail_on_error)
