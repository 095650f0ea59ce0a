"""Snapshot polling.

Binds a snapshot source to an AppMonitor: fetches raw payloads, parses them
at the snapshot boundary and dispatches the resulting events in a fixed
order (stages before executors, since the activity rate reads the stage
summary). Retrying failed fetches is left to the caller.
"""

from __future__ import annotations

from typing import Any, Protocol

from sparkpulse.core.aggregation import RUNNING_END_TIME
from sparkpulse.core.events import Init, SetExecutors, SetSql, SetStages, TickDuration
from sparkpulse.core.models import Alert
from sparkpulse.core.monitor import AppMonitor
from sparkpulse.core.snapshots import (
    parse_attempt,
    parse_configuration,
    parse_environment,
    parse_executors,
    parse_sql,
    parse_stages,
)


class SnapshotSource(Protocol):
    """Interface for fetching raw monitoring payloads of one application."""

    def get_attempt(self, app_id: str) -> Any:
        """Return the latest attempt payload."""
        ...

    def get_configuration(self, app_id: str) -> Any:
        """Return the environment payload (spark/system properties, runtime)."""
        ...

    def get_environment(self, app_id: str) -> Any:
        """Return environment facts (driver heap maximum)."""
        ...

    def get_stages(self, app_id: str) -> Any:
        """Return the stage list, or None when not available."""
        ...

    def get_executors(self, app_id: str) -> Any:
        """Return the executor list, or None when not available."""
        ...

    def get_sql(self, app_id: str) -> Any:
        """Return the SQL execution list, or None when not available."""
        ...


def start_session(source: SnapshotSource, app_id: str, current_time: int) -> AppMonitor:
    """
    Create a monitor initialized from the source's attempt and configuration.

    Raises:
        SnapshotError: If a payload is malformed.
    """
    monitor = AppMonitor()
    monitor.dispatch(
        Init(
            config=parse_configuration(source.get_configuration(app_id)),
            app_id=app_id,
            attempt=parse_attempt(source.get_attempt(app_id)),
            current_time=current_time,
        )
    )
    monitor.set_environment(parse_environment(source.get_environment(app_id)))
    return monitor


def poll_once(
    monitor: AppMonitor,
    source: SnapshotSource,
    app_id: str,
    current_time: int,
) -> list[Alert]:
    """
    Fetch one round of snapshots, reduce them and refresh alerts.

    Payloads the source does not have (None) are skipped.

    Returns:
        Alerts that are new compared to the previous pass.

    Raises:
        SnapshotError: If a payload is malformed. Events of the round that
            were already dispatched stay applied.
    """
    stages = source.get_stages(app_id)
    if stages is not None:
        monitor.dispatch(SetStages(parse_stages(stages)))

    executors = source.get_executors(app_id)
    if executors is not None:
        monitor.dispatch(SetExecutors(parse_executors(executors)))

    sql = source.get_sql(app_id)
    if sql is not None:
        monitor.dispatch(SetSql(parse_sql(sql)))

    monitor.dispatch(TickDuration(current_time))
    return monitor.refresh_alerts()


def refresh_attempt(
    monitor: AppMonitor,
    source: SnapshotSource,
    app_id: str,
    current_time: int,
) -> bool:
    """
    Detect the end of the run.

    Run metadata never changes after initialization, so once the attempt
    reports an end time the session is initialized again from the final
    attempt; the next ``poll_once`` refills the aggregates.

    Returns:
        True if the run has finished.
    """
    run_metadata = monitor.state.run_metadata
    if run_metadata is not None and not run_metadata.is_running:
        return True

    attempt = parse_attempt(source.get_attempt(app_id))
    if attempt.end_time_epoch == RUNNING_END_TIME:
        return False

    monitor.dispatch(
        Init(
            config=parse_configuration(source.get_configuration(app_id)),
            app_id=app_id,
            attempt=attempt,
            current_time=current_time,
        )
    )
    return True
