"""Monitoring session around the state reducer.

AppMonitor keeps the current application state plus the inputs the alert
rules need beyond the state tree (environment facts and the latest executor
snapshot), and refreshes the alert list after each poll.
"""

from __future__ import annotations

import logging

from sparkpulse.core.alerts import diff_alerts, evaluate_memory_alerts
from sparkpulse.core.events import Event, SetExecutors
from sparkpulse.core.models import Alert, ApplicationState, EnvironmentInfo, SparkExecutor
from sparkpulse.core.reducer import reduce

logger = logging.getLogger(__name__)


class AppMonitor:
    """Event-by-event view of one monitored application."""

    def __init__(self, state: ApplicationState | None = None) -> None:
        self.state = state or ApplicationState.uninitialized()
        self.environment: EnvironmentInfo | None = None
        self.executors: tuple[SparkExecutor, ...] = ()
        self.alerts: list[Alert] = []

    def dispatch(self, event: Event) -> bool:
        """
        Reduce one event into the session state.

        Returns:
            True if the root state object changed.
        """
        next_state = reduce(self.state, event)
        if isinstance(event, SetExecutors) and next_state.initialized:
            self.executors = event.executors
        changed = next_state is not self.state
        self.state = next_state
        return changed

    def set_environment(self, environment: EnvironmentInfo) -> None:
        self.environment = environment

    def refresh_alerts(self) -> list[Alert]:
        """
        Re-evaluate the alert rules over the current status.

        Returns:
            Alerts raised by this pass whose id was not raised by the
            previous pass. ``self.alerts`` holds the full current list.
        """
        if not self.state.initialized:
            return []

        current = evaluate_memory_alerts(
            self.state.status,
            self.state.config,
            self.environment,
            self.executors,
        )
        new_alerts = diff_alerts(self.alerts, current)
        for alert in new_alerts:
            logger.info("Alert %s: %s", alert.name, alert.message)
        self.alerts = current
        return new_alerts
