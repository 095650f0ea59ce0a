"""State reducer for the application health view.

``reduce`` folds one event into the application state and returns the next
state. It never mutates: unchanged subtrees are reused, and when nothing
changed the very same state object is returned, so ``is`` can be used as a
cheap "did anything change" test.

Which events need an initialized state is declared once in ``TRANSITIONS``
instead of being checked in every handler. Events arriving before ``Init``
are expected during startup races and are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable

from sparkpulse.core.aggregation import (
    calculate_duration,
    calculate_executor_status,
    calculate_stage_summary,
    executor_memory_bytes,
    extract_config,
    extract_run_metadata,
)
from sparkpulse.core.events import (
    Event,
    Init,
    SetExecutors,
    SetSql,
    SetSqlMetrics,
    SetStages,
    TickDuration,
)
from sparkpulse.core.memo import memoize
from sparkpulse.core.models import ApplicationState, StatusState
from sparkpulse.core.sql import calculate_sql_state, update_sql_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """
    How one event type is handled.

    Attributes:
        requires_initialized: Ignore the event until ``Init`` has been reduced.
        handler: Function computing the next state.
    """

    requires_initialized: bool
    handler: Callable[[ApplicationState, Event], ApplicationState]


def _with_status(state: ApplicationState, **changes) -> ApplicationState:
    return replace(state, status=replace(state.status, **changes))


def _init(state: ApplicationState, event: Init) -> ApplicationState:
    app_name, config = extract_config(event.config)
    run_metadata = extract_run_metadata(app_name, event.app_id, event.attempt)
    duration = calculate_duration(run_metadata, event.current_time)
    return ApplicationState(
        initialized=True,
        run_metadata=run_metadata,
        config=config,
        status=StatusState(duration=duration),
        sql_state=None,
    )


def _set_stages(state: ApplicationState, event: SetStages) -> ApplicationState:
    current = state.status.stage_summary
    summary = memoize(current, calculate_stage_summary(event.stages))
    if summary is current:
        return state
    return _with_status(state, stage_summary=summary)


def _set_executors(state: ApplicationState, event: SetExecutors) -> ApplicationState:
    current = state.status.executor_status
    computed = calculate_executor_status(
        state.status.stage_summary,
        event.executors,
        executor_memory_bytes(state.config),
    )
    executor_status = memoize(current, computed)
    if executor_status is current:
        return state
    return _with_status(state, executor_status=executor_status)


def _set_sql(state: ApplicationState, event: SetSql) -> ApplicationState:
    sql_state = calculate_sql_state(state.sql_state, event.queries)
    if sql_state is state.sql_state:
        return state
    return replace(state, sql_state=sql_state)


def _set_sql_metrics(state: ApplicationState, event: SetSqlMetrics) -> ApplicationState:
    if state.sql_state is None:
        logger.debug("Ignoring metrics for SQL %s: no SQL state yet", event.sql_id)
        return state
    sql_state = update_sql_metrics(state.sql_state, event.sql_id, event.metrics)
    if sql_state is state.sql_state:
        return state
    return replace(state, sql_state=sql_state)


def _tick_duration(state: ApplicationState, event: TickDuration) -> ApplicationState:
    duration = calculate_duration(state.run_metadata, event.current_time)
    if duration == state.status.duration:
        return state
    return _with_status(state, duration=duration)


TRANSITIONS: dict[type, Transition] = {
    Init: Transition(requires_initialized=False, handler=_init),
    SetSql: Transition(requires_initialized=False, handler=_set_sql),
    SetStages: Transition(requires_initialized=True, handler=_set_stages),
    SetExecutors: Transition(requires_initialized=True, handler=_set_executors),
    SetSqlMetrics: Transition(requires_initialized=True, handler=_set_sql_metrics),
    TickDuration: Transition(requires_initialized=True, handler=_tick_duration),
}


def reduce(state: ApplicationState, event: Event) -> ApplicationState:
    """
    Fold one event into the application state.

    Args:
        state: Current state.
        event: Event to apply.

    Returns:
        The next state, or ``state`` itself when the event changed nothing,
        is unknown, or arrived before initialization.

    Raises:
        SnapshotError: If the event carries a snapshot the aggregates cannot
            be computed from. The state is left untouched.
    """
    transition = TRANSITIONS.get(type(event))
    if transition is None:
        logger.debug("Ignoring unknown event type %s", type(event).__name__)
        return state
    if transition.requires_initialized and not state.initialized:
        logger.debug("Ignoring %s before initialization", type(event).__name__)
        return state
    return transition.handler(state, event)
