"""Environment-driven settings with safe defaults."""

from __future__ import annotations

import os

POLL_INTERVAL_ENV = "SPARKPULSE_POLL_INTERVAL"
SPARK_UI_PORT_ENV = "SPARKPULSE_SPARK_UI_PORT"

DEFAULT_POLL_INTERVAL_SECONDS = 5
# Port the Spark UI listens on behind the Databricks driver proxy.
DEFAULT_SPARK_UI_PORT = 40001


def env_int(name: str, default: int, *, minimum: int = 0) -> int:
    """Return an integer from the environment, or ``default`` if unset or invalid."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def poll_interval_seconds() -> int:
    return env_int(POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL_SECONDS, minimum=1)


def spark_ui_port() -> int:
    return env_int(SPARK_UI_PORT_ENV, DEFAULT_SPARK_UI_PORT, minimum=1)
