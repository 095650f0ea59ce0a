"""Spark monitoring REST adapter for Databricks clusters.

The Spark UI of a cluster driver is reached through the workspace driver
proxy, so every call goes through the authenticated ``WorkspaceClient``.
"""

from __future__ import annotations

from typing import Any

from databricks.sdk import WorkspaceClient

from sparkpulse.core.formatting import parse_spark_memory
from sparkpulse.core.settings import spark_ui_port

_DRIVER_MEMORY_KEY = "spark.driver.memory"
_DEFAULT_DRIVER_MEMORY = "1g"


def driver_environment(configuration: Any) -> dict[str, Any]:
    """
    Derive environment facts from a Spark environment payload.

    The driver heap maximum is taken from ``spark.driver.memory`` (Spark's
    1g default when unset). An unparsable value leaves it unknown.
    """
    properties = dict(configuration.get("sparkProperties", []) or [])
    try:
        driver_xmx = parse_spark_memory(properties.get(_DRIVER_MEMORY_KEY, _DEFAULT_DRIVER_MEMORY))
    except ValueError:
        driver_xmx = None
    return {"driverXmxBytes": driver_xmx}


class DatabricksSparkUIAdapter:
    """Adapter reading the Spark monitoring REST API through the Databricks driver proxy."""

    def __init__(self, client: WorkspaceClient, cluster_id: str, port: int | None = None):
        """Create an adapter for the Spark UI of one Databricks cluster."""
        self.client = client
        self.cluster_id = cluster_id
        self.port = port or spark_ui_port()
        self._base_path: str | None = None

    def _api_path(self, suffix: str) -> str:
        """Return the proxied REST path, resolving the workspace id once."""
        if self._base_path is None:
            workspace_id = self.client.get_workspace_id()
            self._base_path = (
                f"/driver-proxy-api/o/{workspace_id}/{self.cluster_id}/{self.port}/api/v1"
            )
        return f"{self._base_path}{suffix}"

    def _get(self, suffix: str) -> Any:
        return self.client.api_client.do("GET", self._api_path(suffix))

    def list_applications(self) -> list[dict[str, Any]]:
        """Return the applications known to the cluster's Spark UI."""
        return list(self._get("/applications") or [])

    def get_attempt(self, app_id: str) -> Any:
        """Return the most recent attempt of the application."""
        app = self._get(f"/applications/{app_id}")
        attempts = (app.get("attempts") or []) if isinstance(app, dict) else []
        if not attempts:
            return None
        return attempts[0]

    def get_configuration(self, app_id: str) -> Any:
        return self._get(f"/applications/{app_id}/environment")

    def get_environment(self, app_id: str) -> Any:
        return driver_environment(self.get_configuration(app_id))

    def get_stages(self, app_id: str) -> Any:
        return self._get(f"/applications/{app_id}/stages")

    def get_executors(self, app_id: str) -> Any:
        return self._get(f"/applications/{app_id}/allexecutors")

    def get_sql(self, app_id: str) -> Any:
        return self._get(f"/applications/{app_id}/sql")
