"""Application context management for the CLI."""

from dataclasses import dataclass

from databricks.sdk import WorkspaceClient

from sparkpulse.cli.common.exits import die
from sparkpulse.core.adapters.sparkui import DatabricksSparkUIAdapter
from sparkpulse.core.auth import AuthError, get_client


@dataclass
class ClusterContext:
    """Databricks client and Spark UI adapter for one cluster."""

    profile: str | None
    cluster_id: str
    client: WorkspaceClient
    adapter: DatabricksSparkUIAdapter


def build_cluster_context(profile: str | None, cluster_id: str) -> ClusterContext:
    """Build the context for live commands, exiting with code 1 on auth failure."""
    try:
        client = get_client(profile)
    except AuthError as exc:
        die(str(exc), code=1)
    adapter = DatabricksSparkUIAdapter(client, cluster_id)
    return ClusterContext(profile=profile, cluster_id=cluster_id, client=client, adapter=adapter)
