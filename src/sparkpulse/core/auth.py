"""Databricks workspace client construction.

The Spark UI of a Databricks cluster is only reachable through the
workspace's driver proxy, so live monitoring needs an authenticated
WorkspaceClient. Profiles are resolved by the Databricks unified
authentication (``~/.databrickscfg`` or environment variables).
"""

import re

from databricks.sdk import WorkspaceClient
from databricks.sdk.core import Config


class AuthError(RuntimeError):
    """Raised when no usable Databricks credentials can be resolved."""


def _describe_auth_failure(message: str, profile: str | None) -> str:
    """Turn an SDK configuration error into an actionable message."""
    if re.search(r"databricks auth login", message):
        cmd = "databricks auth login"
        if profile:
            cmd = f"{cmd} --profile {profile}"
        return f"Databricks credentials expired. Log in again with:\n  $ {cmd}"
    where = f"profile '{profile}'" if profile else "the default profile"
    return f"Cannot authenticate to Databricks with {where}: {message}"


def _normalize_host(host: str | None) -> str | None:
    """
    Strip query strings (``?o=<workspace id>``) and trailing slashes that
    browser-copied workspace URLs carry, so proxy paths join cleanly.
    """
    if not host:
        return host
    return host.split("?", 1)[0].rstrip("/")


def get_client(profile: str | None = None) -> WorkspaceClient:
    """
    Create a WorkspaceClient for the given profile (or the default one).

    Raises:
        AuthError: If the SDK cannot resolve a configuration.
    """
    try:
        cfg = Config(profile=profile) if profile else Config()
    except ValueError as exc:
        raise AuthError(_describe_auth_failure(str(exc), profile)) from exc
    cfg.host = _normalize_host(cfg.host)
    return WorkspaceClient(config=cfg)
