"""Common CLI options for the CLI."""

import typer

from sparkpulse.core.settings import poll_interval_seconds

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Databricks CLI profile (from ~/.databrickscfg)",
)

ClusterIdOpt = typer.Option(
    ...,
    "--cluster-id",
    "-c",
    help="Databricks cluster running the Spark application",
)

AppIdOpt = typer.Option(
    None,
    "--app-id",
    "-a",
    help="Spark application id (prompted when omitted and several exist)",
)

IntervalOpt = typer.Option(
    None,
    "--interval",
    "-i",
    help="Seconds between polls (default: $SPARKPULSE_POLL_INTERVAL or 5)",
    show_default=False,
)

FailOnErrorOpt = typer.Option(
    False,
    "--fail-on-error",
    help="Exit with code 2 if an error alert is active at the end",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log debug details (ignored events, new alerts)",
)


def resolve_interval(interval: int | None) -> int:
    """Return the poll interval from the option or the environment."""
    if interval is not None and interval >= 1:
        return interval
    return poll_interval_seconds()
