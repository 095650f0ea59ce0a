"""CLI application for Spark application health monitoring."""

import typer

from sparkpulse.cli.commands.apps import app as apps_app

app = typer.Typer(
    help="sparkpulse - live health view of Spark applications",
    no_args_is_help=True,
)

app.add_typer(apps_app, name="app", help="Watch / replay / list Spark applications.")


if __name__ == "__main__":
    app()
