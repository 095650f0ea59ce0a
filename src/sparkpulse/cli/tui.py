"""Interactive application picker."""

from __future__ import annotations

from typing import Any, Mapping

import questionary

from sparkpulse.cli.common.output import out

_MAX_APP_NAME_WIDTH = 72


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _app_choice_title(app: Mapping[str, Any], *, name_width: int) -> str:
    """Format one application as `<name>  (<app id>)` with aligned id column."""
    short_name = _truncate(str(app.get("name", "")), _MAX_APP_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  ({app.get('id', '')})"


def select_application(apps: list[Mapping[str, Any]]) -> str | None:
    """
    Pick an application id.

    A single application is returned without prompting.

    Returns:
        The chosen application id, or None if there is none or the prompt
        was cancelled.
    """
    if not apps:
        return None
    if len(apps) == 1:
        return str(apps[0].get("id"))

    name_width = max(len(_truncate(str(a.get("name", "")), _MAX_APP_NAME_WIDTH)) for a in apps)
    choices = [
        questionary.Choice(
            title=_app_choice_title(app, name_width=name_width),
            value=str(app.get("id")),
        )
        for app in apps
    ]
    return out.select_one("Select a Spark application:", choices)
