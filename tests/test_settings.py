import pytest

from sparkpulse.cli.common.options import resolve_interval
from sparkpulse.core.settings import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_SPARK_UI_PORT,
    POLL_INTERVAL_ENV,
    SPARK_UI_PORT_ENV,
    poll_interval_seconds,
    spark_ui_port,
)


def test_defaults_when_unset(monkeypatch):
    monkeypatch.delenv(POLL_INTERVAL_ENV, raising=False)
    monkeypatch.delenv(SPARK_UI_PORT_ENV, raising=False)

    assert poll_interval_seconds() == DEFAULT_POLL_INTERVAL_SECONDS
    assert spark_ui_port() == DEFAULT_SPARK_UI_PORT


@pytest.mark.parametrize("raw", ["abc", "0", "-3", " "])
def test_invalid_poll_interval_falls_back_to_default(monkeypatch, raw: str):
    monkeypatch.setenv(POLL_INTERVAL_ENV, raw)

    assert poll_interval_seconds() == DEFAULT_POLL_INTERVAL_SECONDS


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv(POLL_INTERVAL_ENV, "30")
    monkeypatch.setenv(SPARK_UI_PORT_ENV, "4040")

    assert poll_interval_seconds() == 30
    assert spark_ui_port() == 4040


def test_option_takes_precedence_over_environment(monkeypatch):
    monkeypatch.setenv(POLL_INTERVAL_ENV, "30")

    assert resolve_interval(2) == 2
    assert resolve_interval(None) == 30
