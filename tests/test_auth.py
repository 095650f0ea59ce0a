from sparkpulse.core.auth import _describe_auth_failure, _normalize_host


def test_normalize_host_strips_query_and_trailing_slash():
    assert _normalize_host("https://adb-1.azuredatabricks.net/?o=123") == "https://adb-1.azuredatabricks.net"
    assert _normalize_host(None) is None


def test_expired_login_message_names_profile():
    message = _describe_auth_failure("run databricks auth login --host https://x", "prod")

    assert "databricks auth login --profile prod" in message


def test_generic_failure_message():
    assert "default profile" in _describe_auth_failure("no host", None)
