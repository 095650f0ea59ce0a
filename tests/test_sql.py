from sparkpulse.core.sql import SqlMetric, SqlQuery, SqlState, calculate_sql_state, update_sql_metrics


def test_calculate_sql_state_orders_queries_by_id():
    state = calculate_sql_state(None, [SqlQuery(id=2, status="RUNNING"), SqlQuery(id=1, status="COMPLETED")])

    assert [q.id for q in state.queries] == [1, 2]


def test_calculate_sql_state_keeps_identity_when_unchanged():
    queries = [SqlQuery(id=1, status="RUNNING")]
    first = calculate_sql_state(None, queries)

    assert calculate_sql_state(first, list(queries)) is first


def test_calculate_sql_state_carries_known_metrics_over():
    metrics = (SqlMetric("rows", "5"),)
    existing = SqlState(queries=(SqlQuery(id=1, status="RUNNING", metrics=metrics),))

    updated = calculate_sql_state(existing, [SqlQuery(id=1, status="COMPLETED")])

    assert updated is not existing
    assert updated.find(1).status == "COMPLETED"
    assert updated.find(1).metrics == metrics


def test_calculate_sql_state_keeps_unchanged_query_identity():
    existing = calculate_sql_state(None, [SqlQuery(id=1, status="COMPLETED"), SqlQuery(id=2, status="RUNNING")])

    updated = calculate_sql_state(existing, [SqlQuery(id=1, status="COMPLETED"), SqlQuery(id=2, status="COMPLETED")])

    assert updated.queries[0] is existing.queries[0]
    assert updated.queries[1] is not existing.queries[1]


def test_update_sql_metrics_unknown_id_returns_existing():
    existing = SqlState(queries=(SqlQuery(id=1, status="RUNNING"),))

    assert update_sql_metrics(existing, 99, [SqlMetric("rows", "1")]) is existing


def test_update_sql_metrics_replaces_metrics():
    existing = SqlState(queries=(SqlQuery(id=1, status="RUNNING"), SqlQuery(id=2, status="RUNNING")))

    updated = update_sql_metrics(existing, 2, [SqlMetric("rows", "1")])

    assert updated.find(2).metrics == (SqlMetric("rows", "1"),)
    assert updated.queries[0] is existing.queries[0]
