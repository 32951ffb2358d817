import json

import pytest

from core.exceptions import ExecutionError, PromptAgentError, UnsafeQuery
from core.execution_gate import ExecutionGate, parse_verdict


@pytest.mark.parametrize("sql", [
    "DELETE FROM users",
    "UPDATE users SET name = 'x'",
    "INSERT INTO users (name) VALUES ('x')",
    "WITH doomed AS (DELETE FROM users RETURNING *) SELECT * FROM doomed",
    "",
])
def test_non_select_is_refused_without_database_call(fake_database, sql):
    db = fake_database()
    with pytest.raises(UnsafeQuery):
        ExecutionGate(db).execute(sql, [])
    assert db.calls == []


@pytest.mark.parametrize("sql", [
    "SELECT 1; DROP TABLE users",
    "SELECT id FROM users; DELETE FROM users;",
    "select 1;select 2",
])
def test_stacked_statements_are_refused_without_database_call(fake_database, sql):
    db = fake_database()
    with pytest.raises(UnsafeQuery, match="single SELECT"):
        ExecutionGate(db).execute(sql, [])
    assert db.calls == []


def test_trailing_semicolon_is_dropped(fake_database):
    db = fake_database(rows=[{"id": 1}])
    ExecutionGate(db).execute("SELECT id FROM users;  ")
    assert db.calls == [("SELECT id FROM users", [])]


def test_select_is_case_insensitive_and_trimmed(fake_database):
    db = fake_database(rows=[{"id": 1}])
    rows = ExecutionGate(db).execute("  select id from users  ", {"limit": 5})
    assert rows == [{"id": 1}]
    assert db.calls == [("select id from users", {"limit": 5})]


def test_database_failure_is_wrapped(fake_database):
    db = fake_database(error=RuntimeError("no such table: ghosts"))
    with pytest.raises(ExecutionError, match="no such table"):
        ExecutionGate(db).execute("SELECT * FROM ghosts")
    assert len(db.calls) == 1  # no retry


def test_rows_are_capped(fake_database):
    db = fake_database(rows=[{"id": i} for i in range(5)])
    assert len(ExecutionGate(db, max_rows=2).execute("SELECT id FROM users")) == 2


def test_row_cap_is_passed_to_the_database(fake_database):
    db = fake_database(rows=[{"id": 1}])
    ExecutionGate(db, max_rows=25).execute("SELECT id FROM users")
    assert db.max_rows_requested == [25]


def test_sqlite_fetch_stops_at_row_cap(database):
    assert len(database.select("SELECT name FROM users")) == 2
    assert database.select("SELECT name FROM users ORDER BY id", max_rows=1) == [{"name": "Alice"}]
    assert ExecutionGate(database, max_rows=1).execute("SELECT name FROM users") == [{"name": "Alice"}]


def test_named_bindings_against_sqlite(database):
    rows = ExecutionGate(database).execute("SELECT name FROM users WHERE id = :id", {"id": 1})
    assert rows == [{"name": "Alice"}]


def test_positional_bindings_against_sqlite(database):
    rows = ExecutionGate(database).execute("SELECT name FROM users WHERE id = ?", [2])
    assert rows == [{"name": "Bob"}]


def test_sqlite_error_becomes_execution_error(database):
    with pytest.raises(ExecutionError):
        ExecutionGate(database).execute("SELECT * FROM no_such_table")


# ── Advisory validation ───────────────────────────────────────────────────────

def test_advisory_verdict_is_parsed(fake_agent):
    reply = json.dumps({
        "valid": True,
        "type": "select",
        "is_destructive": False,
        "security_risk": "none",
        "message": "Looks fine",
        "suggestions": ["Add an index on email"],
    })
    agent = fake_agent(reply=reply)
    verdict = ExecutionGate(database=None, agent=agent).validate_advisory("SELECT * FROM users")

    assert verdict.valid is True
    assert verdict.type == "SELECT"
    assert verdict.is_destructive is False
    assert verdict.security_risk == "none"
    assert verdict.suggestions == ["Add an index on email"]
    assert "SELECT * FROM users" in agent.calls[0][0]["content"]


def test_fenced_verdict_is_parsed():
    verdict = parse_verdict('Here it is:\n```json\n{"valid": true, "type": "DELETE", "is_destructive": true}\n```')
    assert verdict.type == "DELETE"
    assert verdict.is_destructive is True


def test_unparseable_verdict_is_conservative(fake_agent):
    verdict = ExecutionGate(None, fake_agent(reply="The query looks okay to me!")).validate_advisory("SELECT 1")
    assert verdict.valid is False
    assert verdict.security_risk == "high"
    assert verdict.is_destructive is True
    assert verdict.type == "ERROR"


def test_agent_failure_is_conservative(fake_agent):
    agent = fake_agent(error=PromptAgentError("Ollama chat failed after 3 attempts"))
    verdict = ExecutionGate(None, agent).validate_advisory("SELECT 1")
    assert verdict.valid is False
    assert verdict.security_risk == "high"
    assert "Ollama chat failed" in verdict.message


def test_empty_query_skips_agent(fake_agent):
    agent = fake_agent(reply="{}")
    verdict = ExecutionGate(None, agent).validate_advisory("  ")
    assert verdict.valid is False
    assert verdict.message == "Query cannot be empty"
    assert agent.calls == []


def test_verdict_never_authorizes_execution(fake_agent, fake_database):
    agent = fake_agent(reply='{"valid": true, "type": "DELETE", "security_risk": "none"}')
    db = fake_database()
    gate = ExecutionGate(db, agent)
    assert gate.validate_advisory("DELETE FROM users").valid is True
    with pytest.raises(UnsafeQuery):
        gate.execute("DELETE FROM users")
    assert db.calls == []
