import pytest

from pgcasbin.repository import CasbinRuleRepository, filtered_where_values
from pgcasbin.rule import CasbinRule, Filter


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.closed = False

    def _check(self, sql):
        if self.connection.fail_on and self.connection.fail_on in sql:
            raise RuntimeError("statement failed")

    def execute(self, sql, params=None):
        self._check(sql)
        self.connection.executed.append((sql, params))

    def executemany(self, sql, rows):
        self._check(sql)
        self.connection.executed.append((sql, list(rows)))

    def fetchall(self):
        return list(self.connection.rows)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, rows=(), fail_on=None):
        self.rows = rows
        self.fail_on = fail_on
        self.executed = []
        self.cursors = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


def make_repository(**kwargs):
    connection = FakeConnection(**kwargs)
    return connection, CasbinRuleRepository(connection, "public", "casbin")


def test_filtered_where_values_defaults():
    p, g = filtered_where_values(Filter())
    assert p == ["%"] * 6
    assert g == ["%"] * 6


def test_filtered_where_values_uses_given_tokens():
    p, g = filtered_where_values(Filter(p=["alice", "", "read"], g=["bob"]))
    assert p == ["alice", "%", "read", "%", "%", "%"]
    assert g == ["bob", "%", "%", "%", "%", "%"]


def test_filtered_where_values_too_many_tokens():
    with pytest.raises(ValueError):
        filtered_where_values(Filter(p=["a"] * 7))


def test_load_all_returns_rules():
    rows = [("p", "alice", "data1", "read", "", "", ""), ("g", "bob", "admin", "", "", "", "")]
    connection, repository = make_repository(rows=rows)
    rules = repository.load_all()
    assert rules == [
        CasbinRule("p", "alice", "data1", "read"),
        CasbinRule("g", "bob", "admin"),
    ]
    sql, _ = connection.executed[0]
    assert sql.startswith("SELECT p_type, v0, v1, v2, v3, v4, v5")
    assert '"public"."casbin"' in sql
    assert all(cursor.closed for cursor in connection.cursors)


def test_load_filtered_passes_g_then_p_patterns():
    connection, repository = make_repository(rows=[("p", "alice", "data1", "read", "", "", "")])
    rules = repository.load_filtered(Filter(p=["alice"], g=["bob"]))
    assert rules == [CasbinRule("p", "alice", "data1", "read")]
    sql, params = connection.executed[0]
    assert params == ("bob", "%", "%", "%", "%", "%", "alice", "%", "%", "%", "%", "%")
    assert sql.count("LIKE %s") == 12
    assert "p_type LIKE 'g%%'" in sql
    assert "p_type LIKE 'p%%'" in sql


def test_insert_commits_all_fields():
    connection, repository = make_repository()
    repository.insert(CasbinRule("p", "alice", "data1", "write"))
    sql, params = connection.executed[0]
    assert sql.startswith('INSERT INTO "public"."casbin"')
    assert params == ("p", "alice", "data1", "write", "", "", "")
    assert connection.commits == 1
    assert connection.rollbacks == 0


def test_insert_failure_rolls_back_and_raises():
    connection, repository = make_repository(fail_on="INSERT")
    with pytest.raises(RuntimeError):
        repository.insert(CasbinRule("p", "alice"))
    assert connection.rollbacks == 1
    assert connection.commits == 0


def test_delete_matches_only_non_empty_values():
    connection, repository = make_repository()
    repository.delete(CasbinRule(ptype="p", v0="data2_admin", v2="read"))
    sql, params = connection.executed[0]
    assert params == ("p", "data2_admin", "read")
    assert "AND v0 = %s" in sql
    assert "AND v2 = %s" in sql
    assert "v1" not in sql
    assert connection.commits == 1


def test_delete_quotes_identifiers():
    connection = FakeConnection()
    repository = CasbinRuleRepository(connection, 'my"schema', "rules")
    repository.delete(CasbinRule(ptype="g"))
    sql, params = connection.executed[0]
    assert '"my""schema"."rules"' in sql
    assert params == ("g",)


def test_replace_all_truncates_then_inserts():
    connection, repository = make_repository()
    rules = [CasbinRule("p", "alice", "data1", "read"), CasbinRule("g", "bob", "admin")]
    repository.replace_all(rules)
    assert connection.executed[0][0].startswith("TRUNCATE TABLE")
    insert_sql, rows = connection.executed[1]
    assert insert_sql.startswith("INSERT INTO")
    assert [CasbinRule(*row) for row in rows] == rules
    assert connection.commits == 1


def test_replace_all_with_no_rules_only_truncates():
    connection, repository = make_repository()
    repository.replace_all([])
    assert len(connection.executed) == 1
    assert connection.executed[0][0].startswith("TRUNCATE TABLE")
    assert connection.commits == 1


def test_replace_all_failure_rolls_back():
    connection, repository = make_repository(fail_on="TRUNCATE")
    with pytest.raises(RuntimeError):
        repository.replace_all([CasbinRule("p", "alice")])
    assert connection.rollbacks == 1
    assert connection.executed == []