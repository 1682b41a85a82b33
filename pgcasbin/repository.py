"""Storage of casbin rules in a PostgreSQL table through a DB-API connection.

Queries use the ``%s`` parameter style of psycopg-like drivers.
"""

from __future__ import annotations

from contextlib import closing, contextmanager
from typing import Any, Iterable, Iterator

from .rule import FIELD_COUNT, CasbinRule, Filter

COLUMNS = ("p_type", "v0", "v1", "v2", "v3", "v4", "v5")
VALUE_COLUMNS = COLUMNS[1:]
WILDCARD = "%"


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _pad_filter(tokens: Iterable[str], name: str) -> list[str]:
    tokens = list(tokens)
    if len(tokens) > FIELD_COUNT:
        raise ValueError(
            f"filter {name} has {len(tokens)} values, at most {FIELD_COUNT} allowed"
        )
    padded = [token or WILDCARD for token in tokens]
    return padded + [WILDCARD] * (FIELD_COUNT - len(padded))


def filtered_where_values(filter: Filter) -> tuple[list[str], list[str]]:
    """Return the LIKE patterns for the p and g sections of ``filter``."""
    return _pad_filter(filter.p, "p"), _pad_filter(filter.g, "g")


class CasbinRuleRepository:
    """Reads and writes casbin rules in one table of one schema."""

    def __init__(self, connection: Any, schema: str, table_name: str) -> None:
        self.connection = connection
        self.schema = schema
        self.table_name = table_name

    @property
    def _table(self) -> str:
        return f"{_quote(self.schema)}.{_quote(self.table_name)}"

    @contextmanager
    def _transaction(self) -> Iterator[Any]:
        cursor = self.connection.cursor()
        try:
            yield cursor
            self.connection.commit()
        except BaseException:
            self.connection.rollback()
            raise
        finally:
            cursor.close()

    def _query(self, sql: str, params: tuple[str, ...] | None = None) -> list[CasbinRule]:
        with closing(self.connection.cursor()) as cursor:
            if params is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, params)
            return [CasbinRule(*row) for row in cursor.fetchall()]

    def load_all(self) -> list[CasbinRule]:
        """Return every stored rule."""
        return self._query(f"SELECT {', '.join(COLUMNS)} FROM {self._table}")

    def load_filtered(self, filter: Filter) -> list[CasbinRule]:
        """Return the rules matching ``filter``."""
        p_patterns, g_patterns = filtered_where_values(filter)
        conditions = " AND ".join(f"{column} LIKE %s" for column in VALUE_COLUMNS)
        sql = (
            f"SELECT {', '.join(COLUMNS)} FROM {self._table} WHERE "
            f"( p_type LIKE 'g%%' AND {conditions} ) OR "
            f"( p_type LIKE 'p%%' AND {conditions} )"
        )
        return self._query(sql, tuple(g_patterns + p_patterns))

    def insert(self, rule: CasbinRule) -> None:
        """Store one rule."""
        placeholders = ", ".join(["%s"] * len(COLUMNS))
        sql = (
            f"INSERT INTO {self._table} ({', '.join(COLUMNS)}) "
            f"VALUES ({placeholders})"
        )
        with self._transaction() as cursor:
            cursor.execute(sql, (rule.ptype, *rule._values()))

    def delete(self, rule: CasbinRule) -> None:
        """Delete rules of the same type matching every non-empty value of ``rule``."""
        params = [rule.ptype]
        clauses = [f"DELETE FROM {self._table} WHERE p_type = %s"]
        for column, value in zip(VALUE_COLUMNS, rule._values()):
            if value:
                params.append(value)
                clauses.append(f"AND {column} = %s")
        with self._transaction() as cursor:
            cursor.execute(" ".join(clauses), tuple(params))

    def replace_all(self, rules: Iterable[CasbinRule]) -> None:
        """Replace the whole table content with ``rules``."""
        rows = [(rule.ptype, *rule._values()) for rule in rules]
        placeholders = ", ".join(["%s"] * len(COLUMNS))
        with self._transaction() as cursor:
            cursor.execute(f"TRUNCATE TABLE {self._table}")
            if rows:
                cursor.executemany(
                    f"INSERT INTO {self._table} ({', '.join(COLUMNS)}) "
                    f"VALUES ({placeholders})",
                    rows,
                )