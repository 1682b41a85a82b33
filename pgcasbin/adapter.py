"""Casbin adapters that keep policies in a PostgreSQL table."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from .repository import COLUMNS, CasbinRuleRepository
from .rule import CasbinRule, Filter, rule_from_filter, rule_from_values

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "public"
POLICY_SECTIONS = ("p", "g")


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def load_policy_line(line: str, model: Any) -> None:
    """Add one comma separated policy line to ``model``.

    Empty lines and lines starting with ``#`` are ignored, as are lines whose
    section or policy type the model does not define.
    """
    if not line or line.startswith("#"):
        return
    tokens = [token.strip() for token in line.split(",")]
    key = tokens[0]
    if not key:
        return
    assertion = model.model.get(key[0], {}).get(key)
    if assertion is None:
        return
    assertion.policy.append(tokens[1:])


class Adapter:
    """Loads and saves casbin policies through a DB-API connection."""

    def __init__(self, connection: Any, table_name: str, schema: str = DEFAULT_SCHEMA) -> None:
        self.connection = connection
        self.table_name = table_name
        self.schema = schema
        self.repository = CasbinRuleRepository(connection, schema, table_name)
        self._create_table_if_needed()

    def _create_table_if_needed(self) -> None:
        table = f"{_quote(self.schema)}.{_quote(self.table_name)}"
        definitions = ",\n".join(
            f"    {column} varchar(256) not null default ''" for column in COLUMNS
        )
        cursor = self.connection.cursor()
        try:
            cursor.execute(f"CREATE TABLE IF NOT EXISTS {table} (\n{definitions}\n)")
            for column in COLUMNS:
                index = _quote(f"idx_{self.table_name}_{column}")
                cursor.execute(f"CREATE INDEX IF NOT EXISTS {index} ON {table} ({column})")
            self.connection.commit()
        except Exception:
            logger.exception("Cannot create table %s", table)
            self.connection.rollback()
            raise
        finally:
            cursor.close()

    def load_policy(self, model: Any) -> None:
        """Load every stored rule into ``model``."""
        for rule in self.repository.load_all():
            load_policy_line(rule.to_policy_line(), model)

    @staticmethod
    def _model_rules(model: Any) -> Iterator[CasbinRule]:
        for section in POLICY_SECTIONS:
            for ptype, assertion in model.model.get(section, {}).items():
                for values in assertion.policy:
                    yield rule_from_values(ptype, values)

    def save_policy(self, model: Any) -> None:
        """Replace the stored rules with all p and g rules of ``model``."""
        self.repository.replace_all(list(self._model_rules(model)))

    def add_policy(self, sec: str, ptype: str, rule: list[str]) -> None:
        """Store one rule."""
        self.repository.insert(rule_from_values(ptype, rule))

    def remove_policy(self, sec: str, ptype: str, rule: list[str]) -> None:
        """Delete one rule."""
        self.repository.delete(rule_from_values(ptype, rule))

    def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *args: str) -> None:
        """Delete the rules whose values from ``field_index`` on match ``args``."""
        self.repository.delete(rule_from_filter(ptype, field_index, *args))


class FilteredAdapter(Adapter):
    """Adapter that can also load only the rules matching a ``Filter``."""

    def __init__(self, connection: Any, table_name: str, schema: str = DEFAULT_SCHEMA) -> None:
        self._filtered = False
        super().__init__(connection, table_name, schema)

    def load_policy(self, model: Any) -> None:
        """Load every stored rule into ``model`` and mark the policy unfiltered."""
        self._filtered = False
        super().load_policy(model)

    def load_filtered_policy(self, model: Any, filter: Filter | None) -> None:
        """Clear ``model`` and load the rules matching ``filter`` into it."""
        model.clear_policy()
        if filter is None:
            self.load_policy(model)
            return
        if not isinstance(filter, Filter):
            raise TypeError("invalid filter type")
        for rule in self.repository.load_filtered(filter):
            values = rule.to_list()
            ptype = values[0]
            model.add_policy(ptype[:1], ptype, values[1:])
        self._filtered = True

    def is_filtered(self) -> bool:
        """Return whether the loaded policy has been filtered."""
        return self._filtered

    def save_policy(self, model: Any) -> None:
        """Save ``model``; a filtered policy cannot be saved."""
        if self._filtered:
            raise RuntimeError("cannot save a filtered policy")
        super().save_policy(model)