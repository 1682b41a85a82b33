# pgcasbin

Stores Casbin-style access control policies in a PostgreSQL table.

Every policy or grouping rule is kept as one row holding its policy type
(`p`, `g`, `p2`, ...) in the column `p_type` and up to six values in the
columns `v0` to `v5`. All columns are `varchar(256) not null default ''`.
When an adapter is created, the table and an index on each column are
created if they do not already exist.

## Installation

```
pip install pgcasbin
```

The package has no database driver of its own. Pass in a DB-API connection
whose driver uses the `%s` parameter style, as PostgreSQL drivers such as
psycopg do. The adapter calls `cursor()`, `commit()` and `rollback()` on it.

## Usage

```python
from pgcasbin.adapter import Adapter, FilteredAdapter
from pgcasbin.rule import Filter

adapter = Adapter(connection, "casbin")            # schema "public"
adapter = Adapter(connection, "casbin", "auth")    # another schema

# Load every stored rule into a model
adapter.load_policy(model)

# Replace everything stored with the p and g rules the model holds
adapter.save_policy(model)

# Auto-save operations for single rules
adapter.add_policy("p", "p", ["alice", "data1", "write"])
adapter.remove_policy("p", "p", ["alice", "data1", "write"])
adapter.remove_filtered_policy("p", "p", 0, "data2_admin")
```

`remove_policy` and `remove_filtered_policy` delete every row of the given
policy type whose columns equal the non-empty values given; empty values
match anything.

### The model object

The adapters work with any model object shaped like this:

- `model.model` is a mapping from section (`"p"`, `"g"`, ...) to a mapping
  from policy type to an assertion whose `policy` attribute is a list of rules
  (each a list of strings);
- `model.clear_policy()` empties it (used by filtered loading);
- `model.add_policy(sec, ptype, rule)` adds one rule (used by filtered loading).

`load_policy` feeds each stored row, as a line such as `p, alice, data1, read`,
to `pgcasbin.adapter.load_policy_line`, which appends it to the matching
assertion. Empty lines, lines starting with `#`, and lines whose section or
policy type the model does not define are skipped.

### Filtered loading

`FilteredAdapter` loads only the rules that match a `Filter`. Filter values
are SQL `LIKE` patterns compared with `v0` to `v5` in order; an empty or
missing value matches anything. At most six values may be given per section,
otherwise `ValueError` is raised.

```python
filtered = FilteredAdapter(connection, "casbin")
filtered.load_filtered_policy(model, Filter(p=["alice"]))
assert filtered.is_filtered()
```

Passing `None` as the filter loads the full policy. Passing anything other
than a `Filter` raises `TypeError`. A policy loaded through a filter cannot
be saved back: `save_policy` raises `RuntimeError` until the full policy has
been loaded again with `load_policy`.

### Rules

`pgcasbin.rule` holds the row model on its own:

```python
from pgcasbin.rule import rule_from_filter, rule_from_values

rule = rule_from_values("p", ["alice", "data1", "read"])
rule.to_policy_line()   # "p, alice, data1, read"
rule.to_list()          # ["p", "alice", "data1", "read"]

rule_from_filter("p", 1, "data1")   # CasbinRule(ptype="p", v1="data1")
```

`rule_from_values` keeps at most six values and ignores the rest.

`pgcasbin.repository.CasbinRuleRepository` performs the table reads and
writes (`load_all`, `load_filtered`, `insert`, `delete`, `replace_all`) and can
be used directly.

## What this package does not do

It only stores and loads rules. It does not parse model configuration files
or decide access requests; those come from the access control library whose
model objects you pass in.

## Running the tests

```
pip install -e ".[test]"
pytest
```