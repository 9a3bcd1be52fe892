# File: schemagen/rules.py
"""
schemagen - Validation Rule Generator
=======================================
Turns column metadata into ordered validation rule lists such as
``["required", "string", "max:100"]``.

Rule order per column is fixed:

    1. presence   — ``required`` or ``nullable``
    2. type rules — looked up by raw type name in ``_TYPE_RULES``
    3. uniqueness — ``unique:<table>,<column>`` for ``UNI`` key columns

The consumer-facing form joins each list with ``|``. Rule names and
parameters are separated by ``:``, multiple parameters by ``,``.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Dict, List

from schemagen.inspector import (
    SchemaInspector,
    get_enum_values,
    is_auto_increment,
    is_nullable,
    is_unsigned,
)
from schemagen.models import ColumnInfo, KeyType
from schemagen.utils import wrap_in_quotes

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.rules")

RULE_DELIMITER: str = "|"

# ---------------------------------------------------------------------------
# Type rule builders
# ---------------------------------------------------------------------------

TypeRuleBuilder = Callable[[ColumnInfo], List[str]]


def _integer_rules(column: ColumnInfo) -> List[str]:
    rules: List[str] = ["integer"]
    unsigned: bool = is_unsigned(column.full_type)
    if unsigned:
        rules.append("min:0")
    if column.data_type.lower() == "tinyint":
        if unsigned:
            rules.append("max:255")
        else:
            rules.extend(["min:-128", "max:127"])
    return rules


def _numeric_rules(column: ColumnInfo) -> List[str]:
    rules: List[str] = ["numeric"]
    if is_unsigned(column.full_type):
        rules.append("min:0")
    return rules


def _bounded_string_rules(column: ColumnInfo) -> List[str]:
    rules: List[str] = ["string"]
    if column.max_length:
        rules.append(f"max:{column.max_length}")
    return rules


def _enum_rules(column: ColumnInfo) -> List[str]:
    values: List[str] = get_enum_values(column.full_type)
    if not values:
        return []
    return ["in:" + ",".join(values)]


def _fixed(*rules: str) -> TypeRuleBuilder:
    def _build(column: ColumnInfo) -> List[str]:
        return list(rules)

    return _build


_TYPE_RULES: Dict[str, TypeRuleBuilder] = {
    "int": _integer_rules,
    "tinyint": _integer_rules,
    "smallint": _integer_rules,
    "mediumint": _integer_rules,
    "bigint": _integer_rules,
    "float": _numeric_rules,
    "double": _numeric_rules,
    "decimal": _numeric_rules,
    "varchar": _bounded_string_rules,
    "char": _bounded_string_rules,
    "text": _fixed("string"),
    "mediumtext": _fixed("string"),
    "longtext": _fixed("string"),
    "date": _fixed("date"),
    "datetime": _fixed("date"),
    "timestamp": _fixed("date"),
    "time": _fixed("date_format:H:i:s"),
    "year": _fixed("integer", "min:1901", "max:2155"),
    "bool": _fixed("boolean"),
    "boolean": _fixed("boolean"),
    "enum": _enum_rules,
    "json": _fixed("array"),
    # Not SQL types; matched when a catalog or snapshot reports them verbatim.
    "email": _fixed("email"),
    "url": _fixed("url"),
}


def get_type_rules(column: ColumnInfo) -> List[str]:
    """Type-specific rules for a column; unknown types contribute nothing."""
    builder = _TYPE_RULES.get(column.data_type.lower())
    if builder is None:
        return []
    return builder(column)


def build_column_rules(column: ColumnInfo, table: str) -> List[str]:
    """
    Ordered rule list for one column.

        >>> col = ColumnInfo(name="age", data_type="int",
        ...                  full_type="int(11) unsigned", is_nullable="NO")
        >>> build_column_rules(col, "users")
        ['required', 'integer', 'min:0']
    """
    rules: List[str] = ["nullable" if is_nullable(column) else "required"]
    rules.extend(get_type_rules(column))
    if column.column_key == KeyType.UNIQUE:
        rules.append(f"unique:{table},{column.name}")
    return rules


def join_rules(rule_lists: Dict[str, List[str]]) -> Dict[str, str]:
    return {name: RULE_DELIMITER.join(rules) for name, rules in rule_lists.items()}


def render_validation_code(rule_lists: Dict[str, List[str]], indent: int = 4) -> str:
    """
    Rules as dict-literal body lines::

        "email": "required|string|max:191|unique:users,email",
    """
    spaces: str = " " * indent
    return "\n".join(
        f"{spaces}{wrap_in_quotes(name)}: {wrap_in_quotes(rule)},"
        for name, rule in join_rules(rule_lists).items()
    )


# ---------------------------------------------------------------------------
# RuleGenerator
# ---------------------------------------------------------------------------


class RuleGenerator:
    """
    Constraint rule deriver over a :class:`SchemaInspector`.

    Auto-increment columns never get rules. Primary-key columns are skipped
    in create mode and included in update mode.
    """

    def __init__(self, inspector: SchemaInspector) -> None:
        self._inspector: SchemaInspector = inspector

    def generate_rule_lists(
        self, table: str, for_update: bool = False
    ) -> Dict[str, List[str]]:
        """Column name → ordered rule list, in column declaration order."""
        columns: List[ColumnInfo] = self._inspector.get_columns(table)
        primary_key: List[str] = self._inspector.get_primary_key(table)
        rules: Dict[str, List[str]] = {}

        for column in columns:
            if is_auto_increment(column):
                continue
            if not for_update and column.name in primary_key:
                continue
            column_rules: List[str] = build_column_rules(column, table)
            if column_rules:
                rules[column.name] = column_rules

        logger.debug(
            "Rules for %s (%s): %d columns",
            table,
            "update" if for_update else "create",
            len(rules),
        )
        return rules

    def generate_rules(self, table: str, for_update: bool = False) -> Dict[str, str]:
        """Column name → ``|``-joined rule string."""
        return join_rules(self.generate_rule_lists(table, for_update))

    def generate_create_and_update_rules(self, table: str) -> Dict[str, Dict[str, str]]:
        return {
            "create": self.generate_rules(table, for_update=False),
            "update": self.generate_rules(table, for_update=True),
        }

    def generate_validation_code(
        self, table: str, for_update: bool = False, indent: int = 4
    ) -> str:
        return render_validation_code(self.generate_rule_lists(table, for_update), indent)

    def to_json(self, table: str, for_update: bool = False) -> str:
        return json.dumps(self.generate_rules(table, for_update), indent=2)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RULE_DELIMITER",
    "RuleGenerator",
    "build_column_rules",
    "get_type_rules",
    "join_rules",
    "render_validation_code",
]

logger.debug("schemagen.rules loaded — %d public symbols.", len(__all__))
