# File: schemagen/inspector.py
"""
schemagen - Schema Inspector
==============================
The metadata reader used by the rest of the pipeline. ``SchemaInspector``
wraps any :class:`~schemagen.sources.MetadataSource` and adds the pure
column predicates (nullability, auto-increment, unsigned, enum values,
semantic type) that both the relationship resolver and the rule deriver
rely on.

The predicates are plain module functions so they can be used without a
source; the inspector re-exposes them as methods for convenience.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence

from schemagen.models import (
    ColumnInfo,
    ForeignKeyInfo,
    IndexInfo,
    SchemaSnapshot,
    SemanticType,
    TableMetadata,
)
from schemagen.sources import MetadataSource

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.inspector")

# ---------------------------------------------------------------------------
# Column predicates
# ---------------------------------------------------------------------------

_ENUM_RE: re.Pattern[str] = re.compile(r"^enum\((.*)\)$")

_SEMANTIC_TYPES: Dict[str, SemanticType] = {
    "int": SemanticType.INTEGER,
    "tinyint": SemanticType.INTEGER,
    "smallint": SemanticType.INTEGER,
    "mediumint": SemanticType.INTEGER,
    "bigint": SemanticType.INTEGER,
    "float": SemanticType.FLOAT,
    "double": SemanticType.FLOAT,
    "decimal": SemanticType.FLOAT,
    "bool": SemanticType.BOOLEAN,
    "boolean": SemanticType.BOOLEAN,
    "json": SemanticType.ARRAY,
}


def get_enum_values(full_type: str) -> List[str]:
    """
    Extract the value list of an ``enum(...)`` column type.

        >>> get_enum_values("enum('a','b','c')")
        ['a', 'b', 'c']
        >>> get_enum_values("varchar(10)")
        []

    Anything that is not literally ``enum(...)`` yields an empty list.
    Values are split on ``,`` and stripped of surrounding quote characters,
    so values that themselves contain commas are not supported.
    """
    if not full_type.startswith("enum("):
        return []
    match: Optional[re.Match[str]] = _ENUM_RE.match(full_type)
    if match is None:
        return []
    return [token.strip("'\"") for token in match.group(1).split(",")]


def is_auto_increment(column: ColumnInfo) -> bool:
    return "auto_increment" in column.extra.lower()


def is_nullable(column: ColumnInfo) -> bool:
    return column.is_nullable.upper() == "YES"


def is_unsigned(full_type: str) -> bool:
    return "unsigned" in full_type.lower()


def get_semantic_type(column: ColumnInfo) -> SemanticType:
    """Map the raw type name to a language-level type; unknown types are strings."""
    return _SEMANTIC_TYPES.get(column.data_type.lower(), SemanticType.STRING)


# ---------------------------------------------------------------------------
# SchemaInspector
# ---------------------------------------------------------------------------


class SchemaInspector:
    """
    Metadata reader facade.

    Usage::

        inspector = SchemaInspector(InformationSchemaSource(engine, "blog"))
        for column in inspector.get_columns("users"):
            print(column.name, inspector.is_nullable(column))

    No state is kept between calls; every operation asks the source again.
    """

    def __init__(self, source: MetadataSource) -> None:
        self._source: MetadataSource = source

    @property
    def source(self) -> MetadataSource:
        return self._source

    # -- Catalog queries ---------------------------------------------------

    def list_tables(self) -> List[str]:
        tables: List[str] = self._source.list_tables()
        logger.debug("list_tables → %d tables", len(tables))
        return tables

    def get_columns(self, table: str) -> List[ColumnInfo]:
        return self._source.get_columns(table)

    def get_primary_key(self, table: str) -> List[str]:
        return self._source.get_primary_key(table)

    def get_foreign_keys(self, table: str) -> List[ForeignKeyInfo]:
        return self._source.get_foreign_keys(table)

    def get_indexes(self, table: str) -> List[IndexInfo]:
        return self._source.get_indexes(table)

    def get_table_metadata(self, table: str) -> TableMetadata:
        """Collect columns, primary key, foreign keys and indexes of one table."""
        return TableMetadata(
            name=table,
            columns=self.get_columns(table),
            primary_key=self.get_primary_key(table),
            foreign_keys=self.get_foreign_keys(table),
            indexes=self.get_indexes(table),
        )

    def snapshot(
        self, database: str, tables: Optional[Sequence[str]] = None
    ) -> SchemaSnapshot:
        """Capture every (or the given) table into a :class:`SchemaSnapshot`."""
        names: List[str] = list(tables) if tables is not None else self.list_tables()
        logger.info("Capturing snapshot of %d tables from %r", len(names), database)
        return SchemaSnapshot(
            database=database,
            tables=[self.get_table_metadata(name) for name in names],
        )

    # -- Column predicates -------------------------------------------------

    @staticmethod
    def get_enum_values(full_type: str) -> List[str]:
        return get_enum_values(full_type)

    @staticmethod
    def is_auto_increment(column: ColumnInfo) -> bool:
        return is_auto_increment(column)

    @staticmethod
    def is_nullable(column: ColumnInfo) -> bool:
        return is_nullable(column)

    @staticmethod
    def is_unsigned(full_type: str) -> bool:
        return is_unsigned(full_type)

    @staticmethod
    def get_semantic_type(column: ColumnInfo) -> SemanticType:
        return get_semantic_type(column)

    def __repr__(self) -> str:
        return f"<SchemaInspector {self._source!r}>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaInspector",
    "get_enum_values",
    "is_auto_increment",
    "is_nullable",
    "is_unsigned",
    "get_semantic_type",
]

logger.debug("schemagen.inspector loaded — %d public symbols.", len(__all__))
