# File: schemagen/validators.py
"""
schemagen - Catalog Consistency Checks
========================================
Pure-function checks over a :class:`~schemagen.models.SchemaSnapshot`.

The metadata reader reports what the catalog says and never second-guesses
it. These checks surface the places where catalog answers disagree with
each other or would silently weaken the derived output: dangling foreign
keys (no relationship is produced), ``UNI`` markers without a matching
unique index (rules and has_one detection diverge), enum columns without
parsable values (no ``in:`` rule).

Usage::

    from schemagen.validators import validate_snapshot
    result = validate_snapshot(inspector.snapshot("blog"))
    print(result.format_report())
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Set

from schemagen.inspector import get_enum_values
from schemagen.models import KeyType, SchemaSnapshot, TableMetadata

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates :class:`ValidationIssue` instances produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Consistency: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {"error": "✗", "warning": "⚠", "info": "ℹ"}.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_primary_keys(snapshot: SchemaSnapshot) -> ValidationResult:
    """Missing, composite, or dangling primary keys."""
    result: ValidationResult = ValidationResult()

    for table in snapshot.tables:
        ctx: Dict[str, Any] = {"table": table.name}
        if not table.primary_key:
            result.add_warning(
                "NO_PRIMARY_KEY",
                f"Table '{table.name}' has no primary key; every column will "
                f"appear in both create and update rules.",
                ctx,
            )
            continue
        if len(table.primary_key) > 1:
            result.add_info(
                "COMPOSITE_PRIMARY_KEY",
                f"Table '{table.name}' has a composite primary key "
                f"({', '.join(table.primary_key)}).",
                ctx,
            )
        columns: Set[str] = set(table.column_names)
        for name in table.primary_key:
            if name not in columns:
                result.add_error(
                    "PRIMARY_KEY_COLUMN_MISSING",
                    f"Primary key of '{table.name}' names unknown column '{name}'.",
                    {**ctx, "column": name},
                )

    return result


def validate_foreign_keys(snapshot: SchemaSnapshot) -> ValidationResult:
    """Dangling targets and unknown local columns."""
    result: ValidationResult = ValidationResult()
    table_names: Set[str] = set(snapshot.table_names)

    for table in snapshot.tables:
        columns: Set[str] = set(table.column_names)
        for fk in table.foreign_keys:
            ctx: Dict[str, Any] = {"table": table.name, "column": fk.column_name}
            if fk.column_name not in columns:
                result.add_error(
                    "FK_COLUMN_MISSING",
                    f"Foreign key on '{table.name}' uses unknown column "
                    f"'{fk.column_name}'.",
                    ctx,
                )
            if fk.referenced_table not in table_names:
                result.add_warning(
                    "FK_TARGET_MISSING",
                    f"'{table.name}.{fk.column_name}' references "
                    f"'{fk.referenced_table}', which is not a base table of "
                    f"'{snapshot.database}'; no relationship will be derived.",
                    {**ctx, "referenced_table": fk.referenced_table},
                )

    return result


def _single_column_unique(table: TableMetadata) -> Set[str]:
    return {
        idx.columns[0] for idx in table.indexes if idx.unique and len(idx.columns) == 1
    }


def validate_key_classification(snapshot: SchemaSnapshot) -> ValidationResult:
    """Column ``UNI`` markers versus unique index membership."""
    result: ValidationResult = ValidationResult()

    for table in snapshot.tables:
        unique_columns: Set[str] = _single_column_unique(table)
        for column in table.columns:
            ctx: Dict[str, Any] = {"table": table.name, "column": column.name}
            marked_unique: bool = column.column_key == KeyType.UNIQUE
            if marked_unique and column.name not in unique_columns:
                result.add_warning(
                    "UNIQUE_MARKER_WITHOUT_INDEX",
                    f"'{table.name}.{column.name}' is marked UNI but no "
                    f"single-column unique index covers it.",
                    ctx,
                )
            elif (
                not marked_unique
                and column.name in unique_columns
                and column.column_key != KeyType.PRIMARY
            ):
                result.add_warning(
                    "UNIQUE_INDEX_WITHOUT_MARKER",
                    f"'{table.name}.{column.name}' has a unique index but is "
                    f"not marked UNI; no unique rule will be generated.",
                    ctx,
                )

    return result


def validate_enum_columns(snapshot: SchemaSnapshot) -> ValidationResult:
    """Enum columns whose value list cannot be parsed."""
    result: ValidationResult = ValidationResult()

    for table in snapshot.tables:
        for column in table.columns:
            if column.data_type.lower() != "enum":
                continue
            if not get_enum_values(column.full_type):
                result.add_warning(
                    "ENUM_WITHOUT_VALUES",
                    f"'{table.name}.{column.name}' is an enum but its type "
                    f"'{column.full_type}' yields no values; no 'in:' rule "
                    f"will be generated.",
                    {"table": table.name, "column": column.name},
                )

    return result


# ---------------------------------------------------------------------------
# Master entry point
# ---------------------------------------------------------------------------


def validate_snapshot(snapshot: SchemaSnapshot) -> ValidationResult:
    """Run every consistency check and return the merged result."""
    result: ValidationResult = ValidationResult()

    checks: List[Callable[[SchemaSnapshot], ValidationResult]] = [
        validate_primary_keys,
        validate_foreign_keys,
        validate_key_classification,
        validate_enum_columns,
    ]

    for check in checks:
        logger.debug("Running check: %s", check.__name__)
        result.merge(check(snapshot))

    for issue in result.errors:
        logger.error("%s", issue)
    for issue in result.warnings:
        logger.warning("%s", issue)

    if result.has_errors:
        logger.error("Consistency checks FAILED. %s", result.summary())
    else:
        logger.info("Consistency checks passed. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_primary_keys",
    "validate_foreign_keys",
    "validate_key_classification",
    "validate_enum_columns",
    "validate_snapshot",
]

logger.debug("schemagen.validators loaded — %d public symbols.", len(__all__))
