# File: schemagen/exceptions.py
"""schemagen exception hierarchy."""

from __future__ import annotations

from typing import List, Optional


class SchemaGenError(Exception):
    """Base exception for schemagen errors."""

    def __init__(self, message: str) -> None:
        self.message: str = message
        super().__init__(message)


class MetadataQueryError(SchemaGenError):
    """Raised when a catalog query cannot be executed."""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        table: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.query: Optional[str] = query
        self.table: Optional[str] = table


class TableNotFoundError(MetadataQueryError):
    """Raised when the catalog has no columns for a requested table."""

    def __init__(self, table: str, database: Optional[str] = None) -> None:
        where: str = f" in database {database!r}" if database else ""
        super().__init__(f"Table {table!r} not found{where}.", table=table)
        self.database: Optional[str] = database


class ConfigurationError(SchemaGenError):
    """Raised when configuration or an input file is invalid."""


__all__: List[str] = [
    "SchemaGenError",
    "MetadataQueryError",
    "TableNotFoundError",
    "ConfigurationError",
]
