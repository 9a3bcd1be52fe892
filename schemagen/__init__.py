# File: schemagen/__init__.py
"""
schemagen — Database Schema Inspector
=======================================

Reads table metadata (columns, primary keys, foreign keys, indexes) from a
MySQL-style ``INFORMATION_SCHEMA`` and derives two things from it: the ORM
relationships implied by foreign keys, and per-column validation rules.

Architecture overview::

    cli.py ──▶ SchemaScaffolder (generator.py)
                   │
                   ├──▶ RelationshipDetector (relationships.py) ─┐
                   ├──▶ RuleGenerator        (rules.py)         ├──▶ SchemaInspector ──▶ MetadataSource
                   └──▶ validate_snapshot    (validators.py)    ┘    (inspector.py)      (sources.py)

Usage::

    # As a library
    from schemagen import SchemaScaffolder, SnapshotSource
    scaffolder = SchemaScaffolder(SnapshotSource.from_file(Path("blog.yaml")))
    print(scaffolder.scaffold_table("posts").relationship_code)

    # From the command line
    schemagen posts --snapshot blog.yaml --relationships --validation

Public API:
    - SchemaScaffolder       — Per-table orchestrator
    - SchemaInspector        — Metadata reader
    - RelationshipDetector   — Relationship resolver
    - RuleGenerator          — Constraint rule deriver
    - InformationSchemaSource / SnapshotSource — Catalog backends
    - validate_snapshot      — Catalog consistency checks
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from schemagen.exceptions import (
    ConfigurationError,
    MetadataQueryError,
    SchemaGenError,
    TableNotFoundError,
)
from schemagen.models import (
    ColumnInfo,
    ForeignKeyInfo,
    IndexInfo,
    InspectorConfig,
    KeyType,
    ReferentialAction,
    RelationshipInfo,
    RelationshipSet,
    RelationshipType,
    SchemaSnapshot,
    SemanticType,
    TableMetadata,
)
from schemagen.sources import (
    InformationSchemaSource,
    MetadataSource,
    SnapshotSource,
    dump_snapshot,
    load_snapshot_file,
)
from schemagen.inspector import SchemaInspector
from schemagen.relationships import RelationshipDetector
from schemagen.rules import RuleGenerator
from schemagen.validators import ValidationResult, validate_snapshot
from schemagen.utils import Timer, pluralize, singularize, to_method_name, to_model_name
from schemagen.generator import (
    SchemaScaffolder,
    ScaffoldReport,
    TableScaffold,
    load_config_file,
    parse_config,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Orchestrator
    "SchemaScaffolder",
    "ScaffoldReport",
    "TableScaffold",
    "load_config_file",
    "parse_config",
    # Components
    "SchemaInspector",
    "RelationshipDetector",
    "RuleGenerator",
    # Sources
    "MetadataSource",
    "InformationSchemaSource",
    "SnapshotSource",
    "dump_snapshot",
    "load_snapshot_file",
    # Models
    "ColumnInfo",
    "ForeignKeyInfo",
    "IndexInfo",
    "InspectorConfig",
    "KeyType",
    "ReferentialAction",
    "RelationshipInfo",
    "RelationshipSet",
    "RelationshipType",
    "SchemaSnapshot",
    "SemanticType",
    "TableMetadata",
    # Validation
    "ValidationResult",
    "validate_snapshot",
    # Errors
    "SchemaGenError",
    "MetadataQueryError",
    "TableNotFoundError",
    "ConfigurationError",
    # Utilities
    "Timer",
    "singularize",
    "pluralize",
    "to_method_name",
    "to_model_name",
]
