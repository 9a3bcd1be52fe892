# File: schemagen/generator.py
"""
schemagen - Scaffolding Pipeline (Orchestrator)
=================================================

Connects every phase together:

    Config → MetadataSource → SchemaInspector → Relationships + Rules → Scaffold

``SchemaScaffolder`` is the programmatic API and the backend for the CLI.
For each table it produces a ``TableScaffold``: a plain data structure
holding the table metadata, inferred relationships, create/update rule
lists, field type hints and the rendered code fragments, ready to be fed
into whatever template layer the caller uses.

Error handling strategy:
    - Catalog failures inside ``scaffold_table`` propagate unchanged.
    - ``scaffold_all`` isolates failures per table: one broken table is
      recorded in the report and the run continues.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from pydantic import ValidationError

from schemagen.exceptions import ConfigurationError, SchemaGenError
from schemagen.inspector import SchemaInspector, get_semantic_type, is_nullable
from schemagen.models import (
    InspectorConfig,
    RelationshipSet,
    SemanticType,
    TableMetadata,
)
from schemagen.relationships import RelationshipDetector, render_relationship_block
from schemagen.rules import RuleGenerator, join_rules, render_validation_code
from schemagen.sources import InformationSchemaSource, MetadataSource, SnapshotSource
from schemagen.utils import Timer, to_model_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.generator")

_PYTHON_TYPE_HINTS: Dict[str, str] = {
    SemanticType.INTEGER.value: "int",
    SemanticType.FLOAT.value: "float",
    SemanticType.BOOLEAN.value: "bool",
    SemanticType.STRING.value: "str",
    SemanticType.ARRAY.value: "Dict[str, Any]",
}


# ---------------------------------------------------------------------------
# Configuration loading
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a JSON object at top level of {path}, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a YAML mapping at top level of {path}, got {type(data).__name__}."
        )
    return data


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a configuration file (JSON or YAML), dispatching on extension.

    Settings may sit at top level or under a ``schemagen:`` key.

    Raises:
        ConfigurationError: If the file is missing or can't be parsed.
    """
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data: Dict[str, Any] = _load_yaml_file(path)
    elif suffix == ".json":
        data = _load_json_file(path)
    else:
        logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
        try:
            data = _load_json_file(path)
        except ConfigurationError:
            data = _load_yaml_file(path)

    scoped: Any = data.get("schemagen", data)
    if not isinstance(scoped, dict):
        raise ConfigurationError(f"'schemagen' section of {path} must be a mapping.")
    return scoped


def parse_config(
    raw: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> InspectorConfig:
    """
    Validate raw settings into an :class:`InspectorConfig`.

    Non-None ``overrides`` (typically from the command line) win over file
    values. A snapshot override replaces a configured URL and vice versa.
    """
    merged: Dict[str, Any] = dict(raw or {})
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        merged[key] = value
        if key == "snapshot_path":
            merged.pop("database_url", None)
        elif key == "database_url":
            merged.pop("snapshot_path", None)

    try:
        return InspectorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Config validation failed: {exc}") from exc


def build_source(config: InspectorConfig) -> MetadataSource:
    """Instantiate the metadata source a config points at."""
    if config.snapshot_path:
        return SnapshotSource.from_file(Path(config.snapshot_path))
    if not config.database_url:
        raise ConfigurationError("Either database_url or snapshot_path must be configured.")
    return InformationSchemaSource.from_url(
        config.database_url,
        config.database,
        echo=config.echo_sql,
        connect_timeout=config.connect_timeout,
    )


# ---------------------------------------------------------------------------
# Scaffold data structures
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class TableScaffold:
    """Everything a template layer needs to scaffold one table."""

    table: str
    model_name: str
    metadata: TableMetadata
    relationships: RelationshipSet
    create_rules: Dict[str, List[str]] = field(default_factory=dict)
    update_rules: Dict[str, List[str]] = field(default_factory=dict)
    field_types: Dict[str, str] = field(default_factory=dict)
    relationship_code: str = ""
    create_validation_code: str = ""
    update_validation_code: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "model": self.model_name,
            "metadata": self.metadata.model_dump(mode="json"),
            "relationships": self.relationships.to_dict(),
            "rules": {
                "create": join_rules(self.create_rules),
                "update": join_rules(self.update_rules),
            },
            "field_types": dict(self.field_types),
        }


@dataclass(slots=True)
class StepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(slots=True)
class ScaffoldReport:
    """Outcome of :meth:`SchemaScaffolder.scaffold_all`."""

    database: str = ""
    scaffolds: List[TableScaffold] = field(default_factory=list)
    step_metrics: List[StepMetric] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    failed_tables: List[str] = field(default_factory=list)
    total_elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors

    def get(self, table: str) -> Optional[TableScaffold]:
        for scaffold in self.scaffolds:
            if scaffold.table == table:
                return scaffold
        return None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        status: str = "SUCCESS" if self.success else "FAILED"
        lines: List[str] = [
            f"{'=' * 60}",
            "  schemagen — Scaffold Report",
            f"{'=' * 60}",
            f"  Status:           {status}",
            f"  Database:         {self.database}",
            f"  Tables scaffolded: {len(self.scaffolds)}",
            f"  Total time:       {self.total_elapsed_seconds:.3f}s",
        ]
        if self.step_metrics:
            lines.append(f"{'─' * 60}")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )
        if self.errors:
            lines.append(f"{'─' * 60}")
            lines.append(f"  Errors ({len(self.errors)}):")
            for err in self.errors:
                lines.append(f"    ✗ {err}")
        lines.append(f"{'=' * 60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# SchemaScaffolder
# ---------------------------------------------------------------------------


class SchemaScaffolder:
    """
    Pipeline orchestrator.

    Usage::

        scaffolder = SchemaScaffolder(SnapshotSource.from_file(Path("blog.yaml")))
        scaffold = scaffolder.scaffold_table("users")
        print(scaffold.relationship_code)

        report = scaffolder.scaffold_all()
        print(report.summary())
    """

    def __init__(
        self,
        source: MetadataSource,
        *,
        collapse_one_to_one: bool = True,
        indent: int = 4,
    ) -> None:
        self._source: MetadataSource = source
        self._indent: int = indent
        self.inspector: SchemaInspector = SchemaInspector(source)
        self.detector: RelationshipDetector = RelationshipDetector(
            self.inspector, collapse_one_to_one=collapse_one_to_one
        )
        self.rules: RuleGenerator = RuleGenerator(self.inspector)

    @classmethod
    def from_config(cls, config: InspectorConfig) -> "SchemaScaffolder":
        return cls(
            build_source(config),
            collapse_one_to_one=config.collapse_one_to_one,
            indent=config.indent,
        )

    @property
    def database(self) -> str:
        return str(getattr(self._source, "database", ""))

    def field_types(self, metadata: TableMetadata) -> Dict[str, str]:
        """Python type hint per column, ``Optional[...]`` when nullable."""
        hints: Dict[str, str] = {}
        for column in metadata.columns:
            hint: str = _PYTHON_TYPE_HINTS[get_semantic_type(column).value]
            hints[column.name] = f"Optional[{hint}]" if is_nullable(column) else hint
        return hints

    def scaffold_table(self, table: str) -> TableScaffold:
        """Build the scaffold for one table. Catalog errors propagate."""
        metadata: TableMetadata = self.inspector.get_table_metadata(table)
        relationships: RelationshipSet = self.detector.detect_relationships(table)
        create_rules: Dict[str, List[str]] = self.rules.generate_rule_lists(table)
        update_rules: Dict[str, List[str]] = self.rules.generate_rule_lists(
            table, for_update=True
        )

        return TableScaffold(
            table=table,
            model_name=to_model_name(table),
            metadata=metadata,
            relationships=relationships,
            create_rules=create_rules,
            update_rules=update_rules,
            field_types=self.field_types(metadata),
            relationship_code=render_relationship_block(relationships, self._indent),
            create_validation_code=render_validation_code(create_rules, self._indent),
            update_validation_code=render_validation_code(update_rules, self._indent),
        )

    def scaffold_all(self, tables: Optional[Sequence[str]] = None) -> ScaffoldReport:
        """
        Scaffold every (or the given) table.

        A failure to list tables aborts the run; per-table failures are
        recorded in the report and skipped.
        """
        report: ScaffoldReport = ScaffoldReport(database=self.database)

        with Timer("scaffold_all") as total:
            if tables is None:
                with Timer("list tables") as t:
                    names: List[str] = self.inspector.list_tables()
                report.step_metrics.append(
                    StepMetric("list tables", True, t.elapsed, f"{len(names)} tables")
                )
            else:
                names = list(tables)

            for name in names:
                with Timer(f"scaffold {name}") as t:
                    try:
                        report.scaffolds.append(self.scaffold_table(name))
                        ok: bool = True
                        detail: str = ""
                    except SchemaGenError as exc:
                        logger.error("Failed to scaffold %s: %s", name, exc)
                        report.errors.append(f"{name}: {exc}")
                        report.failed_tables.append(name)
                        ok = False
                        detail = exc.__class__.__name__
                report.step_metrics.append(
                    StepMetric(f"scaffold {name}", ok, t.elapsed, detail)
                )

        report.total_elapsed_seconds = total.elapsed
        logger.info(
            "Scaffolded %d/%d tables in %.3fs",
            len(report.scaffolds),
            len(names),
            total.elapsed,
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaScaffolder",
    "TableScaffold",
    "ScaffoldReport",
    "StepMetric",
    "load_config_file",
    "parse_config",
    "build_source",
]

logger.debug("schemagen.generator loaded — %d public symbols.", len(__all__))
