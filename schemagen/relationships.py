# File: schemagen/relationships.py
"""
schemagen - Relationship Detector
===================================
Infers ORM relationships from foreign keys:

    belongs_to — this table holds the foreign key.
    has_many   — another table holds a foreign key pointing at this table.
    has_one    — a has_many whose foreign-key column is covered by a unique
                 index on the far-side table.

Accessor (``method``) and entity (``model``) names come from the table
names through :func:`~schemagen.utils.to_method_name` and
:func:`~schemagen.utils.to_model_name`.

Rendering targets SQLAlchemy 2.0 declarative mappings: each descriptor
becomes a ``Mapped[...] = relationship(...)`` attribute whose
``primaryjoin`` spells out the key pair.

Complexity: ``detect_has_many`` is O(T) catalog queries where T = tables;
``detect_has_one`` adds one index query per collection relationship.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from schemagen.inspector import SchemaInspector
from schemagen.models import (
    ForeignKeyInfo,
    IndexInfo,
    RelationshipInfo,
    RelationshipSet,
    RelationshipType,
)
from schemagen.utils import (
    indent_lines,
    pluralize,
    singularize,
    to_method_name,
    to_model_name,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.relationships")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

_KIND_LABELS: Dict[str, str] = {
    RelationshipType.BELONGS_TO.value: "belongs to",
    RelationshipType.HAS_MANY.value: "has many",
    RelationshipType.HAS_ONE.value: "has one",
}


def render_relationship(rel: RelationshipInfo, indent: int = 4) -> str:
    """
    Render one descriptor as an SQLAlchemy ``relationship()`` attribute.

    Example (``posts.user_id → users.id`` seen from ``posts``)::

        # belongs to User (user_id → id)
        user: Mapped["User"] = relationship(
            "User",
            primaryjoin="Post.user_id == User.id",
        )
    """
    source_model: str = to_model_name(rel.table)
    label: str = _KIND_LABELS[RelationshipType(rel.kind).value]

    if rel.kind == RelationshipType.BELONGS_TO:
        join: str = f"{source_model}.{rel.foreign_key} == {rel.model}.{rel.local_key}"
    else:
        join = f"{source_model}.{rel.local_key} == {rel.model}.{rel.foreign_key}"

    if rel.kind == RelationshipType.HAS_MANY:
        annotation: str = f'Mapped[List["{rel.model}"]]'
    else:
        annotation = f'Mapped["{rel.model}"]'

    pad: str = " " * indent
    lines: List[str] = [
        f"# {label} {rel.model} ({rel.foreign_key} → {rel.local_key})",
        f"{rel.method}: {annotation} = relationship(",
        f'{pad}"{rel.model}",',
        f'{pad}primaryjoin="{join}",',
    ]
    if rel.kind == RelationshipType.HAS_ONE:
        lines.append(f"{pad}uselist=False,")
    lines.append(")")
    return "\n".join(indent_lines(lines, level=1, size=indent))


def render_relationship_block(relationships: RelationshipSet, indent: int = 4) -> str:
    """All declarations under a ``# Relationships`` header; ``""`` when empty."""
    methods: List[str] = [render_relationship(rel, indent) for rel in relationships.all()]
    if not methods:
        return ""
    return " " * indent + "# Relationships\n\n" + "\n\n".join(methods)


# ---------------------------------------------------------------------------
# RelationshipDetector
# ---------------------------------------------------------------------------


class RelationshipDetector:
    """
    Relationship resolver over a :class:`SchemaInspector`.

    Args:
        inspector: Metadata reader.
        collapse_one_to_one: When True, a ``has_many`` entry is dropped from
            :meth:`detect_relationships` if a ``has_one`` exists for the same
            far-side table and foreign-key column. When False both are kept.
    """

    def __init__(
        self,
        inspector: SchemaInspector,
        *,
        collapse_one_to_one: bool = True,
    ) -> None:
        self._inspector: SchemaInspector = inspector
        self._collapse_one_to_one: bool = collapse_one_to_one

    # -- Detection -----------------------------------------------------------

    def detect_belongs_to(self, table: str) -> List[RelationshipInfo]:
        """Relationships held by ``table`` itself (one per foreign key)."""
        foreign_keys: List[ForeignKeyInfo] = self._inspector.get_foreign_keys(table)
        return [
            RelationshipInfo(
                kind=RelationshipType.BELONGS_TO,
                method=to_method_name(fk.referenced_table),
                model=to_model_name(fk.referenced_table),
                foreign_key=fk.column_name,
                local_key=fk.referenced_column,
                table=table,
                related_table=fk.referenced_table,
            )
            for fk in foreign_keys
        ]

    def detect_has_many(self, table: str) -> List[RelationshipInfo]:
        """Relationships from every other table whose foreign keys point at ``table``."""
        relationships: List[RelationshipInfo] = []

        for other in self._inspector.list_tables():
            if other == table:
                continue
            for fk in self._inspector.get_foreign_keys(other):
                if fk.referenced_table != table:
                    continue
                relationships.append(
                    RelationshipInfo(
                        kind=RelationshipType.HAS_MANY,
                        method=pluralize(to_method_name(other)),
                        model=to_model_name(other),
                        foreign_key=fk.column_name,
                        local_key=fk.referenced_column,
                        table=table,
                        related_table=other,
                    )
                )

        return relationships

    def detect_has_one(
        self,
        table: str,
        has_many: Optional[List[RelationshipInfo]] = None,
    ) -> List[RelationshipInfo]:
        """
        Narrow collection relationships to one-to-one.

        A ``has_many`` qualifies when any unique index of the far-side table
        contains its foreign-key column. ``has_many`` may be passed in to
        avoid recomputing it.
        """
        collections: List[RelationshipInfo] = (
            has_many if has_many is not None else self.detect_has_many(table)
        )
        relationships: List[RelationshipInfo] = []

        for relation in collections:
            indexes: List[IndexInfo] = self._inspector.get_indexes(relation.related_table)
            if any(idx.unique and idx.covers(relation.foreign_key) for idx in indexes):
                relationships.append(
                    relation.model_copy(
                        update={
                            "kind": RelationshipType.HAS_ONE.value,
                            "method": singularize(relation.method),
                        }
                    )
                )

        return relationships

    def detect_relationships(self, table: str) -> RelationshipSet:
        """All three relationship kinds for ``table``."""
        belongs_to: List[RelationshipInfo] = self.detect_belongs_to(table)
        has_many: List[RelationshipInfo] = self.detect_has_many(table)
        has_one: List[RelationshipInfo] = self.detect_has_one(table, has_many)

        if self._collapse_one_to_one and has_one:
            singular_keys: Set[Tuple[str, str]] = {
                (rel.related_table, rel.foreign_key) for rel in has_one
            }
            has_many = [
                rel
                for rel in has_many
                if (rel.related_table, rel.foreign_key) not in singular_keys
            ]

        logger.debug(
            "Relationships for %s: %d belongs_to, %d has_many, %d has_one",
            table,
            len(belongs_to),
            len(has_many),
            len(has_one),
        )
        return RelationshipSet(
            table=table,
            belongs_to=belongs_to,
            has_many=has_many,
            has_one=has_one,
        )

    # -- Output --------------------------------------------------------------

    def generate_relationship_methods(self, table: str, indent: int = 4) -> List[str]:
        """Rendered declarations: belongs_to first, then has_many, then has_one."""
        return [
            render_relationship(rel, indent)
            for rel in self.detect_relationships(table).all()
        ]

    def generate_code(self, table: str, indent: int = 4) -> str:
        """Relationship block ready to paste into a model class body."""
        return render_relationship_block(self.detect_relationships(table), indent)

    def to_dict(self, table: str) -> Dict[str, List[Dict[str, Any]]]:
        return self.detect_relationships(table).to_dict()

    def to_json(self, table: str) -> str:
        return json.dumps(self.to_dict(table), indent=2)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RelationshipDetector",
    "render_relationship",
    "render_relationship_block",
]

logger.debug("schemagen.relationships loaded — %d public symbols.", len(__all__))
