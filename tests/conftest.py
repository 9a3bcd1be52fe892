"""
tests/conftest.py
Shared fixtures for the schemagen test suite.

The reference schema is a small blog (users, profiles, posts, comments,
tags, post_tag). It is served two ways:

- as a ``SchemaSnapshot`` dict / YAML file for ``SnapshotSource``;
- as MySQL-shaped catalog rows inside an in-memory SQLite database with an
  attached ``information_schema`` schema, for ``InformationSchemaSource``.

No mocking libraries are used.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict, Iterator, List, Optional

import pytest
import yaml
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from schemagen.inspector import SchemaInspector
from schemagen.sources import InformationSchemaSource, SnapshotSource


# ---------------------------------------------------------------------------
# Reference schema
# ---------------------------------------------------------------------------


def _col(
    name: str,
    data_type: str,
    full_type: Optional[str] = None,
    nullable: bool = False,
    key: str = "",
    extra: str = "",
    default: Optional[str] = None,
    max_length: Optional[int] = None,
) -> Dict[str, Any]:
    return {
        "name": name,
        "data_type": data_type,
        "full_type": full_type or data_type,
        "is_nullable": "YES" if nullable else "NO",
        "default": default,
        "max_length": max_length,
        "column_key": key,
        "extra": extra,
    }


def _pk(name: str = "id") -> Dict[str, Any]:
    return _col(name, "int", "int(10) unsigned", key="PRI", extra="auto_increment")


def _fk(column: str, table: str, on_delete: str = "CASCADE") -> Dict[str, Any]:
    return {
        "column_name": column,
        "referenced_table": table,
        "referenced_column": "id",
        "on_update": "NO ACTION",
        "on_delete": on_delete,
    }


def _idx(name: str, columns: List[str], unique: bool = False) -> Dict[str, Any]:
    return {"name": name, "columns": columns, "unique": unique, "index_type": "BTREE"}


BLOG_SCHEMA: Dict[str, Any] = {
    "database": "blog",
    "tables": [
        {
            "name": "comments",
            "columns": [
                _pk(),
                _col("post_id", "int", "int(10) unsigned", key="MUL"),
                _col("user_id", "int", "int(10) unsigned", key="MUL"),
                _col("body", "text"),
            ],
            "primary_key": ["id"],
            "foreign_keys": [_fk("post_id", "posts"), _fk("user_id", "users")],
            "indexes": [
                _idx("comments_post_id_index", ["post_id"]),
                _idx("comments_user_id_index", ["user_id"]),
            ],
        },
        {
            "name": "post_tag",
            "columns": [
                _col("post_id", "int", "int(10) unsigned", key="PRI"),
                _col("tag_id", "int", "int(10) unsigned", key="PRI"),
            ],
            "primary_key": ["post_id", "tag_id"],
            "foreign_keys": [_fk("post_id", "posts"), _fk("tag_id", "tags")],
            "indexes": [],
        },
        {
            "name": "posts",
            "columns": [
                _pk(),
                _col("user_id", "int", "int(10) unsigned", key="MUL"),
                _col("title", "varchar", "varchar(200)", max_length=200),
                _col(
                    "status",
                    "enum",
                    "enum('draft','published')",
                    default="draft",
                ),
                _col("rating", "tinyint", "tinyint(3) unsigned", nullable=True),
                _col("price", "decimal", "decimal(8,2) unsigned", nullable=True),
                _col("published_at", "datetime", nullable=True),
            ],
            "primary_key": ["id"],
            "foreign_keys": [_fk("user_id", "users")],
            "indexes": [_idx("posts_user_id_index", ["user_id"])],
        },
        {
            "name": "profiles",
            "columns": [
                _pk(),
                _col("user_id", "int", "int(10) unsigned", key="UNI"),
                _col("avatar", "varchar", "varchar(255)", nullable=True, max_length=255),
            ],
            "primary_key": ["id"],
            "foreign_keys": [_fk("user_id", "users")],
            "indexes": [_idx("profiles_user_id_unique", ["user_id"], unique=True)],
        },
        {
            "name": "tags",
            "columns": [
                _pk(),
                _col("name", "varchar", "varchar(50)", key="UNI", max_length=50),
            ],
            "primary_key": ["id"],
            "foreign_keys": [],
            "indexes": [_idx("tags_name_unique", ["name"], unique=True)],
        },
        {
            "name": "users",
            "columns": [
                _pk(),
                _col("name", "varchar", "varchar(100)", max_length=100),
                _col("email", "varchar", "varchar(191)", key="UNI", max_length=191),
                _col("age", "int", "int(11) unsigned"),
                _col("bio", "text", nullable=True),
                _col("settings", "json", nullable=True),
            ],
            "primary_key": ["id"],
            "foreign_keys": [],
            "indexes": [_idx("users_email_unique", ["email"], unique=True)],
        },
    ],
}


@pytest.fixture()
def blog_schema_dict() -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(BLOG_SCHEMA)


@pytest.fixture()
def blog_snapshot_path(
    blog_schema_dict: Dict[str, Any], tmp_path: pathlib.Path
) -> pathlib.Path:
    """Write the blog schema to a temporary YAML snapshot and return its path."""
    path = tmp_path / "blog.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(blog_schema_dict, fh, sort_keys=False)
    return path


@pytest.fixture()
def snapshot_source(blog_schema_dict: Dict[str, Any]) -> SnapshotSource:
    return SnapshotSource.from_dict(blog_schema_dict)


@pytest.fixture()
def inspector(snapshot_source: SnapshotSource) -> SchemaInspector:
    return SchemaInspector(snapshot_source)


# ---------------------------------------------------------------------------
# SQLite-backed INFORMATION_SCHEMA
# ---------------------------------------------------------------------------

_CATALOG_DDL: List[str] = [
    """
    CREATE TABLE information_schema.tables (
        TABLE_SCHEMA TEXT, TABLE_NAME TEXT, TABLE_TYPE TEXT
    )
    """,
    """
    CREATE TABLE information_schema.columns (
        TABLE_SCHEMA TEXT, TABLE_NAME TEXT, COLUMN_NAME TEXT,
        ORDINAL_POSITION INTEGER, COLUMN_DEFAULT TEXT, IS_NULLABLE TEXT,
        DATA_TYPE TEXT, CHARACTER_MAXIMUM_LENGTH INTEGER,
        NUMERIC_PRECISION INTEGER, NUMERIC_SCALE INTEGER,
        COLUMN_TYPE TEXT, COLUMN_KEY TEXT, EXTRA TEXT, COLUMN_COMMENT TEXT
    )
    """,
    """
    CREATE TABLE information_schema.key_column_usage (
        CONSTRAINT_NAME TEXT, TABLE_SCHEMA TEXT, TABLE_NAME TEXT,
        COLUMN_NAME TEXT, ORDINAL_POSITION INTEGER,
        REFERENCED_TABLE_NAME TEXT, REFERENCED_COLUMN_NAME TEXT
    )
    """,
    """
    CREATE TABLE information_schema.referential_constraints (
        CONSTRAINT_SCHEMA TEXT, CONSTRAINT_NAME TEXT,
        UPDATE_RULE TEXT, DELETE_RULE TEXT
    )
    """,
    """
    CREATE TABLE information_schema.statistics (
        TABLE_SCHEMA TEXT, TABLE_NAME TEXT, NON_UNIQUE INTEGER,
        INDEX_NAME TEXT, SEQ_IN_INDEX INTEGER, COLUMN_NAME TEXT,
        INDEX_TYPE TEXT
    )
    """,
]


def _insert(conn: Any, table: str, row: Dict[str, Any]) -> None:
    columns = ", ".join(row)
    params = ", ".join(f":{name}" for name in row)
    conn.execute(
        text(f"INSERT INTO information_schema.{table} ({columns}) VALUES ({params})"),
        row,
    )


def _load_schema(conn: Any, schema: Dict[str, Any]) -> None:
    """Translate a snapshot dict into catalog rows."""
    database: str = schema["database"]
    for table in schema["tables"]:
        name: str = table["name"]
        _insert(conn, "tables", {
            "TABLE_SCHEMA": database, "TABLE_NAME": name, "TABLE_TYPE": "BASE TABLE",
        })
        for position, col in enumerate(table["columns"], start=1):
            _insert(conn, "columns", {
                "TABLE_SCHEMA": database,
                "TABLE_NAME": name,
                "COLUMN_NAME": col["name"],
                "ORDINAL_POSITION": position,
                "COLUMN_DEFAULT": col["default"],
                "IS_NULLABLE": col["is_nullable"],
                "DATA_TYPE": col["data_type"],
                "CHARACTER_MAXIMUM_LENGTH": col["max_length"],
                "NUMERIC_PRECISION": None,
                "NUMERIC_SCALE": None,
                "COLUMN_TYPE": col["full_type"],
                "COLUMN_KEY": col["column_key"],
                "EXTRA": col["extra"],
                "COLUMN_COMMENT": "",
            })
        for position, col_name in enumerate(table["primary_key"], start=1):
            _insert(conn, "key_column_usage", {
                "CONSTRAINT_NAME": "PRIMARY",
                "TABLE_SCHEMA": database,
                "TABLE_NAME": name,
                "COLUMN_NAME": col_name,
                "ORDINAL_POSITION": position,
                "REFERENCED_TABLE_NAME": None,
                "REFERENCED_COLUMN_NAME": None,
            })
            _insert(conn, "statistics", {
                "TABLE_SCHEMA": database, "TABLE_NAME": name, "NON_UNIQUE": 0,
                "INDEX_NAME": "PRIMARY", "SEQ_IN_INDEX": position,
                "COLUMN_NAME": col_name, "INDEX_TYPE": "BTREE",
            })
        for fk in table["foreign_keys"]:
            constraint: str = f"{name}_{fk['column_name']}_foreign"
            _insert(conn, "key_column_usage", {
                "CONSTRAINT_NAME": constraint,
                "TABLE_SCHEMA": database,
                "TABLE_NAME": name,
                "COLUMN_NAME": fk["column_name"],
                "ORDINAL_POSITION": 1,
                "REFERENCED_TABLE_NAME": fk["referenced_table"],
                "REFERENCED_COLUMN_NAME": fk["referenced_column"],
            })
            _insert(conn, "referential_constraints", {
                "CONSTRAINT_SCHEMA": database,
                "CONSTRAINT_NAME": constraint,
                "UPDATE_RULE": fk["on_update"],
                "DELETE_RULE": fk["on_delete"],
            })
        for idx in table["indexes"]:
            for seq, col_name in enumerate(idx["columns"], start=1):
                _insert(conn, "statistics", {
                    "TABLE_SCHEMA": database, "TABLE_NAME": name,
                    "NON_UNIQUE": 0 if idx["unique"] else 1,
                    "INDEX_NAME": idx["name"], "SEQ_IN_INDEX": seq,
                    "COLUMN_NAME": col_name, "INDEX_TYPE": idx["index_type"],
                })


def _load_noise(conn: Any) -> None:
    """Rows the blog queries must ignore: a view and another database."""
    _insert(conn, "tables", {
        "TABLE_SCHEMA": "blog", "TABLE_NAME": "active_users", "TABLE_TYPE": "VIEW",
    })
    _insert(conn, "tables", {
        "TABLE_SCHEMA": "shop", "TABLE_NAME": "orders", "TABLE_TYPE": "BASE TABLE",
    })
    _insert(conn, "columns", {
        "TABLE_SCHEMA": "shop", "TABLE_NAME": "users", "COLUMN_NAME": "shop_only",
        "ORDINAL_POSITION": 99, "COLUMN_DEFAULT": None, "IS_NULLABLE": "NO",
        "DATA_TYPE": "int", "CHARACTER_MAXIMUM_LENGTH": None,
        "NUMERIC_PRECISION": 10, "NUMERIC_SCALE": 0, "COLUMN_TYPE": "int(11)",
        "COLUMN_KEY": "", "EXTRA": "", "COLUMN_COMMENT": "",
    })


@pytest.fixture()
def catalog_engine(blog_schema_dict: Dict[str, Any]) -> Iterator[Engine]:
    """
    In-memory SQLite engine whose attached ``information_schema`` holds the
    blog catalog. StaticPool keeps the single connection (and its
    attachment) alive for the whole test.
    """
    engine: Engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _attach(dbapi_conn: Any, connection_record: Any) -> None:
        dbapi_conn.execute("ATTACH DATABASE ':memory:' AS information_schema")

    with engine.begin() as conn:
        for ddl in _CATALOG_DDL:
            conn.execute(text(ddl))
        _load_schema(conn, blog_schema_dict)
        _load_noise(conn)

    yield engine
    engine.dispose()


@pytest.fixture()
def information_schema_source(catalog_engine: Engine) -> InformationSchemaSource:
    return InformationSchemaSource(catalog_engine, "blog")
