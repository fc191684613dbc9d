"""
tests/conftest.py
Shared fixtures for the modelbake test suite.

No external mocking libraries are used; real file I/O is performed inside
temporary directories managed by pytest's tmp_path fixtures, and the live
database source is exercised against a real SQLite file.
"""

from __future__ import annotations

import copy
import logging
import pathlib
from typing import Any, Callable, Dict, List, Sequence, Tuple

import pytest
import yaml
from sqlalchemy import create_engine, text

from modelbake.catalog import FixtureSchemaSource
from modelbake.models import Catalog, ColumnDef, TableSchema

ColumnSpec = Tuple[str, str, bool]


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_modelbake_logging():
    """Undo CLI logging setup so caplog sees records in every test."""
    yield
    root = logging.getLogger("modelbake")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    logging.disable(logging.NOTSET)


# ---------------------------------------------------------------------------
# Table builders
# ---------------------------------------------------------------------------


def _build_table(
    name: str,
    columns: Sequence[ColumnSpec],
    primary_key: Sequence[str] = ("id",),
) -> TableSchema:
    return TableSchema(
        name=name,
        columns=tuple(ColumnDef(name=c, type=t, nullable=n) for c, t, n in columns),
        primary_key=tuple(primary_key),
    )


@pytest.fixture()
def make_table() -> Callable[..., TableSchema]:
    """Factory: ``make_table("posts", [("id", "integer", False), ...])``."""
    return _build_table


@pytest.fixture()
def make_catalog() -> Callable[[List[TableSchema]], Catalog]:
    return Catalog.from_tables


# ---------------------------------------------------------------------------
# Raw schema data fixtures
# ---------------------------------------------------------------------------

_BLOG_SCHEMA: Dict[str, Any] = {
    "tables": {
        "authors": {
            "primary_key": ["id"],
            "columns": [
                {"name": "id", "type": "integer", "nullable": False},
                {"name": "name", "type": "string", "nullable": False},
                {"name": "email", "type": "string", "nullable": False},
                {"name": "password", "type": "string", "nullable": False},
                {"name": "created", "type": "datetime", "nullable": True},
            ],
        },
        "posts": {
            "primary_key": ["id"],
            "columns": [
                {"name": "id", "type": "integer", "nullable": False},
                {"name": "author_id", "type": "integer", "nullable": False},
                {"name": "title", "type": "string", "nullable": False},
                {"name": "body", "type": "text", "nullable": True},
                {"name": "published", "type": "boolean", "nullable": False},
                {"name": "created", "type": "datetime", "nullable": True},
                {"name": "modified", "type": "datetime", "nullable": True},
            ],
        },
        "comments": {
            "primary_key": ["id"],
            "columns": [
                {"name": "id", "type": "integer", "nullable": False},
                {"name": "post_id", "type": "integer", "nullable": False},
                {"name": "author_id", "type": "integer", "nullable": True},
                {"name": "body", "type": "text", "nullable": False},
            ],
        },
        "tags": {
            "primary_key": ["id"],
            "columns": [
                {"name": "id", "type": "integer", "nullable": False},
                {"name": "name", "type": "string", "nullable": False},
            ],
        },
        "posts_tags": {
            "primary_key": ["id"],
            "columns": [
                {"name": "id", "type": "integer", "nullable": False},
                {"name": "post_id", "type": "integer", "nullable": False},
                {"name": "tag_id", "type": "integer", "nullable": False},
            ],
        },
        "categories": {
            "primary_key": ["id"],
            "columns": [
                {"name": "id", "type": "integer", "nullable": False},
                {"name": "parent_id", "type": "integer", "nullable": True},
                {"name": "lft", "type": "integer", "nullable": True},
                {"name": "rght", "type": "integer", "nullable": True},
                {"name": "name", "type": "string", "nullable": False},
            ],
        },
        "i18n": {
            "primary_key": ["id"],
            "columns": [
                {"name": "id", "type": "integer", "nullable": False},
                {"name": "locale", "type": "string", "nullable": False},
                {"name": "content", "type": "text", "nullable": True},
            ],
        },
    }
}


@pytest.fixture()
def blog_schema_dict() -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(_BLOG_SCHEMA)


@pytest.fixture()
def blog_source(blog_schema_dict: Dict[str, Any]) -> FixtureSchemaSource:
    return FixtureSchemaSource(blog_schema_dict, name="default")


@pytest.fixture()
def blog_catalog(blog_source: FixtureSchemaSource) -> Catalog:
    """The full blog catalog: authors, posts, comments, tags, posts_tags, categories, i18n."""
    return Catalog.from_tables([blog_source.describe_table(n) for n in blog_source.list_tables()])


@pytest.fixture()
def blog_schema_yaml_path(blog_schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the blog schema to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(blog_schema_dict, fh, default_flow_style=False)
    return path


@pytest.fixture()
def empty_schema_yaml_path(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "empty.yaml"
    path.write_text("tables: {}\n", encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# SQLite database fixtures
# ---------------------------------------------------------------------------

_BLOG_DDL: List[str] = [
    """
    CREATE TABLE authors (
        id INTEGER PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        email VARCHAR(255) NOT NULL,
        created DATETIME
    )
    """,
    """
    CREATE TABLE posts (
        id INTEGER PRIMARY KEY,
        author_id INTEGER NOT NULL,
        title VARCHAR(200) NOT NULL,
        body TEXT,
        rating NUMERIC(3, 1),
        published BOOLEAN NOT NULL,
        published_on DATE
    )
    """,
    """
    CREATE TABLE tags (
        id INTEGER PRIMARY KEY,
        name VARCHAR(50) NOT NULL
    )
    """,
    """
    CREATE TABLE posts_tags (
        post_id INTEGER NOT NULL,
        tag_id INTEGER NOT NULL,
        PRIMARY KEY (post_id, tag_id)
    )
    """,
]


@pytest.fixture()
def sqlite_url(tmp_path: pathlib.Path) -> str:
    """A SQLite database file holding a small blog schema."""
    url = f"sqlite:///{tmp_path / 'blog.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for ddl in _BLOG_DDL:
            conn.execute(text(ddl))
    engine.dispose()
    return url


@pytest.fixture()
def empty_sqlite_url(tmp_path: pathlib.Path) -> str:
    url = f"sqlite:///{tmp_path / 'empty.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text("SELECT 1"))
    engine.dispose()
    return url
