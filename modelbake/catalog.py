# File: modelbake/catalog.py
"""
modelbake - Schema Catalog Reader
==================================
Reads table and column metadata from a schema source and freezes it into a
``Catalog`` for one bake run.

Two interchangeable sources implement ``SchemaSource``:

    DatabaseSchemaSource  : live database via SQLAlchemy reflection
    FixtureSchemaSource   : pre-supplied schema (dict or YAML/JSON file)

Every failure to reach or enumerate the schema surfaces as a
``CatalogError`` subclass and is never retried.
"""

from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import create_engine, inspect
from sqlalchemy import types as sa_types
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.engine.reflection import Inspector
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from modelbake.errors import EmptyCatalogError, SchemaConnectionError, UnknownTableError
from modelbake.models import Catalog, ColumnDef, ColumnType, TableSchema
from modelbake.utils import Timer, load_mapping_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake.catalog")


# ---------------------------------------------------------------------------
# Source interface
# ---------------------------------------------------------------------------


class SchemaSource(abc.ABC):
    """Where table metadata comes from."""

    def __init__(self, name: str = "default") -> None:
        self.name: str = name

    @abc.abstractmethod
    def list_tables(self) -> List[str]:
        """Return every table name visible through this source."""

    @abc.abstractmethod
    def describe_table(self, table: str) -> TableSchema:
        """Return the schema snapshot of one table."""

    def close(self) -> None:
        """Release any held resources."""

    def __enter__(self) -> "SchemaSource":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


# ---------------------------------------------------------------------------
# Live database
# ---------------------------------------------------------------------------


def column_type_from_sqlalchemy(sa_type: Any) -> ColumnType:
    """
    Fold a reflected SQLAlchemy type onto ``ColumnType``.

    Subclasses are checked before their bases (Float before Numeric,
    Text before String).
    """
    if isinstance(sa_type, sa_types.Boolean):
        return ColumnType.BOOLEAN
    if isinstance(sa_type, sa_types.Integer):
        return ColumnType.INTEGER
    if isinstance(sa_type, sa_types.Float):
        return ColumnType.FLOAT
    if isinstance(sa_type, sa_types.Numeric):
        return ColumnType.DECIMAL
    if isinstance(sa_type, sa_types.DateTime):
        return ColumnType.DATETIME
    if isinstance(sa_type, sa_types.Date):
        return ColumnType.DATE
    if isinstance(sa_type, sa_types.Time):
        return ColumnType.TIME
    if isinstance(sa_type, sa_types.Uuid):
        return ColumnType.UUID
    if isinstance(sa_type, sa_types.Text):
        return ColumnType.TEXT
    if isinstance(sa_type, sa_types.String):
        return ColumnType.STRING
    if type(sa_type).__name__.upper() == "INET":
        return ColumnType.INET
    return ColumnType.OTHER


class DatabaseSchemaSource(SchemaSource):
    """
    Reflects a live database through a SQLAlchemy ``Inspector``.

    The engine is created lazily on first use and disposed by ``close()``.
    """

    def __init__(
        self,
        url: str,
        *,
        name: str = "default",
        schema: Optional[str] = None,
        engine: Optional[Engine] = None,
    ) -> None:
        super().__init__(name)
        self.url: str = url
        self.schema: Optional[str] = schema
        self._engine: Optional[Engine] = engine
        self._inspector: Optional[Inspector] = None

    @property
    def inspector(self) -> Inspector:
        if self._inspector is None:
            try:
                if self._engine is None:
                    self._check_sqlite_file()
                    self._engine = create_engine(self.url)
                self._inspector = inspect(self._engine)
            except (SQLAlchemyError, ImportError, ValueError, FileNotFoundError) as exc:
                logger.error("Failed to connect for '%s': %s", self.name, exc)
                raise SchemaConnectionError(self.name, exc) from exc
            logger.info("Connected to %s for connection '%s'.", self._engine.url, self.name)
        return self._inspector

    def _check_sqlite_file(self) -> None:
        """Refuse a missing SQLite file; connecting would create an empty one."""
        url = make_url(self.url)
        if url.get_backend_name() != "sqlite":
            return
        database: str = url.database or ""
        if database in ("", ":memory:") or database.startswith("file:"):
            return
        if not Path(database).is_file():
            raise FileNotFoundError(f"SQLite database file not found: {database}")

    def list_tables(self) -> List[str]:
        try:
            return list(self.inspector.get_table_names(schema=self.schema))
        except SQLAlchemyError as exc:
            raise SchemaConnectionError(self.name, exc) from exc

    def describe_table(self, table: str) -> TableSchema:
        try:
            reflected: List[Dict[str, Any]] = self.inspector.get_columns(
                table, schema=self.schema
            )
            pk: Dict[str, Any] = self.inspector.get_pk_constraint(table, schema=self.schema)
        except NoSuchTableError as exc:
            raise UnknownTableError(table) from exc
        except SQLAlchemyError as exc:
            raise SchemaConnectionError(self.name, exc) from exc

        columns: List[ColumnDef] = [
            ColumnDef(
                name=col["name"],
                type=column_type_from_sqlalchemy(col["type"]),
                nullable=bool(col.get("nullable", True)),
            )
            for col in reflected
        ]
        return TableSchema(
            name=table,
            columns=tuple(columns),
            primary_key=tuple(pk.get("constrained_columns") or ()),
        )

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.debug("Disposed engine for connection '%s'.", self.name)
        self._engine = None
        self._inspector = None


# ---------------------------------------------------------------------------
# Pre-supplied schema
# ---------------------------------------------------------------------------


def _table_from_raw(name: str, raw: Mapping[str, Any]) -> TableSchema:
    if not isinstance(raw, Mapping):
        raise TypeError(f"Table '{name}' must be a mapping, got {type(raw).__name__}.")
    raw_columns: Any = raw.get("columns", [])
    if isinstance(raw_columns, Mapping):
        # {"id": "integer"} or {"id": {"type": "integer", ...}}
        raw_columns = [
            {"name": col_name, **(spec if isinstance(spec, Mapping) else {"type": spec})}
            for col_name, spec in raw_columns.items()
        ]

    columns: List[ColumnDef] = []
    flagged_pk: List[str] = []
    for raw_col in raw_columns:
        if not isinstance(raw_col, Mapping):
            raise TypeError(
                f"Column of table '{name}' must be a mapping, got {raw_col!r}."
            )
        if raw_col.get("primary_key", False):
            flagged_pk.append(raw_col["name"])
        # Extra keys (length, default, comment...) are not part of the snapshot.
        columns.append(
            ColumnDef(
                name=raw_col["name"],
                type=raw_col.get("type", ColumnType.OTHER),
                nullable=raw_col.get("nullable", raw_col.get("null", True)),
            )
        )

    primary_key: Any = raw.get("primary_key", flagged_pk)
    if isinstance(primary_key, str):
        primary_key = [primary_key]
    return TableSchema(name=name, columns=tuple(columns), primary_key=tuple(primary_key))


class FixtureSchemaSource(SchemaSource):
    """
    Serves a schema supplied up front instead of reading a database.

    Accepts either ``{"tables": {name: {...}}}``, ``{"tables": [{"name":
    ..., ...}]}`` or a bare ``{name: {...}}`` mapping.  Columns may be a
    list of column dicts or a ``name → type`` mapping; the primary key is
    taken from ``primary_key`` on the table or on the columns.
    """

    def __init__(
        self,
        tables: Union[Mapping[str, Any], Iterable[TableSchema]],
        *,
        name: str = "fixture",
    ) -> None:
        super().__init__(name)
        self._tables: Dict[str, TableSchema] = {}

        if isinstance(tables, Mapping):
            raw_tables: Any = tables.get("tables", tables)
            try:
                if isinstance(raw_tables, Mapping):
                    for table_name, spec in raw_tables.items():
                        self._tables[table_name] = _table_from_raw(table_name, spec or {})
                else:
                    for spec in raw_tables:
                        if not isinstance(spec, Mapping):
                            raise TypeError(f"Table entry must be a mapping, got {spec!r}.")
                        self._tables[spec["name"]] = _table_from_raw(spec["name"], spec)
            except (ValidationError, KeyError, TypeError, ValueError) as exc:
                raise SchemaConnectionError(name, exc) from exc
        else:
            for table in tables:
                self._tables[table.name] = table

    @classmethod
    def from_file(cls, path: Path, *, name: str = "fixture") -> "FixtureSchemaSource":
        """Load a schema fixture from a YAML or JSON file."""
        try:
            raw: Dict[str, Any] = load_mapping_file(path)
        except (FileNotFoundError, ValueError) as exc:
            raise SchemaConnectionError(name, exc) from exc
        logger.info("Loaded schema fixture %s (%d top-level keys).", path, len(raw))
        return cls(raw, name=name)

    def list_tables(self) -> List[str]:
        return list(self._tables)

    def describe_table(self, table: str) -> TableSchema:
        try:
            return self._tables[table]
        except KeyError:
            raise UnknownTableError(table, sorted(self._tables)) from None


# ---------------------------------------------------------------------------
# Catalog construction
# ---------------------------------------------------------------------------


def build_catalog(source: SchemaSource) -> Catalog:
    """
    Read every table from *source* into a ``Catalog``.

    Tables are listed, sorted, then described one by one.  The catalog is
    complete before any inference runs.

    Raises:
        SchemaConnectionError: The source cannot be reached or enumerated.
        EmptyCatalogError: The source holds no tables.
    """
    with Timer("read_catalog") as t:
        names: List[str] = sorted(source.list_tables())
        if not names:
            logger.error("Connection '%s' does not have any tables.", source.name)
            raise EmptyCatalogError(source.name)
        tables: List[TableSchema] = [source.describe_table(n) for n in names]

    logger.info(
        "Read catalog for '%s': %d tables in %.3fs.", source.name, len(tables), t.elapsed
    )
    return Catalog.from_tables(tables)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaSource",
    "DatabaseSchemaSource",
    "FixtureSchemaSource",
    "build_catalog",
    "column_type_from_sqlalchemy",
]

logger.debug("modelbake.catalog loaded.")
