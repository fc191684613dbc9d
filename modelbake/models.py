# File: modelbake/models.py
"""
modelbake - Core Data Models
=============================
Pydantic V2 models for the schema snapshot, the inferred associations and
validation rules, and the per-run bake options.

Pipeline::

    Schema Source → Catalog → Inference / Validation / Field selection
                  → ModelBundle → TemplateGenerator → ProjectExporter

Everything read from the database (``ColumnDef``, ``TableSchema``,
``Catalog``) is immutable once built.  ``Catalog`` is a plain value object
rather than a pydantic model: it is built once per run from already
validated ``TableSchema`` instances and only needs fast lookups.
"""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ColumnType(str, Enum):
    """Abstract column types recognised by the inference engine."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    UUID = "uuid"
    INET = "inet"
    OTHER = "other"


# Spellings found in hand-written schema files, folded onto ColumnType.
_COLUMN_TYPE_ALIASES: Dict[str, ColumnType] = {
    "varchar": ColumnType.STRING,
    "char": ColumnType.STRING,
    "character varying": ColumnType.STRING,
    "int": ColumnType.INTEGER,
    "smallint": ColumnType.INTEGER,
    "smallinteger": ColumnType.INTEGER,
    "bigint": ColumnType.INTEGER,
    "biginteger": ColumnType.INTEGER,
    "double": ColumnType.FLOAT,
    "real": ColumnType.FLOAT,
    "numeric": ColumnType.DECIMAL,
    "bool": ColumnType.BOOLEAN,
    "timestamp": ColumnType.DATETIME,
}


class AssociationKind(str, Enum):
    """The three association kinds the engine can infer."""

    BELONGS_TO = "belongs_to"
    HAS_MANY = "has_many"
    BELONGS_TO_MANY = "belongs_to_many"


class ValidationRuleKind(str, Enum):
    """Default validation rules a column can receive."""

    EMAIL = "email"
    UUID = "uuid"
    NOT_EMPTY = "notEmpty"
    NUMERIC = "numeric"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    IP = "ip"
    NONE = "none"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
    populate_by_name=True,
)

_MUTABLE_CONFIG: ConfigDict = ConfigDict(
    validate_assignment=True,
    extra="forbid",
    populate_by_name=True,
)


# ---------------------------------------------------------------------------
# Schema snapshot
# ---------------------------------------------------------------------------


class ColumnDef(BaseModel):
    """A single column as reported by the schema source."""

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    type: ColumnType = Field(default=ColumnType.OTHER, description="Abstract type.")
    nullable: bool = Field(default=True, description="Whether NULL is allowed.")

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, v: Any) -> Any:
        if isinstance(v, ColumnType) or not isinstance(v, str):
            return v
        lowered: str = v.strip().lower()
        if lowered in _COLUMN_TYPE_ALIASES:
            return _COLUMN_TYPE_ALIASES[lowered]
        try:
            return ColumnType(lowered)
        except ValueError:
            logger.debug("Unknown column type '%s' mapped to 'other'.", v)
            return ColumnType.OTHER

    def __repr__(self) -> str:
        null_flag: str = " NULL" if self.nullable else " NOT NULL"
        return f"<Column {self.name} {self.type.value}{null_flag}>"


class TableSchema(BaseModel):
    """
    Immutable snapshot of one table: ordered columns plus primary key.

    ``primary_key`` is ordered as reported by the source but is used with
    set semantics everywhere else.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Table name.")
    columns: Tuple[ColumnDef, ...] = Field(
        default_factory=tuple, description="Columns in declaration order."
    )
    primary_key: Tuple[str, ...] = Field(
        default_factory=tuple, description="Primary-key column names."
    )

    @model_validator(mode="after")
    def _validate_primary_key_columns(self) -> "TableSchema":
        names = {c.name for c in self.columns}
        missing: List[str] = [pk for pk in self.primary_key if pk not in names]
        if missing:
            raise ValueError(
                f"Primary key of table '{self.name}' references "
                f"non-existent columns: {missing}"
            )
        return self

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[ColumnDef]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None

    def __repr__(self) -> str:
        return f"<Table {self.name} ({len(self.columns)} cols, pk={list(self.primary_key)})>"


class Catalog:
    """
    Read-only mapping of table name to ``TableSchema`` for one run.

    Iteration always follows sorted table-name order; the inference engine
    depends on that for deterministic output.
    """

    __slots__ = ("_tables", "_names")

    def __init__(self, tables: Mapping[str, TableSchema]) -> None:
        names: Tuple[str, ...] = tuple(sorted(tables))
        self._names: Tuple[str, ...] = names
        self._tables: Mapping[str, TableSchema] = MappingProxyType(
            {name: tables[name] for name in names}
        )

    @classmethod
    def from_tables(cls, tables: List[TableSchema]) -> "Catalog":
        return cls({t.name: t for t in tables})

    @property
    def table_names(self) -> List[str]:
        return list(self._names)

    def get(self, name: str) -> Optional[TableSchema]:
        return self._tables.get(name)

    def __getitem__(self, name: str) -> TableSchema:
        return self._tables[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tables

    def __iter__(self) -> Iterator[TableSchema]:
        for name in self._names:
            yield self._tables[name]

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"<Catalog {len(self._names)} tables>"


# ---------------------------------------------------------------------------
# Inference results
# ---------------------------------------------------------------------------


class AssociationSpec(BaseModel):
    """One inferred association; the join fields only apply to belongs-to-many."""

    model_config = _FROZEN_CONFIG

    kind: AssociationKind
    alias: str = Field(..., min_length=1)
    target_model: str = Field(..., min_length=1)
    foreign_key: str = Field(..., min_length=1)
    target_foreign_key: Optional[str] = None
    join_table: Optional[str] = None

    @model_validator(mode="after")
    def _validate_join_fields(self) -> "AssociationSpec":
        is_many_to_many: bool = self.kind == AssociationKind.BELONGS_TO_MANY
        has_join: bool = self.target_foreign_key is not None and self.join_table is not None
        if is_many_to_many and not has_join:
            raise ValueError(
                f"Association '{self.alias}' is belongs_to_many but lacks "
                "target_foreign_key/join_table."
            )
        if not is_many_to_many and (self.target_foreign_key or self.join_table):
            raise ValueError(
                f"Association '{self.alias}' of kind {self.kind.value} cannot "
                "carry join-table fields."
            )
        return self

    def __repr__(self) -> str:
        return f"<{self.kind.value} {self.alias} → {self.target_model} via {self.foreign_key}>"


class Associations(BaseModel):
    """Inferred associations partitioned by kind, each in catalog order."""

    model_config = _FROZEN_CONFIG

    belongs_to: Tuple[AssociationSpec, ...] = ()
    has_many: Tuple[AssociationSpec, ...] = ()
    belongs_to_many: Tuple[AssociationSpec, ...] = ()

    def all(self) -> List[AssociationSpec]:
        return [*self.belongs_to, *self.has_many, *self.belongs_to_many]

    @property
    def is_empty(self) -> bool:
        return not (self.belongs_to or self.has_many or self.belongs_to_many)


class ValidationRule(BaseModel):
    """Default validation rule synthesised for one column."""

    model_config = _FROZEN_CONFIG

    column: str = Field(..., min_length=1)
    rule: ValidationRuleKind
    allow_empty: bool = False


# ---------------------------------------------------------------------------
# Bake options & renderer bundle
# ---------------------------------------------------------------------------

DEFAULT_AUDIT_COLUMNS: Tuple[str, ...] = ("created", "modified", "updated")
DEFAULT_EXCLUDED_FIELDS: Tuple[str, ...] = (
    "created",
    "modified",
    "updated",
    "password",
    "passwd",
)
DEFAULT_DISPLAY_FIELDS: Tuple[str, ...] = ("name", "title")
DEFAULT_SKIP_TABLES: Tuple[str, ...] = ("i18n",)


class BakeOptions(BaseModel):
    """
    Per-run switches, one-to-one with the CLI flags.

    ``fields`` and ``primary_key`` accept either a comma separated string
    or a list; they are normalised by ``modelbake.fields``.
    """

    model_config = _MUTABLE_CONFIG

    table: Optional[str] = Field(
        default=None, description="Explicit table name for non-conventional tables."
    )
    no_associations: bool = False
    no_validation: bool = False
    no_fields: bool = False
    fields: Optional[List[str]] = None
    primary_key: Optional[List[str]] = None
    display_field: Optional[str] = None
    no_fixture: bool = False
    no_test: bool = False
    force: bool = Field(default=False, description="Overwrite existing files.")
    dry_run: bool = Field(default=False, description="Render but write nothing.")

    skip_tables: List[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_TABLES))
    audit_columns: List[str] = Field(default_factory=lambda: list(DEFAULT_AUDIT_COLUMNS))
    excluded_fields: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_FIELDS)
    )
    display_field_preference: List[str] = Field(
        default_factory=lambda: list(DEFAULT_DISPLAY_FIELDS)
    )

    @field_validator("fields", "primary_key", mode="before")
    @classmethod
    def _split_csv(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class ModelBundle(BaseModel):
    """Everything the template renderer needs to write one model."""

    model_config = _MUTABLE_CONFIG

    name: str = Field(..., min_length=1, description="Model class name.")
    use_table: str = Field(..., min_length=1, description="Backing table name.")
    associations: Associations = Field(default_factory=Associations)
    validation: List[ValidationRule] = Field(default_factory=list)
    primary_key: List[str] = Field(default_factory=list)
    display_field: Optional[str] = None
    accessible_fields: List[str] = Field(default_factory=list)
    behaviors: List[str] = Field(default_factory=list)
    connection: str = "default"

    @computed_field  # type: ignore[misc]
    @property
    def association_count(self) -> int:
        return len(self.associations.all())

    def __repr__(self) -> str:
        return (
            f"<ModelBundle {self.name} ({self.use_table}): "
            f"{self.association_count} associations, "
            f"{len(self.validation)} rules>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ColumnType",
    "AssociationKind",
    "ValidationRuleKind",
    "ColumnDef",
    "TableSchema",
    "Catalog",
    "AssociationSpec",
    "Associations",
    "ValidationRule",
    "BakeOptions",
    "ModelBundle",
    "DEFAULT_AUDIT_COLUMNS",
    "DEFAULT_EXCLUDED_FIELDS",
    "DEFAULT_DISPLAY_FIELDS",
    "DEFAULT_SKIP_TABLES",
]

logger.debug("modelbake.models loaded: %d public symbols.", len(__all__))
