# File: modelbake/__init__.py
"""
modelbake - Model Baking from an Existing Database
===================================================

Reads a database schema, guesses associations and validation rules from
table and column naming conventions alone, and writes SQLAlchemy model
classes, fixtures and test skeletons.

Architecture overview::

    ┌──────────────┐     ┌───────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│  ModelBaker    │────▶│ TemplateGenerator│
    │   (cli.py)   │     │ (generator.py) │     │  (templates.py)  │
    └──────┬───────┘     └───────┬───────┘     └──────────────────┘
           │                     │
           ▼        ┌────────────┼─────────────┬─────────────┐
    ┌──────────┐    ▼            ▼             ▼             ▼
    │  config  │ ┌────────┐ ┌────────────┐ ┌──────────┐ ┌───────────┐
    │  (.py)   │ │catalog │ │associations│ │validators│ │ exporters │
    └──────────┘ │ (.py)  │ │   (.py)    │ │ fields   │ │  (.py)    │
                 └────────┘ └────────────┘ └──────────┘ └───────────┘

Usage::

    # As a library
    from modelbake import FixtureSchemaSource, ModelBaker
    source = FixtureSchemaSource.from_file(Path("schema.yaml"))
    report = ModelBaker(source).generate("Post")

    # From the command line
    modelbake Post --schema-file schema.yaml -v
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from modelbake.associations import find_behaviors, infer_associations
from modelbake.catalog import (
    DatabaseSchemaSource,
    FixtureSchemaSource,
    SchemaSource,
    build_catalog,
)
from modelbake.config import BakeConfig, ConnectionConfig, load_config
from modelbake.errors import (
    CatalogError,
    ConfigError,
    EmptyCatalogError,
    ModelBakeError,
    SchemaConnectionError,
    UnknownTableError,
)
from modelbake.exporters import ExportResult, FileRecord, ProjectExporter
from modelbake.fields import get_display_field, get_fields, get_primary_key
from modelbake.generator import GenerationReport, ModelBaker
from modelbake.models import (
    AssociationKind,
    Associations,
    AssociationSpec,
    BakeOptions,
    Catalog,
    ColumnDef,
    ColumnType,
    ModelBundle,
    TableSchema,
    ValidationRule,
    ValidationRuleKind,
)
from modelbake.naming import (
    foreign_key_from_model,
    model_name_from_foreign_key,
    model_name_from_table,
    table_from_model,
)
from modelbake.templates import TemplateGenerator
from modelbake.validators import field_validation, synthesize_validation

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Orchestrator
    "ModelBaker",
    "GenerationReport",
    # Schema access
    "SchemaSource",
    "DatabaseSchemaSource",
    "FixtureSchemaSource",
    "build_catalog",
    # Configuration
    "BakeConfig",
    "ConnectionConfig",
    "load_config",
    # Models
    "AssociationKind",
    "Associations",
    "AssociationSpec",
    "BakeOptions",
    "Catalog",
    "ColumnDef",
    "ColumnType",
    "ModelBundle",
    "TableSchema",
    "ValidationRule",
    "ValidationRuleKind",
    # Inference
    "infer_associations",
    "find_behaviors",
    "field_validation",
    "synthesize_validation",
    "get_fields",
    "get_display_field",
    "get_primary_key",
    # Naming
    "model_name_from_table",
    "model_name_from_foreign_key",
    "foreign_key_from_model",
    "table_from_model",
    # Rendering & export
    "TemplateGenerator",
    "ProjectExporter",
    "ExportResult",
    "FileRecord",
    # Errors
    "ModelBakeError",
    "ConfigError",
    "CatalogError",
    "SchemaConnectionError",
    "EmptyCatalogError",
    "UnknownTableError",
]
