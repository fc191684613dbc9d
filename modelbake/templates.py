# File: modelbake/templates.py
"""
modelbake - Code Template Engine
=================================
Turns a ``ModelBundle`` into Python source for:

    1. a SQLAlchemy 2.0 declarative model (``Mapped[]`` / ``mapped_column()``)
       with one ``relationship()`` per inferred association,
    2. a fixture module (``FIELDS`` and ``RECORDS``),
    3. a pytest skeleton for the model.

No foreign-key constraints exist in the source schema, so every
relationship carries an explicit ``primaryjoin`` built from the inferred
foreign key, annotated with ``foreign()`` / ``remote()``.

All string assembly uses the ``List[str]`` + ``"\\n".join()`` pattern and
the generator keeps no per-call state.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set, Tuple

from modelbake.models import (
    AssociationKind,
    AssociationSpec,
    Catalog,
    ColumnDef,
    ColumnType,
    ModelBundle,
    TableSchema,
    ValidationRule,
)
from modelbake.naming import safe_identifier, table_from_model, to_attribute_name
from modelbake.utils import format_list_literal, wrap_in_quotes

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "    "
_DOUBLE_INDENT: str = "        "

DEFAULT_BASE_MODULE: str = "models.base"
DEFAULT_PRIMARY_KEY: str = "id"

# ColumnType -> (SQLAlchemy type, Python annotation)
_TYPE_MAP: Dict[ColumnType, Tuple[str, str]] = {
    ColumnType.STRING: ("String", "str"),
    ColumnType.TEXT: ("Text", "str"),
    ColumnType.INTEGER: ("Integer", "int"),
    ColumnType.FLOAT: ("Float", "float"),
    ColumnType.DECIMAL: ("Numeric", "Decimal"),
    ColumnType.BOOLEAN: ("Boolean", "bool"),
    ColumnType.DATE: ("Date", "date"),
    ColumnType.TIME: ("Time", "time"),
    ColumnType.DATETIME: ("DateTime", "datetime"),
    ColumnType.UUID: ("Uuid", "UUID"),
    ColumnType.INET: ("String", "str"),
    ColumnType.OTHER: ("NullType", "Any"),
}

_PYTHON_TYPE_IMPORTS: Dict[str, Tuple[str, str]] = {
    "Decimal": ("decimal", "Decimal"),
    "date": ("datetime", "date"),
    "time": ("datetime", "time"),
    "datetime": ("datetime", "datetime"),
    "UUID": ("uuid", "UUID"),
    "Any": ("typing", "Any"),
}

# Attribute names the declarative base already uses.
_RESERVED_ATTRIBUTES: Set[str] = {"metadata", "registry"}

# Sample values for generated fixture records, as Python literals.
_SAMPLE_VALUES: Dict[ColumnType, str] = {
    ColumnType.STRING: '"Lorem ipsum dolor sit amet"',
    ColumnType.TEXT: (
        '"Lorem ipsum dolor sit amet, aliquet feugiat. Convallis morbi '
        'fringilla gravida, phasellus feugiat dapibus velit nunc."'
    ),
    ColumnType.INTEGER: "1",
    ColumnType.FLOAT: "1.0",
    ColumnType.DECIMAL: '"1.5"',
    ColumnType.BOOLEAN: "True",
    ColumnType.DATE: '"2024-01-01"',
    ColumnType.TIME: '"12:00:00"',
    ColumnType.DATETIME: '"2024-01-01 12:00:00"',
    ColumnType.UUID: '"6f1f5b6e-8f3a-4c6b-9a0e-3f5d2b7c9e10"',
    ColumnType.INET: '"127.0.0.1"',
    ColumnType.OTHER: "None",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def column_attribute(name: str) -> str:
    """Python attribute name for a column."""
    attr: str = safe_identifier(name)
    if attr in _RESERVED_ATTRIBUTES:
        attr = f"{attr}_"
    return attr


def build_import_block(imports: Dict[str, Set[str]]) -> str:
    """
    Render ``from x import a, b`` lines, stdlib modules first.

    Modules and names are sorted so the output is stable.
    """
    stdlib: List[str] = []
    third_party: List[str] = []
    for module in sorted(imports):
        names: str = ", ".join(sorted(imports[module]))
        line: str = f"from {module} import {names}"
        if module.split(".")[0] in ("datetime", "decimal", "typing", "uuid"):
            stdlib.append(line)
        else:
            third_party.append(line)
    blocks: List[str] = [b for b in ("\n".join(stdlib), "\n".join(third_party)) if b]
    return "\n\n".join(blocks)


def _mapped_annotation(column: ColumnDef, is_primary: bool) -> str:
    python_type: str = _TYPE_MAP[column.type][1]
    if column.nullable and not is_primary:
        return f"Mapped[Optional[{python_type}]]"
    return f"Mapped[{python_type}]"


def _mapped_column_args(column: ColumnDef, attr: str, is_primary: bool) -> str:
    parts: List[str] = []
    if attr != column.name:
        parts.append(wrap_in_quotes(column.name))
    parts.append(_TYPE_MAP[column.type][0])
    if is_primary:
        parts.append("primary_key=True")
    else:
        parts.append(f"nullable={column.nullable}")
    return ", ".join(parts)


# ---------------------------------------------------------------------------
# TemplateGenerator class
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """
    Stateless code-generation engine.

    Each ``generate_*`` method returns the complete content of one file.

    Args:
        base_module: Module the generated models import ``Base`` from.
        models_package: Package generated models live in; used by the
            test skeletons to import them.
        fixtures_package: Package generated fixtures live in.
    """

    def __init__(
        self,
        base_module: str = DEFAULT_BASE_MODULE,
        models_package: str = "models",
        fixtures_package: str = "tests.fixtures",
    ) -> None:
        self._base_module: str = base_module
        self._models_package: str = models_package
        self._fixtures_package: str = fixtures_package

    # ===================================================================
    # 1. Declarative base
    # ===================================================================

    def generate_base(self) -> str:
        """The shared ``DeclarativeBase`` every generated model imports."""
        lines: List[str] = [
            '"""',
            "Declarative base shared by generated models.",
            "Generated by modelbake.",
            '"""',
            "",
            "from sqlalchemy.orm import DeclarativeBase",
            "",
            "",
            "class Base(DeclarativeBase):",
            f"{_INDENT}pass",
            "",
        ]
        return "\n".join(lines)

    # ===================================================================
    # 2. SQLAlchemy model
    # ===================================================================

    def generate_model(self, bundle: ModelBundle, catalog: Catalog) -> str:
        """
        Render the model class for *bundle*.

        *catalog* supplies the target tables' primary keys for the
        relationship join conditions; it is never modified.
        """
        table: Optional[TableSchema] = catalog.get(bundle.use_table)
        columns: Tuple[ColumnDef, ...] = table.columns if table is not None else ()
        primary_key: Set[str] = set(bundle.primary_key)

        imports: Dict[str, Set[str]] = {
            "sqlalchemy.orm": {"Mapped", "mapped_column"},
            self._base_module: {"Base"},
        }

        # --- Columns ---
        used_attrs: Set[str] = set()
        column_lines: List[str] = []
        for column in columns:
            attr: str = column_attribute(column.name)
            used_attrs.add(attr)
            is_primary: bool = column.name in primary_key
            sa_type, python_type = _TYPE_MAP[column.type]
            if sa_type == "NullType":
                imports.setdefault("sqlalchemy.types", set()).add(sa_type)
            else:
                imports.setdefault("sqlalchemy", set()).add(sa_type)
            if python_type in _PYTHON_TYPE_IMPORTS:
                module, name = _PYTHON_TYPE_IMPORTS[python_type]
                imports.setdefault(module, set()).add(name)
            if column.nullable and not is_primary:
                imports.setdefault("typing", set()).add("Optional")
            column_lines.append(
                f"{_INDENT}{attr}: {_mapped_annotation(column, is_primary)} = "
                f"mapped_column({_mapped_column_args(column, attr, is_primary)})"
            )

        # --- Relationships ---
        relationship_lines: List[str] = []
        for assoc in bundle.associations.all():
            attr, line = self._build_relationship_line(assoc, bundle, catalog, used_attrs)
            used_attrs.add(attr)
            relationship_lines.append(f"{_INDENT}{line}")
            imports["sqlalchemy.orm"].add("relationship")
            if assoc.kind == AssociationKind.BELONGS_TO:
                imports.setdefault("typing", set()).add("Optional")
            else:
                imports.setdefault("typing", set()).add("List")

        # --- File header ---
        lines: List[str] = [
            '"""',
            f"SQLAlchemy model for table: {bundle.use_table}",
            "Generated by modelbake.",
            '"""',
            "",
            "from __future__ import annotations",
            "",
            build_import_block(imports),
            "",
            "",
            f"class {bundle.name}(Base):",
            f'{_INDENT}"""Model for the \'{bundle.use_table}\' table."""',
            "",
            f"{_INDENT}__tablename__ = {wrap_in_quotes(bundle.use_table)}",
        ]
        if bundle.connection != "default":
            lines.append(f"{_INDENT}__connection__ = {wrap_in_quotes(bundle.connection)}")
        lines.append(f"{_INDENT}__display_field__ = {self._optional_literal(bundle.display_field)}")
        lines.append(f"{_INDENT}__accessible__ = {format_list_literal(bundle.accessible_fields)}")
        lines.append(f"{_INDENT}__behaviors__ = {format_list_literal(bundle.behaviors)}")
        lines.extend(self._validation_block(bundle.validation))

        if column_lines:
            lines.append("")
            lines.append(f"{_INDENT}# --- Columns ---")
            lines.extend(column_lines)

        if relationship_lines:
            lines.append("")
            lines.append(f"{_INDENT}# --- Associations ---")
            lines.extend(relationship_lines)

        lines.append("")
        content: str = "\n".join(lines)
        logger.debug(
            "Generated model '%s': %d lines.", bundle.name, content.count("\n") + 1
        )
        return content

    @staticmethod
    def _optional_literal(value: Optional[str]) -> str:
        return "None" if value is None else wrap_in_quotes(value)

    @staticmethod
    def _validation_block(rules: List[ValidationRule]) -> List[str]:
        if not rules:
            return [f"{_INDENT}__validation__ = {{}}"]
        lines: List[str] = [f"{_INDENT}__validation__ = {{"]
        for rule in rules:
            lines.append(
                f"{_DOUBLE_INDENT}{wrap_in_quotes(rule.column)}: "
                f"{{\"rule\": {wrap_in_quotes(rule.rule.value)}, "
                f"\"allow_empty\": {rule.allow_empty}}},"
            )
        lines.append(f"{_INDENT}}}")
        return lines

    def _target_primary_key(self, model: str, bundle: ModelBundle, catalog: Catalog) -> str:
        if model == bundle.name:
            return bundle.primary_key[0] if bundle.primary_key else DEFAULT_PRIMARY_KEY
        target: Optional[TableSchema] = catalog.get(table_from_model(model))
        if target is not None and target.primary_key:
            return target.primary_key[0]
        return DEFAULT_PRIMARY_KEY

    def _build_relationship_line(
        self,
        assoc: AssociationSpec,
        bundle: ModelBundle,
        catalog: Catalog,
        used_attrs: Set[str],
    ) -> Tuple[str, str]:
        """Build one ``relationship()`` declaration; returns (attribute, line)."""
        many: bool = assoc.kind != AssociationKind.BELONGS_TO
        attr: str = to_attribute_name(assoc.alias, plural=many)
        while attr in used_attrs:
            attr = f"{attr}_rel"

        own: str = bundle.name
        target: str = assoc.target_model
        own_pk: str = column_attribute(self._target_primary_key(own, bundle, catalog))
        target_pk: str = column_attribute(self._target_primary_key(target, bundle, catalog))
        fk: str = column_attribute(assoc.foreign_key)

        parts: List[str] = [wrap_in_quotes(target)]
        if assoc.kind == AssociationKind.BELONGS_TO:
            join: str = f"foreign({own}.{fk}) == remote({target}.{target_pk})"
            parts.append(f"primaryjoin={wrap_in_quotes(join)}")
            hint: str = f'Mapped[Optional["{target}"]]'
        elif assoc.kind == AssociationKind.HAS_MANY:
            join = f"{own}.{own_pk} == remote(foreign({target}.{fk}))"
            parts.append(f"primaryjoin={wrap_in_quotes(join)}")
            hint = f'Mapped[List["{target}"]]'
        else:
            secondary: str = assoc.join_table or ""
            target_fk: str = assoc.target_foreign_key or ""
            parts.append(f"secondary={wrap_in_quotes(secondary)}")
            parts.append(
                "primaryjoin="
                + wrap_in_quotes(f"{own}.{own_pk} == foreign({secondary}.c.{assoc.foreign_key})")
            )
            parts.append(
                "secondaryjoin="
                + wrap_in_quotes(f"{target}.{target_pk} == foreign({secondary}.c.{target_fk})")
            )
            hint = f'Mapped[List["{target}"]]'

        return attr, f"{attr}: {hint} = relationship({', '.join(parts)})"

    # ===================================================================
    # 3. Fixture
    # ===================================================================

    def generate_fixture(
        self,
        class_name: str,
        table_name: str,
        schema: Optional[TableSchema] = None,
    ) -> str:
        """
        Fixture module with the table's ``FIELDS`` and one sample record.

        Without *schema* the fields and records are left empty.
        """
        lines: List[str] = [
            '"""',
            f"Fixture for the {class_name} model ({table_name}).",
            "Generated by modelbake.",
            '"""',
            "",
            f"TABLE = {wrap_in_quotes(table_name)}",
            "",
        ]
        if schema is None or not schema.columns:
            lines.extend(["FIELDS = {}", "", "RECORDS = []", ""])
            return "\n".join(lines)

        primary_key: Set[str] = set(schema.primary_key)
        lines.append("FIELDS = {")
        for column in schema.columns:
            extra: str = ', "primary_key": True' if column.name in primary_key else ""
            lines.append(
                f"{_INDENT}{wrap_in_quotes(column.name)}: "
                f"{{\"type\": {wrap_in_quotes(column.type.value)}, "
                f"\"null\": {column.nullable}{extra}}},"
            )
        lines.append("}")
        lines.append("")
        lines.append("RECORDS = [")
        lines.append(f"{_INDENT}{{")
        for column in schema.columns:
            lines.append(
                f"{_DOUBLE_INDENT}{wrap_in_quotes(column.name)}: "
                f"{_SAMPLE_VALUES[column.type]},"
            )
        lines.append(f"{_INDENT}}},")
        lines.append("]")
        lines.append("")
        return "\n".join(lines)

    # ===================================================================
    # 4. Test skeleton
    # ===================================================================

    def generate_test(
        self,
        class_name: str,
        table_name: str,
        module_name: Optional[str] = None,
        with_fixture: bool = True,
    ) -> str:
        """pytest skeleton for a generated model."""
        module: str = module_name or to_attribute_name(class_name)
        lines: List[str] = [
            '"""',
            f"Tests for the {class_name} model.",
            "Generated by modelbake.",
            '"""',
            "",
            "import pytest",
            "",
            f"from {self._models_package}.{module} import {class_name}",
        ]
        if with_fixture:
            lines.append(f"from {self._fixtures_package}.{module}_fixture import RECORDS")
        lines.extend([
            "",
            "",
            f"class Test{class_name}:",
            f'{_INDENT}"""{class_name} model tests."""',
            "",
            f"{_INDENT}def test_table_name(self):",
            f"{_DOUBLE_INDENT}assert {class_name}.__tablename__ == {wrap_in_quotes(table_name)}",
            "",
        ])
        if with_fixture:
            lines.extend([
                f"{_INDENT}def test_fixture_records(self):",
                f"{_DOUBLE_INDENT}assert isinstance(RECORDS, list)",
                "",
            ])
        lines.extend([
            f"{_INDENT}def test_behaviour(self):",
            f'{_DOUBLE_INDENT}pytest.skip("Not implemented yet.")',
            "",
        ])
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TemplateGenerator",
    "build_import_block",
    "column_attribute",
    "DEFAULT_BASE_MODULE",
]
