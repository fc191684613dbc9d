# File: modelbake/validators.py
"""
modelbake - Validation Rule Synthesizer
========================================
Derives one default validation rule per column from its name, type and
nullability.

``field_validation`` returns ``None`` when it has no opinion about a
column, which is distinct from a rule with ``allow_empty=True``.  ``None``
is returned for:

- nullable primary-key or audit (``created``/``modified``/``updated``)
  columns, and
- columns whose type has no rule mapping (``ColumnType.OTHER``).

Usage:
    from modelbake.validators import synthesize_validation
    rules = synthesize_validation(table)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from modelbake.models import (
    DEFAULT_AUDIT_COLUMNS,
    ColumnDef,
    ColumnType,
    TableSchema,
    ValidationRule,
    ValidationRuleKind,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake.validators")

# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

_NAME_RULES: Dict[str, ValidationRuleKind] = {
    "email": ValidationRuleKind.EMAIL,
}

_TYPE_RULES: Dict[ColumnType, ValidationRuleKind] = {
    ColumnType.UUID: ValidationRuleKind.UUID,
    ColumnType.STRING: ValidationRuleKind.NOT_EMPTY,
    ColumnType.TEXT: ValidationRuleKind.NOT_EMPTY,
    ColumnType.INTEGER: ValidationRuleKind.NUMERIC,
    ColumnType.FLOAT: ValidationRuleKind.NUMERIC,
    ColumnType.DECIMAL: ValidationRuleKind.DECIMAL,
    ColumnType.BOOLEAN: ValidationRuleKind.BOOLEAN,
    ColumnType.DATE: ValidationRuleKind.DATE,
    ColumnType.TIME: ValidationRuleKind.TIME,
    ColumnType.DATETIME: ValidationRuleKind.DATETIME,
    ColumnType.INET: ValidationRuleKind.IP,
}


# ---------------------------------------------------------------------------
# Per-column synthesis
# ---------------------------------------------------------------------------


def rule_for_column(column: ColumnDef) -> Optional[ValidationRuleKind]:
    """Name-directed rule first, then type-directed; ``None`` if unmapped."""
    if column.name in _NAME_RULES:
        return _NAME_RULES[column.name]
    return _TYPE_RULES.get(column.type)


def field_validation(
    column: ColumnDef,
    primary_key: Sequence[str] = (),
    audit_columns: Sequence[str] = DEFAULT_AUDIT_COLUMNS,
) -> Optional[ValidationRule]:
    """
    Default validation rule for a single column.

    Args:
        column: The column to inspect.
        primary_key: Primary-key columns of the owning table.
        audit_columns: Columns exempt from required-ness, in addition to
            the primary key.

    Returns:
        The synthesised rule, or ``None`` when no rule applies.
    """
    exempt: bool = column.name in primary_key or column.name in audit_columns
    if column.nullable and exempt:
        return None

    rule: Optional[ValidationRuleKind] = rule_for_column(column)
    if rule is None:
        logger.debug(
            "No validation rule for column '%s' of type '%s'.",
            column.name,
            column.type.value,
        )
        return None

    # Non-nullable, non-free-text columns accept an empty submission; the
    # storage layer enforces emptiness for them.
    allow_empty: bool = rule != ValidationRuleKind.NOT_EMPTY and not column.nullable
    return ValidationRule(column=column.name, rule=rule, allow_empty=allow_empty)


def synthesize_validation(
    table: TableSchema,
    primary_key: Optional[Sequence[str]] = None,
    audit_columns: Sequence[str] = DEFAULT_AUDIT_COLUMNS,
) -> List[ValidationRule]:
    """
    Rules for every column of *table* that gets one, in column order.

    *primary_key* overrides the table's own primary key (used when the
    caller supplied ``--primary-key``).
    """
    pk: Sequence[str] = table.primary_key if primary_key is None else primary_key
    rules: List[ValidationRule] = []
    for column in table.columns:
        rule: Optional[ValidationRule] = field_validation(column, pk, audit_columns)
        if rule is not None:
            rules.append(rule)

    logger.debug(
        "Synthesised %d validation rule(s) for '%s'.", len(rules), table.name
    )
    return rules


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "rule_for_column",
    "field_validation",
    "synthesize_validation",
]
