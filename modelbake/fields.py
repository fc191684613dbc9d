# File: modelbake/fields.py
"""
modelbake - Field & Display Selection
======================================
Chooses the mass-assignable columns, the human-readable display column
and the primary key for a generated model.  Caller overrides always win.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from modelbake.models import DEFAULT_DISPLAY_FIELDS, DEFAULT_EXCLUDED_FIELDS, TableSchema

logger: logging.Logger = logging.getLogger("modelbake.fields")

NameList = Union[str, Sequence[str]]


def split_names(names: NameList) -> List[str]:
    """
    Normalise a comma separated string or a sequence of names.

    Whitespace is trimmed and empty entries are dropped.
    """
    if isinstance(names, str):
        names = names.split(",")
    return [n.strip() for n in names if n and n.strip()]


def get_fields(
    table: TableSchema,
    *,
    no_fields: bool = False,
    fields: Optional[NameList] = None,
    excluded: Sequence[str] = DEFAULT_EXCLUDED_FIELDS,
) -> List[str]:
    """
    Columns to mark as accessible (mass-assignable).

    ``no_fields`` wins over everything, then an explicit ``fields`` list;
    otherwise every column except audit and password columns.
    """
    if no_fields:
        return []
    if fields:
        return split_names(fields)
    return [name for name in table.column_names if name not in excluded]


def get_display_field(
    table: TableSchema,
    override: Optional[str] = None,
    preference: Sequence[str] = DEFAULT_DISPLAY_FIELDS,
) -> Optional[str]:
    """The caller's choice, else the first preferred column present, else the primary key."""
    if override:
        return override
    for candidate in preference:
        if table.has_column(candidate):
            return candidate
    if table.primary_key:
        return table.primary_key[0]
    logger.debug("Table '%s' has no display field candidate.", table.name)
    return None


def get_primary_key(table: TableSchema, override: Optional[NameList] = None) -> List[str]:
    if override:
        return split_names(override)
    return list(table.primary_key)


__all__: List[str] = [
    "split_names",
    "get_fields",
    "get_display_field",
    "get_primary_key",
]
