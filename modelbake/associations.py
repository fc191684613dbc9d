# File: modelbake/associations.py
"""
modelbake - Association Inference Engine
=========================================
Guesses relationships between tables purely from table and column names.
No foreign-key constraints are consulted.

Three passes, always in this order, each scanning the catalog in sorted
table order so that output is deterministic:

    find_belongs_to       columns of the target table ending in / holding ``_id``
    find_has_many         columns of every table equal to the target's FK name
    find_belongs_to_many  tables named ``<target>_<other>`` or ``<other>_<target>``

A column may feed several associations at once (for example a ``post_id``
is a belongs-to on ``comments`` and a has-many from ``posts``); no
conflict resolution between kinds is attempted.

Complexity: O(T × C) per target table, O(T² × C) for a whole database.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from modelbake.models import (
    AssociationKind,
    Associations,
    AssociationSpec,
    Catalog,
    ColumnType,
    TableSchema,
)
from modelbake.naming import (
    FOREIGN_KEY_SUFFIX,
    foreign_key_from_model,
    model_name_from_foreign_key,
    model_name_from_table,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake.associations")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PARENT_KEY: str = "parent_id"
PARENT_PREFIX: str = "Parent"
CHILD_PREFIX: str = "Child"


# ---------------------------------------------------------------------------
# Belongs-to
# ---------------------------------------------------------------------------


def find_belongs_to(table: TableSchema, model_name: Optional[str] = None) -> List[AssociationSpec]:
    """
    Belongs-to associations declared by the table's own columns.

    ``parent_id`` is a self-join (``Parent<Model>``).  Any other
    non-primary-key column whose name *contains* ``_id`` points at the
    model named by the column, so ``author_id`` gives ``Author``.
    """
    model: str = model_name or model_name_from_table(table.name)
    primary_key = set(table.primary_key)
    found: List[AssociationSpec] = []

    for column in table.columns:
        name: str = column.name
        if name in primary_key:
            continue
        if name == PARENT_KEY:
            found.append(AssociationSpec(
                kind=AssociationKind.BELONGS_TO,
                alias=PARENT_PREFIX + model,
                target_model=model,
                foreign_key=name,
            ))
        elif FOREIGN_KEY_SUFFIX in name:
            related: str = model_name_from_foreign_key(name)
            found.append(AssociationSpec(
                kind=AssociationKind.BELONGS_TO,
                alias=related,
                target_model=related,
                foreign_key=name,
            ))
    return found


# ---------------------------------------------------------------------------
# Has-many
# ---------------------------------------------------------------------------


def is_possible_join_table(candidate: str, table_name: str) -> bool:
    """
    True when *candidate* looks like a join table involving *table_name*.

    The match is an unanchored substring test for ``_<table>`` or
    ``<table>_``, so ``posts_tags`` and ``tags_posts`` both qualify for
    ``posts`` (and so does ``featured_posts_archive``).
    """
    return f"_{table_name}" in candidate or f"{table_name}_" in candidate


def find_has_many(
    table: TableSchema,
    catalog: Catalog,
    model_name: Optional[str] = None,
) -> List[AssociationSpec]:
    """
    Has-many associations pointing back at *table* from the rest of the catalog.

    Every table holding a non-primary-key column named like the target's
    foreign key (``author_id`` for ``authors``) contributes one entry.  The
    target table itself contributes ``Child<Model>`` when it has a
    ``parent_id`` column.  Tables that look like join tables are skipped so
    many-to-many links are not mistaken for has-many.
    """
    model: str = model_name or model_name_from_table(table.name)
    foreign_key: str = foreign_key_from_model(model_name_from_table(table.name))
    found: List[AssociationSpec] = []

    for other in catalog:
        if is_possible_join_table(other.name, table.name):
            logger.debug(
                "Skipping '%s' while scanning has-many for '%s': join table.",
                other.name,
                table.name,
            )
            continue

        other_primary_key = set(other.primary_key)
        other_model: str = model_name_from_table(other.name)
        for column in other.columns:
            if column.name in other_primary_key:
                continue
            if column.name == foreign_key:
                found.append(AssociationSpec(
                    kind=AssociationKind.HAS_MANY,
                    alias=other_model,
                    target_model=other_model,
                    foreign_key=column.name,
                ))
            elif other.name == table.name and column.name == PARENT_KEY:
                found.append(AssociationSpec(
                    kind=AssociationKind.HAS_MANY,
                    alias=CHILD_PREFIX + model,
                    target_model=model,
                    foreign_key=column.name,
                ))
    return found


# ---------------------------------------------------------------------------
# Belongs-to-many
# ---------------------------------------------------------------------------


def joined_table_name(candidate: str, table_name: str) -> Optional[str]:
    """
    Name of the table *candidate* would join *table_name* to, if any.

        joined_table_name("posts_tags", "posts") -> "tags"
        joined_table_name("posts_tags", "tags")  -> "posts"
    """
    prefix: str = f"{table_name}_"
    suffix: str = f"_{table_name}"
    if candidate.startswith(prefix):
        return candidate[len(prefix):] or None
    if candidate.endswith(suffix):
        return candidate[: -len(suffix)] or None
    return None


def find_belongs_to_many(table: TableSchema, catalog: Catalog) -> List[AssociationSpec]:
    """Many-to-many associations mediated by ``a_b`` style join tables."""
    foreign_key: str = foreign_key_from_model(table.name)
    found: List[AssociationSpec] = []

    for other_name in catalog.table_names:
        if other_name == table.name:
            continue
        joined: Optional[str] = joined_table_name(other_name, table.name)
        if joined is None or joined not in catalog:
            continue
        joined_model: str = model_name_from_table(joined)
        found.append(AssociationSpec(
            kind=AssociationKind.BELONGS_TO_MANY,
            alias=joined_model,
            target_model=joined_model,
            foreign_key=foreign_key,
            target_foreign_key=foreign_key_from_model(joined_model),
            join_table=other_name,
        ))
    return found


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def infer_associations(
    table: TableSchema,
    catalog: Catalog,
    model_name: Optional[str] = None,
) -> Associations:
    """
    Run all three passes for *table* against the full *catalog*.

    Args:
        table: The table a model is being generated for.
        catalog: Every table of the database, fixed for the whole run.
        model_name: Class name of the model; defaults to the conventional
            name of the table.  Self-joins are aliased from it.
    """
    model: str = model_name or model_name_from_table(table.name)
    associations: Associations = Associations(
        belongs_to=tuple(find_belongs_to(table, model)),
        has_many=tuple(find_has_many(table, catalog, model)),
        belongs_to_many=tuple(find_belongs_to_many(table, catalog)),
    )
    logger.info(
        "Detected associations for %s: %d belongs_to, %d has_many, %d belongs_to_many.",
        model,
        len(associations.belongs_to),
        len(associations.has_many),
        len(associations.belongs_to_many),
    )
    return associations


def find_behaviors(table: TableSchema) -> List[str]:
    """
    Model behaviours implied by the table layout.

    A table with integer ``lft`` and ``rght`` columns and a ``parent_id``
    is a nested-set tree.
    """
    lft = table.get_column("lft")
    rght = table.get_column("rght")
    if (
        lft is not None
        and rght is not None
        and lft.type == ColumnType.INTEGER
        and rght.type == ColumnType.INTEGER
        and table.has_column(PARENT_KEY)
    ):
        return ["Tree"]
    return []


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "find_belongs_to",
    "find_has_many",
    "find_belongs_to_many",
    "infer_associations",
    "find_behaviors",
    "is_possible_join_table",
    "joined_table_name",
]
