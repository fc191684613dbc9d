# File: modelbake/errors.py
"""
modelbake - Exception Hierarchy
================================

Every failure that can stop a bake run derives from ``ModelBakeError``.
Schema-access failures derive from ``CatalogError`` and originate in
``modelbake.catalog``; they travel unmodified up to the CLI, which maps
them to an exit status.

The inference, validation and field-selection code never raises: once a
well-formed ``TableSchema`` exists those functions are total.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ModelBakeError(Exception):
    """Base exception for all modelbake errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(ModelBakeError):
    """Configuration file is unreadable, invalid, or names no such connection."""


class CatalogError(ModelBakeError):
    """Base exception for schema catalog access failures."""


class SchemaConnectionError(CatalogError, ConnectionError):
    """
    The schema catalog cannot be reached or enumerated.

    Also a builtin ``ConnectionError`` so callers that only know the
    standard hierarchy still catch it.
    """

    def __init__(
        self,
        connection: str,
        original_error: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        reason: str = str(original_error) if original_error else "unreachable"
        super().__init__(
            f"Cannot read schema catalog for connection '{connection}': {reason}",
            details,
        )
        self.connection: str = connection
        self.original_error: Optional[BaseException] = original_error


class EmptyCatalogError(CatalogError):
    """The catalog was reachable but holds no tables."""

    def __init__(self, connection: str) -> None:
        super().__init__(
            f"Your database does not have any tables (connection '{connection}').",
            {"connection": connection},
        )
        self.connection: str = connection


class UnknownTableError(CatalogError):
    """A table requested for baking is not present in the catalog."""

    def __init__(self, table: str, available: Optional[List[str]] = None) -> None:
        super().__init__(
            f"Table '{table}' does not exist in the schema catalog.",
            {"table": table, "available": list(available or [])},
        )
        self.table: str = table


__all__: List[str] = [
    "ModelBakeError",
    "ConfigError",
    "CatalogError",
    "SchemaConnectionError",
    "EmptyCatalogError",
    "UnknownTableError",
]
