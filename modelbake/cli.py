# File: modelbake/cli.py
"""
modelbake - Command-Line Interface
===================================

Usage examples::

    # List the tables of the default connection
    modelbake

    # Bake one model (model or table name both work)
    modelbake Post
    modelbake blog_posts --no-fixture

    # Bake every table, overwriting existing files
    modelbake all --force -o ./app

    # Offline, from a schema file
    modelbake all --schema-file schema.yaml --dry-run

Exit codes:
    0 - success
    1 - catalog error (unreachable, empty, unknown table)
    3 - export error
    4 - configuration/input error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

from modelbake.errors import CatalogError, ConfigError
from modelbake.models import BakeOptions

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_CATALOG_ERROR: int = 1
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4

ALL_TABLES: str = "all"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root modelbake logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("modelbake")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from modelbake import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="modelbake",
        description=(
            "modelbake - bake SQLAlchemy models from an existing database.\n\n"
            "Reads the schema of a connection, infers associations and "
            "validation rules from table and column names, and writes model, "
            "fixture and test files."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s\n"
            "  %(prog)s Post -o ./app\n"
            "  %(prog)s all --force\n"
            "  %(prog)s all --schema-file schema.yaml --dry-run\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"modelbake v{__version__}",
    )

    parser.add_argument(
        "name",
        nargs="?",
        default=None,
        metavar="NAME",
        help=(
            "Model or table to bake, or 'all' for every table. "
            "Omit to list the available tables."
        ),
    )

    # --- Connection ---
    conn_group = parser.add_argument_group("connection")
    conn_group.add_argument(
        "-c", "--connection",
        type=str,
        default="default",
        metavar="NAME",
        help="Connection to read the schema from (default: 'default').",
    )
    conn_group.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Config file (default: ./modelbake.yaml when present).",
    )
    conn_group.add_argument(
        "--database-url",
        type=str,
        default=None,
        metavar="URL",
        help="Override the connection's database URL.",
    )
    conn_group.add_argument(
        "--schema-file",
        type=str,
        default=None,
        metavar="PATH",
        help="Read the schema from a YAML/JSON file instead of a database.",
    )
    conn_group.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory (default: config output_dir, else '.').",
    )

    # --- Model options ---
    model_group = parser.add_argument_group("model options")
    model_group.add_argument(
        "--table",
        type=str,
        default=None,
        metavar="NAME",
        help="Table to use when it does not follow the naming conventions.",
    )
    model_group.add_argument(
        "--no-associations",
        action="store_true",
        default=False,
        help="Do not infer associations.",
    )
    model_group.add_argument(
        "--no-validation",
        action="store_true",
        default=False,
        help="Do not generate validation rules.",
    )
    model_group.add_argument(
        "--no-fields",
        action="store_true",
        default=False,
        help="Do not mark any field as accessible.",
    )
    model_group.add_argument(
        "--fields",
        type=str,
        default=None,
        metavar="A,B",
        help="Comma separated accessible fields.",
    )
    model_group.add_argument(
        "--primary-key",
        type=str,
        default=None,
        metavar="A[,B]",
        help="Primary key column(s) to use instead of the schema's.",
    )
    model_group.add_argument(
        "--display-field",
        type=str,
        default=None,
        metavar="NAME",
        help="Column used as the human readable label.",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--no-fixture",
        action="store_true",
        default=False,
        help="Do not generate a fixture.",
    )
    behaviour_group.add_argument(
        "--no-test",
        action="store_true",
        default=False,
        help="Do not generate a test skeleton.",
    )
    behaviour_group.add_argument(
        "-f", "--force",
        action="store_true",
        default=False,
        help="Overwrite existing files.",
    )
    behaviour_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Option builder
# ---------------------------------------------------------------------------


def _build_options(args: argparse.Namespace, skip_tables: List[str]) -> BakeOptions:
    """Translate parsed arguments into ``BakeOptions``."""
    return BakeOptions(
        table=args.table,
        no_associations=args.no_associations,
        no_validation=args.no_validation,
        no_fields=args.no_fields,
        fields=args.fields,
        primary_key=args.primary_key,
        display_field=args.display_field,
        no_fixture=args.no_fixture,
        no_test=args.no_test,
        force=args.force,
        dry_run=args.dry_run,
        skip_tables=skip_tables,
    )


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


def _print_tables(tables: Sequence[str], connection: str) -> None:
    print(f"Possible models based on your current database (connection '{connection}'):")
    for table in tables:
        print(f"- {table}")


def _run(args: argparse.Namespace) -> int:
    """
    Run the bake pipeline for parsed arguments.

    Returns the appropriate exit code.
    """
    from modelbake.config import BakeConfig, load_config
    from modelbake.exporters import ProjectExporter
    from modelbake.generator import GenerationReport, ModelBaker

    # --- Configuration ---
    try:
        config: BakeConfig = load_config(Path(args.config) if args.config else None)
        config = config.with_overrides(
            args.connection,
            database_url=args.database_url,
            schema_file=Path(args.schema_file) if args.schema_file else None,
            output_dir=Path(args.output) if args.output else None,
        )
        source = config.source_for(args.connection)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_INPUT_ERROR
    except CatalogError as exc:
        logger.error("%s", exc)
        return EXIT_CATALOG_ERROR

    options: BakeOptions = _build_options(args, list(config.skip_tables))
    exporter: ProjectExporter = ProjectExporter(
        config.output_dir, force=options.force, dry_run=options.dry_run
    )
    baker: ModelBaker = ModelBaker(
        source, options, exporter=exporter, connection=args.connection
    )

    logger.info("Connection: %s", args.connection)
    logger.info("Output:     %s", exporter.output_dir)

    # --- Bake ---
    try:
        if args.name is None:
            _print_tables(baker.list_tables(), args.connection)
            return EXIT_SUCCESS
        if args.name.lower() == ALL_TABLES:
            report: GenerationReport = baker.generate_all()
        else:
            report = baker.generate(args.name)
    except CatalogError as exc:
        logger.error("%s", exc)
        return EXIT_CATALOG_ERROR

    print(report.summary())
    return EXIT_SUCCESS if report.success else EXIT_EXPORT_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    # --- Verbosity ---
    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
        logging.disable(logging.NOTSET)

    _setup_logging(verbosity)

    if args.database_url and args.schema_file:
        logger.error("Use either --database-url or --schema-file, not both.")
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    exit_code: int = _run(args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Bake completed successfully.")
    else:
        logger.error("Bake failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_CATALOG_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("modelbake.cli loaded.")
