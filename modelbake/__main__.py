# File: modelbake/__main__.py
"""
modelbake - Module entry point.

Allows running the baker directly via::

    python -m modelbake Post --schema-file schema.yaml

This module simply delegates to the CLI entry point defined in ``modelbake.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from modelbake.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
