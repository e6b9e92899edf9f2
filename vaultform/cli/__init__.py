"""Command-line interface for vaultform."""

from vaultform.cli.main import cli

__all__ = ["cli"]
