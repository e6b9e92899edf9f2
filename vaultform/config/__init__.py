"""
Configuration for vaultform: provider connection settings and the
declarative resource document.
"""

from vaultform.config.loader import (
    Document,
    ResourceBlock,
    load_document,
    loads,
    parse_blocks,
    parse_document,
)
from vaultform.config.provider import VaultConfig

__all__ = [
    "VaultConfig",
    "Document",
    "ResourceBlock",
    "load_document",
    "loads",
    "parse_blocks",
    "parse_document",
]
