"""
Providers for vaultform.
"""

from vaultform.providers.base import Provider
from vaultform.providers.vault import VaultProvider

__all__ = ["Provider", "VaultProvider"]
