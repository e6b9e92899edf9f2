"""
Vault provider: hvac client plus the built-in resource adapters.
"""

import logging
from typing import Iterable

import hvac

from vaultform.adapters import ADAPTERS
from vaultform.adapters.base import ResourceAdapter
from vaultform.client import create_client
from vaultform.config.provider import VaultConfig
from vaultform.errors import ConfigError
from vaultform.providers.base import Provider

logger = logging.getLogger(__name__)


class VaultProvider(Provider):
    """
    Provider for HashiCorp Vault.

    The client is created on first use and is expected to be authenticated
    by the token in the config; timeouts and TLS settings are the client's.

    Example:
        provider = VaultProvider(config=VaultConfig(address="http://127.0.0.1:8200"))

        # or, with VAULT_ADDR / VAULT_TOKEN exported
        provider = VaultProvider.from_env()
    """

    config: VaultConfig

    def _load_config_from_env(self, **kwargs) -> VaultConfig:
        return VaultConfig.from_env(**kwargs)

    def _validate_config(self) -> None:
        if not isinstance(self.config, VaultConfig):
            raise ConfigError(
                f"VaultProvider needs a VaultConfig, got {type(self.config).__name__}"
            )

    def _create_client(self) -> hvac.Client:
        token = self.config.token.get_secret_value() if self.config.token else None
        logger.debug(
            "Creating Vault client for %s (namespace=%s)",
            self.config.address,
            self.config.namespace,
        )
        return create_client(
            self.config.address,
            token=token,
            namespace=self.config.namespace,
            verify=self.config.verify,
            timeout=self.config.timeout,
        )

    def _default_adapters(self) -> Iterable[type[ResourceAdapter]]:
        return ADAPTERS

    def get_provider_type(self) -> str:
        return "vault"

    def __repr__(self) -> str:
        return f"VaultProvider(address='{self.config.address}')"
