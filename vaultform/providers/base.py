"""
Base provider abstraction.

A provider owns the connection settings, builds the remote API client and
maps resource type names to their adapters.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable

from vaultform.adapters.base import ResourceAdapter
from vaultform.errors import ConfigError


class Provider(ABC):
    """
    Base class for providers.

    Providers:
    1. Load configuration explicitly or from the environment
    2. Build the (already authenticated) API client lazily
    3. Resolve resource types to adapters

    Example:
        provider = VaultProvider.from_env()
        adapter = provider.adapter("vault_identity_entity")
        data = adapter.new_data(config=adapter.model.declare({"name": "ops"}))
        adapter.create(provider.client, data)
    """

    def __init__(
        self,
        config: Any | None = None,
        client: Any | None = None,
        adapters: Iterable[type[ResourceAdapter]] | None = None,
        **kwargs,
    ):
        """
        Initialize the provider.

        Args:
            config: Provider configuration (optional, loaded from env otherwise)
            client: Pre-built API client; skips building one from config
            adapters: Adapter classes to register instead of the defaults
            **kwargs: Configuration overrides used when loading from env
        """
        self.config = config or self._load_config_from_env(**kwargs)
        self._validate_config()
        self._client = client
        self._adapters: dict[str, ResourceAdapter] = {}
        for adapter_cls in adapters if adapters is not None else self._default_adapters():
            self.register(adapter_cls())

    @abstractmethod
    def _load_config_from_env(self, **kwargs) -> Any:
        pass

    @abstractmethod
    def _validate_config(self) -> None:
        pass

    @abstractmethod
    def _create_client(self) -> Any:
        """Build the API client from ``self.config``."""
        pass

    @abstractmethod
    def _default_adapters(self) -> Iterable[type[ResourceAdapter]]:
        pass

    @abstractmethod
    def get_provider_type(self) -> str:
        pass

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def register(self, adapter: ResourceAdapter) -> None:
        self._adapters[adapter.type_name] = adapter

    def adapter(self, type_name: str) -> ResourceAdapter:
        try:
            return self._adapters[type_name]
        except KeyError:
            raise ConfigError(
                f"unknown resource type {type_name!r}; "
                f"supported types: {', '.join(self.resource_types())}"
            ) from None

    def resource_types(self) -> list[str]:
        return sorted(self._adapters)

    @classmethod
    def from_env(cls, **kwargs):
        """Create a provider configured from environment variables."""
        return cls(config=None, **kwargs)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type='{self.get_provider_type()}')"
