"""
Vault provider configuration.

Values come from the document's ``provider:`` section, falling back to the
standard ``VAULT_*`` environment variables and then to defaults.
"""

import os
from typing import Any, Mapping

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from vaultform.errors import ConfigError

ENV_VARS = {
    "address": "VAULT_ADDR",
    "token": "VAULT_TOKEN",
    "namespace": "VAULT_NAMESPACE",
    "skip_tls_verify": "VAULT_SKIP_VERIFY",
    "ca_cert": "VAULT_CACERT",
}

_TRUE = {"1", "true", "yes", "on"}


class VaultConfig(BaseModel):
    """
    Connection settings for the Vault API.

    Example:
        config = VaultConfig(
            address="https://vault.example.com:8200",
            token="s.xxxxx",
            namespace="admin",
        )

        provider = VaultProvider(config=config)
    """

    address: str = Field(default="http://127.0.0.1:8200", description="Vault server URL")
    token: SecretStr | None = Field(default=None, description="Token used to authenticate")
    namespace: str | None = Field(default=None, description="Vault Enterprise namespace")
    skip_tls_verify: bool = Field(
        default=False, description="Skip TLS certificate verification"
    )
    ca_cert: str | None = Field(default=None, description="Path to a CA bundle")
    timeout: int = Field(default=30, description="Request timeout in seconds", gt=0)

    class Config:
        extra = "forbid"

    @field_validator("address")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def verify(self) -> bool | str:
        """The ``verify`` argument for the HTTP client."""
        if self.skip_tls_verify:
            return False
        return self.ca_cert or True

    @classmethod
    def from_env(
        cls, env: Mapping[str, str] | None = None, **overrides: Any
    ) -> "VaultConfig":
        """
        Build a config from environment variables plus explicit overrides.

        Overrides that are None are ignored so CLI options can be passed
        through unconditionally.
        """
        env = os.environ if env is None else env
        values: dict[str, Any] = {}
        for key, var in ENV_VARS.items():
            if env.get(var):
                values[key] = env[var]
        if "skip_tls_verify" in values:
            values["skip_tls_verify"] = str(values["skip_tls_verify"]).lower() in _TRUE
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"invalid provider configuration: {e}") from e
