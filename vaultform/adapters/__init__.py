"""
CRUD adapters for Vault resources.

Adapters hold the per-kind API logic; the engine and the provider look
them up by resource type name.
"""

from vaultform.adapters.auth_backend import AuthBackendAdapter
from vaultform.adapters.aws_auth import AwsAuthBackendConfigIdentityAdapter
from vaultform.adapters.base import ResourceAdapter
from vaultform.adapters.database import DatabaseSecretBackendRoleAdapter
from vaultform.adapters.identity import IdentityEntityAdapter, IdentityEntityAliasAdapter
from vaultform.adapters.policy import PolicyAdapter

ADAPTERS: tuple[type[ResourceAdapter], ...] = (
    AuthBackendAdapter,
    AwsAuthBackendConfigIdentityAdapter,
    DatabaseSecretBackendRoleAdapter,
    IdentityEntityAdapter,
    IdentityEntityAliasAdapter,
    PolicyAdapter,
)

__all__ = [
    "ResourceAdapter",
    "AuthBackendAdapter",
    "AwsAuthBackendConfigIdentityAdapter",
    "DatabaseSecretBackendRoleAdapter",
    "IdentityEntityAdapter",
    "IdentityEntityAliasAdapter",
    "PolicyAdapter",
    "ADAPTERS",
]
