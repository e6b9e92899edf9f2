"""
Resource declarations.

Each model is the typed schema of one resource kind; its ``type_name`` is
the key used in declarative documents and in state.
"""

from vaultform.resources.auth import AuthBackend, AwsAuthBackendConfigIdentity
from vaultform.resources.database import DatabaseSecretBackendRole
from vaultform.resources.identity import IdentityEntity, IdentityEntityAlias
from vaultform.resources.policy import Policy

__all__ = [
    "AuthBackend",
    "AwsAuthBackendConfigIdentity",
    "DatabaseSecretBackendRole",
    "IdentityEntity",
    "IdentityEntityAlias",
    "Policy",
]
