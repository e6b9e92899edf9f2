"""
vaultform: declarative management of HashiCorp Vault configuration.

Resources are declared as typed pydantic models (or in a YAML document),
each resource kind has an adapter that maps create/read/update/delete onto
Vault API paths, and a Stack reconciles the declarations against tracked
state in dependency order.

Core concepts:
- Resource model: typed declaration of one resource kind
- Adapter: CRUD against the Vault API for one resource kind
- Provider: connection settings, hvac client and adapter registry
- Stack: plan, apply, refresh, import and destroy over a state file

Example:
    from vaultform import Stack, VaultProvider, load_document, StateStore

    document = load_document("vault.yaml")
    stack = Stack(
        VaultProvider(config=document.provider),
        document.resources,
        StateStore("vault.state.json"),
    )
    print(stack.plan().summary())
    stack.apply()
"""

__version__ = "0.1.0"

from vaultform.config import VaultConfig, load_document, loads
from vaultform.core import Action, Plan, Stack
from vaultform.errors import (
    ConfigError,
    InvalidIdentifierError,
    PlanError,
    RemoteAPIError,
    ResourceConflictError,
    StateError,
    VaultformError,
)
from vaultform.providers import Provider, VaultProvider
from vaultform.state import MemoryStateStore, State, StateStore

__all__ = [
    "__version__",
    "VaultConfig",
    "load_document",
    "loads",
    "Action",
    "Plan",
    "Stack",
    "ConfigError",
    "InvalidIdentifierError",
    "PlanError",
    "RemoteAPIError",
    "ResourceConflictError",
    "StateError",
    "VaultformError",
    "Provider",
    "VaultProvider",
    "MemoryStateStore",
    "State",
    "StateStore",
]
