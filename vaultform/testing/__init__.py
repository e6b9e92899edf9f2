"""
Test support: an in-memory Vault and the step-based lifecycle harness.
"""

from vaultform.testing.harness import (
    AcceptanceCase,
    AcceptanceStep,
    HarnessError,
    check_resource_attr,
    check_resource_attr_pair,
    check_resources_gone,
    compose_checks,
    random_name,
    run_case,
)
from vaultform.testing.memory import InMemoryVault

__all__ = [
    "AcceptanceCase",
    "AcceptanceStep",
    "HarnessError",
    "InMemoryVault",
    "check_resource_attr",
    "check_resource_attr_pair",
    "check_resources_gone",
    "compose_checks",
    "random_name",
    "run_case",
]
