"""
Shared fixtures: an in-memory Vault and a provider bound to it.
"""

import pytest

from vaultform.config.provider import VaultConfig
from vaultform.providers.vault import VaultProvider
from vaultform.testing import InMemoryVault


@pytest.fixture
def vault():
    return InMemoryVault()


@pytest.fixture
def provider(vault):
    return VaultProvider(config=VaultConfig(), client=vault)


@pytest.fixture
def aws_mount(vault):
    vault.write_data("sys/auth/aws", data={"type": "aws"})
    return "aws"
