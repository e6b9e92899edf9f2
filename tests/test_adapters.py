"""
Tests for auth backend, policy and database role adapters.
"""

import pytest
from hvac import exceptions as vault_exceptions

from vaultform.adapters import (
    AuthBackendAdapter,
    DatabaseSecretBackendRoleAdapter,
    PolicyAdapter,
)
from vaultform.errors import InvalidIdentifierError, RemoteAPIError
from vaultform.resources import AuthBackend, DatabaseSecretBackendRole, Policy

ROLE = {
    "backend": "postgres",
    "name": "readonly",
    "db_name": "main",
    "creation_statements": ['CREATE ROLE "{{name}}" WITH LOGIN;'],
    "default_ttl": 3600,
}


class TestAuthBackendAdapter:
    """Tests for AuthBackendAdapter."""

    def setup_method(self):
        self.adapter = AuthBackendAdapter()

    def test_create(self, vault):
        """Test enabling a mount records its accessor."""
        data = self.adapter.new_data(
            config=AuthBackend.declare({"type": "github", "path": "/gh-ci/", "description": "CI"})
        )

        self.adapter.create(vault, data)

        assert data.id == "gh-ci"
        assert data.attributes["accessor"] == vault.accessor("gh-ci")
        assert data.attributes["type"] == "github"
        assert data.attributes["description"] == "CI"
        assert data.attributes["local"] is False

    def test_path_defaults_to_type(self, vault):
        """Test the mount path falls back to the method type."""
        data = self.adapter.new_data(config=AuthBackend.declare({"type": "userpass"}))

        self.adapter.create(vault, data)

        assert data.id == "userpass"
        assert data.attributes["path"] == "userpass"

    def test_update_tunes_description(self, vault):
        """Test the description is changed in place."""
        data = self.adapter.new_data(config=AuthBackend.declare({"type": "github"}))
        self.adapter.create(vault, data)
        accessor = data.attributes["accessor"]

        update = self.adapter.new_data(
            config=AuthBackend.declare({"type": "github", "description": "tuned"}),
            attributes=data.attributes,
            id=data.id,
        )
        self.adapter.update(vault, update)

        assert vault.mounts["github"]["description"] == "tuned"
        assert update.attributes["accessor"] == accessor

    def test_exists_and_delete(self, vault):
        """Test existence before and after disabling."""
        data = self.adapter.new_data(config=AuthBackend.declare({"type": "github"}))
        self.adapter.create(vault, data)

        assert self.adapter.exists(vault, data)

        self.adapter.delete(vault, data)

        assert not self.adapter.exists(vault, data)
        self.adapter.read(vault, data)
        assert data.id == ""


class TestPolicyAdapter:
    """Tests for PolicyAdapter."""

    def test_lifecycle(self, vault):
        """Test write, read back and delete of a policy."""
        adapter = PolicyAdapter()
        document = 'path "secret/*" { capabilities = ["read"] }'
        data = adapter.new_data(config=Policy.declare({"name": "ops", "policy": document}))

        adapter.create(vault, data)

        assert data.id == "ops"
        assert data.attributes == {"name": "ops", "policy": document}

        adapter.delete(vault, data)
        adapter.read(vault, data)

        assert "ops" not in vault.policies
        assert data.id == ""

    def test_name_is_lower_cased(self, vault):
        """Test a mixed-case name is tracked the way Vault stores it."""
        adapter = PolicyAdapter()
        config = Policy.declare({"name": "Ops", "policy": 'path "a/*" { capabilities = ["read"] }'})
        data = adapter.new_data(config=config)

        adapter.create(vault, data)

        assert config.name == "ops"
        assert data.id == "ops"
        assert data.attributes["name"] == "ops"
        assert list(vault.policies) == ["ops"]


class TestDatabaseSecretBackendRoleAdapter:
    """Tests for DatabaseSecretBackendRoleAdapter."""

    def setup_method(self):
        self.adapter = DatabaseSecretBackendRoleAdapter()

    def test_create(self, vault):
        """Test the composite ID and echoed fields."""
        data = self.adapter.new_data(config=DatabaseSecretBackendRole.declare(ROLE))

        self.adapter.create(vault, data)

        assert data.id == "postgres/roles/readonly"
        assert vault.storage["postgres/roles/readonly"]["db_name"] == "main"
        assert "revocation_statements" not in vault.storage["postgres/roles/readonly"]
        assert data.attributes["backend"] == "postgres"
        assert data.attributes["name"] == "readonly"
        assert data.attributes["default_ttl"] == 3600
        assert data.attributes["creation_statements"] == ROLE["creation_statements"]

    def test_import_composite_id(self, vault):
        """Test importing with a nested backend path."""
        vault.write_data(
            "db/team/roles/readonly",
            data={"db_name": "main", "creation_statements": ["SELECT 1"]},
        )

        data = self.adapter.import_state(vault, "db/team/roles/readonly")

        assert data.id == "db/team/roles/readonly"
        assert data.attributes["backend"] == "db/team"
        assert data.attributes["name"] == "readonly"
        assert data.attributes["db_name"] == "main"

    def test_import_bad_id(self, vault):
        """Test an import ID without /roles/ is rejected."""
        with pytest.raises(InvalidIdentifierError, match="invalid ID"):
            self.adapter.import_state(vault, "postgres-readonly")

    def test_import_missing(self, vault):
        """Test importing something that does not exist yields an empty ID."""
        data = self.adapter.import_state(vault, "postgres/roles/nope")

        assert data.id == ""

    def test_write_error(self, vault):
        """Test a failed write keeps the instance untracked."""
        vault.fail(
            "write", "postgres/roles/readonly", vault_exceptions.InternalServerError("boom")
        )
        data = self.adapter.new_data(config=DatabaseSecretBackendRole.declare(ROLE))

        with pytest.raises(RemoteAPIError, match="error writing database role") as exc_info:
            self.adapter.create(vault, data)

        assert exc_info.value.operation == "write"
        assert exc_info.value.status_code == 500
        assert data.id == ""

    def test_delete_absent(self, vault):
        """Test deleting a role that does not exist succeeds."""
        data = self.adapter.new_data(id="postgres/roles/gone")

        self.adapter.delete(vault, data)
