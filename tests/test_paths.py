"""
Tests for path codecs.
"""

import pytest

from vaultform.errors import InvalidIdentifierError, PathMatchCountError, PathNoMatchError
from vaultform.paths import (
    DATABASE_ROLE,
    PathCodec,
    auth_backend_path,
    aws_auth_backend_config_identity_backend_from_path,
    aws_auth_backend_config_identity_path,
    database_role_backend_from_path,
    database_role_name_from_path,
    database_role_path,
    identity_entity_alias_id_path,
    identity_entity_id_path,
    policy_path,
)


class TestAwsIdentityPath:
    """Tests for the AWS auth identity config path."""

    @pytest.mark.parametrize("backend", ["aws", "/aws", "aws/", "/aws/", "team/aws", "aws-prod-1"])
    def test_round_trip(self, backend):
        """Test the backend survives building and parsing, minus outer slashes."""
        path = aws_auth_backend_config_identity_path(backend)

        assert aws_auth_backend_config_identity_backend_from_path(path) == backend.strip("/")

    def test_path_shape(self):
        """Test the rendered path."""
        assert aws_auth_backend_config_identity_path("/aws/") == "auth/aws/config/identity"

    @pytest.mark.parametrize(
        "path",
        ["auth/aws/config/client", "aws/config/identity", "auth//config/identity/extra", ""],
    )
    def test_no_match(self, path):
        """Test malformed paths raise PathNoMatchError."""
        with pytest.raises(PathNoMatchError, match="no backend found"):
            aws_auth_backend_config_identity_backend_from_path(path)

    def test_errors_are_invalid_identifiers(self):
        """Test both path errors share the identifier error base."""
        assert issubclass(PathNoMatchError, InvalidIdentifierError)
        assert issubclass(PathMatchCountError, InvalidIdentifierError)


class TestPathCodec:
    """Tests for PathCodec itself."""

    def test_parts(self):
        """Test parts come from the template fields."""
        assert DATABASE_ROLE.parts == ("backend", "name")

    def test_missing_part(self):
        """Test rendering without every part fails."""
        with pytest.raises(ValueError, match="backend"):
            DATABASE_ROLE.path_for(name="ro")

    def test_match_count_mismatch(self):
        """Test a pattern capturing extra groups is reported."""
        codec = PathCodec("x/{a}", r"^x/(?P<a>[^/]+)/(extra)$")

        with pytest.raises(PathMatchCountError, match="unexpected number of matches"):
            codec.parse("x/one/extra")

    def test_matches(self):
        """Test matches() without raising."""
        assert DATABASE_ROLE.matches("postgres/roles/ro")
        assert not DATABASE_ROLE.matches("postgres/creds/ro")


class TestResourcePaths:
    """Tests for the per-kind path helpers."""

    def test_simple_paths(self):
        """Test every kind strips outer slashes from its parts."""
        assert auth_backend_path("/github/") == "sys/auth/github"
        assert identity_entity_id_path("abc") == "identity/entity/id/abc"
        assert identity_entity_alias_id_path("def") == "identity/entity-alias/id/def"
        assert policy_path("ops") == "sys/policies/acl/ops"

    def test_database_role_nested_backend(self):
        """Test backends containing slashes parse back whole."""
        path = database_role_path("/db/team/", "readonly")

        assert path == "db/team/roles/readonly"
        assert database_role_backend_from_path(path) == "db/team"
        assert database_role_name_from_path(path) == "readonly"

    def test_database_role_bad_id(self):
        """Test import IDs without /roles/ are rejected."""
        with pytest.raises(PathNoMatchError):
            database_role_backend_from_path("postgres-readonly")
