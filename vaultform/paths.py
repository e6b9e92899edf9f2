"""
Path codecs: build Vault API paths from logical names and parse them back.

Each resource kind owns exactly one codec, so trimming and anchoring rules
are defined once. Building strips leading and trailing slashes from every
part; parsing matches an anchored pattern with one named group per part.

Example:
    codec = PathCodec(
        "auth/{backend}/config/identity",
        r"^auth/(?P<backend>.+)/config/identity$",
    )
    codec.path_for(backend="/aws/")           # "auth/aws/config/identity"
    codec.extract("auth/aws/config/identity", "backend")  # "aws"
"""

import re
from string import Formatter

from vaultform.errors import PathMatchCountError, PathNoMatchError


class PathCodec:
    """Two-way mapping between path parts and a remote path."""

    def __init__(self, template: str, pattern: str):
        """
        Args:
            template: str.format template with one field per part
            pattern: Anchored regex with a named group per template field
        """
        self.template = template
        self.parts = tuple(
            field for _, field, _, _ in Formatter().parse(template) if field
        )
        self._regex = re.compile(pattern)

    def path_for(self, **parts: str) -> str:
        """Render the path, standardising on no leading or trailing slashes."""
        missing = set(self.parts) - set(parts)
        if missing:
            raise ValueError(f"missing path parts: {', '.join(sorted(missing))}")
        return self.template.format(
            **{name: str(parts[name]).strip("/") for name in self.parts}
        )

    def parse(self, path: str) -> dict[str, str]:
        """
        Extract every part from ``path``.

        Raises:
            PathNoMatchError: The path does not have the expected shape
            PathMatchCountError: The pattern captured a different number of
                parts than the template declares
        """
        match = self._regex.match(path)
        if match is None:
            raise PathNoMatchError(
                f"no {'/'.join(self.parts)} found in path {path!r}"
            )
        groups = match.groupdict()
        if len(groups) != len(self.parts) or len(match.groups()) != len(self.parts):
            raise PathMatchCountError(
                f"unexpected number of matches ({len(match.groups())}) "
                f"for {'/'.join(self.parts)} in path {path!r}"
            )
        return groups

    def extract(self, path: str, part: str) -> str:
        """Extract a single part from ``path``."""
        return self.parse(path)[part]

    def matches(self, path: str) -> bool:
        return self._regex.match(path) is not None

    def __repr__(self) -> str:
        return f"PathCodec('{self.template}')"


AWS_AUTH_BACKEND_CONFIG_IDENTITY = PathCodec(
    "auth/{backend}/config/identity",
    r"^auth/(?P<backend>.+)/config/identity$",
)

AUTH_BACKEND = PathCodec("sys/auth/{path}", r"^sys/auth/(?P<path>.+)$")

IDENTITY_ENTITY_ID = PathCodec(
    "identity/entity/id/{id}", r"^identity/entity/id/(?P<id>[^/]+)$"
)

IDENTITY_ENTITY_ALIAS_ID = PathCodec(
    "identity/entity-alias/id/{id}", r"^identity/entity-alias/id/(?P<id>[^/]+)$"
)

POLICY = PathCodec("sys/policies/acl/{name}", r"^sys/policies/acl/(?P<name>[^/]+)$")

# Backend may itself contain slashes; the role name is everything after the
# last "/roles/".
DATABASE_ROLE = PathCodec(
    "{backend}/roles/{name}", r"^(?P<backend>.+)/roles/(?P<name>[^/]+)$"
)


def aws_auth_backend_config_identity_path(backend: str) -> str:
    return AWS_AUTH_BACKEND_CONFIG_IDENTITY.path_for(backend=backend)


def aws_auth_backend_config_identity_backend_from_path(path: str) -> str:
    return AWS_AUTH_BACKEND_CONFIG_IDENTITY.extract(path, "backend")


def auth_backend_path(path: str) -> str:
    return AUTH_BACKEND.path_for(path=path)


def identity_entity_id_path(entity_id: str) -> str:
    return IDENTITY_ENTITY_ID.path_for(id=entity_id)


def identity_entity_alias_id_path(alias_id: str) -> str:
    return IDENTITY_ENTITY_ALIAS_ID.path_for(id=alias_id)


def policy_path(name: str) -> str:
    return POLICY.path_for(name=name)


def database_role_path(backend: str, name: str) -> str:
    return DATABASE_ROLE.path_for(backend=backend, name=name)


def database_role_backend_from_path(path: str) -> str:
    return DATABASE_ROLE.extract(path, "backend")


def database_role_name_from_path(path: str) -> str:
    return DATABASE_ROLE.extract(path, "name")
