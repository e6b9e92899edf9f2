"""
In-memory stand-in for a Vault server, exposed through the hvac client
surface (``read``, ``write_data``, ``delete``, ``list``).

It models just enough server behaviour for lifecycle tests: auth mounts with
accessors, the AWS identity config singleton, ACL policies, identity
entities and aliases (including the name/mount uniqueness rule) and plain
storage for every other path. Errors are raised as the same
``hvac.exceptions`` the real client raises.
"""

import re
import uuid
from copy import deepcopy
from typing import Any, Callable

from hvac import exceptions as vault_exceptions

IAM_ALIASES = ("role_id", "unique_id", "full_arn")
EC2_ALIASES = ("role_id", "instance_id", "image_id")


def _uuid() -> str:
    return str(uuid.uuid4())


class InMemoryVault:
    """
    Vault double for tests.

    Example:
        vault = InMemoryVault()
        provider = VaultProvider(config=VaultConfig(), client=vault)

        vault.write_data("sys/auth/github", data={"type": "github"})
        vault.read("sys/auth")["data"]["github/"]["accessor"]
    """

    def __init__(self):
        self.mounts: dict[str, dict[str, Any]] = {}
        self.aws_identity: dict[str, dict[str, Any]] = {}
        self.policies: dict[str, str] = {}
        self.entities: dict[str, dict[str, Any]] = {}
        self.aliases: dict[str, dict[str, Any]] = {}
        self.storage: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []
        self._errors: dict[tuple[str, str], Exception] = {}
        self._routes: list[tuple[str, re.Pattern, Callable[..., Any]]] = [
            ("read", re.compile(r"^sys/auth$"), self._read_mounts),
            ("write", re.compile(r"^sys/auth/(?P<path>.+)/tune$"), self._tune_mount),
            ("write", re.compile(r"^sys/auth/(?P<path>.+)$"), self._enable_mount),
            ("delete", re.compile(r"^sys/auth/(?P<path>.+)$"), self._disable_mount),
            ("read", re.compile(r"^auth/(?P<mount>.+)/config/identity$"), self._read_aws_identity),
            ("write", re.compile(r"^auth/(?P<mount>.+)/config/identity$"), self._write_aws_identity),
            ("read", re.compile(r"^sys/policies/acl/(?P<name>[^/]+)$"), self._read_policy),
            ("write", re.compile(r"^sys/policies/acl/(?P<name>[^/]+)$"), self._write_policy),
            ("delete", re.compile(r"^sys/policies/acl/(?P<name>[^/]+)$"), self._delete_policy),
            ("write", re.compile(r"^identity/entity$"), self._create_entity),
            ("read", re.compile(r"^identity/entity/id/(?P<id>[^/]+)$"), self._read_entity),
            ("write", re.compile(r"^identity/entity/id/(?P<id>[^/]+)$"), self._update_entity),
            ("delete", re.compile(r"^identity/entity/id/(?P<id>[^/]+)$"), self._delete_entity),
            ("write", re.compile(r"^identity/entity-alias$"), self._create_alias),
            ("read", re.compile(r"^identity/entity-alias/id/(?P<id>[^/]+)$"), self._read_alias),
            ("write", re.compile(r"^identity/entity-alias/id/(?P<id>[^/]+)$"), self._update_alias),
            ("delete", re.compile(r"^identity/entity-alias/id/(?P<id>[^/]+)$"), self._delete_alias),
            ("write", re.compile(r"^identity/lookup/entity-alias$"), self._lookup_alias),
        ]

    # -------------------------------------------------------------------------
    # hvac.Client surface
    # -------------------------------------------------------------------------

    def read(self, path: str, wrap_ttl: str | None = None) -> dict[str, Any] | None:
        try:
            return self._dispatch("read", path, None)
        except vault_exceptions.InvalidPath:
            # hvac turns a 404 on read into None
            return None

    def write_data(
        self,
        path: str,
        *,
        data: dict[str, Any] | None = None,
        wrap_ttl: str | None = None,
    ) -> dict[str, Any] | None:
        return self._dispatch("write", path, deepcopy(data or {}))

    def delete(self, path: str) -> None:
        self._dispatch("delete", path, None)

    def list(self, path: str) -> dict[str, Any] | None:
        prefix = path.strip("/") + "/"
        self.calls.append(("list", path, None))
        found: set[str] = set()
        for stored in self.storage:
            if stored.startswith(prefix):
                head, sep, _ = stored[len(prefix):].partition("/")
                found.add(head + sep)
        if not found:
            return None
        return {"data": {"keys": sorted(found)}}

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def fail(self, operation: str, path: str, error: Exception) -> None:
        """Make the next ``operation`` on ``path`` raise ``error``."""
        self._errors[(operation, path.strip("/"))] = error

    def accessor(self, path: str) -> str:
        return self.mounts[path.strip("/")]["accessor"]

    def _dispatch(self, operation: str, path: str, data: dict[str, Any] | None) -> Any:
        path = path.strip("/")
        self.calls.append((operation, path, data))
        error = self._errors.pop((operation, path), None)
        if error is not None:
            raise error
        for route_operation, pattern, handler in self._routes:
            if route_operation != operation:
                continue
            match = pattern.match(path)
            if match:
                if operation == "write":
                    return handler(data, **match.groupdict())
                return handler(**match.groupdict())
        return getattr(self, f"_{operation}_storage")(path, data)

    @staticmethod
    def _response(data: dict[str, Any] | None) -> dict[str, Any] | None:
        if data is None:
            return None
        return {"request_id": _uuid(), "data": deepcopy(data)}

    # -------------------------------------------------------------------------
    # Generic storage
    # -------------------------------------------------------------------------

    def _read_storage(self, path: str, data: None) -> dict[str, Any] | None:
        if path not in self.storage:
            raise vault_exceptions.InvalidPath(f"no handler for route {path!r}")
        return self._response(self.storage[path])

    def _write_storage(self, path: str, data: dict[str, Any]) -> None:
        self.storage[path] = data
        return None

    def _delete_storage(self, path: str, data: None) -> None:
        self.storage.pop(path, None)

    # -------------------------------------------------------------------------
    # Auth mounts
    # -------------------------------------------------------------------------

    def _read_mounts(self) -> dict[str, Any]:
        mounts = {f"{path}/": deepcopy(mount) for path, mount in self.mounts.items()}
        return {"request_id": _uuid(), "data": mounts, **mounts}

    def _enable_mount(self, data: dict[str, Any], path: str) -> None:
        if path in self.mounts:
            raise vault_exceptions.InvalidRequest(f"path is already in use at {path}/")
        if not data.get("type"):
            raise vault_exceptions.InvalidRequest("backend type must be specified")
        self.mounts[path] = {
            "type": data["type"],
            "description": data.get("description", ""),
            "local": bool(data.get("local", False)),
            "accessor": f"auth_{data['type']}_{uuid.uuid4().hex[:8]}",
        }

    def _tune_mount(self, data: dict[str, Any], path: str) -> None:
        if path not in self.mounts:
            raise vault_exceptions.InvalidRequest(f"no mount at {path}/")
        if "description" in data:
            self.mounts[path]["description"] = data["description"]

    def _disable_mount(self, path: str) -> None:
        mount = self.mounts.pop(path, None)
        if mount is None:
            return
        self.aws_identity.pop(path, None)
        for alias_id in [
            a for a, alias in self.aliases.items() if alias["mount_accessor"] == mount["accessor"]
        ]:
            del self.aliases[alias_id]

    def _mount_by_accessor(self, accessor: str) -> tuple[str, dict[str, Any]] | None:
        for path, mount in self.mounts.items():
            if mount["accessor"] == accessor:
                return path, mount
        return None

    # -------------------------------------------------------------------------
    # AWS identity config
    # -------------------------------------------------------------------------

    def _aws_mount(self, mount: str) -> dict[str, Any]:
        found = self.mounts.get(mount)
        if found is None or found["type"] != "aws":
            raise vault_exceptions.InvalidPath(f"no handler for route 'auth/{mount}/config/identity'")
        return found

    def _read_aws_identity(self, mount: str) -> dict[str, Any]:
        self._aws_mount(mount)
        config = {"iam_alias": "role_id", "iam_metadata": [], "ec2_alias": "role_id", "ec2_metadata": []}
        config.update(self.aws_identity.get(mount, {}))
        return self._response(config)

    def _write_aws_identity(self, data: dict[str, Any], mount: str) -> None:
        self._aws_mount(mount)
        if data.get("iam_alias", "role_id") not in IAM_ALIASES:
            raise vault_exceptions.InvalidRequest(f"iam_alias of {data['iam_alias']!r} not in set of allowed values")
        if data.get("ec2_alias", "role_id") not in EC2_ALIASES:
            raise vault_exceptions.InvalidRequest(f"ec2_alias of {data['ec2_alias']!r} not in set of allowed values")
        stored = self.aws_identity.setdefault(mount, {})
        for key, value in data.items():
            if value is not None:
                stored[key] = value

    # -------------------------------------------------------------------------
    # Policies
    # -------------------------------------------------------------------------

    # policy names are case-insensitive and stored lower-cased

    def _read_policy(self, name: str) -> dict[str, Any]:
        name = name.lower()
        if name not in self.policies:
            raise vault_exceptions.InvalidPath(f"policy {name!r} not found")
        return self._response({"name": name, "policy": self.policies[name]})

    def _write_policy(self, data: dict[str, Any], name: str) -> None:
        if not data.get("policy"):
            raise vault_exceptions.InvalidRequest("'policy' parameter not supplied or empty")
        self.policies[name.lower()] = data["policy"]

    def _delete_policy(self, name: str) -> None:
        self.policies.pop(name.lower(), None)

    # -------------------------------------------------------------------------
    # Identity entities
    # -------------------------------------------------------------------------

    def _entity_by_name(self, name: str) -> dict[str, Any] | None:
        for entity in self.entities.values():
            if entity["name"] == name:
                return entity
        return None

    def _apply_entity_fields(self, entity: dict[str, Any], data: dict[str, Any]) -> None:
        for key in ("name", "policies", "metadata", "disabled"):
            if key in data and data[key] is not None:
                entity[key] = deepcopy(data[key])

    def _create_entity(self, data: dict[str, Any]) -> dict[str, Any]:
        existing = self._entity_by_name(data["name"]) if data.get("name") else None
        if existing is not None:
            # writing an existing name updates that entity
            self._apply_entity_fields(existing, data)
            return self._response({"id": existing["id"], "name": existing["name"]})
        entity_id = _uuid()
        entity = {
            "id": entity_id,
            "name": data.get("name") or f"entity_{entity_id[:8]}",
            "policies": [],
            "metadata": None,
            "disabled": False,
        }
        self._apply_entity_fields(entity, data)
        self.entities[entity_id] = entity
        return self._response({"id": entity_id, "name": entity["name"]})

    def _read_entity(self, id: str) -> dict[str, Any]:
        entity = self.entities.get(id)
        if entity is None:
            raise vault_exceptions.InvalidPath(f"entity {id!r} not found")
        aliases = [deepcopy(a) for a in self.aliases.values() if a["canonical_id"] == id]
        return self._response({**entity, "aliases": aliases})

    def _update_entity(self, data: dict[str, Any], id: str) -> None:
        entity = self.entities.get(id)
        if entity is None:
            raise vault_exceptions.InvalidRequest("entity not found from id")
        if data.get("name") and data["name"] != entity["name"]:
            other = self._entity_by_name(data["name"])
            if other is not None:
                raise vault_exceptions.InvalidRequest("entity name is already in use")
        self._apply_entity_fields(entity, data)

    def _delete_entity(self, id: str) -> None:
        if self.entities.pop(id, None) is None:
            return
        for alias_id in [a for a, alias in self.aliases.items() if alias["canonical_id"] == id]:
            del self.aliases[alias_id]

    # -------------------------------------------------------------------------
    # Identity entity aliases
    # -------------------------------------------------------------------------

    def _alias_by_key(self, name: str, accessor: str) -> dict[str, Any] | None:
        for alias in self.aliases.values():
            if alias["name"] == name and alias["mount_accessor"] == accessor:
                return alias
        return None

    def _validate_alias(self, data: dict[str, Any], alias_id: str | None) -> tuple[str, dict[str, Any]]:
        if not data.get("name"):
            raise vault_exceptions.InvalidRequest("missing alias name")
        found = self._mount_by_accessor(data.get("mount_accessor") or "")
        if found is None:
            raise vault_exceptions.InvalidRequest(
                f"invalid mount accessor {data.get('mount_accessor')!r}"
            )
        if data.get("canonical_id") not in self.entities:
            raise vault_exceptions.InvalidRequest("entity not found from canonical_id")
        existing = self._alias_by_key(data["name"], data["mount_accessor"])
        if existing is not None and existing["id"] != alias_id:
            raise vault_exceptions.InvalidRequest(
                "combination of mount and alias name is already in use"
            )
        return found

    def _alias_record(self, alias_id: str, data: dict[str, Any], mount: tuple[str, dict[str, Any]]) -> dict[str, Any]:
        path, mount_info = mount
        return {
            "id": alias_id,
            "name": data["name"],
            "mount_accessor": data["mount_accessor"],
            "mount_path": f"auth/{path}/",
            "mount_type": mount_info["type"],
            "canonical_id": data["canonical_id"],
            "custom_metadata": deepcopy(data.get("custom_metadata") or {}),
        }

    def _create_alias(self, data: dict[str, Any]) -> dict[str, Any]:
        mount = self._validate_alias(data, None)
        alias_id = _uuid()
        self.aliases[alias_id] = self._alias_record(alias_id, data, mount)
        return self._response({"id": alias_id, "canonical_id": data["canonical_id"]})

    def _read_alias(self, id: str) -> dict[str, Any]:
        alias = self.aliases.get(id)
        if alias is None:
            raise vault_exceptions.InvalidPath(f"entity alias {id!r} not found")
        return self._response(alias)

    def _update_alias(self, data: dict[str, Any], id: str) -> None:
        if id not in self.aliases:
            raise vault_exceptions.InvalidRequest("entity alias not found from id")
        mount = self._validate_alias(data, id)
        if data.get("custom_metadata") is None:
            data = {**data, "custom_metadata": self.aliases[id]["custom_metadata"]}
        self.aliases[id] = self._alias_record(id, data, mount)

    def _delete_alias(self, id: str) -> None:
        self.aliases.pop(id, None)

    def _lookup_alias(self, data: dict[str, Any]) -> dict[str, Any] | None:
        alias = self._alias_by_key(data.get("name", ""), data.get("mount_accessor", ""))
        return self._response(alias) if alias is not None else None
