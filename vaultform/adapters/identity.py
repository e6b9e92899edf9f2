"""
Identity store adapters: entities and entity aliases.

Both are addressed by the opaque ID Vault assigns on create, so create
writes to the collection endpoint and every later call uses the ID path.
"""

import logging
from typing import Any

from vaultform import client as api
from vaultform.adapters.base import ResourceAdapter
from vaultform.client import VaultClient
from vaultform.errors import RemoteAPIError, ResourceConflictError
from vaultform.paths import identity_entity_alias_id_path, identity_entity_id_path
from vaultform.resources.identity import IdentityEntity, IdentityEntityAlias
from vaultform.schema import ResourceData, decode, encode

logger = logging.getLogger(__name__)

ENTITY_PATH = "identity/entity"
ENTITY_ALIAS_PATH = "identity/entity-alias"
ENTITY_ALIAS_LOOKUP_PATH = "identity/lookup/entity-alias"

ALIAS_FIELDS = ("name", "mount_accessor", "canonical_id", "custom_metadata")
ALIAS_TARGET = ("name", "mount_accessor", "canonical_id")


class IdentityEntityAdapter(ResourceAdapter):
    model = IdentityEntity
    description = "identity entity"

    def _payload(self, data: ResourceData) -> dict[str, Any]:
        # undeclared fields are left out and keep their remote value
        keys = ["name", "metadata", "disabled"]
        if not data.get("external_policies"):
            keys.append("policies")
        return encode(data, keys)

    def create(self, client: VaultClient, data: ResourceData) -> None:
        payload = self._payload(data)

        logger.debug("Creating identity entity %r", payload.get("name"))
        response = api.write(client, ENTITY_PATH, payload, what="identity entity")
        if not response or not response.get("id"):
            raise RemoteAPIError(
                f"no ID returned when creating identity entity {payload.get('name')!r}",
                path=ENTITY_PATH,
                operation="write",
            )
        data.set_id(response["id"])
        logger.debug("Created identity entity %r with ID %r", response.get("name"), data.id)

        self.read(client, data)

    def update(self, client: VaultClient, data: ResourceData) -> None:
        path = identity_entity_id_path(data.id)
        logger.debug("Updating identity entity %r", path)
        api.write(client, path, self._payload(data), what="identity entity")
        logger.debug("Updated identity entity %r", path)
        self.read(client, data)

    def read_path(self, data: ResourceData) -> str:
        return identity_entity_id_path(data.id)

    def read(self, client: VaultClient, data: ResourceData) -> None:
        path = identity_entity_id_path(data.id)
        logger.debug("Reading identity entity %r", path)
        payload = api.read(client, path, what="identity entity")
        if payload is None:
            logger.warning("Identity entity %r not found, removing it from state", data.id)
            data.set_id("")
            return

        external = bool(data.get("external_policies"))
        decode(data, payload, ("name", "metadata"))
        data.set("policies", None if external else payload.get("policies"))
        data.set("external_policies", external)
        data.set("disabled", bool(payload.get("disabled", False)))

    def delete(self, client: VaultClient, data: ResourceData) -> None:
        path = identity_entity_id_path(data.id)
        logger.debug("Deleting identity entity %r", path)
        api.delete(client, path, what="identity entity")
        logger.debug("Deleted identity entity %r", path)


def lookup_entity_alias(
    client: VaultClient, name: str, mount_accessor: str
) -> dict[str, Any] | None:
    """Find an alias by its (name, mount accessor) pair."""
    return api.write(
        client,
        ENTITY_ALIAS_LOOKUP_PATH,
        {"name": name, "mount_accessor": mount_accessor},
        what="identity entity alias lookup",
    )


def _conflict(name: str, mount_accessor: str, alias_id: str | None) -> ResourceConflictError:
    with_id = f' with ID "{alias_id}"' if alias_id else ""
    return ResourceConflictError(
        f'IdentityEntityAlias "{name}" already exists in mount "{mount_accessor}"'
        f"{with_id}, and may be imported",
        existing_id=alias_id,
    )


def _alias_payload(data: ResourceData) -> dict[str, Any]:
    # custom_metadata is only written when declared, so a repoint keeps it
    return encode(data, ALIAS_FIELDS, always=ALIAS_TARGET)


def _is_in_use(error: RemoteAPIError) -> bool:
    return error.status_code == 400 and "already in use" in error.message


class IdentityEntityAliasAdapter(ResourceAdapter):
    """
    Manages entity aliases.

    Create refuses to adopt an alias that already exists remotely for the
    same (name, mount accessor): the user is told to import it instead.
    Update rewrites the target (name, mount accessor, canonical ID); custom
    metadata is written only when declared and otherwise left as it is.
    """

    model = IdentityEntityAlias
    description = "identity entity alias"

    def create(self, client: VaultClient, data: ResourceData) -> None:
        name = data.get("name")
        mount_accessor = data.get("mount_accessor")

        existing = lookup_entity_alias(client, name, mount_accessor)
        if existing is not None:
            raise _conflict(name, mount_accessor, existing.get("id"))

        payload = _alias_payload(data)
        logger.debug("Creating identity entity alias %r on mount %r", name, mount_accessor)
        try:
            response = api.write(client, ENTITY_ALIAS_PATH, payload, what="identity entity alias")
        except RemoteAPIError as e:
            if _is_in_use(e):
                raise _conflict(name, mount_accessor, None) from e
            raise
        if not response or not response.get("id"):
            raise RemoteAPIError(
                f"no ID returned when creating identity entity alias {name!r}",
                path=ENTITY_ALIAS_PATH,
                operation="write",
            )
        data.set_id(response["id"])
        logger.debug("Created identity entity alias %r with ID %r", name, data.id)

        self.read(client, data)

    def update(self, client: VaultClient, data: ResourceData) -> None:
        path = identity_entity_alias_id_path(data.id)
        payload = _alias_payload(data)
        logger.debug("Updating identity entity alias %r", path)
        try:
            api.write(client, path, payload, what="identity entity alias")
        except RemoteAPIError as e:
            if _is_in_use(e):
                raise _conflict(data.get("name"), data.get("mount_accessor"), None) from e
            raise
        logger.debug("Updated identity entity alias %r", path)
        self.read(client, data)

    def read_path(self, data: ResourceData) -> str:
        return identity_entity_alias_id_path(data.id)

    def read(self, client: VaultClient, data: ResourceData) -> None:
        path = identity_entity_alias_id_path(data.id)
        logger.debug("Reading identity entity alias %r", path)
        payload = api.read(client, path, what="identity entity alias")
        if payload is None:
            logger.warning(
                "Identity entity alias %r not found, removing it from state", data.id
            )
            data.set_id("")
            return
        decode(data, payload, ALIAS_FIELDS)

    def delete(self, client: VaultClient, data: ResourceData) -> None:
        path = identity_entity_alias_id_path(data.id)
        logger.debug("Deleting identity entity alias %r", path)
        api.delete(client, path, what="identity entity alias")
        logger.debug("Deleted identity entity alias %r", path)
