"""
Database secrets engine role adapter.
"""

import logging

from vaultform import client as api
from vaultform.adapters.base import ResourceAdapter
from vaultform.client import VaultClient
from vaultform.errors import InvalidIdentifierError
from vaultform.paths import DATABASE_ROLE, database_role_path
from vaultform.resources.database import DatabaseSecretBackendRole
from vaultform.schema import ResourceData, decode, encode

logger = logging.getLogger(__name__)

FIELDS = (
    "db_name",
    "creation_statements",
    "revocation_statements",
    "rollback_statements",
    "renew_statements",
    "default_ttl",
    "max_ttl",
)


class DatabaseSecretBackendRoleAdapter(ResourceAdapter):
    """
    Manages ``<backend>/roles/<name>``.

    The composite path is the ID, so imports take the same form and the
    backend and name are re-derived from it on every read.
    """

    model = DatabaseSecretBackendRole
    description = "database secret backend role"

    def create(self, client: VaultClient, data: ResourceData) -> None:
        path = database_role_path(data.get("backend"), data.get("name"))
        payload = encode(data, FIELDS)

        logger.debug("Writing database role %r", path)
        api.write(client, path, payload, what="database role")
        data.set_id(path)
        logger.debug("Wrote database role %r", path)

        self.read(client, data)

    def read(self, client: VaultClient, data: ResourceData) -> None:
        path = data.id
        try:
            parts = DATABASE_ROLE.parse(path)
        except InvalidIdentifierError as e:
            raise type(e)(f"invalid ID {path!r} for database role: {e}") from e

        logger.debug("Reading database role %r", path)
        payload = api.read(client, path, what="database role")
        if payload is None:
            logger.warning("Database role %r not found, removing it from state", path)
            data.set_id("")
            return

        data.set("backend", parts["backend"])
        data.set("name", parts["name"])
        decode(data, payload, FIELDS)

    def delete(self, client: VaultClient, data: ResourceData) -> None:
        logger.debug("Deleting database role %r", data.id)
        api.delete(client, data.id, what="database role")
        logger.debug("Deleted database role %r", data.id)
