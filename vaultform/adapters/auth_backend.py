"""
Auth method mount adapter.
"""

import logging
from typing import Any

from vaultform import client as api
from vaultform.adapters.base import ResourceAdapter
from vaultform.client import VaultClient
from vaultform.paths import auth_backend_path
from vaultform.resources.auth import AuthBackend
from vaultform.schema import ResourceData, encode

logger = logging.getLogger(__name__)


def _find_mount(mounts: dict[str, Any], path: str) -> dict[str, Any] | None:
    # sys/auth keys carry a trailing slash
    mount = mounts.get(path.strip("/") + "/")
    return mount if isinstance(mount, dict) else None


class AuthBackendAdapter(ResourceAdapter):
    """
    Enables, reads and disables auth method mounts.

    The ID is the mount path. Vault has no per-mount read, so read lists
    ``sys/auth`` and picks the entry; the accessor is only known from there.
    """

    model = AuthBackend
    description = "auth backend"

    def create(self, client: VaultClient, data: ResourceData) -> None:
        mount = data.config.mount_path
        path = auth_backend_path(mount)
        payload = encode(data, ("type", "description", "local"))

        logger.debug("Enabling %s auth backend at %r", data.get("type"), mount)
        api.write(client, path, payload, what="auth backend")
        data.set_id(mount)
        logger.debug("Enabled auth backend at %r", mount)

        self.read(client, data)

    def update(self, client: VaultClient, data: ResourceData) -> None:
        # Only the description can change in place; the rest force a new mount.
        path = auth_backend_path(data.id) + "/tune"
        payload = {"description": data.get("description") or ""}
        logger.debug("Tuning auth backend %r", data.id)
        api.write(client, path, payload, what="auth backend tuning")
        self.read(client, data)

    def read_path(self, data: ResourceData) -> str:
        return auth_backend_path(data.id)

    def read(self, client: VaultClient, data: ResourceData) -> None:
        mount_path = data.id
        logger.debug("Reading auth backend %r", mount_path)
        mounts = api.read(client, "sys/auth", what="auth backends") or {}
        mount = _find_mount(mounts, mount_path)
        if mount is None:
            logger.warning("Auth backend %r not found, removing it from state", mount_path)
            data.set_id("")
            return

        data.set("type", mount.get("type"))
        data.set("path", mount_path)
        data.set("description", mount.get("description"))
        data.set("local", bool(mount.get("local", False)))
        data.set("accessor", mount.get("accessor"))

    def exists(self, client: VaultClient, data: ResourceData) -> bool:
        mounts = api.read(client, "sys/auth", what="auth backends") or {}
        return _find_mount(mounts, data.id) is not None

    def delete(self, client: VaultClient, data: ResourceData) -> None:
        path = auth_backend_path(data.id)
        logger.debug("Disabling auth backend %r", data.id)
        api.delete(client, path, what="auth backend")
        logger.debug("Disabled auth backend %r", data.id)
