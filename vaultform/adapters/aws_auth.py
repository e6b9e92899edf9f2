"""
AWS auth method identity configuration adapter.
"""

import logging

from vaultform import client as api
from vaultform.adapters.base import ResourceAdapter
from vaultform.client import VaultClient
from vaultform.errors import InvalidIdentifierError
from vaultform.paths import (
    aws_auth_backend_config_identity_backend_from_path,
    aws_auth_backend_config_identity_path,
)
from vaultform.resources.auth import AwsAuthBackendConfigIdentity
from vaultform.schema import ResourceData, decode, encode

logger = logging.getLogger(__name__)

FIELDS = ("iam_alias", "iam_metadata", "ec2_alias", "ec2_metadata")


class AwsAuthBackendConfigIdentityAdapter(ResourceAdapter):
    """
    Manages ``auth/<backend>/config/identity``.

    The config object exists for as long as the mount does, so delete only
    stops tracking it and the remote settings are left as they are.
    """

    model = AwsAuthBackendConfigIdentity
    description = "AWS auth backend identity config"

    def create(self, client: VaultClient, data: ResourceData) -> None:
        backend = data.get("backend")
        path = aws_auth_backend_config_identity_path(backend)
        payload = encode(data, FIELDS)

        logger.debug("Writing AWS identity config to %r", path)
        api.write(client, path, payload, what="AWS auth identity config")
        data.set_id(path)
        logger.debug("Wrote AWS identity config to %r", path)

        self.read(client, data)

    def read(self, client: VaultClient, data: ResourceData) -> None:
        path = data.id
        try:
            backend = aws_auth_backend_config_identity_backend_from_path(path)
        except InvalidIdentifierError as e:
            raise type(e)(
                f"invalid path {path!r} for AWS auth identity config: {e}"
            ) from e

        logger.debug("Reading identity config %r from AWS auth backend", path)
        payload = api.read(client, path, what="AWS auth backend identity config")
        logger.debug("Read identity config %r from AWS auth backend", path)
        if payload is None:
            logger.warning(
                "AWS auth backend identity config %r not found, removing it from state",
                path,
            )
            data.set_id("")
            return

        decode(data, payload, FIELDS)
        data.set("backend", backend)

    def delete(self, client: VaultClient, data: ResourceData) -> None:
        logger.debug("Deleting AWS identity config %r from state", data.id)
