"""ACL policy adapter."""

import logging

from vaultform import client as api
from vaultform.adapters.base import ResourceAdapter
from vaultform.client import VaultClient
from vaultform.paths import policy_path
from vaultform.resources.policy import Policy
from vaultform.schema import ResourceData, encode

logger = logging.getLogger(__name__)


class PolicyAdapter(ResourceAdapter):
    """Policies are addressed by name; the ID is the policy name."""

    model = Policy
    description = "policy"

    def create(self, client: VaultClient, data: ResourceData) -> None:
        name = data.get("name")
        path = policy_path(name)
        logger.debug("Writing policy %r", name)
        api.write(client, path, encode(data, ("policy",)), what="policy")
        data.set_id(name)
        logger.debug("Wrote policy %r", name)
        self.read(client, data)

    def read_path(self, data: ResourceData) -> str:
        return policy_path(data.id)

    def read(self, client: VaultClient, data: ResourceData) -> None:
        payload = api.read(client, policy_path(data.id), what="policy")
        if payload is None:
            logger.warning("Policy %r not found, removing it from state", data.id)
            data.set_id("")
            return
        data.set("name", payload.get("name", data.id))
        data.set("policy", payload.get("policy"))

    def delete(self, client: VaultClient, data: ResourceData) -> None:
        logger.debug("Deleting policy %r", data.id)
        api.delete(client, policy_path(data.id), what="policy")
