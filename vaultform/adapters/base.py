"""
Adapter base class shared by every resource kind.

An adapter turns the four lifecycle calls (create, read, update, delete)
for one resource kind into Vault API requests. Adapters hold no client and
no per-instance state: the client handle and the instance's ResourceData are
passed into every call.
"""

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from vaultform.client import VaultClient, read as read_path
from vaultform.schema import ResourceData, ResourceModel

logger = logging.getLogger(__name__)


class ResourceAdapter(ABC):
    """
    Base class for resource CRUD adapters.

    Subclasses set ``model`` and implement ``create``, ``read`` and
    ``delete``. ``update`` defaults to ``create`` because most Vault
    endpoints are create-or-replace writes.
    """

    model: ClassVar[type[ResourceModel]]

    description: ClassVar[str] = "resource"
    """Human name used in log and error messages"""

    @property
    def type_name(self) -> str:
        return self.model.type_name

    def new_data(
        self,
        config: ResourceModel | None = None,
        attributes: dict | None = None,
        id: str = "",
    ) -> ResourceData:
        return ResourceData(self.model, config=config, attributes=attributes, id=id)

    @abstractmethod
    def create(self, client: VaultClient, data: ResourceData) -> None:
        """
        Create the remote object from ``data.config``.

        Sets ``data.id`` and refreshes ``data.attributes`` on success.
        """
        pass

    def update(self, client: VaultClient, data: ResourceData) -> None:
        """Write the full declared field set over the existing object."""
        self.create(client, data)

    @abstractmethod
    def read(self, client: VaultClient, data: ResourceData) -> None:
        """
        Refresh ``data.attributes`` from the remote object at ``data.id``.

        A missing remote object is not an error: the ID is cleared so the
        caller drops the instance from state.
        """
        pass

    @abstractmethod
    def delete(self, client: VaultClient, data: ResourceData) -> None:
        """Delete the remote object; deleting something already gone succeeds."""
        pass

    def read_path(self, data: ResourceData) -> str:
        """Path whose presence tells whether the instance exists."""
        return data.id

    def exists(self, client: VaultClient, data: ResourceData) -> bool:
        """
        Legacy existence check: True when the remote object has a payload.

        Unlike read, this neither refreshes attributes nor clears the ID.
        """
        path = self.read_path(data)
        logger.debug("Checking if %s %r exists", self.description, path)
        payload = read_path(
            client, path, what=f"existence of {self.description}"
        )
        logger.debug("Checked if %s %r exists", self.description, path)
        return payload is not None

    def import_state(self, client: VaultClient, import_id: str) -> ResourceData:
        """
        Adopt an existing remote object by ID (passthrough import).

        Returns the refreshed data; its ID is empty when nothing exists at
        ``import_id``.
        """
        data = self.new_data(id=import_id)
        self.read(client, data)
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type='{self.type_name}')"
