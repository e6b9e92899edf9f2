"""
Identity store declarations: entities and the aliases bound to them.
"""

from typing import ClassVar

from pydantic import Field

from vaultform.schema import ResourceModel


class IdentityEntity(ResourceModel):
    """A canonical identity with policies and metadata."""

    type_name: ClassVar[str] = "vault_identity_entity"

    name: str | None = Field(None, description="Name of the entity; generated when omitted")
    policies: set[str] | None = Field(None, description="Policies tied to the entity")
    metadata: dict[str, str] | None = Field(None, description="Metadata stored with the entity")
    disabled: bool = Field(False, description="Whether the entity is disabled")
    external_policies: bool = Field(
        False,
        description="Manage policies outside this resource; policies are then not written",
    )


class IdentityEntityAlias(ResourceModel):
    """
    Binds an auth method identity (mount accessor + name) to one entity.

    Every write sends the full target (name, mount_accessor, canonical_id).
    custom_metadata is sent only when declared.
    """

    type_name: ClassVar[str] = "vault_identity_entity_alias"

    name: str = Field(..., description="Name of the alias")
    mount_accessor: str = Field(..., description="Mount accessor of the auth backend")
    canonical_id: str = Field(..., description="ID of the entity the alias belongs to")
    custom_metadata: dict[str, str] | None = Field(
        None, description="Custom metadata stored on the alias"
    )
