"""ACL policy declaration."""

from typing import ClassVar

from pydantic import Field, field_validator

from vaultform.schema import ResourceModel


class Policy(ResourceModel):
    type_name: ClassVar[str] = "vault_policy"

    name: str = Field(..., description="Name of the policy", json_schema_extra={"force_new": True})
    policy: str = Field(..., description="The policy document in HCL or JSON")

    @field_validator("name")
    @classmethod
    def lower_name(cls, value: str) -> str:
        # Vault stores policy names lower-cased
        return value.lower()
