"""
Database secrets engine declarations.
"""

from typing import ClassVar

from pydantic import Field, field_validator

from vaultform.schema import ResourceModel


class DatabaseSecretBackendRole(ResourceModel):
    """
    A role of a database secrets engine mount.

    Addressed as ``<backend>/roles/<name>``; that composite key is also the
    import ID.

    Example:
        DatabaseSecretBackendRole(
            backend="postgres",
            name="readonly",
            db_name="main",
            creation_statements=["CREATE ROLE \\"{{name}}\\" ..."],
            default_ttl=3600,
        )
    """

    type_name: ClassVar[str] = "vault_database_secret_backend_role"

    name: str = Field(..., description="Unique name for the role", json_schema_extra={"force_new": True})
    backend: str = Field(
        ...,
        description="The path of the database secrets engine mount",
        json_schema_extra={"force_new": True},
    )
    db_name: str = Field(..., description="Database connection the role uses")
    creation_statements: list[str] = Field(
        ..., description="Statements executed to create and configure a user"
    )
    revocation_statements: list[str] | None = Field(
        None, description="Statements executed to revoke a user"
    )
    rollback_statements: list[str] | None = Field(
        None, description="Statements executed to roll back a failed creation"
    )
    renew_statements: list[str] | None = Field(
        None, description="Statements executed to renew a user"
    )
    default_ttl: int | None = Field(None, description="Default lease TTL in seconds")
    max_ttl: int | None = Field(None, description="Maximum lease TTL in seconds")

    @field_validator("backend")
    @classmethod
    def trim_backend(cls, value: str) -> str:
        return value.strip("/")
