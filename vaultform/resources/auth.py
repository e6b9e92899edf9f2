"""
Auth method declarations: mounts and the AWS method's identity config.
"""

from typing import ClassVar, Literal

from pydantic import Field, field_validator

from vaultform.schema import ResourceModel


class AuthBackend(ResourceModel):
    """
    An enabled auth method mount.

    Example:
        AuthBackend(type="github", path="github-ci")
    """

    type_name: ClassVar[str] = "vault_auth_backend"
    computed_attributes: ClassVar[tuple[str, ...]] = ("accessor",)

    type: str = Field(
        ..., description="Name of the auth method type", json_schema_extra={"force_new": True}
    )
    path: str | None = Field(
        None,
        description="Path to mount the backend at; defaults to the type",
        json_schema_extra={"force_new": True},
    )
    description: str | None = Field(None, description="Description of the auth backend")
    local: bool = Field(
        False,
        description="Mark the mount as local (not replicated)",
        json_schema_extra={"force_new": True},
    )

    @field_validator("path")
    @classmethod
    def trim_path(cls, value: str | None) -> str | None:
        # standardise on no beginning or trailing slashes
        return value.strip("/") if value is not None else value

    @property
    def mount_path(self) -> str:
        return self.path or self.type


class AwsAuthBackendConfigIdentity(ResourceModel):
    """
    Identity alias settings of an AWS auth method mount.

    This is a singleton configuration object: it always exists while the
    mount does, so it can be overwritten but never deleted remotely.
    """

    type_name: ClassVar[str] = "vault_aws_auth_backend_config_identity"

    iam_alias: Literal["role_id", "unique_id", "full_arn"] = Field(
        "role_id",
        description="How to generate the identity alias when using the iam auth method.",
    )
    iam_metadata: set[str] | None = Field(
        None,
        description="The metadata to include on the token returned by the login endpoint.",
    )
    ec2_alias: Literal["role_id", "instance_id", "image_id"] = Field(
        "role_id",
        description="Configures how to generate the identity alias when using the ec2 auth method.",
    )
    ec2_metadata: set[str] | None = Field(
        None,
        description="The metadata to include on the token returned by the login endpoint.",
    )
    backend: str = Field(
        "aws",
        description="Unique name of the auth backend to configure.",
        json_schema_extra={"force_new": True},
    )

    @field_validator("backend")
    @classmethod
    def trim_backend(cls, value: str) -> str:
        # standardise on no beginning or trailing slashes
        return value.strip("/")
