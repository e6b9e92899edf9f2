"""
Exception hierarchy for vaultform.

Every failure an adapter or the engine surfaces is a VaultformError, so the
CLI can map it to an exit code. Not-found on read is deliberately absent:
a missing remote object is reported by clearing the resource ID.
"""


class VaultformError(Exception):
    """Base exception for vaultform."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ConfigError(VaultformError):
    """A declaration or provider configuration failed validation."""


class RemoteAPIError(VaultformError):
    """
    A call against the Vault API failed.

    Carries the path and the operation that failed; the underlying client
    exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str,
        operation: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.operation = operation
        self.status_code = status_code


class ResourceConflictError(VaultformError):
    """
    Creating a resource collided with one that already exists remotely.

    Raised instead of a generic validation error so the user knows the
    existing object should be imported rather than recreated.
    """

    def __init__(self, message: str, *, existing_id: str | None = None) -> None:
        super().__init__(message)
        self.existing_id = existing_id


class InvalidIdentifierError(VaultformError):
    """A stored identifier does not have the shape its resource expects."""


class PathNoMatchError(InvalidIdentifierError):
    pass


class PathMatchCountError(InvalidIdentifierError):
    pass


class PlanError(VaultformError):
    """The declared resources cannot be ordered or resolved."""


class StateError(VaultformError):
    pass


EXIT_CODES: dict[type[VaultformError], int] = {
    VaultformError: 1,
    ConfigError: 2,
    RemoteAPIError: 3,
    ResourceConflictError: 4,
    InvalidIdentifierError: 5,
    PlanError: 6,
    StateError: 7,
}


def get_exit_code(exc: VaultformError) -> int:
    for cls in exc.__class__.__mro__:
        if cls in EXIT_CODES:
            return EXIT_CODES[cls]
    return 1


__all__ = [
    "VaultformError",
    "ConfigError",
    "RemoteAPIError",
    "ResourceConflictError",
    "InvalidIdentifierError",
    "PathNoMatchError",
    "PathMatchCountError",
    "PlanError",
    "StateError",
    "EXIT_CODES",
    "get_exit_code",
]
