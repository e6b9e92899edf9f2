"""
Remote API client surface used by the adapters.

Adapters talk to Vault through the four logical-path calls that
``hvac.Client`` exposes. ``VaultClient`` names that surface so tests can hand
in the in-memory double instead of a live client.
"""

import logging
from typing import Any, Protocol, runtime_checkable

import hvac
from hvac import exceptions as vault_exceptions

from vaultform.errors import RemoteAPIError

logger = logging.getLogger(__name__)


@runtime_checkable
class VaultClient(Protocol):
    def read(self, path: str, wrap_ttl: str | None = None) -> Any: ...

    def write_data(
        self, path: str, *, data: dict[str, Any] | None = None, wrap_ttl: str | None = None
    ) -> Any: ...

    def delete(self, path: str) -> Any: ...

    def list(self, path: str) -> Any: ...


def response_data(response: Any) -> dict[str, Any] | None:
    """
    Return the ``data`` section of a Vault response.

    hvac hands back the decoded JSON body as a dict, or the raw HTTP
    response when Vault answers 204 No Content; the latter has no payload.
    """
    if not isinstance(response, dict):
        return None
    data = response.get("data")
    if data is None:
        return None
    return data


def _status_code(error: Exception) -> int | None:
    if isinstance(error, vault_exceptions.InvalidRequest):
        return 400
    if isinstance(error, vault_exceptions.Forbidden):
        return 403
    if isinstance(error, vault_exceptions.InvalidPath):
        return 404
    if isinstance(error, vault_exceptions.VaultDown):
        return 503
    if isinstance(error, vault_exceptions.InternalServerError):
        return 500
    return None


def read(client: VaultClient, path: str, *, what: str) -> dict[str, Any] | None:
    """
    Read ``path`` and return its data, or None when nothing is there.

    Args:
        client: Authenticated client
        path: Logical Vault path
        what: Human description used in error messages

    Raises:
        RemoteAPIError: The request failed for any reason other than not found
    """
    try:
        response = client.read(path)
    except vault_exceptions.InvalidPath:
        return None
    except (vault_exceptions.VaultError, OSError) as e:
        raise RemoteAPIError(
            f"error reading {what} {path!r}: {e}",
            path=path,
            operation="read",
            status_code=_status_code(e),
        ) from e
    return response_data(response)


def write(
    client: VaultClient, path: str, data: dict[str, Any], *, what: str
) -> dict[str, Any] | None:
    """Write ``data`` to ``path`` and return the response data, if any."""
    try:
        response = client.write_data(path, data=data)
    except (vault_exceptions.VaultError, OSError) as e:
        raise RemoteAPIError(
            f"error writing {what} {path!r}: {e}",
            path=path,
            operation="write",
            status_code=_status_code(e),
        ) from e
    return response_data(response)


def delete(client: VaultClient, path: str, *, what: str) -> None:
    """Delete ``path``; a path that is already gone counts as deleted."""
    try:
        client.delete(path)
    except vault_exceptions.InvalidPath:
        logger.debug("%s %r already deleted", what, path)
    except (vault_exceptions.VaultError, OSError) as e:
        raise RemoteAPIError(
            f"error deleting {what} {path!r}: {e}",
            path=path,
            operation="delete",
            status_code=_status_code(e),
        ) from e


def create_client(
    address: str,
    token: str | None = None,
    namespace: str | None = None,
    verify: bool | str = True,
    timeout: int = 30,
) -> hvac.Client:
    """Build an hvac client; authentication is the caller's concern."""
    return hvac.Client(
        url=address,
        token=token,
        namespace=namespace,
        verify=verify,
        timeout=timeout,
    )
