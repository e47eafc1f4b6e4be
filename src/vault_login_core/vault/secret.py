"""Secret exchange.

Reads the configured secret with the client's active credential and turns
the payload into registry credentials. Both KV version 1 payloads and the
nested ``data`` map of KV version 2 are accepted.
"""

from dataclasses import dataclass, field
from typing import Any

from vault_login_core.exceptions import ExchangeError, VaultRequestError

from .base import SecretStoreClient


@dataclass(frozen=True)
class Credentials:
    """Registry credentials stored in Vault."""

    username: str
    password: str = field(repr=False)


def _secret_data(response: dict[str, Any], path: str) -> dict[str, Any]:
    data = response.get("data")
    if not isinstance(data, dict) or not data:
        raise ExchangeError(f"No secret found at path {path!r}", path)

    nested = data.get("data")
    if isinstance(nested, dict) and isinstance(data.get("metadata"), dict):
        return nested
    return data


async def get_credentials(path: str, client: SecretStoreClient) -> Credentials:
    """Exchange the client's active credential for the registry credentials.

    Args:
        path: Secret path, e.g. ``secret/docker/creds``.
        client: Client whose active credential is used for the read.

    Raises:
        ExchangeError: When the read fails or the payload is not a
            username/password pair.
    """
    try:
        response = await client.read(path)
    except VaultRequestError as e:
        raise ExchangeError(f"Error reading secret {path!r}: {e.message}", path) from e

    data = _secret_data(response, path)

    username = data.get("username")
    if not isinstance(username, str) or not username:
        raise ExchangeError(
            f"No username found in secret {path!r} or it is not a string", path
        )

    password = data.get("password")
    if not isinstance(password, str) or not password:
        raise ExchangeError(
            f"No password found in secret {path!r} or it is not a string", path
        )

    return Credentials(username=username, password=password)
