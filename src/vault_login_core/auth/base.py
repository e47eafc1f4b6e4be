"""Base login method interface and shared login plumbing.

A login method proves the caller's identity to Vault and returns a fresh
session token. Most methods only differ in the payload they post to
``<mount_path>/login``; LoginAuthMethod implements the shared request and
response handling.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiofiles

from vault_login_core.cache.token import CachedToken
from vault_login_core.exceptions import (
    ConfigurationError,
    LoginError,
    VaultRequestError,
)
from vault_login_core.vault.client import VaultClient


@dataclass(frozen=True)
class AuthToken:
    """A token issued by a successful login."""

    token: str = field(repr=False)
    lease_duration: int
    renewable: bool
    auth_method: str

    def to_cached(self, now: float | None = None) -> CachedToken:
        """Build the record sinks persist, anchored at the given issue time."""
        issued_at = int(time.time() if now is None else now)
        return CachedToken(
            token=self.token,
            expiration=issued_at + self.lease_duration,
            renewable=self.renewable,
            auth_method=self.auth_method,
        )


class AuthMethod(Protocol):
    """Interface for login methods."""

    method_type: str

    async def authenticate(self) -> AuthToken:
        """Log in to Vault and return the issued token.

        Raises:
            LoginError: When Vault rejects the login or the identity
                material cannot be gathered.
        """
        ...


def auth_token_from_response(response: dict[str, Any], method_type: str) -> AuthToken:
    """Extract the issued token from a Vault login response."""
    auth = response.get("auth")
    if not isinstance(auth, dict) or not auth.get("client_token"):
        raise LoginError(
            f"{method_type} login response did not contain a client token",
            method_type,
        )
    return AuthToken(
        token=auth["client_token"],
        lease_duration=int(auth.get("lease_duration") or 0),
        renewable=bool(auth.get("renewable", False)),
        auth_method=method_type,
    )


def require_config_str(config: dict[str, Any], key: str, method_type: str) -> str:
    """Return a required string option of the method configuration."""
    value = config.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(
            f"'{key}' is required for the {method_type} auth method",
            f"auto_auth.method.config.{key}",
        )
    return value


async def read_credential_file(path: str, method_type: str) -> str:
    """Read identity material (a JWT, a role ID...) from a local file."""
    try:
        async with aiofiles.open(path, encoding="utf-8") as f:
            value = (await f.read()).strip()
    except (OSError, UnicodeDecodeError) as e:
        raise LoginError(f"Error reading {path}: {e}", method_type) from e
    if not value:
        raise LoginError(f"{path} is empty", method_type)
    return value


class LoginAuthMethod:
    """Base class for methods that post a payload to ``<mount_path>/login``."""

    method_type = ""

    def __init__(
        self,
        client: VaultClient,
        config: dict[str, Any],
        mount_path: str | None = None,
    ) -> None:
        """Initialize the login method.

        Args:
            client: Vault client used for the login request. It must not be
                the orchestrator's shared client.
            config: The ``auto_auth.method.config`` block.
            mount_path: Auth mount. Defaults to ``auth/<method_type>``.
        """
        self.client = client
        self.config = config
        self.mount_path = (mount_path or f"auth/{self.method_type}").strip("/")

    async def login_payload(self) -> tuple[dict[str, Any], dict[str, str]]:
        """Return the login request body and any extra headers."""
        raise NotImplementedError

    async def authenticate(self) -> AuthToken:
        payload, headers = await self.login_payload()
        try:
            response = await self.client.login(self.mount_path, payload, headers)
        except VaultRequestError as e:
            raise LoginError(
                f"{self.method_type} login at {self.mount_path} failed: {e.message}",
                self.method_type,
            ) from e
        return auth_token_from_response(response, self.method_type)
