"""Vault HTTP API client.

This module provides the VaultClient class, a small asynchronous client for
the parts of the Vault HTTP API used by the credential helper: logging in,
looking up and renewing tokens and reading secrets. The client holds one
"active credential" which is sent with secret reads.
"""

import ssl
from types import TracebackType
from typing import Any

import httpx

from vault_login_core.exceptions import VaultRequestError

DEFAULT_ADDRESS = "https://127.0.0.1:8200"
DEFAULT_TIMEOUT = 5.0


class VaultClient:
    """Asynchronous Vault client built on httpx.AsyncClient."""

    def __init__(
        self,
        address: str = DEFAULT_ADDRESS,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool | ssl.SSLContext = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Vault client.

        Args:
            address: Base address of the Vault server.
            token: Optional initial active credential.
            timeout: Per-request timeout in seconds.
            verify: TLS verification flag or SSL context.
            transport: Optional httpx transport (used by tests).
        """
        self.address = address.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._verify = verify
        self._transport = transport
        self._http = httpx.AsyncClient(
            base_url=self.address,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    @property
    def token(self) -> str | None:
        """The active credential."""
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None

    def clone(self) -> "VaultClient":
        """Return a client for the same server with no active credential."""
        return VaultClient(
            address=self.address,
            timeout=self._timeout,
            verify=self._verify,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        request_headers = dict(headers or {})
        if token:
            request_headers["X-Vault-Token"] = token

        url = f"/v1/{path.lstrip('/')}"
        try:
            response = await self._http.request(
                method, url, json=json, headers=request_headers
            )
        except httpx.HTTPError as e:
            raise VaultRequestError(f"{method} {url} failed: {e}") from e
        except (UnicodeEncodeError, httpx.InvalidURL) as e:
            # Raised while building the request, e.g. a token that is not ASCII
            raise VaultRequestError(
                f"{method} {url} could not be sent: {type(e).__name__}"
            ) from e

        if response.is_error:
            errors = _response_errors(response)
            detail = "; ".join(errors) if errors else response.reason_phrase
            raise VaultRequestError(
                f"{method} {url} returned {response.status_code}: {detail}",
                status_code=response.status_code,
                errors=errors,
            )

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return {}

        try:
            body = response.json()
        except ValueError as e:
            raise VaultRequestError(
                f"{method} {url} returned invalid JSON",
                status_code=response.status_code,
            ) from e
        if not isinstance(body, dict):
            raise VaultRequestError(
                f"{method} {url} returned unexpected JSON",
                status_code=response.status_code,
            )
        return body

    async def read(self, path: str) -> dict[str, Any]:
        """Read a secret with the active credential."""
        return await self._request("GET", path, token=self._token)

    async def login(
        self,
        mount_path: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Post a login request to ``<mount_path>/login``."""
        return await self._request(
            "POST", f"{mount_path.strip('/')}/login", json=payload, headers=headers
        )

    async def lookup_self(self, token: str) -> dict[str, Any]:
        """Return the properties of the given token."""
        return await self._request("GET", "auth/token/lookup-self", token=token)

    async def renew_self(self, token: str, increment: int | None = None) -> dict[str, Any]:
        """Renew the given token, optionally requesting a new TTL in seconds."""
        payload = {"increment": increment} if increment else {}
        return await self._request(
            "POST", "auth/token/renew-self", token=token, json=payload
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "VaultClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


def _response_errors(response: httpx.Response) -> list[str]:
    """Return the ``errors`` list of a Vault error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return []
    errors = body.get("errors") if isinstance(body, dict) else None
    if not isinstance(errors, list):
        return []
    return [str(error) for error in errors]
