"""Static token login method.

No login request is made: the configured token is validated with a
``lookup-self`` call, which also reports its remaining TTL.
"""

from typing import Any

from vault_login_core.exceptions import ConfigurationError, LoginError, VaultRequestError
from vault_login_core.vault.client import VaultClient

from .base import AuthToken, read_credential_file


class TokenAuthMethod:
    """Use a pre-issued Vault token.

    Config:
        token: The token itself, or
        token_file_path: A file holding the token.
    """

    method_type = "token"

    def __init__(
        self,
        client: VaultClient,
        config: dict[str, Any],
        mount_path: str | None = None,
    ) -> None:
        _ = mount_path  # lookup-self is not mounted
        self.client = client
        token = config.get("token")
        token_file_path = config.get("token_file_path")
        if token:
            self._token_source: str = token
            self._from_file = False
        elif token_file_path:
            self._token_source = token_file_path
            self._from_file = True
        else:
            raise ConfigurationError(
                "'token' or 'token_file_path' is required for the token auth method",
                "auto_auth.method.config.token",
            )

    async def _resolve_token(self) -> str:
        if self._from_file:
            return await read_credential_file(self._token_source, self.method_type)
        return self._token_source

    async def authenticate(self) -> AuthToken:
        token = await self._resolve_token()
        try:
            response = await self.client.lookup_self(token)
        except VaultRequestError as e:
            raise LoginError(
                f"token lookup failed: {e.message}", self.method_type
            ) from e

        data = response.get("data")
        if not isinstance(data, dict):
            raise LoginError("token lookup returned no data", self.method_type)

        return AuthToken(
            token=token,
            lease_duration=int(data.get("ttl") or 0),
            renewable=bool(data.get("renewable", False)),
            auth_method=self.method_type,
        )
