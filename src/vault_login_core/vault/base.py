"""Secret store client interface.

This module defines the SecretStoreClient protocol the orchestrator consumes.
VaultClient implements it; tests substitute lightweight fakes.
"""

from typing import Any, Protocol


class SecretStoreClient(Protocol):
    """Interface for the client used to renew tokens and read secrets."""

    @property
    def token(self) -> str | None:
        """The active credential."""
        ...

    def set_token(self, token: str) -> None:
        """Make ``token`` the active credential."""
        ...

    def clear_token(self) -> None:
        """Drop the active credential."""
        ...

    def clone(self) -> "SecretStoreClient":
        """Return an independent client for the same server, without a token."""
        ...

    async def renew_self(self, token: str, increment: int | None = None) -> dict[str, Any]:
        """Renew ``token`` on the secret store."""
        ...

    async def read(self, path: str) -> dict[str, Any]:
        """Read the secret at ``path`` with the active credential."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
