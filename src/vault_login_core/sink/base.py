"""Base sink interface.

A sink durably stores a freshly issued token so later invocations can reuse
it instead of logging in again.
"""

from typing import Protocol

from vault_login_core.cache.token import CachedToken


class Sink(Protocol):
    """Interface for token sinks."""

    sink_type: str

    async def write(self, token: CachedToken) -> None:
        """Persist a token.

        Raises:
            PersistError: When the token could not be written.
        """
        ...

    async def read(self) -> CachedToken | None:
        """Return the cached token, or None when the sink is empty.

        Raises:
            CacheReadError: When the sink holds unreadable or malformed data.
        """
        ...

    def describe(self) -> str:
        """Return a short human-readable description used in log records."""
        ...
