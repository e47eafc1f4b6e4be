"""Cached Vault token record.

This module defines the CachedToken record that sinks persist between
invocations, its serialized form and the time-based predicates used to
decide whether a cached token should be renewed.
"""

import json
import time
from dataclasses import dataclass, field

from vault_login_core.exceptions import CacheReadError

# Renewal is only attempted this many seconds before expiry (10 minutes)
GRACE_PERIOD_SECONDS = 600


@dataclass(frozen=True)
class CachedToken:
    """A Vault token read back from a sink.

    Attributes:
        token: The Vault token. Never logged.
        expiration: Unix timestamp at which the token stops being valid.
        renewable: Whether Vault allows the token to be renewed.
        auth_method: Type tag of the login method that issued the token.
    """

    token: str = field(repr=False)
    expiration: int
    renewable: bool
    auth_method: str | None = field(default=None, compare=False)

    def expired(self, now: float | None = None) -> bool:
        """Return True if the expiration timestamp has been reached."""
        current = time.time() if now is None else now
        return current >= self.expiration

    def eligible_for_renewal(self, now: float | None = None) -> bool:
        """Return True if the token is renewable and inside the grace period.

        The grace period is the half-open window
        ``[expiration - GRACE_PERIOD_SECONDS, expiration)``.
        """
        current = time.time() if now is None else now
        window_start = self.expiration - GRACE_PERIOD_SECONDS
        return self.renewable and window_start <= current < self.expiration

    def to_json(self) -> str:
        """Serialize the token in the form sinks store it."""
        return json.dumps(
            {
                "token": self.token,
                "expiration": self.expiration,
                "renewable": self.renewable,
            }
        )

    @classmethod
    def from_json(cls, raw: str, auth_method: str | None = None) -> "CachedToken":
        """Parse a token previously written by a sink.

        Raises:
            CacheReadError: When the data is not a well-formed token record.
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheReadError("cached token is not valid JSON") from e

        if not isinstance(data, dict):
            raise CacheReadError("cached token is not a JSON object")

        token = data.get("token")
        expiration = data.get("expiration")
        renewable = data.get("renewable", False)

        if not isinstance(token, str) or not token:
            raise CacheReadError("cached token has no 'token' string")
        # Sent verbatim in the X-Vault-Token header
        if not (token.isascii() and token.isprintable()):
            raise CacheReadError(
                "cached token contains non-printable or non-ASCII characters"
            )
        # bool is a subclass of int
        if not isinstance(expiration, int) or isinstance(expiration, bool):
            raise CacheReadError("cached token has no integer 'expiration'")
        if not isinstance(renewable, bool):
            raise CacheReadError("cached token 'renewable' is not a boolean")

        return cls(
            token=token,
            expiration=expiration,
            renewable=renewable,
            auth_method=auth_method,
        )
