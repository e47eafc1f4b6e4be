"""Core of the Vault-backed Docker credential helper.

The Helper looks up registry credentials stored in Vault, reusing a cached
Vault token when possible and logging in again when not.
"""

from .exceptions import CredentialsNotFoundError
from .helper import DEFAULT_TIMEOUT, Helper, HelperOptions
from .vault.secret import Credentials

__all__ = [
    "DEFAULT_TIMEOUT",
    "Credentials",
    "CredentialsNotFoundError",
    "Helper",
    "HelperOptions",
]
