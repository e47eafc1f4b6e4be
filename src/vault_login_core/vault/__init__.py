"""Vault client and secret exchange."""

from .base import SecretStoreClient
from .client import VaultClient
from .factory import create_vault_client, create_vault_client_from_config
from .secret import Credentials, get_credentials

__all__ = [
    "Credentials",
    "SecretStoreClient",
    "VaultClient",
    "create_vault_client",
    "create_vault_client_from_config",
    "get_credentials",
]
