"""Vault client factory functions.

Environment Variables:
    VAULT_ADDR: Vault server address. Default: "https://127.0.0.1:8200"
    VAULT_CACERT: Path to a CA bundle used to verify the server certificate.
    VAULT_SKIP_VERIFY: Disable TLS verification when set to a true value.
    VAULT_CLIENT_TIMEOUT: Per-request timeout in seconds. Default: "5"
"""

import os
import ssl

from vault_login_core.config import VaultConfig
from vault_login_core.exceptions import ConfigurationError

from .client import DEFAULT_ADDRESS, DEFAULT_TIMEOUT, VaultClient

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float) -> float:
    """Get float value from environment variable."""
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}", key) from e


def create_vault_client(
    address: str | None = None,
    ca_cert: str | None = None,
    tls_skip_verify: bool | None = None,
    timeout: float | None = None,
) -> VaultClient:
    """Create a Vault client.

    Args:
        address: Vault address. If None, uses VAULT_ADDR or the default.
        ca_cert: CA bundle path. If None, uses VAULT_CACERT.
        tls_skip_verify: Disable TLS verification. If None, uses VAULT_SKIP_VERIFY.
        timeout: Request timeout. If None, uses VAULT_CLIENT_TIMEOUT or 5 seconds.

    Returns:
        Configured Vault client without an active credential.
    """
    if address is None:
        address = os.getenv("VAULT_ADDR") or DEFAULT_ADDRESS
    if ca_cert is None:
        ca_cert = os.getenv("VAULT_CACERT") or None
    if tls_skip_verify is None:
        tls_skip_verify = os.getenv("VAULT_SKIP_VERIFY", "").lower() in _TRUE_VALUES
    if timeout is None:
        timeout = _get_env_float("VAULT_CLIENT_TIMEOUT", DEFAULT_TIMEOUT)

    verify: bool | ssl.SSLContext = True
    if tls_skip_verify:
        verify = False
    elif ca_cert:
        verify = ssl.create_default_context(cafile=ca_cert)

    return VaultClient(address=address, timeout=timeout, verify=verify)


def create_vault_client_from_config(vault_config: VaultConfig) -> VaultClient:
    """Create a Vault client from the ``vault`` configuration block."""
    return create_vault_client(
        address=vault_config.address,
        ca_cert=vault_config.ca_cert,
        tls_skip_verify=vault_config.tls_skip_verify,
    )
