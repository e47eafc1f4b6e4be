"""Login method factory functions.

This module resolves the ``auto_auth.method`` configuration block into a
login method instance. The set of methods is closed: an unknown type is a
configuration error raised before any login is attempted.
"""

from vault_login_core.config import MethodConfig
from vault_login_core.exceptions import ConfigurationError
from vault_login_core.vault.client import VaultClient

from .approle import AppRoleAuthMethod
from .aws import AWSAuthMethod
from .base import AuthMethod
from .jwt import JWTAuthMethod, KubernetesAuthMethod
from .token import TokenAuthMethod

_METHODS: dict[str, type] = {
    "approle": AppRoleAuthMethod,
    "aws": AWSAuthMethod,
    "jwt": JWTAuthMethod,
    "kubernetes": KubernetesAuthMethod,
    "token": TokenAuthMethod,
}


class UnknownAuthMethodError(ConfigurationError):
    """Raised when an unknown auth method type is specified."""

    def __init__(self, method_type: str) -> None:
        """Initialize the unknown auth method error.

        Args:
            method_type: The unknown method type that was specified.
        """
        super().__init__(f"Unknown auth method {method_type!r}", "auto_auth.method.type")
        self.method_type = method_type


def list_auth_methods() -> list[str]:
    """List the supported auth method types."""
    return sorted(_METHODS)


def create_auth_method(method_config: MethodConfig, client: VaultClient) -> AuthMethod:
    """Create a login method instance.

    Args:
        method_config: The ``auto_auth.method`` block.
        client: Vault client the method logs in with.

    Returns:
        Configured login method.

    Raises:
        ConfigurationError: When the type is unknown or its config is invalid.
    """
    method_cls = _METHODS.get(method_config.type.lower())
    if method_cls is None:
        raise UnknownAuthMethodError(method_config.type)
    method: AuthMethod = method_cls(
        client, method_config.config, mount_path=method_config.mount_path
    )
    return method
