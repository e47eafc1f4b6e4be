"""JWT and Kubernetes login methods.

Both post a role and a JSON Web Token read from a local file; they differ in
their default mount and where the token comes from.
"""

from typing import Any

from vault_login_core.vault.client import VaultClient

from .base import LoginAuthMethod, read_credential_file, require_config_str

DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH = (
    "/var/run/secrets/kubernetes.io/serviceaccount/token"  # noqa: S105
)


class JWTAuthMethod(LoginAuthMethod):
    """Login with a JWT read from ``config.path``."""

    method_type = "jwt"

    def __init__(
        self,
        client: VaultClient,
        config: dict[str, Any],
        mount_path: str | None = None,
    ) -> None:
        super().__init__(client, config, mount_path)
        self.role = require_config_str(config, "role", self.method_type)
        self.jwt_path = require_config_str(config, "path", self.method_type)

    async def login_payload(self) -> tuple[dict[str, Any], dict[str, str]]:
        jwt = await read_credential_file(self.jwt_path, self.method_type)
        return {"role": self.role, "jwt": jwt}, {}


class KubernetesAuthMethod(LoginAuthMethod):
    """Login with the pod's service account token."""

    method_type = "kubernetes"

    def __init__(
        self,
        client: VaultClient,
        config: dict[str, Any],
        mount_path: str | None = None,
    ) -> None:
        super().__init__(client, config, mount_path)
        self.role = require_config_str(config, "role", self.method_type)
        self.token_path: str = (
            config.get("token_path") or DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH
        )

    async def login_payload(self) -> tuple[dict[str, Any], dict[str, str]]:
        jwt = await read_credential_file(self.token_path, self.method_type)
        return {"role": self.role, "jwt": jwt}, {}
