"""AppRole login method."""

from typing import Any

from vault_login_core.vault.client import VaultClient

from .base import LoginAuthMethod, read_credential_file, require_config_str


class AppRoleAuthMethod(LoginAuthMethod):
    """Login with a role ID and secret ID read from local files.

    Config:
        role_id_file_path: File holding the role ID (required).
        secret_id_file_path: File holding the secret ID. Optional for roles
            created with ``bind_secret_id=false``.
    """

    method_type = "approle"

    def __init__(
        self,
        client: VaultClient,
        config: dict[str, Any],
        mount_path: str | None = None,
    ) -> None:
        super().__init__(client, config, mount_path)
        self.role_id_file_path = require_config_str(
            config, "role_id_file_path", self.method_type
        )
        self.secret_id_file_path: str | None = config.get("secret_id_file_path")

    async def login_payload(self) -> tuple[dict[str, Any], dict[str, str]]:
        role_id = await read_credential_file(self.role_id_file_path, self.method_type)
        payload = {"role_id": role_id}
        if self.secret_id_file_path:
            payload["secret_id"] = await read_credential_file(
                self.secret_id_file_path, self.method_type
            )
        return payload, {}
