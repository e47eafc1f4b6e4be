"""Tests for the login methods and the login method factory."""

import base64
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.credentials import Credentials as BotoCredentials

from vault_login_core.auth import (
    AppRoleAuthMethod,
    AWSAuthMethod,
    JWTAuthMethod,
    KubernetesAuthMethod,
    TokenAuthMethod,
    UnknownAuthMethodError,
    create_auth_method,
    get_iam_auth_elements,
    list_auth_methods,
)
from vault_login_core.auth.aws import IAM_SERVER_ID_HEADER, STS_REQUEST_BODY
from vault_login_core.auth.base import read_credential_file
from vault_login_core.config import MethodConfig
from vault_login_core.exceptions import (
    ConfigurationError,
    LoginError,
    VaultRequestError,
)

LOGIN_RESPONSE = {
    "auth": {"client_token": "hvs.new", "lease_duration": 2764800, "renewable": True}
}


@pytest.fixture
def vault_client() -> MagicMock:
    """Create a mock Vault client that accepts every login."""
    client = MagicMock()
    client.login = AsyncMock(return_value=LOGIN_RESPONSE)
    client.lookup_self = AsyncMock(
        return_value={"data": {"ttl": 600, "renewable": False}}
    )
    return client


def write_file(directory: str, name: str, content: str) -> str:
    path = Path(directory) / name
    path.write_text(content)
    return str(path)


def decode(value: str) -> str:
    return base64.b64decode(value).decode()


class TestAppRoleAuthMethod:
    """Test the AppRole login method."""

    @pytest.mark.asyncio
    async def test_login(self, vault_client: MagicMock, temp_dir: str) -> None:
        method = AppRoleAuthMethod(
            vault_client,
            {
                "role_id_file_path": write_file(temp_dir, "role_id", "my-role\n"),
                "secret_id_file_path": write_file(temp_dir, "secret_id", "my-secret"),
            },
        )

        token = await method.authenticate()

        vault_client.login.assert_awaited_once_with(
            "auth/approle", {"role_id": "my-role", "secret_id": "my-secret"}, {}
        )
        assert token.token == "hvs.new"
        assert token.lease_duration == 2764800
        assert token.renewable is True
        assert token.auth_method == "approle"

    @pytest.mark.asyncio
    async def test_secret_id_optional(
        self, vault_client: MagicMock, temp_dir: str
    ) -> None:
        method = AppRoleAuthMethod(
            vault_client,
            {"role_id_file_path": write_file(temp_dir, "role_id", "my-role")},
            mount_path="/auth/custom-approle/",
        )

        await method.authenticate()

        vault_client.login.assert_awaited_once_with(
            "auth/custom-approle", {"role_id": "my-role"}, {}
        )

    def test_role_id_required(self, vault_client: MagicMock) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            AppRoleAuthMethod(vault_client, {})
        assert exc_info.value.component == "auto_auth.method.config.role_id_file_path"

    @pytest.mark.asyncio
    async def test_unreadable_role_id(self, vault_client: MagicMock) -> None:
        method = AppRoleAuthMethod(
            vault_client, {"role_id_file_path": "/nonexistent/role_id"}
        )
        with pytest.raises(LoginError):
            await method.authenticate()
        vault_client.login.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejected_login(self, vault_client: MagicMock, temp_dir: str) -> None:
        vault_client.login.side_effect = VaultRequestError(
            "invalid role ID", 400, ["invalid role ID"]
        )
        method = AppRoleAuthMethod(
            vault_client, {"role_id_file_path": write_file(temp_dir, "r", "x")}
        )

        with pytest.raises(LoginError) as exc_info:
            await method.authenticate()
        assert exc_info.value.method == "approle"

    @pytest.mark.asyncio
    async def test_response_without_token(
        self, vault_client: MagicMock, temp_dir: str
    ) -> None:
        vault_client.login.return_value = {"auth": None}
        method = AppRoleAuthMethod(
            vault_client, {"role_id_file_path": write_file(temp_dir, "r", "x")}
        )

        with pytest.raises(LoginError, match="client token"):
            await method.authenticate()


class TestJWTAuthMethods:
    """Test the JWT and Kubernetes login methods."""

    @pytest.mark.asyncio
    async def test_jwt_login(self, vault_client: MagicMock, temp_dir: str) -> None:
        method = JWTAuthMethod(
            vault_client,
            {"role": "ci", "path": write_file(temp_dir, "jwt", "eyJ.payload.sig\n")},
        )

        token = await method.authenticate()

        vault_client.login.assert_awaited_once_with(
            "auth/jwt", {"role": "ci", "jwt": "eyJ.payload.sig"}, {}
        )
        assert token.auth_method == "jwt"

    def test_jwt_requires_path(self, vault_client: MagicMock) -> None:
        with pytest.raises(ConfigurationError):
            JWTAuthMethod(vault_client, {"role": "ci"})

    @pytest.mark.asyncio
    async def test_kubernetes_login(self, vault_client: MagicMock, temp_dir: str) -> None:
        method = KubernetesAuthMethod(
            vault_client,
            {"role": "app", "token_path": write_file(temp_dir, "sa", "k8s-jwt")},
        )

        await method.authenticate()

        vault_client.login.assert_awaited_once_with(
            "auth/kubernetes", {"role": "app", "jwt": "k8s-jwt"}, {}
        )

    def test_kubernetes_default_token_path(self, vault_client: MagicMock) -> None:
        method = KubernetesAuthMethod(vault_client, {"role": "app"})
        assert method.token_path == "/var/run/secrets/kubernetes.io/serviceaccount/token"


class TestTokenAuthMethod:
    """Test the static token login method."""

    @pytest.mark.asyncio
    async def test_token_from_config(self, vault_client: MagicMock) -> None:
        method = TokenAuthMethod(vault_client, {"token": "hvs.static"})

        token = await method.authenticate()

        vault_client.lookup_self.assert_awaited_once_with("hvs.static")
        vault_client.login.assert_not_awaited()
        assert token.token == "hvs.static"
        assert token.lease_duration == 600
        assert token.renewable is False

    @pytest.mark.asyncio
    async def test_token_from_file(self, vault_client: MagicMock, temp_dir: str) -> None:
        method = TokenAuthMethod(
            vault_client, {"token_file_path": write_file(temp_dir, "t", "hvs.file\n")}
        )

        token = await method.authenticate()

        assert token.token == "hvs.file"

    @pytest.mark.asyncio
    async def test_token_file_read_on_each_login(
        self, vault_client: MagicMock, temp_dir: str
    ) -> None:
        """The file is read when logging in, so a rotated token is picked up."""
        path = str(Path(temp_dir) / "t")
        method = TokenAuthMethod(vault_client, {"token_file_path": path})

        Path(path).write_text("hvs.first")
        first = await method.authenticate()
        Path(path).write_text("hvs.rotated")
        second = await method.authenticate()

        assert (first.token, second.token) == ("hvs.first", "hvs.rotated")

    @pytest.mark.asyncio
    async def test_static_token_wins_over_file(self, vault_client: MagicMock) -> None:
        method = TokenAuthMethod(
            vault_client,
            {"token": "hvs.static", "token_file_path": "/nonexistent/token"},
        )

        token = await method.authenticate()

        assert token.token == "hvs.static"

    @pytest.mark.asyncio
    async def test_missing_token_file(self, vault_client: MagicMock) -> None:
        method = TokenAuthMethod(vault_client, {"token_file_path": "/nonexistent/t"})

        with pytest.raises(LoginError) as exc_info:
            await method.authenticate()
        assert exc_info.value.method == "token"
        vault_client.lookup_self.assert_not_awaited()

    def test_token_required(self, vault_client: MagicMock) -> None:
        with pytest.raises(ConfigurationError):
            TokenAuthMethod(vault_client, {})

    @pytest.mark.asyncio
    async def test_invalid_token(self, vault_client: MagicMock) -> None:
        vault_client.lookup_self.side_effect = VaultRequestError("bad token", 403)
        method = TokenAuthMethod(vault_client, {"token": "hvs.revoked"})

        with pytest.raises(LoginError):
            await method.authenticate()


class TestReadCredentialFile:
    """Test reading identity material from local files."""

    @pytest.mark.asyncio
    async def test_value_is_stripped(self, temp_dir: str) -> None:
        path = write_file(temp_dir, "jwt", "  eyJ.token.sig\n\n")
        assert await read_credential_file(path, "jwt") == "eyJ.token.sig"

    @pytest.mark.asyncio
    async def test_empty_file(self, temp_dir: str) -> None:
        path = write_file(temp_dir, "jwt", "\n")
        with pytest.raises(LoginError, match="is empty") as exc_info:
            await read_credential_file(path, "jwt")
        assert exc_info.value.method == "jwt"

    @pytest.mark.asyncio
    async def test_missing_file(self, temp_dir: str) -> None:
        with pytest.raises(LoginError, match="Error reading"):
            await read_credential_file(str(Path(temp_dir) / "absent"), "approle")

    @pytest.mark.asyncio
    async def test_binary_file(self, temp_dir: str) -> None:
        path = Path(temp_dir) / "role_id"
        path.write_bytes(b"\xff\xfe\x00")
        with pytest.raises(LoginError, match="Error reading"):
            await read_credential_file(str(path), "approle")


class TestAWSAuthMethod:
    """Test the AWS IAM login method."""

    @pytest.fixture
    def boto_session(self) -> Any:
        """Patch boto3 so the credential chain returns static credentials."""
        credentials = BotoCredentials("AKIDEXAMPLE", "secret-key", "session-token")
        with patch("vault_login_core.auth.aws.boto3.session.Session") as session_cls:
            session_cls.return_value.get_credentials.return_value = credentials
            yield session_cls

    def test_signed_request(self, boto_session: MagicMock) -> None:
        elements = get_iam_auth_elements(header_value="vault.example.com")

        assert elements.method == "POST"
        assert elements.url == "https://sts.amazonaws.com/"
        assert elements.body == STS_REQUEST_BODY
        assert elements.headers[IAM_SERVER_ID_HEADER] == "vault.example.com"
        assert elements.headers["X-Amz-Security-Token"] == "session-token"
        authorization = elements.headers["Authorization"]
        assert authorization.startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")
        assert "/us-east-1/sts/aws4_request" in authorization
        assert "x-vault-aws-iam-server-id" in authorization
        boto_session.assert_called_once_with()

    def test_profile_is_used(self, boto_session: MagicMock) -> None:
        get_iam_auth_elements(profile="dev")
        boto_session.assert_called_once_with(profile_name="dev")

    def test_no_credentials(self) -> None:
        with patch("vault_login_core.auth.aws.boto3.session.Session") as session_cls:
            session_cls.return_value.get_credentials.return_value = None
            with pytest.raises(LoginError, match="No AWS credentials"):
                get_iam_auth_elements()

    @pytest.mark.asyncio
    async def test_login_payload(
        self, vault_client: MagicMock, boto_session: MagicMock
    ) -> None:
        method = AWSAuthMethod(
            vault_client, {"role": "dev-role", "header_value": "vault.example.com"}
        )

        token = await method.authenticate()

        mount_path, payload, headers = vault_client.login.await_args.args
        assert mount_path == "auth/aws"
        assert headers == {}
        assert payload["role"] == "dev-role"
        assert payload["iam_http_request_method"] == "POST"
        assert decode(payload["iam_request_url"]) == "https://sts.amazonaws.com/"
        assert decode(payload["iam_request_body"]) == STS_REQUEST_BODY
        signed_headers = json.loads(decode(payload["iam_request_headers"]))
        assert signed_headers[IAM_SERVER_ID_HEADER] == ["vault.example.com"]
        assert "Authorization" in signed_headers
        assert token.auth_method == "aws"

    def test_role_required(self, vault_client: MagicMock) -> None:
        with pytest.raises(ConfigurationError):
            AWSAuthMethod(vault_client, {})


class TestAuthMethodFactory:
    """Test resolving the auth method configuration block."""

    def test_list_auth_methods(self) -> None:
        assert list_auth_methods() == ["approle", "aws", "jwt", "kubernetes", "token"]

    def test_create_method(self, vault_client: MagicMock) -> None:
        method = create_auth_method(
            MethodConfig(type="AWS", config={"role": "r"}, mount_path="auth/aws-east"),
            vault_client,
        )
        assert isinstance(method, AWSAuthMethod)
        assert method.mount_path == "auth/aws-east"
        assert method.client is vault_client

    @pytest.mark.parametrize("method_type", ["gcp", "azure", "ldap"])
    def test_unknown_method(self, vault_client: MagicMock, method_type: str) -> None:
        with pytest.raises(UnknownAuthMethodError) as exc_info:
            create_auth_method(MethodConfig(type=method_type), vault_client)
        assert exc_info.value.component == "auto_auth.method.type"
        assert isinstance(exc_info.value, ConfigurationError)
