"""AWS IAM login method.

Vault's ``aws`` auth method verifies identity by replaying a signed
``sts:GetCallerIdentity`` request. This module signs that request with the
credentials found by the boto3 credential chain and posts the signed pieces
to Vault.
"""

import asyncio
import base64
import json
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.exceptions import BotoCoreError

from vault_login_core.exceptions import LoginError
from vault_login_core.vault.client import VaultClient

from .base import LoginAuthMethod, require_config_str

STS_HOST = "sts.amazonaws.com"

# sts.amazonaws.com is global, but SigV4 needs a region in the string to
# sign. STS must be enabled in us-east-1.
STS_REGION = "us-east-1"

STS_SERVICE = "sts"
STS_REQUEST_METHOD = "POST"
STS_REQUEST_BODY = "Action=GetCallerIdentity&Version=2011-06-15"
IAM_SERVER_ID_HEADER = "X-Vault-AWS-IAM-Server-ID"


@dataclass
class IAMAuthElements:
    """The signed request Vault replays against STS."""

    method: str
    url: str
    body: str
    headers: dict[str, str]


def get_iam_auth_elements(
    profile: str | None = None, header_value: str | None = None
) -> IAMAuthElements:
    """Sign an STS GetCallerIdentity request.

    Args:
        profile: Optional AWS profile. If None, the default credential chain
            (environment, shared files, instance metadata) is used.
        header_value: Optional value of the X-Vault-AWS-IAM-Server-ID header.

    Raises:
        LoginError: When no AWS credentials can be found.
    """
    try:
        if profile:
            session = boto3.session.Session(profile_name=profile)
        else:
            session = boto3.session.Session()
        credentials = session.get_credentials()
    except BotoCoreError as e:
        raise LoginError(f"Error resolving AWS credentials: {e}", "aws") from e
    if credentials is None:
        raise LoginError("No AWS credentials found", "aws")

    url = f"https://{STS_HOST}/"
    headers = {
        "Accept-Encoding": "identity",
        "Content-Type": "application/x-www-form-urlencoded; charset=utf-8",
        "Host": STS_HOST,
    }
    if header_value:
        headers[IAM_SERVER_ID_HEADER] = header_value

    request = AWSRequest(
        method=STS_REQUEST_METHOD, url=url, data=STS_REQUEST_BODY, headers=headers
    )
    SigV4Auth(credentials.get_frozen_credentials(), STS_SERVICE, STS_REGION).add_auth(
        request
    )

    return IAMAuthElements(
        method=STS_REQUEST_METHOD,
        url=url,
        body=STS_REQUEST_BODY,
        headers=dict(request.headers.items()),
    )


def _b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


class AWSAuthMethod(LoginAuthMethod):
    """Login with the ``aws`` auth method using an IAM principal."""

    method_type = "aws"

    def __init__(
        self,
        client: VaultClient,
        config: dict[str, Any],
        mount_path: str | None = None,
    ) -> None:
        super().__init__(client, config, mount_path)
        self.role = require_config_str(config, "role", self.method_type)
        self.header_value: str | None = config.get("header_value")
        self.profile: str | None = config.get("profile")

    async def login_payload(self) -> tuple[dict[str, Any], dict[str, str]]:
        # Credential resolution may hit the instance metadata service
        elements = await asyncio.to_thread(
            get_iam_auth_elements, self.profile, self.header_value
        )
        headers = {key: [value] for key, value in elements.headers.items()}
        payload = {
            "role": self.role,
            "iam_http_request_method": elements.method,
            "iam_request_url": _b64(elements.url),
            "iam_request_body": _b64(elements.body),
            "iam_request_headers": _b64(json.dumps(headers)),
        }
        return payload, {}
