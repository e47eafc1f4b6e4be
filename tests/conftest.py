"""PyTest configuration and shared test fixtures.

This module provides PyTest configuration, shared fixtures, and test
doubles for the Vault client, login methods and sinks that are used across
multiple test files.
"""

import asyncio
import io
import json
import tempfile
import time
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from vault_login_core.auth.base import AuthToken
from vault_login_core.cache.token import CachedToken
from vault_login_core.config import (
    AutoAuthConfig,
    Config,
    MethodConfig,
    SinkConfig,
)
from vault_login_core.exceptions import VaultRequestError
from vault_login_core.observability import configure_logging
from vault_login_core.sink.file import FileSink

SECRET_PATH = "secret/docker/creds"


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[io.StringIO, None, None]:
    """Route log records to an in-memory stream so stdout stays clean."""
    stream = io.StringIO()
    configure_logging(log_level="DEBUG", output=stream)
    yield stream
    configure_logging(log_level="ERROR")


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


def secret_response(username: str = "alice", password: str = "s3cret") -> dict[str, Any]:
    """Build a KV version 1 read response."""
    return {"data": {"username": username, "password": password}}


class FakeSecretStoreClient:
    """In-memory stand-in for VaultClient.

    Secrets can only be read with a token listed in ``valid_tokens``. Every
    read, renewal and clone is recorded for assertions.
    """

    def __init__(
        self,
        secrets: dict[str, dict[str, Any]] | None = None,
        valid_tokens: set[str] | None = None,
        renew_failures: set[str] | None = None,
    ) -> None:
        self.secrets = (
            {SECRET_PATH: secret_response()} if secrets is None else secrets
        )
        self.valid_tokens = valid_tokens if valid_tokens is not None else set()
        self.renew_failures = renew_failures or set()
        self.token: str | None = None
        self.reads: list[tuple[str | None, str]] = []
        self.renewals: list[str] = []
        self.clones: list["FakeSecretStoreClient"] = []
        self.closed = False

    def set_token(self, token: str) -> None:
        self.token = token

    def clear_token(self) -> None:
        self.token = None

    def clone(self) -> "FakeSecretStoreClient":
        clone = FakeSecretStoreClient(self.secrets, self.valid_tokens)
        self.clones.append(clone)
        return clone

    async def renew_self(self, token: str, increment: int | None = None) -> dict[str, Any]:
        self.renewals.append(token)
        if token in self.renew_failures:
            raise VaultRequestError("permission denied", 403, ["permission denied"])
        return {"auth": {"client_token": token, "lease_duration": 3600}}

    async def read(self, path: str) -> dict[str, Any]:
        self.reads.append((self.token, path))
        if self.token not in self.valid_tokens:
            raise VaultRequestError("permission denied", 403, ["permission denied"])
        if path not in self.secrets:
            raise VaultRequestError("not found", 404, [])
        return self.secrets[path]

    async def close(self) -> None:
        self.closed = True


class FakeAuthMethod:
    """Login method that returns a fixed token after an optional delay."""

    method_type = "fake"

    def __init__(
        self,
        token: str = "fresh-token",
        delay: float = 0.0,
        error: Exception | None = None,
        lease_duration: int = 3600,
    ) -> None:
        self.token = token
        self.delay = delay
        self.error = error
        self.lease_duration = lease_duration
        self.calls = 0
        self.cancelled = False

    async def authenticate(self) -> AuthToken:
        self.calls += 1
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return AuthToken(
            token=self.token,
            lease_duration=self.lease_duration,
            renewable=True,
            auth_method=self.method_type,
        )


class SlowSink:
    """Sink that waits before delegating to a FileSink."""

    sink_type = "slow"

    def __init__(self, path: str, delay: float, error: Exception | None = None) -> None:
        self.file_sink = FileSink(path=path)
        self.delay = delay
        self.error = error
        self.cancelled = False

    def describe(self) -> str:
        return f"slow:{self.file_sink.path}"

    async def write(self, token: CachedToken) -> None:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        await self.file_sink.write(token)

    async def read(self) -> CachedToken | None:
        return await self.file_sink.read()


def make_config(
    sink_paths: list[str],
    method_type: str = "approle",
    method_config: dict[str, Any] | None = None,
) -> Config:
    """Build a validated configuration with one file sink per path."""
    config = {"secret": SECRET_PATH}
    config.update(method_config or {})
    return Config(
        auto_auth=AutoAuthConfig(
            method=MethodConfig(type=method_type, config=config),
            sinks=[SinkConfig(type="file", config={"path": p}) for p in sink_paths],
        ),
        secret=SECRET_PATH,
    )


def write_token_file(
    path: str | Path,
    token: str,
    expires_in: int = 3600,
    renewable: bool = False,
) -> CachedToken:
    """Write a token record the way the file sink stores it."""
    cached = CachedToken(
        token=token, expiration=int(time.time()) + expires_in, renewable=renewable
    )
    Path(path).write_text(cached.to_json(), encoding="utf-8")
    return cached


def read_token_file(path: str | Path) -> dict[str, Any]:
    """Read a stored token record."""
    data: dict[str, Any] = json.loads(Path(path).read_text(encoding="utf-8"))
    return data
