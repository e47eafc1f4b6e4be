"""Credential-retrieval orchestrator.

The Helper answers a credential lookup for a registry server. It first tries
the tokens cached in the configured sinks and, when none of them can read the
secret, logs in again while a concurrent task persists the fresh token.
Whatever goes wrong, the caller only ever sees CredentialsNotFoundError; the
details are in the logs.
"""

import asyncio
from dataclasses import dataclass

import structlog

from vault_login_core.auth.base import AuthMethod, AuthToken
from vault_login_core.auth.factory import create_auth_method
from vault_login_core.auth.handler import AuthHandler
from vault_login_core.cache.reader import get_cached_tokens
from vault_login_core.cache.token import CachedToken
from vault_login_core.config import Config, load_config
from vault_login_core.exceptions import (
    ConfigurationError,
    CredentialsNotFoundError,
    DeadlineExceededError,
    ExchangeError,
    LoginError,
    RenewalError,
    VaultLoginError,
    VaultRequestError,
)
from vault_login_core.observability import log_bind, observe_around
from vault_login_core.sink.base import Sink
from vault_login_core.sink.factory import create_sinks
from vault_login_core.sink.server import SinkServer
from vault_login_core.vault.base import SecretStoreClient
from vault_login_core.vault.factory import create_vault_client_from_config
from vault_login_core.vault.secret import Credentials, get_credentials

# Get logger for this module
logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass
class HelperOptions:
    """Optional collaborators and settings for a Helper."""

    client: SecretStoreClient | None = None
    config: Config | None = None
    config_file: str | None = None
    timeout: float | None = None


class Helper:
    """Docker credential helper backed by Vault."""

    def __init__(self, options: HelperOptions | None = None) -> None:
        if options is None:
            options = HelperOptions()
        self._client = options.client
        self._owns_client = options.client is None
        self._config = options.config
        self._config_file = options.config_file
        self.timeout = options.timeout if options.timeout is not None else DEFAULT_TIMEOUT

    async def close(self) -> None:
        """Close the Vault client if this helper created it."""
        if self._client is not None and self._owns_client:
            await self._client.close()
            self._client = None

    async def get(self, server_url: str) -> Credentials:
        """Return the registry credentials stored in Vault.

        Args:
            server_url: Registry the client asked credentials for. The same
                secret is returned for every registry.

        Raises:
            CredentialsNotFoundError: On any failure.
        """
        with log_bind(server_url=server_url):
            try:
                return await self._retrieve()
            except ConfigurationError as e:
                logger.error(
                    "CONFIGURATION_ERROR", component=e.component, error=e.message
                )
            except DeadlineExceededError as e:
                logger.error("DEADLINE_EXCEEDED", timeout=e.timeout, error=e.message)
            except VaultLoginError as e:
                logger.error(
                    "CREDENTIAL_RETRIEVAL_FAILED",
                    error_code=e.error_code,
                    error=e.message,
                )
            except Exception as e:
                logger.exception(
                    "UNEXPECTED_CREDENTIAL_RETRIEVAL_ERROR",
                    error=str(e),
                    error_type=type(e).__name__,
                )
            raise CredentialsNotFoundError(server_url)

    async def _retrieve(self) -> Credentials:
        config = self._resolve_config()
        client = self._resolve_client(config)

        credentials = await self._try_cached_tokens(config, client)
        if credentials is not None:
            return credentials

        # Failed to read the secret with a cached token. Reauthenticate.
        client.clear_token()
        with observe_around(logger, "FRESH_LOGIN", method=config.auto_auth.method.type):
            return await self._fresh_login(config, client)

    def _resolve_config(self) -> Config:
        if self._config is None:
            self._config = load_config(self._config_file)
        return self._config

    def _resolve_client(self, config: Config) -> SecretStoreClient:
        if self._client is None:
            self._client = create_vault_client_from_config(config.vault)
            self._owns_client = True
        return self._client

    async def _try_cached_tokens(
        self, config: Config, client: SecretStoreClient
    ) -> Credentials | None:
        """Try every cached token in sink order; the first exchange that works wins."""
        cached_tokens = await get_cached_tokens(
            config.auto_auth.sinks, auth_method=config.auto_auth.method.type
        )
        if not cached_tokens:
            logger.info("NO_CACHED_TOKENS")
            return None

        for position, cached in enumerate(cached_tokens):
            try:
                await self._renew(client, cached)
            except RenewalError as e:
                logger.warning("TOKEN_RENEWAL_FAILED", position=position, error=e.message)

        for position, cached in enumerate(cached_tokens):
            client.set_token(cached.token)
            try:
                credentials = await get_credentials(config.secret, client)
            except ExchangeError as e:
                logger.warning(
                    "CACHED_TOKEN_EXCHANGE_FAILED",
                    position=position,
                    path=e.path,
                    error=e.message,
                )
                continue
            logger.info("CREDENTIALS_READ_WITH_CACHED_TOKEN", position=position)
            return credentials

        client.clear_token()
        return None

    async def _renew(self, client: SecretStoreClient, cached: CachedToken) -> None:
        # Only tokens inside the grace period are renewed; others are used as-is.
        if not cached.eligible_for_renewal():
            logger.debug(
                "TOKEN_RENEWAL_SKIPPED",
                renewable=cached.renewable,
                expired=cached.expired(),
            )
            return
        try:
            await client.renew_self(cached.token)
        except VaultRequestError as e:
            raise RenewalError(f"Error renewing token: {e.message}") from e
        logger.info("TOKEN_RENEWED")

    async def _fresh_login(
        self, config: Config, client: SecretStoreClient
    ) -> Credentials:
        method_type = config.auto_auth.method.type
        sinks = create_sinks(config.auto_auth.sinks, auth_method=method_type)

        # The login task gets its own client; the shared one is never used
        # while a task is running.
        login_client = client.clone()
        try:
            method = create_auth_method(config.auto_auth.method, login_client)
            token = await self._run_login_cycle(method, sinks)
        finally:
            await login_client.close()

        client.set_token(token.token)
        credentials = await get_credentials(config.secret, client)
        logger.info("CREDENTIALS_READ_WITH_NEW_TOKEN")
        return credentials

    async def _run_login_cycle(
        self, method: AuthMethod, sinks: list[Sink]
    ) -> AuthToken:
        """Log in and persist the new token before the shared deadline.

        Both tasks are cancelled and awaited before this returns, whatever
        the outcome.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        auth_handler = AuthHandler()
        sink_server = SinkServer()
        token_input: asyncio.Queue[AuthToken] = asyncio.Queue(maxsize=1)

        login_task = asyncio.create_task(auth_handler.run(method), name="auth-handler")
        sink_task = asyncio.create_task(
            sink_server.run(token_input, sinks), name="sink-server"
        )

        try:
            token = await self._await_login(method, auth_handler, login_task, deadline)
            token_input.put_nowait(token)
            await self._await_persist(sink_server, sink_task, deadline)
        finally:
            for task in (login_task, sink_task):
                task.cancel()
            await asyncio.gather(login_task, sink_task, return_exceptions=True)
            await auth_handler.done.wait()
            await sink_server.done.wait()
            logger.debug("LOGIN_CYCLE_TASKS_STOPPED")

        return token

    def _remaining(self, deadline: float) -> float:
        return max(0.0, deadline - asyncio.get_running_loop().time())

    async def _await_login(
        self,
        method: AuthMethod,
        auth_handler: AuthHandler,
        login_task: "asyncio.Task[None]",
        deadline: float,
    ) -> AuthToken:
        """Wait for the login output, the login task ending, or the deadline."""
        output = asyncio.create_task(auth_handler.output.get())
        try:
            await asyncio.wait(
                {output, login_task},
                timeout=self._remaining(deadline),
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if not output.done():
                output.cancel()
            await asyncio.gather(output, return_exceptions=True)

        if not output.cancelled():
            logger.info("AUTHENTICATED", method=method.method_type)
            return output.result()
        if not auth_handler.output.empty():
            return auth_handler.output.get_nowait()

        if login_task.done():
            error = auth_handler.error
            raise LoginError(
                f"{method.method_type} login failed: {error}", method.method_type
            )
        raise DeadlineExceededError(
            f"failed to get token within deadline ({self.timeout}s)", self.timeout
        )

    async def _await_persist(
        self,
        sink_server: SinkServer,
        sink_task: "asyncio.Task[None]",
        deadline: float,
    ) -> None:
        """Wait for the sink task to finish writing, or the deadline."""
        await asyncio.wait({sink_task}, timeout=self._remaining(deadline))
        if not sink_task.done():
            raise DeadlineExceededError(
                f"failed to write token to sink(s) within deadline ({self.timeout}s)",
                self.timeout,
            )
        if sink_server.error is not None:
            raise sink_server.error
        logger.info("TOKEN_WRITTEN_TO_SINKS")
