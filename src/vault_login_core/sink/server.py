"""Sink-write task.

The SinkServer waits for the token produced by the login task and writes it
to every configured sink. Its ``done`` event is set on every exit path so the
orchestrator can always wait for it during teardown.
"""

import asyncio
from collections.abc import Sequence

import structlog

from vault_login_core.auth.base import AuthToken
from vault_login_core.exceptions import PersistError

from .base import Sink

# Get logger for this module
logger = structlog.get_logger(__name__)


class SinkServer:
    """Writes one freshly issued token to the configured sinks."""

    def __init__(self) -> None:
        self.done = asyncio.Event()
        self.error: PersistError | None = None

    async def run(
        self, token_input: "asyncio.Queue[AuthToken]", sinks: Sequence[Sink]
    ) -> None:
        """Consume one token from ``token_input`` and persist it.

        Args:
            token_input: Single-slot mailbox filled by the orchestrator once
                the login task produced a token.
            sinks: Sinks to write, in configuration order.
        """
        server_logger = logger.bind(component="sink_server")
        server_logger.debug("SINK_SERVER_STARTED", sinks=len(sinks))
        try:
            auth_token = await token_input.get()
            cached = auth_token.to_cached()

            if not sinks:
                server_logger.warning("NO_SINKS_CONFIGURED")

            for sink in sinks:
                try:
                    await sink.write(cached)
                except PersistError:
                    raise
                except Exception as e:
                    raise PersistError(  # noqa: TRY003
                        f"Error writing token to {sink.describe()}: {e}",
                        sink.describe(),
                    ) from e
                server_logger.info("TOKEN_WRITTEN_TO_SINK", sink=sink.describe())

        except asyncio.CancelledError:
            server_logger.info("SINK_SERVER_CANCELLED")
            raise
        except PersistError as e:
            self.error = e
            server_logger.exception("SINK_WRITE_FAILED", sink=e.sink, error=e.message)
        finally:
            self.done.set()
            server_logger.debug("SINK_SERVER_STOPPED")
