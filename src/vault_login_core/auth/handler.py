"""Login task.

The AuthHandler runs one login method and puts the issued token on its
single-slot ``output`` mailbox. Its ``done`` event is set on every exit path,
including cancellation, so the orchestrator can always wait for it.
"""

import asyncio

import structlog

from .base import AuthMethod, AuthToken

# Get logger for this module
logger = structlog.get_logger(__name__)


class AuthHandler:
    """Runs a login method to completion."""

    def __init__(self) -> None:
        self.output: asyncio.Queue[AuthToken] = asyncio.Queue(maxsize=1)
        self.done = asyncio.Event()
        self.error: Exception | None = None

    async def run(self, method: AuthMethod) -> None:
        """Authenticate with ``method`` and publish the token on ``output``.

        Failures are logged and kept in ``error``; no token is published.
        """
        handler_logger = logger.bind(component="auth_handler", method=method.method_type)
        handler_logger.debug("AUTH_HANDLER_STARTED")
        try:
            token = await method.authenticate()
            await self.output.put(token)
            handler_logger.info(
                "AUTHENTICATION_SUCCEEDED",
                lease_duration=token.lease_duration,
                renewable=token.renewable,
            )
        except asyncio.CancelledError:
            handler_logger.info("AUTH_HANDLER_CANCELLED")
            raise
        except Exception as e:
            self.error = e
            handler_logger.exception(
                "AUTHENTICATION_FAILED", error=str(e), error_type=type(e).__name__
            )
        finally:
            self.done.set()
            handler_logger.debug("AUTH_HANDLER_STOPPED")
