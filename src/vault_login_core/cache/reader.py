"""Token store reader.

Reads whatever cached tokens the configured sinks currently hold. A sink that
is missing, empty, unreadable or malformed contributes nothing; the remaining
sinks are still read.
"""

from collections.abc import Sequence

import structlog

from vault_login_core.config import SinkConfig
from vault_login_core.exceptions import CacheReadError, ConfigurationError
from vault_login_core.sink.factory import create_sink

from .token import CachedToken

# Get logger for this module
logger = structlog.get_logger(__name__)


async def get_cached_tokens(
    sink_configs: Sequence[SinkConfig], auth_method: str | None = None
) -> list[CachedToken]:
    """Return the tokens readable from the configured sinks, in sink order.

    Args:
        sink_configs: The ``auto_auth.sinks`` entries.
        auth_method: Type tag recorded on the returned tokens.

    Returns:
        The cached tokens. An empty list is a normal result on first use.
    """
    tokens: list[CachedToken] = []
    for index, sink_config in enumerate(sink_configs):
        try:
            sink = create_sink(sink_config, auth_method)
        except ConfigurationError as e:
            logger.error(
                "CACHE_SINK_CONFIGURATION_ERROR",
                sink_index=index,
                sink_type=sink_config.type,
                component=e.component,
                error=e.message,
            )
            continue

        try:
            token = await sink.read()
        except CacheReadError as e:
            logger.error(
                "CACHED_TOKEN_READ_FAILED",
                sink_index=index,
                sink=e.sink or sink.describe(),
                error=e.message,
            )
            continue

        if token is None:
            logger.debug("SINK_EMPTY", sink_index=index, sink=sink.describe())
            continue

        tokens.append(token)

    logger.debug("CACHED_TOKENS_READ", count=len(tokens), sinks=len(sink_configs))
    return tokens
