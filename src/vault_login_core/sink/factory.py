"""Sink factory functions.

This module resolves the ``auto_auth.sinks`` configuration entries into sink
instances. The set of sink types is closed: an unknown type is a
configuration error.
"""

from collections.abc import Sequence

from vault_login_core.config import SinkConfig
from vault_login_core.exceptions import ConfigurationError

from .base import Sink
from .file import DEFAULT_FILE_MODE, FileSink


class UnknownSinkTypeError(ConfigurationError):
    """Raised when an unknown sink type is specified."""

    def __init__(self, sink_type: str) -> None:
        """Initialize the unknown sink type error.

        Args:
            sink_type: The unknown sink type that was specified.
        """
        super().__init__(f"Unknown sink type {sink_type!r}", "auto_auth.sinks.type")
        self.sink_type = sink_type


def _parse_mode(value: object) -> int:
    """Accept a file mode as an int or an octal string such as "0600"."""
    if value is None:
        return DEFAULT_FILE_MODE
    if isinstance(value, bool):
        raise ConfigurationError(
            "file sink mode must be an octal string or integer", "sink.config.mode"
        )
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 8)
        except ValueError as e:
            raise ConfigurationError(
                f"file sink mode {value!r} is not an octal number", "sink.config.mode"
            ) from e
    raise ConfigurationError(
        "file sink mode must be an octal string or integer", "sink.config.mode"
    )


def create_sink(sink_config: SinkConfig, auth_method: str | None = None) -> Sink:
    """Create a sink instance from one configuration entry.

    Args:
        sink_config: The sink configuration entry.
        auth_method: Type tag recorded on tokens read back from the sink.

    Returns:
        Configured sink instance.

    Raises:
        ConfigurationError: When the type is unknown or the config is invalid.
    """
    sink_type = sink_config.type.lower()
    if sink_type == "file":
        path = sink_config.config.get("path")
        if not isinstance(path, str) or not path:
            raise ConfigurationError(
                "'path' is required for the file sink", "sink.config.path"
            )
        return FileSink(
            path=path,
            mode=_parse_mode(sink_config.config.get("mode")),
            auth_method=auth_method,
        )
    raise UnknownSinkTypeError(sink_config.type)


def create_sinks(
    sink_configs: Sequence[SinkConfig], auth_method: str | None = None
) -> list[Sink]:
    """Create every configured sink, preserving configuration order."""
    return [create_sink(sink_config, auth_method) for sink_config in sink_configs]
