"""CLI configuration using environ-config.

All settings come from ``DOCKER_CREDS_*`` environment variables: the
credential helper protocol leaves no room for command-line options.
"""

import os
from collections.abc import Mapping

import environ

from vault_login_core.config import DEFAULT_CONFIG_FILE
from vault_login_core.helper import DEFAULT_TIMEOUT
from vault_login_core.observability import DEFAULT_LOG_DIR


@environ.config(prefix="DOCKER_CREDS")
class HelperConfig:
    """Configuration for the credential helper process."""

    config_file: str = environ.var(
        default=DEFAULT_CONFIG_FILE, help="Path of the JSON configuration file"
    )
    log_dir: str = environ.var(
        default=DEFAULT_LOG_DIR, help="Directory log files are written to"
    )
    log_level: str = environ.var(default="ERROR", help="Log level")
    dev_mode: bool = environ.bool_var(
        default=False, help="Enable development mode logging"
    )
    timeout: float = environ.var(
        default=DEFAULT_TIMEOUT,
        converter=float,
        help="Seconds allowed for logging in and caching the new token",
    )


def create_helper_config(env: Mapping[str, str] | None = None) -> HelperConfig:
    """Create a HelperConfig from environment variables.

    Args:
        env: Environment mapping. If None, uses os.environ.

    Returns:
        HelperConfig instance populated from the environment.
    """
    return environ.to_config(HelperConfig, environ=os.environ if env is None else env)
