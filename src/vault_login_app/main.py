"""Command-line interface and main entry point.

Docker runs ``docker-credential-vault-login <action>`` and exchanges data
with it over stdin and stdout:

    get      registry URL on stdin, credentials JSON on stdout
    store    not implemented
    erase    not implemented
    list     not implemented
    version  print the version banner

On failure the message goes to stdout and the process exits with status 1,
as the credential helper protocol expects. Logs never go to stdout.
"""
# ruff: noqa: T201

import asyncio
import json
import sys
from collections.abc import Callable
from typing import IO

import structlog

from vault_login_app import __version__
from vault_login_app.cli_config import HelperConfig, create_helper_config
from vault_login_core.exceptions import CredentialsNotFoundError
from vault_login_core.helper import Helper, HelperOptions
from vault_login_core.observability import configure_logging, open_log_file
from vault_login_core.vault.secret import Credentials

# Get logger for this module
logger = structlog.get_logger(__name__)

BANNER = f"Docker Credential Helper for Vault Storage v{__version__}"
NOT_IMPLEMENTED = "not implemented"
MISSING_SERVER_URL = "no credentials server URL"


def setup_logging(config: HelperConfig) -> IO[str] | None:
    """Send logs to today's log file, or to stderr if it cannot be opened.

    Returns:
        The opened log file, which the caller closes, or None.
    """
    try:
        log_file = open_log_file(config.log_dir)
    except OSError as e:
        configure_logging(log_level=config.log_level, dev_mode=config.dev_mode)
        logger.error(
            "Error opening log file. Logging errors to stderr instead.",
            log_dir=config.log_dir,
            error=str(e),
        )
        return None

    configure_logging(
        log_level=config.log_level, dev_mode=config.dev_mode, output=log_file
    )
    return log_file


async def _get_credentials(helper: Helper, server_url: str) -> Credentials:
    try:
        return await helper.get(server_url)
    finally:
        await helper.close()


def get_command(
    config: HelperConfig, stdin: IO[str] | None = None, stdout: IO[str] | None = None
) -> int:
    """Answer a ``get`` request.

    Args:
        config: Process configuration.
        stdin: Stream the registry URL is read from. Defaults to sys.stdin.
        stdout: Stream the answer is written to. Defaults to sys.stdout.

    Returns:
        The process exit status.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    server_url = stdin.read().strip()
    if not server_url:
        print(MISSING_SERVER_URL, file=stdout)
        return 1

    helper = Helper(HelperOptions(config_file=config.config_file, timeout=config.timeout))
    try:
        credentials = asyncio.run(_get_credentials(helper, server_url))
    except CredentialsNotFoundError as e:
        print(e.message, file=stdout)
        return 1

    json.dump(
        {
            "ServerURL": server_url,
            "Username": credentials.username,
            "Secret": credentials.password,
        },
        stdout,
    )
    stdout.write("\n")
    return 0


def not_implemented_command(
    config: HelperConfig, stdin: IO[str] | None = None, stdout: IO[str] | None = None
) -> int:
    """Answer ``store``, ``erase`` and ``list``: credentials are managed in Vault."""
    _ = config, stdin
    print(NOT_IMPLEMENTED, file=stdout or sys.stdout)
    return 1


ACTIONS: dict[str, Callable[..., int]] = {
    "get": get_command,
    "store": not_implemented_command,
    "erase": not_implemented_command,
    "list": not_implemented_command,
}


def show_help() -> None:
    """Show help information for the CLI."""
    help_text = """
Docker Credential Helper for Vault Storage

Usage:
    docker-credential-vault-login <action>

Actions:
    get                Read a registry URL from stdin and print its credentials
    store              Not implemented
    erase              Not implemented
    list               Not implemented
    version            Show version information
    --help, -h         Show this help message

Environment:
    DOCKER_CREDS_CONFIG_FILE   Configuration file
                               (default: /etc/docker-credential-vault-login/config.json)
    DOCKER_CREDS_LOG_DIR       Log directory
    DOCKER_CREDS_LOG_LEVEL     Log level (DEBUG, INFO, WARNING, ERROR)
    DOCKER_CREDS_TIMEOUT       Seconds allowed for a fresh login (default: 10)
    VAULT_ADDR                 Vault server address
"""
    print(help_text)


def run(args: list[str]) -> int:
    """Dispatch an action and return the exit status."""
    if not args:
        show_help()
        return 1

    action = args[0]
    if action in ["--version", "-v", "version"]:
        print(BANNER)
        return 0
    if action in ["--help", "-h", "help"]:
        show_help()
        return 0

    command = ACTIONS.get(action)
    if command is None:
        show_help()
        return 1

    try:
        config = create_helper_config()
    except (ValueError, TypeError) as e:
        print(f"Error: {e!s}")
        return 1

    log_file = setup_logging(config)
    try:
        logger.debug("ACTION_STARTED", action=action)
        return command(config)
    finally:
        if log_file is not None:
            configure_logging(log_level=config.log_level, dev_mode=config.dev_mode)
            log_file.close()


def main() -> None:
    """Main entry point for the CLI."""
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
