"""Configuration file loading.

The configuration file is a JSON document describing how to reach Vault, which
login method to use, which sinks cache the issued token and where the
registry credentials are stored:

    {
      "vault": {"address": "https://vault.example.com"},
      "auto_auth": {
        "method": {"type": "aws", "config": {"role": "dev", "secret": "secret/docker"}},
        "sinks": [{"type": "file", "config": {"path": "/tmp/vault-token"}}]
      }
    }

Environment Variables:
    DOCKER_CREDS_CONFIG_FILE: Path of the configuration file.
        Default: "/etc/docker-credential-vault-login/config.json"
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vault_login_core.exceptions import ConfigurationError

ENV_CONFIG_FILE = "DOCKER_CREDS_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "/etc/docker-credential-vault-login/config.json"


@dataclass
class MethodConfig:
    """The ``auto_auth.method`` block."""

    type: str
    config: dict[str, Any] = field(default_factory=dict)
    mount_path: str | None = None


@dataclass
class SinkConfig:
    """One entry of the ``auto_auth.sinks`` list."""

    type: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass
class AutoAuthConfig:
    """The ``auto_auth`` block."""

    method: MethodConfig
    sinks: list[SinkConfig] = field(default_factory=list)


@dataclass
class VaultConfig:
    """The optional ``vault`` block."""

    address: str | None = None
    ca_cert: str | None = None
    tls_skip_verify: bool | None = None


@dataclass
class Config:
    """Validated configuration for one credential lookup."""

    auto_auth: AutoAuthConfig
    secret: str
    vault: VaultConfig = field(default_factory=VaultConfig)


def resolve_config_file(config_file: str | None = None) -> str:
    """Return the configuration path: explicit, then environment, then default."""
    return config_file or os.getenv(ENV_CONFIG_FILE) or DEFAULT_CONFIG_FILE


def load_config(config_file: str | None = None) -> Config:
    """Read and validate the configuration file.

    Args:
        config_file: Path to the file. If None, uses DOCKER_CREDS_CONFIG_FILE
            or the default location.

    Raises:
        ConfigurationError: When the file is missing, unreadable or invalid.
            ``component`` names the offending field.
    """
    path = Path(resolve_config_file(config_file))
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Configuration file {path} not found. Please provide the configuration "
            f"file with the {ENV_CONFIG_FILE} environment variable.",
            "config_file",
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Error reading configuration file {path}: {e}", "config_file"
        ) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Configuration file {path} is not valid JSON: {e}", "config_file"
        ) from e

    return parse_config(data, source=str(path))


def parse_config(data: object, source: str = "<config>") -> Config:
    """Validate a decoded configuration document."""
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration {source} must be a JSON object", "config_file"
        )

    auto_auth = data.get("auto_auth")
    if not isinstance(auto_auth, dict):
        raise ConfigurationError(
            f"No auto_auth block found in configuration file {source}", "auto_auth"
        )

    method = _parse_method(auto_auth.get("method"), source)

    secret = method.config.get("secret")
    if secret is None:
        raise ConfigurationError(
            f"No 'secret' field found in auto_auth.method.config of "
            f"configuration file {source}",
            "auto_auth.method.config.secret",
        )
    if not isinstance(secret, str) or not secret:
        raise ConfigurationError(
            f"field auto_auth.method.config.secret of configuration file {source} "
            "could not be converted to string",
            "auto_auth.method.config.secret",
        )

    raw_sinks = auto_auth.get("sinks", [])
    if not isinstance(raw_sinks, list):
        raise ConfigurationError(
            f"auto_auth.sinks of configuration file {source} must be a list",
            "auto_auth.sinks",
        )
    sinks = [_parse_sink(entry, index, source) for index, entry in enumerate(raw_sinks)]

    return Config(
        auto_auth=AutoAuthConfig(method=method, sinks=sinks),
        secret=secret,
        vault=_parse_vault(data.get("vault"), source),
    )


def _parse_method(raw: object, source: str) -> MethodConfig:
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"No auto_auth.method block found in configuration file {source}",
            "auto_auth.method",
        )

    method_type = raw.get("type")
    if not isinstance(method_type, str) or not method_type:
        raise ConfigurationError(
            f"auto_auth.method.type of configuration file {source} is required",
            "auto_auth.method.type",
        )

    method_config = raw.get("config", {})
    if not isinstance(method_config, dict):
        raise ConfigurationError(
            f"auto_auth.method.config of configuration file {source} must be an object",
            "auto_auth.method.config",
        )

    mount_path = raw.get("mount_path")
    if mount_path is not None and not isinstance(mount_path, str):
        raise ConfigurationError(
            f"auto_auth.method.mount_path of configuration file {source} must be a string",
            "auto_auth.method.mount_path",
        )

    return MethodConfig(type=method_type, config=method_config, mount_path=mount_path)


def _parse_sink(raw: object, index: int, source: str) -> SinkConfig:
    component = f"auto_auth.sinks[{index}]"
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"{component} of configuration file {source} must be an object", component
        )

    sink_type = raw.get("type")
    if not isinstance(sink_type, str) or not sink_type:
        raise ConfigurationError(
            f"{component}.type of configuration file {source} is required",
            f"{component}.type",
        )

    sink_config = raw.get("config", {})
    if not isinstance(sink_config, dict):
        raise ConfigurationError(
            f"{component}.config of configuration file {source} must be an object",
            f"{component}.config",
        )

    return SinkConfig(type=sink_type, config=sink_config)


def _parse_vault(raw: object, source: str) -> VaultConfig:
    if raw is None:
        return VaultConfig()
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"vault block of configuration file {source} must be an object", "vault"
        )

    address = raw.get("address")
    ca_cert = raw.get("ca_cert")
    tls_skip_verify = raw.get("tls_skip_verify")
    if address is not None and not isinstance(address, str):
        raise ConfigurationError("vault.address must be a string", "vault.address")
    if ca_cert is not None and not isinstance(ca_cert, str):
        raise ConfigurationError("vault.ca_cert must be a string", "vault.ca_cert")
    if tls_skip_verify is not None and not isinstance(tls_skip_verify, bool):
        raise ConfigurationError(
            "vault.tls_skip_verify must be a boolean", "vault.tls_skip_verify"
        )

    return VaultConfig(
        address=address, ca_cert=ca_cert, tls_skip_verify=tls_skip_verify
    )
