"""Local file sink.

This module provides the FileSink class which stores the token record as a
JSON document in a local file, replacing the file atomically on every write.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import structlog

from vault_login_core.cache.token import CachedToken
from vault_login_core.exceptions import CacheReadError, PersistError

# Get logger for this module
logger = structlog.get_logger(__name__)

DEFAULT_FILE_MODE = 0o640


@dataclass
class FileSink:
    """File-based token sink."""

    path: str
    mode: int = DEFAULT_FILE_MODE
    auth_method: str | None = None

    sink_type = "file"

    def describe(self) -> str:
        return f"file:{self.path}"

    async def write(self, token: CachedToken) -> None:
        """Write the token to a temporary file and move it over the target."""
        target = Path(self.path)
        temp_path = target.with_name(f".{target.name}.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(token.to_json())
            os.chmod(temp_path, self.mode)
            os.replace(temp_path, target)
        except OSError as e:
            raise PersistError(  # noqa: TRY003
                f"Error writing token to {self.path}: {e}", self.describe()
            ) from e

        logger.debug("TOKEN_WRITTEN_TO_FILE", path=self.path)

    async def read(self) -> CachedToken | None:
        """Read the token back, returning None for a missing or empty file."""
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CacheReadError(
                f"Error reading token from {self.path}: {e}", self.describe()
            ) from e

        if not raw.strip():
            return None

        try:
            return CachedToken.from_json(raw, auth_method=self.auth_method)
        except CacheReadError as e:
            raise CacheReadError(
                f"Malformed token in {self.path}: {e.message}", self.describe()
            ) from e
