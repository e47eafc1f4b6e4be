"""Standardized exceptions for the vault login core module.

This module provides consistent exception types for every phase of a
credential lookup: configuration, cache reads, renewal, secret exchange,
login, persistence and the fresh-login deadline.
"""


class VaultLoginError(Exception):
    """Base exception for all vault login errors."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        """Initialize the error with a message and optional error code.

        Args:
            message: Human-readable error message.
            error_code: Optional error code for programmatic handling.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class ConfigurationError(VaultLoginError):
    """Raised when the configuration is missing or invalid."""

    def __init__(self, message: str, component: str | None = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message describing the configuration issue.
            component: Optional configuration field where the error occurred.
        """
        super().__init__(message, "CONFIG_ERROR")
        self.component = component


class CacheReadError(VaultLoginError):
    """Raised when a cached token cannot be read back from a sink."""

    def __init__(self, message: str, sink: str | None = None) -> None:
        """Initialize cache read error.

        Args:
            message: Error message describing the read failure.
            sink: Optional description of the sink that was read.
        """
        super().__init__(message, "CACHE_READ_ERROR")
        self.sink = sink


class RenewalError(VaultLoginError):
    """Raised when a cached token could not be renewed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "RENEWAL_ERROR")


class ExchangeError(VaultLoginError):
    """Raised when a token cannot be exchanged for registry credentials."""

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialize exchange error.

        Args:
            message: Error message describing the exchange failure.
            path: Optional secret path that was read.
        """
        super().__init__(message, "EXCHANGE_ERROR")
        self.path = path


class LoginError(VaultLoginError):
    """Raised when a login method fails to obtain a token."""

    def __init__(self, message: str, method: str | None = None) -> None:
        """Initialize login error.

        Args:
            message: Error message describing the login failure.
            method: Optional type tag of the login method.
        """
        super().__init__(message, "LOGIN_ERROR")
        self.method = method


class PersistError(VaultLoginError):
    """Raised when a fresh token cannot be written to a sink."""

    def __init__(self, message: str, sink: str | None = None) -> None:
        """Initialize persist error.

        Args:
            message: Error message describing the write failure.
            sink: Optional description of the sink that was written.
        """
        super().__init__(message, "PERSIST_ERROR")
        self.sink = sink


class DeadlineExceededError(VaultLoginError):
    """Raised when the fresh-login cycle does not finish in time."""

    def __init__(self, message: str, timeout: float | None = None) -> None:
        super().__init__(message, "DEADLINE_EXCEEDED")
        self.timeout = timeout


class VaultRequestError(VaultLoginError):
    """Raised when Vault answers a request with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: list[str] | None = None,
    ) -> None:
        """Initialize Vault request error.

        Args:
            message: Error message describing the failed request.
            status_code: HTTP status code returned by Vault.
            errors: Error strings from the Vault response body.
        """
        super().__init__(message, "VAULT_REQUEST_ERROR")
        self.status_code = status_code
        self.errors = errors or []


class CredentialsNotFoundError(VaultLoginError):
    """The single outcome a failed credential lookup reports to its caller."""

    def __init__(self, server_url: str | None = None) -> None:
        super().__init__("credentials not found in native keychain", "NOT_FOUND")
        self.server_url = server_url
