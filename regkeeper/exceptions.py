"""
Custom exception hierarchy for regkeeper.

All exceptions inherit from :class:`RegKeeperError` and carry optional
structured metadata via the ``details`` attribute, which is rendered into
``str(exc)`` for logging and issue notes.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class RegKeeperError(Exception):
    """Base exception for all regkeeper errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ParseError(RegKeeperError):
    """Raised when a repository reference or catalog value cannot be parsed.

    Args:
        message: Error description.
        value: The raw value that failed to parse.
        source: Where the value came from (catalog key, file path).
    """

    __slots__ = ("value", "source")

    def __init__(
        self,
        message: str,
        *,
        value: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "value", value)
        _add_if(details, "source", source)

        super().__init__(message, details)

        self.value = value
        self.source = source


class ConfigError(RegKeeperError):
    """Raised for invalid or missing configuration.

    A missing access credential is also a configuration error; it aborts
    the run before any catalog entry is processed.

    Args:
        message: Error description.
        config_path: Path of the configuration file involved.
        option: Name of the offending option.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class NetworkError(RegKeeperError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class NotFoundError(NetworkError):
    """Raised on HTTP 404. Never retried."""


class GitHubError(NetworkError):
    """Raised for failures related to the GitHub API.

    Args:
        message: Error description.
        repository: ``owner/repo`` slug of the repository involved.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("repository",)

    def __init__(
        self,
        message: str,
        *,
        repository: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.repository = repository
        if repository is not None:
            self.details["repository"] = repository


class NpmError(NetworkError):
    """Raised for failures related to the npm registry.

    Args:
        message: Error description.
        package_name: Name of the package involved.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("package_name",)

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.package_name = package_name
        if package_name is not None:
            self.details["package"] = package_name


class FileOperationError(RegKeeperError):
    """Raised when reading the catalog or writing the report fails.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
