"""Error hierarchy for the cconf configuration store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "ConfError",
    "PathError",
    "ConfigKeyError",
    "ConfigValueError",
    "ConfigTargetError",
    "ProviderError",
    "UnsupportedFormatError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ErrorCodes",
]


class ConfError(Exception):
    """Base error for all cconf errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class PathError(ConfError):
    """Raised by the tree accessor when a path cannot be written."""

    def __init__(self, path: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="PATH_ERROR",
            message=f"Cannot set {path!r}: {reason}",
            details={"path": path, "reason": reason},
            **kwargs,
        )

    @property
    def path(self) -> str:
        """The path prefix at which the write failed."""
        return self.details["path"]

    @property
    def reason(self) -> str:
        return self.details["reason"]


class ConfigKeyError(ConfError):
    """Raised when a key cannot be used to set or address a configuration value."""

    def __init__(self, key: str, message: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_KEY_ERROR",
            message=f'"{key}" is not a valid key: {message}',
            details={"key": key, "reason": message},
            **kwargs,
        )

    @property
    def key(self) -> str:
        """The offending key or key prefix."""
        return self.details["key"]


class ConfigValueError(ConfError):
    """Raised when a configuration value cannot be used to configure a target."""

    def __init__(self, key: str, message: str, **kwargs: Any) -> None:
        key = key.strip(".")
        super().__init__(
            code="CONFIG_VALUE_ERROR",
            message=f'"{key}" points to an inappropriate configuration value: {message}',
            details={"key": key, "reason": message},
            **kwargs,
        )

    @property
    def key(self) -> str:
        """Dotted path to the configuration value."""
        return self.details["key"]


class ConfigTargetError(ConfError):
    """Raised when the population target itself cannot be configured."""

    def __init__(self, target: Any, **kwargs: Any) -> None:
        if target is None:
            message = "Unable to configure None"
        elif isinstance(target, type):
            message = f"Unable to configure the class {target.__name__}, pass an instance"
        else:
            message = f"Unable to configure an immutable {type(target).__name__}"
        super().__init__(
            code="CONFIG_TARGET_ERROR",
            message=message,
            details={"target_type": type(target).__name__},
            **kwargs,
        )


class ProviderError(ConfError):
    """Raised when a type provider does not meet the niladic single-output contract."""

    def __init__(self, name: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="PROVIDER_ERROR",
            message=f"Invalid provider for type '{name}': {reason}",
            details={"name": name, "reason": reason},
            **kwargs,
        )


class UnsupportedFormatError(ConfError):
    """Raised when no load function is registered for a file format."""

    def __init__(self, fmt: str, file_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="UNSUPPORTED_FORMAT",
            message=f"Please register a load function for the '{fmt}' format ({file_path})",
            details={"format": fmt, "file_path": file_path},
            **kwargs,
        )


class ConfigNotFoundError(ConfError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class ConfigParseError(ConfError):
    """Raised when a configuration file cannot be decoded."""

    def __init__(self, config_path: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_PARSE_ERROR",
            message=f"Cannot parse configuration file '{config_path}': {reason}",
            details={"config_path": config_path, "reason": reason},
            **kwargs,
        )


class ErrorCodes:
    """All cconf error codes as constants.

    Example:
        if error.code == ErrorCodes.CONFIG_KEY_ERROR:
            handle_bad_key()
    """

    PATH_ERROR = "PATH_ERROR"
    CONFIG_KEY_ERROR = "CONFIG_KEY_ERROR"
    CONFIG_VALUE_ERROR = "CONFIG_VALUE_ERROR"
    CONFIG_TARGET_ERROR = "CONFIG_TARGET_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_PARSE_ERROR = "CONFIG_PARSE_ERROR"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
