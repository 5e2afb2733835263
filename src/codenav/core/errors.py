"""codenav error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Query (invalid argument, not found)
- 4xxx: Store
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Query (3xxx)
    INVALID_ARGUMENT = 3001
    PROJECT_NOT_FOUND = 3101
    METHOD_NOT_FOUND = 3102
    CLASS_NOT_FOUND = 3103
    INCOMPLETE_GROUND_TRUTH = 3201

    # Store (4xxx)
    STORE_READ_FAILED = 4001
    STORE_WRITE_FAILED = 4002
    STORE_DELETE_FAILED = 4003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001
    INVALID_STATE_TRANSITION = 9002


@dataclass(frozen=True, slots=True)
class CodeNavError(Exception):
    """Base error with structured context for CLI and API responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'METHOD_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CodeNavError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class InvalidArgumentError(CodeNavError):
    """Caller supplied a blank identifier or an out-of-range parameter."""

    @classmethod
    def required(cls, name: str) -> "InvalidArgumentError":
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"{name} is required",
            details={"argument": name},
        )

    @classmethod
    def out_of_range(cls, name: str, value: Any, reason: str) -> "InvalidArgumentError":
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"Invalid {name}: {reason}",
            details={"argument": name, "value": str(value), "reason": reason},
        )

    @classmethod
    def incomplete_ground_truth(cls, path: str, errors: list[str]) -> "InvalidArgumentError":
        first = errors[0] if errors else "no facts"
        return cls(
            code=ErrorCode.INCOMPLETE_GROUND_TRUTH,
            message=f"Ground truth at {path} is incomplete ({first}); refusing to delete facts",
            details={"path": path, "errors": list(errors)},
        )


class NotFoundError(CodeNavError):
    """Unknown project, method, or class."""

    @classmethod
    def project(cls, project_id: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.PROJECT_NOT_FOUND,
            message=f"Project with ID '{project_id}' not found",
            details={"project_id": project_id},
        )

    @classmethod
    def method(cls, fqn: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.METHOD_NOT_FOUND,
            message=f"Method '{fqn}' not found",
            details={"method": fqn},
        )

    @classmethod
    def klass(cls, fqn: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.CLASS_NOT_FOUND,
            message=f"Class '{fqn}' not found",
            details={"class": fqn},
        )


class StoreError(CodeNavError):
    """Underlying persistence failure."""

    @classmethod
    def read_failed(cls, reason: str, **details: Any) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_READ_FAILED,
            message=f"Store read failed: {reason}",
            details=details,
        )

    @classmethod
    def write_failed(cls, reason: str, **details: Any) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_WRITE_FAILED,
            message=f"Store write failed: {reason}",
            details=details,
        )

    @classmethod
    def delete_failed(cls, reason: str, **details: Any) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_DELETE_FAILED,
            message=f"Store delete failed: {reason}",
            details=details,
        )


class InternalError(CodeNavError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )

    @classmethod
    def invalid_transition(cls, current: str, target: str) -> "InternalError":
        return cls(
            code=ErrorCode.INVALID_STATE_TRANSITION,
            message=f"Cannot transition from {current} to {target}",
            details={"current": current, "target": target},
        )
