"""
Result object for error handling throughout Stashkeeper.

All operations that can fail return a Result object instead of raising exceptions.
This provides clear, type-safe error handling and makes the API predictable.

Validation failures additionally carry a path: the chain of locations
(e.g. ``Item 3`` then ``Contents[1]``) leading to the offending field.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Tuple


class ErrorCode(Enum):
    """
    Standard error codes for Result objects.

    Provides machine-readable error classification that the web layer
    maps onto HTTP status codes.
    """

    # Caller errors
    UNAUTHENTICATED = "unauthenticated"
    RATE_LIMITED = "rate_limited"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"

    # Infrastructure errors (retryable by the caller)
    INFRASTRUCTURE = "infrastructure"

    # Generic errors
    UNEXPECTED_ERROR = "unexpected_error"

    def __str__(self) -> str:
        """Return the error code value."""
        return self.value


@dataclass(frozen=True)
class Result:
    """
    Represents the result of an operation that can succeed or fail.

    Attributes:
        success: Whether the operation succeeded
        data: The result data if successful
        error: Reason for the failure (innermost message)
        error_code: Machine-readable error code if failed
        path: Location chain of the failure, outermost first

    Examples:
        >>> result = Result.ok({"stash": 3})
        >>> if result.success:
        ...     print(result.data)

        >>> result = Result.fail("Invalid stack size", ErrorCode.INVALID_ARGUMENT)
        >>> result.within("Item 2").message
        'Item 2: Invalid stack size'
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    path: Tuple[str, ...] = field(default_factory=tuple)

    @staticmethod
    def ok(data: Any = None) -> 'Result':
        """
        Create a successful result.

        Args:
            data: Optional data to return

        Returns:
            Result with success=True
        """
        return Result(success=True, data=data)

    @staticmethod
    def fail(error: str, code: Optional[str | ErrorCode] = None) -> 'Result':
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            code: Machine-readable error code (ErrorCode enum or string)

        Returns:
            Result with success=False

        Examples:
            >>> Result.fail("Unknown item", ErrorCode.NOT_FOUND)
            >>> Result.fail("Validation error", "CUSTOM_ERROR")
        """
        error_code_str = code.value if isinstance(code, ErrorCode) else code
        return Result(success=False, error=error, error_code=error_code_str)

    def within(self, segment: str) -> 'Result':
        """
        Qualify a failure with an enclosing location.

        Successful results are returned unchanged.
        """
        if self.success:
            return self
        return replace(self, path=(segment,) + self.path)

    @property
    def message(self) -> Optional[str]:
        """Full reason chain, e.g. ``Item 0: Contents[1]: Outside container bounds``."""
        if self.success:
            return None
        return ': '.join(self.path + (self.error,))

    def __bool__(self) -> bool:
        """Allow using Result in boolean context: if result: ..."""
        return self.success


__all__ = ['ErrorCode', 'Result']
