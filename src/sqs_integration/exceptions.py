# src/sqs_integration/exceptions.py

"""
Shared custom exceptions for the SQS integration stack.

Only configuration problems are raised here. Errors from the CDK itself
(invalid constructs, missing assets) propagate to the caller unchanged.

Exception Hierarchy:
- SqsIntegrationError (base)
  - ConfigurationError
    - CodeBundleNotFoundError
    - InvalidRuntimeError
    - VisibilityTimeoutError
"""

from typing import Any, Dict, Optional


class SqsIntegrationError(Exception):
    """Base exception for all SQS integration errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = dict(context) if context else {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(SqsIntegrationError):
    """Raised when there's an error in the deployment configuration."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "CONFIGURATION_ERROR")
        super().__init__(message, **kwargs)


class CodeBundleNotFoundError(ConfigurationError):
    """Raised when the function code bundle directory does not exist."""

    def __init__(self, path: str, **kwargs):
        message = f"Function code bundle not found: {path}"
        super().__init__(
            message,
            error_code="CODE_BUNDLE_NOT_FOUND",
            context={"path": path},
            **kwargs,
        )


class InvalidRuntimeError(ConfigurationError):
    """Raised when the function runtime tag is not supported."""

    def __init__(self, runtime: str, supported: list[str], **kwargs):
        message = f"Unsupported function runtime '{runtime}', expected one of {supported}"
        super().__init__(
            message,
            error_code="INVALID_RUNTIME",
            context={"runtime": runtime, "supported": supported},
            **kwargs,
        )


class VisibilityTimeoutError(ConfigurationError):
    """Raised when the queue visibility timeout is shorter than the function timeout."""

    def __init__(self, visibility_timeout_seconds: int, function_timeout_seconds: int, **kwargs):
        message = (
            f"Queue visibility timeout ({visibility_timeout_seconds}s) must be at least "
            f"the function timeout ({function_timeout_seconds}s)"
        )
        super().__init__(
            message,
            error_code="VISIBILITY_TIMEOUT_TOO_SHORT",
            context={
                "visibility_timeout_seconds": visibility_timeout_seconds,
                "function_timeout_seconds": function_timeout_seconds,
            },
            **kwargs,
        )


# === Utility Functions ===

def get_error_context(error: Exception) -> Dict[str, Any]:
    """Extract error context for logging."""
    if isinstance(error, SqsIntegrationError):
        return error.to_dict()
    return {
        "error_type": error.__class__.__name__,
        "message": str(error),
    }
