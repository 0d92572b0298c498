"""
Error responses returned in place of results.

Every fallible operation of the connection manager returns either its result
model or an ErrorResponse. Stack traces are attached only outside production.
"""

import traceback
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..config import include_stack_traces


class ErrorResponse(BaseModel):
    """Standardized error payload."""

    error: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(default=None, description="Provider error code, if any")
    stack: Optional[str] = Field(default=None, description="Stack trace (non-production only)")

    @classmethod
    def from_exception(cls, exc: BaseException, message: Optional[str] = None) -> "ErrorResponse":
        """
        Build an error response from a caught exception.

        Args:
            exc: The exception to describe
            message: Optional prefix; the exception text is appended to it

        Returns:
            ErrorResponse: Response carrying the exception code and traceback
        """
        detail = str(exc) or exc.__class__.__name__
        text = f"{message}: {detail}" if message else detail
        code = getattr(exc, "code", None)
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return create_error_response(text, code=str(code) if code else None, stack=stack)


def create_error_response(
    message: str,
    code: Optional[str] = None,
    stack: Optional[str] = None
) -> ErrorResponse:
    """
    Create a standardized error response.

    Args:
        message: Error message
        code: Optional error code
        stack: Optional stack trace, dropped when ENVIRONMENT=production

    Returns:
        ErrorResponse: The error payload
    """
    return ErrorResponse(
        error=message,
        code=code or None,
        stack=stack if stack and include_stack_traces() else None
    )


def is_error_response(value: Any) -> bool:
    """Check if a result is an error response."""
    return isinstance(value, ErrorResponse)
