"""
AI Gateway — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the gateway's failure modes.
Why:   Callers must tell apart "the whole key pool is overloaded" from
       "this request is broken" and render each differently.
How:   Each exception carries a user-safe message and an optional context
       dict that is logged but never shown to end users.

Exception Hierarchy:
    GatewayError (base)
    ├── ConfigurationError   → fatal at startup (no credentials configured)
    ├── ValidationError      → caller input rejected before any upstream call
    └── PoolExhaustedError   → every key hit its quota across the retry budget

Upstream errors that are not quota related are NOT wrapped: they propagate
to the caller unmodified so their status code and message stay intact.
Quota errors never surface on their own; they are absorbed by rotation and,
at worst, become the __cause__ of a PoolExhaustedError.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message:  User-facing error description
        context:  Additional debug info (logged, not shown to users)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(GatewayError):
    """
    Raised when the gateway cannot be started with the current settings.

    When:    Zero Gemini API keys configured, or a tier has no model id.
    Effect:  The process must not serve traffic.
    """

    def __init__(
        self,
        message: str = "Gateway configuration is invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(GatewayError):
    """
    Raised when an operation receives input it cannot act on.

    When:    Blank text, non-positive summary length, unknown writing style,
             unsupported attachment type or size.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class PoolExhaustedError(GatewayError):
    """
    Raised when the retry budget is spent and every attempt hit a quota limit.

    What:    Synthetic "service unavailable, system overloaded" condition.
    Why distinct: Upstream fatal errors mean "this request is wrong"; this one
             means "try again later". Callers apply different backoff for each.

    Attributes:
        attempts:    How many upstream calls were made
        retry_after: Suggested seconds before the caller retries
    """

    def __init__(
        self,
        attempts: int,
        retry_after: Optional[int] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            "AI service is temporarily unavailable because the system is overloaded. "
            "Please try again in a few minutes."
        )
        ctx = context or {}
        ctx["attempts"] = attempts
        if operation:
            ctx["operation"] = operation
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.attempts = attempts
        self.retry_after = retry_after
        self.operation = operation
