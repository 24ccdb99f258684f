"""
Custom Exceptions

This module defines the error taxonomy of the link service. Endpoints
translate each of these into a specific HTTP status code:

- InvalidURLError, InvalidCodeFormatError -> 400
- CodeConflictError -> 409
- LinkNotFoundError -> 404
- AllocationExhaustedError, StoreFailureError -> 500
"""

from typing import Optional


class TinyLinkException(Exception):
    """Base exception for the link service."""
    pass


class InvalidURLError(TinyLinkException):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid or missing URL. Use http(s)://..."):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidCodeFormatError(TinyLinkException):
    """Raised when a caller-supplied code does not match [A-Za-z0-9]{6,8}."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Custom code must match [A-Za-z0-9]{{6,8}}: '{code}'")


class CodeConflictError(TinyLinkException):
    """Raised when a code is already stored."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Code '{code}' already exists")


class AllocationExhaustedError(TinyLinkException):
    """Raised when code generation gives up after the retry cap."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not allocate a free code after {attempts} attempts")


class LinkNotFoundError(TinyLinkException):
    """Raised when a code is absent, deleted or malformed."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Code '{code}' not found")


class StoreFailureError(TinyLinkException):
    """Raised when database operations fail. Partial work has been rolled back."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
