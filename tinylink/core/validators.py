"""
Input Validators

Format rules shared by the allocator, the resolver and the API layer.
Both checks run before any database access.
"""

import re
from urllib.parse import urlparse

CODE_PATTERN = re.compile(r"^[A-Za-z0-9]{6,8}$")

ALLOWED_SCHEMES = {"http", "https"}


def is_valid_code(code: object) -> bool:
    """
    Check a short code against the wire format ``^[A-Za-z0-9]{6,8}$``.

    Args:
        code: The candidate code (any type; non-strings are rejected)

    Returns:
        True if the code is well-formed, False otherwise
    """
    if not isinstance(code, str):
        return False
    # fullmatch: "$" alone would accept a trailing newline
    return CODE_PATTERN.fullmatch(code) is not None


def is_valid_url(url: object) -> bool:
    """
    Validate that a URL is absolute and uses http or https.

    Args:
        url: The URL string to validate

    Returns:
        True if valid, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    if result.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    return bool(result.hostname)
