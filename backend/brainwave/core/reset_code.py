"""
Password reset code generator.

Generates the 6-digit numeric codes used as the bearer credential of the
password reset flow.
Example: 482913
"""

import secrets

from brainwave.config import get_settings

settings = get_settings()


def generate_reset_code() -> str:
    """
    Generate a random reset code.

    Format: six decimal digits, never starting with zero.
    Example: 482913

    Returns:
        A random reset code string
    """
    low = settings.security.RESET_CODE_MIN
    high = settings.security.RESET_CODE_MAX
    number = low + secrets.randbelow(high - low + 1)

    return str(number)


def is_valid_reset_code(code: str) -> bool:
    """
    Validate reset code format.

    Args:
        code: Code to validate

    Returns:
        True if code matches expected format
    """
    if not code or not code.isdigit():
        return False

    try:
        number = int(code)
    except ValueError:
        return False

    return settings.security.RESET_CODE_MIN <= number <= settings.security.RESET_CODE_MAX
