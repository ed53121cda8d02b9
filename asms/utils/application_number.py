"""Utility functions for application number generation."""
import secrets
import time

APPLICATION_NUMBER_PREFIX = "APP"


def generate_application_number(prefix: str = APPLICATION_NUMBER_PREFIX) -> str:
    """
    Generate an externally displayable application number.

    Format: prefix + Unix seconds + 10 upper-case hex characters (40 random bits),
    e.g. APP1760889600A3F09C11D2. The time part keeps numbers roughly sortable;
    the random part keeps numbers drawn within the same second apart.
    Uniqueness is finally enforced by the unique constraint on
    applications.application_number.
    """
    return f"{prefix}{int(time.time())}{secrets.token_hex(5).upper()}"
