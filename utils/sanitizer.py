"""
Input Sanitization Module

Normalizes user input before it is stored. Output escaping is left to
Jinja's autoescape, so values are stored as typed (minus control chars).
"""

import re

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')


def sanitize_text(text, max_length=10000):
    """
    Sanitize free text.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)

    Returns:
        Stripped string without control characters, truncated if necessary
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    # Strip leading/trailing whitespace
    text = text.strip()

    # Remove control characters and null bytes (newlines and tabs are kept)
    text = CONTROL_CHARS.sub('', text)

    # Truncate if too long
    if len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_name(name):
    """
    Normalize a record name: single-spaced, lower-case, no control chars.

    Names are compared and stored lower-case, so "Fudge" and "fudge "
    are the same ingredient.
    """
    if not name:
        return ''

    if not isinstance(name, str):
        name = str(name)

    name = CONTROL_CHARS.sub('', name)
    name = re.sub(r'\s+', ' ', name).strip()

    return name.lower()
