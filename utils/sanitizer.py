"""
Input Sanitization Module

Cleans free text typed by the operator or read from import files before it
is stored. Names are the join key between catalogs and tickets, so they are
always stored in canonical upper-case form.
"""

import re


def sanitize_text(text, max_length=10000):
    """
    Sanitize free text for storage.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)

    Returns:
        Cleaned string, truncated if necessary
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    # Remove control characters and null bytes
    text = re.sub(r'[\x00-\x1f\x7f-\x9f]', ' ', text)

    # Collapse runs of whitespace and trim
    text = re.sub(r'\s+', ' ', text).strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip()

    return text


def sanitize_name(name, max_length=120):
    """
    Sanitize an ingredient or pizza name.

    Returns the canonical upper-case form, or '' when nothing usable is left.
    """
    return sanitize_text(name, max_length=max_length).upper()


def allowed_file(filename, extensions):
    """Check an uploaded filename against an extension whitelist."""
    return bool(filename) and '.' in filename and filename.rsplit('.', 1)[1].lower() in extensions
