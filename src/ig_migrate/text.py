"""
Text repair and truncation for exported post text.

Instagram writes its JSON export with every UTF-8 byte of a character
escaped as its own ``\\u00XX`` code unit, so an emoji such as U+1F60D
arrives as ``\\u00f0\\u009f\\u0098\\u008d``. Once parsed, the string holds
one character per original byte. ``decode_text`` turns those byte-valued
characters back into bytes and decodes them as UTF-8.
"""

import logging
import re
from typing import Any

from .constants import POST_TEXT_LIMIT, POST_TEXT_TRUNCATE_SUFFIX

logger = logging.getLogger(__name__)

# A literal backslash-u escape that survived JSON parsing
_ESCAPE_PATTERN = re.compile(r'\\u([0-9a-fA-F]{4})')


def _to_byte_values(text: str) -> bytes:
    """
    Map each character (or literal ``\\uXXXX`` escape) to one byte value.

    Raises:
        ValueError: If an escape or a character does not fit in a byte
    """
    values = bytearray()
    pos = 0

    while pos < len(text):
        if text.startswith('\\u', pos):
            match = _ESCAPE_PATTERN.match(text, pos)
            if not match:
                raise ValueError(f"Malformed escape sequence at offset {pos}")
            code = int(match.group(1), 16)
            pos = match.end()
        else:
            code = ord(text[pos])
            pos += 1

        if code > 0xFF:
            raise ValueError(f"Code unit {code:#06x} is not a byte value")
        values.append(code)

    return bytes(values)


def decode_text(text: str) -> str:
    """
    Repair a single mis-encoded string.

    Text that already contains characters outside the byte range is correct
    and is returned as-is, which makes the repair idempotent.

    Note:
        Correct text made only of characters up to U+00FF cannot be told
        apart from mis-encoded text when its code points also form valid
        UTF-8, so it is still re-decoded: ``"Â£"`` becomes ``"£"``.

    Args:
        text: Raw export text

    Returns:
        Repaired text, or ``text`` unchanged if it cannot be repaired
    """
    if text.isascii() and '\\u' not in text:
        return text

    if '\\u' not in text and any(ord(ch) > 0xFF for ch in text):
        return text

    try:
        return _to_byte_values(text).decode('utf-8')
    except ValueError as e:
        # UnicodeDecodeError is a ValueError too: clean Latin-1 text lands here
        logger.debug(f"Leaving text undecoded ({e}): {text[:50]!r}")
        return text


def decode(value: Any) -> Any:
    """
    Recursively repair strings inside lists and string-keyed dicts.

    Non-container, non-string values pass through unchanged. Decoding
    never raises; on any failure the original value is returned.

    Args:
        value: Parsed JSON value

    Returns:
        Value of the same shape with repaired strings
    """
    try:
        if isinstance(value, str):
            return decode_text(value)

        if isinstance(value, (list, tuple)):
            return type(value)(decode(item) for item in value)

        if isinstance(value, dict):
            return {key: decode(item) for key, item in value.items()}

        return value
    except Exception as e:
        logger.error(f"Error decoding UTF-8 data: {e}")
        return value


def truncate(
    text: str,
    limit: int = POST_TEXT_LIMIT,
    suffix: str = POST_TEXT_TRUNCATE_SUFFIX
) -> str:
    """
    Truncate text to ``limit`` characters, the suffix included.

    Args:
        text: Text to truncate
        limit: Maximum length of the result
        suffix: Marker appended when text is cut

    Returns:
        ``text`` if it fits, otherwise a string of exactly ``limit`` characters
        ending with ``suffix``

    Example:
        >>> truncate("a" * 301)[-3:]
        '...'
    """
    if len(text) <= limit:
        return text

    keep = max(limit - len(suffix), 0)
    return (text[:keep] + suffix)[:limit]
