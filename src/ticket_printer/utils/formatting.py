"""
Text formatting utilities for the thermal ticket printer client.
Column padding and wrapping for fixed-width paper.
"""

import textwrap
from typing import List

KEY_COLUMN_WIDTH = 20
KEY_SEPARATOR = ": "


def format_key_value(key: str, value: str, characters_per_line: int = 48) -> List[str]:
    """
    Format a detail line as an aligned key column followed by ": value".

    The key is truncated or right-padded to KEY_COLUMN_WIDTH so values line
    up. Values too long for the paper continue on following lines, indented
    under the value column.

    Args:
        key: Label text
        value: Value text
        characters_per_line: Paper width in characters
    """
    prefix = key[:KEY_COLUMN_WIDTH].ljust(KEY_COLUMN_WIDTH) + KEY_SEPARATOR
    value = str(value)
    available = characters_per_line - len(prefix)

    if len(prefix) + len(value) <= characters_per_line or available < 8:
        return [prefix + value]

    chunks = textwrap.wrap(value, width=available, break_long_words=True) or [""]
    indent = " " * len(prefix)
    return [prefix + chunks[0]] + [indent + chunk for chunk in chunks[1:]]


def wrap_text(text: str, characters_per_line: int = 48, bullet: str = "") -> List[str]:
    """
    Wrap free text to the paper width.

    Args:
        text: Text to wrap
        characters_per_line: Paper width in characters
        bullet: Optional leader for the first line; continuation lines are
            indented by its length
    """
    indent = " " * len(bullet)
    lines = textwrap.wrap(
        text,
        width=characters_per_line,
        initial_indent=bullet,
        subsequent_indent=indent,
    )
    return lines or [bullet.rstrip()]


def two_columns(left: str, right: str, characters_per_line: int = 48) -> str:
    """
    Place two fields on one line, right field flush to the paper edge.

    Falls back to a single space separator when both do not fit.
    """
    gap = characters_per_line - len(left) - len(right)
    if gap < 1:
        return f"{left} {right}"
    return left + " " * gap + right
