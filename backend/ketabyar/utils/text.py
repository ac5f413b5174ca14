"""Text utilities for log-safe string handling."""

import re

# Break points considered when shortening text (Latin and Persian punctuation)
_BREAK_CHARS = {" ", "\n", "\t", ",", ".", "!", "?", ";", ":", "-", "،", "؛", "؟"}


def safe_truncate(text: str, max_chars: int, suffix: str = "...") -> str:
    """Shorten text for log lines, preferring a word boundary.

    Control characters are removed and runs of whitespace collapsed so a
    selection spanning several lines stays on one log line.

    Args:
        text: Text to truncate
        max_chars: Maximum characters (excluding suffix)
        suffix: Suffix to append if truncated (default "...")

    Returns:
        Truncated text with suffix if needed
    """
    if not text:
        return ""

    text = re.sub(r"[\x00-\x1f\x7f]+", " ", text)
    text = re.sub(r" {2,}", " ", text).strip()

    if len(text) <= max_chars:
        return text

    truncated = text[:max_chars]

    # Look back up to 20 characters for a break point
    for i in range(1, min(20, max_chars)):
        if truncated[-i] in _BREAK_CHARS:
            truncated = truncated[:-i].rstrip()
            break

    return truncated + suffix
