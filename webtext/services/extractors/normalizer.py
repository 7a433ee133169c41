"""Text normalization for extracted page content."""

from __future__ import annotations

import re

# Whitespace other than newline (spaces, tabs, CR, NBSP, ideographic space...)
_INLINE_WHITESPACE = re.compile(r"[^\S\n]+")
_BLANK_LINES = re.compile(r"\n\s*\n")

STRICT_MIN_LINE_LENGTH = 3


def normalize_text(text: str | None, strict: bool = True) -> str:
    """Collapse whitespace and drop empty or degenerate lines.

    Runs of inline whitespace become a single space, consecutive blank lines
    collapse to one, then every line is trimmed and lines that are empty (or,
    when ``strict``, shorter than three characters such as "×" or "▶") are
    dropped. Idempotent on its own output.

    Args:
        text: Raw text, e.g. an element's innerText.
        strict: Also drop lines shorter than ``STRICT_MIN_LINE_LENGTH``.

    Returns:
        Normalized text with lines joined by ``\\n``.
    """
    if not text:
        return ""

    text = _INLINE_WHITESPACE.sub(" ", text)
    text = _BLANK_LINES.sub("\n\n", text)

    min_length = STRICT_MIN_LINE_LENGTH if strict else 1
    lines = []
    for line in text.split("\n"):
        stripped = line.strip()
        if len(stripped) >= min_length:
            lines.append(stripped)

    return "\n".join(lines)
