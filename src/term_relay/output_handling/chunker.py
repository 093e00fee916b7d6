"""
Message Chunker for Term Relay

Splits long text into pieces that fit the channel's per-message limit,
breaking on line boundaries where possible.
"""

from typing import List

TRIM_CHARS = " \n"


def split_by_lines(text: str, limit: int) -> List[str]:
    """Split ``text`` into pieces of at most ``limit`` characters.

    Each piece ends at the last line break inside its window; a line longer
    than ``limit`` is hard-cut. Pieces are trimmed of surrounding spaces and
    newlines and empty pieces are dropped. The result is never empty.

    Raises:
        ValueError: if ``limit`` is not positive.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")

    if len(text) <= limit:
        return [text.strip(TRIM_CHARS)]

    pieces = []
    start = 0
    total = len(text)
    while start < total:
        if total - start <= limit:
            pieces.append(text[start:])
            break

        end = start + limit
        newline = text.rfind('\n', start, end)
        cut = newline + 1 if newline != -1 else end
        pieces.append(text[start:cut])
        start = cut

    results = [piece.strip(TRIM_CHARS) for piece in pieces]
    return [piece for piece in results if piece] or [""]


def keep_tail(text: str, max_chars: int) -> str:
    """Keep the last ``max_chars`` characters of ``text``"""
    if max_chars <= 0:
        return ""
    if len(text) <= max_chars:
        return text
    return text[-max_chars:]
