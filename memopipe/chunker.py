"""
Text chunking for APIs with a per-block size limit.

Notion rejects rich-text content longer than 2000 characters, so transcripts
are split into blocks of at most ``max_size`` characters before publishing.
Breaks happen on a space or newline when one is found close enough to the
limit; that single whitespace character is dropped.  Otherwise the text is
cut hard at the limit.
"""

from typing import List, Optional

DEFAULT_CHUNK_SIZE = 1900
BREAK_LOOKBACK = 100
BREAK_CHARS = (" ", "\n")


def split_text(text: str, max_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """Split ``text`` into ordered chunks no longer than ``max_size``.

    Args:
        text: The text to split.  Empty text yields no chunks.
        max_size: Maximum length of each chunk.

    Returns:
        The chunks in original order.  Joining them with the whitespace
        character consumed at each break reproduces ``text``.

    Raises:
        ValueError: If ``max_size`` is smaller than 1.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be at least 1, got {max_size}")

    chunks: List[str] = []
    start = 0
    length = len(text)
    while start < length:
        if length - start <= max_size:
            chunks.append(text[start:])
            break

        end = start + max_size
        # text[end] exists here, so a break right at the limit is allowed
        brk = _find_break(text, start, end)
        if brk is None:
            chunks.append(text[start:end])
            start = end
        else:
            chunks.append(text[start:brk])
            start = brk + 1
    return chunks


def _find_break(text: str, start: int, end: int) -> Optional[int]:
    lower = max(start, end - BREAK_LOOKBACK)
    for pos in range(end, lower, -1):
        if text[pos] in BREAK_CHARS:
            return pos
    return None
