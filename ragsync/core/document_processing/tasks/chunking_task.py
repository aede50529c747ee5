"""
Text chunking task.

Splits flattened document text into overlapping, size-bounded chunks that
never exceed the embedding model's input budget. Chunks prefer to end on a
sentence terminator or newline so each one stays semantically whole.

Dependencies: none
System role: Second stage of document ingestion pipeline
"""

CHARS_PER_TOKEN_ESTIMATE = 3
MAX_TOKENS_FOR_EMBEDDING = 8000
MAX_CHARS_PER_CHUNK = MAX_TOKENS_FOR_EMBEDDING * CHARS_PER_TOKEN_ESTIMATE

BREAK_CHARACTERS = (".", "!", "?", "\n")

# A break point is only honoured past this fraction of the window
MIN_BREAK_RATIO = 0.5


def _find_break_point(window: str) -> int:
    """Index of the last sentence terminator or newline in window, or -1."""
    return max(window.rfind(char) for char in BREAK_CHARACTERS)


def _force_split(text: str, max_chars: int) -> list[str]:
    """Split text longer than max_chars without overlap."""
    pieces: list[str] = []
    start = 0

    while start < len(text):
        end = min(start + max_chars, len(text))
        piece = text[start:end]

        if end < len(text):
            break_point = _find_break_point(piece)
            if break_point > max_chars * MIN_BREAK_RATIO:
                piece = piece[: break_point + 1]
                start += break_point + 1
            else:
                start += max_chars
        else:
            start = len(text)

        pieces.append(piece.strip())

    return [piece for piece in pieces if piece]


def chunk_text(
    text: str,
    chunk_size: int = 2000,
    overlap: int = 200,
    max_chars: int = MAX_CHARS_PER_CHUNK,
) -> list[str]:
    """
    Split text into overlapping chunks.

    Args:
        text: Text to split
        chunk_size: Target chunk size in characters
        overlap: Characters shared between consecutive chunks
        max_chars: Hard upper bound on any chunk (embedder token budget)

    Returns:
        list[str]: Stripped, non-empty chunks in document order; a text no
        longer than chunk_size is returned as its only element

    Raises:
        ValueError: When chunk_size or max_chars is not positive, or overlap is negative
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if max_chars <= 0:
        raise ValueError("max_chars must be positive")
    if overlap < 0:
        raise ValueError("overlap cannot be negative")

    text = text or ""
    if len(text) <= chunk_size:
        if len(text) <= max_chars:
            return [text]
        return _force_split(text, max_chars)

    window_size = min(chunk_size, max_chars)
    chunks: list[str] = []
    start = 0

    while start < len(text):
        end = min(start + window_size, len(text))
        chunk = text[start:end]

        if end < len(text):
            break_point = _find_break_point(chunk)
            if break_point > window_size * MIN_BREAK_RATIO:
                chunk = chunk[: break_point + 1]
                next_start = start + break_point + 1 - overlap
            else:
                next_start = start + window_size - overlap
            # Large overlaps must not stall or rewind the window
            start = max(next_start, start + 1)
        else:
            start = len(text)

        chunks.append(chunk.strip())

    return [chunk for chunk in chunks if chunk]


class ChunkingTask:
    """Split flattened documents into embedding-safe chunks."""

    def __init__(
        self,
        chunk_size: int = 2000,
        chunk_overlap: int = 200,
        max_chars: int = MAX_CHARS_PER_CHUNK,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            chunk_size: Target chunk size in characters
            chunk_overlap: Overlap between consecutive chunks
            max_chars: Hard bound derived from the embedder's token budget

        Raises:
            ValueError: When sizes are not positive or overlap is negative
        """
        if chunk_size <= 0 or max_chars <= 0:
            raise ValueError("chunk_size and max_chars must be positive")
        if chunk_overlap < 0:
            raise ValueError("chunk_overlap cannot be negative")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_chars = max_chars

    def chunk(self, text: str) -> list[str]:
        """
        Split text into chunks.

        Args:
            text: Flattened document text

        Returns:
            list[str]: Chunks no longer than max_chars
        """
        return chunk_text(text, self.chunk_size, self.chunk_overlap, self.max_chars)
