from typing import List
import logging

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 300


def chunk_text(text: str, target_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """
    Greedy word-bounded chunking.

    Words are appended to a running buffer until the next one would push it past
    `target_size` characters; the buffer is then emitted and restarted with that
    word. A word longer than `target_size` becomes a chunk of its own.
    """
    if target_size <= 0:
        raise ValueError("target_size must be a positive integer")
    if not text:
        return []

    chunks: List[str] = []
    buf: List[str] = []
    size = 0
    for word in text.split():
        extra = len(word) if not buf else len(word) + 1
        if buf and size + extra > target_size:
            chunks.append(" ".join(buf))
            buf = [word]
            size = len(word)
        else:
            buf.append(word)
            size += extra
    if buf:
        chunks.append(" ".join(buf))

    logger.debug("chunk.split chars=%d chunks=%d size=%d", len(text), len(chunks), target_size)
    return chunks
