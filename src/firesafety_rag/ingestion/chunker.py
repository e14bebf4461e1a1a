"""Text chunking."""

from __future__ import annotations

from langchain_text_splitters import RecursiveCharacterTextSplitter

from firesafety_rag.config import settings
from firesafety_rag.errors import ConfigurationError
from firesafety_rag.retrieval.models import Chunk, SourceDocument

# Paragraph, line, sentence, word, then a hard cut.
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


def split(raw_text: str, max_chunk_size: int = settings.chunk_size, source: str = "") -> list[Chunk]:
    """Split *raw_text* into ordered, overlap-free chunks.

    Parameters
    ----------
    raw_text:
        Text to split.
    max_chunk_size:
        Maximum number of characters per chunk.
    source:
        Identifier stamped on every chunk.

    Returns
    -------
    list[Chunk]
        Chunks in document order.  Empty only when *raw_text* has no
        non-whitespace content.

    Raises
    ------
    ConfigurationError
        If *max_chunk_size* is not positive.
    """
    if max_chunk_size <= 0:
        raise ConfigurationError(f"max_chunk_size must be positive, got {max_chunk_size}")
    if not raw_text.strip():
        return []

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=max_chunk_size,
        chunk_overlap=0,
        length_function=len,
        separators=SEPARATORS,
        keep_separator="end",
        add_start_index=True,
    )
    pieces = splitter.create_documents([raw_text])

    chunks: list[Chunk] = []
    for index, piece in enumerate(pieces):
        start = piece.metadata.get("start_index", -1)
        chunks.append(
            Chunk(
                source=source,
                index=index,
                text=piece.page_content,
                location=_location(raw_text, piece.page_content, start),
            )
        )
    return chunks


def split_document(document: SourceDocument, max_chunk_size: int = settings.chunk_size) -> list[Chunk]:
    """Split a :class:`SourceDocument`, tagging chunks with its source."""
    return split(document.text, max_chunk_size, source=document.source)


def _location(raw_text: str, text: str, start: int) -> dict:
    if start < 0:
        return {}
    first_line = raw_text.count("\n", 0, start) + 1
    return {
        "lines": {"from": first_line, "to": first_line + text.count("\n")},
        "start_index": start,
    }
