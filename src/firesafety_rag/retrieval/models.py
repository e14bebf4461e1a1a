"""Domain models flowing through ingestion and retrieval."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SourceDocument(BaseModel):
    """A raw document read from a file or an upload.

    Attributes
    ----------
    source:
        Identifier of the origin (usually a file path).  Prefixes every
        record id derived from this document.
    text:
        Full raw text.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    text: str


class Chunk(BaseModel):
    """A bounded-length segment of a :class:`SourceDocument`.

    Attributes
    ----------
    source:
        ``source`` of the parent document.
    index:
        Ordinal position of the chunk within its parent.
    text:
        The chunk content.
    location:
        Where the chunk sits in the parent text, e.g.
        ``{"lines": {"from": 1, "to": 4}, "start_index": 0}``.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    index: int
    text: str
    location: dict[str, Any] = Field(default_factory=dict)

    @property
    def record_id(self) -> str:
        return record_id(self.source, self.index)


class VectorRecord(BaseModel):
    """An embedding plus the text and provenance it was computed from."""

    model_config = ConfigDict(frozen=True)

    id: str
    values: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_chunk(cls, chunk: Chunk, values: list[float]) -> VectorRecord:
        # Vector stores only accept flat metadata, so the location is JSON-encoded.
        return cls(
            id=chunk.record_id,
            values=values,
            metadata={
                "text": chunk.text,
                "loc": json.dumps(chunk.location),
                "source": chunk.source,
                "chunk_index": chunk.index,
            },
        )


class QueryMatch(BaseModel):
    """One hit of a top-K similarity query."""

    id: str
    score: float
    values: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        return str(self.metadata.get("text", ""))

    @property
    def source(self) -> str:
        return str(self.metadata.get("source", "unknown"))


class Answer(BaseModel):
    """A generated answer together with the context that grounded it."""

    text: str
    supporting_context: str
    matches: list[QueryMatch] = Field(default_factory=list)


class IngestionReport(BaseModel):
    """Counts produced by one ingestion call."""

    documents: int = 0
    chunks: int = 0
    records_pruned: int = 0


def record_id(source: str, index: int) -> str:
    """Return the deterministic record id ``<source>_<index>``."""
    return f"{source}_{index}"
