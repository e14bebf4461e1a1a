"""Unit tests for the chunker module."""

import json

import pytest

from firesafety_rag.errors import ConfigurationError
from firesafety_rag.ingestion.chunker import split, split_document
from firesafety_rag.retrieval.models import SourceDocument, VectorRecord

LONG_TEXT = (
    "Compartment walls must provide 60 minutes of fire resistance. "
    "Escape routes need protected lobbies.\n\n"
    "Sprinklers are required above 30 metres. Dry risers serve upper floors.\n"
    "Smoke vents must open automatically on detection. " * 8
)


def test_split_long_text_into_several_chunks() -> None:
    """A text longer than max_chunk_size should be split."""
    chunks = split("word " * 500, max_chunk_size=256)
    assert len(chunks) > 1


def test_no_chunk_exceeds_max_size() -> None:
    for size in (20, 64, 200):
        assert all(len(c.text) <= size for c in split(LONG_TEXT, max_chunk_size=size))


def test_concatenation_reproduces_text_modulo_whitespace() -> None:
    chunks = split(LONG_TEXT, max_chunk_size=80)
    joined = "".join(c.text for c in chunks)
    assert "".join(joined.split()) == "".join(LONG_TEXT.split())


def test_chunks_are_ordered_and_indexed() -> None:
    chunks = split(LONG_TEXT, max_chunk_size=80, source="regs.txt")
    assert [c.index for c in chunks] == list(range(len(chunks)))
    starts = [c.location["start_index"] for c in chunks]
    assert starts == sorted(starts)
    assert all(c.source == "regs.txt" for c in chunks)


def test_short_text_is_one_chunk() -> None:
    chunks = split("A.B.C.", max_chunk_size=1000)
    assert len(chunks) == 1
    assert chunks[0].text == "A.B.C."


def test_prefers_paragraph_boundaries() -> None:
    text = "First paragraph about doors.\n\nSecond paragraph about stairs."
    chunks = split(text, max_chunk_size=40)
    assert [c.text for c in chunks] == ["First paragraph about doors.", "Second paragraph about stairs."]


def test_sentence_boundaries_stay_with_their_sentence() -> None:
    text = "Fire doors must self-close. Escape stairs need lobbies. Sprinklers are required."
    chunks = split(text, max_chunk_size=40)
    assert [c.text for c in chunks] == [
        "Fire doors must self-close.",
        "Escape stairs need lobbies.",
        "Sprinklers are required.",
    ]


def test_location_tracks_line_numbers() -> None:
    text = "line one\nline two\n\nline four"
    chunks = split(text, max_chunk_size=18)
    assert chunks[0].location["lines"] == {"from": 1, "to": 2}
    assert chunks[-1].location["lines"]["to"] == 4


@pytest.mark.parametrize("text", ["", "   \n\n  "])
def test_empty_text_yields_no_chunks(text: str) -> None:
    assert split(text, max_chunk_size=100) == []


@pytest.mark.parametrize("size", [0, -5])
def test_non_positive_size_raises(size: int) -> None:
    with pytest.raises(ConfigurationError, match="max_chunk_size"):
        split("anything", max_chunk_size=size)


def test_split_document_stamps_source_and_record_ids() -> None:
    doc = SourceDocument(source="doc1", text="Short text.\n\nAnother paragraph here.")
    chunks = split_document(doc, max_chunk_size=15)
    assert [c.record_id for c in chunks] == [f"doc1_{i}" for i in range(len(chunks))]


def test_vector_record_from_chunk_flattens_location() -> None:
    chunk = split("A.B.C.", max_chunk_size=100, source="doc1")[0]
    record = VectorRecord.from_chunk(chunk, [0.1, 0.2])
    assert record.id == "doc1_0"
    assert record.metadata["text"] == "A.B.C."
    assert record.metadata["source"] == "doc1"
    assert json.loads(record.metadata["loc"]) == {"lines": {"from": 1, "to": 1}, "start_index": 0}
