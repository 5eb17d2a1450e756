"""Tests for document splitting."""

import pytest

from src.llm.splitter import Chunk, split_document

PARAGRAPH = (
    "The committee met on Tuesday to review the annual budget. "
    "Several members raised concerns about the maintenance costs. "
    "A decision was postponed until the next session."
)


def _long_text(paragraphs: int = 12) -> str:
    return "\n\n".join(f"{i}. {PARAGRAPH}" for i in range(paragraphs))


def test_short_text_single_chunk():
    chunks = split_document("This is a text", chunk_size=2000, overlap=100)
    assert chunks == [Chunk(index=0, text="This is a text", start=0)]


def test_empty_text_no_chunks():
    assert split_document("", chunk_size=100, overlap=10) == []
    assert split_document("   \n\n  ", chunk_size=100, overlap=10) == []


def test_chunks_respect_size_bound():
    chunks = split_document(_long_text(), chunk_size=300, overlap=50)
    assert len(chunks) > 1
    assert all(len(c.text) <= 300 for c in chunks)


def test_chunks_are_ordered_and_indexed():
    chunks = split_document(_long_text(), chunk_size=300, overlap=50)
    assert [c.index for c in chunks] == list(range(len(chunks)))
    starts = [c.start for c in chunks]
    assert starts == sorted(starts)


def test_start_offsets_point_into_source():
    text = _long_text()
    for chunk in split_document(text, chunk_size=300, overlap=50):
        assert text[chunk.start:chunk.end] == chunk.text


def test_chunks_cover_all_content():
    text = _long_text()
    chunks = split_document(text, chunk_size=300, overlap=50)

    covered = [False] * len(text)
    for chunk in chunks:
        for i in range(chunk.start, chunk.end):
            covered[i] = True
    # Only whitespace at chunk boundaries may be dropped
    assert all(covered[i] or text[i].isspace() for i in range(len(text)))


@pytest.mark.parametrize("text", [_long_text(), "  \n" + _long_text() + "\n\n  "])
def test_chunks_rebuild_source(text):
    chunks = split_document(text, chunk_size=300, overlap=50)

    rebuilt = chunks[0].text
    end = chunks[0].end
    for chunk in chunks[1:]:
        if chunk.start > end:
            gap = text[end:chunk.start]
            assert gap.isspace()
            rebuilt += gap
        # Drop the part already taken from the previous chunk
        rebuilt += chunk.text[max(0, end - chunk.start):]
        end = max(end, chunk.end)

    assert rebuilt == text.strip()


def test_neighbouring_chunks_overlap_within_bound():
    chunks = split_document(_long_text(), chunk_size=300, overlap=50)
    for previous, current in zip(chunks, chunks[1:]):
        assert current.start >= previous.start
        assert previous.end - current.start <= 50


def test_invalid_parameters():
    with pytest.raises(ValueError):
        split_document("text", chunk_size=0, overlap=0)
    with pytest.raises(ValueError):
        split_document("text", chunk_size=10, overlap=-1)
