"""Document splitting for refine extraction.

Long texts are cut into overlapping chunks with LangChain's
RecursiveCharacterTextSplitter. It tries the coarsest boundary first and
only falls back to a finer one when a piece is still too long:

  paragraph ("\\n\\n") → line ("\\n") → sentence (". ") → word (" ") → character

so no chunk exceeds `chunk_size` characters unless one indivisible unit
is longer by itself. Neighbouring chunks share up to `overlap` characters,
which keeps a sentence cut at a boundary readable from both sides.

Each Chunk remembers where it starts in the source text, so
text[chunk.start : chunk.start + len(chunk.text)] == chunk.text.
"""

from dataclasses import dataclass

from langchain_text_splitters import RecursiveCharacterTextSplitter

from src.utils.logging import log, get_logger

MODULE = "llm.splitter"
logger = get_logger()

SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


@dataclass(frozen=True, slots=True)
class Chunk:
    """An ordered slice of a source text."""

    index: int
    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)


def split_document(text: str, chunk_size: int, overlap: int) -> list[Chunk]:
    """Split `text` into ordered, overlapping chunks.

    Text shorter than `chunk_size` comes back as a single chunk; empty or
    whitespace-only text gives no chunks at all.

    Callers guarantee overlap < chunk_size (RefineParams validates it).

    Raises:
        ValueError: chunk_size is not positive or overlap is negative
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise ValueError(f"overlap must not be negative, got {overlap}")

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=overlap,
        separators=SEPARATORS,
        keep_separator="end",
        add_start_index=True,
    )
    documents = splitter.create_documents([text])

    chunks = [
        Chunk(index=i, text=doc.page_content, start=doc.metadata["start_index"])
        for i, doc in enumerate(documents)
    ]
    log.debug(logger, MODULE, "split_done",
              f"Document split into {len(chunks)} chunks",
              text_length=len(text), chunk_size=chunk_size, overlap=overlap,
              chunk_count=len(chunks))
    return chunks
