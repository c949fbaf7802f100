"""Boundary-aware text chunking with overlap."""

import re

from shared.models.document import ChunkMetadata, DocumentChunk, ParsedDocument

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
PARAGRAPH_BREAK = "\n\n"
SENTENCE_END = ". "


def clean_text(text: str) -> str:
    """Normalise line endings, collapse 3+ newlines to 2, and trim."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _EXCESS_NEWLINES.sub(PARAGRAPH_BREAK, text).strip()


class TextChunker:
    """Splits text into overlapping chunks of at most chunk_size characters.

    A cut is moved back to the last paragraph break, or failing that to the
    last sentence end, as long as that keeps the chunk longer than half of
    chunk_size.
    """

    def __init__(self, chunk_size: int = 1000, overlap: int = 100) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not 0 <= overlap < chunk_size:
            raise ValueError(f"overlap ({overlap}) must be >= 0 and less than chunk_size ({chunk_size})")
        self.chunk_size = chunk_size
        self.overlap = overlap

    def _find_cut(self, text: str, start: int, end: int) -> int:
        min_cut = start + self.chunk_size / 2

        # last paragraph break starting at or before end
        paragraph_end = text.rfind(PARAGRAPH_BREAK, 0, end + len(PARAGRAPH_BREAK))
        if paragraph_end > min_cut:
            return paragraph_end

        sentence_end = text.rfind(SENTENCE_END, 0, end + len(SENTENCE_END))
        if sentence_end > min_cut:
            return sentence_end + 1

        return end

    def split(self, text: str) -> list[str]:
        """Split text into non-empty chunks.

        Args:
            text (str): The raw document text.

        Returns:
            list[str]: The chunks in document order. Empty for blank text.
        """
        clean = clean_text(text)
        if not clean:
            return []
        if len(clean) <= self.chunk_size:
            return [clean]

        chunks: list[str] = []
        length = len(clean)
        start = 0
        while start < length:
            end = start + self.chunk_size
            if end < length:
                end = self._find_cut(clean, start, end)

            chunk = clean[start:end].strip()
            if chunk:
                chunks.append(chunk)

            if end >= length:
                break

            next_start = end - self.overlap
            # never move backwards, even when a boundary cut ate the overlap
            start = next_start if next_start > start else end

        return chunks

    def chunk_document(self, document: ParsedDocument) -> list[DocumentChunk]:
        """Split a parsed document and attach chunk metadata.

        Returns:
            list[DocumentChunk]: Chunks with dense chunk_index 0..N-1 and total_chunks N.
        """
        texts = self.split(document.content)
        return [
            DocumentChunk(
                id=f"{document.id}-chunk-{index}",
                content=text,
                metadata=ChunkMetadata(
                    document_id=document.id,
                    document_name=document.name,
                    document_path=document.path,
                    chunk_index=index,
                    total_chunks=len(texts),
                    category=document.category,
                    title=document.title,
                ),
            )
            for index, text in enumerate(texts)
        ]
