"""Unit tests for services.knowledge_ingest.Chunker."""

import pytest

from services.knowledge_ingest.Chunker import TextChunker, clean_text
from shared.models.document import ParsedDocument


def _document(content: str) -> ParsedDocument:
    return ParsedDocument(
        id="returns-0123456789ab",
        name="returns.txt",
        path="/docs/faq/returns.txt",
        content=content,
        category="faq",
        title="Return policy",
    )


@pytest.mark.unit
class TestCleanText:
    """Tests for text normalisation before chunking."""

    def test_normalises_line_endings(self):
        assert clean_text("a\r\nb\rc") == "a\nb\nc"

    def test_collapses_blank_line_runs(self):
        assert clean_text("a\n\n\n\n\nb") == "a\n\nb"

    def test_strips_outer_whitespace(self):
        assert clean_text("  \n text \n ") == "text"


@pytest.mark.unit
class TestTextChunker:
    """Tests for TextChunker.split."""

    def test_rejects_overlap_not_smaller_than_size(self):
        with pytest.raises(ValueError):
            TextChunker(chunk_size=100, overlap=100)

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            TextChunker(chunk_size=0, overlap=0)

    def test_empty_text_gives_no_chunks(self):
        assert TextChunker(100, 10).split("   \n\n  ") == []

    def test_short_text_is_single_cleaned_chunk(self):
        chunks = TextChunker(100, 10).split("Hello\r\nworld\n\n\n\n")
        assert chunks == ["Hello\nworld"]

    def test_text_of_exactly_chunk_size_is_single_chunk(self):
        text = "x" * 100
        assert TextChunker(100, 10).split(text) == [text]

    def test_hard_cut_without_boundaries(self):
        chunks = TextChunker(100, 10).split("a" * 250)

        assert chunks[0] == "a" * 100
        assert all(len(chunk) <= 100 for chunk in chunks)
        # each chunk starts overlap characters before the previous one ended
        assert len(chunks) == 3

    def test_prefers_paragraph_break(self):
        text = "A" * 70 + "\n\n" + "B" * 70
        chunks = TextChunker(100, 10).split(text)

        assert chunks[0] == "A" * 70
        assert chunks[-1].endswith("B" * 70)

    def test_falls_back_to_sentence_end(self):
        text = "First sentence is here and it is long enough. " + "word " * 30
        chunks = TextChunker(100, 10).split(text)

        assert chunks[0].endswith(".")

    def test_ignores_boundary_in_first_half(self):
        text = "Short. " + "z" * 200
        chunks = TextChunker(100, 10).split(text)

        assert len(chunks[0]) == 100

    def test_no_chunk_is_blank(self):
        text = ("Paragraph one.\n\n" + " " * 80 + "\n\nParagraph two. ") * 10
        chunks = TextChunker(60, 20).split(text)

        assert chunks
        assert all(chunk.strip() for chunk in chunks)

    def test_always_terminates_when_cut_consumes_overlap(self):
        text = ("x" * 55 + ". ") * 20
        chunks = TextChunker(100, 90).split(text)

        assert chunks
        assert all(len(chunk) <= 100 for chunk in chunks)

    def test_tail_after_early_sentence_cut_is_kept(self):
        text = "x" * 55 + ". " + "y" * 60
        chunks = TextChunker(100, 90).split(text)

        assert chunks == ["x" * 55 + ".", "y" * 60]

    @pytest.mark.parametrize(
        ("chunk_size", "overlap"),
        [(100, 10), (100, 50), (100, 90), (60, 10), (60, 40), (200, 150), (200, 20)],
    )
    def test_chunks_cover_whole_text(self, chunk_size, overlap):
        paragraphs = [
            " ".join(" ".join(f"p{p}s{s}w{w}" for w in range(4)) + "." for s in range(5))
            for p in range(4)
        ]
        clean = clean_text("\n\n".join(paragraphs))

        chunks = TextChunker(chunk_size, overlap).split(clean)

        assert all(len(chunk) <= chunk_size for chunk in chunks)
        # every word is unique, so each must show up whole in at least one chunk
        missing = [word for word in clean.split() if not any(word in chunk for chunk in chunks)]
        assert missing == []
        assert clean.endswith(chunks[-1])


@pytest.mark.unit
class TestChunkDocument:
    """Tests for TextChunker.chunk_document."""

    def test_indices_are_dense_and_totals_match(self):
        chunks = TextChunker(100, 10).chunk_document(_document("Sentence number one. " * 40))

        assert len(chunks) > 1
        assert [chunk.metadata.chunk_index for chunk in chunks] == list(range(len(chunks)))
        assert all(chunk.metadata.total_chunks == len(chunks) for chunk in chunks)

    def test_carries_document_metadata(self):
        chunks = TextChunker(100, 10).chunk_document(_document("Only a little text."))

        assert len(chunks) == 1
        chunk = chunks[0]
        assert chunk.id == "returns-0123456789ab-chunk-0"
        assert chunk.metadata.document_id == "returns-0123456789ab"
        assert chunk.metadata.document_name == "returns.txt"
        assert chunk.metadata.category == "faq"
        assert chunk.metadata.title == "Return policy"

    def test_blank_document_gives_no_chunks(self):
        assert TextChunker(100, 10).chunk_document(_document("\n\n  ")) == []
