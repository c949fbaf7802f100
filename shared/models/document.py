"""Pydantic models for source documents and their chunks.

Hierarchy:
  ParsedDocument: extracted text and metadata of one source file.
  ChunkMetadata: per-chunk metadata carried into the vector payload.
  DocumentChunk: unit of embedding and indexing.
  IngestStats: aggregate outcome of one ingestion run.
"""

from pydantic import BaseModel


class ParsedDocument(BaseModel):
    """A source file after text extraction, before chunking."""

    id: str
    name: str
    path: str
    content: str
    category: str | None = None
    title: str | None = None


class ChunkMetadata(BaseModel):
    """Metadata shared by all chunks of a document, plus the chunk position.

    chunk_index values of one document form a dense 0..total_chunks-1 run.
    """

    document_id: str
    document_name: str
    document_path: str
    chunk_index: int
    total_chunks: int
    category: str | None = None
    title: str | None = None


class DocumentChunk(BaseModel):
    """A bounded text segment of one source document."""

    id: str
    content: str
    metadata: ChunkMetadata


class IngestedDocument(BaseModel):
    """Per-document line of an ingestion report."""

    document_id: str
    name: str
    chunks: int
    category: str | None = None


class SkippedDocument(BaseModel):
    """A document that was excluded from an ingestion run, with the reason."""

    path: str
    reason: str


class IngestStats(BaseModel):
    """Aggregate statistics returned by an ingestion run."""

    documents: int = 0
    chunks: int = 0
    categories: list[str] = []
    skipped: int = 0
    document_details: list[IngestedDocument] = []
    failures: list[SkippedDocument] = []
