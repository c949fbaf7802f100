"""Pydantic models for search results and document listings."""

from pydantic import BaseModel


class SearchResult(BaseModel):
    """A single chunk returned from the vector index, with its similarity score."""

    content: str
    score: float
    document_id: str
    document_name: str
    document_path: str
    chunk_index: int
    total_chunks: int
    category: str | None = None
    title: str | None = None


class DocumentSummary(BaseModel):
    """One entry of the indexed document listing."""

    document_id: str
    document_name: str
    category: str | None = None
    title: str | None = None
