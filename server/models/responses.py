from pydantic import BaseModel

from shared.clients.rag.models.CollectionStats import CollectionStats
from shared.models.document import IngestStats
from shared.models.search import DocumentSummary, SearchResult


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResult]
    total: int


class DocumentListResponse(BaseModel):
    documents: list[DocumentSummary]
    total: int


class DocumentResponse(BaseModel):
    document_id: str
    document_name: str
    category: str | None
    title: str | None
    total_chunks: int
    content: str


class DeleteResponse(BaseModel):
    document_id: str
    status: str


class CategoryListResponse(BaseModel):
    categories: list[str]


class StatusResponse(BaseModel):
    collection: str
    exists: bool
    stats: CollectionStats
    ingest_running: bool
    last_ingest: IngestStats | None = None


class IngestAcceptedResponse(BaseModel):
    status: str
    path: str
    reset: bool
