"""Knowledge router: semantic search and document access over the knowledge base."""

from fastapi import APIRouter, Depends, HTTPException, Request

from server.models.requests import SearchRequest
from server.models.responses import (
    CategoryListResponse,
    DeleteResponse,
    DocumentListResponse,
    DocumentResponse,
    SearchResponse,
    StatusResponse,
)
from services.knowledge_query.QueryService import CHUNK_SEPARATOR
from shared.dependencies.auth import verify_api_key
from shared.errors.knowledge_errors import BackendServiceError

router = APIRouter(prefix="/knowledge", tags=["knowledge"], dependencies=[Depends(verify_api_key)])

UNAVAILABLE_DETAIL = "Search unavailable"
NOT_INITIALISED_DETAIL = "Knowledge base not initialised"


def _unavailable(request: Request, exc: BackendServiceError) -> HTTPException:
    request.app.state.logging.error("Knowledge backend request failed: %s", exc)
    return HTTPException(status_code=503, detail=UNAVAILABLE_DETAIL)


@router.post("/search")
async def search_knowledge(request: Request, body: SearchRequest) -> SearchResponse:
    """Execute a semantic search against the knowledge base.

    Args:
        request (Request): FastAPI request (provides app.state.query_service).
        body (SearchRequest): JSON body with query, optional limit and category.

    Returns:
        SearchResponse: Matching chunks, most similar first.

    Raises:
        HTTPException: 503 if the collection does not exist or a backend fails.
    """
    request.app.state.logging.info("Search received: query=%r category=%s", body.query[:80], body.category)
    try:
        if not await request.app.state.registry_service.do_collection_exists():
            raise HTTPException(status_code=503, detail=NOT_INITIALISED_DETAIL)
        results = await request.app.state.query_service.do_search(body.query, top_k=body.limit, category=body.category)
    except BackendServiceError as exc:
        raise _unavailable(request, exc) from exc
    return SearchResponse(query=body.query, results=results, total=len(results))


@router.get("/documents")
async def list_documents(request: Request, category: str | None = None) -> DocumentListResponse:
    """List indexed documents, optionally restricted to one category (case-insensitive)."""
    try:
        documents = await request.app.state.registry_service.do_list_documents()
    except BackendServiceError as exc:
        raise _unavailable(request, exc) from exc

    if category:
        wanted = category.lower()
        documents = [doc for doc in documents if doc.category and doc.category.lower() == wanted]
    return DocumentListResponse(documents=documents, total=len(documents))


@router.get("/documents/{document_id}")
async def get_document(request: Request, document_id: str) -> DocumentResponse:
    """Return the reassembled text of a document with its header metadata.

    Raises:
        HTTPException: 404 if no chunk carries the document id, 503 if the backend fails.
    """
    try:
        chunks = await request.app.state.query_service.do_get_document_chunks(document_id)
    except BackendServiceError as exc:
        raise _unavailable(request, exc) from exc

    if not chunks:
        raise HTTPException(status_code=404, detail=f"Document '{document_id}' not found")

    first = chunks[0]
    return DocumentResponse(
        document_id=document_id,
        document_name=first.document_name,
        category=first.category,
        title=first.title,
        total_chunks=first.total_chunks,
        content=CHUNK_SEPARATOR.join(chunk.content for chunk in chunks),
    )


@router.delete("/documents/{document_id}")
async def delete_document(request: Request, document_id: str) -> DeleteResponse:
    """Delete every chunk of a document. Unknown ids are a no-op."""
    request.app.state.logging.info("Delete requested for document '%s'", document_id)
    try:
        await request.app.state.registry_service.do_delete_document(document_id)
    except BackendServiceError as exc:
        raise _unavailable(request, exc) from exc
    return DeleteResponse(document_id=document_id, status="deleted")


@router.get("/categories")
async def list_categories(request: Request) -> CategoryListResponse:
    try:
        categories = await request.app.state.registry_service.do_list_categories()
    except BackendServiceError as exc:
        raise _unavailable(request, exc) from exc
    return CategoryListResponse(categories=categories)


@router.get("/status")
async def knowledge_status(request: Request) -> StatusResponse:
    """Report collection existence, point count and the state of ingestion runs."""
    registry_service = request.app.state.registry_service
    try:
        exists = await registry_service.do_collection_exists()
        stats = await registry_service.do_collection_stats()
    except BackendServiceError as exc:
        raise _unavailable(request, exc) from exc
    return StatusResponse(
        collection=request.app.state.rag_client.get_collection_name(),
        exists=exists,
        stats=stats,
        ingest_running=request.app.state.ingest_lock.locked(),
        last_ingest=request.app.state.last_ingest,
    )
