"""Registry of indexed documents, derived from a full scan of the collection."""

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.CollectionStats import CollectionStats
from shared.helper.HelperConfig import HelperConfig
from shared.models.search import DocumentSummary

LISTING_PAYLOAD_FIELDS = ["document_id", "document_name", "category", "title"]
LISTING_PAGE_SIZE = 100


class RegistryService:
    """Lists documents and categories currently held by the RAG backend."""

    def __init__(self, helper_config: HelperConfig, rag_client: RAGClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client

    async def do_list_documents(self) -> list[DocumentSummary]:
        """List every indexed document once.

        The first chunk seen for a document id provides its summary.

        Returns:
            list[DocumentSummary]: One entry per document id, in scan order.
                Empty when the collection does not exist.

        Raises:
            VectorStoreError: If a scroll request fails.
        """
        if not await self._rag_client.do_existence_check():
            return []

        documents: dict[str, DocumentSummary] = {}
        async for payload in self._rag_client.iter_scroll(
            payload_fields=LISTING_PAYLOAD_FIELDS,
            page_size=LISTING_PAGE_SIZE,
        ):
            document_id = payload.get("document_id")
            if not document_id or document_id in documents:
                continue
            documents[document_id] = DocumentSummary(
                document_id=document_id,
                document_name=payload.get("document_name", ""),
                category=payload.get("category"),
                title=payload.get("title"),
            )

        self.logging.debug("Listed %d indexed documents.", len(documents))
        return list(documents.values())

    async def do_list_categories(self) -> list[str]:
        """
        Returns:
            list[str]: Sorted distinct non-empty categories of the indexed documents.
        """
        documents = await self.do_list_documents()
        return sorted({doc.category for doc in documents if doc.category})

    async def do_delete_document(self, document_id: str) -> None:
        """Remove every chunk of a document from the collection.

        Raises:
            VectorStoreError: If the delete request fails.
        """
        await self._rag_client.do_delete_by_document(document_id)

    async def do_collection_exists(self) -> bool:
        return await self._rag_client.do_existence_check()

    async def do_collection_stats(self) -> CollectionStats:
        return await self._rag_client.do_fetch_stats()
