"""Query service: semantic search and document reassembly over the knowledge base.

Search: embed query text → similarity search with an optional category filter
→ ranked results. Documents: scroll all chunks of one document id → reorder by
chunk_index → join.
"""

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.Filter import FilterExpression
from shared.clients.rag.models.VectorPoint import ChunkPayload
from shared.clients.rag.models.SearchHit import SearchHit
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import KnowledgeConfig
from shared.models.search import SearchResult

DOCUMENT_SCROLL_PAGE_SIZE = 1000  # chunks per scroll page when reassembling a document
CHUNK_SEPARATOR = "\n\n"


class QueryService:
    """Orchestrates embedding, vector retrieval, and result assembly for knowledge search."""

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        embed_client: EmbedClientInterface,
        knowledge_config: KnowledgeConfig,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._embed_client = embed_client
        self._config = knowledge_config

    ##########################################
    ################ SEARCH ##################
    ##########################################

    async def do_search(self, query: str, top_k: int | None = None, category: str | None = None) -> list[SearchResult]:
        """Execute a natural language query against the knowledge base.

        Args:
            query (str): The natural language query.
            top_k (int | None): Maximum number of results. Defaults to KNOWLEDGE_TOP_K.
            category (str | None): Restrict results to one category.

        Returns:
            list[SearchResult]: Matching chunks scoring at least the configured threshold,
                most similar first. Empty when nothing matches.

        Raises:
            EmbeddingServiceError: If the query cannot be embedded.
            VectorStoreError: If the search request fails.
        """
        limit = top_k or self._config.top_k
        self.logging.info("Executing search: query=%r limit=%d category=%s", query[:80], limit, category)

        vector = await self._embed_client.do_embed(query)
        search_filter = FilterExpression.match("category", category) if category else None
        hits = await self._rag_client.do_search(
            vector=vector,
            limit=limit,
            score_threshold=self._config.score_threshold,
            filter=search_filter,
        )
        results = [self._build_result(hit) for hit in hits]

        self.logging.info("Search complete: results=%d", len(results))
        return results

    ##########################################
    ############### DOCUMENTS ################
    ##########################################

    async def do_get_document_chunks(self, document_id: str) -> list[ChunkPayload]:
        """Fetch every stored chunk of a document in document order.

        Args:
            document_id (str): The document to fetch.

        Returns:
            list[ChunkPayload]: The chunks sorted by chunk_index. Empty if the id is unknown.
        """
        chunks = [
            ChunkPayload(**payload)
            async for payload in self._rag_client.iter_scroll(
                payload_fields=True,
                page_size=DOCUMENT_SCROLL_PAGE_SIZE,
                filter=FilterExpression.match("document_id", document_id),
            )
        ]
        return sorted(chunks, key=lambda chunk: chunk.chunk_index)

    async def do_get_document(self, document_id: str) -> str:
        """Reassemble the full text of a document from its chunks.

        Neighbouring chunks overlap, so the overlapping text appears twice in
        the joined result.

        Returns:
            str: Chunk contents joined by a blank line, "" if the id is unknown.
        """
        chunks = await self.do_get_document_chunks(document_id)
        return CHUNK_SEPARATOR.join(chunk.content for chunk in chunks)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    @staticmethod
    def _build_result(hit: SearchHit) -> SearchResult:
        payload = hit.payload
        return SearchResult(
            content=payload.get("content", ""),
            score=hit.score,
            document_id=payload.get("document_id", ""),
            document_name=payload.get("document_name", ""),
            document_path=payload.get("document_path", ""),
            chunk_index=payload.get("chunk_index", 0),
            total_chunks=payload.get("total_chunks", 0),
            category=payload.get("category"),
            title=payload.get("title"),
        )
