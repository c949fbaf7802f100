"""Ingestion service.

Walks a document folder, extracts and chunks each supported file, embeds all
chunk texts via an EmbedClient, and upserts the resulting vectors into the
RAG backend with a chunk metadata payload.
"""

import uuid

from services.knowledge_ingest.Chunker import TextChunker
from services.knowledge_ingest.DocumentLocator import DocumentLocator
from services.knowledge_ingest.DocumentParser import DocumentParser
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.VectorPoint import ChunkPayload, VectorPoint
from shared.errors.knowledge_errors import EmbeddingServiceError, ParseError, UnsupportedFormatError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import KnowledgeConfig
from shared.models.document import DocumentChunk, IngestedDocument, IngestStats, SkippedDocument


def _make_point_id(chunk: DocumentChunk, deterministic: bool) -> str:
    """Build the point ID for a chunk.

    Deterministic IDs are UUID5 over document id and chunk index, so that
    re-ingesting the same document overwrites its points instead of adding
    new ones next to them.

    Args:
        chunk (DocumentChunk): The chunk to store.
        deterministic (bool): Derive the ID from the chunk position instead of a random UUID4.

    Returns:
        str: UUID string usable as a point ID.
    """
    if deterministic:
        key = f"{chunk.metadata.document_id}:{chunk.metadata.chunk_index}"
        return str(uuid.uuid5(uuid.NAMESPACE_OID, key))
    return str(uuid.uuid4())


class IngestService:
    """Orchestrates the ingestion pipeline from a folder into the RAG backend."""

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        embed_client: EmbedClientInterface,
        knowledge_config: KnowledgeConfig,
        locator: DocumentLocator | None = None,
        parser: DocumentParser | None = None,
        chunker: TextChunker | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._embed_client = embed_client
        self._config = knowledge_config
        self._locator = locator or DocumentLocator()
        self._parser = parser or DocumentParser()
        self._chunker = chunker or TextChunker(knowledge_config.chunk_size, knowledge_config.chunk_overlap)

    ##########################################
    ############### CORE INGEST ##############
    ##########################################

    async def do_ingest(self, root_path: str | None = None, reset: bool = False) -> IngestStats:
        """Ingest every supported document below root_path.

        Args:
            root_path (str | None): Folder to ingest. Defaults to KNOWLEDGE_DOCUMENTS_PATH.
            reset (bool): Delete the collection before ingesting.

        Returns:
            IngestStats: Documents and chunks indexed, categories seen, and skipped files.

        Raises:
            EmbeddingServiceError: If embedding fails. Nothing is indexed in that case.
            VectorStoreError: If creating the collection or upserting fails. Batches
                upserted before the failure stay in the collection.
        """
        root = root_path or self._config.documents_path
        self.logging.info("Starting ingestion from '%s'...", root)

        if reset:
            self.logging.info("Resetting collection '%s'...", self._rag_client.get_collection_name())
            await self._rag_client.do_delete_collection()

        paths = self._locator.find_documents(root)
        self.logging.info("Found %d document(s) in '%s'.", len(paths), root)

        stats = IngestStats()
        categories: set[str] = set()
        all_chunks: list[DocumentChunk] = []

        for path in paths:
            chunks = self._chunk_file(path, root, stats)
            if not chunks:
                continue

            metadata = chunks[0].metadata
            all_chunks.extend(chunks)
            stats.documents += 1
            stats.document_details.append(
                IngestedDocument(
                    document_id=metadata.document_id,
                    name=metadata.document_name,
                    chunks=len(chunks),
                    category=metadata.category,
                )
            )
            if metadata.category:
                categories.add(metadata.category)

        stats.chunks = len(all_chunks)
        stats.categories = sorted(categories)

        await self._rag_client.do_create_collection()

        if not all_chunks:
            self.logging.warning("No chunks produced from '%s'. Nothing to index.", root)
            return stats

        await self._index_chunks(all_chunks)

        self.logging.info(
            "Ingestion complete: %d documents, %d chunks, %d skipped.",
            stats.documents, stats.chunks, stats.skipped,
        )
        return stats

    ##########################################
    ############ DOCUMENT INGEST #############
    ##########################################

    def _chunk_file(self, path: str, root: str, stats: IngestStats) -> list[DocumentChunk]:
        """Parse and chunk a single file, recording it as skipped on failure.

        Returns:
            list[DocumentChunk]: The chunks, empty if the file was skipped.
        """
        try:
            document = self._parser.parse_document(path, root)
        except (UnsupportedFormatError, ParseError) as exc:
            self.logging.warning("Skipping '%s': %s", path, exc)
            self._record_skip(stats, path, str(exc))
            return []

        chunks = self._chunker.chunk_document(document)
        if not chunks:
            self.logging.info("Skipping '%s': no text content.", path)
            self._record_skip(stats, path, "no text content")
            return []

        self.logging.debug("Chunked '%s' into %d chunk(s).", document.name, len(chunks))
        return chunks

    @staticmethod
    def _record_skip(stats: IngestStats, path: str, reason: str) -> None:
        stats.skipped += 1
        stats.failures.append(SkippedDocument(path=path, reason=reason))

    async def _index_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Embed all chunk texts in one ordered pass and upsert the points."""
        self.logging.info("Generating embeddings for %d chunks...", len(chunks))
        vectors = await self._embed_client.do_embed_many([chunk.content for chunk in chunks])
        if len(vectors) != len(chunks):
            raise EmbeddingServiceError(f"Received {len(vectors)} embeddings for {len(chunks)} chunks.")

        points = [
            VectorPoint(
                id=_make_point_id(chunk, self._config.deterministic_point_ids),
                vector=vector,
                payload=ChunkPayload.from_chunk(chunk),
            )
            for chunk, vector in zip(chunks, vectors)
        ]

        self.logging.info("Indexing %d points into '%s'...", len(points), self._rag_client.get_collection_name())
        await self._rag_client.do_upsert_points(points)
