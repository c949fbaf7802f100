"""VectorPoint model: one stored vector plus the chunk payload kept alongside it."""

from pydantic import BaseModel

from shared.models.document import DocumentChunk


class ChunkPayload(BaseModel):
    """Metadata payload stored alongside each vector chunk in a RAG backend.

    Field names are the payload keys used on the wire, so filters and scroll
    field selections refer to them directly.

    Attributes:
        chunk_id:       Chunk identifier, unique per document and position.
        content:        Raw text content of this chunk.
        document_id:    Stable hash of the normalised source path. Indexed.
        document_name:  Base name of the source file.
        document_path:  Absolute path of the source file at ingest time.
        chunk_index:    Zero-based position of this chunk within the document.
        total_chunks:   Number of chunks of the document.
        category:       Top-level folder below the ingest root, if any. Indexed.
        title:          First line of the document text, or the file name.
    """

    chunk_id: str
    content: str
    document_id: str
    document_name: str
    document_path: str
    chunk_index: int
    total_chunks: int
    category: str | None = None
    title: str | None = None

    @classmethod
    def from_chunk(cls, chunk: DocumentChunk) -> "ChunkPayload":
        """Flatten a DocumentChunk into its stored payload."""
        return cls(
            chunk_id=chunk.id,
            content=chunk.content,
            **chunk.metadata.model_dump(),
        )


class VectorPoint(BaseModel):
    """A point as sent to the RAG backend on upsert.

    Attributes:
        id:      Point identifier (UUID string).
        vector:  Embedding of the chunk content; length equals the collection dimension.
        payload: Chunk content and metadata.
    """

    id: str
    vector: list[float]
    payload: ChunkPayload

    def to_wire(self) -> dict:
        return {"id": self.id, "vector": self.vector, "payload": self.payload.model_dump()}
