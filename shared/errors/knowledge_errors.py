"""Error taxonomy for the knowledge base pipeline.

Per-document errors (UnsupportedFormatError, ParseError) are caught by the
ingestion service and reported in aggregate. Backend errors
(EmbeddingServiceError, VectorStoreError) abort the current run and propagate
to the caller.
"""


class KnowledgeBaseError(Exception):
    """Base class for every error raised by the knowledge base pipeline."""


class UnsupportedFormatError(KnowledgeBaseError):
    """Raised when a file's extension has no registered text extractor."""

    def __init__(self, path: str, extension: str):
        self.path = path
        self.extension = extension
        super().__init__(f"Unsupported file format '{extension}': {path}")


class ParseError(KnowledgeBaseError):
    """Raised when a file cannot be read or its text cannot be extracted."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class BackendServiceError(KnowledgeBaseError):
    """Raised when a remote backend rejects a request or cannot be reached.

    Attributes:
        status_code: HTTP status returned by the backend, None for transport failures.
        body: Raw response body, surfaced verbatim.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class EmbeddingServiceError(BackendServiceError):
    """Raised when the embedding endpoint fails or returns an unusable response."""


class VectorStoreError(BackendServiceError):
    """Raised when a vector store write or read request fails."""
