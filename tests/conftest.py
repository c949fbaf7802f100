"""
Pytest configuration and shared fixtures.

Provides common fixtures for:
    - HelperConfig with test environment values
    - In-memory fakes for the embedding and vector store clients
    - Temporary document folders
"""

import hashlib
import logging
import math
from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from shared.clients.rag.models.CollectionStats import CollectionStats
from shared.clients.rag.models.Filter import FilterExpression
from shared.clients.rag.models.SearchHit import SearchHit
from shared.clients.rag.models.VectorPoint import VectorPoint
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import KnowledgeConfig

TEST_ENV = {
    "EMBED_OPENAI_BASE_URL": "http://embed.test",
    "EMBED_OPENAI_API_KEY": "embed-key",
    "EMBED_MODEL": "text-embedding-3-small",
    "EMBED_DIMENSION": "8",
    "RAG_QDRANT_BASE_URL": "http://qdrant.test",
    "RAG_QDRANT_API_KEY": "qdrant-key",
    "RAG_QDRANT_COLLECTION": "knowledge_test",
    "APP_API_KEY": "secret",
}


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("knowledge_bridge.tests")


@pytest.fixture
def helper_config(logger) -> HelperConfig:
    """Provide a HelperConfig reading from a fixed test environment."""
    return HelperConfig(logger=logger, env=dict(TEST_ENV))


@pytest.fixture
def knowledge_config() -> KnowledgeConfig:
    return KnowledgeConfig(chunk_size=500, chunk_overlap=50, top_k=5, score_threshold=0.0)


# =============================================================================
# Fake Clients
# =============================================================================

def fake_vector(text: str, dimension: int = 8) -> list[float]:
    """Deterministic pseudo-embedding: identical texts map to identical vectors."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [b / 255.0 + 0.01 for b in digest[:dimension]]


class FakeEmbedClient:
    """Embedding client stand-in returning deterministic vectors and recording calls."""

    def __init__(self, dimension: int = 8):
        self.dimension = dimension
        self.calls: list[list[str]] = []

    async def do_embed(self, text: str) -> list[float]:
        self.calls.append([text])
        return fake_vector(text, self.dimension)

    async def do_embed_many(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [fake_vector(text, self.dimension) for text in texts]


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


def _matches(payload: dict, filter: FilterExpression | None) -> bool:
    if filter is None:
        return True
    for condition in filter.must:
        value = payload.get(condition.field)
        if condition.operator == "eq" and value != condition.value:
            return False
        if condition.operator == "any" and value not in condition.value:
            return False
    return True


class FakeRAGClient:
    """In-memory vector store with the RAG client's service-facing methods."""

    def __init__(self, collection: str = "knowledge_test"):
        self.collection = collection
        self.exists = False
        self.points: dict[str, dict] = {}
        self.upsert_calls = 0

    def get_collection_name(self) -> str:
        return self.collection

    async def do_existence_check(self) -> bool:
        return self.exists

    async def do_create_collection(self) -> bool:
        created = not self.exists
        self.exists = True
        return created

    async def do_delete_collection(self) -> bool:
        deleted = self.exists
        self.exists = False
        self.points.clear()
        return deleted

    async def do_fetch_stats(self) -> CollectionStats:
        if not self.exists:
            return CollectionStats.not_created()
        return CollectionStats(points_count=len(self.points), status="green")

    async def do_upsert_points(self, points: list[VectorPoint]) -> None:
        self.upsert_calls += 1
        for point in points:
            self.points[point.id] = {"vector": point.vector, "payload": point.payload.model_dump()}

    async def do_delete_by_document(self, document_id: str) -> None:
        self.points = {
            point_id: point
            for point_id, point in self.points.items()
            if point["payload"]["document_id"] != document_id
        }

    async def do_search(self, vector, limit, score_threshold, filter=None) -> list[SearchHit]:
        hits = [
            SearchHit(id=point_id, score=_cosine(vector, point["vector"]), payload=point["payload"])
            for point_id, point in self.points.items()
            if _matches(point["payload"], filter)
        ]
        hits = [hit for hit in hits if hit.score >= score_threshold]
        return sorted(hits, key=lambda hit: hit.score, reverse=True)[:limit]

    async def iter_scroll(self, payload_fields=True, page_size=100, filter=None) -> AsyncIterator[dict]:
        for point in list(self.points.values()):
            payload = point["payload"]
            if not _matches(payload, filter):
                continue
            if isinstance(payload_fields, list):
                yield {key: payload.get(key) for key in payload_fields}
            else:
                yield dict(payload)


@pytest.fixture
def fake_embed_client() -> FakeEmbedClient:
    return FakeEmbedClient()


@pytest.fixture
def fake_rag_client() -> FakeRAGClient:
    return FakeRAGClient()


# =============================================================================
# Document Folder Fixtures
# =============================================================================

RETURNS_TEXT = (
    "Return policy\n\n"
    + "Customers may return any product within thirty days of delivery. " * 6
    + "\n\n"
    + "Refunds are issued to the original payment method after inspection. " * 3
).strip()


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """Provide a document folder with one FAQ file of 610 characters."""
    faq = tmp_path / "faq"
    faq.mkdir()
    (faq / "returns.txt").write_text(RETURNS_TEXT, encoding="utf-8")
    return tmp_path
