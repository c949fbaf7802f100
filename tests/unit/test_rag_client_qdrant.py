"""Unit tests for shared.clients.rag.qdrant.RAGClientQdrant."""

import json

import pytest
from pytest_httpx import HTTPXMock

from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.rag.models.Filter import FilterCondition, FilterExpression
from shared.clients.rag.models.VectorPoint import ChunkPayload, VectorPoint
from shared.clients.rag.qdrant.RAGClientQdrant import RAGClientQdrant
from shared.errors.knowledge_errors import VectorStoreError

BASE = "http://qdrant.test/collections/knowledge_test"


def _payload(document_id: str = "returns-abc", chunk_index: int = 0, category: str | None = "faq") -> dict:
    return ChunkPayload(
        chunk_id=f"{document_id}-chunk-{chunk_index}",
        content=f"chunk {chunk_index}",
        document_id=document_id,
        document_name="returns.txt",
        document_path="/docs/faq/returns.txt",
        chunk_index=chunk_index,
        total_chunks=3,
        category=category,
        title="Return policy",
    ).model_dump()


def _point(i: int) -> VectorPoint:
    return VectorPoint(id=f"00000000-0000-0000-0000-{i:012d}", vector=[0.1] * 8, payload=ChunkPayload(**_payload(chunk_index=i)))


@pytest.mark.unit
class TestQdrantPayloads:
    """Tests for request payload builders, no network involved."""

    def test_manager_resolves_engine(self, helper_config):
        client = RAGClientManager(helper_config=helper_config).get_client()

        assert isinstance(client, RAGClientQdrant)
        assert client.get_collection_name() == "knowledge_test"
        assert client.vector_size == 8

    def test_build_filter(self, helper_config):
        client = RAGClientQdrant(helper_config=helper_config)
        expression = FilterExpression(must=[
            FilterCondition(field="category", value="faq"),
            FilterCondition(field="document_id", operator="any", value=["a", "b"]),
        ])

        assert client.build_filter(expression) == {
            "must": [
                {"key": "category", "match": {"value": "faq"}},
                {"key": "document_id", "match": {"any": ["a", "b"]}},
            ]
        }

    def test_empty_filter_is_omitted(self, helper_config):
        client = RAGClientQdrant(helper_config=helper_config)

        assert client.build_filter(FilterExpression()) is None
        assert "filter" not in client.get_search_payload([0.1], 5, 0.5, None)

    def test_create_collection_payload(self, helper_config):
        client = RAGClientQdrant(helper_config=helper_config)

        assert client.get_create_collection_payload()["vectors"] == {"size": 8, "distance": "Cosine"}


@pytest.mark.unit
class TestQdrantRequests:
    """Tests for Qdrant REST calls against a mocked server."""

    @pytest.mark.asyncio
    async def test_existence_check(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/exists", json={"result": {"exists": True}, "status": "ok"})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            assert await client.do_existence_check() is True
        finally:
            await client.close()

        assert httpx_mock.get_request().headers["api-key"] == "qdrant-key"

    @pytest.mark.asyncio
    async def test_existence_check_failure_means_absent(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/exists", status_code=500, text="boom")
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            assert await client.do_existence_check() is False
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_create_collection_with_indexes(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/exists", json={"result": {"exists": False}})
        httpx_mock.add_response(url=BASE, method="PUT", json={"result": True})
        httpx_mock.add_response(url=f"{BASE}/index?wait=true", method="PUT", json={"result": {}})
        httpx_mock.add_response(url=f"{BASE}/index?wait=true", method="PUT", json={"result": {}})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            assert await client.do_create_collection() is True
        finally:
            await client.close()

        index_requests = [r for r in httpx_mock.get_requests() if r.url.path.endswith("/index")]
        fields = [json.loads(r.content)["field_name"] for r in index_requests]
        assert fields == ["document_id", "category"]

    @pytest.mark.asyncio
    async def test_create_collection_is_idempotent(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/exists", json={"result": {"exists": True}})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            assert await client.do_create_collection() is False
        finally:
            await client.close()

        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.asyncio
    async def test_delete_existing_collection(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/exists", json={"result": {"exists": True}})
        httpx_mock.add_response(url=BASE, method="DELETE", json={"result": True, "status": "ok"})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            assert await client.do_delete_collection() is True
        finally:
            await client.close()

        delete_request = httpx_mock.get_requests()[-1]
        assert delete_request.method == "DELETE"
        assert delete_request.url.path == "/collections/knowledge_test"

    @pytest.mark.asyncio
    async def test_delete_missing_collection_sends_nothing(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/exists", json={"result": {"exists": False}})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            assert await client.do_delete_collection() is False
        finally:
            await client.close()

        assert [request.method for request in httpx_mock.get_requests()] == ["GET"]

    @pytest.mark.asyncio
    async def test_upsert_in_batches_of_100(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/points?wait=true", method="PUT", json={"status": "ok"})
        httpx_mock.add_response(url=f"{BASE}/points?wait=true", method="PUT", json={"status": "ok"})
        httpx_mock.add_response(url=f"{BASE}/points?wait=true", method="PUT", json={"status": "ok"})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            await client.do_upsert_points([_point(i) for i in range(250)])
        finally:
            await client.close()

        sizes = [len(json.loads(r.content)["points"]) for r in httpx_mock.get_requests()]
        assert sizes == [100, 100, 50]

    @pytest.mark.asyncio
    async def test_failed_upsert_batch_raises(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/points?wait=true", method="PUT", json={"status": "ok"})
        httpx_mock.add_response(url=f"{BASE}/points?wait=true", method="PUT", status_code=400, text="wrong vector size")
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            with pytest.raises(VectorStoreError) as exc_info:
                await client.do_upsert_points([_point(i) for i in range(150)])
        finally:
            await client.close()

        assert exc_info.value.status_code == 400
        assert exc_info.value.body == "wrong vector size"

    @pytest.mark.asyncio
    async def test_delete_by_document(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/points/delete?wait=true", method="POST", json={"status": "ok"})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            await client.do_delete_by_document("returns-abc")
        finally:
            await client.close()

        body = json.loads(httpx_mock.get_request().content)
        assert body == {"filter": {"must": [{"key": "document_id", "match": {"value": "returns-abc"}}]}}

    @pytest.mark.asyncio
    async def test_delete_with_empty_filter_is_refused(self, helper_config):
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            with pytest.raises(ValueError):
                await client.do_delete_points_by_filter(FilterExpression())
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_search_sorts_and_applies_threshold(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url=f"{BASE}/points/search",
            method="POST",
            json={"result": [
                {"id": "a", "score": 0.6, "payload": _payload(chunk_index=0)},
                {"id": "b", "score": 0.9, "payload": _payload(chunk_index=1)},
                {"id": "c", "score": 0.3, "payload": _payload(chunk_index=2)},
            ]},
        )
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            hits = await client.do_search([0.1] * 8, limit=5, score_threshold=0.5, filter=FilterExpression.match("category", "faq"))
        finally:
            await client.close()

        assert [hit.id for hit in hits] == ["b", "a"]
        body = json.loads(httpx_mock.get_request().content)
        assert body["filter"] == {"must": [{"key": "category", "match": {"value": "faq"}}]}
        assert body["score_threshold"] == 0.5

    @pytest.mark.asyncio
    async def test_iter_scroll_follows_offsets(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url=f"{BASE}/points/scroll",
            json={"result": {"points": [{"id": 1, "payload": _payload(chunk_index=0)}], "next_page_offset": 2}},
        )
        httpx_mock.add_response(
            url=f"{BASE}/points/scroll",
            json={"result": {"points": [{"id": 2, "payload": _payload(chunk_index=1)}], "next_page_offset": None}},
        )
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            payloads = [p async for p in client.iter_scroll(payload_fields=["chunk_index"], page_size=1)]
        finally:
            await client.close()

        assert [p["chunk_index"] for p in payloads] == [0, 1]
        first, second = (json.loads(r.content) for r in httpx_mock.get_requests())
        assert "offset" not in first
        assert second["offset"] == 2
        assert second["with_payload"] == ["chunk_index"]

    @pytest.mark.asyncio
    async def test_stats_of_missing_collection(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/exists", json={"result": {"exists": False}})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            stats = await client.do_fetch_stats()
        finally:
            await client.close()

        assert stats.points_count == 0
        assert stats.status == "not_created"

    @pytest.mark.asyncio
    async def test_stats_of_existing_collection(self, helper_config, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE}/exists", json={"result": {"exists": True}})
        httpx_mock.add_response(url=BASE, method="GET", json={"result": {"points_count": 42, "status": "green"}})
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot()
        try:
            stats = await client.do_fetch_stats()
        finally:
            await client.close()

        assert stats.points_count == 42
        assert stats.status == "green"
