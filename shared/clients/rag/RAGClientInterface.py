from abc import abstractmethod
from collections.abc import AsyncIterator

from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.models.CollectionStats import CollectionStats
from shared.clients.rag.models.Filter import FilterExpression
from shared.clients.rag.models.Scroll import ScrollPage
from shared.clients.rag.models.SearchHit import SearchHit
from shared.clients.rag.models.VectorPoint import VectorPoint
from shared.errors.knowledge_errors import BackendServiceError, VectorStoreError
from shared.helper.HelperConfig import HelperConfig

UPSERT_BATCH_SIZE = 100  # max points per upsert call
INDEXED_PAYLOAD_FIELDS = ["document_id", "category"]


class RAGClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # vectors of the collection must match the embedding model output
        self.vector_size = int(helper_config.get_number_val("EMBED_DIMENSION", default=1536, min_val=1))
        self.distance = helper_config.get_string_val("EMBED_DISTANCE", default="Cosine")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "rag"

    @abstractmethod
    def get_collection_name(self) -> str:
        """
        Returns the name of the collection this client reads and writes.
        """
        pass

    ################ ERRORS ##################
    def _build_request_error(self, message: str, status_code: int | None = None, body: str | None = None) -> BackendServiceError:
        return VectorStoreError(message, status_code=status_code, body=body)

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_collection(self) -> str:
        """
        Returns the endpoint path for creating, describing and deleting the collection.
        """
        pass

    @abstractmethod
    def _get_endpoint_check_collection_existence(self) -> str:
        """
        Returns the endpoint path for collection existence check requests.
        """
        pass

    @abstractmethod
    def _get_endpoint_payload_index(self) -> str:
        """
        Returns the endpoint path for creating payload indexes.
        """
        pass

    @abstractmethod
    def _get_endpoint_points(self) -> str:
        """
        Returns the endpoint path for points upsert requests.
        """
        pass

    @abstractmethod
    def _get_endpoint_delete_points(self) -> str:
        """
        Returns the endpoint path for deleting points by filter.
        """
        pass

    @abstractmethod
    def _get_endpoint_search(self) -> str:
        """
        Returns the endpoint path for similarity search requests.
        """
        pass

    @abstractmethod
    def _get_endpoint_scroll(self) -> str:
        """
        Returns the endpoint path for scroll requests.
        """
        pass

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    @abstractmethod
    def build_filter(self, filter: FilterExpression | None) -> dict | None:
        """
        Translates a validated filter expression into the backend wire format.

        Args:
            filter (FilterExpression | None): The filter, None or empty for no filtering.

        Returns:
            dict | None: The backend filter object, or None when nothing is filtered.
        """
        pass

    @abstractmethod
    def get_create_collection_payload(self) -> dict:
        """
        Returns the payload for creating the collection with the configured vector size and distance.
        """
        pass

    @abstractmethod
    def get_payload_index_payload(self, field_name: str) -> dict:
        """
        Returns the payload for creating a keyword index on a payload field.
        """
        pass

    @abstractmethod
    def get_upsert_payload(self, points: list[VectorPoint]) -> dict:
        """
        Returns the payload for upserting a batch of points.
        """
        pass

    @abstractmethod
    def get_delete_payload(self, filter: FilterExpression) -> dict:
        """
        Returns the payload for a filter-based delete.
        """
        pass

    @abstractmethod
    def get_search_payload(self, vector: list[float], limit: int, score_threshold: float, filter: FilterExpression | None) -> dict:
        """
        Returns the payload for a similarity search.

        Args:
            vector (list[float]): The query vector.
            limit (int): The maximum number of hits.
            score_threshold (float): Hits scoring below are dropped by the backend.
            filter (FilterExpression | None): Optional payload filter.
        """
        pass

    @abstractmethod
    def get_scroll_payload(self, filter: FilterExpression | None, with_payload: bool | list, with_vector: bool, limit: int, offset: str | int | None = None) -> dict:
        """
        Returns the payload for a single scroll page.

        Args:
            filter (FilterExpression | None): Optional payload filter.
            with_payload (bool | list): Whether to include the payload, or which payload fields to include.
            with_vector (bool): Whether to include the vector.
            limit (int): The maximum number of points per page.
            offset (str | int | None): Pagination cursor returned by the previous page. None starts from the beginning.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def extract_existence(self, raw_response: dict) -> bool:
        """
        Extracts the existence flag from a collection existence response.
        """
        pass

    @abstractmethod
    def extract_search_hits(self, raw_response: dict) -> list[SearchHit]:
        """
        Extracts the hits from a raw search response.
        """
        pass

    @abstractmethod
    def extract_scroll_content(self, raw_response: dict) -> dict:
        """
        Extracts the relevant content from a raw scroll response.

        Returns:
            dict: A dict with keys "result", "status", "time".
        """
        pass

    @abstractmethod
    def extract_next_page_offset(self, raw_response: dict) -> str | int | None:
        """
        Extracts the pagination cursor for the next scroll page.
        Returns None when the backend signals that no further pages exist.
        """
        pass

    @abstractmethod
    def extract_collection_stats(self, raw_response: dict) -> CollectionStats:
        """
        Extracts point count and health status from a collection info response.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    ############# COLLECTION ##############
    async def do_existence_check(self) -> bool:
        """Check whether the collection exists.

        A failed check counts as absence, so callers only ever see True or False.
        """
        try:
            raw_response = await self.do_json_request("GET", self._get_endpoint_check_collection_existence())
        except BackendServiceError as exc:
            self.logging.warning("Existence check for collection '%s' failed, treating as absent: %s", self.get_collection_name(), exc)
            return False
        return self.extract_existence(raw_response)

    async def do_create_collection(self) -> bool:
        """Create the collection and its keyword payload indexes, unless it exists.

        Returns:
            bool: True if the collection was created by this call.

        Raises:
            VectorStoreError: If the collection or one of its indexes cannot be created.
        """
        if await self.do_existence_check():
            self.logging.info("Collection '%s' already exists.", self.get_collection_name())
            return False

        await self.do_json_request("PUT", self._get_endpoint_collection(), json=self.get_create_collection_payload())
        for field_name in INDEXED_PAYLOAD_FIELDS:
            await self.do_json_request(
                "PUT",
                self._get_endpoint_payload_index(),
                json=self.get_payload_index_payload(field_name),
                params={"wait": "true"},
            )
        self.logging.info(
            "Created collection '%s' (size=%d, distance=%s, indexes=%s).",
            self.get_collection_name(), self.vector_size, self.distance, ", ".join(INDEXED_PAYLOAD_FIELDS),
        )
        return True

    async def do_delete_collection(self) -> bool:
        """Drop the collection with all its points. A missing collection is left alone.

        Returns:
            bool: True if a collection was dropped.
        """
        if not await self.do_existence_check():
            return False
        await self.do_json_request("DELETE", self._get_endpoint_collection())
        self.logging.info("Deleted collection '%s'.", self.get_collection_name())
        return True

    async def do_fetch_stats(self) -> CollectionStats:
        """
        Returns:
            CollectionStats: Point count and status, or the "not_created" sentinel for a missing collection.
        """
        if not await self.do_existence_check():
            return CollectionStats.not_created()
        raw_response = await self.do_json_request("GET", self._get_endpoint_collection())
        return self.extract_collection_stats(raw_response)

    ############# POINTS ##############
    async def do_upsert_points(self, points: list[VectorPoint]) -> None:
        """Write points in consecutive batches of UPSERT_BATCH_SIZE.

        There is no rollback: when a batch is rejected, the batches before it
        remain in the collection.

        Raises:
            VectorStoreError: If a batch is rejected.
        """
        total = len(points)
        for batch_start in range(0, total, UPSERT_BATCH_SIZE):
            batch = points[batch_start: batch_start + UPSERT_BATCH_SIZE]
            await self.do_json_request(
                "PUT",
                self._get_endpoint_points(),
                json=self.get_upsert_payload(batch),
                params={"wait": "true"},
            )
            self.logging.info("Indexed %d/%d chunks into '%s'", batch_start + len(batch), total, self.get_collection_name())

    async def do_delete_points_by_filter(self, filter: FilterExpression) -> None:
        """Delete every point matching the filter. Matching happens in the backend.

        Raises:
            ValueError: If the filter is empty, which would match the whole collection.
            VectorStoreError: If the delete request fails.
        """
        if filter.is_empty():
            raise ValueError("Refusing to delete points with an empty filter.")
        await self.do_json_request(
            "POST",
            self._get_endpoint_delete_points(),
            json=self.get_delete_payload(filter),
            params={"wait": "true"},
        )

    async def do_delete_by_document(self, document_id: str) -> None:
        await self.do_delete_points_by_filter(FilterExpression.match("document_id", document_id))
        self.logging.info("Deleted chunks for document '%s'", document_id)

    ############# READ ##############
    async def do_search(self, vector: list[float], limit: int, score_threshold: float, filter: FilterExpression | None = None) -> list[SearchHit]:
        """Nearest-neighbour search over the collection.

        Args:
            vector (list[float]): The query embedding.
            limit (int): Maximum number of hits.
            score_threshold (float): Hits scoring lower are dropped.
            filter (FilterExpression | None): Optional payload restriction, e.g. one category.

        Returns:
            list[SearchHit]: Hits most similar first.

        Raises:
            VectorStoreError: If the search request fails.
        """
        raw_response = await self.do_json_request(
            "POST",
            self._get_endpoint_search(),
            json=self.get_search_payload(vector, limit, score_threshold, filter),
        )
        hits = [hit for hit in self.extract_search_hits(raw_response) if hit.score >= score_threshold]
        return sorted(hits, key=lambda hit: hit.score, reverse=True)

    async def do_scroll(self, filter: FilterExpression | None, with_payload: bool | list, with_vector: bool, limit: int, offset: str | int | None = None) -> ScrollPage:
        """Fetch one page of points. iter_scroll() walks all pages.

        Raises:
            VectorStoreError: If the scroll request fails.
        """
        raw_response = await self.do_json_request(
            "POST",
            self._get_endpoint_scroll(),
            json=self.get_scroll_payload(filter, with_payload, with_vector, limit, offset),
        )
        scroll_content = self.extract_scroll_content(raw_response=raw_response)
        return ScrollPage(
            points=scroll_content.get("result", []),
            next_offset=self.extract_next_page_offset(raw_response),
        )

    async def iter_scroll(self, payload_fields: list[str] | bool = True, page_size: int = 100, filter: FilterExpression | None = None) -> AsyncIterator[dict]:
        """Yield the payload of every matching point, one page at a time.

        Every call starts from the first page and stops when the backend
        returns no further cursor.

        Args:
            payload_fields (list[str] | bool): Fields to fetch, True for the whole payload.
            page_size (int): Points per page.
            filter (FilterExpression | None): Optional payload restriction.
        """
        offset: str | int | None = None
        page = 1
        while True:
            page_result = await self.do_scroll(
                filter=filter,
                with_payload=payload_fields,
                with_vector=False,
                limit=page_size,
                offset=offset,
            )
            self.logging.debug("Scroll page %d of '%s': %d points", page, self.get_collection_name(), len(page_result.points))
            for payload in page_result.payloads:
                yield payload
            offset = page_result.next_offset
            if offset is None:
                break
            page += 1
