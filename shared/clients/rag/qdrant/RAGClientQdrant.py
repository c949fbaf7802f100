from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.CollectionStats import CollectionStats
from shared.clients.rag.models.Filter import FilterCondition, FilterExpression
from shared.clients.rag.models.SearchHit import SearchHit
from shared.clients.rag.models.VectorPoint import VectorPoint
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class RAGClientQdrant(RAGClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default="knowledge_base", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    def get_collection_name(self) -> str:
        return self._collection_name

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="COLLECTION", val_type="string", default="knowledge_base"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": f"{self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_collection(self) -> str:
        return f"/collections/{self._collection_name}"

    def _get_endpoint_check_collection_existence(self) -> str:
        return f"/collections/{self._collection_name}/exists"

    def _get_endpoint_payload_index(self) -> str:
        return f"/collections/{self._collection_name}/index"

    def _get_endpoint_points(self) -> str:
        return f"/collections/{self._collection_name}/points"

    def _get_endpoint_delete_points(self) -> str:
        return f"/collections/{self._collection_name}/points/delete"

    def _get_endpoint_search(self) -> str:
        return f"/collections/{self._collection_name}/points/search"

    def _get_endpoint_scroll(self) -> str:
        return f"/collections/{self._collection_name}/points/scroll"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def _build_condition(self, condition: FilterCondition) -> dict:
        if condition.operator == "any":
            return {"key": condition.field, "match": {"any": condition.value}}
        return {"key": condition.field, "match": {"value": condition.value}}

    def build_filter(self, filter: FilterExpression | None) -> dict | None:
        if filter is None or filter.is_empty():
            return None
        return {"must": [self._build_condition(c) for c in filter.must]}

    def get_create_collection_payload(self) -> dict:
        return {
            "vectors": {"size": self.vector_size, "distance": self.distance},
            "optimizers_config": {"default_segment_number": 2},
            "replication_factor": 1,
        }

    def get_payload_index_payload(self, field_name: str) -> dict:
        return {"field_name": field_name, "field_schema": "keyword"}

    def get_upsert_payload(self, points: list[VectorPoint]) -> dict:
        return {"points": [point.to_wire() for point in points]}

    def get_delete_payload(self, filter: FilterExpression) -> dict:
        return {"filter": self.build_filter(filter)}

    def get_search_payload(self, vector: list[float], limit: int, score_threshold: float, filter: FilterExpression | None) -> dict:
        payload = {
            "vector": vector,
            "limit": limit,
            "score_threshold": score_threshold,
            "with_payload": True,
        }
        qdrant_filter = self.build_filter(filter)
        if qdrant_filter is not None:
            payload["filter"] = qdrant_filter
        return payload

    def get_scroll_payload(self, filter: FilterExpression | None, with_payload: bool | list, with_vector: bool, limit: int, offset: str | int | None = None) -> dict:
        payload = {
            "limit": limit,
            "with_payload": with_payload,
            "with_vector": with_vector,
        }
        qdrant_filter = self.build_filter(filter)
        if qdrant_filter is not None:
            payload["filter"] = qdrant_filter
        if offset is not None:
            payload["offset"] = offset
        return payload

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_existence(self, raw_response: dict) -> bool:
        return bool(raw_response.get("result", {}).get("exists", False))

    def extract_search_hits(self, raw_response: dict) -> list[SearchHit]:
        return [
            SearchHit(id=hit.get("id"), score=hit.get("score", 0.0), payload=hit.get("payload") or {})
            for hit in raw_response.get("result", [])
        ]

    def extract_scroll_content(self, raw_response: dict) -> dict:
        result = raw_response.get("result", {})
        return {
            "result": result.get("points", []),
            "status": raw_response.get("status", "ok"),
            "time": raw_response.get("time", 0),
        }

    def extract_next_page_offset(self, raw_response: dict) -> str | int | None:
        return raw_response.get("result", {}).get("next_page_offset")

    def extract_collection_stats(self, raw_response: dict) -> CollectionStats:
        result = raw_response.get("result", {})
        return CollectionStats(
            points_count=result.get("points_count") or 0,
            status=result.get("status", "unknown"),
        )
