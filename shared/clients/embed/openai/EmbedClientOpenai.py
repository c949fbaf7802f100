from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.errors.knowledge_errors import EmbeddingServiceError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientOpenai(EmbedClientInterface):
    """Embedding client for OpenAI-compatible /v1/embeddings endpoints, e.g. an LLM gateway."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "OpenAI"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        # the gateway exposes a plain health route next to /v1/*
        return "/health"

    def get_endpoint_embedding(self) -> str:
        return "/v1/embeddings"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, texts: list[str] | str) -> dict:
        return {"model": self.embed_model, "input": texts}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from an OpenAI-style response.

        Items may arrive in any order; each carries the position of its input
        text in "index", which is used to restore input order.

        Args:
            response_data (dict): {"data": [{"embedding": [...], "index": 0}, ...]}

        Returns:
            list[list[float]]: Embedding vectors in input order.

        Raises:
            EmbeddingServiceError: If the response does not contain valid embeddings.
        """
        data = response_data.get("data")
        if not isinstance(data, list):
            raise EmbeddingServiceError(
                "Embedding response does not contain a 'data' list. "
                f"Response keys: {list(response_data.keys())}"
            )
        try:
            ordered = sorted(data, key=lambda item: item["index"])
            return [item["embedding"] for item in ordered]
        except (KeyError, TypeError) as exc:
            raise EmbeddingServiceError(f"Malformed embedding item in response: {exc}") from exc
