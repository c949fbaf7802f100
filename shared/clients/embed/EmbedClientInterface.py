from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.errors.knowledge_errors import BackendServiceError, EmbeddingServiceError
from shared.helper.HelperConfig import HelperConfig

MAX_EMBED_BATCH_SIZE = 100  # provider limit on texts per request


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model and embedding config
        self.embed_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL", default="text-embedding-3-small")
        self.batch_size = int(
            helper_config.get_number_val(
                f"{self.get_client_type().upper()}_BATCH_SIZE",
                default=MAX_EMBED_BATCH_SIZE,
                min_val=1,
                max_val=MAX_EMBED_BATCH_SIZE,
            )
        )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "embed"
        """
        return "embed"

    ################ ERRORS ##################
    def _build_request_error(self, message: str, status_code: int | None = None, body: str | None = None) -> BackendServiceError:
        return EmbeddingServiceError(message, status_code=status_code, body=body)

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/v1/embeddings")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, texts: list[str] | str) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            texts (list[str] | str): A single text or a batch of texts.

        Returns:
            dict: JSON-serialisable request body (e.g. {"model": "...", "input": [...]}).
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from a raw embedding API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the input texts.

        Raises:
            EmbeddingServiceError: If the response does not contain valid embeddings.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def _do_embed_request(self, texts: list[str] | str, expected: int) -> list[list[float]]:
        """Send one embedding request and return its vectors in input order.

        Raises:
            EmbeddingServiceError: On non-2xx status, transport failure, or a vector count mismatch.
        """
        response_data = await self.do_json_request("POST", self.get_endpoint_embedding(), json=self.get_embed_payload(texts))
        vectors = self.extract_embeddings_from_response(response_data)
        if len(vectors) != expected:
            raise EmbeddingServiceError(f"Embedding response contains {len(vectors)} vectors for {expected} inputs.")
        return vectors

    async def do_embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text (str): The text to embed.

        Returns:
            list[float]: The embedding vector.

        Raises:
            EmbeddingServiceError: If the request fails or the response is invalid.
        """
        vectors = await self._do_embed_request(text, expected=1)
        return vectors[0]

    async def do_embed_many(self, texts: list[str]) -> list[list[float]]:
        """Embed many texts in batches of at most batch_size.

        Batches are sent one after another and each batch is put back into
        input order before being appended, so output[i] always belongs to texts[i].

        Args:
            texts (list[str]): The texts to embed.

        Returns:
            list[list[float]]: One vector per input text, in input order.

        Raises:
            EmbeddingServiceError: If any batch fails. Nothing is returned for earlier batches.
        """
        if not texts:
            return []

        all_embeddings: list[list[float]] = []
        total = len(texts)
        for batch_start in range(0, total, self.batch_size):
            batch = texts[batch_start: batch_start + self.batch_size]
            all_embeddings.extend(await self._do_embed_request(batch, expected=len(batch)))

            if total > self.batch_size:
                self.logging.info("Embedded %d/%d texts", min(batch_start + self.batch_size, total), total)

        return all_embeddings
