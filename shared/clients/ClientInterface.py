from abc import ABC, abstractmethod
from typing import Any

import httpx
from httpx._types import QueryParamTypes

from shared.errors.knowledge_errors import BackendServiceError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class ClientInterface(ABC):
    """Base for every HTTP backend client (embedding endpoint, vector store).

    Subclasses name their type and engine, declare the settings they need,
    and describe the backend's URLs and auth. Requests are single-attempt:
    failures surface as the client's own BackendServiceError subclass.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        # seconds per request, shared by every call of this client type
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0, min_val=1)

        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Reads every declared setting once so that a misconfigured client fails at construction.

        Raises:
            ValueError: If a required setting is missing or has the wrong type.
        """
        for config in self._get_required_config():
            self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """
        Returns the client family, used as settings prefix. E.g. "embed"
        """
        pass

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the backend product name. E.g. "OpenAI"
        """
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns the engine specific settings of the client, without prefix.

        Returns:
            list[EnvConfig]: One entry per setting, a default of None marks it as required.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The prefixed setting name. E.g. "EMBED_OPENAI_BASE_URL" for "BASE_URL"
        """
        return f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Reads an engine specific setting through the typed HelperConfig getters.

        Args:
            raw_key (str): Setting name without the type and engine prefix.
            default (Any): Value used when the setting is absent. None makes it required.
            val_type (str): "string", "number", "bool" or "list".

        Raises:
            ValueError: If the setting is missing, malformed, or val_type is unknown.
        """
        getters = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        if val_type not in getters:
            raise ValueError(f"Unsupported value type '{val_type}' for setting '{raw_key}' of {self.get_client_type()} client '{self.get_engine_name()}'.")
        return getters[val_type](self._get_config_key_name(raw_key), default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the headers authenticating against the backend, empty when no key is configured.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the backend root URL. E.g. "http://localhost:6333"
        """
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """
        Returns the path answering 2xx while the backend is usable. E.g. "/healthz"
        """
        pass

    ################ ERRORS ##################
    @abstractmethod
    def _build_request_error(self, message: str, status_code: int | None = None, body: str | None = None) -> BackendServiceError:
        """
        Wraps a failed call into the error type of this client family.

        Args:
            message (str): What failed, including the URL.
            status_code (int | None): HTTP status, None if no response was received.
            body (str | None): Raw response body, passed on unchanged.
        """
        pass

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        self._client = httpx.AsyncClient(timeout=self.timeout)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_healthcheck(self) -> httpx.Response:
        """Probe the backend once.

        Raises:
            BackendServiceError: If the backend cannot be reached or answers with an error status.
        """
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck(), raise_on_error=True)

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def do_request(
        self,
        method: str = "GET",
        json: dict | None = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
    ) -> httpx.Response:
        """Send one HTTP request to the backend. There is no retry.

        Args:
            method: HTTP verb.
            json: Request body, serialised as JSON.
            params: Query string parameters, e.g. {"wait": "true"}.
            endpoint: Path below the base URL.
            additional_headers: Headers merged over the auth header.
            raise_on_error: Turn a non-2xx answer into the client error.

        Returns:
            The httpx.Response as received.

        Raises:
            RuntimeError: If boot() has not been called.
            BackendServiceError: If the request fails in transport, or answers non-2xx while raise_on_error is set.
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialised. Call boot() before making requests.")

        path = endpoint.strip()
        url = self._get_base_url().rstrip("/") + ("/" + path.lstrip("/") if path else "")
        headers = {**self._get_auth_header(), **(additional_headers or {})}

        try:
            response = await self._client.request(method, url, json=json, params=params, headers=headers, timeout=self.timeout)
        except httpx.HTTPError as exc:
            self.logging.error("%s %s failed: %s", method, url, exc)
            raise self._build_request_error(f"{method} {url} failed: {exc}") from exc

        if raise_on_error and not response.is_success:
            self.logging.error("%s %s returned status %d: %s", method, url, response.status_code, response.text)
            raise self._build_request_error(
                f"{method} {url} returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    async def do_json_request(self, method: str, endpoint: str, json: dict | None = None, params: QueryParamTypes | None = None) -> dict:
        """Send a request that must succeed and answer with a JSON object.

        Returns:
            dict: The decoded response body.

        Raises:
            BackendServiceError: On transport failure, non-2xx status, or a body that is not JSON.
        """
        response = await self.do_request(method=method, json=json, params=params, endpoint=endpoint, raise_on_error=True)
        try:
            return response.json()
        except ValueError as exc:
            raise self._build_request_error(
                f"{method} {endpoint} returned a body that is not JSON.",
                status_code=response.status_code,
                body=response.text,
            ) from exc
