from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig

T = TypeVar("T", bound=ClientInterface)


class ClientManager(ABC, Generic[T]):
    """
    Resolves and instantiates the client for one client type from configuration.

    The engine named in "{TYPE}_ENGINE" is loaded from
    shared.clients.{type}.{engine}.{Prefix}{Engine}, e.g. "qdrant" resolves to
    shared.clients.rag.qdrant.RAGClientQdrant.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client: T = self._initialize_client()

    @abstractmethod
    def _get_client_type(self) -> str:
        """
        Returns the client type used in module paths and config keys. E.g. "rag"
        """
        pass

    @abstractmethod
    def _get_class_prefix(self) -> str:
        """
        Returns the class name prefix of the client implementations. E.g. "RAGClient"
        """
        pass

    @abstractmethod
    def _get_default_engine(self) -> str:
        """
        Returns the engine used when "{TYPE}_ENGINE" is not set. E.g. "qdrant"
        """
        pass

    def _get_engine_from_env(self) -> str:
        """
        Reads the engine from ENV configuration.

        Returns:
            str: The engine name, lowercased with the first letter capitalised.
        """
        engine = self.helper_config.get_string_val(
            f"{self._get_client_type().upper()}_ENGINE", default=self._get_default_engine()
        )
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> T:
        """
        Imports and instantiates the client class for the configured engine.

        Raises:
            ValueError: If the engine has no client implementation.
        """
        engine = self._get_engine_from_env()
        class_name = f"{self._get_class_prefix()}{engine}"
        try:
            module = __import__(
                f"shared.clients.{self._get_client_type()}.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported {self._get_client_type().upper()} engine specified: '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated %s client for engine: %s", self._get_client_type().upper(), engine)
        return client

    def get_client(self) -> T:
        """
        Returns the instantiated client.
        """
        return self.client
