from shared.clients.ClientManager import ClientManager
from shared.clients.rag.RAGClientInterface import RAGClientInterface


class RAGClientManager(ClientManager[RAGClientInterface]):
    """
    Manager class to handle the RAG client based on configuration (RAG_ENGINE).
    """

    def _get_client_type(self) -> str:
        return "rag"

    def _get_class_prefix(self) -> str:
        return "RAGClient"

    def _get_default_engine(self) -> str:
        return "qdrant"
