"""FastAPI application entry point for the knowledge bridge API."""

import asyncio
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.api.routers.IngestRouter import router as ingest_router
from server.api.routers.KnowledgeRouter import router as knowledge_router
from services.knowledge_ingest.IngestService import IngestService
from services.knowledge_query.QueryService import QueryService
from services.knowledge_query.RegistryService import RegistryService
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.errors.knowledge_errors import BackendServiceError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.config import KnowledgeConfig

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)
    app.state.knowledge_config = KnowledgeConfig.from_helper_config(app.state.helper_config)

    rag_client = RAGClientManager(helper_config=app.state.helper_config).get_client()
    embed_client = EmbedClientManager(helper_config=app.state.helper_config).get_client()

    logging.info("Booting all clients...")
    for client in [rag_client, embed_client]:
        await client.boot()
    logging.info("All clients booted successfully.")

    # the vector store is required to serve anything, the embedding backend only for search and ingest
    await rag_client.do_healthcheck()
    try:
        await embed_client.do_healthcheck()
    except BackendServiceError as exc:
        logging.warning("Embedding backend '%s' is not reachable: %s. Search and ingest may fail.", embed_client.get_engine_name(), exc)

    app.state.rag_client = rag_client
    app.state.embed_client = embed_client

    app.state.ingest_service = IngestService(
        helper_config=app.state.helper_config,
        rag_client=rag_client,
        embed_client=embed_client,
        knowledge_config=app.state.knowledge_config,
    )
    app.state.query_service = QueryService(
        helper_config=app.state.helper_config,
        rag_client=rag_client,
        embed_client=embed_client,
        knowledge_config=app.state.knowledge_config,
    )
    app.state.registry_service = RegistryService(helper_config=app.state.helper_config, rag_client=rag_client)

    app.state.ingest_lock = asyncio.Lock()
    app.state.ingest_task = None
    app.state.last_ingest = None

    logging.info("Knowledge bridge API ready (collection '%s').", rag_client.get_collection_name())

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    for client in [rag_client, embed_client]:
        await client.close()
    logging.info("All clients closed.")


def create_app(lifespan_handler=lifespan) -> FastAPI:
    """Build the FastAPI application with all knowledge routes registered.

    Args:
        lifespan_handler: Startup and shutdown context that populates app.state.
    """
    app = FastAPI(
        title="knowledge_bridge",
        description=(
            "Semantic search over a folder of company documents (instructions, policies, FAQs). "
            "Documents are chunked and indexed into a vector database via POST /knowledge/ingest "
            "and served via POST /knowledge/search."
        ),
        version=app_version,
        lifespan=lifespan_handler,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(knowledge_router)
    app.include_router(ingest_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting knowledge_bridge API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
