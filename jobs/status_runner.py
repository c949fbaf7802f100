"""Status runner entry point.

Shows whether the knowledge base collection exists, its size, and the
indexed documents grouped by category.

Usage:
    python -m jobs.status_runner
"""

import asyncio
import sys

from services.knowledge_query.RegistryService import RegistryService
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.errors.knowledge_errors import KnowledgeBaseError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.search import DocumentSummary

NO_CATEGORY = "(no category)"


def group_by_category(documents: list[DocumentSummary]) -> dict[str, list[DocumentSummary]]:
    """Group documents by category, keeping first-seen order of categories."""
    groups: dict[str, list[DocumentSummary]] = {}
    for doc in documents:
        groups.setdefault(doc.category or NO_CATEGORY, []).append(doc)
    return groups


async def main() -> int:
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    try:
        rag_client = RAGClientManager(helper_config=config).get_client()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    registry = RegistryService(helper_config=config, rag_client=rag_client)
    logger.info("Knowledge base status", color="cyan")
    logger.info("Collection: %s", rag_client.get_collection_name(), color="dim")

    await rag_client.boot()
    try:
        if not await registry.do_collection_exists():
            logger.warning("Collection does not exist. Run: python -m jobs.ingest_runner <path>")
            return 0

        stats = await registry.do_collection_stats()
        logger.info("Status: %s", stats.status, color="green" if stats.status == "green" else "yellow")
        logger.info("Total vectors: %d", stats.points_count, color="dim")

        documents = await registry.do_list_documents()
        if not documents:
            logger.warning("No documents indexed")
        for category, docs in group_by_category(documents).items():
            logger.info("%s:", category, color="yellow")
            for doc in docs:
                title = f' - "{doc.title}"' if doc.title else ""
                logger.info("  %s%s", doc.document_name, title, color="dim")

        categories = await registry.do_list_categories()
        if categories:
            logger.info("Categories: %s", ", ".join(categories), color="cyan")
        return 0
    except KnowledgeBaseError as e:
        logger.error("Status check failed: %s", e)
        return 1
    finally:
        await rag_client.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
