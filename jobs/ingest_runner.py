"""Ingest runner entry point.

Reads every supported document below a folder, chunks and embeds it, and
indexes the chunks into the vector store for semantic search.

Usage:
    python -m jobs.ingest_runner [path] [--reset]
"""

import argparse
import asyncio
import sys

from services.knowledge_ingest.IngestService import IngestService
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.errors.knowledge_errors import KnowledgeBaseError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger, setup_logging
from shared.models.config import KnowledgeConfig
from shared.models.document import IngestStats


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest a document folder into the knowledge base.")
    parser.add_argument("path", nargs="?", default=None, help="Folder to ingest (default: KNOWLEDGE_DOCUMENTS_PATH)")
    parser.add_argument("--reset", action="store_true", help="Delete the collection before ingesting")
    return parser.parse_args(argv)


def log_stats(logger: ColorLogger, stats: IngestStats) -> None:
    """Print the per-document report of an ingestion run."""
    logger.info("Ingestion results:", color="cyan")
    logger.info("  Documents: %d", stats.documents)
    logger.info("  Chunks:    %d", stats.chunks)
    logger.info("  Skipped:   %d", stats.skipped)
    logger.info("  Categories: %s", ", ".join(stats.categories) or "(none)")
    for doc in stats.document_details:
        category = f"[{doc.category}] " if doc.category else ""
        logger.info("    %s%s: %d chunks", category, doc.name, doc.chunks, color="dim")
    for failure in stats.failures:
        logger.warning("    skipped %s: %s", failure.path, failure.reason)


async def main(argv: list[str] | None = None) -> int:
    """Run the ingestion pipeline.

    Returns:
        int: Process exit code. 1 if nothing was indexed or a backend failed.
    """
    args = parse_args(argv)
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    try:
        knowledge_config = KnowledgeConfig.from_helper_config(config)
        rag_client = RAGClientManager(helper_config=config).get_client()
        embed_client = EmbedClientManager(helper_config=config).get_client()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    root = args.path or knowledge_config.documents_path
    logger.info("Knowledge base ingestion", color="cyan")
    logger.info("Source: %s", root, color="dim")
    logger.info("Collection: %s", rag_client.get_collection_name(), color="dim")

    try:
        # both backends are required, there is no point in ingesting without either
        for client in [embed_client, rag_client]:
            await client.boot()
            try:
                await client.do_healthcheck()
            except KnowledgeBaseError as e:
                logger.error("Error booting %s client %s: %s. Aborting.", client.get_client_type().upper(), client.get_engine_name(), e)
                return 1

        ingest_service = IngestService(
            helper_config=config,
            rag_client=rag_client,
            embed_client=embed_client,
            knowledge_config=knowledge_config,
        )
        try:
            stats = await ingest_service.do_ingest(root_path=root, reset=args.reset)
        except KnowledgeBaseError as e:
            logger.error("Ingestion failed: %s", e)
            return 1

        log_stats(logger, stats)
        if stats.chunks == 0:
            logger.warning("No documents were indexed from '%s'.", root)
            return 1

        final_stats = await rag_client.do_fetch_stats()
        logger.info(
            "Collection '%s': %d vectors, status %s",
            rag_client.get_collection_name(), final_stats.points_count, final_stats.status,
            color="green",
        )
        return 0
    finally:
        await embed_client.close()
        await rag_client.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
