"""
Command line entry for ragsync.

Usage:
    ragsync init-schema
    ragsync sync
    ragsync watch [--interval SECONDS]
    ragsync serve [--host HOST] [--port PORT]
    ragsync search "query" [--top-k N] [--threshold T] [--context]
"""

import argparse
import asyncio
import json
import logging
import signal
import sys

from dotenv import load_dotenv

from ragsync.configs import Settings, get_settings
from ragsync.container import ServiceContainer
from ragsync.core.exceptions import ConfigurationError, RagSyncException
from ragsync.observability.logger import configure_logging

logger = logging.getLogger(__name__)


async def init_schema(settings: Settings) -> None:
    container = ServiceContainer(settings)
    try:
        await container.vector_store.initialize_schema()
    finally:
        await container.close()


async def run_sync(settings: Settings) -> dict:
    """Initialize the schema and run one synchronization pass."""
    container = ServiceContainer(settings)
    try:
        refresher = container.refresher
        await refresher.initialize()
        result = await refresher.sync()
        return result.model_dump()
    finally:
        await container.close()


async def run_watch(settings: Settings, interval_seconds: float) -> None:
    """Sync once, then watch for changes until interrupted."""
    from ragsync.core.sync_queue import SyncQueue, watch

    container = ServiceContainer(settings)
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass

    queue = SyncQueue(container.refresher)
    try:
        await container.refresher.initialize()
        queue.start()
        try:
            await queue.submit("startup")
        except ConfigurationError:
            raise
        except RagSyncException as e:
            logger.warning(f"Initial sync failed, continuing to watch: {e}")
        await watch(container.refresher, queue, interval_seconds, stop_event)
    finally:
        await queue.stop()
        await container.close()


async def run_search(
    settings: Settings,
    query: str,
    top_k: int | None,
    threshold: float | None,
    context: bool,
) -> str:
    """Run a query against the index and render the results."""
    container = ServiceContainer(settings)
    try:
        if context:
            return await container.retriever.retrieve_context(query)

        embedding = await container.embedder.embed_query(query)
        results = await container.vector_store.search_similar(
            embedding,
            top_k=top_k or settings.retrieval.top_k,
            threshold=settings.retrieval.similarity_threshold if threshold is None else threshold,
        )
        return json.dumps([result.model_dump() for result in results], indent=2, default=str)
    finally:
        await container.close()


def run_server(host: str, port: int) -> None:
    import uvicorn

    from ragsync.api.main import create_app

    uvicorn.run(create_app(), host=host, port=port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ragsync",
        description="Keep a pgvector index synchronized with an S3 document corpus",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-schema", help="Create the vector store schema")
    commands.add_parser("sync", help="Run one synchronization pass")

    watch_parser = commands.add_parser("watch", help="Sync, then sync again whenever the corpus changes")
    watch_parser.add_argument("--interval", type=float, default=None, help="Seconds between checks")

    serve_parser = commands.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8080)

    search_parser = commands.add_parser("search", help="Query the index")
    search_parser.add_argument("query")
    search_parser.add_argument("--top-k", type=int, default=None)
    search_parser.add_argument("--threshold", type=float, default=None)
    search_parser.add_argument(
        "--context",
        action="store_true",
        help="Use dynamic-threshold retrieval and print formatted context",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    try:
        if args.command == "init-schema":
            asyncio.run(init_schema(settings))
            logger.info("Schema initialized")
        elif args.command == "sync":
            result = asyncio.run(run_sync(settings))
            print(json.dumps(result, indent=2))
        elif args.command == "watch":
            interval = args.interval or settings.sync.watch_interval_seconds
            asyncio.run(run_watch(settings, interval))
        elif args.command == "serve":
            run_server(args.host, args.port)
        elif args.command == "search":
            print(asyncio.run(
                run_search(settings, args.query, args.top_k, args.threshold, args.context)
            ))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except RagSyncException as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
