#!/usr/bin/env python3
"""
AOF-KV Server Entry Point

This is the main entry point for starting the AOF-KV server. On startup
the append-only log is created if missing, replayed into a fresh store,
and only then does the server start accepting connections.

Usage:
    python -m aofkv.server                    # Default settings (0.0.0.0:6379)
    python -m aofkv.server --port 8080        # Custom port
    python -m aofkv.server --aof data/aof     # Custom log location
    python -m aofkv.server --no-aof           # Purely in-memory
    python -m aofkv.server --debug            # Enable debug logging

Environment Variables:
    AOFKV_HOST          - Server bind address
    AOFKV_PORT          - Server port
    AOFKV_AOF_PATH      - Append-only log file
    AOFKV_AOF_ENABLED   - Enable the append-only log (true/false)
    AOFKV_AOF_FSYNC     - fsync after every append (true/false)
    AOFKV_DEBUG         - Enable debug mode (true/false)
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

from .cache.store import KVStore
from .config.settings import settings
from .dispatch.dispatcher import CommandDispatcher
from .network.tcp_server import KVServer
from .persistence.aof import AppendLog

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="AOF-KV: Key-Value Store Server with an append-only log",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--aof",
        type=str,
        default=settings.AOF_PATH,
        help="Path of the append-only log",
    )

    parser.add_argument(
        "--no-aof",
        dest="aof_enabled",
        action="store_false",
        default=settings.AOF_ENABLED,
        help="Disable the append-only log",
    )

    parser.add_argument(
        "--fsync",
        action="store_true",
        default=settings.AOF_FSYNC,
        help="fsync the log after every append",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def create_server(
        host: str = None,
        port: int = None,
        aof_path: str = None,
        aof_enabled: bool = True,
        fsync: bool = False,
) -> KVServer:
    """
    Build a server whose store has been rebuilt from the append-only log.

    Args:
        host: Bind address (default from settings)
        port: Port number (default from settings)
        aof_path: Log file (default from settings)
        aof_enabled: Open and replay the log; False runs purely in memory
        fsync: fsync the log after every append

    Returns:
        A KVServer ready to ``start()``
    """
    store = KVStore()
    aof = None
    if aof_enabled:
        aof = AppendLog(aof_path if aof_path is not None else settings.AOF_PATH, fsync=fsync)
        aof.open()

    dispatcher = CommandDispatcher(store, aof)
    if aof is not None:
        aof.replay(dispatcher)

    return KVServer(host=host, port=port, dispatcher=dispatcher)


def main(argv: Optional[list] = None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)

    server = create_server(
        host=args.host,
        port=args.port,
        aof_path=args.aof,
        aof_enabled=args.aof_enabled,
        fsync=args.fsync,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    logger.info("Starting AOF-KV server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  AOF: {args.aof if args.aof_enabled else 'disabled'}")
    logger.info(f"  Debug: {args.debug}")

    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        if server.dispatcher.aof is not None:
            server.dispatcher.aof.close()
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
