"""
Async TCP Server Module

This module implements the asynchronous TCP transport for AOF-KV.

Each read from a connection is treated as one complete request frame;
the bytes are handed to the CommandDispatcher and its response is
written back. Requests are not reassembled across reads.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..cache.store import KVStore
from ..config.settings import settings
from ..dispatch.dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)


class KVServer:
    """
    Asynchronous TCP server for the AOF-KV service.

    Connections are served as coroutines on one event loop. Dispatch
    (store mutation and log append) is synchronous, so the store and the
    append log only ever see one command at a time and frames from
    different clients are never interleaved in the log.

    Usage:
        server = KVServer(host='0.0.0.0', port=6379, dispatcher=dispatcher)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 6379)
        dispatcher: The CommandDispatcher shared by all connections
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            dispatcher: CommandDispatcher = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            dispatcher: CommandDispatcher (creates an in-memory one if not provided)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.dispatcher = dispatcher if dispatcher is not None else CommandDispatcher(KVStore())

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._connection_count = 0
        self._total_requests = 0

    @property
    def store(self) -> KVStore:
        return self.dispatcher.store

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Reads request buffers until the client disconnects, dispatching
        each one and writing the response back. Buffers too short to hold
        a command are ignored without a reply.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self._connection_count += 1
        logger.debug(f"Client connected: {addr}")

        try:
            while True:
                data = await reader.read(settings.READ_BUFFER_SIZE)
                if not data:
                    logger.debug(f"Client disconnected: {addr}")
                    break

                if len(data) < settings.MIN_REQUEST_BYTES:
                    logger.debug(f"Ignoring {len(data)}-byte buffer from {addr}")
                    continue

                self._total_requests += 1
                response = self.dispatcher.handle(data)

                writer.write(response)
                await writer.drain()

        except OSError as exc:
            logger.warning(f"Connection error with {addr}: {exc}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except OSError:
                pass

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Runs until cancelled or stopped. The append log must already have
        been replayed into the dispatcher's store.

        Example:
            server = KVServer(port=6379)
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
        )
        self._running = True

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the server and waits for it to fully shut down.
        """
        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, log counters and store statistics.
        """
        aof = self.dispatcher.aof
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "total_requests": self._total_requests,
            "aof_appended": aof.appended if aof is not None else 0,
            "aof_failed": aof.failed if aof is not None else 0,
            "store_stats": self.store.get_stats(),
        }
