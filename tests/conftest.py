"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from pathlib import Path
from typing import AsyncGenerator

from aofkv.cache.store import KVStore
from aofkv.dispatch.dispatcher import CommandDispatcher
from aofkv.network.tcp_server import KVServer
from aofkv.persistence.aof import AppendLog
from aofkv.protocol.decoder import ProtocolDecoder
from aofkv.protocol.encoder import encode_command


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Store / Protocol Fixtures
# ============================================================================

@pytest.fixture
def store() -> KVStore:
    """Create a fresh, empty KVStore."""
    return KVStore()


@pytest.fixture
def decoder() -> ProtocolDecoder:
    """Create a ProtocolDecoder instance."""
    return ProtocolDecoder()


# ============================================================================
# Append Log Fixtures
# ============================================================================

@pytest.fixture
def aof_path(tmp_path: Path) -> Path:
    """Location of a log file inside the test's temporary directory."""
    return tmp_path / "aof"


@pytest.fixture
def aof(aof_path: Path) -> AppendLog:
    """Create an open AppendLog, closed after the test."""
    log = AppendLog(aof_path)
    log.open()
    yield log
    log.close()


@pytest.fixture
def dispatcher(store: KVStore, aof: AppendLog) -> CommandDispatcher:
    """Create a dispatcher over the store fixture that logs to the aof fixture."""
    return CommandDispatcher(store, aof)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


async def start_background(srv: KVServer) -> asyncio.Task:
    """Start a server in a background task and wait for it to be ready."""
    task = asyncio.create_task(srv.start())
    await asyncio.sleep(0.1)
    return task


async def stop_background(srv: KVServer, task: asyncio.Task) -> None:
    """Stop a server started with start_background()."""
    await srv.stop()
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


@pytest_asyncio.fixture
async def server(server_port: int, dispatcher: CommandDispatcher) -> AsyncGenerator[KVServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a KVServer on a random free port, logging to a temp file
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = KVServer(host='127.0.0.1', port=server_port, dispatcher=dispatcher)
    server_task = await start_background(srv)

    yield srv

    await stop_background(srv, server_task)


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Sends one frame per call and reads back one CRLF-terminated response.

    Usage:
        async with AsyncClient('127.0.0.1', 6379) as client:
            response = await client.send_command("SET", "key", "value")
            assert response == b"+OK\\r\\n"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except OSError:
                pass

    async def send_raw(self, frame: bytes) -> bytes:
        """
        Send raw bytes and receive the response line.

        Returns:
            Response bytes including the trailing CRLF
        """
        self.writer.write(frame)
        await self.writer.drain()
        return await asyncio.wait_for(self.reader.readuntil(b"\r\n"), timeout=2)

    async def send_command(self, *args) -> bytes:
        """Encode ``args`` as a frame of bulk strings and send it."""
        return await self.send_raw(encode_command(*args))

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("GET", "key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
