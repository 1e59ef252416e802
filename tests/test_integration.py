"""
Integration Tests

End-to-end tests that verify the complete system works together,
including rebuilding state from the append-only log on restart.

Run with: python -m pytest tests/test_integration.py -v
"""

import pytest
from aofkv.server import create_server, parse_args
from aofkv.protocol.encoder import encode_command
from tests.conftest import AsyncClient, find_free_port, start_background, stop_background


@pytest.mark.asyncio
@pytest.mark.integration
class TestRestart:
    """State written before a restart is visible after it."""

    async def test_state_survives_restart(self, aof_path):
        port = find_free_port()
        srv = create_server(host='127.0.0.1', port=port, aof_path=str(aof_path))
        task = await start_background(srv)
        try:
            async with AsyncClient('127.0.0.1', port) as client:
                assert await client.send_command("SET", "user:1", "alice") == b"+OK\r\n"
                assert await client.send_command("SET", "user:2", "bob") == b"+OK\r\n"
                assert await client.send_command("HSET", "cfg", "mode", "fast") == b"+OK\r\n"
                assert await client.send_command("SET", "user:1", "carol") == b"+OK\r\n"
        finally:
            await stop_background(srv, task)
            srv.dispatcher.aof.close()

        port = find_free_port()
        srv = create_server(host='127.0.0.1', port=port, aof_path=str(aof_path))
        task = await start_background(srv)
        try:
            async with AsyncClient('127.0.0.1', port) as client:
                assert await client.send_command("GET", "user:1") == b"+carol\r\n"
                assert await client.send_command("GET", "user:2") == b"+bob\r\n"
                assert await client.send_command("HGET", "cfg", "mode") == b"+fast\r\n"
                assert await client.send_command("GET", "user:3") == b"_\r\n"
        finally:
            await stop_background(srv, task)
            srv.dispatcher.aof.close()

    async def test_truncated_log_does_not_block_startup(self, aof_path):
        """Test a half-written trailing frame is dropped at startup."""
        aof_path.write_bytes(
            encode_command("SET", "k", "v") + encode_command("SET", "k2", "v2")[:20]
        )

        port = find_free_port()
        srv = create_server(host='127.0.0.1', port=port, aof_path=str(aof_path))
        task = await start_background(srv)
        try:
            async with AsyncClient('127.0.0.1', port) as client:
                assert await client.send_command("GET", "k") == b"+v\r\n"
                assert await client.send_command("GET", "k2") == b"_\r\n"
        finally:
            await stop_background(srv, task)
            srv.dispatcher.aof.close()


class TestStartup:
    """Test server construction from arguments."""

    def test_create_server_creates_log(self, aof_path):
        srv = create_server(aof_path=str(aof_path))
        try:
            assert aof_path.exists()
            assert srv.dispatcher.aof.is_open
        finally:
            srv.dispatcher.aof.close()

    def test_create_server_without_log(self, aof_path):
        srv = create_server(aof_path=str(aof_path), aof_enabled=False)

        assert srv.dispatcher.aof is None
        assert not aof_path.exists()

    def test_create_server_replays(self, aof_path):
        aof_path.write_bytes(encode_command("HSET", "m", "f", "v"))
        srv = create_server(aof_path=str(aof_path))
        try:
            assert srv.store.hget("m", "f") == "v"
        finally:
            srv.dispatcher.aof.close()

    def test_parse_args(self):
        args = parse_args(["--port", "7000", "--aof", "data/log", "--no-aof", "--fsync"])

        assert args.port == 7000
        assert args.aof == "data/log"
        assert args.aof_enabled is False
        assert args.fsync is True
