"""Network module for AOF-KV."""

from .tcp_server import KVServer

__all__ = ["KVServer"]
