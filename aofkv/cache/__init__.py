"""Cache module for AOF-KV."""

from .store import KVStore

__all__ = ["KVStore"]
