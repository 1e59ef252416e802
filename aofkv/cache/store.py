"""
Key-Value Store Module

This module implements the in-memory state the dispatcher operates on:
a flat string map and a map of named hash maps.
"""

from typing import Any, Dict, Optional


class KVStore:
    """
    In-memory key-value store with flat strings and named hash maps.

    All operations are O(1) average-case. The store does no I/O and no
    locking; it is owned by one dispatcher and mutated only through it.

    Internal Storage:
        _strings: key -> value
        _hashes:  map name -> (field -> value)

    There is no eviction, expiry or deletion.
    """

    def __init__(self):
        self._strings: Dict[str, str] = {}
        self._hashes: Dict[str, Dict[str, str]] = {}

    def set_string(self, key: str, value: str) -> None:
        """Insert or overwrite a string value."""
        self._strings[key] = value

    def get_string(self, key: str) -> Optional[str]:
        """
        Retrieve a string value.

        Returns:
            The value if the key exists, None otherwise
        """
        return self._strings.get(key)

    def hset(self, name: str, field: str, value: str) -> None:
        """
        Set a field in a named hash map, creating the map on first use.
        """
        self._hashes.setdefault(name, {})[field] = value

    def hget(self, name: str, field: str) -> Optional[str]:
        """
        Retrieve a field from a named hash map.

        Returns:
            The value, or None if either the map or the field is absent
        """
        fields = self._hashes.get(name)
        if fields is None:
            return None
        return fields.get(field)

    def size(self) -> int:
        """Number of string keys plus number of hash maps."""
        return len(self._strings) + len(self._hashes)

    def clear(self) -> None:
        """Remove everything from the store."""
        self._strings.clear()
        self._hashes.clear()

    def snapshot(self) -> Dict[str, Any]:
        """
        Copy of the full store contents.

        Returns:
            {"strings": {...}, "hashes": {name: {...}}}
        """
        return {
            "strings": dict(self._strings),
            "hashes": {name: dict(fields) for name, fields in self._hashes.items()},
        }

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - string_keys: Number of flat string keys
            - hash_maps: Number of named hash maps
            - hash_fields: Total fields across all hash maps
        """
        return {
            "string_keys": len(self._strings),
            "hash_maps": len(self._hashes),
            "hash_fields": sum(len(fields) for fields in self._hashes.values()),
        }
