"""
AOF-KV: Append-Only-Logged Key-Value Store

A small in-memory key-value server built with Python asyncio. It speaks
a compact array-framed wire protocol over raw TCP and logs every
accepted write to an append-only file that is replayed at startup.
"""

__version__ = "1.0.0"
