"""Persistence module for AOF-KV."""

from .aof import AppendLog, reconstruct_frames

__all__ = ["AppendLog", "reconstruct_frames"]
