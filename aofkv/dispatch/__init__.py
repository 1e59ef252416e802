"""Dispatch module for AOF-KV."""

from .dispatcher import ArityError, CommandDispatcher, CommandError

__all__ = ["ArityError", "CommandDispatcher", "CommandError"]
