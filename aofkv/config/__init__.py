"""Configuration module for AOF-KV."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
