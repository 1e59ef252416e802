"""
AOF-KV Configuration Settings

All tunables for the server live here. Values can be overridden through
environment variables; command-line flags in ``aofkv.server`` take
precedence over both.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("AOFKV_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("AOFKV_PORT", "6379"))

    # Append-only log settings
    AOF_PATH: str = os.environ.get("AOFKV_AOF_PATH", "aof")
    AOF_ENABLED: bool = _env_flag("AOFKV_AOF_ENABLED", "true")
    AOF_FSYNC: bool = _env_flag("AOFKV_AOF_FSYNC", "false")

    # Connection settings
    READ_BUFFER_SIZE: int = 1024
    MIN_REQUEST_BYTES: int = 7  # Shorter buffers cannot hold a command

    # Logging settings
    DEBUG: bool = _env_flag("AOFKV_DEBUG", "false")
    LOG_LEVEL: str = os.environ.get("AOFKV_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
