"""
Scanner configuration.

Centralized configuration management with environment variables
(prefixed with ``PREREQSCAN_``).
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ScannerSettings(BaseSettings):
    """Scanner settings"""

    model_config = SettingsConfigDict(
        env_prefix="PREREQSCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Parsers
    PARSERS: list[str] = [":default"]
    SUGGESTS: bool = False  # record requirements found in eval

    # Scanning limits
    MAX_DEPTH: int = 100  # nested scopes (brackets + string evals)
    CONTEXT_CHARS: int = 100  # source excerpt length in diagnostics

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "text"  # json or text
    LOG_FILE: Optional[str] = None


@lru_cache()
def get_settings() -> ScannerSettings:
    """Get cached settings instance"""
    return ScannerSettings()
