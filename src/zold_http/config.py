"""Node identity constants and environment-driven settings (Pydantic v2)."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Final

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env if present (non-fatal if missing)
load_dotenv(dotenv_path=Path(".env"), override=False)

# Wire protocol revision spoken by this node.
PROTOCOL: Final[str] = "2"
# Software build announced to every peer.
VERSION: Final[str] = "0.1.0"

# Header names that make up the wire contract with other nodes.
PROTOCOL_HEADER: Final[str] = "X-Zold-Protocol"
VERSION_HEADER: Final[str] = "X-Zold-Version"
NETWORK_HEADER: Final[str] = "X-Zold-Network"
SCORE_HEADER: Final[str] = "X-Zold-Score"

# Status reported when no valid HTTP response was obtained.
FAILURE_CODE: Final[str] = "599"


class Settings(BaseSettings):
    """Runtime settings loaded from env with sane defaults (Pydantic v2)."""

    model_config = SettingsConfigDict(
        env_prefix="ZOLD_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    NETWORK: str = Field(default="", description="Network tag sent to peers")
    HTTP_TIMEOUT: float = Field(default=10.0, gt=0.0, description="Seconds per request")
    LOG_LEVEL: str = Field(default="INFO")

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
