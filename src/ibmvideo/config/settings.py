"""Application settings loaded from environment variables and config files."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, HttpUrl, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ibmvideo.config import CONFIG_ROOT
from ibmvideo.models.embed import EmbedUrlParameters
from ibmvideo.utils.validation import EMBED_URL_SCHEMES

DEFAULT_API_BASE_URL = "https://api.video.ibm.com"
DEFAULT_THUMBNAILS_DIRECTORY = "ibm_video_thumbnails"


def _load_player_defaults(player_path: Path) -> EmbedUrlParameters:
    if not player_path.exists():
        return EmbedUrlParameters()

    raw_data = yaml.safe_load(player_path.read_text(encoding="utf-8")) or {}
    return EmbedUrlParameters.model_validate(raw_data)


class Settings(BaseSettings):
    """Primary settings for embedding IBM videos and caching their thumbnails."""

    api_base_url: HttpUrl = Field(
        default=DEFAULT_API_BASE_URL, alias="IBM_VIDEO_API_BASE_URL", validate_default=True
    )
    thumbnails_directory: Optional[str] = Field(
        default=DEFAULT_THUMBNAILS_DIRECTORY, alias="IBM_VIDEO_THUMBNAILS_DIRECTORY"
    )
    http_timeout_seconds: PositiveFloat = Field(default=10.0, alias="IBM_VIDEO_HTTP_TIMEOUT")
    http_connect_timeout_seconds: PositiveFloat = Field(default=5.0, alias="IBM_VIDEO_HTTP_CONNECT_TIMEOUT")
    embed_scheme: str = Field(default="//", alias="IBM_VIDEO_EMBED_SCHEME")

    player: EmbedUrlParameters = Field(default_factory=lambda: _load_player_defaults(CONFIG_ROOT / "player.yaml"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("embed_scheme")
    @classmethod
    def _check_embed_scheme(cls, value: str) -> str:
        if value.lower() not in EMBED_URL_SCHEMES:
            allowed = ", ".join(repr(scheme) for scheme in EMBED_URL_SCHEMES)
            raise ValueError(f"Embed scheme must be one of {allowed}.")
        return value.lower()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()


__all__ = ["DEFAULT_API_BASE_URL", "DEFAULT_THUMBNAILS_DIRECTORY", "Settings", "get_settings"]
