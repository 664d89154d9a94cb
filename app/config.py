"""
Configuration module for the Bunny Stream client.

Handles reading environment variables (and a local ``.env`` file).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://video.bunnycdn.com"


@dataclass
class Config:
    """
    Environment-sourced settings.

    Attributes:
        base_url: Bunny Stream API base URL
        access_key: Library API key (None when not configured)
        library_id: Default library id used when a call passes none
        tus_endpoint: TUS upload endpoint (None selects the transport default)
        upload_storage: File persisting resumable upload URLs
    """
    base_url: str
    access_key: Optional[str]
    library_id: Optional[int]
    tus_endpoint: Optional[str]
    upload_storage: Optional[str]


# Module-level cache for configuration
_config_instance: Config | None = None


def get_config() -> Config:
    """
    Get configuration (singleton pattern).

    Loads .env file if present in the working directory.

    Environment variables:
        BUNNY_STREAM_BASE_URL: API base URL
            Default: "https://video.bunnycdn.com"
        BUNNY_STREAM_ACCESS_KEY: Library API key (no default)
        BUNNY_STREAM_LIBRARY_ID: Default library id (integer, optional)
        BUNNY_STREAM_TUS_ENDPOINT: TUS endpoint (optional)
        BUNNY_STREAM_UPLOAD_STORAGE: Resumable upload storage file (optional)

    Returns:
        Config instance with loaded configuration

    Raises:
        ValueError: If BUNNY_STREAM_LIBRARY_ID is not an integer
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    load_dotenv()

    library_id_str = os.getenv("BUNNY_STREAM_LIBRARY_ID", "").strip()
    try:
        library_id = int(library_id_str) if library_id_str else None
    except ValueError:
        raise ValueError(
            f"BUNNY_STREAM_LIBRARY_ID must be an integer, got: {library_id_str!r}"
        ) from None

    _config_instance = Config(
        base_url=os.getenv("BUNNY_STREAM_BASE_URL") or DEFAULT_BASE_URL,
        access_key=os.getenv("BUNNY_STREAM_ACCESS_KEY") or None,
        library_id=library_id,
        tus_endpoint=os.getenv("BUNNY_STREAM_TUS_ENDPOINT") or None,
        upload_storage=os.getenv("BUNNY_STREAM_UPLOAD_STORAGE") or None,
    )

    return _config_instance
