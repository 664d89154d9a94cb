"""Bunny Stream client: wires configuration, dispatcher, uploads and facades."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

import httpx

from adapters.bunny_http_client import BunnyHttpClient
from adapters.tus_transport import TusResumableTransport
from app.config import Config, get_config
from domain.collections import Collections
from domain.models import ClientConfig, UploadJob, UploadState
from domain.upload_coordinator import UploadCoordinator
from domain.videos import Videos
from ports.http_client import CollectionClient, VideoClient
from ports.resumable_transport import ResumableTransport

logger = logging.getLogger(__name__)


class BunnyStreamClient(BunnyHttpClient, CollectionClient, VideoClient):
    """
    Bunny Stream API client.

    Explicit arguments win over environment configuration.

    Example:
        client = BunnyStreamClient(access_key="...", library_id=123)
        result = await client.videos.get_list(order_by="date")
        if result.ok:
            ...
    """

    def __init__(
        self,
        access_key: str | None = None,
        base_url: str | None = None,
        library_id: int | None = None,
        config: Optional[Config] = None,
        upload_transport: Optional[ResumableTransport] = None,
        timeout: float | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize client.

        Args:
            access_key: Library API key. Falls back to BUNNY_STREAM_ACCESS_KEY.
            base_url: API base URL. Falls back to BUNNY_STREAM_BASE_URL.
            library_id: Default library id. Falls back to BUNNY_STREAM_LIBRARY_ID.
            config: Environment configuration. If None, uses get_config().
            upload_transport: Resumable transport. Defaults to TUS.
            timeout: Per-request timeout in seconds.
            http_transport: Optional httpx transport (used by tests).

        Raises:
            ConfigurationError: If base URL or access key is missing.
        """
        env = config if config is not None else get_config()

        super().__init__(
            ClientConfig(
                base_url=base_url if base_url is not None else env.base_url,
                access_key=access_key if access_key is not None else env.access_key,
            ),
            timeout=timeout,
            transport=http_transport,
        )
        self._library_id = library_id if library_id is not None else env.library_id

        if upload_transport is None:
            upload_transport = TusResumableTransport(
                endpoint=env.tus_endpoint, storage_file=env.upload_storage
            )
        self.uploads = UploadCoordinator(self.config, upload_transport)

        self.videos = Videos(self)
        self.collections = Collections(self)

        logger.debug(f"BunnyStreamClient initialized: base_url={self.config.base_url}")

    @property
    def default_library_id(self) -> Optional[int]:
        return self._library_id

    def create_signature(self, library_id: int, video_id: str, expire_at: datetime) -> str:
        """Upload signature for (library, video, expiry) using this client's key."""
        return self.uploads.create_signature(library_id, video_id, expire_at)

    async def upload(self, job: UploadJob) -> UploadState:
        return await self.uploads.upload(job)

    def start_upload(self, job: UploadJob) -> asyncio.Task:
        """Fire-and-forget upload; outcome arrives through the job callbacks."""
        return self.uploads.start_upload(job)
