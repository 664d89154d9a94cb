"""TUS resumable transport implementation (tuspy)."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import BinaryIO, Mapping, Optional

from tusclient.client import TusClient
from tusclient.exceptions import TusCommunicationError
from tusclient.fingerprint.fingerprint import Fingerprint
from tusclient.storage.filestorage import FileStorage

from ports.adapter_error import AdapterError
from ports.resumable_transport import PreviousUpload, ResumableTransport, ResumableUpload

logger = logging.getLogger(__name__)


class TusUpload(ResumableUpload):
    """Wraps a tuspy ``Uploader``; blocking calls run in a worker thread."""

    def __init__(self, uploader, record: Optional[PreviousUpload] = None):
        self._uploader = uploader
        self._total = uploader.get_file_size()
        self.record = record

    @property
    def offset(self) -> int:
        return self._uploader.offset

    @property
    def total(self) -> int:
        return self._total

    @property
    def url(self) -> Optional[str]:
        return self._uploader.url

    async def upload_chunk(self) -> None:
        try:
            await asyncio.to_thread(self._uploader.upload_chunk)
        except TusCommunicationError as e:
            raise AdapterError(
                code="CHUNK_UPLOAD_FAILED",
                message=f"Chunk upload failed at offset {self.offset}",
                details={"status_code": e.status_code},
            ) from e


class TusResumableTransport(ResumableTransport):
    """
    Resumable transport backed by a TUS server.

    Upload URLs are persisted in a tuspy ``FileStorage`` keyed by a content
    fingerprint, so an interrupted upload of the same file can be resumed by
    a later process.
    """

    DEFAULT_ENDPOINT = "https://video.bunnycdn.com/tusupload"
    DEFAULT_STORAGE_FILE = ".data/tus_uploads.json"
    DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024

    def __init__(
        self,
        endpoint: str | None = None,
        storage_file: str | None = None,
        client_factory=TusClient,
    ):
        """
        Initialize TUS transport.

        Args:
            endpoint: TUS creation endpoint. Defaults to Bunny's endpoint.
            storage_file: JSON file holding resumable upload URLs.
            client_factory: Callable building a tuspy client from
                (url, headers=...). Overridable for tests.
        """
        self.endpoint = endpoint or self.DEFAULT_ENDPOINT
        self.storage_file = storage_file or self.DEFAULT_STORAGE_FILE
        self._client_factory = client_factory
        self._fingerprinter = Fingerprint()
        self._storage: Optional[FileStorage] = None

    @property
    def storage(self) -> FileStorage:
        """Resume records, opened on first use so construction touches no files."""
        if self._storage is None:
            Path(self.storage_file).parent.mkdir(parents=True, exist_ok=True)
            self._storage = FileStorage(self.storage_file)
        return self._storage

    async def find_previous_upload(self, source: BinaryIO) -> Optional[PreviousUpload]:
        try:
            return await asyncio.to_thread(self._lookup, source)
        except (OSError, ValueError) as e:
            raise AdapterError(
                code="RESUME_LOOKUP_FAILED",
                message="Could not look up previous upload",
                details=str(e),
            ) from e

    async def resume_from(
        self,
        previous: PreviousUpload,
        source: BinaryIO,
        headers: Mapping[str, str],
        metadata: Mapping[str, str],
        chunk_size: Optional[int] = None,
    ) -> ResumableUpload:
        logger.info(f"Resuming upload from {previous.url}")
        try:
            # Passing the url makes tuspy fetch the server offset.
            uploader = await asyncio.to_thread(
                self._build_uploader, source, headers, metadata, chunk_size, previous.url
            )
        except TusCommunicationError as e:
            raise AdapterError(
                code="UPLOAD_START_FAILED",
                message="Previous upload can no longer be resumed",
                details={"url": previous.url, "status_code": e.status_code},
            ) from e
        return TusUpload(uploader, record=previous)

    async def start(
        self,
        source: BinaryIO,
        headers: Mapping[str, str],
        metadata: Mapping[str, str],
        chunk_size: Optional[int] = None,
    ) -> ResumableUpload:
        try:
            uploader, record = await asyncio.to_thread(
                self._create, source, headers, metadata, chunk_size
            )
        except TusCommunicationError as e:
            raise AdapterError(
                code="UPLOAD_START_FAILED",
                message="Could not create upload",
                details={"status_code": e.status_code},
            ) from e
        logger.info(f"Created upload at {uploader.url}")
        return TusUpload(uploader, record=record)

    async def forget(self, previous: PreviousUpload) -> None:
        await asyncio.to_thread(self.storage.remove_item, previous.fingerprint)

    def _fingerprint(self, source: BinaryIO) -> str:
        source.seek(0)
        key = self._fingerprinter.get_fingerprint(source)
        source.seek(0)
        return key

    def _lookup(self, source: BinaryIO) -> Optional[PreviousUpload]:
        key = self._fingerprint(source)
        url = self.storage.get_item(key)
        if not url:
            logger.debug("No previous upload found")
            return None
        return PreviousUpload(url=url, fingerprint=key)

    def _build_uploader(self, source, headers, metadata, chunk_size, url=None):
        client = self._client_factory(self.endpoint, headers=dict(headers))
        return client.uploader(
            file_stream=source,
            url=url,
            chunk_size=chunk_size or self.DEFAULT_CHUNK_SIZE,
            metadata=dict(metadata),
            retries=0,
        )

    def _create(self, source, headers, metadata, chunk_size):
        uploader = self._build_uploader(source, headers, metadata, chunk_size)
        uploader.set_url(uploader.create_url())
        uploader.offset = 0

        key = self._fingerprint(source)
        self.storage.set_item(key, uploader.url)
        return uploader, PreviousUpload(url=uploader.url, fingerprint=key)

