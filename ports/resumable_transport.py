"""Interface for resumable (chunked) file transfer, e.g. TUS."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Mapping, Optional


@dataclass(frozen=True)
class PreviousUpload:
    """Persisted record of an interrupted upload."""
    url: str
    fingerprint: str


class ResumableUpload(ABC):
    """
    Handle for a single in-flight transfer.

    The coordinator drives it chunk by chunk so it can apply its own retry
    delays and report progress at each chunk boundary.
    """

    # Persisted record for this transfer, if the transport stores one.
    record: Optional[PreviousUpload] = None

    @property
    @abstractmethod
    def offset(self) -> int:
        """Bytes acknowledged by the server so far."""
        pass

    @property
    @abstractmethod
    def total(self) -> int:
        """Total size of the source in bytes."""
        pass

    @property
    def finished(self) -> bool:
        return self.offset >= self.total

    @abstractmethod
    async def upload_chunk(self) -> None:
        """
        Transfer the next chunk.

        Raises:
            AdapterError: With code CHUNK_UPLOAD_FAILED if the chunk failed.
        """
        pass


class ResumableTransport(ABC):
    """
    Narrow interface over a third-party resumable upload library.

    Chunked transfer internals stay in the library; callers only decide
    whether to resume or start.
    """

    @abstractmethod
    async def find_previous_upload(self, source: BinaryIO) -> Optional[PreviousUpload]:
        """
        Look up a previously interrupted upload of the same content.

        Raises:
            AdapterError: With code RESUME_LOOKUP_FAILED if lookup fails.
        """
        pass

    @abstractmethod
    async def resume_from(
        self,
        previous: PreviousUpload,
        source: BinaryIO,
        headers: Mapping[str, str],
        metadata: Mapping[str, str],
        chunk_size: Optional[int] = None,
    ) -> ResumableUpload:
        """
        Continue a previous upload from the server-side offset.

        Raises:
            AdapterError: With code UPLOAD_START_FAILED if the previous upload
                can no longer be resumed.
        """
        pass

    @abstractmethod
    async def start(
        self,
        source: BinaryIO,
        headers: Mapping[str, str],
        metadata: Mapping[str, str],
        chunk_size: Optional[int] = None,
    ) -> ResumableUpload:
        """
        Create a new remote upload and return its handle.

        Raises:
            AdapterError: With code UPLOAD_START_FAILED if creation fails.
        """
        pass

    @abstractmethod
    async def forget(self, previous: PreviousUpload) -> None:
        """Drop a persisted upload record (stale or completed)."""
        pass
