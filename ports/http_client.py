"""Capability interfaces for the Bunny Stream HTTP client.

Facades depend only on the verbs they use, e.g. a read-only facade takes a
``GetClient`` while the video facade takes a ``VideoClient``.
"""
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from domain.models import ResponseEnvelope, UploadJob, UploadState


class GetClient(ABC):
    """Issue GET requests; ``data`` is sent as query parameters."""

    @abstractmethod
    async def get(
        self,
        endpoint: str,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ResponseEnvelope:
        pass


class PostClient(ABC):
    """Issue POST requests; ``data`` is sent as JSON body."""

    @abstractmethod
    async def post(
        self,
        endpoint: str,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ResponseEnvelope:
        pass


class PutClient(ABC):
    """Issue PUT requests; ``data`` is sent as JSON body."""

    @abstractmethod
    async def put(
        self,
        endpoint: str,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ResponseEnvelope:
        pass


class DeleteClient(ABC):
    """Issue DELETE requests; ``data`` is sent as query parameters."""

    @abstractmethod
    async def delete(
        self,
        endpoint: str,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ResponseEnvelope:
        pass


class UploadClient(ABC):
    """Run a signed resumable upload."""

    @abstractmethod
    async def upload(self, job: UploadJob) -> UploadState:
        """
        Upload a video file through the resumable protocol.

        Args:
            job: Upload job with source file, ids, metadata and callbacks.

        Returns:
            Terminal upload state. Outcome is also reported via callbacks.

        Raises:
            UploadJobError: If the job is malformed (before any network call).
        """
        pass


class LibraryIdClient(ABC):
    """Expose an optional client-wide default library id."""

    @property
    @abstractmethod
    def default_library_id(self) -> Optional[int]:
        pass


class CollectionClient(GetClient, PostClient, DeleteClient, LibraryIdClient, ABC):
    """Capabilities needed by the collections facade."""
    pass


class VideoClient(GetClient, PostClient, DeleteClient, UploadClient, LibraryIdClient, ABC):
    """Capabilities needed by the videos facade."""
    pass
