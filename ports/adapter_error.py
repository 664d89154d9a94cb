"""Unified adapter error types."""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class AdapterError(Exception):
    """
    Unified error type for resumable upload failures.

    Handed to the caller's ``on_error`` callback instead of being raised, so
    the upload stays fire-and-forget from the caller's point of view.

    Codes:
        RESUME_LOOKUP_FAILED: Previous-upload lookup could not be completed.
        UPLOAD_START_FAILED: Remote upload could not be created.
        CHUNK_UPLOAD_FAILED: Chunk transfer failed after all retry delays.
        UPLOAD_FAILED: Unexpected error anywhere else in the upload.
    """
    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} (details: {self.details})"
        return f"[{self.code}] {self.message}"


class ConfigurationError(Exception):
    """Raised at construction time when required configuration is missing."""
    pass


class UploadJobError(ValueError):
    """Raised before any network activity when an upload job is malformed."""
    pass
