"""Domain models for the Bunny Stream client."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import (
    Any,
    BinaryIO,
    Callable,
    Dict,
    Generic,
    List,
    Literal,
    Optional,
    Sequence,
    TypedDict,
    TypeVar,
    Union,
)

from ports.adapter_error import AdapterError, ConfigurationError

T = TypeVar("T")


class HttpMethod(str, Enum):
    """HTTP verbs supported by the dispatcher."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def sends_query(self) -> bool:
        """True if ``data`` travels as query parameters instead of a body."""
        return self in (HttpMethod.GET, HttpMethod.DELETE)


class ErrorOrigin(str, Enum):
    """Where a failure came from."""
    REMOTE = "remote"
    LOCAL = "local"


class UploadState(str, Enum):
    """Resumable upload lifecycle."""
    IDLE = "idle"
    LOOKUP_PREVIOUS = "lookup_previous"
    RESUMING = "resuming"
    STARTING = "starting"
    TRANSFERRING = "transferring"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable connection settings for a client instance.

    Raises:
        ConfigurationError: If base_url or access_key is empty or missing.
    """
    base_url: str
    access_key: str = field(repr=False)

    def __post_init__(self):
        if not self.base_url:
            raise ConfigurationError("Base URL is required")
        if not self.access_key:
            raise ConfigurationError("Access key is required")


# Error payloads -------------------------------------------------------------

@dataclass(frozen=True)
class ValidationErrorPayload:
    """Remote validation error (``{type, title, status, traceId, errors}``)."""
    error: str
    type: Optional[str] = None
    status: Optional[int] = None
    trace_id: Optional[str] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)
    origin: ErrorOrigin = ErrorOrigin.REMOTE


@dataclass(frozen=True)
class MessageErrorPayload:
    """Remote generic error (``{Message}``) or an unrecognized error body."""
    error: str
    body: Any = None
    origin: ErrorOrigin = ErrorOrigin.REMOTE


@dataclass(frozen=True)
class LocalErrorPayload:
    """Request never produced an HTTP response (DNS, connect, timeout...)."""
    error: str
    origin: ErrorOrigin = ErrorOrigin.LOCAL


ErrorPayload = Union[ValidationErrorPayload, MessageErrorPayload, LocalErrorPayload]


# Envelopes ------------------------------------------------------------------

@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful response envelope."""
    status_code: int
    data: T
    status: Literal["success"] = "success"

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "statusCode": self.status_code, "data": self.data}


@dataclass(frozen=True)
class Failure:
    """Failed response envelope; ``data`` is one of the error payloads."""
    status_code: int
    data: ErrorPayload
    status: Literal["failure"] = "failure"

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.data.error, "origin": self.data.origin.value}
        if isinstance(self.data, ValidationErrorPayload):
            payload["errors"] = self.data.errors
            for key, value in (
                ("type", self.data.type),
                ("status", self.data.status),
                ("traceId", self.data.trace_id),
            ):
                if value is not None:
                    payload[key] = value
        elif isinstance(self.data, MessageErrorPayload) and self.data.body is not None:
            payload["body"] = self.data.body
        return {"status": self.status, "statusCode": self.status_code, "data": payload}


ResponseEnvelope = Union[Success[T], Failure]


# Signature / upload ---------------------------------------------------------

@dataclass(frozen=True)
class SignatureParams:
    """Inputs of an upload signature (the access key is held by the client)."""
    library_id: int
    video_id: str
    expire_at: datetime

    @property
    def expire_at_ms(self) -> int:
        return int(self.expire_at.timestamp() * 1000)


@dataclass
class UploadMetadata:
    """Metadata sent with a resumable upload."""
    filetype: str
    title: str
    collection: Optional[str] = None
    thumbnail_time: Optional[int] = None

    def to_protocol(self) -> Dict[str, str]:
        """Render as protocol metadata; absent values become empty strings."""
        return {
            "filetype": self.filetype,
            "title": self.title,
            "collection": self.collection or "",
            "thumbnailTime": "" if self.thumbnail_time is None else str(self.thumbnail_time),
        }


@dataclass
class UploadJob:
    """
    A single video upload.

    Created by the caller and consumed once by the upload coordinator.
    ``retry_delays`` are seconds to wait before each retry of a failed chunk.
    """
    file: BinaryIO
    video_id: str
    metadata: UploadMetadata
    library_id: Optional[int] = None
    expire_time: Optional[timedelta] = None
    retry_delays: Optional[Sequence[float]] = None
    chunk_size: Optional[int] = None
    on_error: Optional[Callable[[AdapterError], None]] = None
    on_progress: Optional[Callable[[int, int], None]] = None
    on_success: Optional[Callable[[], None]] = None


# Remote response shapes -----------------------------------------------------

class DefaultResponse(TypedDict):
    success: bool
    message: str
    statusCode: int


class Collection(TypedDict):
    videoLibraryId: int
    guid: str
    name: str
    videoCount: int
    totalSize: int
    previewVideoIds: str


class CollectionList(TypedDict):
    totalItems: int
    currentPage: int
    itemsPerPage: int
    items: List[Collection]


class Caption(TypedDict):
    srclang: str
    label: str


class Chapter(TypedDict):
    title: str
    start: int
    end: int


class Moment(TypedDict):
    label: str
    timestamp: int


class MetaTag(TypedDict):
    property: str
    value: str


class TranscodingMessage(TypedDict):
    timeStamp: str
    level: int
    issueCode: int
    message: str
    value: str


class VideoLibraryItem(TypedDict, total=False):
    videoLibraryId: int
    guid: str
    title: str
    dateUploaded: str
    views: int
    isPublic: bool
    length: int
    status: int
    framerate: float
    rotation: int
    width: int
    height: int
    availableResolutions: str
    thumbnailCount: int
    encodeProgress: int
    storageSize: int
    captions: List[Caption]
    hasMP4Fallback: bool
    collectionId: str
    thumbnailFileName: str
    averageWatchTime: int
    totalWatchTime: int
    category: str
    chapters: List[Chapter]
    moments: List[Moment]
    metaTags: List[MetaTag]
    transcodingMessages: List[TranscodingMessage]


class PaginatedVideoLibraryResponse(TypedDict):
    totalItems: int
    currentPage: int
    itemsPerPage: int
    items: List[VideoLibraryItem]


class Heatmap(TypedDict):
    heatmap: Dict[str, int]


class VideoStatistics(TypedDict, total=False):
    viewsChart: Dict[str, int]
    watchTimeChart: Dict[str, int]
    countryViewCounts: Dict[str, int]
    countryWatchTime: Dict[str, int]
    engagementScore: int
