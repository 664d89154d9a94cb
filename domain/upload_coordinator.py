"""Resumable upload orchestration: signed headers, resume-or-start, retries."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, Optional, Sequence

from domain.models import ClientConfig, SignatureParams, UploadJob, UploadState
from domain.signature import create_signature
from ports.adapter_error import AdapterError, UploadJobError
from ports.resumable_transport import ResumableTransport, ResumableUpload

logger = logging.getLogger(__name__)

DEFAULT_EXPIRE_TIME = timedelta(hours=24)
DEFAULT_RETRY_DELAYS = (0, 3, 5, 10, 20, 60, 60)


class UploadCoordinator:
    """
    Runs one upload job through the resumable transport.

    Lifecycle: idle -> lookup_previous -> (resuming | starting) ->
    transferring -> (succeeded | failed). Failures are reported through the
    job's ``on_error`` callback, never raised, except for malformed jobs which
    are rejected before any network activity.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: ResumableTransport,
        default_expire_time: timedelta = DEFAULT_EXPIRE_TIME,
        default_retry_delays: Sequence[float] = DEFAULT_RETRY_DELAYS,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize coordinator.

        Args:
            config: Client configuration (access key signs uploads).
            transport: Resumable transfer implementation.
            default_expire_time: Signature validity when the job sets none.
            default_retry_delays: Seconds to wait before each chunk retry.
            clock: Returns the current time; defaults to UTC now.
            sleep: Awaitable sleep used between retries.
        """
        self.config = config
        self.transport = transport
        self.default_expire_time = default_expire_time
        self.default_retry_delays = tuple(default_retry_delays)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep

    def create_signature(self, library_id: int, video_id: str, expire_at: datetime) -> str:
        return create_signature(
            self.config.access_key,
            SignatureParams(library_id=library_id, video_id=video_id, expire_at=expire_at),
        )

    def build_headers(self, job: UploadJob, expire_at: datetime) -> Dict[str, str]:
        """Authorization headers for the TUS endpoint."""
        params = SignatureParams(
            library_id=job.library_id, video_id=job.video_id, expire_at=expire_at
        )
        return {
            "AuthorizationSignature": self.create_signature(
                job.library_id, job.video_id, expire_at
            ),
            "AuthorizationExpire": str(params.expire_at_ms),
            "VideoId": job.video_id,
            "LibraryId": str(job.library_id),
        }

    def start_upload(self, job: UploadJob) -> asyncio.Task:
        """Validate the job and schedule it in the background."""
        self.validate(job)
        return asyncio.create_task(self.upload(job))

    async def upload(self, job: UploadJob) -> UploadState:
        """
        Run the job to a terminal state.

        Args:
            job: Upload job.

        Returns:
            UploadState.SUCCEEDED or UploadState.FAILED.

        Raises:
            UploadJobError: If the job is malformed.
        """
        self.validate(job)

        # Compute once: signature and AuthorizationExpire must agree.
        expire_time = job.expire_time if job.expire_time is not None else self.default_expire_time
        expire_at = self._clock() + expire_time
        headers = self.build_headers(job, expire_at)
        metadata = job.metadata.to_protocol()

        logger.info(f"Starting upload: video_id={job.video_id} library_id={job.library_id}")

        try:
            upload = await self._open(job, headers, metadata)
            return await self._transfer(job, upload)
        except AdapterError as e:
            return self._fail(job, e)
        except Exception as e:
            logger.exception(f"Unexpected error during upload of {job.video_id}")
            return self._fail(
                job,
                AdapterError(
                    code="UPLOAD_FAILED",
                    message=f"Unexpected error during upload: {type(e).__name__}",
                    details=str(e),
                ),
            )

    def validate(self, job: UploadJob) -> None:
        """Reject jobs that cannot produce a valid signed upload."""
        if not job.video_id:
            raise UploadJobError("video_id is required")
        if job.library_id is None:
            raise UploadJobError("library_id is required")
        if job.metadata is None:
            raise UploadJobError("metadata is required")
        if not job.metadata.filetype:
            raise UploadJobError("metadata.filetype is required")
        if not job.metadata.title:
            raise UploadJobError("metadata.title is required")
        if job.file is None or not hasattr(job.file, "read"):
            raise UploadJobError("file must be a readable binary stream")

    async def _open(self, job: UploadJob, headers, metadata) -> ResumableUpload:
        logger.debug(f"Upload {job.video_id}: {UploadState.LOOKUP_PREVIOUS.value}")
        previous = await self.transport.find_previous_upload(job.file)

        if previous is not None:
            logger.debug(f"Upload {job.video_id}: {UploadState.RESUMING.value}")
            try:
                return await self.transport.resume_from(
                    previous, job.file, headers, metadata, job.chunk_size
                )
            except AdapterError as e:
                logger.warning(f"Cannot resume upload {job.video_id}, starting over: {e}")
                await self.transport.forget(previous)

        logger.debug(f"Upload {job.video_id}: {UploadState.STARTING.value}")
        return await self.transport.start(job.file, headers, metadata, job.chunk_size)

    async def _transfer(self, job: UploadJob, upload: ResumableUpload) -> UploadState:
        delays = tuple(job.retry_delays) if job.retry_delays is not None else self.default_retry_delays
        logger.debug(f"Upload {job.video_id}: {UploadState.TRANSFERRING.value}")

        while not upload.finished:
            attempt = 0
            while True:
                try:
                    await upload.upload_chunk()
                    break
                except AdapterError as e:
                    if attempt >= len(delays):
                        return self._fail(job, e)
                    delay = delays[attempt]
                    attempt += 1
                    logger.warning(
                        f"Chunk failed for {job.video_id} ({e}); "
                        f"retry {attempt}/{len(delays)} in {delay}s"
                    )
                    await self._sleep(delay)

            _notify(job.on_progress, upload.offset, upload.total)

        if upload.record is not None:
            try:
                await self.transport.forget(upload.record)
            except Exception as e:
                logger.warning(f"Could not forget resume record for {job.video_id}: {e}")

        logger.info(f"Upload completed: video_id={job.video_id}")
        _notify(job.on_success)
        return UploadState.SUCCEEDED

    def _fail(self, job: UploadJob, error: AdapterError) -> UploadState:
        logger.error(f"Upload failed: video_id={job.video_id}: {error}")
        _notify(job.on_error, error)
        return UploadState.FAILED


def _notify(callback: Optional[Callable], *args) -> None:
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:
        logger.exception("Upload callback raised")
