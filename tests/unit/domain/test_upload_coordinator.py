"""Unit tests for the resumable upload coordinator."""
import io
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from domain.models import ClientConfig, SignatureParams, UploadJob, UploadMetadata, UploadState
from domain.signature import create_signature
from domain.upload_coordinator import DEFAULT_RETRY_DELAYS, UploadCoordinator
from ports.adapter_error import AdapterError, UploadJobError
from ports.resumable_transport import PreviousUpload
from tests.acceptance.fake_resumable_transport import FakeResumableTransport, FakeTransportMode

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
CONTENT = b"0123456789"


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def config():
    return ClientConfig(base_url="https://video.example.com", access_key="secret")


@pytest.fixture
def sleep():
    return RecordingSleep()


def make_coordinator(config, transport, sleep):
    return UploadCoordinator(config, transport, clock=lambda: NOW, sleep=sleep)


def make_job(**overrides):
    fields = dict(
        file=io.BytesIO(CONTENT),
        video_id="456",
        library_id=123,
        metadata=UploadMetadata(filetype="video/mp4", title="Hello"),
        on_error=Mock(),
        on_progress=Mock(),
        on_success=Mock(),
    )
    fields.update(overrides)
    return UploadJob(**fields)


@pytest.mark.unit
@pytest.mark.anyio
class TestUploadHeadersAndMetadata:

    async def test_signed_headers_use_single_expiry(self, config, sleep):
        transport = FakeResumableTransport()
        job = make_job()

        await make_coordinator(config, transport, sleep).upload(job)

        expire_at = NOW + timedelta(hours=24)
        expected_signature = create_signature(
            "secret", SignatureParams(library_id=123, video_id="456", expire_at=expire_at)
        )
        assert transport.headers == {
            "AuthorizationSignature": expected_signature,
            "AuthorizationExpire": str(int(expire_at.timestamp() * 1000)),
            "VideoId": "456",
            "LibraryId": "123",
        }

    async def test_custom_expire_time(self, config, sleep):
        transport = FakeResumableTransport()
        job = make_job(expire_time=timedelta(hours=1))

        await make_coordinator(config, transport, sleep).upload(job)

        expire_at = NOW + timedelta(hours=1)
        assert transport.headers["AuthorizationExpire"] == str(int(expire_at.timestamp() * 1000))

    async def test_zero_expire_time_is_not_replaced_by_default(self, config, sleep):
        transport = FakeResumableTransport()
        job = make_job(expire_time=timedelta(0))

        await make_coordinator(config, transport, sleep).upload(job)

        assert transport.headers["AuthorizationExpire"] == str(int(NOW.timestamp() * 1000))

    async def test_metadata_defaults_to_empty_strings(self, config, sleep):
        transport = FakeResumableTransport()

        await make_coordinator(config, transport, sleep).upload(make_job())

        assert transport.metadata == {
            "filetype": "video/mp4",
            "title": "Hello",
            "collection": "",
            "thumbnailTime": "",
        }

    async def test_metadata_optional_fields_are_stringified(self, config, sleep):
        transport = FakeResumableTransport()
        job = make_job(
            metadata=UploadMetadata(
                filetype="video/mp4", title="Hello", collection="c1", thumbnail_time=5000
            )
        )

        await make_coordinator(config, transport, sleep).upload(job)

        assert transport.metadata["collection"] == "c1"
        assert transport.metadata["thumbnailTime"] == "5000"


@pytest.mark.unit
@pytest.mark.anyio
class TestUploadLifecycle:

    async def test_fresh_upload_succeeds_with_progress(self, config, sleep):
        transport = FakeResumableTransport(chunk_size=4)
        job = make_job()

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.SUCCEEDED
        assert transport.calls == ["find_previous_upload", "start", "forget"]
        assert transport.upload.received == CONTENT
        assert [c.args for c in job.on_progress.call_args_list] == [(4, 10), (8, 10), (10, 10)]
        job.on_success.assert_called_once_with()
        job.on_error.assert_not_called()

    async def test_resumes_previous_upload(self, config, sleep):
        previous = PreviousUpload(url="https://tus.example/files/old", fingerprint="fp")
        transport = FakeResumableTransport(previous=previous, previous_offset=8)
        job = make_job()

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.SUCCEEDED
        assert transport.calls == ["find_previous_upload", "resume_from", "forget"]
        assert transport.upload.received == CONTENT[8:]
        job.on_progress.assert_called_once_with(10, 10)
        assert transport.forgotten == [previous]

    async def test_stale_previous_upload_starts_over(self, config, sleep):
        previous = PreviousUpload(url="https://tus.example/files/old", fingerprint="fp")
        transport = FakeResumableTransport(FakeTransportMode.RESUME_FAILS, previous=previous)
        job = make_job()

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.SUCCEEDED
        assert transport.calls[:4] == ["find_previous_upload", "resume_from", "forget", "start"]
        assert transport.forgotten[0] == previous

    async def test_lookup_failure_reports_error(self, config, sleep):
        transport = FakeResumableTransport(FakeTransportMode.LOOKUP_FAILS)
        job = make_job()

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.FAILED
        assert transport.calls == ["find_previous_upload"]
        error = job.on_error.call_args.args[0]
        assert isinstance(error, AdapterError)
        assert error.code == "RESUME_LOOKUP_FAILED"
        job.on_success.assert_not_called()

    async def test_start_failure_reports_error(self, config, sleep):
        transport = FakeResumableTransport(FakeTransportMode.START_FAILS)
        job = make_job()

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.FAILED
        assert job.on_error.call_args.args[0].code == "UPLOAD_START_FAILED"

    async def test_transient_chunk_failures_are_retried(self, config, sleep):
        transport = FakeResumableTransport(chunk_failures=2)
        job = make_job(retry_delays=[0, 1, 2])

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.SUCCEEDED
        assert sleep.delays == [0, 1]
        assert transport.upload.received == CONTENT
        job.on_error.assert_not_called()

    async def test_retry_exhaustion_reports_error(self, config, sleep):
        transport = FakeResumableTransport(chunk_failures=10)
        job = make_job(retry_delays=[0, 1])

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.FAILED
        assert transport.upload.attempts == 3
        assert sleep.delays == [0, 1]
        assert job.on_error.call_args.args[0].code == "CHUNK_UPLOAD_FAILED"
        job.on_success.assert_not_called()
        assert "forget" not in transport.calls

    async def test_default_retry_delays(self, config, sleep):
        transport = FakeResumableTransport(chunk_failures=100)
        job = make_job()

        await make_coordinator(config, transport, sleep).upload(job)

        assert tuple(sleep.delays) == DEFAULT_RETRY_DELAYS == (0, 3, 5, 10, 20, 60, 60)

    async def test_callback_errors_do_not_break_upload(self, config, sleep):
        transport = FakeResumableTransport()
        job = make_job(on_progress=Mock(side_effect=RuntimeError("boom")))

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.SUCCEEDED
        job.on_success.assert_called_once()

    async def test_unexpected_chunk_error_reports_error(self, config, sleep):
        transport = FakeResumableTransport(chunk_crash=OSError("disk read failed"))
        job = make_job()

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.FAILED
        error = job.on_error.call_args.args[0]
        assert error.code == "UPLOAD_FAILED"
        assert error.details == "disk read failed"
        assert transport.upload.attempts == 1
        job.on_success.assert_not_called()

    async def test_background_upload_reports_unexpected_error(self, config, sleep):
        transport = FakeResumableTransport(chunk_crash=ValueError("bad offset"))
        job = make_job()

        state = await make_coordinator(config, transport, sleep).start_upload(job)

        assert state == UploadState.FAILED
        assert job.on_error.call_args.args[0].code == "UPLOAD_FAILED"

    async def test_forget_failure_after_success_is_ignored(self, config, sleep):
        transport = FakeResumableTransport(forget_error=OSError("storage locked"))
        job = make_job()

        state = await make_coordinator(config, transport, sleep).upload(job)

        assert state == UploadState.SUCCEEDED
        job.on_success.assert_called_once_with()
        job.on_error.assert_not_called()

    async def test_start_upload_runs_in_background(self, config, sleep):
        transport = FakeResumableTransport()
        job = make_job()

        task = make_coordinator(config, transport, sleep).start_upload(job)
        state = await task

        assert state == UploadState.SUCCEEDED
        job.on_success.assert_called_once()


@pytest.mark.unit
@pytest.mark.anyio
class TestMalformedJobs:

    @pytest.mark.parametrize(
        "overrides",
        [
            {"video_id": ""},
            {"library_id": None},
            {"metadata": UploadMetadata(filetype="", title="Hello")},
            {"metadata": UploadMetadata(filetype="video/mp4", title="")},
            {"file": None},
        ],
    )
    async def test_rejected_before_network_activity(self, config, sleep, overrides):
        transport = FakeResumableTransport()
        job = make_job(**overrides)

        with pytest.raises(UploadJobError):
            await make_coordinator(config, transport, sleep).upload(job)

        assert transport.calls == []
        job.on_error.assert_not_called()
