"""
Acceptance tests: BunnyStreamClient against a fake Bunny API.

The REST API is served by httpx.MockTransport and uploads go through
FakeResumableTransport, so the full facade -> dispatcher -> normalizer and
facade -> coordinator -> transport paths run without network access.
"""
import io
import json

import httpx
import pytest

from app.client import BunnyStreamClient
from app.config import Config
from domain.models import UploadJob, UploadMetadata, UploadState
from tests.acceptance.fake_resumable_transport import FakeResumableTransport


class FakeBunnyApi:
    """Minimal in-memory Bunny Stream API."""

    def __init__(self):
        self.requests = []
        self.collections = {}
        self.videos = {}
        self.down = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        if request.headers.get("AccessKey") != "secret":
            return httpx.Response(401, json={"Message": "Authorization has been denied for this request."})

        parts = request.url.path.strip("/").split("/")
        body = json.loads(request.content) if request.content else {}

        if parts[2] == "collections":
            return self._collections(request.method, parts, body)
        return self._videos(request.method, parts, body)

    def _collections(self, method, parts, body):
        if method == "POST" and len(parts) == 3:
            guid = f"col-{len(self.collections) + 1}"
            self.collections[guid] = {"guid": guid, "name": body.get("name", ""), "videoCount": 0}
            return httpx.Response(200, json=self.collections[guid])
        if method == "GET" and len(parts) == 3:
            items = list(self.collections.values())
            return httpx.Response(200, json={
                "totalItems": len(items), "currentPage": 1, "itemsPerPage": 100, "items": items,
            })
        return httpx.Response(404, json={"Message": "Collection not found"})

    def _videos(self, method, parts, body):
        if method == "POST" and len(parts) == 3:
            if not body.get("title"):
                return httpx.Response(400, json={
                    "type": "https://tools.ietf.org/html/rfc7231#section-6.5.1",
                    "title": "One or more validation errors occurred.",
                    "status": 400,
                    "traceId": "00-1-01",
                    "errors": {"Title": ["The Title field is required."]},
                })
            guid = f"vid-{len(self.videos) + 1}"
            self.videos[guid] = {"guid": guid, "title": body["title"]}
            return httpx.Response(200, json=self.videos[guid])
        guid = parts[3] if len(parts) > 3 else None
        if guid not in self.videos:
            return httpx.Response(404, json={"Message": "Video not found"})
        if method == "GET":
            return httpx.Response(200, json=self.videos[guid])
        if method == "DELETE":
            del self.videos[guid]
            return httpx.Response(200, json={"success": True, "message": "OK", "statusCode": 200})
        return httpx.Response(405)


@pytest.fixture
def api():
    return FakeBunnyApi()


@pytest.fixture
def uploads():
    return FakeResumableTransport(chunk_size=3)


@pytest.fixture
def client(api, uploads):
    return BunnyStreamClient(
        config=Config(
            base_url="https://video.example.com",
            access_key="secret",
            library_id=42,
            tus_endpoint=None,
            upload_storage=None,
        ),
        upload_transport=uploads,
        http_transport=httpx.MockTransport(api),
    )


@pytest.mark.acceptance
@pytest.mark.anyio
class TestStreamWorkflow:

    async def test_create_and_list_collections(self, api, client):
        created = await client.collections.create(name="Season 1")
        listed = await client.collections.get_list(order_by="date")

        assert created.ok and created.data["name"] == "Season 1"
        assert listed.to_dict()["data"]["totalItems"] == 1
        assert api.requests[0].url.path == "/library/42/collections"
        assert api.requests[0].headers["content-type"] == "application/*+json"
        assert api.requests[1].url.params["orderBy"] == "date"

    async def test_video_lifecycle(self, client):
        created = await client.videos.create(title="Episode 1")
        guid = created.data["guid"]

        fetched = await client.videos.get(guid)
        deleted = await client.videos.delete(guid)
        missing = await client.videos.get(guid)

        assert fetched.data["title"] == "Episode 1"
        assert deleted.status_code == 200
        assert missing.status == "failure"
        assert missing.status_code == 404
        assert missing.data.error == "Video not found"

    async def test_validation_error_envelope(self, client):
        result = await client.videos.create(title="")

        assert result.status_code == 400
        assert result.data.error == "One or more validation errors occurred."
        assert result.data.errors == {"Title": ["The Title field is required."]}

    async def test_wrong_access_key_is_failure(self, api, uploads):
        client = BunnyStreamClient(
            access_key="wrong",
            base_url="https://video.example.com",
            library_id=42,
            upload_transport=uploads,
            http_transport=httpx.MockTransport(api),
        )

        result = await client.videos.get_list()

        assert result.status_code == 401
        assert result.data.error.startswith("Authorization has been denied")

    async def test_network_failure_is_failure(self, api, client):
        api.down = True

        result = await client.videos.get_list()

        assert result.status == "failure"
        assert result.status_code == 500
        assert result.to_dict()["data"]["origin"] == "local"

    async def test_create_then_upload(self, client, uploads):
        created = await client.videos.create(title="Episode 1")
        progress = []
        done = []

        state = await client.videos.upload(
            UploadJob(
                file=io.BytesIO(b"0123456789"),
                video_id=created.data["guid"],
                metadata=UploadMetadata(filetype="video/mp4", title="Episode 1"),
                on_progress=lambda sent, total: progress.append((sent, total)),
                on_success=lambda: done.append(True),
            )
        )

        assert state == UploadState.SUCCEEDED
        assert uploads.headers["LibraryId"] == "42"
        assert uploads.headers["VideoId"] == created.data["guid"]
        assert progress[-1] == (10, 10)
        assert done == [True]
