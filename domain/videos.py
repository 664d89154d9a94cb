"""Videos resource (including captions and uploads)."""
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from domain.models import (
    Chapter,
    DefaultResponse,
    Heatmap,
    MetaTag,
    Moment,
    PaginatedVideoLibraryResponse,
    ResponseEnvelope,
    UploadJob,
    UploadState,
    VideoLibraryItem,
    VideoStatistics,
)
from domain.params import READ_HEADERS, WRITE_HEADERS, compact, resolve_library_id
from ports.http_client import VideoClient


class Videos:
    """
    Maps video operations onto ``/library/{id}/videos`` endpoints.

    Every method accepts an optional ``library_id``; when omitted the
    client's default library is used.
    """

    def __init__(self, client: VideoClient):
        self.client = client

    def _path(self, library_id: Optional[int], suffix: str = "") -> str:
        library = resolve_library_id(self.client, library_id)
        return f"/library/{library}/videos{suffix}"

    async def get(
        self, video_id: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[VideoLibraryItem]:
        return await self.client.get(
            self._path(library_id, f"/{video_id}"), headers=READ_HEADERS
        )

    async def get_heatmap(
        self, video_id: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[Heatmap]:
        return await self.client.get(
            self._path(library_id, f"/{video_id}/heatmap"), headers=READ_HEADERS
        )

    async def get_statistics(
        self,
        library_id: Optional[int] = None,
        video_guid: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        hourly: Optional[bool] = None,
    ) -> ResponseEnvelope[VideoStatistics]:
        library = resolve_library_id(self.client, library_id)
        data = compact(videoGuid=video_guid, dateFrom=date_from, dateTo=date_to, hourly=hourly)
        return await self.client.get(
            f"/library/{library}/statistics", data=data or None, headers=READ_HEADERS
        )

    async def get_list(
        self,
        library_id: Optional[int] = None,
        page: Optional[int] = None,
        items_per_page: Optional[int] = None,
        search: Optional[str] = None,
        order_by: Optional[str] = None,
        collection: Optional[str] = None,
    ) -> ResponseEnvelope[PaginatedVideoLibraryResponse]:
        data = compact(
            page=page,
            itemsPerPage=items_per_page,
            search=search,
            orderBy=order_by,
            collection=collection,
        )
        return await self.client.get(self._path(library_id), data=data, headers=READ_HEADERS)

    async def create(
        self,
        title: str,
        library_id: Optional[int] = None,
        collection_id: Optional[str] = None,
        thumbnail_time: Optional[int] = None,
    ) -> ResponseEnvelope[VideoLibraryItem]:
        data = compact(title=title, collectionId=collection_id, thumbnailTime=thumbnail_time)
        return await self.client.post(self._path(library_id), data=data, headers=WRITE_HEADERS)

    async def update(
        self,
        video_id: str,
        library_id: Optional[int] = None,
        title: Optional[str] = None,
        collection_id: Optional[str] = None,
        chapters: Optional[List[Chapter]] = None,
        moments: Optional[List[Moment]] = None,
        meta_tags: Optional[List[MetaTag]] = None,
    ) -> ResponseEnvelope[DefaultResponse]:
        data = compact(
            title=title,
            collectionId=collection_id,
            chapters=chapters,
            moments=moments,
            metaTags=meta_tags,
        )
        return await self.client.post(
            self._path(library_id, f"/{video_id}"), data=data, headers=WRITE_HEADERS
        )

    async def reencode(
        self, video_id: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[VideoLibraryItem]:
        return await self.client.post(
            self._path(library_id, f"/{video_id}/reencode"), headers=READ_HEADERS
        )

    async def set_thumbnail(
        self, video_id: str, thumbnail_url: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[DefaultResponse]:
        return await self.client.post(
            self._path(library_id, f"/{video_id}/thumbnail"),
            data={"thumbnailUrl": thumbnail_url},
            headers=READ_HEADERS,
        )

    async def fetch(
        self,
        url: str,
        library_id: Optional[int] = None,
        collection_id: Optional[str] = None,
        thumbnail_time: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        title: Optional[str] = None,
    ) -> ResponseEnvelope[DefaultResponse]:
        """Ask Bunny to download a video from a remote URL."""
        # collectionId and thumbnailTime are query parameters even on POST.
        query = "?" + urlencode({
            "collectionId": collection_id or "",
            "thumbnailTime": "" if thumbnail_time is None else thumbnail_time,
        })
        data = compact(url=url, headers=headers, title=title)
        return await self.client.post(
            self._path(library_id, f"/fetch{query}"), data=data, headers=WRITE_HEADERS
        )

    async def add_caption(
        self,
        video_id: str,
        srclang: str,
        label: str,
        caption_file: str,
        library_id: Optional[int] = None,
    ) -> ResponseEnvelope[DefaultResponse]:
        """
        Add or replace a caption track.

        Args:
            video_id: Video GUID.
            srclang: Caption language code, also the path key.
            label: Display label.
            caption_file: Base64-encoded caption file contents.
            library_id: Library id (defaults to the client's library).
        """
        data: Dict[str, Any] = {
            "srclang": srclang,
            "label": label,
            "captionFile": caption_file,
        }
        return await self.client.post(
            self._path(library_id, f"/{video_id}/captions/{srclang}"),
            data=data,
            headers=WRITE_HEADERS,
        )

    async def delete_caption(
        self, video_id: str, srclang: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[DefaultResponse]:
        return await self.client.delete(
            self._path(library_id, f"/{video_id}/captions/{srclang}"), headers=READ_HEADERS
        )

    async def delete(
        self, video_id: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[DefaultResponse]:
        return await self.client.delete(
            self._path(library_id, f"/{video_id}"), headers=READ_HEADERS
        )

    async def upload(self, job: UploadJob) -> UploadState:
        """Upload a file for an existing video (see ``create``)."""
        library = resolve_library_id(self.client, job.library_id)
        return await self.client.upload(replace(job, library_id=library))
