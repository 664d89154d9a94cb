"""Collections resource."""
from typing import Optional

from domain.models import Collection, CollectionList, DefaultResponse, ResponseEnvelope
from domain.params import READ_HEADERS, WRITE_HEADERS, compact, resolve_library_id
from ports.http_client import CollectionClient


class Collections:
    """Maps collection operations onto ``/library/{id}/collections`` endpoints."""

    def __init__(self, client: CollectionClient):
        self.client = client

    async def get_list(
        self,
        library_id: Optional[int] = None,
        page: Optional[int] = None,
        items_per_page: Optional[int] = None,
        search: Optional[str] = None,
        order_by: Optional[str] = None,
        include_thumbnails: Optional[bool] = None,
    ) -> ResponseEnvelope[CollectionList]:
        library = resolve_library_id(self.client, library_id)
        data = compact(
            page=page,
            itemsPerPage=items_per_page,
            search=search,
            orderBy=order_by,
            includeThumbnails=include_thumbnails,
        )
        return await self.client.get(
            f"/library/{library}/collections", data=data, headers=READ_HEADERS
        )

    async def get(
        self, collection_id: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[Collection]:
        library = resolve_library_id(self.client, library_id)
        return await self.client.get(
            f"/library/{library}/collections/{collection_id}", headers=READ_HEADERS
        )

    async def create(
        self, library_id: Optional[int] = None, name: Optional[str] = None
    ) -> ResponseEnvelope[Collection]:
        library = resolve_library_id(self.client, library_id)
        data = compact(name=name) or None
        return await self.client.post(
            f"/library/{library}/collections", data=data, headers=WRITE_HEADERS
        )

    async def update(
        self, collection_id: str, name: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[DefaultResponse]:
        library = resolve_library_id(self.client, library_id)
        return await self.client.post(
            f"/library/{library}/collections/{collection_id}",
            data={"name": name},
            headers=WRITE_HEADERS,
        )

    async def delete(
        self, collection_id: str, library_id: Optional[int] = None
    ) -> ResponseEnvelope[DefaultResponse]:
        library = resolve_library_id(self.client, library_id)
        return await self.client.delete(
            f"/library/{library}/collections/{collection_id}", headers=READ_HEADERS
        )
