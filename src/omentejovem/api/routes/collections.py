"""Curated collection endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from omentejovem.api.dependencies import get_filter_tree, get_gallery_service
from omentejovem.api.routes.galleries import GalleryDTO, build_gallery_dto
from omentejovem.services.aggregation.gallery import GalleryService
from omentejovem.services.exceptions import FilterNotFoundError, GalleryError
from omentejovem.services.filters.engine import split_path
from omentejovem.services.filters.tree import MenuNode

router = APIRouter(prefix="/api/collections", tags=["collections"])


@router.get("/{slug}", response_model=GalleryDTO)
async def get_collection(
    slug: str,
    path: str | None = Query(None, description="Filter path, e.g. minted/xtz"),
    gallery_service: GalleryService = Depends(get_gallery_service),
    tree: MenuNode = Depends(get_filter_tree),
) -> GalleryDTO:
    """Aggregate every NFT of a collection. Unknown slugs return an empty gallery."""
    try:
        gallery = await gallery_service.request_collection(slug)
    except GalleryError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    try:
        return build_gallery_dto(gallery, tree, split_path(path))
    except FilterNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
