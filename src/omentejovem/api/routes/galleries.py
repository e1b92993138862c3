"""Gallery API endpoints.

- GET /api/galleries/{section} - Aggregated artworks of a gallery section, optionally
  narrowed through the filter tree with ``path`` (e.g. ``minted/eth/year/2023``)

Upstream failures are reported with one generic message; the cause is only logged.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from omentejovem.api.dependencies import get_filter_tree, get_gallery_service
from omentejovem.models.artwork import NftArt
from omentejovem.services.aggregation.gallery import GalleryResponse, GalleryService
from omentejovem.services.exceptions import (
    FilterNotFoundError,
    GalleryError,
    InvalidSectionError,
)
from omentejovem.services.filters.engine import ChainedFilterEngine, split_path
from omentejovem.services.filters.tree import MenuNode, serialize_tree

logger = structlog.get_logger()
router = APIRouter(prefix="/api/galleries", tags=["galleries"])


class GalleryDTO(BaseModel):
    """Aggregated gallery page."""

    email: str = Field(..., description="Contact email shown next to the gallery")
    images: list[NftArt] = Field(..., description="Artworks, newest first unless re-sorted")
    total_pages: int = Field(..., description="Page count reported by the CMS")
    path: list[str] = Field(
        default_factory=list,
        description="Filter labels applied, in selection order",
    )
    options: list[str] = Field(
        default_factory=list,
        description="Labels selectable after the applied path",
    )
    filters: dict[str, Any] = Field(..., description="Full filter tree")


def build_gallery_dto(gallery: GalleryResponse, tree: MenuNode, labels: list[str]) -> GalleryDTO:
    """Run the gallery's images through the filter path and build the response.

    Raises:
        FilterNotFoundError: If a label is not offered at its point in the path
    """
    engine = ChainedFilterEngine(tree, gallery.images)
    engine.select_path(labels)

    return GalleryDTO(
        email=gallery.email,
        images=list(engine.visible_artworks()),
        total_pages=gallery.total_pages,
        path=labels,
        options=[child.label for child in engine.visible_children() if child.label],
        filters=serialize_tree(tree),
    )


@router.get("/{section}", response_model=GalleryDTO, status_code=status.HTTP_200_OK)
async def get_gallery(
    section: str,
    page: int = Query(1, ge=1, description="1-based CMS page"),
    filters: str = Query("", description="Raw query string forwarded to the CMS"),
    only_arts: bool = Query(False, description="Return plain CMS artworks only"),
    path: str | None = Query(None, description="Filter path, e.g. minted/eth/latest"),
    gallery_service: GalleryService = Depends(get_gallery_service),
    tree: MenuNode = Depends(get_filter_tree),
) -> GalleryDTO:
    """Aggregate one page of a gallery section.

    Returns:
        GalleryDTO with artworks and the filter options at ``path``

    Raises:
        HTTPException: 404 for an unknown section, 400 for an unknown filter label,
            502 when an upstream failed
    """
    try:
        gallery = await gallery_service.request_gallery(
            section,
            page=page,
            filter_params=filters,
            only_arts=only_arts,
        )
    except InvalidSectionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except GalleryError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    try:
        return build_gallery_dto(gallery, tree, split_path(path))
    except FilterNotFoundError as e:
        logger.info("galleries.unknown_filter", section=section, path=path)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
