"""FastAPI dependencies reading the objects built in the app lifespan."""

from fastapi import Request

from omentejovem.core.config import Settings
from omentejovem.services.aggregation.gallery import GalleryService
from omentejovem.services.filters.tree import MenuNode


def get_settings(request: Request) -> Settings:
    """Settings loaded at startup."""
    return request.app.state.settings


def get_gallery_service(request: Request) -> GalleryService:
    """Get the GalleryService from app state.

    Example:
        >>> @router.get("/endpoint")
        >>> async def endpoint(gallery: GalleryService = Depends(get_gallery_service)):
        ...     return await gallery.request_gallery("portfolio")
    """
    return request.app.state.gallery_service


def get_filter_tree(request: Request) -> MenuNode:
    return request.app.state.filter_tree
