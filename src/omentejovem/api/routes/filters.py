"""Filter tree endpoint."""

from typing import Any

from fastapi import APIRouter, Depends

from omentejovem.api.dependencies import get_filter_tree
from omentejovem.services.filters.tree import MenuNode, serialize_tree

router = APIRouter(prefix="/api/filters", tags=["filters"])


@router.get("")
async def get_filters(tree: MenuNode = Depends(get_filter_tree)) -> dict[str, Any]:
    """Labels and structure of the filter tree served with every gallery."""
    return serialize_tree(tree)
