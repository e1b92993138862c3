"""Chained filter engine.

A session walks the filter tree one selection at a time. Every selection is
recorded on a history stack together with the artworks it left visible, so
"back" is a pop and never re-derives anything from the initial list.

Menu selections push a new level. Leaf selections refine the current level:
picking a second leaf at the same level replaces the first one instead of
stacking on top of it.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from omentejovem.models.artwork import NftArt
from omentejovem.services.exceptions import FilterNotFoundError
from omentejovem.services.filters.sorting import order_by
from omentejovem.services.filters.tree import FilterNode, LeafNode, MenuNode

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FilterHistoryEntry:
    """One step of a filter session: the node chosen and the artworks it left."""

    node: FilterNode
    filtered_images: tuple[NftArt, ...]


def apply_node(node: FilterNode, artworks: Sequence[NftArt]) -> tuple[NftArt, ...]:
    """Apply a node's filter, then its sort, to a snapshot."""
    selected: Sequence[NftArt] = artworks
    if node.filter_apply is not None:
        selected = [art for art in selected if node.filter_apply(art)]
    if node.sort_apply is not None:
        selected = order_by(selected, node.sort_apply)
    return tuple(selected)


class ChainedFilterEngine:
    """History of filter selections over one aggregated artwork list."""

    def __init__(self, root: MenuNode, artworks: Iterable[NftArt]):
        self.root = root
        self._history: list[FilterHistoryEntry] = [
            FilterHistoryEntry(node=root, filtered_images=tuple(artworks))
        ]

    @property
    def history(self) -> tuple[FilterHistoryEntry, ...]:
        return tuple(self._history)

    @property
    def top(self) -> FilterHistoryEntry:
        return self._history[-1]

    def select_filter(self, node: FilterNode | None) -> None:
        """Select ``node``, or go back one step when ``node`` is None.

        Going back at the root and reselecting the current node do nothing.
        """
        if node is None:
            if len(self._history) > 1:
                popped = self._history.pop()
                logger.debug("filters.back", label=popped.node.label, depth=len(self._history))
            return

        if node.label == self.top.node.label:
            return

        if isinstance(node, LeafNode) and isinstance(self.top.node, LeafNode):
            # sibling leaf: refine the level beneath instead of nesting
            replaced = self._history.pop()
            images = apply_node(node, self.top.filtered_images)
            logger.debug("filters.leaf_replaced", label=node.label, replaced=replaced.node.label)
        else:
            images = apply_node(node, self.top.filtered_images)

        self._history.append(FilterHistoryEntry(node=node, filtered_images=images))
        logger.debug(
            "filters.selected",
            label=node.label,
            depth=len(self._history),
            visible=len(images),
        )

    def visible_artworks(self) -> tuple[NftArt, ...]:
        return self.top.filtered_images

    def visible_children(self) -> tuple[FilterNode, ...]:
        """Options of the current menu: the nearest menu entry from the top."""
        for entry in reversed(self._history):
            if isinstance(entry.node, MenuNode):
                return entry.node.children
        return ()

    def select_path(self, labels: Iterable[str]) -> None:
        """Select nodes by label, each looked up among the visible children.

        Raises:
            FilterNotFoundError: If a label is not offered at that point
        """
        for label in labels:
            options = {child.label: child for child in self.visible_children()}
            if label not in options:
                raise FilterNotFoundError(f"Unknown filter: {label}")
            self.select_filter(options[label])


def split_path(path: str | None) -> list[str]:
    """Split a ``/``-separated filter path into labels, dropping empty segments."""
    if not path:
        return []
    return [label.strip() for label in path.split("/") if label.strip()]
