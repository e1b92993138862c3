"""Stable ordering of artworks by one field."""

from collections.abc import Sequence
from typing import Any

from omentejovem.core.dates import parse_timestamp
from omentejovem.models.artwork import NftArt
from omentejovem.services.filters.tree import SortOption

DATE_FIELDS = frozenset({"created_at", "minted_date"})


def order_by(artworks: Sequence[NftArt], option: SortOption) -> list[NftArt]:
    """Return a new list ordered by ``option.key``.

    The sort is stable in both directions. Artworks without a value (or with
    an unparseable date) always go last.
    """
    present: list[tuple[Any, NftArt]] = []
    missing: list[NftArt] = []

    for art in artworks:
        value = getattr(art, option.key, None)
        if option.key in DATE_FIELDS:
            value = parse_timestamp(value)
        if value is None:
            missing.append(art)
        else:
            present.append((value, art))

    # list.sort keeps equal keys in input order, including with reverse=True
    present.sort(key=lambda item: item[0], reverse=option.order == "desc")
    return [art for _, art in present] + missing
