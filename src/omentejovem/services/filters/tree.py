"""Static filter tree offered to gallery visitors.

The tree is made of two node kinds:
- MenuNode: opens a new menu level with its own children
- LeafNode: refines the current level in place; sibling leaves replace each other

Nodes are frozen and children are tuples, so a tree built once can be shared
by every filter session.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from omentejovem.core.dates import parse_timestamp
from omentejovem.models.artwork import NftArt

Predicate = Callable[[NftArt], bool]


@dataclass(frozen=True)
class SortOption:
    """Reorder by one NftArt field."""

    key: str
    order: Literal["asc", "desc"] = "desc"


@dataclass(frozen=True)
class LeafNode:
    """Filter/sort applied in place at the current menu level."""

    label: str
    filter_apply: Predicate | None = None
    sort_apply: SortOption | None = None


@dataclass(frozen=True)
class MenuNode:
    """Filter/sort that opens a nested menu of further options."""

    label: str | None = None
    filter_apply: Predicate | None = None
    sort_apply: SortOption | None = None
    children: tuple["FilterNode", ...] = field(default_factory=tuple)


FilterNode = MenuNode | LeafNode

ETH_CONTRACTS = ("manifold", "transient labs", "superrare", "opensea", "rarible")
XTZ_CONTRACTS = ("hen", "objkt", "objkt.one")


def _contract_key(label: str) -> str:
    # CMS field names use underscores ("transient_labs", "objkt_one")
    return label.replace(" ", "_").replace(".", "_")


def _flag_enabled(value: Any) -> bool:
    if isinstance(value, dict):
        return bool(value.get("status"))
    return bool(value)


def is_minted(art: NftArt) -> bool:
    return art.nft_chain != "unknown"


def on_chain(chain: str) -> Predicate:
    def predicate(art: NftArt) -> bool:
        return art.nft_chain == chain

    return predicate


def is_available(art: NftArt) -> bool:
    return art.available_purchase is not None and art.available_purchase.active


def has_contract(chain_key: str, label: str) -> Predicate:
    """Match artworks whose CMS ``contracts`` enable the named marketplace.

    Flags are read from ``contracts[i][chain_key][name]`` or, for ungrouped
    fields, ``contracts[i][name]``. A flag is either a boolean or an object
    with a ``status`` boolean.
    """
    key = _contract_key(label)

    def predicate(art: NftArt) -> bool:
        for contract in art.contracts or []:
            grouped = contract.get(chain_key)
            flags = grouped if isinstance(grouped, dict) else contract
            if _flag_enabled(flags.get(key)):
                return True
        return False

    return predicate


def created_in(year: int) -> Predicate:
    def predicate(art: NftArt) -> bool:
        created = parse_timestamp(art.created_at)
        return created is not None and created.year == year

    return predicate


def _year_menu(years: list[int]) -> MenuNode:
    return MenuNode(
        label="year",
        children=tuple(LeafNode(label=str(year), filter_apply=created_in(year)) for year in years),
    )


def _contract_menu(chain_key: str, labels: tuple[str, ...]) -> MenuNode:
    return MenuNode(
        label="contract",
        children=tuple(
            LeafNode(label=label, filter_apply=has_contract(chain_key, label)) for label in labels
        ),
    )


LATEST = LeafNode(label="latest", sort_apply=SortOption(key="created_at", order="desc"))
AVAILABLE = LeafNode(label="available", filter_apply=is_available)


def build_filter_tree(current_year: int | None = None, first_year: int = 2020) -> MenuNode:
    """Build the gallery filter tree.

    Args:
        current_year: Newest year offered (defaults to the current UTC year)
        first_year: Oldest year offered

    Returns:
        Unlabelled root MenuNode
    """
    if current_year is None:
        current_year = datetime.now(UTC).year
    years = list(range(current_year, first_year - 1, -1))

    eth = MenuNode(
        label="eth",
        filter_apply=on_chain("ethereum"),
        children=(LATEST, AVAILABLE, _contract_menu("eth", ETH_CONTRACTS), _year_menu(years)),
    )
    xtz = MenuNode(
        label="xtz",
        filter_apply=on_chain("tezos"),
        children=(LATEST, AVAILABLE, _contract_menu("xtz", XTZ_CONTRACTS), _year_menu(years)),
    )

    return MenuNode(
        children=(
            MenuNode(label="minted", filter_apply=is_minted, children=(eth, xtz)),
            MenuNode(
                label="non minted",
                filter_apply=lambda art: not is_minted(art),
                children=(LATEST, AVAILABLE, _year_menu(years)),
            ),
        )
    )


def serialize_tree(node: FilterNode) -> dict[str, Any]:
    """JSON-friendly view of a tree (labels and structure only)."""
    kind = "menu" if isinstance(node, MenuNode) else "leaf"
    data: dict[str, Any] = {"label": node.label, "kind": kind}
    if isinstance(node, MenuNode):
        data["children"] = [serialize_tree(child) for child in node.children]
    return data
