"""ArtworkReference - a CMS record pointing at an on-chain token.

WordPress returns artworks as loosely typed ACF JSON. ``parse_artwork_reference``
is the only place that JSON is read; everything downstream works with the
validated model.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from omentejovem.models.artwork import AvailablePurchase, MakeOffer
from omentejovem.services.exceptions import ReferenceParseError


def _empty_to_none(value: Any) -> Any:
    # ACF serializes unset fields as false (or "" / [])
    if value is False or value == "" or value == [] or value == {}:
        return None
    return value


def _path_segments(path: str) -> list[str]:
    return [segment for segment in path.rstrip("/").split("/") if segment]


def parse_opensea_ref(ref: str) -> tuple[str, str]:
    """Split an OpenSea reference into (contract_address, token_id).

    The reference is a slash-delimited path ending in
    ``{contract}/{token_id}`` (usually a full opensea.io asset URL). A
    ``?query`` or ``#fragment`` suffix is dropped. The short form
    ``{token_id}/{contract}`` is recognised by the ``0x`` prefix of the
    contract address.

    Raises:
        ValueError: If the reference has fewer than two path segments
    """
    text = ref.strip().split("#", 1)[0]
    segments = _path_segments(text.split("?", 1)[0])
    if len(segments) < 2:
        # short form with a query on the token id ("5?x=1/0xABC")
        segments = _path_segments(text)
    if len(segments) < 2:
        raise ValueError(f"OpenSea reference must end in contract/token_id: {ref!r}")

    contract, token_id = segments[-2], segments[-1]
    if token_id.lower().startswith("0x") and not contract.lower().startswith("0x"):
        contract, token_id = token_id, contract

    token_id = token_id.split("?")[0]
    contract = contract.split("?")[0]
    if not token_id or not contract:
        raise ValueError(f"OpenSea reference must end in contract/token_id: {ref!r}")

    return contract, token_id


class ObjktRef(BaseModel):
    """Tezos token id and FA2 contract address."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = ""
    token: str = ""

    @field_validator("id", "token", mode="before")
    @classmethod
    def coerce_str(cls, v: Any) -> str:
        if v is None or v is False:
            return ""
        return str(v).strip()

    @property
    def is_complete(self) -> bool:
        return bool(self.id and self.token)


class ArtworkReference(BaseModel):
    """CMS artwork with optional links to an Ethereum or Tezos token."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    wp_id: int | None = None
    title: str = ""
    opensea_ref: str | None = Field(default=None, alias="opensea")
    objkt_ref: ObjktRef | None = Field(default=None, alias="objkt")

    description: str = ""
    creation_date: str | None = None
    available_purchase: AvailablePurchase | None = None
    contracts: list[dict[str, Any]] | None = None
    make_offer: MakeOffer | None = None
    video_process: str | None = None
    etherscan: bool = False
    thumbnail_url: str | None = None

    @field_validator(
        "opensea_ref",
        "objkt_ref",
        "creation_date",
        "available_purchase",
        "make_offer",
        "video_process",
        "thumbnail_url",
        mode="before",
    )
    @classmethod
    def drop_empty(cls, v: Any) -> Any:
        return _empty_to_none(v)

    @field_validator("description", "title", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        if v is None or v is False:
            return ""
        if not isinstance(v, str):
            raise ValueError(f"expected text, got {type(v).__name__}")
        return v

    @field_validator("etherscan", mode="before")
    @classmethod
    def bool_or_false(cls, v: Any) -> Any:
        return False if v in (None, "") else v

    @field_validator("contracts", mode="before")
    @classmethod
    def contracts_as_list(cls, v: Any) -> Any:
        v = _empty_to_none(v)
        # ACF groups come back as a single object, repeaters as a list
        if isinstance(v, Mapping):
            return [dict(v)]
        return v

    @field_validator("opensea_ref")
    @classmethod
    def validate_opensea_ref(cls, v: str | None) -> str | None:
        if v is not None:
            parse_opensea_ref(v)
        return v

    @property
    def opensea_identity(self) -> tuple[str, str] | None:
        """(contract_address, token_id) for the Ethereum lookup, if any."""
        if not self.opensea_ref:
            return None
        return parse_opensea_ref(self.opensea_ref)

    @property
    def objkt_identity(self) -> tuple[str, str] | None:
        """(token_id, fa2_contract) for the Tezos lookup, if any."""
        if self.objkt_ref is None or not self.objkt_ref.is_complete:
            return None
        return self.objkt_ref.id, self.objkt_ref.token


def _featured_media_url(raw: Mapping[str, Any]) -> str | None:
    embedded = raw.get("_embedded")
    if not isinstance(embedded, Mapping):
        return None
    media = embedded.get("wp:featuredmedia")
    if not isinstance(media, list) or not media:
        return None
    first = media[0]
    if not isinstance(first, Mapping):
        return None
    return first.get("source_url") or None


def parse_artwork_reference(raw: Any) -> ArtworkReference:
    """Validate a WordPress ``nft``/``art`` post into an ArtworkReference.

    Args:
        raw: Post JSON as returned by the WordPress REST API (``acf``,
            ``title.rendered``, ``_embedded.wp:featuredmedia``, ``id``)

    Returns:
        Validated ArtworkReference

    Raises:
        ReferenceParseError: If the post does not have the expected shape
    """
    if not isinstance(raw, Mapping):
        raise ReferenceParseError(f"CMS artwork must be an object, got {type(raw).__name__}")

    acf = raw.get("acf")
    if acf in (None, False, []):
        acf = {}
    if not isinstance(acf, Mapping):
        raise ReferenceParseError(f"CMS artwork acf must be an object, got {type(acf).__name__}")

    title = raw.get("title")
    if isinstance(title, Mapping):
        title = title.get("rendered", "")

    data = {
        **acf,
        "wp_id": raw.get("id"),
        "title": title or "",
        "thumbnail_url": _featured_media_url(raw),
    }

    try:
        return ArtworkReference.model_validate(data)
    except ValidationError as e:
        raise ReferenceParseError(
            f"Invalid CMS artwork {raw.get('id', '<no id>')}: {e.error_count()} field error(s)"
        ) from e
