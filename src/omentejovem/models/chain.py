"""Chain records - raw token data from the Ethereum and Tezos indexers.

The models mirror the subset of the OpenSea v2 and Objkt v3 payloads the
normalizers need; unknown fields are ignored.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OpenSeaOwner(BaseModel):
    """Holder entry of an OpenSea NFT."""

    model_config = ConfigDict(extra="ignore")

    address: str | None = None
    quantity: int = 1


class OpenSeaNft(BaseModel):
    """NFT metadata from ``GET /chain/ethereum/contract/{address}/nfts/{identifier}``."""

    model_config = ConfigDict(extra="ignore")

    identifier: str
    contract: str
    name: str | None = None
    description: str | None = None
    image_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    owners: list[OpenSeaOwner] | None = None

    @field_validator("identifier", mode="before")
    @classmethod
    def identifier_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class OpenSeaEvent(BaseModel):
    """Asset event from ``GET /events/chain/ethereum/contract/{address}/nfts/{identifier}``."""

    model_config = ConfigDict(extra="ignore")

    event_type: str = "transfer"
    from_address: str | None = None
    to_address: str | None = None
    event_timestamp: int | None = Field(default=None, description="Unix epoch seconds")
    transaction: str | None = None


class EthereumRecord(BaseModel):
    """Everything fetched for one Ethereum artwork."""

    nft: OpenSeaNft | None
    events: list[OpenSeaEvent] = Field(default_factory=list)


class ObjktToken(BaseModel):
    """Token row from the Objkt ``token`` query."""

    model_config = ConfigDict(extra="ignore")

    pk: int
    token_id: str
    fa_contract: str
    name: str | None = None
    description: str | None = None
    display_uri: str | None = None
    artifact_uri: str | None = None
    mime: str | None = None
    supply: int | None = None
    timestamp: str | None = None


class ObjktEvent(BaseModel):
    """Transfer row from the Objkt ``event`` query."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    timestamp: str
    ophash: str | None = None
    creator_address: str | None = None
    recipient_address: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ObjktEvent":
        """Flatten the nested ``creator``/``recipient`` holder objects."""
        creator = payload.get("creator") or {}
        recipient = payload.get("recipient") or {}
        return cls.model_validate(
            {
                **payload,
                "creator_address": creator.get("address"),
                "recipient_address": recipient.get("address"),
            }
        )


class TezosRecord(BaseModel):
    """Everything fetched for one Tezos artwork."""

    token: ObjktToken | None
    events: list[ObjktEvent] = Field(default_factory=list)
    offers: list[dict[str, Any]] = Field(default_factory=list)
