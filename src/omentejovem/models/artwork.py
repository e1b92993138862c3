"""NftArt - the chain-agnostic artwork shown by the galleries."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

NftChain = Literal["ethereum", "tezos", "unknown"]


class AvailablePurchase(BaseModel):
    """Purchase call-to-action configured in the CMS."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    active: bool = False
    status: bool = False
    text: str = ""
    text_available: str = ""
    url: str = ""


class MakeOffer(BaseModel):
    """Make-an-offer button configured in the CMS."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    active: bool = False
    button_text: str = ""


class NftOwner(BaseModel):
    """Single holder of an artwork."""

    model_config = ConfigDict(frozen=True)

    address: str
    url: str


class NftTransaction(BaseModel):
    """Transfer event normalized across chains."""

    model_config = ConfigDict(frozen=True)

    transaction: str | None = None
    from_address: str | None = None
    to_address: str | None = None
    event_timestamp: int = Field(..., description="Epoch milliseconds")


class NftArt(BaseModel):
    """Normalized artwork consumed by the render layer and the filter engine.

    ``id`` + ``address`` identify an artwork within one aggregation run and
    ``nft_chain`` records which fetch path produced it (``unknown`` for plain,
    non-NFT CMS artworks).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    address: str | None = None
    nft_chain: NftChain

    name: str = ""
    url: str | None = None
    nft_url: str | None = None
    description: str = ""

    minted_date: str | None = None
    created_at: str | None = None
    transactions: list[NftTransaction] = Field(default_factory=list)

    available_purchase: AvailablePurchase | None = None
    contracts: list[dict[str, Any]] | None = None
    make_offer: MakeOffer | None = None
    video_process: str | None = None
    etherscan: bool = False
    owner: NftOwner | None = None

    @property
    def identity(self) -> tuple[str, str | None]:
        """(id, address) pair unique within one aggregation run."""
        return self.id, self.address
