"""Pydantic models for CMS references, chain records and normalized artworks."""

from omentejovem.models.artwork import (
    AvailablePurchase,
    MakeOffer,
    NftArt,
    NftChain,
    NftOwner,
    NftTransaction,
)
from omentejovem.models.chain import (
    EthereumRecord,
    ObjktEvent,
    ObjktToken,
    OpenSeaEvent,
    OpenSeaNft,
    OpenSeaOwner,
    TezosRecord,
)
from omentejovem.models.reference import (
    ArtworkReference,
    ObjktRef,
    parse_artwork_reference,
    parse_opensea_ref,
)

__all__ = [
    "ArtworkReference",
    "AvailablePurchase",
    "EthereumRecord",
    "MakeOffer",
    "NftArt",
    "NftChain",
    "NftOwner",
    "NftTransaction",
    "ObjktEvent",
    "ObjktRef",
    "ObjktToken",
    "OpenSeaEvent",
    "OpenSeaNft",
    "OpenSeaOwner",
    "TezosRecord",
    "parse_artwork_reference",
    "parse_opensea_ref",
]
