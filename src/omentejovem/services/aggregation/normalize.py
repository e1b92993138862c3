"""Normalizers turning chain records and CMS references into NftArt.

CMS values override chain-native ones where both exist: the featured image
wins over the chain image and a non-empty CMS description wins over the
token description.
"""

import re
from uuid import uuid4

import structlog

from omentejovem.core.dates import from_unix_seconds, parse_cms_date, parse_timestamp, to_iso
from omentejovem.models.artwork import NftArt, NftOwner, NftTransaction
from omentejovem.models.chain import EthereumRecord, TezosRecord
from omentejovem.models.reference import ArtworkReference

logger = structlog.get_logger(__name__)

# A transfer from the null address is the mint
NULL_ADDRESS = re.compile(r"0x0{40}$", re.IGNORECASE)

ETHERSCAN_ADDRESS_URL = "https://etherscan.io/address/{address}"


def _iso(value: str | None) -> str | None:
    parsed = parse_timestamp(value)
    return to_iso(parsed) if parsed else None


def _cms_date(reference: ArtworkReference | None) -> str | None:
    return parse_cms_date(reference.creation_date) if reference else None


def _description(reference: ArtworkReference | None, chain_description: str | None) -> str:
    if reference and reference.description.strip():
        return reference.description
    return chain_description or ""


def ipfs_gateway_url(gateway: str, uri: str | None) -> str | None:
    """Point an IPFS uri at an HTTP gateway using its last path segment."""
    if not uri:
        return None
    basename = uri.rstrip("/").split("/")[-1]
    if not basename:
        return None
    return f"https://{gateway}/ipfs/{basename}"


def find_mint_timestamp(record: EthereumRecord) -> str | None:
    """ISO timestamp of the transfer sent from the null address, if any."""
    for event in record.events:
        if (
            event.from_address
            and NULL_ADDRESS.search(event.from_address)
            and event.event_timestamp is not None
        ):
            return from_unix_seconds(event.event_timestamp)
    return None


def normalize_ethereum(
    record: EthereumRecord, reference: ArtworkReference | None
) -> NftArt | None:
    """Build the NftArt for an OpenSea record.

    Date resolution:
        created_at: mint transfer > chain created_at > CMS creation date > chain updated_at
        minted_date: mint transfer > CMS creation date > chain created_at > chain updated_at

    Returns:
        NftArt, or None when OpenSea returned no NFT
    """
    nft = record.nft
    if nft is None:
        return None

    if reference is None:
        logger.warning(
            "normalize.ethereum_without_reference",
            contract=nft.contract,
            token_id=nft.identifier,
        )

    mint_timestamp = find_mint_timestamp(record)
    cms_date = _cms_date(reference)
    chain_created = _iso(nft.created_at)
    chain_updated = _iso(nft.updated_at)

    owner = None
    if nft.owners is not None and len(nft.owners) == 1 and nft.owners[0].address:
        address = nft.owners[0].address
        owner = NftOwner(address=address, url=ETHERSCAN_ADDRESS_URL.format(address=address))

    transactions = [
        NftTransaction(
            transaction=event.transaction,
            from_address=event.from_address,
            to_address=event.to_address,
            event_timestamp=event.event_timestamp * 1000,
        )
        for event in record.events
        if event.event_timestamp is not None
    ]

    return NftArt(
        id=nft.identifier,
        address=nft.contract,
        nft_chain="ethereum",
        name=nft.name or (reference.title if reference else ""),
        url=(reference.thumbnail_url if reference else None) or nft.image_url,
        nft_url=nft.image_url,
        description=_description(reference, nft.description),
        minted_date=mint_timestamp or cms_date or chain_created or chain_updated,
        created_at=mint_timestamp or chain_created or cms_date or chain_updated,
        transactions=transactions,
        available_purchase=reference.available_purchase if reference else None,
        contracts=reference.contracts if reference else None,
        make_offer=reference.make_offer if reference else None,
        video_process=reference.video_process if reference else None,
        etherscan=reference.etherscan if reference else False,
        owner=owner,
    )


def normalize_tezos(
    record: TezosRecord, reference: ArtworkReference | None, ipfs_gateway: str
) -> NftArt | None:
    """Build the NftArt for an Objkt record.

    Tezos artworks never carry an offer button or an Etherscan link.

    Returns:
        NftArt, or None when Objkt returned no token
    """
    token = record.token
    if token is None:
        return None

    minted_date = _iso(token.timestamp)

    transactions = []
    for event in record.events:
        event_time = parse_timestamp(event.timestamp)
        if event_time is None:
            continue
        transactions.append(
            NftTransaction(
                transaction=event.ophash,
                from_address=event.creator_address,
                to_address=event.recipient_address,
                event_timestamp=int(event_time.timestamp() * 1000),
            )
        )

    return NftArt(
        id=token.token_id,
        address=token.fa_contract,
        nft_chain="tezos",
        name=token.name or (reference.title if reference else ""),
        url=(reference.thumbnail_url if reference else None)
        or ipfs_gateway_url(ipfs_gateway, token.display_uri),
        nft_url=ipfs_gateway_url(ipfs_gateway, token.artifact_uri),
        description=_description(reference, token.description),
        minted_date=minted_date,
        created_at=minted_date or _cms_date(reference),
        transactions=transactions,
        available_purchase=reference.available_purchase if reference else None,
        contracts=reference.contracts if reference else None,
        make_offer=None,
        video_process=reference.video_process if reference else None,
        etherscan=False,
        owner=None,
    )


def normalize_plain_art(reference: ArtworkReference) -> NftArt:
    """Build the NftArt for a CMS-only artwork (no chain data)."""
    created_at = _cms_date(reference)

    return NftArt(
        id=str(reference.wp_id) if reference.wp_id is not None else uuid4().hex,
        address=None,
        nft_chain="unknown",
        name=reference.title,
        url=reference.thumbnail_url,
        nft_url=reference.thumbnail_url,
        description=reference.description,
        minted_date=created_at,
        created_at=created_at,
        available_purchase=reference.available_purchase,
        contracts=reference.contracts,
        make_offer=reference.make_offer,
        video_process=reference.video_process,
        etherscan=reference.etherscan,
    )
