"""Artwork aggregation: fan out chain lookups and merge them with CMS data.

This module provides the ArtworkAggregator which:
1. Splits CMS references into Ethereum (OpenSea) and Tezos (Objkt) work lists
2. Keys each lookup by its token identity so results merge back with CMS overrides
3. Fetches every token concurrently, bounded by a semaphore and a per-fetch timeout
4. Normalizes the records and returns them newest-first
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Protocol, TypeVar

import structlog

from omentejovem.core.config import Settings
from omentejovem.core.dates import sort_key
from omentejovem.models.artwork import NftArt
from omentejovem.models.chain import (
    EthereumRecord,
    ObjktEvent,
    ObjktToken,
    OpenSeaEvent,
    OpenSeaNft,
    TezosRecord,
)
from omentejovem.models.reference import ArtworkReference
from omentejovem.services.aggregation.normalize import (
    normalize_ethereum,
    normalize_plain_art,
    normalize_tezos,
)
from omentejovem.services.exceptions import (
    AggregationError,
    FetchTimeoutError,
    ServiceError,
    TransientError,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class EthereumSource(Protocol):
    """What the aggregator needs from an Ethereum indexer (OpenSeaClient)."""

    async def get_nft_metadata(self, contract: str, token_id: str) -> OpenSeaNft | None: ...

    async def get_nft_transfer_events(
        self, contract: str, token_id: str, limit: int = 4
    ) -> list[OpenSeaEvent]: ...


class TezosSource(Protocol):
    """What the aggregator needs from a Tezos indexer (ObjktClient)."""

    async def get_token(
        self, token_id: str, fa_contract: str
    ) -> tuple[ObjktToken | None, list[dict[str, Any]]]: ...

    async def get_transfers(
        self,
        fa_contract: str,
        token_pk: int,
        limit: int = 2,
        offset: int = 0,
        order_by: list[dict[str, str]] | None = None,
    ) -> list[ObjktEvent]: ...


def ethereum_key(contract: str, token_id: str) -> str:
    """Reconciliation key of an Ethereum artwork (contracts compare case-insensitively)."""
    return f"{contract.lower()}:{token_id}"


def tezos_key(token_id: str, fa_contract: str) -> str:
    """Reconciliation key of a Tezos artwork."""
    return f"{token_id}:{fa_contract}"


@dataclass
class AggregationPlan:
    """Work lists and the reconciliation map built from CMS references."""

    ethereum: dict[str, tuple[str, str]] = field(default_factory=dict)
    tezos: dict[str, tuple[str, str]] = field(default_factory=dict)
    references: dict[str, ArtworkReference] = field(default_factory=dict)


@dataclass
class AggregationResult:
    """Normalized artworks, newest first, plus CMS pagination."""

    images: list[NftArt]
    total_pages: int = 0


def plan_aggregation(references: Iterable[ArtworkReference]) -> AggregationPlan:
    """Partition references by chain and build the reconciliation map.

    A reference may point at both chains; each populated identity becomes one
    lookup. Repeated identities are fetched once.
    """
    plan = AggregationPlan()

    for reference in references:
        opensea = reference.opensea_identity
        if opensea is not None:
            contract, token_id = opensea
            key = ethereum_key(contract, token_id)
            if key in plan.ethereum:
                logger.warning("aggregation.duplicate_reference", chain="ethereum", key=key)
            else:
                plan.ethereum[key] = (contract, token_id)
                plan.references[key] = reference

        objkt = reference.objkt_identity
        if objkt is not None:
            token_id, fa_contract = objkt
            key = tezos_key(token_id, fa_contract)
            if key in plan.tezos:
                logger.warning("aggregation.duplicate_reference", chain="tezos", key=key)
            else:
                plan.tezos[key] = (token_id, fa_contract)
                plan.references[key] = reference

    return plan


class ArtworkAggregator:
    """Turns CMS artwork references into a sorted list of NftArt."""

    def __init__(
        self,
        ethereum: EthereumSource,
        tezos: TezosSource,
        ipfs_gateway: str = "cloudflare-ipfs.com",
        max_concurrency: int = 8,
        fetch_timeout: float = 15.0,
        retries: int = 0,
        retry_delay: float = 1.0,
        opensea_events_limit: int = 4,
        objkt_events_limit: int = 2,
    ):
        """Initialize aggregator.

        Args:
            ethereum: Ethereum source (OpenSeaClient)
            tezos: Tezos source (ObjktClient)
            ipfs_gateway: Gateway host used for Tezos media URLs
            max_concurrency: Maximum number of artworks fetched at once
            fetch_timeout: Seconds allowed for one artwork's lookups
            retries: Extra attempts for transient failures (0 = fail on first error)
            retry_delay: Seconds between attempts
            opensea_events_limit: Transfer events requested per Ethereum token
            objkt_events_limit: Transfer events requested per Tezos token
        """
        self.ethereum = ethereum
        self.tezos = tezos
        self.ipfs_gateway = ipfs_gateway
        self.max_concurrency = max_concurrency
        self.fetch_timeout = fetch_timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.opensea_events_limit = opensea_events_limit
        self.objkt_events_limit = objkt_events_limit

    @classmethod
    def from_settings(
        cls, settings: Settings, ethereum: EthereumSource, tezos: TezosSource
    ) -> "ArtworkAggregator":
        return cls(
            ethereum=ethereum,
            tezos=tezos,
            ipfs_gateway=settings.ipfs_gateway,
            max_concurrency=settings.fetch_concurrency,
            fetch_timeout=settings.fetch_timeout_seconds,
            retries=settings.fetch_retries,
            retry_delay=settings.fetch_retry_delay_seconds,
            opensea_events_limit=settings.opensea_events_limit,
            objkt_events_limit=settings.objkt_events_limit,
        )

    async def fetch_ethereum(self, contract: str, token_id: str) -> EthereumRecord:
        """Fetch metadata, then transfer events, for one Ethereum token."""
        nft = await self.ethereum.get_nft_metadata(contract, token_id)
        if nft is None:
            return EthereumRecord(nft=None)

        events = await self.ethereum.get_nft_transfer_events(
            contract, token_id, limit=self.opensea_events_limit
        )
        return EthereumRecord(nft=nft, events=events)

    async def fetch_tezos(self, token_id: str, fa_contract: str) -> TezosRecord:
        """Fetch a token with its offers, then its most recent transfers."""
        token, offers = await self.tezos.get_token(token_id, fa_contract)
        if token is None:
            return TezosRecord(token=None, offers=offers)

        events = await self.tezos.get_transfers(
            fa_contract, token.pk, limit=self.objkt_events_limit, offset=0
        )
        return TezosRecord(token=token, events=events, offers=offers)

    async def _bounded(
        self,
        semaphore: asyncio.Semaphore,
        key: str,
        fetch: Callable[[], Awaitable[T]],
    ) -> T:
        """Run one lookup under the concurrency bound and time budget.

        Transient failures are retried ``retries`` times with a fixed delay.

        Raises:
            FetchTimeoutError: If the last attempt exceeded ``fetch_timeout``
            ServiceError: Any upstream error from the last attempt
        """
        attempts = self.retries + 1

        for attempt in range(1, attempts + 1):
            try:
                async with semaphore:
                    return await asyncio.wait_for(fetch(), timeout=self.fetch_timeout)
            except TimeoutError as e:
                if attempt == attempts:
                    raise FetchTimeoutError(
                        f"Fetching {key} took longer than {self.fetch_timeout}s",
                        source="aggregator",
                    ) from e
                logger.warning("aggregation.fetch_timeout_retry", key=key, attempt=attempt)
            except TransientError as e:
                if attempt == attempts:
                    raise
                logger.warning(
                    "aggregation.fetch_retry",
                    key=key,
                    attempt=attempt,
                    error=str(e),
                    error_type=type(e).__name__,
                    retry_in_seconds=self.retry_delay,
                )

            await asyncio.sleep(self.retry_delay)

        # Should never reach here due to raise in exception handlers
        raise AggregationError(f"Unexpected retry exit for {key}")

    async def aggregate(
        self,
        references: Iterable[ArtworkReference],
        arts: Iterable[ArtworkReference] = (),
        total_pages: int = 0,
    ) -> AggregationResult:
        """Fetch, reconcile and sort every referenced artwork.

        Args:
            references: CMS ``nft`` posts pointing at on-chain tokens
            arts: CMS ``art`` posts without chain data
            total_pages: Pagination count reported by the CMS

        Returns:
            AggregationResult with Ethereum, Tezos and plain artworks sorted by
            ``created_at`` descending (stable for equal dates)

        Raises:
            AggregationError: If any single fetch fails; remaining fetches are cancelled
        """
        plan = plan_aggregation(references)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        logger.info(
            "aggregation.started",
            ethereum_count=len(plan.ethereum),
            tezos_count=len(plan.tezos),
        )

        ethereum_tasks = {
            key: asyncio.create_task(
                self._bounded(semaphore, key, partial(self.fetch_ethereum, contract, token_id))
            )
            for key, (contract, token_id) in plan.ethereum.items()
        }
        tezos_tasks = {
            key: asyncio.create_task(
                self._bounded(semaphore, key, partial(self.fetch_tezos, token_id, fa2))
            )
            for key, (token_id, fa2) in plan.tezos.items()
        }
        all_tasks = [*ethereum_tasks.values(), *tezos_tasks.values()]

        try:
            ethereum_records, tezos_records = await asyncio.gather(
                asyncio.gather(*ethereum_tasks.values()),
                asyncio.gather(*tezos_tasks.values()),
            )
        except ServiceError as e:
            logger.error(
                "aggregation.failed",
                error=str(e),
                error_type=type(e).__name__,
                source=getattr(e, "source", None),
            )
            raise AggregationError(f"Artwork aggregation failed: {e}") from e
        finally:
            pending = [task for task in all_tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        ethereum_arts: list[NftArt] = []
        for key, record in zip(ethereum_tasks, ethereum_records):
            art = normalize_ethereum(record, plan.references.get(key))
            if art is None:
                logger.warning("aggregation.record_missing", chain="ethereum", key=key)
                continue
            ethereum_arts.append(art)

        tezos_arts: list[NftArt] = []
        for key, record in zip(tezos_tasks, tezos_records):
            art = normalize_tezos(record, plan.references.get(key), self.ipfs_gateway)
            if art is None:
                logger.warning("aggregation.record_missing", chain="tezos", key=key)
                continue
            tezos_arts.append(art)

        plain_arts = [normalize_plain_art(reference) for reference in arts]

        images = [*ethereum_arts, *tezos_arts, *plain_arts]
        # list.sort is stable, including with reverse=True
        images.sort(key=lambda art: sort_key(art.created_at), reverse=True)

        logger.info(
            "aggregation.completed",
            ethereum_count=len(ethereum_arts),
            tezos_count=len(tezos_arts),
            plain_count=len(plain_arts),
            total=len(images),
        )

        return AggregationResult(images=images, total_pages=total_pages)
