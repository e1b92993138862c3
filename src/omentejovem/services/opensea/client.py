"""OpenSea v2 client for Ethereum NFT metadata and transfer history."""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from omentejovem.models.chain import OpenSeaEvent, OpenSeaNft
from omentejovem.services.exceptions import UpstreamResponseError
from omentejovem.services.http import decode_json, send

logger = structlog.get_logger(__name__)

SOURCE = "opensea"


class OpenSeaClient:
    """Read-only OpenSea API client."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://api.opensea.io/api/v2",
        chain: str = "ethereum",
    ):
        """Initialize OpenSea client.

        Args:
            http_client: Shared async HTTP client
            api_key: OpenSea API key (sent as ``x-api-key``)
            base_url: API root
            chain: OpenSea chain slug
        """
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.chain = chain
        self.headers = {"x-api-key": api_key, "accept": "application/json"}

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await send(
            self.http_client,
            "GET",
            f"{self.base_url}{path}",
            source=SOURCE,
            headers=self.headers,
            params=params,
        )
        return decode_json(response, SOURCE)

    async def get_nft_metadata(self, contract: str, token_id: str) -> OpenSeaNft | None:
        """Fetch metadata and holders for one NFT.

        Args:
            contract: Contract address
            token_id: Token identifier

        Returns:
            OpenSeaNft, or None when the payload has no ``nft`` object

        Raises:
            TransientError: Network timeout, rate limit (429), service unavailable (5xx)
            PermanentError: Invalid API key (401/403), unexpected status or payload
        """
        payload = await self._get(f"/chain/{self.chain}/contract/{contract}/nfts/{token_id}")

        nft = payload.get("nft") if isinstance(payload, dict) else None
        if not nft:
            logger.warning("opensea.nft_missing", contract=contract, token_id=token_id)
            return None

        try:
            return OpenSeaNft.model_validate(nft)
        except ValidationError as e:
            raise UpstreamResponseError(
                f"Unexpected NFT payload for {contract}/{token_id}: {e.error_count()} error(s)",
                source=SOURCE,
            ) from e

    async def get_nft_transfer_events(
        self, contract: str, token_id: str, limit: int = 4
    ) -> list[OpenSeaEvent]:
        """Fetch the most recent transfer events for one NFT.

        Args:
            contract: Contract address
            token_id: Token identifier
            limit: Maximum number of events (most recent first)

        Returns:
            Transfer events, possibly empty
        """
        payload = await self._get(
            f"/events/chain/{self.chain}/contract/{contract}/nfts/{token_id}",
            params={"event_type": "transfer", "limit": limit},
        )

        events = payload.get("asset_events") if isinstance(payload, dict) else None
        if not isinstance(events, list):
            raise UpstreamResponseError(
                f"Missing asset_events for {contract}/{token_id}", source=SOURCE
            )

        try:
            return [OpenSeaEvent.model_validate(event) for event in events]
        except ValidationError as e:
            raise UpstreamResponseError(
                f"Unexpected event payload for {contract}/{token_id}: {e.error_count()} error(s)",
                source=SOURCE,
            ) from e
