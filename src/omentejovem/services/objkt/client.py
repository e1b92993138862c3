"""Objkt GraphQL client for Tezos token data and transfer history."""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from omentejovem.models.chain import ObjktEvent, ObjktToken
from omentejovem.services.exceptions import UpstreamResponseError
from omentejovem.services.http import decode_json, send
from omentejovem.services.objkt.queries import (
    DEFAULT_TRANSFER_ORDER,
    TOKEN_QUERY,
    TRANSFERS_QUERY,
    transfers_filter,
)

logger = structlog.get_logger(__name__)

SOURCE = "objkt"


class ObjktClient:
    """Read-only client for the Objkt v3 GraphQL endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        endpoint: str = "https://data.objkt.com/v3/graphql",
    ):
        self.http_client = http_client
        self.endpoint = endpoint

    async def execute(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        Raises:
            TransientError: Network timeout, rate limit (429), service unavailable (5xx)
            UpstreamResponseError: GraphQL ``errors`` or missing ``data``
        """
        response = await send(
            self.http_client,
            "POST",
            self.endpoint,
            source=SOURCE,
            json={"query": query, "variables": variables},
            headers={"Content-Type": "application/json"},
        )
        payload = decode_json(response, SOURCE)

        if not isinstance(payload, dict):
            raise UpstreamResponseError("GraphQL response is not an object", source=SOURCE)
        if payload.get("errors"):
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in payload["errors"]
            )
            raise UpstreamResponseError(f"GraphQL errors: {messages}", source=SOURCE)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise UpstreamResponseError("GraphQL response has no data", source=SOURCE)
        return data

    async def get_token(
        self, token_id: str, fa_contract: str
    ) -> tuple[ObjktToken | None, list[dict[str, Any]]]:
        """Fetch a token and the active collection offers of its contract.

        Returns:
            (token or None when Objkt has no such token, active offers)
        """
        data = await self.execute(
            TOKEN_QUERY,
            {"tokenId": token_id, "fa2": fa_contract, "userAddress": ""},
        )

        tokens = data.get("token") or []
        offers = data.get("collection_offers") or []
        if not isinstance(tokens, list) or not isinstance(offers, list):
            raise UpstreamResponseError(
                f"Unexpected token response shape for {fa_contract}/{token_id}", source=SOURCE
            )

        if not tokens:
            logger.warning("objkt.token_missing", token_id=token_id, fa_contract=fa_contract)
            return None, offers

        try:
            return ObjktToken.model_validate(tokens[0]), offers
        except ValidationError as e:
            raise UpstreamResponseError(
                f"Unexpected token payload for {fa_contract}/{token_id}: {e.error_count()} error(s)",
                source=SOURCE,
            ) from e

    async def get_transfers(
        self,
        fa_contract: str,
        token_pk: int,
        limit: int = 2,
        offset: int = 0,
        order_by: list[dict[str, str]] | None = None,
    ) -> list[ObjktEvent]:
        """Fetch transfer events for a token, newest first by default."""
        data = await self.execute(
            TRANSFERS_QUERY,
            {
                "where": transfers_filter(fa_contract, token_pk),
                "order_by": order_by or DEFAULT_TRANSFER_ORDER,
                "limit": limit,
                "offset": offset,
            },
        )

        events = data.get("event") or []
        if not isinstance(events, list):
            raise UpstreamResponseError(
                f"Unexpected event response shape for token pk {token_pk}", source=SOURCE
            )
        try:
            return [ObjktEvent.from_payload(event) for event in events]
        except (ValidationError, AttributeError) as e:
            raise UpstreamResponseError(
                f"Unexpected event payload for token pk {token_pk}: {e}", source=SOURCE
            ) from e
