"""Tests for the OpenSea client and upstream error classification."""

import httpx
import pytest
import pytest_asyncio

from omentejovem.services.exceptions import (
    RateLimitError,
    TransientError,
    UpstreamAuthError,
    UpstreamResponseError,
    UpstreamUnavailableError,
)
from omentejovem.services.opensea.client import OpenSeaClient

BASE_URL = "https://opensea.test/api/v2"


@pytest.fixture
def requests() -> list[httpx.Request]:
    return []


@pytest_asyncio.fixture
async def make_client(requests):
    """Build an OpenSeaClient whose transport answers with ``handler``."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler) -> OpenSeaClient:
        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(record))
        clients.append(http_client)
        return OpenSeaClient(http_client, api_key="secret", base_url=BASE_URL)

    yield _make

    for http_client in clients:
        await http_client.aclose()


@pytest.mark.asyncio
class TestGetNftMetadata:
    async def test_returns_nft(self, make_client, requests):
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "nft": {
                        "identifier": 7,
                        "contract": "0xabc",
                        "name": "Piece",
                        "owners": [{"address": "0x1", "quantity": 1}],
                    }
                },
            )
        )

        nft = await client.get_nft_metadata("0xabc", "7")

        assert nft is not None
        assert nft.identifier == "7"
        assert nft.owners[0].address == "0x1"
        assert requests[0].url.path == "/api/v2/chain/ethereum/contract/0xabc/nfts/7"
        assert requests[0].headers["x-api-key"] == "secret"

    async def test_missing_nft_returns_none(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"nft": None}))

        assert await client.get_nft_metadata("0xabc", "7") is None

    async def test_unexpected_nft_shape(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={"nft": {"name": "x"}}))

        with pytest.raises(UpstreamResponseError):
            await client.get_nft_metadata("0xabc", "7")


@pytest.mark.asyncio
class TestGetTransferEvents:
    async def test_sends_transfer_filter_and_limit(self, make_client, requests):
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "asset_events": [
                        {
                            "event_type": "transfer",
                            "from_address": "0x" + "0" * 40,
                            "to_address": "0x1",
                            "event_timestamp": 1700000000,
                            "transaction": "0xhash",
                        }
                    ]
                },
            )
        )

        events = await client.get_nft_transfer_events("0xabc", "7", limit=4)

        assert len(events) == 1
        assert events[0].event_timestamp == 1700000000
        assert requests[0].url.path == "/api/v2/events/chain/ethereum/contract/0xabc/nfts/7"
        assert requests[0].url.params["event_type"] == "transfer"
        assert requests[0].url.params["limit"] == "4"

    async def test_missing_asset_events(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(UpstreamResponseError):
            await client.get_nft_transfer_events("0xabc", "7")


@pytest.mark.asyncio
class TestErrorClassification:
    """Status codes and transport failures map onto the service error hierarchy."""

    @pytest.mark.parametrize(
        ("status_code", "error_type"),
        [
            (429, RateLimitError),
            (500, UpstreamUnavailableError),
            (503, UpstreamUnavailableError),
            (401, UpstreamAuthError),
            (403, UpstreamAuthError),
            (404, UpstreamResponseError),
        ],
    )
    async def test_status_codes(self, make_client, status_code, error_type):
        client = make_client(lambda request: httpx.Response(status_code, text="nope"))

        with pytest.raises(error_type) as exc_info:
            await client.get_nft_metadata("0xabc", "7")

        assert exc_info.value.source == "opensea"

    async def test_rate_limit_is_transient(self, make_client):
        client = make_client(lambda request: httpx.Response(429))

        with pytest.raises(TransientError):
            await client.get_nft_metadata("0xabc", "7")

    async def test_network_error(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(UpstreamUnavailableError):
            await client.get_nft_metadata("0xabc", "7")

    async def test_timeout(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        client = make_client(handler)

        with pytest.raises(UpstreamUnavailableError):
            await client.get_nft_transfer_events("0xabc", "7")

    async def test_malformed_json(self, make_client):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(UpstreamResponseError):
            await client.get_nft_metadata("0xabc", "7")
