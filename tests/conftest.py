"""pytest fixtures for omentejovem tests.

Provides:
- test_environment: Autouse fixture forcing APP_ENV=test
- settings: Settings instance that ignores any local .env file
- ethereum_source / tezos_source: In-memory stand-ins for the OpenSea and Objkt clients
- cms_post: Factory for raw WordPress post payloads
- fake_cms / wordpress: WordPressClient backed by an in-memory REST routing table
"""

import asyncio
import os
from typing import Any, AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from omentejovem.core.config import Settings
from omentejovem.models.chain import (
    ObjktEvent,
    ObjktToken,
    OpenSeaEvent,
    OpenSeaNft,
)
from omentejovem.services.wordpress.client import WordPressClient

CMS_API_URL = "https://cms.test/wp-json/wp/v2"


@pytest.fixture(scope="session", autouse=True)
def test_environment():
    """Run every test with APP_ENV=test so config validation is relaxed."""
    os.environ["APP_ENV"] = "test"
    os.environ["TZ"] = "UTC"
    yield


@pytest.fixture
def settings() -> Settings:
    return Settings(
        APP_ENV="test",
        WORDPRESS_BASE_URL="https://cms.test",
        OPENSEA_API_KEY="test-key",
        CONTACT_EMAIL="studio@example.com",
        _env_file=None,
    )  # type: ignore[call-arg]


class FakeEthereumSource:
    """OpenSea stand-in keyed by (lowercased contract, token_id)."""

    def __init__(self):
        self.nfts: dict[tuple[str, str], OpenSeaNft | None] = {}
        self.events: dict[tuple[str, str], list[OpenSeaEvent]] = {}
        self.errors: list[Exception] = []
        self.delay = 0.0
        self.metadata_calls: list[tuple[str, str]] = []
        self.event_calls: list[tuple[str, str, int]] = []
        self.call_log: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled = 0

    def add(
        self,
        contract: str,
        token_id: str,
        events: list[OpenSeaEvent] | None = None,
        **fields: Any,
    ) -> OpenSeaNft:
        nft = OpenSeaNft(identifier=token_id, contract=contract.lower(), **fields)
        self.nfts[(contract.lower(), token_id)] = nft
        self.events[(contract.lower(), token_id)] = events or []
        return nft

    async def get_nft_metadata(self, contract: str, token_id: str) -> OpenSeaNft | None:
        self.metadata_calls.append((contract, token_id))
        self.call_log.append(f"metadata:{token_id}")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.errors:
                raise self.errors.pop(0)
            return self.nfts.get((contract.lower(), token_id))
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.in_flight -= 1

    async def get_nft_transfer_events(
        self, contract: str, token_id: str, limit: int = 4
    ) -> list[OpenSeaEvent]:
        self.event_calls.append((contract, token_id, limit))
        self.call_log.append(f"events:{token_id}")
        return self.events.get((contract.lower(), token_id), [])


class FakeTezosSource:
    """Objkt stand-in keyed by (token_id, fa_contract)."""

    def __init__(self):
        self.tokens: dict[tuple[str, str], ObjktToken] = {}
        self.events: dict[int, list[ObjktEvent]] = {}
        self.errors: list[Exception] = []
        self.delay = 0.0
        self.token_calls: list[tuple[str, str]] = []
        self.transfer_calls: list[tuple[str, int, int, int]] = []
        self.cancelled = 0

    def add(
        self,
        token_id: str,
        fa_contract: str,
        pk: int,
        events: list[ObjktEvent] | None = None,
        **fields: Any,
    ) -> ObjktToken:
        token = ObjktToken(pk=pk, token_id=token_id, fa_contract=fa_contract, **fields)
        self.tokens[(token_id, fa_contract)] = token
        self.events[pk] = events or []
        return token

    async def get_token(
        self, token_id: str, fa_contract: str
    ) -> tuple[ObjktToken | None, list[dict[str, Any]]]:
        self.token_calls.append((token_id, fa_contract))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        if self.errors:
            raise self.errors.pop(0)
        return self.tokens.get((token_id, fa_contract)), []

    async def get_transfers(
        self,
        fa_contract: str,
        token_pk: int,
        limit: int = 2,
        offset: int = 0,
        order_by: list[dict[str, str]] | None = None,
    ) -> list[ObjktEvent]:
        self.transfer_calls.append((fa_contract, token_pk, limit, offset))
        return self.events.get(token_pk, [])


@pytest.fixture
def ethereum_source() -> FakeEthereumSource:
    return FakeEthereumSource()


@pytest.fixture
def tezos_source() -> FakeTezosSource:
    return FakeTezosSource()


@pytest.fixture
def cms_post():
    """Build a WordPress post as returned with ``_embed=wp:featuredmedia``."""

    def _build(
        post_id: int,
        title: str = "",
        thumbnail: str | None = None,
        **acf: Any,
    ) -> dict[str, Any]:
        post: dict[str, Any] = {
            "id": post_id,
            "title": {"rendered": title},
            "acf": acf or False,
        }
        if thumbnail:
            post["_embedded"] = {"wp:featuredmedia": [{"source_url": thumbnail}]}
        return post

    return _build


class FakeCms:
    """WordPress REST stand-in routed by the path below ``/wp/v2``."""

    def __init__(self):
        self.routes: dict[str, tuple[int, Any, dict[str, str]]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        path: str,
        payload: Any,
        status_code: int = 200,
        total_pages: int | None = None,
    ) -> None:
        headers = {"X-WP-TotalPages": str(total_pages)} if total_pages is not None else {}
        self.routes[path] = (status_code, payload, headers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.split("/wp/v2", 1)[-1]
        if path not in self.routes:
            return httpx.Response(404, json={"code": "rest_no_route"})
        status_code, payload, headers = self.routes[path]
        return httpx.Response(status_code, json=payload, headers=headers)

    def requested_paths(self) -> list[str]:
        return [request.url.path.split("/wp/v2", 1)[-1] for request in self.requests]


@pytest.fixture
def fake_cms() -> FakeCms:
    return FakeCms()


@pytest_asyncio.fixture
async def wordpress(fake_cms) -> AsyncGenerator[WordPressClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_cms.handler)) as http_client:
        yield WordPressClient(http_client, api_url=CMS_API_URL, page_size=8)
