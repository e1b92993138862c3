"""Construction of the gallery service and its upstream clients."""

import httpx

from omentejovem.core.config import Settings
from omentejovem.services.aggregation.aggregator import ArtworkAggregator
from omentejovem.services.aggregation.gallery import GalleryService
from omentejovem.services.credentials import resolve_api_keys
from omentejovem.services.objkt.client import ObjktClient
from omentejovem.services.opensea.client import OpenSeaClient
from omentejovem.services.wordpress.client import WordPressClient


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Shared async HTTP client for every upstream.

    The transport timeout matches the per-fetch budget so a hung socket is
    reported as an upstream failure before the aggregator gives up on it.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.fetch_timeout_seconds),
        follow_redirects=True,
    )


async def build_gallery_service(
    settings: Settings, http_client: httpx.AsyncClient
) -> GalleryService:
    """Resolve API keys once and wire the clients, aggregator and gallery service.

    Args:
        settings: Application settings
        http_client: Shared async HTTP client (owned by the caller)

    Returns:
        Ready-to-use GalleryService
    """
    wordpress = WordPressClient(
        http_client,
        api_url=settings.wordpress_api_url,
        page_size=settings.cms_page_size,
    )
    api_keys = await resolve_api_keys(settings, wordpress)

    opensea = OpenSeaClient(
        http_client,
        api_key=api_keys.opensea,
        base_url=settings.opensea_base_url,
    )
    objkt = ObjktClient(http_client, endpoint=settings.objkt_graphql_url)

    aggregator = ArtworkAggregator.from_settings(settings, ethereum=opensea, tezos=objkt)
    return GalleryService(wordpress, aggregator, email=api_keys.email)
