"""WordPress REST client for artwork references, collections and API keys."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from omentejovem.services.exceptions import UpstreamResponseError
from omentejovem.services.http import decode_json, send

logger = structlog.get_logger(__name__)

SOURCE = "wordpress"

ArtworkKind = Literal["nft", "art"]

EMBED_FIELDS = "_links.wp:featuredmedia,_embedded,acf,title,id"


@dataclass
class CmsPage:
    """One page of CMS posts plus the total page count from ``X-WP-TotalPages``."""

    items: list[dict[str, Any]] = field(default_factory=list)
    total_pages: int = 0


class CmsCollection(BaseModel):
    """Curated collection of NFT posts."""

    model_config = ConfigDict(extra="ignore")

    slug: str
    title: str = ""
    year: int | None = None
    background_url: list[str] = Field(default_factory=list)
    nfts: list[int] = Field(default_factory=list)


class ApiKeys(BaseModel):
    """Third-party credentials stored as ``api-keys`` posts in the CMS."""

    model_config = ConfigDict(frozen=True)

    opensea: str = ""
    email: str = ""


class WordPressClient:
    """Read-only client for the WordPress REST API."""

    def __init__(self, http_client: httpx.AsyncClient, api_url: str, page_size: int = 8):
        """Initialize WordPress client.

        Args:
            http_client: Shared async HTTP client
            api_url: REST namespace root, e.g. ``https://cms.example/wp-json/wp/v2``
            page_size: Posts per page for artwork listings
        """
        self.http_client = http_client
        self.api_url = api_url.rstrip("/")
        self.page_size = page_size

    async def _get(self, path: str, params: Any = None) -> httpx.Response:
        return await send(
            self.http_client,
            "GET",
            f"{self.api_url}{path}",
            source=SOURCE,
            params=params,
        )

    async def fetch_artworks(
        self,
        kind: ArtworkKind,
        tag: int,
        page: int = 1,
        filters: str = "",
    ) -> CmsPage:
        """Fetch one page of ``nft`` or ``art`` posts for a gallery tag.

        Args:
            kind: Post type, ``nft`` (on-chain references) or ``art`` (plain artworks)
            tag: WordPress tag id of the gallery section
            page: 1-based page number
            filters: Extra raw query string appended to the default parameters

        Returns:
            CmsPage with the raw posts and the total page count
        """
        params = httpx.QueryParams(
            {
                "tags": str(tag),
                "_embed": "wp:featuredmedia",
                "_fields": EMBED_FIELDS,
                "acf_format": "standard",
                "per_page": str(self.page_size),
                "orderBy": "date",
                "page": str(page),
            }
        )
        if filters:
            params = params.merge(httpx.QueryParams(filters.lstrip("&?")))

        response = await self._get(f"/{kind}", params=params)
        payload = decode_json(response, SOURCE)
        if not isinstance(payload, list):
            raise UpstreamResponseError(f"Expected a list of {kind} posts", source=SOURCE)

        total_pages = response.headers.get("X-WP-TotalPages", "0")
        try:
            total = int(total_pages)
        except ValueError:
            total = 0

        logger.debug("wordpress.page_fetched", kind=kind, tag=tag, page=page, count=len(payload))
        return CmsPage(items=payload, total_pages=total)

    async def fetch_artwork_by_id(self, post_id: int) -> dict[str, Any]:
        """Fetch a single ``nft`` post with its featured media."""
        response = await self._get(
            f"/nft/{post_id}",
            params={"_embed": "wp:featuredmedia", "_fields": EMBED_FIELDS, "acf_format": "standard"},
        )
        payload = decode_json(response, SOURCE)
        if not isinstance(payload, dict):
            raise UpstreamResponseError(f"Expected nft post {post_id} object", source=SOURCE)
        return payload

    async def fetch_collections(self) -> list[CmsCollection]:
        """Fetch the collections page and return every configured collection."""
        response = await self._get("/collections", params={"_fields": "acf"})
        payload = decode_json(response, SOURCE)

        if not isinstance(payload, list) or not payload:
            return []

        acf = payload[0].get("acf") if isinstance(payload[0], Mapping) else None
        if not isinstance(acf, Mapping):
            return []

        try:
            return [CmsCollection.model_validate(value) for value in acf.values()]
        except ValidationError as e:
            raise UpstreamResponseError(
                f"Unexpected collections payload: {e.error_count()} error(s)", source=SOURCE
            ) from e

    async def fetch_api_keys(self) -> ApiKeys:
        """Fetch third-party credentials (``title.rendered`` -> ``acf.key``)."""
        response = await self._get("/api-keys", params={"_fields": "title,acf"})
        payload = decode_json(response, SOURCE)

        keys: dict[str, str] = {}
        for entry in payload if isinstance(payload, list) else []:
            if not isinstance(entry, Mapping):
                continue
            title = (entry.get("title") or {}).get("rendered", "")
            value = (entry.get("acf") or {}).get("key", "")
            if title and value:
                keys[title.strip().lower()] = value

        return ApiKeys(opensea=keys.get("opensea", ""), email=keys.get("email", ""))
