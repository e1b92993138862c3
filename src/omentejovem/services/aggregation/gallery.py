"""Gallery service: load CMS pages for a section or collection and aggregate them.

Callers only ever see one generic message when anything upstream fails; the
specific cause is logged here.
"""

import asyncio
from dataclasses import dataclass, field

import structlog

from omentejovem.models.artwork import NftArt
from omentejovem.models.reference import ArtworkReference, parse_artwork_reference
from omentejovem.services.aggregation.aggregator import AggregationResult, ArtworkAggregator
from omentejovem.services.exceptions import GalleryError, InvalidSectionError, ServiceError
from omentejovem.services.wordpress.client import CmsPage, WordPressClient

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "There was an internal error."

# Gallery section -> WordPress tag id
SECTION_TAGS: dict[str, int] = {
    "portfolio": 4,
    "oneOfOne": 5,
    "1-1": 5,
    "editions": 6,
}


@dataclass
class GalleryResponse:
    """Aggregated gallery ready for rendering."""

    email: str
    images: list[NftArt] = field(default_factory=list)
    total_pages: int = 0


def section_tag(section: str) -> int:
    """Resolve a gallery section name to its CMS tag.

    Raises:
        InvalidSectionError: If the section is unknown
    """
    try:
        return SECTION_TAGS[section]
    except KeyError:
        raise InvalidSectionError(f"Invalid gallery section: {section}") from None


class GalleryService:
    """Builds gallery pages from the CMS and the aggregator."""

    def __init__(self, wordpress: WordPressClient, aggregator: ArtworkAggregator, email: str = ""):
        self.wordpress = wordpress
        self.aggregator = aggregator
        self.email = email

    async def _load_section(
        self, tag: int, page: int, filter_params: str, only_arts: bool
    ) -> tuple[CmsPage, CmsPage]:
        if only_arts:
            arts = await self.wordpress.fetch_artworks("art", tag, page, filter_params)
            return CmsPage(), arts

        nfts, arts = await asyncio.gather(
            self.wordpress.fetch_artworks("nft", tag, page, filter_params),
            self.wordpress.fetch_artworks("art", tag, page, filter_params),
        )
        return nfts, arts

    async def request_gallery(
        self,
        section: str,
        page: int = 1,
        filter_params: str = "",
        only_arts: bool = False,
    ) -> GalleryResponse:
        """Aggregate one page of a gallery section.

        Args:
            section: ``portfolio``, ``oneOfOne`` / ``1-1`` or ``editions``
            page: 1-based CMS page
            filter_params: Raw query string forwarded to the CMS
            only_arts: Skip on-chain artworks and return plain CMS arts only

        Returns:
            GalleryResponse with images sorted newest first

        Raises:
            InvalidSectionError: If the section is unknown
            GalleryError: If loading or aggregating failed for any reason
        """
        tag = section_tag(section)

        log = logger.bind(section=section, page=page, only_arts=only_arts)
        log.info("gallery.requested")

        try:
            nfts, arts = await self._load_section(tag, page, filter_params, only_arts)
            references = [parse_artwork_reference(item) for item in nfts.items]
            art_references = [parse_artwork_reference(item) for item in arts.items]

            result = await self.aggregator.aggregate(
                references,
                art_references,
                total_pages=nfts.total_pages or arts.total_pages,
            )
        except ServiceError as e:
            log.error("gallery.failed", error=str(e), error_type=type(e).__name__)
            raise GalleryError(INTERNAL_ERROR_MESSAGE) from e

        return self._response(result)

    async def request_collection(self, slug: str) -> GalleryResponse:
        """Aggregate every NFT of a curated collection.

        Unknown slugs produce an empty gallery.

        Raises:
            GalleryError: If loading or aggregating failed for any reason
        """
        log = logger.bind(collection=slug)
        log.info("gallery.collection_requested")

        try:
            collections = await self.wordpress.fetch_collections()
            post_ids = [
                post_id
                for collection in collections
                if collection.slug == slug
                for post_id in collection.nfts
            ]
            posts = await asyncio.gather(
                *(self.wordpress.fetch_artwork_by_id(post_id) for post_id in post_ids)
            )
            references: list[ArtworkReference] = [parse_artwork_reference(post) for post in posts]

            result = await self.aggregator.aggregate(references)
        except ServiceError as e:
            log.error("gallery.collection_failed", error=str(e), error_type=type(e).__name__)
            raise GalleryError(INTERNAL_ERROR_MESSAGE) from e

        return self._response(result)

    def _response(self, result: AggregationResult) -> GalleryResponse:
        return GalleryResponse(
            email=self.email,
            images=result.images,
            total_pages=result.total_pages,
        )
