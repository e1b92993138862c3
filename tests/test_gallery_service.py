"""Tests for GalleryService: CMS pages -> aggregated gallery."""

import httpx
import pytest

from omentejovem.services.aggregation.aggregator import ArtworkAggregator
from omentejovem.services.aggregation.gallery import (
    INTERNAL_ERROR_MESSAGE,
    GalleryService,
    section_tag,
)
from omentejovem.services.exceptions import (
    GalleryError,
    InvalidSectionError,
    UpstreamUnavailableError,
)
from omentejovem.services.objkt.client import ObjktClient


@pytest.fixture
def gallery(wordpress, ethereum_source, tezos_source) -> GalleryService:
    aggregator = ArtworkAggregator(ethereum_source, tezos_source, ipfs_gateway="gw.test")
    return GalleryService(wordpress, aggregator, email="studio@example.com")


@pytest.mark.parametrize(
    ("section", "tag"),
    [("portfolio", 4), ("oneOfOne", 5), ("1-1", 5), ("editions", 6)],
)
def test_section_tags(section, tag):
    assert section_tag(section) == tag


def test_unknown_section():
    with pytest.raises(InvalidSectionError):
        section_tag("drafts")


@pytest.mark.asyncio
class TestRequestGallery:
    async def test_merges_nfts_and_arts(
        self, gallery, fake_cms, cms_post, ethereum_source, tezos_source
    ):
        # Arrange
        fake_cms.add(
            "/nft",
            [
                cms_post(1, opensea="5/0xABC", description="Hand-painted"),
                cms_post(2, objkt={"id": "42", "token": "KT1XYZ"}),
            ],
            total_pages=2,
        )
        fake_cms.add(
            "/art",
            [cms_post(3, title="Drawing", creation_date="01/01/2019")],
            total_pages=1,
        )
        ethereum_source.add("0xABC", "5", created_at="2024-01-01T00:00:00")
        tezos_source.add("42", "KT1XYZ", pk=1, timestamp="2023-01-01T00:00:00+00:00")

        # Act
        response = await gallery.request_gallery("portfolio", page=1)

        # Assert
        assert response.email == "studio@example.com"
        assert response.total_pages == 2
        assert [art.nft_chain for art in response.images] == ["ethereum", "tezos", "unknown"]
        assert response.images[0].description == "Hand-painted"
        assert response.images[2].name == "Drawing"

    async def test_forwards_page_tag_and_filters(self, gallery, fake_cms):
        fake_cms.add("/nft", [], total_pages=0)
        fake_cms.add("/art", [], total_pages=0)

        await gallery.request_gallery("editions", page=3, filter_params="year=2022")

        assert sorted(fake_cms.requested_paths()) == ["/art", "/nft"]
        for request in fake_cms.requests:
            assert request.url.params["tags"] == "6"
            assert request.url.params["page"] == "3"
            assert request.url.params["year"] == "2022"

    async def test_only_arts_skips_nft_posts(self, gallery, fake_cms, cms_post):
        fake_cms.add("/art", [cms_post(3, title="Drawing")], total_pages=4)

        response = await gallery.request_gallery("oneOfOne", only_arts=True)

        assert fake_cms.requested_paths() == ["/art"]
        assert response.total_pages == 4
        assert [art.nft_chain for art in response.images] == ["unknown"]

    async def test_invalid_section(self, gallery, fake_cms):
        with pytest.raises(InvalidSectionError):
            await gallery.request_gallery("drafts")

        assert fake_cms.requests == []

    async def test_cms_failure_is_generic(self, gallery, fake_cms):
        fake_cms.add("/nft", {}, status_code=500)
        fake_cms.add("/art", [])

        with pytest.raises(GalleryError) as exc_info:
            await gallery.request_gallery("portfolio")

        assert str(exc_info.value) == INTERNAL_ERROR_MESSAGE

    async def test_chain_failure_is_generic(self, gallery, fake_cms, cms_post, ethereum_source):
        fake_cms.add("/nft", [cms_post(1, opensea="5/0xABC")])
        fake_cms.add("/art", [])
        ethereum_source.errors.append(UpstreamUnavailableError("down", source="opensea"))

        with pytest.raises(GalleryError, match="There was an internal error."):
            await gallery.request_gallery("portfolio")

    async def test_malformed_cms_post_is_generic(self, gallery, fake_cms, cms_post):
        fake_cms.add("/nft", [cms_post(1, opensea="not-a-ref")])
        fake_cms.add("/art", [])

        with pytest.raises(GalleryError):
            await gallery.request_gallery("portfolio")

    async def test_malformed_objkt_payload_is_generic(
        self, wordpress, ethereum_source, fake_cms, cms_post
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"data": {"token": {"pk": 1}, "collection_offers": []}}
            )

        fake_cms.add("/nft", [cms_post(1, objkt={"id": "42", "token": "KT1XYZ"})])
        fake_cms.add("/art", [])
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            objkt = ObjktClient(http_client, endpoint="https://objkt.test/v3/graphql")
            aggregator = ArtworkAggregator(ethereum_source, objkt, ipfs_gateway="gw.test")
            gallery = GalleryService(wordpress, aggregator, email="studio@example.com")

            with pytest.raises(GalleryError) as exc_info:
                await gallery.request_gallery("portfolio")

        assert str(exc_info.value) == INTERNAL_ERROR_MESSAGE


@pytest.mark.asyncio
class TestRequestCollection:
    async def test_aggregates_collection_nfts(
        self, gallery, fake_cms, cms_post, ethereum_source, tezos_source
    ):
        fake_cms.add(
            "/collections",
            [
                {
                    "acf": {
                        "one": {"slug": "genesis", "nfts": [1, 2]},
                        "two": {"slug": "other", "nfts": [9]},
                    }
                }
            ],
        )
        fake_cms.add("/nft/1", cms_post(1, opensea="5/0xABC"))
        fake_cms.add("/nft/2", cms_post(2, objkt={"id": "42", "token": "KT1XYZ"}))
        ethereum_source.add("0xABC", "5", created_at="2021-01-01T00:00:00")
        tezos_source.add("42", "KT1XYZ", pk=1, timestamp="2022-01-01T00:00:00+00:00")

        response = await gallery.request_collection("genesis")

        assert [art.nft_chain for art in response.images] == ["tezos", "ethereum"]
        assert "/nft/9" not in fake_cms.requested_paths()

    async def test_unknown_slug_is_empty(self, gallery, fake_cms):
        fake_cms.add("/collections", [{"acf": {"one": {"slug": "genesis", "nfts": [1]}}}])

        response = await gallery.request_collection("missing")

        assert response.images == []
        assert response.total_pages == 0

    async def test_failure_is_generic(self, gallery, fake_cms):
        fake_cms.add("/collections", [{"acf": {"one": {"slug": "genesis", "nfts": [1]}}}])

        with pytest.raises(GalleryError):
            await gallery.request_collection("genesis")
