"""Tests for CMS artwork reference parsing."""

import pytest

from omentejovem.models.reference import parse_artwork_reference, parse_opensea_ref
from omentejovem.services.exceptions import ReferenceParseError


class TestParseOpenSeaRef:
    """Test splitting OpenSea references into (contract, token_id)."""

    def test_full_asset_url(self):
        ref = "https://opensea.io/assets/ethereum/0x495f947276749ce646f68ac8c248420045cb7b5e/12"

        assert parse_opensea_ref(ref) == ("0x495f947276749ce646f68ac8c248420045cb7b5e", "12")

    def test_short_form_token_first(self):
        """``{token_id}/{contract}`` resolves to (contract, token_id)."""
        assert parse_opensea_ref("5/0xABC") == ("0xABC", "5")

    def test_query_string_stripped_from_token_id(self):
        ref = "https://opensea.io/assets/ethereum/0xabc/7?tab=details"

        assert parse_opensea_ref(ref) == ("0xabc", "7")

    @pytest.mark.parametrize(
        "ref",
        [
            "https://opensea.io/assets/ethereum/0xabc/7?ref=a/b",
            "https://opensea.io/assets/ethereum/0xabc/7#x/y",
            "https://opensea.io/assets/ethereum/0xabc/7/?utm=a/b/c",
        ],
    )
    def test_query_with_slashes_does_not_shift_segments(self, ref):
        assert parse_opensea_ref(ref) == ("0xabc", "7")

    def test_short_form_with_query_on_token_id(self):
        assert parse_opensea_ref("5?x=1/0xABC") == ("0xABC", "5")

    def test_trailing_slash_ignored(self):
        assert parse_opensea_ref("https://opensea.io/assets/ethereum/0xabc/7/") == ("0xabc", "7")

    @pytest.mark.parametrize("ref", ["", "0xabc", "/", "https:"])
    def test_too_few_segments_rejected(self, ref):
        with pytest.raises(ValueError):
            parse_opensea_ref(ref)


class TestParseArtworkReference:
    """Test the WordPress post -> ArtworkReference boundary."""

    def test_reads_title_thumbnail_and_id(self, cms_post):
        post = cms_post(
            17,
            title="Sunrise",
            thumbnail="https://cms.test/uploads/sunrise.jpg",
            opensea="https://opensea.io/assets/ethereum/0xabc/7",
            description="Oil on canvas",
            creation_date="15/01/2023",
        )

        reference = parse_artwork_reference(post)

        assert reference.wp_id == 17
        assert reference.title == "Sunrise"
        assert reference.thumbnail_url == "https://cms.test/uploads/sunrise.jpg"
        assert reference.description == "Oil on canvas"
        assert reference.creation_date == "15/01/2023"
        assert reference.opensea_identity == ("0xabc", "7")
        assert reference.objkt_identity is None

    def test_acf_false_values_become_none(self, cms_post):
        post = cms_post(
            3,
            opensea=False,
            objkt=False,
            available_purchase=False,
            make_offer=False,
            video_process="",
            description=False,
        )

        reference = parse_artwork_reference(post)

        assert reference.opensea_ref is None
        assert reference.objkt_ref is None
        assert reference.available_purchase is None
        assert reference.make_offer is None
        assert reference.video_process is None
        assert reference.description == ""

    def test_post_without_acf(self, cms_post):
        reference = parse_artwork_reference(cms_post(4, title="Sketch"))

        assert reference.title == "Sketch"
        assert reference.opensea_identity is None
        assert reference.objkt_identity is None

    def test_objkt_reference(self, cms_post):
        reference = parse_artwork_reference(cms_post(5, objkt={"id": 42, "token": "KT1XYZ"}))

        assert reference.objkt_identity == ("42", "KT1XYZ")

    def test_incomplete_objkt_reference_has_no_identity(self, cms_post):
        reference = parse_artwork_reference(cms_post(6, objkt={"id": "42", "token": ""}))

        assert reference.objkt_identity is None

    def test_contracts_group_wrapped_in_list(self, cms_post):
        reference = parse_artwork_reference(
            cms_post(7, contracts={"eth": {"manifold": True}})
        )

        assert reference.contracts == [{"eth": {"manifold": True}}]

    def test_available_purchase_parsed(self, cms_post):
        reference = parse_artwork_reference(
            cms_post(8, available_purchase={"active": True, "status": True, "url": "https://x"})
        )

        assert reference.available_purchase is not None
        assert reference.available_purchase.active is True
        assert reference.available_purchase.url == "https://x"

    def test_non_object_rejected(self):
        with pytest.raises(ReferenceParseError):
            parse_artwork_reference(["not", "a", "post"])

    def test_non_object_acf_rejected(self):
        with pytest.raises(ReferenceParseError):
            parse_artwork_reference({"id": 1, "acf": "broken"})

    def test_malformed_opensea_ref_rejected(self, cms_post):
        with pytest.raises(ReferenceParseError):
            parse_artwork_reference(cms_post(9, opensea="0xabc"))

    def test_non_text_description_rejected(self, cms_post):
        with pytest.raises(ReferenceParseError):
            parse_artwork_reference(cms_post(10, description={"rendered": "x"}))
