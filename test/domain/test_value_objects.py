import pytest

from domain.value_objects import (
    AssetFamily,
    AssetKind,
    TypeMetadata,
    VideoDescriptor,
    VideoProvider,
    get_complete_video_url,
    select_thumbnail_url
)
from domain.exceptions import FormatException, UnsupportedFormatException, UnsupportedTypeException


class TestGetCompleteVideoUrl:

    def test_get_complete_video_url_with_youtube_should_return_watch_url(self):
        assert get_complete_video_url("youtube", "abc123") == "https://youtube.com/watch?v=abc123"

    def test_get_complete_video_url_with_vimeo_should_return_vimeo_url(self):
        assert get_complete_video_url("vimeo", "987") == "https://vimeo.com/987"

    def test_get_complete_video_url_with_unknown_format_should_raise_unsupported_format(self):
        with pytest.raises(UnsupportedFormatException) as exc_info:
            get_complete_video_url("dailymotion", "x")

        assert exc_info.value.video_format == "dailymotion"

    def test_video_descriptor_from_empty_dict_should_return_none(self):
        assert VideoDescriptor.from_dict({}) is None
        assert VideoDescriptor.from_dict(None) is None

    def test_video_descriptor_complete_url_should_use_format_and_link(self):
        descriptor = VideoDescriptor.from_dict({"format": "vimeo", "link": "555"})

        assert descriptor.complete_url() == "https://vimeo.com/555"


class TestSelectThumbnailUrl:

    def test_select_thumbnail_url_with_standard_and_high_should_prefer_standard(self):
        thumbnails = {
            "default": {"url": "https://img/default.jpg"},
            "high": {"url": "https://img/high.jpg"},
            "standard": {"url": "https://img/standard.jpg"}
        }

        assert select_thumbnail_url(thumbnails) == "https://img/standard.jpg"

    def test_select_thumbnail_url_with_only_default_should_return_default(self):
        assert select_thumbnail_url({"default": {"url": "https://img/default.jpg"}}) == "https://img/default.jpg"

    def test_select_thumbnail_url_with_high_and_default_should_prefer_high(self):
        thumbnails = {"default": {"url": "https://img/default.jpg"}, "high": {"url": "https://img/high.jpg"}}

        assert select_thumbnail_url(thumbnails) == "https://img/high.jpg"

    def test_select_thumbnail_url_without_thumbnails_should_return_none(self):
        assert select_thumbnail_url(None) is None
        assert select_thumbnail_url({"maxres": {"url": "https://img/maxres.jpg"}}) is None


class TestTypeMetadata:

    def test_encode_should_join_entity_type_and_tags_in_order(self):
        metadata = TypeMetadata("catalog_product", ("video_youtube", "thumbnail"))

        assert metadata.encode() == "catalog_product/video_youtube/thumbnail"

    def test_encode_with_different_tag_order_should_produce_different_token(self):
        first = TypeMetadata("catalog_product", ("a", "b")).encode()
        second = TypeMetadata("catalog_product", ("b", "a")).encode()

        assert first != second

    def test_decode_should_restore_entity_type_and_tags(self):
        metadata = TypeMetadata.decode("catalog_product/video_vimeo")

        assert metadata.entity_type == "catalog_product"
        assert metadata.asset_types == ("video_vimeo",)

    @pytest.mark.parametrize("token", ["", "catalog_product", "catalog_product/", "Catalog/video", "a//b"])
    def test_decode_with_malformed_token_should_raise_format_exception(self, token):
        with pytest.raises(FormatException):
            TypeMetadata.decode(token)

    def test_for_video_with_youtube_should_build_youtube_token(self):
        assert TypeMetadata.for_video("youtube").encode() == "catalog_product/video_youtube"

    def test_for_video_with_unknown_format_should_raise_unsupported_format(self):
        with pytest.raises(UnsupportedFormatException):
            TypeMetadata.for_video("dailymotion")

    def test_asset_kind_should_map_vimeo_tag_to_vimeo_kind(self):
        kind = TypeMetadata.decode("catalog_product/video_vimeo").asset_kind()

        assert kind is AssetKind.VIDEO_VIMEO
        assert kind.family is AssetFamily.VIDEO
        assert kind.provider is VideoProvider.VIMEO

    def test_asset_kind_with_unknown_tag_should_raise_unsupported_type(self):
        with pytest.raises(UnsupportedTypeException):
            TypeMetadata.decode("catalog_product/image_main").asset_kind()
