import pytest
from unittest.mock import Mock

from use_cases.queue.strategy_dispatcher import AssetStrategyDispatcher
from domain.value_objects import AssetFamily
from domain.exceptions import FormatException, UnsupportedTypeException


class TestAssetStrategyDispatcher:

    @pytest.fixture
    def video_strategy(self):
        return Mock()

    @pytest.fixture
    def dispatcher(self, video_strategy):
        dispatcher = AssetStrategyDispatcher()
        dispatcher.register(AssetFamily.VIDEO, video_strategy)
        return dispatcher

    def test_resolve_with_youtube_token_should_return_video_strategy(self, dispatcher, video_strategy):
        assert dispatcher.resolve("catalog_product/video_youtube") is video_strategy

    def test_resolve_with_vimeo_token_should_return_video_strategy(self, dispatcher, video_strategy):
        assert dispatcher.resolve("catalog_product/video_vimeo") is video_strategy

    def test_resolve_with_unknown_asset_kind_should_raise_unsupported_type(self, dispatcher):
        with pytest.raises(UnsupportedTypeException) as exc_info:
            dispatcher.resolve("catalog_product/video_dailymotion")

        assert exc_info.value.type_metadata == "catalog_product/video_dailymotion"

    def test_resolve_without_registered_family_should_raise_unsupported_type(self):
        dispatcher = AssetStrategyDispatcher()

        with pytest.raises(UnsupportedTypeException):
            dispatcher.resolve("catalog_product/video_youtube")

    def test_resolve_with_malformed_token_should_raise_format_exception(self, dispatcher):
        with pytest.raises(FormatException):
            dispatcher.resolve("video youtube")
