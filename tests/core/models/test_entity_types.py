import pytest

from core.models.entity import EntityType, UploadMode, main_image_field


class TestEntityType:
    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("sale", EntityType.SALE),
            (" Listing ", EntityType.SALE),
            ("buy-order", EntityType.WANT_TO_BUY),
            ("profile", EntityType.AVATAR),
            (EntityType.AVATAR, EntityType.AVATAR),
        ],
    )
    def test_parse(self, tag, expected) -> None:
        assert EntityType.parse(tag) is expected

    @pytest.mark.parametrize("tag", [None, "", "rental"])
    def test_parse_unknown(self, tag) -> None:
        assert EntityType.parse(tag) is None

    def test_main_image_fields(self) -> None:
        assert main_image_field(EntityType.SALE) == "main_image_url"
        assert main_image_field(EntityType.WANT_TO_BUY) == "main_image_url"
        assert main_image_field(EntityType.AVATAR) == "avatar_url"


def test_upload_mode_values() -> None:
    assert UploadMode("replace-main") is UploadMode.REPLACE_MAIN
    assert UploadMode("append-additional") is UploadMode.APPEND_ADDITIONAL
