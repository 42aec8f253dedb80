from unittest.mock import patch

import pytest

from core.infrastructure.aws.dynamodb_records import DynamoDBRecords
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.entity import EntityType
from core.models.errors import (
    ForbiddenError,
    ImageDeletionFailedError,
    NotFoundError,
    StorageError,
)
from handlers.delete_entity.service import DeleteService

PUBLIC = "https://host/storage/v1/object/public/product_images"


@pytest.fixture
def stored_listing(listings_table, listing_item, s3_put_object) -> DynamoDBRecords:
    for key in ("abc123/main.jpg", "abc123/1_0.jpg", "abc123/1_1.jpg", "zzz/main.jpg"):
        s3_put_object("product_images", key)

    records = DynamoDBRecords(EntityType.SALE)
    records.insert_record(
        item={
            **listing_item,
            "main_image_url": f"{PUBLIC}/abc123/main.jpg?t=99",
            "additional_images": ["abc123/1_0.jpg", "abc123/1_1.jpg"],
        }
    )
    return records


class TestReferencedKeys:
    def test_main_and_additional_deduplicated(self) -> None:
        record = {
            "main_image_url": f"{PUBLIC}/abc123/main.jpg",
            "additional_images": ["abc123/1_0.jpg", "abc123/main.jpg", "https://elsewhere/x.jpg"],
        }

        assert DeleteService.referenced_keys(record, EntityType.SALE) == [
            "abc123/main.jpg",
            "abc123/1_0.jpg",
        ]

    def test_no_references(self) -> None:
        assert DeleteService.referenced_keys({}, EntityType.WANT_TO_BUY) == []


class TestDeleteService:
    def test_removes_every_object_then_the_row(self, stored_listing, s3_keys) -> None:
        result = DeleteService(storage=S3ImageStorage()).delete_entity(
            records=stored_listing, entity_id="abc123", entity_type=EntityType.SALE, caller_id="john"
        )

        assert result["entity_id"] == "abc123"
        assert sorted(result["removed_keys"]) == ["abc123/1_0.jpg", "abc123/1_1.jpg", "abc123/main.jpg"]
        assert result["failed_keys"] == []
        assert "deleted_at" in result
        assert s3_keys("product_images") == ["zzz/main.jpg"]
        assert stored_listing.fetch_record(entity_id="abc123") is None

    def test_unrecorded_objects_under_prefix_are_removed(self, stored_listing, s3_put_object, s3_keys) -> None:
        s3_put_object("product_images", "abc123/1700000000000_5.jpg")

        result = DeleteService(storage=S3ImageStorage()).delete_entity(
            records=stored_listing, entity_id="abc123", entity_type=EntityType.SALE, caller_id="john"
        )

        assert "abc123/1700000000000_5.jpg" in result["removed_keys"]
        assert s3_keys("product_images", "abc123/") == []

    def test_partial_storage_failure_still_deletes_row(self, stored_listing, s3_keys) -> None:
        storage = S3ImageStorage()
        real_remove = storage.remove_object

        def flaky_remove(**kwargs):
            if kwargs["key"] == "abc123/1_0.jpg":
                raise ImageDeletionFailedError(message="denied", details=kwargs)
            return real_remove(**kwargs)

        with patch.object(storage, "remove_object", side_effect=flaky_remove):
            result = DeleteService(storage=storage).delete_entity(
                records=stored_listing, entity_id="abc123", entity_type=EntityType.SALE, caller_id="john"
            )

        assert result["failed_keys"] == ["abc123/1_0.jpg"]
        assert s3_keys("product_images", "abc123/") == ["abc123/1_0.jpg"]
        assert stored_listing.fetch_record(entity_id="abc123") is None

    def test_listing_failure_is_not_fatal(self, stored_listing) -> None:
        storage = S3ImageStorage()

        with patch.object(storage, "list_keys", side_effect=StorageError(message="list down")):
            result = DeleteService(storage=storage).delete_entity(
                records=stored_listing, entity_id="abc123", entity_type=EntityType.SALE, caller_id="john"
            )

        assert len(result["removed_keys"]) == 3
        assert stored_listing.fetch_record(entity_id="abc123") is None

    def test_non_owner_removes_nothing(self, stored_listing, s3_keys) -> None:
        with pytest.raises(ForbiddenError):
            DeleteService(storage=S3ImageStorage()).delete_entity(
                records=stored_listing, entity_id="abc123", entity_type=EntityType.SALE, caller_id="mallory"
            )

        assert len(s3_keys("product_images", "abc123/")) == 3
        assert stored_listing.fetch_record(entity_id="abc123") is not None

    def test_missing_entity(self, listings_table, s3_buckets) -> None:
        with pytest.raises(NotFoundError):
            DeleteService(storage=S3ImageStorage()).delete_entity(
                records=DynamoDBRecords(EntityType.SALE),
                entity_id="nope",
                entity_type=EntityType.SALE,
                caller_id="john",
            )

    def test_referenced_key_retried_by_prefix_sweep(self, stored_listing, s3_keys) -> None:
        storage = S3ImageStorage()
        real_remove = storage.remove_object
        attempts: list[str] = []

        def fails_once(**kwargs):
            attempts.append(kwargs["key"])
            if kwargs["key"] == "abc123/1_0.jpg" and attempts.count("abc123/1_0.jpg") == 1:
                raise ImageDeletionFailedError(message="throttled", details=kwargs)
            return real_remove(**kwargs)

        with patch.object(storage, "remove_object", side_effect=fails_once):
            result = DeleteService(storage=storage).delete_entity(
                records=stored_listing, entity_id="abc123", entity_type=EntityType.SALE, caller_id="john"
            )

        assert result["failed_keys"] == []
        assert "abc123/1_0.jpg" in result["removed_keys"]
        assert s3_keys("product_images", "abc123/") == []
