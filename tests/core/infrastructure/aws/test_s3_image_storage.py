from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import (
    DuplicateObjectError,
    ImageDeletionFailedError,
    ImageUploadFailedError,
    StorageError,
)


def client_error(code: str, operation: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestS3ImageStorage:
    def test_upload_returns_key(self, s3_buckets, s3_keys):
        storage = S3ImageStorage()

        key = storage.upload_object(bucket="product_images", key="abc123/main.jpg", data=b"img")

        assert key == "abc123/main.jpg"
        assert s3_keys("product_images") == ["abc123/main.jpg"]

    def test_upsert_overwrites_same_key(self, s3_buckets, s3_keys):
        storage = S3ImageStorage()

        storage.upload_object(bucket="avatars", key="u1/main.jpg", data=b"one")
        storage.upload_object(bucket="avatars", key="u1/main.jpg", data=b"two")

        assert s3_keys("avatars") == ["u1/main.jpg"]
        body = s3_buckets.get_object(Bucket="avatars", Key="u1/main.jpg")["Body"].read()
        assert body == b"two"

    def test_non_upsert_rejects_existing_key(self, s3_put_object):
        s3_put_object("product_images", "abc123/main.jpg")
        storage = S3ImageStorage()

        with pytest.raises(DuplicateObjectError):
            storage.upload_object(
                bucket="product_images", key="abc123/main.jpg", data=b"x", upsert=False
            )

    def test_non_upsert_new_key(self, s3_buckets):
        storage = S3ImageStorage()

        assert storage.upload_object(
            bucket="product_images", key="abc123/1_0.jpg", data=b"x", upsert=False
        ) == "abc123/1_0.jpg"

    def test_upload_to_missing_bucket_fails(self, s3_buckets):
        storage = S3ImageStorage()

        with pytest.raises(ImageUploadFailedError) as exc:
            storage.upload_object(bucket="no-such-bucket", key="k.jpg", data=b"x")

        assert exc.value.details == {"bucket": "no-such-bucket", "key": "k.jpg"}

    def test_upload_unexpected_error_is_translated(self):
        adapter = MagicMock()
        adapter.put_object.side_effect = RuntimeError("socket closed")

        with pytest.raises(ImageUploadFailedError):
            S3ImageStorage(adapter=adapter).upload_object(bucket="b", key="k", data=b"x")

    def test_remove_and_exists(self, s3_put_object):
        s3_put_object("buy-orders-images", "o1/main.jpg")
        storage = S3ImageStorage()

        assert storage.object_exists(bucket="buy-orders-images", key="o1/main.jpg") is True
        storage.remove_object(bucket="buy-orders-images", key="o1/main.jpg")
        assert storage.object_exists(bucket="buy-orders-images", key="o1/main.jpg") is False

    def test_remove_failure(self):
        adapter = MagicMock()
        adapter.delete_object.side_effect = client_error("AccessDenied", "DeleteObject")

        with pytest.raises(ImageDeletionFailedError):
            S3ImageStorage(adapter=adapter).remove_object(bucket="b", key="k")

    def test_object_exists_other_error(self):
        adapter = MagicMock()
        adapter.head_object.side_effect = client_error("403", "HeadObject")

        with pytest.raises(StorageError):
            S3ImageStorage(adapter=adapter).object_exists(bucket="b", key="k")

    def test_list_keys(self, s3_put_object):
        s3_put_object("product_images", "abc123/main.jpg")
        s3_put_object("product_images", "abc123/5_0.jpg")
        s3_put_object("product_images", "zzz/main.jpg")

        keys = S3ImageStorage().list_keys(bucket="product_images", prefix="abc123/")

        assert sorted(keys) == ["abc123/5_0.jpg", "abc123/main.jpg"]

    def test_list_keys_failure(self):
        adapter = MagicMock()
        adapter.iter_keys.side_effect = client_error("InternalError", "ListObjectsV2")

        with pytest.raises(StorageError) as exc:
            S3ImageStorage(adapter=adapter).list_keys(bucket="b", prefix="p/")

        assert exc.value.error_code == "STORAGE_LIST_FAILED"

    def test_remove_prefix(self, s3_put_object, s3_keys):
        s3_put_object("product_images", "abc123/main.jpg")
        s3_put_object("product_images", "abc123/5_0.jpg")
        s3_put_object("product_images", "other/main.jpg")

        removed = S3ImageStorage().remove_prefix(bucket="product_images", prefix="abc123/")

        assert sorted(removed) == ["abc123/5_0.jpg", "abc123/main.jpg"]
        assert s3_keys("product_images") == ["other/main.jpg"]

    def test_remove_prefix_skips_objects_that_cannot_be_removed(self, s3_put_object, s3_keys):
        s3_put_object("product_images", "abc123/main.jpg")
        s3_put_object("product_images", "abc123/5_0.jpg")
        storage = S3ImageStorage()
        real_remove = storage.remove_object

        def flaky_remove(**kwargs):
            if kwargs["key"] == "abc123/main.jpg":
                raise ImageDeletionFailedError(message="denied", details=kwargs)
            return real_remove(**kwargs)

        with patch.object(storage, "remove_object", side_effect=flaky_remove):
            removed = storage.remove_prefix(bucket="product_images", prefix="abc123/")

        assert removed == ["abc123/5_0.jpg"]
        assert s3_keys("product_images") == ["abc123/main.jpg"]
