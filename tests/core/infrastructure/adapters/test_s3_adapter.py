import pytest
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter


class TestS3Adapter:
    def test_put_sets_content_type_and_cache_control(self, s3_buckets):
        adapter = S3Adapter()

        adapter.put_object(
            bucket="product_images",
            key="abc123/main.jpg",
            body=b"image-bytes",
            content_type="image/jpeg",
        )

        obj = s3_buckets.get_object(Bucket="product_images", Key="abc123/main.jpg")
        assert obj["Body"].read() == b"image-bytes"
        assert obj["ContentType"] == "image/jpeg"
        assert obj["CacheControl"] == "max-age=3600"

    def test_put_overwrites(self, s3_buckets):
        adapter = S3Adapter()

        for body in (b"first", b"second"):
            adapter.put_object(bucket="avatars", key="u1/main.jpg", body=body, content_type="image/jpeg")

        obj = s3_buckets.get_object(Bucket="avatars", Key="u1/main.jpg")
        assert obj["Body"].read() == b"second"

    def test_head_missing_key_raises_client_error(self, s3_buckets):
        adapter = S3Adapter()

        with pytest.raises(ClientError) as exc:
            adapter.head_object(bucket="product_images", key="missing.jpg")

        assert exc.value.response["Error"]["Code"] in {"404", "NoSuchKey", "NotFound"}

    def test_delete_object(self, s3_put_object, s3_keys):
        s3_put_object("product_images", "abc123/main.jpg")

        S3Adapter().delete_object(bucket="product_images", key="abc123/main.jpg")

        assert s3_keys("product_images") == []

    def test_iter_keys_is_scoped_to_prefix(self, s3_put_object):
        s3_put_object("product_images", "abc123/main.jpg")
        s3_put_object("product_images", "abc123/1_0.jpg")
        s3_put_object("product_images", "abc1234/main.jpg")

        keys = sorted(S3Adapter().iter_keys(bucket="product_images", prefix="abc123/"))

        assert keys == ["abc123/1_0.jpg", "abc123/main.jpg"]

    def test_put_object_bubbles_client_error(self, monkeypatch, s3_buckets):
        adapter = S3Adapter()

        def raise_error(**_):
            raise ClientError({"Error": {"Code": "InternalError"}}, "PutObject")

        monkeypatch.setattr(adapter._client, "put_object", raise_error)

        with pytest.raises(ClientError):
            adapter.put_object(bucket="avatars", key="x.jpg", body=b"d", content_type="image/jpeg")
