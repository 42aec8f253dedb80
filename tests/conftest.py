"""
Pytest configuration and fixtures for marketplace media tests.
Provides AWS mocking, DynamoDB and S3 fixtures and in-memory test images.
"""

import io
import os
from collections.abc import Callable
from typing import Any

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("LISTINGS_TABLE_NAME", "test-listings")
os.environ.setdefault("BUY_ORDERS_TABLE_NAME", "test-buy-orders")
os.environ.setdefault("PROFILES_TABLE_NAME", "test-profiles")
os.environ.setdefault("STORAGE_PUBLIC_BASE_URL", "https://media.example.com")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "MarketplaceMediaTests")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "marketplace-media")
os.environ.pop("AWS_ENDPOINT_URL", None)
os.environ.pop("CONNECTIVITY_PROBE_URL", None)

import boto3  # noqa: E402
import pytest  # noqa: E402
from moto import mock_aws  # noqa: E402
from PIL import Image  # noqa: E402

BUCKET_NAMES = ("product_images", "buy-orders-images", "avatars")


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def s3_buckets(s3_client):
    """Create the listing, buy-order and avatar buckets."""
    for bucket_name in BUCKET_NAMES:
        s3_client.create_bucket(Bucket=bucket_name)

    return s3_client


@pytest.fixture
def s3_put_object(s3_buckets) -> Callable[..., None]:
    """
    Helper to upload an object directly, bypassing the service.

    Usage:
        s3_put_object("product_images", "abc123/main.jpg", b"data")
    """

    def _put(bucket: str, key: str, body: bytes = b"data", content_type: str = "image/jpeg") -> None:
        s3_buckets.put_object(Bucket=bucket, Key=key, Body=body, ContentType=content_type)

    return _put


@pytest.fixture
def s3_keys(s3_buckets) -> Callable[..., list[str]]:
    """
    Helper to list the keys stored in a bucket.

    Usage:
        keys = s3_keys("product_images", "abc123/")
    """

    def _keys(bucket: str, prefix: str = "") -> list[str]:
        response: dict[str, Any] = s3_buckets.list_objects_v2(Bucket=bucket, Prefix=prefix)
        return sorted(obj["Key"] for obj in response.get("Contents", []))

    return _keys


@pytest.fixture(scope="function")
def dynamodb_resource(aws_mock):
    return boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION"))


def _create_entity_table(dynamodb_resource, table_name: str, owner_field: str):
    """Helper to create an entity table with its owner GSI."""
    attributes = [
        {"AttributeName": "id", "AttributeType": "S"},
        {"AttributeName": "created_at", "AttributeType": "S"},
    ]
    if owner_field != "id":
        attributes.append({"AttributeName": owner_field, "AttributeType": "S"})

    return dynamodb_resource.create_table(
        TableName=table_name,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
        AttributeDefinitions=attributes,
        GlobalSecondaryIndexes=[
            {
                "IndexName": "owner-created-index",
                "KeySchema": [
                    {"AttributeName": owner_field, "KeyType": "HASH"},
                    {"AttributeName": "created_at", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
    )


def _create_profiles_table(dynamodb_resource, table_name: str):
    return dynamodb_resource.create_table(
        TableName=table_name,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "id", "AttributeType": "S"},
            {"AttributeName": "username", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "username-index",
                "KeySchema": [{"AttributeName": "username", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
    )


@pytest.fixture(scope="function")
def listings_table(dynamodb_resource):
    table = _create_entity_table(dynamodb_resource, os.environ["LISTINGS_TABLE_NAME"], "seller_id")
    table.wait_until_exists()
    return table


@pytest.fixture(scope="function")
def buy_orders_table(dynamodb_resource):
    table = _create_entity_table(dynamodb_resource, os.environ["BUY_ORDERS_TABLE_NAME"], "user_id")
    table.wait_until_exists()
    return table


@pytest.fixture(scope="function")
def profiles_table(dynamodb_resource):
    table = _create_profiles_table(dynamodb_resource, os.environ["PROFILES_TABLE_NAME"])
    table.wait_until_exists()
    return table


@pytest.fixture
def listing_item() -> dict[str, Any]:
    """A stored sale listing owned by seller 'john'."""
    return {
        "id": "abc123",
        "seller_id": "john",
        "name": "Desk lamp",
        "description": "Barely used",
        "dorm": "North Hall",
        "status": "active",
        "is_deleted": False,
        "is_visible": True,
        "created_at": "2024-01-01T10:00:00+00:00",
    }


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """
    Factory for in-memory images.

    Usage:
        data = make_image(2400, 1600, "PNG")
    """

    def _make(width: int = 64, height: int = 48, fmt: str = "JPEG", color: str = "red") -> bytes:
        mode = "RGBA" if fmt == "PNG" else "RGB"
        buffer = io.BytesIO()
        Image.new(mode, (width, height), color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def sample_jpeg(make_image) -> bytes:
    return make_image(64, 48, "JPEG")


@pytest.fixture
def sample_gif() -> bytes:
    """Two-frame animated GIF."""
    frames = [Image.new("P", (16, 16), color) for color in (1, 2)]
    buffer = io.BytesIO()
    frames[0].save(buffer, format="GIF", save_all=True, append_images=frames[1:], loop=0)
    return buffer.getvalue()
