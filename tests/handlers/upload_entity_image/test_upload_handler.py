from http import HTTPStatus

import pytest

from core.infrastructure.aws.dynamodb_records import DynamoDBRecords
from core.models.entity import EntityType
from handlers.upload_entity_image.handler import handler


@pytest.fixture
def listing(listings_table, listing_item, s3_buckets) -> DynamoDBRecords:
    records = DynamoDBRecords(EntityType.SALE)
    records.insert_record(item=listing_item)
    return records


class TestUploadHandler:
    def test_append_images(self, listing, api_event, encode, body_of, make_image, s3_keys, lambda_context):
        event = api_event(
            "POST",
            {"entity_type": "sale", "entity_id": "abc123"},
            body={"files": [encode(make_image()), encode(make_image(color="blue"))]},
        )

        resp = handler(event, lambda_context)
        body = body_of(resp)

        assert resp["statusCode"] == HTTPStatus.OK
        assert body["entity_id"] == "abc123"
        assert body["mode"] == "append-additional"
        assert len(body["additional_image_urls"]) == 2
        assert all("/product_images/abc123/" in url for url in body["additional_image_urls"])
        assert len(s3_keys("product_images", "abc123/")) == 2
        assert len(listing.fetch_record(entity_id="abc123")["additional_images"]) == 2

    def test_replace_main(self, listing, api_event, encode, body_of, sample_jpeg, s3_keys, lambda_context):
        event = api_event(
            "POST",
            {"entity_type": "sell", "entity_id": "abc123"},
            body={"files": [encode(sample_jpeg)], "mode": "replace-main"},
        )

        resp = handler(event, lambda_context)

        assert resp["statusCode"] == HTTPStatus.OK
        assert "/product_images/abc123/main.jpg?t=" in body_of(resp)["main_image_display_url"]
        assert s3_keys("product_images") == ["abc123/main.jpg"]

    def test_replace_main_with_two_files_is_rejected(self, listing, api_event, encode, body_of, sample_jpeg, lambda_context):
        event = api_event(
            "POST",
            {"entity_type": "sale", "entity_id": "abc123"},
            body={"files": [encode(sample_jpeg)] * 2, "mode": "replace-main"},
        )

        resp = handler(event, lambda_context)

        assert resp["statusCode"] == HTTPStatus.UNPROCESSABLE_ENTITY
        assert body_of(resp)["error"] == "VALIDATION_FAILED"

    def test_invalid_base64(self, listing, api_event, lambda_context):
        event = api_event(
            "POST", {"entity_type": "sale", "entity_id": "abc123"}, body={"files": ["%%%"]}
        )

        assert handler(event, lambda_context)["statusCode"] == HTTPStatus.UNPROCESSABLE_ENTITY

    def test_undecodable_image(self, listing, api_event, encode, body_of, lambda_context):
        event = api_event(
            "POST", {"entity_type": "sale", "entity_id": "abc123"}, body={"files": [encode(b"not an image")]}
        )

        resp = handler(event, lambda_context)

        assert resp["statusCode"] == HTTPStatus.UNPROCESSABLE_ENTITY
        assert body_of(resp)["error"] == "IMAGE_PROCESSING_FAILED"

    def test_non_owner(self, listing, api_event, encode, sample_jpeg, s3_keys, lambda_context):
        event = api_event(
            "POST",
            {"entity_type": "sale", "entity_id": "abc123"},
            body={"files": [encode(sample_jpeg)]},
            user="mallory",
        )

        assert handler(event, lambda_context)["statusCode"] == HTTPStatus.FORBIDDEN
        assert s3_keys("product_images") == []

    def test_unauthenticated(self, listing, api_event, encode, sample_jpeg, lambda_context):
        event = api_event(
            "POST",
            {"entity_type": "sale", "entity_id": "abc123"},
            body={"files": [encode(sample_jpeg)]},
            user=None,
        )

        assert handler(event, lambda_context)["statusCode"] == HTTPStatus.FORBIDDEN

    def test_network_unavailable(self, listing, api_event, encode, body_of, sample_jpeg, s3_keys, lambda_context, monkeypatch):
        monkeypatch.setattr(
            "core.infrastructure.network.probe.ConnectivityProbe.check", lambda self: False
        )
        event = api_event(
            "POST", {"entity_type": "sale", "entity_id": "abc123"}, body={"files": [encode(sample_jpeg)]}
        )

        resp = handler(event, lambda_context)

        assert resp["statusCode"] == HTTPStatus.SERVICE_UNAVAILABLE
        assert body_of(resp)["error"] == "NETWORK_UNAVAILABLE"
        assert s3_keys("product_images") == []
