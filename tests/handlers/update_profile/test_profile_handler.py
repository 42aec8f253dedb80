from http import HTTPStatus

import pytest

from core.infrastructure.aws.dynamodb_records import DynamoDBRecords
from core.models.entity import EntityType
from handlers.update_profile.handler import handler


@pytest.fixture
def profiles(profiles_table, s3_buckets) -> DynamoDBRecords:
    records = DynamoDBRecords(EntityType.AVATAR)
    records.insert_record(item={"id": "john", "username": "john_doe"})
    records.insert_record(item={"id": "alice", "username": "alice"})
    return records


class TestProfileHandler:
    def test_update_profile_with_avatar(self, profiles, api_event, encode, body_of, sample_jpeg, s3_keys, lambda_context):
        event = api_event(
            "PATCH",
            body={
                "username": "johnny",
                "phone_number": "+1 555-0100",
                "allow_phone_contact": False,
                "avatar": encode(sample_jpeg),
            },
        )

        resp = handler(event, lambda_context)
        body = body_of(resp)

        assert resp["statusCode"] == HTTPStatus.OK
        assert body["username"] == "johnny"
        assert body["avatar_url"] == "john/main.jpg"
        assert "/avatars/john/main.jpg?t=" in body["main_image_display_url"]
        assert s3_keys("avatars") == ["john/main.jpg"]

    def test_username_taken_is_a_field_error(self, profiles, api_event, body_of, lambda_context):
        resp = handler(api_event("PATCH", body={"username": "alice"}), lambda_context)
        body = body_of(resp)

        assert resp["statusCode"] == HTTPStatus.CONFLICT
        assert body["error"] == "USERNAME_TAKEN"
        assert body["details"]["errors"][0]["field"] == "username"

    @pytest.mark.parametrize(
        "payload,field",
        [
            ({"username": "jo"}, "username"),
            ({"phone_number": "call me"}, "phone_number"),
        ],
    )
    def test_field_validation(self, profiles, api_event, body_of, lambda_context, payload, field):
        resp = handler(api_event("PATCH", body=payload), lambda_context)

        assert resp["statusCode"] == HTTPStatus.UNPROCESSABLE_ENTITY
        assert body_of(resp)["details"]["errors"][0]["field"] == field
