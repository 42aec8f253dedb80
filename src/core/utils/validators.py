"""Request parsing and validation utilities."""

import json
from typing import Any, TypeVar

from pydantic import BaseModel

from core.models.entity import EntityType
from core.models.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Sanitize Pydantic validation errors for API responses.

    Keeps one entry per field and drops internal keys such as
    url, ctx and input.
    """
    sanitized: list[dict[str, str]] = []

    for err in errors:
        field = ".".join(str(x) for x in err.get("loc", [])) or "body"
        raw_msg = err.get("msg", "Invalid value")

        msg = raw_msg.replace("Value error,", "").strip()

        msg_lower = msg.lower()
        if "base64" in msg_lower:
            msg = "File must be a valid Base64-encoded string"
        elif "field required" in msg_lower:
            msg = "This field is required"

        sanitized.append(
            {
                "field": field,
                "message": msg,
            }
        )

    return sanitized


def validate_request(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate request data against a Pydantic model.

    Raises:
        pydantic.ValidationError: Left to the handler, which turns it into
            per-field error details
    """
    return model(**data)


def parse_json_body(event: dict[str, Any]) -> dict[str, Any]:
    """Decode the JSON body of an API Gateway proxy event."""
    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError as exc:
        raise ValidationError(message="Invalid JSON body") from exc

    if not isinstance(body, dict):
        raise ValidationError(message="Request body must be a JSON object")

    return body


def caller_id(event: dict[str, Any]) -> str:
    """Authenticated user id from the API Gateway authorizer claims.

    Raises:
        PermissionError: If the request carries no authenticated identity
    """
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    claims = authorizer.get("claims") or {}
    user_id = claims.get("sub") or authorizer.get("principalId")

    if not user_id or not isinstance(user_id, str):
        raise PermissionError("Missing authenticated caller")

    return user_id


def entity_type_param(event: dict[str, Any]) -> EntityType:
    """Entity type from the path; only listing and buy-order routes exist."""
    raw = (event.get("pathParameters") or {}).get("entity_type")
    parsed = EntityType.parse(raw)

    if parsed is None or parsed is EntityType.AVATAR:
        raise ValidationError(
            message="Unknown entity type",
            details={"entity_type": raw},
        )

    return parsed


def path_param(event: dict[str, Any], name: str) -> str:
    value = (event.get("pathParameters") or {}).get(name)

    if not value or not isinstance(value, str) or not value.strip():
        raise ValidationError(
            message=f"Missing path parameter '{name}'",
            details={"parameter": name},
        )

    return value.strip()
