"""
Lambda handler that returns listings or buy-orders with displayable image URLs.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.infrastructure.aws.dynamodb_records import DynamoDBRecords
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import caller_id, entity_type_param, validate_request

from .models import ListOwnedRequest
from .service import GetService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle GET /{entity_type}/{entity_id} and GET /{entity_type}.

    With an entity id, return that record. Without one, return the
    caller's own records, newest first, up to `limit`.
    """
    logger.info(
        "Received entity read request",
        extra={
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    entity_type = entity_type_param(event)
    entity_id = (event.get("pathParameters") or {}).get("entity_id")
    records = DynamoDBRecords(entity_type)
    service = GetService()

    if entity_id:
        record = service.get_entity(
            records=records,
            entity_id=entity_id,
            entity_type=entity_type,
        )
        return ResponseBuilder.ok(record)

    user_id = caller_id(event)
    query = event.get("queryStringParameters") or {}
    params = {"limit": query["limit"]} if query.get("limit") else {}
    request = validate_request(ListOwnedRequest, params)

    items = service.list_owned(
        records=records,
        entity_type=entity_type,
        owner_id=user_id,
        limit=request.limit,
    )
    return ResponseBuilder.ok({"items": items, "count": len(items)})
