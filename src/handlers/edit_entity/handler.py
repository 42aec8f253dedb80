"""
Lambda handler that edits a listing or buy-order.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.infrastructure.aws.dynamodb_records import DynamoDBRecords
from core.infrastructure.network.probe import ConnectivityProbe
from core.media.presenter import present_record
from core.models.entity import EntityType
from core.models.errors import ValidationError
from core.models.pick import LocalPick
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import (
    caller_id,
    entity_type_param,
    parse_json_body,
    path_param,
    validate_request,
)
from core.utils.watchdog import SlowOperationWatchdog

from .models import EditEntityRequest
from .service import EditService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


def _report_slow(operation: str) -> None:
    metrics.add_metric(name="SlowOperation", unit=MetricUnit.Count, value=1)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle PATCH /{entity_type}/{entity_id}."""
    logger.info(
        "Received entity edit request",
        extra={
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    user_id = caller_id(event)
    entity_type = entity_type_param(event)
    entity_id = path_param(event, "entity_id")
    request = validate_request(EditEntityRequest, parse_json_body(event))

    fields = request.field_changes()
    if "price" in fields and entity_type is not EntityType.SALE:
        raise ValidationError(
            message="Only sale listings have a price",
            details={"field": "price"},
        )

    main_pick = LocalPick.from_base64(request.main_file) if request.main_file else None
    additional_picks = [LocalPick.from_base64(encoded) for encoded in request.files]

    ConnectivityProbe().ensure_reachable()

    with SlowOperationWatchdog("edit_entity", on_timeout=_report_slow):
        record = EditService().edit_entity(
            records=DynamoDBRecords(entity_type),
            entity_id=entity_id,
            entity_type=entity_type,
            caller_id=user_id,
            fields=fields,
            main_pick=main_pick,
            additional_picks=additional_picks,
            remove_additional=request.remove_additional,
        )

    return ResponseBuilder.ok(present_record(record, entity_type))
