"""
Lambda handler that creates a listing or buy-order.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.infrastructure.aws.dynamodb_records import DynamoDBRecords
from core.infrastructure.network.probe import ConnectivityProbe
from core.media.presenter import present_record
from core.models.pick import LocalPick
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import caller_id, entity_type_param, parse_json_body, validate_request
from core.utils.watchdog import SlowOperationWatchdog

from .models import REQUEST_MODELS
from .service import CreateService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


def _report_slow(operation: str) -> None:
    metrics.add_metric(name="SlowOperation", unit=MetricUnit.Count, value=1)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle POST /{entity_type}.

    Field validation runs before any network call. The reachability probe
    runs before the first write.
    """
    logger.info(
        "Received entity create request",
        extra={
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    user_id = caller_id(event)
    entity_type = entity_type_param(event)
    request = validate_request(REQUEST_MODELS[entity_type], parse_json_body(event))

    picks = [LocalPick.from_base64(encoded) for encoded in request.files]
    fields = request.model_dump(exclude={"files"})

    ConnectivityProbe().ensure_reachable()

    with SlowOperationWatchdog("create_entity", on_timeout=_report_slow):
        record = CreateService().create_entity(
            records=DynamoDBRecords(entity_type),
            entity_type=entity_type,
            caller_id=user_id,
            fields=fields,
            picks=picks,
        )

    metrics.add_metric(name="EntitiesCreated", unit=MetricUnit.Count, value=1)

    return ResponseBuilder.created(present_record(record, entity_type))
