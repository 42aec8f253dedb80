"""
Lambda handler responsible for deleting an entity and its images.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.infrastructure.aws.dynamodb_records import DynamoDBRecords
from core.infrastructure.network.probe import ConnectivityProbe
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import caller_id, entity_type_param, path_param
from core.utils.watchdog import SlowOperationWatchdog

from .models import DeleteEntityResponse
from .service import DeleteService

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
    Handle DELETE /{entity_type}/{entity_id}.

    The record is deleted even when some of its images cannot be removed;
    those keys are reported back in `failed_keys`.
    """
    logger.info(
        "Received entity delete request",
        extra={
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    user_id = caller_id(event)
    entity_type = entity_type_param(event)
    entity_id = path_param(event, "entity_id")

    ConnectivityProbe().ensure_reachable()

    with SlowOperationWatchdog("delete_entity", on_timeout=_report_slow):
        result = DeleteService().delete_entity(
            records=DynamoDBRecords(entity_type),
            entity_id=entity_id,
            entity_type=entity_type,
            caller_id=user_id,
        )

    metrics.add_metric(
        name="ImagesRemoved", unit=MetricUnit.Count, value=len(result["removed_keys"])
    )
    if result["failed_keys"]:
        metrics.add_metric(
            name="ImageRemovalFailures", unit=MetricUnit.Count, value=len(result["failed_keys"])
        )

    response = DeleteEntityResponse(
        entity_id=result["entity_id"],
        message="Entity deleted successfully",
        deleted_at=result["deleted_at"],
        removed_keys=result["removed_keys"],
        failed_keys=result["failed_keys"],
    )

    return ResponseBuilder.ok(response.model_dump())
