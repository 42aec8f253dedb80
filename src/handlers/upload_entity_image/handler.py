"""
Lambda handler that uploads images to an entity and records their keys.
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
from core.utils.validators import (
    caller_id,
    entity_type_param,
    parse_json_body,
    path_param,
    validate_request,
)
from core.utils.watchdog import SlowOperationWatchdog

from .models import UploadImagesRequest, UploadImagesResponse
from .service import UploadService

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
    Handle POST /{entity_type}/{entity_id}/images.

    Body: {"files": [<base64>...], "mode": "replace-main" | "append-additional"}
    """
    logger.info(
        "Received image upload request",
        extra={
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    user_id = caller_id(event)
    entity_type = entity_type_param(event)
    entity_id = path_param(event, "entity_id")
    request = validate_request(UploadImagesRequest, parse_json_body(event))

    picks = [LocalPick.from_base64(encoded) for encoded in request.files]

    ConnectivityProbe().ensure_reachable()

    with SlowOperationWatchdog("upload_entity_image", on_timeout=_report_slow):
        record = UploadService().associate(
            records=DynamoDBRecords(entity_type),
            entity_id=entity_id,
            entity_type=entity_type,
            caller_id=user_id,
            picks=picks,
            mode=request.mode,
        )

    metrics.add_metric(name="ImagesUploaded", unit=MetricUnit.Count, value=len(picks))

    presented = present_record(record, entity_type)
    response = UploadImagesResponse(
        entity_id=entity_id,
        mode=request.mode,
        main_image_display_url=presented["main_image_display_url"],
        additional_image_urls=presented["additional_image_urls"],
        message="Images uploaded successfully",
    )

    return ResponseBuilder.ok(response.model_dump(mode="json"))
