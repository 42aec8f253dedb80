"""
Lambda handler that updates the caller's profile and avatar.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.infrastructure.aws.dynamodb_records import DynamoDBRecords
from core.infrastructure.network.probe import ConnectivityProbe
from core.media.presenter import present_record
from core.models.entity import EntityType
from core.models.pick import LocalPick
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import caller_id, parse_json_body, validate_request
from core.utils.watchdog import SlowOperationWatchdog

from .models import UpdateProfileRequest
from .service import ProfileService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


def _report_slow(operation: str) -> None:
    metrics.add_metric(name="SlowOperation", unit=MetricUnit.Count, value=1)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle PATCH /profile."""
    logger.info(
        "Received profile update request",
        extra={
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    user_id = caller_id(event)
    request = validate_request(UpdateProfileRequest, parse_json_body(event))
    avatar = LocalPick.from_base64(request.avatar) if request.avatar else None

    ConnectivityProbe().ensure_reachable()

    with SlowOperationWatchdog("update_profile", on_timeout=_report_slow):
        profile = ProfileService().update_profile(
            records=DynamoDBRecords(EntityType.AVATAR),
            caller_id=user_id,
            fields=request.field_changes(),
            avatar=avatar,
        )

    if avatar is not None:
        metrics.add_metric(name="AvatarsUploaded", unit=MetricUnit.Count, value=1)

    return ResponseBuilder.ok(present_record(profile, EntityType.AVATAR))
