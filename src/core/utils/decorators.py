"""
Common decorators and helpers for API Gateway Lambda handlers.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import MediaServiceError
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors

logger = Logger(service="api-gateway-handler", UTC=True)

JsonDict = dict[str, Any]


def _log_error(
    message: str,
    *,
    handler_name: str,
    request_id: str | None,
    exc: Exception,
    level: str = "warning",
) -> None:
    """
    Log error with consistent structure and full context.

    Args:
        message: Log message
        handler_name: Name of the handler function
        request_id: AWS request ID
        exc: Exception that was raised
        level: Log level ('warning' or 'exception')
    """
    log_extra: dict[str, Any] = {
        "handler": handler_name,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }

    if isinstance(exc, MediaServiceError):
        log_extra["error_code"] = exc.error_code
        log_extra["details"] = exc.details

    if level == "exception":
        logger.exception(message, extra=log_extra)
    else:
        log_extra["traceback"] = traceback.format_exc()
        logger.warning(message, extra=log_extra)


def api_gateway_handler(
    func: Callable[..., JsonDict],
) -> Callable[..., JsonDict]:
    """
    Decorator for API Gateway Lambda handlers.

    Provides:
    - Automatic CORS preflight (OPTIONS) handling
    - Translation of domain errors into HTTP responses
    - Per-field details for request validation failures
    - One generic message for anything unexpected

    Example:
        @api_gateway_handler
        def handler(event, context):
            return ResponseBuilder.ok({"status": "ok"})
    """

    @wraps(func)
    def wrapper(
        event: Any,
        context: Any,
        *,
        cors_origin: str | None = None,
    ) -> JsonDict:
        if event.get("httpMethod") == "OPTIONS":
            return {
                "statusCode": HTTPStatus.NO_CONTENT.value,
                "headers": ResponseBuilder._build_headers(cors_origin),
                "body": "",
            }

        request_id = getattr(context, "aws_request_id", None)

        try:
            return func(event, context)

        except PydanticValidationError as exc:
            _log_error(
                "Request validation failed",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.validation_error(
                message="Invalid request payload",
                details={"errors": sanitize_validation_errors(list(exc.errors()))},
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except MediaServiceError as exc:
            _log_error(
                "Operation failed",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="warning" if exc.error_code.startswith(("VALIDATION", "NOT_FOUND")) else "exception",
            )
            return ResponseBuilder.from_error(
                exc,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except PermissionError as exc:
            _log_error(
                "Permission denied in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.forbidden(
                "You don't have permission to perform this action.",
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except Exception as exc:
            _log_error(
                "Unexpected error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.internal_error(
                request_id=request_id,
                cors_origin=cors_origin,
            )

    return wrapper
